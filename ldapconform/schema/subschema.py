"""
The schema of a directory server, as published in its subschema entry.
"""

import os

from twisted.python import log
from twisted.python.util import InsensitiveDict

from ldapconform import entry
from ldapconform._encoder import to_unicode, to_unicode_lenient
from ldapconform.protocols.ldap import ldaperrors, ldifprotocol
from ldapconform.schema.attributes import (
    AttributeSyntaxDefinition, AttributeTypeDefinition, stripSyntaxLength)
from ldapconform.schema.matching import (
    MatchingRuleDefinition, MatchingRuleUseDefinition)
from ldapconform.schema.objectclasses import (
    ObjectClassDefinition, ABSTRACT, AUXILIARY, STRUCTURAL)
from ldapconform.schema.rules import (
    DITContentRuleDefinition, DITStructureRuleDefinition, NameFormDefinition)


ATTR_ATTRIBUTE_SYNTAX = 'ldapSyntaxes'
ATTR_ATTRIBUTE_TYPE = 'attributeTypes'
ATTR_DIT_CONTENT_RULE = 'dITContentRules'
ATTR_DIT_STRUCTURE_RULE = 'dITStructureRules'
ATTR_MATCHING_RULE = 'matchingRules'
ATTR_MATCHING_RULE_USE = 'matchingRuleUse'
ATTR_NAME_FORM = 'nameForms'
ATTR_OBJECT_CLASS = 'objectClasses'
ATTR_SUBSCHEMA_SUBENTRY = 'subschemaSubentry'

SCHEMA_ATTRIBUTES = (
    (ATTR_ATTRIBUTE_SYNTAX, AttributeSyntaxDefinition),
    (ATTR_ATTRIBUTE_TYPE, AttributeTypeDefinition),
    (ATTR_DIT_CONTENT_RULE, DITContentRuleDefinition),
    (ATTR_DIT_STRUCTURE_RULE, DITStructureRuleDefinition),
    (ATTR_MATCHING_RULE, MatchingRuleDefinition),
    (ATTR_MATCHING_RULE_USE, MatchingRuleUseDefinition),
    (ATTR_NAME_FORM, NameFormDefinition),
    (ATTR_OBJECT_CLASS, ObjectClassDefinition),
)

DEFAULT_SCHEMA_DN = 'cn=schema'
DEFAULT_SCHEMA_OBJECT_CLASSES = ('top', 'ldapSubEntry', 'subschema')

STANDARD_SCHEMA_FILE = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), 'standard-schema.ldif')


def _lookup(index, name):
    if name is None:
        raise ldaperrors.LDAPParamError("Schema lookup needs a name or OID")
    return index.get(to_unicode(name))


def _addToIndex(index, keys, definition):
    for key in keys:
        if key not in index:
            index[key] = definition


class Schema:
    """
    Parsed, indexed view of a subschema entry.

    Every definition value is parsed on its own; a value that cannot be
    parsed is logged and left out, the rest of the schema still loads.
    Values are read in sorted order and when several share an OID (a
    rule ID for DIT structure rules) only the first one is kept.
    All lookups accept any name or the OID of an element and ignore
    case. A Schema is never modified once built.

    @raise SchemaCycleError: if attribute type or object class
    superiors form a loop.
    """

    def __init__(self, schemaEntry):
        """
        @param schemaEntry: the subschema entry, providing the
        definition strings through its C{get} method.
        @type schemaEntry: L{ILDAPEntry}
        """
        self._schemaEntry = schemaEntry

        self._attributeSyntaxes = self._parseAll(
            ATTR_ATTRIBUTE_SYNTAX, AttributeSyntaxDefinition)
        self._attributeSyntaxIndex = InsensitiveDict()
        for syntax in self._attributeSyntaxes:
            self._attributeSyntaxIndex[syntax.oid] = syntax

        self._matchingRules = self._parseAll(
            ATTR_MATCHING_RULE, MatchingRuleDefinition)
        self._matchingRuleIndex = InsensitiveDict()
        for rule in self._matchingRules:
            _addToIndex(self._matchingRuleIndex, rule.getNamesAndOID(), rule)

        self._matchingRuleUses = self._parseAll(
            ATTR_MATCHING_RULE_USE, MatchingRuleUseDefinition)
        self._matchingRuleUseIndex = InsensitiveDict()
        for use in self._matchingRuleUses:
            _addToIndex(self._matchingRuleUseIndex, use.getNamesAndOID(), use)

        self._attributeTypes = self._parseAll(
            ATTR_ATTRIBUTE_TYPE, AttributeTypeDefinition)
        self._attributeTypeIndex = InsensitiveDict()
        self._operationalAttributeTypes = []
        self._userAttributeTypes = []
        for attributeType in self._attributeTypes:
            _addToIndex(self._attributeTypeIndex,
                        attributeType.getNamesAndOID(), attributeType)
            if attributeType.isOperational():
                self._operationalAttributeTypes.append(attributeType)
            else:
                self._userAttributeTypes.append(attributeType)

        self._objectClasses = self._parseAll(
            ATTR_OBJECT_CLASS, ObjectClassDefinition)
        self._objectClassIndex = InsensitiveDict()
        for oc in self._objectClasses:
            _addToIndex(self._objectClassIndex, oc.getNamesAndOID(), oc)

        self._nameForms = self._parseAll(ATTR_NAME_FORM, NameFormDefinition)
        self._nameFormIndex = InsensitiveDict()
        self._nameFormByObjectClass = InsensitiveDict()
        for nameForm in self._nameForms:
            _addToIndex(self._nameFormIndex,
                        nameForm.getNamesAndOID(), nameForm)
            if nameForm.oc not in self._nameFormByObjectClass:
                self._nameFormByObjectClass[nameForm.oc] = nameForm
        for nameForm in self._nameForms:
            oc = self._objectClassIndex.get(nameForm.oc)
            if oc is not None:
                for key in oc.getNamesAndOID():
                    if key not in self._nameFormByObjectClass:
                        self._nameFormByObjectClass[key] = nameForm

        self._ditContentRules = self._parseAll(
            ATTR_DIT_CONTENT_RULE, DITContentRuleDefinition)
        self._ditContentRuleIndex = InsensitiveDict()
        for rule in self._ditContentRules:
            _addToIndex(self._ditContentRuleIndex, rule.getNamesAndOID(), rule)
        for rule in self._ditContentRules:
            oc = self._objectClassIndex.get(rule.oid)
            if oc is not None and oc.oid not in self._ditContentRuleIndex:
                self._ditContentRuleIndex[oc.oid] = rule

        self._ditStructureRules = self._parseAll(
            ATTR_DIT_STRUCTURE_RULE, DITStructureRuleDefinition)
        self._ditStructureRuleByID = {}
        self._ditStructureRuleIndex = InsensitiveDict()
        self._ditStructureRuleByNameForm = InsensitiveDict()
        for rule in self._ditStructureRules:
            self._ditStructureRuleByID[rule.rule_id] = rule
            _addToIndex(self._ditStructureRuleIndex,
                        rule.getNamesAndOID(), rule)
            if rule.form not in self._ditStructureRuleByNameForm:
                self._ditStructureRuleByNameForm[rule.form] = rule
            nameForm = self._nameFormIndex.get(rule.form)
            if nameForm is not None:
                for key in nameForm.getNamesAndOID():
                    if key not in self._ditStructureRuleByNameForm:
                        self._ditStructureRuleByNameForm[key] = rule

        self._abstractObjectClasses = []
        self._auxiliaryObjectClasses = []
        self._structuralObjectClasses = []
        self._objectClassTypes = {}
        partitions = {
            ABSTRACT: self._abstractObjectClasses,
            AUXILIARY: self._auxiliaryObjectClasses,
            STRUCTURAL: self._structuralObjectClasses,
        }
        for oc in self._objectClasses:
            # walks the whole superior graph, so loops surface here
            oc.getSuperiorClasses(self, recursive=True)
            objectClassType = oc.getObjectClassType(self)
            self._objectClassTypes[oc] = objectClassType
            partitions[objectClassType].append(oc)

        self._subordinateAttributeTypes = {}
        for attributeType in self._attributeTypes:
            for superior in attributeType.getSuperiorTypes(self):
                self._subordinateAttributeTypes.setdefault(
                    superior, []).append(attributeType)

    def _parseAll(self, attribute, definitionClass):
        values = self._schemaEntry.get(attribute)
        if not values:
            return []

        definitions = []
        seen = {}
        for value in sorted(values):
            try:
                definition = definitionClass.fromString(value)
            except (ldaperrors.LDAPDecodingError,
                    ldaperrors.LDAPParamError,
                    UnicodeDecodeError) as e:
                log.msg("Skipping malformed %s value %r: %s"
                        % (attribute, to_unicode_lenient(value), e),
                        debug=True)
                continue
            key = _definitionKey(definition)
            if key in seen:
                if definition != seen[key]:
                    log.msg("Ignoring %s value %r, %s is already defined"
                            % (attribute, to_unicode_lenient(value),
                               definition.oid),
                            debug=True)
                continue
            seen[key] = definition
            definitions.append(definition)
        return definitions

    @classmethod
    def fromDefinitions(cls, dn=DEFAULT_SCHEMA_DN, **definitions):
        """
        Build a schema from definition strings or definition objects.

        Keyword arguments are named like the subschema attributes,
        e.g. C{attributeTypes=[...]} or C{objectClasses=[...]}.
        """
        attributes = {
            'objectClass': [x.encode('utf-8')
                            for x in DEFAULT_SCHEMA_OBJECT_CLASSES],
        }
        known = {name for name, _ in SCHEMA_ATTRIBUTES}
        for name, values in definitions.items():
            if name not in known:
                raise ldaperrors.LDAPParamError(
                    "%s is not a subschema attribute" % (name,))
            attributes[name] = list(values)
        return cls(entry.BaseLDAPEntry(dn=dn, attributes=attributes))

    @classmethod
    def fromLDIFFile(cls, path):
        """
        Read a schema from an LDIF file holding one or more subschema
        entries; the definitions of all entries are combined.

        @return: the Schema, or None if the file has no entries.
        """
        return getSchema(path)

    def getSchemaEntry(self):
        return self._schemaEntry

    def getAttributeSyntaxes(self):
        return tuple(self._attributeSyntaxes)

    def getAttributeSyntax(self, oid):
        """
        Look up a syntax by OID, ignoring any minimum upper bound
        suffix such as C{{64}}.
        """
        if oid is None:
            raise ldaperrors.LDAPParamError("Schema lookup needs an OID")
        return self._attributeSyntaxIndex.get(
            stripSyntaxLength(to_unicode(oid)))

    def getAttributeTypes(self):
        return tuple(self._attributeTypes)

    def getOperationalAttributeTypes(self):
        return tuple(self._operationalAttributeTypes)

    def getUserAttributeTypes(self):
        return tuple(self._userAttributeTypes)

    def getAttributeType(self, name):
        return _lookup(self._attributeTypeIndex, name)

    def getSubordinateAttributeTypes(self, attributeType):
        """
        Attribute types that have the given type anywhere in their
        superior chain.
        """
        if not isinstance(attributeType, AttributeTypeDefinition):
            attributeType = self.getAttributeType(attributeType)
            if attributeType is None:
                return ()
        return tuple(self._subordinateAttributeTypes.get(attributeType, ()))

    def getDITContentRules(self):
        return tuple(self._ditContentRules)

    def getDITContentRule(self, name):
        return _lookup(self._ditContentRuleIndex, name)

    def getDITStructureRules(self):
        return tuple(self._ditStructureRules)

    def getDITStructureRuleByID(self, ruleID):
        return self._ditStructureRuleByID.get(int(ruleID))

    def getDITStructureRuleByName(self, name):
        return _lookup(self._ditStructureRuleIndex, name)

    def getDITStructureRuleByNameForm(self, nameForm):
        if not isinstance(nameForm, NameFormDefinition):
            return _lookup(self._ditStructureRuleByNameForm, nameForm)
        for key in nameForm.getNamesAndOID():
            rule = self._ditStructureRuleByNameForm.get(key)
            if rule is not None:
                return rule
        return None

    def getMatchingRules(self):
        return tuple(self._matchingRules)

    def getMatchingRule(self, name):
        return _lookup(self._matchingRuleIndex, name)

    def getMatchingRuleUses(self):
        return tuple(self._matchingRuleUses)

    def getMatchingRuleUse(self, name):
        return _lookup(self._matchingRuleUseIndex, name)

    def getNameForms(self):
        return tuple(self._nameForms)

    def getNameFormByName(self, name):
        return _lookup(self._nameFormIndex, name)

    def getNameFormByObjectClass(self, objectClass):
        """
        The name form bound to a structural object class, looked up by
        any of the class's names or its OID.
        """
        if not isinstance(objectClass, ObjectClassDefinition):
            return _lookup(self._nameFormByObjectClass, objectClass)
        for key in objectClass.getNamesAndOID():
            nameForm = self._nameFormByObjectClass.get(key)
            if nameForm is not None:
                return nameForm
        return None

    def getObjectClasses(self):
        return tuple(self._objectClasses)

    def getAbstractObjectClasses(self):
        return tuple(self._abstractObjectClasses)

    def getAuxiliaryObjectClasses(self):
        return tuple(self._auxiliaryObjectClasses)

    def getStructuralObjectClasses(self):
        return tuple(self._structuralObjectClasses)

    def getObjectClass(self, name):
        return _lookup(self._objectClassIndex, name)

    def getObjectClassType(self, objectClass):
        """
        The effective kind of an object class of this schema, inherited
        from its superiors when the class does not state one.
        """
        try:
            return self._objectClassTypes[objectClass]
        except KeyError:
            return objectClass.getObjectClassType(self)

    def _comparisonKey(self):
        return (
            to_unicode(self._schemaEntry.dn).lower(),
            frozenset(self._attributeSyntaxes),
            frozenset(self._attributeTypes),
            frozenset(self._ditContentRules),
            frozenset(self._ditStructureRules),
            frozenset(self._matchingRules),
            frozenset(self._matchingRuleUses),
            frozenset(self._nameForms),
            frozenset(self._objectClasses),
        )

    def __hash__(self):
        return hash(to_unicode(self._schemaEntry.dn).lower())

    def __eq__(self, other):
        if not isinstance(other, Schema):
            return NotImplemented
        return self._comparisonKey() == other._comparisonKey()

    def __ne__(self, other):
        return not (self == other)

    def __repr__(self):
        return ("<%s dn=%r attributeTypes=%d objectClasses=%d>"
                % (self.__class__.__name__,
                   to_unicode(self._schemaEntry.dn),
                   len(self._attributeTypes),
                   len(self._objectClasses)))


def _definitionKey(definition):
    if isinstance(definition, DITStructureRuleDefinition):
        return definition.rule_id
    return definition.oid.lower()


def mergeSchemas(*schemas):
    """
    Combine several schemas into one.

    Definitions are matched by OID, or by rule ID for DIT structure
    rules; when several schemas define the same element, the one from
    the last schema wins. The merged subschema entry keeps the name and
    object classes of the first schema's entry.

    @return: None when no schema is given, the schema itself when only
    one is given, and a new Schema otherwise.
    """
    if not schemas:
        return None
    if len(schemas) == 1:
        return schemas[0]

    merged = {name: {} for name, _ in SCHEMA_ATTRIBUTES}
    getters = {
        ATTR_ATTRIBUTE_SYNTAX: Schema.getAttributeSyntaxes,
        ATTR_ATTRIBUTE_TYPE: Schema.getAttributeTypes,
        ATTR_DIT_CONTENT_RULE: Schema.getDITContentRules,
        ATTR_DIT_STRUCTURE_RULE: Schema.getDITStructureRules,
        ATTR_MATCHING_RULE: Schema.getMatchingRules,
        ATTR_MATCHING_RULE_USE: Schema.getMatchingRuleUses,
        ATTR_NAME_FORM: Schema.getNameForms,
        ATTR_OBJECT_CLASS: Schema.getObjectClasses,
    }
    for schema in schemas:
        for name, definitions in merged.items():
            for definition in getters[name](schema):
                definitions[_definitionKey(definition)] = definition.toWire()

    firstEntry = schemas[0].getSchemaEntry()
    objectClasses = firstEntry.get('objectClass')
    if not objectClasses:
        objectClasses = [x.encode('utf-8')
                         for x in DEFAULT_SCHEMA_OBJECT_CLASSES]

    attributes = {'objectClass': list(objectClasses)}
    for name, definitions in merged.items():
        if definitions:
            attributes[name] = list(definitions.values())

    return Schema(entry.BaseLDAPEntry(dn=firstEntry.dn, attributes=attributes))


def getSchema(*paths):
    """
    Read a schema from one or more LDIF files. The definitions of all
    entries in all files are combined into a single subschema entry
    named after the first one.

    @return: the Schema, or None if the files hold no entries.

    @raise LDIFParseError: if a file is not valid LDIF.
    """
    dn = None
    attributes = {}
    for path in paths:
        for e in ldifprotocol.fromLDIFPath(path):
            if dn is None:
                dn = e.dn
            for attribute in e.getAttributes():
                attributes.setdefault(attribute.key, []).extend(attribute)
        log.msg("Loaded schema definitions from %s" % (path,), debug=True)

    if dn is None:
        return None
    return Schema(entry.BaseLDAPEntry(dn=dn, attributes=attributes))


def loadDefaultSchema():
    """
    Load the standard schema shipped with this package.

    Every call reads the file again and returns a new Schema; load it
    once while starting up and hand it to whatever needs it.
    """
    return getSchema(STANDARD_SCHEMA_FILE)
