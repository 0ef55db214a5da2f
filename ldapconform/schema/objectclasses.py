from zope.interface import implementer

from ldapconform import interfaces
from ldapconform._encoder import to_unicode
from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema import grammar
from ldapconform.schema.element import (
    SchemaElement, SchemaCycleError, _lowerSet)


ABSTRACT = 'ABSTRACT'
STRUCTURAL = 'STRUCTURAL'
AUXILIARY = 'AUXILIARY'

OBJECT_CLASS_TYPES = (ABSTRACT, STRUCTURAL, AUXILIARY)

EXTENSIBLE_OBJECT_NAME = 'extensibleObject'
EXTENSIBLE_OBJECT_OID = '1.3.6.1.4.1.1466.101.120.111'


@implementer(interfaces.ISchemaElement)
class ObjectClassDefinition(SchemaElement):
    """
    ASN Syntax::

        ObjectClassDescription = LPAREN WSP
            numericoid                 ; object identifier
            [ SP "NAME" SP qdescrs ]   ; short names (descriptors)
            [ SP "DESC" SP qdstring ]  ; description
            [ SP "OBSOLETE" ]          ; not active
            [ SP "SUP" SP oids ]       ; superior object classes
            [ SP kind ]                ; kind of class
            [ SP "MUST" SP oids ]      ; attribute types
            [ SP "MAY" SP oids ]       ; attribute types
            extensions WSP RPAREN

        kind = "ABSTRACT" / "STRUCTURAL" / "AUXILIARY"

    The kind is optional; C{type} is None when the definition does not
    state it, and L{getObjectClassType} then inherits it.
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'sup': ('sup', grammar.readOIDs),
        'abstract': ('type', ABSTRACT),
        'structural': ('type', STRUCTURAL),
        'auxiliary': ('type', AUXILIARY),
        'must': ('must', grammar.readOIDs),
        'may': ('may', grammar.readOIDs),
    }

    def __init__(self, oid, names=(), desc=None, obsolete=False,
                 sup=(), type=None, must=(), may=(), extensions=None):
        self._setCommon(oid, names, desc, obsolete, extensions)
        self.sup = tuple(to_unicode(x) for x in sup or ())
        if type is not None:
            type = to_unicode(type).upper()
            if type not in OBJECT_CLASS_TYPES:
                raise ldaperrors.LDAPParamError(
                    "Unknown object class type %r" % (type,))
        self.type = type
        self.must = tuple(to_unicode(x) for x in must or ())
        self.may = tuple(to_unicode(x) for x in may or ())

    def isExtensibleObject(self):
        return (self.hasNameOrOID(EXTENSIBLE_OBJECT_NAME)
                or self.hasNameOrOID(EXTENSIBLE_OBJECT_OID))

    def getSuperiorClasses(self, schema, recursive=False):
        """
        Superior classes that the schema defines, nearest first and
        without repetition. Names the schema does not know are skipped.

        @param recursive: also include the superiors of superiors.

        @raise SchemaCycleError: if the SUP graph loops.
        """
        found = {}
        self._collectSuperiors(schema, recursive, found, [self.oid.lower()])
        return list(found)

    def _collectSuperiors(self, schema, recursive, found, path):
        for name in self.sup:
            superior = schema.getObjectClass(name)
            if superior is None:
                continue
            key = superior.oid.lower()
            if key in path:
                raise SchemaCycleError('object class', path + [key])
            if superior in found:
                continue
            found[superior] = None
            if recursive:
                superior._collectSuperiors(
                    schema, True, found, path + [key])

    def getObjectClassType(self, schema=None):
        """
        The kind of this class. A class that does not state one takes
        the kind of its first known superior, and is STRUCTURAL when it
        has none.
        """
        return self._effectiveType(schema, [self.oid.lower()])

    def _effectiveType(self, schema, path):
        if self.type is not None:
            return self.type
        if schema is not None:
            for name in self.sup:
                superior = schema.getObjectClass(name)
                if superior is None:
                    continue
                key = superior.oid.lower()
                if key in path:
                    raise SchemaCycleError('object class', path + [key])
                return superior._effectiveType(schema, path + [key])
        return STRUCTURAL

    def _resolve(self, schema, names):
        r = []
        for name in names:
            attributeType = schema.getAttributeType(name)
            if attributeType is not None and attributeType not in r:
                r.append(attributeType)
        return r

    def getRequiredAttributes(self, schema, includeSuperiorClasses=False):
        """
        Attribute types listed in MUST that the schema defines.

        @param includeSuperiorClasses: add those required by every
        superior class as well.
        """
        r = self._resolve(schema, self.must)
        if includeSuperiorClasses:
            for superior in self.getSuperiorClasses(schema, recursive=True):
                for attributeType in superior._resolve(schema, superior.must):
                    if attributeType not in r:
                        r.append(attributeType)
        return r

    def getOptionalAttributes(self, schema, includeSuperiorClasses=False):
        """
        Attribute types listed in MAY that the schema defines, minus
        those that are required.

        @param includeSuperiorClasses: add those allowed by every
        superior class as well.
        """
        required = self.getRequiredAttributes(schema, includeSuperiorClasses)
        classes = [self]
        if includeSuperiorClasses:
            classes.extend(self.getSuperiorClasses(schema, recursive=True))
        r = []
        for oc in classes:
            for attributeType in oc._resolve(schema, oc.may):
                if attributeType not in required and attributeType not in r:
                    r.append(attributeType)
        return r

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        self._renderOIDs(buf, "SUP", self.sup)
        if self.type is not None:
            buf.append(" %s" % self.type)
        self._renderOIDs(buf, "MUST", self.must)
        self._renderOIDs(buf, "MAY", self.may)
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (
            _lowerSet(self.sup),
            self.type,
            _lowerSet(self.must),
            _lowerSet(self.may),
        )
