from zope.interface import implementer

from ldapconform import interfaces
from ldapconform._encoder import to_unicode
from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema import grammar
from ldapconform.schema.element import SchemaElement, _lower, _lowerSet


def _resolveAttributes(schema, names):
    r = []
    for name in names:
        attributeType = schema.getAttributeType(name)
        if attributeType is not None and attributeType not in r:
            r.append(attributeType)
    return r


@implementer(interfaces.ISchemaElement)
class DITContentRuleDefinition(SchemaElement):
    """
    ASN Syntax::

        DITContentRuleDescription = LPAREN WSP
            numericoid                 ; object identifier
            [ SP "NAME" SP qdescrs ]   ; short names (descriptors)
            [ SP "DESC" SP qdstring ]  ; description
            [ SP "OBSOLETE" ]          ; not active
            [ SP "AUX" SP oids ]       ; auxiliary object classes
            [ SP "MUST" SP oids ]      ; attribute types
            [ SP "MAY" SP oids ]       ; attribute types
            [ SP "NOT" SP oids ]       ; attribute types
            extensions WSP RPAREN      ; extensions

    The OID is the one of the structural object class the rule
    applies to.
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'aux': ('aux', grammar.readOIDs),
        'must': ('must', grammar.readOIDs),
        'may': ('may', grammar.readOIDs),
        'not': ('not_', grammar.readOIDs),
    }

    def __init__(self, oid, names=(), desc=None, obsolete=False,
                 aux=(), must=(), may=(), not_=(), extensions=None):
        self._setCommon(oid, names, desc, obsolete, extensions)
        self.aux = tuple(to_unicode(x) for x in aux or ())
        self.must = tuple(to_unicode(x) for x in must or ())
        self.may = tuple(to_unicode(x) for x in may or ())
        self.not_ = tuple(to_unicode(x) for x in not_ or ())

    def getStructuralClass(self, schema):
        return schema.getObjectClass(self.oid)

    def getAuxiliaryClasses(self, schema):
        r = []
        for name in self.aux:
            oc = schema.getObjectClass(name)
            if oc is not None and oc not in r:
                r.append(oc)
        return r

    def getRequiredAttributes(self, schema):
        return _resolveAttributes(schema, self.must)

    def getOptionalAttributes(self, schema):
        return _resolveAttributes(schema, self.may)

    def getProhibitedAttributes(self, schema):
        return _resolveAttributes(schema, self.not_)

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        self._renderOIDs(buf, "AUX", self.aux)
        self._renderOIDs(buf, "MUST", self.must)
        self._renderOIDs(buf, "MAY", self.may)
        self._renderOIDs(buf, "NOT", self.not_)
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (
            _lowerSet(self.aux),
            _lowerSet(self.must),
            _lowerSet(self.may),
            _lowerSet(self.not_),
        )


@implementer(interfaces.ISchemaElement)
class DITStructureRuleDefinition(SchemaElement):
    """
    ASN Syntax::

        DITStructureRuleDescription = LPAREN WSP
            ruleid                     ; rule identifier
            [ SP "NAME" SP qdescrs ]   ; short names (descriptors)
            [ SP "DESC" SP qdstring ]  ; description
            [ SP "OBSOLETE" ]          ; not active
            SP "FORM" SP oid           ; NameForm
            [ SP "SUP" ruleids ]       ; superior rules
            extensions WSP RPAREN      ; extensions

        ruleids = ruleid / ( LPAREN WSP ruleidlist WSP RPAREN )
        ruleidlist = ruleid *( SP ruleid )
        ruleid = number

    Structure rules are identified by an integer rule ID rather than
    by an OID; C{oid} holds its text form.
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'form': ('form', grammar.readOID),
        'sup': ('sup', grammar.readRuleIDs),
    }

    def __init__(self, rule_id, names=(), desc=None, obsolete=False,
                 form=None, sup=(), extensions=None):
        if form is None:
            raise ldaperrors.LDAPParamError(
                "DIT structure rule %r has no name form" % (rule_id,))
        self.rule_id = int(rule_id)
        self._setCommon(str(self.rule_id), names, desc, obsolete, extensions)
        self.form = to_unicode(form)
        self.sup = tuple(int(x) for x in sup or ())

    @classmethod
    def _fromParsed(cls, text, oid, values, extensions):
        # the rule ID sits where the other kinds have their OID
        ruleID = grammar.toRuleID(text, 2, oid)
        if 'form' not in values:
            raise grammar.decodingError(
                text, 2, "DIT structure rule %s has no FORM" % oid)
        return cls(ruleID, extensions=extensions, **values)

    def getNameForm(self, schema):
        return schema.getNameFormByName(self.form)

    def getSuperiorRules(self, schema):
        r = []
        for ruleID in self.sup:
            rule = schema.getDITStructureRuleByID(ruleID)
            if rule is not None:
                r.append(rule)
        return r

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        buf.append(" FORM %s" % self.form)
        if len(self.sup) == 1:
            buf.append(" SUP %d" % self.sup[0])
        elif self.sup:
            buf.append(" SUP ( %s )" % " ".join(str(x) for x in self.sup))
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (
            _lower(self.form),
            frozenset(self.sup),
        )


@implementer(interfaces.ISchemaElement)
class NameFormDefinition(SchemaElement):
    """
    ASN Syntax::

        NameFormDescription = LPAREN WSP
            numericoid                 ; object identifier
            [ SP "NAME" SP qdescrs ]   ; short names (descriptors)
            [ SP "DESC" SP qdstring ]  ; description
            [ SP "OBSOLETE" ]          ; not active
            SP "OC" SP oid             ; structural object class
            SP "MUST" SP oids          ; attribute types
            [ SP "MAY" SP oids ]       ; attribute types
            extensions WSP RPAREN      ; extensions
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'oc': ('oc', grammar.readOID),
        'must': ('must', grammar.readOIDs),
        'may': ('may', grammar.readOIDs),
    }

    def __init__(self, oid, names=(), desc=None, obsolete=False,
                 oc=None, must=(), may=(), extensions=None):
        if oc is None:
            raise ldaperrors.LDAPParamError(
                "Name form %r has no structural object class" % (oid,))
        if not must:
            raise ldaperrors.LDAPParamError(
                "Name form %r has no required attributes" % (oid,))
        self._setCommon(oid, names, desc, obsolete, extensions)
        self.oc = to_unicode(oc)
        self.must = tuple(to_unicode(x) for x in must)
        self.may = tuple(to_unicode(x) for x in may or ())

    @classmethod
    def _fromParsed(cls, text, oid, values, extensions):
        if 'oc' not in values:
            raise grammar.decodingError(
                text, 2, "name form %s has no OC" % oid)
        if 'must' not in values:
            raise grammar.decodingError(
                text, 2, "name form %s has no MUST" % oid)
        return cls(oid, extensions=extensions, **values)

    def getStructuralClass(self, schema):
        return schema.getObjectClass(self.oc)

    def getRequiredAttributes(self, schema):
        return _resolveAttributes(schema, self.must)

    def getOptionalAttributes(self, schema):
        return _resolveAttributes(schema, self.may)

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        buf.append(" OC %s" % self.oc)
        self._renderOIDs(buf, "MUST", self.must)
        self._renderOIDs(buf, "MAY", self.may)
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (
            _lower(self.oc),
            _lowerSet(self.must),
            _lowerSet(self.may),
        )
