from zope.interface import implementer

from ldapconform import interfaces
from ldapconform._encoder import to_unicode
from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema import grammar
from ldapconform.schema.element import SchemaElement, _lower, _lowerSet


@implementer(interfaces.ISchemaElement)
class MatchingRuleDefinition(SchemaElement):
    """
    ASN Syntax::

        MatchingRuleDescription = LPAREN WSP
            numericoid                 ; object identifier
            [ SP "NAME" SP qdescrs ]   ; short names (descriptors)
            [ SP "DESC" SP qdstring ]  ; description
            [ SP "OBSOLETE" ]          ; not active
            SP "SYNTAX" SP numericoid  ; assertion syntax
            extensions WSP RPAREN      ; extensions
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'syntax': ('syntax', grammar.readOID),
    }

    def __init__(self, oid, names=(), desc=None, obsolete=False,
                 syntax=None, extensions=None):
        if syntax is None:
            raise ldaperrors.LDAPParamError(
                "Matching rule %r has no syntax" % (oid,))
        self._setCommon(oid, names, desc, obsolete, extensions)
        self.syntax = to_unicode(syntax)

    @classmethod
    def _fromParsed(cls, text, oid, values, extensions):
        if 'syntax' not in values:
            raise grammar.decodingError(
                text, 2, "matching rule %s has no SYNTAX" % oid)
        return cls(oid, extensions=extensions, **values)

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        buf.append(" SYNTAX %s" % self.syntax)
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (_lower(self.syntax),)


@implementer(interfaces.ISchemaElement)
class MatchingRuleUseDefinition(SchemaElement):
    """
    ASN Syntax::

        MatchingRuleUseDescription = LPAREN WSP
            numericoid                 ; object identifier
            [ SP "NAME" SP qdescrs ]   ; short names (descriptors)
            [ SP "DESC" SP qdstring ]  ; description
            [ SP "OBSOLETE" ]          ; not active
            SP "APPLIES" SP oids       ; attribute types
            extensions WSP RPAREN      ; extensions

    The OID is the one of the matching rule this use describes.
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'applies': ('applies', grammar.readOIDs),
    }

    def __init__(self, oid, names=(), desc=None, obsolete=False,
                 applies=(), extensions=None):
        if not applies:
            raise ldaperrors.LDAPParamError(
                "Matching rule use %r applies to no attribute type" % (oid,))
        self._setCommon(oid, names, desc, obsolete, extensions)
        self.applies = tuple(to_unicode(x) for x in applies)

    @classmethod
    def _fromParsed(cls, text, oid, values, extensions):
        if 'applies' not in values:
            raise grammar.decodingError(
                text, 2, "matching rule use %s has no APPLIES" % oid)
        return cls(oid, extensions=extensions, **values)

    def appliesTo(self, attributeType):
        """Does this use list the attribute type by any of its names or OID?"""
        for name in self.applies:
            if attributeType.hasNameOrOID(name):
                return True
        return False

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        buf.append(" APPLIES")
        if len(self.applies) == 1:
            buf.append(" %s" % self.applies[0])
        else:
            buf.append(" ( %s )" % " $ ".join(self.applies))
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (_lowerSet(self.applies),)
