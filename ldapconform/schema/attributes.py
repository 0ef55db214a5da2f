from zope.interface import implementer

from ldapconform import interfaces
from ldapconform._encoder import to_unicode
from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema import grammar
from ldapconform.schema.element import (
    SchemaElement, SchemaCycleError, _lower)


USER_APPLICATIONS = 'userApplications'
DIRECTORY_OPERATION = 'directoryOperation'
DISTRIBUTED_OPERATION = 'distributedOperation'
DSA_OPERATION = 'dSAOperation'

USAGES = {
    u.lower(): u
    for u in (USER_APPLICATIONS,
              DIRECTORY_OPERATION,
              DISTRIBUTED_OPERATION,
              DSA_OPERATION)
}


def _readUsage(text, pos):
    value, pos = grammar.readOID(text, pos)
    try:
        return USAGES[value.lower()], pos
    except KeyError:
        raise grammar.decodingError(
            text, pos, "unknown attribute usage %r" % value)


def stripSyntaxLength(syntaxOID):
    """
    Drop the minimum upper bound suffix from a syntax OID,
    C{1.3.6.1.4.1.1466.115.121.1.15{32768}} becoming
    C{1.3.6.1.4.1.1466.115.121.1.15}.
    """
    if syntaxOID is None:
        return None
    brace = syntaxOID.find('{')
    if brace < 0:
        return syntaxOID
    return syntaxOID[:brace]


@implementer(interfaces.ISchemaElement)
class AttributeSyntaxDefinition(SchemaElement):
    """
    ASN Syntax::

        SyntaxDescription = LPAREN WSP
            numericoid                 ; object identifier
            [ SP "DESC" SP qdstring ]  ; description
            extensions WSP RPAREN      ; extensions
    """

    _keywords = {
        'desc': ('desc', grammar.readQDString),
    }

    def __init__(self, oid, desc=None, extensions=None):
        self._setCommon(oid, (), desc, False, extensions)

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)


@implementer(interfaces.ISchemaElement)
class AttributeTypeDefinition(SchemaElement):
    """
    ASN Syntax::

        AttributeTypeDescription = LPAREN WSP
            numericoid                    ; object identifier
            [ SP "NAME" SP qdescrs ]      ; short names (descriptors)
            [ SP "DESC" SP qdstring ]     ; description
            [ SP "OBSOLETE" ]             ; not active
            [ SP "SUP" SP oid ]           ; supertype
            [ SP "EQUALITY" SP oid ]      ; equality matching rule
            [ SP "ORDERING" SP oid ]      ; ordering matching rule
            [ SP "SUBSTR" SP oid ]        ; substrings matching rule
            [ SP "SYNTAX" SP noidlen ]    ; value syntax
            [ SP "SINGLE-VALUE" ]         ; single-value
            [ SP "COLLECTIVE" ]           ; collective
            [ SP "NO-USER-MODIFICATION" ] ; not user modifiable
            [ SP "USAGE" SP usage ]       ; usage
            extensions WSP RPAREN         ; extensions

        usage = "userApplications"     /  ; user
                "directoryOperation"   /  ; directory operational
                "distributedOperation" /  ; DSA-shared operational
                "dSAOperation"            ; DSA-specific operational
    """

    _keywords = {
        'name': ('names', grammar.readQDStrings),
        'desc': ('desc', grammar.readQDString),
        'obsolete': ('obsolete', True),
        'sup': ('sup', grammar.readOID),
        'equality': ('equality', grammar.readOID),
        'ordering': ('ordering', grammar.readOID),
        'substr': ('substr', grammar.readOID),
        'syntax': ('syntax', grammar.readOID),
        'single-value': ('single_value', True),
        'collective': ('collective', True),
        'no-user-modification': ('no_user_modification', True),
        'usage': ('usage', _readUsage),
    }

    def __init__(self, oid, names=(), desc=None, obsolete=False,
                 sup=None, equality=None, ordering=None, substr=None,
                 syntax=None, single_value=False, collective=False,
                 no_user_modification=False, usage=USER_APPLICATIONS,
                 extensions=None):
        self._setCommon(oid, names, desc, obsolete, extensions)
        self.sup = to_unicode(sup)
        self.equality = to_unicode(equality)
        self.ordering = to_unicode(ordering)
        self.substr = to_unicode(substr)
        self.syntax = to_unicode(syntax)
        self.single_value = bool(single_value)
        self.collective = bool(collective)
        self.no_user_modification = bool(no_user_modification)
        if usage is None:
            usage = USER_APPLICATIONS
        try:
            self.usage = USAGES[to_unicode(usage).lower()]
        except KeyError:
            raise ldaperrors.LDAPParamError(
                "Unknown attribute usage %r" % (usage,))

    def isOperational(self):
        return self.usage != USER_APPLICATIONS

    def getSuperiorType(self, schema):
        if self.sup is None:
            return None
        return schema.getAttributeType(self.sup)

    def getSuperiorTypes(self, schema):
        """
        All resolvable superior types, nearest first.

        @raise SchemaCycleError: if the SUP chain loops.
        """
        r = []
        path = [self.oid.lower()]
        current = self.getSuperiorType(schema)
        while current is not None:
            key = current.oid.lower()
            if key in path:
                raise SchemaCycleError(
                    'attribute type', path + [key])
            path.append(key)
            r.append(current)
            current = current.getSuperiorType(schema)
        return r

    def _inherited(self, attribute, schema):
        value = getattr(self, attribute)
        if value is not None or schema is None:
            return value
        for superior in self.getSuperiorTypes(schema):
            value = getattr(superior, attribute)
            if value is not None:
                return value
        return None

    def getEqualityMatchingRule(self, schema=None):
        """
        Name or OID of the equality matching rule. When a schema is
        given and the rule is not set on this type, the first one set
        along the superior chain is returned.
        """
        return self._inherited('equality', schema)

    def getOrderingMatchingRule(self, schema=None):
        return self._inherited('ordering', schema)

    def getSubstringMatchingRule(self, schema=None):
        return self._inherited('substr', schema)

    def getSyntaxOID(self, schema=None):
        return self._inherited('syntax', schema)

    def getBaseSyntaxOID(self, schema=None):
        """The syntax OID without any minimum upper bound."""
        return stripSyntaxLength(self.getSyntaxOID(schema))

    def getSyntaxMinimumUpperBound(self, schema=None):
        """
        The minimum upper bound suffix of the syntax, as an integer, or
        -1 when there is none.
        """
        syntaxOID = self.getSyntaxOID(schema)
        if syntaxOID is None:
            return -1
        start = syntaxOID.find('{')
        end = syntaxOID.find('}', start)
        if start < 0 or end < 0:
            return -1
        try:
            return int(syntaxOID[start + 1:end])
        except ValueError:
            return -1

    def _render(self):
        buf = ["( ", self.oid]
        self._renderCommon(buf)
        for keyword, value in (('SUP', self.sup),
                               ('EQUALITY', self.equality),
                               ('ORDERING', self.ordering),
                               ('SUBSTR', self.substr),
                               ('SYNTAX', self.syntax)):
            if value is not None:
                buf.append(" %s %s" % (keyword, value))
        if self.single_value:
            buf.append(" SINGLE-VALUE")
        if self.collective:
            buf.append(" COLLECTIVE")
        if self.no_user_modification:
            buf.append(" NO-USER-MODIFICATION")
        buf.append(" USAGE %s" % self.usage)
        self._renderExtensions(buf)
        buf.append(" )")
        return "".join(buf)

    def _comparisonKey(self):
        return (
            _lower(self.sup),
            _lower(self.equality),
            _lower(self.ordering),
            _lower(self.substr),
            _lower(self.syntax),
            self.single_value,
            self.collective,
            self.no_user_modification,
            self.usage,
        )
