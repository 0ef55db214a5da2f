from twisted.python.util import InsensitiveDict

from ldapconform._encoder import to_unicode
from ldapconform.matchingrules import strings, values
from ldapconform.schema.attributes import stripSyntaxLength


SYNTAX_PREFIX = '1.3.6.1.4.1.1466.115.121.1.'

AUDIO_SYNTAX = SYNTAX_PREFIX + '4'
BINARY_SYNTAX = SYNTAX_PREFIX + '5'
BOOLEAN_SYNTAX = SYNTAX_PREFIX + '7'
CERTIFICATE_SYNTAX = SYNTAX_PREFIX + '8'
CERTIFICATE_LIST_SYNTAX = SYNTAX_PREFIX + '9'
CERTIFICATE_PAIR_SYNTAX = SYNTAX_PREFIX + '10'
DN_SYNTAX = SYNTAX_PREFIX + '12'
DIRECTORY_STRING_SYNTAX = SYNTAX_PREFIX + '15'
GENERALIZED_TIME_SYNTAX = SYNTAX_PREFIX + '24'
IA5_STRING_SYNTAX = SYNTAX_PREFIX + '26'
INTEGER_SYNTAX = SYNTAX_PREFIX + '27'
JPEG_SYNTAX = SYNTAX_PREFIX + '28'
NAME_AND_OPTIONAL_UID_SYNTAX = SYNTAX_PREFIX + '34'
NUMERIC_STRING_SYNTAX = SYNTAX_PREFIX + '36'
OCTET_STRING_SYNTAX = SYNTAX_PREFIX + '40'
POSTAL_ADDRESS_SYNTAX = SYNTAX_PREFIX + '41'
PRINTABLE_STRING_SYNTAX = SYNTAX_PREFIX + '44'
TELEPHONE_NUMBER_SYNTAX = SYNTAX_PREFIX + '50'
AUTH_PASSWORD_SYNTAX = '1.3.6.1.4.1.4203.1.1.2'


class MatchingRuleRegistry:
    """
    Matching rules known by name or OID, and the rule to fall back to
    for each attribute syntax.

    Build one while starting up, usually with L{standardMatchingRules},
    and share it between all validators.
    """

    def __init__(self, defaultRule=None):
        self._rules = InsensitiveDict()
        self._rulesBySyntax = InsensitiveDict()
        self._allRules = []
        if defaultRule is None:
            defaultRule = strings.CaseIgnoreMatch()
        self._defaultRule = defaultRule

    def register(self, rule, syntaxOIDs=()):
        """
        Make rule known under all of its names and OIDs, and use it for
        the given syntaxes. A later registration replaces an earlier
        one under the same name.
        """
        if rule not in self._allRules:
            self._allRules.append(rule)
        for key in rule.getAllNames() + rule.oids:
            self._rules[key] = rule
        for syntaxOID in syntaxOIDs:
            self._rulesBySyntax[syntaxOID] = rule

    def getMatchingRules(self):
        return tuple(self._allRules)

    def getMatchingRule(self, nameOrOID):
        if nameOrOID is None:
            return None
        return self._rules.get(to_unicode(nameOrOID))

    def getDefaultEqualityMatchingRule(self):
        return self._defaultRule

    def selectMatchingRuleForSyntax(self, syntaxOID):
        """
        The rule for an attribute syntax, ignoring any minimum upper
        bound; the default rule when the syntax has none.
        """
        if syntaxOID is not None:
            rule = self._rulesBySyntax.get(
                stripSyntaxLength(to_unicode(syntaxOID)))
            if rule is not None:
                return rule
        return self._defaultRule

    def _select(self, getRuleName, attributeName, schema, ruleID):
        if ruleID is not None:
            rule = self.getMatchingRule(ruleID)
            if rule is not None:
                return rule

        if schema is None or attributeName is None:
            return self._defaultRule
        attributeType = schema.getAttributeType(attributeName)
        if attributeType is None:
            return self._defaultRule

        rule = self.getMatchingRule(getRuleName(attributeType, schema))
        if rule is not None:
            return rule
        return self.selectMatchingRuleForSyntax(
            attributeType.getBaseSyntaxOID(schema))

    def selectEqualityMatchingRule(self, attributeName, schema, ruleID=None):
        """
        Pick the rule to compare values of an attribute for equality.

        In order of preference: the rule named by ruleID, the EQUALITY
        rule of the attribute type or of its nearest superior having
        one, the rule for the attribute's syntax, and finally the
        default rule.

        @param attributeName: name or OID of the attribute type,
        without options.

        @param schema: the Schema defining the attribute type, or None.
        """
        return self._select(
            lambda attributeType, schema: attributeType.getEqualityMatchingRule(schema),
            attributeName, schema, ruleID)

    def selectOrderingMatchingRule(self, attributeName, schema, ruleID=None):
        return self._select(
            lambda attributeType, schema: attributeType.getOrderingMatchingRule(schema),
            attributeName, schema, ruleID)

    def selectSubstringMatchingRule(self, attributeName, schema, ruleID=None):
        return self._select(
            lambda attributeType, schema: attributeType.getSubstringMatchingRule(schema),
            attributeName, schema, ruleID)

    def __repr__(self):
        return "<%s rules=%d>" % (self.__class__.__name__, len(self._allRules))


def standardMatchingRules():
    """
    A new registry holding the built-in matching rules, bound to the
    syntaxes they compare.
    """
    registry = MatchingRuleRegistry()
    registry.register(values.BooleanMatch(), (BOOLEAN_SYNTAX,))
    registry.register(strings.CaseExactMatch())
    registry.register(registry.getDefaultEqualityMatchingRule(),
                      (DIRECTORY_STRING_SYNTAX,
                       IA5_STRING_SYNTAX,
                       PRINTABLE_STRING_SYNTAX))
    registry.register(strings.CaseIgnoreListMatch(), (POSTAL_ADDRESS_SYNTAX,))
    registry.register(values.DistinguishedNameMatch(),
                      (DN_SYNTAX, NAME_AND_OPTIONAL_UID_SYNTAX))
    registry.register(values.GeneralizedTimeMatch(),
                      (GENERALIZED_TIME_SYNTAX,))
    registry.register(values.IntegerMatch(), (INTEGER_SYNTAX,))
    registry.register(strings.NumericStringMatch(), (NUMERIC_STRING_SYNTAX,))
    registry.register(strings.OctetStringMatch(),
                      (AUDIO_SYNTAX,
                       AUTH_PASSWORD_SYNTAX,
                       BINARY_SYNTAX,
                       CERTIFICATE_SYNTAX,
                       CERTIFICATE_LIST_SYNTAX,
                       CERTIFICATE_PAIR_SYNTAX,
                       JPEG_SYNTAX,
                       OCTET_STRING_SYNTAX))
    registry.register(strings.TelephoneNumberMatch(),
                      (TELEPHONE_NUMBER_SYNTAX,))
    return registry
