"""
Matching rules for character string syntaxes.
"""

from ldapconform._encoder import to_bytes, to_unicode_lenient
from ldapconform.matchingrules.base import MatchingRule, invalidValue


def _text(value):
    return to_unicode_lenient(to_bytes(value))


def prepareString(value):
    """
    Trim leading and trailing spaces and collapse inner runs of
    whitespace into one space. A value made of spaces only becomes
    a single space.
    """
    if value and not value.strip():
        return ' '
    return ' '.join(value.split())


class CaseIgnoreMatch(MatchingRule):
    oid = '2.5.13.2'
    names = ('caseIgnoreMatch', 'caseIgnoreIA5Match')
    aliasOIDs = ('1.3.6.1.4.1.1466.109.114.2',)
    orderingOID = '2.5.13.3'
    orderingNames = ('caseIgnoreOrderingMatch',)
    substringOID = '2.5.13.4'
    substringNames = ('caseIgnoreSubstringsMatch', 'caseIgnoreIA5SubstringsMatch')

    def normalize(self, value):
        return prepareString(_text(value)).lower()


class CaseExactMatch(MatchingRule):
    oid = '2.5.13.5'
    names = ('caseExactMatch', 'caseExactIA5Match')
    aliasOIDs = ('1.3.6.1.4.1.1466.109.114.1',)
    orderingOID = '2.5.13.6'
    orderingNames = ('caseExactOrderingMatch',)
    substringOID = '2.5.13.7'
    substringNames = ('caseExactSubstringsMatch',)

    def normalize(self, value):
        return prepareString(_text(value))


class CaseIgnoreListMatch(MatchingRule):
    """
    Values are lists of lines separated by C{$}, as in postal
    addresses; each line is compared like caseIgnoreMatch.
    """

    oid = '2.5.13.11'
    names = ('caseIgnoreListMatch',)
    substringOID = '2.5.13.12'
    substringNames = ('caseIgnoreListSubstringsMatch',)

    def normalize(self, value):
        lines = _text(value).split('$')
        return '$'.join(prepareString(line).lower() for line in lines)


class NumericStringMatch(MatchingRule):
    oid = '2.5.13.8'
    names = ('numericStringMatch',)
    orderingOID = '2.5.13.9'
    orderingNames = ('numericStringOrderingMatch',)
    substringOID = '2.5.13.10'
    substringNames = ('numericStringSubstringsMatch',)

    def normalize(self, value):
        text = _text(value)
        r = []
        for c in text:
            if c == ' ':
                continue
            if not ('0' <= c <= '9'):
                raise invalidValue(value, "is not a numeric string")
            r.append(c)
        return ''.join(r)


# PrintableString characters, spaces and hyphens are dropped before
# this check
_telephoneCharacters = frozenset(
    'abcdefghijklmnopqrstuvwxyz'
    'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    "0123456789'()+,.=/:?")


class TelephoneNumberMatch(MatchingRule):
    oid = '2.5.13.20'
    names = ('telephoneNumberMatch',)
    substringOID = '2.5.13.21'
    substringNames = ('telephoneNumberSubstringsMatch',)

    def normalize(self, value):
        text = _text(value)
        r = []
        for c in text:
            if c in ' -':
                continue
            if c not in _telephoneCharacters:
                raise invalidValue(value, "is not a telephone number")
            r.append(c)
        return ''.join(r)


class OctetStringMatch(MatchingRule):
    oid = '2.5.13.17'
    names = ('octetStringMatch',)
    orderingOID = '2.5.13.18'
    orderingNames = ('octetStringOrderingMatch',)
    substringOID = '2.5.13.19'
    substringNames = ('octetStringSubstringsMatch',)

    def normalize(self, value):
        return to_bytes(value)
