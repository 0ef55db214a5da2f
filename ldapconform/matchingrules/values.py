"""
Matching rules for booleans, integers, times and distinguished names.
"""

import datetime
import re

from ldapconform._encoder import to_bytes, to_unicode_lenient
from ldapconform.matchingrules.base import MatchingRule, invalidValue
from ldapconform.protocols.ldap import distinguishedname, ldaperrors


def _text(value):
    return to_unicode_lenient(to_bytes(value))


class BooleanMatch(MatchingRule):
    oid = '2.5.13.13'
    names = ('booleanMatch',)

    def normalize(self, value):
        text = _text(value).upper()
        if text not in ('TRUE', 'FALSE'):
            raise invalidValue(value, "is not TRUE or FALSE")
        return text


class IntegerMatch(MatchingRule):
    oid = '2.5.13.14'
    names = ('integerMatch',)
    orderingOID = '2.5.13.15'
    orderingNames = ('integerOrderingMatch',)

    def normalize(self, value):
        text = _text(value).strip(' ')
        if not text:
            raise invalidValue(value, "is not an integer")
        digits = text
        if text.startswith('-'):
            digits = text[1:]
        if not digits:
            raise invalidValue(value, "is not an integer")
        if digits[0] == '0' and (len(digits) > 1 or text.startswith('-')):
            raise invalidValue(value, "has a leading zero")
        for c in digits:
            if not ('0' <= c <= '9'):
                raise invalidValue(value, "is not an integer")
        return text

    def compareValues(self, value1, value2):
        n1 = int(self.normalize(value1))
        n2 = int(self.normalize(value2))
        return (n1 > n2) - (n1 < n2)


_generalizedTimePattern = re.compile(
    r'^(?P<year>[0-9]{4})(?P<month>[0-9]{2})(?P<day>[0-9]{2})'
    r'(?P<hour>[0-9]{2})'
    r'(?:(?P<minute>[0-9]{2})(?P<second>[0-9]{2})?)?'
    r'(?:[.,](?P<fraction>[0-9]+))?'
    r'(?P<zone>Z|[+-][0-9]{2}(?:[0-9]{2})?)$')


def parseGeneralizedTime(text):
    """
    Parse a GeneralizedTime value into an aware datetime in UTC.

    A fraction applies to the last unit given, so C{2020010112.5Z} is
    half past twelve.

    @raise ValueError: if the text is not a GeneralizedTime.
    """
    m = _generalizedTimePattern.match(text)
    if m is None:
        raise ValueError("not a generalized time: %r" % (text,))

    minute = m.group('minute')
    second = m.group('second')
    when = datetime.datetime(
        int(m.group('year')), int(m.group('month')), int(m.group('day')),
        int(m.group('hour')),
        int(minute or 0), int(second or 0))

    fraction = m.group('fraction')
    if fraction is not None:
        if second is not None:
            unit = datetime.timedelta(seconds=1)
        elif minute is not None:
            unit = datetime.timedelta(minutes=1)
        else:
            unit = datetime.timedelta(hours=1)
        try:
            when = when + unit * float('0.' + fraction)
        except OverflowError:
            raise ValueError("generalized time out of range: %r" % (text,))

    zone = m.group('zone')
    if zone == 'Z':
        offset = datetime.timedelta(0)
    else:
        hours = int(zone[1:3])
        minutes = int(zone[3:5] or 0)
        if hours > 23 or minutes > 59:
            raise ValueError("bad time zone offset: %r" % (text,))
        offset = datetime.timedelta(hours=hours, minutes=minutes)
        if zone[0] == '-':
            offset = -offset
    when = when.replace(tzinfo=datetime.timezone(offset))
    try:
        return when.astimezone(datetime.timezone.utc)
    except OverflowError:
        raise ValueError("generalized time out of range: %r" % (text,))


def formatGeneralizedTime(when):
    """Render an aware datetime as C{YYYYMMDDHHMMSS.fffZ} in UTC."""
    when = when.astimezone(datetime.timezone.utc)
    return '%04d%02d%02d%02d%02d%02d.%03dZ' % (
        when.year, when.month, when.day,
        when.hour, when.minute, when.second,
        when.microsecond // 1000)


class GeneralizedTimeMatch(MatchingRule):
    oid = '2.5.13.27'
    names = ('generalizedTimeMatch',)
    orderingOID = '2.5.13.28'
    orderingNames = ('generalizedTimeOrderingMatch',)

    def normalize(self, value):
        try:
            when = parseGeneralizedTime(_text(value))
        except ValueError:
            raise invalidValue(value, "is not a generalized time")
        return formatGeneralizedTime(when)


class DistinguishedNameMatch(MatchingRule):
    oid = '2.5.13.1'
    names = ('distinguishedNameMatch', 'uniqueMemberMatch')
    aliasOIDs = ('2.5.13.23',)

    def normalize(self, value):
        text = _text(value)
        try:
            dn = distinguishedname.DistinguishedName(stringValue=text)
        except ldaperrors.LDAPInvalidDNSyntax as e:
            raise invalidValue(value, "is not a distinguished name: %s" % (e,))
        return dn.getText().lower()
