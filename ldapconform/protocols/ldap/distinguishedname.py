import re

from ldapconform._encoder import to_unicode
from ldapconform.protocols.ldap import ldaperrors

# See rfc4514
# Note that RFC 2253 sections 2.4 and 3 disagree whether "=" needs to
# be quoted. Let's trust the syntax, slapd refuses to accept unescaped
# "=" in RDN values.
escapedChars = ',+"\\<>;='
escapedChars_leading = ' #'
escapedChars_trailing = ' #'

hexDigits = '0123456789abcdefABCDEF'

# descr / numericoid, with the legacy "OID." prefix of RFC 1779
_attributeTypePattern = re.compile(
    r'^(?:[A-Za-z][A-Za-z0-9-]*|(?:[Oo][Ii][Dd]\.)?[0-9]+(?:\.[0-9]+)*)$')


def escape(s):
    r = ''
    r_trailer = ''

    if s and s[0] in escapedChars_leading:
        r = '\\' + s[0]
        s = s[1:]

    if s and s[-1] in escapedChars_trailing:
        r_trailer = '\\' + s[-1]
        s = s[:-1]

    for c in s:
        if c in escapedChars:
            r = r + '\\' + c
        elif ord(c) <= 31:
            r = r + '\\%02X' % ord(c)
        else:
            r = r + c

    return r + r_trailer


def unescape(s):
    """
    Decode the backslash escapes of an attribute value.

    Consecutive hex pairs are collected and decoded together as UTF-8,
    so that multi-byte characters escaped byte by byte come back whole.

    @raise InvalidRelativeDistinguishedName: for a trailing backslash,
    a lone hex digit or an escaped byte run that is not UTF-8.
    """
    r = []
    pending = bytearray()

    def flush():
        if pending:
            try:
                r.append(pending.decode('utf-8'))
            except UnicodeDecodeError:
                raise InvalidRelativeDistinguishedName(
                    s, 'escaped bytes are not valid UTF-8')
            del pending[:]

    i = 0
    while i < len(s):
        c = s[i]
        if c != '\\':
            flush()
            r.append(c)
            i += 1
            continue

        if i + 1 >= len(s):
            raise InvalidRelativeDistinguishedName(s, 'trailing backslash')
        if s[i + 1] in hexDigits:
            pair = s[i + 1:i + 3]
            if len(pair) != 2 or pair[1] not in hexDigits:
                raise InvalidRelativeDistinguishedName(
                    s, 'escape must be followed by two hex digits')
            pending.append(int(pair, 16))
            i += 3
        else:
            flush()
            r.append(s[i + 1])
            i += 2
    flush()

    return ''.join(r)


def _splitOnNotEscaped(s, separator):
    if not s:
        return []

    r = ['']
    while s:
        first = s[0:1]

        if first == '\\':
            r[-1] = r[-1] + s[:2]
            s = s[2:]
        else:

            if first == separator:
                r.append('')
                s = s[1:]
                while s[0:1] == ' ':
                    s = s[1:]
            else:
                r[-1] = r[-1] + first
                s = s[1:]

    return r


class InvalidRelativeDistinguishedName(ldaperrors.LDAPInvalidDNSyntax):
    """
    Invalid relative distinguished name.
    """

    def __init__(self, rdn, reason=None):
        self.rdn = rdn
        self.reason = reason
        message = "Invalid relative distinguished name %r" % (rdn,)
        if reason:
            message = "%s: %s" % (message, reason)
        ldaperrors.LDAPInvalidDNSyntax.__init__(self, message)

    def __str__(self):
        return self.message + "."


class LDAPAttributeTypeAndValue:
    attributeType = None
    value = None

    def __init__(self, stringValue=None, attributeType=None, value=None):
        if stringValue is None:
            assert attributeType is not None
            assert value is not None
            self.attributeType = to_unicode(attributeType)
            self.value = to_unicode(value)
        else:
            assert attributeType is None
            assert value is None

            stringValue = to_unicode(stringValue)

            # attribute types never contain a backslash, so the first
            # "=" always ends the type
            if '=' not in stringValue:
                raise InvalidRelativeDistinguishedName(
                    stringValue, 'missing "="')
            attributeType, value = stringValue.split('=', 1)
            attributeType = attributeType.strip()
            if not _attributeTypePattern.match(attributeType):
                raise InvalidRelativeDistinguishedName(
                    stringValue,
                    'invalid attribute type %r' % (attributeType,))
            if value.startswith('#'):
                encoded = value[1:]
                if (not encoded or len(encoded) % 2
                        or any(c not in hexDigits for c in encoded)):
                    raise InvalidRelativeDistinguishedName(
                        stringValue, 'invalid hex-encoded value')
            else:
                value = unescape(value)
            self.attributeType = attributeType
            self.value = value

    def getText(self):
        return '='.join((escape(self.attributeType), escape(self.value)))

    __str__ = getText

    def __repr__(self):
        return (self.__class__.__name__
                + '(attributeType='
                + repr(self.attributeType)
                + ', value='
                + repr(self.value)
                + ')')

    def __hash__(self):
        return hash((self.attributeType.lower(), self.value.lower()))

    def __eq__(self, other):
        if not isinstance(other, LDAPAttributeTypeAndValue):
            return NotImplemented
        return (self.attributeType.lower() == other.attributeType.lower()
                and self.value.lower() == other.value.lower())

    def __ne__(self, other):
        return not (self == other)


class RelativeDistinguishedName:
    """LDAP Relative Distinguished Name."""

    attributeTypesAndValues = None

    def __init__(self, magic=None, stringValue=None, attributeTypesAndValues=None):
        if magic is not None:
            assert stringValue is None
            assert attributeTypesAndValues is None
            if isinstance(magic, RelativeDistinguishedName):
                attributeTypesAndValues = magic.split()
            elif isinstance(magic, (bytes, str)):
                stringValue = magic
            else:
                attributeTypesAndValues = magic

        if stringValue is None:
            assert attributeTypesAndValues is not None
            assert not isinstance(attributeTypesAndValues, (bytes, str))
            self.attributeTypesAndValues = tuple(attributeTypesAndValues)
        else:
            assert attributeTypesAndValues is None
            stringValue = to_unicode(stringValue)
            parts = _splitOnNotEscaped(stringValue, '+')
            if not parts:
                raise InvalidRelativeDistinguishedName(
                    stringValue, 'empty relative distinguished name')
            self.attributeTypesAndValues = tuple(
                [LDAPAttributeTypeAndValue(stringValue=x) for x in parts])

    def split(self):
        return self.attributeTypesAndValues

    def getAttributeNames(self):
        """Attribute types named in this RDN, in order of appearance."""
        return [x.attributeType for x in self.attributeTypesAndValues]

    def hasAttribute(self, name):
        name = to_unicode(name).lower()
        for x in self.attributeTypesAndValues:
            if x.attributeType.lower() == name:
                return True
        return False

    def getText(self):
        return '+'.join([x.getText() for x in self.attributeTypesAndValues])

    __str__ = getText

    def __repr__(self):
        return (self.__class__.__name__
                + '(attributeTypesAndValues='
                + repr(self.attributeTypesAndValues)
                + ')')

    def __hash__(self):
        return hash(self.attributeTypesAndValues)

    def __eq__(self, other):
        if not isinstance(other, RelativeDistinguishedName):
            return NotImplemented
        return self.split() == other.split()

    def __ne__(self, other):
        return not (self == other)

    def count(self):
        return len(self.attributeTypesAndValues)


class DistinguishedName:
    """LDAP Distinguished Name."""
    listOfRDNs = None

    def __init__(self, magic=None, stringValue=None, listOfRDNs=None):
        assert (magic is not None
                or stringValue is not None
                or listOfRDNs is not None)
        if magic is not None:
            assert stringValue is None
            assert listOfRDNs is None
            if isinstance(magic, DistinguishedName):
                listOfRDNs = magic.split()
            elif isinstance(magic, (bytes, str)):
                stringValue = magic
            else:
                listOfRDNs = magic

        if stringValue is None:
            assert listOfRDNs is not None
            for x in listOfRDNs:
                assert isinstance(x, RelativeDistinguishedName)
            self.listOfRDNs = tuple(listOfRDNs)
        else:
            assert listOfRDNs is None
            self.listOfRDNs = tuple([RelativeDistinguishedName(stringValue=x)
                                     for x in _splitOnNotEscaped(to_unicode(stringValue), ',')])

    def split(self):
        return self.listOfRDNs

    def getRDN(self):
        """
        The leftmost RDN, which names the entry among its siblings,
        or None for the empty (root) DN.
        """
        if not self.listOfRDNs:
            return None
        return self.listOfRDNs[0]

    def up(self):
        return DistinguishedName(listOfRDNs=self.listOfRDNs[1:])

    def getText(self):
        return ','.join([x.getText() for x in self.listOfRDNs])

    __str__ = getText

    def __repr__(self):
        return (self.__class__.__name__
                + '(listOfRDNs='
                + repr(self.listOfRDNs)
                + ')')

    def __hash__(self):
        return hash(self.getText().lower())

    def __eq__(self, other):
        if isinstance(other, bytes):
            return self.getText().encode('utf-8') == other
        if isinstance(other, str):
            return self.getText() == other
        if not isinstance(other, DistinguishedName):
            return NotImplemented
        return self.split() == other.split()

    def __ne__(self, other):
        return not (self == other)
