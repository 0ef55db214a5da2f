"""
Tokenizer shared by all schema definition kinds.

Every reader takes the definition text and the position to start at and
returns the value read along with the position just past it. Readers
raise L{LDAPDecodingError} for anything that does not follow the
RFC 4512 definition grammar::

    numericoid      = number 1*( DOT number )
    descr           = keystring
    oid             = descr / numericoid
    oidlist         = oid *( WSP DOLLAR WSP oid )
    oids            = oid / ( LPAREN WSP oidlist WSP RPAREN )

    qdescr          = SQUOTE descr SQUOTE
    qdescrlist      = [ qdescr *( SP qdescr ) ]
    qdescrs         = qdescr / ( LPAREN WSP qdescrlist WSP RPAREN )

    qdstring        = SQUOTE dstring SQUOTE
    dstring         = 1*( QS / QQ / QUTF8 )   ; escaped UTF-8 string
    QQ              = ESC %x32 %x37 ; "\\27"
    QS              = ESC %x35 ( %x43 / %x63 ) ; "\\5C" / "\\5c"
"""

import binascii

from ldapconform.protocols.ldap import ldaperrors

WHITESPACE = ' \t\r\n'

OID_CHARACTERS = frozenset(
    'abcdefghijklmnopqrstuvwxyz'
    'ABCDEFGHIJKLMNOPQRSTUVWXYZ'
    '0123456789-._{}')

HEX_DIGITS = frozenset('0123456789abcdefABCDEF')


def decodingError(text, pos, problem):
    return ldaperrors.LDAPDecodingError(
        "Unable to parse schema definition %r: %s at position %d"
        % (text, problem, pos))


def skipSpaces(text, pos):
    """
    Move past any whitespace.

    Running into the end of the text means the closing parenthesis of
    the definition is missing.
    """
    length = len(text)
    while pos < length and text[pos] in WHITESPACE:
        pos += 1
    if pos >= length:
        raise decodingError(text, pos, "no closing parenthesis")
    return pos


def readToken(text, pos):
    """
    Read a whitespace delimited keyword.

    A closing parenthesis glued to the end of a keyword, as in
    C{SINGLE-VALUE)}, is left unread so that the caller sees it as
    the next token.
    """
    pos = skipSpaces(text, pos)
    start = pos
    length = len(text)
    while pos < length and text[pos] not in WHITESPACE:
        pos += 1
    token = text[start:pos]
    if len(token) > 1 and token.endswith(')'):
        token = token[:-1]
        pos -= 1
    return token, pos


def readOID(text, pos):
    """
    Read a numeric OID or a descriptor.

    The value may be enclosed in a single pair of quotes, which are
    dropped. It ends at whitespace, a dollar sign or a closing
    parenthesis.
    """
    length = len(text)
    buf = []
    quoted = False
    closed = False
    while pos < length:
        c = text[pos]
        if c in WHITESPACE or c == '$' or c == ')':
            if not buf:
                raise decodingError(text, pos, "empty OID")
            if quoted and not closed:
                raise decodingError(text, pos, "unterminated quoted OID")
            return ''.join(buf), pos
        elif c in OID_CHARACTERS:
            if closed:
                raise decodingError(
                    text, pos, "unexpected character %r after quoted OID" % c)
            buf.append(c)
        elif c == "'":
            if not buf and not quoted:
                quoted = True
            elif buf and quoted and not closed:
                closed = True
            else:
                raise decodingError(text, pos, "unexpected quote in OID")
        else:
            raise decodingError(text, pos, "illegal character %r in OID" % c)
        pos += 1

    raise decodingError(text, pos, "no closing parenthesis after OID")


def _readEscapedBytes(text, pos):
    """
    Read a run of consecutive hex escapes starting just past the first
    backslash and decode it as a whole.

    Bytes that are not valid UTF-8 are kept one character per byte.
    """
    length = len(text)
    raw = bytearray()
    while True:
        pair = text[pos:pos + 2]
        if len(pair) != 2 or pair[0] not in HEX_DIGITS or pair[1] not in HEX_DIGITS:
            raise decodingError(text, pos, "invalid hex escape")
        raw.extend(binascii.unhexlify(pair))
        pos += 2
        if pos + 1 < length and text[pos] == '\\' and text[pos + 1] in HEX_DIGITS:
            pos += 1
        else:
            break

    try:
        return raw.decode('utf-8'), pos
    except UnicodeDecodeError:
        return raw.decode('latin-1'), pos


def readQDString(text, pos):
    """
    Read a single quoted description string, decoding hex escapes.
    """
    length = len(text)
    if text[pos] != "'":
        raise decodingError(text, pos, "expected a quoted string")
    pos += 1

    parts = []
    terminated = False
    while pos < length:
        c = text[pos]
        pos += 1
        if c == "'":
            terminated = True
            break
        elif c == '\\':
            if pos >= length:
                raise decodingError(text, pos, "trailing backslash")
            decoded, pos = _readEscapedBytes(text, pos)
            parts.append(decoded)
        else:
            parts.append(c)

    if not terminated or pos >= length:
        raise decodingError(text, pos, "no closing parenthesis")
    if text[pos] not in WHITESPACE and text[pos] != ')':
        raise decodingError(text, pos, "missing space after quoted string")

    value = ''.join(parts)
    if not value:
        raise decodingError(text, pos, "empty quoted string")
    return value, pos


def readQDStrings(text, pos):
    """
    Read either one quoted string or a parenthesized list of them.

    @return: list of strings, never empty.
    """
    length = len(text)
    if text[pos] == "'":
        value, pos = readQDString(text, pos)
        return [value], pos

    if text[pos] != '(':
        raise decodingError(text, pos, "expected a quoted string or a list")
    pos += 1

    values = []
    while True:
        pos = skipSpaces(text, pos)
        if text[pos] == ')':
            pos += 1
            break
        value, pos = readQDString(text, pos)
        values.append(value)

    if not values:
        raise decodingError(text, pos, "empty list of quoted strings")
    if pos >= length:
        raise decodingError(text, pos, "no closing parenthesis")
    if text[pos] not in WHITESPACE and text[pos] != ')':
        raise decodingError(text, pos, "missing space after list")
    return values, pos


def readOIDs(text, pos):
    """
    Read either one OID or a parenthesized, dollar separated list of
    them.

    @return: list of OIDs, never empty.
    """
    length = len(text)
    if text[pos] != '(':
        value, pos = readOID(text, pos)
        return [value], pos
    pos += 1

    values = []
    while True:
        pos = skipSpaces(text, pos)
        c = text[pos]
        if c == ')':
            pos += 1
            break
        if c == '$':
            if not values:
                raise decodingError(text, pos, "list starts with a dollar sign")
            pos = skipSpaces(text, pos + 1)
        elif values:
            raise decodingError(text, pos, "missing dollar sign between OIDs")
        value, pos = readOID(text, pos)
        values.append(value)

    if not values:
        raise decodingError(text, pos, "empty list of OIDs")
    if pos >= length:
        raise decodingError(text, pos, "no closing parenthesis")
    return values, pos


def readRuleIDs(text, pos):
    """
    Read either one rule ID or a parenthesized list of them.

    Both the RFC 4512 whitespace separated form and the dollar
    separated form of L{readOIDs} are accepted.

    @return: list of integers, never empty.
    """
    length = len(text)
    if text[pos] != '(':
        value, pos = readOID(text, pos)
        return [toRuleID(text, pos, value)], pos
    pos += 1

    values = []
    while True:
        pos = skipSpaces(text, pos)
        c = text[pos]
        if c == ')':
            pos += 1
            break
        if c == '$':
            if not values:
                raise decodingError(text, pos, "list starts with a dollar sign")
            pos = skipSpaces(text, pos + 1)
        value, pos = readOID(text, pos)
        values.append(toRuleID(text, pos, value))

    if not values:
        raise decodingError(text, pos, "empty list of rule IDs")
    if pos >= length:
        raise decodingError(text, pos, "no closing parenthesis")
    return values, pos


def toRuleID(text, pos, value):
    """Convert a token read with L{readOID} to an integer rule ID."""
    if not value.isdigit():
        raise decodingError(text, pos, "rule ID %r is not an integer" % value)
    return int(value)


def encodeValue(value):
    """
    Escape a string for use inside a quoted definition string.

    Quotes, backslashes and every character outside printable ASCII
    become hex escapes of their UTF-8 bytes, so that L{readQDString}
    gives back exactly the original value.
    """
    r = []
    for c in value:
        if c < ' ' or c > '~' or c == '\\' or c == "'":
            r.extend('\\%02x' % b for b in c.encode('utf-8'))
        else:
            r.append(c)
    return ''.join(r)
