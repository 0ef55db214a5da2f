import base64

from twisted.internet import error, protocol
from twisted.protocols import basic
from twisted.python import failure

from ldapconform import entry
from ldapconform._encoder import to_unicode, to_unicode_lenient


class LDIFParseError(Exception):
    """Error parsing LDIF."""

    def __str__(self):
        s = self.__doc__
        if self.args:
            s = ': '.join([s] + [str(to_unicode_lenient(x)) for x in self.args])
        return s + '.'


class LDIFLineWithoutSemicolonError(LDIFParseError):
    """LDIF line without semicolon seen"""
    pass


class LDIFEntryStartsWithNonDNError(LDIFParseError):
    """LDIF entry starts with a non-DN line"""
    pass


class LDIFEntryStartsWithSpaceError(LDIFParseError):
    """Invalid LDIF value format"""
    pass


class LDIFVersionNotANumberError(LDIFParseError):
    """Non-numeric LDIF version number"""
    pass


class LDIFUnsupportedVersionError(LDIFParseError):
    """LDIF version not supported"""
    pass


class LDIFUnsupportedURLValueError(LDIFParseError):
    """LDIF values read from URLs are not supported"""
    pass


HEADER = 'HEADER'
WAIT_FOR_DN = 'WAIT_FOR_DN'
IN_ENTRY = 'IN_ENTRY'


class LDIF(basic.LineReceiver):
    delimiter = b'\n'
    MAX_LENGTH = 1024 * 1024
    mode = HEADER

    dn = None
    data = None
    lastLine = None

    version = None

    def logicalLineReceived(self, line):
        if line.startswith(b'#'):
            # comments are allowed everywhere
            return
        getattr(self, 'state_' + self.mode)(line)

    def lineReceived(self, line):
        if line.endswith(b'\r'):
            line = line[:-1]
        if line.startswith(b' '):
            if self.lastLine is None:
                raise LDIFEntryStartsWithSpaceError()
            self.lastLine = self.lastLine + line[1:]
        else:
            if self.lastLine is not None:
                self.logicalLineReceived(self.lastLine)
            self.lastLine = line
            if line == b'':
                self.logicalLineReceived(line)
                self.lastLine = None

    def parseValue(self, val):
        if val.startswith(b':'):
            return base64.b64decode(val[1:].lstrip(b' '))
        elif val.startswith(b'<'):
            raise LDIFUnsupportedURLValueError(val[1:].strip())
        else:
            return val.lstrip(b' ')

    def _parseLine(self, line):
        try:
            key, val = line.split(b':', 1)
        except ValueError:
            # unpack list of wrong size
            # -> invalid input data
            raise LDIFLineWithoutSemicolonError(line)
        val = self.parseValue(val)
        return to_unicode(key), val

    def state_HEADER(self, line):
        if line == b'':
            return

        key, val = self._parseLine(line)
        self.mode = WAIT_FOR_DN

        if key != 'version':
            self.logicalLineReceived(line)
        else:
            try:
                version = int(val)
            except ValueError:
                raise LDIFVersionNotANumberError(val)
            self.version = version
            if version > 1:
                raise LDIFUnsupportedVersionError(version)

    def state_WAIT_FOR_DN(self, line):
        assert self.dn is None, 'self.dn must not be set when waiting for DN'
        assert self.data is None, 'self.data must not be set when waiting for DN'
        if line == b'':
            # too many empty lines, but be tolerant
            return

        key, val = self._parseLine(line)

        if key.upper() != 'DN':
            raise LDIFEntryStartsWithNonDNError(line)

        self.dn = to_unicode(val)
        self.data = {}
        self.mode = IN_ENTRY

    def state_IN_ENTRY(self, line):
        assert self.dn is not None, 'self.dn must be set when in entry'
        assert self.data is not None, 'self.data must be set when in entry'

        if line == b'':
            # end of entry
            self.mode = WAIT_FOR_DN
            o = entry.BaseLDAPEntry(dn=self.dn,
                                    attributes=self.data)
            self.dn = None
            self.data = None
            self.gotEntry(o)
            return

        key, val = self._parseLine(line)

        if key not in self.data:
            self.data[key] = []

        self.data[key].append(val)

    def gotEntry(self, obj):
        pass

    def connectionLost(self, reason=protocol.connectionDone):
        # the end of input also ends the last line and the last entry
        rest = self.clearLineBuffer()
        if rest:
            self.lineReceived(rest)
        if self.lastLine is not None:
            self.lineReceived(b'')


class StoreParsedLDIF(LDIF):
    """LDIF parser keeping every entry it sees in C{seen}."""

    def __init__(self):
        self.done = False
        self.seen = []

    def gotEntry(self, obj):
        self.seen.append(obj)

    def connectionLost(self, reason=protocol.connectionDone):
        LDIF.connectionLost(self, reason)
        self.done = True


def fromLDIFFile(f):
    """
    Read all entries of an LDIF file.

    @param f: file opened in binary mode.

    @return: list of BaseLDAPEntry, in file order.

    @raise LDIFParseError: if the file is not valid LDIF.
    """
    parser = StoreParsedLDIF()
    while 1:
        data = f.read(8192)
        if not data:
            break
        parser.dataReceived(data)
    parser.connectionLost(failure.Failure(error.ConnectionDone()))

    assert parser.done
    return parser.seen


def fromLDIFPath(path):
    """Read all entries of the LDIF file at path."""
    with open(path, 'rb') as f:
        return fromLDIFFile(f)
