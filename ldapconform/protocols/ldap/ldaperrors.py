# Copyright (C) 2001 Tommi Virtanen
#
# This library is free software; you can redistribute it and/or
# modify it under the terms of version 2.1 of the GNU Lesser General Public
# License as published by the Free Software Foundation.
#
# This library is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the GNU
# Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this library; if not, write to the Free Software
# Foundation, Inc., 59 Temple Place, Suite 330, Boston, MA  02111-1307  USA

from ldapconform._encoder import to_bytes


def get(resultCode, errorMessage):
    """Get an instance of the correct exception for this resultCode."""
    return LDAPExceptionCollection.get_instance(resultCode, errorMessage)


class LDAPExceptionCollection(type):
    """
    Storage for the LDAP result codes and
    the corresponding classes.
    """

    collection = {}

    def __new__(mcs, name, bases, attributes):
        cls = type.__new__(mcs, name, bases, attributes)
        code = attributes.get('resultCode')
        if code is not None:
            assert isinstance(code, int)
            assert isinstance(attributes.get('name'), bytes)
            mcs.collection[code] = cls
        return cls

    @classmethod
    def get_instance(mcs, code, message):
        """Get an instance of the correct exception for this result code."""
        cls = mcs.collection.get(code)
        if cls is not None:
            return cls(message)
        return LDAPUnknownError(code, message)


class LDAPResult(metaclass=LDAPExceptionCollection):
    resultCode = None
    name = None


class Success(LDAPResult):
    resultCode = 0
    name = b'success'

    def __init__(self, msg):
        pass


class LDAPException(Exception, LDAPResult):
    def __init__(self, message=None):
        Exception.__init__(self)
        self.message = message

    def __str__(self):
        return self.toWire().decode('utf-8')

    def toWire(self):
        if self.message:
            return b'%s: %s' % (self.name, to_bytes(self.message))
        if self.name:
            return self.name
        return b'Unknown LDAP error %r' % self


class LDAPUnknownError(LDAPException):
    def __init__(self, resultCode, message=None):
        assert resultCode not in LDAPExceptionCollection.collection, \
            "resultCode %r must be unknown" % resultCode
        self.code = resultCode
        LDAPException.__init__(self, message)

    def toWire(self):
        codeName = b'unknownError(%d)' % self.code
        if self.message:
            return b'%s: %s' % (codeName, to_bytes(self.message))
        else:
            return codeName

# 1-17 are not raised while working with schema


class LDAPInappropriateMatching(LDAPException):
    resultCode = 18
    name = b'inappropriateMatching'

# 19-20 are not raised while working with schema


class LDAPInvalidAttributeSyntax(LDAPException):
    resultCode = 21
    name = b'invalidAttributeSyntax'

# 22-33 are not raised while working with schema


class LDAPInvalidDNSyntax(LDAPException):
    resultCode = 34
    name = b'invalidDNSyntax'

# 35-64 are not raised while working with schema


class LDAPObjectClassViolation(LDAPException):
    resultCode = 65
    name = b'objectClassViolation'

# 66-80 are not raised while working with schema

# 81-90 reserved for APIs


class LDAPLocalError(LDAPException):
    resultCode = 82
    name = b'localError'


class LDAPDecodingError(LDAPException):
    resultCode = 84
    name = b'decodingError'


class LDAPParamError(LDAPException):
    resultCode = 89
    name = b'paramError'

