from twisted.python.util import InsensitiveDict
from zope.interface import implementer

from ldapconform import interfaces, attributeset
from ldapconform._encoder import to_bytes, to_unicode, to_unicode_lenient, get_strings
from ldapconform.protocols.ldap import distinguishedname


@implementer(interfaces.ILDAPEntry)
class BaseLDAPEntry:
    dn = None
    _object_class_keys = set(get_strings("objectClass"))

    def __init__(self, dn, attributes={}):
        """

        Initialize the object.

        The distinguished name is kept as given and only parsed on
        demand, so that entries with malformed names can still be
        loaded and examined.

        @param dn: Distinguished Name of the object, as a string.

        @param attributes: Attributes of the object. A dictionary of
        attribute descriptions to list of attribute values.

        """
        self._attributes = InsensitiveDict()
        if isinstance(dn, distinguishedname.DistinguishedName):
            dn = dn.getText()
        self.dn = to_unicode(dn)

        for k, vs in attributes.items():
            k = to_unicode(k)
            if k not in self._attributes:
                self._attributes[k] = []
            self._attributes[k].extend(to_bytes(v) for v in vs)

        for k, vs in self._attributes.items():
            self._attributes[k] = self.buildAttributeSet(k, vs)

    def buildAttributeSet(self, key, values):
        return attributeset.LDAPAttributeSet(key, values)

    def getParsedDN(self):
        return distinguishedname.DistinguishedName(self.dn)

    def getObjectClassValues(self):
        for key in self._object_class_keys:
            if key in self._attributes:
                return sorted(to_unicode_lenient(v)
                              for v in self._attributes[key])
        return []

    def getAttributes(self):
        yield from self._attributes.values()

    def __getitem__(self, key):
        for k in get_strings(key):
            if k in self._attributes:
                return self._attributes[k]
        raise KeyError(key)

    def get(self, key, default=None):
        for k in get_strings(key):
            if k in self._attributes:
                return self._attributes[k]
        return default

    def has_key(self, key):
        for k in get_strings(key):
            if k in self._attributes:
                return True
        return False

    def __contains__(self, key):
        return self.has_key(key)

    def __iter__(self):
        yield from self._attributes.keys()

    def keys(self):
        return list(self._attributes.keys())

    def items(self):
        return [(key, self._attributes[key]) for key in self._attributes.keys()]

    def __eq__(self, other):
        if not isinstance(other, BaseLDAPEntry):
            return NotImplemented
        if self.dn.lower() != other.dn.lower():
            return False

        my = sorted(key.lower() for key in self)
        its = sorted(key.lower() for key in other)
        if my != its:
            return False
        for key in my:
            if self[key] != other[key]:
                return False
        return True

    def __ne__(self, other):
        return not self == other

    def __len__(self):
        return len(self._attributes)

    def __bool__(self):
        return True

    def __repr__(self):
        keys = sorted(key for key in self)
        a = []
        for key in keys:
            a.append("{}: {}".format(repr(key), repr(sorted(self[key]))))
        attributes = ", ".join(a)
        return "{}({}, {{{}}})".format(
            self.__class__.__name__, repr(self.dn), attributes)
