class LDAPAttributeSet(set):
    def __init__(self, key, *a, **kw):
        """
        Represents all the values for an attribute in an LDAP entry. An entry
        might have "cn" or "objectClass" or "cn;lang-en" attributes, and this
        class represents each of those.

        You can find the attribute description (eg. "cn;lang-en") with the
        ``.key`` member variable, and the attribute type it names with
        ``getBaseName()``.

        You can find the raw values of the LDAP attribute by casting this to
        a ``list``.
        @param key: the attribute description, eg "uid".
        @type key: str
        @param args: set of values for this attribute, eg. b"jsmith"
        """
        self.key = key
        super().__init__(*a, **kw)

    def getBaseName(self):
        """The attribute type name, without any options."""
        return self.key.split(';', 1)[0]

    def getOptions(self):
        """Attribute options, such as "lang-en" or "binary"."""
        return tuple(self.key.split(';')[1:])

    def hasOptions(self):
        return ';' in self.key

    def __repr__(self):
        values = list(self)
        values.sort()
        attributes = ', '.join([repr(x) for x in values])
        return '%s(%r, [%s])' % (
            self.__class__.__name__,
            self.key,
            attributes)

    def __eq__(self, other):
        """
        Note that LDAPAttributeSets can also be compared against any
        iterator. In that case the attribute description is ignored.
        """
        if isinstance(other, LDAPAttributeSet):
            if self.key.lower() != other.key.lower():
                return False
            return super().__eq__(other)
        else:
            me = list(self)
            me.sort()
            him = list(other)
            him.sort()
            return me == him

    def __ne__(self, other):
        return not self == other

    __hash__ = None
