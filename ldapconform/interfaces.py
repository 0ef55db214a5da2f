from zope.interface import Attribute, Interface


class ILDAPEntry(Interface):
    """
    Read-only view of a directory entry, as needed to check it against
    a schema.

    >>> o=BaseLDAPEntry(dn='cn=foo,dc=example,dc=com',
    ...     attributes={'objectClass': ['person'],
    ...     'cn': ['foo'], 'sn': ['bar'],
    ...     })
    >>> o.getObjectClassValues()
    ['person']

    """

    dn = Attribute("Distinguished name of the entry, as text.")

    def getParsedDN():
        """
        Parse the distinguished name of the entry.

        @return: a DistinguishedName

        @raise InvalidRelativeDistinguishedName: if the name is
        malformed.
        """

    def getObjectClassValues():
        """
        Get the values of the objectClass attribute as text, in
        sorted order. An entry without the attribute yields an
        empty list.
        """

    def getAttributes():
        """
        Iterate over all attributes of the entry, objectClass
        included, as LDAPAttributeSet instances whose C{key} is the
        attribute description and whose members are the raw values.
        """

    def __getitem__(key):
        """
        Get all values of an attribute.

        @raise KeyError: if the attribute is not present.
        """

    def get(key, default=None):
        """
        Get all values of an attribute, or default.
        """

    def __contains__(key):
        """
        Is the attribute present on the entry?
        """


class ISchemaElement(Interface):
    """
    A single schema definition: attribute syntax, attribute type,
    object class, DIT content rule, DIT structure rule, name form,
    matching rule or matching rule use.

    Definitions are values: they are parsed from or rendered to the
    RFC 4512 definition string, never modified after creation, and
    compare equal when their meaning is equal.
    """

    oid = Attribute("Identifier of the element, as text.")
    names = Attribute("Tuple of names, the first one preferred.")
    desc = Attribute("Description, or None.")
    obsolete = Attribute("Whether the element is marked OBSOLETE.")
    extensions = Attribute(
        "Mapping of X- extension names to tuples of values, in definition "
        "order.")

    def getNameOrOID():
        """
        The first name of the element, or its OID when it has no name.
        """

    def hasNameOrOID(s):
        """
        Is s, compared case-insensitively, one of the names or the OID
        of this element?
        """

    def getText():
        """
        Canonical definition string of the element.
        """

    def toWire():
        """
        Canonical definition string as UTF-8 bytes.
        """


class IMatchingRule(Interface):
    """
    Value normalization and comparison for one matching rule family.
    """

    oid = Attribute("OID of the equality rule.")
    names = Attribute("Tuple of names the rule is known by.")
    oids = Attribute("Every OID the rule is known by.")

    def normalize(value):
        """
        Normalize a raw value.

        @param value: the raw value.
        @type value: bytes

        @return: the normalized value, text for every rule except
        octet strings, which stay bytes.

        @raise LDAPInvalidAttributeSyntax: if the value is not valid
        for the syntax of this rule.
        """

    def valuesMatch(value1, value2):
        """
        Do the two raw values match under this rule?
        """

    def compareValues(value1, value2):
        """
        Order two raw values: negative, zero or positive.

        @raise LDAPInappropriateMatching: if the rule has no ordering.
        """
