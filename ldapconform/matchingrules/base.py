from zope.interface import implementer

from ldapconform import interfaces
from ldapconform._encoder import to_bytes, to_unicode_lenient
from ldapconform.protocols.ldap import ldaperrors


def invalidValue(value, reason):
    return ldaperrors.LDAPInvalidAttributeSyntax(
        "value %r %s" % (to_unicode_lenient(to_bytes(value)), reason))


@implementer(interfaces.IMatchingRule)
class MatchingRule:
    """
    Base for the built-in matching rules.

    Subclasses set the OIDs and names of the equality rule and of the
    ordering and substring rules of the same family, and implement
    L{normalize}. A family without an ordering rule leaves
    C{orderingOID} as None.
    """

    oid = None
    names = ()
    aliasOIDs = ()
    orderingOID = None
    orderingNames = ()
    substringOID = None
    substringNames = ()

    @property
    def oids(self):
        return tuple(x for x in (self.oid,
                                 self.orderingOID,
                                 self.substringOID)
                     if x is not None) + tuple(self.aliasOIDs)

    def getAllNames(self):
        """Every name of every rule in this family."""
        return tuple(self.names) + tuple(self.orderingNames) + tuple(self.substringNames)

    def normalize(self, value):
        raise NotImplementedError("normalize method is not implemented")

    def valuesMatch(self, value1, value2):
        return self.normalize(value1) == self.normalize(value2)

    def compareValues(self, value1, value2):
        if self.orderingOID is None:
            raise ldaperrors.LDAPInappropriateMatching(
                "%s does not support ordering" % self.names[0])
        n1 = self.normalize(value1)
        n2 = self.normalize(value2)
        return (n1 > n2) - (n1 < n2)

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.names[0])
