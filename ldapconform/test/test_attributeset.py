"""
Test cases for ldapconform.attributeset
"""

from twisted.trial import unittest
from ldapconform import attributeset


class TestLDAPAttributeSet(unittest.TestCase):
    """
    Unit tests for LDAPAttributeSet.
    """
    def testEquality_True_Set(self):
        """
        Attributes are equal when the have the same key and value.
        """
        a = attributeset.LDAPAttributeSet('k', [b'b', b'c', b'd'])
        b = attributeset.LDAPAttributeSet('k', [b'b', b'c', b'd'])
        self.assertEqual(a, b)

    def testEquality_True_KeyCase(self):
        """
        The attribute description is compared ignoring case.
        """
        a = attributeset.LDAPAttributeSet('cn', [b'b'])
        b = attributeset.LDAPAttributeSet('CN', [b'b'])
        self.assertEqual(a, b)

    def testEquality_True_List_Ordering(self):
        """
        It can be compared with a list and in this case the key is
        ignored, as is the order of the elements.
        """
        a = attributeset.LDAPAttributeSet('k', [b'b', b'c', b'd'])
        b = [b'b', b'd', b'c']
        self.assertEqual(a, b)

    def testEquality_False_Value(self):
        a = attributeset.LDAPAttributeSet('k', [b'b', b'c', b'd'])
        b = attributeset.LDAPAttributeSet('k', [b'b', b'c', b'e'])
        self.assertNotEqual(a, b)

    def testEquality_False_Key(self):
        a = attributeset.LDAPAttributeSet('k', [b'b', b'c', b'd'])
        b = attributeset.LDAPAttributeSet('l', [b'b', b'c', b'd'])
        self.assertNotEqual(a, b)

    def testBaseName(self):
        a = attributeset.LDAPAttributeSet('cn;lang-en;binary', [b'x'])
        self.assertEqual(a.getBaseName(), 'cn')
        self.assertEqual(a.getOptions(), ('lang-en', 'binary'))
        self.failUnless(a.hasOptions())

    def testNoOptions(self):
        a = attributeset.LDAPAttributeSet('cn', [b'x'])
        self.assertEqual(a.getBaseName(), 'cn')
        self.assertEqual(a.getOptions(), ())
        self.failIf(a.hasOptions())

    def testDuplicateValues(self):
        a = attributeset.LDAPAttributeSet('k', [b'b', b'b'])
        self.assertEqual(len(a), 1)

    def testRepr(self):
        a = attributeset.LDAPAttributeSet('k', [b'c', b'b'])
        self.assertEqual(repr(a), "LDAPAttributeSet('k', [b'b', b'c'])")

    def testUnhashable(self):
        a = attributeset.LDAPAttributeSet('k', [b'b'])
        self.assertRaises(TypeError, hash, a)
