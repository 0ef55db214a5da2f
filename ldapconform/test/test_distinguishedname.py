"""
Test cases for ldapconform.protocols.ldap.distinguishedname module.
"""

from twisted.trial import unittest
from ldapconform.protocols.ldap import distinguishedname as dn
from ldapconform.protocols.ldap import ldaperrors


class TestCaseWithKnownValues(unittest.TestCase):
    knownValues = ()

    def testKnownValues(self):
        for s, l in self.knownValues:
            fromString = dn.DistinguishedName(s)
            listOfRDNs = []
            for av in l:
                listOfAttributeTypesAndValues = []
                for a, v in av:
                    listOfAttributeTypesAndValues.append(
                        dn.LDAPAttributeTypeAndValue(attributeType=a, value=v))
                r = dn.RelativeDistinguishedName(listOfAttributeTypesAndValues)
                listOfRDNs.append(r)
            fromList = dn.DistinguishedName(listOfRDNs)

            self.assertEqual(fromString, fromList)

            fromStringToText = fromString.getText()
            fromListToText = fromList.getText()

            assert fromStringToText == fromListToText

            canon = fromStringToText
            self.assertEqual(fromString, canon)
            self.assertEqual(fromList, canon)

            self.assertEqual(hash(fromString), hash(fromList))


class LDAPDistinguishedName_Escaping(TestCaseWithKnownValues):
    knownValues = (

        ('', []),

        ('cn=foo', [[('cn', 'foo')]]),

        (r'cn=\,bar', [[('cn', r',bar')]]),
        (r'cn=foo\,bar', [[('cn', r'foo,bar')]]),
        (r'cn=foo\,', [[('cn', r'foo,')]]),

        (r'cn=\+bar', [[('cn', r'+bar')]]),
        (r'cn=foo\+bar', [[('cn', r'foo+bar')]]),

        (r'cn=\"bar', [[('cn', r'"bar')]]),

        (r'cn=\\bar', [[('cn', r'\bar')]]),
        (r'cn=foo\\', [[('cn', 'foo\\')]]),

        (r'cn=foo\<bar', [[('cn', r'foo<bar')]]),
        (r'cn=foo\>bar', [[('cn', r'foo>bar')]]),
        (r'cn=foo\;bar', [[('cn', r'foo;bar')]]),

        (r'cn=\#bar', [[('cn', r'#bar')]]),
        (r'cn=\ bar', [[('cn', r' bar')]]),
        (r'cn=bar\ ', [[('cn', r'bar ')]]),

        (r'cn=caf\c3\a9', [[('cn', 'café')]]),
        (r'cn=caf\C3\A9s', [[('cn', 'cafés')]]),

        (r'cn=test+owner=uid\=foo\,ou\=depar'
         + r'tment\,dc\=example\,dc\=com,dc=ex'
         + r'ample,dc=com', [[('cn', r'test'),
                              ('owner', r'uid=foo,ou=depart'
                               + r'ment,dc=example,dc=com'),
                              ],
                             [('dc', r'example')],
                             [('dc', r'com')]]),

        (r'cn=bar, dc=example, dc=com', [[('cn', 'bar')],
                                         [('dc', 'example')],
                                         [('dc', 'com')]]),
        (r'cn=bar,  dc=example,dc=com', [[('cn', 'bar')],
                                         [('dc', 'example')],
                                         [('dc', 'com')]]),

        )


class LDAPDistinguishedName_RFC4514_Examples(TestCaseWithKnownValues):
    knownValues = (

        ('UID=jsmith,DC=example,DC=net',
         [[('UID', 'jsmith')],
          [('DC', 'example')],
          [('DC', 'net')]]),

        ('OU=Sales+CN=J.  Smith,DC=example,DC=net',
         [[('OU', 'Sales'),
           ('CN', 'J.  Smith')],
          [('DC', 'example')],
          [('DC', 'net')]]),

        (r'CN=James \"Jim\" Smith\, III,DC=example,DC=net',
         [[('CN', 'James "Jim" Smith, III')],
          [('DC', 'example')],
          [('DC', 'net')]]),

        (r'CN=Before\0dAfter,DC=example,DC=net',
         [[('CN', 'Before\x0dAfter')],
          [('DC', 'example')],
          [('DC', 'net')]]),

        ('1.3.6.1.4.1.1466.0=#FE04024869',
         [[('1.3.6.1.4.1.1466.0', '#FE04024869')]]),

        ('OID.2.5.4.3=foo',
         [[('OID.2.5.4.3', 'foo')]]),
        )


class LDAPDistinguishedName_UTF8_Init(TestCaseWithKnownValues):
    """
    It can be initialized from UTF-8 encoded data.
    """
    knownValues = (
        ('SN=Lučić'.encode('utf-8'),
         [[(b'SN', 'Lučić'.encode('utf-8'))]]),
        )


class LDAPDistinguishedName_Malformed(unittest.TestCase):
    badValues = (
        'foo',
        'foo,dc=com',
        'ou=something,foo',
        '=foo',
        '1cn=foo',
        'cn=foo,,dc=com',
        'cn=foo\\',
        r'cn=\4',
        r'cn=\c3',
        'cn=#',
        'cn=#0',
        'cn=#zz',
        )

    def testMalformed(self):
        for value in self.badValues:
            self.assertRaises(dn.InvalidRelativeDistinguishedName,
                              dn.DistinguishedName,
                              value)

    def testIsInvalidDNSyntax(self):
        e = self.assertRaises(ldaperrors.LDAPInvalidDNSyntax,
                              dn.DistinguishedName,
                              'foo')
        self.assertEqual(e.resultCode, 34)

    def testMessage(self):
        e = self.assertRaises(dn.InvalidRelativeDistinguishedName,
                              dn.DistinguishedName,
                              'foo')
        self.assertEqual(e.rdn, 'foo')
        self.assertEqual(
            e.message, 'Invalid relative distinguished name \'foo\': '
            'missing "="')
        self.assertEqual(
            str(e), 'Invalid relative distinguished name \'foo\': '
            'missing "=".')


class LDAPDistinguishedName_Prettify(unittest.TestCase):
    def testPrettifySpaces(self):
        """DistinguishedName(...).getText() prettifies the DN by removing extra whitespace."""
        d = dn.DistinguishedName('cn=foo, o=bar,  c=us')
        assert d.getText() == 'cn=foo,o=bar,c=us'

    def testControlCharacters(self):
        ava = dn.LDAPAttributeTypeAndValue(attributeType='cn',
                                           value='a\nb')
        self.assertEqual(ava.getText(), r'cn=a\0Ab')


class DistinguishedName_Init(unittest.TestCase):
    def testGetText(self):
        d = dn.DistinguishedName('dc=example,dc=com')
        self.assertEqual(d.getText(), 'dc=example,dc=com')

    def testDN(self):
        proto = dn.DistinguishedName('dc=example,dc=com')
        d = dn.DistinguishedName(proto)
        self.assertEqual(d.getText(), 'dc=example,dc=com')

    def testEqualToByteString(self):
        """
        DistinguishedName is equal to its bytes representation
        """
        d = dn.DistinguishedName('dc=example,dc=com')
        self.assertEqual(d, b'dc=example,dc=com')

    def testEqualToString(self):
        """
        DistinguishedName is equal to its unicode representation
        """
        d = dn.DistinguishedName('dc=example,dc=com')
        self.assertEqual(d, 'dc=example,dc=com')

    def testEqualIgnoringCase(self):
        d1 = dn.DistinguishedName('CN=Foo,DC=Example')
        d2 = dn.DistinguishedName('cn=foo,dc=example')
        self.assertEqual(d1, d2)
        self.assertEqual(hash(d1), hash(d2))

    def testUp(self):
        d = dn.DistinguishedName('cn=foo,dc=example,dc=com')
        self.assertEqual(d.up(), dn.DistinguishedName('dc=example,dc=com'))


class DistinguishedName_RDN(unittest.TestCase):
    def testGetRDN(self):
        d = dn.DistinguishedName('cn=Bob+sn=Smith,dc=example,dc=com')
        self.assertEqual(d.getRDN(),
                         dn.RelativeDistinguishedName('cn=Bob+sn=Smith'))

    def testRootHasNoRDN(self):
        self.assertEqual(dn.DistinguishedName('').getRDN(), None)

    def testAttributeNames(self):
        rdn = dn.RelativeDistinguishedName('cn=Bob+SN=Smith')
        self.assertEqual(rdn.getAttributeNames(), ['cn', 'SN'])
        self.assertEqual(rdn.count(), 2)

    def testHasAttribute(self):
        rdn = dn.RelativeDistinguishedName('cn=Bob+SN=Smith')
        self.failUnless(rdn.hasAttribute('sn'))
        self.failUnless(rdn.hasAttribute(b'CN'))
        self.failIf(rdn.hasAttribute('uid'))


class RelativeDistinguishedName_Init(unittest.TestCase):
    def testGetText(self):
        rdn = dn.RelativeDistinguishedName('dc=example')
        self.assertEqual(rdn.getText(), 'dc=example')

    def testRDN(self):
        proto = dn.RelativeDistinguishedName('dc=example')
        rdn = dn.RelativeDistinguishedName(proto)
        self.assertEqual(rdn.getText(), 'dc=example')

    def testEmpty(self):
        self.assertRaises(dn.InvalidRelativeDistinguishedName,
                          dn.RelativeDistinguishedName, '')
