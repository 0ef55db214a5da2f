"""
Test cases for ldapconform.schema.grammar module.
"""

from twisted.trial import unittest

from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema import grammar


class SkipSpaces(unittest.TestCase):
    def testAllWhitespace(self):
        """Spaces, tabs, carriage returns and line feeds are skipped."""
        self.assertEqual(grammar.skipSpaces("a \t\r\n b", 1), 6)

    def testNothingToSkip(self):
        self.assertEqual(grammar.skipSpaces("ab", 1), 1)

    def testEndOfText(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.skipSpaces, "a   ", 1)


class ReadToken(unittest.TestCase):
    def testPlain(self):
        self.assertEqual(grammar.readToken(" NAME 'cn'", 0), ("NAME", 5))

    def testGluedParenthesis(self):
        """A closing parenthesis at the end of a keyword is left unread."""
        self.assertEqual(grammar.readToken("SINGLE-VALUE) ", 0),
                         ("SINGLE-VALUE", 12))

    def testParenthesisAlone(self):
        self.assertEqual(grammar.readToken(" )", 0), (")", 2))


class ReadOID(unittest.TestCase):
    knownValues = [
        ("2.5.4.3 ", ("2.5.4.3", 7)),
        ("cn $ sn", ("cn", 2)),
        ("cn)", ("cn", 2)),
        ("'cn' ", ("cn", 4)),
        ("1.3.6.1.4.1.1466.115.121.1.15{32768} ",
         ("1.3.6.1.4.1.1466.115.121.1.15{32768}", 36)),
        ("x-my-attr ", ("x-my-attr", 9)),
    ]

    badValues = [
        "cn",
        " ",
        "c'n ",
        "'cn'x ",
        "'cn ",
        "c#n ",
        "'cn'' ",
    ]

    def testKnownValues(self):
        for text, expected in self.knownValues:
            self.assertEqual(grammar.readOID(text, 0), expected)

    def testBadValues(self):
        for text in self.badValues:
            self.assertRaises(ldaperrors.LDAPDecodingError,
                              grammar.readOID, text, 0)


class ReadOIDs(unittest.TestCase):
    def testSingle(self):
        self.assertEqual(grammar.readOIDs("top )", 0), (["top"], 3))

    def testList(self):
        self.assertEqual(grammar.readOIDs("( cn $ sn ) ", 0),
                         (["cn", "sn"], 11))

    def testListWithoutSpaces(self):
        self.assertEqual(grammar.readOIDs("(cn$sn$ou) ", 0),
                         (["cn", "sn", "ou"], 10))

    def testListOfOne(self):
        self.assertEqual(grammar.readOIDs("( cn ) ", 0), (["cn"], 6))

    def testMissingDollar(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readOIDs, "( cn sn ) ", 0)

    def testLeadingDollar(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readOIDs, "( $ cn ) ", 0)

    def testTrailingDollar(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readOIDs, "( cn $ ) ", 0)

    def testEmpty(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readOIDs, "( ) ", 0)

    def testUnterminated(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readOIDs, "( cn $ sn", 0)


class ReadQDString(unittest.TestCase):
    knownValues = [
        ("'person' ", ("person", 8)),
        ("'two words')", ("two words", 11)),
        ("'O\\27Reilly' ", ("O'Reilly", 12)),
        ("'back\\5cslash' ", ("back\\slash", 14)),
        ("'back\\5Cslash' ", ("back\\slash", 14)),
        ("'caf\\c3\\a9' ", ("café", 11)),
    ]

    badValues = [
        "person ",
        "'' ",
        "'person'",
        "'person'x ",
        "'person ",
        "'bad\\zz' ",
        "'bad\\2' ",
    ]

    def testKnownValues(self):
        for text, expected in self.knownValues:
            self.assertEqual(grammar.readQDString(text, 0), expected)

    def testBadValues(self):
        for text in self.badValues:
            self.assertRaises(ldaperrors.LDAPDecodingError,
                              grammar.readQDString, text, 0)

    def testInvalidUTF8(self):
        """Escaped bytes that are not UTF-8 are kept one per character."""
        self.assertEqual(grammar.readQDString("'\\e9' ", 0), ("é", 5))


class ReadQDStrings(unittest.TestCase):
    def testSingle(self):
        self.assertEqual(grammar.readQDStrings("'cn' )", 0), (["cn"], 4))

    def testList(self):
        self.assertEqual(grammar.readQDStrings("( 'cn' 'commonName' ) ", 0),
                         (["cn", "commonName"], 21))

    def testEmptyList(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readQDStrings, "( ) ", 0)

    def testNotQuoted(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readQDStrings, "cn ", 0)

    def testMissingSpaceAfterList(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readQDStrings, "( 'cn' )x ", 0)


class ReadRuleIDs(unittest.TestCase):
    def testSingle(self):
        self.assertEqual(grammar.readRuleIDs("3 )", 0), ([3], 1))

    def testSpaceSeparated(self):
        self.assertEqual(grammar.readRuleIDs("( 1 2 ) ", 0), ([1, 2], 7))

    def testDollarSeparated(self):
        self.assertEqual(grammar.readRuleIDs("( 1 $ 2 ) ", 0), ([1, 2], 9))

    def testNotANumber(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readRuleIDs, "( one ) ", 0)

    def testEmpty(self):
        self.assertRaises(ldaperrors.LDAPDecodingError,
                          grammar.readRuleIDs, "( ) ", 0)


class EncodeValue(unittest.TestCase):
    knownValues = [
        ("person", "person"),
        ("O'Reilly", "O\\27Reilly"),
        ("back\\slash", "back\\5cslash"),
        ("café", "caf\\c3\\a9"),
    ]

    def testKnownValues(self):
        for value, expected in self.knownValues:
            self.assertEqual(grammar.encodeValue(value), expected)

    def testReadBack(self):
        for value, _ in self.knownValues:
            text = "'%s' " % grammar.encodeValue(value)
            self.assertEqual(grammar.readQDString(text, 0)[0], value)
