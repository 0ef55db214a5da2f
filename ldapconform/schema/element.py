"""
Behaviour shared by all schema definition kinds.

Each kind is a small value class listing the keywords it understands
in C{_keywords}; L{SchemaElement} drives the parse, provides the
common accessors and implements equality and hashing on top of the
kind's own C{_comparisonKey}.
"""

from ldapconform._encoder import to_unicode
from ldapconform.protocols.ldap import ldaperrors
from ldapconform.schema import grammar


class SchemaElement:
    """
    Mixin for schema definitions.

    Subclasses set C{_keywords}, a mapping of lower-cased keyword to
    C{(attributeName, reader)}. A callable reader is called with the
    text and position after the keyword; any other reader is the value
    stored when the keyword is present, as for flags like OBSOLETE.
    """

    _keywords = {}

    oid = None
    names = ()
    desc = None
    obsolete = False
    extensions = None

    def _setCommon(self, oid, names, desc, obsolete, extensions):
        self.oid = to_unicode(oid)
        self.names = tuple(to_unicode(n) for n in names or ())
        self.desc = to_unicode(desc)
        self.obsolete = bool(obsolete)
        self.extensions = {
            to_unicode(k): tuple(to_unicode(v) for v in vs)
            for k, vs in (extensions or {}).items()}
        self._text = None

    @classmethod
    def _parse(cls, text):
        """
        Split a definition string into its OID, the keyword values and
        the X- extensions.

        @return: (oid, dict of attribute name to value, extensions)

        @raise LDAPDecodingError: on any deviation from the grammar.
        """
        text = to_unicode(text).strip()
        if not text:
            raise grammar.decodingError(text, 0, "empty definition")
        if text[0] != '(':
            raise grammar.decodingError(text, 0, "definition must start with '('")

        pos = grammar.skipSpaces(text, 1)
        oid, pos = grammar.readOID(text, pos)

        values = {}
        extensions = {}
        while True:
            token, pos = grammar.readToken(text, pos)
            lowerToken = token.lower()

            if token == ')':
                if pos < len(text):
                    raise grammar.decodingError(
                        text, pos, "closing parenthesis is not at the end")
                break

            if lowerToken.startswith('x-'):
                if token in extensions:
                    raise grammar.decodingError(
                        text, pos, "duplicate extension %s" % token)
                pos = grammar.skipSpaces(text, pos)
                extensionValues, pos = grammar.readQDStrings(text, pos)
                extensions[token] = extensionValues
                continue

            try:
                attribute, reader = cls._keywords[lowerToken]
            except KeyError:
                raise grammar.decodingError(
                    text, pos, "unexpected token %r" % token)
            if attribute in values:
                raise grammar.decodingError(
                    text, pos, "multiple %s elements" % token.upper())

            if callable(reader):
                pos = grammar.skipSpaces(text, pos)
                values[attribute], pos = reader(text, pos)
            else:
                values[attribute] = reader

        return oid, values, extensions

    @classmethod
    def fromString(cls, text):
        """
        Parse a definition string.

        @type text: str or bytes

        @raise LDAPDecodingError: if the text is not a valid definition
        of this kind.
        """
        oid, values, extensions = cls._parse(text)
        return cls._fromParsed(to_unicode(text).strip(), oid, values, extensions)

    @classmethod
    def _fromParsed(cls, text, oid, values, extensions):
        return cls(oid, extensions=extensions, **values)

    def getNameOrOID(self):
        if self.names:
            return self.names[0]
        return self.oid

    def hasNameOrOID(self, s):
        s = to_unicode(s).lower()
        if s == self.oid.lower():
            return True
        for name in self.names:
            if s == name.lower():
                return True
        return False

    def getNamesAndOID(self):
        """Every lower-cased identifier this element is known by."""
        return (self.oid.lower(),) + tuple(n.lower() for n in self.names)

    def getText(self):
        if self._text is None:
            self._text = self._render()
        return self._text

    __str__ = getText

    def toWire(self):
        return self.getText().encode('utf-8')

    def _render(self):
        raise NotImplementedError("_render method is not implemented")

    def _renderCommon(self, buf):
        if len(self.names) == 1:
            buf.append(" NAME '%s'" % grammar.encodeValue(self.names[0]))
        elif self.names:
            buf.append(" NAME (")
            for name in self.names:
                buf.append(" '%s'" % grammar.encodeValue(name))
            buf.append(" )")
        if self.desc is not None:
            buf.append(" DESC '%s'" % grammar.encodeValue(self.desc))
        if self.obsolete:
            buf.append(" OBSOLETE")

    def _renderOIDs(self, buf, keyword, values):
        if len(values) == 1:
            buf.append(" %s %s" % (keyword, values[0]))
        elif values:
            buf.append(" %s ( %s )" % (keyword, " $ ".join(values)))

    def _renderExtensions(self, buf):
        for name, values in self.extensions.items():
            buf.append(" %s" % name)
            if len(values) == 1:
                buf.append(" '%s'" % grammar.encodeValue(values[0]))
            else:
                buf.append(" (")
                for value in values:
                    buf.append(" '%s'" % grammar.encodeValue(value))
                buf.append(" )")

    def _comparisonKey(self):
        """Kind-specific fields, normalized for comparison."""
        return ()

    def _fullComparisonKey(self):
        return (
            self.oid.lower(),
            _lowerSet(self.names),
            None if self.desc is None else self.desc.lower(),
            self.obsolete,
            {k: sorted(v) for k, v in self.extensions.items()},
            self._comparisonKey(),
        )

    def __hash__(self):
        return hash(self.oid.lower())

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._fullComparisonKey() == other._fullComparisonKey()

    def __ne__(self, other):
        return not (self == other)

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        if self.names and other.names:
            return self.names[0].upper() < other.names[0].upper()
        return self.oid < other.oid

    def __repr__(self):
        return "<%s oid=%r names=%r>" % (
            self.__class__.__name__, self.oid, self.names)


def _lowerSet(values):
    return frozenset(to_unicode(v).lower() for v in values or ())


def _lower(value):
    if value is None:
        return None
    return value.lower()


class SchemaCycleError(ldaperrors.LDAPLocalError):
    """
    A chain of superior definitions loops back onto itself.

    @ivar path: identifiers along the loop, the repeated one last.
    """

    def __init__(self, kind, path):
        self.kind = kind
        self.path = tuple(path)
        ldaperrors.LDAPLocalError.__init__(
            self, "%s superior chain is cyclic: %s"
            % (kind, " -> ".join(self.path)))
