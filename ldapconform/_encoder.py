"""
    Encoding / decoding utilities
"""


def to_bytes(value):
    """
    Converts value to its bytes representation:

    * Uses value`s toWire method if it has one
    * Encodes to utf-8 if the value is a unicode string
    * Otherwise wraps value into bytes()
    """
    if hasattr(value, "toWire"):
        return value.toWire()
    if isinstance(value, int):
        return str(value).encode("utf-8")
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


def to_unicode(value):
    """
    Converts string to unicode:

    * Decodes value from utf-8 if it is a byte string
    * Otherwise just returns the same value
    """
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def to_unicode_lenient(value):
    """
    Like L{to_unicode} but falls back to latin-1 for byte strings
    that are not valid utf-8, so arbitrary attribute values can
    be shown in messages.
    """
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return value.decode("latin-1")
    return value


def get_strings(value):
    """
    Getting tuple of available string values
    (byte string and unicode string) for
    given value
    """
    if isinstance(value, str):
        return value, value.encode("utf-8")
    if isinstance(value, bytes):
        return value, value.decode("utf-8")
    return (value,)
