"""
Scanning primitives for the save file JSON

Save files hold tens of megabytes of compact JSON, and the fixer only
needs a handful of values from it. Instead of parsing everything into a
tree, this module walks the raw bytes to find the few offsets we need:

- the quote that closes (or opens) a string
- the brace or bracket that closes (or opens) an object or array
- the key/value pairs of a single object, starting from any of its keys

All offsets are byte offsets into the text, so the rewriter can splice new
values in at exactly the right place.

The text is assumed to be valid JSON written without optional whitespace,
which is how Motorsport Manager writes it. Anything that cannot be walked
raises MalformedTextError; there is no attempt to recover.
"""

import re
from itertools import chain
from typing import Iterator, Optional, Tuple

from .errors import MalformedTextError

_QUOTE = ord('"')
_BACKSLASH = ord('\\')
_COLON = ord(':')
_COMMA = ord(',')
_OPEN_BRACE = ord('{')
_CLOSE_BRACE = ord('}')
_OPEN_BRACKET = ord('[')
_CLOSE_BRACKET = ord(']')

_CLOSER_FOR = {_OPEN_BRACE: _CLOSE_BRACE, _OPEN_BRACKET: _CLOSE_BRACKET}
_OPENER_FOR = {_CLOSE_BRACE: _OPEN_BRACE, _CLOSE_BRACKET: _OPEN_BRACKET}

_STRUCTURAL = re.compile(rb'["{}\[\]]')
_VALUE_END = re.compile(rb'[,}]')

KeyValue = Tuple[bytes, int]


def _malformed() -> MalformedTextError:
    return MalformedTextError("invalid save file")


def string_between(text: bytes, a: int, b: int) -> bytes:
    """The bytes strictly between offsets a and b"""
    return bytes(text[a + 1:b])


def count_preceding_backslashes(text: bytes, offset: int, lower: int = 0) -> int:
    """Length of the run of backslashes ending just before offset"""
    i = offset
    while i > lower and text[i - 1] == _BACKSLASH:
        i -= 1
    return offset - i


def find_closing_quote(text: bytes, opening: int) -> int:
    """
    Find the quote that closes the string opened at `opening`

    A quote closes the string when the run of backslashes in front of it
    has even length, i.e. when it is not itself escaped.
    """
    i = opening
    while True:
        i = text.find(b'"', i + 1)
        if i < 0:
            raise _malformed()
        if count_preceding_backslashes(text, i, opening + 1) % 2 == 0:
            return i


def rfind_opening_quote(text: bytes, closing: int) -> int:
    """
    Find the quote that opens the string closed at `closing`

    Walking backwards, a quote preceded by an odd number of backslashes is
    escaped and skipped. One preceded by an even, nonzero number would be a
    delimiter sitting behind backslashes, which valid JSON never contains.
    """
    i = closing - 1
    while i >= 0:
        i = text.rfind(b'"', 0, i + 1)
        if i < 0:
            break
        escape_count = count_preceding_backslashes(text, i)
        if escape_count == 0:
            return i
        if escape_count % 2 == 0:
            raise _malformed()
        i -= escape_count + 1
    raise _malformed()


def find_closing_brace(text: bytes, start: int, closer: int) -> int:
    """
    Find the `closer` ('}' or ']') that ends the current object or array

    `start` must be inside the object or array, outside any string and not
    inside a nested object or array.
    """
    stack = [closer]
    pos = start
    while True:
        match = _STRUCTURAL.search(text, pos)
        if match is None:
            raise _malformed()
        i = match.start()
        c = text[i]
        if c == _QUOTE:
            pos = find_closing_quote(text, i) + 1
            continue
        if c in _CLOSER_FOR:
            stack.append(_CLOSER_FOR[c])
        else:
            if c != stack[-1]:
                raise _malformed()
            stack.pop()
            if not stack:
                return i
        pos = i + 1


def rfind_opening_brace(text: bytes, start: int, opener: int) -> int:
    """
    Find the `opener` ('{' or '[') that starts the current object or array

    `start` must be inside the object or array, outside any string and not
    inside a nested object or array.
    """
    stack = [opener]
    i = start
    while i >= 0:
        c = text[i]
        if c == _QUOTE:
            i = rfind_opening_quote(text, i)
        elif c in _OPENER_FOR:
            stack.append(_OPENER_FOR[c])
        elif c in _CLOSER_FOR:
            if c != stack[-1]:
                raise _malformed()
            stack.pop()
            if not stack:
                return i
        i -= 1
    raise _malformed()


def find_matching_brace(text: bytes, offset: int) -> int:
    """Find the partner of the brace or bracket at offset, in either direction"""
    if 0 <= offset < len(text):
        c = text[offset]
        if c in _CLOSER_FOR and offset + 1 < len(text):
            return find_closing_brace(text, offset + 1, _CLOSER_FOR[c])
        if c in _OPENER_FOR and offset != 0:
            return rfind_opening_brace(text, offset - 1, _OPENER_FOR[c])
    raise _malformed()


def _find_value_end(text: bytes, value_start: int) -> int:
    c = text[value_start]
    if c == _QUOTE:
        return find_closing_quote(text, value_start)
    if c in _CLOSER_FOR:
        return find_matching_brace(text, value_start)

    # Number, true, false or null: runs up to the next ',' or '}'
    match = _VALUE_END.search(text, value_start + 1)
    if match is None:
        raise _malformed()
    return match.start() - 1


def _find_value_start(text: bytes, value_end: int) -> int:
    if value_end < 0:
        raise _malformed()
    c = text[value_end]
    if c == _QUOTE:
        return rfind_opening_quote(text, value_end)
    if c in _OPENER_FOR:
        return find_matching_brace(text, value_end)

    colon = text.rfind(b':', 0, value_end)
    if colon < 0:
        raise _malformed()
    return colon + 1


def iter_key_values_forward(text: bytes, anchor: int) -> Iterator[KeyValue]:
    """
    Yield (key, value_offset) for the key at `anchor` and every later
    sibling, in document order, up to the end of the object

    `anchor` must be the opening quote of a key. A value is only skipped
    once the consumer asks for the next pair, so breaking out early costs
    nothing.
    """
    size = len(text)
    i = anchor
    while i < size and text[i] == _QUOTE:
        key_end = find_closing_quote(text, i)
        if key_end + 2 >= size or text[key_end + 1] != _COLON:
            raise _malformed()
        value_start = key_end + 2

        yield string_between(text, i, key_end), value_start

        i = _find_value_end(text, value_start) + 1
        if i < size and text[i] == _COMMA:
            i += 1


def iter_key_values_backward(text: bytes, anchor: int) -> Iterator[KeyValue]:
    """
    Yield (key, value_offset) for every sibling before the key at `anchor`,
    nearest first, back to the start of the object
    """
    i = anchor - 1
    while i > 0 and text[i] != _OPEN_BRACE:
        if text[i] != _COMMA:
            raise _malformed()

        value_start = _find_value_start(text, i - 1)
        if value_start < 3 or text[value_start - 1] != _COLON or text[value_start - 2] != _QUOTE:
            raise _malformed()

        key_end = value_start - 2
        key_start = rfind_opening_quote(text, key_end)
        if key_start == 0:
            raise _malformed()

        yield string_between(text, key_start, key_end), value_start

        i = key_start - 1


def iter_sibling_key_values(text: bytes, anchor: int) -> Iterator[KeyValue]:
    """
    Yield every key/value pair of the object containing the key at `anchor`

    Pairs from the anchor to the end of the object come first, in document
    order, then the pairs before the anchor in reverse document order.
    """
    return chain(iter_key_values_forward(text, anchor), iter_key_values_backward(text, anchor))


def iter_key_values_in_object(text: bytes, opening_brace: int) -> Iterator[KeyValue]:
    """Yield every key/value pair of the object opened at `opening_brace`"""
    start = opening_brace + 1
    if start < len(text) and text[opening_brace] == _OPEN_BRACE:
        c = text[start]
        if c == _QUOTE:
            yield from iter_key_values_forward(text, start)
            return
        if c == _CLOSE_BRACE:
            return
    raise _malformed()


def lookup_value_in_object(text: bytes, opening_brace: int, key: bytes) -> Optional[int]:
    """Offset of the value stored under `key` in the object, or None"""
    for found_key, value_offset in iter_key_values_in_object(text, opening_brace):
        if found_key == key:
            return value_offset
    return None
