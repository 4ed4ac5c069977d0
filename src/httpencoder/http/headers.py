"""
=============================================================================
HEADER HANDLING
=============================================================================

Two things live here:

1. Headers - a case-insensitive header map for responses.
2. The header TOKENIZER used before scanning Accept-Encoding and
   Content-Encoding values.

=============================================================================
WHY TOKENIZE BEFORE SCANNING?
=============================================================================

Clients format these headers in every way the RFC allows (and some it
doesn't):

    Accept-Encoding: gzip, deflate, br
    Accept-Encoding: GZIP;q=1.0 ,  br ; q=0.5
    Content-Encoding:	Gzip ,deflate

The scanners in negotiation.py and the decode stage walk the value one byte
at a time. They get much simpler if every value is first squeezed into one
canonical shape:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    compact_and_lower()                              │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   b"GZIP;q=1.0 ,  br ; q=0.5"                                       │
    │        │                                                             │
    │        │  drop ' ' and '\\t', fold A-Z → a-z, in place              │
    │        ▼                                                             │
    │   b"gzip;q=1.0,br;q=0.5"                                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

It works IN PLACE on a bytearray: a write cursor trails the read cursor,
and the tail is cut off at the end. Running it twice gives the same bytes.

=============================================================================
"""

from collections import OrderedDict
from collections.abc import Mapping, MutableMapping
from typing import Iterable, Iterator, Optional, Tuple, Union


# ─────────────────────────────────────────────────────────────────────────
# BYTE CLASSES
# ─────────────────────────────────────────────────────────────────────────
# Only lowercase letters count as name bytes: values are tokenized first,
# so uppercase never reaches the scanners.
# ─────────────────────────────────────────────────────────────────────────

_SPACE = 0x20
_TAB = 0x09
_UPPER_A = ord("A")
_UPPER_Z = ord("Z")
_LOWER_A = ord("a")
_LOWER_Z = ord("z")
_DIGIT_0 = ord("0")
_DIGIT_9 = ord("9")
_CASE_OFFSET = _LOWER_A - _UPPER_A


def is_alpha(ch: int) -> bool:
    """True for a lowercase ASCII letter byte."""
    return _LOWER_A <= ch <= _LOWER_Z


def is_digit(ch: int) -> bool:
    """True for an ASCII digit byte."""
    return _DIGIT_0 <= ch <= _DIGIT_9


def compact_and_lower(value: bytearray) -> bytearray:
    """
    Tokenize a raw header value in place.

    Removes spaces and tabs, folds ASCII uppercase to lowercase and
    truncates the bytearray to what is left. Returns the same object.

    Args:
        value: Raw header bytes. Modified in place.

    Returns:
        ``value`` itself, now tokenized.

    Example:
        >>> compact_and_lower(bytearray(b"Gzip, BR;q=0.5"))
        bytearray(b'gzip,br;q=0.5')
    """
    true_end = 0

    for ch in value:
        if ch == _SPACE or ch == _TAB:
            continue

        if _UPPER_A <= ch <= _UPPER_Z:
            ch += _CASE_OFFSET

        # true_end never passes the read position, so this only ever
        # overwrites bytes that were already consumed
        value[true_end] = ch
        true_end += 1

    del value[true_end:]
    return value


def tokenize(value: Optional[Union[str, bytes]]) -> bytes:
    """
    Tokenize a header value as read from an HTTPRequest.

    Header text is encoded as latin-1; characters outside it become '?'
    which no scanner treats as part of a name.
    """
    if not value:
        return b""
    if isinstance(value, str):
        raw = bytearray(value.encode("latin-1", errors="replace"))
    else:
        raw = bytearray(value)
    return bytes(compact_and_lower(raw))


class Headers(MutableMapping):
    """
    A case-insensitive header map.

    HTTP header names are case-insensitive (RFC 7230), but a handler may
    write "content-encoding" while the middleware checks for
    "Content-Encoding". Lookups fold case; iteration yields the name as
    it was last set, which is also how it goes on the wire.

        headers = Headers()
        headers["Content-Type"] = "text/plain"
        headers["content-type"]         # 'text/plain'
        list(headers)                   # ['Content-Type']
    """

    def __init__(self, data: Optional[Union[Mapping, Iterable[Tuple[str, str]]]] = None, **kwargs):
        self._store: "OrderedDict[str, Tuple[str, str]]" = OrderedDict()
        self.update(data or {}, **kwargs)

    def __setitem__(self, key: str, value: str) -> None:
        # Lowercase key for lookups, original key kept for output
        self._store[key.lower()] = (key, value)

    def __getitem__(self, key: str) -> str:
        return self._store[key.lower()][1]

    def __delitem__(self, key: str) -> None:
        del self._store[key.lower()]

    def __iter__(self) -> Iterator[str]:
        return (cased_key for cased_key, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def lower_items(self) -> Iterator[Tuple[str, str]]:
        """Like items(), but with lowercase names."""
        return ((lower, pair[1]) for lower, pair in self._store.items())

    def discard(self, key: str) -> None:
        """Delete ``key`` if present."""
        self._store.pop(key.lower(), None)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mapping):
            return NotImplemented
        return dict(self.lower_items()) == dict(Headers(other).lower_items())

    def copy(self) -> "Headers":
        return Headers(self._store.values())

    def __repr__(self) -> str:
        return f"Headers({dict(self.items())!r})"
