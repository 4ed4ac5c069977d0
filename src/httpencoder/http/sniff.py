"""
=============================================================================
CONTENT SNIFFING
=============================================================================

When the encode stage compresses a response whose handler never set a
Content-Type, the client can no longer guess the type from the bytes
(they are compressed now). So the stage sniffs the type from the
UNENCODED body first and sets it explicitly.

=============================================================================
THE ALGORITHM (WHATWG MIME Sniffing, "rules for identifying an unknown
MIME type", the same table browsers use)
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     SNIFFING, IN TABLE ORDER                        │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Look at no more than the first 512 bytes.                         │
    │                                                                      │
    │   1. HTML tags  "<html", "<p", "<!--" ...  (leading whitespace ok,  │
    │                  case-insensitive, must end with ' ' or '>')        │
    │   2. XML        "<?xml"                                              │
    │   3. Documents  "%PDF-", "%!PS-Adobe-"                               │
    │   4. BOMs       UTF-16 BE/LE, UTF-8                                  │
    │   5. Images     GIF, PNG, JPEG, BMP, ICO, WebP                       │
    │   6. Media      MP3, Ogg, MIDI, AVI, WAVE, AIFF, MP4, WebM           │
    │   7. Fonts      TTF, OTF, TTC, WOFF, WOFF2                           │
    │   8. Archives   gzip, zip, rar, wasm                                 │
    │   9. No binary control bytes?  → text/plain; charset=utf-8          │
    │  10. Otherwise                  → application/octet-stream          │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

An empty body sniffs as text/plain; charset=utf-8.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import List, Optional


# Only this many leading bytes are ever inspected
SNIFF_LEN = 512

DEFAULT_CONTENT_TYPE = "application/octet-stream"
TEXT_PLAIN = "text/plain; charset=utf-8"

_WHITESPACE = frozenset(b"\t\n\x0c\r ")
_TAG_TERMINATORS = frozenset(b" >")


class _Signature(ABC):
    """One row of the sniffing table."""

    @abstractmethod
    def match(self, data: bytes, first_non_ws: int) -> Optional[str]:
        """Content type for `data`, or None when this row does not apply."""


class _ExactSig(_Signature):
    """Plain prefix match."""

    def __init__(self, prefix: bytes, content_type: str):
        self.prefix = prefix
        self.content_type = content_type

    def match(self, data: bytes, first_non_ws: int) -> Optional[str]:
        if data.startswith(self.prefix):
            return self.content_type
        return None


class _MaskedSig(_Signature):
    """Prefix match after AND-ing each data byte with a mask byte."""

    def __init__(self, pattern: bytes, mask: bytes, content_type: str, skip_ws: bool = False):
        if len(pattern) != len(mask):
            raise ValueError(f"pattern and mask differ in length: {len(pattern)} != {len(mask)}")
        self.pattern = pattern
        self.mask = mask
        self.content_type = content_type
        self.skip_ws = skip_ws

    def match(self, data: bytes, first_non_ws: int) -> Optional[str]:
        if self.skip_ws:
            data = data[first_non_ws:]
        if len(data) < len(self.pattern):
            return None
        for i, expected in enumerate(self.pattern):
            if data[i] & self.mask[i] != expected:
                return None
        return self.content_type


class _HTMLSig(_Signature):
    """
    An HTML tag prefix: case-insensitive, after leading whitespace, and
    followed by a tag-terminating byte (' ' or '>').
    """

    content_type = "text/html; charset=utf-8"

    def __init__(self, tag: bytes):
        self.tag = tag

    def match(self, data: bytes, first_non_ws: int) -> Optional[str]:
        data = data[first_non_ws:]
        if len(data) < len(self.tag) + 1:
            return None
        for i, expected in enumerate(self.tag):
            actual = data[i]
            if ord("A") <= expected <= ord("Z"):
                actual &= 0xDF  # fold to uppercase
            if actual != expected:
                return None
        if data[len(self.tag)] not in _TAG_TERMINATORS:
            return None
        return self.content_type


class _MP4Sig(_Signature):
    """ISO base media file: an 'ftyp' box listing an 'mp4' brand."""

    def match(self, data: bytes, first_non_ws: int) -> Optional[str]:
        if len(data) < 12:
            return None
        box_size = int.from_bytes(data[:4], "big")
        if len(data) < box_size or box_size % 4 != 0:
            return None
        if data[4:8] != b"ftyp":
            return None
        for start in range(8, box_size, 4):
            if start == 12:
                continue  # minor version, not a brand
            if data[start:start + 3] == b"mp4":
                return "video/mp4"
        return None


class _TextSig(_Signature):
    """Anything without binary control bytes is plain text."""

    def match(self, data: bytes, first_non_ws: int) -> Optional[str]:
        for b in data[first_non_ws:]:
            if b <= 0x08 or b == 0x0B or 0x0E <= b <= 0x1A or 0x1C <= b <= 0x1F:
                return None
        return TEXT_PLAIN


_HTML_TAGS = [
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1",
    b"<DIV", b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B",
    b"<BODY", b"<BR", b"<P", b"<!--",
]

# Order matters: first match wins
_SIGNATURES: List[_Signature] = [
    *[_HTMLSig(tag) for tag in _HTML_TAGS],
    _MaskedSig(b"<?xml", b"\xFF\xFF\xFF\xFF\xFF", "text/xml; charset=utf-8", skip_ws=True),
    _ExactSig(b"%PDF-", "application/pdf"),
    _ExactSig(b"%!PS-Adobe-", "application/postscript"),

    # Byte order marks. Not skipping whitespace, a BOM must come first.
    _MaskedSig(b"\xFE\xFF\x00\x00", b"\xFF\xFF\x00\x00", "text/plain; charset=utf-16be"),
    _MaskedSig(b"\xFF\xFE\x00\x00", b"\xFF\xFF\x00\x00", "text/plain; charset=utf-16le"),
    _MaskedSig(b"\xEF\xBB\xBF\x00", b"\xFF\xFF\xFF\x00", TEXT_PLAIN),

    # Images
    _ExactSig(b"\x00\x00\x01\x00", "image/x-icon"),
    _ExactSig(b"\x00\x00\x02\x00", "image/x-icon"),
    _ExactSig(b"BM", "image/bmp"),
    _ExactSig(b"GIF87a", "image/gif"),
    _ExactSig(b"GIF89a", "image/gif"),
    _MaskedSig(
        b"RIFF\x00\x00\x00\x00WEBPVP",
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF\xFF\xFF",
        "image/webp",
    ),
    _ExactSig(b"\x89PNG\x0D\x0A\x1A\x0A", "image/png"),
    _ExactSig(b"\xFF\xD8\xFF", "image/jpeg"),

    # Audio and video
    _MaskedSig(
        b"FORM\x00\x00\x00\x00AIFF",
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF",
        "audio/aiff",
    ),
    _MaskedSig(b"ID3", b"\xFF\xFF\xFF", "audio/mpeg"),
    _MaskedSig(b"OggS\x00", b"\xFF\xFF\xFF\xFF\xFF", "application/ogg"),
    _MaskedSig(b"MThd\x00\x00\x00\x06", b"\xFF\xFF\xFF\xFF\xFF\xFF\xFF\xFF", "audio/midi"),
    _MaskedSig(
        b"RIFF\x00\x00\x00\x00AVI ",
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF",
        "video/avi",
    ),
    _MaskedSig(
        b"RIFF\x00\x00\x00\x00WAVE",
        b"\xFF\xFF\xFF\xFF\x00\x00\x00\x00\xFF\xFF\xFF\xFF",
        "audio/wave",
    ),
    _MP4Sig(),
    _ExactSig(b"\x1A\x45\xDF\xA3", "video/webm"),

    # Fonts
    _MaskedSig(b"\x00\x01\x00\x00", b"\xFF\xFF\xFF\xFF", "font/ttf"),
    _ExactSig(b"OTTO", "font/otf"),
    _ExactSig(b"ttcf", "font/collection"),
    _ExactSig(b"wOFF", "font/woff"),
    _ExactSig(b"wOF2", "font/woff2"),

    # Archives
    _ExactSig(b"\x1F\x8B\x08", "application/x-gzip"),
    _ExactSig(b"PK\x03\x04", "application/zip"),
    _ExactSig(b"Rar!\x1A\x07\x00", "application/x-rar-compressed"),
    _ExactSig(b"Rar!\x1A\x07\x01\x00", "application/x-rar-compressed"),
    _ExactSig(b"\x00\x61\x73\x6D", "application/wasm"),

    _TextSig(),
]


def detect_content_type(data: bytes) -> str:
    """
    Guess the Content-Type of a response body.

    Always returns a valid MIME type; application/octet-stream when
    nothing more specific matches.

    Examples:
        >>> detect_content_type(b"<html><body>hi</body></html>")
        'text/html; charset=utf-8'

        >>> detect_content_type(b"\\x89PNG\\r\\n\\x1a\\n....")
        'image/png'

        >>> detect_content_type(b'{"key": "value"}')
        'text/plain; charset=utf-8'
    """
    data = bytes(data[:SNIFF_LEN])

    first_non_ws = 0
    while first_non_ws < len(data) and data[first_non_ws] in _WHITESPACE:
        first_non_ws += 1

    for signature in _SIGNATURES:
        content_type = signature.match(data, first_non_ws)
        if content_type is not None:
            return content_type

    return DEFAULT_CONTENT_TYPE
