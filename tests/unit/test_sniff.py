"""
Unit tests for Content-Type sniffing.
"""

import gzip

import pytest

from httpencoder.http.sniff import (
    DEFAULT_CONTENT_TYPE,
    SNIFF_LEN,
    TEXT_PLAIN,
    _MaskedSig,
    _Signature,
    detect_content_type,
)


class TestDetectContentType:
    @pytest.mark.parametrize("data,expected", [
        (b"", TEXT_PLAIN),
        (b"Hello, World!", TEXT_PLAIN),
        (b'{"key": "value"}', TEXT_PLAIN),
        (b"<html><body>hi</body></html>", "text/html; charset=utf-8"),
        (b"  \n<!DOCTYPE html><html>", "text/html; charset=utf-8"),
        (b"<HTML>", "text/html; charset=utf-8"),
        (b"<p>para</p>", "text/html; charset=utf-8"),
        (b"<!-- comment -->", "text/html; charset=utf-8"),
        (b'<?xml version="1.0"?><a/>', "text/xml; charset=utf-8"),
        (b"%PDF-1.7\n", "application/pdf"),
        (b"%!PS-Adobe-3.0", "application/postscript"),
        (b"GIF89a\x01\x00", "image/gif"),
        (b"\x89PNG\r\n\x1a\n\x00\x00", "image/png"),
        (b"\xff\xd8\xff\xe0", "image/jpeg"),
        (b"RIFF\x00\x00\x00\x00WEBPVP8 ", "image/webp"),
        (b"ID3\x03\x00", "audio/mpeg"),
        (b"OggS\x00\x02", "application/ogg"),
        (b"wOFF\x00\x01", "font/woff"),
        (b"PK\x03\x04\x14\x00", "application/zip"),
        (b"\x00\x61\x73\x6d\x01\x00", "application/wasm"),
        (b"\xef\xbb\xbfhello", TEXT_PLAIN),
        (b"\xfe\xff\x00h", "text/plain; charset=utf-16be"),
        (b"\x00\x01\x02\x03binary", DEFAULT_CONTENT_TYPE),
    ])
    def test_signatures(self, data, expected):
        assert detect_content_type(data) == expected

    def test_gzip_body(self):
        assert detect_content_type(gzip.compress(b"hello")) == "application/x-gzip"

    def test_html_tag_needs_terminator(self):
        """'<a' must be followed by ' ' or '>' to count as HTML."""
        assert detect_content_type(b"<abbr>") == TEXT_PLAIN
        assert detect_content_type(b"<a href='x'>") == "text/html; charset=utf-8"

    def test_mp4(self):
        data = b"\x00\x00\x00\x18ftypmp42\x00\x00\x00\x00mp42isom"
        assert detect_content_type(data) == "video/mp4"

    def test_only_leading_bytes_inspected(self):
        """A binary byte past the sniff window does not change the result."""
        data = b"a" * SNIFF_LEN + b"\x00"
        assert detect_content_type(data) == TEXT_PLAIN

    def test_accepts_bytearray(self):
        assert detect_content_type(bytearray(b"%PDF-")) == "application/pdf"


class TestSignatureRows:
    def test_mask_length_must_match_pattern(self):
        with pytest.raises(ValueError, match="differ in length"):
            _MaskedSig(b"ID3", b"\xFF\xFF", "audio/mpeg")

    def test_row_must_implement_match(self):
        with pytest.raises(TypeError):
            _Signature()

    def test_masked_row_ignores_masked_bytes(self):
        row = _MaskedSig(b"RIFF\x00\x00\x00\x00WAVE", b"\xFF" * 4 + b"\x00" * 4 + b"\xFF" * 4, "audio/wave")
        assert row.match(b"RIFF\x12\x34\x56\x78WAVEfmt ", 0) == "audio/wave"
