"""
Unit tests for header tokenizing and the Headers map.
"""

import pytest

from httpencoder.http.headers import Headers, compact_and_lower, is_alpha, is_digit, tokenize


class TestCompactAndLower:
    """Tests for the in-place tokenizer."""

    @pytest.mark.parametrize("raw,expected", [
        (b"gzip", b"gzip"),
        (b"GZIP", b"gzip"),
        (b"Gzip, BR;q=0.5", b"gzip,br;q=0.5"),
        (b" \t gzip \t ", b"gzip"),
        (b"Repeate, Repeate ", b"repeate,repeate"),
        (b"*;Q=0.1", b"*;q=0.1"),
        (b"", b""),
        (b"   ", b""),
    ])
    def test_tokenize_values(self, raw, expected):
        """Spaces and tabs vanish, A-Z folds to a-z, nothing else changes."""
        assert compact_and_lower(bytearray(raw)) == bytearray(expected)

    def test_works_in_place(self):
        """The same bytearray is returned, truncated."""
        value = bytearray(b"A B")
        result = compact_and_lower(value)

        assert result is value
        assert value == bytearray(b"ab")

    def test_idempotent(self):
        """Tokenizing twice gives the same bytes."""
        once = compact_and_lower(bytearray(b"  Deflate ;Q=0.25 , GZip"))
        twice = compact_and_lower(bytearray(once))

        assert once == twice

    def test_non_ascii_bytes_untouched(self):
        """Only ASCII uppercase is folded."""
        assert compact_and_lower(bytearray(b"\xc4X")) == bytearray(b"\xc4x")


class TestTokenize:
    """Tests for the str/bytes wrapper."""

    def test_none_and_empty(self):
        assert tokenize(None) == b""
        assert tokenize("") == b""

    def test_str_input(self):
        assert tokenize("GZip, Deflate") == b"gzip,deflate"

    def test_bytes_input(self):
        assert tokenize(b"BR") == b"br"

    def test_non_latin1_replaced(self):
        """Unencodable characters become '?', never a letter."""
        assert tokenize("gz€ip") == b"gz?ip"


class TestByteClasses:
    def test_is_alpha_lowercase_only(self):
        assert is_alpha(ord("a"))
        assert is_alpha(ord("z"))
        assert not is_alpha(ord("A"))
        assert not is_alpha(ord("-"))
        assert not is_alpha(ord("1"))

    def test_is_digit(self):
        assert is_digit(ord("0"))
        assert is_digit(ord("9"))
        assert not is_digit(ord("."))


class TestHeaders:
    """Tests for the case-insensitive header map."""

    def test_case_insensitive_lookup(self):
        headers = Headers()
        headers["Content-Encoding"] = "gzip"

        assert headers["content-encoding"] == "gzip"
        assert headers.get("CONTENT-ENCODING") == "gzip"
        assert "content-ENCODING" in headers

    def test_iteration_keeps_last_set_case(self):
        headers = Headers()
        headers["content-type"] = "text/plain"
        headers["Content-Type"] = "text/html"

        assert list(headers) == ["Content-Type"]
        assert headers["content-type"] == "text/html"

    def test_discard(self):
        headers = Headers({"Content-Length": "10"})

        headers.discard("content-length")
        headers.discard("content-length")  # missing is fine

        assert "Content-Length" not in headers

    def test_delete_missing_raises(self):
        with pytest.raises(KeyError):
            del Headers()["X-Missing"]

    def test_equality_ignores_case(self):
        assert Headers({"Vary": "Accept"}) == {"vary": "Accept"}
        assert Headers({"Vary": "Accept"}) != {"vary": "Origin"}

    def test_copy_is_independent(self):
        headers = Headers({"A": "1"})
        copy = headers.copy()
        copy["B"] = "2"

        assert "B" not in headers
        assert copy["a"] == "1"

    def test_lower_items(self):
        headers = Headers({"X-Thing": "v"})
        assert list(headers.lower_items()) == [("x-thing", "v")]
