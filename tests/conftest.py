"""
pytest configuration and fixtures.
"""

import io
from typing import Callable, Dict, Optional

import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from httpencoder.codings import Decoder, Encoder
from httpencoder.http import HTTPRequest, ResponseRecorder


# =============================================================================
# TEST CODECS
# =============================================================================
#
# Toy codecs whose output is easy to predict by eye:
#
#   repeat     b"AB" ⇄ b"AABB"
#   quadruple  b"AB" ⇄ b"AAAABBBB"
#   copy       unchanged
#
# =============================================================================

class CopyCoding(Encoder, Decoder):
    """Identity codec."""

    def encode(self, context, sink, data):
        sink.write(data)

    def decode(self, context, sink, data):
        sink.write(data)


class RepeatCoding(Encoder, Decoder):
    """Writes every byte ``times`` times; decoding keeps every n-th byte."""

    def __init__(self, times: int = 2, name: str = "repeater implementation"):
        self.times = times
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def encode(self, context, sink, data):
        sink.write(bytes(b for b in data for _ in range(self.times)))

    def decode(self, context, sink, data):
        sink.write(bytes(data[::self.times]))


class FailingCoding(Encoder, Decoder):
    """Always raises."""

    def encode(self, context, sink, data):
        raise ValueError("encoder exploded")

    def decode(self, context, sink, data):
        raise ValueError("decoder exploded")


class BrokenStream(io.RawIOBase):
    """A request body that cannot be read."""

    def readable(self):
        return True

    def read(self, size=-1):
        raise OSError("connection reset by peer")


@pytest.fixture
def repeat() -> RepeatCoding:
    return RepeatCoding()


@pytest.fixture
def codecs() -> Dict[str, object]:
    """Registry used by most middleware tests."""
    return {
        "repeate": RepeatCoding(2),
        "repeatee": RepeatCoding(4, name="repeater2 implementation"),
        "copy": CopyCoding(),
    }


@pytest.fixture
def make_request() -> Callable[..., HTTPRequest]:
    """Build an HTTPRequest with lowercase headers and a byte body."""

    def _make(
        body: bytes = b"",
        headers: Optional[Dict[str, str]] = None,
        method: str = "POST",
        path: str = "/",
    ) -> HTTPRequest:
        return HTTPRequest(
            method=method,
            path=path,
            headers={k.lower(): v for k, v in (headers or {}).items()},
            body=io.BytesIO(body),
        )

    return _make


@pytest.fixture
def recorder() -> ResponseRecorder:
    return ResponseRecorder()


# =============================================================================
# TEST HANDLERS
# =============================================================================

@pytest.fixture
def reverse_handler():
    """Writes the request body reversed with a 202."""

    def handler(writer, request):
        body = request.read_body()
        writer.write_header(202)
        writer.write(body[::-1])

    return handler


@pytest.fixture
def echo_handler():
    """Writes the request body back unchanged."""

    def handler(writer, request):
        writer.write(request.read_body())

    return handler


@pytest.fixture
def failing() -> FailingCoding:
    return FailingCoding()


@pytest.fixture
def broken_stream() -> BrokenStream:
    return BrokenStream()
