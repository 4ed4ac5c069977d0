"""
=============================================================================
CODEC CONTRACTS AND BUILT-IN CODINGS
=============================================================================

The middleware never compresses anything itself. It talks to codecs
through two small contracts:

    Encoder.encode(context, sink, data)   response bytes → sink
    Decoder.decode(context, sink, data)   request bytes  → sink

`sink` is anything with `write(bytes)`: a pooled Buffer, the real
ResponseWriter, an io.BytesIO. Failures are reported by RAISING.

=============================================================================
BUILT-IN CODINGS
=============================================================================

    ┌──────────────┬──────────────────────────────┬─────────────────────┐
    │  Token       │  Format                      │  Library            │
    ├──────────────┼──────────────────────────────┼─────────────────────┤
    │  identity    │  bytes unchanged             │  -                  │
    │  gzip        │  RFC 1952                    │  gzip               │
    │  deflate     │  RFC 1950 (zlib-wrapped)     │  zlib               │
    └──────────────┴──────────────────────────────┴─────────────────────┘

Each built-in implements BOTH contracts, so one instance can sit in the
encoder and the decoder registry.

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP CODINGS
=============================================================================

Q: "What does 'deflate' mean in HTTP?"
A: "Officially zlib-wrapped DEFLATE (RFC 1950). Some old servers sent raw
   DEFLATE instead, so robust decoders accept both."

Q: "Why does the encoder get a context argument?"
A: "Compressing a large body takes real CPU time. If the client is gone
   there is no point finishing; the context lets the codec notice."

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Dict, Protocol
import gzip
import zlib

from .core.context import RequestContext


class Sink(Protocol):
    """Anything bytes can be written to."""

    def write(self, data: bytes) -> int:
        ...


class Encoder(ABC):
    """Encodes a complete response body."""

    @abstractmethod
    def encode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        """
        Write the encoded form of ``data`` to ``sink``.

        Raises:
            Any exception on failure; the encode stage reports it as a 500.
        """

    @property
    def name(self) -> str:
        """
        Self-reported name, used in logs only.

        The Content-Encoding header always carries the REGISTRY key the
        encoder was found under, not this value.
        """
        return self.__class__.__name__


class Decoder(ABC):
    """Decodes a complete request body."""

    @abstractmethod
    def decode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        """
        Write the decoded form of ``data`` to ``sink``.

        Raises:
            Any exception on failure; the decode stage reports it as a 500.
        """


class IdentityCoding(Encoder, Decoder):
    """Copies bytes unchanged."""

    @property
    def name(self) -> str:
        return "identity"

    def encode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        context.raise_if_cancelled()
        sink.write(data)

    def decode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        context.raise_if_cancelled()
        sink.write(data)


class GzipCoding(Encoder, Decoder):
    """
    gzip (RFC 1952).

    Args:
        level: Compression level (1-9).
               1 = fastest, least compression
               6 = balanced (default)
               9 = slowest, best compression
    """

    def __init__(self, level: int = 6):
        self.level = level

    @property
    def name(self) -> str:
        return "gzip"

    def encode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        context.raise_if_cancelled()
        sink.write(gzip.compress(data, compresslevel=self.level))

    def decode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        context.raise_if_cancelled()
        # Raises gzip.BadGzipFile / zlib.error / EOFError on corrupt input
        sink.write(gzip.decompress(data))

    def __repr__(self) -> str:
        return f"GzipCoding(level={self.level})"


class DeflateCoding(Encoder, Decoder):
    """
    deflate (RFC 1950 zlib stream).

    Decoding also accepts raw RFC 1951 DEFLATE data.
    """

    def __init__(self, level: int = 6):
        self.level = level

    @property
    def name(self) -> str:
        return "deflate"

    def encode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        context.raise_if_cancelled()
        sink.write(zlib.compress(data, self.level))

    def decode(self, context: RequestContext, sink: Sink, data: bytes) -> None:
        context.raise_if_cancelled()
        try:
            decoded = zlib.decompress(data)
        except zlib.error:
            decompressor = zlib.decompressobj(-zlib.MAX_WBITS)
            decoded = decompressor.decompress(data) + decompressor.flush()
            if not decompressor.eof:
                raise zlib.error("incomplete or truncated deflate stream")
        sink.write(decoded)

    def __repr__(self) -> str:
        return f"DeflateCoding(level={self.level})"


# Token → factory(level) for every coding this package ships
BUILTIN_CODINGS = {
    "identity": lambda level: IdentityCoding(),
    "gzip": lambda level: GzipCoding(level),
    "deflate": lambda level: DeflateCoding(level),
}


def default_encoders(level: int = 6) -> Dict[str, Encoder]:
    """gzip and deflate encoders, keyed by their Content-Encoding token."""
    return {
        "gzip": GzipCoding(level),
        "deflate": DeflateCoding(level),
    }


def default_decoders() -> Dict[str, Decoder]:
    """Decoders for every built-in token, identity included."""
    return {token: factory(6) for token, factory in BUILTIN_CODINGS.items()}
