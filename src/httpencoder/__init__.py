"""
=============================================================================
HTTPENCODER - Content-Coding Middleware for HTTP Handlers
=============================================================================

Transparently decodes request bodies according to Content-Encoding and
encodes response bodies according to the client's Accept-Encoding, so
the handler in the middle only ever sees and writes plain bytes.

=============================================================================
PROJECT OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTPENCODER REQUEST FLOW                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   POST /upload                                                       │
    │   Content-Encoding: gzip          ┌──────────────────────────┐      │
    │   Accept-Encoding: br;q=1, gzip   │  EncodeMiddleware        │      │
    │   <gzipped body> ────────────────►│  negotiate "gzip"        │      │
    │                                   │  ┌────────────────────┐  │      │
    │                                   │  │  DecodeMiddleware  │  │      │
    │                                   │  │  gunzip the body   │  │      │
    │                                   │  │  ┌──────────────┐  │  │      │
    │                                   │  │  │   handler    │  │  │      │
    │                                   │  │  │ plain bytes  │  │  │      │
    │                                   │  │  └──────────────┘  │  │      │
    │                                   │  └────────────────────┘  │      │
    │   Content-Encoding: gzip ◄────────│  gzip the response       │      │
    │   <gzipped response>              └──────────────────────────┘      │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    httpencoder/
    ├── __init__.py          # This file - package exports
    ├── codings.py           # Encoder / Decoder contracts, gzip, deflate
    ├── config.py            # EncoderConfig dataclass
    ├── errors.py            # EncodingError hierarchy
    ├── core/
    │   ├── buffer_pool.py   # Pooled byte buffers
    │   └── context.py       # Cancelable request context
    ├── http/
    │   ├── headers.py       # Tokenizer, case-insensitive Headers
    │   ├── negotiation.py   # Accept-Encoding quality negotiation
    │   ├── request.py       # HTTPRequest + raw request parser
    │   ├── response.py      # HTTPResponse, write_error
    │   ├── writer.py        # ResponseWriter sinks
    │   ├── sniff.py         # Content-Type sniffing
    │   └── status_codes.py  # HTTP status enum
    └── middleware/
        ├── base.py          # Middleware contract, pipeline
        ├── decode.py        # Request decode stage
        ├── encode.py        # Response encode stage
        └── encoding.py      # new(): the composed middleware

=============================================================================
QUICK START
=============================================================================

    import httpencoder
    from httpencoder.codings import default_decoders, default_encoders

    wrap = httpencoder.new(default_encoders(), default_decoders())

    def echo(writer, request):
        writer.headers["Content-Type"] = "application/octet-stream"
        writer.write(request.read_body())

    handler = wrap(echo)
    handler(writer, request)

=============================================================================
"""

__version__ = "1.0.0"

from .codings import (
    Decoder,
    DeflateCoding,
    Encoder,
    GzipCoding,
    IdentityCoding,
    default_decoders,
    default_encoders,
)
from .config import EncoderConfig
from .errors import (
    BodyReadError,
    ContextCancelledError,
    EncodingError,
    TransformError,
    UnsupportedEncodingError,
)
from .middleware import ContentCodingMiddleware, from_config, new

__all__ = [
    "new",
    "from_config",
    "ContentCodingMiddleware",
    "EncoderConfig",
    "Encoder",
    "Decoder",
    "IdentityCoding",
    "GzipCoding",
    "DeflateCoding",
    "default_encoders",
    "default_decoders",
    "EncodingError",
    "BodyReadError",
    "UnsupportedEncodingError",
    "TransformError",
    "ContextCancelledError",
    "__version__",
]
