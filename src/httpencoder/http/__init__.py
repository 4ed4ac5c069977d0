"""
=============================================================================
HTTP MODULE
=============================================================================

The HTTP vocabulary the content-coding middleware is written against.

    headers      - header tokenizer + case-insensitive Headers map
    negotiation  - Accept-Encoding quality negotiation
    request      - HTTPRequest (body as a stream) and a raw-bytes parser
    writer       - ResponseWriter sinks: recorder and HTTP/1.x stream writer
    response     - HTTPResponse value, write_error
    sniff        - Content-Type detection for unlabelled bodies
    status_codes - HTTPStatus enum

=============================================================================
"""

from .headers import Headers, compact_and_lower, tokenize
from .negotiation import DEFAULT_QUALITY, Negotiated, negotiate
from .request import HTTPParseError, HTTPRequest, RequestParser, parse_request
from .response import HTTPResponse, ok, write_error
from .sniff import detect_content_type
from .status_codes import HTTPStatus, status_phrase
from .writer import (
    BaseResponseWriter,
    ResponseRecorder,
    ResponseWriter,
    StreamResponseWriter,
)

__all__ = [
    # Headers
    "Headers",                  # Case-insensitive header map
    "compact_and_lower",        # In-place header tokenizer
    "tokenize",                 # str/bytes → tokenized bytes

    # Negotiation
    "DEFAULT_QUALITY",
    "Negotiated",
    "negotiate",

    # Request
    "HTTPRequest",
    "HTTPParseError",
    "RequestParser",
    "parse_request",

    # Response
    "HTTPResponse",
    "ok",
    "write_error",

    # Writers
    "ResponseWriter",           # Abstract output sink
    "BaseResponseWriter",
    "ResponseRecorder",         # In-memory writer
    "StreamResponseWriter",     # HTTP/1.x serializer

    # Misc
    "detect_content_type",
    "HTTPStatus",
    "status_phrase",
]
