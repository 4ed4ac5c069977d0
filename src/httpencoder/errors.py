"""
=============================================================================
ENCODING ERRORS
=============================================================================

Every failure the content-coding pipeline can report to a client.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      ERROR → STATUS MAPPING                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   BodyReadError             400   request body could not be read    │
    │   UnsupportedEncodingError  415   no decoder for a token            │
    │   TransformError            500   a codec failed on the bytes       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The first two are always detected before the handler runs, so the client
gets a clean error response. A TransformError raised while DECODING is just
as clean. A TransformError raised while ENCODING happens after the status
line and headers were committed, so the error body is best-effort only.

=============================================================================
"""

from typing import Optional


class EncodingError(Exception):
    """
    Base class for content-coding failures.

    Carries the HTTP status the middleware answers with, the same way
    HTTPParseError carries one for malformed requests.
    """

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class BodyReadError(EncodingError):
    """Reading the raw request body failed."""

    status_code = 400


class UnsupportedEncodingError(EncodingError):
    """A Content-Encoding token has no registered decoder."""

    status_code = 415

    def __init__(self, encoding: str):
        super().__init__(f"unsupported Content-Encoding: {encoding!r}")
        self.encoding = encoding


class TransformError(EncodingError):
    """
    A decoder or encoder reported an error while transforming bytes.

    The original exception is kept as __cause__ (raise ... from exc).
    """

    status_code = 500

    def __init__(self, encoding: str, operation: str, reason: str):
        super().__init__(f"failed to {operation} {encoding!r} body: {reason}")
        self.encoding = encoding
        self.operation = operation


class ContextCancelledError(EncodingError):
    """
    Raised by codecs that notice their request context was cancelled.

    The stages wrap it in a TransformError like any other codec failure,
    so it keeps the inherited 500.
    """

    def __init__(self, message: str = "request context cancelled"):
        super().__init__(message)
