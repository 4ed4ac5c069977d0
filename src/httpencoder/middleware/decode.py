"""
=============================================================================
DECODE STAGE
=============================================================================

Undoes the Content-Encoding of a request body before the handler sees it.

=============================================================================
HOW CONTENT-ENCODING STACKS
=============================================================================

A sender may apply several codings in sequence and lists them in the
order they were applied:

    Content-Encoding: deflate, gzip     (deflated first, then gzipped)

We apply the listed decoders LEFT TO RIGHT, each one working on the
output of the previous:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       DECODE CHAIN                                  │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   request.body ──read──► [ body buffer ]                            │
    │                                │                                     │
    │              token 1  ────────►│ decoders["deflate"] ──► [ scratch ] │
    │                                │◄───────── swap ─────────────┘       │
    │              token 2  ────────►│ decoders["gzip"]    ──► [ scratch ] │
    │                                │◄───────── swap ─────────────┘       │
    │                                ▼                                     │
    │   request.body = BytesIO(decoded), Content-Encoding removed         │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
FAILURES
=============================================================================

    body cannot be read          → 400, handler not called
    token without a decoder      → 415, handler not called
    decoder raises               → 500, handler not called

request.body and the headers are only replaced after the whole chain
succeeded, so a failure never leaves a half-decoded request behind.

=============================================================================
"""

from typing import Mapping
import io
import logging

from ..core.buffer_pool import BufferPool
from ..errors import BodyReadError, TransformError, UnsupportedEncodingError
from ..http.headers import is_alpha, tokenize
from ..http.request import HTTPRequest
from ..http.response import write_error
from ..http.writer import ResponseWriter
from .base import Handler, Middleware


logger = logging.getLogger(__name__)


class DecodeMiddleware(Middleware):
    """
    Decodes request bodies according to their Content-Encoding header.

    Usage:
        pipeline.add(DecodeMiddleware({"gzip": GzipCoding()}, BufferPool()))

    Args:
        decoders: Registry of encoding token → Decoder. Not copied here;
                  the composer hands in a read-only view.
        pool: Buffer pool shared with the encode stage.
    """

    def __init__(self, decoders: Mapping, pool: BufferPool):
        self.decoders = decoders
        self.pool = pool

    def __call__(self, writer: ResponseWriter, request: HTTPRequest, next: Handler) -> None:
        header = tokenize(request.headers.get("content-encoding"))
        if not header:
            next(writer, request)
            return

        with self.pool.buffer() as body, self.pool.buffer() as scratch:
            # ═══════════════════════════════════════════════════════════════
            # READ THE RAW BODY
            # ═══════════════════════════════════════════════════════════════
            try:
                body.read_from(request.body)
            except (OSError, ValueError) as exc:
                error = BodyReadError(f"failed to read http request body: {exc}")
                logger.warning(f"{request.method} {request.path}: {error}")
                write_error(writer, error.status_code, "failed to read http request body")
                return

            # ═══════════════════════════════════════════════════════════════
            # APPLY DECODERS LEFT TO RIGHT
            # ═══════════════════════════════════════════════════════════════
            pos = 0
            while pos < len(header):
                start = pos
                while pos < len(header) and is_alpha(header[pos]):
                    pos += 1

                token = header[start:pos].decode("ascii")
                decoder = self.decoders.get(token)
                if decoder is None:
                    error = UnsupportedEncodingError(token)
                    logger.warning(f"{request.method} {request.path}: {error}")
                    write_error(writer, error.status_code, "unsupported Content-Encoding")
                    return

                try:
                    decoder.decode(request.context, scratch, body.getvalue())
                except Exception as exc:
                    error = TransformError(token, "decode", str(exc))
                    logger.exception(f"{request.method} {request.path}: {error}")
                    write_error(writer, error.status_code, str(exc))
                    return

                body, scratch = scratch, body
                scratch.reset()

                # step over the separator
                pos += 1

            decoded = body.getvalue()

        logger.debug(
            f"Decoded {request.method} {request.path} body "
            f"({header.decode('ascii', 'replace')}) to {len(decoded)} bytes"
        )

        request.body = io.BytesIO(decoded)
        request.headers.pop("content-encoding", None)
        request.headers["content-length"] = str(len(decoded))

        next(writer, request)
