"""
=============================================================================
ENCODE STAGE
=============================================================================

Encodes response bodies with the coding the client prefers, without the
handler having to know.

=============================================================================
HOW IT WORKS
=============================================================================

An encoder needs the whole body, but a handler writes its body whenever
it likes. So the stage lets the handler write into a CapturingWriter and
only touches the real writer once the handler has returned:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       ENCODE STAGE FLOW                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Upgrade header?  blank Accept-Encoding?  no registered match?     │
    │        └──────────── any of them ──► plain pass-through             │
    │                                                                      │
    │   otherwise:                                                         │
    │                                                                      │
    │   handler ──write()──► [ CapturingWriter ] ──► status + body bytes  │
    │                                                                      │
    │   handler set Content-Encoding itself?                               │
    │        yes ──► commit status, write bytes unchanged                 │
    │        no  ──► Content-Type  (sniffed, if missing)                  │
    │                Content-Encoding: <negotiated name>                  │
    │                Content-Length  removed                              │
    │                Vary: Accept-Encoding                                │
    │                commit status, encoder.encode(ctx, writer, bytes)    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Content-Length is removed because the encoded size is unknown until the
encoder has run, and by then the headers are already committed.

=============================================================================
INTERVIEW QUESTIONS ABOUT RESPONSE ENCODING
=============================================================================

Q: "What happens if the encoder fails halfway?"
A: "The status line and headers are already committed by then, so the
   client cannot be told cleanly. The stage logs the failure and appends
   an error body as a best effort. Buffering the encoded output first
   would fix that at the cost of a second full copy of the body."

Q: "Why sniff the Content-Type before encoding?"
A: "Once the body is compressed the client can no longer sniff it, so an
   unlabelled response would arrive as an opaque blob."

=============================================================================
"""

from typing import Mapping, Optional
import logging

from ..core.buffer_pool import Buffer, BufferPool
from ..errors import TransformError
from ..http.headers import Headers, tokenize
from ..http.negotiation import negotiate
from ..http.request import HTTPRequest
from ..http.response import write_error
from ..http.sniff import detect_content_type
from ..http.status_codes import HTTPStatus
from ..http.writer import ResponseWriter
from .base import Handler, Middleware


logger = logging.getLogger(__name__)


class CapturingWriter(ResponseWriter):
    """
    A ResponseWriter that records instead of sending.

    - headers: the REAL writer's header map, so everything the handler
      sets is in place when the stage commits
    - write_header: remembers the status (the first call wins)
    - write: appends to a pooled buffer

    No flush(): a partial body cannot be encoded.
    """

    def __init__(self, target: ResponseWriter, buffer: Buffer):
        self._target = target
        self._buffer = buffer
        self._status: Optional[int] = None

    @property
    def headers(self) -> Headers:
        return self._target.headers

    @property
    def status(self) -> int:
        """Captured status, 200 if the handler never set one."""
        return self._status if self._status is not None else HTTPStatus.OK

    def write_header(self, status: int) -> None:
        if self._status is None:
            self._status = int(status)

    def write(self, data: bytes) -> int:
        return self._buffer.write(data)


class EncodeMiddleware(Middleware):
    """
    Encodes response bodies according to the request's Accept-Encoding.

    Usage:
        pipeline.add(EncodeMiddleware({"gzip": GzipCoding()}, BufferPool()))

    Args:
        encoders: Registry of encoding token → Encoder. The KEY is what
                  goes into the Content-Encoding header, whatever the
                  encoder's own name says.
        pool: Buffer pool shared with the decode stage.
    """

    def __init__(self, encoders: Mapping, pool: BufferPool):
        self.encoders = encoders
        self.pool = pool

    def __call__(self, writer: ResponseWriter, request: HTTPRequest, next: Handler) -> None:
        # ═══════════════════════════════════════════════════════════════════
        # PASS-THROUGH CASES
        # ═══════════════════════════════════════════════════════════════════
        # Upgraded connections (WebSocket, h2c) carry no encodable body.
        header = tokenize(request.headers.get("accept-encoding"))
        if not header or request.headers.get("upgrade"):
            next(writer, request)
            return

        match = negotiate(header, self.encoders)
        if match is None:
            next(writer, request)
            return

        # ═══════════════════════════════════════════════════════════════════
        # CAPTURE THE HANDLER'S OUTPUT
        # ═══════════════════════════════════════════════════════════════════
        with self.pool.buffer() as captured:
            capture = CapturingWriter(writer, captured)
            next(capture, request)

            status = capture.status
            body = captured.getvalue()

        headers = writer.headers

        # ═══════════════════════════════════════════════════════════════════
        # ALREADY ENCODED BY THE HANDLER
        # ═══════════════════════════════════════════════════════════════════
        if headers.get("Content-Encoding"):
            writer.write_header(status)
            try:
                writer.write(body)
            except Exception as exc:
                logger.exception(f"{request.method} {request.path}: failed to write response: {exc}")
                _write_error_best_effort(writer, str(exc))
            return

        # ═══════════════════════════════════════════════════════════════════
        # ENCODE
        # ═══════════════════════════════════════════════════════════════════
        if not headers.get("Content-Type"):
            headers["Content-Type"] = detect_content_type(body)

        headers["Content-Encoding"] = match.name
        headers.discard("Content-Length")
        _add_vary(headers, "Accept-Encoding")

        writer.write_header(status)

        try:
            match.encoder.encode(request.context, writer, body)
        except Exception as exc:
            error = TransformError(match.name, "encode", str(exc))
            logger.exception(f"{request.method} {request.path}: {error}")
            _write_error_best_effort(writer, str(exc))
            return

        logger.debug(
            f"Encoded {request.method} {request.path} response with "
            f"{match.name!r} ({len(body)} bytes in)"
        )


def _add_vary(headers: Headers, field_name: str) -> None:
    """Append ``field_name`` to Vary unless it is already listed."""
    vary = headers.get("Vary", "")
    listed = [part.strip().lower() for part in vary.split(",")]
    if field_name.lower() not in listed and "*" not in listed:
        headers["Vary"] = f"{vary}, {field_name}".lstrip(", ")


def _write_error_best_effort(writer: ResponseWriter, message: str) -> None:
    # The status was already committed; only the body can still change.
    try:
        write_error(writer, HTTPStatus.INTERNAL_SERVER_ERROR, message)
    except OSError as exc:
        logger.warning(f"Could not write error body: {exc}")


# =============================================================================
# MODULE SUMMARY
# =============================================================================
#
# 1. Negotiate before running the handler (cheap, may skip everything)
# 2. Capture status and body through CapturingWriter
# 3. Respect a Content-Encoding the handler set itself
# 4. Label, commit, then stream the encoder's output to the client
#
# LIMITATIONS:
# - Whole-body buffering: no streaming or partial flushes
# - Encoder errors after commit can only be reported in the body
# =============================================================================
