"""
=============================================================================
RESPONSE WRITERS (OUTPUT SINKS)
=============================================================================

A handler answers a request by WRITING to a ResponseWriter:

    def handler(writer: ResponseWriter, request: HTTPRequest) -> None:
        writer.headers["Content-Type"] = "application/json"
        writer.write_header(201)
        writer.write(b'{"id": 1}')

=============================================================================
THE COMMIT POINT
=============================================================================

Headers can be changed freely UNTIL the status is committed. After that
they are on the wire (or recorded) and further changes have no effect:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      RESPONSE WRITER STATES                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   ┌──────────────┐  write_header(s)   ┌──────────────┐              │
    │   │  OPEN        │ ─────────────────► │  COMMITTED   │              │
    │   │  headers     │                    │  status +    │              │
    │   │  mutable     │  write(data)       │  headers     │ ◄─┐ write()  │
    │   │              │ ─────────────────► │  sent        │ ──┘          │
    │   └──────────────┘  (commits 200)     └──────────────┘              │
    │                                              │                       │
    │                          write_header() again: ignored + warning    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

That commit point is what makes encode-stage failures special: the
encoder runs AFTER the headers were committed, so a failing encoder can
only append a best-effort error body.

=============================================================================
AVAILABLE WRITERS
=============================================================================

ResponseRecorder      - keeps everything in memory (tests, adapters)
StreamResponseWriter  - serializes HTTP/1.x onto a binary stream (socket)

CapturingWriter (middleware/encode.py) is the third implementation.

=============================================================================
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import BinaryIO, Optional
import logging

from .headers import Headers
from .response import HTTPResponse
from .status_codes import HTTPStatus, status_phrase


logger = logging.getLogger(__name__)


class ResponseWriter(ABC):
    """
    The output sink a Handler writes its response to.

    Only three operations, and no flush: every writer in this package
    must be wrappable by the encode stage, which needs the whole body
    before it can encode anything.
    """

    @property
    @abstractmethod
    def headers(self) -> Headers:
        """Response headers; changes after commit have no effect."""

    @abstractmethod
    def write_header(self, status: int) -> None:
        """Commit the status code and the current headers."""

    @abstractmethod
    def write(self, data: bytes) -> int:
        """Write body bytes, committing 200 first if nothing was committed."""


class BaseResponseWriter(ResponseWriter):
    """
    Commit bookkeeping shared by the concrete writers.

    Subclasses implement _commit() and _write_body().
    """

    def __init__(self):
        self._headers = Headers()
        self._status: Optional[int] = None

    @property
    def headers(self) -> Headers:
        return self._headers

    @property
    def committed(self) -> bool:
        return self._status is not None

    @property
    def status(self) -> Optional[int]:
        """Committed status, None while still open."""
        return self._status

    def write_header(self, status: int) -> None:
        if self._status is not None:
            logger.warning(
                f"Superfluous write_header({status}) ignored, "
                f"status {self._status} already committed"
            )
            return

        self._status = int(status)
        self._commit(self._status)

    def write(self, data: bytes) -> int:
        if self._status is None:
            self.write_header(HTTPStatus.OK)
        return self._write_body(data)

    @abstractmethod
    def _commit(self, status: int) -> None:
        """Send or record the status line and headers."""

    @abstractmethod
    def _write_body(self, data: bytes) -> int:
        """Send or record body bytes."""


class ResponseRecorder(BaseResponseWriter):
    """
    In-memory ResponseWriter.

    Records the status, a SNAPSHOT of the headers taken at commit time,
    and every body byte. Later header changes do not leak into the
    snapshot, just like they would not reach a real client.

    Usage:
        recorder = ResponseRecorder()
        handler(recorder, request)

        response = recorder.result()
        assert response.status == 200
        assert response.headers.get("Content-Encoding") == "gzip"
    """

    def __init__(self):
        super().__init__()
        self.body = bytearray()
        self._snapshot: Optional[Headers] = None

    def _commit(self, status: int) -> None:
        self._snapshot = self._headers.copy()

    def _write_body(self, data: bytes) -> int:
        self.body += data
        return len(data)

    def result(self) -> HTTPResponse:
        """
        The recorded response as an HTTPResponse.

        A handler that never wrote anything produces an empty 200.
        """
        headers = self._snapshot if self._snapshot is not None else self._headers.copy()
        return HTTPResponse(
            status=self._status if self._status is not None else HTTPStatus.OK,
            headers=headers.copy(),
            body=bytes(self.body),
        )


class StreamResponseWriter(BaseResponseWriter):
    """
    Serializes an HTTP/1.x response onto a binary stream.

    =========================================================================
    FRAMING
    =========================================================================

    The client must be able to tell where the body ends:

        Content-Length set    → the client reads exactly that many bytes
        Content-Length unset  → "Connection: close", the body ends at EOF

    The encode stage deletes Content-Length (the encoded size is unknown
    until the encoder is done), so encoded responses are always framed by
    closing the connection. `must_close` tells the transport to do so.

    =========================================================================
    """

    def __init__(
        self,
        stream: BinaryIO,
        version: str = "HTTP/1.1",
        server_name: str = "httpencoder/1.0",
        request_method: str = "GET",
    ):
        super().__init__()
        self._stream = stream
        self._version = version
        self._server_name = server_name
        self._request_method = request_method
        self.must_close = False

    def _commit(self, status: int) -> None:
        headers = self._headers.copy()

        if "Date" not in headers:
            headers["Date"] = format_http_date(datetime.now(timezone.utc))
        if "Server" not in headers:
            headers["Server"] = self._server_name

        if self._has_body(status) and "Content-Length" not in headers:
            headers["Connection"] = "close"
        if headers.get("Connection", "").lower() == "close":
            self.must_close = True

        lines = [f"{self._version} {status} {status_phrase(status)}"]
        for name, value in headers.items():
            lines.append(f"{name}: {value}")
        lines.append("")

        self._stream.write("\r\n".join(lines).encode("latin-1") + b"\r\n")

    def _write_body(self, data: bytes) -> int:
        if not self._has_body(self._status):
            return 0
        self._stream.write(data)
        return len(data)

    def _has_body(self, status: int) -> bool:
        # 1xx, 204, 304 and HEAD responses never carry a body
        if self._request_method == "HEAD":
            return False
        return not (100 <= status < 200 or status in (204, 304))


def format_http_date(dt: datetime) -> str:
    """
    Format a datetime as an HTTP-date (RFC 7231), always in GMT.

    Example: Wed, 01 Jan 2026 12:00:00 GMT
    """
    days = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    months = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

    return (
        f"{days[dt.weekday()]}, "
        f"{dt.day:02d} {months[dt.month - 1]} {dt.year} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d} GMT"
    )
