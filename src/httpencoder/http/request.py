"""
=============================================================================
HTTP REQUEST
=============================================================================

The request object every Handler and Middleware receives, plus a small
parser that turns raw HTTP/1.x bytes into one.

=============================================================================
THE BODY IS A STREAM
=============================================================================

The decode stage needs to READ the body (and may fail doing so), then
REPLACE it with the decoded bytes so the handler never knows it was encoded:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                   REQUEST BODY THROUGH THE STAGES                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   request.body ──► BytesIO(b"\\x1f\\x8b...")     Content-Encoding: gzip │
    │        │                                                             │
    │        │  decode stage: read all, gunzip, swap                       │
    │        ▼                                                             │
    │   request.body ──► BytesIO(b'{"name": ...}')   (no Content-Encoding) │
    │        │                                                             │
    │        ▼                                                             │
    │   handler: request.read_body() / request.json                       │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

So `body` is a binary file object, not bytes. Whatever transport hosts the
middleware hands over its body stream (socket file, wsgi.input, BytesIO).

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Optional
from urllib.parse import unquote
import io
import json
import re

from ..core.context import RequestContext


class HTTPParseError(Exception):
    """
    Raised when raw request bytes cannot be parsed.

    Carries the status code that should be returned to the client:

        400 Bad Request                - Malformed request syntax
        413 Payload Too Large          - Request exceeds size limit
        505 HTTP Version Not Supported - Unknown HTTP version
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class HTTPRequest:
    """
    A parsed HTTP request.

    Attributes:
        method:         GET, POST, ...
        path:           Request path without the query string
        version:        "HTTP/1.1" or "HTTP/1.0"
        headers:        Header map with LOWERCASE names
                        {"content-encoding": "gzip", ...}
        body:           Binary stream over the request body
        client_address: (ip, port) of the client
        context:        Cancelable context handed to every codec call

    Header names are lowercased once at parse time, so the middleware
    reads `request.headers.get("accept-encoding", "")` directly.
    """

    method: str
    path: str
    version: str = "HTTP/1.1"

    headers: Dict[str, str] = field(default_factory=dict)
    body: BinaryIO = field(default_factory=io.BytesIO)

    client_address: tuple[str, int] = ("", 0)
    context: RequestContext = field(default_factory=RequestContext)

    _body_json: Optional[Any] = field(default=None, repr=False)

    def get_header(self, name: str, default: str = "") -> str:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def read_body(self) -> bytes:
        """Read the rest of the body stream."""
        return self.body.read()

    @property
    def json(self) -> Any:
        """
        Parse the body as JSON (read once, then cached).

        Raises:
            HTTPParseError: If the body is not valid JSON.
        """
        if self._body_json is None:
            raw = self.read_body()
            if raw:
                try:
                    self._body_json = json.loads(raw.decode("utf-8"))
                except (json.JSONDecodeError, UnicodeDecodeError) as e:
                    raise HTTPParseError(f"Invalid JSON body: {e}")
        return self._body_json


class RequestParser:
    """
    Parses raw HTTP/1.x request bytes into HTTPRequest objects.

        1. Size check                 → 413 if too large
        2. Split at \\r\\n\\r\\n          → 400 if missing
        3. Request line               → 400 / 505
        4. Headers, names lowercased, repeated names joined with ", "
        5. Body, cut to Content-Length
    """

    REQUEST_LINE_PATTERN = re.compile(r"^([A-Z]+) ([^ ]+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:]+):\s*(.*)$")

    def __init__(self, max_request_size: int = 10 * 1024 * 1024):
        self.max_request_size = max_request_size

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> HTTPRequest:
        """
        Parse raw request bytes.

        Raises:
            HTTPParseError: If the request is malformed.
        """
        if len(data) > self.max_request_size:
            raise HTTPParseError(f"Request too large: {len(data)} bytes", status_code=413)

        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            raise HTTPParseError("Incomplete request: no header terminator")

        header_section = data[:header_end].decode("latin-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, path, version = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])

        try:
            content_length = int(headers.get("content-length", 0))
        except ValueError:
            raise HTTPParseError("Invalid Content-Length")

        if content_length < 0:
            raise HTTPParseError("Invalid Content-Length")

        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=io.BytesIO(body[:content_length]),
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> tuple[str, str, str]:
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line}")

        method, uri, version = match.groups()

        if version not in ("HTTP/1.0", "HTTP/1.1"):
            raise HTTPParseError(f"Unsupported HTTP version: {version}", status_code=505)

        # Path only, query string dropped
        path = unquote(uri.split("?", 1)[0]) or "/"

        return method, path, version

    def _parse_headers(self, lines: list[str]) -> Dict[str, str]:
        headers: Dict[str, str] = {}

        for line in lines:
            if not line:
                continue

            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue  # lenient: skip malformed lines

            name, value = match.groups()
            name = name.strip().lower()
            value = value.strip()

            # "Accept-Encoding: gzip" + "Accept-Encoding: br" == "gzip, br"
            if name in headers:
                headers[name] += ", " + value
            else:
                headers[name] = value

        return headers


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_size: int = 10 * 1024 * 1024
) -> HTTPRequest:
    """Parse raw request bytes with a one-off RequestParser."""
    return RequestParser(max_request_size=max_size).parse(data, client_address)
