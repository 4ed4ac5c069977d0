"""
=============================================================================
HTTP RESPONSE
=============================================================================

A plain response value, for code that prefers RETURNING a response over
writing one:

    def get_user(request: HTTPRequest) -> HTTPResponse:
        return ok({"id": 1})

`HTTPResponse.write_to(writer)` bridges the two styles, and is how
`from_response_handler` (middleware/base.py) lets such functions run
behind the content-coding middleware.

Also home of `write_error`, the single place the middleware formats its
own 400 / 415 / 500 answers.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional, Union
import json

from .headers import Headers
from .status_codes import HTTPStatus

if TYPE_CHECKING:
    from .writer import ResponseWriter


@dataclass
class HTTPResponse:
    """
    Status, headers and a complete body.

    Headers is case-insensitive, so `response.headers["content-encoding"]`
    finds a header written as "Content-Encoding".
    """

    status: int = HTTPStatus.OK
    headers: Headers = field(default_factory=Headers)
    body: bytes = b""

    def __post_init__(self):
        if not isinstance(self.headers, Headers):
            self.headers = Headers(self.headers)

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """Set a header; returns self for chaining."""
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the body, encoding strings as UTF-8."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def write_to(self, writer: "ResponseWriter") -> None:
        """
        Replay this response onto a ResponseWriter.

        Headers are copied before the status is committed, so writers
        that snapshot at commit time see all of them.
        """
        for name, value in self.headers.items():
            writer.headers[name] = value
        writer.write_header(self.status)
        if self.body:
            writer.write(self.body)


def ok(body: Union[str, bytes, dict, list] = "", content_type: Optional[str] = None) -> HTTPResponse:
    """
    Create a 200 OK response.

    dict / list bodies become JSON, str bodies become text/plain, bytes
    are sent as-is with whatever `content_type` says (or none, letting
    the encode stage sniff one).
    """
    response = HTTPResponse(status=HTTPStatus.OK)

    if isinstance(body, (dict, list)):
        response.set_body(json.dumps(body))
        response.set_header("Content-Type", content_type or "application/json; charset=utf-8")
    elif isinstance(body, str):
        response.set_body(body)
        response.set_header("Content-Type", content_type or "text/plain; charset=utf-8")
    else:
        response.set_body(body)
        if content_type:
            response.set_header("Content-Type", content_type)

    return response


def error_body(message: str) -> bytes:
    """JSON error payload: {"error": message}."""
    return json.dumps({"error": message}).encode("utf-8")


def write_error(writer: "ResponseWriter", status: int, message: Any) -> None:
    """
    Answer with a JSON error.

    Drops any Content-Length / Content-Encoding a handler may have set,
    since neither describes the error body. When the writer was already
    committed (encode-stage failure) the status cannot change any more;
    the error body is appended as a best effort.
    """
    headers = writer.headers
    headers.discard("Content-Length")
    headers.discard("Content-Encoding")
    headers["Content-Type"] = "application/json; charset=utf-8"
    headers["X-Content-Type-Options"] = "nosniff"

    writer.write_header(status)
    writer.write(error_body(str(message)))
