"""
Unit tests for HTTPResponse and error responses.
"""

import json

from httpencoder.http.headers import Headers
from httpencoder.http.response import HTTPResponse, ok, write_error
from httpencoder.http.status_codes import HTTPStatus, status_phrase
from httpencoder.http.writer import ResponseRecorder


class TestHTTPResponse:
    """Tests for HTTPResponse class."""

    def test_plain_dict_headers_become_headers(self):
        response = HTTPResponse(headers={"Content-Type": "text/plain"})

        assert isinstance(response.headers, Headers)
        assert response.headers["content-type"] == "text/plain"

    def test_set_header_chaining(self):
        response = (HTTPResponse()
            .set_header("X-One", "1")
            .set_header("X-Two", "2"))

        assert response.headers["x-one"] == "1"
        assert response.headers["x-two"] == "2"

    def test_set_body_encodes_str(self):
        assert HTTPResponse().set_body("héllo").body == "héllo".encode("utf-8")

    def test_write_to(self):
        recorder = ResponseRecorder()
        HTTPResponse(status=HTTPStatus.CREATED, headers={"X-Id": "7"}, body=b"made").write_to(recorder)

        result = recorder.result()
        assert result.status == 201
        assert result.headers["x-id"] == "7"
        assert result.body == b"made"

    def test_write_to_without_body(self):
        recorder = ResponseRecorder()
        HTTPResponse(status=HTTPStatus.NO_CONTENT).write_to(recorder)

        assert recorder.result().status == 204
        assert recorder.body == bytearray()


class TestOk:
    def test_json(self):
        response = ok({"id": 1})

        assert response.status == 200
        assert json.loads(response.body) == {"id": 1}
        assert response.headers["Content-Type"] == "application/json; charset=utf-8"

    def test_text(self):
        response = ok("hi")
        assert response.headers["Content-Type"] == "text/plain; charset=utf-8"

    def test_bytes_leave_content_type_unset(self):
        response = ok(b"\x00\x01")

        assert response.body == b"\x00\x01"
        assert "Content-Type" not in response.headers


class TestWriteError:
    def test_json_error(self):
        recorder = ResponseRecorder()
        write_error(recorder, HTTPStatus.UNSUPPORTED_MEDIA_TYPE, "unsupported Content-Encoding")

        result = recorder.result()
        assert result.status == 415
        assert json.loads(result.body) == {"error": "unsupported Content-Encoding"}
        assert result.headers["Content-Type"] == "application/json; charset=utf-8"
        assert result.headers["X-Content-Type-Options"] == "nosniff"

    def test_drops_stale_body_headers(self):
        recorder = ResponseRecorder()
        recorder.headers["Content-Length"] = "1234"
        recorder.headers["Content-Encoding"] = "gzip"

        write_error(recorder, 500, "boom")

        headers = recorder.result().headers
        assert "Content-Length" not in headers
        assert "Content-Encoding" not in headers


class TestStatusCodes:
    def test_phrases(self):
        assert HTTPStatus.UNSUPPORTED_MEDIA_TYPE.phrase == "Unsupported Media Type"
        assert status_phrase(400) == "Bad Request"
        assert status_phrase(418) == "Unknown"

    def test_classification(self):
        assert HTTPStatus.ACCEPTED.is_success
        assert HTTPStatus.INTERNAL_SERVER_ERROR.is_error
        assert not HTTPStatus.OK.is_error
