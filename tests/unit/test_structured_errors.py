"""
Unit tests for structured API errors raised when an event stream cannot be opened.
"""

import json

import pytest

from fetch_event_data._client import _parse_error_response
from fetch_event_data._errors import EventStreamAPIError, FetchEventDataError, UnsupportedChunkType


class TestEventStreamAPIError:
    """Tests for the EventStreamAPIError class."""

    def test_error_creation_minimal(self):
        error = EventStreamAPIError(status_code=500, message="Internal error")

        assert error.status_code == 500
        assert error.message == "Internal error"
        assert error.body is None
        assert error.reason is None

    def test_is_library_error(self):
        error = EventStreamAPIError(status_code=500, message="x")

        assert isinstance(error, FetchEventDataError)
        assert isinstance(error, RuntimeError)

    def test_str_minimal(self):
        s = str(EventStreamAPIError(status_code=400, message="Bad request"))

        assert "400" in s
        assert "Bad request" in s
        assert "EventStreamAPIError" in s

    def test_str_with_body(self):
        s = str(EventStreamAPIError(status_code=500, message="Error", body="x" * 1000))

        assert "1000 chars" in s

    def test_repr_hides_body(self):
        r = repr(EventStreamAPIError(status_code=502, message="m", body="secret", reason="Bad Gateway"))

        assert "secret" not in r
        assert "'Bad Gateway'" in r

    def test_to_dict(self):
        error = EventStreamAPIError(status_code=404, message="nope", body="nope", reason="Not Found")

        assert error.to_dict() == {
            "status_code": 404,
            "message": "nope",
            "reason": "Not Found",
            "body": "nope",
        }

    @pytest.mark.parametrize(
        "status, client, server, auth",
        [
            (400, True, False, False),
            (401, True, False, True),
            (403, True, False, True),
            (500, False, True, False),
            (503, False, True, False),
        ],
    )
    def test_classification(self, status, client, server, auth):
        error = EventStreamAPIError(status_code=status, message="x")

        assert error.is_client_error is client
        assert error.is_server_error is server
        assert error.is_auth_error is auth


class TestUnsupportedChunkType:
    def test_is_library_error(self):
        assert issubclass(UnsupportedChunkType, FetchEventDataError)


class TestParseErrorResponse:
    """Tests for _parse_error_response."""

    def test_json_message(self):
        body = json.dumps({"message": "Invalid cursor"})

        error = _parse_error_response(400, "Bad Request", body, "application/json")

        assert error.message == "Invalid cursor"
        assert error.body == body
        assert error.reason == "Bad Request"

    def test_json_error_string(self):
        body = json.dumps({"error": "rate limited"})

        error = _parse_error_response(429, "Too Many Requests", body, "application/json; charset=utf-8")

        assert error.message == "rate limited"

    def test_json_message_wins_over_error(self):
        body = json.dumps({"message": "first", "error": "second"})

        error = _parse_error_response(400, "Bad Request", body, "application/json")

        assert error.message == "first"

    def test_json_nested_error_object(self):
        body = json.dumps({"error": {"code": "FORBIDDEN", "message": "Access denied"}})

        error = _parse_error_response(403, "Forbidden", body, "application/json")

        assert error.message == "Access denied"

    def test_json_without_message_uses_default(self):
        error = _parse_error_response(500, "Internal Server Error", '{"status": 500}', "application/json")

        assert error.message == "Error 500: Internal Server Error"

    def test_invalid_json_uses_default(self):
        error = _parse_error_response(502, "Bad Gateway", "<html>oops</html>", "application/json")

        assert error.message == "Error 502: Bad Gateway"
        assert error.body == "<html>oops</html>"

    def test_json_non_dict_uses_default(self):
        error = _parse_error_response(500, "Internal Server Error", '["a", "b"]', "application/json")

        assert error.message == "Error 500: Internal Server Error"

    def test_text_body(self):
        error = _parse_error_response(404, "Not Found", "no such stream", "text/plain")

        assert error.message == "no such stream"

    def test_blank_text_body_uses_default(self):
        error = _parse_error_response(404, "Not Found", "   ", "text/plain")

        assert error.message == "Error 404: Not Found"

    def test_missing_body_uses_default(self):
        error = _parse_error_response(500, "Internal Server Error", None, "")

        assert error.message == "Error 500: Internal Server Error"
        assert error.body is None

    def test_missing_reason(self):
        error = _parse_error_response(599, None, None, "")

        assert error.message == "Error 599:"
