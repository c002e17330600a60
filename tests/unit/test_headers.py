import json

import httpx
import pytest

from fetch_event_data._headers import build_headers, get_content_type, serialize_payload


@pytest.mark.parametrize(
    "body, expected",
    [
        ("hello", "text/plain"),
        (b"\x00\x01", "application/octet-stream"),
        (bytearray(b"x"), "application/octet-stream"),
        ({"a": 1}, "application/json"),
        ({}, "application/json"),
        ([1, 2], "application/json"),
        (42, "application/json"),
        (None, None),
        ("", None),
        (b"", None),
    ],
)
def test_get_content_type(body, expected):
    assert get_content_type(body) == expected


def test_get_content_type_for_byte_iterators():
    def gen():
        yield b"chunk"

    async def agen():
        yield b"chunk"

    assert get_content_type(gen()) == "text/event-stream"
    assert get_content_type(agen()) == "text/event-stream"


def test_serialize_payload_prefers_body():
    assert serialize_payload("raw", {"ignored": True}) == "raw"


def test_serialize_payload_data_as_json():
    assert json.loads(serialize_payload(None, {"q": "hi", "n": [1]})) == {"q": "hi", "n": [1]}


def test_serialize_payload_mapping_body_as_json():
    assert serialize_payload({"a": 1}, None) == '{"a": 1}'


def test_serialize_payload_bytearray_body():
    assert serialize_payload(bytearray(b"abc"), None) == b"abc"


def test_serialize_payload_nothing():
    assert serialize_payload(None, None) is None


def test_build_headers_for_event_stream_with_data():
    headers = build_headers(None, data={"a": 1}, expect_events=True)

    assert isinstance(headers, httpx.Headers)
    assert headers["Accept"] == "text/event-stream"
    assert headers["Content-Type"] == "application/json"


def test_build_headers_without_message_callback_has_no_accept():
    headers = build_headers(None)

    assert "Accept" not in headers
    assert "Content-Type" not in headers


def test_build_headers_string_data_is_still_json():
    headers = build_headers(None, data="hello")

    assert headers["Content-Type"] == "application/json"


def test_build_headers_body_content_type():
    headers = build_headers(None, body="plain text", data={"ignored": True})

    assert headers["Content-Type"] == "text/plain"


def test_caller_headers_override_defaults_case_insensitively():
    headers = build_headers(
        {"accept": "application/x-ndjson", "content-type": "text/csv", "X-Trace": "1"},
        data={"a": 1},
        expect_events=True,
    )

    assert headers["Accept"] == "application/x-ndjson"
    assert headers["Content-Type"] == "text/csv"
    assert headers["x-trace"] == "1"
    assert len(headers.get_list("accept")) == 1
