"""Request header defaults and payload serialization for event-stream requests."""

from __future__ import annotations

import json
from collections.abc import AsyncIterable, Iterable, Mapping
from typing import Any

import httpx

EVENT_STREAM = "text/event-stream"


def get_content_type(body: Any) -> str | None:
    """
    Guess the Content-Type of a request body.

    ``str`` is sent as ``text/plain``, binary buffers as
    ``application/octet-stream`` and byte iterators as ``text/event-stream``.
    Empty bodies have no type; anything else is assumed to be JSON.
    """
    if isinstance(body, str):
        return "text/plain" if body else None
    if isinstance(body, (bytes, bytearray, memoryview)):
        return "application/octet-stream" if body else None
    if body is None:
        return None
    if isinstance(body, Mapping):
        return "application/json"
    if isinstance(body, (Iterable, AsyncIterable)) and not isinstance(body, (list, tuple)):
        return EVENT_STREAM
    return "application/json"


def serialize_payload(body: Any, data: Any) -> Any:
    """
    Pick the request payload: ``body`` as given, else ``data`` as JSON text.

    Returns ``None`` when neither is set.
    """
    if body is not None:
        if isinstance(body, (Mapping, list, tuple)):
            return json.dumps(body)
        if isinstance(body, (bytearray, memoryview)):
            return bytes(body)
        return body
    if data is not None:
        return json.dumps(data)
    return None


def build_headers(
    headers: Mapping[str, str] | None,
    *,
    body: Any = None,
    data: Any = None,
    expect_events: bool = False,
) -> httpx.Headers:
    """
    Merge caller headers over protocol defaults.

    Defaults are ``Accept: text/event-stream`` when events are expected and a
    ``Content-Type`` derived from the payload. Caller headers win, matched
    case-insensitively.
    """
    merged = httpx.Headers()
    if expect_events:
        merged["Accept"] = EVENT_STREAM

    if body is not None:
        content_type = get_content_type(body)
    elif data is not None:
        content_type = "application/json"
    else:
        content_type = None
    if content_type:
        merged["Content-Type"] = content_type

    if headers:
        merged.update(headers)
    return merged
