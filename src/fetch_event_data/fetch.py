"""
Request an event stream over HTTP and dispatch its events to callbacks.

``fetch_event_data`` and ``afetch_event_data`` issue the request, check the
response status, then feed the body through ``SSEDecoder`` chunk by chunk,
calling ``on_message`` for every event before the next chunk is read.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field

from fetch_event_data._client import EventStreamHttpClient, HttpConfig
from fetch_event_data._headers import build_headers, serialize_payload
from fetch_event_data._lines import DEFAULT_ENCODING
from fetch_event_data._sse import ServerSentEvent, SSEDecoder

logger = logging.getLogger(__name__)

OnOpen = Callable[[httpx.Response], Any]
OnMessage = Callable[[ServerSentEvent], Any]
OnClose = Callable[[], Any]
OnError = Callable[[Exception], Any]


class FetchOptions(BaseModel):
    """
    Options for a single event-stream request.

    - method: HTTP method. Defaults to POST when a payload is sent, GET otherwise.
    - headers: Caller headers, merged over the defaults (``Accept:
      text/event-stream`` when ``on_message`` is set, ``Content-Type`` derived
      from the payload). Caller values win.
    - data: JSON-serializable payload; ignored when ``body`` is given.
    - body: Raw payload (``str``, ``bytes``, byte iterator, or a mapping/list
      sent as JSON).
    - params: Query string parameters.
    - encoding: Text encoding of the response body.
    - timeout_s: Per-request timeout; the client's timeout applies when unset.
    - on_open: Called with the response once the status check passed.
    - on_message: Called with each ServerSentEvent. Without it the body is not read.
    - on_close: Called after the body was fully consumed.
    - on_error: Receives any exception raised along the way. Without it the
      exception propagates to the caller.
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    method: Optional[str] = None
    headers: Optional[dict[str, str]] = None
    data: Any = None
    body: Any = None
    params: Optional[dict[str, Any]] = None
    encoding: str = DEFAULT_ENCODING
    timeout_s: Optional[float] = Field(default=None, gt=0)

    on_open: Optional[OnOpen] = None
    on_message: Optional[OnMessage] = None
    on_close: Optional[OnClose] = None
    on_error: Optional[OnError] = None

    def resolved_method(self) -> str:
        if self.method:
            return self.method.upper()
        return "POST" if self.body is not None or self.data is not None else "GET"

    def request_headers(self) -> httpx.Headers:
        return build_headers(
            self.headers,
            body=self.body,
            data=self.data,
            expect_events=self.on_message is not None,
        )

    def payload(self) -> Any:
        return serialize_payload(self.body, self.data)


def _resolve_options(options: FetchOptions | None, kwargs: dict[str, Any]) -> FetchOptions:
    if options is not None and kwargs:
        raise ValueError("Do not mix options=... with loose option keyword arguments.")
    return options or FetchOptions(**kwargs)


def fetch_event_data(
    url: str,
    options: FetchOptions | None = None,
    *,
    client: EventStreamHttpClient | None = None,
    **kwargs: Any,
) -> None:
    """
    Request ``url`` and dispatch the SSE events of the response body.

    Args:
        url: Absolute URL, or a path joined to the client's ``base_url``.
        options: Request options; alternatively pass them as keyword arguments.
        client: Client to reuse. It is left open. When omitted a client is
            created for this call and closed afterwards.

    Raises:
        EventStreamAPIError: On a non-2xx response, unless ``on_error`` is set.
        UnsupportedChunkType: If the body cannot be decoded, unless ``on_error`` is set.
    """
    opts = _resolve_options(options, kwargs)
    owned = client is None
    http = client or EventStreamHttpClient(config=HttpConfig())

    try:
        with http.stream(
            opts.resolved_method(),
            url,
            headers=opts.request_headers(),
            content=opts.payload(),
            params=opts.params,
            timeout_s=opts.timeout_s,
        ) as resp:
            http.check_stream(resp)
            if opts.on_open is not None:
                opts.on_open(resp)

            if opts.on_message is None:
                return

            decoder = SSEDecoder(encoding=opts.encoding)
            for chunk in resp.iter_bytes():
                for event in decoder.decode(chunk):
                    opts.on_message(event)
            for event in decoder.flush():
                opts.on_message(event)

            if opts.on_close is not None:
                opts.on_close()
    except Exception as e:
        if opts.on_error is None:
            raise
        logger.debug("Event stream %s failed: %r", url, e)
        opts.on_error(e)
    finally:
        if owned:
            http.close()


async def afetch_event_data(
    url: str,
    options: FetchOptions | None = None,
    *,
    client: EventStreamHttpClient | None = None,
    **kwargs: Any,
) -> None:
    """Async counterpart of ``fetch_event_data``. Callbacks are plain callables."""
    opts = _resolve_options(options, kwargs)
    owned = client is None
    http = client or EventStreamHttpClient(config=HttpConfig())

    try:
        async with http.astream(
            opts.resolved_method(),
            url,
            headers=opts.request_headers(),
            content=opts.payload(),
            params=opts.params,
            timeout_s=opts.timeout_s,
        ) as resp:
            await http.acheck_stream(resp)
            if opts.on_open is not None:
                opts.on_open(resp)

            if opts.on_message is None:
                return

            decoder = SSEDecoder(encoding=opts.encoding)
            async for chunk in resp.aiter_bytes():
                for event in decoder.decode(chunk):
                    opts.on_message(event)
            for event in decoder.flush():
                opts.on_message(event)

            if opts.on_close is not None:
                opts.on_close()
    except Exception as e:
        if opts.on_error is None:
            raise
        logger.debug("Event stream %s failed: %r", url, e)
        opts.on_error(e)
    finally:
        if owned:
            await http.aclose()
