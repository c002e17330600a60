from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

import httpx

from fetch_event_data._errors import EventStreamAPIError

ENV_HTTP_DEBUG = "FETCH_EVENT_DATA_HTTP_DEBUG"

_REDACTED_HEADERS = ("authorization", "proxy-authorization", "cookie")


@dataclass(frozen=True, slots=True)
class HttpConfig:
    base_url: str = ""
    timeout_s: float = 120.0


def _default_error_message(status_code: int, reason: str | None) -> str:
    return f"Error {status_code}: {reason or ''}".rstrip()


def _parse_error_response(
    status_code: int,
    reason: str | None,
    body_text: str | None,
    content_type: str,
) -> EventStreamAPIError:
    """
    Build the error for a non-success response.

    JSON bodies contribute their ``message`` or ``error`` entry (``error`` may
    itself be an object with a ``message``); other bodies contribute their
    text. Anything unreadable or unparseable falls back to
    ``"Error <status>: <reason>"``.
    """
    default_message = _default_error_message(status_code, reason)
    message = default_message

    if "application/json" in content_type.lower():
        try:
            data = json.loads(body_text) if body_text else None
        except ValueError:
            data = None

        if isinstance(data, dict):
            candidate = data.get("message") or data.get("error")
            if isinstance(candidate, dict):
                candidate = candidate.get("message")
            if isinstance(candidate, str) and candidate.strip():
                message = candidate.strip()
    elif body_text and body_text.strip():
        message = body_text

    return EventStreamAPIError(
        status_code=status_code,
        message=message,
        body=body_text,
        reason=reason,
    )


def _redact_headers(headers: dict[str, Any]) -> dict[str, Any]:
    out = dict(headers)
    for k in list(out):
        if k.lower() in _REDACTED_HEADERS:
            out[k] = "***REDACTED***"
    return out


class EventStreamHttpClient:
    """
    Thin HTTPX wrapper with:
    - streamed requests via httpx.Client.stream / AsyncClient.stream
    - structured errors for non-2xx responses
    - optional debug logging (FETCH_EVENT_DATA_HTTP_DEBUG=1)
    """

    def __init__(
        self,
        *,
        config: HttpConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Both httpx clients are created on first use, so a client used only
        synchronously never opens an ``AsyncClient`` and vice versa.

        ``async_transport`` defaults to ``transport``; pass it when
        ``transport`` is sync-only (e.g. ``httpx.HTTPTransport``).
        """
        self._config = config or HttpConfig()
        self._transport = transport
        self._async_transport = async_transport if async_transport is not None else transport
        self._client: httpx.Client | None = None
        self._aclient: httpx.AsyncClient | None = None
        self._debug_http = os.getenv(ENV_HTTP_DEBUG, "").lower() in {"1", "true", "yes", "on"}

        def _log_request(request: httpx.Request) -> None:
            if not self._debug_http:
                return
            logging.warning("HTTPX REQUEST %s %s", request.method, request.url)
            logging.warning("HTTPX REQUEST headers=%s", _redact_headers(dict(request.headers)))
            try:
                content = request.content
            except httpx.RequestNotRead:
                logging.warning("HTTPX REQUEST body=(streaming; not logged)")
                return
            if content:
                try:
                    logging.warning("HTTPX REQUEST body=%s", content.decode("utf-8"))
                except UnicodeDecodeError:
                    logging.warning("HTTPX REQUEST body=(binary) len=%s", len(content))

        def _log_response_head(response: httpx.Response) -> None:
            req = response.request
            logging.warning("HTTPX RESPONSE %s %s -> %s", req.method, req.url, response.status_code)
            logging.warning("HTTPX RESPONSE headers=%s", _redact_headers(dict(response.headers)))

        def _log_response_sync(response: httpx.Response) -> None:
            if not self._debug_http:
                return
            _log_response_head(response)
            if "text/event-stream" in response.headers.get("content-type", ""):
                logging.warning("HTTPX RESPONSE body=(event-stream; not auto-logged)")
                return
            try:
                response.read()
                logging.warning("HTTPX RESPONSE body=%s", response.text)
            except httpx.HTTPError as e:
                logging.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        async def _log_request_async(request: httpx.Request) -> None:
            _log_request(request)

        async def _log_response_async(response: httpx.Response) -> None:
            if not self._debug_http:
                return
            _log_response_head(response)
            if "text/event-stream" in response.headers.get("content-type", ""):
                logging.warning("HTTPX RESPONSE body=(event-stream; not auto-logged)")
                return
            try:
                await response.aread()
                logging.warning("HTTPX RESPONSE body=%s", response.text)
            except httpx.HTTPError as e:
                logging.warning("HTTPX RESPONSE body=(unreadable) err=%r", e)

        EventHooksDict = dict[str, list[Callable[..., Any]]]

        self._hooks_sync: EventHooksDict = {"request": [_log_request], "response": [_log_response_sync]}
        self._hooks_async: EventHooksDict = {"request": [_log_request_async], "response": [_log_response_async]}

    @property
    def config(self) -> HttpConfig:
        return self._config

    def _sync_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self._config.timeout_s),
                event_hooks=self._hooks_sync,
                transport=self._transport,
            )
        return self._client

    def _async_client(self) -> httpx.AsyncClient:
        if self._aclient is None:
            self._aclient = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_s),
                event_hooks=self._hooks_async,
                transport=self._async_transport,
            )
        return self._aclient

    def close(self) -> None:
        """Close the sync client. An async client opened by ``astream`` needs ``aclose``."""
        if self._client is not None:
            self._client.close()

    async def aclose(self) -> None:
        """Close every client this wrapper has opened."""
        if self._aclient is not None:
            await self._aclient.aclose()
        if self._client is not None:
            self._client.close()

    def __enter__(self) -> EventStreamHttpClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    async def __aenter__(self) -> EventStreamHttpClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _url(self, url: str) -> str:
        return f"{self._config.base_url}{url}"

    @staticmethod
    def raise_for_status(resp: httpx.Response) -> None:
        """Check the status and raise a structured EventStreamAPIError."""
        if 200 <= resp.status_code < 300:
            return

        body_text: str | None = None
        try:
            body_text = resp.text
        except (httpx.HTTPError, httpx.StreamError):
            body_text = None

        raise _parse_error_response(
            status_code=resp.status_code,
            reason=getattr(resp, "reason_phrase", None),
            body_text=body_text,
            content_type=resp.headers.get("content-type", ""),
        )

    def check_stream(self, resp: httpx.Response) -> None:
        """
        ``raise_for_status`` for a streamed response.

        The body of a failed response is read first so its message can be
        reported; a body that cannot be read leaves the default message.
        """
        if resp.is_success:
            return
        try:
            resp.read()
        except (httpx.HTTPError, httpx.StreamError) as e:
            logging.debug("Could not read error body of %s: %r", resp.url, e)
        self.raise_for_status(resp)

    async def acheck_stream(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return
        try:
            await resp.aread()
        except (httpx.HTTPError, httpx.StreamError) as e:
            logging.debug("Could not read error body of %s: %r", resp.url, e)
        self.raise_for_status(resp)

    def stream(
        self,
        method: str,
        url: str,
        *,
        headers: httpx.Headers | dict[str, str] | None = None,
        content: Any = None,
        params: dict[str, Any] | None = None,
        timeout_s: float | None = None,
    ) -> Any:
        """
        Return an httpx stream context manager.

        Usage:
            with client.stream("GET", "/events") as r:
                client.check_stream(r)
                for chunk in r.iter_bytes():
                    ...
        """
        kwargs: dict[str, Any] = {"headers": headers, "content": content, "params": params}
        if timeout_s is not None:
            kwargs["timeout"] = httpx.Timeout(timeout_s)
        return self._sync_client().stream(method, self._url(url), **kwargs)

    def astream(
        self,
        method: str,
        url: str,
        *,
        headers: httpx.Headers | dict[str, str] | None = None,
        content: Any = None,
        params: dict[str, Any] | None = None,
        timeout_s: float | None = None,
    ) -> Any:
        """
        Return an async httpx stream context manager.

        Usage:
            async with client.astream("GET", "/events") as r:
                await client.acheck_stream(r)
                async for chunk in r.aiter_bytes():
                    ...
        """
        kwargs: dict[str, Any] = {"headers": headers, "content": content, "params": params}
        if timeout_s is not None:
            kwargs["timeout"] = httpx.Timeout(timeout_s)
        return self._async_client().stream(method, self._url(url), **kwargs)
