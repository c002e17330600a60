from __future__ import annotations

from fetch_event_data._client import EventStreamHttpClient, HttpConfig
from fetch_event_data._errors import EventStreamAPIError, FetchEventDataError, UnsupportedChunkType
from fetch_event_data._lines import ChunkTextDecoder, LineDecoder
from fetch_event_data._sse import (
    ServerSentEvent,
    SSEDecoder,
    SSEEventAccumulator,
    aiter_sse_events,
    iter_sse_events,
    iter_sse_events_from_text,
)
from fetch_event_data.fetch import FetchOptions, afetch_event_data, fetch_event_data

__all__ = [
    "ChunkTextDecoder",
    "EventStreamAPIError",
    "EventStreamHttpClient",
    "FetchEventDataError",
    "FetchOptions",
    "HttpConfig",
    "LineDecoder",
    "SSEDecoder",
    "SSEEventAccumulator",
    "ServerSentEvent",
    "UnsupportedChunkType",
    "afetch_event_data",
    "aiter_sse_events",
    "fetch_event_data",
    "iter_sse_events",
    "iter_sse_events_from_text",
]

__version__ = "0.1.0"
