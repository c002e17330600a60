"""
Streaming parser for Server-Sent Events (SSE).

Lines produced by ``LineDecoder`` are grouped into events; an event is emitted
on every blank line that closes at least one ``event:`` or ``data:`` field.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Iterator

from fetch_event_data._lines import DEFAULT_ENCODING, Chunk, LineDecoder

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ServerSentEvent:
    """
    A single decoded Server-Sent Event.

    ``data`` joins every ``data:`` value of the event with ``"\\n"``; ``raw``
    keeps the lines (comments included) that made up the event.
    """

    event: str | None
    data: str
    raw: tuple[str, ...] = ()

    def json(self) -> Any:
        """Parse ``data`` as JSON. Raises ``ValueError`` when it is not valid JSON."""
        return json.loads(self.data)


@dataclass(slots=True)
class _PendingEvent:
    event: str | None = None
    data: list[str] = field(default_factory=list)
    raw: list[str] = field(default_factory=list)


def _partition_field(line: str) -> tuple[str, str]:
    name, _, value = line.partition(":")
    if value.startswith(" "):
        value = value[1:]
    return name, value


class SSEEventAccumulator:
    """
    Applies SSE field grammar to complete lines.

    Only ``event`` and ``data`` fields are interpreted; comments and any other
    field are kept in ``raw`` and otherwise ignored.
    """

    def __init__(self) -> None:
        self._pending = _PendingEvent()

    @property
    def pending(self) -> bool:
        """True while an event type or data line waits for its closing blank line."""
        return bool(self._pending.event) or bool(self._pending.data)

    def reset(self) -> None:
        self._pending = _PendingEvent()

    def decode(self, line: str) -> ServerSentEvent | None:
        if line.endswith("\r"):
            line = line[:-1]

        if not line:
            # Blank line before any field, or a repeated blank line.
            if not self.pending:
                return None

            current = self._pending
            self._pending = _PendingEvent()
            return ServerSentEvent(
                event=current.event,
                data="\n".join(current.data),
                raw=tuple(current.raw),
            )

        self._pending.raw.append(line)

        if line.startswith(":"):
            return None

        name, value = _partition_field(line)
        if name == "event":
            self._pending.event = value
        elif name == "data":
            self._pending.data.append(value)
        return None


class SSEDecoder:
    """
    Decodes a chunked SSE body into events.

    Feed every chunk, in order, to ``decode`` and call ``flush`` once the body
    ends. An event still open at that point (no closing blank line) is
    discarded.

    Example:
        >>> decoder = SSEDecoder()
        >>> decoder.decode(b"event: ping\\ndata: 1\\n")
        []
        >>> decoder.decode(b"\\n")
        [ServerSentEvent(event='ping', data='1', raw=('event: ping', 'data: 1'))]
    """

    def __init__(self, *, encoding: str = DEFAULT_ENCODING) -> None:
        self._lines = LineDecoder(encoding=encoding)
        self._events = SSEEventAccumulator()

    def _feed(self, lines: Iterable[str]) -> list[ServerSentEvent]:
        out: list[ServerSentEvent] = []
        for line in lines:
            sse = self._events.decode(line)
            if sse is not None:
                out.append(sse)
        return out

    def decode(self, chunk: Chunk) -> list[ServerSentEvent]:
        return self._feed(self._lines.decode(chunk))

    def flush(self) -> list[ServerSentEvent]:
        out = self._feed(self._lines.flush())
        if self._events.pending:
            logger.debug("SSE stream ended without a blank line; discarding unterminated event")
        self._events.reset()
        return out


def iter_sse_events(chunks: Iterable[Chunk], *, encoding: str = DEFAULT_ENCODING) -> Iterator[ServerSentEvent]:
    """
    Decode SSE events from a synchronous iterable of chunks.

    Args:
        chunks: ``bytes`` or ``str`` chunks in stream order, e.g. ``response.iter_bytes()``.
        encoding: Text encoding of binary chunks.

    Yields:
        ServerSentEvent objects as soon as their closing blank line arrives.
    """
    decoder = SSEDecoder(encoding=encoding)
    for chunk in chunks:
        yield from decoder.decode(chunk)
    yield from decoder.flush()


async def aiter_sse_events(
    chunks: AsyncIterable[Chunk], *, encoding: str = DEFAULT_ENCODING
) -> AsyncIterator[ServerSentEvent]:
    """Async counterpart of ``iter_sse_events``, e.g. for ``response.aiter_bytes()``."""
    decoder = SSEDecoder(encoding=encoding)
    async for chunk in chunks:
        for sse in decoder.decode(chunk):
            yield sse
    for sse in decoder.flush():
        yield sse


def iter_sse_events_from_text(text: str) -> Iterator[ServerSentEvent]:
    """
    Parse SSE events from a complete text body.

    Args:
        text: The raw string containing one or multiple SSE events.

    Yields:
        ServerSentEvent objects, in order.
    """
    return iter_sse_events([text])
