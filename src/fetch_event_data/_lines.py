"""
Incremental text decoding and line splitting for chunked response bodies.

Chunk boundaries carry no meaning: a line, a CRLF pair or even a multi-byte
UTF-8 sequence may be cut anywhere. ``LineDecoder`` buffers the unterminated
tail of each chunk and only hands out complete lines.
"""

from __future__ import annotations

import codecs
import re
from typing import Any, Union

from fetch_event_data._errors import UnsupportedChunkType

Chunk = Union[str, bytes, bytearray, memoryview]

DEFAULT_ENCODING = "utf-8"

NEWLINE_CHARS = frozenset("\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029")
NEWLINE_RE = re.compile("\r\n|[\n\r\x0b\x0c\x1c\x1d\x1e\x85\u2028\u2029]")


class ChunkTextDecoder:
    """
    Turns ``str`` or binary chunks into text with a fixed encoding.

    The codec is created once and reused. It is incremental, so a multi-byte
    sequence split across two binary chunks comes out as one character.
    """

    def __init__(self, encoding: str = DEFAULT_ENCODING) -> None:
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            raise UnsupportedChunkType(f"Unknown text encoding {encoding!r}") from e
        self.encoding = encoding
        self._codec: codecs.IncrementalDecoder | None = None

    def decode(self, chunk: Any) -> str:
        if isinstance(chunk, str):
            return chunk
        if isinstance(chunk, (bytes, bytearray, memoryview)):
            if self._codec is None:
                self._codec = codecs.getincrementaldecoder(self.encoding)(errors="replace")
            return self._codec.decode(bytes(chunk))

        raise UnsupportedChunkType(
            f"Unexpected stream chunk of type {type(chunk).__name__}; expected str or bytes"
        )

    def flush(self) -> str:
        """Text still held by the codec (an incomplete trailing sequence)."""
        if self._codec is None:
            return ""
        text = self._codec.decode(b"", final=True)
        self._codec.reset()
        return text


class LineDecoder:
    """
    Splits a sequence of text chunks into complete lines.

    Recognizes ``\\n``, ``\\r``, ``\\r\\n`` and the other Unicode line
    boundaries (VT, FF, FS, GS, RS, NEL, LS, PS). Returned lines have their
    terminator removed. A trailing ``\\r`` is held back until the next chunk
    shows whether it is the first half of a CRLF pair.
    """

    def __init__(self, *, encoding: str = DEFAULT_ENCODING) -> None:
        self._text = ChunkTextDecoder(encoding)
        self._buffer: list[str] = []
        self._trailing_cr = False

    def decode(self, chunk: Chunk) -> list[str]:
        text = self._text.decode(chunk)
        return self._split(text)

    def _split(self, text: str) -> list[str]:
        if self._trailing_cr:
            text = "\r" + text
            self._trailing_cr = False
        if text.endswith("\r"):
            self._trailing_cr = True
            text = text[:-1]

        if not text:
            return []

        trailing_newline = text[-1] in NEWLINE_CHARS
        lines = NEWLINE_RE.split(text)

        if len(lines) == 1 and not trailing_newline:
            self._buffer.append(lines[0])
            return []

        if self._buffer:
            lines[0] = "".join(self._buffer) + lines[0]
            self._buffer = []

        if trailing_newline:
            # Splitting on a final terminator leaves an empty, non-line segment.
            lines.pop()
        else:
            self._buffer = [lines.pop()]

        return lines

    def flush(self) -> list[str]:
        """
        Emit the buffered partial line at end of stream.

        Returns an empty list when nothing is pending. Otherwise returns the
        fragment (possibly ``""`` when only a lone ``\\r`` was pending) and
        clears all state.
        """
        tail = self._text.flush()
        lines = self._split(tail) if tail else []

        if not self._buffer and not self._trailing_cr:
            return lines

        lines.append("".join(self._buffer))
        self._buffer = []
        self._trailing_cr = False
        return lines
