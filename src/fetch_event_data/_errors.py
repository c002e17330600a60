from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class FetchEventDataError(RuntimeError):
    """Base error of the library."""


class UnsupportedChunkType(FetchEventDataError):
    """
    A stream chunk could not be turned into text.

    Raised when a chunk is neither ``str`` nor a binary buffer, or when the
    configured text encoding is unknown to the runtime. Both cases are
    configuration errors and abort the stream.
    """


@dataclass(slots=True)
class EventStreamAPIError(FetchEventDataError):
    """
    Non-success HTTP response returned when opening an event stream.

    ``message`` is taken from the response body when possible (``message`` or
    ``error`` of a JSON object, or the plain text body) and falls back to
    ``"Error <status>: <reason>"``.
    """
    status_code: int
    message: str
    body: str | None = None
    reason: str | None = None

    def __str__(self) -> str:
        parts = [f"EventStreamAPIError(status_code={self.status_code}"]
        parts.append(f", message={self.message!r}")
        if self.body:
            parts.append(f", body={len(self.body)} chars")
        parts.append(")")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"EventStreamAPIError("
            f"status_code={self.status_code}, "
            f"message={self.message!r}, "
            f"reason={self.reason!r}, "
            f"body={'...' if self.body else None})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Error as a dict, for structured logging."""
        return {
            "status_code": self.status_code,
            "message": self.message,
            "reason": self.reason,
            "body": self.body,
        }

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    @property
    def is_auth_error(self) -> bool:
        """True for authentication (401) or authorization (403) failures."""
        return self.status_code in (401, 403)
