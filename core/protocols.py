"""Shared protocol definitions."""

from typing import Any, BinaryIO, Protocol


class FormFileSource(Protocol):
    """Protocol for inbound uploads addressed by form field name."""

    def open_file(self, field_name: str) -> BinaryIO:
        """Return a readable stream; LookupError if absent, OSError if unreadable."""
        ...


class EventLogger(Protocol):
    """Protocol for structured event logging (EventLog)."""

    def log_event(self, level: str, message: str, fields: dict[str, Any]) -> None: ...
