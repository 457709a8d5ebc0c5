"""Shared test doubles for the requester tests."""

import io
from collections.abc import Callable, Iterator
from typing import Any

import httpx


class RecordingLogger:
    """EventLogger that keeps every event in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, str, dict[str, Any]]] = []

    def log_event(self, level: str, message: str, fields: dict[str, Any]) -> None:
        self.events.append((level, message, fields))


class TrackedStream(io.BytesIO):
    """BytesIO that remembers whether it was closed."""

    was_closed = False

    def close(self) -> None:
        self.was_closed = True
        super().close()


class MemoryFiles:
    """FormFileSource over in-memory uploads."""

    def __init__(self, files: dict[str, bytes]) -> None:
        self.files = files
        self.opened: list[TrackedStream] = []

    def open_file(self, field_name: str) -> TrackedStream:
        stream = TrackedStream(self.files[field_name])
        self.opened.append(stream)
        return stream


class BrokenFiles:
    """FormFileSource whose streams fail on read."""

    def __init__(self) -> None:
        self.opened: list["_FailingStream"] = []

    def open_file(self, field_name: str) -> "_FailingStream":
        stream = _FailingStream()
        self.opened.append(stream)
        return stream


class _FailingStream(TrackedStream):
    def read(self, *args: Any) -> bytes:
        raise OSError("disk went away")


class ClosingStream(httpx.SyncByteStream):
    """Response stream that records whether it was closed."""

    def __init__(self, body: bytes) -> None:
        self._body = body
        self.closed = False

    def __iter__(self) -> Iterator[bytes]:
        yield self._body

    def close(self) -> None:
        self.closed = True


def make_response(
    status: int = 200,
    body: bytes = b"",
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Build an unread response so the raw body is still available."""
    return httpx.Response(status, headers=headers, stream=httpx.ByteStream(body))


class RecordingTransport:
    """Mock transport: records requests and replies with a canned response."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._reply: Callable[[httpx.Request], httpx.Response] = lambda request: make_response(
            200, b"{}"
        )

    def reply(
        self,
        status: int = 200,
        body: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        self._reply = lambda request: make_response(status, body, headers)

    def reply_with(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self._reply = handler

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._reply(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))
