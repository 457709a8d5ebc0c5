"""Dispatch of prepared requests and decoding of their responses."""

from typing import Any

import httpx

from core.encoding import decode_into, gunzip
from core.exceptions import (
    BuildError,
    DecodingError,
    DeserializationError,
    NonSuccessStatus,
    TransportError,
)
from core.protocols import EventLogger
from core.request_types import ResponseOutcome, ResponseSlot
from ui.event_log import EventLog


class Request:
    """A fully assembled outbound request, or the error that stopped its build."""

    def __init__(
        self,
        request: httpx.Request | None = None,
        *,
        response: ResponseSlot[Any] | None = None,
        transaction_id: str = "",
        error: BuildError | None = None,
        client: httpx.Client | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        if (request is None) == (error is None):
            raise ValueError("Request needs exactly one of a prepared request or an error")
        self.request = request
        self.response = response
        self.transaction_id = transaction_id
        self.error = error
        self._client = client
        self._logger = logger

    @classmethod
    def failed(cls, error: BuildError) -> "Request":
        return cls(error=error)

    def send(self) -> ResponseOutcome:
        """Send the request and decode the body into the registered slot.

        Errors are returned, never raised: any non-None error is
        authoritative regardless of the status code.
        """
        if self.error is not None:
            return ResponseOutcome(self.error.status_code, self.error)

        client = self._client or httpx.Client(timeout=None)
        try:
            return self._dispatch(client)
        finally:
            if self._client is None:
                client.close()

    def _dispatch(self, client: httpx.Client) -> ResponseOutcome:
        try:
            response = client.send(self.request, stream=True)
        except httpx.HTTPError as e:
            error = TransportError(f"Error encountered when making request: {e}")
            error.__cause__ = e
            return ResponseOutcome(error.status_code, error)

        try:
            if self.response is not None:
                error = self._decode(response)
                if error is not None:
                    return ResponseOutcome(error.status_code, error)
        finally:
            response.close()

        if response.status_code != 200:
            return ResponseOutcome(response.status_code, NonSuccessStatus(response.status_code))
        return ResponseOutcome(200)

    def _decode(self, response: httpx.Response) -> TransportError | DecodingError | DeserializationError | None:
        """Buffer the raw body, gunzip if declared, then validate into the slot."""
        try:
            buf = b"".join(response.iter_raw())
        except httpx.HTTPError as e:
            error = TransportError(f"Error encountered when reading response: {e}")
            error.__cause__ = e
            return error

        if response.headers.get("Content-Encoding") == "gzip":
            try:
                buf = gunzip(buf)
            except DecodingError as e:
                return e

        try:
            decode_into(self.response, buf)
        except DeserializationError as e:
            self._log_non_json(e, buf)
            return e
        return None

    def _log_non_json(self, error: DeserializationError, buf: bytes) -> None:
        logger = self._logger or EventLog()
        logger.log_event(
            "ERROR",
            "Service call returned non-json response body.",
            {
                "type": "internal",
                "transaction": self.transaction_id,
                "err": {"message": str(error.__cause__ or error)},
                "json": buf.decode("utf-8", errors="replace"),
            },
        )

