"""Shared request data types."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, NamedTuple, TypeVar

from core.exceptions import RequesterError

T = TypeVar("T")

_UNSET: Any = object()


class ResponseSlot(Generic[T]):
    """Caller-owned decode target for a response body.

    ``model`` is anything pydantic can validate (a BaseModel subclass, a
    dataclass, ``dict[str, Any]`` ...). A successful decode stores the result
    in ``value``; the slot itself is never replaced.
    """

    def __init__(self, model: type[T] | Any) -> None:
        self.model = model
        self._value: T = _UNSET

    @property
    def is_set(self) -> bool:
        return self._value is not _UNSET

    @property
    def value(self) -> T:
        if self._value is _UNSET:
            raise LookupError("Response slot has not been populated")
        return self._value

    @value.setter
    def value(self, value: T) -> None:
        self._value = value

    def __repr__(self) -> str:
        shown = repr(self._value) if self.is_set else "<unset>"
        return f"ResponseSlot({self.model!r}, value={shown})"


@dataclass(frozen=True)
class RequestSpec:
    """Immutable configuration for one outbound request."""

    method: str = ""
    url: str = ""
    headers: Mapping[str, list[str]] = field(default_factory=dict)
    transaction_id: str = ""
    response: ResponseSlot[Any] | None = None


class ResponseOutcome(NamedTuple):
    """Status code plus classified error; unpacks as ``(status, error)``."""

    status_code: int
    error: RequesterError | None = None

    @property
    def ok(self) -> bool:
        return self.status_code == 200 and self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error
