"""Body encoding and decoding: JSON payloads, gzip responses, typed results."""

import gzip
import io
import zlib
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, from_json, to_json

from core.exceptions import DecodingError, DeserializationError, SerializationError
from core.request_types import ResponseSlot

_CHUNK = 1024
_NON_FINITE = (b"NaN", b"Infinity")


def encode_json(payload: Any) -> bytes:
    """Serialize a payload (models, dataclasses, plain containers) to JSON bytes.

    NaN and infinite floats have no JSON representation and are rejected.
    """
    try:
        body = to_json(payload)
        if any(token in body for token in _NON_FINITE):
            # strict re-parse tells bare NaN/Infinity apart from string content
            from_json(body, allow_inf_nan=False)
        return body
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(f"Unable to serialize request payload: {e}") from e


def gunzip(data: bytes) -> bytes:
    """Decompress a gzip body.

    A body that fails before yielding any output (missing, malformed or
    truncated header) raises DecodingError. Later corruption, truncation or
    a checksum mismatch is tolerated: the bytes inflated so far are returned.
    """
    if not data:
        raise DecodingError("Unable to create gzip reader for encoded content: empty body")
    out = bytearray()
    with gzip.GzipFile(fileobj=io.BytesIO(data)) as reader:
        try:
            while chunk := reader.read(_CHUNK):
                out += chunk
        except (OSError, EOFError, zlib.error) as e:
            if not out:
                raise DecodingError(
                    f"Unable to create gzip reader for encoded content: {e}"
                ) from e
    return bytes(out)


def decode_into(slot: ResponseSlot[Any], data: bytes) -> None:
    """Validate JSON bytes against the slot's model and store the result."""
    try:
        slot.value = TypeAdapter(slot.model).validate_json(data)
    except ValidationError as e:
        raise DeserializationError(
            f"Unable to unmarshal response object to provided model: {e}"
        ) from e
