"""Request construction: an immutable RequestSpec in, a prepared Request out.

Three encodings are supported (JSON, multipart form, raw octet-stream). Every
build either returns a ready-to-send ``Request`` or a ``Request`` that holds
only the error which stopped the build; nothing is raised.
"""

import os
import re
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

import httpx

from core.config import Config
from core.encoding import encode_json
from core.exceptions import (
    BuildError,
    EncodingError,
    FileAccessError,
    RequestConstructionError,
)
from core.headers import HeaderBuilder
from core.protocols import EventLogger, FormFileSource
from core.request_types import RequestSpec, ResponseSlot
from services.requester import Request
from ui.event_log import EventLog

JSON_CONTENT_TYPE = "application/json"
OCTET_CONTENT_TYPE = "application/octet-stream"

# RFC 9110 token characters
_METHOD_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+$")


def build_json(
    spec: RequestSpec,
    payload: Any = None,
    *,
    header_builder: HeaderBuilder | None = None,
    client: httpx.Client | None = None,
    logger: EventLogger | None = None,
) -> Request:
    """Build a request with a JSON body; ``None`` sends an empty body."""
    try:
        body = encode_json(payload) if payload is not None else None
        return _prepare(spec, JSON_CONTENT_TYPE, header_builder, client, logger, body=body)
    except BuildError as e:
        return Request.failed(e)


def build_multipart(
    spec: RequestSpec,
    source: FormFileSource,
    files: Mapping[str, str],
    fields: Mapping[str, str],
    *,
    header_builder: HeaderBuilder | None = None,
    client: httpx.Client | None = None,
    logger: EventLogger | None = None,
) -> Request:
    """Build a multipart/form-data request.

    ``files`` maps the outgoing part name to the inbound field name; the
    inbound field name is also sent as the part's filename. ``fields`` are
    written as plain form fields. httpx encodes the body and supplies the
    ``multipart/form-data; boundary=...`` content type.
    """
    try:
        parts: list[tuple[str, tuple[str | None, bytes | str, str | None]]] = [
            (new_name, (current_name, read_upload(source, current_name), OCTET_CONTENT_TYPE))
            for new_name, current_name in files.items()
        ]
        # a part without filename is a plain field; keeps fields-only forms multipart
        for key, value in fields.items():
            if not isinstance(value, (str, bytes)):
                raise EncodingError(f"Form field {key!r} must be text, got {type(value).__name__}")
            parts.append((key, (None, value, None)))
        return _prepare(spec, None, header_builder, client, logger, files=parts)
    except BuildError as e:
        return Request.failed(e)


def build_octet(
    spec: RequestSpec,
    source: FormFileSource,
    field_name: str,
    *,
    header_builder: HeaderBuilder | None = None,
    client: httpx.Client | None = None,
    logger: EventLogger | None = None,
) -> Request:
    """Build a request whose body is one upload, verbatim, as octet-stream."""
    try:
        body = read_upload(source, field_name)
        return _prepare(spec, OCTET_CONTENT_TYPE, header_builder, client, logger, body=body)
    except BuildError as e:
        return Request.failed(e)


def read_upload(source: FormFileSource, field_name: str) -> bytes:
    """Read a named upload fully; the stream is closed on every path."""
    try:
        stream = source.open_file(field_name)
    except LookupError as e:
        raise FileAccessError(f"No file uploaded for field {field_name!r}", field_name) from e
    except (OSError, ValueError) as e:
        raise FileAccessError(f"Unable to open upload {field_name!r}: {e}", field_name) from e
    try:
        return stream.read()
    except (OSError, ValueError) as e:
        raise FileAccessError(f"Unable to read upload {field_name!r}: {e}", field_name) from e
    finally:
        stream.close()


def _prepare(
    spec: RequestSpec,
    content_type: str | None,
    header_builder: HeaderBuilder | None,
    client: httpx.Client | None,
    logger: EventLogger | None,
    *,
    body: bytes | None = None,
    files: list[Any] | None = None,
) -> Request:
    """Construct the transport request and apply headers in order."""
    request = _construct(spec.method, spec.url, body=body, files=files)
    request.headers = (header_builder or HeaderBuilder()).build(
        spec.transaction_id,
        spec.headers,
        content_type=content_type,
        base=request.headers.multi_items(),
    )
    return Request(
        request,
        response=spec.response,
        transaction_id=spec.transaction_id,
        client=client,
        logger=logger,
    )


def _construct(
    method: str,
    url: str,
    *,
    body: bytes | None = None,
    files: list[Any] | None = None,
) -> httpx.Request:
    if not _METHOD_RE.match(method):
        raise RequestConstructionError(f"Invalid method {method!r}")
    try:
        target = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        raise RequestConstructionError(f"Invalid URL {url!r}: {e}") from e
    if target.scheme not in ("http", "https") or not target.host:
        raise RequestConstructionError(f"Unsupported URL {url!r}")
    if files is None:
        return httpx.Request(method, target, content=body)
    if not files:
        # httpx sends nothing for an empty form; keep it a valid empty multipart body
        boundary = os.urandom(16).hex()
        return httpx.Request(
            method,
            target,
            content=f"--{boundary}--\r\n".encode(),
            headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
        )
    try:
        request = httpx.Request(method, target, files=files)
        # render the multipart stream now so encoding failures surface at build time
        request.read()
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Unable to encode multipart body: {e}") from e
    return request


class RequestBuilder:
    """Fluent, single-use front end over the build functions.

    Setters never validate; a bad method or URL surfaces as a
    RequestConstructionError from the build.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        client: httpx.Client | None = None,
        logger: EventLogger | None = None,
    ) -> None:
        self.config = config or Config()
        self._spec = RequestSpec()
        self._header_builder = HeaderBuilder(self.config.tracing.transaction_header)
        self._client = client
        self._logger = logger

    @property
    def spec(self) -> RequestSpec:
        return self._spec

    def method(self, method: str) -> "RequestBuilder":
        self._spec = replace(self._spec, method=method)
        return self

    def url(self, url: str) -> "RequestBuilder":
        self._spec = replace(self._spec, url=url)
        return self

    def headers(self, headers: Mapping[str, list[str]]) -> "RequestBuilder":
        """Replace the whole header map."""
        self._spec = replace(self._spec, headers=headers)
        return self

    def response(self, slot: ResponseSlot[Any]) -> "RequestBuilder":
        self._spec = replace(self._spec, response=slot)
        return self

    def transaction_id(self, transaction_id: str) -> "RequestBuilder":
        self._spec = replace(self._spec, transaction_id=transaction_id)
        return self

    def build_json(self, payload: Any = None) -> Request:
        return build_json(self._spec, payload, **self._options())

    def build_multipart(
        self,
        source: FormFileSource,
        files: Mapping[str, str],
        fields: Mapping[str, str],
    ) -> Request:
        return build_multipart(self._spec, source, files, fields, **self._options())

    def build_octet(self, source: FormFileSource, field_name: str) -> Request:
        return build_octet(self._spec, source, field_name, **self._options())

    def _options(self) -> dict[str, Any]:
        return {
            "header_builder": self._header_builder,
            "client": self._client,
            "logger": self._logger or EventLog(self.config),
        }


def new_requester(
    config: Config | None = None,
    *,
    client: httpx.Client | None = None,
    logger: EventLogger | None = None,
) -> RequestBuilder:
    """Start a fresh builder."""
    return RequestBuilder(config, client=client, logger=logger)
