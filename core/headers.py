"""Header construction for outbound requests."""

from collections.abc import Mapping

import httpx

from core.config import COMPAT_TRANSACTION_HEADER, TRANSACTION_HEADER


class HeaderBuilder:
    """Build outbound headers: tracing, caller headers, content type."""

    def __init__(self, transaction_header: str = TRANSACTION_HEADER) -> None:
        self.transaction_header = transaction_header

    def build(
        self,
        transaction_id: str,
        headers: Mapping[str, list[str]] | None = None,
        content_type: str | None = None,
        base: list[tuple[str, str]] | None = None,
    ) -> httpx.Headers:
        """Assemble headers in the order they are applied.

        The tracing header is always set, even when empty. Caller values are
        appended without deduplication. The content type and the compat
        transaction header replace earlier values of the same name.
        """
        items: list[tuple[str, str]] = list(base or [])
        _set(items, self.transaction_header, transaction_id)
        if headers:
            for key, values in headers.items():
                for value in values:
                    items.append((key, value))
        if content_type is not None:
            _set(items, "Content-Type", content_type)
        if transaction_id:
            _set(items, COMPAT_TRANSACTION_HEADER, transaction_id)
        return httpx.Headers(items)


def _set(items: list[tuple[str, str]], name: str, value: str) -> None:
    """Replace every value of a header (case-insensitive) with a single one."""
    lowered = name.lower()
    items[:] = [(k, v) for k, v in items if k.lower() != lowered]
    items.append((name, value))
