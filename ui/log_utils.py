"""Shared logging utilities."""

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any
from uuid import uuid4

LOG_ROOT = Path.cwd() / "logs"
CLI_LOG_NAME = "requester.log"


def write_event_log(
    level: str,
    message: str,
    fields: dict[str, Any],
    *,
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single structured event as its own JSON file."""
    payload = {
        "timestamp": _utc_now(),
        "level": level,
        "message": message,
        **_redact_fields(fields),
    }
    return _write_json(log_root / "events", payload)


def write_request_log(
    method: str,
    url: str,
    headers: list[tuple[str, str]],
    *,
    transaction_id: str = "",
    log_root: Path = LOG_ROOT,
) -> Path:
    """Write a single outbound request log entry (CLI --verbose)."""
    payload = {
        "timestamp": _utc_now(),
        "method": method,
        "url": url,
        "transaction": transaction_id,
        "headers": [[k, _redact_value(k, v)] for k, v in headers],
    }
    return _write_json(log_root / "requests", payload)


def write_cli_log(
    level: str,
    message: str,
    *,
    log_root: Path = LOG_ROOT,
    **extra: Any,
) -> None:
    """Append a line to the rolling CLI log file."""
    log_file = log_root / CLI_LOG_NAME
    log_file.parent.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y-%m-%d %H:%M:%S")
    extra_str = " ".join(f"{k}={v}" for k, v in extra.items()) if extra else ""
    line = f"[{timestamp}] {level}: {message}"
    if extra_str:
        line += f" {extra_str}"
    line += "\n"
    with log_file.open("a") as f:
        f.write(line)


def _write_json(folder: Path, payload: dict[str, Any]) -> Path:
    """Write payload to a unique JSON file in the given folder."""
    folder.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S.%fZ")
    file_path = folder / f"{timestamp}_{uuid4().hex}.json"
    file_path.write_text(json.dumps(payload, indent=2, default=str))
    return file_path


def _redact_fields(fields: dict[str, Any]) -> dict[str, Any]:
    """Redact sensitive headers if the event carries any."""
    headers = fields.get("headers")
    if not isinstance(headers, dict):
        return fields
    return {**fields, "headers": {k: _redact_value(k, v) for k, v in headers.items()}}


def _redact_value(key: str, value: Any) -> Any:
    if "key" in key.lower() or "authorization" in key.lower():
        return _mask(str(value))
    return value


def _mask(value: str) -> str:
    if len(value) <= 10:
        return "***"
    return value[:6] + "..." + value[-4:]


def _utc_now() -> str:
    return datetime.now(UTC).isoformat()
