"""Default event logger: JSON event files, CLI log lines, console echo."""

from threading import Lock
from typing import Any

from rich.console import Console

from core.config import Config
from ui.log_utils import write_cli_log, write_event_log

console = Console(stderr=True)


class EventLog:
    """Structured event sink backing the EventLogger protocol."""

    def __init__(self, config: Config | None = None, out: Console | None = None):
        self.config = config or Config()
        self._console = out or console
        self._lock = Lock()

    def log_event(self, level: str, message: str, fields: dict[str, Any]) -> None:
        """Persist an event and echo a one-line summary."""
        log_root = self.config.logging.log_root
        with self._lock:
            write_event_log(level, message, fields, log_root=log_root)
            transaction = fields.get("transaction", "")
            write_cli_log(level, message[:200], log_root=log_root, transaction=transaction)
            if self.config.logging.console:
                style = "red" if level in ("ERROR", "CRITICAL") else "yellow"
                self._console.print(
                    f"[{style}][{level}][/{style}] {message}",
                    f"[dim]transaction={transaction or '-'}[/dim]",
                )
