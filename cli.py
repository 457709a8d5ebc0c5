"""CLI entry point for service-requester."""

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

from core.config import CONFIG_FILE, Config, load_config
from core.exceptions import ConfigurationError
from core.request_types import ResponseSlot
from services.builder import RequestBuilder, new_requester
from services.requester import Request
from services.sources import LocalFiles
from ui.event_log import EventLog
from ui.log_utils import write_cli_log, write_request_log

console = Console()


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        console.print(f"[red][ERROR][/red] {escape(str(e))}")
        return 2

    if args.command == "config":
        _print_config(config, args.config)
        return 0

    if (args.file or args.field) and (args.json is not None or args.octet):
        parser.error("--file/--field cannot be combined with --json or --octet")
    return _send(config, args)


def _send(config: Config, args: argparse.Namespace) -> int:
    slot: ResponseSlot[Any] | None = None if args.no_decode else ResponseSlot(Any)
    builder = (
        new_requester(config, logger=EventLog(config))
        .method(args.method)
        .url(args.url)
        .transaction_id(args.tid)
    )
    if slot is not None:
        builder.response(slot)

    try:
        builder.headers(_parse_headers(args.header or []))
        request = _build(builder, args)
    except ValueError as e:
        console.print(f"[red][ERROR][/red] {escape(str(e))}")
        return 2

    log_root = config.logging.log_root
    if args.verbose and request.request is not None:
        write_request_log(
            request.request.method,
            str(request.request.url),
            request.request.headers.multi_items(),
            transaction_id=args.tid,
            log_root=log_root,
        )

    status, error = request.send()
    write_cli_log(
        "SEND",
        f"{args.method} {args.url}",
        log_root=log_root,
        status=status,
        transaction=args.tid or "-",
    )

    style = "green" if status == 200 else "red"
    console.print(f"[bold]Status:[/bold] [{style}]{status}[/{style}]")
    if slot is not None and slot.is_set:
        console.print_json(data=slot.value, default=str)
    if error is not None:
        console.print(f"[red][ERROR][/red] {type(error).__name__}: {escape(str(error))}")
        return 1
    return 0


def _build(builder: RequestBuilder, args: argparse.Namespace) -> Request:
    """Pick the build path from the body options."""
    if args.octet:
        field, path = _split(args.octet, "=", "--octet")
        return builder.build_octet(LocalFiles({field: path}), field)

    if args.file or args.field:
        paths: dict[str, str] = {}
        renames: dict[str, str] = {}
        for item in args.file or []:
            new_name, path = _split(item, "=", "--file")
            current_name = Path(path).name
            paths[current_name] = path
            renames[new_name] = current_name
        fields = dict(_split(item, "=", "--field") for item in args.field or [])
        return builder.build_multipart(LocalFiles(paths), renames, fields)

    payload = None
    if args.json is not None:
        try:
            payload = json.loads(args.json)
        except json.JSONDecodeError as e:
            raise ValueError(f"--json is not valid JSON: {e}") from e
    return builder.build_json(payload)


def _parse_headers(items: list[str]) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for item in items:
        name, value = _split(item, ":", "--header")
        headers.setdefault(name, []).append(value.strip())
    return headers


def _split(item: str, sep: str, option: str) -> tuple[str, str]:
    key, found, value = item.partition(sep)
    if not found or not key:
        raise ValueError(f"{option} expects KEY{sep}VALUE, got {item!r}")
    return key.strip(), value


def _print_config(config: Config, path: Path | None) -> None:
    console.print(f"[bold]Config:[/bold] {path or CONFIG_FILE}")
    console.print(f"[bold]Transaction header:[/bold] {config.tracing.transaction_header}")
    console.print(f"[bold]Logs:[/bold] {config.logging.log_root}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="service-requester",
        description="Build, send and decode a single HTTP service call.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Config file (JSON)")
    sub = parser.add_subparsers(dest="command", required=True)

    send = sub.add_parser("send", help="Send one request and print the decoded response")
    send.add_argument("method")
    send.add_argument("url")
    body = send.add_mutually_exclusive_group()
    body.add_argument("--json", default=None, help="JSON payload text")
    body.add_argument("--octet", default=None, metavar="FIELD=PATH", help="Upload one file as octet-stream")
    send.add_argument(
        "--file", action="append", default=None, metavar="NAME=PATH", help="Multipart file part"
    )
    send.add_argument(
        "--field", action="append", default=None, metavar="KEY=VALUE", help="Multipart form field"
    )
    send.add_argument(
        "--header", action="append", default=None, metavar="NAME:VALUE", help="Extra header (repeatable)"
    )
    send.add_argument("--tid", default="", help="Transaction id")
    send.add_argument("--no-decode", action="store_true", help="Do not parse the response body")
    send.add_argument("--verbose", action="store_true", help="Write the outbound request to the log folder")

    sub.add_parser("config", help="Show config location and settings")
    return parser


if __name__ == "__main__":
    sys.exit(main())
