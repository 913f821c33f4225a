"""Command-line parsing helpers."""

from __future__ import annotations

import argparse
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable


COMMANDS = ("add", "remove", "retry", "history", "failures", "labels", "clear")
CLEAR_TARGETS = ("all", "label-cache", "recent-labels", "history", "failures")


def _add_common_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to a config.json file")
    parser.add_argument("--instance", help="PhotoPrism instance URL, e.g. https://photos.example.com")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")


@dataclass
class CommonOptions:
    """Options shared by every command."""

    config_path: Path | None
    instance: str | None
    verbose: bool


@dataclass
class LabelOptions(CommonOptions):
    """Parsed CLI options for add/remove."""

    action: str
    label: str
    uids: list[str]
    uids_file: Path | None
    token: str | None


@dataclass
class RetryOptions(CommonOptions):
    """Parsed CLI options for retrying a failure group."""

    index: int
    token: str | None


@dataclass
class ReportOptions(CommonOptions):
    """Parsed CLI options for history/failures/labels."""

    limit: int
    query: str | None


@dataclass
class ClearOptions(CommonOptions):
    """Parsed CLI options for clearing cached state."""

    what: str


def _parse_label_args(action: str, argv: list[str] | None = None) -> argparse.Namespace:
    verb = "Add a label to" if action == "add" else "Remove a label from"
    parser = argparse.ArgumentParser(prog=f"photoprism-labeler {action}", description=f"{verb} selected photos.")
    _add_common_args(parser)
    parser.add_argument("--label", required=True, help="Label name")
    parser.add_argument("--uid", action="append", help="Photo UID (repeatable, comma separated lists allowed)")
    parser.add_argument("--uids-file", help="File with photo UIDs (JSON list or one per line)")
    parser.add_argument("--token", help="PhotoPrism session token (defaults to the configured env var)")
    return parser.parse_args(argv)


def _parse_retry_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="photoprism-labeler retry", description="Retry a failed operation.")
    _add_common_args(parser)
    parser.add_argument("index", type=int, help="Index shown by the failures command")
    parser.add_argument("--token", help="PhotoPrism session token (defaults to the configured env var)")
    return parser.parse_args(argv)


def _parse_report_args(command: str, argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog=f"photoprism-labeler {command}", description=f"Show {command}.")
    _add_common_args(parser)
    parser.add_argument("--limit", type=int, default=0, help="Show at most this many entries")
    parser.add_argument("--query", help="Suggest labels matching this text (labels only)")
    return parser.parse_args(argv)


def _parse_clear_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="photoprism-labeler clear", description="Clear cached state.")
    _add_common_args(parser)
    parser.add_argument("--what", choices=CLEAR_TARGETS, default="all", help="What to clear (default: all)")
    return parser.parse_args(argv)


def normalize_uids(raw_values: Iterable[str] | None) -> list[str]:
    """Split comma separated values; duplicates are kept."""
    uids: list[str] = []
    if raw_values:
        for item in raw_values:
            for raw in str(item).split(","):
                value = raw.strip()
                if value:
                    uids.append(value)
    return uids


def read_uids_file(path: Path) -> list[str]:
    """Read photo UIDs from a JSON list or a plain text file."""
    text = path.read_text(encoding="utf-8")
    stripped = text.strip()
    if stripped.startswith("["):
        data = json.loads(stripped)
        return normalize_uids(str(item) for item in data)
    return normalize_uids(line for line in text.splitlines())


def resolve_config_path(args: argparse.Namespace) -> Path | None:
    """Resolve the config path from CLI arguments.

    Args:
        args: Parsed argparse namespace.

    Returns:
        Resolved config path.
    """
    if args.config:
        return Path(args.config).expanduser().resolve()
    default_file = Path.cwd() / "config.json"
    if default_file.exists():
        return default_file.resolve()
    return None


def _common(args: argparse.Namespace) -> dict:
    return {
        "config_path": resolve_config_path(args),
        "instance": args.instance,
        "verbose": bool(args.verbose),
    }


def get_label_options(action: str, argv: list[str] | None = None) -> LabelOptions:
    """Build a LabelOptions instance from CLI arguments."""
    args = _parse_label_args(action, argv)
    uids_file = Path(args.uids_file).expanduser().resolve() if args.uids_file else None
    return LabelOptions(
        **_common(args),
        action=action,
        label=args.label,
        uids=normalize_uids(args.uid),
        uids_file=uids_file,
        token=args.token,
    )


def get_retry_options(argv: list[str] | None = None) -> RetryOptions:
    args = _parse_retry_args(argv)
    return RetryOptions(**_common(args), index=args.index, token=args.token)


def get_report_options(command: str, argv: list[str] | None = None) -> ReportOptions:
    args = _parse_report_args(command, argv)
    return ReportOptions(**_common(args), limit=max(0, args.limit), query=args.query)


def get_clear_options(argv: list[str] | None = None) -> ClearOptions:
    args = _parse_clear_args(argv)
    return ClearOptions(**_common(args), what=args.what)


def parse_cli(argv: list[str] | None = None) -> tuple[str, CommonOptions]:
    """Parse command-line arguments and return the command name and options."""
    if argv is None:
        import sys

        args = sys.argv[1:]
    else:
        args = argv
    if not args or args[0] not in COMMANDS:
        parser = argparse.ArgumentParser(prog="photoprism-labeler", description="Batch label PhotoPrism photos.")
        parser.add_argument("command", choices=COMMANDS)
        parser.parse_args(args[:1])
    command, rest = args[0], args[1:]
    if command in ("add", "remove"):
        return command, get_label_options(command, rest)
    if command == "retry":
        return command, get_retry_options(rest)
    if command == "clear":
        return command, get_clear_options(rest)
    return command, get_report_options(command, rest)
