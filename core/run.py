"""Command execution for the label helper CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path

import requests

from cli import ClearOptions, CommonOptions, LabelOptions, ReportOptions, RetryOptions, read_uids_file
from config import Config
from core.engine import LabelEngine
from core.errors import (
    EmptyLabelError,
    FailureGroupNotFoundError,
    InstanceResolutionError,
    LabelHelperError,
    StateFileError,
)
from core.history import ExecutionRecord
from core.selection import StaticSelectionSource
from core.store import InstanceStore, JsonFileBackend
from logger import get_logger

log = get_logger()


def resolve_instance(options: CommonOptions, cfg: Config) -> str | None:
    return options.instance or cfg.photoprism.base_url or None


def resolve_token(token: str | None, cfg: Config) -> str | None:
    """Pick the session token from the CLI, the config or the environment."""
    if token:
        return token
    if cfg.photoprism.token:
        return cfg.photoprism.token
    return os.environ.get(cfg.photoprism.token_env) or None


def build_engine(options: CommonOptions, cfg: Config, session: requests.Session | None = None) -> LabelEngine:
    """Create an engine bound to the state file and the selected instance."""
    instance = resolve_instance(options, cfg)
    backend = JsonFileBackend(Path(cfg.storage.state_path).expanduser())
    store = InstanceStore(backend, lambda: instance)
    return LabelEngine(store, cfg, session=session)


def _print_progress(processed: int, total: int) -> None:
    if total:
        log.info(f"  Progress: {processed}/{total}")


def _describe(record: ExecutionRecord) -> str:
    action = "Add" if record.action == "add" else "Remove"
    text = f'{record.start_time}  {action} "{record.label_name}"  {record.success_count}/{record.total_count} ok'
    if record.failed_count:
        text += f", {record.failed_count} failed"
    if record.is_retry:
        text += "  (retry)"
    if record.error:
        text += f"  error: {record.error}"
    return text


def _final_message(record: ExecutionRecord, retry_index: int | None) -> str:
    message = f"Operation complete. Success: {record.success_count}"
    if record.failed_count:
        message += f", Failed: {record.failed_count}."
        if retry_index is not None:
            message += f" Run 'retry {retry_index}' to retry."
    else:
        message += "."
    return message


def _retry_index(engine: LabelEngine, record: ExecutionRecord) -> int | None:
    for index, group in enumerate(engine.failure_groups()):
        if group.action == record.action and group.label_name.lower() == record.label_name.lower():
            return index
    return None


def run_label(options: LabelOptions, engine: LabelEngine, cfg: Config) -> int:
    uids = list(options.uids)
    if options.uids_file:
        try:
            uids.extend(read_uids_file(options.uids_file))
        except (OSError, json.JSONDecodeError) as exc:
            log.error(f"Could not read UIDs from {options.uids_file}: {exc}")
            return 2
    source = StaticSelectionSource(uids, resolve_token(options.token, cfg))
    try:
        record = engine.run_action(options.action, options.label, source, progress=_print_progress)
    except EmptyLabelError as exc:
        log.error(str(exc))
        return 2
    except LabelHelperError as exc:
        log.error(f"Operation failed: {exc}")
        return 1
    except Exception as exc:
        log.error(f"Operation failed unexpectedly: {exc}")
        return 1
    log.info(_final_message(record, _retry_index(engine, record)))
    return 0


def run_retry(options: RetryOptions, engine: LabelEngine, cfg: Config) -> int:
    source = StaticSelectionSource([], resolve_token(options.token, cfg))
    try:
        record = engine.retry(options.index, source, progress=_print_progress)
    except FailureGroupNotFoundError as exc:
        log.error(str(exc))
        return 2
    except LabelHelperError as exc:
        log.error(f"Retry failed: {exc}")
        return 1
    except Exception as exc:
        log.error(f"Retry failed unexpectedly: {exc}")
        return 1
    log.info(_final_message(record, _retry_index(engine, record)))
    return 0


def run_report(command: str, options: ReportOptions, engine: LabelEngine) -> int:
    if command == "history":
        records = engine.history()
        if options.limit:
            records = records[: options.limit]
        if not records:
            log.info("No execution history.")
        for record in records:
            log.info(_describe(record))
        return 0

    if command == "failures":
        groups = engine.failure_groups()
        if not groups:
            log.info("No failed operations.")
        for index, group in enumerate(groups):
            action = "Add" if group.action == "add" else "Remove"
            log.info(
                f'[{index}] {action} "{group.label_name}"  {len(group.failed_uids)} failed'
                f"  (retries: {group.retry_count}, {group.timestamp})"
            )
        return 0

    if options.query is not None:
        suggestions = engine.suggest(options.query)
        log.info("Suggestions: " + (", ".join(suggestions) if suggestions else "(none)"))
        return 0
    recent = engine.recent_labels()
    known = engine.all_labels()
    if options.limit:
        recent = recent[: options.limit]
    log.info("Recent labels: " + (", ".join(recent) if recent else "(none)"))
    log.info("All labels: " + (", ".join(known) if known else "(none)"))
    return 0


def run_clear(options: ClearOptions, engine: LabelEngine) -> int:
    if options.what == "label-cache":
        engine.clear_label_cache()
        log.info("Label ID cache cleared.")
    elif options.what == "recent-labels":
        engine.clear_recent_labels()
        log.info("Recent labels cleared.")
    elif options.what == "history":
        engine.clear_history()
        log.info("Execution history cleared.")
    elif options.what == "failures":
        engine.clear_failures()
        log.info("Failed operations cleared.")
    else:
        engine.clear_all()
        log.info("All caches cleared.")
    return 0


def run(command: str, options: CommonOptions, cfg: Config) -> int:
    """Execute a parsed CLI command.

    Args:
        command: Command name returned by ``parse_cli``.
        options: Parsed options for that command.
        cfg: Loaded configuration.

    Returns:
        Process exit code.
    """
    engine = build_engine(options, cfg)
    try:
        instance_id = engine.store.instance_id()
    except InstanceResolutionError as exc:
        log.error(f"{exc}. Pass --instance or set photoprism.base_url in config.")
        return 2
    log.debug(f"Instance: {instance_id}")

    try:
        if isinstance(options, LabelOptions):
            return run_label(options, engine, cfg)
        if isinstance(options, RetryOptions):
            return run_retry(options, engine, cfg)
        if isinstance(options, ClearOptions):
            return run_clear(options, engine)
        if isinstance(options, ReportOptions):
            return run_report(command, options, engine)
    except StateFileError as exc:
        log.error(f"{exc}. Fix or remove the file, or point storage.state_path elsewhere.")
        return 1
    log.error(f"Unknown command: {command}")
    return 2
