"""Simple logger abstraction."""

from __future__ import annotations

import sys
import threading
from typing import TextIO


_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}
_PREFIXES = {"DEBUG": "[debug] ", "INFO": "", "WARN": "⚠️ ", "ERROR": "❌ "}


class Logger:
    """Minimal level-filtered console logger, safe to call from worker threads."""

    def __init__(self, level: str = "INFO", stream: TextIO | None = None) -> None:
        self._level = _LEVELS.get(level.upper(), _LEVELS["INFO"])
        self._stream = stream
        self._lock = threading.Lock()

    def set_stream(self, stream: TextIO | None) -> None:
        self._stream = stream

    def set_level(self, level: str) -> None:
        self._level = _LEVELS.get(level.upper(), _LEVELS["INFO"])

    def _log(self, level: str, message: str) -> None:
        if self._level > _LEVELS[level]:
            return
        stream = self._stream or sys.stdout
        with self._lock:
            print(f"{_PREFIXES[level]}{message}", file=stream)

    def debug(self, message: str) -> None:
        self._log("DEBUG", message)

    def info(self, message: str) -> None:
        self._log("INFO", message)

    def warn(self, message: str) -> None:
        self._log("WARN", message)

    def error(self, message: str) -> None:
        self._log("ERROR", message)


_LOGGER = Logger()


def get_logger() -> Logger:
    """Return the shared logger instance."""
    return _LOGGER


def configure_logger(level: str, debug_enabled: bool = False) -> Logger:
    """Apply configured verbosity to the shared logger."""
    _LOGGER.set_level("DEBUG" if debug_enabled else level)
    return _LOGGER
