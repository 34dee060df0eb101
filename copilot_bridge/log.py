"""
Structured diagnostic logging.

`Logger` is a thin facade over a `logging.Logger`: records below the minimum
severity are dropped, kept records go as JSON lines to an optional log file and
are mirrored to stderr through rich for warnings and errors, or for everything
in debug mode. A log file that cannot be opened is reported once and skipped;
sink failures are handled by `logging` and never reach the caller. Only an
unknown level name raises.
"""

import json
import logging

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console
from rich.logging import RichHandler

from .config import Settings


LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}

_LEVEL_NAMES = {number: name for name, number in LEVELS.items()}


class JsonLinesFormatter(logging.Formatter):
    """Formats a record as one JSON object: timestamp, level, message and optional data."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": _LEVEL_NAMES.get(record.levelno, record.levelname.lower()),
            "message": record.getMessage(),
        }
        data = getattr(record, "data", None)
        if data:
            entry["data"] = data
        return json.dumps(entry, default=str)


class ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        data = getattr(record, "data", None)
        if data:
            message = f"{message} {json.dumps(data, default=str)}"
        return message


class Logger:
    def __init__(
        self,
        level: str = "info",
        log_file: Optional[Path] = None,
        debug: bool = False,
        console: Optional[Console] = None,
        name: str = "copilot_bridge",
    ):
        self.level = level if level in LEVELS else "info"
        self.log_file = log_file
        self.debug_mode = debug
        self.console = console or Console(stderr=True)

        # Not registered with logging.getLogger(): each facade owns its handlers.
        self._logger = logging.Logger(name, LEVELS[self.level])

        mirror = RichHandler(console=self.console, show_path=False, markup=False)
        mirror.setLevel(logging.DEBUG if debug else logging.WARNING)
        mirror.setFormatter(ConsoleFormatter())
        self._logger.addHandler(mirror)

        if log_file is not None:
            try:
                file_handler = logging.FileHandler(log_file, encoding="utf-8")
            except OSError as e:
                self._logger.warning(f"Failed to open log file {log_file}: {e}")
            else:
                file_handler.setFormatter(JsonLinesFormatter())
                self._logger.addHandler(file_handler)

    @classmethod
    def from_settings(cls, settings: Settings) -> "Logger":
        return cls(settings.log_level, settings.log_file, settings.debug)

    def enabled_for(self, level: str) -> bool:
        return self._logger.isEnabledFor(LEVELS.get(level, logging.DEBUG))

    def log(self, level: str, message: str, data: Optional[Dict[str, Any]] = None):
        """Logs `message` at one of "debug", "info", "warn" or "error".

        Raises ValueError for any other level.
        """
        if level not in LEVELS:
            raise ValueError(f"Unknown log level '{level}'.")
        self._logger.log(LEVELS[level], message, extra={"data": data})

    def debug(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.log("debug", message, data)

    def info(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.log("info", message, data)

    def warn(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.log("warn", message, data)

    def error(self, message: str, data: Optional[Dict[str, Any]] = None):
        self.log("error", message, data)

    def close(self):
        for handler in list(self._logger.handlers):
            self._logger.removeHandler(handler)
            handler.close()
