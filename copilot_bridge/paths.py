"""Locations of the Copilot data directories."""

from pathlib import Path
from typing import List

from .config import Settings
from .log import Logger


def get_logs_dir(settings: Settings) -> Path:
    return settings.home / "logs"


def get_sessions_dir(settings: Settings) -> Path:
    return settings.home / "mcp-sessions"


def init_directories(settings: Settings, logger: Logger) -> List[Path]:
    """Creates the data directories, returning those that exist afterwards.

    Failures are reported as warnings and never abort startup.
    """
    ready = []
    for directory in (settings.home, get_logs_dir(settings), get_sessions_dir(settings)):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warn(f"Failed to create directory {directory}: {e}")
            continue
        ready.append(directory)
    return ready
