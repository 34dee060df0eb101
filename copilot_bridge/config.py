import os
import shlex

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple


COPILOT_COMMAND = "copilot"
DEFAULT_TIMEOUT_MS = 60000
HELP_TIMEOUT_MS = 5000
VERSION_TIMEOUT_MS = 5000
DEFAULT_MAX_PROMPT_BYTES = 24000

LOG_LEVELS = ("debug", "info", "warn", "error")

_TRUE_VALUES = ("true", "1", "yes", "y", "on")
_FALSE_VALUES = ("false", "0", "no", "n", "off")


def parse_boolean(value: Optional[str]) -> Optional[bool]:
    """Parses a loose boolean string. Returns None when the value is unset or unknown."""
    if not value:
        return None

    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    return None


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    try:
        return int(value.strip(), 10)
    except ValueError:
        return None


@dataclass(frozen=True)
class Settings:
    """Runtime configuration, normally read from COPILOT_* environment variables."""

    command: Tuple[str, ...] = (COPILOT_COMMAND,)
    default_model: Optional[str] = None
    allow_all_tools: bool = False
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    help_timeout_ms: int = HELP_TIMEOUT_MS
    version_timeout_ms: int = VERSION_TIMEOUT_MS
    max_prompt_bytes: int = DEFAULT_MAX_PROMPT_BYTES
    log_level: str = "info"
    log_file: Optional[Path] = None
    debug: bool = False
    home: Path = field(default_factory=lambda: Path.home() / ".copilot")

    @property
    def prompt_limit(self) -> Optional[int]:
        """The prompt cap in bytes, or None when unlimited."""
        if self.max_prompt_bytes <= 0:
            return None
        return self.max_prompt_bytes

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ

        command = tuple(shlex.split(env.get("COPILOT_COMMAND", ""))) or (COPILOT_COMMAND,)

        model = (env.get("COPILOT_MODEL") or "").strip() or None

        allow_all_tools = parse_boolean(env.get("COPILOT_ALLOW_ALL_TOOLS"))

        timeout_ms = _parse_int(env.get("COPILOT_TIMEOUT"))
        if timeout_ms is None or timeout_ms <= 0:
            timeout_ms = DEFAULT_TIMEOUT_MS

        # Zero or negative disables the cap, so only garbage falls back.
        max_prompt_bytes = _parse_int(env.get("COPILOT_MAX_PROMPT_BYTES"))
        if max_prompt_bytes is None:
            max_prompt_bytes = DEFAULT_MAX_PROMPT_BYTES

        log_level = (env.get("COPILOT_LOG_LEVEL") or "info").strip().lower()
        if log_level == "warning":
            log_level = "warn"
        if log_level not in LOG_LEVELS:
            log_level = "info"

        log_file = (env.get("COPILOT_LOG_FILE") or "").strip()
        home = (env.get("COPILOT_HOME") or "").strip()

        return cls(
            command=command,
            default_model=model,
            allow_all_tools=allow_all_tools or False,
            timeout_ms=timeout_ms,
            max_prompt_bytes=max_prompt_bytes,
            log_level=log_level,
            log_file=Path(log_file).expanduser() if log_file else None,
            debug=parse_boolean(env.get("COPILOT_DEBUG")) or False,
            home=Path(home).expanduser() if home else Path.home() / ".copilot",
        )
