"""
The `copilot` package drives the GitHub Copilot CLI as a subprocess: command
execution with timeout salvage, model discovery and in-memory sessions.
"""

from .errors import (
    AuthRequired,
    CommandTimeout,
    CopilotError,
    HelpUnavailable,
    PromptTooLarge,
    SessionNotFound,
    SpawnFailure,
)
from .executor import CommandExecutor, CommandMeta, CommandRequest, CommandResult, Execution, Outcome
from .models import FALLBACK_MODELS, ModelCatalog, ModelCatalogResult, parse_model_tokens
from .health import check_installed, help_output
from .session import HistoryEntry, Session, SessionContext, SessionStore, SessionSummary


__all__ = [
    "AuthRequired",
    "CommandTimeout",
    "CopilotError",
    "HelpUnavailable",
    "PromptTooLarge",
    "SessionNotFound",
    "SpawnFailure",
    "CommandExecutor",
    "CommandMeta",
    "CommandRequest",
    "CommandResult",
    "Execution",
    "Outcome",
    "FALLBACK_MODELS",
    "ModelCatalog",
    "ModelCatalogResult",
    "parse_model_tokens",
    "check_installed",
    "help_output",
    "HistoryEntry",
    "Session",
    "SessionContext",
    "SessionStore",
    "SessionSummary",
]
