"""
The invokable Copilot operations.

Each operation returns a ToolResponse and never raises: failures come back as
a single "Error: "-prefixed message. The store's current session is threaded
explicitly into every command so completed runs land in its history.
"""

import json

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from .assistants import (
    debug_prompt,
    explain_prompt,
    refactor_prompt,
    review_prompt,
    suggest_prompt,
    tests_prompt,
)
from .config import Settings
from .copilot import (
    CommandExecutor,
    CommandRequest,
    CopilotError,
    ModelCatalog,
    SessionNotFound,
    SessionStore,
    check_installed,
)
from .log import Logger


NOT_INSTALLED_MESSAGE = "GitHub Copilot CLI is not installed."
INSTALL_HINT = "Install: npm install -g @github/copilot"
NO_SESSION_MESSAGE = "No session found. Start a new session with copilot-session-start."
HISTORY_PREVIEW_CHARS = 200


@dataclass(frozen=True)
class ToolResponse:
    text: str
    is_error: bool = False


def error_response(message) -> ToolResponse:
    return ToolResponse(f"Error: {message}", is_error=True)


class CopilotTools:
    def __init__(
        self,
        settings: Settings,
        logger: Logger,
        store: Optional[SessionStore] = None,
        executor: Optional[CommandExecutor] = None,
        catalog: Optional[ModelCatalog] = None,
        installed: Optional[Callable[[Settings], Awaitable[bool]]] = None,
    ):
        self.settings = settings
        self.logger = logger
        self.store = store if store is not None else SessionStore()
        self.executor = executor or CommandExecutor(settings, logger)
        self.catalog = catalog or ModelCatalog(settings, logger)
        self._installed = installed or check_installed

    @classmethod
    def from_settings(cls, settings: Settings) -> "CopilotTools":
        return cls(settings, Logger.from_settings(settings))

    async def is_installed(self) -> bool:
        return await self._installed(self.settings)

    async def _run(self, request: CommandRequest, install_hint: bool = False) -> ToolResponse:
        try:
            if not await self.is_installed():
                if install_hint:
                    return error_response(f"{NOT_INSTALLED_MESSAGE}\n\n{INSTALL_HINT}")
                return error_response(NOT_INSTALLED_MESSAGE)
            result = await self.executor.execute(request, self.store.context())
        except CopilotError as e:
            self.logger.error("Copilot command failed", {"error": str(e)})
            return error_response(e)
        except Exception as e:
            self.logger.error("Unexpected failure while running Copilot", {"error": repr(e)})
            return error_response(e)
        return ToolResponse(result.text)

    async def ask(
        self,
        prompt: str,
        context: Optional[str] = None,
        model: Optional[str] = None,
        allow_all_tools: Optional[bool] = None,
    ) -> ToolResponse:
        """Ask Copilot anything: coding tasks, commands, explanations or suggestions."""
        return await self._run(
            CommandRequest(prompt, context=context, model=model, allow_all_tools=allow_all_tools),
            install_hint=True,
        )

    async def explain(self, code: str, model: Optional[str] = None) -> ToolResponse:
        return await self._run(CommandRequest(explain_prompt(code), model=model))

    async def suggest(self, task: str, model: Optional[str] = None) -> ToolResponse:
        return await self._run(CommandRequest(suggest_prompt(task), model=model))

    async def debug(self, code: str, error: str, context: Optional[str] = None) -> ToolResponse:
        return await self._run(CommandRequest(debug_prompt(code, error), context=context))

    async def refactor(self, code: str, goal: Optional[str] = None) -> ToolResponse:
        return await self._run(CommandRequest(refactor_prompt(code, goal)))

    async def generate_tests(self, code: str, framework: Optional[str] = None) -> ToolResponse:
        return await self._run(CommandRequest(tests_prompt(code, framework)))

    async def review(
        self, code: str, focus_areas: Optional[Sequence[str]] = None
    ) -> ToolResponse:
        return await self._run(CommandRequest(review_prompt(code, focus_areas)))

    async def list_models(self) -> ToolResponse:
        try:
            if not await self.is_installed():
                return error_response(NOT_INSTALLED_MESSAGE)
            catalog = await self.catalog.discover()
        except Exception as e:
            self.logger.error("Failed to list models", {"error": repr(e)})
            return error_response(e)

        if catalog.source == "help":
            header = "Available Copilot models (from copilot --help):"
        else:
            header = "Available Copilot models (fallback list):"
        body = "\n".join(f"- {model}" for model in catalog.models)
        return ToolResponse(f"{header}\n{body}")

    async def session_start(self) -> ToolResponse:
        session_id = self.store.create()
        self.logger.info("Session started", {"sessionId": session_id})
        return ToolResponse(
            f"New session started: {session_id}\n"
            "All subsequent interactions will be tracked in this session."
        )

    async def session_history(self, session_id: Optional[str] = None) -> ToolResponse:
        target = session_id or self.store.current_id
        if not target or target not in self.store:
            return error_response(NO_SESSION_MESSAGE)

        session = self.store.get(target)
        entries = "\n".join(
            f"\n[{i}] {entry.timestamp.isoformat()}\n"
            f"Prompt: {entry.prompt}\n"
            f"Response: {entry.response[:HISTORY_PREVIEW_CHARS]}..."
            for i, entry in enumerate(session.history, start=1)
        )
        return ToolResponse(
            f"Session: {session.id}\n"
            f"Started: {session.start_time.isoformat()}\n"
            f"Last Activity: {session.last_activity.isoformat()}\n\n"
            f"History:{entries or ' (empty)'}"
        )

    async def sessions_resource(self) -> ToolResponse:
        """All known sessions as a JSON document (copilot://sessions)."""
        summaries = [summary.to_dict() for summary in self.store.list()]
        return ToolResponse(json.dumps(summaries, indent=2))

    async def session_history_resource(self, session_id: str) -> ToolResponse:
        """One session with its full history as JSON (copilot://session/{id}/history)."""
        try:
            session = self.store.get(session_id)
        except SessionNotFound as e:
            return error_response(e)
        return ToolResponse(json.dumps(session.to_dict(), indent=2))
