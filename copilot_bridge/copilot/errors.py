class CopilotError(Exception):
    """Base class for every failure surfaced by the Copilot CLI bridge."""


class PromptTooLarge(CopilotError):
    """The prompt exceeds the configured byte limit. Nothing was spawned."""

    def __init__(self, size: int, limit: int):
        super().__init__(
            f"Prompt is too large ({size} bytes). The maximum allowed size is {limit} bytes."
        )
        self.size = size
        self.limit = limit


class SpawnFailure(CopilotError):
    """The Copilot CLI process could not be started."""


class AuthRequired(CopilotError):
    """The Copilot CLI ran but asked the user to log in."""


class CommandTimeout(CopilotError):
    """The Copilot CLI exceeded its time budget without producing any output."""


class HelpUnavailable(CopilotError):
    """`copilot --help` failed, timed out or printed nothing."""


class SessionNotFound(CopilotError):
    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id
