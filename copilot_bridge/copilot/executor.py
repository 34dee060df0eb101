"""
Runs one Copilot CLI command per request.

The prompt is fed over stdin (never argv) and the child is bounded by a
timeout. When the timeout hits after some stdout already arrived, the partial
output is salvaged instead of failing, so every run ends in exactly one of
three outcomes: completed, partially completed, or failed.
"""

import asyncio
import enum
import signal
import time

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from ..config import Settings
from ..log import Logger
from .errors import (
    AuthRequired,
    CommandTimeout,
    CopilotError,
    PromptTooLarge,
    SpawnFailure,
)
from .process import finish, read_stream
from .session import SessionContext


NO_RESPONSE_TEXT = "No response from Copilot CLI"
PARTIAL_RESPONSE_TEXT = "Copilot CLI timed out, but partial response received"
AUTH_REQUIRED_MESSAGE = "GitHub Copilot CLI requires authentication. Please run: copilot /login"
TIMEOUT_MESSAGE = "Copilot CLI command timed out with no response"

AUTH_HINTS = ("login", "authenticate")
STDERR_SNIPPET_CHARS = 500


class Outcome(enum.Enum):
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class CommandRequest:
    prompt: str
    context: Optional[str] = None
    model: Optional[str] = None
    allow_all_tools: Optional[bool] = None
    session_id: Optional[str] = None
    additional_args: Sequence[str] = ()

    @property
    def full_prompt(self) -> str:
        if self.context:
            return f"{self.prompt}\n\nContext:\n{self.context}"
        return self.prompt


@dataclass(frozen=True)
class CommandMeta:
    duration_ms: int
    timed_out: bool
    model: Optional[str] = None
    exit_code: Optional[int] = None
    signal: Optional[str] = None
    stderr_snippet: Optional[str] = None


@dataclass(frozen=True)
class CommandResult:
    text: str
    meta: CommandMeta


@dataclass(frozen=True)
class Execution:
    outcome: Outcome
    result: Optional[CommandResult] = None
    error: Optional[CopilotError] = None

    def unwrap(self) -> CommandResult:
        if self.outcome is Outcome.FAILED:
            raise self.error
        return self.result


@dataclass
class _Output:
    stdout: List[bytes] = field(default_factory=list)
    stderr: List[bytes] = field(default_factory=list)
    received: bool = False

    def mark_received(self):
        self.received = True

    @staticmethod
    def _decode(chunks: List[bytes]) -> str:
        return b"".join(chunks).decode("utf-8", errors="replace")

    @property
    def stdout_text(self) -> str:
        return self._decode(self.stdout)

    @property
    def stderr_text(self) -> str:
        return self._decode(self.stderr)


def _exit_status(returncode: Optional[int]) -> Tuple[Optional[int], Optional[str]]:
    """Splits an asyncio return code into (exit code, signal name)."""
    if returncode is None:
        return None, None
    if returncode < 0:
        try:
            return None, signal.Signals(-returncode).name
        except ValueError:
            return None, str(-returncode)
    return returncode, None


def _snippet(stderr: str) -> Optional[str]:
    stderr = stderr.strip()
    if not stderr:
        return None
    # Keep the tail; the most recent lines usually carry the actual error.
    return stderr[-STDERR_SNIPPET_CHARS:]


class CommandExecutor:
    def __init__(self, settings: Settings, logger: Logger):
        self.settings = settings
        self.logger = logger

    def build_args(self, request: CommandRequest) -> List[str]:
        """Returns the argument list passed to the Copilot CLI (without the executable)."""
        model = self._resolve_model(request)
        args = ["--silent"]
        if model:
            args += ["--model", model]
        if self._resolve_allow_all_tools(request):
            args.append("--allow-all-tools")
        if request.session_id:
            args += ["--resume", request.session_id]
        args.extend(request.additional_args)
        return args

    async def execute(
        self, request: CommandRequest, session: Optional[SessionContext] = None
    ) -> CommandResult:
        """Runs the request and returns its result, raising a CopilotError on failure."""
        execution = await self.run(request, session)
        return execution.unwrap()

    async def run(
        self, request: CommandRequest, session: Optional[SessionContext] = None
    ) -> Execution:
        """Runs the request and reports how it ended without raising.

        When `session` is given, completed and partially completed runs append
        one history entry to it.
        """
        full_prompt = request.full_prompt
        model = self._resolve_model(request)

        prompt_bytes = len(full_prompt.encode("utf-8"))
        limit = self.settings.prompt_limit
        if limit is not None and prompt_bytes > limit:
            self.logger.warn(
                "Prompt rejected: too large", {"promptBytes": prompt_bytes, "limit": limit}
            )
            return Execution(Outcome.FAILED, error=PromptTooLarge(prompt_bytes, limit))

        argv = [*self.settings.command, *self.build_args(request)]
        self.logger.info(
            "Executing Copilot CLI command",
            {
                "model": model,
                "promptBytes": prompt_bytes,
                "allowAllTools": self._resolve_allow_all_tools(request),
                "resume": request.session_id,
                "timeoutMs": self.settings.timeout_ms,
            },
        )

        started = time.monotonic()
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            self.logger.error("Failed to spawn Copilot CLI", {"error": str(e)})
            return Execution(Outcome.FAILED, error=SpawnFailure(f"Failed to execute copilot: {e}"))

        output = _Output()
        tasks = [
            asyncio.ensure_future(self._feed(proc.stdin, full_prompt)),
            asyncio.ensure_future(read_stream(proc.stdout, output.stdout, output.mark_received)),
            asyncio.ensure_future(read_stream(proc.stderr, output.stderr)),
        ]

        # Only the exit is timed; output still in flight is drained by finish().
        timed_out = False
        try:
            await asyncio.wait_for(proc.wait(), self.settings.timeout_ms / 1000)
        except asyncio.TimeoutError:
            timed_out = True
        finally:
            await finish(proc, tasks)

        duration_ms = int((time.monotonic() - started) * 1000)
        stdout = output.stdout_text
        stderr = output.stderr_text
        exit_code, signal_name = _exit_status(proc.returncode)

        if timed_out:
            if not output.received:
                self.logger.warn(
                    "Copilot CLI timed out with no output", {"durationMs": duration_ms}
                )
                return Execution(Outcome.FAILED, error=CommandTimeout(TIMEOUT_MESSAGE))

            self.logger.warn(
                "Copilot CLI timed out, returning partial output", {"durationMs": duration_ms}
            )
            outcome = Outcome.PARTIAL
            text = stdout.strip() or PARTIAL_RESPONSE_TEXT
        else:
            # Case-sensitive: "Login page: ..." in an unrelated error is not a login prompt.
            if not output.received and any(hint in stderr for hint in AUTH_HINTS):
                self.logger.warn("Copilot CLI requires authentication")
                return Execution(Outcome.FAILED, error=AuthRequired(AUTH_REQUIRED_MESSAGE))

            outcome = Outcome.COMPLETED
            text = stdout.strip() or stderr.strip() or NO_RESPONSE_TEXT

        result = CommandResult(
            text=text,
            meta=CommandMeta(
                model=model,
                duration_ms=duration_ms,
                exit_code=exit_code,
                signal=signal_name,
                stderr_snippet=_snippet(stderr),
                timed_out=timed_out,
            ),
        )

        self.logger.info(
            "Copilot CLI command finished",
            {
                "outcome": outcome.value,
                "durationMs": duration_ms,
                "exitCode": exit_code,
                "signal": signal_name,
            },
        )
        if exit_code not in (None, 0):
            self.logger.warn(
                "Copilot CLI exited with a non-zero code",
                {"exitCode": exit_code, "stderr": result.meta.stderr_snippet},
            )

        if session is not None:
            session.record(full_prompt, text)

        return Execution(outcome, result=result)

    def _resolve_model(self, request: CommandRequest) -> Optional[str]:
        if request.model is not None:
            return request.model or None
        return self.settings.default_model

    def _resolve_allow_all_tools(self, request: CommandRequest) -> bool:
        if request.allow_all_tools is not None:
            return request.allow_all_tools
        return self.settings.allow_all_tools

    async def _feed(self, stdin: asyncio.StreamWriter, text: str):
        # The outcome is decided by the exit status, not by the write.
        try:
            stdin.write(text.encode("utf-8"))
            await stdin.drain()
        except OSError as e:
            self.logger.warn("Failed to write prompt to Copilot CLI stdin", {"error": str(e)})
        finally:
            stdin.close()

