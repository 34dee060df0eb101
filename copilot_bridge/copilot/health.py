"""Short, bounded invocations of the Copilot CLI (version check and help text)."""

import asyncio

from typing import List, Sequence, Tuple

from ..config import Settings
from .errors import HelpUnavailable
from .process import finish, read_stream


async def _capture(argv: Sequence[str], timeout_ms: int) -> Tuple[int, str, str]:
    """Runs argv until it exits, returning (exit code, stdout, stderr).

    Raises OSError when the process cannot be started and asyncio.TimeoutError
    when it does not exit in time. The child is always reaped.
    """
    proc = await asyncio.create_subprocess_exec(
        *argv,
        stdin=asyncio.subprocess.DEVNULL,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    stdout: List[bytes] = []
    stderr: List[bytes] = []
    tasks = [
        asyncio.ensure_future(read_stream(proc.stdout, stdout)),
        asyncio.ensure_future(read_stream(proc.stderr, stderr)),
    ]
    try:
        await asyncio.wait_for(proc.wait(), timeout_ms / 1000)
    finally:
        await finish(proc, tasks)

    return (
        proc.returncode,
        b"".join(stdout).decode("utf-8", errors="replace"),
        b"".join(stderr).decode("utf-8", errors="replace"),
    )


async def check_installed(settings: Settings) -> bool:
    """Returns True when `copilot --version` exits cleanly within the version timeout."""
    try:
        code, _, _ = await _capture(
            [*settings.command, "--version"], settings.version_timeout_ms
        )
    except (OSError, asyncio.TimeoutError):
        return False
    return code == 0


async def help_output(settings: Settings) -> str:
    """Returns the trimmed output of `copilot --help` (stdout, else stderr)."""
    try:
        _, stdout, stderr = await _capture(
            [*settings.command, "--help"], settings.help_timeout_ms
        )
    except OSError as e:
        raise HelpUnavailable(f"Failed to execute copilot --help: {e}") from e
    except asyncio.TimeoutError as e:
        raise HelpUnavailable("Copilot CLI help command timed out") from e

    output = stdout.strip() or stderr.strip()
    if not output:
        raise HelpUnavailable("No output from copilot --help")
    return output
