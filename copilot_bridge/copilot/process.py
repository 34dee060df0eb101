"""Stream collection and cleanup shared by every Copilot CLI invocation."""

import asyncio

from typing import Callable, List, Optional


READ_CHUNK_SIZE = 65536

# Once the CLI has exited, its pipes may still be held open by a background
# child (an MCP server, an npx wrapper). Output is drained for this long only.
DRAIN_TIMEOUT_S = 0.5


async def read_stream(
    stream: asyncio.StreamReader,
    chunks: List[bytes],
    on_data: Optional[Callable[[], None]] = None,
):
    while True:
        chunk = await stream.read(READ_CHUNK_SIZE)
        if not chunk:
            return
        chunks.append(chunk)
        if on_data is not None:
            on_data()


async def finish(
    proc: asyncio.subprocess.Process,
    tasks: List[asyncio.Future],
    drain_timeout: float = DRAIN_TIMEOUT_S,
):
    """Kills the child if it still runs, reaps it, drains its streams briefly and closes them.

    Stream tasks still pending after `drain_timeout` are cancelled.
    """
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()

    pending = [task for task in tasks if not task.done()]
    if pending:
        await asyncio.wait(pending, timeout=drain_timeout)
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)

    # asyncio.subprocess.Process has no public close(); without it the pipe
    # transports outlive the event loop when a background child holds them.
    transport = getattr(proc, "_transport", None)
    if transport is not None:
        transport.close()
