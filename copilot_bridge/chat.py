import asyncio

from typing import Optional

from rich.console import Console
from rich.markdown import Markdown

from .tools import CopilotTools, ToolResponse


HELP_TEXT = """
Type a message to ask Copilot. Every answer is recorded in the current session.

- `/history` shows the current session history
- `/sessions` lists every session started in this chat
- `/new` starts a fresh session
- `/models` lists the available models
- `/exit` leaves the chat
"""


class ChatLoop:
    """Interactive conversation with Copilot, backed by one current session at a time."""

    def __init__(self, tools: CopilotTools, model: Optional[str] = None):
        self.tools = tools
        self.model = model
        self.console = Console()
        self.should_terminate = False
        self._commands = {
            "/history": self.tools.session_history,
            "/sessions": self.tools.sessions_resource,
            "/new": self.tools.session_start,
            "/models": self.tools.list_models,
        }

    def handle(self, line: str) -> Optional[ToolResponse]:
        line = line.strip()
        if not line:
            return None

        if line in ("/exit", "/quit"):
            self.should_terminate = True
            return None

        if line == "/help":
            self.console.print(Markdown(HELP_TEXT))
            return None

        handler = self._commands.get(line)
        if handler is not None:
            return asyncio.run(handler())

        return asyncio.run(self.tools.ask(line, model=self.model))

    def render(self, response: ToolResponse):
        if response.is_error:
            self.console.print(response.text, style="bold red", markup=False)
        else:
            self.console.print(Markdown(response.text))

    def run(self):
        response = asyncio.run(self.tools.session_start())
        self.console.print(response.text, style="dim", markup=False)
        self.console.print("Type /help for commands.", style="dim")

        while not self.should_terminate:
            try:
                line = input("> ")
            except (KeyboardInterrupt, EOFError):
                return

            response = self.handle(line)
            if response is not None:
                self.render(response)


def chat(tools: CopilotTools, model: Optional[str] = None):
    """Starts an interactive chat with Copilot."""
    ChatLoop(tools, model).run()
