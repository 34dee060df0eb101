#!/usr/bin/env python3

import argparse
import argcomplete
import asyncio
import sys

from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Callable, List, Optional

from rich.console import Console
from rich.markdown import Markdown

from .chat import chat
from .config import Settings
from .log import Logger
from .paths import init_directories
from .tools import CopilotTools, ToolResponse


_available_commands: List["Command"] = []
_tools: Optional[CopilotTools] = None


@dataclass
class Argument(ABC):
    def __init__(self, help: str, kwargs: Optional[dict] = None):
        self.help = help
        self.kwargs = kwargs if kwargs is not None else {}

    @abstractmethod
    def add_to_parser(self, parser: argparse.ArgumentParser):
        pass


class OptionalArg(Argument):
    def __init__(
        self,
        short_option: str,
        long_option: str,
        help: str,
        kwargs: Optional[dict] = None,
    ):
        super().__init__(help=help, kwargs=kwargs)
        self.short_option = short_option
        self.long_option = long_option

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(
            self.short_option, self.long_option, help=self.help, **self.kwargs
        )


class PositionalArg(Argument):
    def __init__(self, name: str, help: str, kwargs: Optional[dict] = None):
        super().__init__(help=help, kwargs=kwargs)
        self.name = name

    def add_to_parser(self, parser: argparse.ArgumentParser):
        parser.add_argument(self.name, help=self.help, **self.kwargs)


@dataclass
class Command:
    name: str
    func: Callable
    help: str
    description: str
    args: list[Argument]


def _init_tools():
    global _tools
    if _tools is None:
        settings = Settings.from_env()
        logger = Logger.from_settings(settings)
        init_directories(settings, logger)
        _tools = CopilotTools(settings, logger)


def command(args: List[Argument]):
    def decorator(func):
        if not func.__name__.startswith("handle_"):
            raise ValueError("Command handler must start with 'handle_'.")

        if not func.__doc__:
            raise ValueError(
                f"Command handler '{func.__name__}' must have a docstring for its help text."
            )

        @wraps(func)
        def wrapper(*args, **kwargs):
            _init_tools()
            return func(*args, **kwargs)

        command_name = func.__name__.split("_")[1]
        # Use the first line of the docstring as the help text and
        # the full docstring for the detailed description.
        help_text = func.__doc__.strip().split("\n")[0]
        _available_commands.append(
            Command(command_name, wrapper, help_text, func.__doc__, args)
        )
        return wrapper

    return decorator


def _read_code(value: str) -> str:
    """Returns the argument itself, or stdin when the argument is '-'."""
    if value == "-":
        return sys.stdin.read()
    return value


def _render(response: ToolResponse):
    if response.is_error:
        print(response.text, file=sys.stderr)
        sys.exit(1)

    console = Console()
    console.print(Markdown(response.text))


MODEL_ARG = OptionalArg(
    short_option="-m",
    long_option="--model",
    help="The AI model Copilot should use.",
)

CODE_ARG = PositionalArg(
    name="code",
    help="The code to work on. Use '-' to read it from stdin.",
)


##############################################################################


@command(
    [
        PositionalArg(
            name="prompt",
            help="The question or task to ask GitHub Copilot.",
        ),
        OptionalArg(
            short_option="-c",
            long_option="--context",
            help="Additional context (file paths, code snippets, etc.).",
        ),
        MODEL_ARG,
        OptionalArg(
            short_option="-a",
            long_option="--allow-all-tools",
            help="Let Copilot run every tool without asking for confirmation.",
            kwargs={"action": "store_true", "default": None},
        ),
    ]
)
def handle_ask(args):
    """Ask GitHub Copilot to help with a coding task, a command or an explanation."""
    _render(
        asyncio.run(
            _tools.ask(
                args.prompt,
                context=args.context,
                model=args.model,
                allow_all_tools=args.allow_all_tools,
            )
        )
    )


@command([CODE_ARG, MODEL_ARG])
def handle_explain(args):
    """Get a detailed explanation of a piece of code or a technical concept."""
    _render(asyncio.run(_tools.explain(_read_code(args.code), model=args.model)))


@command(
    [
        PositionalArg(
            name="task",
            help="The task you want to accomplish.",
        ),
        MODEL_ARG,
    ]
)
def handle_suggest(args):
    """Get a command line suggestion for a task."""
    _render(asyncio.run(_tools.suggest(args.task, model=args.model)))


@command([])
def handle_models(args):
    """List the model identifiers Copilot accepts (best effort)."""
    _render(asyncio.run(_tools.list_models()))


@command(
    [
        CODE_ARG,
        OptionalArg(
            short_option="-e",
            long_option="--error",
            help="The error message or a description of the problem.",
            kwargs={"required": True},
        ),
        OptionalArg(
            short_option="-c",
            long_option="--context",
            help="Additional context about the error.",
        ),
    ]
)
def handle_debug(args):
    """Help debug code errors and issues."""
    _render(asyncio.run(_tools.debug(_read_code(args.code), args.error, context=args.context)))


@command(
    [
        CODE_ARG,
        OptionalArg(
            short_option="-g",
            long_option="--goal",
            help="A specific refactoring goal, e.g. 'improve performance'.",
        ),
    ]
)
def handle_refactor(args):
    """Suggest refactoring improvements for code."""
    _render(asyncio.run(_tools.refactor(_read_code(args.code), goal=args.goal)))


@command(
    [
        CODE_ARG,
        OptionalArg(
            short_option="-f",
            long_option="--framework",
            help="The testing framework to use, e.g. pytest or Jest.",
        ),
    ]
)
def handle_tests(args):
    """Generate unit tests for code."""
    _render(asyncio.run(_tools.generate_tests(_read_code(args.code), framework=args.framework)))


@command(
    [
        CODE_ARG,
        OptionalArg(
            short_option="-f",
            long_option="--focus",
            help="An area to focus on, e.g. security. Can be repeated.",
            kwargs={"action": "append", "dest": "focus_areas"},
        ),
    ]
)
def handle_review(args):
    """Get a code review with suggestions."""
    _render(asyncio.run(_tools.review(_read_code(args.code), focus_areas=args.focus_areas)))


@command([MODEL_ARG])
def handle_chat(args):
    """Chat with Copilot from the command line.
    Every answer is kept in an in-memory session; type /help inside the chat for commands.
    """
    chat(_tools, model=args.model)


##############################################################################


def run_cli(argv: Optional[List[str]] = None):
    """
    Parses command-line arguments and executes the corresponding command.

    Args:
        argv: A list of strings representing the command-line arguments.
              If None, `sys.argv[1:]` is used automatically by `parse_args`.
    """
    parser = argparse.ArgumentParser(
        description="Drive the GitHub Copilot CLI from your terminal."
    )
    subparsers = parser.add_subparsers(
        dest="command", help="Sub-commands", required=True
    )

    # Sort commands alphabetically for consistent --help output.
    _available_commands.sort(key=lambda cmd: cmd.name)

    for command in _available_commands:
        subparser = subparsers.add_parser(
            command.name, help=command.help, description=command.description
        )
        for arg in command.args:
            arg.add_to_parser(subparser)
        subparser.set_defaults(func=command.func)

    # Enable argument auto-completion.
    argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    try:
        args.func(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def main():
    """The main entry point for the command-line interface, called by the `copilot-assist` script."""
    run_cli()


if __name__ == "__main__":
    main()
