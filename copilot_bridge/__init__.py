"""
Drive the GitHub Copilot CLI as a subprocess: run prompts with timeout salvage,
discover models and keep per-session history.
"""

from .config import Settings
from .log import Logger
from .tools import CopilotTools, ToolResponse


__version__ = "2.0.0"

__all__ = ["Settings", "Logger", "CopilotTools", "ToolResponse"]
