"""
Best-effort discovery of Copilot model identifiers.

The Copilot CLI has no machine-readable model listing, so the identifiers are
scraped from its help text. The result is advisory: nothing guarantees that a
returned name is actually selectable.
"""

import re

from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from ..config import Settings
from ..log import Logger
from .errors import HelpUnavailable
from .health import help_output


FALLBACK_MODELS = (
    "claude-sonnet-4.5",
    "claude-haiku-4.5",
    "claude-opus-4.5",
    "claude-sonnet-4",
    "gpt-5.2-codex",
    "gpt-5.1-codex-max",
    "gpt-5.1-codex",
    "gpt-5.2",
    "gpt-5.1",
    "gpt-5",
    "gpt-5.1-codex-mini",
    "gpt-5-mini",
    "gpt-4.1",
    "gemini-3-pro-preview",
)

MODEL_TOKEN_REGEX = re.compile(r"\b(?:claude|gpt|gemini|o)[a-z0-9.-]*\b", re.IGNORECASE)

_DIGIT = re.compile(r"\d")


def parse_model_tokens(text: str) -> List[str]:
    """Extracts versioned model-looking tokens from free text.

    Tokens are lower-cased, tokens without any digit (bare vendor names such as
    "Claude") are dropped, and duplicates are removed keeping first-seen order.
    """
    seen = set()
    models = []
    for match in MODEL_TOKEN_REGEX.findall(text):
        token = match.lower()
        if not _DIGIT.search(token) or token in seen:
            continue
        seen.add(token)
        models.append(token)
    return models


@dataclass(frozen=True)
class ModelCatalogResult:
    models: List[str]
    source: str  # "help" or "fallback"


class ModelCatalog:
    def __init__(
        self,
        settings: Settings,
        logger: Logger,
        parser: Callable[[str], List[str]] = parse_model_tokens,
        fetch_help: Optional[Callable[[Settings], Awaitable[str]]] = None,
    ):
        self.settings = settings
        self.logger = logger
        self.parser = parser
        self.fetch_help = fetch_help or help_output

    async def discover(self) -> ModelCatalogResult:
        try:
            text = await self.fetch_help(self.settings)
            models = self.parser(text)
            if models:
                self.logger.debug("Parsed models from help output", {"count": len(models)})
                return ModelCatalogResult(models=models, source="help")
            self.logger.debug("No model identifiers found in help output")
        except HelpUnavailable as e:
            self.logger.warn(f"Failed to parse copilot --help: {e}")

        return ModelCatalogResult(models=list(FALLBACK_MODELS), source="fallback")
