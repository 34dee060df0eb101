"""
Prompt builders for the code-oriented operations (explain, suggest, debug,
refactor, test generation, review) and the reusable workflow templates.
"""

from .debug import debug_prompt, debug_template
from .explain import explain_prompt
from .refactor import refactor_prompt, refactor_template
from .review import code_review_template, review_prompt
from .suggest import suggest_prompt
from .testgen import tests_prompt


TEMPLATES = {
    "code-review-template": code_review_template,
    "debug-template": debug_template,
    "refactor-template": refactor_template,
}


__all__ = [
    "debug_prompt",
    "debug_template",
    "explain_prompt",
    "refactor_prompt",
    "refactor_template",
    "code_review_template",
    "review_prompt",
    "suggest_prompt",
    "tests_prompt",
    "TEMPLATES",
]
