from typing import Optional, Sequence


def review_prompt(code: str, focus_areas: Optional[Sequence[str]] = None) -> str:
    if focus_areas:
        return f"Review this code, focusing on {', '.join(focus_areas)}:\n\n{code}"
    return f"Review this code:\n\n{code}"


def code_review_template(code: str, language: Optional[str] = None) -> str:
    """
    A structured code review request covering quality, bugs, performance,
    security and best practices. `language` is used both in the wording and as
    the code fence tag.
    """
    language = language or ""
    return f"""Please review the following {language} code and provide feedback on:
1. Code quality and style
2. Potential bugs or issues
3. Performance considerations
4. Security concerns
5. Best practices

Code:
```{language}
{code}
```

Provide specific, actionable feedback."""
