from typing import Optional


def tests_prompt(code: str, framework: Optional[str] = None) -> str:
    if framework:
        return f"Generate {framework} tests for this code:\n\n{code}"
    return f"Generate unit tests for this code:\n\n{code}"
