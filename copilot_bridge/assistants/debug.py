from typing import Optional


def debug_prompt(code: str, error: str) -> str:
    # Extra context is attached by the executor, not inlined here.
    return f"Debug this code:\n\n{code}\n\nError: {error}"


def debug_template(code: str, error: str, context: Optional[str] = None) -> str:
    """A structured request for debugging help, meant to be sent as a user message."""
    context_line = f"Context: {context}" if context else ""
    return f"""I'm getting an error and need help debugging:

Error: {error}

Code:
```
{code}
```

{context_line}

Please help me:
1. Identify the root cause
2. Explain why the error is happening
3. Provide a fix
4. Suggest how to prevent similar errors"""
