def explain_prompt(code: str) -> str:
    return f"Please explain this code:\n\n{code}"
