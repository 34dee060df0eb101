def suggest_prompt(task: str) -> str:
    """Asks Copilot for a shell command that accomplishes `task`."""
    return f"Suggest a command for: {task}"
