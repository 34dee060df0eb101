from typing import Optional


def refactor_prompt(code: str, goal: Optional[str] = None) -> str:
    if goal:
        return f"Refactor this code to {goal}:\n\n{code}"
    return f"Refactor and improve this code:\n\n{code}"


def refactor_template(code: str, goal: Optional[str] = None) -> str:
    goal_text = f" to {goal}" if goal else ""
    return f"""Please refactor this code{goal_text}:

```
{code}
```

Provide:
1. Refactored code
2. Explanation of changes
3. Benefits of the refactoring
4. Any trade-offs or considerations"""
