"""Render structured tool results as markdown-like text."""

from typing import Any, Callable, Tuple


UNFORMATTABLE_RESULT = "Unable to format result"

# Field name and line template, in output order.
RESULT_FIELDS: Tuple[Tuple[str, Callable[[str], str]], ...] = (
    ("title", lambda value: f"**{value}**\n"),
    ("difficulty", lambda value: f"**Difficulty:** {value}\n"),
    ("problem_id", lambda value: f"**Problem ID:** {value}\n"),
    ("link", lambda value: f"**Link:** {value}\n"),
    ("date", lambda value: f"**Date:** {value}\n"),
    ("description", lambda value: f"\n**Problem Description:**\n{value}\n"),
)


def render_result(result: Any) -> str:
    """Render the well-known string fields of a result mapping.

    Fields that are missing or not strings are left out.
    """
    if not isinstance(result, dict):
        return UNFORMATTABLE_RESULT

    parts = []
    for field, template in RESULT_FIELDS:
        value = result.get(field)
        if isinstance(value, str):
            parts.append(template(value))
    return "".join(parts)
