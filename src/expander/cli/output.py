"""Message formatting helpers for CLI output."""

from __future__ import annotations

import json
from typing import Any

__all__ = [
    "format_error",
    "format_success",
    "format_warning",
    "format_json",
]


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Example:
        >>> print(format_error(
        ...     "Invalid key",
        ...     details=["Key must be lowercase"],
        ...     suggestion="Use 'due-date'",
        ... ))
        Error: Invalid key
          Key must be lowercase
        Suggestion: Use 'due-date'
    """
    lines = [f"Error: {message}"]
    lines.extend(f"  {detail}" for detail in details or [])
    if suggestion:
        lines.append(f"Suggestion: {suggestion}")
    return "\n".join(lines)


def format_success(message: str) -> str:
    """Format a success message.

    Example:
        >>> format_success("Updated 3 file(s)")
        'Success: Updated 3 file(s)'
    """
    return f"Success: {message}"


def format_warning(message: str) -> str:
    """Format a warning message.

    Example:
        >>> format_warning("Unknown keys: foo")
        'Warning: Unknown keys: foo'
    """
    return f"Warning: {message}"


def format_json(data: Any) -> str:
    """Format data as JSON with 2-space indentation."""
    return json.dumps(data, indent=2, ensure_ascii=False)
