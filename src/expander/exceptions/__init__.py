"""Expander exception hierarchy.

All exceptions can be imported from this package:
    from expander.exceptions import ConfigError, ExpanderError
"""

from __future__ import annotations

# Base exception
from expander.exceptions.base import ExpanderError

# Configuration exceptions
from expander.exceptions.config import ConfigError

# Document I/O exceptions
from expander.exceptions.document import DocumentError

# Expression exceptions
from expander.exceptions.expression import (
    ExpressionError,
    ExpressionEvaluationError,
    ExpressionSyntaxError,
)

__all__ = [
    # Base
    "ExpanderError",
    # Config
    "ConfigError",
    # Documents
    "DocumentError",
    # Expressions
    "ExpressionError",
    "ExpressionEvaluationError",
    "ExpressionSyntaxError",
]
