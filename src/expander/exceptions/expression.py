"""Expression-specific error types.

These are raised inside the interpreter only. ``expander.expressions.evaluate``
catches them and falls back to the literal expression text, so they never
reach callers of the public evaluation API.
"""

from __future__ import annotations

from expander.exceptions.base import ExpanderError


class ExpressionError(ExpanderError):
    """Base exception for all expression-related errors.

    Attributes:
        message: Human-readable error message.
        expression: The expression that caused the error (if known).
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
    ) -> None:
        self.expression = expression
        super().__init__(message)


class ExpressionSyntaxError(ExpressionError):
    """Raised when an expression cannot be interpreted structurally.

    Attributes:
        position: Token position where the problem was detected.
    """

    def __init__(
        self,
        message: str,
        expression: str,
        position: int = 0,
    ) -> None:
        self.position = position
        if position > 0 and expression:
            full_message = f"{message} at token {position}: {expression}"
        else:
            full_message = f"{message}: {expression}"
        super().__init__(full_message, expression=expression)


class ExpressionEvaluationError(ExpressionError):
    """Raised when a well-formed chain fails while being executed.

    Examples are an out-of-range ``toFixed`` precision or an invalid regular
    expression passed to ``replace``.

    Attributes:
        method: Name of the function or method that failed.
    """

    def __init__(
        self,
        message: str,
        expression: str | None = None,
        method: str | None = None,
    ) -> None:
        self.method = method
        if method:
            message = f"{method}(): {message}"
        super().__init__(message, expression=expression)
