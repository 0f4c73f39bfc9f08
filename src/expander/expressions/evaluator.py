"""Public entry points for evaluating value expressions.

``evaluate`` never raises. Static values (no function call and no ``file.``
reference) are returned verbatim; any failure while tokenizing, parsing, or
interpreting a dynamic expression is logged and the original expression text
is returned, so a broken expression degrades to literal text instead of
corrupting the document.
"""

from __future__ import annotations

from dataclasses import dataclass

from expander.expressions.context import EvaluationContext
from expander.expressions.interpreter import ExpressionInterpreter
from expander.expressions.parser import parse_chain
from expander.logging import get_logger

__all__ = [
    "PreviewResult",
    "evaluate",
    "is_dynamic_expression",
    "preview_value",
]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PreviewResult:
    """Outcome of previewing a configured value.

    Attributes:
        success: Whether the expression evaluated without error.
        result: Evaluated text, or the error message on failure.
    """

    success: bool
    result: str


def is_dynamic_expression(value: str) -> bool:
    """Whether ``value`` is an expression rather than static text.

    Examples:
        >>> is_dynamic_expression("now().format('YYYY')")
        True
        >>> is_dynamic_expression("file.name")
        True
        >>> is_dynamic_expression("static text")
        False
    """
    return ("(" in value and ")" in value) or value.lstrip().startswith("file.")


def _evaluate_strict(expression: str, context: EvaluationContext | None) -> str:
    chain = parse_chain(expression, context)
    return ExpressionInterpreter(context).run(chain).to_display_string()


def evaluate(expression: str, context: EvaluationContext | None = None) -> str:
    """Evaluate an expression to text.

    Args:
        expression: Static text or an expression such as
            ``date(file.name).format("YYYY")``.
        context: File metadata for ``file.*`` references.

    Returns:
        The evaluated text; the expression itself if evaluation fails.

    Examples:
        >>> evaluate("upper('hello').replace('L', 'X')")
        'HEXXO'
        >>> evaluate("if('', 'yes', 'no')")
        'no'
    """
    if not is_dynamic_expression(expression):
        return expression

    try:
        return _evaluate_strict(expression, context)
    except Exception as e:
        logger.warning(
            "expression_evaluation_failed",
            expression=expression,
            error=str(e),
        )
        return expression


def preview_value(value: str, context: EvaluationContext | None = None) -> PreviewResult:
    """Evaluate a configured value for display, reporting failures.

    Unlike ``evaluate``, a failure is reported as ``success=False`` with the
    error message instead of falling back to the literal text.
    """
    if not is_dynamic_expression(value):
        return PreviewResult(success=True, result=value)
    try:
        return PreviewResult(success=True, result=_evaluate_strict(value, context))
    except Exception as e:
        return PreviewResult(success=False, result=str(e) or type(e).__name__)
