"""Interpreter for parsed expression chains.

The first element produces a value (a built-in function or ``file.<field>``);
every later element is applied to the running value as a method.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence
from datetime import datetime

from expander.exceptions import ExpressionSyntaxError
from expander.expressions.context import EvaluationContext
from expander.expressions.dates import parse_date, start_of_day
from expander.expressions.parser import (
    ExpressionElement,
    FileFieldAccess,
    FunctionCall,
    PropertyAccess,
)
from expander.expressions.values import (
    DateValue,
    NumValue,
    StrValue,
    TypedValue,
    apply_method,
    escape_html,
    has_string_method,
    is_truthy_text,
    parse_number,
)

__all__ = ["ExpressionInterpreter"]

InitialFunction = Callable[[Sequence[str]], TypedValue]


def _now(args: Sequence[str]) -> TypedValue:
    return DateValue(datetime.now())


def _today(args: Sequence[str]) -> TypedValue:
    return DateValue(start_of_day(datetime.now()))


def _date(args: Sequence[str]) -> TypedValue:
    parsed = parse_date(args[0]) if args else None
    if parsed is None:
        return StrValue("")
    return DateValue(parsed)


def _number(args: Sequence[str]) -> TypedValue:
    return NumValue(parse_number(args[0]) if args else math.nan)


def _extreme(pick: Callable[..., float], empty: float) -> InitialFunction:
    def function(args: Sequence[str]) -> TypedValue:
        numbers = [parse_number(arg) for arg in args]
        if any(math.isnan(n) for n in numbers):
            return NumValue(math.nan)
        return NumValue(pick(numbers) if numbers else empty)

    return function


def _if(args: Sequence[str]) -> TypedValue:
    condition = args[0] if args else ""
    when_true = args[1] if len(args) > 1 else ""
    when_false = args[2] if len(args) > 2 else ""
    return StrValue(when_true if is_truthy_text(condition) else when_false)


def _escape_html(args: Sequence[str]) -> TypedValue:
    return StrValue(escape_html(args[0] if args else ""))


_INITIAL_FUNCTIONS: dict[str, InitialFunction] = {
    "now": _now,
    "today": _today,
    "date": _date,
    "number": _number,
    "min": _extreme(min, math.inf),
    "max": _extreme(max, -math.inf),
    "if": _if,
    "escapeHTML": _escape_html,
}


class ExpressionInterpreter:
    """Executes expression chains against an optional evaluation context.

    The interpreter holds no mutable state; one instance can evaluate any
    number of chains.

    Example:
        ```python
        interpreter = ExpressionInterpreter(context)
        chain = parse_chain('file.name.upper()', context)
        interpreter.run(chain).to_display_string()  # "MY NOTE"
        ```
    """

    def __init__(self, context: EvaluationContext | None = None) -> None:
        self._context = context

    def run(self, chain: Sequence[ExpressionElement]) -> TypedValue:
        """Evaluate a chain to a typed value.

        Args:
            chain: Parsed chain elements.

        Returns:
            The final value. An empty chain yields empty text.

        Raises:
            ExpressionSyntaxError: If the chain does not start with a
                function call or ``file.<field>``.
            ExpressionEvaluationError: If a method rejects its arguments.
        """
        if not chain:
            return StrValue("")

        value = self._evaluate_initial(chain[0])
        for element in chain[1:]:
            value = self._apply(value, element)
        return value

    def _evaluate_initial(self, element: ExpressionElement) -> TypedValue:
        if isinstance(element, FileFieldAccess):
            return self._resolve_field(element.field)

        if isinstance(element, PropertyAccess):
            raise ExpressionSyntaxError(
                f"Expression must start with a function call, got '{element.name}'",
                expression=element.name,
            )

        function = _INITIAL_FUNCTIONS.get(element.name)
        if function is not None:
            return function(element.args)

        # upper("hello") behaves like "hello".upper()
        if has_string_method(element.name):
            subject = element.args[0] if element.args else ""
            return apply_method(StrValue(subject), element.name, element.args[1:])

        return StrValue("")

    def _apply(self, value: TypedValue, element: ExpressionElement) -> TypedValue:
        if isinstance(element, FunctionCall):
            return apply_method(value, element.name, element.args)
        if isinstance(element, PropertyAccess):
            return apply_method(value, element.name, ())
        # file.<field> in the middle of a chain is not a transformation
        return value

    def _resolve_field(self, field: str) -> TypedValue:
        if self._context is None:
            return StrValue("")
        return self._context.get_field(field)
