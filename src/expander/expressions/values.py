"""Typed value model for expression results.

Every expression evaluates to one of five value types:

- DateValue: an instant (``now()``, ``date("2024-01-15")``, ``file.mtime``)
- StrValue: text
- NumValue: a float, possibly NaN (``number("abc")``)
- BoolValue: a flag (``"abc".contains("b")``)
- ListValue: an ordered sequence of strings (``split(",")``)

Each type has its own method table. Calling a method that a type does not
define falls back to the string table applied to the value's display string,
so ``now().upper()`` upper-cases the ISO timestamp. Unknown method names
leave the value unchanged.
"""

from __future__ import annotations

import html
import math
import re
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from expander.constants import DEFAULT_DATE_FORMAT
from expander.exceptions import ExpressionEvaluationError
from expander.expressions.dates import (
    format_date,
    relative_phrase,
    start_of_day,
    to_iso_string,
)

__all__ = [
    "DateValue",
    "StrValue",
    "NumValue",
    "BoolValue",
    "ListValue",
    "TypedValue",
    "apply_method",
    "has_string_method",
    "parse_number",
    "format_number",
    "is_truthy_text",
    "escape_html",
]


@dataclass(frozen=True, slots=True)
class DateValue:
    """An instant. ``None`` represents an invalid (unparseable) date."""

    instant: datetime | None

    def to_display_string(self) -> str:
        if self.instant is None:
            return ""
        return to_iso_string(self.instant)


@dataclass(frozen=True, slots=True)
class StrValue:
    text: str

    def to_display_string(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class NumValue:
    number: float

    def to_display_string(self) -> str:
        return format_number(self.number)


@dataclass(frozen=True, slots=True)
class BoolValue:
    flag: bool

    def to_display_string(self) -> str:
        return "true" if self.flag else "false"


@dataclass(frozen=True, slots=True)
class ListValue:
    items: tuple[str, ...]

    def to_display_string(self) -> str:
        return ", ".join(self.items)


TypedValue = DateValue | StrValue | NumValue | BoolValue | ListValue

_NUMBER_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INFINITY_PREFIX = re.compile(r"^([+-]?)Infinity")

# =============================================================================
# Number helpers
# =============================================================================


def parse_number(text: str) -> float:
    """Parse the leading numeric part of ``text``.

    Non-numeric text yields NaN rather than an error.

    Examples:
        >>> parse_number(" 12.5kg")
        12.5
        >>> math.isnan(parse_number("abc"))
        True
    """
    trimmed = text.strip()
    infinity = _INFINITY_PREFIX.match(trimmed)
    if infinity is not None:
        return -math.inf if infinity.group(1) == "-" else math.inf
    match = _NUMBER_PREFIX.match(trimmed)
    if match is None:
        return math.nan
    return float(match.group(0))


def format_number(number: float) -> str:
    """Render a number the way users expect to read it.

    Integral values drop the decimal point; NaN and infinities are spelled out.

    Examples:
        >>> format_number(4.0)
        '4'
        >>> format_number(3.14)
        '3.14'
    """
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number.is_integer():
        return str(int(number))
    return repr(number)


def _to_int(arg: str | None, default: int) -> int:
    """Convert a numeric argument to an int, truncating toward zero."""
    if arg is None:
        return default
    number = parse_number(arg)
    if math.isnan(number):
        return 0
    if math.isinf(number):
        return default
    return int(number)


def _arg(args: Sequence[str], index: int, default: str = "") -> str:
    return args[index] if index < len(args) else default


# =============================================================================
# Text helpers
# =============================================================================

_FALSY_TEXT = frozenset({"", "false", "0", "null", "undefined"})


def is_truthy_text(text: str) -> bool:
    """Truthiness used by ``if()``.

    Empty text and ``false``/``0``/``null``/``undefined`` (case and
    surrounding whitespace ignored) are falsy. Everything else is truthy.
    """
    return text.strip().lower() not in _FALSY_TEXT


def escape_html(text: str) -> str:
    """Escape ``& < > " '``, ampersand first so nothing is escaped twice."""
    return html.escape(text, quote=True).replace("&#x27;", "&#39;")


def _title(text: str) -> str:
    return re.sub(
        r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text
    )


def _replace(text: str, args: Sequence[str]) -> StrValue:
    # The pattern is a regular expression applied globally; the replacement
    # is inserted literally.
    pattern = _arg(args, 0)
    replacement = _arg(args, 1)
    try:
        compiled = re.compile(pattern)
    except re.error as e:
        raise ExpressionEvaluationError(
            f"invalid pattern {pattern!r}: {e}", method="replace"
        ) from e
    return StrValue(compiled.sub(lambda _: replacement, text))


def _split(text: str, args: Sequence[str]) -> ListValue:
    separator = _arg(args, 0)
    parts = text.split(separator) if separator else list(text)
    if len(args) > 1:
        parts = parts[: max(0, _to_int(args[1], len(parts)))]
    return ListValue(tuple(parts))


def _slice(text: str, args: Sequence[str]) -> StrValue:
    start = _to_int(_arg(args, 0, "0"), 0)
    end = _to_int(args[1], len(text)) if len(args) > 1 else None
    return StrValue(text[start:end])


def _repeat(text: str, args: Sequence[str]) -> StrValue:
    count = parse_number(_arg(args, 0, "0"))
    if math.isnan(count) or math.isinf(count):
        count = 0
    return StrValue(text * max(0, math.floor(count)))


# =============================================================================
# Method tables
# =============================================================================

StrMethod = Callable[[str, Sequence[str]], TypedValue]

_STRING_METHODS: dict[str, StrMethod] = {
    "upper": lambda s, a: StrValue(s.upper()),
    "lower": lambda s, a: StrValue(s.lower()),
    "trim": lambda s, a: StrValue(s.strip()),
    "replace": _replace,
    "title": lambda s, a: StrValue(_title(s)),
    "slice": _slice,
    "repeat": _repeat,
    "startsWith": lambda s, a: BoolValue(s.startswith(_arg(a, 0))),
    "endsWith": lambda s, a: BoolValue(s.endswith(_arg(a, 0))),
    "contains": lambda s, a: BoolValue(_arg(a, 0) in s),
    "containsAll": lambda s, a: BoolValue(all(v in s for v in a)),
    "containsAny": lambda s, a: BoolValue(any(v in s for v in a)),
    "isEmpty": lambda s, a: BoolValue(len(s) == 0),
    "reverse": lambda s, a: StrValue(s[::-1]),
    "split": _split,
    # Already a string; formatting is a no-op
    "format": lambda s, a: StrValue(s),
}


def _date_format(value: DateValue, args: Sequence[str]) -> TypedValue:
    if value.instant is None:
        return StrValue("")
    return StrValue(format_date(value.instant, _arg(args, 0, DEFAULT_DATE_FORMAT)))


def _date_date(value: DateValue, args: Sequence[str]) -> TypedValue:
    if value.instant is None:
        return value
    return DateValue(start_of_day(value.instant))


def _date_time(value: DateValue, args: Sequence[str]) -> TypedValue:
    if value.instant is None:
        return StrValue("")
    return StrValue(format_date(value.instant, "HH:mm:ss"))


def _date_relative(value: DateValue, args: Sequence[str]) -> TypedValue:
    if value.instant is None:
        return StrValue("")
    return StrValue(relative_phrase(value.instant))


_DATE_METHODS: dict[str, Callable[[DateValue, Sequence[str]], TypedValue]] = {
    "format": _date_format,
    "date": _date_date,
    "time": _date_time,
    "relative": _date_relative,
    "isEmpty": lambda v, a: BoolValue(v.instant is None),
}


def _num_unary(operation: Callable[[float], float]) -> Callable[..., TypedValue]:
    def method(value: NumValue, args: Sequence[str]) -> TypedValue:
        if not math.isfinite(value.number):
            return value
        return NumValue(float(operation(value.number)))

    return method


def _num_round(value: NumValue, args: Sequence[str]) -> TypedValue:
    if not math.isfinite(value.number):
        return value
    factor = 10 ** _to_int(_arg(args, 0, "0"), 0)
    # Half rounds up (toward positive infinity)
    return NumValue(math.floor(value.number * factor + 0.5) / factor)


def _num_to_fixed(value: NumValue, args: Sequence[str]) -> TypedValue:
    precision = _to_int(_arg(args, 0, "0"), 0)
    if not 0 <= precision <= 100:
        raise ExpressionEvaluationError(
            f"precision {precision} out of range 0-100", method="toFixed"
        )
    if not math.isfinite(value.number):
        return StrValue(format_number(value.number))
    return StrValue(f"{value.number:.{precision}f}")


_NUMBER_METHODS: dict[str, Callable[[NumValue, Sequence[str]], TypedValue]] = {
    "abs": _num_unary(abs),
    "ceil": _num_unary(math.ceil),
    "floor": _num_unary(math.floor),
    "round": _num_round,
    "toFixed": _num_to_fixed,
    "isEmpty": lambda v, a: BoolValue(math.isnan(v.number)),
}


def has_string_method(name: str) -> bool:
    """Whether ``name`` is a string method (usable as an initial function)."""
    return name in _STRING_METHODS


def apply_method(value: TypedValue, name: str, args: Sequence[str]) -> TypedValue:
    """Apply a chained method to a value.

    Dispatches on the value's type. Names the type does not define fall back
    to the string method table applied to the display string; names no table
    defines return the value unchanged.

    Args:
        value: Current running value.
        name: Method name, e.g. ``"format"``.
        args: Method arguments as strings.

    Returns:
        The new running value.

    Raises:
        ExpressionEvaluationError: If the method rejects its arguments.

    Examples:
        >>> apply_method(StrValue("hello"), "upper", [])
        StrValue(text='HELLO')
        >>> apply_method(NumValue(-2.0), "abs", [])
        NumValue(number=2.0)
    """
    if isinstance(value, DateValue) and name in _DATE_METHODS:
        return _DATE_METHODS[name](value, args)
    if isinstance(value, NumValue) and name in _NUMBER_METHODS:
        return _NUMBER_METHODS[name](value, args)

    if name not in _STRING_METHODS:
        return value

    text = value.to_display_string()
    return _STRING_METHODS[name](text, args)
