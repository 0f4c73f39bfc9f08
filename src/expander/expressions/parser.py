"""Expression chain parser.

Parses an expression with the Lark grammar in ``grammar.lark`` and turns the
tree into an ordered chain of elements. For
``date(file.name).format("YYYY").upper()`` the chain is::

    FunctionCall("date", ("2024-01-15 Notes",))
    FunctionCall("format", ("YYYY",))
    FunctionCall("upper", ())

Dots only separate elements. ``file.<field>`` arguments are resolved to
text immediately, using the evaluation context when one is supplied.
Arguments are string and number literals; a parenthesised group inside an
argument list is skipped as a whole, so ``if(upper('x'), 'yes', 'no')``
parses as ``FunctionCall("if", ("yes", "no"))``.

The parser never raises: tokens it cannot place are dropped and whatever
chain could be assembled is returned, possibly empty.
"""

from __future__ import annotations

from dataclasses import dataclass

from lark import Token, Transformer, UnexpectedCharacters, UnexpectedToken

from expander.expressions.context import EvaluationContext
from expander.expressions.grammar import CHAIN_PARSER, unquote_string
from expander.logging import get_logger

__all__ = [
    "FunctionCall",
    "PropertyAccess",
    "FileFieldAccess",
    "ExpressionElement",
    "parse_chain",
]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class FunctionCall:
    """``name(arg, ...)``; arguments are already reduced to text."""

    name: str
    args: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class PropertyAccess:
    """A bare identifier such as ``.upper`` without parentheses."""

    name: str


@dataclass(frozen=True, slots=True)
class FileFieldAccess:
    """``file.<field>``."""

    field: str


ExpressionElement = FunctionCall | PropertyAccess | FileFieldAccess


class _ChainTransformer(Transformer[Token, object]):
    """Transform a parse tree into a flat list of chain elements."""

    def __init__(self, context: EvaluationContext | None) -> None:
        super().__init__()
        self._context = context

    def start(self, items: list[object]) -> list[ExpressionElement]:
        # Stray tokens and skipped groups are dropped here
        return [
            item
            for item in items
            if isinstance(item, (FunctionCall, PropertyAccess, FileFieldAccess))
        ]

    def file_field(self, items: list[Token]) -> FileFieldAccess:
        return FileFieldAccess(str(items[-1]))

    def bare(self, items: list[Token]) -> PropertyAccess:
        return PropertyAccess(str(items[0]))

    def call(self, items: list[object]) -> FunctionCall:
        """Handle ``CALLEE ( args )``.

        items[0] is the callee; the remaining items are argument tokens,
        transformed ``file.<field>`` accesses, and skipped groups.
        """
        args: list[str] = []
        for item in items[1:]:
            if isinstance(item, FileFieldAccess):
                args.append(self._file_field_text(item.field))
            elif isinstance(item, Token) and item.type == "STRING":
                args.append(unquote_string(item))
            elif isinstance(item, Token) and item.type == "NUMBER":
                args.append(str(item))
        return FunctionCall(str(items[0]), tuple(args))

    def unclosed_call(self, items: list[object]) -> FunctionCall:
        """An argument list without ``)`` runs to the end of the input."""
        return self.call(items)

    def group(self, items: list[object]) -> None:
        return None

    def unclosed_group(self, items: list[object]) -> None:
        return None

    def _file_field_text(self, field: str) -> str:
        if self._context is None:
            return ""
        return self._context.get_field(field).to_display_string()


def parse_chain(
    expression: str,
    context: EvaluationContext | None = None,
) -> list[ExpressionElement]:
    """Parse an expression into a chain.

    Args:
        expression: Raw expression text.
        context: Used to resolve ``file.<field>`` arguments.

    Returns:
        List of chain elements in application order.

    Examples:
        >>> parse_chain("file.name.upper()")
        [FileFieldAccess(field='name'), FunctionCall(name='upper', args=())]
    """
    try:
        tree = CHAIN_PARSER.parse(expression)
    except (UnexpectedCharacters, UnexpectedToken) as e:
        logger.warning("expression_parse_failed", expression=expression, error=str(e))
        return []

    result = _ChainTransformer(context).transform(tree)
    if not isinstance(result, list):
        return []
    return result
