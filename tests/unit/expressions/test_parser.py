"""Unit tests for the expression chain parser."""

from __future__ import annotations

from expander.expressions import EvaluationContext
from expander.expressions.parser import (
    FileFieldAccess,
    FunctionCall,
    PropertyAccess,
    parse_chain,
)


def parse(expression: str, context: EvaluationContext | None = None) -> list:
    return parse_chain(expression, context)


class TestParseChain:
    """Tests for chain structure."""

    def test_single_call(self) -> None:
        """A call without arguments."""
        assert parse("now()") == [FunctionCall("now", ())]

    def test_call_with_arguments(self) -> None:
        """String and number arguments are kept as text."""
        assert parse("replace('a', \"b\")") == [FunctionCall("replace", ("a", "b"))]
        assert parse("max(1, -2.5)") == [FunctionCall("max", ("1", "-2.5"))]

    def test_method_chain(self) -> None:
        """Dots separate chain elements."""
        assert parse("now().format('YYYY').upper()") == [
            FunctionCall("now", ()),
            FunctionCall("format", ("YYYY",)),
            FunctionCall("upper", ()),
        ]

    def test_file_field_access(self) -> None:
        """file.<field> as a chain element."""
        assert parse("file.name.upper()") == [
            FileFieldAccess("name"),
            FunctionCall("upper", ()),
        ]

    def test_bare_identifier_is_property_access(self) -> None:
        """Identifiers without parentheses are property accesses."""
        assert parse("file.name.upper") == [
            FileFieldAccess("name"),
            PropertyAccess("upper"),
        ]

    def test_empty_expression(self) -> None:
        """Nothing to parse yields an empty chain."""
        assert parse("") == []

    def test_unparseable_tokens_are_skipped(self) -> None:
        """Punctuation outside calls is ignored."""
        assert parse(") , + now()") == [FunctionCall("now", ())]

    def test_missing_closing_paren(self) -> None:
        """An unclosed argument list still yields a call."""
        assert parse("upper('x'") == [FunctionCall("upper", ("x",))]


class TestNestedGroups:
    """Tests for parentheses nested inside an argument list."""

    def test_nested_call_is_skipped_as_a_unit(self) -> None:
        """A nested call does not end the outer argument list."""
        assert parse("if(upper('x'), 'yes', 'no')") == [
            FunctionCall("if", ("yes", "no"))
        ]

    def test_bare_parentheses_are_skipped(self) -> None:
        """A plain group between arguments is dropped."""
        assert parse("max(1, (2, 3), 4)") == [FunctionCall("max", ("1", "4"))]

    def test_chain_continues_after_nested_call(self) -> None:
        """Elements after the outer call are still parsed."""
        assert parse("if(lower(upper('a')), 'b').upper()") == [
            FunctionCall("if", ("b",)),
            FunctionCall("upper", ()),
        ]

    def test_unclosed_nested_group_runs_to_end(self) -> None:
        """An unclosed nested group swallows the rest of the input."""
        assert parse("if('a', upper('b'") == [FunctionCall("if", ("a",))]


class TestFileFieldArguments:
    """Tests for file.<field> references inside argument lists."""

    def test_resolved_with_context(self, note_context: EvaluationContext) -> None:
        """Arguments are resolved to the field's display string."""
        assert parse("date(file.name)", note_context) == [
            FunctionCall("date", ("2024-01-15 Meeting Notes",))
        ]

    def test_empty_without_context(self) -> None:
        """Without a context the argument is empty text."""
        assert parse("upper(file.name)") == [FunctionCall("upper", ("",))]

    def test_unknown_field_is_empty(self, note_context: EvaluationContext) -> None:
        """Unknown fields resolve to empty text."""
        assert parse("upper(file.size)", note_context) == [FunctionCall("upper", ("",))]
