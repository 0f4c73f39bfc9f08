"""Unit tests for the replacement engine."""

from __future__ import annotations

import pytest

from expander.constants import ProcessingScope
from expander.expressions import EvaluationContext
from expander.markers.engine import (
    KeyResolver,
    PropertyUpdate,
    apply_property_updates,
    replace_expansions,
    replace_single_expansion,
)

ALL = ProcessingScope.ALL
AUTO = ProcessingScope.AUTO


def resolver(values: dict[str, str]) -> KeyResolver:
    def resolve(key: str, context: EvaluationContext | None) -> str | None:
        return values.get(key)

    return resolve


FOO_BAR = resolver({"foo": "bar"})


class TestIncompleteExpansions:
    """Tests for completing unclosed opening markers."""

    def test_inserts_value_and_close(self) -> None:
        """A bare opening gains the value and a closing marker."""
        result = replace_expansions("<!-- expand: foo -->", ALL, FOO_BAR)
        assert result.new_text == "<!-- expand: foo -->bar<!---->"
        assert result.replacements_count == 1

    def test_value_already_typed(self) -> None:
        """Text matching the value is kept and closed, not duplicated."""
        result = replace_expansions("<!-- expand: foo -->bar", ALL, FOO_BAR)
        assert result.new_text == "<!-- expand: foo -->bar<!---->"
        assert result.replacements_count == 1

    def test_value_prefix_of_following_text(self) -> None:
        """Following text starting with the value is split after the value."""
        result = replace_expansions("<!-- expand: foo -->bar and more text", ALL, FOO_BAR)
        assert result.new_text == "<!-- expand: foo -->bar<!----> and more text"

    @pytest.mark.parametrize(
        ("tail", "expected_tail"),
        [("wrong", "bar<!---->wrong"), ("ba", "bar<!---->ba")],
    )
    def test_different_following_text(self, tail: str, expected_tail: str) -> None:
        """Unrelated following text is kept after the inserted value."""
        result = replace_expansions(f"<!-- expand: foo -->{tail}", ALL, FOO_BAR)
        assert result.new_text == f"<!-- expand: foo -->{expected_tail}"

    def test_empty_value(self) -> None:
        """An empty value still closes the marker."""
        result = replace_expansions("<!-- expand: foo -->", ALL, resolver({"foo": ""}))
        assert result.new_text == "<!-- expand: foo --><!---->"

    def test_unknown_key_still_closed(self) -> None:
        """An unknown key is reported and its marker closed without content."""
        result = replace_expansions("<!-- expand: unknown -->existing", ALL, FOO_BAR)
        assert result.new_text == "<!-- expand: unknown --><!---->existing"
        assert result.unknown_keys == ("unknown",)
        assert result.replacements_count == 0

    def test_once_and_eject_replaces_marker(self) -> None:
        """An ejecting opening is replaced by the bare value."""
        result = replace_expansions("A <!-- expand-once-and-eject: foo --> B", ALL, FOO_BAR)
        assert result.new_text == "A bar B"

    def test_auto_scope_skips_manual(self) -> None:
        """Automatic runs leave non-auto openings alone."""
        result = replace_expansions("<!-- expand-manual: foo -->", AUTO, FOO_BAR)
        assert result.new_text is None
        assert result.replacements_count == 0

    def test_multiple_openings(self) -> None:
        """Every opening is completed with offsets kept valid."""
        resolve = resolver({"a": "1", "b": "22"})
        result = replace_expansions("<!-- expand: a -->\n<!-- expand: b -->", ALL, resolve)
        assert result.new_text == "<!-- expand: a -->1<!---->\n<!-- expand: b -->22<!---->"
        assert result.replacements_count == 2


class TestCompleteExpansions:
    """Tests for rewriting complete marker pairs."""

    def test_updates_value(self) -> None:
        """A stale value is replaced."""
        resolve = resolver({"foo": "new-value"})
        result = replace_expansions("<!-- expand: foo -->old-value<!---->", ALL, resolve)
        assert result.new_text == "<!-- expand: foo -->new-value<!---->"
        assert result.replacements_count == 1

    def test_same_value_unchanged(self) -> None:
        """A current value produces no change."""
        resolve = resolver({"foo": "same"})
        result = replace_expansions("<!-- expand: foo -->same<!---->", ALL, resolve)
        assert result.new_text is None
        assert result.replacements_count == 0
        assert result.changed is False

    def test_surrounding_text_preserved(self) -> None:
        """Only the marker region is rewritten."""
        text = "Intro\n<!-- expand: foo -->x<!---->\nOutro"
        result = replace_expansions(text, ALL, FOO_BAR)
        assert result.new_text == "Intro\n<!-- expand: foo -->bar<!---->\nOutro"

    def test_canonical_marker_rewritten(self) -> None:
        """Rewritten pairs use canonical marker spacing."""
        result = replace_expansions("<!--expand:foo-->x<!-- -->", ALL, FOO_BAR)
        assert result.new_text == "<!-- expand: foo -->bar<!---->"

    def test_manual_only_in_all_scope(self) -> None:
        """Manual markers update on explicit runs only."""
        text = "<!-- expand-manual: foo -->old<!---->"
        assert replace_expansions(text, AUTO, FOO_BAR).new_text is None
        assert replace_expansions(text, ALL, FOO_BAR).new_text == (
            "<!-- expand-manual: foo -->bar<!---->"
        )

    def test_once_fills_only_when_empty(self) -> None:
        """Once markers are frozen after their first value."""
        empty = "<!-- expand-once: foo --> <!---->"
        filled = "<!-- expand-once: foo -->old<!---->"
        assert replace_expansions(empty, ALL, FOO_BAR).new_text == (
            "<!-- expand-once: foo -->bar<!---->"
        )
        assert replace_expansions(filled, ALL, FOO_BAR).new_text is None

    def test_once_and_eject(self) -> None:
        """Ejecting pairs collapse to the value when empty."""
        result = replace_expansions("x <!-- expand-once-and-eject: foo --><!----> y", ALL, FOO_BAR)
        assert result.new_text == "x bar y"
        filled = "<!-- expand-once-and-eject: foo -->kept<!---->"
        assert replace_expansions(filled, ALL, FOO_BAR).new_text is None

    def test_unknown_key_reported_once(self) -> None:
        """Unknown keys are collected once and left untouched."""
        text = "<!-- expand: nope -->a<!----><!-- expand: nope -->b<!---->"
        result = replace_expansions(text, ALL, FOO_BAR)
        assert result.new_text is None
        assert result.unknown_keys == ("nope",)

    def test_idempotent(self) -> None:
        """A second pass over the output changes nothing."""
        text = (
            "<!-- expand: foo -->old<!---->\n"
            "<!-- expand-once: foo --><!---->\n"
            "<!-- expand: foo -->"
        )
        first = replace_expansions(text, ALL, FOO_BAR)
        assert first.new_text is not None
        second = replace_expansions(first.new_text, ALL, FOO_BAR)
        assert second.new_text is None
        assert second.replacements_count == 0

    def test_context_passed_to_resolver(self, note_context: EvaluationContext) -> None:
        """The evaluation context reaches the resolver."""
        seen: list[EvaluationContext | None] = []

        def resolve(key: str, context: EvaluationContext | None) -> str | None:
            seen.append(context)
            return "v"

        replace_expansions("<!-- expand: k -->", ALL, resolve, note_context)
        assert seen and all(ctx is note_context for ctx in seen)


class TestPropertyUpdates:
    """Tests for prop.* keys."""

    def test_incomplete_property_marker(self) -> None:
        """Property markers are never closed; an update is recorded."""
        result = replace_expansions("<!-- expand: prop.foo -->", ALL, resolver({"prop.foo": "bar"}))
        assert result.new_text is None
        assert result.property_updates == (PropertyUpdate(name="foo", value="bar"),)
        assert result.changed is True

    def test_complete_property_marker_untouched(self) -> None:
        """A complete property marker keeps its inline text."""
        text = "<!-- expand: prop.status -->x<!---->"
        result = replace_expansions(text, ALL, resolver({"prop.status": "done"}))
        assert result.new_text is None
        assert result.property_updates == (PropertyUpdate("status", "done"),)

    def test_unknown_property_key(self) -> None:
        """Unknown property keys add no marker and are reported."""
        result = replace_expansions("<!-- expand: prop.foo -->", ALL, FOO_BAR)
        assert result.new_text is None
        assert result.unknown_keys == ("prop.foo",)
        assert result.property_updates == ()

    def test_document_order_and_dedupe(self) -> None:
        """Updates keep document order; a repeated name keeps the last value."""
        text = (
            "<!-- expand: prop.b -->\n"
            "<!-- expand: prop.a -->\n"
            "<!-- expand-manual: prop.b -->"
        )
        resolve = resolver({"prop.a": "1", "prop.b": "2"})
        result = replace_expansions(text, ALL, resolve)
        assert [u.name for u in result.property_updates] == ["a", "b"]

    def test_property_scope_gate(self) -> None:
        """Manual property markers are skipped on automatic runs."""
        text = "<!-- expand-manual: prop.foo -->"
        result = replace_expansions(text, AUTO, resolver({"prop.foo": "x"}))
        assert result.property_updates == ()

    def test_apply_creates_header(self) -> None:
        """Applying an update to a document without frontmatter adds one."""
        text = "<!-- expand: prop.updated -->"
        result = replace_expansions(text, ALL, resolver({"prop.updated": "2024-06-20"}))
        updated = apply_property_updates(result.new_text or text, result.property_updates)
        assert updated == "---\nupdated: 2024-06-20\n---\n<!-- expand: prop.updated -->"

    def test_apply_in_order(self) -> None:
        """Several updates land in one header."""
        updates = [PropertyUpdate("a", "1"), PropertyUpdate("b", "two")]
        assert apply_property_updates("Body", updates) == "---\na: \"1\"\nb: two\n---\nBody"

    def test_unclosed_property_before_pair(self) -> None:
        """An unclosed property marker does not swallow a later pair."""
        text = "<!-- expand: prop.updated -->\n\nSee <!-- expand: foo -->bar<!---->\n"
        for _ in range(2):
            result = replace_expansions(text, ALL, FOO_BAR)
            assert result.new_text is None
            assert result.replacements_count == 0

    def test_mixed_markers_settle_after_one_pass(self) -> None:
        """Property markers mixed with pairs are stable on the second pass."""
        text = (
            "<!-- expand: prop.updated -->\n\n"
            "See <!-- expand: foo -->\n"
            "Title: <!-- expand-manual: title -->old<!---->\n"
        )
        resolve = resolver({"foo": "bar", "title": "T", "prop.updated": "2024-06-20"})

        first = replace_expansions(text, ALL, resolve)
        assert first.new_text == (
            "<!-- expand: prop.updated -->\n\n"
            "See <!-- expand: foo -->bar<!---->\n"
            "Title: <!-- expand-manual: title -->T<!---->\n"
        )
        assert first.replacements_count == 2
        assert first.property_updates == (PropertyUpdate("updated", "2024-06-20"),)
        updated = apply_property_updates(first.new_text or text, first.property_updates)

        second = replace_expansions(updated, ALL, resolve)
        assert second.new_text is None
        assert second.replacements_count == 0
        assert apply_property_updates(updated, second.property_updates) == updated


class TestReplaceSingleExpansion:
    """Tests for replace_single_expansion."""

    def test_refreshes_any_mode(self) -> None:
        """A frozen once marker can be refreshed explicitly."""
        text = "<!-- expand-once: foo -->old<!---->"
        assert replace_single_expansion(text, "foo", FOO_BAR) == (
            "<!-- expand-once: foo -->bar<!---->"
        )

    def test_first_match_only(self) -> None:
        """Only the first marker for the key is refreshed."""
        text = "<!-- expand: foo -->1<!----><!-- expand: foo -->2<!---->"
        assert replace_single_expansion(text, "foo", FOO_BAR) == (
            "<!-- expand: foo -->bar<!----><!-- expand: foo -->2<!---->"
        )

    def test_unchanged_value_returns_text(self) -> None:
        """A current value returns the text unchanged."""
        text = "<!-- expand: foo -->bar<!---->"
        assert replace_single_expansion(text, "foo", FOO_BAR) == text

    def test_missing_marker_or_unknown_key(self) -> None:
        """Missing markers and unknown keys return None."""
        assert replace_single_expansion("no markers", "foo", FOO_BAR) is None
        text = "<!-- expand: other -->x<!---->"
        assert replace_single_expansion(text, "other", FOO_BAR) is None
