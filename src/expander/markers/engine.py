"""Replacement engine.

Rewrites the marker regions of one document. A pass runs in three steps:

1. Incomplete opening markers are completed (closing marker added, value
   inserted unless already typed right after the marker).
2. Complete marker pairs are rewritten according to their update mode.
3. Property markers (``prop.*`` keys) are collected as frontmatter updates.
   Their inline text is never touched.

Within a step, edits are applied from the end of the document towards the
start so offsets of not-yet-processed markers stay valid.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from expander.constants import EXPANDER_END, ProcessingScope, UpdateMode
from expander.expressions.context import EvaluationContext
from expander.logging import get_logger
from expander.markers.frontmatter import write_structured_header_property
from expander.markers.keys import get_property_name, is_property_key
from expander.markers.scanner import (
    ExpanderMatch,
    build_open_marker,
    scan_complete,
    scan_incomplete,
)

__all__ = [
    "KeyResolver",
    "PropertyUpdate",
    "ReplacementResult",
    "replace_expansions",
    "replace_single_expansion",
    "apply_property_updates",
]

logger = get_logger(__name__)

#: Maps a key (and optional file context) to its computed value, or None
#: when the key is not configured.
KeyResolver = Callable[[str, EvaluationContext | None], str | None]

_ONCE_MODES = frozenset({UpdateMode.ONCE, UpdateMode.ONCE_AND_EJECT})


@dataclass(frozen=True, slots=True)
class PropertyUpdate:
    """A frontmatter property to set.

    Attributes:
        name: Property name (from ``prop.<name>``, trimmed, case preserved).
        value: New property value.
    """

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class ReplacementResult:
    """Outcome of one replacement pass.

    Attributes:
        new_text: Rewritten document, or None when the text did not change.
        unknown_keys: Keys with no configured value, first occurrence order.
        replacements_count: Number of marker values written.
        property_updates: Frontmatter updates to apply, ordered by each
            property's last marker.
    """

    new_text: str | None
    unknown_keys: tuple[str, ...] = ()
    replacements_count: int = 0
    property_updates: tuple[PropertyUpdate, ...] = ()

    @property
    def changed(self) -> bool:
        """Whether the pass produced a content change or property updates."""
        return self.new_text is not None or bool(self.property_updates)


def _in_scope(mode: UpdateMode, scope: ProcessingScope) -> bool:
    return scope == ProcessingScope.ALL or mode == UpdateMode.AUTO


def _note_unknown(unknown: list[str], key: str) -> None:
    if key not in unknown:
        unknown.append(key)


def _rewrite_match(text: str, match: ExpanderMatch, value: str) -> str:
    """Replace a complete marker pair, keeping markers unless ejecting."""
    if match.update_mode == UpdateMode.ONCE_AND_EJECT:
        replacement = value
    else:
        replacement = (
            build_open_marker(match.update_mode, match.key)
            + value
            + match.close_marker_text
        )
    return text[: match.start_offset] + replacement + text[match.end_offset :]


def _complete_openings(
    text: str,
    scope: ProcessingScope,
    resolve: KeyResolver,
    context: EvaluationContext | None,
    unknown: list[str],
) -> tuple[str, int]:
    """Close incomplete markers. Returns the new text and values written."""
    count = 0
    incomplete = sorted(
        scan_incomplete(text), key=lambda item: item.start_offset, reverse=True
    )
    for item in incomplete:
        if is_property_key(item.key) or not _in_scope(item.update_mode, scope):
            continue

        value = resolve(item.key, context)
        head, tail = text[: item.end_offset], text[item.end_offset :]

        if value is None:
            _note_unknown(unknown, item.key)
            text = head + EXPANDER_END + tail
            continue

        if item.update_mode == UpdateMode.ONCE_AND_EJECT:
            text = text[: item.start_offset] + value + tail
        elif value and tail.startswith(value):
            # Value already typed after the marker; only close it
            split = item.end_offset + len(value)
            text = text[:split] + EXPANDER_END + text[split:]
        else:
            text = head + value + EXPANDER_END + tail
        count += 1
    return text, count


def _rewrite_pairs(
    text: str,
    scope: ProcessingScope,
    resolve: KeyResolver,
    context: EvaluationContext | None,
    unknown: list[str],
) -> tuple[str, int]:
    """Rewrite complete marker pairs. Returns the new text and values written."""
    count = 0
    matches = sorted(
        scan_complete(text), key=lambda item: item.start_offset, reverse=True
    )
    for match in matches:
        if is_property_key(match.key) or not _in_scope(match.update_mode, scope):
            continue
        if match.update_mode in _ONCE_MODES and match.current_inner_text.strip():
            continue

        value = resolve(match.key, context)
        if value is None:
            _note_unknown(unknown, match.key)
            continue
        if match.current_inner_text == value:
            continue

        text = _rewrite_match(text, match, value)
        count += 1
    return text, count


def _collect_property_updates(
    text: str,
    scope: ProcessingScope,
    resolve: KeyResolver,
    context: EvaluationContext | None,
    unknown: list[str],
) -> list[PropertyUpdate]:
    """Resolve every property marker, walking the document in order.

    A property set by several markers takes the value of the last one.
    """
    occurrences: list[tuple[int, str, UpdateMode, str]] = [
        (m.start_offset, m.key, m.update_mode, m.current_inner_text)
        for m in scan_complete(text)
        if is_property_key(m.key)
    ]
    occurrences.extend(
        (item.start_offset, item.key, item.update_mode, "")
        for item in scan_incomplete(text)
        if is_property_key(item.key)
    )
    occurrences.sort(key=lambda occurrence: occurrence[0])

    updates: dict[str, PropertyUpdate] = {}
    for _, key, mode, inner in occurrences:
        if not _in_scope(mode, scope):
            continue
        if mode in _ONCE_MODES and inner.strip():
            continue
        value = resolve(key, context)
        if value is None:
            _note_unknown(unknown, key)
            continue
        name = get_property_name(key)
        if not name:
            continue
        updates.pop(name, None)
        updates[name] = PropertyUpdate(name=name, value=value)
    return list(updates.values())


def replace_expansions(
    text: str,
    scope: ProcessingScope,
    resolve: KeyResolver,
    context: EvaluationContext | None = None,
) -> ReplacementResult:
    """Run one replacement pass over a document.

    Args:
        text: Current document text.
        scope: ``AUTO`` touches only ``auto`` markers; ``ALL`` touches every
            mode.
        resolve: Key resolver returning a value or None for unknown keys.
        context: File metadata passed through to the resolver.

    Returns:
        ReplacementResult. ``new_text`` is None when nothing changed.

    Example:
        >>> result = replace_expansions(
        ...     "<!-- expand: foo -->",
        ...     ProcessingScope.ALL,
        ...     lambda key, ctx: {"foo": "bar"}.get(key),
        ... )
        >>> result.new_text, result.replacements_count
        ('<!-- expand: foo -->bar<!---->', 1)
    """
    unknown: list[str] = []

    completed, opened_count = _complete_openings(
        text, scope, resolve, context, unknown
    )
    rewritten, pair_count = _rewrite_pairs(
        completed, scope, resolve, context, unknown
    )
    property_updates = _collect_property_updates(
        rewritten, scope, resolve, context, unknown
    )

    result = ReplacementResult(
        new_text=rewritten if rewritten != text else None,
        unknown_keys=tuple(unknown),
        replacements_count=opened_count + pair_count,
        property_updates=tuple(property_updates),
    )
    logger.debug(
        "replacement_pass_complete",
        scope=scope.value,
        replacements=result.replacements_count,
        unknown_keys=list(result.unknown_keys),
        property_updates=len(result.property_updates),
    )
    return result


def replace_single_expansion(
    text: str,
    key: str,
    resolve: KeyResolver,
    context: EvaluationContext | None = None,
) -> str | None:
    """Refresh the first complete marker for ``key``, whatever its mode.

    Args:
        text: Current document text.
        key: Key of the marker to refresh.
        resolve: Key resolver.
        context: File metadata passed through to the resolver.

    Returns:
        The new text; the unchanged text when the marker already holds the
        value; None when no marker for ``key`` exists or the key is unknown.
    """
    match = next((m for m in scan_complete(text) if m.key == key), None)
    if match is None:
        return None

    value = resolve(key, context)
    if value is None:
        return None
    if match.current_inner_text == value:
        return text
    return _rewrite_match(text, match, value)


def apply_property_updates(text: str, updates: Sequence[PropertyUpdate]) -> str:
    """Write property updates into the document's frontmatter, in order."""
    for update in updates:
        text = write_structured_header_property(text, update.name, update.value)
    return text
