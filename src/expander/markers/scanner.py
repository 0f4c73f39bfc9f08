"""Marker scanner.

A marker pair looks like::

    <!-- expand: key -->inner text<!---->

where the opening prefix selects the update mode (``expand``,
``expand-manual``, ``expand-once``, ``expand-once-and-eject``) and
``<!---->`` is the universal closing marker. Inner text may span lines.

Scanning is a pure function of the text. Each call returns fresh match
objects and shares no cursor state with other calls.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from expander.constants import (
    EXPANDER_CLOSE,
    EXPANDER_END,
    MARKER_TO_MODE,
    MODE_TO_OPEN_MARKER,
    UpdateMode,
)

__all__ = [
    "ExpanderMatch",
    "IncompleteExpansion",
    "scan_complete",
    "scan_incomplete",
    "build_open_marker",
]

_MARKER_TYPE = r"(expand(?:-(?:manual|once(?:-and-eject)?))?)"
# Kebab-case key, or "prop." followed by a name that ends in a non-space
# and stays inside the comment
_KEY = r"([a-z0-9]+(?:-[a-z0-9]+)*|prop\.(?:(?!-->)[^\n])*?[^\s])"
_OPENING = rf"<!--\s*{_MARKER_TYPE}:\s*{_KEY}\s*-->"
_CLOSING = r"<!--\s*-->"
# Inner text never contains another opening marker
_INNER = r"((?:(?!<!--\s*expand(?:-[a-z-]+)?:)[\s\S])*?)"

_COMPLETE_PATTERN = re.compile(rf"{_OPENING}{_INNER}{_CLOSING}")
_OPENING_PATTERN = re.compile(_OPENING)


@dataclass(frozen=True, slots=True)
class ExpanderMatch:
    """A complete open/close marker pair.

    Offsets index into the text passed to ``scan_complete``.

    Attributes:
        key: Key named in the opening marker.
        current_inner_text: Text between the markers.
        start_offset: Offset of the opening marker.
        end_offset: Offset just past the closing marker.
        full_match_text: Entire matched text including markers.
        update_mode: Mode selected by the opening marker.
        open_marker_text: Canonical opening marker for this mode and key.
        close_marker_text: Closing marker.
    """

    key: str
    current_inner_text: str
    start_offset: int
    end_offset: int
    full_match_text: str
    update_mode: UpdateMode
    open_marker_text: str
    close_marker_text: str = EXPANDER_END


@dataclass(frozen=True, slots=True)
class IncompleteExpansion:
    """An opening marker without a closing marker.

    Attributes:
        key: Key named in the opening marker.
        start_offset: Offset of the opening marker.
        end_offset: Offset just past the opening marker.
        open_marker_text: The opening marker exactly as written.
        update_mode: Mode selected by the opening marker.
    """

    key: str
    start_offset: int
    end_offset: int
    open_marker_text: str
    update_mode: UpdateMode


def build_open_marker(mode: UpdateMode, key: str) -> str:
    """Build the canonical opening marker for a mode and key.

    Examples:
        >>> build_open_marker(UpdateMode.ONCE, "today")
        '<!-- expand-once: today -->'
    """
    return f"{MODE_TO_OPEN_MARKER[mode]}{key}{EXPANDER_CLOSE}"


def scan_complete(text: str) -> list[ExpanderMatch]:
    """Find every complete marker pair in ``text``.

    Returns:
        Matches in document order.

    Examples:
        >>> [m.current_inner_text for m in scan_complete("<!-- expand: a -->x<!---->")]
        ['x']
    """
    matches: list[ExpanderMatch] = []
    for match in _COMPLETE_PATTERN.finditer(text):
        marker_type, key, value = match.groups()
        mode = MARKER_TO_MODE[marker_type]
        matches.append(
            ExpanderMatch(
                key=key,
                current_inner_text=value,
                start_offset=match.start(),
                end_offset=match.end(),
                full_match_text=match.group(0),
                update_mode=mode,
                open_marker_text=build_open_marker(mode, key),
            )
        )
    return matches


def scan_incomplete(text: str) -> list[IncompleteExpansion]:
    """Find opening markers that are not part of a complete pair.

    An opening marker counts as paired when a complete match starts at the
    same offset.

    Returns:
        Incomplete expansions in document order.
    """
    paired_offsets = {m.start_offset for m in scan_complete(text)}
    incomplete: list[IncompleteExpansion] = []
    for match in _OPENING_PATTERN.finditer(text):
        if match.start() in paired_offsets:
            continue
        marker_type, key = match.groups()
        incomplete.append(
            IncompleteExpansion(
                key=key,
                start_offset=match.start(),
                end_offset=match.end(),
                open_marker_text=match.group(0),
                update_mode=MARKER_TO_MODE[marker_type],
            )
        )
    return incomplete
