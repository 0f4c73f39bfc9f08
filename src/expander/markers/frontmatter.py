"""Minimal frontmatter reader and writer.

Frontmatter is a ``key: value`` block delimited by ``---`` lines at the very
top of a document::

    ---
    title: Weekly notes
    updated: 2024-06-20
    ---
    Body text

Only flat ``key: value`` lines are understood. Nested YAML, lists, and
multi-line scalars are preserved verbatim on write but are not parsed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any

import yaml

from expander.logging import get_logger

__all__ = [
    "StructuredHeader",
    "read_structured_header",
    "write_structured_header_property",
    "get_structured_header_property",
    "format_yaml_value",
]

logger = get_logger(__name__)

_DELIMITER = "---"
_OPENING_PATTERN = re.compile(r"---[ \t]*\r?\n")
_CLOSING_PATTERN = re.compile(r"\n---[ \t]*(?=\r?\n|$)")
_NUMERIC_PATTERN = re.compile(r"^-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$")
_SPECIAL_CHARACTERS = (":", "#", "'", '"', "\n")


@dataclass(frozen=True, slots=True)
class StructuredHeader:
    """A parsed frontmatter block.

    Attributes:
        exists: Always True for a parsed header.
        data: Parsed ``key: value`` pairs with light type coercion.
        start_offset: Offset of the opening delimiter (always 0).
        end_offset: Offset just past the closing delimiter.
        raw: Text between the delimiter lines.
        body_offset: Offset where ``raw`` starts.
    """

    exists: bool
    data: dict[str, Any] = field(default_factory=dict)
    start_offset: int = 0
    end_offset: int = 0
    raw: str = ""
    body_offset: int = 0


def _coerce_scalar(value: str) -> Any:
    """Coerce a raw scalar: unwrap quotes, then booleans, then numbers."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    if value == "true":
        return True
    if value == "false":
        return False
    if value and _NUMERIC_PATTERN.match(value):
        number = float(value)
        if number.is_integer() and re.fullmatch(r"-?\d+", value):
            return int(value)
        return number
    return value


def _line_key(line: str) -> str | None:
    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#") or ":" not in trimmed:
        return None
    return trimmed.split(":", 1)[0].strip() or None


def read_structured_header(text: str) -> StructuredHeader | None:
    """Parse the frontmatter block at the top of ``text``.

    Args:
        text: Document text.

    Returns:
        The parsed header, or None when the document does not start with a
        delimiter line or the closing delimiter is missing.

    Example:
        >>> header = read_structured_header("---\\nfoo: bar\\n---\\nBody")
        >>> header.data, header.end_offset
        ({'foo': 'bar'}, 16)
    """
    opening = _OPENING_PATTERN.match(text)
    if opening is None:
        return None

    # Closing delimiter may directly follow the opening line (empty header)
    closing = _CLOSING_PATTERN.search(text, opening.end() - 1)
    if closing is None:
        return None

    body_offset = opening.end()
    raw = text[body_offset : max(body_offset, closing.start())]

    data: dict[str, Any] = {}
    for line in raw.split("\n"):
        key = _line_key(line)
        if key is None:
            continue
        data[key] = _coerce_scalar(line.strip().split(":", 1)[1].strip())

    return StructuredHeader(
        exists=True,
        data=data,
        start_offset=0,
        end_offset=closing.end(),
        raw=raw,
        body_offset=body_offset,
    )


def _reads_back_as_text(value: str) -> bool:
    """Whether a YAML parser would load the bare value as the same text.

    ISO dates count as text; they are written bare so that readers can
    treat them as dates. Date-shaped text that is not a real date (such as
    ``2024-13-45``) raises ValueError in the loader.
    """
    try:
        loaded = yaml.safe_load(value)
    except (yaml.YAMLError, ValueError):
        return False
    if isinstance(loaded, date):
        return True
    return isinstance(loaded, str) and loaded == value


def format_yaml_value(value: str) -> str:
    """Render a string as a YAML scalar, quoting when needed.

    Values containing ``:``, ``#``, quotes, or newlines, values with leading
    or trailing spaces, empty values, and values a YAML parser would load as
    anything other than the same text (booleans such as ``True``, nulls such
    as ``~``, numbers such as ``+5``, ``0x1F`` or ``.inf``, lists, mappings)
    are wrapped in double quotes.

    Examples:
        >>> format_yaml_value("2024-06-20")
        '2024-06-20'
        >>> format_yaml_value("12:30")
        '"12:30"'
        >>> format_yaml_value("42")
        '"42"'
        >>> format_yaml_value("~")
        '"~"'
    """
    needs_quotes = (
        value == ""
        or any(ch in value for ch in _SPECIAL_CHARACTERS)
        or value != value.strip(" ")
        or not _reads_back_as_text(value)
    )
    if not needs_quotes:
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def write_structured_header_property(text: str, name: str, value: str) -> str:
    """Set a frontmatter property, creating the header if needed.

    An existing line for ``name`` is replaced in place. Otherwise a new line
    is appended before the closing delimiter. Text after the header is
    preserved exactly.

    Args:
        text: Document text.
        name: Property name (case preserved).
        value: New property value.

    Returns:
        The updated document text.
    """
    line = f"{name}: {format_yaml_value(value)}"
    header = read_structured_header(text)

    if header is None:
        logger.debug("frontmatter_created", property=name)
        return f"{_DELIMITER}\n{line}\n{_DELIMITER}\n{text}"

    lines = header.raw.split("\n") if header.raw else []
    found = False
    for index, existing in enumerate(lines):
        if _line_key(existing) == name:
            lines[index] = line
            found = True
            break
    if not found:
        lines.append(line)

    rebuilt = f"{_DELIMITER}\n" + "\n".join(lines) + f"\n{_DELIMITER}"
    return rebuilt + text[header.end_offset :]


def get_structured_header_property(text: str, name: str) -> Any | None:
    """Return a parsed frontmatter property, or None if absent."""
    header = read_structured_header(text)
    if header is None:
        return None
    return header.data.get(name)
