"""Date helpers for the value model.

Supports moment.js-style format tokens (``YYYY-MM-DD``, ``HH:mm``...) and a
forgiving parser that pulls a date out of strings like
``"2024-01-15 Meeting Notes"``.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

__all__ = [
    "format_date",
    "parse_date",
    "start_of_day",
    "to_iso_string",
    "relative_phrase",
]

# Alternation is ordered longest-first per letter so "MM" never matches as
# "M" twice. Substitution is a single pass, so replaced text ("AM", "06")
# is never re-scanned for tokens.
_FORMAT_TOKEN_PATTERN = re.compile(r"YYYY|YY|MM|M|DD|D|HH|H|hh|h|mm|m|ss|s|A|a")

_ISO_DATE_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_SLASH_DATE_PATTERN = re.compile(r"(\d{4})/(\d{2})/(\d{2})")
_COMPACT_DATE_PATTERN = re.compile(r"^(\d{4})(\d{2})(\d{2})")

# Last-resort formats. %b/%B follow the active locale.
_FALLBACK_FORMATS: tuple[str, ...] = (
    "%Y-%m",
    "%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
    "%a, %d %b %Y %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%c",
    "%x",
)


def _twelve_hour(hour: int) -> int:
    return hour % 12 or 12


def format_date(instant: datetime, pattern: str) -> str:
    """Format a datetime using moment.js-compatible tokens.

    Supported tokens: YYYY, YY, MM, M, DD, D, HH, H, hh, h, mm, m, ss, s, A, a.
    Every other character is copied through unchanged.

    Examples:
        >>> format_date(datetime(2024, 1, 5, 14, 3), "DD/MM/YYYY hh:mm A")
        '05/01/2024 02:03 PM'
    """
    values = {
        "YYYY": f"{instant.year:04d}",
        "YY": f"{instant.year % 100:02d}",
        "MM": f"{instant.month:02d}",
        "M": str(instant.month),
        "DD": f"{instant.day:02d}",
        "D": str(instant.day),
        "HH": f"{instant.hour:02d}",
        "H": str(instant.hour),
        "hh": f"{_twelve_hour(instant.hour):02d}",
        "h": str(_twelve_hour(instant.hour)),
        "mm": f"{instant.minute:02d}",
        "m": str(instant.minute),
        "ss": f"{instant.second:02d}",
        "s": str(instant.second),
        "A": "PM" if instant.hour >= 12 else "AM",
        "a": "pm" if instant.hour >= 12 else "am",
    }
    return _FORMAT_TOKEN_PATTERN.sub(lambda m: values[m.group(0)], pattern)


def start_of_day(instant: datetime) -> datetime:
    """Return the same calendar day at midnight."""
    return instant.replace(hour=0, minute=0, second=0, microsecond=0)


def to_iso_string(instant: datetime) -> str:
    """Render an instant as a UTC ISO-8601 string with millisecond precision.

    Naive datetimes are taken to be local time.

    Examples:
        >>> to_iso_string(datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        '2024-01-15T10:30:00.000Z'
    """
    utc = instant.astimezone(timezone.utc)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _from_parts(match: re.Match[str] | None) -> datetime | None:
    if match is None:
        return None
    year, month, day = (int(part) for part in match.groups())
    try:
        return datetime(year, month, day)
    except ValueError:
        return None


def parse_date(text: str) -> datetime | None:
    """Parse a date out of free text.

    Strategies, in order:
    1. A ``YYYY-MM-DD`` pattern anywhere in the string.
    2. A ``YYYY/MM/DD`` pattern anywhere in the string.
    3. A leading ``YYYYMMDD``.
    4. ISO-8601 parsing of the trimmed text.
    5. A list of common human formats (locale-aware month names).

    Args:
        text: Text that may contain a date.

    Returns:
        The parsed datetime, or None when the text is empty or no strategy
        succeeds.

    Examples:
        >>> parse_date("Daily Log 2024-01-15")
        datetime.datetime(2024, 1, 15, 0, 0)
        >>> parse_date("hello world") is None
        True
    """
    trimmed = text.strip()
    if not trimmed:
        return None

    for pattern in (_ISO_DATE_PATTERN, _SLASH_DATE_PATTERN):
        parsed = _from_parts(pattern.search(trimmed))
        if parsed is not None:
            return parsed

    parsed = _from_parts(_COMPACT_DATE_PATTERN.match(trimmed))
    if parsed is not None:
        return parsed

    try:
        return datetime.fromisoformat(trimmed)
    except ValueError:
        pass

    for fmt in _FALLBACK_FORMATS:
        try:
            return datetime.strptime(trimmed, fmt)
        except ValueError:
            continue

    return None


_RELATIVE_UNITS: tuple[tuple[str, float], ...] = (
    ("year", 365 * 86400),
    ("month", 30 * 86400),
    ("week", 7 * 86400),
    ("day", 86400),
    ("hour", 3600),
    ("minute", 60),
)


def relative_phrase(instant: datetime, now: datetime | None = None) -> str:
    """Describe an instant relative to now ("3 days ago", "in 2 hours").

    Args:
        instant: The instant to describe.
        now: Reference instant. Defaults to the current time in the same
            timezone awareness as ``instant``.

    Examples:
        >>> base = datetime(2024, 6, 20, 12, 0)
        >>> relative_phrase(base - timedelta(days=3), now=base)
        '3 days ago'
        >>> relative_phrase(base + timedelta(hours=2), now=base)
        'in 2 hours'
    """
    if now is None:
        now = datetime.now(instant.tzinfo)
    seconds = (now - instant).total_seconds()
    magnitude = abs(seconds)

    if magnitude < 45:
        return "just now"

    for unit, size in _RELATIVE_UNITS:
        if magnitude >= size:
            count = int(round(magnitude / size))
            break
    else:
        unit, count = "minute", 1

    label = unit if count == 1 else f"{unit}s"
    if seconds >= 0:
        return f"{count} {label} ago"
    return f"in {count} {label}"
