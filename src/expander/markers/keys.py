"""Replacement key validation and property-key helpers.

Two kinds of keys exist:

- Regular keys: kebab-case, e.g. ``today``, ``due-date``, ``q3-report``.
- Property keys: ``prop.`` followed by any non-empty property name, e.g.
  ``prop.updated`` or ``prop.Last Reviewed``. Their value updates a
  frontmatter property instead of inline text.
"""

from __future__ import annotations

from expander.constants import KEY_PATTERN, PROP_KEY_PATTERN, PROPERTY_PREFIX

__all__ = [
    "is_valid_key",
    "is_property_key",
    "get_property_name",
    "normalize_key",
    "validate_key",
]


def is_property_key(key: str) -> bool:
    """Whether ``key`` targets a frontmatter property.

    Examples:
        >>> is_property_key("prop.updated")
        True
        >>> is_property_key("props.updated")
        False
    """
    return key.startswith(PROPERTY_PREFIX)


def get_property_name(key: str) -> str:
    """Return the property name of a property key (trimmed, case preserved).

    Non-property keys are returned unchanged.

    Examples:
        >>> get_property_name("prop. Last Reviewed ")
        'Last Reviewed'
    """
    if not is_property_key(key):
        return key
    return key[len(PROPERTY_PREFIX) :].strip()


def is_valid_key(key: str) -> bool:
    """Whether ``key`` is a valid kebab-case or property key.

    Examples:
        >>> is_valid_key("hello-world-123")
        True
        >>> is_valid_key("Hello_World")
        False
        >>> is_valid_key("prop.Hello_World")
        True
    """
    if not key or not isinstance(key, str):
        return False
    return bool(KEY_PATTERN.match(key) or PROP_KEY_PATTERN.match(key))


def normalize_key(key: str) -> str:
    """Normalize a key without validating it.

    Regular keys are trimmed and lower-cased. Property keys keep their case;
    both the key and the property name are trimmed.
    """
    trimmed = key.strip()
    if is_property_key(trimmed):
        return f"{PROPERTY_PREFIX}{get_property_name(trimmed)}"
    return trimmed.lower()


def validate_key(key: str) -> str | None:
    """Validate a key for use in configuration.

    Returns:
        A human-readable error message, or None if the key is valid.
    """
    if not key or not key.strip():
        return "Key cannot be empty"

    normalized = normalize_key(key)

    if is_property_key(normalized):
        if not get_property_name(normalized):
            return (
                'Property key must be "prop." followed by a property name '
                "(e.g., prop.updated)"
            )
        return None

    if normalized != key.strip():
        return "Key must be lowercase"

    if not KEY_PATTERN.match(normalized):
        return "Key must be kebab-case (lowercase letters, numbers, hyphens only)"

    return None
