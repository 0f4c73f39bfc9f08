from __future__ import annotations

from typing import Any

from expander.exceptions.base import ExpanderError


class ConfigError(ExpanderError):
    """Exception for configuration loading, parsing, and validation errors.

    Raised when configuration cannot be loaded, parsed, or validated. This
    includes YAML parsing failures, Pydantic validation errors (for example a
    replacement key that is not kebab-case), and invalid environment values.

    Attributes:
        message: Human-readable error message describing the configuration issue.
        field: Optional field name that caused the error (e.g., "replacements.0.key").
        value: Optional value that failed validation (for debugging).

    Examples:
        ```python
        raise ConfigError(
            "Invalid configuration: Key must be lowercase",
            field="replacements.0.key",
            value="My-Key",
        )
        ```
    """

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
