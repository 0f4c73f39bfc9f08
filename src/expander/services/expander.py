"""Key resolution over configured replacements."""

from __future__ import annotations

from expander.config import ExpanderConfig, Replacement
from expander.expressions import EvaluationContext, PreviewResult, evaluate
from expander.expressions import preview_value as preview_expression
from expander.logging import get_logger

__all__ = ["ExpanderService"]

logger = get_logger(__name__)


class ExpanderService:
    """Resolves keys to computed values using the configured replacements.

    Disabled replacements behave exactly like missing ones. When several
    replacements share a key, the first enabled one wins.

    Example:
        ```python
        service = ExpanderService(load_config())
        service.get_replacement_value("today")  # "2024-06-20"
        ```
    """

    def __init__(self, config: ExpanderConfig) -> None:
        self._config = config

    @property
    def config(self) -> ExpanderConfig:
        """Configuration the service reads replacements from."""
        return self._config

    def _find_enabled(self, key: str) -> Replacement | None:
        return next(
            (r for r in self._config.replacements if r.key == key and r.enabled),
            None,
        )

    def get_replacement_value(
        self, key: str, context: EvaluationContext | None = None
    ) -> str | None:
        """Compute the value for ``key``.

        Args:
            key: Replacement key.
            context: File metadata for ``file.*`` references.

        Returns:
            The evaluated value, or None if the key is unknown or disabled.
        """
        replacement = self._find_enabled(key)
        if replacement is None:
            return None
        return evaluate(replacement.value, context)

    def has_key(self, key: str) -> bool:
        """Whether ``key`` exists and is enabled."""
        return self._find_enabled(key) is not None

    def get_enabled_keys(self) -> list[str]:
        """Keys of all enabled replacements, in configuration order."""
        return [r.key for r in self._config.replacements if r.enabled]

    def get_all_replacements(self) -> list[Replacement]:
        """All configured replacements, enabled or not."""
        return list(self._config.replacements)

    def get_replacement(self, key: str) -> Replacement | None:
        """The first replacement with ``key``, enabled or not."""
        return next((r for r in self._config.replacements if r.key == key), None)

    def preview_value(
        self, value: str, context: EvaluationContext | None = None
    ) -> PreviewResult:
        """Evaluate a value for display, reporting failures instead of hiding them."""
        result = preview_expression(value, context)
        if not result.success:
            logger.debug("preview_failed", value=value, error=result.result)
        return result
