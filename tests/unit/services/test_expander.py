"""Unit tests for ExpanderService."""

from __future__ import annotations

import pytest

from expander.config import ExpanderConfig, Replacement
from expander.expressions import EvaluationContext
from expander.services import ExpanderService


@pytest.fixture
def service() -> ExpanderService:
    """Service over a small fixed set of replacements."""
    config = ExpanderConfig(
        replacements=[
            Replacement(key="greeting", value="Hello"),
            Replacement(key="shout", value="upper('hey')"),
            Replacement(key="name", value="file.name"),
            Replacement(key="retired", value="old", enabled=False),
            Replacement(key="dup", value="first", enabled=False),
            Replacement(key="dup", value="second"),
        ]
    )
    return ExpanderService(config)


class TestGetReplacementValue:
    """Tests for key resolution."""

    def test_static_and_dynamic(self, service: ExpanderService) -> None:
        """Static values pass through; expressions are evaluated."""
        assert service.get_replacement_value("greeting") == "Hello"
        assert service.get_replacement_value("shout") == "HEY"

    def test_context(
        self, service: ExpanderService, note_context: EvaluationContext
    ) -> None:
        """File references use the supplied context."""
        assert service.get_replacement_value("name", note_context) == (
            "2024-01-15 Meeting Notes"
        )

    def test_unknown_and_disabled(self, service: ExpanderService) -> None:
        """Unknown and disabled keys resolve to None."""
        assert service.get_replacement_value("missing") is None
        assert service.get_replacement_value("retired") is None

    def test_first_enabled_wins(self, service: ExpanderService) -> None:
        """A disabled duplicate is skipped."""
        assert service.get_replacement_value("dup") == "second"


class TestLookups:
    """Tests for key listing and lookup helpers."""

    def test_has_key(self, service: ExpanderService) -> None:
        """Only enabled keys count."""
        assert service.has_key("greeting") is True
        assert service.has_key("retired") is False

    def test_enabled_keys(self, service: ExpanderService) -> None:
        """Enabled keys in configuration order."""
        assert service.get_enabled_keys() == ["greeting", "shout", "name", "dup"]

    def test_all_replacements(self, service: ExpanderService) -> None:
        """Every replacement, enabled or not."""
        assert len(service.get_all_replacements()) == 6

    def test_get_replacement(self, service: ExpanderService) -> None:
        """Lookup ignores the enabled flag."""
        replacement = service.get_replacement("retired")
        assert replacement is not None
        assert replacement.enabled is False
        assert service.get_replacement("missing") is None


class TestPreviewValue:
    """Tests for preview_value."""

    def test_preview(self, service: ExpanderService) -> None:
        """Previews report success and failure."""
        assert service.preview_value("lower('ABC')").result == "abc"
        failed = service.preview_value("number('1').toFixed(-1)")
        assert failed.success is False
