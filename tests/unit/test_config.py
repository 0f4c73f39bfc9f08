"""Tests for configuration loading."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from expander.config import ExpanderConfig, Replacement, load_config
from expander.exceptions import ConfigError


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults_when_no_config(self, clean_env: None, temp_dir: Path) -> None:
        """Defaults are used when no config file exists."""
        os.chdir(temp_dir)

        config = load_config()

        assert isinstance(config, ExpanderConfig)
        assert config.replacements == []
        assert config.folders_to_scan == []
        assert config.disable_automatic_updates is False
        assert config.batch_size == 5
        assert config.file_extensions == ["md"]
        assert config.verbosity == "warning"

    def test_project_config(
        self, clean_env: None, temp_dir: Path, sample_config_yaml: str
    ) -> None:
        """expander.yaml in the working directory is loaded."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text(sample_config_yaml)

        config = load_config()

        assert [r.key for r in config.replacements] == [
            "greeting",
            "shout",
            "note-name",
            "prop.status",
            "retired",
        ]
        assert config.replacements[-1].enabled is False
        assert config.ignored_folders == ["archive"]
        assert config.verbosity == "info"

    def test_explicit_path(
        self, clean_env: None, temp_dir: Path, sample_config_yaml: str
    ) -> None:
        """An explicit path replaces ./expander.yaml."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text("batch_size: 7\n")
        custom = temp_dir / "custom.yaml"
        custom.write_text("batch_size: 9\n")

        assert load_config(custom).batch_size == 9
        assert load_config().batch_size == 7

    def test_user_config_lowest_priority(self, clean_env: None, temp_dir: Path) -> None:
        """User config fills in what the project config leaves out."""
        os.chdir(temp_dir)
        user_config = Path(os.environ["HOME"]) / ".config" / "expander" / "config.yaml"
        user_config.parent.mkdir(parents=True)
        user_config.write_text("batch_size: 3\nverbosity: debug\n")
        (temp_dir / "expander.yaml").write_text("batch_size: 8\n")

        config = load_config()

        assert config.batch_size == 8
        assert config.verbosity == "debug"

    def test_env_overrides(self, clean_env: None, temp_dir: Path) -> None:
        """EXPANDER_* variables override files."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text("batch_size: 8\n")
        os.environ["EXPANDER_BATCH_SIZE"] = "12"
        os.environ["EXPANDER_DISABLE_AUTOMATIC_UPDATES"] = "true"

        config = load_config()

        assert config.batch_size == 12
        assert config.disable_automatic_updates is True

    def test_invalid_value_raises_config_error(
        self, clean_env: None, temp_dir: Path
    ) -> None:
        """Validation failures become ConfigError with the field."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text("batch_size: 0\n")

        with pytest.raises(ConfigError) as exc_info:
            load_config()

        assert exc_info.value.field == "batch_size"

    def test_invalid_key_raises_config_error(
        self, clean_env: None, temp_dir: Path
    ) -> None:
        """Invalid replacement keys are rejected with a readable message."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text(
            "replacements:\n  - key: My_Key\n    value: x\n"
        )

        with pytest.raises(ConfigError, match="lowercase"):
            load_config()

    def test_invalid_yaml(self, clean_env: None, temp_dir: Path) -> None:
        """Malformed YAML raises ConfigError."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text("replacements: [unclosed\n")

        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_config()

    def test_empty_file_uses_defaults(self, clean_env: None, temp_dir: Path) -> None:
        """An empty config file is allowed."""
        os.chdir(temp_dir)
        (temp_dir / "expander.yaml").write_text("")

        assert load_config().batch_size == 5


class TestReplacement:
    """Tests for the Replacement model."""

    def test_key_normalized(self) -> None:
        """Keys are trimmed; property names keep their case."""
        assert Replacement(key=" today ", value="x").key == "today"
        assert Replacement(key="prop. Last Reviewed", value="x").key == (
            "prop.Last Reviewed"
        )

    def test_defaults(self) -> None:
        """Replacements are enabled by default."""
        replacement = Replacement(key="k")
        assert replacement.enabled is True
        assert replacement.value == ""

    def test_invalid_key(self) -> None:
        """Invalid keys fail validation."""
        with pytest.raises(ValueError, match="kebab-case"):
            Replacement(key="bad key", value="x")

    def test_file_extensions_normalized(
        self, clean_env: None, temp_dir: Path
    ) -> None:
        """Extensions are accepted with or without a dot."""
        os.chdir(temp_dir)
        config = ExpanderConfig(file_extensions=[".MD", "txt", ""])
        assert config.file_extensions == ["md", "txt"]
