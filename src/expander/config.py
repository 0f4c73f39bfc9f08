"""Expander configuration.

Configuration is loaded with pydantic-settings from, in priority order:

1. Environment variables (``EXPANDER_*``, nested with ``__``)
2. Project YAML config (``./expander.yaml`` or an explicit path)
3. User YAML config (``~/.config/expander/config.yaml``)
4. Built-in defaults

Example expander.yaml::

    replacements:
      - key: today
        value: today().format("YYYY-MM-DD")
      - key: prop.updated
        value: now().format("YYYY-MM-DD HH:mm")
      - key: signature
        value: Written by the team
        enabled: false
    folders_to_scan: [journal]
    ignored_folders: [journal/archive]
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, ClassVar, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from expander.constants import BATCH_SIZE, DEFAULT_FILE_EXTENSIONS
from expander.exceptions import ConfigError
from expander.logging import get_logger
from expander.markers.keys import normalize_key, validate_key

__all__ = [
    "ExpanderConfig",
    "Replacement",
    "load_config",
    "get_user_config_path",
    "get_project_config_path",
]

logger = get_logger(__name__)


class Replacement(BaseModel):
    """A configured key and its value expression.

    Attributes:
        key: Kebab-case key, or ``prop.<name>`` for frontmatter properties.
        value: Static text or an expression such as ``now().format("YYYY")``.
        enabled: Disabled replacements are treated as unknown keys.
    """

    key: str
    value: str = ""
    enabled: bool = True

    @field_validator("key")
    @classmethod
    def check_key(cls, v: str) -> str:
        """Normalize the key and reject invalid ones."""
        error = validate_key(v)
        if error is not None:
            raise ValueError(error)
        return normalize_key(v)


class YamlConfigSource(PydanticBaseSettingsSource):
    """Settings source that loads from a YAML file."""

    def __init__(
        self,
        settings_cls: type[BaseSettings],
        yaml_file: Path | None = None,
    ):
        super().__init__(settings_cls)
        self.yaml_file = yaml_file
        self._config_data: dict[str, Any] = {}
        if yaml_file and yaml_file.exists():
            try:
                with open(yaml_file, encoding="utf-8") as f:
                    loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(
                    message=f"Invalid YAML in {yaml_file}: {e}",
                    field=None,
                    value=None,
                ) from e
            if loaded is None:
                logger.warning("config_file_empty", path=str(yaml_file))
            elif not isinstance(loaded, dict):
                raise ConfigError(
                    message=f"Config file {yaml_file} must contain a mapping",
                    field=None,
                    value=type(loaded).__name__,
                )
            else:
                self._config_data = loaded

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        """Get value for a specific field from the YAML config."""
        if field_name in self._config_data:
            return self._config_data[field_name], field_name, False
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        """Return the complete config data."""
        return self._config_data


class ExpanderConfig(BaseSettings):
    """Root configuration object containing all Expander settings."""

    model_config = SettingsConfigDict(
        env_prefix="EXPANDER_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    #: Project config path used by settings_customise_sources
    project_config_path: ClassVar[Path | None] = None

    replacements: list[Replacement] = Field(default_factory=list)
    folders_to_scan: list[str] = Field(default_factory=list)
    ignored_folders: list[str] = Field(default_factory=list)
    disable_automatic_updates: bool = False
    batch_size: int = Field(default=BATCH_SIZE, ge=1, le=50)
    file_extensions: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FILE_EXTENSIONS)
    )
    verbosity: Literal["error", "warning", "info", "debug"] = "warning"

    @field_validator("file_extensions")
    @classmethod
    def strip_extension_dots(cls, v: list[str]) -> list[str]:
        """Accept ``.md`` as well as ``md``."""
        return [ext.lstrip(".").lower() for ext in v if ext.strip(". ")]

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize the order of settings sources.

        Priority (highest to lowest):
        1. Init settings (explicit keyword arguments)
        2. Environment variables (EXPANDER_*)
        3. Project YAML config
        4. User YAML config (~/.config/expander/config.yaml)
        """
        project_path = cls.project_config_path or get_project_config_path()
        return (
            init_settings,
            env_settings,
            YamlConfigSource(settings_cls, project_path),
            YamlConfigSource(settings_cls, get_user_config_path()),
        )


def get_user_config_path() -> Path:
    """Get the path to the user configuration file.

    Returns:
        Path to ~/.config/expander/config.yaml
    """
    return Path.home() / ".config" / "expander" / "config.yaml"


def get_project_config_path() -> Path:
    """Get the default project configuration path (./expander.yaml)."""
    return Path.cwd() / "expander.yaml"


def load_config(config_path: Path | None = None) -> ExpanderConfig:
    """Load configuration with hierarchy: defaults -> user -> project -> env.

    Args:
        config_path: Optional project config file. Defaults to ./expander.yaml

    Returns:
        ExpanderConfig with merged configuration.

    Raises:
        ConfigError: If a config file is malformed or a value is invalid.
    """
    if config_path is None:
        config_path = get_project_config_path()

    if not config_path.exists():
        logger.info("project_config_not_found", path=str(config_path))

    ExpanderConfig.project_config_path = config_path
    try:
        return ExpanderConfig()
    except ValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(loc) for loc in first_error["loc"])
        raise ConfigError(
            message=f"Invalid configuration: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
        ) from e
    finally:
        ExpanderConfig.project_config_path = None
