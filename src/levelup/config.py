"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (LEVELUP__CACHE__TTL_SECONDS=60)
  2. levelup.yaml           (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. All fields have sensible defaults.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from levelup.models.topics import DEFAULT_TOPICS, TopicCluster

_CONFIG_FILE_NAME = "levelup.yaml"


def _find_config_file() -> str | None:
    """Return the path of the first levelup.yaml found, or None."""
    candidates = [
        Path(_CONFIG_FILE_NAME),
        Path(platformdirs.user_config_dir("levelup")) / _CONFIG_FILE_NAME,
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ApiSettings(BaseModel):
    base_url: str = "http://localhost:3000"
    chapters_path: str = "/api/chapters"
    timeout_seconds: float = 30.0


class CacheSettings(BaseModel):
    ttl_seconds: int = Field(default=300, ge=0)


class SelectorSettings(BaseModel):
    limit: int = Field(default=3, ge=0)
    topics: list[TopicCluster] = Field(default_factory=lambda: list(DEFAULT_TOPICS))


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: LEVELUP__API__BASE_URL=https://...
        env_prefix="LEVELUP__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    api: ApiSettings = ApiSettings()
    cache: CacheSettings = CacheSettings()
    selector: SelectorSettings = SelectorSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # dotenv and file secrets intentionally excluded
        )
