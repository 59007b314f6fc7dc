"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (CONANREADME__GITHUB__TOKEN=ghp_...)
  2. conanreadme.yaml       (searched in cwd, then the platform config dir)
  3. Hardcoded defaults

The config file is optional. Every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("conanreadme")


def _find_config_file() -> str | None:
    """Return the path of the first conanreadme.yaml found, or None."""
    candidates = [
        Path("conanreadme.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "conanreadme.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class _Section(BaseModel):
    # A typo in a nested key should fail loudly, not fall back to a default.
    model_config = ConfigDict(extra="forbid")


class GitHubSettings(_Section):
    api_url: str = "https://api.github.com"
    raw_url: str = "https://raw.githubusercontent.com"
    token: str | None = None


class ConanSettings(_Section):
    index_repository: str = "conan-io/conan-center-index"
    branch: str = "master"


class HttpSettings(_Section):
    timeout_seconds: float = Field(default=10.0, gt=0)
    user_agent: str = "conanreadme/0.1.0"


class CacheSettings(_Section):
    search_ttl_minutes: int = Field(default=15, gt=0)
    info_ttl_minutes: int = Field(default=60, gt=0)
    readme_ttl_minutes: int = Field(default=60, gt=0)
    cleanup_interval_minutes: int = Field(default=30, gt=0)


class LoggingSettings(_Section):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: CONANREADME__CACHE__SEARCH_TTL_MINUTES=5
        env_prefix="CONANREADME__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    github: GitHubSettings = GitHubSettings()
    conan: ConanSettings = ConanSettings()
    http: HttpSettings = HttpSettings()
    cache: CacheSettings = CacheSettings()
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
