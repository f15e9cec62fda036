"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments
  2. Environment variables  (POKESHELF__BACKEND__URL=https://xyz.supabase.co)
  3. pokeshelf.yaml         (searched in cwd, then the platform config dir)
  4. Hardcoded defaults

The config file is optional; every field has a usable default except the
backend credentials, which are empty until configured.
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

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("pokeshelf")


def _find_config_file() -> str | None:
    """Return the path of the first pokeshelf.yaml found, or None."""
    candidates = [
        Path("pokeshelf.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "pokeshelf.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class BackendSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str = "http://localhost:54321"
    anon_key: str = ""
    timeout_seconds: float = 10.0


class MatchSettings(BaseModel):
    """Tolerance knobs for one fuzzy matching mode."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    threshold: float = Field(ge=0.0, le=1.0)
    distance: int = Field(ge=0)
    min_match_char_length: int = Field(default=1, ge=1)
    limit: int = Field(ge=1)


class SearchSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    debounce_ms: int = 300
    blur_grace_ms: int = 200
    # Row cap for the substring lookup used by the detail views
    search_limit: int = 20
    results: MatchSettings = MatchSettings(threshold=0.4, distance=100, limit=12)
    suggestions: MatchSettings = MatchSettings(threshold=0.3, distance=50, limit=8)


class FunctionSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    import_name: str = "import-pokemon"
    notify_name: str = "send-pokemon-notification"
    # Imports fan out one upstream request per id, so they get a longer budget
    timeout_seconds: float = 120.0


class LoggingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "text"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: POKESHELF__SEARCH__DEBOUNCE_MS=500
        env_prefix="POKESHELF__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
        extra="forbid",
    )

    backend: BackendSettings = BackendSettings()
    search: SearchSettings = SearchSettings()
    functions: FunctionSettings = FunctionSettings()
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
