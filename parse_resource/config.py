"""
Configuration settings for parse-resource.

Uses Pydantic Settings to resolve the backend credentials and connection
options. Values come, in decreasing priority, from an explicit in-process
`configure()` call, the process environment, a `.env` file, and finally the
section of `config/parse_resource.yml` named after the current `APP_ENV`.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type

import yaml
from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from parse_resource.exceptions import ConfigurationError

DEFAULT_CONFIG_FILE = "config/parse_resource.yml"
DEFAULT_API_URL = "https://api.parse.com/1"


class Credentials(BaseModel):
    """Static application id / master key pair sent with every request."""

    app_id: str
    master_key: str

    model_config = {"frozen": True}


def _read_environment_section(path: Path, environment: str) -> Dict[str, Any]:
    """
    Load the `environment` section of a YAML config file.

    `${VAR}` references are expanded from the process environment first.
    A missing file or section yields an empty mapping.
    """
    if not path.is_file():
        return {}
    try:
        text = os.path.expandvars(path.read_text(encoding="utf-8"))
        data = yaml.safe_load(text) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot read configuration file '{path}': {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file '{path}' must contain a mapping")
    section = data.get(environment) or {}
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"Section '{environment}' of '{path}' must be a mapping, got {type(section).__name__}"
        )
    return section


def _lookup(overrides: Dict[str, Any], name: str, alias: str, default: str) -> str:
    for key in (alias, name):
        if overrides.get(key) is not None:
            return str(overrides[key])
    return os.environ.get(alias, default)


class EnvironmentYamlSource(PydanticBaseSettingsSource):
    """
    Settings source reading the `APP_ENV` section of the YAML config file.

    The file location and environment name come from the explicit init
    values when given, else from the process environment, since the settings
    object does not exist yet.
    """

    def __init__(
        self, settings_cls: Type[BaseSettings], overrides: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(settings_cls)
        overrides = overrides or {}
        path = Path(_lookup(overrides, "config_file", "PARSE_CONFIG_FILE", DEFAULT_CONFIG_FILE))
        environment = _lookup(overrides, "app_env", "APP_ENV", "development")
        self._data = _read_environment_section(path, environment)

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        # Keyed by alias so that higher-priority sources override on merge.
        return self._data.get(field_name), field.alias or field_name, False

    def __call__(self) -> Dict[str, Any]:
        values: Dict[str, Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                values[key] = value
        return values


class Settings(BaseSettings):
    # Credentials
    app_id: Optional[str] = Field(None, alias="PARSE_APP_ID")
    master_key: Optional[str] = Field(None, alias="PARSE_MASTER_KEY")

    # Backend
    api_url: str = Field(DEFAULT_API_URL, alias="PARSE_API_URL")
    request_timeout: float = Field(30.0, alias="PARSE_REQUEST_TIMEOUT")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    config_file: str = Field(DEFAULT_CONFIG_FILE, alias="PARSE_CONFIG_FILE")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="JSON_LOGS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            EnvironmentYamlSource(settings_cls, getattr(init_settings, "init_kwargs", None)),
        )

    @property
    def credentials(self) -> Credentials:
        if not self.app_id or not self.master_key:
            raise ConfigurationError(
                "Parse credentials are not configured. Call parse_resource.configure(app_id, "
                f"master_key), set PARSE_APP_ID/PARSE_MASTER_KEY, or add them to the "
                f"'{self.app_env}' section of {self.config_file}."
            )
        return Credentials(app_id=self.app_id, master_key=self.master_key)

    @property
    def base_url(self) -> str:
        return self.api_url.rstrip("/")


_OVERRIDES: Dict[str, Any] = {}


def _by_alias(values: Dict[str, Any]) -> Dict[str, Any]:
    fields = Settings.model_fields
    return {
        (fields[name].alias or name) if name in fields else name: value
        for name, value in values.items()
    }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings(**_by_alias(_OVERRIDES))


def configure(app_id: str, master_key: str, **overrides: Any) -> Settings:
    """
    Explicitly set the Parse credentials (and optionally other settings).

    Explicit values win over the environment and the YAML config file.
    """
    _OVERRIDES.clear()
    _OVERRIDES.update(overrides, app_id=app_id, master_key=master_key)
    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Forget explicit overrides and re-resolve settings on next access."""
    _OVERRIDES.clear()
    get_settings.cache_clear()


__all__ = [
    "Credentials",
    "EnvironmentYamlSource",
    "Settings",
    "configure",
    "get_settings",
    "reset_settings",
]
