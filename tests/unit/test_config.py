from __future__ import annotations

from pathlib import Path

import pytest

from parse_resource import ConfigurationError
from parse_resource.config import Credentials, configure, get_settings, reset_settings

YAML_CONFIG = """
development:
  app_id: dev-app
  master_key: dev-key
test:
  app_id: yaml-app
  master_key: ${YAML_MASTER_KEY}
  api_url: https://yaml.example/1/
  request_timeout: 5
"""


@pytest.fixture
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "parse_resource.yml"
    path.write_text(YAML_CONFIG, encoding="utf-8")
    monkeypatch.setenv("PARSE_CONFIG_FILE", str(path))
    reset_settings()
    return path


def test_defaults_without_any_source() -> None:
    settings = get_settings()

    assert settings.app_id is None
    assert settings.base_url == "https://api.parse.com/1"
    assert settings.request_timeout == 30.0
    assert settings.app_env == "development"
    with pytest.raises(ConfigurationError):
        settings.credentials


def test_get_settings_is_cached() -> None:
    assert get_settings() is get_settings()


def test_configure_sets_credentials_and_overrides() -> None:
    settings = configure(app_id="app", master_key="key", request_timeout=2.5)

    assert settings.credentials == Credentials(app_id="app", master_key="key")
    assert settings.request_timeout == 2.5
    assert get_settings() is settings


def test_environment_variables_are_read(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARSE_APP_ID", "env-app")
    monkeypatch.setenv("PARSE_MASTER_KEY", "env-key")
    monkeypatch.setenv("PARSE_API_URL", "https://env.example/1/")
    reset_settings()

    settings = get_settings()

    assert settings.credentials == Credentials(app_id="env-app", master_key="env-key")
    assert settings.base_url == "https://env.example/1"


def test_explicit_configuration_wins_over_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARSE_APP_ID", "env-app")
    monkeypatch.setenv("PARSE_MASTER_KEY", "env-key")

    settings = configure(app_id="explicit-app", master_key="explicit-key")

    assert settings.app_id == "explicit-app"
    assert settings.master_key == "explicit-key"


def test_yaml_section_is_selected_by_app_env(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("YAML_MASTER_KEY", "from-env-var")
    reset_settings()

    settings = get_settings()

    assert settings.app_id == "yaml-app"
    assert settings.master_key == "from-env-var"
    assert settings.base_url == "https://yaml.example/1"
    assert settings.request_timeout == 5.0


def test_yaml_defaults_to_development_section(config_file: Path) -> None:
    assert get_settings().app_id == "dev-app"


def test_environment_wins_over_yaml(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PARSE_APP_ID", "env-app")
    reset_settings()

    settings = get_settings()

    assert settings.app_id == "env-app"
    assert settings.master_key == "dev-key"


def test_missing_section_yields_defaults(config_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")
    reset_settings()

    assert get_settings().app_id is None


def test_malformed_yaml_raises_configuration_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "broken.yml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    monkeypatch.setenv("PARSE_CONFIG_FILE", str(path))
    reset_settings()

    with pytest.raises(ConfigurationError):
        get_settings()


def test_reset_settings_forgets_explicit_configuration() -> None:
    configure(app_id="app", master_key="key")

    reset_settings()

    assert get_settings().app_id is None


def test_configure_selects_yaml_file_and_section(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "explicit.yml"
    path.write_text(YAML_CONFIG, encoding="utf-8")
    monkeypatch.setenv("YAML_MASTER_KEY", "unused")

    settings = configure(app_id="app", master_key="key", config_file=str(path), app_env="test")

    assert settings.app_env == "test"
    assert settings.base_url == "https://yaml.example/1"
    assert settings.request_timeout == 5
    assert settings.credentials == Credentials(app_id="app", master_key="key")
