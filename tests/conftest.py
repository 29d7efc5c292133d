"""
Pytest configuration for parse-resource.

Provides fixtures for:
- Settings isolation from the developer's environment
- An in-process fake backend wired into the shared HTTP client
"""

from __future__ import annotations

from typing import Generator

import httpx
import pytest

from parse_resource.config import configure, reset_settings
from parse_resource.infrastructure.http_factory import ClientManager
from tests.support import FakeParseBackend

TEST_API_URL = "https://parse.test/1"

SETTINGS_ENV_VARS = (
    "PARSE_APP_ID",
    "PARSE_MASTER_KEY",
    "PARSE_API_URL",
    "PARSE_REQUEST_TIMEOUT",
    "PARSE_CONFIG_FILE",
    "APP_ENV",
    "LOG_LEVEL",
    "JSON_LOGS",
)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Generator[None, None, None]:
    """
    Ignore PARSE_* variables and config files of the machine running the tests.
    """
    for name in SETTINGS_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("PARSE_CONFIG_FILE", str(tmp_path / "missing.yml"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def backend() -> Generator[FakeParseBackend, None, None]:
    """
    Configure test credentials and route all HTTP calls to a fresh fake backend.
    """
    configure(app_id="test-app", master_key="test-master-key", api_url=TEST_API_URL)
    fake = FakeParseBackend()
    manager = ClientManager()
    manager.install_transport(httpx.MockTransport(fake.handle))
    try:
        yield fake
    finally:
        manager.install_transport(None)
