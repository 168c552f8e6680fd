"""Root conftest.py for the Waypost test suite.

This file contains project-wide fixtures and pytest configuration.
"""

import os
from collections.abc import Generator
from pathlib import Path

import pytest

from src.core.config import get_settings
from src.core.context import RequestContext
from src.core.error_context import _get_sensitive_fields

CONTROLLERS_DIR = Path(__file__).parent / "controllers"


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test multiple components"
    )


@pytest.fixture
def controllers_dir() -> Path:
    """Directory holding the controller modules used by the tests."""
    return CONTROLLERS_DIR


@pytest.fixture(autouse=True)
def clean_lru_cache() -> Generator[None]:
    """Clear cached settings before and after each test."""
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()
    yield
    get_settings.cache_clear()
    _get_sensitive_fields.cache_clear()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove application environment variables for the duration of a test.

    Args:
        monkeypatch: Pytest monkeypatch fixture.

    Returns:
        pytest.MonkeyPatch: The monkeypatch instance for env manipulation.
    """
    env_prefixes = [
        "APP_",
        "API_",
        "ENVIRONMENT",
        "DEBUG",
        "LOG_CONFIG__",
        "ROUTING_CONFIG__",
    ]
    for key in list(os.environ.keys()):
        if any(key.startswith(prefix) for prefix in env_prefixes):
            monkeypatch.delenv(key, raising=False)

    return monkeypatch


@pytest.fixture(autouse=True)
def clean_request_context() -> Generator[None]:
    """Reset the request context variables around each test."""
    RequestContext.clear()
    yield
    RequestContext.clear()
