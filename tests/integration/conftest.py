"""Shared fixtures for integration tests.

The applications built here discover the controllers in ``tests/controllers``
through the shared metadata store, exactly as a deployed application would.
"""

from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from src.api.main import create_app
from src.core.config import Settings
from src.routing.application import Configuration
from src.routing.resolver import DependencyResolver

AppFactory = Callable[..., FastAPI]


@pytest.fixture
def settings() -> Settings:
    """Default settings for integration tests."""
    return Settings()


@pytest.fixture
def app_factory(settings: Settings, controllers_dir: Path) -> AppFactory:
    """Build applications serving the test controllers."""

    def _app_factory(resolver: DependencyResolver | None = None) -> FastAPI:
        configuration = Configuration(
            controller_path=controllers_dir, resolver=resolver
        )
        return create_app(settings, configuration)

    return _app_factory


@pytest.fixture
def app(app_factory: AppFactory) -> FastAPI:
    """Application serving the test controllers."""
    return app_factory()


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """HTTP client for the application.

    Unhandled exceptions are returned as responses instead of being raised,
    matching what a real server sends to its clients.
    """
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def production_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Make the exception handlers behave as in production."""
    clean_env.setenv("ENVIRONMENT", "production")
    return clean_env
