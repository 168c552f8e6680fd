"""Fixtures for API unit tests."""

from typing import cast

import pytest
from fastapi import Request
from pytest_mock import MockerFixture, MockType
from starlette.datastructures import URL


@pytest.fixture
def mock_request(mocker: MockerFixture) -> MockType:
    """Create mock FastAPI Request with configurable attributes.

    Returns:
        MockType: Mock request object with standard HTTP request attributes.
    """
    request = mocker.Mock(spec=Request)
    request.method = "GET"
    request.url = mocker.Mock(spec=URL)
    request.url.path = "/animals/42"
    request.headers = {"user-agent": "test-client/1.0"}

    return cast("MockType", request)


@pytest.fixture
def production_env(clean_env: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Run the test with production settings."""
    clean_env.setenv("ENVIRONMENT", "production")
    clean_env.setenv("DEBUG", "false")
    return clean_env
