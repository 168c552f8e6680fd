"""Shared fixtures for unit tests."""

from collections.abc import Callable
from typing import Any

import pytest
from starlette.requests import Request

from src.routing.annotations import BindAnnotator, RouteAnnotator
from src.routing.metadata import MetadataStore

RequestFactory = Callable[..., Request]


@pytest.fixture
def store() -> MetadataStore:
    """Provide an empty metadata store."""
    return MetadataStore()


@pytest.fixture
def route(store: MetadataStore) -> RouteAnnotator:
    """Route decorators writing into the isolated store."""
    return RouteAnnotator(store)


@pytest.fixture
def bind(store: MetadataStore) -> BindAnnotator:
    """Binding decorators writing into the isolated store."""
    return BindAnnotator(store)


@pytest.fixture
def make_request() -> RequestFactory:
    """Build Starlette requests from a handful of parts."""

    def _make_request(
        *,
        method: str = "GET",
        path: str = "/",
        query_string: bytes = b"",
        path_params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        scope = {
            "type": "http",
            "method": method,
            "path": path,
            "query_string": query_string,
            "path_params": path_params or {},
            "headers": [
                (key.lower().encode(), value.encode())
                for key, value in (headers or {}).items()
            ],
        }

        async def receive() -> dict[str, Any]:
            return {"type": "http.request", "body": body, "more_body": False}

        return Request(scope, receive)

    return _make_request
