"""End-to-end tests: HTTP requests against the discovered test controllers."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from httpx import ASGITransport, AsyncClient

from src.api.main import create_app
from src.api.schemas.errors import ErrorResponse
from src.core.config import Settings
from src.routing.application import Configuration
from src.routing.resolver import DefaultDependencyResolver

AppFactory = Callable[..., FastAPI]


class CountingResolver(DefaultDependencyResolver):
    def __init__(self) -> None:
        self.resolved: list[str] = []

    def resolve(self, controller: type) -> Any:
        self.resolved.append(controller.__name__)
        return super().resolve(controller)


@pytest.mark.integration
class TestDispatch:
    """Test suite for requests served by controller methods."""

    async def test_root(self, client: AsyncClient) -> None:
        """Test GET / reaches HomeController.index."""
        response = await client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.json() == {"message": "Hello world"}

    async def test_path_params(self, client: AsyncClient) -> None:
        """Test named segments are bound as a string mapping."""
        response = await client.get("/animals/123")

        assert response.status_code == 200
        assert response.json() == {"params": {"id": "123"}}

    async def test_json_body(self, client: AsyncClient) -> None:
        """Test a JSON body is echoed back by the body binding."""
        response = await client.post("/animals", json={"message": "Hello world"})

        assert response.status_code == 200
        assert response.json() == {"message": "Hello world"}

    async def test_form_body(self, client: AsyncClient) -> None:
        """Test form bodies bind as a mapping."""
        response = await client.post("/animals", data={"name": "Rex", "age": "3"})

        assert response.json() == {"name": "Rex", "age": "3"}

    async def test_missing_body_is_empty(self, client: AsyncClient) -> None:
        """Test a request without a body binds an empty mapping."""
        response = await client.post("/animals")

        assert response.json() == {}

    async def test_put_binds_params_then_body(self, client: AsyncClient) -> None:
        """Test two inline bindings arrive in declaration order."""
        response = await client.put("/animals/7", json={"name": "Rex"})

        assert response.status_code == 200
        assert response.json() == {"params": {"id": "7"}, "data": {"name": "Rex"}}

    async def test_patch_with_out_of_order_bindings(self, client: AsyncClient) -> None:
        """Test explicit indices declared in reverse still bind correctly."""
        response = await client.patch("/animals/7", json={"age": 4})

        assert response.status_code == 200
        assert response.json() == {"params": {"id": "7"}, "data": {"age": 4}}

    async def test_delete(self, client: AsyncClient) -> None:
        """Test DELETE routes are served."""
        response = await client.delete("/animals/123")

        assert response.status_code == 200
        assert response.json() == {"params": {"id": "123"}}

    async def test_request_binding(self, client: AsyncClient) -> None:
        """Test the request binding passes the request object."""
        response = await client.get("/request")

        assert response.json() == {"isRequest": True}

    async def test_query_binding(self, client: AsyncClient) -> None:
        """Test query values are bound as strings."""
        response = await client.get("/query", params={"msg": "hello", "page": 2})

        assert response.json() == {"msg": "hello", "page": "2"}

    async def test_custom_binding(self, client: AsyncClient) -> None:
        """Test a custom extractor feeds an async method."""
        response = await client.get("/agent", headers={"User-Agent": "zoo-client/1"})

        assert response.json() == {"agent": "zoo-client/1"}

    async def test_resolver_runs_once_per_request(
        self, app_factory: AppFactory
    ) -> None:
        """Test a new controller instance is requested for every call."""
        resolver = CountingResolver()
        app = app_factory(resolver)

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            await client.get("/")
            await client.get("/animals/1")

        assert resolver.resolved == ["HomeController", "AnimalController"]


@pytest.mark.integration
class TestRouting:
    """Test suite for requests no controller method serves."""

    @pytest.mark.parametrize("path", ["/unknown", "/hidden", "/animals/1/owners"])
    async def test_unmatched_get_is_404(self, client: AsyncClient, path: str) -> None:
        """Test unknown paths and paths from private modules give 404."""
        response = await client.get(path)

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    async def test_unrouted_method_is_not_exposed(self, client: AsyncClient) -> None:
        """Test helper methods on controllers are not routes."""
        response = await client.get("/describe")

        assert response.status_code == 404

    @pytest.mark.parametrize(
        ("verb", "path", "served_by"),
        [
            ("POST", "/", "GET"),
            ("PUT", "/", "GET"),
            ("PATCH", "/", "GET"),
            ("DELETE", "/", "GET"),
            ("GET", "/animals", "POST"),
            ("PUT", "/animals", "POST"),
            ("PATCH", "/animals", "POST"),
            ("DELETE", "/animals", "POST"),
            ("POST", "/animals/1", "GET"),
        ],
    )
    async def test_wrong_verb_is_405(
        self, client: AsyncClient, verb: str, path: str, served_by: str
    ) -> None:
        """Test a known path with an unrouted verb lists the allowed verbs."""
        response = await client.request(verb, path)

        body = response.json()
        assert response.status_code == 405
        assert body["error_code"] == "METHOD_NOT_ALLOWED"
        assert served_by in body["details"]["allowed_methods"]
        assert served_by in response.headers["allow"]

    async def test_openapi_lists_controller_routes(self, client: AsyncClient) -> None:
        """Test mounted routes appear in the OpenAPI schema."""
        response = await client.get("/openapi.json")

        paths = response.json()["paths"]
        assert set(paths["/animals/{id}"]) == {"get", "put", "patch", "delete"}
        assert "/hidden" not in paths


@pytest.mark.integration
class TestErrors:
    """Test suite for failures raised while serving a request."""

    async def test_malformed_json_is_400(self, client: AsyncClient) -> None:
        """Test a body that is not JSON is a validation error."""
        response = await client.post(
            "/animals",
            content=b'{"name": ',
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"
        assert response.json()["message"] == "Malformed JSON body"

    async def test_not_found_error(self, client: AsyncClient) -> None:
        """Test NotFoundError raised by an async method maps to 404."""
        response = await client.get("/failures/animals/42")

        body = response.json()
        assert response.status_code == 404
        assert body["message"] == "Animal 42 not found"
        assert body["details"] == {"animal_id": "42"}

    async def test_business_rule_error_is_sanitized(
        self, client: AsyncClient
    ) -> None:
        """Test sensitive context never reaches the client."""
        response = await client.post("/failures/adoptions", json={"name": "Rex"})

        body = response.json()
        assert response.status_code == 422
        assert body["details"] == {"animal": "Rex", "password": "[REDACTED]"}

    async def test_unhandled_exception_is_500(self, client: AsyncClient) -> None:
        """Test arbitrary exceptions become internal server errors."""
        response = await client.get("/failures/division")

        body = response.json()
        assert response.status_code == 500
        assert body["error_code"] == "INTERNAL_ERROR"
        assert body["message"] == "Internal server error: ZeroDivisionError"

    async def test_unhandled_exception_in_production(
        self, production_env: pytest.MonkeyPatch, client: AsyncClient
    ) -> None:
        """Test production responses hide the failure."""
        response = await client.get("/failures/division")

        body = response.json()
        assert response.status_code == 500
        assert body["message"] == "An internal server error occurred"
        assert body["details"] is None
        assert "ZeroDivisionError" not in response.text

    async def test_default_production_settings_use_the_error_handler(
        self, production_env: pytest.MonkeyPatch, controllers_dir: Path
    ) -> None:
        """Test a 500 under default production settings is an error response."""
        settings = Settings(environment="production")
        app = create_app(settings, Configuration(controller_path=controllers_dir))

        async with AsyncClient(
            transport=ASGITransport(app=app, raise_app_exceptions=False),
            base_url="http://test",
        ) as client:
            response = await client.get("/failures/division")

        error = ErrorResponse.model_validate(response.json())
        assert settings.debug is True
        assert response.status_code == 500
        assert response.headers["content-type"] == "application/json"
        assert error.error_code == "INTERNAL_ERROR"
        assert error.message == "An internal server error occurred"

    async def test_exception_is_forwarded_exactly_once(self, app: FastAPI) -> None:
        """Test a failure reaches the error handling chain a single time."""
        seen: list[str] = []

        async def record(request: Request, exc: Exception) -> Response:
            seen.append(type(exc).__name__)
            return JSONResponse({"handled": True}, status_code=500)

        app.add_exception_handler(ZeroDivisionError, record)

        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as client:
            response = await client.get("/failures/division")

        assert response.json() == {"handled": True}
        assert seen == ["ZeroDivisionError"]


@pytest.mark.integration
class TestRequestContext:
    """Test suite for correlation and request identifiers."""

    async def test_ids_on_success(self, client: AsyncClient) -> None:
        """Test both identifiers are echoed in the response headers."""
        response = await client.get("/", headers={"X-Correlation-ID": "corr-1"})

        assert response.headers["X-Correlation-ID"] == "corr-1"
        assert response.headers["X-Request-ID"].startswith("req-")

    async def test_ids_in_error_bodies(self, client: AsyncClient) -> None:
        """Test error bodies carry the identifiers of the failed request."""
        response = await client.get(
            "/failures/animals/1",
            headers={"X-Correlation-ID": "corr-2", "X-Request-ID": "req-2"},
        )

        body = response.json()
        assert body["correlation_id"] == "corr-2"
        assert body["request_id"] == "req-2"


@pytest.mark.integration
class TestInitialization:
    """Test suite for application startup."""

    def test_every_controller_route_is_mounted(self, app: FastAPI) -> None:
        """Test the route table holds the discovered routes in order."""
        routes = [
            (sorted(r.methods)[0], r.path)  # type: ignore[attr-defined]
            for r in app.routes
            if getattr(r, "name", "").endswith(
                ("Controller.get", "Controller.index", "Controller.divide")
            )
        ]

        assert routes == [
            ("GET", "/animals/{id}"),
            ("GET", "/failures/division"),
            ("GET", "/"),
        ]

    def test_debug_page_is_disabled(self, settings: Settings, app: FastAPI) -> None:
        """Test the default debug setting leaves Starlette's debug page off."""
        assert settings.debug is True
        assert app.debug is False
