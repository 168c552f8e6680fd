"""FastAPI application factory.

``create_app`` wires the ambient stack and the routing engine together:

- logging is configured first
- exception handlers are registered before any middleware
- request logging and correlation middleware wrap every request
- controllers are discovered and mounted through ``Application.initialize``

Middleware run in reverse order of registration, so the last one added is
the first to see a request.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger

from src.api.middleware.error_handler import register_exception_handlers
from src.api.middleware.request_context import RequestContextMiddleware
from src.api.middleware.request_logging import RequestLoggingMiddleware
from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings, get_settings
from src.core.logging import setup_logging
from src.routing.application import Application, Configuration


@asynccontextmanager
async def lifespan(app_instance: FastAPI) -> AsyncGenerator[None]:
    """Log application startup and shutdown.

    Args:
        app_instance: The FastAPI application instance.

    Yields:
        None: Nothing is yielded, this is just a lifespan context.
    """
    logger.info(
        "Application startup complete - {} v{}",
        app_instance.title,
        app_instance.version,
    )

    yield

    logger.info("Application shutdown complete")


def create_app(
    settings: Settings | None = None,
    configuration: Configuration | None = None,
) -> FastAPI:
    """Create the FastAPI application with every controller mounted.

    Args:
        settings: Optional settings instance. Defaults to get_settings().
        configuration: Routing configuration. Built from
            ``settings.routing_config`` when omitted.

    Returns:
        FastAPI: Configured FastAPI application instance.

    Raises:
        ConfigurationError: If the routing configuration is invalid.
        DiscoveryError: If the controllers cannot be loaded.
        RouteDefinitionError: If controller metadata is inconsistent.
    """
    if settings is None:
        settings = get_settings()

    setup_logging(settings)

    if configuration is None:
        configuration = Configuration.from_settings(settings)

    # Unhandled errors always reach the registered exception handlers
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url=settings.docs_url,
        redoc_url=settings.redoc_url,
        openapi_url=settings.openapi_url,
        default_response_class=ORJSONResponse,
        lifespan=lifespan,
    )

    register_exception_handlers(app)

    application = Application(configuration, app)
    # 2. Request logging (runs inside the correlation context)
    application.use(RequestLoggingMiddleware, log_config=settings.log_config)
    # 1. Request context (creates the correlation ID)
    application.use(RequestContextMiddleware)

    return application.initialize()
