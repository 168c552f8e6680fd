"""Main entry point for running a Waypost application with uvicorn."""

import os

import uvicorn
from loguru import logger

from src.core.config import get_settings
from src.core.logging import setup_logging

APP_FACTORY = "src.api.main:create_app"


def uvicorn_log_config() -> dict[str, object]:
    """Route every uvicorn logger through the loguru intercept handler."""
    handler = {"handlers": ["default"], "level": "INFO", "propagate": False}
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {"class": "src.core.logging.InterceptHandler"},
        },
        "loggers": {
            "uvicorn": handler,
            "uvicorn.error": handler,
            "uvicorn.access": handler,
        },
    }


def main() -> None:
    """Serve the application described by the environment settings."""
    settings = get_settings()
    setup_logging(settings)

    # Container platforms announce the listening port through PORT
    port = int(os.environ.get("PORT", settings.api_port))
    mode = "development mode with auto-reload" if settings.debug else "production mode"

    logger.info(
        "Starting Uvicorn on http://{}:{} ({})",
        settings.api_host,
        port,
        mode,
        controller_path=settings.routing_config.controller_path,
    )
    uvicorn.run(
        APP_FACTORY,
        factory=True,
        host=settings.api_host,
        port=port,
        reload=settings.debug,
        log_config=uvicorn_log_config(),
    )


if __name__ == "__main__":
    main()
