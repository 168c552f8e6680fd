"""Application facade: configure, discover, mount.

Usage::

    application = Application(Configuration(controller_path="app/controllers"))
    application.use(GZipMiddleware, minimum_size=1000)
    app = application.initialize()

``initialize`` discovers every controller, builds the dispatch table, mounts
it on the FastAPI app and freezes the metadata store. Discovery failures are
raised from ``initialize`` before anything is mounted.
"""

import importlib
from collections.abc import Sequence
from pathlib import Path
from types import ModuleType
from typing import Any, Self

from fastapi import FastAPI
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from src.api.utils.responses import ORJSONResponse
from src.core.config import Settings
from src.core.exceptions import ConfigurationError
from src.routing.discovery import RouteConfiguration, discover
from src.routing.metadata import MetadataStore, default_store
from src.routing.resolver import DefaultDependencyResolver, DependencyResolver
from src.routing.table import DispatchTable, build_router


def import_object(dotted_path: str) -> Any:  # noqa: ANN401 - any importable object
    """Import ``package.module:name`` or ``package.module.name``.

    Raises:
        ConfigurationError: If the module or attribute cannot be found.
    """
    module_name, sep, attribute = dotted_path.partition(":")
    if not sep:
        module_name, _, attribute = dotted_path.rpartition(".")
    if not module_name or not attribute:
        msg = f"Invalid import path {dotted_path!r}"
        raise ConfigurationError(msg, context={"path": dotted_path})

    try:
        module = importlib.import_module(module_name)
        return getattr(module, attribute)
    except (ImportError, AttributeError) as e:
        msg = f"Cannot import {dotted_path!r}: {e}"
        raise ConfigurationError(msg, context={"path": dotted_path}, cause=e) from e


class Configuration(BaseModel):
    """What to route and how to build controllers."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    controller_path: Path | None = Field(
        default=None, description="Directory scanned one level deep for controllers"
    )
    controllers: Sequence[ModuleType | str | type] = Field(
        default=(), description="Controller modules, dotted module names or classes"
    )
    resolver: DependencyResolver | None = Field(
        default=None, description="Controller resolver; plain instantiation if unset"
    )
    strict: bool = Field(default=False, description="Strict discovery")
    store: MetadataStore | None = Field(
        default=None, description="Metadata store; the shared store if unset"
    )

    @classmethod
    def from_settings(cls, settings: Settings) -> Self:
        """Build the configuration described by ``settings.routing_config``.

        Raises:
            ConfigurationError: If the resolver path cannot be imported or
                does not name a resolver class.
        """
        routing = settings.routing_config
        resolver: DependencyResolver | None = None
        if routing.resolver:
            resolver_class = import_object(routing.resolver)
            if not callable(resolver_class):
                msg = f"Resolver {routing.resolver!r} is not a class"
                raise ConfigurationError(msg, context={"resolver": routing.resolver})
            resolver = resolver_class()
            if not isinstance(resolver, DependencyResolver):
                msg = f"Resolver {routing.resolver!r} has no resolve() method"
                raise ConfigurationError(msg, context={"resolver": routing.resolver})

        return cls(
            controller_path=routing.controller_path,
            controllers=tuple(routing.controller_modules),
            resolver=resolver,
            strict=routing.strict_discovery,
        )


class Application:
    """Mounts discovered controllers on a FastAPI application.

    Args:
        configuration: Where the controllers are and how to resolve them.
        app: Application to mount on; a bare one is created when omitted.
    """

    def __init__(
        self, configuration: Configuration, app: FastAPI | None = None
    ) -> None:
        self.configuration = configuration
        self.app = (
            app if app is not None else FastAPI(default_response_class=ORJSONResponse)
        )
        self.store = (
            configuration.store if configuration.store is not None else default_store
        )
        self.resolver = (
            configuration.resolver
            if configuration.resolver is not None
            else DefaultDependencyResolver()
        )
        self.table: DispatchTable | None = None

    def use(self, middleware_class: type, **options: Any) -> Self:
        """Add an ASGI middleware to the application."""
        self.app.add_middleware(middleware_class, **options)
        return self

    def discover(self) -> list[RouteConfiguration]:
        """Discover the routes of every configured controller location."""
        configuration = self.configuration
        routes: list[RouteConfiguration] = []
        if configuration.controller_path is not None:
            routes.extend(
                discover(
                    configuration.controller_path,
                    store=self.store,
                    strict=configuration.strict,
                )
            )
        if configuration.controllers:
            routes.extend(
                discover(
                    configuration.controllers,
                    store=self.store,
                    strict=configuration.strict,
                )
            )
        return routes

    def initialize(self) -> FastAPI:
        """Discover, build and mount the dispatch table.

        Calling it again returns the already initialized app.

        Returns:
            FastAPI: The application with every controller route mounted.

        Raises:
            DiscoveryError: If a controller location cannot be loaded.
            RouteDefinitionError: If controller metadata is inconsistent.
        """
        if self.table is not None:
            return self.app

        configuration = self.configuration
        if configuration.controller_path is None and not configuration.controllers:
            logger.warning("No controllers configured; no routes will be mounted")

        routes = self.discover()
        table = build_router(routes, self.resolver)
        self.app.include_router(table.router)
        self.store.freeze()
        self.table = table

        logger.info(
            "Mounted {} controller routes",
            len(table),
            resolver=type(self.resolver).__name__,
        )
        return self.app
