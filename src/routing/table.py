"""Dispatch table construction.

Route configurations are registered on a FastAPI ``APIRouter`` in discovery
order, one endpoint per (verb, path). Paths written with ``:name`` segments
are translated to Starlette's ``{name}`` syntax. When two configurations
share a (verb, path) the transport's first-match rule applies, so the
later one is unreachable; it is still registered and a warning is logged.
"""

import re
from dataclasses import dataclass, field

from fastapi import APIRouter
from loguru import logger

from src.routing.discovery import RouteConfiguration
from src.routing.handler import Endpoint, make_endpoint
from src.routing.metadata import HttpMethod
from src.routing.resolver import DefaultDependencyResolver, DependencyResolver

_NAMED_SEGMENT = re.compile(r":([A-Za-z_][A-Za-z0-9_]*)")


def translate_path(path: str) -> str:
    """Translate ``:name`` segments to ``{name}``; other text is kept as-is.

    Examples:
        >>> translate_path("/animals/:id")
        '/animals/{id}'
        >>> translate_path("/animals/{id}")
        '/animals/{id}'
    """
    return _NAMED_SEGMENT.sub(r"{\1}", path)


@dataclass
class DispatchTable:
    """The routable table: (verb, path) -> endpoint, backed by an APIRouter."""

    router: APIRouter
    endpoints: dict[tuple[HttpMethod, str], Endpoint] = field(default_factory=dict)
    configurations: list[RouteConfiguration] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.configurations)

    def __contains__(self, key: object) -> bool:
        return key in self.endpoints

    def get(self, http_method: HttpMethod, path: str) -> Endpoint | None:
        """Return the endpoint serving (``http_method``, ``path``), if any."""
        return self.endpoints.get((http_method, translate_path(path)))


def build_router(
    configurations: list[RouteConfiguration],
    resolver: DependencyResolver | None = None,
    router: APIRouter | None = None,
) -> DispatchTable:
    """Register one endpoint per configuration, in order.

    Args:
        configurations: Route configurations in discovery order.
        resolver: Controller resolver (plain instantiation when omitted).
        router: Router to register on; a new one is created when omitted.

    Returns:
        DispatchTable: The populated table.
    """
    resolver = resolver if resolver is not None else DefaultDependencyResolver()
    table = DispatchTable(router=router if router is not None else APIRouter())

    for configuration in configurations:
        path = translate_path(configuration.path)
        key = (configuration.http_method, path)
        endpoint = make_endpoint(configuration, resolver)

        if key in table.endpoints:
            logger.warning(
                "Duplicate route {} {}: {} is shadowed by the earlier registration",
                configuration.http_method.value,
                path,
                configuration.endpoint_name,
            )
        else:
            table.endpoints[key] = endpoint

        table.router.add_api_route(
            path,
            endpoint,
            methods=[configuration.http_method.value],
            name=configuration.endpoint_name,
            tags=[configuration.controller.__name__],
        )
        table.configurations.append(configuration)
        logger.debug(
            "Registered {} {} -> {}",
            configuration.http_method.value,
            path,
            configuration.endpoint_name,
        )

    return table
