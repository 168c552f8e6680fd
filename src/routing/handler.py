"""Per-route request handlers.

``make_endpoint`` closes over one ``RouteConfiguration`` and a resolver and
returns the coroutine FastAPI calls for every matching request. A request is
served in a fixed order:

1. the body is parsed and every binding is applied, in index order;
2. a controller instance is obtained from the resolver;
3. the method is called with the extracted arguments, positionally;
4. the result is awaited if it is awaitable and rendered as JSON.

Any exception raised along the way propagates unchanged to the exception
handlers registered on the application; nothing is caught here.
"""

import inspect
from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger
from starlette.requests import Request
from starlette.responses import Response

from src.api.utils.body import parse_body
from src.api.utils.responses import ORJSONResponse
from src.routing.bindings import BindingKind, extract_arguments
from src.routing.discovery import RouteConfiguration
from src.routing.resolver import DependencyResolver

type Endpoint = Callable[[Request], Awaitable[Response]]


async def maybe_await(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as-is."""
    if inspect.isawaitable(value):
        return await value
    return value


async def invoke(func: Callable[..., Any], *args: Any) -> Any:
    """Call a sync or async callable and return its settled result."""
    return await maybe_await(func(*args))


def make_endpoint(
    configuration: RouteConfiguration, resolver: DependencyResolver
) -> Endpoint:
    """Build the endpoint serving ``configuration``.

    Args:
        configuration: The route to serve.
        resolver: Produces a controller instance for every request.

    Returns:
        Endpoint: An ``async def endpoint(request)`` suitable for
            ``APIRouter.add_api_route``.
    """
    controller = configuration.controller
    method_name = configuration.method_name
    bindings = list(configuration.bindings)
    custom_positions = [
        position
        for position, binding in enumerate(bindings)
        if binding.kind is BindingKind.CUSTOM
    ]

    async def endpoint(request: Request) -> Response:
        await parse_body(request)
        arguments = extract_arguments(bindings, request)
        for position in custom_positions:
            arguments[position] = await maybe_await(arguments[position])

        with logger.contextualize(controller=controller.__name__, handler=method_name):
            instance = await maybe_await(resolver.resolve(controller))
            result = await invoke(getattr(instance, method_name), *arguments)

        return ORJSONResponse(result)

    endpoint.__name__ = method_name
    endpoint.__qualname__ = configuration.endpoint_name
    endpoint.__doc__ = inspect.getdoc(getattr(controller, method_name))
    return endpoint
