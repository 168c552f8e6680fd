"""Parameter bindings: how a request becomes positional handler arguments.

Each binding pairs a ``BindingKind`` with a callback that receives the
inbound request and returns the value of one argument. Extraction is
synchronous; the request body is parsed before extraction starts and is read
from ``request.state.body``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from starlette.requests import Request

from src.core.types import BindingCallback


class BindingKind(Enum):
    """The built-in sources a handler argument can be drawn from."""

    REQUEST = "request"
    BODY = "body"
    QUERY = "query"
    PARAMS = "params"
    CUSTOM = "custom"


def extract_request(request: Request) -> Request:
    """Return the whole request object."""
    return request


def extract_body(request: Request) -> Any:
    """Return the parsed request body, ``{}`` when none was parsed."""
    return getattr(request.state, "body", {})


def extract_query(request: Request) -> dict[str, str]:
    """Return the query-string parameters as a plain mapping.

    Repeated keys keep their last value.
    """
    return dict(request.query_params)


def extract_params(request: Request) -> dict[str, Any]:
    """Return the path parameters captured by the route pattern."""
    return dict(request.path_params)


_EXTRACTORS: dict[BindingKind, BindingCallback] = {
    BindingKind.REQUEST: extract_request,
    BindingKind.BODY: extract_body,
    BindingKind.QUERY: extract_query,
    BindingKind.PARAMS: extract_params,
}


@dataclass(frozen=True, slots=True)
class Binding:
    """A request-to-argument extraction rule."""

    kind: BindingKind
    callback: BindingCallback

    @classmethod
    def of(cls, kind: BindingKind) -> "Binding":
        """Build the binding of a built-in kind."""
        if kind is BindingKind.CUSTOM:
            msg = "Custom bindings need an explicit callback; use Binding.custom()"
            raise ValueError(msg)
        return cls(kind, _EXTRACTORS[kind])

    @classmethod
    def custom(cls, callback: BindingCallback) -> "Binding":
        """Build a binding that delegates to ``callback``."""
        if not callable(callback):
            msg = f"Custom binding callback must be callable, got {callback!r}"
            raise TypeError(msg)
        return cls(BindingKind.CUSTOM, callback)

    def extract(self, request: Request) -> Any:
        """Compute the argument value for ``request``."""
        return self.callback(request)


def extract_arguments(bindings: list[Binding], request: Request) -> list[Any]:
    """Run ``bindings`` in order against ``request``.

    Args:
        bindings: Bindings already sorted by parameter index.
        request: The inbound request.

    Returns:
        list[Any]: One argument per binding, in the same order.
    """
    return [binding.extract(request) for binding in bindings]
