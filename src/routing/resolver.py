"""Dependency resolvers: how a controller class becomes an instance.

A resolver is anything with a ``resolve(controller)`` method. The request
handler calls it once per request and awaits the result when it is
awaitable, so resolvers backed by async containers work unchanged.
"""

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from src.core.types import ControllerType


@runtime_checkable
class DependencyResolver(Protocol):
    """Turns a controller class into an instance to invoke."""

    def resolve(self, controller: ControllerType) -> Any | Awaitable[Any]:
        """Return an instance of ``controller`` (or an awaitable of one)."""
        ...


class DefaultDependencyResolver:
    """Instantiate the controller with no arguments on every request."""

    def resolve(self, controller: ControllerType) -> Any:
        """Return ``controller()``."""
        return controller()


class FactoryResolver:
    """Resolve controllers through registered factories.

    Controllers without a registered factory fall back to plain
    instantiation. Factories are called once per request.

    Args:
        factories: Mapping of controller class to a zero-argument factory.
    """

    def __init__(
        self, factories: Mapping[ControllerType, Callable[[], Any]] | None = None
    ) -> None:
        self._factories: dict[ControllerType, Callable[[], Any]] = dict(
            factories or {}
        )

    def register(self, controller: ControllerType, factory: Callable[[], Any]) -> None:
        """Use ``factory`` to build ``controller`` instances."""
        self._factories[controller] = factory

    def resolve(self, controller: ControllerType) -> Any:
        """Return an instance from the registered factory or ``controller()``."""
        factory = self._factories.get(controller, controller)
        return factory()


class SingletonResolver:
    """Share one instance per controller class across all requests.

    Only suitable for controllers that keep no per-request state.
    """

    def __init__(self) -> None:
        self._instances: dict[ControllerType, Any] = {}

    def resolve(self, controller: ControllerType) -> Any:
        """Return the cached instance of ``controller``, creating it once."""
        if controller not in self._instances:
            self._instances[controller] = controller()
        return self._instances[controller]
