"""Declarative surface for controller authors.

Routes are attached with the ``route`` decorators and parameters are bound
either inline with ``typing.Annotated`` or explicitly by index::

    class AnimalController:
        @route.get("/animals/:id")
        def show(self, params: Annotated[dict, bind.params()]) -> dict:
            return {"params": params}

        @route.put("/animals/:id")
        @bind.at(1, bind.body())
        @bind.at(0, bind.params())
        def update(self, params: dict, data: dict) -> dict:
            return {"params": params, "data": data}

Parameter indices count from the first parameter after ``self``. Everything
here only records metadata in a ``MetadataStore``; inline markers are read
from the signature and validated when discovery builds the routes.
"""

import inspect
from collections.abc import Callable
from typing import Annotated, Any, TypeVar, get_args, get_origin

from src.core.exceptions import RouteDefinitionError
from src.core.types import BindingCallback
from src.routing.bindings import Binding, BindingKind
from src.routing.metadata import (
    BindMetadata,
    HttpMethod,
    MetadataStore,
    RouteMetadata,
    default_store,
)

F = TypeVar("F", bound=Callable[..., Any])


def _signature_parameters(func: Callable[..., Any]) -> list[inspect.Parameter]:
    """Return the positional parameters of ``func`` without ``self``."""
    parameters = list(inspect.signature(func).parameters.values())
    if parameters and parameters[0].name == "self":
        parameters = parameters[1:]
    return parameters


def _evaluate(func: Callable[..., Any], annotation: Any) -> Any:  # noqa: ANN401
    """Evaluate a string annotation in the namespace ``func`` was defined in."""
    if not isinstance(annotation, str):
        return annotation
    namespace = getattr(inspect.unwrap(func), "__globals__", {})
    return eval(annotation, namespace)  # noqa: S307


def collect_parameter_bindings(func: Callable[..., Any]) -> list[BindMetadata]:
    """Read the ``Annotated[..., Binding]`` markers from the signature of ``func``.

    Only parameter annotations are evaluated; the return annotation is left
    alone. Call this once the defining module has finished executing so that
    names declared after the controller resolve.

    Args:
        func: The controller method to inspect.

    Returns:
        list[BindMetadata]: One entry per marker, indexed by parameter position.

    Raises:
        RouteDefinitionError: If a parameter annotation cannot be evaluated.
    """
    entries: list[BindMetadata] = []
    try:
        annotations = inspect.get_annotations(func)
        for index, parameter in enumerate(_signature_parameters(func)):
            if parameter.name not in annotations:
                continue
            annotation = _evaluate(func, annotations[parameter.name])
            if get_origin(annotation) is not Annotated:
                continue
            entries.extend(
                BindMetadata(index, marker)
                for marker in get_args(annotation)[1:]
                if isinstance(marker, Binding)
            )
    except (NameError, AttributeError, SyntaxError, TypeError) as e:
        msg = f"Cannot evaluate the annotations of {func.__qualname__!r}: {e}"
        raise RouteDefinitionError(
            msg, context={"function": func.__qualname__}, cause=e
        ) from e
    return entries


class RouteAnnotator:
    """Attaches an HTTP verb and path to controller methods."""

    def __init__(self, store: MetadataStore) -> None:
        self.store = store

    def _decorator(self, http_method: HttpMethod, path: str) -> Callable[[F], F]:
        def decorator(func: F) -> F:
            self.store.set_route(func, RouteMetadata(http_method, path))
            return func

        return decorator

    def get(self, path: str) -> Callable[[F], F]:
        """Route GET requests on ``path`` to the decorated method."""
        return self._decorator(HttpMethod.GET, path)

    def post(self, path: str) -> Callable[[F], F]:
        """Route POST requests on ``path`` to the decorated method."""
        return self._decorator(HttpMethod.POST, path)

    def put(self, path: str) -> Callable[[F], F]:
        """Route PUT requests on ``path`` to the decorated method."""
        return self._decorator(HttpMethod.PUT, path)

    def patch(self, path: str) -> Callable[[F], F]:
        """Route PATCH requests on ``path`` to the decorated method."""
        return self._decorator(HttpMethod.PATCH, path)

    def delete(self, path: str) -> Callable[[F], F]:
        """Route DELETE requests on ``path`` to the decorated method."""
        return self._decorator(HttpMethod.DELETE, path)

    del_ = delete


class BindAnnotator:
    """Builds parameter bindings and attaches them by index."""

    def __init__(self, store: MetadataStore) -> None:
        self.store = store

    @staticmethod
    def request() -> Binding:
        """Bind the whole request object."""
        return Binding.of(BindingKind.REQUEST)

    @staticmethod
    def body() -> Binding:
        """Bind the parsed request body."""
        return Binding.of(BindingKind.BODY)

    @staticmethod
    def query() -> Binding:
        """Bind the query-string mapping."""
        return Binding.of(BindingKind.QUERY)

    @staticmethod
    def params() -> Binding:
        """Bind the named path segments."""
        return Binding.of(BindingKind.PARAMS)

    @staticmethod
    def custom(callback: BindingCallback) -> Binding:
        """Bind the value ``callback(request)`` returns."""
        return Binding.custom(callback)

    def at(self, index: int, binding: Binding) -> Callable[[F], F]:
        """Bind parameter ``index`` (counted after ``self``) with ``binding``."""
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            msg = f"Parameter index must be a non-negative integer, got {index!r}"
            raise RouteDefinitionError(msg, context={"index": index})

        def decorator(func: F) -> F:
            self.store.add_binding(func, BindMetadata(index, binding))
            return func

        return decorator


route = RouteAnnotator(default_store)
bind = BindAnnotator(default_store)
