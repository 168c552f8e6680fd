"""Controller discovery.

Turns a controller location into the list of ``RouteConfiguration`` objects
the dispatch table is built from. A location is either a directory, scanned
one level deep, or an explicit iterable of modules, dotted module names and
controller classes.

Directory scans load every ``*.py`` entry whose name does not start with an
underscore, in sorted order. Loaded modules are cached in ``sys.modules`` so
discovering the same directory twice reuses the same module objects and
yields equal configurations.
"""

import hashlib
import importlib
import importlib.util
import inspect
import os
import sys
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any

from loguru import logger

from src.core.constants import (
    CONSTRUCTOR_NAME,
    PRIVATE_NAME_PREFIX,
    PYTHON_SOURCE_SUFFIX,
    RESERVED_NAME_MARKER,
)
from src.core.exceptions import DiscoveryError, RouteDefinitionError
from src.core.types import ControllerType
from src.routing.annotations import collect_parameter_bindings
from src.routing.bindings import Binding
from src.routing.metadata import HttpMethod, MetadataStore, default_store

type ControllerLocation = str | os.PathLike[str] | Iterable[ModuleType | str | type]


@dataclass(frozen=True, slots=True)
class RouteConfiguration:
    """Everything needed to serve one controller method."""

    http_method: HttpMethod
    path: str
    controller: ControllerType
    method_name: str
    bindings: tuple[Binding, ...] = ()

    @property
    def endpoint_name(self) -> str:
        """Name the route is registered under on the transport."""
        return f"{self.controller.__name__}.{self.method_name}"


def _module_name_for(path: Path) -> str:
    """Build a stable, collision-free ``sys.modules`` key for a controller file."""
    digest = hashlib.sha1(
        str(path.parent.resolve()).encode(), usedforsecurity=False
    ).hexdigest()[:12]
    return f"_waypost_controllers_{digest}.{path.stem}"


def _load_module_from_path(path: Path) -> ModuleType:
    """Import ``path`` as a module, reusing an already loaded copy."""
    module_name = _module_name_for(path)
    cached = sys.modules.get(module_name)
    if cached is not None:
        return cached

    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        msg = f"Cannot load controller module {path}"
        raise DiscoveryError(msg, context={"path": str(path)})

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        # Never leave a half-imported module behind
        sys.modules.pop(module_name, None)
        msg = f"Failed to import controller module {path}: {e}"
        raise DiscoveryError(msg, context={"path": str(path)}, cause=e) from e

    logger.info("Loaded controller module {}", path.name, module=module_name)
    return module


def _import_module(name: str) -> ModuleType:
    try:
        return importlib.import_module(name)
    except ImportError as e:
        msg = f"Cannot import controller module {name!r}: {e}"
        raise DiscoveryError(msg, context={"module": name}, cause=e) from e


def _scan_directory(directory: Path) -> list[ModuleType]:
    """Load the direct ``*.py`` entries of ``directory`` in sorted order.

    Raises:
        DiscoveryError: If the directory cannot be listed.
    """
    try:
        entries = sorted(directory.iterdir())
    except OSError as e:
        msg = f"Cannot list controller directory {directory}: {e}"
        raise DiscoveryError(msg, context={"path": str(directory)}, cause=e) from e

    return [
        _load_module_from_path(entry)
        for entry in entries
        if entry.suffix == PYTHON_SOURCE_SUFFIX
        and not entry.name.startswith(PRIVATE_NAME_PREFIX)
        and entry.is_file()
    ]


def module_controllers(module: ModuleType) -> list[ControllerType]:
    """Return the public classes defined in ``module``, in definition order.

    Classes imported into the module from elsewhere are not controllers of
    that module and are left out.
    """
    return [
        value
        for name, value in vars(module).items()
        if not name.startswith(PRIVATE_NAME_PREFIX)
        and inspect.isclass(value)
        and value.__module__ == module.__name__
    ]


def _collect_controllers(location: ControllerLocation) -> list[ControllerType]:
    if isinstance(location, str | os.PathLike):
        modules = _scan_directory(Path(location))
        return [cls for module in modules for cls in module_controllers(module)]

    controllers: list[ControllerType] = []
    for item in location:
        if inspect.isclass(item):
            controllers.append(item)
        elif isinstance(item, ModuleType):
            controllers.extend(module_controllers(item))
        elif isinstance(item, str):
            controllers.extend(module_controllers(_import_module(item)))
        else:
            msg = f"Cannot discover controllers from {item!r}"
            raise DiscoveryError(msg, context={"item": repr(item)})
    return controllers


def is_public_method(name: str, member: Any) -> bool:
    """Check whether a class attribute is a routable instance method."""
    return (
        inspect.isfunction(member)
        and name != CONSTRUCTOR_NAME
        and RESERVED_NAME_MARKER not in name
        and not name.startswith(PRIVATE_NAME_PREFIX)
    )


def _check_unrouted(
    controller: ControllerType,
    name: str,
    func: Callable[..., Any],
    store: MetadataStore,
) -> None:
    if store.get_bindings(func) or collect_parameter_bindings(func):
        msg = f"{controller.__name__}.{name} declares parameter bindings but no route"
        raise RouteDefinitionError(
            msg, context={"controller": controller.__name__, "method": name}
        )


def _check_arity(
    controller: ControllerType, name: str, func: Callable[..., Any], bindings: int
) -> None:
    parameters = list(inspect.signature(func).parameters.values())[1:]
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in parameters):
        return
    positional = [
        p
        for p in parameters
        if p.kind
        in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if bindings > len(positional):
        msg = (
            f"{controller.__name__}.{name} binds {bindings} parameters "
            f"but accepts only {len(positional)}"
        )
        raise RouteDefinitionError(
            msg, context={"controller": controller.__name__, "method": name}
        )


def controller_routes(
    controller: ControllerType,
    store: MetadataStore,
    *,
    strict: bool = False,
) -> Iterator[RouteConfiguration]:
    """Yield a configuration for every routed public method of ``controller``.

    Methods without route metadata are skipped. In strict mode a skipped
    method that still declares bindings, or a binding list longer than the
    method's positional parameters, raises ``RouteDefinitionError``.
    """
    for name, member in vars(controller).items():
        if not is_public_method(name, member):
            continue

        metadata = store.get_route(member)
        if metadata is None:
            if strict:
                _check_unrouted(controller, name, member, store)
            logger.debug(
                "Skipping {}.{}: no route metadata",
                controller.__name__,
                name,
                controller=controller.__name__,
                handler=name,
            )
            continue

        entries = store.sorted_bindings(member, collect_parameter_bindings(member))
        bindings = tuple(entry.binding for entry in entries)
        if strict:
            _check_arity(controller, name, member, len(bindings))

        yield RouteConfiguration(
            http_method=metadata.http_method,
            path=metadata.path,
            controller=controller,
            method_name=name,
            bindings=bindings,
        )


def discover(
    location: ControllerLocation,
    *,
    store: MetadataStore | None = None,
    strict: bool = False,
) -> list[RouteConfiguration]:
    """Discover the routes declared by the controllers at ``location``.

    Args:
        location: A directory path, or an iterable of modules, dotted module
            names and controller classes.
        store: Metadata store to read from (defaults to the shared store).
        strict: Reject suspicious definitions instead of skipping them.

    Returns:
        list[RouteConfiguration]: One entry per routed method, ordered by
            module, then class, then method definition order.

    Raises:
        DiscoveryError: If the location cannot be listed or a module fails to
            import.
        RouteDefinitionError: If binding metadata is inconsistent.
    """
    store = store if store is not None else default_store
    controllers = _collect_controllers(location)

    configurations = [
        configuration
        for controller in controllers
        for configuration in controller_routes(controller, store, strict=strict)
    ]

    logger.info(
        "Discovered {} routes in {} controllers",
        len(configurations),
        len(controllers),
    )
    return configurations
