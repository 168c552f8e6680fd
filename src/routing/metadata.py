"""Registry of route and parameter-binding metadata.

Annotations write into a ``MetadataStore`` while controller classes are being
defined; discovery reads it back when the dispatch table is built. The store
is keyed by the identity of the decorated function object and by the kind of
metadata (route or binding), so a method carries at most one route and any
number of binding entries.

Lifecycle:
1. **Populate**: decorators register metadata at class-definition time.
2. **Freeze**: ``freeze()`` is called once the dispatch table is built.
3. **Serve**: the store is read-only; further registration raises
   ``RouteDefinitionError``.

A module-level ``default_store`` backs the public decorators. Tests and
embedded applications may create their own stores for isolation.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from src.core.exceptions import RouteDefinitionError
from src.routing.bindings import Binding


class HttpMethod(Enum):
    """HTTP verbs a controller method can be routed on."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class MetadataKind(Enum):
    """Kinds of metadata kept per controller method."""

    ROUTE = "route"
    BIND = "bind"


@dataclass(frozen=True, slots=True)
class RouteMetadata:
    """The (verb, path pattern) pair attached to one controller method."""

    http_method: HttpMethod
    path: str


@dataclass(frozen=True, slots=True)
class BindMetadata:
    """One parameter binding: the positional index and how to extract it."""

    index: int
    binding: Binding


class MetadataStore:
    """Explicit, inspectable store of controller metadata."""

    __slots__ = ("_entries", "_frozen")

    def __init__(self) -> None:
        self._entries: dict[tuple[Callable[..., Any], MetadataKind], Any] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        """Whether the store has been frozen."""
        return self._frozen

    def _check_writable(self, func: Callable[..., Any]) -> None:
        if self._frozen:
            msg = (
                f"Cannot register metadata for {func.__qualname__!r}: "
                "the metadata store is frozen"
            )
            raise RouteDefinitionError(msg, context={"function": func.__qualname__})

    def set_route(self, func: Callable[..., Any], metadata: RouteMetadata) -> None:
        """Attach route metadata to ``func``, replacing any earlier route."""
        self._check_writable(func)
        self._entries[func, MetadataKind.ROUTE] = metadata

    def add_binding(self, func: Callable[..., Any], metadata: BindMetadata) -> None:
        """Append a binding entry to the list kept for ``func``.

        Entries are never merged or overwritten; index collisions are
        reported when the bindings are read back with ``sorted_bindings``.
        """
        self._check_writable(func)
        bindings = self._entries.setdefault((func, MetadataKind.BIND), [])
        bindings.append(metadata)

    def get_route(self, func: Callable[..., Any]) -> RouteMetadata | None:
        """Return the route metadata of ``func`` or None when it has no route."""
        return self._entries.get((func, MetadataKind.ROUTE))

    def get_bindings(self, func: Callable[..., Any]) -> list[BindMetadata]:
        """Return a copy of the binding entries of ``func`` in registration order."""
        return list(self._entries.get((func, MetadataKind.BIND), ()))

    def sorted_bindings(
        self, func: Callable[..., Any], inline: Iterable[BindMetadata] = ()
    ) -> list[BindMetadata]:
        """Return the binding entries of ``func`` sorted by ascending index.

        ``inline`` holds entries read from the signature of ``func``; they are
        merged with the registered ones before sorting.

        Raises:
            RouteDefinitionError: If two entries share the same index.
        """
        entries = sorted(
            [*self.get_bindings(func), *inline], key=lambda entry: entry.index
        )
        for previous, current in zip(entries, entries[1:], strict=False):
            if previous.index == current.index:
                msg = (
                    f"Parameter {current.index} of {func.__qualname__!r} "
                    "has more than one binding"
                )
                raise RouteDefinitionError(
                    msg,
                    context={"function": func.__qualname__, "index": current.index},
                )
        return entries

    def freeze(self) -> None:
        """Make the store read-only. Idempotent."""
        self._frozen = True

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"MetadataStore(entries={len(self._entries)}, {state})"


default_store = MetadataStore()
