"""Fixtures for routing unit tests."""

import pytest

from src.routing import annotations
from src.routing.annotations import BindAnnotator, RouteAnnotator
from src.routing.metadata import MetadataStore


@pytest.fixture
def isolated_annotations(
    monkeypatch: pytest.MonkeyPatch,
    store: MetadataStore,
    route: RouteAnnotator,
    bind: BindAnnotator,
) -> MetadataStore:
    """Point the public ``route``/``bind`` decorators at the isolated store.

    Controller modules written to a temporary directory import the public
    decorators; with this fixture their metadata lands in ``store``.
    """
    monkeypatch.setattr(annotations, "route", route)
    monkeypatch.setattr(annotations, "bind", bind)
    return store
