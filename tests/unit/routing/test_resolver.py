"""Unit tests for src/routing/resolver.py."""

import pytest

from src.routing.resolver import (
    DefaultDependencyResolver,
    DependencyResolver,
    FactoryResolver,
    SingletonResolver,
)


class GreetingController:
    def __init__(self, greeting: str = "hello") -> None:
        self.greeting = greeting


class OtherController:
    pass


@pytest.mark.unit
class TestDefaultDependencyResolver:
    """Test suite for DefaultDependencyResolver."""

    def test_creates_a_new_instance_each_time(self) -> None:
        """Test every resolve call instantiates the controller."""
        resolver = DefaultDependencyResolver()

        first = resolver.resolve(GreetingController)
        second = resolver.resolve(GreetingController)

        assert isinstance(first, GreetingController)
        assert first is not second

    def test_satisfies_the_protocol(self) -> None:
        """Test the default resolver is a DependencyResolver."""
        assert isinstance(DefaultDependencyResolver(), DependencyResolver)


@pytest.mark.unit
class TestFactoryResolver:
    """Test suite for FactoryResolver."""

    def test_uses_registered_factory(self) -> None:
        """Test a registered factory builds the instance."""
        resolver = FactoryResolver(
            {GreetingController: lambda: GreetingController("hi")}
        )

        instance = resolver.resolve(GreetingController)

        assert instance.greeting == "hi"

    def test_register_adds_factory(self) -> None:
        """Test factories can be registered after construction."""
        resolver = FactoryResolver()
        resolver.register(GreetingController, lambda: GreetingController("hey"))

        assert resolver.resolve(GreetingController).greeting == "hey"

    def test_falls_back_to_instantiation(self) -> None:
        """Test controllers without a factory are instantiated directly."""
        resolver = FactoryResolver(
            {GreetingController: lambda: GreetingController("hi")}
        )

        assert isinstance(resolver.resolve(OtherController), OtherController)

    def test_factory_errors_propagate(self) -> None:
        """Test a failing factory is not masked."""

        def broken() -> GreetingController:
            raise RuntimeError("no database")

        resolver = FactoryResolver({GreetingController: broken})

        with pytest.raises(RuntimeError, match="no database"):
            resolver.resolve(GreetingController)


@pytest.mark.unit
class TestSingletonResolver:
    """Test suite for SingletonResolver."""

    def test_returns_the_same_instance(self) -> None:
        """Test each controller class is instantiated once."""
        resolver = SingletonResolver()

        first = resolver.resolve(GreetingController)
        second = resolver.resolve(GreetingController)

        assert first is second

    def test_instances_are_per_class(self) -> None:
        """Test different controllers get different instances."""
        resolver = SingletonResolver()

        assert resolver.resolve(GreetingController) is not resolver.resolve(
            OtherController
        )
