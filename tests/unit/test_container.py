"""
Unit tests for Container registration and resolution.

Covers:
- bind / singleton / instance registration
- Factory vs. type resolvers
- Singleton caching and plain-binding non-caching
- Missing bindings and rebinding
- The process-wide container and module-level helpers
"""

import pytest

import autobind
from autobind.di import Container
from autobind.exceptions import AutobindError, BindingNotFoundError


class Engine:
    pass


class Diesel(Engine):
    pass


class Electric(Engine):
    pass


class TestSelfBinding:
    """Binding an identifier without a resolver."""

    def test_bind_without_concrete_builds_the_type(self, container):
        """Test that bind(T) auto-constructs T."""
        container.bind(Engine)

        result = container.resolve(Engine)

        assert type(result) is Engine

    def test_bind_returns_container_for_chaining(self, container):
        """Test that registration calls chain."""
        assert container.bind(Engine).singleton(Diesel) is container

    def test_self_bound_function_is_not_treated_as_factory(self, container):
        """Test that a callable identifier bound to itself is still auto-constructed."""

        def make_engine(c):
            return Engine()

        container.bind(make_engine)

        with pytest.raises(autobind.UninstantiableTypeError):
            container.resolve(make_engine)


class TestExplicitBindings:
    """Binding an identifier to a factory or a concrete type."""

    def test_factory_result_is_returned(self, container):
        """Test that resolve returns exactly what the factory returns."""
        engine = Diesel()
        container.bind(Engine, lambda c: engine)

        assert container.resolve(Engine) is engine

    def test_factory_receives_usable_container(self, container):
        """Test that the factory can resolve further services from its argument."""
        seen = []

        def factory(c):
            seen.append(c)
            return c.resolve(Diesel)

        container.bind(Diesel)
        container.bind(Engine, factory)

        result = container.resolve(Engine)

        assert seen == [container]
        assert isinstance(result, Diesel)

    def test_interface_bound_to_implementation(self, container):
        """Test that a class resolver is auto-constructed."""
        container.bind(Engine, Electric)

        assert isinstance(container.resolve(Engine), Electric)

    def test_string_identifier_with_factory(self, container):
        """Test that plain names work as identifiers."""
        container.bind("engine", lambda c: Diesel())

        assert isinstance(container.resolve("engine"), Diesel)

    def test_factory_exception_propagates_unchanged(self, container):
        """Test that errors raised by a factory reach the caller as-is."""

        def broken(c):
            raise ValueError("boom")

        container.bind(Engine, broken)

        with pytest.raises(ValueError, match="boom"):
            container.resolve(Engine)

    def test_invalid_resolver_is_rejected(self, container):
        """Test that a resolver that is neither callable nor a type fails at bind time."""
        with pytest.raises(TypeError):
            container.bind(Engine, 42)


class TestSingletons:
    """Singleton caching behaviour."""

    def test_singleton_returns_same_instance(self, container, construction_counter):
        """Test identity and a single construction across resolves."""
        container.singleton(construction_counter)

        first = container.resolve(construction_counter)
        second = container.resolve(construction_counter)

        assert first is second
        assert construction_counter.instances == 1

    def test_singleton_factory_called_once(self, container):
        """Test that a singleton factory runs only on the first resolve."""
        calls = []
        container.singleton(Engine, lambda c: calls.append(1) or Diesel())

        container.resolve(Engine)
        container.resolve(Engine)

        assert len(calls) == 1

    def test_singleton_caches_none(self, container):
        """Test that a factory returning None is still built only once."""
        calls = []

        def factory(c):
            calls.append(1)
            return None

        container.singleton("nothing", factory)

        assert container.resolve("nothing") is None
        assert container.resolve("nothing") is None
        assert len(calls) == 1

    def test_re_registering_singleton_resets_cache(self, container, construction_counter):
        """Test that singleton() again empties the slot."""
        container.singleton(construction_counter)
        first = container.resolve(construction_counter)

        container.singleton(construction_counter)
        second = container.resolve(construction_counter)

        assert first is not second
        assert construction_counter.instances == 2

    def test_failed_construction_leaves_slot_empty(self, container):
        """Test that a singleton is retried after its factory failed."""
        attempts = []

        def flaky(c):
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("not yet")
            return Diesel()

        container.singleton(Engine, flaky)

        with pytest.raises(RuntimeError):
            container.resolve(Engine)
        result = container.resolve(Engine)

        assert isinstance(result, Diesel)
        assert container.resolve(Engine) is result

    def test_singleton_dependency_shared_between_transients(self, container):
        """Test that transient services share an injected singleton."""

        class Garage:
            def __init__(self, engine: Engine):
                self.engine = engine

        container.singleton(Engine, Diesel)
        container.bind(Garage)

        first = container.resolve(Garage)
        second = container.resolve(Garage)

        assert first is not second
        assert first.engine is second.engine


class TestPlainBindings:
    """Plain bindings are never cached."""

    def test_each_resolve_constructs_anew(self, container, construction_counter):
        """Test two resolves give two constructions."""
        container.bind(construction_counter)

        first = container.resolve(construction_counter)
        second = container.resolve(construction_counter)

        assert first is not second
        assert construction_counter.instances == 2

    def test_bind_after_singleton_drops_cache(self, container, construction_counter):
        """Test that rebinding as a plain binding stops caching."""
        container.singleton(construction_counter)
        cached = container.resolve(construction_counter)

        container.bind(construction_counter)

        assert container.resolve(construction_counter) is not cached
        assert container.resolve(construction_counter) is not cached


class TestMissingBindings:
    """Resolution of unknown identifiers."""

    def test_unregistered_identifier_fails(self, container):
        """Test that an unknown name raises BindingNotFoundError naming it."""
        with pytest.raises(BindingNotFoundError) as exc_info:
            container.resolve("Unregistered")

        assert exc_info.value.abstract == "Unregistered"
        assert "Unregistered" in str(exc_info.value)

    def test_unregistered_class_is_not_auto_constructed(self, container):
        """Test that resolve never falls back to building the identifier."""
        with pytest.raises(BindingNotFoundError) as exc_info:
            container.resolve(Engine)

        assert "Engine" in str(exc_info.value)

    def test_binding_not_found_is_key_error_and_runtime_error(self, container):
        """Test the compatibility bases of BindingNotFoundError."""
        with pytest.raises(KeyError):
            container.resolve("missing")
        with pytest.raises(RuntimeError):
            container.resolve("missing")
        with pytest.raises(AutobindError):
            container.resolve("missing")


class TestRebinding:
    """Later registrations win."""

    def test_rebinding_overwrites_factory(self, container):
        """Test bind(T, X) then bind(T, Y) resolves through Y."""
        container.bind(Engine, lambda c: Diesel())
        container.bind(Engine, lambda c: Electric())

        assert isinstance(container.resolve(Engine), Electric)

    def test_rebinding_overwrites_type(self, container):
        """Test that a type resolver can replace a factory."""
        container.bind(Engine, lambda c: Diesel())
        container.bind(Engine, Electric)

        assert isinstance(container.resolve(Engine), Electric)


class TestInstanceRegistration:
    """Registering pre-built objects."""

    def test_instance_is_returned_as_is(self, container):
        """Test that instance() serves the given object."""
        engine = Electric()
        container.instance(Engine, engine)

        assert container.resolve(Engine) is engine
        assert container.resolve(Engine) is engine

    def test_instance_is_injected_into_dependents(self, container):
        """Test that auto-wiring picks up registered instances."""

        class Car:
            def __init__(self, engine: Engine):
                self.engine = engine

        engine = Diesel()
        container.instance(Engine, engine)
        container.bind(Car)

        assert container.resolve(Car).engine is engine


class TestIntrospectionHelpers:
    """try_resolve, is_bound, __contains__ and reset."""

    def test_try_resolve_returns_none_when_unbound(self, container):
        """Test that try_resolve swallows only the missing top-level binding."""
        assert container.try_resolve(Engine) is None

    def test_try_resolve_resolves_when_bound(self, container):
        """Test that try_resolve behaves like resolve for bound identifiers."""
        container.bind(Engine, Diesel)

        assert isinstance(container.try_resolve(Engine), Diesel)

    def test_try_resolve_propagates_nested_failures(self, container):
        """Test that errors deeper in the graph still raise."""
        container.bind(Engine, lambda c: c.resolve("missing"))

        with pytest.raises(BindingNotFoundError):
            container.try_resolve(Engine)

    def test_is_bound_and_contains(self, container):
        """Test registration checks."""
        assert not container.is_bound(Engine)
        assert Engine not in container

        container.singleton(Engine, Diesel)

        assert container.is_bound(Engine)
        assert Engine in container

    def test_reset_clears_everything(self, container):
        """Test that reset drops bindings and cached instances."""
        container.singleton(Engine, Diesel)
        container.resolve(Engine)

        container.reset()

        assert Engine not in container
        with pytest.raises(BindingNotFoundError):
            container.resolve(Engine)

    def test_containers_are_independent(self):
        """Test that two containers share no registrations."""
        first = Container()
        second = Container()
        first.bind(Engine)

        assert Engine in first
        assert Engine not in second


class TestGlobalContainer:
    """Process-wide container and module-level helpers."""

    def test_get_global_is_stable(self):
        """Test that get_global returns one container until reset."""
        assert Container.get_global() is Container.get_global()

    def test_reset_global_creates_new_container(self):
        """Test that reset_global discards the previous container."""
        before = Container.get_global()
        Container.reset_global()

        assert Container.get_global() is not before

    def test_set_global(self, container):
        """Test replacing the global container."""
        Container.set_global(container)

        assert Container.get_global() is container

    def test_module_level_helpers_use_global_container(self, construction_counter):
        """Test autobind.bind / singleton / resolve."""
        autobind.bind(Engine, Diesel)
        autobind.singleton(construction_counter)

        assert isinstance(autobind.resolve(Engine), Diesel)
        assert autobind.resolve(construction_counter) is autobind.resolve(construction_counter)
        assert Engine in Container.get_global()
