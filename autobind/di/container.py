"""
Dependency Injection Container

A small container that maps abstract identifiers to factories or concrete
types and builds object graphs by reading constructor annotations.
"""

import threading
import time
from collections.abc import Callable, Hashable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Optional

from ..config import ContainerConfig
from ..exceptions import (BindingNotFoundError, CircularDependencyError,
                          UninstantiableTypeError, UnresolvableParameterError,
                          describe)
from ..observability.logging import get_logger, log_operation, resolution_frame
from ..observability.metrics import MetricsCollector
from .bindings import Binding, make_binding
from .introspection import (PRIMITIVE_TYPES, ConstructorParameter,
                            constructor_parameters, has_declared_constructor,
                            instantiate, load_type, uninstantiable_reason,
                            unwrap_optional)

logger = get_logger(__name__)

# Marks a singleton slot that has not been populated yet
_EMPTY = object()


class Container:
    """
    Dependency Injection Container.

    Plain bindings build a new instance on every resolve; singletons build
    once and reuse the instance until they are re-registered.

    Usage:
        container = Container()

        # Self-binding: Mailer is auto-constructed from its __init__ annotations
        container.bind(Mailer)

        # Interface to implementation, built once
        container.singleton(Repository, SqlRepository)

        # Factory: receives the container
        container.bind(Settings, lambda c: Settings.from_env())

        # Existing object
        container.instance(Clock, SystemClock())

        service = container.resolve(Mailer)
    """

    _global_instance: Optional["Container"] = None

    def __init__(
        self,
        config: ContainerConfig | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.config = config or ContainerConfig()
        self.config.validate()
        self.metrics = metrics or MetricsCollector(max_metrics=self.config.metrics_max_entries)
        self._bindings: dict[Hashable, Binding] = {}
        # Singleton slots; a slot holding _EMPTY has not been built yet
        self._instances: dict[Hashable, Any] = {}
        self._lock = threading.RLock()
        # Identifiers being resolved on the current call chain, per thread/task
        self._resolving: ContextVar[tuple[Hashable, ...]] = ContextVar(
            f"autobind_resolving_{id(self)}", default=()
        )

    @classmethod
    def get_global(cls) -> "Container":
        """Get the process-wide container, creating it on first use."""
        if cls._global_instance is None:
            cls._global_instance = Container()
        return cls._global_instance

    @classmethod
    def set_global(cls, container: "Container") -> None:
        """Replace the process-wide container."""
        cls._global_instance = container

    @classmethod
    def reset_global(cls) -> None:
        """Drop the process-wide container (useful for testing)."""
        cls._global_instance = None

    # ──────────────────────────────────────────────
    # Registration
    # ──────────────────────────────────────────────
    def bind(self, abstract: Hashable, concrete: Any = None) -> "Container":
        """
        Bind an identifier to a resolver.

        Args:
            abstract: Identifier to register (usually an interface or class)
            concrete: Factory ``(container) -> instance``, a class, or an
                import path string. Defaults to ``abstract`` itself.

        Returns:
            Self for chaining

        Example:
            container.bind(UserService)
            container.bind(Repository, SqlRepository)
            container.bind("mailer", lambda c: SmtpMailer(c.resolve(Settings)))
        """
        self._bindings[abstract] = make_binding(abstract, concrete)
        # A plain binding never serves a cached instance
        self._instances.pop(abstract, None)
        logger.debug(f"Bound {describe(abstract)}")
        return self

    def singleton(self, abstract: Hashable, concrete: Any = None) -> "Container":
        """
        Bind an identifier whose instance is built once and then reused.

        Re-registering resets the cached instance, so the next resolve
        builds again.

        Args:
            abstract: Identifier to register
            concrete: Same as for bind()

        Returns:
            Self for chaining
        """
        self._bindings[abstract] = make_binding(abstract, concrete)
        self._instances[abstract] = _EMPTY
        logger.debug(f"Bound {describe(abstract)} as singleton")
        return self

    def instance(self, abstract: Hashable, obj: Any) -> "Container":
        """
        Register an existing object as the singleton for ``abstract``.

        Useful for configuration objects or externally created clients.

        Returns:
            Self for chaining
        """
        self._bindings[abstract] = make_binding(abstract)
        self._instances[abstract] = obj
        logger.debug(f"Registered instance for {describe(abstract)}")
        return self

    # ──────────────────────────────────────────────
    # Resolution
    # ──────────────────────────────────────────────
    def resolve(self, abstract: Hashable) -> Any:
        """
        Resolve an instance for ``abstract``.

        Args:
            abstract: A registered identifier

        Returns:
            The cached singleton, the factory result, or a newly built instance

        Raises:
            BindingNotFoundError: If nothing is registered for ``abstract``
            UninstantiableTypeError: If the bound type cannot be constructed
            UnresolvableParameterError: If a constructor parameter has no usable type
            CircularDependencyError: If ``abstract`` depends on itself
        """
        top_level = not self._resolving.get()
        start_time = time.perf_counter()
        success = True
        try:
            return self._resolve(abstract)
        except Exception:
            success = False
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            name = describe(abstract)
            self.metrics.record_operation("container.resolve", duration_ms, success, abstract=name)
            if top_level and self.config.log_resolutions:
                log_operation(
                    logger,
                    "container.resolve",
                    success=success,
                    duration_ms=duration_ms,
                    abstract=name,
                )

    def try_resolve(self, abstract: Hashable) -> Any | None:
        """
        Resolve ``abstract``, returning None if it is not registered.

        Failures further down the graph still raise.
        """
        if not self.is_bound(abstract):
            return None
        return self.resolve(abstract)

    def is_bound(self, abstract: Hashable) -> bool:
        """Check if ``abstract`` has a binding or a cached instance."""
        return abstract in self._bindings or (
            self._instances.get(abstract, _EMPTY) is not _EMPTY
        )

    def reset(self) -> None:
        """
        Drop all bindings and cached instances.

        Useful for testing.
        """
        with self._lock:
            self._bindings.clear()
            self._instances.clear()
        logger.debug("Container reset")

    def __contains__(self, abstract: Hashable) -> bool:
        """Support 'in' operator for checking registration."""
        return self.is_bound(abstract)

    def _resolve(self, abstract: Hashable) -> Any:
        cached = self._instances.get(abstract, _EMPTY)
        if cached is not _EMPTY:
            return cached

        binding = self._bindings.get(abstract)
        if binding is None:
            raise BindingNotFoundError(abstract)

        if abstract not in self._instances:
            with self._frame(abstract):
                return self._produce(binding)

        if not self.config.thread_safe:
            return self._populate(abstract, binding)

        with self._lock:
            cached = self._instances.get(abstract, _EMPTY)
            if cached is not _EMPTY:
                return cached
            return self._populate(abstract, binding)

    def _populate(self, abstract: Hashable, binding: Binding) -> Any:
        with self._frame(abstract):
            obj = self._produce(binding)
        # The slot may have been dropped by a bind() issued while building
        if abstract in self._instances:
            self._instances[abstract] = obj
            logger.debug(f"Created singleton: {describe(abstract)}")
        return obj

    def _produce(self, binding: Binding) -> Any:
        if binding.is_factory:
            return binding.concrete(self)
        return self._build(binding.concrete)

    @contextmanager
    def _frame(self, identifier: Hashable) -> Iterator[None]:
        path = self._resolving.get()
        if self.config.detect_cycles and identifier in path:
            raise CircularDependencyError(path + (identifier,))
        token = self._resolving.set(path + (identifier,))
        try:
            with resolution_frame(identifier):
                yield
        finally:
            self._resolving.reset(token)

    # ──────────────────────────────────────────────
    # Auto-construction
    # ──────────────────────────────────────────────
    def _build(self, concrete: Any) -> Any:
        """
        Instantiate ``concrete``, resolving each constructor parameter by its
        declared type, in declaration order.
        """
        cls = load_type(concrete)
        reason = uninstantiable_reason(cls)
        if reason is not None:
            raise UninstantiableTypeError(concrete, reason=reason)

        start_time = time.perf_counter()
        success = True
        try:
            if not has_declared_constructor(cls):
                return instantiate(cls)

            args: list[Any] = []
            kwargs: dict[str, Any] = {}
            for param in constructor_parameters(cls):
                if param.is_variadic:
                    continue
                dependency = self._resolve_parameter(cls, param)
                if param.is_keyword_only:
                    kwargs[param.name] = dependency
                else:
                    args.append(dependency)

            logger.debug(f"Building {describe(cls)} with {len(args) + len(kwargs)} dependencies")
            return instantiate(cls, args, kwargs)
        except Exception:
            success = False
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.metrics.record_operation(
                "container.build", duration_ms, success, concrete=describe(cls)
            )

    def _resolve_parameter(self, owner: type, param: ConstructorParameter) -> Any:
        if not param.has_annotation:
            raise UnresolvableParameterError(param.name, owner)

        target = unwrap_optional(param.annotation)
        if self.is_bound(target):
            return self.resolve(target)

        if not isinstance(target, type) or target in PRIMITIVE_TYPES:
            raise UnresolvableParameterError(param.name, owner, annotation=param.annotation)

        # Unbound concrete class: build it directly, never cached
        with self._frame(target):
            return self._build(target)


# ──────────────────────────────────────────────
# Process-wide registry
# ──────────────────────────────────────────────
def bind(abstract: Hashable, concrete: Any = None) -> Container:
    """Bind on the global container."""
    return Container.get_global().bind(abstract, concrete)


def singleton(abstract: Hashable, concrete: Any = None) -> Container:
    """Bind a singleton on the global container."""
    return Container.get_global().singleton(abstract, concrete)


def resolve(abstract: Hashable) -> Any:
    """Resolve from the global container."""
    return Container.get_global().resolve(abstract)


# FastAPI integration helpers
def inject(abstract: Hashable) -> Callable[..., Any]:
    """
    FastAPI dependency that resolves ``abstract`` from the app's container.

    The container is taken from ``app.state.container`` when set, otherwise
    the global container is used.

    Usage:
        @app.get("/users")
        async def get_users(user_svc: UserService = Depends(inject(UserService))):
            return await user_svc.list_all()
    """
    from fastapi import Request

    async def _dependency(request: Request) -> Any:
        container = getattr(request.app.state, "container", None)
        if container is None:
            container = Container.get_global()
        return container.resolve(abstract)

    return _dependency


# Alias for cleaner syntax
Inject = inject
