"""
Constructor introspection for auto-wiring.

Everything the container needs to know about a concrete type lives here:
how to load it from a dotted path, whether it can be instantiated, which
parameters its constructor declares (with their resolved annotations), and
how to call it.
"""

import importlib
import inspect
import logging
import sys
import types
import typing
from dataclasses import dataclass
from typing import Any, Union

from ..exceptions import UninstantiableTypeError, describe

logger = logging.getLogger(__name__)

EMPTY = inspect.Parameter.empty

# Builtins that carry values, not services; they need an explicit binding
PRIMITIVE_TYPES = frozenset({str, int, float, bool, bytes, complex})

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class ConstructorParameter:
    """A single constructor parameter as seen by the container."""

    name: str
    annotation: Any
    kind: Any

    @property
    def is_variadic(self) -> bool:
        return self.kind in _VARIADIC_KINDS

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY

    @property
    def has_annotation(self) -> bool:
        return self.annotation is not EMPTY


def load_type(identifier: Any) -> Any:
    """
    Turn a concrete type identifier into the object it names.

    Classes are returned unchanged. Strings are import paths, either
    ``"package.module.Class"`` or ``"package.module:Outer.Inner"``.

    Raises:
        UninstantiableTypeError: If a string path cannot be imported
    """
    if not isinstance(identifier, str):
        return identifier

    module_name, sep, attr_path = identifier.partition(":")
    if not sep:
        module_name, _, attr_path = identifier.rpartition(".")
    if not module_name or not attr_path:
        raise UninstantiableTypeError(identifier, reason="not an importable path")

    try:
        target: Any = importlib.import_module(module_name)
    except ImportError as e:
        raise UninstantiableTypeError(identifier, reason=str(e)) from e

    for part in attr_path.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as e:
            raise UninstantiableTypeError(
                identifier, reason=f"{module_name} has no attribute {attr_path}"
            ) from e

    logger.debug(f"Loaded {identifier} -> {describe(target)}")
    return target


def uninstantiable_reason(target: Any) -> str | None:
    """Return why ``target`` cannot be constructed, or None if it can."""
    if not isinstance(target, type):
        return "not a class"
    if getattr(target, "_is_protocol", False):
        return "protocol classes cannot be instantiated"
    if inspect.isabstract(target):
        missing = ", ".join(sorted(getattr(target, "__abstractmethods__", ())))
        return f"abstract class with abstract methods: {missing}"
    return None


def is_instantiable(target: Any) -> bool:
    return uninstantiable_reason(target) is None


def has_declared_constructor(cls: type) -> bool:
    """True unless the class (and its bases) leave both ``__init__`` and ``__new__`` to object."""
    return cls.__init__ is not object.__init__ or cls.__new__ is not object.__new__


def _constructor_function(cls: type) -> Any:
    if cls.__init__ is not object.__init__:
        return cls.__init__
    return cls.__new__


def _resolved_hints(cls: type) -> dict[str, Any]:
    func = _constructor_function(cls)
    try:
        return typing.get_type_hints(func)
    except (NameError, TypeError, AttributeError) as e:
        # Each parameter is evaluated on its own below
        logger.debug(f"Evaluating annotations of {describe(cls)} one by one: {e}")
        return {}


def _evaluate(annotation: Any, cls: type) -> Any:
    """
    Evaluate a string or ForwardRef annotation in the class's module.

    Names that cannot be evaluated stay as strings, which can still match a
    string binding.
    """
    if isinstance(annotation, typing.ForwardRef):
        annotation = annotation.__forward_arg__
    if not isinstance(annotation, str):
        return annotation

    module = sys.modules.get(cls.__module__)
    globalns = dict(vars(module)) if module is not None else {}
    try:
        return eval(annotation, globalns, dict(vars(cls)))
    except (NameError, SyntaxError, TypeError, AttributeError):
        return annotation


def _signature(cls: type) -> inspect.Signature:
    try:
        # Binds self, and honours __new__ and __signature__
        return inspect.signature(cls)
    except (ValueError, TypeError):
        pass

    # Builtin-derived classes often expose only their slot wrappers
    try:
        signature = inspect.signature(cls.__init__)
    except ValueError as e:
        raise UninstantiableTypeError(cls, reason="constructor signature unavailable") from e
    params = list(signature.parameters.values())
    if params and params[0].kind in (
        inspect.Parameter.POSITIONAL_ONLY,
        inspect.Parameter.POSITIONAL_OR_KEYWORD,
    ):
        params = params[1:]
    return signature.replace(parameters=params)


def constructor_parameters(cls: type) -> list[ConstructorParameter]:
    """
    List the parameters needed to call ``cls``, in declaration order.

    Annotations are resolved with ``typing.get_type_hints``; when that fails
    for any of them, every annotation is evaluated separately so one bad
    forward reference does not hide the others.
    """
    signature = _signature(cls)
    hints = _resolved_hints(cls)

    return [
        ConstructorParameter(
            name=param.name,
            annotation=_evaluate(hints.get(param.name, param.annotation), cls),
            kind=param.kind,
        )
        for param in signature.parameters.values()
    ]


def unwrap_optional(annotation: Any) -> Any:
    """Return ``T`` for ``Optional[T]`` / ``T | None``; anything else unchanged."""
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in typing.get_args(annotation) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def instantiate(cls: type, args: Any = (), kwargs: dict[str, Any] | None = None) -> Any:
    """Call the constructor with positional dependencies (and keyword-only ones by name)."""
    return cls(*args, **(kwargs or {}))
