"""
Custom exceptions for autobind.

Every error raised by the container derives from AutobindError, which is a
RuntimeError, so callers that only catch RuntimeError keep working.
"""

from typing import Any, Dict, Optional, Sequence


def describe(identifier: Any) -> str:
    """Render an abstract identifier or type for error messages."""
    if isinstance(identifier, type):
        module = identifier.__module__
        if module == "builtins":
            return identifier.__qualname__
        return f"{module}.{identifier.__qualname__}"
    if isinstance(identifier, str):
        return identifier
    return repr(identifier)


class AutobindError(RuntimeError):
    """
    Base exception for autobind errors.

    Attributes:
        message: Error message
        context: Optional dictionary with additional context (abstract,
                 parameter, owner, etc.)
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Error message
            context: Optional dictionary with additional context information
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        """Return formatted error message with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class BindingNotFoundError(AutobindError, KeyError):
    """
    Raised when resolve() is called for an identifier with no binding.

    Also a KeyError, so lookups guarded with ``except KeyError`` or
    ``except LookupError`` behave as they would for a missing mapping key.

    Attributes:
        abstract: The identifier that was requested
    """

    def __init__(self, abstract: Any, context: Optional[Dict[str, Any]] = None) -> None:
        name = describe(abstract)
        context = context or {}
        super().__init__(f"No binding found for {name}", context=context)
        self.abstract = abstract
        self.name = name


class UninstantiableTypeError(AutobindError):
    """
    Raised when auto-construction targets something that cannot be built.

    Abstract base classes, protocols, non-class objects and dotted paths
    that fail to import all end up here.

    Attributes:
        concrete: The type identifier that could not be instantiated
        reason: Optional explanation
    """

    def __init__(
        self,
        concrete: Any,
        reason: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if reason:
            context["reason"] = reason
        super().__init__(f"Cannot instantiate {describe(concrete)}", context=context)
        self.concrete = concrete
        self.reason = reason


class UnresolvableParameterError(AutobindError):
    """
    Raised when a constructor parameter has no type the container can resolve by.

    Attributes:
        parameter: Parameter name
        owner: Class whose constructor declares the parameter
        annotation: The declared annotation, if any
    """

    def __init__(
        self,
        parameter: str,
        owner: Any,
        annotation: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        context = context or {}
        if annotation is not None:
            context["annotation"] = describe(annotation)
        super().__init__(
            f"Cannot resolve parameter {parameter} in {describe(owner)}",
            context=context,
        )
        self.parameter = parameter
        self.owner = owner
        self.annotation = annotation


class CircularDependencyError(AutobindError):
    """
    Raised when an identifier is requested again while it is still being resolved.

    Attributes:
        path: Identifiers on the resolution chain, ending with the repeated one
    """

    def __init__(self, path: Sequence[Any], context: Optional[Dict[str, Any]] = None) -> None:
        chain = " -> ".join(describe(item) for item in path)
        super().__init__(f"Circular dependency detected: {chain}", context=context)
        self.path = tuple(path)


class ConfigurationError(AutobindError):
    """
    Raised when container configuration is invalid.

    Attributes:
        message: Error message
        config_key: Configuration key that caused the error (if available)
        config_value: Configuration value that caused the error (if available)
        context: Additional context information
    """

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: Configuration key that caused the error (if available)
            config_value: Configuration value that caused the error (if available)
            context: Additional context information
        """
        context = context or {}
        if config_key:
            context["config_key"] = config_key
        if config_value is not None:
            context["config_value"] = config_value
        super().__init__(message, context=context)
        self.config_key = config_key
        self.config_value = config_value
