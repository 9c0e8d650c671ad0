"""
autobind - minimal dependency injection

Maps interfaces and classes to factories or implementations and builds
object graphs by resolving constructor annotations recursively.
"""

from .config import ContainerConfig, ContainerSettings
from .di import Binding, Container, bind, inject, resolve, singleton
from .exceptions import (AutobindError, BindingNotFoundError,
                         CircularDependencyError, ConfigurationError,
                         UninstantiableTypeError, UnresolvableParameterError)

__version__ = "0.1.0"

__all__ = [
    # Container
    "Container",
    "Binding",
    "bind",
    "singleton",
    "resolve",
    "inject",
    # Configuration
    "ContainerConfig",
    "ContainerSettings",
    # Errors
    "AutobindError",
    "BindingNotFoundError",
    "UninstantiableTypeError",
    "UnresolvableParameterError",
    "CircularDependencyError",
    "ConfigurationError",
]
