"""
Binding records.

A binding pairs an abstract identifier with the strategy that produces
its instances: either a factory called with the container, or a concrete
type identifier handed to auto-construction.
"""

from collections.abc import Hashable
from dataclasses import dataclass
from typing import Any

from ..exceptions import describe


@dataclass(frozen=True)
class Binding:
    """
    Registered resolver for one abstract identifier.

    Attributes:
        abstract: Identifier the binding is registered under
        concrete: Factory callable or concrete type identifier
        is_factory: True when ``concrete`` is called with the container
    """

    abstract: Hashable
    concrete: Any
    is_factory: bool

    def __repr__(self) -> str:
        kind = "factory" if self.is_factory else "type"
        return f"Binding({describe(self.abstract)} -> {kind} {describe(self.concrete)})"


def make_binding(abstract: Hashable, concrete: Any = None) -> Binding:
    """
    Normalise a ``bind``/``singleton`` call into a Binding.

    Omitting ``concrete`` binds the identifier to itself for auto-construction,
    even when the identifier happens to be callable. Classes and strings are
    type identifiers; any other callable is a factory.

    Raises:
        TypeError: If ``concrete`` is none of the above
    """
    if concrete is None:
        return Binding(abstract, abstract, is_factory=False)
    if isinstance(concrete, (type, str)):
        return Binding(abstract, concrete, is_factory=False)
    if callable(concrete):
        return Binding(abstract, concrete, is_factory=True)
    raise TypeError(
        f"Cannot bind {describe(abstract)} to {concrete!r}: expected a factory callable, "
        f"a class, or an import path"
    )
