from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._types import abstract_identity, concrete_identity, identity_of


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from ._invocable import Invocable
    from ._types import TypeIdentity


class BindingKind(Enum):
    CONCRETE = "concrete"
    FUNCTION = "function"
    ABSTRACT = "abstract"
    SINGLETON = "singleton"


@dataclass
class Binding:
    kind: BindingKind
    abstract_type: TypeIdentity
    concrete_type: TypeIdentity
    invocable: Invocable
    resolver_function: Callable[..., Any] | None = None
    is_function_resolver: bool = False
    is_singleton: bool = False


class BindingRegistry:
    """Per-container maps of bindings, concrete -> abstract aliases and tags.

    Rebinding an abstract type silently replaces both its recipe and its alias.
    """

    def __init__(self) -> None:
        self.bindings: dict[TypeIdentity, Binding] = {}
        self.concrete_aliases: dict[TypeIdentity, TypeIdentity] = {}
        self.tagged: dict[str, list[TypeIdentity]] = {}

    def add_binding(self, abstract_type: TypeIdentity, binding: Binding) -> None:
        self.bindings[abstract_type] = binding
        self.concrete_aliases[binding.concrete_type] = abstract_type

    def add_singleton_binding(self, singleton_type: TypeIdentity, binding: Binding) -> None:
        binding.is_singleton = True
        self.add_binding(singleton_type, binding)

    def has_binding(self, tp: TypeIdentity) -> bool:
        if tp is None:
            return False
        try:
            return tp in self.bindings
        except TypeError:
            # unhashable annotation
            return False

    def lookup(self, candidate: Any) -> TypeIdentity | None:
        """Find the key of the binding ``candidate`` refers to.

        Checked in order:
        1. the concrete identity of ``candidate``
        2. its abstract identity
        3. the raw identity, for keys that do not normalize
        4. the concrete -> abstract alias table.
        """
        identity = identity_of(candidate)
        concrete = concrete_identity(identity)

        if self.has_binding(concrete):
            return concrete

        test_type = abstract_identity(identity)
        if self.has_binding(test_type):
            return test_type

        if self.has_binding(identity):
            return identity

        for alias in (identity, concrete):
            potential_abstract = self._alias_of(alias)
            if self.has_binding(potential_abstract):
                return potential_abstract

        return None

    def _alias_of(self, concrete_type: TypeIdentity) -> TypeIdentity | None:
        if concrete_type is None:
            return None
        try:
            return self.concrete_aliases.get(concrete_type)
        except TypeError:
            return None

    def add_tagged(self, tag: str, keys: Iterable[TypeIdentity]) -> bool:
        """Append ``keys`` under ``tag``, keeping first-seen order and dropping duplicates."""
        existing = self.tagged.setdefault(tag, [])
        for key in keys:
            if key not in existing:
                existing.append(key)
        return len(existing) > 0

    def tagged_keys(self, tag: str) -> list[TypeIdentity]:
        return list(self.tagged.get(tag, ()))

    def clear(self) -> None:
        self.bindings.clear()
        self.concrete_aliases.clear()
        self.tagged.clear()
