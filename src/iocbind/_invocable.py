from __future__ import annotations

import inspect
import logging
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._types import get_hints, identity_of, indirect, is_multi_return, is_routine


if TYPE_CHECKING:
    from ._resolver import Resolver


logger = logging.getLogger(__name__)


class InvocableKind(Enum):
    CLASS = "class"
    FUNCTION = "function"


class Invocable:
    """A constructible unit: a class to instantiate or a function to call.

    Arguments for either are filled by the resolver handed in at call time.
    Wrapping an existing object (rather than its class) makes
    ``instantiate_with`` inject into that object instead of building a new one.
    """

    def __init__(self, target: Any) -> None:
        self._instance: Any = None
        self._signature: inspect.Signature | None = None
        self._hints: dict[str, Any] = {}
        self.is_instantiated = False

        if is_routine(target):
            self.kind = InvocableKind.FUNCTION
            self.target = target
            return

        identity = identity_of(target)
        tp = indirect(identity)
        if not inspect.isclass(tp):
            msg = f"{target!r} is not an invocable type (function or class)"
            raise TypeError(msg)

        self.kind = InvocableKind.CLASS
        self.target = tp
        if identity is not target:
            self._instance = target

    def __repr__(self) -> str:
        return f"Invocable({self.kind.value}: {self.name})"

    @property
    def name(self) -> str:
        return getattr(self.target, "__qualname__", None) or repr(self.target)

    @property
    def signature(self) -> inspect.Signature:
        self.instantiate()
        assert self._signature is not None
        return self._signature

    @property
    def hints(self) -> dict[str, Any]:
        self.instantiate()
        return self._hints

    @property
    def return_annotation(self) -> Any:
        if self.kind is InvocableKind.CLASS:
            return self.target
        return self.hints.get("return", self.signature.return_annotation)

    @property
    def returns_multiple(self) -> bool:
        return self.kind is InvocableKind.FUNCTION and is_multi_return(self.return_annotation)

    def instantiate(self) -> None:
        """Introspect the wrapped callable once; later calls are no-ops."""
        if self.is_instantiated:
            return

        if self.kind is InvocableKind.CLASS:
            self._signature, self._hints = _class_signature(self.target)
        else:
            self._signature = _safe_signature(self.target)
            self._hints = get_hints(self.target)

        self.is_instantiated = True

    def instantiate_with(self, resolver: Resolver, *parameters: Any, **overrides: Any) -> Any:
        """Build the class through constructor injection, then auto-wire its fields."""
        if self.kind is not InvocableKind.CLASS:
            msg = f"instantiate_with() is only usable when the Invocable wraps a class, not {self.name}"
            raise TypeError(msg)

        self.instantiate()

        instance = self._instance
        if instance is None:
            instance = self.call_with(resolver, *parameters, **overrides)

        return resolver.wire_fields(instance)

    def call_with(self, resolver: Resolver, *parameters: Any, **overrides: Any) -> Any:
        """Call the wrapped callable with arguments from ``parameters``, ``overrides`` and the container."""
        self.instantiate()
        args, kwargs = resolver.resolve_arguments(self, parameters, overrides)
        return self.target(*args, **kwargs)

    def call_method_with(self, method_name: str, resolver: Resolver, *parameters: Any, **overrides: Any) -> Any:
        if self.kind is not InvocableKind.CLASS:
            msg = "call_method_with() is only usable when the Invocable wraps a class"
            raise TypeError(msg)

        instance = self.instantiate_with(resolver)
        method = getattr(instance, method_name)
        return Invocable(method).call_with(resolver, *parameters, **overrides)

    def as_results(self, result: Any) -> list[Any]:
        """Spread a raw call result into the list of values the callable returned."""
        if self.returns_multiple:
            return list(result)
        if result is None and self.return_annotation in (inspect.Signature.empty, None, type(None)):
            return []
        return [result]


def _safe_signature(target: Any) -> inspect.Signature:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError):
        logger.debug("No signature available for %r, calling it without arguments", target)
        return inspect.Signature()


def _class_signature(cls: type) -> tuple[inspect.Signature, dict[str, Any]]:
    init = inspect.getattr_static(cls, "__init__", None)
    if init is not None and init is not object.__init__:
        return _safe_signature(cls), get_hints(init)

    # e.g. NamedTuple, which only customizes __new__
    new = inspect.getattr_static(cls, "__new__", None)
    new = getattr(new, "__func__", new)
    if new is not None and new is not object.__new__:
        return _safe_signature(cls), get_hints(new)

    return inspect.Signature(), {}
