from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, ClassVar, get_origin

from ._config import split_inject_marker
from ._types import deref_optional, describe, get_hints, zero_value


if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._container import Container
    from ._invocable import Invocable
    from ._registry import Binding
    from ._types import TypeIdentity


logger = logging.getLogger(__name__)

_EMPTY = inspect.Parameter.empty
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


class ResolutionError(RuntimeError):
    pass


class Resolver:
    """Turns bindings of one container into live instances.

    Owns the container's resolved-singleton cache, keyed by concrete type so
    that abstractions backed by the same concrete type share one instance.
    """

    def __init__(self, container: Container) -> None:
        self._container = container
        self.resolved: dict[TypeIdentity, Any] = {}
        self._building: list[Binding] = []

    def resolve(self, binding: Binding, *parameters: Any, **overrides: Any) -> Any:
        """Produce an instance for ``binding``.

        - singletons come from the cache, or are built once and cached
        - function bindings call their factory with injected arguments
        - everything else is instantiated and auto-wired.
        """
        self._building.append(binding)
        try:
            return self._resolve(binding, *parameters, **overrides)
        finally:
            self._building.pop()

    def is_building(self, binding: Binding) -> bool:
        """Whether ``binding`` is being resolved further up the current call stack."""
        return any(b is binding for b in self._building)

    def _resolve(self, binding: Binding, *parameters: Any, **overrides: Any) -> Any:
        if binding.is_singleton:
            return self.resolve_singleton(binding, *parameters, **overrides)

        if binding.is_function_resolver:
            return self.invoke_function_resolver(binding, *parameters, **overrides)

        return binding.invocable.instantiate_with(self, *parameters, **overrides)

    def resolve_singleton(self, binding: Binding, *parameters: Any, **overrides: Any) -> Any:
        # parameters are ignored once the instance exists
        if binding.concrete_type in self.resolved:
            return self.resolved[binding.concrete_type]

        if binding.is_function_resolver:
            instance = self.invoke_function_resolver(binding, *parameters, **overrides)
        else:
            instance = binding.invocable.instantiate_with(self, *parameters, **overrides)

        if instance is None:
            return None

        self.resolved[binding.concrete_type] = instance
        return instance

    def invoke_function_resolver(self, binding: Binding, *parameters: Any, **overrides: Any) -> Any:
        """Call the bound factory; an exception in its error slot aborts resolution."""
        invocable = binding.invocable
        result = invocable.call_with(self, *parameters, **overrides)

        if not invocable.returns_multiple:
            return result

        values = list(result)
        if len(values) >= 2 and isinstance(values[1], BaseException):
            err = values[1]
            raise ResolutionError(str(err)) from err

        return values[0] if values else None

    def seed(self, concrete_type: TypeIdentity, instance: Any) -> None:
        self.resolved[concrete_type] = instance

    def clear(self) -> None:
        self.resolved.clear()

    def resolve_arguments(
        self,
        invocable: Invocable,
        parameters: tuple[Any, ...],
        overrides: Mapping[str, Any],
    ) -> tuple[list[Any], dict[str, Any]]:
        """Fill the callable's parameters.

        Resolution precedence, per parameter:
        1. ``parameters[i]`` for slot ``i``, only if its type is exactly the declared type
        2. a keyword override with the parameter's name
        3. a binding for the declared type (this container, then its parents)
        4. the parameter default
        5. a zero value of the declared type (or ``ResolutionError`` in strict mode).
        """
        sig = invocable.signature
        hints = invocable.hints
        slots = [p for p in sig.parameters.values() if p.kind not in _VARIADIC]
        accepts_var_keyword = any(p.kind is p.VAR_KEYWORD for p in sig.parameters.values())

        arguments: dict[str, Any] = {}

        for i, value in enumerate(parameters):
            if i >= len(slots):
                logger.debug("Ignoring %d extra parameter(s) supplied to %s", len(parameters) - i, invocable.name)
                break
            slot = slots[i]
            if _accepts(hints.get(slot.name, _EMPTY), value):
                arguments[slot.name] = value

        extra_kwargs: dict[str, Any] = {}
        slot_names = {p.name for p in slots}
        for name, value in overrides.items():
            if name in slot_names:
                arguments[name] = value
            elif accepts_var_keyword:
                extra_kwargs[name] = value
            else:
                msg = f"Override '{name}' doesn't match {invocable.name} signature"
                raise TypeError(msg)

        for index, slot in enumerate(slots):
            if slot.name not in arguments:
                arguments[slot.name] = self._resolve_argument(invocable, index, slot, hints.get(slot.name, _EMPTY))

        return _materialize_call(sig, arguments, extra_kwargs)

    def _resolve_argument(self, invocable: Invocable, index: int, p: inspect.Parameter, hint: Any) -> Any:
        value, resolved = self.resolve_type(hint)
        if resolved:
            return value

        if p.default is not _EMPTY:
            return p.default

        if self._container.config.strict:
            ann_repr = getattr(hint, "__name__", repr(hint)) if hint is not _EMPTY else "no-annotation"
            msg = (
                f"Cannot satisfy parameter '{p.name}' of {invocable.name}. "
                f"No parameter/registration/default found (annotation: {ann_repr})."
            )
            raise ResolutionError(msg)

        logger.warning("Assigning empty arg for arg(%d) '%s' on resolving %s", index, p.name, invocable.name)
        return zero_value(hint)

    def resolve_type(self, hint: Any) -> tuple[Any, bool]:
        """Resolve ``hint`` from the container chain, reporting whether a value was produced."""
        if hint is _EMPTY:
            return None, False

        if hint is type(self._container):
            return self._container, True

        found = self._container.find_binding(hint)
        if found is None:
            return None, False

        owner, binding = found
        if owner.resolver.is_building(binding):
            logger.debug("%s depends on itself, not resolving it from the container", describe(hint))
            return None, False

        value = owner.resolver.resolve(binding)
        return value, value is not None

    def wire_fields(self, instance: Any) -> Any:
        """Set annotated public attributes of ``instance`` from the container.

        Only attributes missing from the instance are wired, plus
        ``Annotated[T, Inject]`` ones still holding ``None``; a value set by
        the constructor (``None`` included) is left alone. Unresolvable
        missing attributes are given a zero value.
        """
        cls = type(instance)
        only_marked = self._container.config.only_inject_marked_fields

        for name, annotation in get_hints(cls, include_extras=True).items():
            if name.startswith("_") or get_origin(annotation) is ClassVar:
                continue

            hint, marked = split_inject_marker(annotation)
            if only_marked and not marked:
                continue

            missing = not hasattr(instance, name)
            if not missing and not (marked and getattr(instance, name) is None):
                continue

            value, resolved = self.resolve_type(hint)
            if not resolved:
                logger.debug("Could not resolve field '%s' of %s", name, cls.__qualname__)
                if not missing:
                    continue
                value = zero_value(hint)

            try:
                setattr(instance, name, value)
            except AttributeError:
                logger.debug("Field '%s' of %s is read-only, skipping", name, cls.__qualname__)

        return instance


def _accepts(hint: Any, value: Any) -> bool:
    if hint is _EMPTY or hint is Any:
        return True
    if type(value) is hint:
        return True

    # Optional[X] accepts an exact X
    inner = deref_optional(hint)
    return inner is not hint and type(value) is inner


def _materialize_call(
    sig: inspect.Signature,
    arguments: dict[str, Any],
    extra_kwargs: dict[str, Any],
) -> tuple[list[Any], dict[str, Any]]:
    args: list[Any] = []
    kwargs: dict[str, Any] = {}

    for name, p in sig.parameters.items():
        if p.kind is p.POSITIONAL_ONLY:
            args.append(arguments[name])
        elif p.kind in (p.POSITIONAL_OR_KEYWORD, p.KEYWORD_ONLY):
            kwargs[name] = arguments[name]

    kwargs.update(extra_kwargs)
    return args, kwargs
