from __future__ import annotations

import abc
import collections.abc
import inspect
import logging
import types
import typing
from typing import Any, Union, get_args, get_origin, get_type_hints


logger = logging.getLogger(__name__)

# A class, a typing special form, or a routine standing in for its signature.
TypeIdentity = Any

_EMPTY = inspect.Signature.empty

_ZERO_CONSTRUCTIBLE = (bool, int, float, complex, str, bytes, list, dict, set, frozenset, tuple)


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def is_protocol(tp: Any) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def is_protocol(tp: Any) -> bool:
        """Detect whether 'tp' is declared as a typing.Protocol (not merely derived from one)."""
        return inspect.isclass(tp) and bool(tp.__dict__.get("_is_protocol", False))


def is_interface(tp: Any) -> bool:
    """Return True for protocols, abstract classes and direct ``abc.ABC`` subclasses."""
    if not inspect.isclass(tp):
        return False
    return is_protocol(tp) or inspect.isabstract(tp) or abc.ABC in tp.__bases__


def is_constructible(tp: Any) -> bool:
    """Classes that can be instantiated: neither protocols nor left with abstract methods."""
    return inspect.isclass(tp) and not is_protocol(tp) and not inspect.isabstract(tp)


def is_routine(value: Any) -> bool:
    return inspect.isroutine(value)


def _is_union(tp: Any) -> bool:
    origin = get_origin(tp)
    return origin is Union or origin is types.UnionType


def deref_optional(tp: Any) -> Any:
    """``Optional[X]`` -> ``X``; any other annotation is returned unchanged."""
    if not _is_union(tp):
        return tp
    args = [a for a in get_args(tp) if a is not type(None)]
    if len(args) == 1:
        return args[0]
    return tp


def get_hints(obj: Any, *, include_extras: bool = False) -> dict[str, Any]:
    try:
        return get_type_hints(obj, include_extras=include_extras)
    except TypeError:
        return {}
    except NameError as exc:
        name = getattr(obj, "__qualname__", repr(obj))
        logger.warning("'%s' name error retrieving %s type hints", exc.name, name)
        return {}


def identity_of(value: Any) -> TypeIdentity:
    """Return ``value`` if it already describes a type (or signature), else its runtime type."""
    if inspect.isclass(value) or is_routine(value) or get_origin(value) is not None:
        return value
    return type(value)


def abstract_identity(tp: TypeIdentity) -> TypeIdentity | None:
    """Unwrap one ``Optional`` level and succeed only when the result is an interface."""
    if tp is None:
        return None
    candidate = deref_optional(tp)
    if not is_interface(candidate):
        return None
    return candidate


def return_type(func: Any) -> Any:
    hints = get_hints(func)
    if "return" in hints:
        return hints["return"]
    try:
        return inspect.signature(func).return_annotation
    except (TypeError, ValueError):
        return _EMPTY


def is_multi_return(annotation: Any) -> bool:
    """``tuple[T, E]`` (two or more explicit items) marks a result plus an error channel."""
    if get_origin(annotation) is not tuple:
        return False
    args = get_args(annotation)
    return len(args) >= 2 and args[-1] is not Ellipsis


def concrete_identity(tp: TypeIdentity) -> TypeIdentity | None:
    """Normalize a class or factory to the type it produces.

    - classes are returned as-is
    - routines yield their first return type; ones without a return type fail
    - an ``Optional`` result is dereferenced one level
    """
    if tp is None:
        return None

    result = tp
    if is_routine(tp):
        result = return_type(tp)
        if result is _EMPTY or result is None or result is type(None):
            name = getattr(tp, "__qualname__", repr(tp))
            logger.debug("Function %s doesn't have a return type", name)
            return None
        if is_multi_return(result):
            logger.debug("Function %s has more than one return value, only the first is handled", tp)
            result = get_args(result)[0]

    result = deref_optional(result)
    if isinstance(result, str):
        # unresolved forward reference
        return None
    return result


def indirect(tp: TypeIdentity) -> TypeIdentity:
    """Step one level into optionals, containers and ``type[X]`` to reach the element type."""
    if _is_union(tp):
        return deref_optional(tp)

    origin = get_origin(tp)
    args = [a for a in get_args(tp) if a is not Ellipsis]
    if origin is None or not args:
        return tp

    if inspect.isclass(origin) and issubclass(origin, collections.abc.Mapping):
        return args[-1]
    return args[0]


def zero_value(annotation: Any) -> Any:
    """Python stand-in for a typed zero value: ``T()`` for builtin value types, else ``None``."""
    if annotation in _ZERO_CONSTRUCTIBLE:
        return annotation()

    origin = get_origin(annotation)
    if origin in _ZERO_CONSTRUCTIBLE:
        return origin()
    return None


def describe(value: Any) -> str:
    tp = identity_of(value)
    return getattr(tp, "__qualname__", None) or repr(tp)
