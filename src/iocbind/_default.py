"""Process-wide default container and free functions delegating to it."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._container import Container


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._container import Ref


_default = Container()


def default_container() -> Container:
    return _default


def bind(*definition: Any) -> bool:
    return _default.bind(*definition)


def singleton(definition: Any, resolver: Callable[..., Any] | None = None) -> bool:
    return _default.singleton(definition, resolver)


def instance(value: Any) -> bool:
    return _default.instance(value)


def is_bound(candidate: Any) -> bool:
    return _default.is_bound(candidate)


def make(abstract: Any, *parameters: Any, **overrides: Any) -> Any:
    return _default.make(abstract, *parameters, **overrides)


def make_to(target: Ref[Any], *parameters: Any, **overrides: Any) -> None:
    _default.make_to(target, *parameters, **overrides)


def call(function: Callable[..., Any], *parameters: Any, **overrides: Any) -> list[Any]:
    return _default.call(function, *parameters, **overrides)


def tag(tag: str, *bindings: Any) -> bool:
    return _default.tag(tag, *bindings)


def tagged(tag: str) -> list[Any]:
    return _default.tagged(tag)


def create_child_container() -> Container:
    return _default.create_child_container()


def parent_container() -> Container | None:
    return _default.parent


def clear_instances() -> None:
    _default.clear_instances()


def reset() -> None:
    _default.reset()
