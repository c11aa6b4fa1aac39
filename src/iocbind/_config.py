from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, get_args, get_origin


class _InjectMarker:
    def __repr__(self) -> str:
        return "Inject"


Inject = _InjectMarker()
"""Marks an attribute for field injection: ``service: Annotated[Service, Inject]``."""


@dataclass
class ContainerConfig:
    """Settings read by the resolver.

    - only_inject_marked_fields: field auto-wiring only touches ``Annotated[T, Inject]`` attributes
    - strict: an unresolvable parameter raises ``ResolutionError`` instead of receiving a zero value
    """

    only_inject_marked_fields: bool = False
    strict: bool = False


def split_inject_marker(annotation: Any) -> tuple[Any, bool]:
    """Strip ``Annotated`` metadata, reporting whether the ``Inject`` marker was present."""
    if get_origin(annotation) is not Annotated:
        return annotation, False
    base, *metadata = get_args(annotation)
    return base, any(m is Inject for m in metadata)
