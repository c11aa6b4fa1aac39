from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ._types import identity_of, indirect


@dataclass(frozen=True)
class TypeDescriptor:
    """Human-readable names of a type.

    ``full_name`` is ``path.qualname``, or empty for types without a module.
    """

    name: str
    path: str
    full_name: str
    type: Any = field(compare=False, repr=False)

    def save(self) -> None:
        type_descriptors.save(self)


class TypeDescriptorCache:
    """Process-wide set of saved descriptors, keyed by full name. Safe to share between threads."""

    def __init__(self) -> None:
        self._descriptors: dict[str, TypeDescriptor] = {}
        self._lock = threading.Lock()

    def of(self, value: Any) -> TypeDescriptor:
        tp = indirect(identity_of(value))
        name = getattr(tp, "__name__", None) or repr(tp)
        path = getattr(tp, "__module__", None) or ""
        qualname = getattr(tp, "__qualname__", None) or name
        full_name = f"{path}.{qualname}" if path else ""
        return TypeDescriptor(name=name, path=path, full_name=full_name, type=tp)

    def has(self, value: Any) -> bool:
        descriptor = self.of(value)
        with self._lock:
            return descriptor.full_name in self._descriptors

    def save(self, descriptor: TypeDescriptor) -> None:
        # first save for a name wins
        with self._lock:
            self._descriptors.setdefault(descriptor.full_name, descriptor)

    def clear(self) -> None:
        with self._lock:
            self._descriptors.clear()


type_descriptors = TypeDescriptorCache()
