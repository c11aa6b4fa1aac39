"""Runtime service registry and dependency resolver.

This package provides an inversion-of-control container for Python: bind
classes, factories or interface -> implementation pairs, then let the container
build instances, injecting constructor arguments, factory parameters and
annotated fields from its other bindings.

Exports:
- `Container`: the registry and resolver; supports singletons, pre-built
  instances, tags and child containers that fall back to their parent.
- `Ref`: receiver for `Container.make_to`.
- `ContainerConfig` / `Inject`: strict resolution and marked-only field injection.
- `Invocable`: a class or function whose arguments are filled by a container.
- `ResolutionError`: raised when a factory reports an error, or in strict mode.
- `bind`, `make`, ...: free functions delegating to `default_container()`.
- `type_descriptors`: process-wide cache of human-readable type names.
"""

from ._config import ContainerConfig, Inject
from ._container import Container, Ref
from ._default import (
    bind,
    call,
    clear_instances,
    create_child_container,
    default_container,
    instance,
    is_bound,
    make,
    make_to,
    parent_container,
    reset,
    singleton,
    tag,
    tagged,
)
from ._descriptors import TypeDescriptor, TypeDescriptorCache, type_descriptors
from ._invocable import Invocable, InvocableKind
from ._registry import Binding, BindingKind, BindingRegistry
from ._resolver import ResolutionError, Resolver
from ._types import abstract_identity, concrete_identity, identity_of, indirect


__all__ = [
    "Binding",
    "BindingKind",
    "BindingRegistry",
    "Container",
    "ContainerConfig",
    "Inject",
    "Invocable",
    "InvocableKind",
    "Ref",
    "ResolutionError",
    "Resolver",
    "TypeDescriptor",
    "TypeDescriptorCache",
    "abstract_identity",
    "bind",
    "call",
    "clear_instances",
    "concrete_identity",
    "create_child_container",
    "default_container",
    "identity_of",
    "indirect",
    "instance",
    "is_bound",
    "make",
    "make_to",
    "parent_container",
    "reset",
    "singleton",
    "tag",
    "tagged",
    "type_descriptors",
]
