from __future__ import annotations

import inspect
import logging
from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from ._config import ContainerConfig
from ._invocable import Invocable
from ._registry import Binding, BindingKind, BindingRegistry
from ._resolver import Resolver
from ._types import (
    abstract_identity,
    concrete_identity,
    describe,
    identity_of,
    is_constructible,
    is_protocol,
    is_routine,
)


if TYPE_CHECKING:
    from collections.abc import Callable

    from ._types import TypeIdentity


logger = logging.getLogger(__name__)

T = TypeVar("T")


class Ref(Generic[T]):
    """Caller-owned receiver for ``Container.make_to``.

    Example:
      service = Ref(ServiceAbstract)
      container.make_to(service)
      service.value.message()

    """

    def __init__(self, tp: type[T] | Any, value: T | None = None) -> None:
        self.type = tp
        self.value = value

    def __repr__(self) -> str:
        return f"Ref({describe(self.type)}, value={self.value!r})"

    @property
    def is_set(self) -> bool:
        return self.value is not None


class Container:
    """Runtime service registry and dependency resolver.

    - bind classes, factories or interface -> implementation pairs
    - singletons and pre-built instances
    - constructor, factory-argument and field injection
    - child containers that fall back to their parent for failed look-ups
    - tags grouping bindings resolvable together.

    Containers are not safe for concurrent mutation: serialize ``bind``,
    ``make`` and ``reset`` calls on the same container (and its parents)
    when sharing it between threads.
    """

    def __init__(self, config: ContainerConfig | None = None) -> None:
        self.config = config or ContainerConfig()
        self._registry = BindingRegistry()
        self._resolver = Resolver(self)
        self._parent: Container | None = None

    @property
    def registry(self) -> BindingRegistry:
        return self._registry

    @property
    def resolver(self) -> Resolver:
        return self._resolver

    @property
    def parent(self) -> Container | None:
        return self._parent

    def bind(self, *definition: Any) -> bool:
        """Add a binding to the container.

        Function binding, registered under the factory's return type:
          container.bind(new_service)

        Concrete binding, from a class or an instance (only its type is used):
          container.bind(ServiceConcrete)
          container.bind(ServiceConcrete())

        Abstract -> concrete binding, the concrete side being a class, an instance or a factory:
          container.bind(ServiceAbstract, ServiceConcrete)
          container.bind(ServiceAbstract, new_service)

        """
        if len(definition) not in (1, 2):
            logger.warning("bind() takes one or two definitions, got %d", len(definition))
            return False

        if len(definition) == 1:
            if is_routine(definition[0]):
                return self._add_function_binding(definition[0])
            return self._add_concrete_binding(definition[0])

        abstract, concrete = definition

        abstract_type = abstract_identity(identity_of(abstract))
        if abstract_type is None:
            logger.warning("Failed to get type of abstract: %s", describe(abstract))
            return False

        concrete_type = concrete_identity(identity_of(concrete))
        if concrete_type is None:
            logger.warning("Failed to get type of concrete: %s", describe(concrete))
            return False

        if is_routine(concrete):
            invocable = Invocable(concrete)
        else:
            if not is_constructible(concrete_type):
                logger.warning("Concrete %s cannot be instantiated", describe(concrete_type))
                return False
            invocable = Invocable(concrete_type)

        if not _conforms(concrete_type, abstract_type):
            logger.warning(
                "Implementation %s does not conform to %s",
                describe(concrete_type),
                describe(abstract_type),
            )
            return False

        self._registry.add_binding(
            abstract_type,
            Binding(
                kind=BindingKind.ABSTRACT,
                abstract_type=abstract_type,
                concrete_type=concrete_type,
                resolver_function=concrete if is_routine(concrete) else None,
                is_function_resolver=is_routine(concrete),
                invocable=invocable,
            ),
        )
        return True

    def singleton(self, definition: Any, resolver: Callable[..., Any] | None = None) -> bool:
        """Bind a type that is only instantiated once; later resolutions return that instance.

        Example:
          container.singleton(create_service)                  # registered under its return type
          container.singleton(ServiceConcrete)                 # plain construction
          container.singleton(ServiceConcrete, create_service) # registered under the type, built by the resolver

        """
        if is_routine(definition) and resolver is None:
            singleton_type = concrete_identity(definition)
            if singleton_type is None:
                logger.warning(
                    "Singleton provider %s needs a return annotation to register the singleton under; "
                    "it will not be registered in the container.",
                    describe(definition),
                )
                return False

            self._registry.add_singleton_binding(
                singleton_type,
                Binding(
                    kind=BindingKind.SINGLETON,
                    abstract_type=singleton_type,
                    concrete_type=singleton_type,
                    resolver_function=definition,
                    is_function_resolver=True,
                    invocable=Invocable(definition),
                ),
            )
            return True

        singleton_type = concrete_identity(identity_of(definition))
        if singleton_type is None or not inspect.isclass(singleton_type):
            logger.warning("Failed to get type of singleton %s; it will not be registered.", describe(definition))
            return False

        if resolver is None:
            if not is_constructible(singleton_type):
                logger.warning(
                    "Singleton %s is abstract and has no resolver; it will not be registered.",
                    describe(singleton_type),
                )
                return False

            self._registry.add_singleton_binding(
                singleton_type,
                Binding(
                    kind=BindingKind.SINGLETON,
                    abstract_type=singleton_type,
                    concrete_type=singleton_type,
                    invocable=Invocable(singleton_type),
                ),
            )
            return True

        if not is_routine(resolver):
            logger.warning(
                "Trying to register singleton %s with a resolver that is not a function; it will not be registered.",
                describe(definition),
            )
            return False

        self._registry.add_singleton_binding(
            singleton_type,
            Binding(
                kind=BindingKind.SINGLETON,
                abstract_type=singleton_type,
                concrete_type=singleton_type,
                resolver_function=resolver,
                is_function_resolver=True,
                invocable=Invocable(resolver),
            ),
        )
        return True

    def instance(self, value: Any) -> bool:
        """Register an already built ``value`` as the singleton for its type."""
        instance_type = type(value)

        self._registry.add_singleton_binding(
            instance_type,
            Binding(
                kind=BindingKind.SINGLETON,
                abstract_type=instance_type,
                concrete_type=instance_type,
                invocable=Invocable(instance_type),
            ),
        )
        self._resolver.seed(instance_type, value)
        return True

    def is_bound(self, candidate: Any) -> bool:
        """Check whether ``candidate`` resolves to a binding here or in a parent container."""
        return self.find_binding(candidate) is not None

    def __contains__(self, candidate: Any) -> bool:
        return self.is_bound(candidate)

    def find_binding(self, candidate: Any) -> tuple[Container, Binding] | None:
        """Return the container owning the binding ``candidate`` refers to, and the binding."""
        container: Container | None = self
        while container is not None:
            key = container.registry.lookup(candidate)
            if key is not None:
                return container, container.registry.bindings[key]
            container = container.parent
        return None

    @overload
    def make(self, abstract: type[T], *parameters: Any, **overrides: Any) -> T | None: ...

    @overload
    def make(self, abstract: Callable[..., T], *parameters: Any, **overrides: Any) -> T | None: ...

    @overload
    def make(self, abstract: Any, *parameters: Any, **overrides: Any) -> Any: ...

    def make(self, abstract: Any, *parameters: Any, **overrides: Any) -> Any:
        """Resolve a new (or the singleton) instance of ``abstract``.

        ``parameters`` fill the factory or constructor positionally where their
        type matches exactly; ``overrides`` fill parameters by name. Returns
        ``None`` when nothing is bound for ``abstract``.

        Example:
          service = container.make(ServiceAbstract)
          service = container.make(ServiceAbstract, "a custom message")

        """
        found = self.find_binding(abstract)
        if found is None:
            logger.warning("Failed to resolve binding for abstract type %s", describe(abstract))
            return None

        owner, binding = found
        return owner.resolver.resolve(binding, *parameters, **overrides)

    def make_to(self, target: Ref[Any], *parameters: Any, **overrides: Any) -> None:
        """Resolve ``target.type`` and store the result in ``target.value``."""
        if not isinstance(target, Ref):
            logger.warning(
                "Call to Container.make_to(), the target must be a Ref to your receiving value. "
                "Ex; service = Ref(ServiceAbstract); container.make_to(service)"
            )
            return

        resolved = self.make(target.type, *parameters, **overrides)
        if resolved is None:
            return

        target.value = resolved

    def call(self, function: Callable[..., Any], *parameters: Any, **overrides: Any) -> list[Any]:
        """Call ``function`` with its arguments injected; returns every value it returned."""
        invocable = Invocable(function)
        result = invocable.call_with(self._resolver, *parameters, **overrides)
        return invocable.as_results(result)

    def tag(self, tag: str, *bindings: Any) -> bool:
        """Group already bound types under ``tag``.

        Example:
          container.bind(new_user_post_views_stat_service)
          container.bind(new_page_views_stat_service)
          container.tag("StatServices", UserPostViewsStatService, PageViewsStatService)
          container.tagged("StatServices")

        """
        if not bindings:
            return False

        tagged_types: list[TypeIdentity] = []
        for candidate in bindings:
            found = self.find_binding(candidate)
            if found is None:
                continue
            _, binding = found
            tagged_types.append(binding.abstract_type)

        if not tagged_types:
            return False

        return self._registry.add_tagged(tag, tagged_types)

    def tagged(self, tag: str) -> list[Any]:
        """Resolve every binding tagged with ``tag``, in tagging order."""
        resolved = []
        for tagged_type in self._registry.tagged_keys(tag):
            instance = self.make(tagged_type)
            if instance is None:
                continue
            resolved.append(instance)
        return resolved

    def create_child_container(self) -> Container:
        """Create a container whose failed look-ups fall back to this one."""
        child = Container()
        child._parent = self  # noqa: SLF001
        return child

    def clear_instances(self) -> None:
        """Drop resolved singletons; they are rebuilt on their next resolution."""
        self._resolver.clear()

    def reset(self) -> None:
        """Drop every binding, tag and resolved singleton, and detach from the parent."""
        self._registry.clear()
        self._resolver.clear()
        self._parent = None

    def _add_function_binding(self, factory: Callable[..., Any]) -> bool:
        return_type = concrete_identity(factory)
        if return_type is None:
            logger.warning("Trying to register binding %s but it doesn't have a return type", describe(factory))
            return False

        self._registry.add_binding(
            return_type,
            Binding(
                kind=BindingKind.FUNCTION,
                abstract_type=return_type,
                concrete_type=return_type,
                resolver_function=factory,
                is_function_resolver=True,
                invocable=Invocable(factory),
            ),
        )
        return True

    def _add_concrete_binding(self, concrete: Any) -> bool:
        concrete_type = concrete_identity(identity_of(concrete))
        if not is_constructible(concrete_type):
            logger.warning("Failed to get a constructible type from %s", describe(concrete))
            return False

        self._registry.add_binding(
            concrete_type,
            Binding(
                kind=BindingKind.CONCRETE,
                abstract_type=concrete_type,
                concrete_type=concrete_type,
                invocable=Invocable(concrete_type),
            ),
        )
        return True


def _conforms(impl: Any, abstract: type) -> bool:
    """Nominal check for ABCs, member presence for protocols.

    Types that are not classes (e.g. typing forms returned by a factory) are accepted.
    """
    if not inspect.isclass(impl) or impl is abstract:
        return True

    if abstract in getattr(impl, "__mro__", ()):
        return True

    if not is_protocol(abstract):
        return issubclass(impl, abstract)

    members = [
        name
        for klass in abstract.__mro__
        if is_protocol(klass)
        for name, attr in klass.__dict__.items()
        if not name.startswith("_") and inspect.isfunction(attr)
    ]
    return all(hasattr(impl, name) for name in members)
