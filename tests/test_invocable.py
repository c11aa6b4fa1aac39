from dataclasses import dataclass
from typing import Annotated, ClassVar, NamedTuple, Optional, Union

import pytest

from iocbind import Container, ContainerConfig, Inject, Invocable, InvocableKind
from mock_services import (
    AnotherServiceAbstract,
    ServiceAbstract,
    ServiceConcrete,
    new_another_service,
)


class Controller:
    service: ServiceAbstract
    another: Annotated[Optional[AnotherServiceAbstract], Inject] = None
    fallback: Optional[AnotherServiceAbstract] = None
    retries: int
    _private: ServiceAbstract
    name: ClassVar[str] = "controller"


class MarkedController:
    service: Annotated[ServiceAbstract, Inject]
    another: AnotherServiceAbstract


class Point(NamedTuple):
    x: int
    y: int = 2


@dataclass
class Node:
    value: int = 0
    child: Optional["Node"] = None


@dataclass
class Holder:
    service: Optional[ServiceAbstract] = None


@pytest.fixture
def container():
    c = Container()
    c.bind(ServiceAbstract, ServiceConcrete)
    c.bind(new_another_service)
    return c


def test_invocable_kind_follows_target():
    assert Invocable(ServiceConcrete).kind is InvocableKind.CLASS
    assert Invocable(new_another_service).kind is InvocableKind.FUNCTION
    assert Invocable(ServiceConcrete().message).kind is InvocableKind.FUNCTION


def test_invocable_rejects_non_invocable_targets():
    with pytest.raises(TypeError, match="is not an invocable type"):
        Invocable(Union[int, str])


def test_instantiate_introspects_once():
    invocable = Invocable(ServiceConcrete)
    assert not invocable.is_instantiated

    invocable.instantiate()
    signature = invocable.signature
    invocable.instantiate()

    assert invocable.is_instantiated
    assert invocable.signature is signature
    assert list(signature.parameters) == ["text", "another_service"]


def test_instantiate_with_requires_a_class(container):
    with pytest.raises(TypeError):
        Invocable(new_another_service).instantiate_with(container.resolver)


def test_call_with_injects_function_arguments(container):
    def handler(service: ServiceAbstract, another: AnotherServiceAbstract) -> str:
        return f"{service.message()} / {another.message()}"

    assert container.call(handler) == ["Hello World! / Another service"]


def test_call_with_provided_arguments(container):
    def greet(greeting: str, service: ServiceAbstract) -> str:
        return f"{greeting}, {service.message()}"

    assert container.call(greet, "Hi") == ["Hi, Hello World!"]
    assert container.call(greet, greeting="Hey") == ["Hey, Hello World!"]


@pytest.mark.parametrize(
    ("function", "expected"),
    [
        (lambda: None, []),
        (lambda: 5, [5]),
    ],
)
def test_call_result_without_annotations(container, function, expected):
    assert container.call(function) == expected


def test_call_result_shapes(container):
    def nothing() -> None:
        pass

    def single() -> int:
        return 1

    def pair() -> tuple[int, Optional[Exception]]:
        return 1, None

    def maybe() -> Optional[int]:
        return None

    assert container.call(nothing) == []
    assert container.call(single) == [1]
    assert container.call(pair) == [1, None]
    assert container.call(maybe) == [None]


def test_call_method_with(container):
    invocable = Invocable(ServiceConcrete)

    result = invocable.call_method_with("intercept", container.resolver)

    assert result == "Another service"


def test_call_method_with_requires_a_class(container):
    with pytest.raises(TypeError):
        Invocable(new_another_service).call_method_with("message", container.resolver)


def test_fields_are_wired_after_construction(container):
    container.bind(Controller)

    controller = container.make(Controller)

    assert isinstance(controller.service, ServiceConcrete)
    assert controller.another.message() == "Another service"
    assert controller.fallback is None
    assert controller.retries == 0
    assert not hasattr(controller, "_private")
    assert Controller.name == "controller"


def test_fields_set_to_none_by_the_constructor_are_kept(container):
    container.bind(Holder)

    assert isinstance(container.make(Holder).service, ServiceConcrete)
    assert container.make(Holder, service=None).service is None


def test_self_referencing_optional_field_does_not_recurse():
    c = Container()
    c.bind(Node)

    node = c.make(Node)

    assert node == Node(0, None)


def test_self_referencing_field_takes_keyword_override():
    c = Container()
    c.bind(Node)

    node = c.make(Node, child=Node(1))

    assert node.child == Node(1, None)


def test_only_marked_fields_are_wired_when_configured():
    c = Container(ContainerConfig(only_inject_marked_fields=True))
    c.bind(ServiceAbstract, ServiceConcrete)
    c.bind(new_another_service)
    c.bind(MarkedController)

    controller = c.make(MarkedController)

    assert isinstance(controller.service, ServiceConcrete)
    assert not hasattr(controller, "another")


def test_marked_fields_are_wired_by_default(container):
    container.bind(MarkedController)

    controller = container.make(MarkedController)

    assert isinstance(controller.service, ServiceConcrete)
    assert controller.another.message() == "Another service"


def test_invocable_wrapping_instance_fills_its_fields(container):
    existing = Controller()
    existing.service = ServiceConcrete("preset")

    result = Invocable(existing).instantiate_with(container.resolver)

    assert result is existing
    assert existing.service.message() == "preset"
    assert existing.another.message() == "Another service"


def test_named_tuple_constructor_injection(container):
    container.instance(7)
    container.bind(Point)

    point = container.make(Point)

    assert point == Point(7, 7)


def test_constructor_parameter_typed_as_container_receives_it(container):
    class NeedsContainer:
        def __init__(self, container: Container):
            self.container = container

    container.bind(NeedsContainer)

    assert container.make(NeedsContainer).container is container
