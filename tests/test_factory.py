"""Tests for the substitution factory and constructor matching."""

from __future__ import annotations

import datetime
import threading

import pytest

from callscribe import factory as factory_module
from callscribe.factory import TestDoubleFactory
from callscribe.recording.errors import ConstructionError
from callscribe.recording.introspection import describe_constructor_arguments, match_constructor
from callscribe.recording.types import ConstructorParameterInfo
from tests.helpers import RecordingLogger, new_recorder
from tests.services import Repository, SqlRepository, Storage, StubRepository


class Widget:
    def __init__(self) -> None:
        self.ready = True


class Gadget:
    def __init__(self, name: str, count: int = 1) -> None:
        self.name = name
        self.count = count


class Meter:
    def __init__(self, reading: float) -> None:
        self.reading = reading


class Base:
    pass


class Derived(Base):
    pass


class Tagged:
    def __init__(self, *tags: str, **options: int) -> None:
        self.tags = tags
        self.options = options


class AwareWidget:
    def __init__(self, label: str) -> None:
        self.label = label
        self.seen: list[ConstructorParameterInfo] = []

    def constructor_called_with(self, parameters: list[ConstructorParameterInfo]) -> None:
        self.seen = list(parameters)


class PartialStore(Storage):
    def __init__(self) -> None:
        self.items: dict[str, object] = {}


class Exploder:
    def __init__(self, value: int) -> None:
        raise RuntimeError(f"refusing {value}")


@pytest.fixture
def factory():
    return TestDoubleFactory(logger=RecordingLogger())


@pytest.fixture
def fresh_singleton(monkeypatch):
    monkeypatch.setattr(TestDoubleFactory, "_instance", None)


def test_create_constructs_when_nothing_is_registered(factory):
    """Without substitutes the requested class is constructed with the arguments."""

    widget = factory.create(Widget)
    gadget = factory.create(Gadget, "lamp", count=3)

    assert type(widget) is Widget
    assert (gadget.name, gadget.count) == ("lamp", 3)


@pytest.mark.parametrize("builtin", [dict, int, str, list, bytearray, datetime.timedelta])
def test_create_constructs_builtins_without_signatures(factory, builtin):
    """Built-in types are constructed even when their signature cannot be read."""

    assert type(factory.create(builtin)) is builtin


def test_builtin_constructor_arguments_are_passed_through(factory):
    """Arguments reach built-in constructors; rejected ones become ConstructionError."""

    assert factory.create(int, "42") == 42
    assert factory.create(datetime.timedelta, days=2) == datetime.timedelta(days=2)

    with pytest.raises(ConstructionError) as info:
        factory.create(dict, 1, 2, 3)

    assert "(int, int, int)" in str(info.value)


def test_substitute_for_builtin_gets_positional_descriptors(factory):
    """Without a readable signature parameters are described by position."""

    stub = StubRepository()
    factory.set_one(Repository, stub)

    factory.create_as(Repository, dict, "x")

    assert [str(parameter) for parameter in stub.parameters] == ["arg0: str = x"]


def test_create_accepts_numeric_widening(factory):
    """An int may be passed where a float is declared."""

    assert factory.create(Meter, 3).reading == 3


def test_mismatched_arguments_raise_construction_error(factory):
    """Arguments that no constructor accepts are reported with their shapes."""

    with pytest.raises(ConstructionError) as info:
        factory.create(Gadget, 1, 2)

    assert "Gadget" in str(info.value)
    assert "(int, int)" in str(info.value)
    assert info.value.arguments == (1, 2)

    with pytest.raises(ConstructionError):
        factory.create(Gadget)


def test_capabilities_cannot_be_constructed(factory):
    """Requesting a Protocol or ABC without a substitute fails clearly."""

    with pytest.raises(ConstructionError) as info:
        factory.create(Repository)

    assert "register a substitute" in str(info.value)

    with pytest.raises(ConstructionError, match="abstract"):
        factory.create(PartialStore)


def test_constructor_exceptions_propagate(factory):
    """A constructor that raises is not wrapped by the factory."""

    with pytest.raises(RuntimeError, match="refusing 5"):
        factory.create(Exploder, 5)


def test_set_one_is_used_once_in_fifo_order(factory):
    """Queued substitutes are returned first in, first out, then construction resumes."""

    first, second = Widget(), Widget()
    factory.set_one(Widget, first)
    factory.set_one(Widget, second)

    assert factory.create(Widget) is first
    assert factory.create(Widget) is second
    third = factory.create(Widget)
    assert third is not first and third is not second


def test_queued_substitute_takes_precedence_over_always(factory):
    """set_one wins over set_always until its queue drains."""

    always, once = Widget(), Widget()
    factory.set_always(Widget, always)
    factory.set_one(Widget, once)

    assert factory.create(Widget) is once
    assert factory.create(Widget) is always
    assert factory.create(Widget) is always


def test_substitute_may_be_any_subtype(factory):
    """Any instance assignable to the requested type can be registered."""

    derived = Derived()
    factory.set_one(Base, derived)

    assert factory.create(Base) is derived


def test_clear_removes_one_type(factory):
    """clear drops queue and always substitute for that type only."""

    widget, gadget = Widget(), Gadget("kept")
    factory.set_always(Widget, widget)
    factory.set_one(Widget, Widget())
    factory.set_always(Gadget, gadget)

    factory.clear(Widget)

    assert factory.create(Widget) is not widget
    assert factory.create(Gadget) is gadget


def test_clear_all_removes_everything(factory):
    """clear_all empties every registration."""

    widget = Widget()
    factory.set_always(Widget, widget)
    factory.set_one(Base, Derived())

    factory.clear_all()

    assert factory.create(Widget) is not widget
    assert type(factory.create(Base)) is Base


def test_substitute_is_told_matching_constructor_parameters(factory):
    """A double registered for a capability learns the implementation's parameters."""

    stub = StubRepository()
    factory.set_one(Repository, stub)

    result = factory.create_as(Repository, SqlRepository, "arg1", 123)

    assert result is stub
    assert [parameter.name for parameter in stub.parameters] == ["name", "size"]
    assert [parameter.type for parameter in stub.parameters] == [str, int]
    assert [parameter.value for parameter in stub.parameters] == ["arg1", 123]


def test_substitute_gets_synthesized_names_without_a_match(factory):
    """Without a matching constructor parameters are named by position."""

    stub = StubRepository()
    factory.set_one(Repository, stub)

    factory.create(Repository, "config", 42, None)

    assert [str(parameter) for parameter in stub.parameters] == [
        "arg0: str = config",
        "arg1: int = 42",
        "arg2: object = None",
    ]


def test_freshly_constructed_objects_are_notified(factory):
    """Constructed instances implementing the hook see their own arguments."""

    widget = factory.create(AwareWidget, "front")

    assert [(parameter.name, parameter.value) for parameter in widget.seen] == [("label", "front")]


def test_notification_happens_for_every_create(factory):
    """An always substitute is told about each construction separately."""

    stub = StubRepository()
    factory.set_always(Repository, stub)

    factory.create_as(Repository, SqlRepository, "first", 1)
    factory.create_as(Repository, SqlRepository, "second", 2)

    assert [parameter.value for parameter in stub.parameters] == ["second", 2]


def test_recording_proxy_as_substitute_records_construction_and_calls(factory):
    """A wrapped double registered in the factory logs its construction and use."""

    transcript, recorder = new_recorder()
    factory.set_always(Repository, recorder.wrap(StubRepository(), capability=Repository))

    repository = factory.create_as(Repository, SqlRepository, "config", 42)
    repository.load()

    assert str(transcript) == (
        "🔧 Repository constructor called with:\n"
        "  🔸 name: config\n"
        "  🔸 size: 42\n\n"
        "🔧 load:\n"
        "  🔹 Returns: rows\n\n"
    )


def test_variadic_constructors_expand_parameters():
    """*args become indexed parameters and **kwargs keep their keys."""

    match = match_constructor(Tagged, ("a", "b"), {"limit": 3})

    assert match is not None
    assert [parameter.name for parameter in match.parameters] == ["tags[0]", "tags[1]", "limit"]
    assert [parameter.type for parameter in match.parameters] == [str, str, int]


def test_describe_arguments_uses_none_friendly_match():
    """None is accepted for any declared parameter type."""

    parameters = describe_constructor_arguments(Gadget, (None,))

    assert [(parameter.name, parameter.type) for parameter in parameters] == [("name", str)]


def test_instance_is_a_process_wide_singleton(fresh_singleton):
    """Concurrent first calls still observe a single factory."""

    barrier = threading.Barrier(8)
    seen: list[TestDoubleFactory] = []

    def worker() -> None:
        barrier.wait()
        seen.append(TestDoubleFactory.instance())

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(seen) == 8
    assert all(instance is seen[0] for instance in seen)
    assert TestDoubleFactory.instance() is seen[0]


def test_module_helpers_use_the_singleton(fresh_singleton):
    """Module-level helpers operate on TestDoubleFactory.instance()."""

    widget = Widget()
    factory_module.set_one(Widget, widget)

    assert factory_module.create(Widget) is widget

    factory_module.set_always(Base, Derived())
    factory_module.clear(Base)
    assert type(factory_module.create_as(Base, Derived)) is Derived

    factory_module.set_always(Widget, widget)
    factory_module.clear_all()
    assert factory_module.create(Widget) is not widget
