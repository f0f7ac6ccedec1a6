"""Unit tests for the field reflector (enumerate/read/write by name)."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, ClassVar

import pytest

from statesaver.core.errors import FieldAccessError
from statesaver.core.reflector import (
    AttributeFieldAccessor,
    FieldAccessor,
    FieldDescriptor,
    accessor_for,
    enumerate_fields,
    read_field,
    register_accessor,
    unregister_accessor,
    write_field,
)
from statesaver.core.values import Vector3


@dataclass
class Base:
    speed: float = 0.0
    label: str = ""


@dataclass
class Child(Base):
    count: int = 0
    spawn: Vector3 = field(default_factory=Vector3)
    registry: ClassVar[int] = 7


class Plain:
    def __init__(self) -> None:
        self.visible = 1
        self._hidden = "h"
        self.__mangled = 2.5

    def mangled(self) -> float:
        return self.__mangled


class Slotted:
    __slots__ = ("a", "b")

    def __init__(self) -> None:
        self.a = 1


class Flaky:
    def __init__(self) -> None:
        self.good = 1
        self.bad = 2
        self.after = 3

    def __getattribute__(self, name: str) -> Any:
        if name == "bad":
            raise RuntimeError("boom")
        return object.__getattribute__(self, name)


@dataclass(frozen=True)
class Frozen:
    value: int = 1


def _names(target: Any) -> list[str]:
    return [d.name for d in enumerate_fields(target)]


def test_declaration_order_across_inheritance() -> None:
    """Base-class fields come first, ClassVars are not instance fields."""
    assert _names(Child()) == ["speed", "label", "count", "spawn"]


def test_private_and_mangled_fields_are_included() -> None:
    """Non-public fields are enumerated under their real attribute names."""
    assert _names(Plain()) == ["visible", "_hidden", "_Plain__mangled"]


def test_unset_slots_are_skipped() -> None:
    """A declared slot with no value is not a readable field yet."""
    assert _names(Slotted()) == ["a"]
    assert accessor_for(Slotted()).has_field("b")


def test_unreadable_field_does_not_abort_enumeration() -> None:
    """A field whose read raises is skipped and the rest still come through."""
    assert _names(Flaky()) == ["good", "after"]
    result = read_field(Flaky(), "bad")
    assert result.is_err()
    assert isinstance(result.unwrap_err(), FieldAccessError)


def test_enumeration_is_lazy_and_restartable() -> None:
    """Each call yields a fresh generator over the current values."""
    obj = Child(speed=2.0)
    fields = enumerate_fields(obj)
    assert isinstance(fields, Iterator)
    first = list(fields)
    obj.speed = 3.0
    second = list(enumerate_fields(obj))
    assert first[0] == FieldDescriptor("speed", 2.0, float)
    assert second[0].value == 3.0


def test_declared_types_come_from_annotations_then_values() -> None:
    """Annotated fields report their hint; unannotated scalars are untyped."""
    child = accessor_for(Child())
    assert child.declared_type("spawn") is Vector3
    assert child.declared_type("count") is int
    plain = accessor_for(Plain())
    assert plain.declared_type("_hidden") is Any
    assert plain.declared_type("visible") is Any


def test_unannotated_composites_keep_their_value_type() -> None:
    """Without a hint, only non-scalar values say anything about the field."""
    obj = Plain()
    obj.visible = Vector3(1, 2, 3)  # type: ignore[assignment]
    obj.extra = None  # type: ignore[attr-defined]
    accessor = accessor_for(obj)
    assert accessor.declared_type("visible") is Vector3
    assert accessor.declared_type("extra") is Any


def test_write_existing_field() -> None:
    """Writing by exact name updates the live object."""
    obj = Child()
    assert write_field(obj, "label", "run") is True
    assert obj.label == "run"


def test_write_unknown_field_is_dropped() -> None:
    """A name the type does not have is silently dropped, never created."""
    obj = Child()
    assert write_field(obj, "renamed_field", 5) is False
    assert not hasattr(obj, "renamed_field")


def test_write_to_frozen_dataclass_raises_field_access_error() -> None:
    """A setter that refuses the write surfaces as FieldAccessError."""
    with pytest.raises(FieldAccessError):
        write_field(Frozen(), "value", 2)


def test_registered_accessor_overrides_introspection() -> None:
    """Types with a registered factory use it instead of attribute reflection."""

    class Bag:
        def __init__(self) -> None:
            self.data: dict[str, Any] = {"hp": 10}

    class BagAccessor:
        def __init__(self, bag: Bag) -> None:
            self.bag = bag

        def list(self) -> Iterator[FieldDescriptor]:
            for k, v in self.bag.data.items():
                yield FieldDescriptor(k, v, type(v))

        def read(self, name: str) -> Any:
            return self.bag.data[name]

        def write(self, name: str, value: Any) -> bool:
            if name not in self.bag.data:
                return False
            self.bag.data[name] = value
            return True

        def declared_type(self, name: str) -> Any:
            return type(self.bag.data[name])

        def has_field(self, name: str) -> bool:
            return name in self.bag.data

    register_accessor(Bag, BagAccessor)
    try:
        bag = Bag()
        accessor = accessor_for(bag)
        assert isinstance(accessor, FieldAccessor)
        assert not isinstance(accessor, AttributeFieldAccessor)
        assert _names(bag) == ["hp"]
        assert write_field(bag, "hp", 3) and bag.data["hp"] == 3
    finally:
        unregister_accessor(Bag)
