"""Host value kinds that get a structured encoding.

These are the composite types the codec recognizes. Everything else a field
may hold is either a scalar, an enum, or passed through as-is.

All four are immutable value objects, so equality is component-wise and a
snapshot can never alias a live object's state.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class Vector3:
    """A 3-component float vector (positions, directions, scales)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def one(cls) -> Vector3:
        return cls(1.0, 1.0, 1.0)


@dataclass(frozen=True, slots=True)
class Color:
    """An RGBA color with float channels, nominally in ``[0, 1]``."""

    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 0.0


@dataclass(frozen=True, slots=True)
class Quaternion:
    """A rotation stored as ``(x, y, z, w)``.

    The zero-argument constructor gives the all-zero quaternion, which is the
    type's default value and *not* a valid rotation; use `identity()` for
    "no rotation".
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 0.0

    @classmethod
    def identity(cls) -> Quaternion:
        return cls(0.0, 0.0, 0.0, 1.0)


@dataclass(frozen=True, slots=True)
class Transform:
    """Position, rotation and scale of an object in one composite value."""

    position: Vector3 = field(default_factory=Vector3.zero)
    rotation: Quaternion = field(default_factory=Quaternion.identity)
    scale: Vector3 = field(default_factory=Vector3.one)


__all__ = ["Color", "Quaternion", "Transform", "Vector3"]
