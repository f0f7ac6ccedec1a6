"""Fixed-shape records for composite field values.

Each recognized composite kind has exactly one JSON shape:

- vector3    : ``{"x", "y", "z"}``
- color      : ``{"r", "g", "b", "a"}``
- quaternion : ``{"x", "y", "z", "w"}``
- transform  : ``{"position": vector3, "rotation": quaternion, "scale": vector3}``

Records forbid extra keys and require every component, so a record written for
one kind never silently decodes as another. Validation failures surface as
``pydantic.ValidationError``; the codec turns them into a per-field
``DecodeError``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict

from statesaver.core.values import Color, Quaternion, Transform, Vector3


class _Record(BaseModel):
    """Shared config: exact shape, immutable once built."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    def to_json(self) -> dict[str, Any]:
        """Return the plain-dict form stored under a snapshot variable."""
        return self.model_dump(mode="json")


class Vector3Record(_Record):
    x: float
    y: float
    z: float

    @classmethod
    def from_value(cls, v: Vector3) -> Vector3Record:
        return cls(x=v.x, y=v.y, z=v.z)

    def to_value(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)


class ColorRecord(_Record):
    r: float
    g: float
    b: float
    a: float

    @classmethod
    def from_value(cls, c: Color) -> ColorRecord:
        return cls(r=c.r, g=c.g, b=c.b, a=c.a)

    def to_value(self) -> Color:
        return Color(self.r, self.g, self.b, self.a)


class QuaternionRecord(_Record):
    x: float
    y: float
    z: float
    w: float

    @classmethod
    def from_value(cls, q: Quaternion) -> QuaternionRecord:
        return cls(x=q.x, y=q.y, z=q.z, w=q.w)

    def to_value(self) -> Quaternion:
        return Quaternion(self.x, self.y, self.z, self.w)


class TransformRecord(_Record):
    """Nested record; the transform's scale is its local scale."""

    position: Vector3Record
    rotation: QuaternionRecord
    scale: Vector3Record

    @classmethod
    def from_value(cls, t: Transform) -> TransformRecord:
        return cls(
            position=Vector3Record.from_value(t.position),
            rotation=QuaternionRecord.from_value(t.rotation),
            scale=Vector3Record.from_value(t.scale),
        )

    def to_value(self) -> Transform:
        return Transform(
            position=self.position.to_value(),
            rotation=self.rotation.to_value(),
            scale=self.scale.to_value(),
        )


__all__ = ["ColorRecord", "QuaternionRecord", "TransformRecord", "Vector3Record"]
