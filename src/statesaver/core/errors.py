"""Error taxonomy for the snapshot engine.

Two families live here:

- **Per-field errors** (`FieldAccessError`, `EncodeError`, `DecodeError`) are recovered by the
  orchestrator. They are logged with the field name and expected type, and the
  remaining fields of a capture/apply carry on.
- **Whole-operation errors** (`CorruptStoreError`, `SnapshotNotFoundError`,
  `InvalidSnapshotNameError`) abort the current call and leave the store and the target untouched.

A field that is missing on the target at write time is *not* an error: the
value is dropped and `write_field` returns ``False``.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any


def type_label(tp: Any) -> str:
    """Return a short, readable name for a declared type (used in messages)."""
    name = getattr(tp, "__qualname__", None) or getattr(tp, "__name__", None)
    return str(name) if name else repr(tp)


class StateSaverError(Exception):
    """Base class for every error raised by StateSaver."""


class FieldAccessError(StateSaverError):
    """Reading or writing one field raised inside the target object."""

    def __init__(self, field: str, reason: str) -> None:
        self.field = field
        self.reason = reason
        super().__init__(f"Could not access field {field!r}: {reason}")


class EncodeError(StateSaverError):
    """A field value has no portable encoding (not a scalar, enum or known composite)."""

    def __init__(
        self, value_type: Any, field: str | None = None, reason: str | None = None
    ) -> None:
        self.value_type = value_type
        self.field = field
        self.reason = reason
        where = f" for field {field!r}" if field else ""
        detail = f": {reason}" if reason else ""
        label = type_label(value_type)
        super().__init__(f"No portable encoding{where} for values of type {label}{detail}")

    def with_field(self, field: str) -> EncodeError:
        """Return a copy of this error annotated with the field it belongs to."""
        return EncodeError(self.value_type, field=field, reason=self.reason)


class DecodeErrorKind(str, Enum):
    """Why an encoded value could not be turned back into the declared type."""

    UNKNOWN_ENUM_MEMBER = "unknown_enum_member"
    TYPE_MISMATCH = "type_mismatch"


class DecodeError(StateSaverError):
    """An encoded value does not fit the target field's declared type."""

    def __init__(
        self,
        kind: DecodeErrorKind,
        expected_type: Any,
        reason: str,
        field: str | None = None,
    ) -> None:
        self.kind = kind
        self.expected_type = expected_type
        self.reason = reason
        self.field = field
        super().__init__(self._message())

    def _message(self) -> str:
        where = f" for field {self.field!r}" if self.field else ""
        expected = type_label(self.expected_type)
        return f"{self.kind.value}{where} (expected {expected}): {self.reason}"

    def with_field(self, field: str) -> DecodeError:
        """Return a copy of this error annotated with the field it belongs to."""
        return DecodeError(self.kind, self.expected_type, self.reason, field=field)


class CorruptStoreError(StateSaverError):
    """The backing store exists but cannot be parsed into snapshot groups."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Snapshot store {str(path)!r} is corrupt: {reason}")


class SnapshotNotFoundError(StateSaverError):
    """No snapshot with the requested name exists for the identity."""

    def __init__(self, identity: str, name: str) -> None:
        self.identity = identity
        self.name = name
        super().__init__(f"No snapshot named {name!r} for {identity!r}")


class InvalidSnapshotNameError(StateSaverError, ValueError):
    """A snapshot name is empty or whitespace and cannot be stored."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Snapshot names must not be blank, got {name!r}")


__all__ = [
    "CorruptStoreError",
    "DecodeError",
    "DecodeErrorKind",
    "EncodeError",
    "FieldAccessError",
    "InvalidSnapshotNameError",
    "SnapshotNotFoundError",
    "StateSaverError",
    "type_label",
]
