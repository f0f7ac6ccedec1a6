"""Value codec: typed runtime values <-> portable JSON-ready values.

Encoded values form a closed set of kinds (see :class:`ValueKind`):

- **scalar**     : ``None``, ``bool``, ``int``, ``float``, ``str`` pass through.
- **enum**       : the member's *name* (never its value), so reordering members
  or renumbering them does not break old snapshots. Renaming still does.
- **vector3 / color / quaternion / transform** : fixed-shape records from
  :mod:`statesaver.core.contracts.encoded`.
- **sequence / mapping** : lists, tuples and str-keyed dicts whose items are
  themselves encodable.

Anything else is rejected with :class:`EncodeError` instead of being written
unencoded and failing later. So are non-finite floats (``inf``, ``nan``),
which JSON cannot hold.

Decoding is driven by the *declared* type of the target field. Only an
untyped target (``Any``) falls back to the stored shape: a dict whose keys
are exactly those of a record is rebuilt into its value object. Both
directions are pure functions.
"""

from __future__ import annotations

import dataclasses
import math
import types
from enum import Enum
from typing import Annotated, Any, Union, get_args, get_origin

from pydantic import ValidationError

from statesaver.core.contracts.encoded import (
    ColorRecord,
    QuaternionRecord,
    TransformRecord,
    Vector3Record,
)
from statesaver.core.errors import DecodeError, DecodeErrorKind, EncodeError
from statesaver.core.result import Result, err, ok
from statesaver.core.values import Color, Quaternion, Transform, Vector3


class ValueKind(str, Enum):
    """The closed set of encodings a field value can take."""

    SCALAR = "scalar"
    ENUM = "enum"
    VECTOR3 = "vector3"
    COLOR = "color"
    QUATERNION = "quaternion"
    TRANSFORM = "transform"
    SEQUENCE = "sequence"
    MAPPING = "mapping"


_RecordType = type[Vector3Record | ColorRecord | QuaternionRecord | TransformRecord]

_RECORDS: dict[type, _RecordType] = {
    Vector3: Vector3Record,
    Color: ColorRecord,
    Quaternion: QuaternionRecord,
    Transform: TransformRecord,
}

# Exact key sets, for rebuilding records under an untyped target
_RECORD_KEYS: dict[frozenset[str], _RecordType] = {
    frozenset(record.model_fields): record for record in _RECORDS.values()
}

_RECORD_KINDS: dict[type, ValueKind] = {
    Vector3: ValueKind.VECTOR3,
    Color: ValueKind.COLOR,
    Quaternion: ValueKind.QUATERNION,
    Transform: ValueKind.TRANSFORM,
}

_SCALARS = (bool, int, float, str, type(None))
_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no"})


def kind_of(runtime_type: type) -> ValueKind | None:
    """Return the encoding kind for values of ``runtime_type``, or ``None``."""
    if not isinstance(runtime_type, type):
        return None
    # Enum first: IntEnum/StrEnum members are also ints/strs.
    if issubclass(runtime_type, Enum):
        return ValueKind.ENUM
    for composite, kind in _RECORD_KINDS.items():
        if issubclass(runtime_type, composite):
            return kind
    if issubclass(runtime_type, _SCALARS):
        return ValueKind.SCALAR
    if issubclass(runtime_type, list | tuple):
        return ValueKind.SEQUENCE
    if issubclass(runtime_type, dict):
        return ValueKind.MAPPING
    return None


# --------------------------------------------------------------------------- #
# Encode
# --------------------------------------------------------------------------- #


def encode(value: Any, runtime_type: type | None = None) -> Any:
    """Convert ``value`` into its portable, JSON-ready form.

    Parameters
    ----------
    value : Any
        The live field value.
    runtime_type : type | None
        Type used to pick the encoding. Defaults to ``type(value)``.

    Raises
    ------
    EncodeError
        If the value (or one of its items) has no portable encoding.
    """
    tp = runtime_type if runtime_type is not None else type(value)
    kind = kind_of(tp)

    if kind is ValueKind.ENUM:
        return value.name
    if kind is ValueKind.SCALAR:
        _require_finite(value, tp)
        return value
    if kind in (ValueKind.VECTOR3, ValueKind.COLOR, ValueKind.QUATERNION, ValueKind.TRANSFORM):
        record_type = next((r for c, r in _RECORDS.items() if isinstance(value, c)), None)
        if record_type is None:
            raise EncodeError(tp, reason=f"{type(value).__name__} value is not a {tp.__name__}")
        _require_finite(dataclasses.astuple(value), tp)
        return record_type.from_value(value).to_json()
    if kind is ValueKind.SEQUENCE:
        return [encode(item) for item in value]
    if kind is ValueKind.MAPPING:
        if not all(isinstance(k, str) for k in value):
            raise EncodeError(tp)
        return {k: encode(v) for k, v in value.items()}
    raise EncodeError(tp)


def _require_finite(value: Any, tp: Any) -> None:
    if isinstance(value, float) and not math.isfinite(value):
        raise EncodeError(tp, reason=f"{value!r} has no JSON form")
    if isinstance(value, tuple):
        for item in value:
            _require_finite(item, tp)


# --------------------------------------------------------------------------- #
# Decode
# --------------------------------------------------------------------------- #


def _mismatch(target_type: Any, reason: str) -> DecodeError:
    return DecodeError(DecodeErrorKind.TYPE_MISMATCH, target_type, reason)


def _decode_untyped(encoded: Any) -> Any:
    if isinstance(encoded, list):
        return [_decode_untyped(item) for item in encoded]
    if not isinstance(encoded, dict):
        return encoded
    record_type = _RECORD_KEYS.get(frozenset(encoded))
    if record_type is not None:
        try:
            return record_type.model_validate(encoded).to_value()
        except ValidationError:
            pass  # record keys but not record values: an ordinary dict
    return {k: _decode_untyped(v) for k, v in encoded.items()}


def _decode_union(encoded: Any, target_type: Any, members: tuple[Any, ...]) -> Any:
    if encoded is None and type(None) in members:
        return None
    candidates = [m for m in members if m is not type(None)]
    last: DecodeError | None = None
    for member in candidates:
        try:
            return decode(encoded, member)
        except DecodeError as exc:
            last = exc
    if len(candidates) == 1 and last is not None:
        raise last
    raise _mismatch(target_type, f"{encoded!r} matches no member of the union")


def _decode_enum(encoded: Any, target_type: type[Enum]) -> Enum:
    if isinstance(encoded, target_type):
        return encoded
    if not isinstance(encoded, str):
        raise _mismatch(target_type, f"enum members are stored by name, got {encoded!r}")
    try:
        return target_type[encoded]
    except KeyError:
        raise DecodeError(
            DecodeErrorKind.UNKNOWN_ENUM_MEMBER,
            target_type,
            f"{encoded!r} is not a member of {target_type.__name__}",
        ) from None


def _decode_record(encoded: Any, target_type: type) -> Any:
    record_type = next(r for c, r in _RECORDS.items() if issubclass(target_type, c))
    if isinstance(encoded, target_type):
        return encoded
    if not isinstance(encoded, dict):
        raise _mismatch(target_type, f"expected a {record_type.__name__} object, got {encoded!r}")
    try:
        return record_type.model_validate(encoded).to_value()
    except ValidationError as exc:
        reason = f"record does not match: {exc.error_count()} error(s)"
        raise _mismatch(target_type, reason) from exc


def _coerce_bool(encoded: Any) -> bool:
    if isinstance(encoded, bool):
        return encoded
    if isinstance(encoded, int) and encoded in (0, 1):
        return bool(encoded)
    if isinstance(encoded, str):
        lowered = encoded.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise _mismatch(bool, f"cannot interpret {encoded!r} as a bool")


def _coerce_int(encoded: Any) -> int:
    if isinstance(encoded, int) and not isinstance(encoded, bool):
        return encoded
    if isinstance(encoded, float) and encoded.is_integer():
        return int(encoded)
    if isinstance(encoded, str):
        try:
            return int(encoded.strip())
        except ValueError:
            pass
    raise _mismatch(int, f"cannot interpret {encoded!r} as an int")


def _coerce_float(encoded: Any) -> float:
    if isinstance(encoded, int | float) and not isinstance(encoded, bool):
        return float(encoded)
    if isinstance(encoded, str):
        try:
            return float(encoded.strip())
        except ValueError:
            pass
    raise _mismatch(float, f"cannot interpret {encoded!r} as a float")


def _coerce_str(encoded: Any) -> str:
    if isinstance(encoded, str):
        return encoded
    if isinstance(encoded, bool | int | float):
        return str(encoded)
    raise _mismatch(str, f"cannot interpret {encoded!r} as a str")


_PRIMITIVE_COERCIONS = {
    bool: _coerce_bool,
    int: _coerce_int,
    float: _coerce_float,
    str: _coerce_str,
}


def _decode_generic(encoded: Any, target_type: Any, origin: Any, args: tuple[Any, ...]) -> Any:
    if origin in (list, tuple):
        if not isinstance(encoded, list | tuple):
            raise _mismatch(target_type, f"expected a list, got {encoded!r}")
        if origin is tuple and args and args[-1] is not Ellipsis:
            if len(args) != len(encoded):
                raise _mismatch(target_type, f"expected {len(args)} items, got {len(encoded)}")
            return tuple(decode(item, arg) for item, arg in zip(encoded, args, strict=True))
        item_type = args[0] if args else Any
        items = [decode(item, item_type) for item in encoded]
        return tuple(items) if origin is tuple else items
    if origin is dict:
        if not isinstance(encoded, dict):
            raise _mismatch(target_type, f"expected an object, got {encoded!r}")
        value_type = args[1] if len(args) == 2 else Any
        return {k: decode(v, value_type) for k, v in encoded.items()}
    return decode(encoded, origin)


def decode(encoded: Any, target_type: Any) -> Any:
    """Rebuild a value of ``target_type`` from its encoded form.

    Parameters
    ----------
    encoded : Any
        A value as read back from the store.
    target_type : Any
        The declared type of the field being restored. ``Any``, ``object`` and
        unannotated fields return ``encoded`` as stored, except that dicts
        shaped exactly like a record become the matching value object.

    Raises
    ------
    DecodeError
        ``UNKNOWN_ENUM_MEMBER`` for an enum name that no longer exists, or
        ``TYPE_MISMATCH`` when the value cannot be coerced to the target type.
    """
    if target_type is Any or target_type is object or target_type is None:
        return _decode_untyped(encoded)

    origin = get_origin(target_type)
    if origin is Annotated:
        return decode(encoded, get_args(target_type)[0])
    if origin is Union or origin is types.UnionType:
        return _decode_union(encoded, target_type, get_args(target_type))
    if origin is not None:
        return _decode_generic(encoded, target_type, origin, get_args(target_type))

    if not isinstance(target_type, type):
        return encoded
    if target_type is type(None):
        if encoded is None:
            return None
        raise _mismatch(target_type, f"expected null, got {encoded!r}")

    if issubclass(target_type, Enum):
        return _decode_enum(encoded, target_type)
    if kind_of(target_type) in (
        ValueKind.VECTOR3,
        ValueKind.COLOR,
        ValueKind.QUATERNION,
        ValueKind.TRANSFORM,
    ):
        return _decode_record(encoded, target_type)
    if encoded is None:
        raise _mismatch(target_type, "null is not allowed here")

    coerce = _PRIMITIVE_COERCIONS.get(target_type)
    if coerce is not None:
        return coerce(encoded)
    if target_type in (list, tuple):
        return _decode_generic(encoded, target_type, target_type, ())
    if target_type is dict:
        return _decode_generic(encoded, target_type, dict, ())

    if isinstance(encoded, target_type):
        return encoded
    try:
        return target_type(encoded)
    except (TypeError, ValueError) as exc:
        raise _mismatch(target_type, str(exc)) from exc


def try_decode(encoded: Any, target_type: Any) -> Result[Any, DecodeError]:
    """Non-raising :func:`decode` used by the per-field apply loop."""
    try:
        return ok(decode(encoded, target_type))
    except DecodeError as exc:
        return err(exc)


# --------------------------------------------------------------------------- #
# Defaults
# --------------------------------------------------------------------------- #


def is_default_value(value: Any) -> bool:
    """Return True if ``value`` is its type's zero value and so is not captured.

    Defaults are ``None``, ``False``, numeric zero, the all-zero
    ``Vector3``/``Color``/``Quaternion``, and enum members whose value is
    ``0``. Strings, containers and transforms are never default.
    """
    if value is None:
        return True
    if isinstance(value, Enum):
        inner = value.value
        return isinstance(inner, int) and not isinstance(inner, bool) and inner == 0
    if isinstance(value, bool):
        return value is False
    if isinstance(value, int | float | complex):
        return value == 0
    if isinstance(value, Vector3 | Color | Quaternion):
        return value == type(value)()
    return False


__all__ = [
    "ValueKind",
    "decode",
    "encode",
    "is_default_value",
    "kind_of",
    "try_decode",
]
