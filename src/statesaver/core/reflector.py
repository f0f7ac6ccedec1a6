"""Field reflector: enumerate, read and write an object's instance fields.

The orchestrator never touches attributes directly; it goes through a
:class:`FieldAccessor`. The default, :class:`AttributeFieldAccessor`, uses
Python introspection and sees, in this order:

1. annotated attributes across the MRO (base classes first, ``ClassVar``
   excluded),
2. ``__slots__`` across the MRO (private slots under their mangled name),
3. any remaining entries of the instance ``__dict__`` in insertion order.

Private (``_x``) and name-mangled (``_Cls__x``) fields are included. Only
fields that are actually set on the instance are listed.

Types that need something else (computed state, a C extension, a proxy) can
register their own accessor with :func:`register_accessor`.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, ClassVar, Protocol, get_origin, get_type_hints, runtime_checkable

from statesaver.core.errors import FieldAccessError
from statesaver.core.result import Result, err, ok
from statesaver.core.settings import get_logger

logger = get_logger("statesaver.reflector")

_UNSET = object()
_UNTYPED_SCALARS = (type(None), bool, int, float, str)


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """One instance field as seen at enumeration time."""

    name: str
    value: Any
    declared_type: Any


@runtime_checkable
class FieldAccessor(Protocol):
    """Capability the snapshot engine needs from a target object."""

    def list(self) -> Iterator[FieldDescriptor]: ...

    def read(self, name: str) -> Any: ...

    def write(self, name: str, value: Any) -> bool: ...

    def declared_type(self, name: str) -> Any: ...

    def has_field(self, name: str) -> bool: ...


# --------------------------------------------------------------------------- #
# Type layout (cached per class)
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class _TypeLayout:
    ordered: tuple[str, ...]
    slots: frozenset[str]
    hints: Mapping[str, Any]


def _mangle(cls: type, name: str) -> str:
    if name.startswith("__") and not name.endswith("__"):
        return f"_{cls.__name__.lstrip('_')}{name}"
    return name


def _is_classvar(annotation: Any) -> bool:
    if isinstance(annotation, str):
        return annotation.startswith(("ClassVar", "typing.ClassVar"))
    return annotation is ClassVar or get_origin(annotation) is ClassVar


@lru_cache(maxsize=256)
def _layout(cls: type) -> _TypeLayout:
    try:
        hints = get_type_hints(cls)
    except Exception as exc:  # unresolvable forward refs, broken annotations
        logger.debug("Falling back to raw annotations for %s: %s", cls.__qualname__, exc)
        hints = {}

    ordered: list[str] = []
    seen: set[str] = set()
    slots: set[str] = set()

    def _add(name: str) -> None:
        if name not in seen:
            seen.add(name)
            ordered.append(name)

    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        for name, annotation in inspect.get_annotations(klass).items():
            if _is_classvar(hints.get(name, annotation)):
                continue
            _add(name)

    for klass in reversed(cls.__mro__):
        raw = klass.__dict__.get("__slots__", ())
        for name in (raw,) if isinstance(raw, str) else raw:
            if name in ("__dict__", "__weakref__"):
                continue
            mangled = _mangle(klass, name)
            slots.add(mangled)
            _add(mangled)

    resolved = {
        name: tp for name, tp in hints.items() if name in seen and not _is_classvar(tp)
    }
    return _TypeLayout(ordered=tuple(ordered), slots=frozenset(slots), hints=resolved)


# --------------------------------------------------------------------------- #
# Default accessor
# --------------------------------------------------------------------------- #


class AttributeFieldAccessor:
    """Introspection-based :class:`FieldAccessor` for ordinary Python objects."""

    def __init__(self, target: Any) -> None:
        self.target = target
        self._layout = _layout(type(target))

    def _instance_dict(self) -> dict[str, Any]:
        try:
            return object.__getattribute__(self.target, "__dict__")
        except AttributeError:
            return {}

    def _class_data_default(self, name: str) -> bool:
        """True if ``name`` resolves to a plain class-level value (not a method/descriptor)."""
        for klass in type(self.target).__mro__:
            if name in klass.__dict__:
                attr = klass.__dict__[name]
                return not (callable(attr) or inspect.isdatadescriptor(attr))
        return False

    def names(self) -> list[str]:
        """Return the field names currently set on the target, in declaration order."""
        instance = self._instance_dict()
        out: list[str] = []
        for name in self._layout.ordered:
            if name in instance or name in self._layout.slots or self._class_data_default(name):
                out.append(name)
        for name in instance:
            if name not in self._layout.ordered:
                out.append(name)
        return out

    def has_field(self, name: str) -> bool:
        if name in self._layout.ordered:
            return True
        return name in self._instance_dict()

    def read(self, name: str) -> Any:
        """Return the field's current value.

        Raises
        ------
        AttributeError
            If the field is declared but not set (an empty slot).
        FieldAccessError
            If reading raised anything else.
        """
        try:
            return getattr(self.target, name)
        except AttributeError:
            raise
        except Exception as exc:
            raise FieldAccessError(name, f"{type(exc).__name__}: {exc}") from exc

    def write(self, name: str, value: Any) -> bool:
        """Set the field; return False (and write nothing) if it does not exist."""
        if not self.has_field(name):
            return False
        try:
            setattr(self.target, name, value)
        except Exception as exc:
            raise FieldAccessError(name, f"{type(exc).__name__}: {exc}") from exc
        return True

    def declared_type(self, name: str) -> Any:
        hinted = self._layout.hints.get(name)
        if hinted is not None:
            return hinted
        current = getattr(self.target, name, _UNSET)
        # An unannotated scalar may hold any scalar next time (0 now, 5.5 later)
        if current is _UNSET or type(current) in _UNTYPED_SCALARS:
            return Any
        return type(current)

    def list(self) -> Iterator[FieldDescriptor]:
        for name in self.names():
            try:
                value = self.read(name)
            except AttributeError:
                logger.debug("Field %r is declared but unset; skipping", name)
                continue
            except FieldAccessError as exc:
                logger.warning("Could not read field: %s. %s", name, exc.reason)
                continue
            yield FieldDescriptor(name=name, value=value, declared_type=self.declared_type(name))


# --------------------------------------------------------------------------- #
# Accessor registry and module-level helpers
# --------------------------------------------------------------------------- #

AccessorFactory = Callable[[Any], FieldAccessor]

_ACCESSORS: dict[type, AccessorFactory] = {}


def register_accessor(cls: type, factory: AccessorFactory) -> None:
    """Use ``factory(target)`` instead of introspection for ``cls`` and its subclasses."""
    _ACCESSORS[cls] = factory


def unregister_accessor(cls: type) -> None:
    _ACCESSORS.pop(cls, None)


def accessor_for(target: Any) -> FieldAccessor:
    """Return the accessor for ``target``; a target that is already one is returned as-is."""
    if isinstance(target, AttributeFieldAccessor):
        return target
    for klass in type(target).__mro__:
        factory = _ACCESSORS.get(klass)
        if factory is not None:
            return factory(target)
    return AttributeFieldAccessor(target)


def enumerate_fields(target: Any) -> Iterator[FieldDescriptor]:
    """Lazily yield every readable instance field of ``target``.

    Unreadable fields are logged and skipped. Call again to restart.
    """
    yield from accessor_for(target).list()


def read_field(target: Any, name: str) -> Result[Any, FieldAccessError]:
    """Read one field without raising."""
    try:
        return ok(accessor_for(target).read(name))
    except AttributeError as exc:
        return err(FieldAccessError(name, f"not set: {exc}"))
    except FieldAccessError as exc:
        return err(exc)


def write_field(target: Any, name: str, value: Any) -> bool:
    """Write one field by exact name; a missing field drops the value and returns False."""
    written = accessor_for(target).write(name, value)
    if not written:
        logger.debug("No field %r on %s; value dropped", name, type(target).__qualname__)
    return written


__all__ = [
    "AttributeFieldAccessor",
    "FieldAccessor",
    "FieldDescriptor",
    "accessor_for",
    "enumerate_fields",
    "read_field",
    "register_accessor",
    "unregister_accessor",
    "write_field",
]
