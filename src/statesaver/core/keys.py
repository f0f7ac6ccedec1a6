"""Provenance tags on snapshot variable keys.

Every entry under a snapshot's ``variables`` is keyed by a tagged string:

- ``FIELD&<name>``                 : a plain instance field captured by the core.
- ``PROP&<name>&<propertyKind>``   : a visible property captured by the host
  inspector bridge (e.g. ``PROP&m_Color&Color``).

The core only produces and applies ``FIELD`` keys. ``PROP`` keys (and any key
it does not recognize) are kept untouched in the store and skipped on apply.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

SEPARATOR = "&"


class KeySource(str, Enum):
    FIELD = "FIELD"
    PROP = "PROP"


@dataclass(frozen=True, slots=True)
class VariableKey:
    """A parsed variable key."""

    source: KeySource
    name: str
    property_kind: str | None = None

    def __str__(self) -> str:
        return format_key(self)


def field_key(name: str) -> str:
    """Return the store key for a plain field, e.g. ``FIELD&speed``."""
    return f"{KeySource.FIELD.value}{SEPARATOR}{name}"


def property_key(name: str, property_kind: str) -> str:
    """Return the store key for an inspector property, e.g. ``PROP&m_Size&Float``."""
    return f"{KeySource.PROP.value}{SEPARATOR}{name}{SEPARATOR}{property_kind}"


def format_key(key: VariableKey) -> str:
    if key.source is KeySource.PROP:
        return property_key(key.name, key.property_kind or "")
    return field_key(key.name)


def parse_key(raw: str) -> VariableKey | None:
    """Parse a stored variable key; return ``None`` if it carries no known tag.

    Field names may themselves contain ``&``: everything after the first
    separator is the name. Property keys split into at most three parts.
    """
    head, sep, rest = raw.partition(SEPARATOR)
    if not sep or not rest:
        return None
    if head == KeySource.FIELD.value:
        return VariableKey(KeySource.FIELD, rest)
    if head == KeySource.PROP.value:
        name, sep, kind = rest.partition(SEPARATOR)
        if not sep or not name:
            return None
        return VariableKey(KeySource.PROP, name, kind)
    return None


__all__ = [
    "KeySource",
    "VariableKey",
    "field_key",
    "format_key",
    "parse_key",
    "property_key",
]
