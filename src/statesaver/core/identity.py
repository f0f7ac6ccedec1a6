"""Object identity: the key a target's snapshots are filed under.

The derived identity is the target's fully-qualified type name followed by
``id(target)``. That number is only meaningful while the object is alive, so a
derived identity does **not** survive a restart or the object being rebuilt.

Callers that need snapshots to outlive the process should supply a stable key,
either by passing ``identity=`` explicitly to the orchestrator or by giving the
object a ``__statesaver_id__`` attribute (or property) returning a string.
"""

from __future__ import annotations

from typing import Any

STABLE_ID_ATTR = "__statesaver_id__"


def type_name(target: Any) -> str:
    """Return ``module.QualName`` for the target's concrete runtime type."""
    cls = type(target)
    module = cls.__module__
    if module in ("builtins", "__main__"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def derive_identity(target: Any) -> str:
    """Return the ephemeral, per-instance identity for ``target``."""
    return f"{type_name(target)}{id(target)}"


def object_identity(target: Any) -> str:
    """Return the identity to file ``target``'s snapshots under.

    A non-empty string ``__statesaver_id__`` on the object wins; otherwise the
    ephemeral identity from :func:`derive_identity` is used.
    """
    stable = getattr(target, STABLE_ID_ATTR, None)
    if callable(stable):
        stable = stable()
    if isinstance(stable, str) and stable.strip():
        return stable.strip()
    return derive_identity(target)


__all__ = ["STABLE_ID_ATTR", "derive_identity", "object_identity", "type_name"]
