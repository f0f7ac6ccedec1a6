"""
Capture/apply orchestration: the two operations callers actually use.

Flow Overview
-------------
**Capture** (``StateSaver.capture``)
    reflect fields → drop defaults → encode each value → ``FIELD&<name>`` keys
    → ``SnapshotStore.upsert`` (atomic full-file rewrite).

**Apply** (``StateSaver.apply``)
    ``SnapshotStore.get`` → for each ``FIELD`` entry: look up the declared type
    → decode → write back.

Failure policy
--------------
- Per-field problems (unreadable field, value with no encoding, decode
  mismatch, raising setter) are logged with the field name and expected type
  and recorded; the remaining fields always proceed.
- Store problems (`CorruptStoreError`, I/O errors) and a missing snapshot
  (`SnapshotNotFoundError`) abort the call before anything is mutated.
- A stored field the target no longer has is dropped without an error. That is
  how renamed or removed fields are tolerated.

Each call runs synchronously to completion on the calling thread. Calls must
not overlap on the same target or store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from statesaver.core.codec import encode, is_default_value, try_decode
from statesaver.core.contracts.snapshot import Snapshot
from statesaver.core.errors import EncodeError, FieldAccessError, SnapshotNotFoundError, type_label
from statesaver.core.identity import object_identity, type_name
from statesaver.core.keys import KeySource, field_key, parse_key
from statesaver.core.reflector import accessor_for
from statesaver.core.settings import get_logger, load_settings
from statesaver.core.store import SnapshotStore

logger = get_logger("statesaver.saver")


@dataclass
class ApplyReport:
    """What happened to each stored variable during one :meth:`StateSaver.apply`.

    Attributes
    ----------
    identity, name : str
        The snapshot that was applied.
    applied : list[str]
        Fields decoded and written successfully.
    dropped : list[str]
        Stored fields the target does not have; their values were discarded.
    skipped : list[str]
        Raw keys that are not plain fields (e.g. ``PROP&...``) and were left alone.
    failed : dict[str, str]
        Field name -> error message for decode or write failures.
    """

    identity: str
    name: str
    applied: list[str] = field(default_factory=list)
    dropped: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        """True when no field failed (dropped and skipped entries are not failures)."""
        return not self.failed


class StateSaver:
    """Capture named snapshots of an object's fields and apply them back."""

    def __init__(self, store: SnapshotStore | None = None, default_name: str | None = None) -> None:
        self.store = store if store is not None else SnapshotStore()
        self.default_name = default_name or load_settings().default_state_name

    def identity_of(self, target: Any) -> str:
        return object_identity(target)

    def _resolve_name(self, name: str | None) -> str:
        cleaned = (name or "").strip()
        return cleaned or self.default_name

    # ------------------------------- Capture --------------------------------

    def capture(
        self, target: Any, name: str | None = "", *, identity: str | None = None
    ) -> Snapshot:
        """Snapshot every non-default field of ``target`` under ``name``.

        Parameters
        ----------
        target : Any
            The live object to read. It is never mutated.
        name : str | None
            Snapshot name; blank falls back to ``default_name``. An existing
            snapshot with the same name for this identity is overwritten.
        identity : str | None
            Explicit store key; derived from ``target`` when omitted.

        Returns
        -------
        Snapshot
            The stored snapshot.
        """
        state_name = self._resolve_name(name)
        key = identity or self.identity_of(target)
        logger.info("Target type: %s", type_name(target))

        variables: dict[str, Any] = {}
        for desc in accessor_for(target).list():
            if is_default_value(desc.value):
                continue
            try:
                variables[field_key(desc.name)] = encode(desc.value)
            except EncodeError as exc:
                logger.warning(
                    "Skipping field %r (%s): %s",
                    desc.name,
                    type_label(desc.declared_type),
                    exc.with_field(desc.name),
                )

        return self.store.upsert(key, state_name, variables)

    # -------------------------------- Apply ---------------------------------

    def apply(
        self, target: Any, name: str | None = "", *, identity: str | None = None
    ) -> ApplyReport:
        """Write snapshot ``name`` back onto ``target``, field by field.

        A blank ``name`` means the default name, as in :meth:`capture`.

        Raises
        ------
        SnapshotNotFoundError
            If no such snapshot exists for the identity; nothing is mutated.
        CorruptStoreError
            If the store cannot be read; nothing is mutated.
        """
        key = identity or self.identity_of(target)
        state_name = self._resolve_name(name)
        snap = self.store.get(key, state_name)
        if snap is None:
            raise SnapshotNotFoundError(key, state_name)

        report = ApplyReport(identity=key, name=state_name)
        accessor = accessor_for(target)

        for raw_key, encoded in snap.variables.items():
            parsed = parse_key(raw_key)
            if parsed is None or parsed.source is not KeySource.FIELD:
                logger.debug("Leaving non-field variable %r to its owner", raw_key)
                report.skipped.append(raw_key)
                continue

            field_name = parsed.name
            if not accessor.has_field(field_name):
                logger.debug("No field %r on %s; value dropped", field_name, type_name(target))
                report.dropped.append(field_name)
                continue

            expected = accessor.declared_type(field_name)
            decoded = try_decode(encoded, expected)
            if decoded.is_err():
                error = decoded.unwrap_err().with_field(field_name)
                logger.warning("Could not restore field %r: %s", field_name, error)
                report.failed[field_name] = str(error)
                continue

            try:
                written = accessor.write(field_name, decoded.unwrap())
            except FieldAccessError as exc:
                logger.warning(
                    "Could not write field %r (expected %s): %s",
                    field_name,
                    type_label(expected),
                    exc.reason,
                )
                report.failed[field_name] = str(exc)
                continue
            (report.applied if written else report.dropped).append(field_name)

        logger.info(
            "Applied snapshot %r to %s: %d applied, %d dropped, %d skipped, %d failed",
            state_name,
            key,
            len(report.applied),
            len(report.dropped),
            len(report.skipped),
            len(report.failed),
        )
        return report

    # -------------------------------- Query ---------------------------------

    def list_names(self, identity: str) -> list[str]:
        """Return the snapshot names stored for ``identity``, in store order."""
        return self.store.list_names(identity)

    def list_names_for(self, target: Any) -> list[str]:
        """Return the snapshot names stored for ``target``'s identity."""
        return self.store.list_names(self.identity_of(target))


__all__ = ["ApplyReport", "StateSaver"]
