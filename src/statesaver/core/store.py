"""File-backed snapshot store.

The store is a single UTF-8 JSON file (see
:mod:`statesaver.core.contracts.snapshot` for its shape). There is no cache:
every call reads the file, and every mutation rewrites it in full.

Write path
----------
1. Load and validate the whole document (corrupt data aborts here).
2. Apply the change in memory.
3. Serialize into a temporary file in the same directory, flush and fsync.
4. ``os.replace`` it over the real file.

A failure at any step leaves the original file byte-for-byte unchanged. There
is no locking: two overlapping writers race, and the last rename wins.

Single-object files
-------------------
A file whose top level is one group (``{"targetId": ..., "states": [...]}``)
is accepted on read and keyed by its ``targetId``. Writes always produce the
identity-keyed mapping.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from statesaver.core.contracts.snapshot import Snapshot, SnapshotGroup, StoreDocument
from statesaver.core.errors import CorruptStoreError, InvalidSnapshotNameError
from statesaver.core.settings import get_logger, load_settings

logger = get_logger("statesaver.store")


def _looks_like_single_group(payload: dict[str, Any]) -> bool:
    return "targetId" in payload and isinstance(payload.get("states"), list)


class SnapshotStore:
    """Keyed collection of snapshot groups persisted to one JSON file."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path: Path = Path(path) if path is not None else load_settings().store_path

    # ------------------------------- Read API -------------------------------

    def load_all(self) -> dict[str, SnapshotGroup]:
        """Return every group in the store, keyed by identity.

        Returns
        -------
        dict[str, SnapshotGroup]
            Empty when the file does not exist or is blank.

        Raises
        ------
        CorruptStoreError
            If the file cannot be read, is not JSON, or does not match the
            store shape. No partial data is ever returned.
        """
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise CorruptStoreError(self.path, f"unreadable: {exc}") from exc
        if not text.strip():
            return {}
        try:
            payload = json.loads(text)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(self.path, f"invalid JSON: {exc}") from exc
        if payload is None:
            return {}
        if not isinstance(payload, dict):
            raise CorruptStoreError(
                self.path, f"top level must be an object, got {type(payload).__name__}"
            )

        try:
            if _looks_like_single_group(payload):
                group = SnapshotGroup.model_validate(payload)
                return {group.identity: group}
            return dict(StoreDocument.model_validate(payload).root)
        except ValidationError as exc:
            raise CorruptStoreError(self.path, f"invalid store shape: {exc}") from exc

    def identities(self) -> list[str]:
        """Return every identity that has at least one group, in store order."""
        return list(self.load_all())

    def list_names(self, identity: str) -> list[str]:
        """Return snapshot names for ``identity`` in store order (empty if absent)."""
        group = self.load_all().get(identity)
        return group.names() if group is not None else []

    def get(self, identity: str, name: str) -> Snapshot | None:
        """Return the snapshot matching both ``identity`` and ``name``, if any."""
        group = self.load_all().get(identity)
        return group.find(name) if group is not None else None

    # ------------------------------ Write API -------------------------------

    def upsert(self, identity: str, name: str, variables: dict[str, Any]) -> Snapshot:
        """Create or overwrite snapshot ``name`` under ``identity`` and persist.

        Other identities and other snapshot names are left as they were.
        A blank ``name`` raises :class:`InvalidSnapshotNameError` before the
        store is read.
        """
        if not name.strip():
            raise InvalidSnapshotNameError(name)
        groups = self.load_all()
        group = groups.get(identity)
        if group is None:
            group = SnapshotGroup(identity=identity)
            groups[identity] = group
        replaced = group.find(name) is not None
        snap = group.upsert(name, variables)
        self._write(groups)
        logger.info(
            "%s snapshot %r for %s (%d variables)",
            "Overwrote" if replaced else "Saved",
            name,
            identity,
            len(variables),
        )
        return snap

    def delete(self, identity: str, name: str) -> bool:
        """Remove one snapshot; drop the group if it becomes empty.

        Returns False, without touching the file, if there was nothing to remove.
        """
        groups = self.load_all()
        group = groups.get(identity)
        if group is None or not group.remove(name):
            return False
        if not group.snapshots:
            del groups[identity]
        self._write(groups)
        logger.info("Deleted snapshot %r for %s", name, identity)
        return True

    def _write(self, groups: dict[str, SnapshotGroup]) -> None:
        """Atomically replace the backing file with ``groups``."""
        text = StoreDocument(root=groups).to_json_text()
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise


__all__ = ["SnapshotStore"]
