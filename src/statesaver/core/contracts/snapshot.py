"""Snapshot contracts: the on-disk shape of the snapshot store.

The store file is one JSON object keyed by object identity::

    {
      "<identity>": {
        "targetId": "<identity>",
        "states": [
          {"stateName": "<name>", "variables": {"FIELD&speed": 5.0, ...}},
          ...
        ]
      },
      ...
    }

Python code uses snake_case attribute names; the camelCase aliases above are
what gets read and written (``model_dump(by_alias=True)``).

Invariants
----------
- A group holds at most one snapshot per name. :meth:`SnapshotGroup.upsert`
  overwrites an existing entry in place, keeping its position.
- Variable keys are opaque to these models; provenance tags are handled by
  :mod:`statesaver.core.keys`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, model_validator


class Snapshot(BaseModel):
    """A named set of encoded field values for one object."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="stateName", min_length=1)
    variables: dict[str, Any] = Field(default_factory=dict)


class SnapshotGroup(BaseModel):
    """All snapshots filed under one object identity, in capture order."""

    model_config = ConfigDict(populate_by_name=True)

    identity: str = Field(alias="targetId")
    snapshots: list[Snapshot] = Field(default_factory=list, alias="states")

    @model_validator(mode="after")
    def _unique_names(self) -> SnapshotGroup:
        """Collapse duplicate names written by older tools; the last one wins."""
        merged: dict[str, Snapshot] = {}
        for snap in self.snapshots:
            if snap.name in merged:
                merged[snap.name].variables = snap.variables
            else:
                merged[snap.name] = snap
        if len(merged) != len(self.snapshots):
            self.snapshots = list(merged.values())
        return self

    def find(self, name: str) -> Snapshot | None:
        return next((s for s in self.snapshots if s.name == name), None)

    def names(self) -> list[str]:
        return [s.name for s in self.snapshots]

    def upsert(self, name: str, variables: dict[str, Any]) -> Snapshot:
        """Overwrite the snapshot called ``name`` or append a new one."""
        existing = self.find(name)
        if existing is not None:
            existing.variables = dict(variables)
            return existing
        snap = Snapshot(name=name, variables=dict(variables))
        self.snapshots.append(snap)
        return snap

    def remove(self, name: str) -> bool:
        before = len(self.snapshots)
        self.snapshots = [s for s in self.snapshots if s.name != name]
        return len(self.snapshots) != before


class StoreDocument(RootModel[dict[str, SnapshotGroup]]):
    """The whole backing file: identity -> group."""

    root: dict[str, SnapshotGroup] = Field(default_factory=dict)

    def to_json_text(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2) + "\n"


__all__ = ["Snapshot", "SnapshotGroup", "StoreDocument"]
