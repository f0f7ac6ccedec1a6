"""Unit tests for the file-backed snapshot store."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from statesaver.core.errors import CorruptStoreError, InvalidSnapshotNameError
from statesaver.core.store import SnapshotStore


def _read(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    return data


def test_missing_file_is_an_empty_store(tmp_path: Path) -> None:
    """No file yet means no snapshots, not an error."""
    store = SnapshotStore(tmp_path / "StateData.json")
    assert store.load_all() == {}
    assert store.list_names("anything") == []
    assert store.get("anything", "x") is None


def test_blank_file_is_an_empty_store(tmp_path: Path) -> None:
    """An empty or whitespace-only file is treated like a missing one."""
    path = tmp_path / "StateData.json"
    path.write_text("  \n", encoding="utf-8")
    assert SnapshotStore(path).load_all() == {}


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[1, 2, 3]",
        '{"Player1": {"targetId": "Player1", "states": "oops"}}',
        '{"Player1": {"states": []}}',
        '{"Player1": {"targetId": "Player1", "states": [{"variables": {}}]}}',
    ],
)
def test_malformed_file_raises_corrupt_store(tmp_path: Path, content: str) -> None:
    """Unparseable or wrongly-shaped data fails the whole load."""
    path = tmp_path / "StateData.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CorruptStoreError) as info:
        SnapshotStore(path).load_all()
    assert info.value.path == path


def test_upsert_writes_the_documented_shape(tmp_path: Path) -> None:
    """The file uses targetId/states/stateName/variables and keeps tags verbatim."""
    path = tmp_path / "nested" / "StateData.json"
    store = SnapshotStore(path)
    store.upsert("Player1", "checkpoint", {"FIELD&speed": 5.0, "PROP&m_Size&Float": "2"})

    assert _read(path) == {
        "Player1": {
            "targetId": "Player1",
            "states": [
                {
                    "stateName": "checkpoint",
                    "variables": {"FIELD&speed": 5.0, "PROP&m_Size&Float": "2"},
                }
            ],
        }
    }


def test_upsert_overwrites_by_name_in_place(tmp_path: Path) -> None:
    """Capturing twice under one name leaves one entry with the latest values."""
    store = SnapshotStore(tmp_path / "StateData.json")
    store.upsert("Player1", "a", {"FIELD&x": 1})
    store.upsert("Player1", "b", {"FIELD&x": 2})
    store.upsert("Player1", "a", {"FIELD&x": 3})

    assert store.list_names("Player1") == ["a", "b"]
    snap = store.get("Player1", "a")
    assert snap is not None and snap.variables == {"FIELD&x": 3}


def test_identities_are_isolated(tmp_path: Path) -> None:
    """Writing under A never creates or changes anything under B."""
    store = SnapshotStore(tmp_path / "StateData.json")
    store.upsert("B", "keep", {"FIELD&hp": 10})
    before = _read(store.path)["B"]

    store.upsert("A", "keep", {"FIELD&hp": 99})

    assert _read(store.path)["B"] == before
    assert store.identities() == ["B", "A"]
    assert store.get("A", "missing") is None


def test_single_group_file_is_accepted(tmp_path: Path) -> None:
    """A file holding one group directly is keyed by its targetId."""
    path = tmp_path / "single.json"
    path.write_text(
        json.dumps({"targetId": "Solo", "states": [{"stateName": "s", "variables": {}}]}),
        encoding="utf-8",
    )
    store = SnapshotStore(path)
    assert store.list_names("Solo") == ["s"]

    store.upsert("Solo", "t", {"FIELD&x": 1})
    assert set(_read(path)) == {"Solo"}
    assert store.list_names("Solo") == ["s", "t"]


def test_duplicate_names_on_disk_collapse_to_last(tmp_path: Path) -> None:
    """Older files with a repeated name load as one entry holding the last values."""
    path = tmp_path / "StateData.json"
    states = [
        {"stateName": "dup", "variables": {"FIELD&x": 1}},
        {"stateName": "dup", "variables": {"FIELD&x": 2}},
    ]
    path.write_text(json.dumps({"P": {"targetId": "P", "states": states}}), encoding="utf-8")
    store = SnapshotStore(path)
    assert store.list_names("P") == ["dup"]
    snap = store.get("P", "dup")
    assert snap is not None and snap.variables == {"FIELD&x": 2}


def test_failed_write_leaves_file_untouched(tmp_path: Path, monkeypatch: Any) -> None:
    """If the final rename fails, the old file survives and no temp file is left."""
    path = tmp_path / "StateData.json"
    store = SnapshotStore(path)
    store.upsert("P", "first", {"FIELD&x": 1})
    original = path.read_bytes()

    def _boom(src: Any, dst: Any) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("statesaver.core.store.os.replace", _boom)
    with pytest.raises(OSError, match="disk full"):
        store.upsert("P", "second", {"FIELD&x": 2})

    assert path.read_bytes() == original
    assert sorted(p.name for p in tmp_path.iterdir()) == ["StateData.json"]


def test_corrupt_store_is_not_overwritten_by_upsert(tmp_path: Path) -> None:
    """A write against corrupt data fails before anything is written."""
    path = tmp_path / "StateData.json"
    path.write_text("{broken", encoding="utf-8")
    with pytest.raises(CorruptStoreError):
        SnapshotStore(path).upsert("P", "x", {"FIELD&a": 1})
    assert path.read_text(encoding="utf-8") == "{broken"


def test_delete_removes_snapshot_and_empty_group(tmp_path: Path) -> None:
    """Deleting the last snapshot of an identity drops the whole group."""
    store = SnapshotStore(tmp_path / "StateData.json")
    store.upsert("P", "a", {})
    store.upsert("P", "b", {})

    assert store.delete("P", "a") is True
    assert store.list_names("P") == ["b"]
    assert store.delete("P", "missing") is False
    assert store.delete("P", "b") is True
    assert store.identities() == []


def test_non_ascii_round_trips(tmp_path: Path) -> None:
    """UTF-8 text is written without escaping and reads back unchanged."""
    store = SnapshotStore(tmp_path / "StateData.json")
    store.upsert("P", "état", {"FIELD&label": "héros ✓"})
    assert "héros ✓" in store.path.read_text(encoding="utf-8")
    snap = store.get("P", "état")
    assert snap is not None and snap.variables["FIELD&label"] == "héros ✓"


@pytest.mark.parametrize("name", ["", "   "])
def test_upsert_rejects_blank_names(tmp_path: Path, name: str) -> None:
    """A blank name is a store error and nothing is written."""
    path = tmp_path / "StateData.json"
    with pytest.raises(InvalidSnapshotNameError):
        SnapshotStore(path).upsert("P", name, {"FIELD&a": 1})
    assert not path.exists()
