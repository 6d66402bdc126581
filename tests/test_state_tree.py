from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

import pytest

from pysofar.exceptions import SofarStoreWriteError
from pysofar.models.field import Role, ValueType
from pysofar.state import ContainerEntry, LeafEntry, MemoryStateTree, StateTree


def _dt() -> datetime:
    return datetime(2026, 1, 1, tzinfo=UTC)


def _leaf(object_id: str, **kwargs: object) -> LeafEntry:
    return LeafEntry(id=object_id, name=object_id.rpartition(".")[2], **kwargs)


def test_memory_tree_satisfies_protocol() -> None:
    assert isinstance(MemoryStateTree(), StateTree)


def test_ensure_is_create_if_absent() -> None:
    tree = MemoryStateTree(clock=_dt)

    assert tree.ensure_container(ContainerEntry(id="S1", name="Roof")) is True
    assert tree.ensure_container(ContainerEntry(id="S1", name="Renamed")) is False
    assert tree.get_object("S1").name == "Roof"

    assert tree.ensure_leaf(_leaf("S1.power", type=ValueType.NUMBER, role=Role.VALUE, unit="W")) is True
    assert tree.ensure_leaf(_leaf("S1.power", type=ValueType.STRING, role=Role.TEXT)) is False

    leaf = tree.get_object("S1.power")
    assert isinstance(leaf, LeafEntry)
    assert leaf.type == ValueType.NUMBER
    assert leaf.unit == "W"
    assert leaf.read is True
    assert leaf.write is False


def test_leaf_requires_existing_container() -> None:
    tree = MemoryStateTree()

    with pytest.raises(SofarStoreWriteError):
        tree.ensure_leaf(_leaf("S9.power"))


def test_write_value_overwrites_and_acks() -> None:
    tree = MemoryStateTree(clock=_dt)
    tree.ensure_container(ContainerEntry(id="S1", name="S1"))
    tree.ensure_leaf(_leaf("S1.power"))

    tree.write_value("S1.power", 1, ack=True)
    tree.write_value("S1.power", 2, ack=True)

    state = tree.get_state("S1.power")
    assert state is not None
    assert state.val == 2
    assert state.ack is True
    assert state.ts == _dt()


def test_write_value_rejects_unknown_leaf_and_composites() -> None:
    tree = MemoryStateTree()
    tree.ensure_container(ContainerEntry(id="S1", name="S1"))
    tree.ensure_leaf(_leaf("S1.meta"))

    with pytest.raises(SofarStoreWriteError):
        tree.write_value("S1.unknown", 1)
    with pytest.raises(SofarStoreWriteError):
        tree.write_value("S1", 1)
    with pytest.raises(SofarStoreWriteError):
        tree.write_value("S1.meta", {"a": 1})


def test_save_and_load_round_trip_keeps_structure(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "state.json"
    tree = MemoryStateTree(clock=_dt)
    tree.ensure_container(ContainerEntry(id="S1", name="Roof"))
    tree.ensure_leaf(_leaf("S1.onlineFlag", type=ValueType.BOOLEAN, role=Role.INDICATOR))
    tree.write_value("S1.onlineFlag", True)
    tree.save(path)

    loaded = MemoryStateTree.load(path)

    assert loaded.object_ids() == ["S1", "S1.onlineFlag"]
    assert isinstance(loaded.get_object("S1"), ContainerEntry)
    leaf = loaded.get_object("S1.onlineFlag")
    assert isinstance(leaf, LeafEntry)
    assert leaf.role == Role.INDICATOR
    assert loaded.get_state("S1.onlineFlag").val is True


def test_load_missing_or_corrupt_file_yields_empty_tree(tmp_path: Path) -> None:
    assert MemoryStateTree.load(tmp_path / "absent.json").object_ids() == []

    corrupt = tmp_path / "corrupt.json"
    corrupt.write_text("{not json", encoding="utf-8")
    assert MemoryStateTree.load(corrupt).object_ids() == []
