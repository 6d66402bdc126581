"""State tree interface and the in-memory backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import TypeAdapter, ValidationError

from pysofar.exceptions import SofarStoreWriteError
from pysofar.state.objects import ContainerEntry, LeafEntry, StateValue

_logger = logging.getLogger(__name__)

_Entry = ContainerEntry | LeafEntry
_ENTRY_ADAPTER: TypeAdapter[_Entry] = TypeAdapter(_Entry)


def _utcnow() -> datetime:
    return datetime.now(UTC)


@runtime_checkable
class StateTree(Protocol):
    """Operations the projector needs from a state tree backend."""

    def ensure_container(self, entry: ContainerEntry) -> bool:
        """Create *entry* unless an object with its id exists. Returns True if created."""
        ...

    def ensure_leaf(self, entry: LeafEntry) -> bool:
        """Create *entry* unless an object with its id exists. Returns True if created."""
        ...

    def write_value(self, object_id: str, value: Any, *, ack: bool = True) -> None:
        """Set the current value of a leaf."""
        ...


class MemoryStateTree:
    """Dict-backed state tree, optionally persisted to a JSON file.

    Object metadata is set once and never re-derived; values are always
    overwritten.
    """

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        self._clock = clock
        self._objects: dict[str, ContainerEntry | LeafEntry] = {}
        self._states: dict[str, StateValue] = {}

    # ------------------------------------------------------------------
    # StateTree
    # ------------------------------------------------------------------

    def ensure_container(self, entry: ContainerEntry) -> bool:
        return self._ensure(entry)

    def ensure_leaf(self, entry: LeafEntry) -> bool:
        parent_id = entry.id.rpartition(".")[0]
        if parent_id and not isinstance(self._objects.get(parent_id), ContainerEntry):
            raise SofarStoreWriteError(
                f"Cannot create leaf {entry.id}: container {parent_id} does not exist",
                object_id=entry.id,
            )
        return self._ensure(entry)

    def write_value(self, object_id: str, value: Any, *, ack: bool = True) -> None:
        existing = self._objects.get(object_id)
        if not isinstance(existing, LeafEntry):
            raise SofarStoreWriteError(f"No leaf {object_id} to write to", object_id=object_id)
        if isinstance(value, (dict, list)):
            raise SofarStoreWriteError(f"Leaf {object_id} cannot hold a composite value", object_id=object_id)
        self._states[object_id] = StateValue(val=value, ack=ack, ts=self._clock())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_object(self, object_id: str) -> ContainerEntry | LeafEntry | None:
        return self._objects.get(object_id)

    def get_state(self, object_id: str) -> StateValue | None:
        return self._states.get(object_id)

    def object_ids(self) -> list[str]:
        """Object ids in creation order."""
        return list(self._objects)

    def children(self, container_id: str) -> list[LeafEntry]:
        prefix = f"{container_id}."
        return [obj for oid, obj in self._objects.items() if oid.startswith(prefix) and isinstance(obj, LeafEntry)]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "objects": {oid: obj.model_dump(mode="json") for oid, obj in self._objects.items()},
            "states": {oid: state.model_dump(mode="json") for oid, state in self._states.items()},
        }

    def save(self, path: str | Path) -> None:
        """Write the whole tree to *path* as JSON."""
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise SofarStoreWriteError(f"Cannot save state tree to {target}: {exc}") from exc
        _logger.debug("State tree saved: %s (%d objects)", target, len(self._objects))

    @classmethod
    def load(cls, path: str | Path, **kwargs: Any) -> MemoryStateTree:
        """Load a tree saved with :meth:`save`; a missing file yields an empty tree."""
        tree = cls(**kwargs)
        source = Path(path)
        if not source.exists():
            return tree
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
            for oid, raw in (payload.get("objects") or {}).items():
                tree._objects[oid] = _ENTRY_ADAPTER.validate_python(raw)
            for oid, raw in (payload.get("states") or {}).items():
                tree._states[oid] = StateValue.model_validate(raw)
        except (OSError, json.JSONDecodeError, ValidationError, AttributeError) as exc:
            _logger.warning("Ignoring unreadable state tree %s: %s", source, exc)
            return cls(**kwargs)
        return tree

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure(self, entry: ContainerEntry | LeafEntry) -> bool:
        if entry.id in self._objects:
            return False
        self._objects[entry.id] = entry
        return True
