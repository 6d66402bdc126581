"""Projection of station records into the state tree.

Each station becomes a container and each scalar, non-unit field a typed
leaf under it. Structure is created lazily and never re-derived; values
are written on every run.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from pysofar._constants import STATION_ID_KEY
from pysofar.exceptions import SofarStoreWriteError
from pysofar.ingestion.infer import describe_field
from pysofar.ingestion.normalize import classify_value, is_unit_key, name_to_id, unit_for
from pysofar.state.objects import ContainerEntry, LeafEntry
from pysofar.state.tree import StateTree

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldFailure:
    """A field that could not be projected."""

    object_id: str
    error: str


@dataclass
class ProjectionReport:
    """What a projection pass did to the tree."""

    container_ids: list[str] = field(default_factory=list)
    written: list[str] = field(default_factory=list)
    created: list[str] = field(default_factory=list)
    failures: list[FieldFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def extend(self, other: ProjectionReport) -> None:
        self.container_ids.extend(other.container_ids)
        self.written.extend(other.written)
        self.created.extend(other.created)
        self.failures.extend(other.failures)


def station_container_id(record: Mapping[str, Any], index: int) -> str:
    """Container id of a station: its sanitized ``id``, else the list position."""
    station_id = name_to_id(record.get(STATION_ID_KEY))
    return station_id or str(index)


class StationProjector:
    """Writes station records into a :class:`StateTree`."""

    def __init__(self, tree: StateTree) -> None:
        self._tree = tree

    def project(self, record: Mapping[str, Any], index: int) -> ProjectionReport:
        """Project one station record.

        Failures are isolated per field: a failing leaf is logged and
        reported, and the remaining fields are still written.
        """
        report = ProjectionReport()
        container_id = station_container_id(record, index)
        name = record.get("name")
        container = ContainerEntry(id=container_id, name=str(name) if name else container_id)
        try:
            if self._tree.ensure_container(container):
                report.created.append(container_id)
        except (SofarStoreWriteError, ValueError) as exc:
            _logger.error("Cannot create station container %s: %s", container_id, exc)
            report.failures.append(FieldFailure(object_id=container_id, error=str(exc)))
            return report
        report.container_ids.append(container_id)

        for key, value in record.items():
            if not classify_value(value).is_scalar:
                continue
            if key == STATION_ID_KEY or is_unit_key(key):
                continue

            descriptor = describe_field(key, value, unit_for(record, key))
            object_id = f"{container_id}.{descriptor.id}"
            try:
                leaf = LeafEntry(
                    id=object_id,
                    name=descriptor.display_name,
                    type=descriptor.value_type,
                    role=descriptor.role,
                    unit=descriptor.unit,
                    read=True,
                    write=False,
                )
                if self._tree.ensure_leaf(leaf):
                    report.created.append(object_id)
                self._tree.write_value(object_id, value, ack=True)
            except (SofarStoreWriteError, ValueError) as exc:
                _logger.error("Cannot write %s: %s", object_id, exc)
                report.failures.append(FieldFailure(object_id=object_id, error=str(exc)))
                continue
            report.written.append(object_id)

        _logger.debug(
            "Station %s projected: %d written, %d created, %d failed",
            container_id,
            len(report.written),
            len(report.created),
            len(report.failures),
        )
        return report

    def project_all(self, records: Iterable[Mapping[str, Any]]) -> ProjectionReport:
        """Project every record in order."""
        total = ProjectionReport()
        for index, record in enumerate(records):
            total.extend(self.project(record, index))
        return total
