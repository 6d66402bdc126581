"""Local JSON snapshot of a fetched dataset."""

from __future__ import annotations

import json
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from pysofar._constants import SNAPSHOT_FILENAME
from pysofar.exceptions import SofarSnapshotError

_logger = logging.getLogger(__name__)


def snapshot_path(directory: str | Path | None = None, filename: str = SNAPSHOT_FILENAME) -> Path:
    """Target path of the snapshot; the working directory when *directory* is empty."""
    base = Path(directory) if directory else Path.cwd()
    return base / filename


def write_snapshot(records: Sequence[Any], path: Path) -> Path:
    """Write *records* as pretty-printed JSON.

    Raises
    ------
    SofarSnapshotError
        If the file cannot be written or the data cannot be serialized.
    """
    try:
        text = json.dumps(list(records), indent=2, ensure_ascii=False)
        path.write_text(text, encoding="utf-8")
    except (OSError, TypeError, ValueError) as exc:
        raise SofarSnapshotError(f"Error saving JSON: {exc}") from exc
    return path


def save_snapshot(
    records: Sequence[Any],
    directory: str | Path | None = None,
    filename: str = SNAPSHOT_FILENAME,
) -> Path | None:
    """Best-effort snapshot write; failures are logged and reported as ``None``."""
    path = snapshot_path(directory, filename)
    try:
        write_snapshot(records, path)
    except SofarSnapshotError as exc:
        _logger.error("%s (%s)", exc, path)
        return None
    _logger.debug("JSON saved: %s", path)
    return path
