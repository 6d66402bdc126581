"""Station list model."""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from pysofar.models._base import SofarBaseModel


class StationSummary(SofarBaseModel):
    """One row of the station list page.

    Only the fields the poller needs are typed; everything else stays
    available through ``raw``.
    """

    id: str = ""
    name: str = ""

    @field_validator("id", "name", mode="before")
    @classmethod
    def _to_text(cls, value: Any) -> str:
        # Station ids come back as numbers on some accounts.
        return "" if value is None else str(value)
