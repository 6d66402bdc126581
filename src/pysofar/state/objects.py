"""Entries of the state tree."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pysofar.models.field import Role, ValueType


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ContainerEntry(BaseModel):
    """Grouping node for one station."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["container"] = "container"
    id: str
    name: str

    @field_validator("id")
    @classmethod
    def _non_empty_id(cls, value: str) -> str:
        if not value:
            raise ValueError("container id must be non-empty")
        return value


class LeafEntry(BaseModel):
    """Typed leaf for one station field.

    Leaves are read-only from the tree's point of view: the poller is the
    only writer.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: Literal["leaf"] = "leaf"
    id: str
    name: str
    type: ValueType | None = None
    role: Role = Role.NONE
    unit: str = ""
    read: bool = True
    write: bool = False

    @field_validator("id")
    @classmethod
    def _non_empty_id(cls, value: str) -> str:
        if not value:
            raise ValueError("leaf id must be non-empty")
        return value


class StateValue(BaseModel):
    """Current value of a leaf."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    val: Any = None
    ack: bool = False
    ts: datetime = Field(default_factory=_utcnow)
