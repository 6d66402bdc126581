"""Field classification models.

A station record is an untyped JSON object. Every value is first
classified into a :class:`ValueKind` at the deserialization boundary;
only scalar kinds are turned into a :class:`FieldDescriptor`.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ValueKind(StrEnum):
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    COMPOSITE = "composite"
    NULL = "null"

    @property
    def is_scalar(self) -> bool:
        return self in (ValueKind.NUMBER, ValueKind.BOOLEAN, ValueKind.STRING)


class ValueType(StrEnum):
    """Storage type of a leaf."""

    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"


class Role(StrEnum):
    """Semantic meaning of a leaf, independent of its storage type."""

    VALUE = "value"
    INDICATOR = "indicator"
    TEXT = "text"
    NONE = "none"


class FieldDescriptor(BaseModel):
    """Inferred description of one station field."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    value_type: ValueType | None
    role: Role
    unit: str = ""
