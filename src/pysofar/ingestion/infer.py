"""Type and role inference for station fields.

The rules are applied in order and later rules win:

1. the native kind of the value picks a base (role, type);
2. numbers and numeric strings are forced to ``(value, number)``,
   since the cloud API stringifies many readings;
3. a field name ending in ``Flag`` or ``IsNull`` is forced to
   ``(indicator, boolean)`` whatever the value looks like.
"""

from __future__ import annotations

from typing import Any

from pysofar._constants import INDICATOR_SUFFIXES
from pysofar.ingestion.normalize import classify_value, is_numeric, name_to_id
from pysofar.models.field import FieldDescriptor, Role, ValueKind, ValueType

_BASE_CLASSIFICATION: dict[ValueKind, tuple[Role, ValueType | None]] = {
    ValueKind.NUMBER: (Role.VALUE, ValueType.NUMBER),
    ValueKind.BOOLEAN: (Role.INDICATOR, ValueType.BOOLEAN),
    ValueKind.STRING: (Role.TEXT, ValueType.STRING),
}


def infer_role(value: Any, field_name: str) -> tuple[Role, ValueType | None]:
    """Return the ``(role, value_type)`` pair for a field."""
    role, value_type = _BASE_CLASSIFICATION.get(classify_value(value), (Role.NONE, None))

    if is_numeric(value):
        role, value_type = Role.VALUE, ValueType.NUMBER

    if field_name.endswith(INDICATOR_SUFFIXES):
        role, value_type = Role.INDICATOR, ValueType.BOOLEAN

    return role, value_type


def describe_field(field_name: str, value: Any, unit: str = "") -> FieldDescriptor:
    role, value_type = infer_role(value, field_name)
    return FieldDescriptor(
        id=name_to_id(field_name),
        display_name=field_name,
        value_type=value_type,
        role=role,
        unit=unit,
    )
