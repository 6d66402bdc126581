"""Pydantic models for SofarCloud responses and inferred field metadata."""

from pysofar.models.field import FieldDescriptor, Role, ValueKind, ValueType
from pysofar.models.station import StationSummary
from pysofar.models.token import AuthToken

__all__ = [
    "AuthToken",
    "FieldDescriptor",
    "Role",
    "StationSummary",
    "ValueKind",
    "ValueType",
]
