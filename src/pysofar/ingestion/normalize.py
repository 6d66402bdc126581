"""Normalization helpers.

Centralizes identifier sanitizing, scalar classification, and the
unit-field naming convention of the vendor schema.
"""

from __future__ import annotations

import json
import math
import unicodedata
from collections.abc import Mapping
from typing import Any

from pysofar._constants import UNIT_SUFFIX
from pysofar.models.field import ValueKind

# Characters allowed in state-tree identifiers besides unicode letters and digits.
_ALLOWED_PUNCTUATION = frozenset("._-/ :!#$%&()+=@^{}|~")
_ALLOWED_CATEGORIES = frozenset({"Ll", "Lu", "Nd"})

_NON_FINITE_WORDS = frozenset({"nan", "+nan", "-nan", "inf", "+inf", "-inf", "infinity", "+infinity", "-infinity"})


def _is_allowed(char: str) -> bool:
    return char in _ALLOWED_PUNCTUATION or unicodedata.category(char) in _ALLOWED_CATEGORIES


def name_to_id(name: Any) -> str:
    """Map an arbitrary display string to a state-tree safe identifier.

    Every run of forbidden characters collapses into a single ``_``.
    ``None`` and empty input yield ``""``.
    """
    if name is None:
        return ""
    text = str(name)
    if not text:
        return ""

    parts: list[str] = []
    in_forbidden_run = False
    for char in text:
        if _is_allowed(char):
            parts.append(char)
            in_forbidden_run = False
        elif not in_forbidden_run:
            parts.append("_")
            in_forbidden_run = True
    return "".join(parts)


def safe_float(value: Any) -> float | None:
    """Parse *value* as a finite float, or return ``None``."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped or stripped.lower() in _NON_FINITE_WORDS:
            return None
        value = stripped
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def is_numeric(value: Any) -> bool:
    """Return True for numbers and for strings holding a finite number."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and (math.isnan(value) or math.isinf(value)))
    if isinstance(value, str):
        return safe_float(value) is not None
    return False


def classify_value(value: Any) -> ValueKind:
    """Classify a decoded JSON value into its :class:`ValueKind`."""
    if value is None:
        return ValueKind.NULL
    # bool is a subclass of int, so it must be checked first.
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    return ValueKind.COMPOSITE


def is_unit_key(key: str) -> bool:
    """Whether *key* names a unit annotation of a sibling field."""
    return key.lower().endswith(UNIT_SUFFIX.lower())


def unit_for(record: Mapping[str, Any], key: str) -> str:
    """Return the unit annotation of *key* in *record*, or ``""``."""
    unit = record.get(f"{key}{UNIT_SUFFIX}")
    if unit is None or unit == "":
        return ""
    return str(unit)


def format_payload(value: Any) -> str:
    """Render a field value as the text form sent to the broker."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)
