"""Redaction of credentials before debug logging.

Login requests carry the account password and every later request carries
the access token as the ``authorization`` header.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

_SECRET_KEYS: frozenset[str] = frozenset(
    {
        "password",
        "passwort",
        "mqtt_pass",
        "accesstoken",
        "refreshtoken",
        "token",
        "authorization",
        "cookie",
    }
)

_MAX_DEPTH = 16


def _is_secret(key: Any) -> bool:
    return str(key).lower() in _SECRET_KEYS


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Copy *value* with secrets masked and long strings shortened."""
    if _depth > _MAX_DEPTH:
        return "<max-depth>"
    if isinstance(value, str):
        return value if len(value) <= max_string else f"{value[:max_string]}...<truncated>"
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, Mapping):
        return {
            str(key): "<redacted>" if _is_secret(key) else redact_for_log(item, max_string=max_string, _depth=_depth + 1)
            for key, item in value.items()
        }
    if isinstance(value, (list, tuple)):
        return [redact_for_log(item, max_string=max_string, _depth=_depth + 1) for item in value]
    return repr(value)
