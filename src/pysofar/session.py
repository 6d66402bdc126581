"""Per-run session state after a successful login."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Session(BaseModel):
    """Authenticated session for one run.

    Sessions are never persisted; every run logs in again.

    Parameters
    ----------
    access_token : str
        Token sent as the ``authorization`` header.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        str_strip_whitespace=True,
    )

    access_token: str
