"""Authentication token model."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class AuthToken(BaseModel):
    """Token returned after successful login.

    Parameters
    ----------
    access_token : str
        Opaque token sent as the ``authorization`` header.
    raw : dict
        Full ``data`` object of the login response.
    """

    model_config = ConfigDict(frozen=True)

    access_token: str
    raw: dict[str, Any]
