"""Login endpoint.

Endpoint:
  - user/auth/he/login
"""

from __future__ import annotations

import logging
from typing import Any

from pysofar._constants import LOGIN_ENDPOINT, LOGIN_EXPIRE_TIME, LOGIN_SUCCESS_CODE, LOGIN_USER_AGENT
from pysofar._redact import redact_for_log
from pysofar.config import SofarConfig
from pysofar.exceptions import SofarAuthenticationError
from pysofar.models.token import AuthToken

_logger = logging.getLogger(__name__)


def build_login_headers() -> dict[str, str]:
    """Headers the vendor app sends with the login call."""
    return {
        "Content-Type": "application/json",
        "User-Agent": LOGIN_USER_AGENT,
    }


def build_login_request(config: SofarConfig) -> dict[str, Any]:
    """Build the JSON body for the login endpoint."""
    return {
        "accountName": config.username,
        "expireTime": LOGIN_EXPIRE_TIME,
        "password": config.password,
    }


def parse_login_response(response: dict[str, Any]) -> AuthToken:
    """Extract the access token from a login response body.

    Raises
    ------
    SofarAuthenticationError
        If the vendor code is not the string ``"0"`` or the token is missing.
    """
    _logger.debug("Login response: %s", redact_for_log(response))
    code = response.get("code")
    # the vendor sends the code as a string; a numeric 0 is not a success
    if code != LOGIN_SUCCESS_CODE:
        raise SofarAuthenticationError(
            f"Login failed: {response.get('message', '')}",
            code="" if code is None else str(code),
            endpoint=LOGIN_ENDPOINT,
        )

    data = response.get("data")
    token = data.get("accessToken") if isinstance(data, dict) else None
    if not isinstance(token, str) or not token:
        raise SofarAuthenticationError(
            "Login response missing accessToken",
            code=LOGIN_SUCCESS_CODE,
            endpoint=LOGIN_ENDPOINT,
        )

    return AuthToken(access_token=token, raw=data)
