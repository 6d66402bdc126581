"""JSON-over-HTTPS transport for the SofarCloud API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pysofar.config import SofarConfig
from pysofar.exceptions import SofarTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Endpoint modules only depend on this protocol so tests can pass a
    recording double instead of the aiohttp-backed implementation.
    """

    async def post_json(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        *,
        headers: Mapping[str, str],
        params: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        ...


class HttpTransport:
    """aiohttp transport that POSTs JSON and returns the decoded JSON body."""

    def __init__(self, config: SofarConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout)
        # ``ssl=False`` disables certificate validation; ``None`` keeps aiohttp's default checks.
        self._ssl: bool | None = None if config.verify_ssl else False
        if not config.verify_ssl:
            _logger.warning("TLS certificate validation is disabled for %s", config.base_url)

    async def post_json(
        self,
        endpoint: str,
        payload: Mapping[str, Any],
        *,
        headers: Mapping[str, str],
        params: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """POST *payload* as JSON to ``base_url + endpoint``.

        Raises
        ------
        SofarTransportError
            On network failure, timeout, a non-200 status, or a body that
            is not a JSON object.
        """
        url = f"{self._config.base_url}{endpoint}"
        _logger.debug("POST %s params=%s", url, dict(params) if params else {})

        try:
            async with self._http.post(
                url,
                data=json.dumps(dict(payload)),
                headers=dict(headers),
                params=dict(params) if params else None,
                ssl=self._ssl,
                timeout=self._timeout,
            ) as resp:
                text = await resp.text()
                _logger.debug("Status code: %s", resp.status)
                if resp.status != 200:
                    raise SofarTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except SofarTransportError:
            raise
        except UnicodeDecodeError as exc:
            raise SofarTransportError(
                f"Undecodable response body from {endpoint}: {exc}",
                endpoint=endpoint,
            ) from exc
        except TimeoutError as exc:
            raise SofarTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise SofarTransportError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc

        try:
            body: Any = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SofarTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                status_code=200,
                endpoint=endpoint,
            ) from exc

        if not isinstance(body, dict):
            raise SofarTransportError(
                f"Response from {endpoint} is not a JSON object",
                status_code=200,
                endpoint=endpoint,
            )
        return body
