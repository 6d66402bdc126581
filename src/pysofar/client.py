"""High-level async client for the SofarCloud station API."""

from __future__ import annotations

import logging
from typing import Any

import aiohttp

from pysofar._api.login import build_login_headers, build_login_request, parse_login_response
from pysofar._api.stations import fetch_station_detail, fetch_station_list
from pysofar._constants import LOGIN_ENDPOINT
from pysofar._transport import HttpTransport, Transport
from pysofar.config import SofarConfig
from pysofar.exceptions import SofarAuthenticationError, SofarError, SofarFetchError, SofarTransportError
from pysofar.models.station import StationSummary
from pysofar.models.token import AuthToken
from pysofar.session import Session

_logger = logging.getLogger(__name__)


class SofarClient:
    """Async client for the SofarCloud API.

    Usage::

        async with SofarClient(config) as client:
            token = await client.login()
            records = await client.fetch_all(token) if token else None
    """

    def __init__(
        self,
        config: SofarConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport: Transport | None = transport
        self._session: Session | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> SofarClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None
        self._session = None

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def login(self) -> AuthToken | None:
        """Authenticate and return the access token.

        Failures are logged and reported as ``None``; nothing is raised.
        """
        transport = self._require_transport()
        self._session = None
        try:
            response = await transport.post_json(
                LOGIN_ENDPOINT,
                build_login_request(self._config),
                headers=build_login_headers(),
            )
            token = parse_login_response(response)
        except SofarTransportError as exc:
            if exc.status_code is not None:
                _logger.error("Server error: %s", exc)
            else:
                _logger.error("Login error: %s", exc)
            return None
        except SofarAuthenticationError as exc:
            _logger.error("%s", exc)
            return None

        _logger.debug("Login successful")
        self._session = Session(access_token=token.access_token)
        return token

    @property
    def session(self) -> Session | None:
        """Session of the last successful login, if any."""
        return self._session

    # ------------------------------------------------------------------
    # Stations
    # ------------------------------------------------------------------

    async def get_station_list(self, token: AuthToken | None = None) -> list[StationSummary]:
        """Fetch the station list page.

        Raises
        ------
        SofarTransportError, SofarFetchError
        """
        return await fetch_station_list(self._config, self._resolve_session(token), self._require_transport())

    async def get_station_detail(self, station_id: str, token: AuthToken | None = None) -> dict[str, Any] | None:
        """Fetch realtime data of one station.

        Raises
        ------
        SofarTransportError, SofarFetchError
        """
        return await fetch_station_detail(
            self._config,
            self._resolve_session(token),
            self._require_transport(),
            station_id,
        )

    async def fetch_all(self, token: AuthToken | None = None) -> list[dict[str, Any]] | None:
        """Fetch realtime records of every listed station, in listing order.

        Detail requests are issued one at a time. Stations without realtime
        data are skipped. Any failure aborts the whole fetch and is reported
        as ``None``.
        """
        try:
            stations = await self.get_station_list(token)
            records: list[dict[str, Any]] = []
            for station in stations:
                realtime = await self.get_station_detail(station.id, token)
                if realtime is not None:
                    records.append(realtime)
        except SofarError as exc:
            _logger.error("Error retrieving stations: %s", exc)
            return None
        return records

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise SofarError("Client not initialized. Use 'async with SofarClient(...) as client:'")
        return self._transport

    def _resolve_session(self, token: AuthToken | None) -> Session:
        if token is not None:
            return Session(access_token=token.access_token)
        if self._session is None:
            raise SofarFetchError("Not logged in", endpoint="")
        return self._session
