"""Station endpoints.

Endpoints:
  - device/stationInfo/selectStationListPages
  - device/stationInfo/selectStationDetail
"""

from __future__ import annotations

import logging
from typing import Any

from pysofar._constants import (
    APP_USER_AGENT,
    REALTIME_KEY,
    STATION_DETAIL_ENDPOINT,
    STATION_LIST_ENDPOINT,
    STATION_PAGE_NUM,
    STATION_PAGE_SIZE,
)
from pysofar._transport import Transport
from pysofar.config import SofarConfig
from pysofar.exceptions import SofarFetchError
from pysofar.ingestion.normalize import name_to_id
from pysofar.models.station import StationSummary
from pysofar.session import Session

_logger = logging.getLogger(__name__)


def build_app_headers(config: SofarConfig, session: Session) -> dict[str, str]:
    """Headers the vendor app sends with every authenticated call."""
    app = config.app
    return {
        "authorization": session.access_token,
        "app-version": app.app_version,
        "custom-origin": app.custom_origin,
        "custom-device-type": app.custom_device_type,
        "request-from": app.request_from,
        "scene": app.scene,
        "bundlefrom": app.bundle_from,
        "appfrom": app.app_from,
        "timezone": config.time_zone,
        "accept-language": config.language,
        "user-agent": APP_USER_AGENT,
        "content-type": "application/json",
    }


def parse_station_list(response: dict[str, Any]) -> list[StationSummary]:
    """Parse the station list page.

    Raises
    ------
    SofarFetchError
        If the body has no ``data.rows`` list.
    """
    data = response.get("data")
    rows = data.get("rows") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        raise SofarFetchError(
            f"Station list response missing data.rows: code={response.get('code')} "
            f"message={response.get('message', '')}",
            code=str(response.get("code", "")),
            endpoint=STATION_LIST_ENDPOINT,
        )
    return [StationSummary.model_validate(row) for row in rows if isinstance(row, dict)]


def parse_station_detail(response: dict[str, Any]) -> dict[str, Any] | None:
    """Return the nested realtime object of a detail response, if any."""
    data = response.get("data")
    realtime = data.get(REALTIME_KEY) if isinstance(data, dict) else None
    return realtime if isinstance(realtime, dict) else None


async def fetch_station_list(
    config: SofarConfig,
    session: Session,
    transport: Transport,
) -> list[StationSummary]:
    """Fetch the first page of stations for the account."""
    response = await transport.post_json(
        STATION_LIST_ENDPOINT,
        {"pageNum": STATION_PAGE_NUM, "pageSize": STATION_PAGE_SIZE},
        headers=build_app_headers(config, session),
    )
    stations = parse_station_list(response)
    _logger.debug("Station list loaded (%d stations)", len(stations))
    return stations


async def fetch_station_detail(
    config: SofarConfig,
    session: Session,
    transport: Transport,
    station_id: str,
) -> dict[str, Any] | None:
    """Fetch realtime data of one station; ``None`` when the station reports none."""
    response = await transport.post_json(
        STATION_DETAIL_ENDPOINT,
        {},
        headers=build_app_headers(config, session),
        params={"stationId": name_to_id(station_id)},
    )
    realtime = parse_station_detail(response)
    if realtime is None:
        _logger.debug("Station %s has no %s, skipping", station_id, REALTIME_KEY)
    return realtime
