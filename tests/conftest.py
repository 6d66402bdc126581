from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from pysofar.config import SofarConfig
from pysofar.exceptions import SofarTransportError

LOGIN = "user/auth/he/login"
STATION_LIST = "device/stationInfo/selectStationListPages"
STATION_DETAIL = "device/stationInfo/selectStationDetail"


@dataclass
class FakeSofarBackend:
    """Recording stand-in for the HTTP transport."""

    stations: list[dict[str, Any]] = field(
        default_factory=lambda: [
            {"id": "S1", "name": "Roof"},
            {"id": "S2", "name": "Garage"},
        ]
    )
    realtime: dict[str, dict[str, Any] | None] = field(
        default_factory=lambda: {
            "S1": {"id": "S1", "power": 1234, "powerUnit": "W", "onlineFlag": True},
            "S2": {"id": "S2", "power": "56.5", "powerUnit": "kW", "status": "Running"},
        }
    )
    login_response: dict[str, Any] = field(
        default_factory=lambda: {"code": "0", "message": "ok", "data": {"accessToken": "token-1"}}
    )
    login_status: int = 200
    list_response: dict[str, Any] | None = None
    fail_detail_for: set[str] = field(default_factory=set)
    calls: dict[str, int] = field(default_factory=dict)
    requests: list[tuple[str, dict[str, Any], dict[str, str], dict[str, str] | None]] = field(default_factory=list)

    def _record_call(self, endpoint: str) -> None:
        self.calls[endpoint] = self.calls.get(endpoint, 0) + 1

    async def post_json(
        self,
        endpoint: str,
        payload: Any,
        *,
        headers: Any,
        params: Any = None,
    ) -> dict[str, Any]:
        self._record_call(endpoint)
        self.requests.append((endpoint, dict(payload), dict(headers), dict(params) if params else None))

        if endpoint == LOGIN:
            if self.login_status != 200:
                raise SofarTransportError(
                    f"HTTP {self.login_status} from {endpoint}",
                    status_code=self.login_status,
                    endpoint=endpoint,
                )
            return self.login_response

        if endpoint == STATION_LIST:
            if self.list_response is not None:
                return self.list_response
            return {"code": "0", "data": {"rows": self.stations, "total": len(self.stations)}}

        if endpoint == STATION_DETAIL:
            station_id = params["stationId"]
            if station_id in self.fail_detail_for:
                raise SofarTransportError(f"HTTP 500 from {endpoint}", status_code=500, endpoint=endpoint)
            realtime = self.realtime.get(station_id)
            data: dict[str, Any] = {"stationId": station_id}
            if realtime is not None:
                data["stationRealTimeVo"] = realtime
            return {"code": "0", "data": data}

        raise AssertionError(f"Unexpected endpoint in fake backend: {endpoint}")


@pytest.fixture
def config() -> SofarConfig:
    return SofarConfig(
        username="user@example.com",
        password="secret",
        time_zone="Europe/Amsterdam",
        startup_delay_max=0,
    )


@pytest.fixture
def backend() -> FakeSofarBackend:
    return FakeSofarBackend()
