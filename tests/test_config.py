from __future__ import annotations

from zoneinfo import ZoneInfoNotFoundError

import pytest

import pysofar.config as config_module
from pysofar.config import AppProfile, SofarConfig, parse_port
from pysofar.exceptions import SofarConfigError


def test_config_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOFAR_USERNAME", "user@example.com")
    monkeypatch.setenv("SOFAR_PASSWORD", "secret")
    monkeypatch.setenv("SOFAR_MQTT_ENABLED", "yes")
    monkeypatch.setenv("SOFAR_BROKER_ADDRESS", "10.0.0.2")
    monkeypatch.setenv("SOFAR_MQTT_PORT", "not-a-port")
    monkeypatch.setenv("SOFAR_STORE_JSON", "1")
    monkeypatch.setenv("SOFAR_TIME_ZONE", "Europe/Berlin")

    config = SofarConfig.from_env()

    assert config.username == "user@example.com"
    assert config.password == "secret"
    assert config.mqtt_enabled is True
    assert config.broker_address == "10.0.0.2"
    assert config.mqtt_port == 1883
    assert config.store_json is True
    assert config.time_zone == "Europe/Berlin"
    assert config.verify_ssl is False


def test_config_overrides_win_over_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SOFAR_USERNAME", "env-user")
    monkeypatch.setenv("SOFAR_MQTT_ENABLED", "true")

    config = SofarConfig.from_env(username="cli-user", mqtt_enabled=False, app={"scene": "cn"})

    assert config.username == "cli-user"
    assert config.mqtt_enabled is False
    assert config.app == AppProfile(scene="cn")


@pytest.mark.parametrize("broker", ["", "  ", "0.0.0.0"])
def test_validate_rejects_missing_broker_when_mqtt_enabled(broker: str) -> None:
    config = SofarConfig(username="u", password="p", mqtt_enabled=True, broker_address=broker)

    with pytest.raises(SofarConfigError, match="MQTT IP address is empty"):
        config.validate()


def test_validate_accepts_missing_broker_when_mqtt_disabled() -> None:
    SofarConfig(username="u", password="p", mqtt_enabled=False).validate()


@pytest.mark.parametrize(("value", "expected"), [("1884", 1884), (None, 1883), ("", 1883), (0, 1883), ("x", 1883)])
def test_parse_port(value: object, expected: int) -> None:
    assert parse_port(value) == expected


def test_default_time_zone_comes_from_host(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(config_module, "get_localzone_name", lambda: "UTC")

    assert SofarConfig(username="u", password="p").time_zone == "UTC"


@pytest.mark.parametrize("lookup_error", [ZoneInfoNotFoundError("no zone"), ValueError("bad TZ"), None])
def test_default_time_zone_falls_back_to_utc(monkeypatch: pytest.MonkeyPatch, lookup_error: Exception | None) -> None:
    def lookup() -> str | None:
        if lookup_error is not None:
            raise lookup_error
        return None

    monkeypatch.setattr(config_module, "get_localzone_name", lookup)

    assert SofarConfig(username="u", password="p").time_zone == "UTC"


def test_explicit_time_zone_skips_host_lookup(monkeypatch: pytest.MonkeyPatch) -> None:
    def lookup() -> str:
        raise AssertionError("host time zone should not be read")

    monkeypatch.setattr(config_module, "get_localzone_name", lookup)
    monkeypatch.setenv("SOFAR_TIME_ZONE", "Asia/Tokyo")

    assert SofarConfig.from_env().time_zone == "Asia/Tokyo"
