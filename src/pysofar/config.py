"""Client and run configuration for pysofar."""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

from tzlocal import get_localzone_name

from pysofar._constants import (
    BASE_URL,
    DEFAULT_MQTT_PORT,
    REQUEST_TIMEOUT_S,
    STARTUP_DELAY_MAX_S,
    UNSET_BROKER_ADDRESSES,
)
from pysofar.exceptions import SofarConfigError

_logger = logging.getLogger(__name__)


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def parse_port(value: Any, default: int = DEFAULT_MQTT_PORT) -> int:
    """Parse a broker port, falling back to *default* for empty or invalid input."""
    try:
        port = int(value)
    except (TypeError, ValueError):
        return default
    return port if port > 0 else default


def _system_time_zone() -> str:
    """IANA name of the host time zone, ``UTC`` when it cannot be determined."""
    try:
        name = get_localzone_name()
    except (LookupError, OSError, ValueError) as exc:
        _logger.debug("Cannot determine local time zone: %s", exc)
        return "UTC"
    return name or "UTC"


@dataclasses.dataclass(frozen=True)
class AppProfile:
    """Client identity headers sent with every authenticated request.

    These mirror what the SofarCloud mobile app sends; the API rejects
    or degrades requests that do not look like they came from the app.
    """

    app_version: str = "2.3.6"
    custom_origin: str = "sofar"
    custom_device_type: str = "1"
    request_from: str = "app"
    scene: str = "eu"
    bundle_from: str = "2"
    app_from: str = "6"


@dataclasses.dataclass(frozen=True)
class SofarConfig:
    """Run configuration.

    Parameters
    ----------
    username : str
        SofarCloud account name.
    password : str
        SofarCloud account password.
    base_url : str
        API base URL, ending with a slash.
    broker_address : str
        MQTT broker host. Required when ``mqtt_enabled`` is set.
    mqtt_enabled : bool
        Republish every station field onto the MQTT topic tree.
    mqtt_user : str
        MQTT username (empty for anonymous).
    mqtt_pass : str
        MQTT password.
    mqtt_port : int
        MQTT broker port.
    store_json : bool
        Write the fetched dataset to a JSON snapshot file.
    store_dir : str
        Directory for the snapshot file. Empty means the working directory.
    startup_delay_max : int
        Upper bound in seconds of the random delay before the first request.
    verify_ssl : bool
        Validate the vendor API TLS certificate. The vendor app does not,
        so this defaults to ``False``.
    request_timeout : float
        Per-request HTTP timeout in seconds.
    time_zone : str
        IANA time zone sent to the API.
    language : str
        Language code sent to the API.
    state_file : str
        Optional JSON file that backs the state tree between runs.
    app : AppProfile
        Client identity headers.
    """

    username: str
    password: str
    base_url: str = BASE_URL
    broker_address: str = ""
    mqtt_enabled: bool = False
    mqtt_user: str = ""
    mqtt_pass: str = ""
    mqtt_port: int = DEFAULT_MQTT_PORT
    store_json: bool = False
    store_dir: str = ""
    startup_delay_max: int = STARTUP_DELAY_MAX_S
    verify_ssl: bool = False
    request_timeout: float = REQUEST_TIMEOUT_S
    time_zone: str = dataclasses.field(default_factory=_system_time_zone)
    language: str = "en"
    state_file: str = ""
    app: AppProfile = dataclasses.field(default_factory=AppProfile)

    @property
    def broker_configured(self) -> bool:
        """Whether a usable broker address is set."""
        return self.broker_address.strip() not in UNSET_BROKER_ADDRESSES

    def validate(self) -> None:
        """Raise :class:`SofarConfigError` for configurations that cannot run."""
        if self.mqtt_enabled and not self.broker_configured:
            raise SofarConfigError("MQTT IP address is empty - please check instance configuration")
        if self.startup_delay_max < 0:
            raise SofarConfigError(f"startup_delay_max must be >= 0, got {self.startup_delay_max}")

    @classmethod
    def from_env(cls, **overrides: Any) -> SofarConfig:
        """Create configuration from environment variables.

        Reads ``SOFAR_USERNAME``, ``SOFAR_PASSWORD`` and the optional
        ``SOFAR_*`` variables below. Explicit keyword arguments override
        environment values.
        """
        env = os.environ

        app_kwargs: dict[str, str] = {}
        _ENV_APP_MAP = {
            "SOFAR_APP_VERSION": "app_version",
            "SOFAR_SCENE": "scene",
        }
        for env_key, field_name in _ENV_APP_MAP.items():
            val = env.get(env_key)
            if val is not None:
                app_kwargs[field_name] = val

        app_overrides = overrides.pop("app", None)
        if isinstance(app_overrides, dict):
            app_kwargs.update(app_overrides)
        elif isinstance(app_overrides, AppProfile):
            app_kwargs = dataclasses.asdict(app_overrides)

        config_kwargs: dict[str, Any] = {"app": AppProfile(**app_kwargs)}

        _ENV_CONFIG_MAP = {
            "SOFAR_USERNAME": "username",
            "SOFAR_PASSWORD": "password",
            "SOFAR_BASE_URL": "base_url",
            "SOFAR_BROKER_ADDRESS": "broker_address",
            "SOFAR_MQTT_USER": "mqtt_user",
            "SOFAR_MQTT_PASS": "mqtt_pass",
            "SOFAR_STORE_DIR": "store_dir",
            "SOFAR_TIME_ZONE": "time_zone",
            "SOFAR_LANGUAGE": "language",
            "SOFAR_STATE_FILE": "state_file",
        }
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.setdefault("username", "")
        config_kwargs.setdefault("password", "")

        if "mqtt_enabled" not in overrides:
            config_kwargs["mqtt_enabled"] = _env_bool(env.get("SOFAR_MQTT_ENABLED"), False)
        if "store_json" not in overrides:
            config_kwargs["store_json"] = _env_bool(env.get("SOFAR_STORE_JSON"), False)
        if "verify_ssl" not in overrides:
            config_kwargs["verify_ssl"] = _env_bool(env.get("SOFAR_VERIFY_SSL"), False)

        port_env = env.get("SOFAR_MQTT_PORT")
        if port_env is not None and "mqtt_port" not in overrides:
            config_kwargs["mqtt_port"] = parse_port(port_env)

        delay_env = env.get("SOFAR_STARTUP_DELAY_MAX")
        if delay_env is not None and "startup_delay_max" not in overrides:
            config_kwargs["startup_delay_max"] = int(delay_env)

        timeout_env = env.get("SOFAR_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = float(timeout_env)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
