"""MQTT republishing of station records."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, cast

import paho.mqtt.client as mqtt

from pysofar._constants import MQTT_CONNECT_TIMEOUT_S, MQTT_KEEPALIVE_S, STATION_ID_KEY, TOPIC_PREFIX
from pysofar.exceptions import SofarPublishError
from pysofar.ingestion.normalize import format_payload, is_unit_key


@dataclass(frozen=True)
class BusMessage:
    """One retained message for one station field."""

    topic: str
    payload: str
    qos: int = 0
    retain: bool = True


@dataclass
class PublishReport:
    published: list[str] = field(default_factory=list)
    failures: list[SofarPublishError] = field(default_factory=list)
    skipped: bool = False


def station_topic_id(record: Mapping[str, Any], index: int) -> str:
    station_id = record.get(STATION_ID_KEY)
    if station_id is None or station_id == "":
        return f"station{index}"
    return str(station_id)


def iter_bus_messages(records: Iterable[Mapping[str, Any]]) -> Iterator[BusMessage]:
    """Yield one message per non-unit field, station by station."""
    for index, record in enumerate(records):
        station_id = station_topic_id(record, index)
        for key, value in record.items():
            if key == STATION_ID_KEY or is_unit_key(key):
                continue
            yield BusMessage(
                topic=f"{TOPIC_PREFIX}/{station_id}/{key}",
                payload=format_payload(value),
            )


class MqttPublisher:
    """Blocking paho-mqtt wrapper used for one run.

    When the broker is unreachable the publisher stays disconnected and
    :meth:`publish` becomes a no-op.
    """

    def __init__(
        self,
        host: str,
        port: int,
        *,
        username: str = "",
        password: str = "",
        client_id: str = "",
        connect_timeout: float = MQTT_CONNECT_TIMEOUT_S,
        keepalive: int = MQTT_KEEPALIVE_S,
        logger: logging.Logger | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._client_id = client_id
        self._connect_timeout = connect_timeout
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._connected = threading.Event()

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._connected.is_set()

    def _create_client(self) -> mqtt.Client:
        return mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
        )

    def connect(self) -> bool:
        """Connect to the broker and wait for the CONNACK.

        Returns True when connected. Failures are logged, not raised.
        """
        self.disconnect()
        self._connected.clear()

        client = self._create_client()
        client.enable_logger(self._logger)
        if self._username:
            client.username_pw_set(self._username, self._password or None)

        def on_connect(
            _c: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT connected reason=%s", reason_code)
            self._connected.set()

        def on_disconnect(
            _c: mqtt.Client,
            _userdata: Any,
            _disconnect_flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            self._connected.clear()
            self._logger.debug("MQTT disconnected: %s", reason_code)

        client.on_connect = on_connect
        client.on_disconnect = on_disconnect

        self._logger.debug("MQTT connecting host=%s port=%s", self._host, self._port)
        try:
            client.connect(self._host, self._port, keepalive=self._keepalive)
        except (OSError, ValueError) as exc:
            self._logger.warning("MQTT broker %s:%s unavailable: %s", self._host, self._port, exc)
            return False

        client.loop_start()
        self._client = client
        if not self._connected.wait(self._connect_timeout):
            self._logger.warning(
                "MQTT broker %s:%s did not accept the connection within %ss",
                self._host,
                self._port,
                self._connect_timeout,
            )
            self.disconnect()
            return False
        return True

    def publish(self, records: Iterable[Mapping[str, Any]]) -> PublishReport:
        """Publish every station field; a no-op when not connected."""
        report = PublishReport()
        client = self._client
        if client is None or not self._connected.is_set():
            self._logger.debug("MQTT not connected, skipping publish")
            report.skipped = True
            return report

        pending: list[tuple[str, mqtt.MQTTMessageInfo]] = []
        for message in iter_bus_messages(records):
            try:
                # paho rejects wildcard or oversized topics with ValueError
                info = client.publish(message.topic, message.payload, qos=message.qos, retain=message.retain)
            except ValueError as exc:
                error = SofarPublishError(f"Publish to {message.topic} failed: {exc}", topic=message.topic)
                self._logger.error("%s", error)
                report.failures.append(error)
                continue
            if info.rc != mqtt.MQTT_ERR_SUCCESS:
                error = SofarPublishError(
                    f"Publish to {message.topic} failed: {mqtt.error_string(info.rc)}",
                    topic=message.topic,
                )
                self._logger.error("%s", error)
                report.failures.append(error)
                continue
            pending.append((message.topic, info))

        for topic, info in pending:
            try:
                info.wait_for_publish(self._connect_timeout)
            except (RuntimeError, ValueError) as exc:
                error = SofarPublishError(f"Publish to {topic} failed: {exc}", topic=topic)
                self._logger.error("%s", error)
                report.failures.append(error)
                continue
            if info.is_published():
                report.published.append(topic)
            else:
                error = SofarPublishError(f"Publish to {topic} not confirmed", topic=topic)
                self._logger.warning("%s", error)
                report.failures.append(error)

        self._logger.debug("MQTT data sent (%d messages)", len(report.published))
        return report

    def disconnect(self) -> None:
        """Disconnect and stop the network loop, if a client exists."""
        client = self._client
        self._client = None
        if client is None:
            return
        try:
            if self._connected.is_set():
                self._logger.debug("MQTT disconnect requested")
                client.disconnect()
        finally:
            client.loop_stop()
            self._connected.clear()
