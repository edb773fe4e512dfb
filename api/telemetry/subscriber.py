"""
MQTT subscriber that feeds the telemetry log.

paho-mqtt owns the connection: it runs the network loop on its own thread and
reconnects with backoff. This module only (re)subscribes after each connect
and turns every inbound message into a `LogEntry` append.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable
from urllib.parse import urlsplit

import paho.mqtt.client as mqtt

from .store import LogEntry, LogStore

logger = logging.getLogger(__name__)

DEFAULT_PORTS = {
    "mqtt": 1883,
    "tcp": 1883,
    "mqtts": 8883,
    "ssl": 8883,
    "ws": 80,
    "wss": 443,
}
KEEPALIVE_S = 60


class BrokerUrlError(ValueError):
    pass


@dataclass(frozen=True)
class BrokerEndpoint:
    host: str
    port: int
    transport: str
    path: str
    tls: bool


def parse_broker_url(url: str) -> BrokerEndpoint:
    """
    Split a broker URL such as `ws://host:8000/mqtt` or `mqtts://host`.
    """
    parts = urlsplit((url or "").strip())
    scheme = parts.scheme.lower()
    if scheme not in DEFAULT_PORTS:
        raise BrokerUrlError(f"Unsupported broker URL scheme '{parts.scheme}'. Allowed: {sorted(DEFAULT_PORTS)}")
    if not parts.hostname:
        raise BrokerUrlError("Broker URL has no host.")

    try:
        port = parts.port or DEFAULT_PORTS[scheme]
    except ValueError as exc:
        raise BrokerUrlError(f"Invalid broker port in '{url}'.") from exc

    websockets = scheme in {"ws", "wss"}
    return BrokerEndpoint(
        host=parts.hostname,
        port=port,
        transport="websockets" if websockets else "tcp",
        path=(parts.path or "/mqtt") if websockets else "",
        tls=scheme in {"wss", "mqtts", "ssl"},
    )


def _default_client_factory(client_id: str, transport: str) -> mqtt.Client:
    return mqtt.Client(
        callback_api_version=mqtt.CallbackAPIVersion.VERSION2,
        client_id=client_id,
        transport=transport,
    )


class TelemetrySubscriber:
    """
    Subscribes one topic and appends each message to a `LogStore`.
    """

    def __init__(
        self,
        store: LogStore,
        *,
        broker_url: str,
        topic: str,
        qos: int = 0,
        client_id: str = "",
        reconnect_delays: tuple[int, int] = (1, 60),
        client_factory: Callable[[str, str], Any] | None = None,
    ) -> None:
        self.store = store
        self.endpoint = parse_broker_url(broker_url)
        self.topic = topic
        self.qos = qos
        self.client_id = client_id
        self.reconnect_delays = reconnect_delays
        self._client_factory = client_factory or _default_client_factory
        self._client: Any | None = None

    @property
    def client(self) -> Any | None:
        return self._client

    def start(self) -> None:
        if self._client is not None:
            return None

        endpoint = self.endpoint
        client = self._client_factory(self.client_id, endpoint.transport)
        if endpoint.transport == "websockets":
            client.ws_set_options(path=endpoint.path)
        if endpoint.tls:
            client.tls_set()

        min_delay, max_delay = self.reconnect_delays
        client.reconnect_delay_set(min_delay=min_delay, max_delay=max_delay)

        client.on_connect = self._on_connect
        client.on_disconnect = self._on_disconnect
        client.on_subscribe = self._on_subscribe
        client.on_message = self._on_message

        self._client = client
        try:
            client.connect_async(endpoint.host, endpoint.port, keepalive=KEEPALIVE_S)
        except (OSError, ValueError):
            # loop_start() keeps retrying the connection.
            logger.exception("mqtt_connect_failed host=%s port=%s", endpoint.host, endpoint.port)
        client.loop_start()
        logger.info(
            "mqtt_subscriber_started host=%s port=%s transport=%s topic=%s",
            endpoint.host,
            endpoint.port,
            endpoint.transport,
            self.topic,
        )

    def stop(self) -> None:
        client = self._client
        if client is None:
            return None
        self._client = None
        try:
            client.disconnect()
        finally:
            client.loop_stop()
        logger.info("mqtt_subscriber_stopped topic=%s", self.topic)

    def _on_connect(self, client: Any, userdata: Any, flags: Any, reason_code: Any, properties: Any = None) -> None:
        if getattr(reason_code, "is_failure", False):
            logger.error("mqtt_connect_refused reason=%s", reason_code)
            return None

        logger.info("mqtt_connected host=%s port=%s", self.endpoint.host, self.endpoint.port)
        result, _mid = client.subscribe(self.topic, qos=self.qos)
        if result != mqtt.MQTT_ERR_SUCCESS:
            logger.error("mqtt_subscribe_failed topic=%s result=%s", self.topic, result)

    def _on_subscribe(
        self,
        client: Any,
        userdata: Any,
        mid: int,
        reason_code_list: Any,
        properties: Any = None,
    ) -> None:
        for reason_code in reason_code_list or []:
            if getattr(reason_code, "is_failure", False):
                logger.error("mqtt_subscribe_rejected topic=%s reason=%s", self.topic, reason_code)
                return None
        logger.info("mqtt_subscribed topic=%s qos=%s", self.topic, self.qos)

    def _on_disconnect(
        self,
        client: Any,
        userdata: Any,
        flags: Any,
        reason_code: Any,
        properties: Any = None,
    ) -> None:
        if getattr(reason_code, "is_failure", False):
            logger.warning("mqtt_disconnected_unexpectedly reason=%s", reason_code)
        else:
            logger.info("mqtt_disconnected reason=%s", reason_code)

    def _on_message(self, client: Any, userdata: Any, message: Any) -> None:
        payload = message.payload
        if isinstance(payload, (bytes, bytearray)):
            text = bytes(payload).decode("utf-8", errors="replace")
        else:
            text = str(payload)

        entry = LogEntry.received(message.topic, text)
        try:
            ok = self.store.append(entry)
        except Exception:
            # Never raise into the paho network thread.
            logger.exception("mqtt_message_append_failed topic=%s", message.topic)
            return None

        if ok:
            logger.debug("mqtt_message_appended topic=%s entries=%s", message.topic, len(self.store))
        else:
            logger.error("mqtt_message_not_persisted topic=%s", message.topic)
