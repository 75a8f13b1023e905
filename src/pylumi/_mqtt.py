"""Forward hub notifications to an MQTT broker.

The bridge only publishes.  It runs paho-mqtt's threaded network loop;
publishing from the event loop thread is safe because paho queues the
packet for its own thread.
"""

from __future__ import annotations

import json
import logging
from typing import Any, cast

import paho.mqtt.client as mqtt

from pylumi._redact import redact_for_log
from pylumi.devices.base import Device
from pylumi.events import HubEvent
from pylumi.hub import Hub
from pylumi.models.message import InboundMessage


def _topic_part(value: str | None, default: str) -> str:
    text = (value or "").strip().replace("/", "_")
    return text or default


class MqttBridge:
    """Republish hub ``message`` and ``device`` notifications as JSON.

    Topics are ``<prefix>/<sid>/<cmd>`` for messages and
    ``<prefix>/<sid>/device`` when a device is first seen.  Tokens and
    keys are redacted from every payload.
    """

    def __init__(
        self,
        hub: Hub,
        *,
        host: str,
        port: int = 1883,
        topic_prefix: str = "pylumi",
        client_id: str = "",
        username: str | None = None,
        password: str | None = None,
        keepalive: int = 60,
        logger: logging.Logger | None = None,
    ) -> None:
        self._hub = hub
        self._host = host
        self._port = port
        self._prefix = topic_prefix.rstrip("/")
        self._client_id = client_id
        self._username = username
        self._password = password
        self._keepalive = keepalive
        self._logger = logger or logging.getLogger(__name__)
        self._client: mqtt.Client | None = None
        self._unsubscribe: list[Any] = []

    @property
    def is_running(self) -> bool:
        """Whether the bridge is connected and forwarding."""
        return self._client is not None

    def start(self) -> None:
        """Connect to the broker and start forwarding hub events."""
        self.stop()
        self._logger.debug("MQTT bridge connecting host=%s port=%s", self._host, self._port)

        client = mqtt.Client(
            callback_api_version=cast(Any, mqtt).CallbackAPIVersion.VERSION2,
            client_id=self._client_id,
        )
        client.enable_logger(self._logger)
        if self._username is not None:
            client.username_pw_set(self._username, self._password)

        def on_connect(
            _client: mqtt.Client,
            _userdata: Any,
            _flags: Any,
            reason_code: Any,
            _properties: Any,
        ) -> None:
            if reason_code.value != 0:
                self._logger.warning("MQTT connect failed: %s", reason_code)
                return
            self._logger.debug("MQTT bridge connected reason=%s", reason_code)

        client.on_connect = on_connect
        client.connect(self._host, self._port, keepalive=self._keepalive)
        client.loop_start()

        self._client = client
        self._unsubscribe = [
            self._hub.on(HubEvent.MESSAGE, self._on_message),
            self._hub.on(HubEvent.DEVICE, self._on_device),
        ]

    def stop(self) -> None:
        """Stop forwarding and disconnect from the broker."""
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe = []

        client = self._client
        self._client = None
        if client is None:
            return
        try:
            client.disconnect()
        finally:
            client.loop_stop()
            self._logger.debug("MQTT bridge stopped")

    def _publish(self, topic: str, payload: Any) -> None:
        client = self._client
        if client is None:
            return
        body = json.dumps(redact_for_log(payload), separators=(",", ":"), default=str)
        try:
            info = client.publish(topic, body, qos=0)
        except (OSError, ValueError):
            self._logger.debug("MQTT publish to %s failed", topic, exc_info=True)
            return
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self._logger.debug("MQTT publish to %s returned rc=%s", topic, info.rc)

    def _on_message(self, message: InboundMessage) -> None:
        sid = _topic_part(message.sid, "unknown")
        cmd = _topic_part(message.cmd, "message")
        payload = message.to_dict()
        payload["address"] = message.address
        self._publish(f"{self._prefix}/{sid}/{cmd}", payload)

    def _on_device(self, device: Device, name: str | None) -> None:
        payload = {"sid": device.sid, "model": device.model, "ip": device.ip, "name": name}
        self._publish(f"{self._prefix}/{_topic_part(device.sid, 'unknown')}/device", payload)
