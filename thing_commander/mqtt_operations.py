"""
MQTT operations for Thing Commander.
"""
import json
import logging
import ssl
import threading
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

import paho.mqtt.client as mqtt

from .utils.debug_logger import debug_step
from .utils.exceptions import MQTTConnectionError, MQTTMessageError
from .utils.validators import validate_broker_url, validate_topic

DEFAULT_PORTS = {
    'mqtt': 1883,
    'mqtts': 8883
}
KEEPALIVE = 60
CONNECT_DISCONNECT_TIMEOUT = 20

MessageCallback = Callable[[str, bytes], None]


class MQTTOperations:
    """MQTT client operations.

    Wraps a paho-mqtt client whose network loop runs on a background thread.
    Message callbacks are invoked on that thread with ``(topic, payload)``.
    """

    def __init__(self, broker: str, client_id: str, username: Optional[str] = None,
                 password: Optional[str] = None):
        validate_broker_url(broker)
        parsed = urlparse(broker)

        self.broker = broker
        self.host = parsed.hostname
        self.port = parsed.port or DEFAULT_PORTS[parsed.scheme]
        self.use_tls = parsed.scheme == 'mqtts'
        self.client_id = client_id
        self.username = username
        self.password = password

        self.logger = logging.getLogger("thing_commander.mqtt")
        self.connected = False
        self.subscriptions: Dict[str, int] = {}
        self._connected_event = threading.Event()
        self._connect_reason = None

        self.mqtt_client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            clean_session=True
        )
        self._configure_mqtt_client()

    def _configure_mqtt_client(self):
        """Configure credentials, TLS and callbacks."""
        if self.username:
            self.mqtt_client.username_pw_set(self.username, self.password)
        if self.use_tls:
            self.mqtt_client.tls_set(cert_reqs=ssl.CERT_REQUIRED)

        self.mqtt_client.enable_logger(self.logger)
        self.mqtt_client.on_connect = self._on_connect
        self.mqtt_client.on_disconnect = self._on_disconnect

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        self._connect_reason = reason_code
        if reason_code.is_failure:
            self.connected = False
            self.logger.error(f"Connection refused by {self.broker}: {reason_code}")
        else:
            self.connected = True
            self.logger.info(f"Connected to {self.broker} as {self.client_id}")
            # Clean sessions drop subscriptions on every reconnect
            for topic, qos in self.subscriptions.items():
                self.mqtt_client.subscribe(topic, qos)
        self._connected_event.set()

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        self.connected = False
        if reason_code.is_failure:
            self.logger.warning(f"Unexpected disconnect from {self.broker}: {reason_code}")
        else:
            self.logger.info(f"Disconnected from {self.broker}")

    @debug_step("Connecting to mqtt broker")
    def connect(self, timeout: float = CONNECT_DISCONNECT_TIMEOUT) -> bool:
        """Connect to the broker and wait for its acknowledgement."""
        if self.connected:
            return True

        self._connected_event.clear()
        try:
            self.mqtt_client.connect(self.host, self.port, KEEPALIVE)
        except (OSError, ValueError) as e:
            raise MQTTConnectionError(
                f"Error connecting to mqtt broker.\nDetails: [{str(e)}]") from e

        self.mqtt_client.loop_start()
        if not self._connected_event.wait(timeout):
            self.mqtt_client.loop_stop()
            raise MQTTConnectionError(
                f"Error connecting to mqtt broker.\nDetails: [timed out after {timeout}s]")
        if not self.connected:
            self.mqtt_client.loop_stop()
            raise MQTTConnectionError(
                f"Error connecting to mqtt broker.\nDetails: [{self._connect_reason}]")
        return True

    def disconnect(self):
        """Disconnect from the broker and stop the network loop."""
        self.mqtt_client.disconnect()
        self.mqtt_client.loop_stop()
        self.connected = False

    def publish(self, topic: str, payload, qos: int = 1):
        """Hand a message to the client without waiting for delivery."""
        validate_topic(topic)
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)

        info = self.mqtt_client.publish(topic, payload, qos)
        if info.rc != mqtt.MQTT_ERR_SUCCESS:
            self.logger.error(f"Publish failed: {mqtt.error_string(info.rc)}")
            raise MQTTMessageError(f"Publish failed: {mqtt.error_string(info.rc)}")

        self.logger.debug(f"Published to {topic}: {payload}")
        return info

    def subscribe(self, topic: str, qos: int = 1, callback: Optional[MessageCallback] = None):
        """Subscribe to a topic, routing its messages to ``callback``."""
        validate_topic(topic)
        qos = int(qos)

        if callback is not None:
            def handler(client, userdata, message):
                callback(message.topic, message.payload)
            self.mqtt_client.message_callback_add(topic, handler)

        result, _ = self.mqtt_client.subscribe(topic, qos)
        if result != mqtt.MQTT_ERR_SUCCESS:
            self.logger.error(f"Subscribe failed: {mqtt.error_string(result)}")
            raise MQTTConnectionError(f"Subscribe failed: {mqtt.error_string(result)}")

        self.subscriptions[topic] = qos
        self.logger.debug(f"Subscribed to {topic}")
        return True
