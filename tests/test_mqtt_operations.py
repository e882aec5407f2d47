"""Tests for the MQTT transport wrapper."""

from types import SimpleNamespace

import paho.mqtt.client as mqtt
import pytest

from thing_commander.mqtt_operations import MQTTOperations
from thing_commander.utils.exceptions import (
    InvalidArgumentError, MQTTConnectionError, MQTTMessageError
)

SUCCESS = SimpleNamespace(is_failure=False)
REFUSED = SimpleNamespace(is_failure=True)


class FakeMqttClient:
    """Minimal fake paho-mqtt client; callbacks run synchronously."""

    def __init__(self, events, *args, connect_reason=SUCCESS, connect_error=None,
                 publish_rc=mqtt.MQTT_ERR_SUCCESS, subscribe_rc=mqtt.MQTT_ERR_SUCCESS,
                 **kwargs):
        self._events = events
        self._events['init'] = (args, kwargs)
        self._connect_reason = connect_reason
        self._connect_error = connect_error
        self._publish_rc = publish_rc
        self._subscribe_rc = subscribe_rc
        self.message_callbacks = {}

        self.on_connect = None
        self.on_disconnect = None

    def enable_logger(self, logger):
        self._events['logger'] = logger

    def username_pw_set(self, username, password=None):
        self._events['auth'] = (username, password)

    def tls_set(self, **kwargs):
        self._events['tls'] = kwargs

    def connect(self, host, port, keepalive):
        if self._connect_error is not None:
            raise self._connect_error
        self._events['connect_args'] = (host, port, keepalive)
        self.on_connect(self, None, None, self._connect_reason, None)

    def loop_start(self):
        self._events['loop_start'] = self._events.get('loop_start', 0) + 1

    def loop_stop(self):
        self._events['loop_stop'] = self._events.get('loop_stop', 0) + 1

    def disconnect(self):
        self._events['disconnect_called'] = True
        self.on_disconnect(self, None, None, SUCCESS, None)

    def publish(self, topic, payload, qos=0):
        self._events.setdefault('published', []).append((topic, payload, qos))
        return SimpleNamespace(rc=self._publish_rc)

    def subscribe(self, topic, qos=0):
        self._events.setdefault('subscribed', []).append((topic, qos))
        return self._subscribe_rc, 1

    def message_callback_add(self, topic, callback):
        self.message_callbacks[topic] = callback


@pytest.fixture
def events():
    return {}


@pytest.fixture
def fake_factory(monkeypatch, events):
    options = {}

    def factory(*args, **kwargs):
        return FakeMqttClient(events, *args, **options, **kwargs)

    monkeypatch.setattr('thing_commander.mqtt_operations.mqtt.Client', factory)
    return options


def make_operations(broker='mqtts://broker.example.com'):
    return MQTTOperations(broker, 'console_sess1', 'alice', 'secret')


def test_client_configuration(fake_factory, events):
    operations = make_operations()

    args, kwargs = events['init']
    assert args == (mqtt.CallbackAPIVersion.VERSION2,)
    assert kwargs == {'client_id': 'console_sess1', 'clean_session': True}
    assert events['auth'] == ('alice', 'secret')
    assert 'tls' in events
    assert operations.port == 8883


def test_plain_mqtt_skips_tls(fake_factory, events):
    operations = make_operations('mqtt://localhost:1884')

    assert 'tls' not in events
    assert operations.host == 'localhost'
    assert operations.port == 1884


def test_invalid_broker_rejected(fake_factory):
    with pytest.raises(InvalidArgumentError):
        make_operations('http://localhost')


def test_connect(fake_factory, events):
    operations = make_operations()

    assert operations.connect(timeout=1) is True
    assert operations.connected
    assert events['connect_args'] == ('broker.example.com', 8883, 60)
    assert events['loop_start'] == 1


def test_connect_refused(fake_factory, events):
    fake_factory['connect_reason'] = REFUSED
    operations = make_operations()

    with pytest.raises(MQTTConnectionError, match='Error connecting to mqtt broker'):
        operations.connect(timeout=1)

    assert events['loop_stop'] == 1
    assert not operations.connected


def test_connect_socket_error(fake_factory):
    fake_factory['connect_error'] = OSError('connection refused')
    operations = make_operations()

    with pytest.raises(MQTTConnectionError, match='connection refused'):
        operations.connect(timeout=1)


def test_disconnect(fake_factory, events):
    operations = make_operations()
    operations.connect(timeout=1)

    operations.disconnect()

    assert events['disconnect_called']
    assert events['loop_stop'] == 1
    assert not operations.connected


def test_publish(fake_factory, events):
    operations = make_operations()

    operations.publish('cloud/alice/gw1/sess1::1', '{"action":"list_connectors"}')

    assert events['published'] == [('cloud/alice/gw1/sess1::1', '{"action":"list_connectors"}', 1)]


def test_publish_failure(fake_factory):
    fake_factory['publish_rc'] = mqtt.MQTT_ERR_NO_CONN
    operations = make_operations()

    with pytest.raises(MQTTMessageError, match='Publish failed'):
        operations.publish('cloud/alice/gw1/sess1::1', '{}')


def test_publish_invalid_topic(fake_factory, events):
    operations = make_operations()

    with pytest.raises(InvalidArgumentError):
        operations.publish('cloud//gw1', '{}')

    assert 'published' not in events


def test_subscribe_routes_messages(fake_factory, events):
    operations = make_operations()
    received = []

    operations.subscribe('gateway/alice/gw1/+', callback=lambda t, p: received.append((t, p)))
    handler = operations.mqtt_client.message_callbacks['gateway/alice/gw1/+']
    handler(None, None, SimpleNamespace(topic='gateway/alice/gw1/log', payload=b'[info]hi'))

    assert events['subscribed'] == [('gateway/alice/gw1/+', 1)]
    assert received == [('gateway/alice/gw1/log', b'[info]hi')]


def test_subscriptions_restored_on_reconnect(fake_factory, events):
    operations = make_operations()
    operations.subscribe('gateway/alice/gw1/+')

    operations.connect(timeout=1)

    assert events['subscribed'] == [('gateway/alice/gw1/+', 1), ('gateway/alice/gw1/+', 1)]


def test_subscribe_failure(fake_factory):
    fake_factory['subscribe_rc'] = mqtt.MQTT_ERR_NO_CONN
    operations = make_operations()

    with pytest.raises(MQTTConnectionError, match='Subscribe failed'):
        operations.subscribe('gateway/alice/gw1/+')

    assert operations.subscriptions == {}
