import json

import pytest

from thing_commander.config import ConsoleConfig
from thing_commander.core.commander import Commander
from thing_commander.core.session import Session


class RecordingClient:
    """Stands in for MQTTOperations: records publishes and subscriptions."""

    def __init__(self):
        self.published = []
        self.subscribed = []

    def publish(self, topic, payload, qos=1):
        self.published.append((topic, payload))
        return True

    def subscribe(self, topic, qos=1, callback=None):
        self.subscribed.append((topic, callback))
        return True

    def payloads(self):
        return [json.loads(payload) for _, payload in self.published]

    def topics(self):
        return [topic for topic, _ in self.published]


class RecordingWriter:
    """Stands in for ConsoleWriter: records every line and its color."""

    def __init__(self):
        self.lines = []

    def echo(self, message='', fg=None, bold=False):
        self.lines.append((message, fg))

    def texts(self):
        return [message for message, _ in self.lines]


@pytest.fixture
def client():
    return RecordingClient()


@pytest.fixture
def session():
    return Session('sess1')


@pytest.fixture
def commander(client, session):
    return Commander(client, 'gw1', 'alice', session)


@pytest.fixture
def console_config(tmp_path):
    return ConsoleConfig(
        broker_endpoint='mqtts://broker.example.com:8883',
        gateway='gw1',
        username='alice',
        password='secret',
        session_id='sess1',
        config_dir=str(tmp_path / 'config')
    )


@pytest.fixture
def writer():
    return RecordingWriter()
