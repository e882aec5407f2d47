"""Tests for console configuration and remembered connection settings."""

import dataclasses
import json

import pytest

from thing_commander.config import ConsoleConfig
from thing_commander.utils.config_manager import ConfigManager
from thing_commander.utils.exceptions import InvalidArgumentError


def test_client_id_and_validate(console_config):
    assert console_config.client_id == 'console_sess1'
    assert console_config.validate() is console_config


def test_password_hidden_from_repr(console_config):
    assert 'secret' not in repr(console_config)


def test_config_is_frozen(console_config):
    with pytest.raises(dataclasses.FrozenInstanceError):
        console_config.gateway = 'other'


def test_session_id_generated():
    config = ConsoleConfig('mqtt://localhost', 'gw1', 'alice', 'pw')

    assert len(config.session_id) == 12


@pytest.mark.parametrize('field, value', [
    ('broker_endpoint', 'http://localhost'),
    ('gateway', 'gw/1'),
    ('username', ''),
    ('password', ''),
    ('session_id', 'a/b'),
    ('session_id', 'a+b'),
    ('session_id', ''),
])
def test_invalid_config(console_config, field, value):
    with pytest.raises(InvalidArgumentError):
        dataclasses.replace(console_config, **{field: value}).validate()


def test_remember_connection(tmp_path):
    manager = ConfigManager(tmp_path)
    manager.remember_connection('mqtt://localhost', 'gw1', 'alice')

    reloaded = ConfigManager(tmp_path)

    assert reloaded.get_broker() == 'mqtt://localhost'
    assert reloaded.get_gateway() == 'gw1'
    assert reloaded.get_username() == 'alice'
    assert 'password' not in json.loads((tmp_path / 'config.json').read_text())


def test_corrupt_and_unknown_entries_ignored(tmp_path):
    (tmp_path / 'config.json').write_text('{not json')
    assert ConfigManager(tmp_path).get_broker() is None

    (tmp_path / 'config.json').write_text(json.dumps({'gateway': 'gw9', 'password': 'x'}))
    manager = ConfigManager(tmp_path)
    assert manager.get_gateway() == 'gw9'
    assert 'password' not in manager.config
