"""Tests for request payload encoding."""

import json

import pytest

from thing_commander.core import encoder
from thing_commander.utils.exceptions import ConfigParseError, InvalidArgumentError


@pytest.mark.parametrize('verb', [encoder.STOP, encoder.START, encoder.RESTART])
@pytest.mark.parametrize('category', [None, 'all', 'cloud', 'device', 'bogus'])
def test_all_id_resolves_to_all_connectors_action(verb, category):
    payload = encoder.connector_action(verb, category, 'all')

    assert payload['action'] == f"{verb}_all_connectors"
    assert payload['category'] is None
    assert payload['id'] is None


def test_all_category_becomes_the_id():
    payload = encoder.connector_action(encoder.STOP, 'all', 'sensor1')

    assert payload == {'category': None, 'action': 'stop_all_connectors', 'id': None}


def test_single_connector_target():
    payload = encoder.connector_action(encoder.STOP, 'cloud', 'sensor1')

    assert payload == {'category': 'cloud', 'action': 'stop_connector', 'id': 'sensor1'}


def test_missing_id_targets_every_connector_of_category():
    payload = encoder.connector_action(encoder.RESTART, 'device')

    assert payload == {'category': 'device', 'action': 'restart_all_connectors', 'id': None}


@pytest.mark.parametrize('category', [None, 'bogus', 'Cloud', ''])
def test_invalid_category_is_rejected(category):
    with pytest.raises(InvalidArgumentError, match='Invalid category'):
        encoder.connector_action(encoder.START, category, 'sensor1')


def test_list_connectors_categories():
    assert encoder.list_connectors() == {'category': None, 'action': 'list_connectors'}
    assert encoder.list_connectors('all') == {'category': None, 'action': 'list_connectors'}
    assert encoder.list_connectors('cloud')['category'] == 'cloud'

    with pytest.raises(InvalidArgumentError):
        encoder.list_connectors('bogus')


def test_send_data_serializes_objects_compactly():
    payload = encoder.send_data('device', 'gw1', {'command': 'system_info'})

    assert payload == {
        'action': 'send_data',
        'category': 'device',
        'id': 'gw1',
        'data': '{"command":"system_info"}'
    }


def test_send_data_strips_operator_quotes():
    assert encoder.send_data('cloud', 'c1', "'hello world'")['data'] == 'hello world'


@pytest.mark.parametrize('data', [None, ''])
def test_send_data_empty(data):
    assert encoder.send_data('cloud', 'c1', data)['data'] == ''


@pytest.mark.parametrize('data', ['x', "'"])
def test_send_data_keeps_single_character(data):
    assert encoder.send_data('cloud', 'c1', data)['data'] == data


def test_send_data_has_no_all_shortcut():
    with pytest.raises(InvalidArgumentError):
        encoder.send_data('all', 'c1', "'x'")


@pytest.mark.parametrize('connector_id', [None, '', 5])
def test_send_data_requires_id(connector_id):
    with pytest.raises(InvalidArgumentError, match='Invalid id'):
        encoder.send_data('cloud', connector_id, "'x'")


def test_update_config_parses_quoted_json():
    payload = encoder.update_config('cloud', 'c1', '\'{"a":1}\'')

    assert payload['config'] == {'a': 1}
    assert payload['action'] == 'update_config'


def test_update_config_passes_structured_values_through():
    config = {'type': 'Mqtt', 'config': {'host': 'h'}}

    assert encoder.update_config('device', 'd1', config)['config'] is config


def test_update_config_round_trips_serialized_objects():
    connector_config = {'type': 'Http', 'config': {'url': 'https://x', 'retries': [1, 2, 3], 'on': True}}

    assert encoder.update_config('cloud', 'c1', json.dumps(connector_config))['config'] == connector_config


@pytest.mark.parametrize('config', ["'{bad json}'", "'{\"a\":}'", None])
def test_update_config_parse_errors(config):
    with pytest.raises(ConfigParseError, match='Error parsing configuration'):
        encoder.update_config('cloud', 'c1', config)


def test_config_parse_error_keeps_parser_message():
    with pytest.raises(ConfigParseError) as excinfo:
        encoder.parse_config("'{\"a\":}'")

    assert 'Expecting value' in str(excinfo.value)
    assert isinstance(excinfo.value.__cause__, json.JSONDecodeError)


def test_delete_config():
    assert encoder.delete_config('device', 'd1') == {
        'action': 'delete_config', 'category': 'device', 'id': 'd1'
    }


def test_update_connector_type_requires_module_path():
    assert encoder.update_connector_type('Lepton', 'connectors/lepton') == {
        'action': 'update_connector_type', 'type': 'Lepton', 'modulePath': 'connectors/lepton'
    }
    with pytest.raises(InvalidArgumentError, match='module path'):
        encoder.update_connector_type('Lepton', '')


def test_serialize_drops_absent_fields():
    text = encoder.serialize({'category': None, 'action': 'stop_all_connectors', 'id': None})

    assert text == '{"action":"stop_all_connectors"}'


def test_serialize_plan_drops_absent_fields_per_step():
    text = encoder.serialize([{'a': 1, 'b': None}, {'c': None}])

    assert json.loads(text) == [{'a': 1}, {}]
