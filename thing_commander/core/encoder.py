"""
Command payload encoding for Thing Commander.

Every function here validates its arguments and returns the canonical request
dictionary for one action. Nothing is published from this module; fields whose
value is ``None`` are dropped when the payload is serialized.
"""
import json
from typing import Any, Dict, Optional, Tuple

from ..utils.exceptions import ConfigParseError
from ..utils.validators import validate_category, validate_connector_id, validate_required
from .tokens import strip_quotes

ALL = 'all'

STOP = 'stop'
START = 'start'
RESTART = 'restart'

MAINTENANCE_ACTION = 'maintenance_action'
SHUTDOWN_PROGRAM = 'shutdown_program'
UPGRADE_PROGRAM = 'upgrade_program'
REBOOT_GATEWAY = 'reboot_gateway'

SYSTEM_INFO = 'system_info'
RESET_AGENT = 'reset_agent'
DISABLE_LOCAL_NETWORK = 'disable_local_network'


def gateway_connector_id(gateway_name: str) -> str:
    """Id of the device connector that represents a gateway's own agent."""
    return f"cnc-gateway-{gateway_name}"


def cloud_connector_id(gateway_name: str) -> str:
    """Id of the cloud connector that links a gateway to the command bus."""
    return f"cnc-cloud-{gateway_name}"


def to_json(value: Any) -> str:
    """Canonical compact JSON text."""
    return json.dumps(value, separators=(',', ':'))


def serialize(payload) -> str:
    """Serialize a request, or a list of requests, dropping absent fields."""
    if isinstance(payload, list):
        return to_json([_drop_absent(step) for step in payload])
    return to_json(_drop_absent(payload))


def _drop_absent(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in payload.items() if value is not None}


def resolve_target(category: Optional[str], connector_id: Optional[str]) -> Tuple[Optional[str], str]:
    """Normalize a (category, id) pair for the start/stop/restart family.

    A category of ``all`` becomes the id. An id of ``all`` clears the category
    whatever it was. Otherwise the category must be ``cloud`` or ``device``.
    A missing id means ``all``.
    """
    if category == ALL:
        connector_id = category
        category = None
    elif connector_id == ALL:
        category = None
    else:
        validate_category(category)
    connector_id = connector_id or ALL
    return category, connector_id


def connector_action(verb: str, category: Optional[str] = None,
                     connector_id: Optional[str] = None) -> Dict[str, Any]:
    """Build a start/stop/restart request for one connector or for all of them."""
    category, connector_id = resolve_target(category, connector_id)
    targets_all = connector_id == ALL
    return {
        'category': category,
        'action': f"{verb}_all_connectors" if targets_all else f"{verb}_connector",
        'id': None if targets_all else connector_id
    }


def list_connectors(category: Optional[str] = None) -> Dict[str, Any]:
    if category == ALL:
        category = None
    elif category is not None:
        validate_category(category)
    return {
        'category': category,
        'action': 'list_connectors'
    }


def normalize_data(data: Any) -> str:
    """Turn a send_data argument into the text embedded in the request.

    Strings are expected to carry the operator's quotes, so one character is
    removed from each end of anything at least two characters long. Other
    values are serialized to compact JSON.
    """
    if data is None:
        return ''
    if isinstance(data, str):
        return data[1:-1] if len(data) >= 2 else data
    return to_json(data)


def send_data(category: str, connector_id: str, data: Any = None) -> Dict[str, Any]:
    validate_category(category)
    validate_connector_id(connector_id)
    return {
        'action': 'send_data',
        'category': category,
        'id': connector_id,
        'data': normalize_data(data)
    }


def parse_config(config: Any) -> Any:
    """Parse a connector configuration given as JSON text; pass other values through."""
    if config is None:
        raise ConfigParseError("Error parsing configuration: [no configuration specified]")
    if not isinstance(config, str):
        return config
    try:
        return json.loads(strip_quotes(config))
    except json.JSONDecodeError as e:
        raise ConfigParseError(f"Error parsing configuration: [{e}]") from e


def update_config(category: str, connector_id: str, config: Any) -> Dict[str, Any]:
    validate_category(category)
    validate_connector_id(connector_id)
    return {
        'action': 'update_config',
        'category': category,
        'id': connector_id,
        'config': parse_config(config)
    }


def delete_config(category: str, connector_id: str) -> Dict[str, Any]:
    validate_category(category)
    validate_connector_id(connector_id)
    return {
        'action': 'delete_config',
        'category': category,
        'id': connector_id
    }


def update_connector_type(connector_type: str, module_path: str) -> Dict[str, Any]:
    validate_required('type', connector_type)
    validate_required('module path', module_path)
    return {
        'action': 'update_connector_type',
        'type': connector_type,
        'modulePath': module_path
    }


def maintenance(command: str) -> Dict[str, Any]:
    return {
        'action': MAINTENANCE_ACTION,
        'command': command
    }
