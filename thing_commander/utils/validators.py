"""
Validation utilities for Thing Commander.
"""
import re
from urllib.parse import urlparse
from .exceptions import InvalidArgumentError

CONNECTOR_CATEGORIES = ('cloud', 'device')

BROKER_ENDPOINT_PATTERN = re.compile(r'^mqtts?://[A-Za-z0-9-_.:]+')

def validate_broker_url(broker_url: str) -> None:
    """Validate MQTT broker URL format."""
    if not isinstance(broker_url, str) or not BROKER_ENDPOINT_PATTERN.match(broker_url):
        raise InvalidArgumentError(
            "Broker endpoint must begin with mqtt:// or mqtts://, followed by a valid uri")
    try:
        parsed = urlparse(broker_url)
        parsed.port  # raises ValueError for a malformed port
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid broker URL: {str(e)}")
    if not parsed.hostname:
        raise InvalidArgumentError("Broker URL must include a hostname")

def validate_topic(topic: str) -> None:
    """Validate MQTT topic format."""
    if not topic:
        raise InvalidArgumentError("Topic cannot be empty")

    if len(topic) > 65535:
        raise InvalidArgumentError("Topic length exceeds maximum allowed (65,535 bytes)")

    if '#' in topic and topic[-1] != '#':
        raise InvalidArgumentError("Wildcard '#' must be at the end of the topic")

    if '//' in topic:
        raise InvalidArgumentError("Empty topic level (double forward slash) is not allowed")

def validate_category(category) -> str:
    """Validate a connector category, which must be 'cloud' or 'device'."""
    if category not in CONNECTOR_CATEGORIES:
        raise InvalidArgumentError(f"Invalid category specified: [{category}]")
    return category

def validate_connector_id(connector_id) -> str:
    """Validate a connector id, which must be a non-empty string."""
    if not isinstance(connector_id, str) or len(connector_id) <= 0:
        raise InvalidArgumentError(f"Invalid id specified: [{connector_id}]")
    return connector_id

def validate_required(name: str, value) -> str:
    """Validate that a named field holds a non-empty string."""
    if not isinstance(value, str) or len(value) <= 0:
        raise InvalidArgumentError(f"Missing required field: {name}")
    return value

def validate_name(label: str, value) -> str:
    """Validate a gateway or user name used inside a topic level."""
    validate_required(label, value)
    if any(char in value for char in '/+#'):
        raise InvalidArgumentError(f"Invalid {label} specified: [{value}]")
    return value
