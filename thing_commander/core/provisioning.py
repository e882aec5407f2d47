"""
Provisioning plan for handing a gateway over to a new cloud identity.

The plan is a fixed, ordered list of requests. The new identity's connectors
are created before the local control path is disabled and before the old
identity's connectors are deleted, so a gateway that stops partway through
is still reachable through one of the two identities. The plan is advisory:
there is no acknowledgement and no rollback.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..utils.debug_logger import debug_step
from ..utils.exceptions import InvalidArgumentError
from ..utils.validators import validate_required
from . import encoder
from .options import KeyedOptions

logger = logging.getLogger(__name__)

DEV_HOST = 'api-iot-dev.analoggarage.com'
PROD_HOST = 'api-iot.analoggarage.com'

DEFAULT_PORT = '8443'
DEFAULT_PROTOCOL = 'mqtts'
DEFAULT_NETWORK_INTERFACE = 'eth0'

HTTP_CONNECTOR_ID = 'http'
API_KEY_HEADER = 'x-api-key'

REQUIRED_FIELDS = ('host', 'current_gateway_name', 'new_gateway_name', 'username', 'password')


@dataclass
class ProvisioningOptions(KeyedOptions):
    """Parameters of one provisioning plan."""

    host: Optional[str] = None
    current_gateway_name: Optional[str] = None
    new_gateway_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    port: Any = DEFAULT_PORT
    protocol: str = DEFAULT_PROTOCOL
    network_interface: str = DEFAULT_NETWORK_INTERFACE
    api_key: Optional[str] = None

    def validate(self) -> None:
        for name in REQUIRED_FIELDS:
            validate_required(name, getattr(self, name))
        if self.new_gateway_name == self.current_gateway_name:
            raise InvalidArgumentError(
                f"New gateway name must differ from the current one: [{self.new_gateway_name}]")

    def __repr__(self):
        return (f"ProvisioningOptions(host={self.host!r}, "
                f"current_gateway_name={self.current_gateway_name!r}, "
                f"new_gateway_name={self.new_gateway_name!r}, username={self.username!r})")


def _cloud_connector_config(options: ProvisioningOptions) -> Dict[str, Any]:
    config = {
        'host': options.host,
        'port': options.port or DEFAULT_PORT,
        'protocol': options.protocol or DEFAULT_PROTOCOL,
        'networkInterface': options.network_interface or DEFAULT_NETWORK_INTERFACE,
        'gatewayname': options.new_gateway_name,
        'username': options.username,
        'password': options.password,
        'topics': ''
    }
    config.update(options.extras)
    return {'type': 'CncCloud', 'config': config}


def _http_connector_config(options: ProvisioningOptions) -> Dict[str, Any]:
    return {
        'type': 'Http',
        'config': {
            'url': f"https://{options.host}",
            'headers': {API_KEY_HEADER: options.api_key}
        }
    }


@debug_step("Building provisioning plan")
def build_provisioning_plan(options: ProvisioningOptions) -> List[Dict[str, Any]]:
    """Validate ``options`` and return the ordered provisioning requests.

    Steps:
        0. create the new cloud connector
        1. create the new gateway device connector
        2. disable the local network on the current gateway
        3. delete the current cloud connector
        4. delete the current gateway device connector
        5. (only with an api key) create the Http telemetry connector
    """
    options.validate()
    current = options.current_gateway_name
    new = options.new_gateway_name

    plan = [
        encoder.update_config('cloud', encoder.cloud_connector_id(new),
                              _cloud_connector_config(options)),
        encoder.update_config('device', encoder.gateway_connector_id(new),
                              {'type': 'CncGateway', 'config': {}}),
        encoder.send_data('device', encoder.gateway_connector_id(current),
                          {'command': encoder.DISABLE_LOCAL_NETWORK}),
        encoder.delete_config('cloud', encoder.cloud_connector_id(current)),
        encoder.delete_config('device', encoder.gateway_connector_id(current)),
    ]
    if options.api_key:
        plan.append(encoder.update_config('cloud', HTTP_CONNECTOR_ID,
                                          _http_connector_config(options)))

    logger.debug(f"Provisioning plan {current} -> {new}: {len(plan)} steps")
    return plan
