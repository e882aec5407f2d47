"""
Command publishing for a single managed gateway.
"""
import logging
from typing import Any, Dict, Optional, Union

from ..utils.exceptions import InvalidArgumentError
from ..utils.validators import validate_name
from . import encoder
from .options import LeptonOptions
from .provisioning import ProvisioningOptions, build_provisioning_plan
from .session import OUTBOUND_ROLE, Session, topic_for

logger = logging.getLogger(__name__)


class Commander:
    """Issues commands to one gateway through the message bus.

    Publishing is fire-and-forget: each method validates its arguments, builds
    the request, publishes it on a fresh request-id topic and returns that
    request id. Nothing is published when validation fails.

    Args:
        client: Connection exposing ``publish(topic, payload)``.
        gateway: Name of the managed gateway.
        username: Username the gateway belongs to.
        session: Session that issues request ids. A new one is created if omitted.
    """

    def __init__(self, client, gateway: str, username: str, session: Optional[Session] = None):
        if client is None or not hasattr(client, 'publish'):
            raise InvalidArgumentError("Invalid mqtt client specified")
        validate_name('gateway', gateway)
        validate_name('username', username)

        self.client = client
        self.gateway = gateway
        self.username = username
        self.session = session if session is not None else Session()

    def _send_payload(self, payload: Union[Dict[str, Any], list],
                      request_id: Optional[str] = None) -> str:
        request_id = request_id or self.session.next_request_id()
        topic = topic_for(OUTBOUND_ROLE, self.username, self.gateway, request_id)
        message = encoder.serialize(payload)
        logger.debug(f"Publishing to {topic}: {message}")
        self.client.publish(topic, message)
        return request_id

    # Connector lifecycle

    def stop_connector(self, category: Optional[str] = None, connector_id: Optional[str] = None,
                       *, request_id: Optional[str] = None) -> str:
        """Stop one connector, every connector of a category, or every connector."""
        payload = encoder.connector_action(encoder.STOP, category, connector_id)
        return self._send_payload(payload, request_id)

    def start_connector(self, category: Optional[str] = None, connector_id: Optional[str] = None,
                        *, request_id: Optional[str] = None) -> str:
        """Start one connector, every connector of a category, or every connector."""
        payload = encoder.connector_action(encoder.START, category, connector_id)
        return self._send_payload(payload, request_id)

    def restart_connector(self, category: Optional[str] = None, connector_id: Optional[str] = None,
                          *, request_id: Optional[str] = None) -> str:
        """Restart one connector, every connector of a category, or every connector."""
        payload = encoder.connector_action(encoder.RESTART, category, connector_id)
        return self._send_payload(payload, request_id)

    def list_connectors(self, category: Optional[str] = None,
                        *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.list_connectors(category), request_id)

    # Connector data and configuration

    def send_data_to_connector(self, category: str, connector_id: str, data: Any = None,
                               *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.send_data(category, connector_id, data), request_id)

    def update_connector_config(self, category: str, connector_id: str, config: Any = None,
                                *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.update_config(category, connector_id, config),
                                  request_id)

    def delete_connector_config(self, category: str, connector_id: str,
                                *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.delete_config(category, connector_id), request_id)

    def update_connector_type(self, connector_type: str, module_path: str,
                              *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.update_connector_type(connector_type, module_path),
                                  request_id)

    def configure_lepton(self, options: LeptonOptions, *, request_id: Optional[str] = None) -> str:
        """Create or replace the Lepton camera device connector."""
        return self.update_connector_config('device', options.id, options.to_connector_config(),
                                            request_id=request_id)

    # Agent maintenance

    def terminate_agent(self, *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.maintenance(encoder.SHUTDOWN_PROGRAM), request_id)

    def upgrade_agent(self, *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.maintenance(encoder.UPGRADE_PROGRAM), request_id)

    def reboot_gateway(self, *, request_id: Optional[str] = None) -> str:
        return self._send_payload(encoder.maintenance(encoder.REBOOT_GATEWAY), request_id)

    def sys_info(self, gateway_name: Optional[str] = None,
                 *, request_id: Optional[str] = None) -> str:
        """Ask the gateway agent to report system information."""
        connector_id = encoder.gateway_connector_id(gateway_name or self.gateway)
        return self.send_data_to_connector('device', connector_id,
                                           {'command': encoder.SYSTEM_INFO},
                                           request_id=request_id)

    def reset_agent(self, gateway_name: Optional[str] = None,
                    *, request_id: Optional[str] = None) -> str:
        """Ask the gateway agent to reset itself."""
        connector_id = encoder.gateway_connector_id(gateway_name or self.gateway)
        return self.send_data_to_connector('device', connector_id,
                                           {'command': encoder.RESET_AGENT},
                                           request_id=request_id)

    # Provisioning

    def init_agent(self, options: Union[ProvisioningOptions, Dict[str, Any]],
                   *, request_id: Optional[str] = None) -> str:
        """Publish a provisioning plan as a single message."""
        if isinstance(options, dict):
            options = ProvisioningOptions().update(options)
        if not isinstance(options, ProvisioningOptions):
            raise InvalidArgumentError("Invalid provisioning options specified")
        plan = build_provisioning_plan(options)
        request_id = self._send_payload(plan, request_id)
        logger.info(f"Provisioning plan ({len(plan)} steps) sent for "
                    f"{options.current_gateway_name} -> {options.new_gateway_name} [{request_id}]")
        return request_id
