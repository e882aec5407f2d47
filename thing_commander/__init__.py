"""
Thing Commander - an interactive console for remotely controlling IoT gateways over MQTT.
"""

import logging

__version__ = "1.0.0"

# Get logger for this package; handlers are attached by utils.logger.setup_logging
logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

__all__ = ['__version__']
