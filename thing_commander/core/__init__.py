"""
Command protocol layer: addressing, encoding and provisioning.
"""
from .commander import Commander
from .inbound import InboundMessage, classify_message
from .options import KeyedOptions, LeptonOptions
from .provisioning import ProvisioningOptions, build_provisioning_plan
from .session import Session, generate_session_id, topic_for

__all__ = [
    'Commander',
    'InboundMessage',
    'KeyedOptions',
    'LeptonOptions',
    'ProvisioningOptions',
    'Session',
    'build_provisioning_plan',
    'classify_message',
    'generate_session_id',
    'topic_for'
]
