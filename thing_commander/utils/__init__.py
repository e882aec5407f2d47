"""
Utility functions for Thing Commander.
"""
from .exceptions import (
    CommanderError,
    ConfigParseError,
    InvalidArgumentError,
    TransportError,
    UnknownCommandError,
)

__all__ = [
    'CommanderError',
    'ConfigParseError',
    'InvalidArgumentError',
    'TransportError',
    'UnknownCommandError'
]
