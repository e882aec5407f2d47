"""
Custom exceptions for Thing Commander.
"""

class CommanderError(Exception):
    """Base exception for Thing Commander errors."""
    pass

class InvalidArgumentError(CommanderError):
    """Exception raised when a command argument fails validation."""
    pass

class ConfigParseError(CommanderError):
    """Exception raised when a connector configuration is not valid JSON."""
    pass

class TransportError(CommanderError):
    """Exception raised by the message bus connection."""
    pass

class MQTTConnectionError(TransportError):
    """Exception raised for MQTT connection errors."""
    pass

class MQTTMessageError(TransportError):
    """Exception raised for MQTT messaging errors."""
    pass

class UnknownCommandError(CommanderError):
    """Exception raised for shell input that matches no command."""

    def __init__(self, command: str):
        super().__init__("bad command")
        self.command = command
