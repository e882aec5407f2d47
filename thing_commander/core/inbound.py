"""
Classification of gateway output received from the message bus.

Gateway messages are UTF-8 text starting with ``[error]``, ``[warn]`` or an
info tag. The tag is cut off by width: 7 characters for errors, 6 for
everything else.
"""
from dataclasses import dataclass

ERROR = 'error'
WARN = 'warn'
INFO = 'info'

ERROR_PREFIX = '[error]'
WARN_PREFIX = '[warn]'
DEFAULT_PREFIX_WIDTH = 6

SEVERITY_COLORS = {
    ERROR: 'red',
    WARN: 'yellow',
    INFO: 'blue'
}


@dataclass(frozen=True)
class InboundMessage:
    topic: str
    severity: str
    text: str

    @property
    def color(self) -> str:
        return SEVERITY_COLORS[self.severity]


def classify_message(topic: str, payload) -> InboundMessage:
    """Split a raw message into severity and display text.

    Raises:
        UnicodeDecodeError: if ``payload`` is not valid UTF-8.
        TypeError: if ``payload`` is neither bytes nor text.
    """
    if isinstance(payload, (bytes, bytearray)):
        payload = payload.decode('utf-8')
    elif not isinstance(payload, str):
        raise TypeError(f"Unsupported message payload type: {type(payload).__name__}")

    if payload.startswith(ERROR_PREFIX):
        return InboundMessage(topic, ERROR, payload[len(ERROR_PREFIX):])
    if payload.startswith(WARN_PREFIX):
        return InboundMessage(topic, WARN, payload[len(WARN_PREFIX):])
    return InboundMessage(topic, INFO, payload[DEFAULT_PREFIX_WIDTH:])
