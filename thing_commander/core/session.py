"""
Session addressing for Thing Commander.

A session scopes the request ids embedded in every outbound topic. Outbound
commands are published on ``cloud/<username>/<gateway>/<session_id>::<n>``
and gateway output is received on ``gateway/<username>/<gateway>/+``.
"""
import threading
import uuid
from typing import Optional

from ..utils.exceptions import InvalidArgumentError
from ..utils.validators import validate_name

OUTBOUND_ROLE = 'cloud'
INBOUND_ROLE = 'gateway'
REQUEST_ID_SEPARATOR = '::'
SUBSCRIPTION_WILDCARD = '+'


def generate_session_id() -> str:
    """Generate a short random session id."""
    return uuid.uuid4().hex[:12]


class Session:
    """Owns the session id and the request counter of one console run."""

    def __init__(self, session_id: Optional[str] = None):
        if not isinstance(session_id, str) or len(session_id) <= 0:
            session_id = generate_session_id()
        self.session_id = session_id
        self.request_counter = 0
        self._lock = threading.Lock()

    def next_request_id(self) -> str:
        """Increment the request counter and return ``<session_id>::<counter>``."""
        with self._lock:
            self.request_counter += 1
            counter = self.request_counter
        return f"{self.session_id}{REQUEST_ID_SEPARATOR}{counter}"

    def __repr__(self):
        return f"Session(session_id={self.session_id!r}, request_counter={self.request_counter})"


def topic_for(role: str, username: str, gateway: str, request_id: Optional[str] = None) -> str:
    """Build the topic for ``role``.

    Outbound (``cloud``) topics end with the mandatory request id, inbound
    (``gateway``) subscription topics end with a single-level wildcard.
    """
    validate_name('username', username)
    validate_name('gateway', gateway)

    if role == OUTBOUND_ROLE:
        if not request_id:
            raise InvalidArgumentError("A request id is required for outbound topics")
        suffix = request_id
    elif role == INBOUND_ROLE:
        if request_id:
            raise InvalidArgumentError("Inbound topics do not take a request id")
        suffix = SUBSCRIPTION_WILDCARD
    else:
        raise InvalidArgumentError(f"Invalid topic role specified: [{role}]")

    return f"{role}/{username}/{gateway}/{suffix}"
