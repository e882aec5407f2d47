"""
Console configuration for Thing Commander.
"""
from dataclasses import dataclass, field
from pathlib import Path

from .core.session import generate_session_id
from .utils.validators import validate_broker_url, validate_name, validate_required

DEFAULT_CONFIG_DIR = Path.home() / '.thing-commander'


@dataclass(frozen=True)
class ConsoleConfig:
    """Connection and session parameters, fixed for the life of a console run."""

    broker_endpoint: str
    gateway: str
    username: str
    password: str = field(repr=False)
    session_id: str = field(default_factory=generate_session_id)
    config_dir: str = str(DEFAULT_CONFIG_DIR)

    @property
    def client_id(self) -> str:
        return f"console_{self.session_id}"

    def validate(self) -> 'ConsoleConfig':
        validate_broker_url(self.broker_endpoint)
        validate_name('gateway', self.gateway)
        validate_name('username', self.username)
        validate_required('password', self.password)
        validate_name('session id', self.session_id)
        return self
