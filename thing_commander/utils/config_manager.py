"""
Configuration manager for Thing Commander.
"""
import json
from pathlib import Path
from typing import Optional

class ConfigManager:
    """Remembers the connection parameters of the last console session."""

    def __init__(self, config_dir: Path):
        """Initialize the configuration manager."""
        self.config_dir = Path(config_dir)
        self.config_file = self.config_dir / 'config.json'
        self.config = {
            'broker_endpoint': None,
            'gateway': None,
            'username': None
        }
        self._load()

    def _load(self):
        """Load configuration from file."""
        if self.config_file.exists():
            try:
                loaded_config = json.loads(self.config_file.read_text())
            except (json.JSONDecodeError, OSError):
                return
            if isinstance(loaded_config, dict):
                self.config.update(
                    {k: v for k, v in loaded_config.items() if k in self.config})

    def _save(self):
        """Save configuration to file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(self.config, indent=2))

    def get_broker(self) -> Optional[str]:
        """Get the last used MQTT broker endpoint."""
        return self.config.get('broker_endpoint')

    def get_gateway(self) -> Optional[str]:
        """Get the last managed gateway."""
        return self.config.get('gateway')

    def get_username(self) -> Optional[str]:
        """Get the last used username."""
        return self.config.get('username')

    def remember_connection(self, broker_endpoint: str, gateway: str, username: str):
        """Store the connection parameters. Passwords are never stored."""
        self.config.update({
            'broker_endpoint': broker_endpoint,
            'gateway': gateway,
            'username': username
        })
        self._save()
