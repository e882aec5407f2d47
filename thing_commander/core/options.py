"""
Keyed option structures for commands that take ``key=value`` arguments.
"""
import dataclasses
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

_CAMEL_BOUNDARY = re.compile(r'(?<!^)(?=[A-Z])')


@dataclass
class KeyedOptions:
    """Base for keyed command options.

    Known keys map onto dataclass fields. camelCase spellings of a field name
    are accepted. Anything else is kept verbatim in ``extras``.
    """

    extras: Dict[str, Any] = field(default_factory=dict)

    def copy(self) -> 'KeyedOptions':
        """Return an independent copy, ``extras`` included."""
        return dataclasses.replace(self, extras=dict(self.extras))

    def _field_name(self, key: str) -> Optional[str]:
        names = {f.name for f in dataclasses.fields(self)} - {'extras'}
        if key in names:
            return key
        snake = _CAMEL_BOUNDARY.sub('_', key).lower()
        if snake in names:
            return snake
        return None

    def set(self, key: str, value: Any) -> None:
        """Override one option. The last write for a key wins."""
        name = self._field_name(key)
        if name is None:
            self.extras[key] = value
        else:
            setattr(self, name, value)

    def update(self, values: Dict[str, Any]) -> 'KeyedOptions':
        for key, value in values.items():
            self.set(key, value)
        return self


@dataclass
class LeptonOptions(KeyedOptions):
    """Options for the Lepton thermal camera device connector."""

    id: str = 'lepton'
    spi_device: str = '/dev/spidev0.0'
    i2c_device: str = '/dev/i2c-1'
    capture_interval: str = '5000'

    def to_connector_config(self) -> Dict[str, Any]:
        config = {
            'spiDevice': self.spi_device,
            'i2cDevice': self.i2c_device,
            'captureInterval': self.capture_interval
        }
        config.update(self.extras)
        return {'type': 'Lepton', 'config': config}
