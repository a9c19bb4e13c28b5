"""
Dimension Module
================

Describes a cube dimension whose values may be replaced by surrogate ids in
storage keys. Only two attributes matter to the id service:
- whether id substitution is enabled for the dimension
- how many bytes the id field occupies in the key
"""

from typing import Any, Dict, Optional

import config
from .errors import ConfigurationError


class Dimension:
    """
    Immutable dimension descriptor, usable as a dictionary key.
    """

    __slots__ = ('_name', '_do_id_substitution', '_num_field_bytes')

    def __init__(self, name: str, do_id_substitution: bool = True, num_field_bytes: int = 4):
        # Config values are taken as-is, never coerced
        if not isinstance(do_id_substitution, bool):
            raise ConfigurationError(f"do_id_substitution for dimension {name} must be a bool, "
                                     f"got {do_id_substitution!r}")
        if isinstance(num_field_bytes, bool) or not isinstance(num_field_bytes, int):
            raise ConfigurationError(f"num_field_bytes for dimension {name} must be an int, "
                                     f"got {num_field_bytes!r}")

        self._name = name
        self._do_id_substitution = do_id_substitution
        self._num_field_bytes = num_field_bytes

    @property
    def name(self) -> str:
        return self._name

    @property
    def do_id_substitution(self) -> bool:
        return self._do_id_substitution

    @property
    def num_field_bytes(self) -> int:
        return self._num_field_bytes

    def _key(self):
        return (self._name, self._do_id_substitution, self._num_field_bytes)

    def __eq__(self, other):
        if not isinstance(other, Dimension):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())

    def __repr__(self):
        return (f"Dimension(name={self._name!r}, do_id_substitution={self._do_id_substitution}, "
                f"num_field_bytes={self._num_field_bytes})")

    @classmethod
    def from_config(cls, name: str, settings: Dict[str, Any]) -> 'Dimension':
        """
        Build a dimension from one entry of the dimension configuration.

        Args:
            name: Dimension name
            settings: Mapping with 'do_id_substitution' and 'num_field_bytes'

        Returns:
            Dimension instance
        """
        return cls(
            name,
            do_id_substitution=settings.get('do_id_substitution', False),
            num_field_bytes=settings.get('num_field_bytes', config.MAX_FIELD_BYTES)
        )


def load_dimensions(dimension_config: Optional[Dict[str, Dict[str, Any]]] = None) -> Dict[str, Dimension]:
    """
    Build every configured dimension, keyed by name.

    Args:
        dimension_config: Configuration mapping, defaults to config.DIMENSION_CONFIG

    Returns:
        Dictionary of dimension name to Dimension
    """
    if dimension_config is None:
        dimension_config = config.DIMENSION_CONFIG
    return {name: Dimension.from_config(name, settings) for name, settings in dimension_config.items()}
