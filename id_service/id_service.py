"""
Id Service Interface
====================

Common contract for everything that hands out surrogate ids for dimension
values. Implementations must be idempotent per (dimension, value), injective
within a dimension and return exactly ``num_field_bytes`` bytes.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from config import MAX_FIELD_BYTES
from .dimension import Dimension
from .errors import ConfigurationError


class IdService(ABC):
    """
    Maps dimension values to fixed-width surrogate ids.
    """

    def validate_dimension(self, dimension: Dimension):
        """
        Reject dimensions that cannot use id substitution.

        Args:
            dimension: Dimension being encoded

        Raises:
            ConfigurationError: substitution disabled or unsupported field width
        """
        if not dimension.do_id_substitution:
            raise ConfigurationError(f"Substitution is not enabled for the dimension {dimension}")

        num_field_bytes = dimension.num_field_bytes
        if num_field_bytes > MAX_FIELD_BYTES:
            raise ConfigurationError(
                f"ID lengths > {MAX_FIELD_BYTES} are not supported, got {num_field_bytes} "
                f"for {dimension}. Do you really need more than 2^64 unique identifiers?"
            )
        if num_field_bytes < 1:
            raise ConfigurationError(f"ID length must be at least 1 byte, got {num_field_bytes} for {dimension}")

    @abstractmethod
    def get_id(self, dimension: Dimension, value: bytes) -> bytes:
        """
        Get the surrogate id for a value, assigning one on first sight.

        Args:
            dimension: Dimension the value belongs to
            value: Raw value bytes

        Returns:
            Id encoded as exactly dimension.num_field_bytes big-endian bytes
        """

    def get_ids(self, dimension: Dimension, values: Iterable[bytes]) -> List[bytes]:
        """
        Get ids for a batch of values, in the same order.

        Implementations that can check capacity up front should override this
        so a failing batch records nothing.
        """
        return [self.get_id(dimension, value) for value in values]

    @abstractmethod
    def get_value(self, dimension: Dimension, id_bytes: bytes) -> Optional[bytes]:
        """
        Get the original value for an id previously returned by get_id.

        Returns:
            Value bytes if the id is known, None otherwise
        """
