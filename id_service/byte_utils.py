"""
Byte Utilities
==============

Fixed-width big-endian encoding of surrogate ids.
"""

from typing import Union

ID_BYTES = 8
MAX_ID = 2 ** 64 - 1


def long_to_bytes(value: int) -> bytes:
    """
    Encode an unsigned 64-bit integer as 8 big-endian bytes.

    Args:
        value: Integer in [0, 2^64 - 1]

    Returns:
        8-byte big-endian representation
    """
    if value < 0 or value > MAX_ID:
        raise ValueError(f"Id {value} is outside the unsigned 64-bit range")
    return value.to_bytes(ID_BYTES, 'big')


def bytes_to_long_pad(data: Union[bytes, bytearray]) -> int:
    """
    Decode up to 8 big-endian bytes, left-padding with zeros.

    Args:
        data: At most 8 bytes

    Returns:
        Unsigned integer value
    """
    if len(data) > ID_BYTES:
        raise ValueError(f"Cannot decode {len(data)} bytes into a 64-bit id")
    return int.from_bytes(bytes(data).rjust(ID_BYTES, b'\x00'), 'big')


def truncate_id(value: int, num_bytes: int) -> bytes:
    """Keep the last ``num_bytes`` bytes of the 8-byte encoding of ``value``."""
    return long_to_bytes(value)[ID_BYTES - num_bytes:]


def fits_in_width(value: int, num_bytes: int) -> bool:
    return value < 2 ** (8 * num_bytes)


def to_hex(data: bytes) -> str:
    return bytes(data).hex()
