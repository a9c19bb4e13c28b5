"""
Id Service
==========

Surrogate id assignment for cube dimensions:
- Dimension descriptors with substitution flag and field width
- Fixed-width, first-seen-order id assignment per dimension
- Reverse lookup from id back to the original value
- Bulk substitution of DataFrame columns

Ids shorten storage row keys: a variable-length value is replaced by a small
big-endian integer of the dimension's configured width.
"""

# Core id service classes
from .id_service import IdService
from .map_id_service import MapIdService
from .dimension import Dimension, load_dimensions

# Errors
from .errors import (
    ConfigurationError,
    IDSpaceExhausted,
    FieldWidthExceeded
)

# DataFrame integration
from .frame_substitution import FrameIdSubstitutor

__all__ = [
    'IdService',
    'MapIdService',
    'Dimension',
    'load_dimensions',
    'ConfigurationError',
    'IDSpaceExhausted',
    'FieldWidthExceeded',
    'FrameIdSubstitutor'
]
