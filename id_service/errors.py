"""
Id Service Errors
=================

Exceptions raised while assigning surrogate ids. None of them is retryable:
configuration errors need a fixed dimension, an exhausted id space needs an
operator decision.
"""


class ConfigurationError(ValueError):
    """The dimension is not set up for id substitution."""


class IDSpaceExhausted(RuntimeError):
    """No further ids can be assigned for a dimension."""


class FieldWidthExceeded(IDSpaceExhausted):
    """
    The next id does not fit in the dimension's field width.

    Raised instead of silently truncating, which would make two values
    share the same surrogate bytes.
    """
