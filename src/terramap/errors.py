"""Exceptions raised by TerraMap."""

import numbers


class ConfigurationError(ValueError):
    """Raised when a map configuration cannot produce a valid map."""


def is_number(value) -> bool:
    """True for real numbers (numpy scalars included), excluding bool."""
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
