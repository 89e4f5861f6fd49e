"""
Exceptions raised by the cloth simulation.
"""


class ClothSimError(Exception):
    """Base class for cloth simulation errors."""


class InvalidTopology(ClothSimError, ValueError):
    """Raised when grid dimensions, spacing or constraint indices are malformed.

    Always raised at construction time, never from inside ``step()``.
    """
