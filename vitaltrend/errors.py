"""
Error taxonomy.

Both concrete errors subclass ValueError so callers that only guard against
bad input keep working. Empty smoothing inputs are not errors; they return
an empty list.
"""


class VitalTrendError(Exception):
    """Base class for all engine errors."""


class InsufficientDataError(VitalTrendError, ValueError):
    """Too few records/values, or a constant series where variation is required."""

    def __init__(self, message: str, required: int = 2, actual: int = 0):
        super().__init__(message)
        self.required = required
        self.actual = actual


class InvalidRangeError(VitalTrendError, ValueError):
    """A date or value range whose start lies after its end."""
