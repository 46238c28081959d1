"""
Exception hierarchy for the processing core.

Every failure at the call boundary is one of the classes below. They also
derive from ValueError so callers that only know the standard library can
still catch them.
"""

from typing import Any, Optional, Tuple


class ProcessingError(Exception):
    """Base class for all processing errors."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidInputError(ProcessingError, ValueError):
    """Raised when an input buffer, kernel or sequence is malformed."""


class DimensionMismatchError(ProcessingError, ValueError):
    """Raised when two buffers that must share a size do not."""

    def __init__(self, expected: Tuple[int, int], actual: Tuple[int, int]):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Images must have same dimensions: expected {expected[0]}x{expected[1]}, "
            f"got {actual[0]}x{actual[1]}"
        )


class ParameterOutOfRangeError(ProcessingError, ValueError):
    """Raised when an operation parameter is outside its valid range."""

    def __init__(self, name: str, value: Any, reason: Optional[str] = None):
        self.name = name
        self.value = value
        message = f"Parameter '{name}' out of range: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
