"""
Core modules for Image Processing Studio
"""

from .exceptions import (
    DimensionMismatchError,
    InvalidInputError,
    ParameterOutOfRangeError,
    ProcessingError,
)
from .pixel_buffer import PixelBuffer

__all__ = [
    "PixelBuffer",
    "ProcessingError",
    "InvalidInputError",
    "DimensionMismatchError",
    "ParameterOutOfRangeError",
]
