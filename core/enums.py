"""
Centralized enumerations shared by the processing libraries and schemas.
"""

from enum import Enum, IntEnum


class Channel(IntEnum):
    """Channel selector for the convolution engine."""

    ALL = -1
    RED = 0
    GREEN = 1
    BLUE = 2


class Interpolation(str, Enum):
    """Resampling methods."""

    NEAREST = "nearest"
    BILINEAR = "bilinear"


class MorphologyOperation(str, Enum):
    """Grayscale morphology operations."""

    ERODE = "erode"
    DILATE = "dilate"
    OPEN = "open"
    CLOSE = "close"


class PyramidKind(str, Enum):
    """Image pyramid types."""

    GAUSSIAN = "gaussian"
    LAPLACIAN = "laplacian"
