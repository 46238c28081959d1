"""
In-memory image adapters.

- converters: PixelBuffer <-> NumPy, PIL and OpenCV BGR conversions
"""

from core.image.converters import ImageConverters

__all__ = ["ImageConverters"]
