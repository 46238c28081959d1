"""
PixelBuffer - canonical in-memory image representation.

Samples are interleaved RGBA, stored as float64 so chained operations do not
lose precision to intermediate rounding. Every buffer is clamped to [0, 255]
on construction and its backing array is read-only, so operations always
allocate a fresh buffer for their output.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np

from core.constants import ColorConstants, PixelConstants
from core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class PixelBuffer:
    """Immutable W x H grid of RGBA samples."""

    __slots__ = ("_data",)

    def __init__(self, data: np.ndarray):
        """
        Create a buffer from an (H, W, 4) array.

        Args:
            data: Array of RGBA samples; copied, converted to float64 and
                clamped to [0, 255]

        Raises:
            InvalidInputError: If the array shape is not (H, W, 4) with H, W >= 1
        """
        array = np.asarray(data, dtype=np.float64)
        if array.ndim != 3 or array.shape[2] != PixelConstants.CHANNELS:
            raise InvalidInputError(f"Expected an (H, W, 4) sample array, got shape {array.shape}")
        if array.shape[0] < 1 or array.shape[1] < 1:
            raise InvalidInputError(
                f"Pixel buffer must have a non-zero area, got {array.shape[1]}x{array.shape[0]}"
            )
        if not np.all(np.isfinite(array)):
            # NaN from degenerate arithmetic behaves like a canvas store: it becomes 0
            array = np.nan_to_num(array, nan=0.0, posinf=PixelConstants.MAX_VALUE, neginf=0.0)

        array = np.clip(array, PixelConstants.MIN_VALUE, PixelConstants.MAX_VALUE)
        array.flags.writeable = False
        self._data = array

    # === Constructors ===

    @classmethod
    def from_rgba(cls, width: int, height: int, samples: Iterable[float]) -> "PixelBuffer":
        """
        Create a buffer from a flat interleaved RGBA sequence.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            samples: width * height * 4 sample values

        Returns:
            New PixelBuffer
        """
        if not isinstance(samples, np.ndarray):
            samples = list(samples)
        flat = np.asarray(samples, dtype=np.float64).ravel()
        expected = width * height * PixelConstants.CHANNELS
        if flat.size != expected:
            raise InvalidInputError(
                f"Sample count {flat.size} does not match {width}x{height}x4 = {expected}"
            )
        return cls(flat.reshape(height, width, PixelConstants.CHANNELS))

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        """
        Create a buffer from a grayscale, RGB or RGBA array.

        Args:
            array: (H, W) gray, (H, W, 3) RGB or (H, W, 4) RGBA array

        Returns:
            New PixelBuffer (alpha 255 when the input has none)
        """
        array = np.asarray(array, dtype=np.float64)
        if array.ndim == 2:
            array = np.repeat(array[:, :, np.newaxis], PixelConstants.COLOR_CHANNELS, axis=2)
        if array.ndim == 3 and array.shape[2] == PixelConstants.COLOR_CHANNELS:
            alpha = np.full(array.shape[:2] + (1,), PixelConstants.OPAQUE)
            array = np.concatenate([array, alpha], axis=2)
        return cls(array)

    @classmethod
    def filled(
        cls, width: int, height: int, rgba: Sequence[float] = (0.0, 0.0, 0.0, 255.0)
    ) -> "PixelBuffer":
        """Create a buffer of a single solid color."""
        if width < 1 or height < 1:
            raise InvalidInputError(f"Pixel buffer must have a non-zero area, got {width}x{height}")
        data = np.empty((height, width, PixelConstants.CHANNELS), dtype=np.float64)
        data[...] = np.asarray(rgba, dtype=np.float64)
        return cls(data)

    @classmethod
    def from_channels(cls, rgb: np.ndarray, alpha: np.ndarray) -> "PixelBuffer":
        """Assemble a buffer from an (H, W, 3) color array and an (H, W) alpha plane."""
        return cls(np.concatenate([rgb, np.asarray(alpha)[:, :, np.newaxis]], axis=2))

    @classmethod
    def from_gray(cls, gray: np.ndarray, alpha: Optional[np.ndarray] = None) -> "PixelBuffer":
        """Replicate a single (H, W) plane into R, G and B."""
        gray = np.asarray(gray, dtype=np.float64)
        if alpha is None:
            alpha = np.full(gray.shape, PixelConstants.OPAQUE)
        rgb = np.repeat(gray[:, :, np.newaxis], PixelConstants.COLOR_CHANNELS, axis=2)
        return cls.from_channels(rgb, alpha)

    # === Accessors ===

    @property
    def width(self) -> int:
        return self._data.shape[1]

    @property
    def height(self) -> int:
        return self._data.shape[0]

    @property
    def size(self) -> Tuple[int, int]:
        """(width, height) tuple."""
        return (self.width, self.height)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    @property
    def data(self) -> np.ndarray:
        """Read-only (H, W, 4) float64 view of the samples."""
        return self._data

    @property
    def rgb(self) -> np.ndarray:
        """Read-only (H, W, 3) view of the color channels."""
        return self._data[:, :, :3]

    @property
    def alpha(self) -> np.ndarray:
        """Read-only (H, W) view of the alpha channel."""
        return self._data[:, :, 3]

    @property
    def samples(self) -> np.ndarray:
        """Flat interleaved RGBA samples."""
        return self._data.ravel()

    def channel(self, index: int) -> np.ndarray:
        """Read-only (H, W) view of one channel (0=R, 1=G, 2=B, 3=A)."""
        return self._data[:, :, index]

    def mean_intensity(self) -> np.ndarray:
        """Unweighted (R + G + B) / 3 intensity plane."""
        return self.rgb.sum(axis=2) / 3.0

    def luma(self) -> np.ndarray:
        """Perceptual 0.299R + 0.587G + 0.114B intensity plane."""
        return (
            ColorConstants.LUMA_R * self._data[:, :, 0]
            + ColorConstants.LUMA_G * self._data[:, :, 1]
            + ColorConstants.LUMA_B * self._data[:, :, 2]
        )

    def to_array(self) -> np.ndarray:
        """Writable float64 copy of the samples."""
        return self._data.copy()

    def to_uint8(self) -> np.ndarray:
        """
        Round samples to the 8-bit output range.

        Uses round-half-to-even, the same rule a canvas applies when
        storing fractional values.
        """
        return np.clip(np.rint(self._data), 0, 255).astype(np.uint8)

    def same_size(self, other: "PixelBuffer") -> bool:
        return self.size == other.size

    # === Python protocol ===

    def __len__(self) -> int:
        return self._data.size

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.size == other.size and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"
