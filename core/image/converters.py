"""
Image format conversion utilities.

Handles conversions between PixelBuffer and the in-memory image carriers a
host application works with:
- NumPy arrays (RGB/RGBA or grayscale)
- PIL Images (L, RGB or RGBA mode)
- OpenCV arrays (BGR or BGRA)
"""

import logging

import cv2
import numpy as np
from PIL import Image

from core.exceptions import InvalidInputError
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


class ImageConverters:
    """Utilities for converting between PixelBuffer and other image formats."""

    @staticmethod
    def to_pil(buffer: PixelBuffer) -> Image.Image:
        """
        Convert PixelBuffer to PIL Image.

        Args:
            buffer: Source buffer

        Returns:
            PIL Image in RGBA mode
        """
        return Image.fromarray(buffer.to_uint8())

    @staticmethod
    def from_pil(image: Image.Image) -> PixelBuffer:
        """
        Convert PIL Image to PixelBuffer.

        Args:
            image: PIL Image in any mode (converted to RGBA first)

        Returns:
            PixelBuffer
        """
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return PixelBuffer(np.array(image))

    @staticmethod
    def to_bgr(buffer: PixelBuffer, keep_alpha: bool = False) -> np.ndarray:
        """
        Convert PixelBuffer to an OpenCV image.

        Args:
            buffer: Source buffer
            keep_alpha: If True, return BGRA, else BGR

        Returns:
            uint8 NumPy array in OpenCV channel order
        """
        rgba = buffer.to_uint8()
        code = cv2.COLOR_RGBA2BGRA if keep_alpha else cv2.COLOR_RGBA2BGR
        return cv2.cvtColor(rgba, code)

    @staticmethod
    def from_bgr(image: np.ndarray) -> PixelBuffer:
        """
        Convert OpenCV image to PixelBuffer.

        Args:
            image: Grayscale, BGR or BGRA NumPy array

        Returns:
            PixelBuffer (alpha 255 unless the input is BGRA)
        """
        if image.ndim == 2:
            return PixelBuffer.from_array(image)
        if image.ndim == 3 and image.shape[2] == 3:
            return PixelBuffer.from_array(cv2.cvtColor(image, cv2.COLOR_BGR2RGB))
        if image.ndim == 3 and image.shape[2] == 4:
            return PixelBuffer(cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA))

        raise InvalidInputError(f"Unsupported OpenCV image shape {image.shape}")

    @staticmethod
    def from_numpy(array: np.ndarray) -> PixelBuffer:
        """
        Convert an RGB(A) or grayscale NumPy array to PixelBuffer.

        Args:
            array: (H, W), (H, W, 3) or (H, W, 4) array in RGB channel order

        Returns:
            PixelBuffer
        """
        return PixelBuffer.from_array(array)

    @staticmethod
    def ensure_grayscale(buffer: PixelBuffer) -> np.ndarray:
        """
        Extract an 8-bit luma plane.

        Args:
            buffer: Source buffer

        Returns:
            uint8 (H, W) array
        """
        gray = np.rint(buffer.luma())
        return np.clip(gray, 0, 255).astype(np.uint8)
