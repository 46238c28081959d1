"""
Lossy compression simulation.

A JPEG-style round trip (8x8 block DCT, uniform quantization, inverse DCT)
that shows blocking and ringing artifacts without producing a bitstream,
plus box-filter downsampling.
"""

import logging
import math

import cv2
import numpy as np

from core.constants import CompressionDefaults, PixelConstants
from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from processing.metrics import round_half_up

logger = logging.getLogger(__name__)


def quantization_matrix(
    quality: int, size: int = CompressionDefaults.BLOCK_SIZE
) -> np.ndarray:
    """Step sizes q(i, j) = (1 + i + j) * max(1, (100 - quality) / 10)."""
    scale = max(1.0, (100 - quality) / 10)
    i = np.arange(size)[:, np.newaxis]
    j = np.arange(size)[np.newaxis, :]
    return (1 + i + j) * scale


def _to_blocks(plane: np.ndarray, size: int) -> np.ndarray:
    """Split an (H, W) plane with H, W multiples of size into (N, size, size) blocks."""
    height, width = plane.shape
    blocks = plane.reshape(height // size, size, width // size, size).swapaxes(1, 2)
    return blocks.reshape(-1, size, size)


def _from_blocks(blocks: np.ndarray, height: int, width: int) -> np.ndarray:
    size = blocks.shape[-1]
    grid = blocks.reshape(height // size, width // size, size, size).swapaxes(1, 2)
    return grid.reshape(height, width)


def jpeg_style_compression(
    buffer: PixelBuffer, quality: int = CompressionDefaults.QUALITY
) -> PixelBuffer:
    """
    Simulate JPEG compression artifacts.

    Each color channel is processed in 8x8 blocks (the image is edge
    replicated up to a multiple of 8): level shift by -128, 2D DCT,
    quantize and dequantize with round-half-up, inverse DCT, shift back and
    crop. Quality 90 and above uses the finest quantization.

    Args:
        buffer: Input image
        quality: 1 (coarsest) to 100

    Returns:
        Reconstructed image, alpha copied
    """
    if not 1 <= quality <= 100:
        raise ParameterOutOfRangeError("quality", quality, "must be between 1 and 100")

    size = CompressionDefaults.BLOCK_SIZE
    height, width = buffer.height, buffer.width
    padded_height = math.ceil(height / size) * size
    padded_width = math.ceil(width / size) * size

    steps = quantization_matrix(quality, size)

    output = np.empty_like(buffer.rgb)
    for c in range(PixelConstants.COLOR_CHANNELS):
        plane = np.pad(
            buffer.channel(c),
            ((0, padded_height - height), (0, padded_width - width)),
            mode="edge",
        )
        blocks = _to_blocks(plane - CompressionDefaults.LEVEL_SHIFT, size)

        coefficients = np.stack([cv2.dct(block) for block in blocks])
        quantized = round_half_up(coefficients / steps) * steps
        restored = np.stack([cv2.idct(block) for block in quantized])

        reconstructed = _from_blocks(restored, padded_height, padded_width)
        output[:, :, c] = reconstructed[:height, :width] + CompressionDefaults.LEVEL_SHIFT

    logger.debug(f"JPEG-style compression at quality {quality}, step scale {steps[0, 0]:.1f}")
    return PixelBuffer.from_channels(output, buffer.alpha)


def downsample_image(
    buffer: PixelBuffer, factor: int = CompressionDefaults.DOWNSAMPLE_FACTOR
) -> PixelBuffer:
    """
    Shrink by an integer factor with box averaging over all four channels.

    Args:
        buffer: Input image
        factor: Cell size (>= 1)

    Returns:
        Image of floor(W / factor) x floor(H / factor)
    """
    if factor < 1:
        raise ParameterOutOfRangeError("factor", factor, "must be at least 1")

    width, height = buffer.width // factor, buffer.height // factor
    if width < 1 or height < 1:
        raise ParameterOutOfRangeError(
            "factor", factor, f"{buffer.width}x{buffer.height} would shrink to an empty image"
        )

    cropped = buffer.data[: height * factor, : width * factor]
    cells = cropped.reshape(height, factor, width, factor, PixelConstants.CHANNELS)
    return PixelBuffer(cells.mean(axis=(1, 3)))
