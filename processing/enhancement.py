"""
Contrast enhancement for diagnostic-style viewing.

Intensity windowing, global and tile-based histogram equalization, unsharp
masking and grayscale morphology. Apart from unsharp masking every operation
works on the (R + G + B) / 3 intensity and returns a gray image with the
input alpha.
"""

import logging
import math
from typing import Optional, Union

import cv2
import numpy as np

from core.constants import EnhancementDefaults, PixelConstants, SegmentationDefaults
from core.enums import MorphologyOperation
from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from core.utils.enum_converter import parse_enum
from processing.metrics import gray_levels, level_histogram, round_half_up
from processing.spatial import gaussian_blur

logger = logging.getLogger(__name__)


def intensity_windowing(
    buffer: PixelBuffer,
    center: float = EnhancementDefaults.WINDOW_CENTER,
    width: float = EnhancementDefaults.WINDOW_WIDTH,
) -> PixelBuffer:
    """
    Map the intensity window [center - width / 2, center + width / 2] onto 0..255.

    Args:
        buffer: Input image
        center: Window center
        width: Window width (> 0)

    Returns:
        Gray image; values at or below the window are 0, at or above are 255
    """
    if width <= 0:
        raise ParameterOutOfRangeError("width", width, "must be positive")

    low = center - width / 2
    high = center + width / 2
    intensity = buffer.mean_intensity()

    mapped = (intensity - low) / width * PixelConstants.MAX_VALUE
    mapped = np.where(intensity <= low, 0.0, mapped)
    mapped = np.where(intensity >= high, PixelConstants.MAX_VALUE, mapped)
    return PixelBuffer.from_gray(mapped, buffer.alpha)


def _cdf_lookup(counts: np.ndarray, pixel_count: float) -> Optional[np.ndarray]:
    """Normalized CDF (cdf - cdf_min) / (N - cdf_min) * 255 per level, unrounded."""
    cdf = np.cumsum(counts)
    nonzero = cdf[cdf > 0]
    cdf_min = nonzero[0] if nonzero.size else 0.0
    denominator = pixel_count - cdf_min
    if denominator <= 0:
        return None
    return (cdf - cdf_min) / denominator * PixelConstants.MAX_VALUE


def histogram_equalization(buffer: PixelBuffer) -> PixelBuffer:
    """
    Global histogram equalization of the rounded intensity.

    A single-level image has no spread to equalize and is returned as its
    gray rendition.
    """
    levels = gray_levels(buffer)
    lookup = _cdf_lookup(level_histogram(levels), buffer.pixel_count)
    if lookup is None:
        logger.debug("Histogram equalization: uniform image, returning gray rendition")
        return PixelBuffer.from_gray(levels, buffer.alpha)

    lookup = round_half_up(lookup)
    return PixelBuffer.from_gray(lookup[levels], buffer.alpha)


def clahe(
    buffer: PixelBuffer,
    clip_limit: float = EnhancementDefaults.CLAHE_CLIP_LIMIT,
    tile_size: int = EnhancementDefaults.CLAHE_TILE_SIZE,
) -> PixelBuffer:
    """
    Contrast-limited adaptive histogram equalization.

    Each tile_size x tile_size tile is equalized with its own histogram.
    Bins above clip_limit * pixels / 256 are clipped and the excess is spread
    evenly over all 256 bins. Tiles are mapped independently, without
    interpolation between neighbouring tiles.

    Args:
        buffer: Input image
        clip_limit: Histogram clip factor (> 0)
        tile_size: Tile edge length in pixels (>= 1)

    Returns:
        Gray image, alpha kept
    """
    if clip_limit <= 0:
        raise ParameterOutOfRangeError("clip_limit", clip_limit, "must be positive")
    if tile_size < 1:
        raise ParameterOutOfRangeError("tile_size", tile_size, "must be at least 1")

    levels = gray_levels(buffer)
    output = np.zeros(levels.shape)
    bins = SegmentationDefaults.HISTOGRAM_BINS

    for y0 in range(0, buffer.height, tile_size):
        for x0 in range(0, buffer.width, tile_size):
            tile = levels[y0 : y0 + tile_size, x0 : x0 + tile_size]
            pixel_count = tile.size

            counts = level_histogram(tile).astype(np.float64)
            clip_value = clip_limit * pixel_count / bins
            excess = np.sum(np.maximum(counts - clip_value, 0.0))
            counts = np.minimum(counts, clip_value) + excess / bins

            lookup = _cdf_lookup(counts, pixel_count)
            if lookup is None:
                output[y0 : y0 + tile_size, x0 : x0 + tile_size] = tile
                continue
            output[y0 : y0 + tile_size, x0 : x0 + tile_size] = lookup[tile]

    tiles = math.ceil(buffer.width / tile_size) * math.ceil(buffer.height / tile_size)
    logger.debug(f"CLAHE: {tiles} tiles of {tile_size}px, clip limit {clip_limit}")
    return PixelBuffer.from_gray(output, buffer.alpha)


def unsharp_mask(
    buffer: PixelBuffer,
    amount: float = EnhancementDefaults.UNSHARP_AMOUNT,
    radius: float = EnhancementDefaults.UNSHARP_RADIUS,
) -> PixelBuffer:
    """
    Sharpen by adding back the difference from a Gaussian blur.

    Args:
        buffer: Input image
        amount: Strength of the detail boost
        radius: Sigma of the blur

    Returns:
        Per-channel v + amount * (v - blur(v)), alpha kept
    """
    blurred = gaussian_blur(buffer, radius)
    sharpened = buffer.rgb + amount * (buffer.rgb - blurred.rgb)
    return PixelBuffer.from_channels(sharpened, buffer.alpha)


def _morph(plane: np.ndarray, operation: MorphologyOperation, size: int) -> np.ndarray:
    kernel = np.ones((size, size), dtype=np.uint8)

    def erode(values: np.ndarray) -> np.ndarray:
        return cv2.erode(values, kernel, borderType=cv2.BORDER_REPLICATE)

    def dilate(values: np.ndarray) -> np.ndarray:
        return cv2.dilate(values, kernel, borderType=cv2.BORDER_REPLICATE)

    if operation == MorphologyOperation.ERODE:
        return erode(plane)
    if operation == MorphologyOperation.DILATE:
        return dilate(plane)
    if operation == MorphologyOperation.OPEN:
        return dilate(erode(plane))
    return erode(dilate(plane))


def morphology(
    buffer: PixelBuffer,
    operation: Union[MorphologyOperation, str] = MorphologyOperation.ERODE,
    kernel_size: int = EnhancementDefaults.MORPHOLOGY_KERNEL,
) -> PixelBuffer:
    """
    Grayscale morphology on the intensity plane.

    The structuring element is a square of side 2 * (kernel_size // 2) + 1
    and borders are clamp-to-edge. Open is erode then dilate; close is
    dilate then erode.

    Args:
        buffer: Input image
        operation: erode, dilate, open or close
        kernel_size: Structuring element size (>= 1)

    Returns:
        Gray image, alpha kept
    """
    if kernel_size < 1:
        raise ParameterOutOfRangeError("kernel_size", kernel_size, "must be at least 1")

    method = parse_enum(operation, MorphologyOperation, name="operation")
    size = 2 * (kernel_size // 2) + 1

    result = _morph(buffer.mean_intensity(), method, size)
    return PixelBuffer.from_gray(result, buffer.alpha)
