"""
Spatial domain filters.

Smoothing (Gaussian, box, median, bilateral), derivative filters (Sobel,
Laplacian of Gaussian, difference of Gaussians) and the fixed 3x3 kernels
(sharpen, emboss, edge enhancement). Every filter uses clamp-to-edge
boundaries and returns a new buffer of the input size.
"""

import logging
import math

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from core.constants import PixelConstants, SpatialDefaults
from core.convolution import convolve2d, filter_plane, separable_convolve
from core.exceptions import ParameterOutOfRangeError
from core.kernels import (
    EDGE_ENHANCE,
    EMBOSS,
    SOBEL_X,
    SOBEL_Y,
    box_kernel_1d,
    gaussian_kernel_1d,
    laplacian_of_gaussian_kernel,
    sharpen_kernel,
)
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def _pad_edges(plane: np.ndarray, radius: int) -> np.ndarray:
    """Replicate-pad the first two axes by radius."""
    pad = [(radius, radius), (radius, radius)] + [(0, 0)] * (plane.ndim - 2)
    return np.pad(plane, pad, mode="edge")


def gaussian_blur(buffer: PixelBuffer, sigma: float = SpatialDefaults.GAUSSIAN_SIGMA) -> PixelBuffer:
    """
    Separable Gaussian blur.

    Args:
        buffer: Input image
        sigma: Standard deviation in pixels (> 0); kernel size is ceil(6 * sigma) | 1

    Returns:
        Blurred image, alpha unchanged
    """
    kernel = gaussian_kernel_1d(sigma)
    logger.debug(f"Gaussian blur sigma={sigma}, kernel size {kernel.size}")
    return separable_convolve(buffer, kernel, kernel)


def box_blur(buffer: PixelBuffer, size: int = SpatialDefaults.BOX_SIZE) -> PixelBuffer:
    """Separable uniform average over an odd size x size window."""
    kernel = box_kernel_1d(size)
    return separable_convolve(buffer, kernel, kernel)


def median_filter(buffer: PixelBuffer, size: int = SpatialDefaults.MEDIAN_SIZE) -> PixelBuffer:
    """
    Per-channel median filter.

    The window is (2 * (size // 2) + 1) pixels square, so an even size is
    widened to the next odd one.

    Args:
        buffer: Input image
        size: Window size (>= 1)

    Returns:
        Filtered image, alpha copied
    """
    if size < 1:
        raise ParameterOutOfRangeError("size", size, "must be at least 1")

    radius = size // 2
    window = 2 * radius + 1

    padded = _pad_edges(buffer.rgb, radius)
    # (H, W, 3, window, window) view, gathered a strip of rows at a time
    windows = sliding_window_view(padded, (window, window), axis=(0, 1))

    row_elements = buffer.width * PixelConstants.COLOR_CHANNELS * window * window
    strip = max(1, SpatialDefaults.MEDIAN_CHUNK_ELEMENTS // row_elements)

    median = np.empty_like(buffer.rgb)
    for top in range(0, buffer.height, strip):
        rows = windows[top : top + strip]
        flat = rows.reshape(rows.shape[0], buffer.width, PixelConstants.COLOR_CHANNELS, -1)
        median[top : top + strip] = np.median(flat, axis=-1)

    logger.debug(f"Median filter window {window}, {strip} rows per strip")
    return PixelBuffer.from_channels(median, buffer.alpha)


def bilateral_filter(
    buffer: PixelBuffer,
    sigma_space: float = SpatialDefaults.BILATERAL_SIGMA_SPACE,
    sigma_color: float = SpatialDefaults.BILATERAL_SIGMA_COLOR,
) -> PixelBuffer:
    """
    Edge-preserving bilateral filter.

    Each neighbour in a ceil(2 * sigma_space) | 1 window is weighted by
    exp(-d^2 / 2 sigma_space^2) * exp(-|dc|^2 / 2 sigma_color^2), where dc
    is the RGB difference from the centre pixel.

    Args:
        buffer: Input image
        sigma_space: Spatial standard deviation (> 0)
        sigma_color: Color-distance standard deviation (> 0)

    Returns:
        Filtered image, alpha copied
    """
    if sigma_space <= 0:
        raise ParameterOutOfRangeError("sigma_space", sigma_space, "must be positive")
    if sigma_color <= 0:
        raise ParameterOutOfRangeError("sigma_color", sigma_color, "must be positive")

    window = int(math.ceil(sigma_space * 2)) | 1
    radius = window // 2
    height, width = buffer.height, buffer.width

    center = buffer.rgb
    padded = _pad_edges(center, radius)

    weighted_sum = np.zeros_like(center)
    weight_total = np.zeros((height, width))

    for dy in range(-radius, radius + 1):
        for dx in range(-radius, radius + 1):
            neighbour = padded[radius + dy : radius + dy + height, radius + dx : radius + dx + width]
            spatial_weight = math.exp(-(dx * dx + dy * dy) / (2 * sigma_space * sigma_space))
            color_distance = np.sum((neighbour - center) ** 2, axis=2)
            weight = spatial_weight * np.exp(-color_distance / (2 * sigma_color * sigma_color))

            weighted_sum += neighbour * weight[:, :, np.newaxis]
            weight_total += weight

    # The centre pixel always contributes weight 1, so weight_total > 0
    filtered = weighted_sum / weight_total[:, :, np.newaxis]
    return PixelBuffer.from_channels(filtered, buffer.alpha)


def sobel_gradient(buffer: PixelBuffer) -> PixelBuffer:
    """
    Per-channel Sobel gradient magnitude sqrt(gx^2 + gy^2), clamped to 255.

    Derivatives come from the convolution engine, so border pixels see
    replicated neighbours. The result is opaque.
    """
    magnitude = np.empty_like(buffer.rgb)
    for c in range(PixelConstants.COLOR_CHANNELS):
        plane = buffer.channel(c)
        gx = filter_plane(plane, SOBEL_X)
        gy = filter_plane(plane, SOBEL_Y)
        magnitude[:, :, c] = np.hypot(gx, gy)

    return PixelBuffer.from_channels(magnitude, np.full(magnitude.shape[:2], PixelConstants.OPAQUE))


def laplacian_of_gaussian(
    buffer: PixelBuffer, sigma: float = SpatialDefaults.LOG_SIGMA
) -> PixelBuffer:
    """Convolve with a Laplacian-of-Gaussian kernel (negative responses clamp to 0)."""
    return convolve2d(buffer, laplacian_of_gaussian_kernel(sigma))


def difference_of_gaussians(
    buffer: PixelBuffer,
    sigma1: float = SpatialDefaults.DOG_SIGMA1,
    sigma2: float = SpatialDefaults.DOG_SIGMA2,
) -> PixelBuffer:
    """
    Band-pass edge response |blur(sigma1) - blur(sigma2)|.

    Args:
        buffer: Input image
        sigma1: First blur sigma
        sigma2: Second blur sigma

    Returns:
        Per-channel absolute difference with alpha 255
    """
    narrow = gaussian_blur(buffer, sigma1)
    wide = gaussian_blur(buffer, sigma2)
    difference = np.abs(narrow.rgb - wide.rgb)
    return PixelBuffer.from_channels(difference, np.full(difference.shape[:2], PixelConstants.OPAQUE))


def sharpen(buffer: PixelBuffer, amount: float = SpatialDefaults.SHARPEN_AMOUNT) -> PixelBuffer:
    return convolve2d(buffer, sharpen_kernel(amount))


def emboss(buffer: PixelBuffer) -> PixelBuffer:
    return convolve2d(buffer, EMBOSS)


def edge_enhancement(buffer: PixelBuffer) -> PixelBuffer:
    return convolve2d(buffer, EDGE_ENHANCE)
