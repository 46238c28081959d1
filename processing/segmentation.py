"""
Image segmentation algorithms.

Thresholding (global, Otsu, adaptive), clustering (k-means), region based
segmentation (region growing, connected components) and a gradient-based
watershed approximation. Randomized algorithms take a seed or an injected
numpy Generator so results are reproducible.
"""

import logging
from typing import Optional

import cv2
import numpy as np
from sklearn.metrics import pairwise_distances_argmin

from core.constants import PixelConstants, SegmentationDefaults
from core.convolution import filter_plane
from core.exceptions import ParameterOutOfRangeError
from core.kernels import SOBEL_X, SOBEL_Y
from core.pixel_buffer import PixelBuffer
from processing.metrics import gray_histogram

logger = logging.getLogger(__name__)


def _binary_image(buffer: PixelBuffer, mask: np.ndarray) -> PixelBuffer:
    values = np.where(mask, PixelConstants.MAX_VALUE, PixelConstants.MIN_VALUE)
    return PixelBuffer.from_gray(values, buffer.alpha)


def _resolve_rng(
    seed: Optional[int], rng: Optional[np.random.Generator]
) -> np.random.Generator:
    return rng if rng is not None else np.random.default_rng(seed)


def threshold_segmentation(
    buffer: PixelBuffer, threshold: float = SegmentationDefaults.THRESHOLD
) -> PixelBuffer:
    """
    Global threshold on (R + G + B) / 3.

    Args:
        buffer: Input image
        threshold: Pixels with intensity >= threshold become white

    Returns:
        Binary image (0 or 255 in R, G and B), alpha kept
    """
    return _binary_image(buffer, buffer.mean_intensity() >= threshold)


def otsu_threshold_value(buffer: PixelBuffer) -> int:
    """
    Compute Otsu's threshold from the 256-bin intensity histogram.

    The between-class variance wB * wF * (mB - mF)^2 is evaluated for every
    split where both classes are non-empty; the first maximum wins.

    Returns:
        First intensity of the upper class, to be used with the >= rule of
        threshold_segmentation; 0 when no split separates two classes
    """
    counts = gray_histogram(buffer).astype(np.float64)
    levels = np.arange(counts.size, dtype=np.float64)
    total = counts.sum()

    weight_background = np.cumsum(counts)
    weight_foreground = total - weight_background
    sum_background = np.cumsum(levels * counts)
    sum_total = sum_background[-1]

    valid = (weight_background > 0) & (weight_foreground > 0)
    safe_background = np.where(valid, weight_background, 1.0)
    safe_foreground = np.where(valid, weight_foreground, 1.0)

    mean_background = sum_background / safe_background
    mean_foreground = (sum_total - sum_background) / safe_foreground
    variance = np.where(
        valid,
        weight_background * weight_foreground * (mean_background - mean_foreground) ** 2,
        0.0,
    )

    best = int(np.argmax(variance))
    if variance[best] <= 0:
        logger.debug("Otsu: no separating split, threshold 0")
        return 0

    logger.debug(f"Otsu: split after level {best}, variance {variance[best]:.1f}")
    return best + 1


def otsu_threshold(buffer: PixelBuffer) -> PixelBuffer:
    return threshold_segmentation(buffer, otsu_threshold_value(buffer))


def adaptive_threshold(
    buffer: PixelBuffer,
    block_size: int = SegmentationDefaults.ADAPTIVE_BLOCK_SIZE,
    c: float = SegmentationDefaults.ADAPTIVE_C,
) -> PixelBuffer:
    """
    Local mean threshold.

    A pixel is white when its intensity is >= the mean of its
    block_size x block_size neighbourhood (clamp-to-edge) minus c.

    Args:
        buffer: Input image
        block_size: Odd neighbourhood size (>= 1)
        c: Constant subtracted from the local mean

    Returns:
        Binary image, alpha kept
    """
    if block_size < 1 or block_size % 2 == 0:
        raise ParameterOutOfRangeError("block_size", block_size, "must be a positive odd integer")

    intensity = buffer.mean_intensity()
    local_mean = cv2.blur(intensity, (block_size, block_size), borderType=cv2.BORDER_REPLICATE)
    return _binary_image(buffer, intensity >= local_mean - c)


def kmeans_segmentation(
    buffer: PixelBuffer,
    k: int = SegmentationDefaults.KMEANS_CLUSTERS,
    max_iterations: int = SegmentationDefaults.KMEANS_ITERATIONS,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> PixelBuffer:
    """
    Color quantization by k-means clustering in RGB space.

    Centroids start at k pixels sampled uniformly at random (with
    replacement). Every iteration assigns each pixel to its nearest centroid
    and moves each centroid to the mean of its members; a centroid with no
    members keeps its position. The loop always runs max_iterations times.

    Args:
        buffer: Input image
        k: Number of clusters (>= 1)
        max_iterations: Number of assign/update rounds (>= 1)
        seed: Seed for the default generator
        rng: Generator to draw from, takes precedence over seed

    Returns:
        Image where each pixel has its centroid color, alpha kept
    """
    if k < 1:
        raise ParameterOutOfRangeError("k", k, "must be at least 1")
    if max_iterations < 1:
        raise ParameterOutOfRangeError("max_iterations", max_iterations, "must be at least 1")

    generator = _resolve_rng(seed, rng)
    pixels = buffer.rgb.reshape(-1, PixelConstants.COLOR_CHANNELS)

    centroids = pixels[generator.integers(0, len(pixels), size=k)].copy()
    labels = np.zeros(len(pixels), dtype=np.int64)

    for _ in range(max_iterations):
        labels = pairwise_distances_argmin(pixels, centroids)

        counts = np.bincount(labels, minlength=k)
        occupied = counts > 0
        for c in range(PixelConstants.COLOR_CHANNELS):
            sums = np.bincount(labels, weights=pixels[:, c], minlength=k)
            centroids[occupied, c] = sums[occupied] / counts[occupied]

    logger.debug(f"k-means: {k} clusters, sizes {np.bincount(labels, minlength=k).tolist()}")

    quantized = centroids[labels].reshape(buffer.height, buffer.width, PixelConstants.COLOR_CHANNELS)
    return PixelBuffer.from_channels(quantized, buffer.alpha)


def region_growing(
    buffer: PixelBuffer,
    seed_x: int,
    seed_y: int,
    threshold: float = SegmentationDefaults.REGION_THRESHOLD,
) -> PixelBuffer:
    """
    Grow a 4-connected region from a seed pixel.

    A pixel joins the region when its RGB Euclidean distance to the seed
    color is <= threshold and it is 4-connected to the seed through such
    pixels.

    Args:
        buffer: Input image
        seed_x: Seed column
        seed_y: Seed row
        threshold: Maximum color distance (>= 0)

    Returns:
        Copy of the input with the region painted red
    """
    if not 0 <= seed_x < buffer.width:
        raise ParameterOutOfRangeError("seed_x", seed_x, f"outside image width {buffer.width}")
    if not 0 <= seed_y < buffer.height:
        raise ParameterOutOfRangeError("seed_y", seed_y, f"outside image height {buffer.height}")
    if threshold < 0:
        raise ParameterOutOfRangeError("threshold", threshold, "must not be negative")

    rgb = buffer.rgb
    distance = np.linalg.norm(rgb - rgb[seed_y, seed_x], axis=2)
    candidates = (distance <= threshold).astype(np.uint8)

    _, labels = cv2.connectedComponents(candidates, connectivity=4, ltype=cv2.CV_32S)
    region = labels == labels[seed_y, seed_x]

    output = buffer.to_array()
    output[region, :3] = SegmentationDefaults.REGION_COLOR
    logger.debug(f"Region growing from ({seed_x}, {seed_y}): {int(region.sum())} pixels")
    return PixelBuffer(output)


def connected_components(
    buffer: PixelBuffer,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> PixelBuffer:
    """
    Label 4-connected foreground components and color each one.

    Foreground is (R + G + B) / 3 > 128. Each component gets a random color
    from the generator; the background is black. Alpha is 255.
    """
    foreground = buffer.mean_intensity() > SegmentationDefaults.COMPONENT_FOREGROUND
    count, labels = cv2.connectedComponents(
        foreground.astype(np.uint8), connectivity=4, ltype=cv2.CV_32S
    )

    generator = _resolve_rng(seed, rng)
    colors = generator.uniform(0, PixelConstants.MAX_VALUE, size=(count, PixelConstants.COLOR_CHANNELS))
    colors[0] = 0.0

    logger.debug(f"Connected components: {count - 1} components")
    return PixelBuffer.from_channels(
        colors[labels], np.full(labels.shape, PixelConstants.OPAQUE)
    )


def watershed_segmentation(buffer: PixelBuffer) -> PixelBuffer:
    """
    Simplified watershed: gradient magnitude of the channel sum.

    The Sobel gradient of R + G + B is divided by 3 and clamped to 255,
    giving a grayscale ridge map with alpha 255.
    """
    channel_sum = buffer.rgb.sum(axis=2)
    gx = filter_plane(channel_sum, SOBEL_X)
    gy = filter_plane(channel_sum, SOBEL_Y)
    return PixelBuffer.from_gray(np.hypot(gx, gy) / 3)
