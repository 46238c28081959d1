"""
Image quality metrics and histogram statistics.

MSE and PSNR are computed over the R, G and B channels; SSIM is the global
(single window) form on the (R + G + B) / 3 intensity. Comparisons require
buffers of identical dimensions.
"""

import logging
import math
from typing import Dict

import numpy as np

from core.constants import MetricConstants, SegmentationDefaults
from core.exceptions import DimensionMismatchError
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def round_half_up(values: np.ndarray) -> np.ndarray:
    """Round to the nearest integer, halves away from zero for non-negative input."""
    return np.floor(np.asarray(values) + 0.5).astype(np.int64)


def gray_levels(buffer: PixelBuffer) -> np.ndarray:
    """Integer intensity levels round_half_up((R + G + B) / 3) in [0, 255]."""
    return np.clip(round_half_up(buffer.mean_intensity()), 0, SegmentationDefaults.HISTOGRAM_BINS - 1)


def level_histogram(levels: np.ndarray) -> np.ndarray:
    """256-bin count of integer levels."""
    return np.bincount(levels.ravel(), minlength=SegmentationDefaults.HISTOGRAM_BINS)


def gray_histogram(buffer: PixelBuffer) -> np.ndarray:
    return level_histogram(gray_levels(buffer))


def _check_same_size(original: PixelBuffer, processed: PixelBuffer) -> None:
    if not original.same_size(processed):
        raise DimensionMismatchError(original.size, processed.size)


def mse(original: PixelBuffer, processed: PixelBuffer) -> float:
    """
    Mean squared error over the R, G and B samples.

    Args:
        original: Reference image
        processed: Image to compare

    Returns:
        Mean of the squared per-sample differences

    Raises:
        DimensionMismatchError: If the images differ in size
    """
    _check_same_size(original, processed)
    difference = original.rgb - processed.rgb
    return float(np.mean(difference * difference))


def psnr(original: PixelBuffer, processed: PixelBuffer) -> float:
    """Peak signal-to-noise ratio in dB; +inf for identical images."""
    error = mse(original, processed)
    if error == 0:
        return math.inf
    return 10 * math.log10(MetricConstants.MAX_PIXEL_VALUE**2 / error)


def ssim(original: PixelBuffer, processed: PixelBuffer) -> float:
    """
    Global structural similarity index.

    Uses population mean, variance and covariance of the whole intensity
    plane, with C1 = (0.01 * 255)^2 and C2 = (0.03 * 255)^2.

    Args:
        original: Reference image
        processed: Image to compare

    Returns:
        SSIM in [-1, 1]; 1.0 for identical images
    """
    _check_same_size(original, processed)
    c1 = (MetricConstants.SSIM_K1 * MetricConstants.MAX_PIXEL_VALUE) ** 2
    c2 = (MetricConstants.SSIM_K2 * MetricConstants.MAX_PIXEL_VALUE) ** 2

    x = original.mean_intensity()
    y = processed.mean_intensity()
    mean_x, mean_y = x.mean(), y.mean()
    var_x, var_y = x.var(), y.var()
    covariance = np.mean((x - mean_x) * (y - mean_y))

    numerator = (2 * mean_x * mean_y + c1) * (2 * covariance + c2)
    denominator = (mean_x**2 + mean_y**2 + c1) * (var_x + var_y + c2)
    return float(numerator / denominator)


def histogram(buffer: PixelBuffer) -> Dict[str, np.ndarray]:
    """
    Per-channel and gray 256-bin histograms.

    Returns:
        Dict with "r", "g", "b" and "gray" count arrays
    """
    rgb_levels = np.clip(round_half_up(buffer.rgb), 0, SegmentationDefaults.HISTOGRAM_BINS - 1)
    return {
        "r": level_histogram(rgb_levels[:, :, 0]),
        "g": level_histogram(rgb_levels[:, :, 1]),
        "b": level_histogram(rgb_levels[:, :, 2]),
        "gray": gray_histogram(buffer),
    }


def entropy(buffer: PixelBuffer) -> float:
    """Shannon entropy of the gray histogram, in bits."""
    counts = gray_histogram(buffer)
    probabilities = counts[counts > 0] / buffer.pixel_count
    return float(-np.sum(probabilities * np.log2(probabilities)))
