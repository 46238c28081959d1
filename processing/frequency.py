"""
Frequency domain filters.

Every filter runs the same pipeline: grayscale complex grid padded to
power-of-two sides, forward 2D FFT, shift the zero frequency to the centre,
multiply by a radial transfer function H(D), shift back, inverse FFT and
crop to the original size. D is the distance of each coefficient from
(W / 2, H / 2) of the padded grid. Output is grayscale with alpha 255.
"""

import logging
from typing import Callable

import numpy as np

from core.constants import FrequencyDefaults
from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from core.spectral import (
    complex_to_image,
    fft2d,
    fft_shift,
    ifft2d,
    image_to_complex,
    magnitude_spectrum,
)

logger = logging.getLogger(__name__)

TransferFunction = Callable[[np.ndarray], np.ndarray]


def frequency_distances(height: int, width: int) -> np.ndarray:
    """Distance of every grid coordinate from (width / 2, height / 2)."""
    y, x = np.mgrid[0:height, 0:width]
    return np.hypot(x - width / 2, y - height / 2)


def apply_frequency_filter(buffer: PixelBuffer, transfer: TransferFunction) -> PixelBuffer:
    """
    Filter a buffer with a radial transfer function.

    Args:
        buffer: Input image
        transfer: Maps the distance grid D to the mask H(D)

    Returns:
        Filtered grayscale image of the input size
    """
    grid = image_to_complex(buffer)
    spectrum = fft_shift(fft2d(grid))

    mask = transfer(frequency_distances(*spectrum.shape))
    filtered = ifft2d(fft_shift(spectrum * mask))

    return complex_to_image(filtered, buffer.width, buffer.height)


def _validate_positive(name: str, value: float) -> None:
    if value <= 0:
        raise ParameterOutOfRangeError(name, value, "must be positive")


def _validate_band(low: float, high: float) -> None:
    if low < 0:
        raise ParameterOutOfRangeError("low_cutoff", low, "must not be negative")
    if low > high:
        raise ParameterOutOfRangeError("low_cutoff", low, f"must not exceed high_cutoff {high}")


def low_pass_filter(buffer: PixelBuffer, cutoff: float = FrequencyDefaults.CUTOFF) -> PixelBuffer:
    """Ideal low-pass: keep coefficients with D <= cutoff."""
    if cutoff < 0:
        raise ParameterOutOfRangeError("cutoff", cutoff, "must not be negative")
    return apply_frequency_filter(buffer, lambda d: (d <= cutoff).astype(np.float64))


def high_pass_filter(buffer: PixelBuffer, cutoff: float = FrequencyDefaults.CUTOFF) -> PixelBuffer:
    """Ideal high-pass: remove coefficients with D < cutoff."""
    if cutoff < 0:
        raise ParameterOutOfRangeError("cutoff", cutoff, "must not be negative")
    return apply_frequency_filter(buffer, lambda d: (d >= cutoff).astype(np.float64))


def band_pass_filter(
    buffer: PixelBuffer,
    low_cutoff: float = FrequencyDefaults.BAND_LOW,
    high_cutoff: float = FrequencyDefaults.BAND_HIGH,
) -> PixelBuffer:
    """
    Ideal band-pass filter.

    Args:
        buffer: Input image
        low_cutoff: Inner radius of the pass band
        high_cutoff: Outer radius of the pass band

    Returns:
        Image keeping only coefficients with low_cutoff <= D <= high_cutoff
    """
    _validate_band(low_cutoff, high_cutoff)
    return apply_frequency_filter(
        buffer, lambda d: ((d >= low_cutoff) & (d <= high_cutoff)).astype(np.float64)
    )


def band_stop_filter(
    buffer: PixelBuffer,
    low_cutoff: float = FrequencyDefaults.BAND_LOW,
    high_cutoff: float = FrequencyDefaults.BAND_HIGH,
) -> PixelBuffer:
    """Ideal band-stop filter: removes coefficients with low_cutoff <= D <= high_cutoff."""
    _validate_band(low_cutoff, high_cutoff)
    return apply_frequency_filter(
        buffer, lambda d: ((d < low_cutoff) | (d > high_cutoff)).astype(np.float64)
    )


def gaussian_low_pass_filter(
    buffer: PixelBuffer, sigma: float = FrequencyDefaults.GAUSSIAN_SIGMA
) -> PixelBuffer:
    """Smooth low-pass with H(D) = exp(-D^2 / 2 sigma^2)."""
    _validate_positive("sigma", sigma)
    return apply_frequency_filter(buffer, lambda d: np.exp(-(d * d) / (2 * sigma * sigma)))


def gaussian_high_pass_filter(
    buffer: PixelBuffer, sigma: float = FrequencyDefaults.GAUSSIAN_SIGMA
) -> PixelBuffer:
    """Smooth high-pass with H(D) = 1 - exp(-D^2 / 2 sigma^2)."""
    _validate_positive("sigma", sigma)
    return apply_frequency_filter(buffer, lambda d: 1 - np.exp(-(d * d) / (2 * sigma * sigma)))


def butterworth_low_pass_filter(
    buffer: PixelBuffer,
    cutoff: float = FrequencyDefaults.CUTOFF,
    order: int = FrequencyDefaults.BUTTERWORTH_ORDER,
) -> PixelBuffer:
    """
    Butterworth low-pass, H(D) = 1 / (1 + (D / cutoff)^(2 * order)).

    Args:
        buffer: Input image
        cutoff: Radius where the response falls to 0.5
        order: Filter order; higher orders approach the ideal filter

    Returns:
        Filtered grayscale image
    """
    _validate_positive("cutoff", cutoff)
    _validate_positive("order", order)
    return apply_frequency_filter(buffer, lambda d: 1 / (1 + (d / cutoff) ** (2 * order)))


def butterworth_high_pass_filter(
    buffer: PixelBuffer,
    cutoff: float = FrequencyDefaults.CUTOFF,
    order: int = FrequencyDefaults.BUTTERWORTH_ORDER,
) -> PixelBuffer:
    """Butterworth high-pass, H(D) = 1 / (1 + (cutoff / D)^(2 * order)) and H(0) = 0."""
    _validate_positive("cutoff", cutoff)
    _validate_positive("order", order)

    def transfer(d: np.ndarray) -> np.ndarray:
        mask = np.zeros_like(d)
        nonzero = d > 0
        mask[nonzero] = 1 / (1 + (cutoff / d[nonzero]) ** (2 * order))
        return mask

    return apply_frequency_filter(buffer, transfer)


def spectrum_visualization(buffer: PixelBuffer) -> PixelBuffer:
    """
    Centred log-magnitude spectrum of the image.

    Returns:
        Gray image the size of the power-of-two padded grid
    """
    return magnitude_spectrum(fft2d(image_to_complex(buffer)))
