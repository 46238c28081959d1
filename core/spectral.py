"""
Spectral engine: radix-2 FFT and the helpers the frequency filters use.

The transform is the Cooley-Tukey decimation-in-time FFT written in its
iterative form: inputs are permuted into bit-reversed order and combined in
log2(n) butterfly stages with twiddle factors exp(-2*pi*i*k/n). Each stage
is vectorized over all butterflies and over any leading axes, so the same
routine transforms a single sequence, every row of a grid, or every column.

Complex values are NumPy complex128; they only leave this module through
complex_to_image and magnitude_spectrum, which return PixelBuffers.
"""

import logging
from typing import Sequence, Union

import numpy as np

from core.constants import PixelConstants
from core.exceptions import InvalidInputError
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

ComplexLike = Union[np.ndarray, Sequence[complex]]


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


def _bit_reversed_indices(n: int) -> np.ndarray:
    bits = n.bit_length() - 1
    indices = np.arange(n)
    reversed_indices = np.zeros(n, dtype=np.int64)
    for bit in range(bits):
        reversed_indices |= ((indices >> bit) & 1) << (bits - 1 - bit)
    return reversed_indices


def _transform_last_axis(values: np.ndarray) -> np.ndarray:
    """Forward radix-2 FFT along the last axis."""
    n = values.shape[-1]
    if n <= 1:
        return values.astype(np.complex128, copy=True)
    if not is_power_of_two(n):
        raise InvalidInputError(f"FFT requires power of 2 length, got {n}")

    lead = values.shape[:-1]
    output = values[..., _bit_reversed_indices(n)].astype(np.complex128)

    size = 2
    while size <= n:
        half = size // 2
        twiddle = np.exp(-2j * np.pi * np.arange(half) / size)
        blocks = output.reshape(lead + (n // size, size))
        even = blocks[..., :half]
        odd = blocks[..., half:] * twiddle
        output = np.concatenate([even + odd, even - odd], axis=-1).reshape(lead + (n,))
        size *= 2

    return output


def fft(sequence: ComplexLike) -> np.ndarray:
    """
    Forward discrete Fourier transform of a 1D sequence.

    Args:
        sequence: Complex or real values; length must be a power of two
            (lengths 0 and 1 are returned unchanged)

    Returns:
        complex128 array of the same length

    Raises:
        InvalidInputError: If the length is not a power of two
    """
    values = np.asarray(sequence)
    if values.ndim != 1:
        raise InvalidInputError(f"fft expects a 1D sequence, got {values.ndim} dimensions")
    return _transform_last_axis(values)


def ifft(sequence: ComplexLike) -> np.ndarray:
    """
    Inverse transform: conjugate, forward FFT, conjugate, divide by n.

    Args:
        sequence: Frequency coefficients; length must be a power of two

    Returns:
        complex128 array such that ifft(fft(x)) == x within rounding
    """
    values = np.asarray(sequence, dtype=np.complex128)
    n = values.shape[-1] if values.ndim else 0
    if n <= 1:
        return fft(values)
    return np.conj(fft(np.conj(values))) / n


def fft2d(grid: ComplexLike) -> np.ndarray:
    """2D transform: 1D FFT along every row, then along every column."""
    values = _as_grid(grid)
    rows = _transform_last_axis(values)
    return _transform_last_axis(rows.T).T


def ifft2d(grid: ComplexLike) -> np.ndarray:
    """Inverse 2D transform: inverse along every row, then along every column."""
    values = _as_grid(grid).astype(np.complex128)
    height, width = values.shape
    rows = np.conj(_transform_last_axis(np.conj(values))) / width
    columns = np.conj(_transform_last_axis(np.conj(rows.T))) / height
    return columns.T


def _as_grid(grid: ComplexLike) -> np.ndarray:
    values = np.asarray(grid)
    if values.ndim != 2 or values.size == 0:
        raise InvalidInputError(f"Expected a non-empty 2D grid, got shape {values.shape}")
    return values


def fft_shift(grid: ComplexLike) -> np.ndarray:
    """
    Swap quadrants so the zero frequency sits at (H // 2, W // 2).

    out[y][x] = in[(y + H // 2) % H][(x + W // 2) % W]. Applying it twice
    restores the original layout for even dimensions.
    """
    values = _as_grid(grid)
    height, width = values.shape
    return np.roll(values, shift=(-(height // 2), -(width // 2)), axis=(0, 1))


def image_to_complex(buffer: PixelBuffer) -> np.ndarray:
    """
    Convert a buffer to a grayscale complex grid padded to power-of-two sides.

    Intensity is (R + G + B) / 3. Padding is zero (not edge-clamped).

    Returns:
        complex128 grid of shape (next_pow2(H), next_pow2(W))
    """
    padded_height = next_power_of_two(buffer.height)
    padded_width = next_power_of_two(buffer.width)

    grid = np.zeros((padded_height, padded_width), dtype=np.complex128)
    grid[: buffer.height, : buffer.width] = buffer.mean_intensity()

    logger.debug(
        f"Padded {buffer.width}x{buffer.height} image to {padded_width}x{padded_height} for FFT"
    )
    return grid


def complex_to_image(grid: np.ndarray, width: int, height: int) -> PixelBuffer:
    """
    Convert the real part of a complex grid back to a grayscale buffer.

    Args:
        grid: Complex grid at least height x width in size
        width: Original (pre-padding) width
        height: Original (pre-padding) height

    Returns:
        Buffer with clamped real values in R, G and B and alpha 255
    """
    values = _as_grid(grid)
    if values.shape[0] < height or values.shape[1] < width:
        raise InvalidInputError(
            f"Grid {values.shape[1]}x{values.shape[0]} is smaller than {width}x{height}"
        )
    real = np.real(values[:height, :width])
    return PixelBuffer.from_gray(real)


def magnitude_spectrum(grid: ComplexLike) -> PixelBuffer:
    """
    Log-magnitude visualization of a spectrum, zero frequency centred.

    Each value is log(1 + |F|) scaled so the maximum maps to 255.
    """
    shifted = fft_shift(grid)
    magnitude = np.log1p(np.abs(shifted))
    peak = magnitude.max()
    if peak > 0:
        magnitude = magnitude / peak * PixelConstants.MAX_VALUE
    return PixelBuffer.from_gray(magnitude)
