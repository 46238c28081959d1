"""
Kernel construction for the convolution engine.

A kernel is a read-only 1D or 2D float64 array whose centre is
floor(size / 2) along each axis. Generators normalize their weights;
caller-supplied kernels are validated but used as given.
"""

import math
from typing import Optional, Sequence, Union

import numpy as np

from core.constants import SpatialDefaults
from core.exceptions import InvalidInputError, ParameterOutOfRangeError

KernelLike = Union[np.ndarray, Sequence[float], Sequence[Sequence[float]]]


def as_kernel(weights: KernelLike) -> np.ndarray:
    """
    Validate and freeze a kernel.

    Args:
        weights: 1D or 2D sequence of numeric weights

    Returns:
        Read-only float64 array

    Raises:
        InvalidInputError: If the kernel is empty, ragged, has more than two
            dimensions or contains non-finite weights
    """
    try:
        kernel = np.array(weights, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Malformed kernel: {e}") from e

    if kernel.ndim not in (1, 2):
        raise InvalidInputError(f"Kernel must be 1D or 2D, got {kernel.ndim} dimensions")
    if kernel.size == 0:
        raise InvalidInputError("Kernel must not be empty")
    if not np.all(np.isfinite(kernel)):
        raise InvalidInputError("Kernel weights must be finite")

    kernel.flags.writeable = False
    return kernel


def gaussian_kernel_size(sigma: float) -> int:
    """Odd kernel size covering roughly +/- 3 sigma: ceil(6 * sigma) | 1."""
    if sigma <= 0:
        raise ParameterOutOfRangeError("sigma", sigma, "must be positive")
    return int(math.ceil(sigma * 6)) | 1


def gaussian_kernel_1d(sigma: float, size: Optional[int] = None) -> np.ndarray:
    """
    Sum-normalized 1D Gaussian kernel.

    Args:
        sigma: Standard deviation in pixels
        size: Kernel length (derived from sigma when omitted)

    Returns:
        Read-only kernel of length size
    """
    if size is None:
        size = gaussian_kernel_size(sigma)
    elif sigma <= 0:
        raise ParameterOutOfRangeError("sigma", sigma, "must be positive")
    if size < 1:
        raise ParameterOutOfRangeError("size", size, "must be at least 1")

    offsets = np.arange(size) - size // 2
    values = np.exp(-(offsets**2) / (2 * sigma * sigma))
    return as_kernel(values / values.sum())


def gaussian_kernel_2d(sigma: float, size: Optional[int] = None) -> np.ndarray:
    """Sum-normalized square 2D Gaussian kernel."""
    if size is None:
        size = gaussian_kernel_size(sigma)
    elif sigma <= 0:
        raise ParameterOutOfRangeError("sigma", sigma, "must be positive")
    if size < 1:
        raise ParameterOutOfRangeError("size", size, "must be at least 1")

    offsets = np.arange(size) - size // 2
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    values = np.exp(-(dx * dx + dy * dy) / (2 * sigma * sigma))
    return as_kernel(values / values.sum())


def laplacian_of_gaussian_kernel(sigma: float) -> np.ndarray:
    """
    Laplacian-of-Gaussian kernel normalized by the sum of absolute weights.

    Args:
        sigma: Standard deviation in pixels

    Returns:
        Read-only square kernel of size ceil(6 * sigma) | 1
    """
    size = gaussian_kernel_size(sigma)
    offsets = np.arange(size) - size // 2
    dy, dx = np.meshgrid(offsets, offsets, indexing="ij")
    r2 = dx * dx + dy * dy
    sigma2 = sigma * sigma

    values = (
        -(1 / (math.pi * sigma2 * sigma2))
        * (1 - r2 / (2 * sigma2))
        * np.exp(-r2 / (2 * sigma2))
    )
    return as_kernel(values / np.abs(values).sum())


def box_kernel_1d(size: int) -> np.ndarray:
    """Uniform 1D averaging kernel."""
    if size < 1 or size % 2 == 0:
        raise ParameterOutOfRangeError("size", size, "must be a positive odd integer")
    return as_kernel(np.full(size, 1.0 / size))


def sharpen_kernel(amount: float = SpatialDefaults.SHARPEN_AMOUNT) -> np.ndarray:
    """Brightness-preserving 3x3 sharpen kernel (weights sum to 1)."""
    return as_kernel(
        [
            [0, -amount, 0],
            [-amount, 1 + 4 * amount, -amount],
            [0, -amount, 0],
        ]
    )


def identity_kernel(size: int = 3) -> np.ndarray:
    """All-zero kernel with a single 1 at the centre."""
    kernel = np.zeros((size, size))
    kernel[size // 2, size // 2] = 1.0
    return as_kernel(kernel)


SOBEL_X = as_kernel(SpatialDefaults.SOBEL_X)
SOBEL_Y = as_kernel(SpatialDefaults.SOBEL_Y)
EMBOSS = as_kernel(SpatialDefaults.EMBOSS)
EDGE_ENHANCE = as_kernel(SpatialDefaults.EDGE_ENHANCE)
BINOMIAL_3X3 = as_kernel(np.array(SpatialDefaults.BINOMIAL_3X3) / 16.0)
