"""
Convolution engine.

Generic 2D kernel convolution and separable 1D x 1D convolution over
PixelBuffers. The boundary policy is clamp-to-edge: coordinates outside the
image are replaced by the nearest valid coordinate (OpenCV BORDER_REPLICATE).
Kernels are applied in correlation orientation with their centre at
floor(size / 2), and are never normalized here.
"""

import logging
from typing import Tuple, Union

import cv2
import numpy as np

from core.enums import Channel
from core.exceptions import ParameterOutOfRangeError
from core.kernels import KernelLike, as_kernel
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)

RGB_CHANNELS: Tuple[int, ...] = (0, 1, 2)


def filter_plane(plane: np.ndarray, kernel: KernelLike) -> np.ndarray:
    """
    Correlate a single (H, W) plane with a kernel using clamp-to-edge borders.

    The result is not clamped, so signed responses (gradients, Laplacians)
    survive for callers that need them.

    Args:
        plane: 2D array of samples
        kernel: 1D (treated as a row) or 2D kernel

    Returns:
        Float64 array of the same shape as plane
    """
    kernel = as_kernel(kernel)
    if kernel.ndim == 1:
        kernel = kernel[np.newaxis, :]

    return cv2.filter2D(
        np.array(plane, dtype=np.float64),
        cv2.CV_64F,
        np.array(kernel, dtype=np.float64),
        borderType=cv2.BORDER_REPLICATE,
    )


def _resolve_channels(channel: Union[Channel, int]) -> Tuple[int, ...]:
    try:
        channel = Channel(channel)
    except ValueError as e:
        raise ParameterOutOfRangeError("channel", channel, "expected ALL, RED, GREEN or BLUE") from e

    if channel == Channel.ALL:
        return RGB_CHANNELS
    return (int(channel),)


def convolve2d(
    buffer: PixelBuffer, kernel: KernelLike, channel: Union[Channel, int] = Channel.ALL
) -> PixelBuffer:
    """
    Convolve a buffer with a 2D kernel.

    Args:
        buffer: Input image
        kernel: 2D kernel (a 1D kernel is treated as a single row)
        channel: Channel.ALL for R, G and B, or one specific color channel

    Returns:
        New buffer of identical dimensions. Selected channels hold the
        weighted sums clamped to [0, 255]; other channels and alpha are copied.
    """
    kernel = as_kernel(kernel)
    channels = _resolve_channels(channel)

    output = buffer.to_array()
    for c in channels:
        output[:, :, c] = filter_plane(buffer.channel(c), kernel)

    logger.debug(f"convolve2d: kernel {kernel.shape} on channels {channels} of {buffer}")
    return PixelBuffer(output)


def separable_convolve(
    buffer: PixelBuffer, kernel_x: KernelLike, kernel_y: KernelLike
) -> PixelBuffer:
    """
    Convolve with a separable kernel as a horizontal then a vertical pass.

    Each pass is clamped to [0, 255], matching two consecutive convolve2d
    calls. For non-negative kernels this equals convolve2d with the outer
    product of kernel_y and kernel_x within floating point rounding.

    Args:
        buffer: Input image
        kernel_x: 1D horizontal kernel
        kernel_y: 1D vertical kernel

    Returns:
        New buffer; alpha passes through
    """
    row_kernel = as_kernel(kernel_x).reshape(1, -1)
    column_kernel = as_kernel(kernel_y).reshape(-1, 1)

    horizontal = convolve2d(buffer, row_kernel)
    return convolve2d(horizontal, column_kernel)
