"""
Image pyramids and geometric transforms.

Gaussian and Laplacian pyramids with reconstruction, nearest/bilinear
scaling and rotation about the image centre. Resampling is vectorized with
NumPy fancy indexing; all four channels are resampled.
"""

import logging
import math
from typing import List, Sequence, Union

import numpy as np

from core.constants import PixelConstants, PyramidDefaults
from core.convolution import convolve2d
from core.enums import Interpolation
from core.exceptions import InvalidInputError, ParameterOutOfRangeError
from core.kernels import BINOMIAL_3X3
from core.pixel_buffer import PixelBuffer
from core.utils.enum_converter import parse_enum

logger = logging.getLogger(__name__)


# === Resampling ===


def _nearest(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """Nearest-neighbour resample with src = floor(dst * W / W')."""
    src_x = np.floor(np.arange(width) * (buffer.width / width)).astype(np.int64)
    src_y = np.floor(np.arange(height) * (buffer.height / height)).astype(np.int64)
    src_x = np.minimum(src_x, buffer.width - 1)
    src_y = np.minimum(src_y, buffer.height - 1)
    return PixelBuffer(buffer.data[src_y[:, np.newaxis], src_x[np.newaxis, :]])


def _bilinear(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """Bilinear resample with src = dst * (W - 1) / W'."""
    src_x = np.arange(width) * ((buffer.width - 1) / width)
    src_y = np.arange(height) * ((buffer.height - 1) / height)

    x1 = np.floor(src_x).astype(np.int64)
    y1 = np.floor(src_y).astype(np.int64)
    x2 = np.minimum(x1 + 1, buffer.width - 1)
    y2 = np.minimum(y1 + 1, buffer.height - 1)

    dx = (src_x - x1)[np.newaxis, :, np.newaxis]
    dy = (src_y - y1)[:, np.newaxis, np.newaxis]

    data = buffer.data
    top_left = data[y1[:, np.newaxis], x1[np.newaxis, :]]
    top_right = data[y1[:, np.newaxis], x2[np.newaxis, :]]
    bottom_left = data[y2[:, np.newaxis], x1[np.newaxis, :]]
    bottom_right = data[y2[:, np.newaxis], x2[np.newaxis, :]]

    result = (
        top_left * (1 - dx) * (1 - dy)
        + top_right * dx * (1 - dy)
        + bottom_left * (1 - dx) * dy
        + bottom_right * dx * dy
    )
    return PixelBuffer(result)


def resize(
    buffer: PixelBuffer,
    width: int,
    height: int,
    interpolation: Union[Interpolation, str] = Interpolation.NEAREST,
) -> PixelBuffer:
    """
    Resample a buffer to an explicit size.

    Args:
        buffer: Input image
        width: Target width (>= 1)
        height: Target height (>= 1)
        interpolation: "nearest" or "bilinear"

    Returns:
        Resampled image
    """
    if width < 1 or height < 1:
        raise ParameterOutOfRangeError("size", (width, height), "target size must be at least 1x1")

    method = parse_enum(interpolation, Interpolation, name="interpolation")
    if method == Interpolation.NEAREST:
        return _nearest(buffer, width, height)
    return _bilinear(buffer, width, height)


def scale_image(
    buffer: PixelBuffer,
    scale: float = PyramidDefaults.SCALE,
    interpolation: Union[Interpolation, str] = Interpolation.BILINEAR,
) -> PixelBuffer:
    """
    Scale by a factor; the new size is floor(W * scale) x floor(H * scale).

    Raises:
        ParameterOutOfRangeError: If scale <= 0 or the result would be empty
    """
    if scale <= 0:
        raise ParameterOutOfRangeError("scale", scale, "must be positive")

    width = int(math.floor(buffer.width * scale))
    height = int(math.floor(buffer.height * scale))
    if width < 1 or height < 1:
        raise ParameterOutOfRangeError(
            "scale", scale, f"{buffer.width}x{buffer.height} would shrink to an empty image"
        )
    return resize(buffer, width, height, interpolation)


def rotate_image(buffer: PixelBuffer, angle: float = PyramidDefaults.ROTATION_DEGREES) -> PixelBuffer:
    """
    Rotate about the centre onto a canvas enlarged to the rotated bounds.

    Every output pixel is inverse-mapped into the source with floor
    sampling. Pixels that land inside the source take its color with alpha
    255; the rest are transparent black.

    Args:
        buffer: Input image
        angle: Rotation in degrees (positive is clockwise on screen)

    Returns:
        Rotated image of size ceil(|W cos| + |H sin|) x ceil(|W sin| + |H cos|)
    """
    radians = math.radians(angle)
    cos_a, sin_a = math.cos(radians), math.sin(radians)
    width, height = buffer.width, buffer.height

    # Rounding first keeps exact multiples of 90 degrees from growing a pixel
    new_width = max(1, int(math.ceil(round(abs(width * cos_a) + abs(height * sin_a), 9))))
    new_height = max(1, int(math.ceil(round(abs(width * sin_a) + abs(height * cos_a), 9))))

    y, x = np.mgrid[0:new_height, 0:new_width]
    dx = x - new_width / 2
    dy = y - new_height / 2
    src_x = np.floor(dx * cos_a + dy * sin_a + width / 2).astype(np.int64)
    src_y = np.floor(-dx * sin_a + dy * cos_a + height / 2).astype(np.int64)

    inside = (src_x >= 0) & (src_x < width) & (src_y >= 0) & (src_y < height)

    output = np.zeros((new_height, new_width, PixelConstants.CHANNELS))
    output[inside, :3] = buffer.rgb[src_y[inside], src_x[inside]]
    output[inside, 3] = PixelConstants.OPAQUE

    logger.debug(f"Rotated {width}x{height} by {angle} degrees to {new_width}x{new_height}")
    return PixelBuffer(output)


# === Pyramids ===


def pyr_down(buffer: PixelBuffer) -> PixelBuffer:
    """
    One pyramid reduction step.

    Blur with the 3x3 binomial kernel (clamp-to-edge) and keep the samples
    at even coordinates, giving floor(W / 2) x floor(H / 2).
    """
    width, height = buffer.width // 2, buffer.height // 2
    if width < 1 or height < 1:
        raise ParameterOutOfRangeError(
            "levels", buffer.size, "image is too small for another pyramid level"
        )

    blurred = convolve2d(buffer, BINOMIAL_3X3)
    # Alpha is not part of the blur but is sampled along with the color
    return PixelBuffer(blurred.data[0 : 2 * height : 2, 0 : 2 * width : 2])


def _upsample(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    return _nearest(buffer, width, height)


def gaussian_pyramid(buffer: PixelBuffer, levels: int = PyramidDefaults.LEVELS) -> List[PixelBuffer]:
    """
    Build a Gaussian pyramid.

    Args:
        buffer: Level 0 image
        levels: Number of levels including level 0 (>= 1)

    Returns:
        List of levels, each half the size of the previous one

    Raises:
        ParameterOutOfRangeError: If a level would have zero width or height
    """
    if levels < 1:
        raise ParameterOutOfRangeError("levels", levels, "must be at least 1")

    pyramid = [buffer]
    for _ in range(1, levels):
        pyramid.append(pyr_down(pyramid[-1]))
    return pyramid


def laplacian_pyramid(buffer: PixelBuffer, levels: int = PyramidDefaults.LEVELS) -> List[PixelBuffer]:
    """
    Build a Laplacian pyramid.

    Each level but the last stores clamp(G_i - up(G_{i+1}) + 128) on the
    color channels with the alpha of G_i; the last level is the top of the
    Gaussian pyramid.

    Returns:
        List of levels, largest first
    """
    gaussian = gaussian_pyramid(buffer, levels)
    pyramid = []

    for current, smaller in zip(gaussian[:-1], gaussian[1:]):
        upsampled = _upsample(smaller, current.width, current.height)
        detail = current.rgb - upsampled.rgb + PyramidDefaults.LAPLACIAN_OFFSET
        pyramid.append(PixelBuffer.from_channels(detail, current.alpha))

    pyramid.append(gaussian[-1])
    return pyramid


def reconstruct_from_laplacian(pyramid: Sequence[PixelBuffer]) -> PixelBuffer:
    """
    Collapse a Laplacian pyramid back into an image.

    From the top down, result = clamp(L_i + up(result) - 128) with the alpha
    of L_i. Clamping in both directions makes the round trip lossy where
    details exceeded +/- 128.
    """
    if not pyramid:
        raise InvalidInputError("Cannot reconstruct from an empty pyramid")

    result = pyramid[-1]
    for level in reversed(pyramid[:-1]):
        upsampled = _upsample(result, level.width, level.height)
        combined = level.rgb + upsampled.rgb - PyramidDefaults.LAPLACIAN_OFFSET
        result = PixelBuffer.from_channels(combined, level.alpha)
    return result
