"""
Color space conversions and color adjustments.

Conversions store the target space in the R, G and B channels so the
result can be displayed directly: HSV as H, S, V in [0, 1] times 255, XYZ on
its 0..100 scale and Lab as L / 100 * 255, a + 128, b + 128. Alpha is
always carried over from the input.
"""

import logging
from typing import Tuple

import numpy as np

from core.constants import ColorConstants, ColorDefaults, PixelConstants
from core.pixel_buffer import PixelBuffer

logger = logging.getLogger(__name__)


def _with_rgb(buffer: PixelBuffer, rgb: np.ndarray) -> PixelBuffer:
    return PixelBuffer.from_channels(rgb, buffer.alpha)


def grayscale(buffer: PixelBuffer) -> PixelBuffer:
    """
    Replace R, G and B with the luma 0.299R + 0.587G + 0.114B.

    Pixels that are already gray keep their value exactly, so applying the
    conversion twice gives the same buffer as applying it once.
    """
    rgb = buffer.rgb
    red = rgb[:, :, 0]
    is_gray = (red == rgb[:, :, 1]) & (red == rgb[:, :, 2])
    return PixelBuffer.from_gray(np.where(is_gray, red, buffer.luma()), buffer.alpha)


# === HSV ===


def rgb_planes_to_hsv(rgb: np.ndarray) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert an (H, W, 3) array in [0, 255] to H, S, V planes in [0, 1].

    Hue is 0 for achromatic pixels. When several channels share the maximum,
    red takes precedence over green and green over blue.
    """
    r, g, b = (rgb[:, :, i] / PixelConstants.MAX_VALUE for i in range(3))
    maximum = np.maximum(np.maximum(r, g), b)
    minimum = np.minimum(np.minimum(r, g), b)
    delta = maximum - minimum

    chromatic = delta > 0
    safe_delta = np.where(chromatic, delta, 1.0)
    safe_max = np.where(maximum > 0, maximum, 1.0)

    hue = np.select(
        [maximum == r, maximum == g],
        [
            ((g - b) / safe_delta + np.where(g < b, 6.0, 0.0)) / 6,
            ((b - r) / safe_delta + 2) / 6,
        ],
        default=((r - g) / safe_delta + 4) / 6,
    )
    hue = np.where(chromatic, hue, 0.0)
    saturation = np.where(chromatic, delta / safe_max, 0.0)

    return hue, saturation, maximum


def hsv_planes_to_rgb(hue: np.ndarray, saturation: np.ndarray, value: np.ndarray) -> np.ndarray:
    """Convert H, S, V planes in [0, 1] to an (H, W, 3) array in [0, 255]."""
    chroma = value * saturation
    x = chroma * (1 - np.abs(np.mod(hue * 6, 2) - 1))
    m = value - chroma
    zero = np.zeros_like(hue)

    sector = np.mod(np.floor(hue * 6), 6).astype(np.int64)
    r = np.choose(sector, [chroma, x, zero, zero, x, chroma])
    g = np.choose(sector, [x, chroma, chroma, x, zero, zero])
    b = np.choose(sector, [zero, zero, x, chroma, chroma, x])

    return np.stack([r + m, g + m, b + m], axis=2) * PixelConstants.MAX_VALUE


def rgb_to_hsv(buffer: PixelBuffer) -> PixelBuffer:
    """Encode H, S and V (each scaled to 0..255) in the R, G and B channels."""
    hue, saturation, value = rgb_planes_to_hsv(buffer.rgb)
    hsv = np.stack([hue, saturation, value], axis=2) * PixelConstants.MAX_VALUE
    return _with_rgb(buffer, hsv)


def hsv_to_rgb(buffer: PixelBuffer) -> PixelBuffer:
    """Inverse of rgb_to_hsv; the hue sector is floor(6h) mod 6."""
    hsv = buffer.rgb / PixelConstants.MAX_VALUE
    rgb = hsv_planes_to_rgb(hsv[:, :, 0], hsv[:, :, 1], hsv[:, :, 2])
    return _with_rgb(buffer, rgb)


# === XYZ / Lab ===


def rgb_planes_to_xyz(rgb: np.ndarray) -> np.ndarray:
    """
    sRGB to CIE XYZ (D65) on the 0..100 scale.

    Args:
        rgb: (H, W, 3) array in [0, 255]

    Returns:
        (H, W, 3) array of X, Y, Z
    """
    linear = rgb / PixelConstants.MAX_VALUE
    linear = np.where(
        linear > ColorConstants.SRGB_GAMMA_THRESHOLD,
        ((linear + 0.055) / 1.055) ** 2.4,
        linear / 12.92,
    )
    return (linear * 100) @ ColorConstants.RGB_TO_XYZ_MATRIX.T


def _lab_f(t: np.ndarray) -> np.ndarray:
    return np.where(
        t > ColorConstants.LAB_EPSILON,
        np.cbrt(t),
        ColorConstants.LAB_KAPPA * t + ColorConstants.LAB_OFFSET,
    )


def rgb_to_xyz(buffer: PixelBuffer) -> PixelBuffer:
    return _with_rgb(buffer, rgb_planes_to_xyz(buffer.rgb))


def rgb_to_lab(buffer: PixelBuffer) -> PixelBuffer:
    """
    Convert to CIE L*a*b* against the D65 reference white.

    Args:
        buffer: Input image

    Returns:
        Buffer holding L / 100 * 255, a + 128 and b + 128 in R, G and B
    """
    xyz = rgb_planes_to_xyz(buffer.rgb)
    fx = _lab_f(xyz[:, :, 0] / ColorConstants.WHITE_X)
    fy = _lab_f(xyz[:, :, 1] / ColorConstants.WHITE_Y)
    fz = _lab_f(xyz[:, :, 2] / ColorConstants.WHITE_Z)

    lightness = 116 * fy - 16
    a = 500 * (fx - fy)
    b = 200 * (fy - fz)

    lab = np.stack(
        [lightness / 100 * PixelConstants.MAX_VALUE, a + 128, b + 128],
        axis=2,
    )
    return _with_rgb(buffer, lab)


# === Adjustments ===


def adjust_brightness(buffer: PixelBuffer, amount: float = ColorDefaults.BRIGHTNESS) -> PixelBuffer:
    """Add amount to R, G and B."""
    return _with_rgb(buffer, buffer.rgb + amount)


def adjust_contrast(buffer: PixelBuffer, factor: float = ColorDefaults.CONTRAST) -> PixelBuffer:
    """
    Scale contrast about mid-gray.

    Args:
        buffer: Input image
        factor: Percentage change; 0 is identity, -100 flattens to gray 128

    Returns:
        Image with v' = c * v + 128 * (1 - c), c = (factor + 100) / 100
    """
    contrast = (factor + 100) / 100
    intercept = PixelConstants.MID_GRAY * (1 - contrast)
    return _with_rgb(buffer, contrast * buffer.rgb + intercept)


def adjust_saturation(buffer: PixelBuffer, amount: float = ColorDefaults.SATURATION) -> PixelBuffer:
    """Interpolate each channel from its luma: gray + amount * (channel - gray)."""
    gray = buffer.luma()[:, :, np.newaxis]
    return _with_rgb(buffer, gray + amount * (buffer.rgb - gray))


def adjust_hue(buffer: PixelBuffer, amount: float = ColorDefaults.HUE) -> PixelBuffer:
    """Rotate hue by amount degrees (negative values wrap around)."""
    hue, saturation, value = rgb_planes_to_hsv(buffer.rgb)
    hue = np.mod(hue + amount / 360.0, 1.0)
    return _with_rgb(buffer, hsv_planes_to_rgb(hue, saturation, value))


def invert(buffer: PixelBuffer) -> PixelBuffer:
    return _with_rgb(buffer, PixelConstants.MAX_VALUE - buffer.rgb)


def sepia(buffer: PixelBuffer) -> PixelBuffer:
    """Apply the standard sepia tone matrix."""
    return _with_rgb(buffer, buffer.rgb @ ColorConstants.SEPIA_MATRIX.T)
