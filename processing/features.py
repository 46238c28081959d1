"""
Feature detection: Canny edges, Harris corners and Hough lines.

All detectors work on the (R + G + B) / 3 intensity and return images with
alpha 255: Canny a binary edge map, Harris the input with corner pixels
painted red, Hough the Canny edge map with detected lines drawn in red.
"""

import logging

import cv2
import numpy as np

from core.constants import FeatureDefaults, PixelConstants
from core.convolution import filter_plane
from core.exceptions import ParameterOutOfRangeError
from core.kernels import SOBEL_X, SOBEL_Y
from core.pixel_buffer import PixelBuffer
from processing.spatial import gaussian_blur

logger = logging.getLogger(__name__)

STRONG = 2
WEAK = 1

# Neighbour offsets (dy, dx) along each quantized gradient direction
_SECTOR_OFFSETS = (
    (0, 1),  # horizontal gradient: compare left/right
    (1, 1),  # 45 degrees: compare up-left/down-right
    (1, 0),  # vertical gradient: compare up/down
    (1, -1),  # 135 degrees: compare up-right/down-left
)


def _gradients(buffer: PixelBuffer):
    intensity = buffer.mean_intensity()
    gx = filter_plane(intensity, SOBEL_X)
    gy = filter_plane(intensity, SOBEL_Y)
    return np.hypot(gx, gy), np.degrees(np.arctan2(gy, gx))


def _direction_sectors(angle: np.ndarray) -> np.ndarray:
    """Quantize angles in (-180, 180] degrees into 4 sectors of 45 degrees."""
    return (np.floor((angle + 22.5) / 45.0).astype(np.int64)) % 4


def non_maximum_suppression(magnitude: np.ndarray, angle: np.ndarray) -> np.ndarray:
    """
    Thin edges to one-pixel ridges.

    Interior pixels keep their magnitude when it is >= both neighbours along
    the gradient direction; border pixels and all others become 0.

    Args:
        magnitude: Gradient magnitude plane
        angle: Gradient direction in degrees

    Returns:
        Suppressed magnitude plane
    """
    height, width = magnitude.shape
    output = np.zeros_like(magnitude)
    if height < 3 or width < 3:
        return output

    center = magnitude[1:-1, 1:-1]
    sectors = _direction_sectors(angle[1:-1, 1:-1])
    keep = np.zeros(center.shape, dtype=bool)

    for sector, (dy, dx) in enumerate(_SECTOR_OFFSETS):
        before = magnitude[1 - dy : height - 1 - dy, 1 - dx : width - 1 - dx]
        after = magnitude[1 + dy : height - 1 + dy, 1 + dx : width - 1 + dx]
        keep |= (sectors == sector) & (center >= before) & (center >= after)

    output[1:-1, 1:-1] = np.where(keep, center, 0.0)
    return output


def hysteresis_threshold(magnitude: np.ndarray, low: float, high: float) -> np.ndarray:
    """
    Double threshold with single-pass edge tracking.

    Pixels >= high are strong, pixels >= low are weak. Weak pixels are
    visited once in raster order and promoted when any 8-neighbour is
    strong at that moment, otherwise dropped. Promotions are visible to
    later weak pixels in the same pass.

    Returns:
        Boolean edge mask
    """
    classes = np.where(magnitude >= high, STRONG, np.where(magnitude >= low, WEAK, 0))

    for y, x in np.argwhere(classes == WEAK):
        window = classes[max(y - 1, 0) : y + 2, max(x - 1, 0) : x + 2]
        classes[y, x] = STRONG if np.any(window == STRONG) else 0

    return classes == STRONG


def canny_edge_detection(
    buffer: PixelBuffer,
    low_threshold: float = FeatureDefaults.CANNY_LOW,
    high_threshold: float = FeatureDefaults.CANNY_HIGH,
    sigma: float = FeatureDefaults.CANNY_SIGMA,
) -> PixelBuffer:
    """
    Canny edge detector.

    Args:
        buffer: Input image
        low_threshold: Weak edge threshold
        high_threshold: Strong edge threshold
        sigma: Gaussian pre-blur sigma

    Returns:
        Binary edge map (0/255 gray), alpha 255
    """
    if low_threshold > high_threshold:
        raise ParameterOutOfRangeError(
            "low_threshold", low_threshold, f"must not exceed high_threshold {high_threshold}"
        )

    blurred = gaussian_blur(buffer, sigma)
    magnitude, angle = _gradients(blurred)
    suppressed = non_maximum_suppression(magnitude, angle)
    edges = hysteresis_threshold(suppressed, low_threshold, high_threshold)

    logger.debug(f"Canny: {int(edges.sum())} edge pixels")
    return PixelBuffer.from_gray(np.where(edges, PixelConstants.MAX_VALUE, 0.0))


def harris_response(buffer: PixelBuffer, k: float = FeatureDefaults.HARRIS_K) -> np.ndarray:
    """
    Harris corner response R = det(M) - k * trace(M)^2.

    Derivatives are central differences on interior pixels (0 on the border);
    the structure tensor M sums derivative products over a 3x3 window. The
    response is 0 wherever the window would leave the image.

    Returns:
        (H, W) float64 response map
    """
    intensity = buffer.mean_intensity()
    height, width = intensity.shape
    ix = np.zeros_like(intensity)
    iy = np.zeros_like(intensity)
    ix[1:-1, 1:-1] = (intensity[1:-1, 2:] - intensity[1:-1, :-2]) / 2
    iy[1:-1, 1:-1] = (intensity[2:, 1:-1] - intensity[:-2, 1:-1]) / 2

    window = np.ones((FeatureDefaults.HARRIS_WINDOW, FeatureDefaults.HARRIS_WINDOW))
    sxx = filter_plane(ix * ix, window)
    syy = filter_plane(iy * iy, window)
    sxy = filter_plane(ix * iy, window)

    response = np.zeros_like(intensity)
    half = FeatureDefaults.HARRIS_WINDOW // 2
    inner = (slice(half, height - half), slice(half, width - half))
    det = sxx[inner] * syy[inner] - sxy[inner] ** 2
    trace = sxx[inner] + syy[inner]
    response[inner] = det - k * trace * trace
    return response


def harris_corner_detection(
    buffer: PixelBuffer,
    threshold: float = FeatureDefaults.HARRIS_THRESHOLD,
    k: float = FeatureDefaults.HARRIS_K,
) -> PixelBuffer:
    """
    Mark Harris corners in red.

    Args:
        buffer: Input image
        threshold: Fraction of the maximum response a corner must exceed
        k: Harris sensitivity constant

    Returns:
        Copy of the input colors with corners red, alpha 255
    """
    response = harris_response(buffer, k)
    corners = response > response.max() * threshold

    output = buffer.to_array()
    output[:, :, 3] = PixelConstants.OPAQUE
    output[corners, :3] = FeatureDefaults.MARKER_COLOR

    logger.debug(f"Harris: {int(corners.sum())} corner pixels")
    return PixelBuffer(output)


def hough_line_detection(
    buffer: PixelBuffer,
    low_threshold: float = FeatureDefaults.HOUGH_CANNY_LOW,
    high_threshold: float = FeatureDefaults.HOUGH_CANNY_HIGH,
    vote_threshold: int = FeatureDefaults.HOUGH_VOTE_THRESHOLD,
    max_lines: int = FeatureDefaults.HOUGH_MAX_LINES,
) -> PixelBuffer:
    """
    Detect straight lines with the standard Hough transform.

    Lines are voted from the Canny edge map in (rho, theta) space; the
    max_lines strongest lines with at least vote_threshold votes are drawn
    in red over the edge map.

    Args:
        buffer: Input image
        low_threshold: Canny low threshold
        high_threshold: Canny high threshold
        vote_threshold: Minimum accumulator votes per line
        max_lines: Maximum number of lines drawn

    Returns:
        Edge map with lines overlaid; the plain edge map when none qualify
    """
    if vote_threshold < 1:
        raise ParameterOutOfRangeError("vote_threshold", vote_threshold, "must be at least 1")
    if max_lines < 1:
        raise ParameterOutOfRangeError("max_lines", max_lines, "must be at least 1")

    edges = canny_edge_detection(buffer, low_threshold, high_threshold)
    edge_mask = np.ascontiguousarray(edges.to_uint8()[:, :, 0])

    lines = cv2.HoughLines(
        edge_mask,
        FeatureDefaults.HOUGH_RHO_RESOLUTION,
        FeatureDefaults.HOUGH_THETA_RESOLUTION,
        vote_threshold,
    )
    if lines is None:
        logger.debug("Hough: no lines above vote threshold")
        return edges

    canvas = np.ascontiguousarray(edges.to_uint8()[:, :, :3])
    reach = edges.width + edges.height
    color = tuple(int(v) for v in FeatureDefaults.MARKER_COLOR)

    # OpenCV returns lines ordered by descending votes
    for rho, theta in lines[:max_lines, 0]:
        cos_t, sin_t = np.cos(theta), np.sin(theta)
        x0, y0 = rho * cos_t, rho * sin_t
        start = (int(round(x0 - reach * sin_t)), int(round(y0 + reach * cos_t)))
        end = (int(round(x0 + reach * sin_t)), int(round(y0 - reach * cos_t)))
        cv2.line(canvas, start, end, color, 1)

    logger.debug(f"Hough: drew {min(len(lines), max_lines)} of {len(lines)} lines")
    return PixelBuffer.from_array(canvas)
