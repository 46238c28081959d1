"""
Tests for feature detection
"""

import numpy as np
import pytest

from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from processing.features import (
    canny_edge_detection,
    harris_corner_detection,
    harris_response,
    hough_line_detection,
    hysteresis_threshold,
    non_maximum_suppression,
)


@pytest.fixture
def band_image():
    """64x64 black image crossed by a white horizontal band"""
    gray = np.zeros((64, 64))
    gray[30:34, :] = 255.0
    return PixelBuffer.from_array(gray)


def red_mask(buffer):
    return np.all(buffer.rgb == (255, 0, 0), axis=2)


class TestNonMaximumSuppression:
    """Test edge thinning"""

    def test_keeps_ridge_along_gradient(self):
        """Test only the peak across a horizontal gradient survives"""
        magnitude = np.array(
            [
                [0, 0, 0, 0, 0],
                [0, 1, 3, 1, 0],
                [0, 0, 0, 0, 0],
            ],
            dtype=np.float64,
        )
        angle = np.zeros_like(magnitude)

        result = non_maximum_suppression(magnitude, angle)

        assert result[1].tolist() == [0, 0, 3, 0, 0]

    def test_border_is_zero(self):
        """Test border pixels are never kept"""
        magnitude = np.full((4, 4), 10.0)

        result = non_maximum_suppression(magnitude, np.zeros_like(magnitude))

        assert np.all(result[0] == 0)
        assert np.all(result[:, -1] == 0)
        assert np.all(result[1:-1, 1:-1] == 10)


class TestHysteresis:
    """Test double threshold edge tracking"""

    def test_strong_and_isolated_weak(self):
        """Test strong pixels stay and isolated weak pixels go"""
        magnitude = np.array([[120.0, 0, 0, 60.0]])

        assert hysteresis_threshold(magnitude, 50, 100).tolist() == [[True, False, False, False]]

    def test_forward_chain_promoted(self):
        """Test promotions propagate forward in raster order"""
        magnitude = np.array([[120.0, 60.0, 60.0]])

        assert hysteresis_threshold(magnitude, 50, 100).tolist() == [[True, True, True]]

    def test_single_pass(self):
        """Test a weak pixel visited before its path to a strong pixel is dropped"""
        magnitude = np.array([[60.0, 60.0, 120.0]])

        assert hysteresis_threshold(magnitude, 50, 100).tolist() == [[False, True, True]]


class TestCanny:
    """Test Canny edge detection"""

    def test_uniform_has_no_edges(self, gray_image):
        """Test a solid image yields an empty edge map"""
        result = canny_edge_detection(gray_image)

        assert np.all(result.rgb == 0)
        assert np.all(result.alpha == 255)

    def test_square_edges(self, square_image):
        """Test edges are binary and lie on the square outline"""
        result = canny_edge_detection(square_image)
        edges = result.rgb[:, :, 0] == 255

        assert set(np.unique(result.rgb)) <= {0.0, 255.0}
        assert edges.any()
        assert not edges[16, 16]
        assert not edges[0].any()
        rows, cols = np.nonzero(edges)
        assert rows.min() >= 7 and rows.max() <= 24
        assert cols.min() >= 7 and cols.max() <= 24

    def test_edge_next_to_border(self):
        """Test an edge against the top row is found one row in, never on the border"""
        gray = np.zeros((6, 6))
        gray[0] = 255.0
        # sigma 0.1 gives a single-tap blur, so the step reaches the gradient unchanged
        result = canny_edge_detection(PixelBuffer.from_array(gray), sigma=0.1)
        edges = result.rgb[:, :, 0] == 255

        assert not edges[0].any()
        assert edges[1, 1:5].all()
        assert not edges[1, 0] and not edges[1, 5]
        assert not edges[2:].any()

    def test_low_above_high(self, gray_image):
        """Test threshold order is validated"""
        with pytest.raises(ParameterOutOfRangeError):
            canny_edge_detection(gray_image, 150, 100)


class TestHarris:
    """Test Harris corner detection"""

    def test_uniform_response_is_zero(self, gray_image):
        """Test a solid image has no response"""
        assert np.all(harris_response(gray_image) == 0)

    def test_uniform_has_no_corners(self):
        """Test nothing is painted on a solid image and alpha becomes 255"""
        buffer = PixelBuffer.filled(6, 6, (40, 50, 60, 100))
        result = harris_corner_detection(buffer)

        assert np.all(result.rgb == (40, 50, 60))
        assert np.all(result.alpha == 255)

    def test_square_corners(self, square_image):
        """Test corners are found near the square corners only"""
        result = harris_corner_detection(square_image)
        corners = red_mask(result)

        assert corners[8:13, 8:13].any()
        assert corners[19:24, 19:24].any()
        assert not corners[16, 16]
        assert not corners[16, 10]

    def test_response_border_is_zero(self, square_image):
        """Test the response is only computed where the window fits"""
        response = harris_response(square_image)

        assert np.all(response[0] == 0)
        assert np.all(response[:, -1] == 0)


class TestHough:
    """Test Hough line detection"""

    def test_lines_drawn_in_red(self, band_image):
        """Test a long straight edge produces a red line"""
        result = hough_line_detection(band_image, vote_threshold=40)

        assert result.size == band_image.size
        assert red_mask(result).any()

    def test_no_lines_returns_edges(self, gray_image):
        """Test the edge map is returned unchanged without lines"""
        result = hough_line_detection(gray_image)

        assert result == canny_edge_detection(gray_image, 50, 150)
        assert not red_mask(result).any()

    def test_invalid_votes(self, gray_image):
        """Test vote threshold must be positive"""
        with pytest.raises(ParameterOutOfRangeError):
            hough_line_detection(gray_image, vote_threshold=0)
