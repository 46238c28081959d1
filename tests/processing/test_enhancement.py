"""
Tests for contrast enhancement and morphology
"""

import numpy as np
import pytest

from core.enums import MorphologyOperation
from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from processing.enhancement import (
    clahe,
    histogram_equalization,
    intensity_windowing,
    morphology,
    unsharp_mask,
)


@pytest.fixture
def spike_image():
    """5x5 black image with one white pixel in the centre"""
    gray = np.zeros((5, 5))
    gray[2, 2] = 255
    return PixelBuffer.from_array(gray)


class TestWindowing:
    """Test intensity windowing"""

    def test_window_mapping(self):
        """Test below, inside and above the window"""
        buffer = PixelBuffer.from_array(np.array([[70.0, 78.0, 128.0, 178.0, 200.0]]))
        result = intensity_windowing(buffer, center=128, width=100)

        assert np.allclose(result.rgb[0, :, 0], [0, 0, 127.5, 255, 255])

    def test_alpha_kept(self):
        """Test alpha is carried over"""
        buffer = PixelBuffer.filled(2, 2, (50, 50, 50, 90))

        assert np.all(intensity_windowing(buffer).alpha == 90)

    def test_invalid_width(self, gray_image):
        """Test width must be positive"""
        with pytest.raises(ParameterOutOfRangeError):
            intensity_windowing(gray_image, 128, 0)


class TestHistogramEqualization:
    """Test global and tiled equalization"""

    def test_bimodal_stretched(self, bimodal_image):
        """Test two levels are spread to the full range"""
        result = histogram_equalization(bimodal_image)

        assert np.all(result.rgb[:, :8] == 0)
        assert np.all(result.rgb[:, 8:] == 255)

    def test_uniform_returns_gray(self):
        """Test a single-level image is returned as its gray rendition"""
        buffer = PixelBuffer.filled(3, 3, (100, 110, 121, 255))
        result = histogram_equalization(buffer)

        assert np.all(result.rgb == 110)

    def test_clahe_without_clipping_matches_equalization(self, bimodal_image):
        """Test a huge clip limit over a single tile equals global equalization"""
        result = clahe(bimodal_image, clip_limit=1000, tile_size=16)

        assert np.allclose(result.rgb, histogram_equalization(bimodal_image).rgb)

    def test_clahe_limits_contrast(self, bimodal_image):
        """Test clipping keeps the output away from the extremes"""
        result = clahe(bimodal_image, clip_limit=2.0, tile_size=16)

        assert result.rgb[0, 0, 0] > 0
        assert result.rgb[0, 15, 0] < 255
        assert result.rgb[0, 0, 0] < result.rgb[0, 15, 0]

    def test_clahe_invalid_parameters(self, gray_image):
        """Test clip limit and tile size are validated"""
        with pytest.raises(ParameterOutOfRangeError):
            clahe(gray_image, clip_limit=0)
        with pytest.raises(ParameterOutOfRangeError):
            clahe(gray_image, tile_size=0)


class TestUnsharpMask:
    """Test unsharp masking"""

    def test_uniform_unchanged(self, gray_image):
        """Test flat regions are not affected"""
        assert np.allclose(unsharp_mask(gray_image, 1.5, 1.0).rgb, 128)

    def test_zero_amount_is_identity(self, random_image):
        """Test amount 0 returns the input colors"""
        assert np.allclose(unsharp_mask(random_image, 0, 1.0).rgb, random_image.rgb)

    def test_edge_contrast_increased(self, bimodal_image):
        """Test overshoot on both sides of an edge"""
        result = unsharp_mask(bimodal_image, 1.5, 1.0)

        assert result.rgb[0, 7, 0] < 30
        assert result.rgb[0, 8, 0] > 220


class TestMorphology:
    """Test grayscale morphology"""

    def test_erode_removes_spike(self, spike_image):
        """Test erosion removes a single bright pixel"""
        assert np.all(morphology(spike_image, MorphologyOperation.ERODE, 3).rgb == 0)

    def test_dilate_grows_spike(self, spike_image):
        """Test dilation grows the spike to the window size"""
        result = morphology(spike_image, "dilate", 3)

        assert np.all(result.rgb[1:4, 1:4] == 255)
        assert result.rgb[0, 0, 0] == 0

    def test_open_and_close(self, spike_image):
        """Test opening removes the spike and closing keeps it"""
        opened = morphology(spike_image, "open", 3)
        closed = morphology(spike_image, "close", 3)

        assert np.all(opened.rgb == 0)
        assert closed.rgb[2, 2, 0] == 255
        assert closed.rgb[1, 1, 0] == 0

    def test_even_size_widened(self, spike_image):
        """Test kernel size 2 uses a 3x3 window"""
        result = morphology(spike_image, "dilate", 2)

        assert np.all(result.rgb[1:4, 1:4] == 255)

    def test_invalid_parameters(self, spike_image):
        """Test kernel size and operation are validated"""
        with pytest.raises(ParameterOutOfRangeError):
            morphology(spike_image, "erode", 0)
        with pytest.raises(ParameterOutOfRangeError):
            morphology(spike_image, "smooth", 3)
