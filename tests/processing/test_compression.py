"""
Tests for the compression simulation
"""

import cv2
import numpy as np
import pytest

from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from processing.compression import (
    downsample_image,
    jpeg_style_compression,
    quantization_matrix,
)
from processing.metrics import psnr, round_half_up


class TestQuantization:
    """Test quantization tables"""

    def test_quantization_steps(self):
        """Test q(i, j) = (1 + i + j) * max(1, (100 - quality) / 10)"""
        steps = quantization_matrix(50)

        assert steps[0, 0] == 5.0
        assert steps[7, 7] == 75.0
        assert np.all(quantization_matrix(95) == quantization_matrix(90))


class TestJpegStyleCompression:
    """Test the block DCT round trip"""

    def test_uniform_block_survives(self):
        """Test a flat image only has a DC term and survives unit quantization steps"""
        buffer = PixelBuffer.filled(8, 8, (128, 64, 192, 255))
        result = jpeg_style_compression(buffer, 95)

        assert np.allclose(result.rgb, buffer.rgb, atol=1e-9)

    def test_single_block_round_trip(self):
        """Test one 8x8 block matches a quantized cv2 DCT round trip"""
        gray = np.random.default_rng(4).uniform(0, 255, size=(8, 8))
        steps = quantization_matrix(30)
        coefficients = cv2.dct(gray - 128)
        expected = cv2.idct(round_half_up(coefficients / steps) * steps) + 128

        result = jpeg_style_compression(PixelBuffer.from_array(gray), 30)

        assert np.allclose(result.rgb[:, :, 0], np.clip(expected, 0, 255))

    def test_dc_quantized_to_step(self):
        """Test the DC term snaps to a multiple of its step"""
        # DC of an 8x8 block of v - 128 is 8 * (v - 128); at quality 50 the step is 5
        buffer = PixelBuffer.filled(8, 8, (128, 64, 88, 255))
        result = jpeg_style_compression(buffer, 50)

        assert result.rgb[0, 0, 0] == pytest.approx(128)
        assert result.rgb[0, 0, 1] == pytest.approx(128 + 5 * -102 / 8)
        assert result.rgb[0, 0, 2] == pytest.approx(88)

    def test_quality_improves_fidelity(self, random_image):
        """Test higher quality gives a higher PSNR"""
        low = jpeg_style_compression(random_image, 10)
        high = jpeg_style_compression(random_image, 95)

        assert psnr(random_image, high) > psnr(random_image, low)

    def test_non_multiple_size_and_alpha(self):
        """Test sizes that are not multiples of 8 are cropped back and alpha copied"""
        rgb = np.random.default_rng(2).uniform(0, 255, size=(5, 11, 3))
        alpha = np.full((5, 11), 77.0)
        buffer = PixelBuffer.from_channels(rgb, alpha)

        result = jpeg_style_compression(buffer, 50)

        assert result.size == (11, 5)
        assert np.all(result.alpha == 77)

    @pytest.mark.parametrize("quality", [0, 101])
    def test_invalid_quality(self, gray_image, quality):
        """Test quality must lie in 1..100"""
        with pytest.raises(ParameterOutOfRangeError):
            jpeg_style_compression(gray_image, quality)


class TestDownsample:
    """Test box downsampling"""

    def test_box_average(self):
        """Test each cell becomes its mean, including alpha"""
        data = np.zeros((2, 2, 4))
        data[0, 0] = (0, 0, 0, 0)
        data[0, 1] = (100, 100, 100, 100)
        data[1, 0] = (200, 200, 200, 200)
        data[1, 1] = (100, 100, 100, 100)

        result = downsample_image(PixelBuffer(data), 2)

        assert result.size == (1, 1)
        assert result.data[0, 0].tolist() == [100, 100, 100, 100]

    def test_floor_size(self, random_image):
        """Test leftover rows and columns are dropped"""
        assert downsample_image(random_image, 5).size == (3, 2)

    def test_factor_one_is_identity(self, random_image):
        """Test factor 1 keeps the image"""
        assert downsample_image(random_image, 1) == random_image

    def test_invalid_factor(self, random_image):
        """Test zero and oversized factors"""
        with pytest.raises(ParameterOutOfRangeError):
            downsample_image(random_image, 0)
        with pytest.raises(ParameterOutOfRangeError):
            downsample_image(random_image, 20)
