"""
Tests for segmentation algorithms
"""

import numpy as np
import pytest

from core.exceptions import ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from processing.segmentation import (
    adaptive_threshold,
    connected_components,
    kmeans_segmentation,
    otsu_threshold,
    otsu_threshold_value,
    region_growing,
    threshold_segmentation,
    watershed_segmentation,
)


class TestThreshold:
    """Test global thresholding"""

    def test_binary_output(self, random_image):
        """Test output contains only 0 and 255"""
        result = threshold_segmentation(random_image, 100)

        assert set(np.unique(result.rgb)) <= {0.0, 255.0}

    def test_uniform_at_threshold_is_white(self):
        """Test intensity equal to the threshold is foreground"""
        buffer = PixelBuffer.filled(3, 3, (90, 100, 110, 255))

        assert np.all(threshold_segmentation(buffer, 100).rgb == 255)

    def test_alpha_kept(self):
        """Test alpha is carried over"""
        buffer = PixelBuffer.filled(2, 2, (200, 200, 200, 33))

        assert np.all(threshold_segmentation(buffer, 128).alpha == 33)


class TestOtsu:
    """Test Otsu thresholding"""

    def test_bimodal_threshold_between_modes(self, bimodal_image):
        """Test the threshold separates a 30/220 image"""
        value = otsu_threshold_value(bimodal_image)

        assert 30 < value <= 220

    def test_bimodal_segmentation(self, bimodal_image):
        """Test the dark half is black and the bright half white"""
        result = otsu_threshold(bimodal_image)

        assert np.all(result.rgb[:, :8] == 0)
        assert np.all(result.rgb[:, 8:] == 255)

    def test_uniform_image(self, gray_image):
        """Test no split gives threshold 0 and an all-white image"""
        assert otsu_threshold_value(gray_image) == 0
        assert np.all(otsu_threshold(gray_image).rgb == 255)


class TestAdaptiveThreshold:
    """Test local mean thresholding"""

    def test_uniform_is_white(self, gray_image):
        """Test every pixel passes mean - c"""
        assert np.all(adaptive_threshold(gray_image, 3, 2).rgb == 255)

    def test_dark_side_of_edge(self, bimodal_image):
        """Test pixels darker than their neighbourhood become black"""
        result = adaptive_threshold(bimodal_image, 5, 2)

        assert np.all(result.rgb[:, 7] == 0)
        assert np.all(result.rgb[:, 8] == 255)
        assert np.all(result.rgb[:, 0] == 255)

    @pytest.mark.parametrize("block_size", [0, 4])
    def test_invalid_block_size(self, gray_image, block_size):
        """Test block size must be positive and odd"""
        with pytest.raises(ParameterOutOfRangeError):
            adaptive_threshold(gray_image, block_size)


class TestKMeans:
    """Test k-means color quantization"""

    def test_single_cluster_is_mean_color(self, bimodal_image):
        """Test k=1 paints every pixel with the global mean"""
        result = kmeans_segmentation(bimodal_image, k=1, max_iterations=3, seed=0)

        assert np.allclose(result.rgb, 125)

    def test_at_most_k_colors(self, random_image):
        """Test output uses no more than k distinct colors"""
        result = kmeans_segmentation(random_image, k=3, seed=1)
        colors = np.unique(result.rgb.reshape(-1, 3), axis=0)

        assert len(colors) <= 3

    def test_seed_is_reproducible(self, random_image):
        """Test the same seed gives the same result"""
        first = kmeans_segmentation(random_image, k=4, seed=42)
        second = kmeans_segmentation(random_image, k=4, seed=42)

        assert first == second

    def test_injected_generator(self, random_image):
        """Test an injected generator matches the same seed"""
        seeded = kmeans_segmentation(random_image, k=2, seed=9)
        injected = kmeans_segmentation(random_image, k=2, rng=np.random.default_rng(9))

        assert seeded == injected

    def test_invalid_k(self, random_image):
        """Test k must be at least 1"""
        with pytest.raises(ParameterOutOfRangeError):
            kmeans_segmentation(random_image, k=0)


class TestRegionGrowing:
    """Test seeded region growing"""

    def test_region_painted_red(self, bimodal_image):
        """Test the similar half is painted and the rest copied"""
        result = region_growing(bimodal_image, 0, 0, 10)

        assert np.all(result.rgb[:, :8] == (255, 0, 0))
        assert np.all(result.rgb[:, 8:] == 220)

    def test_region_is_connected(self):
        """Test similar pixels that are not 4-connected stay out"""
        gray = np.array(
            [
                [50, 200, 50],
                [200, 200, 200],
                [50, 200, 50],
            ],
            dtype=np.float64,
        )
        result = region_growing(PixelBuffer.from_array(gray), 0, 0, 5)

        assert result.rgb[0, 0].tolist() == [255, 0, 0]
        assert result.rgb[2, 2].tolist() == [50, 50, 50]

    def test_seed_outside_image(self, gray_image):
        """Test seed coordinates must lie inside the image"""
        with pytest.raises(ParameterOutOfRangeError):
            region_growing(gray_image, 4, 0)
        with pytest.raises(ParameterOutOfRangeError):
            region_growing(gray_image, 0, -1)


class TestConnectedComponents:
    """Test component labelling"""

    def test_background_black_and_opaque(self, square_image):
        """Test background is black with alpha 255"""
        result = connected_components(square_image, seed=3)

        assert result.rgb[0, 0].tolist() == [0, 0, 0]
        assert np.all(result.alpha == 255)

    def test_component_single_color(self, square_image):
        """Test one square gets one color"""
        result = connected_components(square_image, seed=3)
        square = result.rgb[10:22, 10:22].reshape(-1, 3)

        assert len(np.unique(square, axis=0)) == 1

    def test_separate_components(self):
        """Test diagonal neighbours are separate under 4-connectivity"""
        gray = np.array([[255, 0], [0, 255]], dtype=np.float64)
        result = connected_components(PixelBuffer.from_array(gray), seed=5)

        assert not np.array_equal(result.rgb[0, 0], result.rgb[1, 1])

    def test_seed_is_reproducible(self, square_image):
        """Test colors depend only on the seed"""
        assert connected_components(square_image, seed=11) == connected_components(
            square_image, seed=11
        )


class TestWatershed:
    """Test gradient based watershed approximation"""

    def test_uniform_is_flat(self, gray_image):
        """Test no gradient on a solid image"""
        result = watershed_segmentation(gray_image)

        assert np.all(result.rgb == 0)
        assert np.all(result.alpha == 255)

    def test_edge_ridge(self, bimodal_image):
        """Test the ridge follows the edge"""
        result = watershed_segmentation(bimodal_image)

        assert result.rgb[4, 7, 0] == 255
        assert result.rgb[4, 0, 0] == 0
