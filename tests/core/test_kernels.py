"""
Tests for kernel construction
"""

import numpy as np
import pytest

from core.exceptions import InvalidInputError, ParameterOutOfRangeError
from core.kernels import (
    BINOMIAL_3X3,
    as_kernel,
    box_kernel_1d,
    gaussian_kernel_1d,
    gaussian_kernel_2d,
    gaussian_kernel_size,
    laplacian_of_gaussian_kernel,
    sharpen_kernel,
)


class TestAsKernel:
    """Test kernel validation"""

    def test_valid_kernel_is_read_only(self):
        """Test a valid kernel is frozen"""
        kernel = as_kernel([[0, 1, 0], [1, 1, 1], [0, 1, 0]])

        assert kernel.shape == (3, 3)
        with pytest.raises(ValueError):
            kernel[0, 0] = 5

    @pytest.mark.parametrize(
        "weights",
        [
            [],
            [[1, 2], [3]],
            np.zeros((2, 2, 2)),
            [[1.0, np.inf]],
        ],
    )
    def test_malformed_kernels(self, weights):
        """Test empty, ragged, 3D and non-finite kernels are rejected"""
        with pytest.raises(InvalidInputError):
            as_kernel(weights)


class TestGaussianKernels:
    """Test Gaussian kernel generators"""

    @pytest.mark.parametrize("sigma,size", [(0.5, 3), (1.0, 7), (1.5, 9), (2.0, 13)])
    def test_kernel_size(self, sigma, size):
        """Test size is ceil(6 * sigma) | 1"""
        assert gaussian_kernel_size(sigma) == size

    def test_1d_normalized_and_symmetric(self):
        """Test 1D kernel sums to one and is symmetric"""
        kernel = gaussian_kernel_1d(1.5)

        assert kernel.sum() == pytest.approx(1.0)
        assert np.allclose(kernel, kernel[::-1])
        assert np.argmax(kernel) == len(kernel) // 2

    def test_2d_is_outer_product(self):
        """Test 2D kernel equals the outer product of the 1D kernel"""
        kernel_1d = gaussian_kernel_1d(1.0)
        kernel_2d = gaussian_kernel_2d(1.0)

        assert kernel_2d.sum() == pytest.approx(1.0)
        assert np.allclose(kernel_2d, np.outer(kernel_1d, kernel_1d))

    @pytest.mark.parametrize("sigma", [0, -1.0])
    def test_non_positive_sigma(self, sigma):
        """Test sigma <= 0 is out of range"""
        with pytest.raises(ParameterOutOfRangeError):
            gaussian_kernel_1d(sigma)
        with pytest.raises(ParameterOutOfRangeError):
            gaussian_kernel_2d(sigma)


class TestOtherKernels:
    """Test fixed and parametric kernels"""

    def test_log_normalized_by_absolute_sum(self):
        """Test LoG weights have unit absolute sum and a negative centre"""
        kernel = laplacian_of_gaussian_kernel(1.0)

        assert np.abs(kernel).sum() == pytest.approx(1.0)
        assert kernel[kernel.shape[0] // 2, kernel.shape[1] // 2] < 0

    def test_box_kernel(self):
        """Test uniform weights and odd size requirement"""
        assert np.allclose(box_kernel_1d(5), 0.2)
        with pytest.raises(ParameterOutOfRangeError):
            box_kernel_1d(4)

    def test_sharpen_kernel(self):
        """Test sharpen weights sum to one"""
        kernel = sharpen_kernel(2.0)

        assert kernel.sum() == pytest.approx(1.0)
        assert kernel[1, 1] == 9.0

    def test_binomial(self):
        """Test pyramid kernel sums to one"""
        assert BINOMIAL_3X3.sum() == pytest.approx(1.0)
        assert BINOMIAL_3X3[1, 1] == pytest.approx(0.25)
