"""
Constants and default parameter values for the image processing core.
Centralizes all magic numbers used by the filters and transforms.
"""

import numpy as np


# Pixel buffer constants
class PixelConstants:
    """Constants related to the RGBA sample representation."""

    CHANNELS = 4
    COLOR_CHANNELS = 3
    MIN_VALUE = 0.0
    MAX_VALUE = 255.0
    OPAQUE = 255.0
    MID_GRAY = 128.0


# Color science constants
class ColorConstants:
    """Constants for color space conversions."""

    # ITU-R BT.601 luma weights
    LUMA_R = 0.299
    LUMA_G = 0.587
    LUMA_B = 0.114

    SEPIA_MATRIX = np.array(
        [
            [0.393, 0.769, 0.189],
            [0.349, 0.686, 0.168],
            [0.272, 0.534, 0.131],
        ]
    )

    # sRGB (D65) to XYZ
    RGB_TO_XYZ_MATRIX = np.array(
        [
            [0.4124, 0.3576, 0.1805],
            [0.2126, 0.7152, 0.0722],
            [0.0193, 0.1192, 0.9505],
        ]
    )
    SRGB_GAMMA_THRESHOLD = 0.04045

    # D65 reference white
    WHITE_X = 95.047
    WHITE_Y = 100.000
    WHITE_Z = 108.883

    LAB_EPSILON = 0.008856
    LAB_KAPPA = 7.787
    LAB_OFFSET = 16.0 / 116.0


# Spatial filter defaults
class SpatialDefaults:
    """Default parameters for spatial filters."""

    GAUSSIAN_SIGMA = 1.5
    BOX_SIZE = 3
    MEDIAN_SIZE = 3
    # Upper bound on window samples gathered at once by the median filter
    MEDIAN_CHUNK_ELEMENTS = 1 << 20
    BILATERAL_SIGMA_SPACE = 5.0
    BILATERAL_SIGMA_COLOR = 50.0
    LOG_SIGMA = 1.5
    DOG_SIGMA1 = 1.0
    DOG_SIGMA2 = 2.0
    SHARPEN_AMOUNT = 1.0

    SOBEL_X = ((-1, 0, 1), (-2, 0, 2), (-1, 0, 1))
    SOBEL_Y = ((-1, -2, -1), (0, 0, 0), (1, 2, 1))
    EMBOSS = ((-2, -1, 0), (-1, 1, 1), (0, 1, 2))
    EDGE_ENHANCE = ((0, -1, 0), (-1, 5, -1), (0, -1, 0))
    BINOMIAL_3X3 = ((1, 2, 1), (2, 4, 2), (1, 2, 1))


# Frequency filter defaults
class FrequencyDefaults:
    """Default parameters for frequency domain filters."""

    CUTOFF = 30.0
    BAND_LOW = 20.0
    BAND_HIGH = 80.0
    GAUSSIAN_SIGMA = 30.0
    BUTTERWORTH_ORDER = 2


# Color adjustment defaults
class ColorDefaults:
    """Default parameters for color adjustments."""

    BRIGHTNESS = 0.0
    CONTRAST = 0.0
    SATURATION = 1.0
    HUE = 0.0


# Segmentation defaults
class SegmentationDefaults:
    """Default parameters for segmentation algorithms."""

    THRESHOLD = 128.0
    ADAPTIVE_BLOCK_SIZE = 11
    ADAPTIVE_C = 2.0
    KMEANS_CLUSTERS = 3
    KMEANS_ITERATIONS = 10
    REGION_THRESHOLD = 20.0
    COMPONENT_FOREGROUND = 128.0
    HISTOGRAM_BINS = 256
    REGION_COLOR = (255.0, 0.0, 0.0)


# Feature detection defaults
class FeatureDefaults:
    """Default parameters for feature detectors."""

    CANNY_LOW = 50.0
    CANNY_HIGH = 100.0
    CANNY_SIGMA = 1.4
    HARRIS_THRESHOLD = 0.01
    HARRIS_K = 0.04
    HARRIS_WINDOW = 3
    HOUGH_CANNY_LOW = 50.0
    HOUGH_CANNY_HIGH = 150.0
    HOUGH_VOTE_THRESHOLD = 80
    HOUGH_MAX_LINES = 20
    HOUGH_RHO_RESOLUTION = 1.0
    HOUGH_THETA_RESOLUTION = np.pi / 180
    MARKER_COLOR = (255.0, 0.0, 0.0)


# Pyramid and geometry defaults
class PyramidDefaults:
    """Default parameters for pyramids and resampling."""

    LEVELS = 4
    LAPLACIAN_OFFSET = PixelConstants.MID_GRAY
    SCALE = 1.0
    ROTATION_DEGREES = 0.0


# Enhancement defaults
class EnhancementDefaults:
    """Default parameters for contrast enhancement."""

    WINDOW_CENTER = 128.0
    WINDOW_WIDTH = 256.0
    CLAHE_CLIP_LIMIT = 2.0
    CLAHE_TILE_SIZE = 8
    UNSHARP_AMOUNT = 1.5
    UNSHARP_RADIUS = 1.0
    MORPHOLOGY_KERNEL = 3


# Compression defaults
class CompressionDefaults:
    """Default parameters for the compression simulation."""

    BLOCK_SIZE = 8
    QUALITY = 50
    DOWNSAMPLE_FACTOR = 2
    LEVEL_SHIFT = 128.0


# Quality metric constants
class MetricConstants:
    """Constants for image quality metrics."""

    MAX_PIXEL_VALUE = 255.0
    SSIM_K1 = 0.01
    SSIM_K2 = 0.03
