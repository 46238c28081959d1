"""
Operation parameter schemas.

One strongly-typed record per buffer-to-buffer operation. Every record
carries a literal ``operation`` tag so the union below is closed and
discriminated: parsing a dict picks the record by its tag and validates the
remaining fields against their ranges and defaults.
"""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import Field, TypeAdapter, field_validator, model_validator

from core.constants import (
    ColorDefaults,
    CompressionDefaults,
    EnhancementDefaults,
    FeatureDefaults,
    FrequencyDefaults,
    PyramidDefaults,
    SegmentationDefaults,
    SpatialDefaults,
)
from core.enums import Channel, Interpolation, MorphologyOperation

from .base import BaseOperationParams


def _require_odd(name: str, value: int) -> int:
    if value % 2 == 0:
        raise ValueError(f"{name} must be odd, got {value}")
    return value


# === Operations without parameters ===


class SimpleOperationParams(BaseOperationParams):
    """Operations that take no parameters."""

    operation: Literal[
        "sobel_gradient",
        "emboss",
        "edge_enhancement",
        "spectrum_visualization",
        "grayscale",
        "rgb_to_hsv",
        "hsv_to_rgb",
        "rgb_to_xyz",
        "rgb_to_lab",
        "invert",
        "sepia",
        "otsu_threshold",
        "watershed_segmentation",
        "histogram_equalization",
    ]


# === Spatial ===


class ConvolveParams(BaseOperationParams):
    """Arbitrary 2D kernel convolution."""

    operation: Literal["convolve"] = "convolve"
    kernel: List[List[float]] = Field(description="Kernel rows; centre at floor(size / 2)")
    channel: Channel = Field(default=Channel.ALL, description="ALL (-1) or one of 0, 1, 2")

    @field_validator("kernel")
    @classmethod
    def validate_kernel(cls, v):
        """Kernel must be a non-empty rectangle."""
        if not v or not v[0]:
            raise ValueError("Kernel must not be empty")
        if any(len(row) != len(v[0]) for row in v):
            raise ValueError("Kernel rows must all have the same length")
        return v


class GaussianBlurParams(BaseOperationParams):
    operation: Literal["gaussian_blur"] = "gaussian_blur"
    sigma: float = Field(
        default=SpatialDefaults.GAUSSIAN_SIGMA, gt=0, le=50, description="Standard deviation"
    )


class BoxBlurParams(BaseOperationParams):
    operation: Literal["box_blur"] = "box_blur"
    size: int = Field(default=SpatialDefaults.BOX_SIZE, ge=1, le=99, description="Odd window size")

    @field_validator("size")
    @classmethod
    def validate_size(cls, v):
        return _require_odd("size", v)


class MedianFilterParams(BaseOperationParams):
    operation: Literal["median_filter"] = "median_filter"
    size: int = Field(default=SpatialDefaults.MEDIAN_SIZE, ge=1, le=31, description="Window size")


class BilateralFilterParams(BaseOperationParams):
    operation: Literal["bilateral_filter"] = "bilateral_filter"
    sigma_space: float = Field(
        default=SpatialDefaults.BILATERAL_SIGMA_SPACE,
        gt=0,
        le=25,
        description="Spatial standard deviation",
    )
    sigma_color: float = Field(
        default=SpatialDefaults.BILATERAL_SIGMA_COLOR,
        gt=0,
        description="Color distance standard deviation",
    )


class LaplacianOfGaussianParams(BaseOperationParams):
    operation: Literal["laplacian_of_gaussian"] = "laplacian_of_gaussian"
    sigma: float = Field(default=SpatialDefaults.LOG_SIGMA, gt=0, le=20)


class DifferenceOfGaussiansParams(BaseOperationParams):
    operation: Literal["difference_of_gaussians"] = "difference_of_gaussians"
    sigma1: float = Field(default=SpatialDefaults.DOG_SIGMA1, gt=0, le=50)
    sigma2: float = Field(default=SpatialDefaults.DOG_SIGMA2, gt=0, le=50)


class SharpenParams(BaseOperationParams):
    operation: Literal["sharpen"] = "sharpen"
    amount: float = Field(default=SpatialDefaults.SHARPEN_AMOUNT, ge=0, le=10)


# === Frequency ===


class CutoffFilterParams(BaseOperationParams):
    """Ideal low-pass and high-pass filters."""

    operation: Literal["low_pass_filter", "high_pass_filter"]
    cutoff: float = Field(default=FrequencyDefaults.CUTOFF, ge=0, description="Radius in bins")


class BandFilterParams(BaseOperationParams):
    """Ideal band-pass and band-stop filters."""

    operation: Literal["band_pass_filter", "band_stop_filter"]
    low_cutoff: float = Field(default=FrequencyDefaults.BAND_LOW, ge=0)
    high_cutoff: float = Field(default=FrequencyDefaults.BAND_HIGH, ge=0)

    @model_validator(mode="after")
    def validate_band(self):
        if self.low_cutoff > self.high_cutoff:
            raise ValueError(
                f"low_cutoff ({self.low_cutoff}) must not exceed high_cutoff ({self.high_cutoff})"
            )
        return self


class GaussianFrequencyFilterParams(BaseOperationParams):
    operation: Literal["gaussian_low_pass_filter", "gaussian_high_pass_filter"]
    sigma: float = Field(default=FrequencyDefaults.GAUSSIAN_SIGMA, gt=0)


class ButterworthFilterParams(BaseOperationParams):
    operation: Literal["butterworth_low_pass_filter", "butterworth_high_pass_filter"]
    cutoff: float = Field(default=FrequencyDefaults.CUTOFF, gt=0)
    order: int = Field(default=FrequencyDefaults.BUTTERWORTH_ORDER, ge=1, le=10)


# === Color ===


class BrightnessParams(BaseOperationParams):
    operation: Literal["adjust_brightness"] = "adjust_brightness"
    amount: float = Field(default=ColorDefaults.BRIGHTNESS, ge=-255, le=255)


class ContrastParams(BaseOperationParams):
    operation: Literal["adjust_contrast"] = "adjust_contrast"
    factor: float = Field(
        default=ColorDefaults.CONTRAST, ge=-100, le=100, description="Percent contrast change"
    )


class SaturationParams(BaseOperationParams):
    operation: Literal["adjust_saturation"] = "adjust_saturation"
    amount: float = Field(default=ColorDefaults.SATURATION, ge=0, le=5)


class HueParams(BaseOperationParams):
    operation: Literal["adjust_hue"] = "adjust_hue"
    amount: float = Field(default=ColorDefaults.HUE, ge=-360, le=360, description="Degrees")


# === Segmentation ===


class ThresholdParams(BaseOperationParams):
    operation: Literal["threshold_segmentation"] = "threshold_segmentation"
    threshold: float = Field(default=SegmentationDefaults.THRESHOLD, ge=0, le=255)


class AdaptiveThresholdParams(BaseOperationParams):
    operation: Literal["adaptive_threshold"] = "adaptive_threshold"
    block_size: int = Field(default=SegmentationDefaults.ADAPTIVE_BLOCK_SIZE, ge=1, le=255)
    c: float = Field(default=SegmentationDefaults.ADAPTIVE_C, ge=-255, le=255)

    @field_validator("block_size")
    @classmethod
    def validate_block_size(cls, v):
        return _require_odd("block_size", v)


class KMeansParams(BaseOperationParams):
    operation: Literal["kmeans_segmentation"] = "kmeans_segmentation"
    k: int = Field(default=SegmentationDefaults.KMEANS_CLUSTERS, ge=1, le=64)
    max_iterations: int = Field(default=SegmentationDefaults.KMEANS_ITERATIONS, ge=1, le=100)
    seed: Optional[int] = Field(default=None, description="Random seed (None uses settings)")


class RegionGrowingParams(BaseOperationParams):
    operation: Literal["region_growing"] = "region_growing"
    seed_x: int = Field(ge=0, description="Seed column")
    seed_y: int = Field(ge=0, description="Seed row")
    threshold: float = Field(default=SegmentationDefaults.REGION_THRESHOLD, ge=0)


class ConnectedComponentsParams(BaseOperationParams):
    operation: Literal["connected_components"] = "connected_components"
    seed: Optional[int] = Field(default=None, description="Random seed (None uses settings)")


# === Features ===


class CannyParams(BaseOperationParams):
    operation: Literal["canny_edge_detection"] = "canny_edge_detection"
    low_threshold: float = Field(default=FeatureDefaults.CANNY_LOW, ge=0)
    high_threshold: float = Field(default=FeatureDefaults.CANNY_HIGH, ge=0)
    sigma: float = Field(default=FeatureDefaults.CANNY_SIGMA, gt=0, le=20)

    @model_validator(mode="after")
    def validate_thresholds(self):
        if self.low_threshold > self.high_threshold:
            raise ValueError("low_threshold must not exceed high_threshold")
        return self


class HarrisParams(BaseOperationParams):
    operation: Literal["harris_corner_detection"] = "harris_corner_detection"
    threshold: float = Field(default=FeatureDefaults.HARRIS_THRESHOLD, ge=0, le=1)
    k: float = Field(default=FeatureDefaults.HARRIS_K, ge=0, le=0.25)


class HoughParams(BaseOperationParams):
    operation: Literal["hough_line_detection"] = "hough_line_detection"
    low_threshold: float = Field(default=FeatureDefaults.HOUGH_CANNY_LOW, ge=0)
    high_threshold: float = Field(default=FeatureDefaults.HOUGH_CANNY_HIGH, ge=0)
    vote_threshold: int = Field(default=FeatureDefaults.HOUGH_VOTE_THRESHOLD, ge=1)
    max_lines: int = Field(default=FeatureDefaults.HOUGH_MAX_LINES, ge=1, le=500)

    @model_validator(mode="after")
    def validate_thresholds(self):
        if self.low_threshold > self.high_threshold:
            raise ValueError("low_threshold must not exceed high_threshold")
        return self


# === Geometry ===


class ScaleParams(BaseOperationParams):
    operation: Literal["scale_image"] = "scale_image"
    scale: float = Field(default=PyramidDefaults.SCALE, gt=0, le=8)
    interpolation: Interpolation = Field(default=Interpolation.BILINEAR)


class RotateParams(BaseOperationParams):
    operation: Literal["rotate_image"] = "rotate_image"
    angle: float = Field(default=PyramidDefaults.ROTATION_DEGREES, ge=-360, le=360)


# === Enhancement ===


class WindowingParams(BaseOperationParams):
    operation: Literal["intensity_windowing"] = "intensity_windowing"
    center: float = Field(default=EnhancementDefaults.WINDOW_CENTER, ge=0, le=255)
    width: float = Field(default=EnhancementDefaults.WINDOW_WIDTH, gt=0, le=512)


class ClaheParams(BaseOperationParams):
    operation: Literal["clahe"] = "clahe"
    clip_limit: float = Field(default=EnhancementDefaults.CLAHE_CLIP_LIMIT, gt=0, le=40)
    tile_size: int = Field(default=EnhancementDefaults.CLAHE_TILE_SIZE, ge=1, le=512)


class UnsharpMaskParams(BaseOperationParams):
    operation: Literal["unsharp_mask"] = "unsharp_mask"
    amount: float = Field(default=EnhancementDefaults.UNSHARP_AMOUNT, ge=0, le=10)
    radius: float = Field(default=EnhancementDefaults.UNSHARP_RADIUS, gt=0, le=20)


class MorphologyParams(BaseOperationParams):
    operation: Literal["morphology"] = "morphology"
    morphology: MorphologyOperation = Field(
        default=MorphologyOperation.ERODE, description="erode, dilate, open or close"
    )
    kernel_size: int = Field(default=EnhancementDefaults.MORPHOLOGY_KERNEL, ge=1, le=31)


# === Compression ===


class JpegCompressionParams(BaseOperationParams):
    operation: Literal["jpeg_style_compression"] = "jpeg_style_compression"
    quality: int = Field(default=CompressionDefaults.QUALITY, ge=1, le=100)


class DownsampleParams(BaseOperationParams):
    operation: Literal["downsample_image"] = "downsample_image"
    factor: int = Field(default=CompressionDefaults.DOWNSAMPLE_FACTOR, ge=1, le=64)


OperationParams = Annotated[
    Union[
        SimpleOperationParams,
        ConvolveParams,
        GaussianBlurParams,
        BoxBlurParams,
        MedianFilterParams,
        BilateralFilterParams,
        LaplacianOfGaussianParams,
        DifferenceOfGaussiansParams,
        SharpenParams,
        CutoffFilterParams,
        BandFilterParams,
        GaussianFrequencyFilterParams,
        ButterworthFilterParams,
        BrightnessParams,
        ContrastParams,
        SaturationParams,
        HueParams,
        ThresholdParams,
        AdaptiveThresholdParams,
        KMeansParams,
        RegionGrowingParams,
        ConnectedComponentsParams,
        CannyParams,
        HarrisParams,
        HoughParams,
        ScaleParams,
        RotateParams,
        WindowingParams,
        ClaheParams,
        UnsharpMaskParams,
        MorphologyParams,
        JpegCompressionParams,
        DownsampleParams,
    ],
    Field(discriminator="operation"),
]

_operation_adapter = TypeAdapter(OperationParams)


def parse_operation(data: Dict[str, Any]) -> OperationParams:
    """
    Validate a parameter dict into its typed record.

    Args:
        data: Dict with an "operation" key plus the operation's fields

    Returns:
        The matching params instance

    Raises:
        pydantic.ValidationError: On unknown operations, unknown fields or
            out-of-range values
    """
    return _operation_adapter.validate_python(data)
