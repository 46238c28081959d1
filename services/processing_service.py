"""
Processing Service - Single call boundary for image operations.

This service resolves typed (or dict) operation parameters to the matching
processing function, applies the configured image size guard, and adds
timing, pipelines, quality comparison and pyramid building on top.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from pydantic import ValidationError

from config import Settings, get_settings
from core.convolution import convolve2d
from core.enums import PyramidKind
from core.exceptions import InvalidInputError, ParameterOutOfRangeError
from core.pixel_buffer import PixelBuffer
from core.utils.decorators import log_duration, timer
from core.utils.enum_converter import parse_enum
from processing import (
    color,
    compression,
    enhancement,
    features,
    frequency,
    metrics,
    pyramid,
    segmentation,
    spatial,
)
from schemas import BaseOperationParams, parse_operation

logger = logging.getLogger(__name__)

ParamsLike = Union[BaseOperationParams, Dict[str, Any]]
Operation = Callable[..., PixelBuffer]

# Operations whose schema fields map one-to-one onto function keyword arguments
OPERATIONS: Dict[str, Operation] = {
    # Spatial
    "gaussian_blur": spatial.gaussian_blur,
    "box_blur": spatial.box_blur,
    "median_filter": spatial.median_filter,
    "bilateral_filter": spatial.bilateral_filter,
    "sobel_gradient": spatial.sobel_gradient,
    "laplacian_of_gaussian": spatial.laplacian_of_gaussian,
    "difference_of_gaussians": spatial.difference_of_gaussians,
    "sharpen": spatial.sharpen,
    "emboss": spatial.emboss,
    "edge_enhancement": spatial.edge_enhancement,
    # Frequency
    "low_pass_filter": frequency.low_pass_filter,
    "high_pass_filter": frequency.high_pass_filter,
    "band_pass_filter": frequency.band_pass_filter,
    "band_stop_filter": frequency.band_stop_filter,
    "gaussian_low_pass_filter": frequency.gaussian_low_pass_filter,
    "gaussian_high_pass_filter": frequency.gaussian_high_pass_filter,
    "butterworth_low_pass_filter": frequency.butterworth_low_pass_filter,
    "butterworth_high_pass_filter": frequency.butterworth_high_pass_filter,
    "spectrum_visualization": frequency.spectrum_visualization,
    # Color
    "grayscale": color.grayscale,
    "rgb_to_hsv": color.rgb_to_hsv,
    "hsv_to_rgb": color.hsv_to_rgb,
    "rgb_to_xyz": color.rgb_to_xyz,
    "rgb_to_lab": color.rgb_to_lab,
    "adjust_brightness": color.adjust_brightness,
    "adjust_contrast": color.adjust_contrast,
    "adjust_saturation": color.adjust_saturation,
    "adjust_hue": color.adjust_hue,
    "invert": color.invert,
    "sepia": color.sepia,
    # Segmentation
    "threshold_segmentation": segmentation.threshold_segmentation,
    "otsu_threshold": segmentation.otsu_threshold,
    "adaptive_threshold": segmentation.adaptive_threshold,
    "kmeans_segmentation": segmentation.kmeans_segmentation,
    "region_growing": segmentation.region_growing,
    "connected_components": segmentation.connected_components,
    "watershed_segmentation": segmentation.watershed_segmentation,
    # Features
    "canny_edge_detection": features.canny_edge_detection,
    "harris_corner_detection": features.harris_corner_detection,
    "hough_line_detection": features.hough_line_detection,
    # Geometry
    "scale_image": pyramid.scale_image,
    "rotate_image": pyramid.rotate_image,
    # Enhancement
    "intensity_windowing": enhancement.intensity_windowing,
    "histogram_equalization": enhancement.histogram_equalization,
    "clahe": enhancement.clahe,
    "unsharp_mask": enhancement.unsharp_mask,
    # Compression
    "jpeg_style_compression": compression.jpeg_style_compression,
    "downsample_image": compression.downsample_image,
}

SEEDED_OPERATIONS = ("kmeans_segmentation", "connected_components")


@dataclass
class ProcessingResult:
    """Output of a timed operation."""

    operation: str
    buffer: PixelBuffer
    processing_time_ms: float


@dataclass
class QualityReport:
    """Quality of a processed image relative to its original."""

    mse: float
    psnr: float
    ssim: float
    original_entropy: float
    processed_entropy: float

    def to_dict(self) -> Dict[str, float]:
        return {
            "mse": self.mse,
            "psnr": self.psnr,
            "ssim": self.ssim,
            "original_entropy": self.original_entropy,
            "processed_entropy": self.processed_entropy,
        }


class ProcessingService:
    """
    Service for image processing operations.

    Every operation is dispatched from its validated parameter record, so
    callers never touch the processing modules directly.
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize processing service.

        Args:
            settings: Application settings (defaults to get_settings())
        """
        self.settings = settings or get_settings()
        logger.debug(
            f"Processing service initialized with max image pixels "
            f"{self.settings.processing.max_image_pixels}"
        )

    @staticmethod
    def parse_params(params: ParamsLike) -> BaseOperationParams:
        """
        Resolve params to a typed record.

        Args:
            params: Parameter record or dict with an "operation" key

        Returns:
            Validated parameter record

        Raises:
            ParameterOutOfRangeError: If the dict fails validation
        """
        if isinstance(params, BaseOperationParams):
            return params

        try:
            return parse_operation(params)
        except ValidationError as e:
            error = e.errors()[0]
            operation = params.get("operation") if isinstance(params, dict) else None

            loc = tuple(error.get("loc", ()))
            if loc and loc[0] == operation:
                loc = loc[1:]

            if loc:
                name = ".".join(str(part) for part in loc)
                value = error.get("input")
            else:
                name, value = "operation", operation

            logger.warning(f"Rejected parameters for {operation!r}: {error['msg']}")
            raise ParameterOutOfRangeError(name, value, error["msg"]) from e

    def _check_size(self, buffer: PixelBuffer) -> None:
        limit = self.settings.processing.max_image_pixels
        if buffer.pixel_count > limit:
            logger.warning(
                f"Rejected {buffer.width}x{buffer.height} image: exceeds {limit} pixels"
            )
            raise InvalidInputError(
                f"Image of {buffer.pixel_count} pixels exceeds the limit of {limit}"
            )

    def _resolve_kwargs(self, params: BaseOperationParams) -> Dict[str, Any]:
        kwargs = params.to_dict()
        if params.operation in SEEDED_OPERATIONS and kwargs.get("seed") is None:
            kwargs["seed"] = self.settings.processing.random_seed
        return kwargs

    def apply(self, buffer: PixelBuffer, params: ParamsLike) -> PixelBuffer:
        """
        Apply one operation.

        Args:
            buffer: Input image
            params: Parameter record or dict with an "operation" key

        Returns:
            New PixelBuffer

        Raises:
            InvalidInputError: If the image exceeds the configured size
            ParameterOutOfRangeError: If parameters are invalid
        """
        params = self.parse_params(params)
        self._check_size(buffer)

        kwargs = self._resolve_kwargs(params)
        operation = params.operation

        # Schema field names that differ from the function signature
        if operation == "convolve":
            return convolve2d(buffer, **kwargs)
        if operation == "morphology":
            return enhancement.morphology(
                buffer, operation=kwargs["morphology"], kernel_size=kwargs["kernel_size"]
            )

        return OPERATIONS[operation](buffer, **kwargs)

    def run(self, buffer: PixelBuffer, params: ParamsLike) -> ProcessingResult:
        """
        Apply one operation and measure it.

        Returns:
            ProcessingResult with the operation name, output and time in ms
        """
        params = self.parse_params(params)

        with timer() as t:
            output = self.apply(buffer, params)

        # Read processing time AFTER with block (timer updates in finally)
        processing_time_ms = t["ms"]
        logger.debug(f"{params.operation} took {processing_time_ms:.2f} ms")

        return ProcessingResult(
            operation=params.operation, buffer=output, processing_time_ms=processing_time_ms
        )

    @log_duration
    def apply_pipeline(self, buffer: PixelBuffer, steps: Sequence[ParamsLike]) -> PixelBuffer:
        """
        Chain operations, feeding each output into the next step.

        All steps are validated before the first one runs.

        Args:
            buffer: Input image
            steps: Parameter records or dicts, applied in order

        Returns:
            Output of the last step (the input itself for an empty pipeline)
        """
        parsed = [self.parse_params(step) for step in steps]

        result = buffer
        for params in parsed:
            result = self.apply(result, params)
        return result

    def compare(self, original: PixelBuffer, processed: PixelBuffer) -> QualityReport:
        """
        Compute quality metrics of a processed image against its original.

        Raises:
            DimensionMismatchError: If the images differ in size
        """
        return QualityReport(
            mse=metrics.mse(original, processed),
            psnr=metrics.psnr(original, processed),
            ssim=metrics.ssim(original, processed),
            original_entropy=metrics.entropy(original),
            processed_entropy=metrics.entropy(processed),
        )

    def build_pyramid(
        self,
        buffer: PixelBuffer,
        kind: Union[PyramidKind, str] = PyramidKind.GAUSSIAN,
        levels: Optional[int] = None,
    ) -> List[PixelBuffer]:
        """
        Build a Gaussian or Laplacian pyramid.

        Args:
            buffer: Input image (level 0)
            kind: gaussian or laplacian
            levels: Number of levels (module default when None)

        Returns:
            Pyramid levels, finest first
        """
        self._check_size(buffer)
        pyramid_kind = parse_enum(kind, PyramidKind, name="kind")

        builder = (
            pyramid.gaussian_pyramid
            if pyramid_kind == PyramidKind.GAUSSIAN
            else pyramid.laplacian_pyramid
        )
        if levels is None:
            return builder(buffer)
        return builder(buffer, levels=levels)
