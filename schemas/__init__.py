"""
Pydantic schemas for operation parameters.
"""

from .base import BaseOperationParams
from .operations import (
    AdaptiveThresholdParams,
    BandFilterParams,
    BilateralFilterParams,
    BoxBlurParams,
    BrightnessParams,
    ButterworthFilterParams,
    CannyParams,
    ClaheParams,
    ConnectedComponentsParams,
    ContrastParams,
    ConvolveParams,
    CutoffFilterParams,
    DifferenceOfGaussiansParams,
    DownsampleParams,
    GaussianBlurParams,
    GaussianFrequencyFilterParams,
    HarrisParams,
    HoughParams,
    HueParams,
    JpegCompressionParams,
    KMeansParams,
    LaplacianOfGaussianParams,
    MedianFilterParams,
    MorphologyParams,
    OperationParams,
    RegionGrowingParams,
    RotateParams,
    SaturationParams,
    ScaleParams,
    SharpenParams,
    SimpleOperationParams,
    ThresholdParams,
    UnsharpMaskParams,
    WindowingParams,
    parse_operation,
)

__all__ = [
    "BaseOperationParams",
    "OperationParams",
    "parse_operation",
    # Simple
    "SimpleOperationParams",
    # Spatial
    "ConvolveParams",
    "GaussianBlurParams",
    "BoxBlurParams",
    "MedianFilterParams",
    "BilateralFilterParams",
    "LaplacianOfGaussianParams",
    "DifferenceOfGaussiansParams",
    "SharpenParams",
    # Frequency
    "CutoffFilterParams",
    "BandFilterParams",
    "GaussianFrequencyFilterParams",
    "ButterworthFilterParams",
    # Color
    "BrightnessParams",
    "ContrastParams",
    "SaturationParams",
    "HueParams",
    # Segmentation
    "ThresholdParams",
    "AdaptiveThresholdParams",
    "KMeansParams",
    "RegionGrowingParams",
    "ConnectedComponentsParams",
    # Features
    "CannyParams",
    "HarrisParams",
    "HoughParams",
    # Geometry
    "ScaleParams",
    "RotateParams",
    # Enhancement
    "WindowingParams",
    "ClaheParams",
    "UnsharpMaskParams",
    "MorphologyParams",
    # Compression
    "JpegCompressionParams",
    "DownsampleParams",
]
