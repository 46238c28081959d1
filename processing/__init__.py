"""
Image processing libraries.

Each module is a collection of pure functions from PixelBuffer (plus
parameters) to a new PixelBuffer:
- spatial: Convolution based filters and smoothing
- frequency: FFT based low/high/band filters
- color: Color space conversions and adjustments
- segmentation: Thresholding, clustering and region labelling
- features: Canny, Harris and Hough detectors
- pyramid: Gaussian/Laplacian pyramids, scaling and rotation
- metrics: Quality metrics and histograms
- enhancement: Windowing, equalization, unsharp masking and morphology
- compression: JPEG-style DCT simulation and downsampling
"""

from . import (
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

__all__ = [
    "color",
    "compression",
    "enhancement",
    "features",
    "frequency",
    "metrics",
    "pyramid",
    "segmentation",
    "spatial",
]
