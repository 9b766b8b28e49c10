"""celbase: selective blur, keyed line removal and layer compositing.

Pixel-processing building blocks for cel-shaded image post-processing.
Images are numpy arrays of shape (H, W, C) with uint8 channels.
"""

from celbase.blur import CellBlur, gaussian_kernel_1d
from celbase.classify import ColorClass
from celbase.composite import AlphaComposite, composite_alpha, composite_average
from celbase.inpaint import LineExtractor, LineRemover
from celbase.linear import AveragingBlur, GaussianBlur, LinearFilter, SobelAbsXY, SobelX, SobelY
from celbase.pipeline import CelShadePipeline, apply_filter, apply_filters
from celbase.types import (
    BoundingBox,
    CelBaseError,
    CelShadeConfig,
    FilterConfigError,
    FilterKind,
    ImageFormatError,
    InpaintResult,
    ShapeMismatchError,
)

__version__ = "0.1.0"
__all__ = [
    "CellBlur",
    "gaussian_kernel_1d",
    "ColorClass",
    "AlphaComposite",
    "composite_alpha",
    "composite_average",
    "LineExtractor",
    "LineRemover",
    "AveragingBlur",
    "GaussianBlur",
    "LinearFilter",
    "SobelAbsXY",
    "SobelX",
    "SobelY",
    "CelShadePipeline",
    "apply_filter",
    "apply_filters",
    "BoundingBox",
    "CelBaseError",
    "CelShadeConfig",
    "FilterConfigError",
    "FilterKind",
    "ImageFormatError",
    "InpaintResult",
    "ShapeMismatchError",
]
