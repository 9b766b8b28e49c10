"""Common types, configuration and exceptions for celbase."""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Sequence, Tuple, Union

import numpy as np

# Type aliases
ImageArray = np.ndarray
Mask = np.ndarray
Color = Tuple[int, int, int]
ColorSpec = Union[Tuple[int, int, int], Tuple[int, int, int, int]]
Coordinate = Tuple[int, int]  # (row, col)

PURE_WHITE: Color = (255, 255, 255)


class FilterKind(Enum):
    """Tags for the closed set of filters a pipeline can run."""
    CELL_BLUR = auto()
    LINE_REMOVER = auto()
    LINE_EXTRACTOR = auto()
    LINEAR = auto()
    SOBEL_ABS = auto()
    ALPHA_COMPOSITE = auto()


@dataclass(frozen=True)
class BoundingBox:
    """Inclusive pixel rectangle (min_x, min_y, max_x, max_y).

    An empty mask yields an inverted box (min > max) so that
    iteration over [min..max] does nothing.
    """
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @classmethod
    def full(cls, rows: int, cols: int) -> "BoundingBox":
        return cls(0, 0, cols - 1, rows - 1)

    @classmethod
    def empty(cls, rows: int, cols: int) -> "BoundingBox":
        return cls(cols, rows, -1, -1)

    @property
    def is_empty(self) -> bool:
        return self.min_x > self.max_x or self.min_y > self.max_y

    @property
    def width(self) -> int:
        return max(0, self.max_x - self.min_x + 1)

    @property
    def height(self) -> int:
        return max(0, self.max_y - self.min_y + 1)

    def slices(self) -> Tuple[slice, slice]:
        """(row, col) slices covering the box, for numpy indexing."""
        return slice(self.min_y, self.max_y + 1), slice(self.min_x, self.max_x + 1)


@dataclass
class InpaintResult:
    """Outcome of a LineRemover run."""
    image: ImageArray
    rounds: int
    unresolved: List[Coordinate] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return not self.unresolved


# Colors are listed in the channel order of the arrays they will be
# matched against (BGR for OpenCV-decoded frames).
DEFAULT_COLOR_CLASSES: Tuple[Tuple[Color, ...], ...] = (
    # clothes
    ((111, 105, 161), (144, 160, 130), (163, 168, 165), (150, 155, 156)),
    # hair, light
    ((41, 38, 40), (97, 57, 70)),
    # hair, dark
    ((2, 2, 1), (44, 17, 10)),
    # eyes
    ((28, 9, 11), (112, 72, 87)),
)


@dataclass
class CelShadeConfig:
    """Configuration for the layered cel-shading pipeline."""

    # Selective blur
    sigma: float = 20.0
    window_size: int = 21
    color_classes: Sequence[Sequence[ColorSpec]] = DEFAULT_COLOR_CLASSES

    # Line removal
    line_color: ColorSpec = (4, 2, 10)
    excluded_colors: Sequence[ColorSpec] = (PURE_WHITE,)
    max_rounds: int = 100
    propagate_within_round: bool = False

    # Compositing
    blend_alpha: float = 0.7  # blurred vs. blurred-and-cleaned
    line_alpha: float = 0.3   # ink layer on top

    def __post_init__(self):
        """Validate value ranges."""
        if self.sigma <= 0:
            raise FilterConfigError(f"sigma must be > 0, got {self.sigma}")
        if self.window_size < 1 or self.window_size % 2 == 0:
            raise FilterConfigError(
                f"window_size must be an odd integer >= 1, got {self.window_size}"
            )
        if not self.color_classes:
            raise FilterConfigError("color_classes must not be empty")
        if self.max_rounds < 0:
            raise FilterConfigError(f"max_rounds must be >= 0, got {self.max_rounds}")
        for name in ("blend_alpha", "line_alpha"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                import warnings

                warnings.warn(
                    f"{name}={value} is outside [0, 1] and will be clamped when compositing."
                )


class CelBaseError(Exception):
    """Base exception for celbase errors."""

    pass


class FilterConfigError(CelBaseError, ValueError):
    """Exception raised for invalid filter or pipeline configuration."""

    pass


class ImageFormatError(CelBaseError, ValueError):
    """Exception raised when an image array has an unusable layout."""

    pass


class ShapeMismatchError(CelBaseError, ValueError):
    """Exception raised when images that must align differ in shape."""

    pass


def validate_image(image: ImageArray, name: str = "image") -> ImageArray:
    """Check that ``image`` is a (rows, cols, channels>=3) uint8 array.

    Raises:
        ImageFormatError: If the layout or dtype is not usable
    """
    if not isinstance(image, np.ndarray):
        raise ImageFormatError(f"{name} must be a numpy array, got {type(image).__name__}")
    if image.ndim != 3 or image.shape[2] < 3:
        raise ImageFormatError(f"{name} must be HxWxC with C >= 3, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ImageFormatError(f"{name} must be uint8, got {image.dtype}")
    return image


def to_uint8(image: np.ndarray) -> ImageArray:
    """Round and saturate a float image to uint8."""
    return np.clip(np.rint(image), 0, 255).astype(np.uint8)
