"""Color class membership for class-masked filtering."""

from typing import Iterable, Sequence

import numpy as np

from .types import ColorSpec, FilterConfigError, ImageArray, Mask, PURE_WHITE


def pack_colors(colors: np.ndarray) -> np.ndarray:
    """Pack the first three channels into one integer per pixel.

    Args:
        colors: Array (..., C) with C >= 3 and values 0-255

    Returns:
        int32 array (...) with c0 + c1*256 + c2*65536
    """
    colors = np.asarray(colors)
    c = colors[..., :3].astype(np.int32)
    return c[..., 0] + (c[..., 1] << 8) + (c[..., 2] << 16)


class ColorClass:
    """Set of representative colors defining one semantic region.

    Representatives given as 3-tuples match exactly. Representatives given
    as 4-tuples carry a per-channel tolerance in the last element.
    """

    def __init__(self, colors: Iterable[ColorSpec], name: str = ""):
        colors = [tuple(int(v) for v in c) for c in colors]
        if not colors:
            raise FilterConfigError("A color class needs at least one representative color")

        exact = []
        tolerant = []
        for color in colors:
            if len(color) not in (3, 4):
                raise FilterConfigError(f"Color spec must have 3 or 4 values, got {color}")
            if any(v < 0 or v > 255 for v in color[:3]):
                raise FilterConfigError(f"Color channels must be in 0-255, got {color}")
            if len(color) == 4:
                if color[3] < 0:
                    raise FilterConfigError(f"Tolerance must be >= 0, got {color}")
                if color[3] == 0:
                    exact.append(color[:3])
                else:
                    tolerant.append(color)
            else:
                exact.append(color)

        self.name = name
        self.colors = colors
        self._exact_keys = np.unique(pack_colors(np.array(exact, dtype=np.int32).reshape(-1, 3)))
        self._tolerant = np.array(tolerant, dtype=np.int32).reshape(-1, 4)

    def __len__(self) -> int:
        return len(self.colors)

    def __repr__(self) -> str:
        label = f"{self.name!r}, " if self.name else ""
        return f"ColorClass({label}{self.colors})"

    @property
    def contains_white(self) -> bool:
        """Whether the pure white sentinel is a member of this class."""
        return self.contains(PURE_WHITE)

    def contains(self, pixel: Sequence[int]) -> bool:
        """Test a single pixel for membership."""
        return bool(self.mask(np.asarray(pixel).reshape(1, 1, -1))[0, 0])

    def mask(self, image: ImageArray) -> Mask:
        """Boolean (H, W) mask of member pixels.

        Args:
            image: Image array (H, W, C), C >= 3

        Returns:
            Mask with True where the pixel belongs to the class
        """
        pixels = image[..., :3].astype(np.int32)
        mask = np.isin(pack_colors(pixels), self._exact_keys)
        if image.dtype != np.uint8:
            # Packed keys only identify colors whose channels fit in a byte
            mask &= np.all((pixels >= 0) & (pixels <= 255), axis=-1)

        if len(self._tolerant):
            for rep in self._tolerant:
                diff = np.abs(pixels - rep[:3])
                mask |= np.all(diff <= rep[3], axis=-1)

        return mask


def as_color_class(colors) -> ColorClass:
    """Accept a ColorClass or a plain sequence of color specs."""
    if isinstance(colors, ColorClass):
        return colors
    return ColorClass(colors)


def as_color_classes(classes) -> list:
    """Normalize a class list, rejecting empty input."""
    classes = [as_color_class(c) for c in classes]
    if not classes:
        raise FilterConfigError("At least one color class is required")
    return classes
