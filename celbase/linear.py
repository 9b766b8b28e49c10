"""Plain 2-D linear convolution filters with edge clamping."""

import logging

import numpy as np
from scipy import ndimage

from .types import FilterConfigError, FilterKind, ImageArray, to_uint8, validate_image

logger = logging.getLogger(__name__)

SOBEL_X = np.array([[1, 0, -1],
                    [2, 0, -2],
                    [1, 0, -1]], dtype=np.float64)

SOBEL_Y = np.array([[1, 2, 1],
                    [0, 0, 0],
                    [-1, -2, -1]], dtype=np.float64)


def correlate_channels(image: np.ndarray, kernel: np.ndarray) -> np.ndarray:
    """Correlate every channel with a 2-D kernel, clamping at the edges.

    The kernel is anchored at (rows // 2, cols // 2), matching
    ``scipy.ndimage`` with origin 0.

    Returns:
        float64 array of the image's shape
    """
    return ndimage.correlate(
        image.astype(np.float64),
        kernel[:, :, None],
        mode="nearest",
    )


class LinearFilter:
    """Full-image 2-D correlation with a fixed kernel."""

    kind = FilterKind.LINEAR

    def __init__(self, kernel):
        kernel = np.asarray(kernel, dtype=np.float64)
        if kernel.ndim != 2 or kernel.size == 0:
            raise FilterConfigError(f"kernel must be a non-empty 2-D array, got shape {kernel.shape}")
        self.kernel = kernel

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kernel_shape={self.kernel.shape})"

    def apply(self, image: ImageArray) -> ImageArray:
        validate_image(image)
        return to_uint8(correlate_channels(image, self.kernel))


class AveragingBlur(LinearFilter):
    """Box filter of the given width and height."""

    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise FilterConfigError(f"kernel dimensions must be >= 1, got {width}x{height}")
        super().__init__(np.full((height, width), 1.0 / (width * height)))


class GaussianBlur(LinearFilter):
    """Square, normalized 2-D Gaussian."""

    def __init__(self, sigma: float, size: int):
        if sigma <= 0:
            raise FilterConfigError(f"sigma must be > 0, got {sigma}")
        if size < 1:
            raise FilterConfigError(f"kernel size must be >= 1, got {size}")
        offsets = size // 2 - np.arange(size)
        dist2 = offsets[:, None] ** 2 + offsets[None, :] ** 2
        kernel = np.exp(-dist2 / (2.0 * sigma * sigma))
        super().__init__(kernel / kernel.sum())
        self.sigma = sigma


class SobelX(LinearFilter):
    def __init__(self):
        super().__init__(SOBEL_X)


class SobelY(LinearFilter):
    def __init__(self):
        super().__init__(SOBEL_Y)


class SobelAbsXY:
    """Per-channel max(|Gx|, |Gy|) edge magnitude.

    Only interior pixels are computed; the one-pixel border is black.
    """

    kind = FilterKind.SOBEL_ABS

    def __repr__(self) -> str:
        return "SobelAbsXY()"

    def apply(self, image: ImageArray) -> ImageArray:
        validate_image(image)
        gx = correlate_channels(image, SOBEL_X)
        gy = correlate_channels(image, SOBEL_Y)
        edges = np.maximum(np.abs(gx), np.abs(gy))

        out = np.zeros_like(image)
        if image.shape[0] > 2 and image.shape[1] > 2:
            out[1:-1, 1:-1] = to_uint8(edges[1:-1, 1:-1])
        else:
            logger.debug(f"Image {image.shape[:2]} has no interior, edge map is empty")
        return out
