"""Selective (class-masked) separable Gaussian blur."""

import logging
from typing import Sequence

import numpy as np

from .bbox import mask_with_bbox
from .classify import as_color_classes
from .types import (
    BoundingBox,
    FilterConfigError,
    FilterKind,
    ImageArray,
    Mask,
    to_uint8,
    validate_image,
)

logger = logging.getLogger(__name__)


def gaussian_kernel_1d(sigma: float, size: int) -> np.ndarray:
    """Normalized 1-D Gaussian weights.

    The center sits at ``size // 2``, so even sizes lean one way.

    Args:
        sigma: Standard deviation, must be > 0
        size: Number of taps, must be >= 1

    Returns:
        float64 array of ``size`` weights summing to 1
    """
    if sigma <= 0:
        raise FilterConfigError(f"sigma must be > 0, got {sigma}")
    if size < 1:
        raise FilterConfigError(f"kernel size must be >= 1, got {size}")

    offsets = size // 2 - np.arange(size)
    weights = np.exp(-(offsets * offsets) / (2.0 * sigma * sigma))
    return weights / weights.sum()


class CellBlur:
    """Blur each color class using only same-class neighbors.

    Every class is processed in order, each pass starting from the previous
    pass's output. Membership is decided on the input image, so a pixel
    blurred by an earlier class is not picked up by a later one.
    """

    kind = FilterKind.CELL_BLUR

    def __init__(self, sigma: float, size: int, classes: Sequence):
        if size < 1 or size % 2 == 0:
            raise FilterConfigError(f"window size must be an odd integer >= 1, got {size}")
        self.kernel = gaussian_kernel_1d(sigma, size)
        self.sigma = sigma
        self.classes = as_color_classes(classes)

    def __repr__(self) -> str:
        return f"CellBlur(sigma={self.sigma}, size={len(self.kernel)}, classes={len(self.classes)})"

    def apply(self, image: ImageArray) -> ImageArray:
        """Blur every class region of ``image``.

        Args:
            image: Image array (H, W, C) uint8

        Returns:
            New uint8 image of the same shape
        """
        validate_image(image)
        work = image.astype(np.float64)

        for index, color_class in enumerate(self.classes):
            mask, bbox = mask_with_bbox(image, color_class)
            if bbox.is_empty:
                logger.debug(f"Class {index}: no member pixels, skipped")
                continue
            logger.debug(
                f"Class {index}: {int(mask.sum())} pixels in "
                f"{bbox.width}x{bbox.height} box at ({bbox.min_x}, {bbox.min_y})"
            )
            work = self._blur_class(work, mask, bbox)

        logger.info(f"CellBlur applied {len(self.classes)} classes to {image.shape[1]}x{image.shape[0]} image")
        return to_uint8(work)

    def _blur_class(self, image: np.ndarray, mask: Mask, bbox: BoundingBox) -> np.ndarray:
        """Two-pass masked convolution of one class, limited to ``bbox``."""
        rows, cols = mask.shape
        center = len(self.kernel) // 2
        row_sl, col_sl = bbox.slices()
        box_rows = np.arange(bbox.min_y, bbox.max_y + 1)
        box_cols = np.arange(bbox.min_x, bbox.max_x + 1)
        shape = (len(box_rows), len(box_cols))

        # Horizontal pass: weighted sums and included weight per box pixel
        band = image[row_sl]
        band_mask = mask[row_sl]
        h_value = np.zeros(shape + (image.shape[2],))
        h_weight = np.zeros(shape)
        for k, weight in enumerate(self.kernel):
            sample_cols = np.clip(box_cols + k - center, 0, cols - 1)
            tap = band_mask[:, sample_cols]
            h_value += np.where(tap[..., None], band[:, sample_cols] * weight, 0.0)
            h_weight += tap * weight

        # Vertical pass over the horizontal accumulators. Masked taps always
        # fall inside the box, so clamping the local index is only for
        # taps that get discarded.
        column_mask = mask[:, col_sl]
        v_value = np.zeros_like(h_value)
        v_weight = np.zeros(shape)
        for k, weight in enumerate(self.kernel):
            sample_rows = np.clip(box_rows + k - center, 0, rows - 1)
            tap = column_mask[sample_rows]
            local = np.clip(sample_rows - bbox.min_y, 0, shape[0] - 1)
            v_value += np.where(tap[..., None], h_value[local] * weight, 0.0)
            v_weight += np.where(tap, h_weight[local] * weight, 0.0)

        box_mask = mask[row_sl, col_sl]
        blurred = box_mask & (v_weight > 0)
        degenerate = int(np.count_nonzero(box_mask & ~blurred))
        if degenerate:
            logger.debug(f"{degenerate} masked pixels had no in-class weight, left as is")

        out = image.copy()
        region = out[row_sl, col_sl]
        region[blurred] = v_value[blurred] / v_weight[blurred][:, None]
        return out
