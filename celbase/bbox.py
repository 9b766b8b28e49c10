"""Mask bounding boxes for skipping untouched rows and columns."""

from typing import Tuple

import numpy as np

from .classify import ColorClass
from .types import BoundingBox, ImageArray, Mask


def mask_bbox(mask: Mask) -> BoundingBox:
    """Minimal inclusive rectangle around the True cells of ``mask``.

    Returns an inverted box when the mask is empty.
    """
    rows, cols = mask.shape[:2]
    row_hits = np.flatnonzero(mask.any(axis=1))
    if len(row_hits) == 0:
        return BoundingBox.empty(rows, cols)
    col_hits = np.flatnonzero(mask.any(axis=0))
    return BoundingBox(
        int(col_hits[0]),
        int(row_hits[0]),
        int(col_hits[-1]),
        int(row_hits[-1]),
    )


def mask_with_bbox(image: ImageArray, color_class: ColorClass) -> Tuple[Mask, BoundingBox]:
    """Build the class mask and its bounding box.

    White is the transparent/background signal elsewhere in the pipeline,
    so a class containing it is never spatially pruned: the box covers the
    whole image.

    Args:
        image: Image array (H, W, C)
        color_class: Class whose members are marked

    Returns:
        Tuple of (mask, bbox)
    """
    rows, cols = image.shape[:2]
    mask = color_class.mask(image)

    if color_class.contains_white:
        return mask, BoundingBox.full(rows, cols)

    return mask, mask_bbox(mask)
