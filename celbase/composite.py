"""Layer compositing with pure white treated as transparent."""

import logging
from typing import Sequence

import numpy as np

from .types import (
    FilterConfigError,
    FilterKind,
    ImageArray,
    PURE_WHITE,
    ShapeMismatchError,
    to_uint8,
    validate_image,
)

logger = logging.getLogger(__name__)


def white_mask(image: ImageArray) -> np.ndarray:
    """True where the first three channels are pure white."""
    return np.all(image[..., :3] == PURE_WHITE, axis=-1)


def _check_same_shape(images: Sequence[ImageArray]) -> None:
    for i, image in enumerate(images):
        validate_image(image, name=f"layer {i}")
    shapes = {image.shape for image in images}
    if len(shapes) > 1:
        raise ShapeMismatchError(f"Layers must share one shape, got {sorted(shapes)}")


def composite_alpha(bg: ImageArray, fg: ImageArray, alpha: float) -> ImageArray:
    """Blend ``fg`` over ``bg`` with a scalar alpha.

    Where ``fg`` is pure white the background shows through untouched,
    and where ``bg`` is pure white the foreground is copied as is.

    Args:
        bg: Background image (H, W, C)
        fg: Foreground image, same shape as ``bg``
        alpha: Foreground weight, clamped to [0, 1]

    Returns:
        Blended uint8 image

    Raises:
        ShapeMismatchError: If the two images differ in shape
    """
    _check_same_shape([bg, fg])

    if not 0.0 <= alpha <= 1.0:
        clamped = float(np.clip(alpha, 0.0, 1.0))
        logger.warning(f"alpha {alpha} outside [0, 1], clamped to {clamped}")
        alpha = clamped

    blended = bg.astype(np.float64) * (1.0 - alpha) + fg.astype(np.float64) * alpha
    out = to_uint8(blended)

    bg_white = white_mask(bg)
    fg_white = white_mask(fg)
    out[bg_white] = fg[bg_white]
    out[fg_white] = bg[fg_white]
    return out


def composite_average(layers: Sequence[ImageArray]) -> ImageArray:
    """Per-pixel mean of all layers, skipping pure white values.

    Pixels that are white in every layer stay white.

    Raises:
        FilterConfigError: If ``layers`` is empty
        ShapeMismatchError: If layers differ in shape
    """
    if len(layers) == 0:
        raise FilterConfigError("composite_average needs at least one layer")
    _check_same_shape(layers)

    total = np.zeros(layers[0].shape, dtype=np.float64)
    count = np.zeros(layers[0].shape[:2], dtype=np.int64)
    for layer in layers:
        present = ~white_mask(layer)
        total[present] += layer[present]
        count += present

    out = np.full_like(layers[0], 255)
    covered = count > 0
    out[covered] = to_uint8(total[covered] / count[covered][:, None])
    logger.debug(f"Averaged {len(layers)} layers, {int((~covered).sum())} pixels left white")
    return out


class AlphaComposite:
    """Pipeline step blending a fixed foreground layer over its input."""

    kind = FilterKind.ALPHA_COMPOSITE

    def __init__(self, layer: ImageArray, alpha: float):
        self.layer = validate_image(layer, name="layer")
        self.alpha = alpha

    def __repr__(self) -> str:
        return f"AlphaComposite(shape={self.layer.shape}, alpha={self.alpha})"

    def apply(self, image: ImageArray) -> ImageArray:
        return composite_alpha(image, self.layer, self.alpha)
