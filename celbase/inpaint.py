"""Keyed line removal by iterative neighbor color propagation."""

import logging
from typing import Sequence, Tuple

import numpy as np

from .classify import ColorClass
from .types import (
    ColorSpec,
    FilterConfigError,
    FilterKind,
    ImageArray,
    InpaintResult,
    Mask,
    validate_image,
)

logger = logging.getLogger(__name__)

# (d_row, d_col) in the order donors are tried; the first valid one wins.
NEIGHBOR_OFFSETS: Tuple[Tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)


class LineRemover:
    """Replace line-colored pixels with a neighboring non-line color.

    Each round, every pending pixel looks at its 8 neighbors and copies the
    first one that is neither a line color nor an excluded color. Pixels
    without such a neighbor wait for the next round. Runs until nothing is
    pending, a round makes no progress, or ``max_rounds`` is reached.

    With ``propagate_within_round`` False (default) every read in a round
    comes from the image as it was when the round started, so the result
    does not depend on visiting order. With it True, reads see repaints made
    earlier in the same round, which clears long runs in fewer rounds but
    makes the outcome depend on the column-major visiting order.
    """

    kind = FilterKind.LINE_REMOVER

    def __init__(
        self,
        line_colors: Sequence[ColorSpec],
        excluded_colors: Sequence[ColorSpec] = (),
        max_rounds: int = 100,
        propagate_within_round: bool = False,
    ):
        if max_rounds < 0:
            raise FilterConfigError(f"max_rounds must be >= 0, got {max_rounds}")
        self.line_colors = ColorClass(line_colors, name="line")
        excluded_colors = list(excluded_colors)
        self.excluded_colors = ColorClass(excluded_colors, name="excluded") if excluded_colors else None
        self.max_rounds = max_rounds
        self.propagate_within_round = propagate_within_round

    def __repr__(self) -> str:
        return (
            f"LineRemover(line_colors={self.line_colors.colors}, "
            f"excluded_colors={self.excluded_colors.colors if self.excluded_colors else []}, "
            f"max_rounds={self.max_rounds}, propagate_within_round={self.propagate_within_round})"
        )

    def collect_line_positions(self, image: ImageArray) -> np.ndarray:
        """Line pixel coordinates as an (N, 2) array of (row, col).

        Ordered column by column, top to bottom within a column.
        """
        cols, rows = np.nonzero(self.line_colors.mask(image).T)
        return np.column_stack([rows, cols])

    def donor_mask(self, image: ImageArray) -> Mask:
        """Pixels whose color may be copied onto a line pixel."""
        blocked = self.line_colors.mask(image)
        if self.excluded_colors is not None:
            blocked |= self.excluded_colors.mask(image)
        return ~blocked

    def apply(self, image: ImageArray) -> ImageArray:
        return self.run(image).image

    def run(self, image: ImageArray) -> InpaintResult:
        """Remove line pixels and report how the propagation went.

        Args:
            image: Image array (H, W, C)

        Returns:
            InpaintResult with the repainted copy, rounds executed and any
            coordinates still unresolved
        """
        validate_image(image)
        buffer = image.copy()
        positions = self.collect_line_positions(image)
        donor = self.donor_mask(image)
        logger.debug(f"Found {len(positions)} line pixels")

        rounds = 0
        while rounds < self.max_rounds and len(positions):
            if self.propagate_within_round:
                remaining = self._propagate_live(buffer, donor, positions)
            else:
                buffer, remaining = self._propagate_snapshot(buffer, donor, positions)
            rounds += 1
            repainted = len(positions) - len(remaining)
            logger.debug(f"Round {rounds}: repainted {repainted}, {len(remaining)} pending")
            positions = remaining
            if repainted == 0:
                # Nothing changed, so every further round would be identical
                break

        unresolved = [(int(r), int(c)) for r, c in positions]
        if unresolved:
            logger.info(f"Line removal stopped after {rounds} rounds with {len(unresolved)} pixels unresolved")
        else:
            logger.info(f"Line removal converged after {rounds} rounds")

        return InpaintResult(image=buffer, rounds=rounds, unresolved=unresolved)

    def _propagate_snapshot(
        self, snapshot: np.ndarray, donor: Mask, positions: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """One round reading only from ``snapshot``; returns (new_image, pending)."""
        rows, cols = snapshot.shape[:2]
        ys, xs = positions[:, 0], positions[:, 1]
        src_y = np.zeros_like(ys)
        src_x = np.zeros_like(xs)
        pending = np.ones(len(positions), dtype=bool)

        for dy, dx in NEIGHBOR_OFFSETS:
            ny, nx = ys + dy, xs + dx
            found = pending & (ny >= 0) & (ny < rows) & (nx >= 0) & (nx < cols)
            found[found] = donor[ny[found], nx[found]]
            src_y[found] = ny[found]
            src_x[found] = nx[found]
            pending &= ~found

        done = ~pending
        out = snapshot.copy()
        out[ys[done], xs[done]] = snapshot[src_y[done], src_x[done]]
        # Repainted pixels now hold donor colors
        donor[ys[done], xs[done]] = True
        return out, positions[pending]

    def _propagate_live(self, buffer: np.ndarray, donor: Mask, positions: np.ndarray) -> np.ndarray:
        """One round reading and writing ``buffer`` in visiting order; returns pending."""
        rows, cols = buffer.shape[:2]
        pending = []

        for index, (y, x) in enumerate(positions):
            for dy, dx in NEIGHBOR_OFFSETS:
                ny, nx = y + dy, x + dx
                if 0 <= ny < rows and 0 <= nx < cols and donor[ny, nx]:
                    buffer[y, x] = buffer[ny, nx]
                    donor[y, x] = True
                    break
            else:
                pending.append(index)

        return positions[np.array(pending, dtype=np.intp)]


class LineExtractor:
    """Keep only line-colored pixels; everything else becomes pure white."""

    kind = FilterKind.LINE_EXTRACTOR

    def __init__(self, line_colors: Sequence[ColorSpec]):
        self.line_colors = ColorClass(line_colors, name="line")

    def __repr__(self) -> str:
        return f"LineExtractor(line_colors={self.line_colors.colors})"

    def apply(self, image: ImageArray) -> ImageArray:
        validate_image(image)
        mask = self.line_colors.mask(image)
        out = np.full_like(image, 255)
        out[mask] = image[mask]
        logger.debug(f"Extracted {int(mask.sum())} line pixels")
        return out
