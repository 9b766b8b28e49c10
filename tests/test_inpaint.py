"""Tests for keyed line removal."""

import numpy as np
import pytest

from celbase.inpaint import LineExtractor, LineRemover
from celbase.types import FilterConfigError, ImageFormatError

from conftest import A, LINE, WHITE, solid

B = (30, 60, 90)


class TestCollectLinePositions:
    """Test cases for the initial scan."""

    def test_column_major_order(self):
        """Test the worklist runs down each column in turn."""
        image = solid(2, 2, LINE)

        positions = LineRemover([LINE]).collect_line_positions(image)

        assert positions.tolist() == [[0, 0], [1, 0], [0, 1], [1, 1]]

    def test_no_lines(self):
        """Test an image without line pixels yields an empty worklist."""
        positions = LineRemover([LINE]).collect_line_positions(solid(3, 3, A))

        assert positions.shape == (0, 2)


class TestLineRemover:
    """Test cases for LineRemover.run and apply."""

    def test_single_pixel_one_round(self):
        """Test an isolated line pixel takes its neighbor's color in one round."""
        image = solid(5, 5, B)
        image[2, 2] = LINE

        result = LineRemover([LINE], max_rounds=10).run(image)

        assert result.rounds == 1
        assert result.converged
        np.testing.assert_array_equal(result.image, solid(5, 5, B))

    def test_center_scenario(self, line_in_center):
        """Test the 3x3 gray scenario repaints the center."""
        result = LineRemover(line_colors=[LINE], excluded_colors=[], max_rounds=1).apply(line_in_center)

        assert tuple(result[1, 1]) == A

    def test_fixed_point_without_donors(self):
        """Test a pixel surrounded by excluded colors stays put."""
        image = solid(3, 3, WHITE)
        image[1, 1] = LINE

        result = LineRemover([LINE], [WHITE], max_rounds=1000).run(image)

        assert not result.converged
        assert result.unresolved == [(1, 1)]
        assert result.rounds == 1
        assert tuple(result.image[1, 1]) == LINE

    def test_all_line_pixels(self):
        """Test an image made only of line pixels is left as is."""
        image = solid(3, 4, LINE)

        result = LineRemover([LINE], max_rounds=5).run(image)

        assert len(result.unresolved) == 12
        np.testing.assert_array_equal(result.image, image)

    def test_excluded_never_donates(self):
        """Test excluded colors are skipped in favor of later neighbors."""
        image = np.array([[WHITE, LINE, A]], dtype=np.uint8)

        with_exclusion = LineRemover([LINE], [WHITE]).apply(image)
        without = LineRemover([LINE]).apply(image)

        assert tuple(with_exclusion[0, 1]) == A
        assert tuple(without[0, 1]) == WHITE

    def test_zero_rounds(self, line_in_center):
        """Test a zero budget returns an unchanged copy."""
        result = LineRemover([LINE], max_rounds=0).run(line_in_center)

        assert result.rounds == 0
        assert result.unresolved == [(1, 1)]
        np.testing.assert_array_equal(result.image, line_in_center)
        assert result.image is not line_in_center

    def test_round_limit(self):
        """Test leftovers keep the line color when the budget runs out."""
        image = np.array([[A, LINE, LINE, LINE, LINE]], dtype=np.uint8)

        result = LineRemover([LINE], max_rounds=2).run(image)

        assert result.rounds == 2
        assert result.unresolved == [(0, 3), (0, 4)]
        assert tuple(result.image[0, 2]) == A
        assert tuple(result.image[0, 4]) == LINE

    def test_snapshot_mode_one_step_per_round(self):
        """Test a run of line pixels shrinks by one pixel per round."""
        image = np.array([[A, LINE, LINE, LINE, LINE]], dtype=np.uint8)

        result = LineRemover([LINE]).run(image)

        assert result.rounds == 4
        np.testing.assert_array_equal(result.image, solid(1, 5, A))

    def test_within_round_propagation(self):
        """Test live reads clear the whole run in one round."""
        image = np.array([[A, LINE, LINE, LINE, LINE]], dtype=np.uint8)

        result = LineRemover([LINE], propagate_within_round=True).run(image)

        assert result.rounds == 1
        np.testing.assert_array_equal(result.image, solid(1, 5, A))

    def test_modes_differ_on_wide_lines(self):
        """Test the two read modes pick different donors for thick lines."""
        image = np.array([
            [A, LINE, LINE],
            [LINE, LINE, B],
        ], dtype=np.uint8)

        snapshot = LineRemover([LINE]).apply(image)
        live = LineRemover([LINE], propagate_within_round=True).apply(image)

        assert tuple(snapshot[0, 2]) == B
        assert tuple(live[0, 2]) == A
        np.testing.assert_array_equal(snapshot[:, :2], live[:, :2])

    def test_tolerant_line_color(self):
        """Test line colors with a tolerance catch near matches."""
        image = solid(3, 3, A)
        image[1, 1] = (5, 3, 9)

        result = LineRemover([LINE + (2,)]).apply(image)

        np.testing.assert_array_equal(result, solid(3, 3, A))

    def test_does_not_mutate_input(self, line_in_center):
        """Test the source array is left alone."""
        before = line_in_center.copy()

        LineRemover([LINE], propagate_within_round=True).apply(line_in_center)
        LineRemover([LINE]).apply(line_in_center)

        np.testing.assert_array_equal(line_in_center, before)

    def test_excluded_colors_as_array(self):
        """Test excluded colors may be given as a palette array."""
        image = np.array([[WHITE, LINE, A]], dtype=np.uint8)
        palette = np.array([WHITE, (0, 0, 0)])

        result = LineRemover([LINE], palette).apply(image)

        assert tuple(result[0, 1]) == A

    def test_empty_excluded_array(self, line_in_center):
        """Test an empty excluded palette means no exclusions."""
        result = LineRemover([LINE], np.zeros((0, 3), dtype=np.uint8)).apply(line_in_center)

        assert tuple(result[1, 1]) == A

    def test_wide_dtype_rejected(self, line_in_center):
        """Test images wider than uint8 are rejected."""
        with pytest.raises(ImageFormatError):
            LineRemover([LINE]).apply(line_in_center.astype(np.uint16))

    def test_negative_rounds(self):
        """Test a negative round budget is rejected."""
        with pytest.raises(FilterConfigError, match="max_rounds"):
            LineRemover([LINE], max_rounds=-1)

    def test_no_line_colors(self):
        """Test at least one line color is required."""
        with pytest.raises(FilterConfigError):
            LineRemover([])


class TestLineExtractor:
    """Test cases for LineExtractor.apply."""

    def test_keeps_only_lines(self, line_in_center):
        """Test non-line pixels turn white."""
        result = LineExtractor([LINE]).apply(line_in_center)

        expected = solid(3, 3, WHITE)
        expected[1, 1] = LINE
        np.testing.assert_array_equal(result, expected)
