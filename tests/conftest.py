"""Pytest configuration and fixtures."""

import numpy as np
import pytest

A = (200, 200, 200)
LINE = (4, 2, 10)
WHITE = (255, 255, 255)


def solid(rows: int, cols: int, color) -> np.ndarray:
    """Image of one color."""
    image = np.zeros((rows, cols, len(color)), dtype=np.uint8)
    image[:, :] = color
    return image


@pytest.fixture
def line_in_center():
    """3x3 gray image with a single line pixel in the middle."""
    image = solid(3, 3, A)
    image[1, 1] = LINE
    return image


@pytest.fixture
def two_region_image():
    """Left half one flat color, right half another."""
    image = solid(10, 10, (50, 50, 50))
    image[:, 5:] = (200, 0, 0)
    return image
