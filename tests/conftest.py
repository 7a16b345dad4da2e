"""Shared fixtures for the design QA tests."""

import numpy as np
import pytest

from designqa.utils.image_ops import RasterImage


def solid(width, height, color=(255, 255, 255)):
    """Return a writable RGBA array filled with ``color``."""

    array = np.zeros((height, width, 4), dtype=np.uint8)
    array[:, :, :3] = color
    array[:, :, 3] = 255
    return array


def raster(array):
    return RasterImage.from_array(array)


@pytest.fixture
def white_page():
    return solid(200, 120)


@pytest.fixture
def layout_page():
    """A page with a dark header bar and a content block leaving side gutters."""

    array = solid(200, 120)
    array[0:20, 10:190, :3] = (30, 30, 30)
    array[60:100, 10:100, :3] = (200, 40, 40)
    return array
