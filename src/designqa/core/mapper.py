"""Conversion between native image pixels and on-screen display units."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

from .types import Location

Point = Tuple[float, float]


@dataclass(frozen=True)
class CoordinateMapper:
    """Scale native reference-image coordinates to the display size.

    The horizontal factor is ``display_width / native_width``; height follows
    the reference aspect ratio, so both axes use the same factor.
    """

    native_width: int
    native_height: int
    display_width: float

    def __post_init__(self) -> None:
        if self.native_width <= 0 or self.native_height <= 0:
            raise ValueError("Native image size must be positive")
        if self.display_width <= 0:
            raise ValueError("Display width must be positive")

    @property
    def scale(self) -> float:
        return self.display_width / self.native_width

    @property
    def display_height(self) -> float:
        return self.native_height * self.scale

    def to_display(self, x: float, y: float, width: float, height: float) -> Location:
        return Location(x, y, width, height).scaled(self.scale, self.scale)

    def to_native(self, x: float, y: float) -> Point:
        return x / self.scale, y / self.scale

    def full_area(self) -> Location:
        return Location(0.0, 0.0, float(self.display_width), self.display_height)

    def native_distance(self, p1: Point, p2: Point) -> float:
        """Distance in native pixels between two display-space points."""

        return measure_distance(p1, p2) / self.scale


def measure_distance(p1: Point, p2: Point) -> float:
    return math.hypot(p2[0] - p1[0], p2[1] - p1[1])
