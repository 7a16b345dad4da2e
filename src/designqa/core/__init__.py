"""Pixel-level building blocks: record types, detectors and coordinate mapping."""

from .mapper import CoordinateMapper, measure_distance
from .types import (
    ColorSample,
    Comment,
    DesignDifference,
    Location,
    MarginProfile,
    RawDifference,
    WhitespaceRegion,
)

__all__ = [
    "ColorSample",
    "Comment",
    "CoordinateMapper",
    "DesignDifference",
    "Location",
    "MarginProfile",
    "RawDifference",
    "WhitespaceRegion",
    "measure_distance",
]
