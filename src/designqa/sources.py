"""Interchangeable producers of :class:`DesignDifference` lists."""
from __future__ import annotations

from typing import List, Optional, Protocol

from .compare import compare_images
from .core.mapper import CoordinateMapper
from .core.types import DesignDifference
from .presets import AnalysisParams
from .utils.image_ops import RasterImage


class DifferenceSource(Protocol):
    def find_differences(
        self,
        reference: RasterImage,
        candidate: RasterImage,
        mapper: CoordinateMapper,
    ) -> List[DesignDifference]:
        ...


class PixelDifferenceSource:
    """Deterministic pixel-scan engine."""

    def __init__(self, params: Optional[AnalysisParams] = None) -> None:
        self.params = params or AnalysisParams()

    def find_differences(
        self,
        reference: RasterImage,
        candidate: RasterImage,
        mapper: CoordinateMapper,
    ) -> List[DesignDifference]:
        result = compare_images(
            reference,
            candidate,
            params=self.params,
            display_width=mapper.display_width,
        )
        return result.differences
