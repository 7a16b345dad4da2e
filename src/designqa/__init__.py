"""Visual QA: compare a reference design with an implementation screenshot."""

from __future__ import annotations

from .compare import AnalysisResult, compare_images
from .core.mapper import CoordinateMapper
from .core.types import Comment, DesignDifference, Location
from .errors import AnalysisSkipped, DesignQAError, InvalidRasterError, LoadError, VisionAnalysisError
from .presets import AnalysisParams, get_preset, iter_presets
from .session import ComparisonSession
from .store import DifferenceStore
from .utils.image_ops import RasterImage, load_image, load_pair

__all__ = [
    "compare_images",
    "AnalysisResult",
    "AnalysisParams",
    "AnalysisSkipped",
    "Comment",
    "ComparisonSession",
    "CoordinateMapper",
    "DesignDifference",
    "DesignQAError",
    "DifferenceStore",
    "InvalidRasterError",
    "LoadError",
    "Location",
    "RasterImage",
    "VisionAnalysisError",
    "get_preset",
    "iter_presets",
    "load_image",
    "load_pair",
]

__version__ = "0.1.0"
