"""Comparison session binding one image pair, a display width and its results."""
from __future__ import annotations

import logging
from typing import List, Optional

from .core.mapper import CoordinateMapper
from .core.types import DesignDifference
from .errors import AnalysisSkipped, DesignQAError, LoadError
from .presets import AnalysisParams
from .sources import DifferenceSource, PixelDifferenceSource
from .store import DifferenceStore
from .utils.image_ops import ImageSource, RasterImage, load_pair

logger = logging.getLogger(__name__)


class ComparisonSession:
    """Aggregate root of one comparison.

    Any change of image pair or display width recomputes every difference
    from scratch; failures leave an empty result plus a ``notice`` for the
    user instead of propagating.
    """

    def __init__(
        self,
        params: Optional[AnalysisParams] = None,
        *,
        display_width: Optional[float] = None,
        source: Optional[DifferenceSource] = None,
    ) -> None:
        self.params = params or AnalysisParams()
        self.source: DifferenceSource = source or PixelDifferenceSource(self.params)
        self.store = DifferenceStore()
        self.notice: Optional[str] = None
        self._display_width = display_width
        self._reference: Optional[RasterImage] = None
        self._candidate: Optional[RasterImage] = None

    @property
    def reference(self) -> Optional[RasterImage]:
        return self._reference

    @property
    def candidate(self) -> Optional[RasterImage]:
        return self._candidate

    @property
    def display_width(self) -> Optional[float]:
        return self._display_width

    @property
    def differences(self) -> List[DesignDifference]:
        return self.store.differences

    @property
    def mapper(self) -> Optional[CoordinateMapper]:
        if self._reference is None or not self._display_width:
            return None
        return CoordinateMapper(self._reference.width, self._reference.height, self._display_width)

    def load(self, reference: ImageSource, candidate: ImageSource) -> List[DesignDifference]:
        """Decode a new image pair and analyse it.

        The previous pair is discarded first, so a failed load leaves the
        session empty rather than showing stale results.
        """

        self._reference = None
        self._candidate = None
        self.store.clear()
        try:
            self._reference, self._candidate = load_pair(reference, candidate)
        except LoadError as exc:
            self.notice = str(exc)
            logger.warning("Image pair not loaded: %s", exc)
            return []
        return self.refresh()

    def set_images(self, reference: RasterImage, candidate: RasterImage) -> List[DesignDifference]:
        self._reference = reference
        self._candidate = candidate
        return self.refresh()

    def set_display_width(self, display_width: Optional[float]) -> List[DesignDifference]:
        self._display_width = display_width
        return self.refresh()

    def refresh(self) -> List[DesignDifference]:
        """Recompute all differences for the current inputs."""

        self.notice = None
        self.store.clear()
        try:
            mapper = self._require_inputs()
            differences = self.source.find_differences(self._reference, self._candidate, mapper)
        except AnalysisSkipped as exc:
            logger.debug("Analysis skipped: %s", exc)
            return []
        except DesignQAError as exc:
            self.notice = str(exc)
            logger.warning("Analysis failed: %s", exc)
            return []
        self.store.set_differences(differences)
        return self.store.differences

    def _require_inputs(self) -> CoordinateMapper:
        if self._reference is None or self._candidate is None:
            raise AnalysisSkipped("both images must be loaded")
        if not self._display_width or self._display_width <= 0:
            raise AnalysisSkipped("display width is not known yet")
        return CoordinateMapper(self._reference.width, self._reference.height, self._display_width)

    def select_difference(self, difference_id: Optional[str]) -> Optional[DesignDifference]:
        return self.store.select_difference(difference_id)

    def add_comment(self, difference_id: str, text: str):
        return self.store.add_comment(difference_id, text)
