"""Pixel based design comparison pipeline.

Detector output from both images is turned into native-space differences,
grouped by type and proximity, and only then mapped to display coordinates.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .contrast import format_rgb
from .core.detectors import detect_margins, detect_whitespace, sample_color_divergence
from .core.mapper import CoordinateMapper
from .core.types import (
    DIFFERENCE_TYPES,
    ColorSample,
    DesignDifference,
    MarginProfile,
    Priority,
    RawDifference,
    WhitespaceRegion,
)
from .messages import message
from .presets import AnalysisParams
from .utils.image_ops import RasterImage, align_to_reference

logger = logging.getLogger(__name__)

# One full-height box per side; a union would hide the other side.
_UNMERGED_TYPES = ("margin",)


@dataclass(frozen=True)
class AnalysisResult:
    params: AnalysisParams
    display_width: float
    display_height: float
    scale: float
    reference_size: Tuple[int, int]
    differences: List[DesignDifference]

    def to_dict(self) -> Dict[str, object]:
        return {
            "params": self.params.to_dict(),
            "display_width": self.display_width,
            "display_height": self.display_height,
            "scale": self.scale,
            "reference_size": list(self.reference_size),
            "differences": [difference.to_dict() for difference in self.differences],
        }


def compare_images(
    reference: RasterImage,
    candidate: RasterImage,
    *,
    params: AnalysisParams,
    display_width: float,
) -> AnalysisResult:
    mapper = CoordinateMapper(reference.width, reference.height, display_width)
    candidate = align_to_reference(reference, candidate)

    raw = find_raw_differences(reference, candidate, params)
    merged = merge_differences(raw, window=params.merge_proximity_window, mode=params.merge_mode)
    differences = to_design_differences(merged, mapper)
    logger.info(
        "Analysis found %d raw / %d merged differences (%dx%d -> %.1f px wide)",
        len(raw),
        len(differences),
        reference.width,
        reference.height,
        mapper.display_width,
    )
    return AnalysisResult(
        params=params,
        display_width=mapper.display_width,
        display_height=mapper.display_height,
        scale=mapper.scale,
        reference_size=reference.size,
        differences=differences,
    )


def find_raw_differences(
    reference: RasterImage,
    candidate: RasterImage,
    params: AnalysisParams,
) -> List[RawDifference]:
    """Run every detector and return differences in spacing, margin, color order."""

    whitespace_kwargs = dict(
        row_stride=params.row_stride,
        brightness_floor=params.whitespace_brightness_floor,
        min_region_width=params.min_region_width,
    )
    ref_regions = detect_whitespace(reference, **whitespace_kwargs)
    cand_regions = detect_whitespace(candidate, **whitespace_kwargs)

    margin_kwargs = dict(
        content_ceiling=params.content_brightness_ceiling,
        row_stride=params.margin_row_stride,
    )
    ref_profile = detect_margins(reference, **margin_kwargs)
    cand_profile = detect_margins(candidate, **margin_kwargs)

    samples = sample_color_divergence(
        reference,
        candidate,
        stride=params.color_sample_stride,
        threshold=params.effective_color_threshold,
    )
    logger.debug(
        "Detectors: %d/%d whitespace regions, margins %s vs %s, %d color samples",
        len(ref_regions),
        len(cand_regions),
        ref_profile,
        cand_profile,
        len(samples),
    )

    differences: List[RawDifference] = []
    differences.extend(spacing_differences(ref_regions, cand_regions, params))
    differences.extend(
        margin_differences(ref_profile, cand_profile, reference.width, reference.height, params)
    )
    differences.extend(color_differences(samples, reference.width, reference.height, params))
    return differences


def _priority(delta: int, threshold: int) -> Priority:
    return "high" if delta > 2 * threshold else "medium"


def pair_regions(
    reference: Sequence[WhitespaceRegion],
    candidate: Sequence[WhitespaceRegion],
    mode: str = "nearest",
) -> List[Tuple[WhitespaceRegion, WhitespaceRegion]]:
    """Match reference whitespace regions with candidate ones.

    ``"index"`` pairs by list position. ``"nearest"`` pairs each reference
    region with the closest unused candidate region on the same sampled row.
    """

    if mode == "index":
        return list(zip(reference, candidate))

    by_row: Dict[int, List[WhitespaceRegion]] = {}
    for region in candidate:
        by_row.setdefault(region.y, []).append(region)

    pairs: List[Tuple[WhitespaceRegion, WhitespaceRegion]] = []
    for ref in reference:
        options = by_row.get(ref.y)
        if not options:
            continue
        best = min(options, key=lambda region: abs(region.x - ref.x))
        options.remove(best)
        pairs.append((ref, best))
    return pairs


def spacing_differences(
    reference: Sequence[WhitespaceRegion],
    candidate: Sequence[WhitespaceRegion],
    params: AnalysisParams,
) -> List[RawDifference]:
    differences: List[RawDifference] = []
    for ref, cand in pair_regions(reference, candidate, params.spacing_pairing):
        delta = abs(ref.width - cand.width)
        if delta <= params.spacing_threshold:
            continue
        differences.append(
            RawDifference(
                type="spacing",
                description=message(
                    "spacing",
                    params.locale,
                    delta=delta,
                    reference=ref.width,
                    candidate=cand.width,
                ),
                x=ref.x,
                y=ref.y,
                width=max(ref.width, cand.width),
                height=params.row_stride,
                priority=_priority(delta, params.spacing_threshold),
            )
        )
    return differences


def margin_differences(
    reference: MarginProfile,
    candidate: MarginProfile,
    width: int,
    height: int,
    params: AnalysisParams,
) -> List[RawDifference]:
    differences: List[RawDifference] = []

    left_delta = abs(reference.left - candidate.left)
    if left_delta > params.margin_threshold:
        differences.append(
            RawDifference(
                type="margin",
                description=message(
                    "margin_left",
                    params.locale,
                    delta=left_delta,
                    reference=reference.left,
                    candidate=candidate.left,
                ),
                x=0,
                y=0,
                width=max(reference.left, candidate.left),
                height=height,
                priority=_priority(left_delta, params.margin_threshold),
            )
        )

    right_delta = abs(reference.right - candidate.right)
    if right_delta > params.margin_threshold:
        boundary = min(reference.right, candidate.right) + 1
        differences.append(
            RawDifference(
                type="margin",
                description=message(
                    "margin_right",
                    params.locale,
                    delta=right_delta,
                    reference=width - 1 - reference.right,
                    candidate=width - 1 - candidate.right,
                ),
                x=boundary,
                y=0,
                width=max(0, width - boundary),
                height=height,
                priority=_priority(right_delta, params.margin_threshold),
            )
        )
    return differences


def color_differences(
    samples: Sequence[ColorSample],
    width: int,
    height: int,
    params: AnalysisParams,
) -> List[RawDifference]:
    differences: List[RawDifference] = []
    for sample in samples:
        difference = RawDifference(
            type="color",
            description=message(
                "color",
                params.locale,
                reference=format_rgb(sample.color1),
                candidate=format_rgb(sample.color2),
            ),
            x=sample.x,
            y=sample.y,
            width=params.color_box_width,
            height=params.color_box_height,
            priority="medium",
        )
        differences.append(difference.clip(width, height))
    return differences


def merge_differences(
    differences: Sequence[RawDifference],
    *,
    window: float,
    mode: str = "clustered",
) -> List[RawDifference]:
    """Group same-type differences whose ``y`` lies within ``window``.

    ``"clustered"`` sorts each type by ``(y, x)`` and grows one union box per
    cluster, so the result does not depend on input order; left and right
    margin boxes are kept apart. ``"legacy"`` is the single greedy pass over
    insertion order that widens the first match to the element-wise min
    position and max size.
    """

    if mode == "legacy":
        return _merge_greedy(differences, window)
    if mode != "clustered":
        raise ValueError(f"Unknown merge mode '{mode}'")
    return _merge_clustered(differences, window)


def _merge_greedy(differences: Sequence[RawDifference], window: float) -> List[RawDifference]:
    merged: List[RawDifference] = []
    for difference in differences:
        nearby = next(
            (
                entry
                for entry in merged
                if entry.type == difference.type and abs(entry.y - difference.y) < window
            ),
            None,
        )
        if nearby is None:
            merged.append(
                RawDifference(
                    type=difference.type,
                    description=difference.description,
                    x=difference.x,
                    y=difference.y,
                    width=difference.width,
                    height=difference.height,
                    priority=difference.priority,
                )
            )
            continue
        nearby.x = min(nearby.x, difference.x)
        nearby.y = min(nearby.y, difference.y)
        nearby.width = max(nearby.width, difference.width)
        nearby.height = max(nearby.height, difference.height)
    return merged


def _merge_clustered(differences: Sequence[RawDifference], window: float) -> List[RawDifference]:
    merged: List[RawDifference] = []
    for difference_type in DIFFERENCE_TYPES:
        ordered = sorted(
            (d for d in differences if d.type == difference_type),
            key=lambda d: (d.y, d.x, d.width, d.height, d.description),
        )
        if difference_type in _UNMERGED_TYPES:
            merged.extend(ordered)
            continue
        cluster = None
        for difference in ordered:
            if cluster is not None and difference.y - cluster.y < window:
                cluster = cluster.union(difference)
                continue
            if cluster is not None:
                merged.append(cluster)
            cluster = difference
        if cluster is not None:
            merged.append(cluster)
    return merged


def to_design_differences(
    differences: Sequence[RawDifference],
    mapper: CoordinateMapper,
) -> List[DesignDifference]:
    """Map native differences to display space and assign stable ids."""

    counters: Dict[str, int] = {}
    result: List[DesignDifference] = []
    for difference in differences:
        counters[difference.type] = counters.get(difference.type, 0) + 1
        result.append(
            DesignDifference(
                id=f"{difference.type}-{counters[difference.type]}",
                type=difference.type,
                description=difference.description,
                location=mapper.to_display(
                    difference.x, difference.y, difference.width, difference.height
                ),
                priority=difference.priority,
            )
        )
    return result
