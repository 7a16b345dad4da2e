"""Pixel scanners producing the raw signals compared by the aggregator.

Every detector is a pure function of its input buffers; they share no state
and may run in any order.
"""
from __future__ import annotations

from typing import List

import numpy as np

from ..utils.image_ops import RasterImage
from .types import ColorSample, MarginProfile, WhitespaceRegion


def detect_whitespace(
    image: RasterImage,
    *,
    row_stride: int,
    brightness_floor: int,
    min_region_width: int,
) -> List[WhitespaceRegion]:
    """Return horizontal runs of near-white pixels on every ``row_stride`` row.

    A pixel is white when all of R, G and B exceed ``brightness_floor``. Runs
    longer than ``min_region_width`` are reported in row-major order.
    """

    rows = image.rgb[::row_stride]
    white = np.all(rows > brightness_floor, axis=2)
    regions: List[WhitespaceRegion] = []
    for row_index, row in enumerate(white):
        y = row_index * row_stride
        for start, end in _runs(row):
            length = end - start
            if length > min_region_width:
                regions.append(WhitespaceRegion(x=start, y=y, width=length, height=row_stride))
    return regions


def _runs(mask: np.ndarray) -> List[tuple]:
    if not mask.any():
        return []
    padded = np.concatenate(([0], mask.astype(np.int8), [0]))
    edges = np.flatnonzero(np.diff(padded))
    return [(int(start), int(end)) for start, end in zip(edges[::2], edges[1::2])]


def detect_margins(
    image: RasterImage,
    *,
    content_ceiling: int,
    row_stride: int = 1,
) -> MarginProfile:
    """Return the extent of non-background content in ``image``.

    A pixel counts as content when any RGB channel is below
    ``content_ceiling``. An image without content yields its full bounds.
    """

    content = np.any(image.rgb[::row_stride] < content_ceiling, axis=2)
    columns = np.flatnonzero(content.any(axis=0))
    rows = np.flatnonzero(content.any(axis=1))
    if columns.size == 0:
        return MarginProfile(
            left=0,
            right=image.width - 1,
            top=0,
            bottom=image.height - 1,
            has_content=False,
        )
    return MarginProfile(
        left=int(columns[0]),
        right=int(columns[-1]),
        top=int(rows[0]) * row_stride,
        bottom=int(rows[-1]) * row_stride,
    )


def sample_color_divergence(
    reference: RasterImage,
    candidate: RasterImage,
    *,
    stride: int,
    threshold: float,
) -> List[ColorSample]:
    """Sample both images on a ``stride`` grid and report diverging points.

    The divergence is the channel-sum (Manhattan) distance over R, G and B; a
    point is reported only when it is strictly greater than ``threshold``.
    """

    height = min(reference.height, candidate.height)
    width = min(reference.width, candidate.width)
    ref = reference.rgb[:height:stride, :width:stride].astype(np.int16)
    cand = candidate.rgb[:height:stride, :width:stride].astype(np.int16)
    distance = np.abs(ref - cand).sum(axis=2)

    samples: List[ColorSample] = []
    for row, col in np.argwhere(distance > threshold):
        color1 = tuple(int(v) for v in ref[row, col])
        color2 = tuple(int(v) for v in cand[row, col])
        samples.append(
            ColorSample(x=int(col) * stride, y=int(row) * stride, color1=color1, color2=color2)
        )
    return samples
