"""Color sampling and WCAG contrast helpers."""
from __future__ import annotations

import re
from typing import Optional, Sequence, Tuple

from .core.mapper import CoordinateMapper
from .utils.image_ops import RasterImage

Rgb = Tuple[int, int, int]

_RGB_RE = re.compile(r"\d+")


def format_rgb(color: Sequence[int]) -> str:
    r, g, b = (int(channel) for channel in color[:3])
    return f"rgb({r}, {g}, {b})"


def parse_rgb(value: str) -> Rgb:
    """Parse ``"rgb(r, g, b)"`` (or any text with three integers)."""

    parts = [int(part) for part in _RGB_RE.findall(value)]
    if len(parts) < 3:
        raise ValueError(f"'{value}' does not contain three channel values")
    r, g, b = (max(0, min(255, part)) for part in parts[:3])
    return r, g, b


def sample_color(
    image: RasterImage,
    x: float,
    y: float,
    mapper: Optional[CoordinateMapper] = None,
) -> Rgb:
    """Return the RGB value at ``(x, y)``.

    With a ``mapper`` the point is taken in display space and converted to
    native pixels first. Points outside the image are clamped to its border.
    """

    if mapper is not None:
        x, y = mapper.to_native(x, y)
    px = max(0, min(image.width - 1, int(x)))
    py = max(0, min(image.height - 1, int(y)))
    return image.rgb_at(px, py)


def _linearize(channel: int) -> float:
    value = channel / 255.0
    if value <= 0.03928:
        return value / 12.92
    return ((value + 0.055) / 1.055) ** 2.4


def relative_luminance(color: Sequence[int]) -> float:
    r, g, b = (_linearize(int(channel)) for channel in color[:3])
    return 0.2126 * r + 0.7152 * g + 0.0722 * b


def contrast_ratio(color1: Sequence[int], color2: Sequence[int]) -> float:
    l1 = relative_luminance(color1)
    l2 = relative_luminance(color2)
    brightest = max(l1, l2)
    darkest = min(l1, l2)
    return (brightest + 0.05) / (darkest + 0.05)


def wcag_level(ratio: float) -> str:
    """Classify a contrast ratio for normal-size text."""

    if ratio >= 7.0:
        return "AAA"
    if ratio >= 4.5:
        return "AA"
    if ratio >= 3.0:
        return "AA Large"
    return "Fail"
