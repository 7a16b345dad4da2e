"""Draw difference boxes over the candidate screenshot."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, ImageDraw

from .core.types import DesignDifference
from .presets import Color, ColorScheme
from .utils.image_ops import RasterImage


@dataclass(frozen=True)
class AnnotationStyle:
    stroke_color: Color
    stroke_width: int = 2
    fill_color: Color = (237, 237, 237)
    fill_opacity: float = 0.3


def _clamp(value: float, minimum: float = 0.0, maximum: float = 1.0) -> float:
    return max(minimum, min(value, maximum))


def tint_color(color: Color, *, blend: float = 0.6) -> Color:
    """Blend an RGB colour with white to create a softer highlight fill."""

    blend = _clamp(blend)
    return tuple(int(round(_clamp(channel + (255 - channel) * blend, 0, 255))) for channel in color)


def make_annotation_style(
    base_color: Color,
    *,
    stroke_width: int,
    fill_opacity: float,
    fill_tint: float = 0.4,
) -> AnnotationStyle:
    """Create a style whose fill is a lightened version of the stroke colour."""

    return AnnotationStyle(
        stroke_color=base_color,
        stroke_width=stroke_width,
        fill_color=tint_color(base_color, blend=fill_tint),
        fill_opacity=_clamp(fill_opacity),
    )


def render_overlay(
    candidate: RasterImage,
    differences: Sequence[DesignDifference],
    *,
    display_width: float,
    display_height: Optional[float] = None,
    scheme: ColorScheme = ColorScheme(),
    selected_id: Optional[str] = None,
    stroke_width: int = 2,
    fill_opacity: float = 0.3,
) -> Image.Image:
    """Return the candidate scaled to display size with every difference boxed.

    Locations are already in display space; the selected difference is drawn
    last with a thicker outline so it stays on top.
    """

    if display_height is None:
        display_height = candidate.height * display_width / candidate.width
    size = (max(1, int(round(display_width))), max(1, int(round(display_height))))
    base = candidate.to_pil().resize(size, Image.Resampling.BILINEAR)
    layer = Image.new("RGBA", size, (0, 0, 0, 0))
    draw = ImageDraw.Draw(layer)

    ordered = sorted(differences, key=lambda d: d.id == selected_id)
    for difference in ordered:
        selected = difference.id == selected_id
        color = scheme.selected if selected else scheme.for_type(difference.type)
        style = make_annotation_style(
            color,
            stroke_width=stroke_width * 2 if selected else stroke_width,
            fill_opacity=fill_opacity,
        )
        loc = difference.location
        box = (loc.x, loc.y, loc.x + max(loc.width, 1), loc.y + max(loc.height, 1))
        draw.rectangle(
            box,
            fill=style.fill_color + (int(255 * style.fill_opacity),),
            outline=style.stroke_color + (255,),
            width=style.stroke_width,
        )
    return Image.alpha_composite(base, layer)


def save_overlay(
    candidate: RasterImage,
    differences: Sequence[DesignDifference],
    output_path: str | Path,
    **kwargs,
) -> None:
    out_path = Path(output_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    render_overlay(candidate, differences, **kwargs).save(str(out_path), format="PNG")
