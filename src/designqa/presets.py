"""Analysis parameter presets and overlay color helpers."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Iterable, Literal, Mapping, Tuple

Color = Tuple[int, int, int]
MergeMode = Literal["clustered", "legacy"]
PairingMode = Literal["nearest", "index"]

MERGE_MODES = ("clustered", "legacy")
PAIRING_MODES = ("nearest", "index")


@dataclass(frozen=True)
class ColorScheme:
    """RGB palette used for overlay boxes, one color per difference type."""

    spacing: Color = (37, 99, 235)
    margin: Color = (217, 119, 6)
    color: Color = (220, 38, 38)
    font: Color = (124, 58, 237)
    selected: Color = (22, 163, 74)

    def for_type(self, difference_type: str) -> Color:
        return getattr(self, difference_type, self.color)

    def to_dict(self) -> Dict[str, Color]:
        return {
            "spacing": self.spacing,
            "margin": self.margin,
            "color": self.color,
            "font": self.font,
            "selected": self.selected,
        }


@dataclass(frozen=True)
class AnalysisParams:
    """Thresholds and strides driving the pixel difference engine.

    Strides, thresholds and box sizes are expressed in native pixels of the
    reference image; only the final locations are scaled to display space.
    """

    row_stride: int = 10
    color_sample_stride: int = 20
    whitespace_brightness_floor: int = 250
    content_brightness_ceiling: int = 240
    spacing_threshold: int = 10
    margin_threshold: int = 16
    color_threshold: int = 50
    color_threshold_factor: float = 1.0
    min_region_width: int = 50
    merge_proximity_window: int = 100
    margin_row_stride: int = 1
    color_box_width: int = 100
    color_box_height: int = 40
    merge_mode: MergeMode = "clustered"
    spacing_pairing: PairingMode = "nearest"
    locale: str = "en"

    def __post_init__(self) -> None:
        for name in ("row_stride", "color_sample_stride", "margin_row_stride"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be a positive integer")
        if self.merge_mode not in MERGE_MODES:
            raise ValueError(f"Unknown merge mode '{self.merge_mode}'. Available: {', '.join(MERGE_MODES)}")
        if self.spacing_pairing not in PAIRING_MODES:
            raise ValueError(
                f"Unknown spacing pairing '{self.spacing_pairing}'. Available: {', '.join(PAIRING_MODES)}"
            )

    @property
    def effective_color_threshold(self) -> float:
        return self.color_threshold * self.color_threshold_factor

    def to_dict(self) -> Dict[str, object]:
        return {
            "row_stride": self.row_stride,
            "color_sample_stride": self.color_sample_stride,
            "whitespace_brightness_floor": self.whitespace_brightness_floor,
            "content_brightness_ceiling": self.content_brightness_ceiling,
            "spacing_threshold": self.spacing_threshold,
            "margin_threshold": self.margin_threshold,
            "color_threshold": self.color_threshold,
            "color_threshold_factor": self.color_threshold_factor,
            "min_region_width": self.min_region_width,
            "merge_proximity_window": self.merge_proximity_window,
            "margin_row_stride": self.margin_row_stride,
            "color_box_width": self.color_box_width,
            "color_box_height": self.color_box_height,
            "merge_mode": self.merge_mode,
            "spacing_pairing": self.spacing_pairing,
            "locale": self.locale,
        }

    def copy(self, **overrides: object) -> "AnalysisParams":
        return replace(self, **overrides)


@dataclass(frozen=True)
class Preset:
    """Bundle of parameters, overlay styling and metadata."""

    name: str
    description: str
    params: AnalysisParams
    colors: ColorScheme
    fill_opacity: float = 0.3
    stroke_width: int = 2

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "description": self.description,
            "params": self.params.to_dict(),
            "colors": self.colors.to_dict(),
            "fill_opacity": self.fill_opacity,
            "stroke_width": self.stroke_width,
        }


_DEFAULT_COLORS = ColorScheme()

PRESETS: Mapping[str, Preset] = {
    "strict": Preset(
        name="strict",
        description="Dense sampling and tight thresholds; reports small deviations.",
        params=AnalysisParams(
            row_stride=5,
            color_sample_stride=10,
            spacing_threshold=6,
            margin_threshold=8,
            color_threshold=30,
            min_region_width=30,
            merge_proximity_window=60,
        ),
        colors=_DEFAULT_COLORS,
        fill_opacity=0.25,
        stroke_width=2,
    ),
    "balanced": Preset(
        name="balanced",
        description="Default mix of sensitivity and noise rejection.",
        params=AnalysisParams(),
        colors=_DEFAULT_COLORS,
        fill_opacity=0.3,
        stroke_width=2,
    ),
    "loose": Preset(
        name="loose",
        description="Coarse sampling; only large layout and color shifts.",
        params=AnalysisParams(
            row_stride=20,
            color_sample_stride=40,
            spacing_threshold=20,
            margin_threshold=32,
            color_threshold=90,
            min_region_width=80,
            merge_proximity_window=150,
        ),
        colors=_DEFAULT_COLORS,
        fill_opacity=0.3,
        stroke_width=3,
    ),
}


def get_preset(name: str) -> Preset:
    key = name.lower()
    if key not in PRESETS:
        raise KeyError(f"Unknown preset '{name}'. Available: {', '.join(sorted(PRESETS))}")
    return PRESETS[key]


def iter_presets() -> Iterable[Preset]:
    return PRESETS.values()
