"""Command line interface for the design QA inspector."""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable, Optional

from .config import LOG_LEVELS, Settings, configure_logging, load_settings
from .overlay import save_overlay
from .presets import MERGE_MODES, PAIRING_MODES, AnalysisParams, get_preset
from .report import write_json_report, write_pdf_report
from .session import ComparisonSession
from .sources import PixelDifferenceSource
from .vision import VisionDifferenceSource

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="designqa",
        description="Compare a reference design image with an implementation screenshot.",
    )
    parser.add_argument("--reference", required=True, help="Reference design image")
    parser.add_argument("--candidate", required=True, help="Implementation screenshot")
    parser.add_argument("--display-width", type=_positive_float, help="On-screen width used for reported locations")
    parser.add_argument("--preset", help="Preset name (strict|balanced|loose)")
    parser.add_argument("--settings", help="JSON settings file")
    parser.add_argument("--engine", choices=("pixel", "vision"), default="pixel", help="Difference source")
    parser.add_argument("--row-stride", type=int, help="Whitespace scan row stride (px)")
    parser.add_argument("--color-stride", type=int, help="Color sampling stride (px)")
    parser.add_argument("--whitespace-floor", type=int, help="Channel value above which a pixel is white")
    parser.add_argument("--content-ceiling", type=int, help="Channel value below which a pixel is content")
    parser.add_argument("--spacing-threshold", type=int, help="Whitespace width delta reported as spacing (px)")
    parser.add_argument("--margin-threshold", type=int, help="Content edge delta reported as margin (px)")
    parser.add_argument("--color-threshold", type=int, help="Channel-sum distance reported as color change")
    parser.add_argument("--color-factor", type=float, help="Multiplier applied to the color threshold")
    parser.add_argument("--min-region-width", type=int, help="Minimum whitespace run length (px)")
    parser.add_argument("--merge-window", type=int, help="Vertical proximity for grouping differences (px)")
    parser.add_argument("--merge-mode", choices=MERGE_MODES, help="Grouping strategy")
    parser.add_argument("--pairing", choices=PAIRING_MODES, help="Whitespace region pairing strategy")
    parser.add_argument("--locale", help="Language of descriptions (en|es)")
    parser.add_argument("--json", help="Write the differences as JSON")
    parser.add_argument("--overlay", help="Write the candidate with highlighted differences (PNG)")
    parser.add_argument("--pdf", help="Write a printable PDF report")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Logging level")
    parser.add_argument("--version", action="version", version=_version())
    return parser


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: '{value}'") from None
    if not number > 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero, got {value}")
    return number


def _version() -> str:
    from . import __version__

    return __version__


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = load_settings(args.settings)
    configure_logging(args.log_level or settings.log_level)

    try:
        preset = get_preset(args.preset or settings.preset)
    except KeyError as exc:
        parser.error(str(exc))
        return 2

    try:
        params = _override_params(preset.params, args, settings)
    except ValueError as exc:
        parser.error(str(exc))
        return 2
    logger.debug("Using preset %s with %s", preset.name, params.to_dict())

    if args.engine == "vision":
        source = VisionDifferenceSource(
            api_key=settings.openai_api_key,
            model=settings.vision_model,
            locale=params.locale,
        )
    else:
        source = PixelDifferenceSource(params)

    session = ComparisonSession(params, display_width=args.display_width or settings.display_width, source=source)
    session.load(args.reference, args.candidate)
    if session.reference is not None and session.display_width is None:
        session.set_display_width(session.reference.width)
    if session.notice:
        print(f"designqa: {session.notice}", file=sys.stderr)
        return 1

    differences = session.differences
    for difference in differences:
        loc = difference.location
        print(
            f"[{difference.priority:<6}] {difference.id:<12} "
            f"({loc.x:.0f}, {loc.y:.0f}, {loc.width:.0f}x{loc.height:.0f}) {difference.description}"
        )
    print(f"{len(differences)} difference(s) found")

    if args.json:
        write_json_report(differences, args.json)
    if args.overlay:
        mapper = session.mapper
        save_overlay(
            session.candidate,
            differences,
            args.overlay,
            display_width=mapper.display_width,
            display_height=mapper.display_height,
            scheme=preset.colors,
            stroke_width=preset.stroke_width,
            fill_opacity=preset.fill_opacity,
        )
    if args.pdf:
        write_pdf_report(differences, args.pdf, locale=params.locale)
    return 0


def _override_params(preset_params: AnalysisParams, args: argparse.Namespace, settings: Settings) -> AnalysisParams:
    overrides = {"locale": args.locale or settings.locale}
    merge_mode = args.merge_mode or settings.merge_mode
    if merge_mode:
        overrides["merge_mode"] = merge_mode
    for field_name, arg_name in (
        ("row_stride", "row_stride"),
        ("color_sample_stride", "color_stride"),
        ("whitespace_brightness_floor", "whitespace_floor"),
        ("content_brightness_ceiling", "content_ceiling"),
        ("spacing_threshold", "spacing_threshold"),
        ("margin_threshold", "margin_threshold"),
        ("color_threshold", "color_threshold"),
        ("color_threshold_factor", "color_factor"),
        ("min_region_width", "min_region_width"),
        ("merge_proximity_window", "merge_window"),
        ("spacing_pairing", "pairing"),
    ):
        value = getattr(args, arg_name)
        if value is not None:
            overrides[field_name] = value
    return preset_params.copy(**overrides)


if __name__ == "__main__":
    sys.exit(main())
