"""JSON and printable PDF reports of design differences."""
from __future__ import annotations

import json
import textwrap
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Sequence, Tuple, Union

import fitz

from .compare import AnalysisResult
from .core.types import DesignDifference
from .messages import message

ReportInput = Union[AnalysisResult, Sequence[DesignDifference]]

_PAGE_MARGIN = 50.0
_FOOTER_HEIGHT = 40.0
_TITLE_COLOR = (0.06, 0.09, 0.16)
_SUBTITLE_COLOR = (0.2, 0.25, 0.33)
_TEXT_COLOR = (0.1, 0.1, 0.1)
_PRIORITY_COLOR = (0.94, 0.27, 0.27)
_COMMENT_COLOR = (0.39, 0.45, 0.55)
_MUTED_COLOR = (0.58, 0.64, 0.72)


def _as_dict(result: ReportInput) -> Union[Dict[str, object], List[Dict[str, object]]]:
    if isinstance(result, AnalysisResult):
        return result.to_dict()
    return [difference.to_dict() for difference in result]


def differences_to_json(result: ReportInput) -> str:
    return json.dumps(_as_dict(result), ensure_ascii=False, indent=2)


def write_json_report(result: ReportInput, path: str | Path) -> None:
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    with out_path.open("w", encoding="utf-8") as handle:
        json.dump(_as_dict(result), handle, ensure_ascii=False, indent=2)


class _PdfWriter:
    """Writes wrapped lines top to bottom, adding A4 pages as needed."""

    def __init__(self, doc: fitz.Document, footer: str) -> None:
        self.doc = doc
        self.footer = footer
        self.width, self.height = fitz.paper_size("a4")
        self.page: fitz.Page | None = None
        self.y = 0.0
        self._new_page()

    def _new_page(self) -> None:
        self.page = self.doc.new_page(width=self.width, height=self.height)
        self.page.insert_text(
            (_PAGE_MARGIN, self.height - _FOOTER_HEIGHT / 2),
            self.footer,
            fontsize=8,
            color=_MUTED_COLOR,
        )
        self.y = _PAGE_MARGIN

    def write(
        self,
        text: str,
        *,
        fontsize: float = 11,
        color: Tuple[float, float, float] = _TEXT_COLOR,
        indent: float = 0.0,
        spacing: float = 4.0,
    ) -> None:
        usable = self.width - 2 * _PAGE_MARGIN - indent
        chars_per_line = max(20, int(usable / (fontsize * 0.5)))
        for line in textwrap.wrap(text, chars_per_line) or [""]:
            if self.y + fontsize > self.height - _FOOTER_HEIGHT - _PAGE_MARGIN / 2:
                self._new_page()
            self.y += fontsize
            self.page.insert_text(
                (_PAGE_MARGIN + indent, self.y),
                line,
                fontsize=fontsize,
                color=color,
            )
            self.y += spacing

    def skip(self, amount: float) -> None:
        self.y += amount


def write_pdf_report(
    differences: Sequence[DesignDifference],
    path: str | Path,
    *,
    locale: str = "en",
) -> None:
    """Flatten descriptions, priorities and comments into an A4 PDF."""

    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    footer = message(
        "report_footer",
        locale,
        timestamp=datetime.now().strftime("%Y-%m-%d %H:%M"),
    )

    doc = fitz.open()
    try:
        writer = _PdfWriter(doc, footer)
        writer.write(message("report_title", locale), fontsize=22, color=_TITLE_COLOR, spacing=14)
        writer.write(message("report_summary", locale), fontsize=16, color=_SUBTITLE_COLOR, spacing=10)

        if not differences:
            writer.write(message("report_empty", locale))
        for difference in differences:
            writer.write(difference.description, fontsize=12)
            writer.write(
                message(f"priority_{difference.priority}", locale),
                fontsize=10,
                color=_PRIORITY_COLOR if difference.priority == "high" else _COMMENT_COLOR,
            )
            if difference.comments:
                writer.write(message("report_comments", locale), fontsize=11)
                for comment in difference.comments:
                    writer.write(comment.text, fontsize=10, color=_COMMENT_COLOR, indent=10)
                    writer.write(comment.timestamp, fontsize=8, color=_MUTED_COLOR, indent=10)
            writer.skip(12)

        doc.save(str(out_path))
    finally:
        doc.close()
