import json

import pytest

from designqa.core.types import Comment, DesignDifference, Location
from designqa.report import differences_to_json, write_json_report, write_pdf_report


def _differences(count=2):
    items = []
    for index in range(count):
        items.append(
            DesignDifference(
                id=f"color-{index + 1}",
                type="color",
                description=f"Color differs at block {index + 1}",
                location=Location(10.0 * index, 20.0, 100.0, 40.0),
                priority="high" if index == 0 else "medium",
            )
        )
    items[0].comments.append(Comment(id="c1", text="Use the brand blue", timestamp="2024-05-01T10:00:00"))
    return items


def test_json_report_round_trips_fields(tmp_path):
    path = tmp_path / "out" / "differences.json"

    write_json_report(_differences(), path)

    data = json.loads(path.read_text(encoding="utf-8"))
    assert [item["id"] for item in data] == ["color-1", "color-2"]
    assert data[0]["location"] == {"x": 0.0, "y": 20.0, "width": 100.0, "height": 40.0}
    assert data[0]["comments"][0]["text"] == "Use the brand blue"


def test_json_keeps_non_ascii_descriptions():
    difference = _differences(1)[0]
    difference.description = "El color difiere en la implementación"

    assert "implementación" in differences_to_json([difference])


def test_pdf_report_lists_descriptions_and_comments(tmp_path):
    fitz = pytest.importorskip("fitz")
    path = tmp_path / "report.pdf"

    write_pdf_report(_differences(), path)

    with fitz.open(str(path)) as doc:
        text = "".join(page.get_text() for page in doc)
    assert "Design Differences Report" in text
    assert "Color differs at block 2" in text
    assert "Use the brand blue" in text
    assert "High priority" in text


def test_pdf_report_paginates(tmp_path):
    fitz = pytest.importorskip("fitz")
    path = tmp_path / "long.pdf"

    write_pdf_report(_differences(60), path, locale="es")

    with fitz.open(str(path)) as doc:
        assert len(doc) > 1
        assert "Reporte de Diferencias" in doc[0].get_text()
