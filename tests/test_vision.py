import json
from types import SimpleNamespace

import pytest
from conftest import raster, solid

from designqa.core.mapper import CoordinateMapper
from designqa.errors import VisionAnalysisError
from designqa.vision import VisionDifferenceSource, parse_vision_response


class _FakeCompletions:
    def __init__(self, content):
        self.content = content
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class _FakeClient:
    def __init__(self, content):
        self.chat = SimpleNamespace(completions=_FakeCompletions(content))


def test_parse_fills_defaults_and_drops_repeats():
    text = json.dumps(
        {
            "differences": [
                {"type": "color", "description": "Button color is darker", "priority": "high"},
                {"type": "color", "description": "button COLOR"},
                {"type": "typo", "priority": "urgent"},
                "ignored",
            ]
        }
    )

    entries = parse_vision_response(text)

    assert entries == [
        {"type": "color", "description": "Button color is darker", "priority": "high"},
        {"type": "spacing", "description": "Difference detected", "priority": "medium"},
    ]


def test_parse_limits_number_of_entries():
    text = json.dumps({"differences": [{"type": "font", "description": f"font {i}"} for i in range(12)]})

    assert len(parse_vision_response(text, max_differences=5)) == 5


@pytest.mark.parametrize("text", [None, "", "not json", "[]", '{"items": []}'])
def test_parse_rejects_malformed_answers(text):
    with pytest.raises(VisionAnalysisError):
        parse_vision_response(text)


def test_source_sends_both_images_and_covers_display_area():
    client = _FakeClient(json.dumps({"differences": [{"type": "font", "description": "Heading is bold", "priority": "low"}]}))
    source = VisionDifferenceSource(client, model="vision-test")
    mapper = CoordinateMapper(200, 100, 400)

    differences = source.find_differences(raster(solid(200, 100)), raster(solid(200, 100)), mapper)

    assert len(differences) == 1
    assert differences[0].id == "vision-font-1"
    assert differences[0].priority == "low"
    assert differences[0].location.to_dict() == {"x": 0.0, "y": 0.0, "width": 400, "height": 200.0}

    call = client.chat.completions.calls[0]
    assert call["model"] == "vision-test"
    assert call["response_format"] == {"type": "json_object"}
    parts = call["messages"][0]["content"]
    urls = [part["image_url"]["url"] for part in parts if part["type"] == "image_url"]
    assert len(urls) == 2
    assert all(url.startswith("data:image/png;base64,") for url in urls)


def test_source_without_api_key_fails():
    source = VisionDifferenceSource(api_key=None)

    with pytest.raises(VisionAnalysisError):
        source.find_differences(raster(solid(10, 10)), raster(solid(10, 10)), CoordinateMapper(10, 10, 10))
