import pytest
from conftest import raster, solid

from designqa.compare import (
    compare_images,
    margin_differences,
    merge_differences,
    pair_regions,
    spacing_differences,
)
from designqa.core.types import MarginProfile, RawDifference, WhitespaceRegion
from designqa.presets import AnalysisParams


def _of_type(differences, difference_type):
    return [d for d in differences if d.type == difference_type]


def _columns_page(first_column, last_column, size=100):
    array = solid(size, size)
    array[:, first_column : last_column + 1, :3] = (20, 20, 20)
    return raster(array)


def test_identical_images_have_no_differences(layout_page):
    image = raster(layout_page)

    result = compare_images(image, image, params=AnalysisParams(), display_width=400)

    assert result.differences == []
    assert result.scale == 2.0
    assert result.display_height == 240.0


def test_margin_below_threshold_is_not_reported():
    params = AnalysisParams(margin_threshold=16)

    result = compare_images(
        _columns_page(10, 90), _columns_page(20, 90), params=params, display_width=100
    )

    assert _of_type(result.differences, "margin") == []


def test_margin_above_threshold_anchors_at_left_edge():
    params = AnalysisParams(margin_threshold=16)

    result = compare_images(
        _columns_page(10, 90), _columns_page(30, 90), params=params, display_width=100
    )

    margins = _of_type(result.differences, "margin")
    assert len(margins) == 1
    assert margins[0].location.x == 0
    assert margins[0].location.y == 0
    assert margins[0].location.width == 30
    assert margins[0].location.height == 100
    assert margins[0].priority == "medium"
    assert "Left margin differs by 20px" in margins[0].description


def test_right_margin_starts_at_nearest_content_edge():
    params = AnalysisParams(margin_threshold=16)
    reference = MarginProfile(left=10, right=189, top=0, bottom=99)
    candidate = MarginProfile(left=10, right=150, top=0, bottom=99)

    differences = margin_differences(reference, candidate, 200, 100, params)

    assert len(differences) == 1
    assert (differences[0].x, differences[0].width, differences[0].height) == (151, 49, 100)
    assert differences[0].priority == "high"
    assert "Right margin" in differences[0].description


@pytest.mark.parametrize("delta,expected", [(50, 0), (51, 1)])
def test_color_threshold_boundary(delta, expected):
    reference = solid(200, 100)
    candidate = solid(200, 100)
    candidate[20, 20, :3] = (255 - delta, 255, 255)

    result = compare_images(
        raster(reference), raster(candidate), params=AnalysisParams(color_threshold=50), display_width=200
    )

    colors = _of_type(result.differences, "color")
    assert len(colors) == expected
    if expected:
        assert colors[0].location.x == 20
        assert colors[0].location.width == 100
        assert colors[0].location.height == 40
        assert "rgb(255, 255, 255)" in colors[0].description
        assert f"rgb({255 - delta}, 255, 255)" in colors[0].description


def test_color_threshold_factor_scales_threshold():
    reference = solid(200, 100)
    candidate = solid(200, 100)
    candidate[20, 20, :3] = (175, 255, 255)
    params = AnalysisParams(color_threshold=50, color_threshold_factor=2.0)

    result = compare_images(raster(reference), raster(candidate), params=params, display_width=200)

    assert _of_type(result.differences, "color") == []


def _shifted_pair():
    reference = solid(400, 300)
    reference[0:30, 20:380, :3] = (40, 40, 40)
    reference[100:140, 20:200, :3] = (0, 90, 200)
    candidate = solid(400, 300)
    candidate[0:30, 50:380, :3] = (40, 40, 40)
    candidate[100:140, 40:300, :3] = (0, 90, 200)
    candidate[200:220, 40:120, :3] = (230, 20, 20)
    return raster(reference), raster(candidate)


def test_analysis_is_idempotent():
    reference, candidate = _shifted_pair()
    params = AnalysisParams()

    first = compare_images(reference, candidate, params=params, display_width=800)
    second = compare_images(reference, candidate, params=params, display_width=800)

    assert first.differences
    assert first.differences == second.differences


def test_doubling_display_width_doubles_locations():
    reference, candidate = _shifted_pair()
    params = AnalysisParams()

    small = compare_images(reference, candidate, params=params, display_width=300).differences
    large = compare_images(reference, candidate, params=params, display_width=600).differences

    assert len(small) == len(large)
    for a, b in zip(small, large):
        assert (a.id, a.type, a.priority, a.description) == (b.id, b.type, b.priority, b.description)
        assert b.location.x == 2 * a.location.x
        assert b.location.y == 2 * a.location.y
        assert b.location.width == 2 * a.location.width
        assert b.location.height == 2 * a.location.height


def test_differences_are_ordered_by_type_and_have_unique_ids():
    reference, candidate = _shifted_pair()

    differences = compare_images(reference, candidate, params=AnalysisParams(), display_width=400).differences

    order = {"spacing": 0, "margin": 1, "color": 2, "font": 3}
    ranks = [order[d.type] for d in differences]
    assert ranks == sorted(ranks)
    assert len({d.id for d in differences}) == len(differences)
    assert {d.type for d in differences} >= {"spacing", "margin", "color"}


def test_candidate_of_other_size_is_resampled():
    reference = raster(solid(200, 100))
    candidate = raster(solid(400, 200))

    result = compare_images(reference, candidate, params=AnalysisParams(), display_width=200)

    assert result.differences == []
    assert result.reference_size == (200, 100)


def _color(y, x=0):
    return RawDifference(type="color", description=f"at {y}", x=x, y=y, width=100, height=40)


@pytest.mark.parametrize("mode", ["clustered", "legacy"])
def test_merge_groups_nearby_differences(mode):
    merged = merge_differences([_color(10), _color(50), _color(300)], window=100, mode=mode)

    assert len(merged) == 2
    first, second = merged
    assert first.y == 10
    assert first.y <= 50 <= first.y + first.height
    assert second.y == 300


def test_clustered_merge_does_not_depend_on_input_order():
    differences = [_color(10, x=40), _color(50), _color(300), _color(320, x=10)]

    forward = merge_differences(differences, window=100)
    backward = merge_differences(list(reversed(differences)), window=100)

    assert forward == backward
    assert (forward[0].x, forward[0].y, forward[0].width, forward[0].height) == (0, 10, 140, 80)


def test_merge_keeps_types_apart():
    spacing = RawDifference(type="spacing", description="gap", x=0, y=20, width=60, height=10, priority="high")

    merged = merge_differences([_color(10), spacing], window=100)

    assert [d.type for d in merged] == ["spacing", "color"]
    assert merged[0].priority == "high"


def test_clustered_merge_keeps_both_margin_sides():
    params = AnalysisParams(margin_threshold=16)
    reference = _columns_page(10, 189, size=200)
    candidate = _columns_page(40, 149, size=200)

    result = compare_images(reference, candidate, params=params, display_width=200)

    margins = _of_type(result.differences, "margin")
    assert [d.id for d in margins] == ["margin-1", "margin-2"]
    assert "Left margin differs by 30px" in margins[0].description
    assert "Right margin differs by 40px" in margins[1].description
    assert (margins[1].location.x, margins[1].location.width) == (150, 50)


def test_merge_rejects_unknown_mode():
    with pytest.raises(ValueError):
        merge_differences([_color(10)], window=100, mode="global")


def test_nearest_pairing_ignores_missing_regions():
    reference = [WhitespaceRegion(0, 0, 100, 10), WhitespaceRegion(0, 10, 100, 10)]
    candidate = [WhitespaceRegion(0, 10, 60, 10)]

    assert pair_regions(reference, candidate, "index") == [(reference[0], candidate[0])]
    assert pair_regions(reference, candidate, "nearest") == [(reference[1], candidate[0])]


def test_spacing_priority_follows_delta():
    params = AnalysisParams(spacing_threshold=10, row_stride=10)
    reference = [WhitespaceRegion(0, 0, 100, 10), WhitespaceRegion(0, 10, 100, 10), WhitespaceRegion(0, 20, 100, 10)]
    candidate = [WhitespaceRegion(0, 0, 95, 10), WhitespaceRegion(0, 10, 85, 10), WhitespaceRegion(0, 20, 130, 10)]

    differences = spacing_differences(reference, candidate, params)

    assert [(d.y, d.priority, d.width, d.height) for d in differences] == [
        (10, "medium", 100, 10),
        (20, "high", 130, 10),
    ]


def test_descriptions_follow_locale():
    params = AnalysisParams(margin_threshold=16, locale="es")

    result = compare_images(_columns_page(10, 90), _columns_page(30, 90), params=params, display_width=100)

    margin = _of_type(result.differences, "margin")[0]
    assert margin.description.startswith("El margen izquierdo")
