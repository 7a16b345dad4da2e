import base64
import io

import pytest
from conftest import raster, solid
from PIL import Image

from designqa.errors import LoadError, VisionAnalysisError
from designqa.session import ComparisonSession
from designqa.utils.image_ops import load_image, load_pair


def _png(array):
    buffer = io.BytesIO()
    Image.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture
def image_files(tmp_path, layout_page):
    reference = tmp_path / "reference.png"
    candidate = tmp_path / "candidate.png"
    changed = layout_page.copy()
    changed[60:100, 10:160, :3] = (200, 40, 40)
    reference.write_bytes(_png(layout_page))
    candidate.write_bytes(_png(changed))
    return reference, candidate


def test_load_image_accepts_paths_bytes_and_data_urls(image_files):
    reference, _ = image_files
    data = reference.read_bytes()
    url = "data:image/png;base64," + base64.b64encode(data).decode("ascii")

    from_path = load_image(reference)
    from_bytes = load_image(data)
    from_url = load_image(url)

    assert from_path.size == (200, 120)
    assert (from_bytes.pixels == from_path.pixels).all()
    assert (from_url.pixels == from_path.pixels).all()
    assert from_path.rgba_at(50, 5) == (30, 30, 30, 255)


def test_raster_buffer_is_read_only(layout_page):
    image = raster(layout_page)

    with pytest.raises(ValueError):
        image.pixels[0, 0, 0] = 1
    assert image.data[(5 * image.width + 50) * 4] == 30


def test_load_pair_fails_when_either_image_fails(image_files, tmp_path):
    broken = tmp_path / "broken.png"
    broken.write_bytes(b"not an image")

    with pytest.raises(LoadError):
        load_pair(image_files[0], broken)
    with pytest.raises(LoadError):
        load_pair(tmp_path / "missing.png", image_files[1])


def test_analysis_waits_for_display_width(image_files):
    session = ComparisonSession()

    assert session.load(*image_files) == []
    assert session.notice is None

    differences = session.set_display_width(400)
    assert differences
    assert session.differences == differences
    assert session.mapper.scale == 2.0


def test_resizing_recomputes_from_scratch(image_files):
    session = ComparisonSession(display_width=200)
    session.load(*image_files)
    first = session.differences
    session.add_comment(first[0].id, "check this")

    session.set_display_width(400)

    assert [d.id for d in session.differences] == [d.id for d in first]
    assert session.differences[0].location.width == 2 * first[0].location.width
    assert session.differences[0].comments == []


def test_failed_load_yields_empty_result_and_notice(image_files, tmp_path):
    session = ComparisonSession(display_width=200)
    session.load(*image_files)
    assert session.differences

    broken = tmp_path / "broken.png"
    broken.write_bytes(b"\x89PNG broken")
    assert session.load(image_files[0], broken) == []

    assert session.differences == []
    assert session.reference is None
    assert "broken.png" in session.notice

    session.load(*image_files)
    assert session.notice is None
    assert session.differences


class _FailingSource:
    def find_differences(self, reference, candidate, mapper):
        raise VisionAnalysisError("service unavailable")


def test_source_failure_degrades_to_notice(layout_page):
    session = ComparisonSession(display_width=200, source=_FailingSource())

    assert session.set_images(raster(layout_page), raster(solid(200, 120))) == []
    assert session.notice == "service unavailable"


def test_selection_and_comments_through_session(image_files):
    session = ComparisonSession(display_width=200)
    session.load(*image_files)
    target = session.differences[0]

    session.select_difference(target.id)
    comment = session.add_comment(target.id, "too wide")

    assert session.store.selected is target
    assert target.comments == [comment]
