import math
from concurrent.futures import ThreadPoolExecutor

import pytest

from diptych.models.diptych_model import DiptychRequest, PanelRect, PanelTransform
from diptych.models.errors import InvalidDimensionsError, MissingInputError, NoImageError
from diptych.services.diptych_composer import DiptychComposer, compute_layout
from diptych.services.panel_renderer import PanelRenderer

from conftest import BLACK, BLUE, CLEAR, RED, solid, split_lr


def make_request(**overrides):
    values = dict(
        image_a=solid(600, 1200, RED),
        image_b=solid(600, 1200, BLUE),
        aspect_ratio=1.0,
        output_height=1200,
    )
    values.update(overrides)
    return DiptychRequest(**values)


# ── Geometry ─────────────────────────────────────────────────────────
def test_square_without_frame(composer):
    result = composer.compose(make_request())

    assert result.size == (1200, 1200)
    assert result.layout.framed is False
    assert result.layout.panel_a == PanelRect(0, 0, 600, 1200)
    assert result.layout.panel_b == PanelRect(600, 0, 600, 1200)

    img = result.image
    assert img.getpixel((10, 10)) == RED
    assert img.getpixel((599, 600)) == RED
    assert img.getpixel((600, 600)) == BLUE
    assert img.getpixel((1199, 1199)) == BLUE


def test_square_with_black_frame(composer):
    result = composer.compose(make_request(frame_color="black", frame_thickness=20))
    layout = result.layout

    assert result.size == (1200, 1200)
    assert layout.framed is True
    assert layout.thickness == 20
    assert layout.panel_a == PanelRect(20, 20, 570, 1160)
    assert layout.panel_b == PanelRect(610, 20, 570, 1160)

    img = result.image
    assert img.getpixel((5, 5)) == BLACK          # left/top border
    assert img.getpixel((19, 600)) == BLACK
    assert img.getpixel((20, 20)) == RED          # panel A origin
    assert img.getpixel((589, 1179)) == RED
    assert img.getpixel((600, 600)) == BLACK      # gutter between panels
    assert img.getpixel((610, 20)) == BLUE        # panel B origin
    assert img.getpixel((1179, 1179)) == BLUE
    assert img.getpixel((1190, 600)) == BLACK     # right border
    assert img.getpixel((600, 1195)) == BLACK     # bottom border


@pytest.mark.parametrize("height", [300, 1200, 999.5])
@pytest.mark.parametrize("ratio", [1.0, 4 / 3, 16 / 9, 1.5, 0.6])
def test_unframed_panels_tile_canvas(height, ratio):
    layout = compute_layout(height, ratio)
    width = height * ratio

    assert layout.total_width == pytest.approx(width)
    assert layout.panel_a.x == 0 and layout.panel_a.y == 0
    assert layout.panel_a.width == pytest.approx(width / 2)
    assert layout.panel_a.right == pytest.approx(layout.panel_b.x)
    assert layout.panel_b.right == pytest.approx(width)
    assert layout.panel_a.height == layout.panel_b.height == height

    a = layout.panel_a.to_pixels()
    b = layout.panel_b.to_pixels()
    canvas_w, canvas_h = layout.canvas_size
    assert a[0] == 0 and a[2] == b[0] and b[2] == canvas_w
    assert a[3] == b[3] == canvas_h


@pytest.mark.parametrize("t", [1, 7.5, 20, 50])
@pytest.mark.parametrize("ratio", [1.0, 4 / 3, 16 / 9, 1.5])
def test_framed_geometry(t, ratio):
    layout = compute_layout(1200, ratio, t, "white")
    width = 1200 * ratio
    content_w = (width - 3 * t) / 2

    assert layout.framed is True
    assert layout.panel_a.width == pytest.approx(content_w)
    assert layout.panel_a.height == pytest.approx(1200 - 2 * t)
    assert (layout.panel_a.x, layout.panel_a.y) == (t, t)
    assert layout.panel_b.x == pytest.approx(2 * t + content_w)
    assert layout.panel_b.y == t
    assert layout.panel_b.right == pytest.approx(width - t)


def test_wide_ratio_pixel_size(composer):
    result = composer.compose(
        make_request(aspect_ratio=16 / 9, image_a=solid(1100, 1200, RED), image_b=solid(1100, 1200, BLUE))
    )
    assert result.size == (2133, 1200)
    a, b = result.layout.pixel_rects()
    assert a[2] == b[0]
    assert result.image.getpixel((a[2] - 1, 10)) == RED
    assert result.image.getpixel((b[0], 10)) == BLUE


@pytest.mark.parametrize("t", [0.5, 1.25, 7.5, 13.3])
@pytest.mark.parametrize("ratio", [1.0, 4 / 3, 16 / 9])
def test_framed_panels_have_equal_pixel_size(t, ratio):
    layout = compute_layout(1200, ratio, t, "black")
    a, b = layout.pixel_rects()
    canvas_w, canvas_h = layout.canvas_size

    assert (a[2] - a[0], a[3] - a[1]) == (b[2] - b[0], b[3] - b[1])
    assert a[0] > 0 and a[2] <= b[0] and b[2] <= canvas_w
    assert a[1] == b[1] and a[3] <= canvas_h


def test_fractional_frame_on_wide_canvas(composer):
    result = composer.compose(
        make_request(
            aspect_ratio=16 / 9,
            image_a=solid(1100, 1200, RED),
            image_b=solid(1100, 1200, BLUE),
            frame_color="black",
            frame_thickness=7.5,
        )
    )
    a, b = result.layout.pixel_rects()
    assert a == (8, 8, 1063, 1193)
    assert b == (1070, 8, 2125, 1193)

    img = result.image
    assert img.getpixel((1062, 10)) == RED
    assert img.getpixel((1063, 10)) == BLACK
    assert img.getpixel((1069, 10)) == BLACK
    assert img.getpixel((1070, 10)) == BLUE
    assert img.getpixel((2124, 10)) == BLUE
    assert img.getpixel((2125, 10)) == BLACK


# ── Frame fallback ───────────────────────────────────────────────────
@pytest.mark.parametrize(
    "height, ratio, t",
    [
        (1200, 1.0, 400),    # 3t == totalWidth
        (1200, 2.0, 600),    # 2t == outputHeight
        (1200, 1.0, 1000),
        (100, 1.0, 33.3),    # content rounds to nothing
    ],
)
def test_infeasible_frame_falls_back_to_unframed(height, ratio, t):
    layout = compute_layout(height, ratio, t, "black")
    assert layout.framed is False
    assert layout.frame_dropped is True
    assert layout.thickness == 0
    assert layout.panel_a == PanelRect(0, 0, height * ratio / 2, height)


def test_fallback_result_has_no_frame_fill(composer):
    result = composer.compose(make_request(frame_color="black", frame_thickness=400))
    assert result.frame_dropped is True
    assert result.image.getpixel((0, 0)) == RED
    assert result.image.getpixel((1199, 0)) == BLUE


def test_frame_fallback_is_logged(caplog):
    with caplog.at_level("WARNING"):
        compute_layout(1200, 1.0, 400, "black")
    assert "too large" in caplog.text


def test_negative_thickness_means_no_frame():
    layout = compute_layout(1200, 1.0, -15, "black")
    assert layout.framed is False
    assert layout.frame_dropped is False


def test_thickness_without_color_means_no_frame():
    layout = compute_layout(1200, 1.0, 20, None)
    assert layout.framed is False
    assert layout.frame_dropped is False


# ── Panel content ────────────────────────────────────────────────────
def test_uncovered_area_is_transparent_without_frame(composer):
    result = composer.compose(make_request(image_a=solid(100, 100), image_b=solid(100, 100, BLUE)))
    assert result.image.getpixel((50, 50)) == RED
    assert result.image.getpixel((300, 300)) == CLEAR
    assert result.image.getpixel((650, 50)) == BLUE


def test_uncovered_area_shows_frame_color(composer):
    result = composer.compose(
        make_request(image_a=solid(100, 100), frame_color=(255, 255, 255), frame_thickness=10)
    )
    assert result.image.getpixel((50, 50)) == RED
    assert result.image.getpixel((300, 300)) == (255, 255, 255, 255)


def test_transforms_are_applied_per_panel(composer):
    request = make_request(
        image_a=split_lr(1200, 1200),
        transform_a=PanelTransform(offset=(-600, 0)),
    )
    result = composer.compose(request)
    # panel A now shows the blue right half of its source
    assert result.image.getpixel((10, 10)) == BLUE


# ── Validation ───────────────────────────────────────────────────────
def test_missing_image_fails(composer):
    with pytest.raises(MissingInputError):
        composer.compose(make_request(image_b=None))


@pytest.mark.parametrize(
    "overrides",
    [
        dict(output_height=0),
        dict(output_height=-10),
        dict(output_height=math.nan),
        dict(aspect_ratio=0),
        dict(aspect_ratio=-1.5),
        dict(aspect_ratio=math.inf),
    ],
)
def test_invalid_dimensions(composer, overrides):
    with pytest.raises(InvalidDimensionsError):
        composer.compose(make_request(**overrides))


def test_dimensions_checked_before_images(composer):
    with pytest.raises(InvalidDimensionsError):
        composer.compose(make_request(output_height=0, image_a=None))
    with pytest.raises(InvalidDimensionsError):
        composer.compose(make_request(aspect_ratio=0, image_b=None))


def test_canvas_too_small_for_two_panels(composer):
    with pytest.raises(InvalidDimensionsError):
        composer.compose(make_request(output_height=1, aspect_ratio=0.5))


def test_render_failure_becomes_missing_input():
    class BrokenRenderer(PanelRenderer):
        def render(self, image, transform, panel_size):
            raise NoImageError("decode failed")

    with pytest.raises(MissingInputError) as info:
        DiptychComposer(BrokenRenderer()).compose(make_request())
    assert isinstance(info.value.__cause__, NoImageError)


# ── Purity ───────────────────────────────────────────────────────────
def test_compose_is_idempotent():
    composer = DiptychComposer()
    request = make_request(
        image_a=split_lr(800, 900),
        transform_a=PanelTransform(scale=1.37, offset=(-41.5, 12.25)),
        transform_b=PanelTransform(scale=0.8, offset=(3, -7)),
        aspect_ratio=4 / 3,
        frame_color="#336699",
        frame_thickness=17,
    )
    first = composer.compose(request)
    second = composer.compose(request)
    assert first.image.tobytes() == second.image.tobytes()
    assert first.layout == second.layout


def test_sources_are_not_modified(composer):
    image_a = split_lr(300, 300)
    before = image_a.pil_image.tobytes()
    composer.compose(make_request(image_a=image_a, transform_a=PanelTransform(scale=2.0)))
    assert image_a.pil_image.tobytes() == before


def test_oversized_scale_matches_max_scale(composer):
    src = split_lr(400, 400)
    big = composer.compose(make_request(image_a=src, transform_a=PanelTransform(scale=10.0)))
    top = composer.compose(make_request(image_a=src, transform_a=PanelTransform(scale=3.0)))
    assert big.image.tobytes() == top.image.tobytes()


def test_concurrent_compose_matches_sequential():
    composer = DiptychComposer()
    shared = split_lr(500, 600)
    requests = [
        make_request(
            image_a=shared,
            image_b=shared,
            transform_a=PanelTransform(scale=0.5 + 0.25 * i, offset=(-10 * i, 5 * i)),
            aspect_ratio=ratio,
            frame_color="white" if i % 2 else None,
            frame_thickness=3 * i,
            output_height=300,
        )
        for i, ratio in enumerate([1.0, 4 / 3, 16 / 9, 1.5, 0.75, 2.0, 1.0, 4 / 3])
    ]
    expected = [composer.compose(r).image.tobytes() for r in requests]

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(composer.compose, requests * 3))

    for i, result in enumerate(results):
        assert result.image.tobytes() == expected[i % len(requests)]
