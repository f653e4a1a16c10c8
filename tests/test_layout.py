"""
Tests for the layout resolver and coordinate helpers.

Covers:
- Letterboxing (wide, tall, equal aspect, degenerate input)
- Percent <-> pixel conversion
- Rendered font size proportional to the draw height
- Rotation helpers
"""
import math
import pytest

from textbehind.models.transform import DrawRect
from textbehind.utils.layout import (
    resolve, percent_to_pixels, pixels_to_percent, rendered_font_size,
    rotate_point, normalize_degrees, unrotate_canvas_point,
)


class TestResolve:

    def test_wide_image_letterboxed_vertically(self):
        rect = resolve(800, 600, 1000, 500)
        assert rect == DrawRect(800, 400, 0, 100)

    def test_tall_image_letterboxed_horizontally(self):
        rect = resolve(800, 600, 300, 600)
        assert rect.draw_height == 600
        assert rect.draw_width == pytest.approx(300)
        assert rect.offset_x == pytest.approx(250)
        assert rect.offset_y == 0

    def test_same_aspect_fills_container(self):
        rect = resolve(400, 200, 2000, 1000)
        assert tuple(rect) == pytest.approx((400, 200, 0, 0))

    @pytest.mark.parametrize("container, image", [
        ((1280, 720), (4000, 3000)),
        ((300, 900), (1920, 1080)),
        ((640, 480), (640, 480)),
        ((1, 1000), (37, 5)),
    ])
    def test_letterbox_invariants(self, container, image):
        cw, ch = container
        iw, ih = image
        rect = resolve(cw, ch, iw, ih)
        # aspect preserved
        assert rect.draw_width / rect.draw_height == pytest.approx(iw / ih)
        # fits inside the container
        assert rect.draw_width <= cw + 1e-9
        assert rect.draw_height <= ch + 1e-9
        # one dimension fills the container
        assert math.isclose(rect.draw_width, cw) or math.isclose(rect.draw_height, ch)
        # centered
        assert rect.offset_x == pytest.approx((cw - rect.draw_width) / 2)
        assert rect.offset_y == pytest.approx((ch - rect.draw_height) / 2)

    @pytest.mark.parametrize("args", [
        (0, 600, 100, 100),
        (800, 0, 100, 100),
        (800, 600, 0, 100),
        (800, 600, 100, -5),
    ])
    def test_degenerate_input_yields_empty_rect(self, args):
        rect = resolve(*args)
        assert rect.is_empty
        assert tuple(rect) == (0, 0, 0, 0)


class TestPercentConversion:

    @pytest.fixture
    def rect(self):
        return DrawRect(800, 400, 0, 100)

    def test_center(self, rect):
        point = percent_to_pixels(rect, 50, 50)
        assert (point.x, point.y) == (400, 300)

    def test_corners(self, rect):
        assert tuple(percent_to_pixels(rect, 0, 0)) == (0, 100)
        assert tuple(percent_to_pixels(rect, 100, 100)) == (800, 500)

    def test_round_trip(self, rect):
        pixel = percent_to_pixels(rect, 12.5, 87.25)
        back = pixels_to_percent(rect, pixel.x, pixel.y)
        assert back.x == pytest.approx(12.5)
        assert back.y == pytest.approx(87.25)

    def test_empty_rect_gives_origin(self):
        assert tuple(pixels_to_percent(DrawRect(0, 0, 0, 0), 10, 10)) == (0, 0)


class TestRenderedFontSize:

    def test_proportional_to_draw_height(self):
        assert rendered_font_size(100, 400) == pytest.approx(80)
        assert rendered_font_size(100, 800) == pytest.approx(160)

    def test_resolution_independent_ratio(self):
        # Same layer on screen and in export keeps its size relative to the image
        on_screen = rendered_font_size(120, 300) / 300
        exported = rendered_font_size(120, 2400) / 2400
        assert on_screen == pytest.approx(exported)


class TestRotation:

    def test_rotate_quarter_turn_is_clockwise_on_screen(self):
        point = rotate_point(1, 0, 90)
        assert point.x == pytest.approx(0, abs=1e-12)
        assert point.y == pytest.approx(1)

    def test_rotate_and_back(self):
        point = rotate_point(3, -7, 33)
        back = rotate_point(point.x, point.y, -33)
        assert back.x == pytest.approx(3)
        assert back.y == pytest.approx(-7)

    @pytest.mark.parametrize("degrees, expected", [(0, 0), (360, 0), (405, 45), (-90, 270)])
    def test_normalize(self, degrees, expected):
        assert normalize_degrees(degrees) == expected

    def test_unrotate_without_rotation_is_identity(self):
        assert tuple(unrotate_canvas_point(10, 20, 400, 200, 0)) == (10, 20)

    def test_unrotate_half_turn_mirrors_about_center(self):
        point = unrotate_canvas_point(100, 50, 400, 200, 180)
        assert point.x == pytest.approx(300)
        assert point.y == pytest.approx(150)
