"""Tests for per-capture geometry resolution."""

import pytest

from longshot.capture.models import BoundingRect, Capture, ContainerBounds, CropBounds, ElementBounds
from longshot.pipeline.crop import Rect
from longshot.pipeline.geometry import (
    Cursor,
    ElementInternalScroll,
    ElementPageScroll,
    NamedRegion,
    WholePage,
    custom_container_mode,
    element_mode,
    named_region_mode,
    resolve_layout,
    resolve_step,
    to_device_px,
    whole_page_mode,
)
from tests.helpers import noise


def _blank(h, w):
    return noise(h, w, seed=h * 7 + w)


class TestDeviceScaling:
    def test_rounds_halves_up(self):
        assert to_device_px(37.5, 1) == 38
        assert to_device_px(75, 1.5) == 113
        assert to_device_px(10.2, 2) == 20

    def test_modes_scale_by_ratio(self):
        mode = custom_container_mode(ContainerBounds(10, 20, 100, 150), 75, 2)

        assert (mode.left, mode.top, mode.width, mode.height, mode.overlap) == (20, 40, 200, 300, 150)
        assert whole_page_mode(75, 2).overlap == 150


class TestWholePage:
    def test_three_viewports(self):
        images = [_blank(800, 1000) for _ in range(3)]

        layout = resolve_layout(WholePage(overlap=75), images)

        assert (layout.width, layout.height) == (1000, 2250)
        assert [i.destination_y for i in layout.instructions] == [0, 800, 1525]
        assert layout.instructions[1].source == Rect(0, 75, 1000, 725)
        assert layout.drawn_height == 2250

    def test_header_is_skipped_on_later_captures(self):
        images = [_blank(800, 1000) for _ in range(3)]

        layout = resolve_layout(WholePage(overlap=75), images, header=40)

        assert layout.height == 800 + 2 * 685
        assert layout.instructions[0].source == Rect(0, 0, 1000, 800)
        assert layout.instructions[2].source == Rect(0, 115, 1000, 685)

    def test_single_capture_is_drawn_whole(self):
        layout = resolve_layout(WholePage(overlap=75), [_blank(300, 200)])

        assert len(layout.instructions) == 1
        assert layout.instructions[0].source == Rect(0, 0, 200, 300)
        assert (layout.width, layout.height) == (200, 300)

    def test_consumed_capture_is_skipped(self):
        images = [_blank(800, 1000), _blank(800, 1000), _blank(60, 1000)]

        layout = resolve_layout(WholePage(overlap=75), images)

        assert [i.index for i in layout.instructions] == [0, 1]
        assert layout.cursors[2].destination_y == layout.cursors[1].destination_y == 1525
        assert layout.height == 1525

    def test_wider_later_capture_is_cut_to_canvas(self):
        images = [_blank(100, 50), _blank(100, 80)]

        layout = resolve_layout(WholePage(overlap=10), images)

        assert layout.instructions[1].source.width == 50


class TestCustomContainer:
    def test_crop_and_overlap(self):
        mode = custom_container_mode(ContainerBounds(10, 20, 100, 150), 30, 1)
        images = [_blank(400, 300) for _ in range(3)]

        layout = resolve_layout(mode, images, header=0)

        assert (layout.width, layout.height) == (100, 150 + 2 * 120)
        assert layout.instructions[0].source == Rect(10, 20, 100, 150)
        assert layout.instructions[1].source == Rect(10, 50, 100, 120)

    def test_header_window_starts_at_container_top(self):
        mode = custom_container_mode(ContainerBounds(10, 20, 100, 150), 30, 1)

        assert mode.header_window([_blank(400, 300)], 200) == Rect(10, 20, 100, 75)

    def test_container_past_image_edge_is_clamped(self):
        mode = custom_container_mode(ContainerBounds(250, 0, 100, 150), 30, 1)

        layout = resolve_layout(mode, [_blank(400, 300)])

        assert layout.instructions[0].source == Rect(250, 0, 50, 150)


class TestNamedRegion:
    def test_header_is_never_applied(self):
        mode = named_region_mode(CropBounds(0, 10, 100, 200), 50)
        images = [_blank(300, 120) for _ in range(2)]

        layout = resolve_layout(mode, images, header=40)

        assert isinstance(mode, NamedRegion)
        assert mode.header_window(images, 200) is None
        assert layout.height == 200 + 150
        assert layout.instructions[1].source == Rect(0, 60, 100, 150)

    def test_region_outside_captures_draws_nothing(self):
        mode = named_region_mode(CropBounds(500, 0, 100, 100), 10)

        layout = resolve_layout(mode, [_blank(200, 200), _blank(200, 200)])

        assert layout.instructions == ()
        assert layout.drawn_height == 0


class TestElementInternalScroll:
    def test_fixed_offset_and_overlap(self):
        bounds = ElementBounds(width=200, height=300, offset_x=50, offset_y=100, has_internal_scroll=True)
        captures = [Capture(image=b"") for _ in range(3)]
        mode = element_mode(captures, bounds, 75)
        images = [_blank(600, 500) for _ in range(3)]

        layout = resolve_layout(mode, images)

        assert isinstance(mode, ElementInternalScroll)
        assert (layout.width, layout.height) == (200, 750)
        assert layout.instructions[0].source == Rect(50, 100, 200, 300)
        assert layout.instructions[1].source == Rect(50, 175, 200, 225)
        assert [i.destination_y for i in layout.instructions] == [0, 300, 525]

    def test_header_inside_element_is_skipped(self):
        bounds = ElementBounds(width=200, height=300, offset_x=50, offset_y=100, has_internal_scroll=True)
        mode = element_mode([Capture(image=b"") for _ in range(2)], bounds, 75)
        images = [_blank(600, 500) for _ in range(2)]

        layout = resolve_layout(mode, images, header=20)

        assert mode.header_window(images, 200) == Rect(50, 100, 200, 150)
        assert layout.height == 300 + 205
        assert layout.instructions[1].source == Rect(50, 195, 200, 205)

    def test_capture_rect_overrides_bounds(self):
        bounds = ElementBounds(width=100, height=100, offset_x=0, offset_y=0, has_internal_scroll=True)
        captures = [Capture(image=b"", bounding_rect=BoundingRect(x=5, y=7, width=100, height=80))]

        mode = element_mode(captures, bounds, 10)

        assert mode.placements[0].offset_x == 5
        assert mode.placements[0].offset_y == 7
        assert mode.placements[0].height == 80


class TestElementPageScroll:
    def _mode(self, offsets, total_height=640, width=300):
        bounds = ElementBounds(width=width, height=total_height, offset_x=50, offset_y=0)
        captures = [
            Capture(image=b"", bounding_rect=BoundingRect(x=50, y=y, width=width, height=total_height))
            for y in offsets
        ]
        return element_mode(captures, bounds, 75)

    def test_watermark_tracks_rows(self):
        mode = self._mode([0, -120, -240])
        images = [_blank(400, 500) for _ in range(3)]

        layout = resolve_layout(mode, images)

        assert isinstance(mode, ElementPageScroll)
        watermarks = [c.rows_drawn for c in layout.cursors]
        destinations = [c.destination_y for c in layout.cursors]
        assert watermarks == [400, 520, 640]
        assert destinations == [400, 520, 640]
        assert layout.drawn_height == 640 == layout.height
        assert layout.instructions[1].source == Rect(50, 280, 300, 120)

    def test_cursor_is_non_decreasing_per_step(self):
        mode = self._mode([0, -120, -240])
        images = [_blank(400, 500) for _ in range(3)]
        cursor = Cursor()
        for index, image in enumerate(images):
            _, after = resolve_step(mode, index, image, 0, cursor, (300, 640))
            assert after.destination_y >= cursor.destination_y
            assert after.rows_drawn >= cursor.rows_drawn
            cursor = after

    def test_rows_past_element_bottom_are_not_drawn(self):
        mode = self._mode([0, -120, -240], total_height=600)
        images = [_blank(400, 500) for _ in range(3)]

        layout = resolve_layout(mode, images)

        assert layout.instructions[2].source.height == 80
        assert layout.drawn_height == 600

    def test_element_below_viewport_top(self):
        mode = self._mode([150, -100], total_height=500)
        images = [_blank(400, 500) for _ in range(2)]

        layout = resolve_layout(mode, images)

        # first capture shows rows 0-250 from y=150, second rows 100-500
        assert mode.visible_rows(0, images[0]) == (0, 250)
        assert mode.visible_rows(1, images[1]) == (100, 500)
        assert layout.instructions[0].source == Rect(50, 150, 300, 250)
        assert layout.instructions[1].source == Rect(50, 150, 300, 250)
        assert layout.drawn_height == 500

    def test_repeated_capture_is_skipped(self):
        mode = self._mode([0, 0], total_height=800)
        images = [_blank(400, 500) for _ in range(2)]

        layout = resolve_layout(mode, images)

        assert len(layout.instructions) == 1
        assert layout.cursors[1] == Cursor(400, 400)

    def test_no_header_window(self):
        mode = self._mode([0, -300], total_height=700)

        assert mode.header_window([_blank(400, 500)], 200) is None

    def test_header_does_not_drop_element_rows(self):
        mode = self._mode([0, -300], total_height=700)
        images = [_blank(400, 500) for _ in range(2)]

        layout = resolve_layout(mode, images, header=30)

        assert layout.instructions[1].source == Rect(50, 100, 300, 300)
        assert layout.drawn_height == 700


def test_empty_images_rejected():
    with pytest.raises(ValueError):
        resolve_layout(WholePage(overlap=0), [])
