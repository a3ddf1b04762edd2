"""
Tests for the geometry engine.

Tests cover:
- Distances and pinch scale factors
- Zoom and rotation bounds
- Region clamping, default regions and resizing
- Display-to-source mapping
- Contain-fit and output sizes
"""

import unittest

import pytest

from CVP_Libs.GeometryLib.geometry import (
    CropRegion,
    SourceRect,
    center_offset,
    clamp_region,
    clamp_zoom,
    compute_crop_source_rect,
    crop_output_size,
    default_region,
    distance,
    fit_within,
    limit_size,
    next_rotation,
    pinch_scale_factor,
    point_in_region,
    resize_region,
    scale_to_aspect_ratio,
    template_canvas_size,
)

PASSPORT = 4 / 6


class TestBasics(unittest.TestCase):
    """Test the scalar helpers."""

    def test_distance(self):
        """3-4-5 triangle."""
        self.assertEqual(distance((0, 0), (3, 4)), 5.0)

    def test_pinch_scale_factor(self):
        """Spreading pointers from 100 to 150 zooms by 1.5."""
        self.assertAlmostEqual(pinch_scale_factor(100, 150), 1.5)

    def test_pinch_scale_factor_zero_previous(self):
        """Coincident previous pointers leave the zoom unchanged."""
        self.assertEqual(pinch_scale_factor(0, 80), 1.0)

    def test_clamp_zoom(self):
        """Zoom is clamped to 0.5-3.0."""
        self.assertEqual(clamp_zoom(0.1), 0.5)
        self.assertEqual(clamp_zoom(5), 3.0)
        self.assertEqual(clamp_zoom(1.7), 1.7)

    def test_rotation_cycle(self):
        """Four quarter turns return to 0."""
        degrees = 0
        seen = []
        for _ in range(4):
            degrees = next_rotation(degrees)
            seen.append(degrees)
        self.assertEqual(seen, [90, 180, 270, 0])

    def test_scale_to_aspect_ratio(self):
        """Height for a passport-ratio width."""
        self.assertAlmostEqual(scale_to_aspect_ratio(200, PASSPORT), 300)

    def test_point_in_region(self):
        """Edges count as inside."""
        region = CropRegion(10, 10, 100, 150)
        self.assertTrue(point_in_region((10, 10), region))
        self.assertTrue(point_in_region((110, 160), region))
        self.assertFalse(point_in_region((111, 50), region))


class TestRegions:
    """Tests for region construction and clamping."""

    def test_clamp_region_moves_inside(self):
        """A region hanging off the bottom-right is pulled back in."""
        region = CropRegion(600, 400, 100, 150)
        clamped = clamp_region(region, 640, 480)
        assert clamped.right == 640
        assert clamped.bottom == 480
        assert (clamped.width, clamped.height) == (100, 150)

    def test_clamp_region_negative_origin(self):
        """A negative origin is clamped to zero."""
        clamped = clamp_region(CropRegion(-20, -5, 100, 150), 640, 480)
        assert clamped.origin == (0, 0)

    def test_default_region_centered(self):
        """Default region is centred and holds the ratio."""
        region = default_region(640, 480, PASSPORT)
        assert abs(region.width / region.height - PASSPORT) < 1e-9
        assert abs((region.x + region.width / 2) - 320) < 1e-9
        assert abs((region.y + region.height / 2) - 240) < 1e-9
        assert region.bottom <= 480

    def test_default_region_wide_container(self):
        """In a short container the default region is limited by height."""
        region = default_region(1000, 200, PASSPORT)
        assert region.height <= 200 * 0.8 + 1e-9
        assert abs(region.width / region.height - PASSPORT) < 1e-9

    def test_resize_region_keeps_ratio(self):
        """Locked resize derives the height from the width."""
        region = default_region(640, 480, PASSPORT)
        resized = resize_region(region, 150, 640, 480, PASSPORT, height=999)
        assert resized.width == 150
        assert abs(resized.height - 225) < 1e-9

    def test_resize_region_free_form(self):
        """Free-form resize honours the explicit height."""
        region = CropRegion(0, 0, 100, 100)
        resized = resize_region(region, 120, 640, 480, PASSPORT, height=90, free_form=True)
        assert (resized.width, resized.height) == (120, 90)

    def test_resize_region_never_exceeds_container(self):
        """An oversized request is capped to the container."""
        region = CropRegion(0, 0, 100, 150)
        resized = resize_region(region, 5000, 640, 480, PASSPORT)
        assert resized.right <= 640 and resized.bottom <= 480

    def test_region_dict_round_trip(self):
        """to_dict/from_dict preserve every field."""
        region = CropRegion(1, 2, 3, 4, zoom=1.5, rotation_degrees=90)
        assert CropRegion.from_dict(region.to_dict()) == region


class TestSourceMapping:
    """Tests for compute_crop_source_rect."""

    def test_identity_mapping(self):
        """Display size equal to natural size maps one to one."""
        rect = compute_crop_source_rect(CropRegion(10, 20, 30, 40), (100, 100), (100, 100))
        assert rect == SourceRect(10, 20, 30, 40)

    def test_scaled_mapping(self):
        """Coordinates scale by natural/display."""
        rect = compute_crop_source_rect(CropRegion(100, 50, 300, 200), (640, 480), (1280, 960))
        assert rect == SourceRect(200, 100, 600, 400)

    def test_trimmed_at_source_edge(self):
        """The rectangle never extends past the source."""
        rect = compute_crop_source_rect(CropRegion(90, 90, 50, 50), (100, 100), (100, 100))
        assert rect.x + rect.width <= 100
        assert rect.y + rect.height <= 100

    def test_trim_keeps_ratio(self):
        """Both edges shrink together when the rectangle hits the source edge."""
        rect = compute_crop_source_rect(CropRegion(90, 80, 20, 30), (100, 100), (100, 100))
        assert rect == SourceRect(90, 80, 10, 15)

    def test_overhanging_region_keeps_passport_ratio(self):
        rect = compute_crop_source_rect(CropRegion(100, 50, 300, 450), (640, 480), (1280, 960))
        assert rect == SourceRect(200, 100, 573, 860)
        assert rect.width / rect.height == pytest.approx(2 / 3, abs=0.01)

    def test_as_box(self):
        assert SourceRect(1, 2, 3, 4).as_box() == (1, 2, 4, 6)


class TestLayout:
    """Tests for contain-fit and output sizing."""

    def test_fit_within_landscape(self):
        """A landscape image fits to the box width."""
        assert fit_within(1280, 720, 640, 480) == pytest.approx((640, 360))

    def test_fit_within_portrait(self):
        """A portrait image fits to the box height."""
        assert fit_within(600, 900, 640, 480) == pytest.approx((320, 480))

    def test_center_offset(self):
        assert center_offset((100, 100), (40, 60)) == (30, 20)

    def test_crop_output_size_passport(self):
        """Passport crops are 400 px tall."""
        assert crop_output_size(PASSPORT) == (267, 400)

    def test_crop_output_size_square(self):
        assert crop_output_size(1.0) == (400, 400)

    def test_template_canvas_size(self):
        """Template canvases are 800 px on the long edge."""
        assert template_canvas_size(3 / 4) == (600, 800)
        assert template_canvas_size(1.0) == (800, 800)

    def test_limit_size_never_enlarges(self):
        assert limit_size(100, 200, 800, 1200) == (100, 200)

    def test_limit_size_shrinks(self):
        """Width is limited first, then height."""
        assert limit_size(1600, 1200, 800, 1200) == (800, 600)
        assert limit_size(800, 2400, 800, 1200) == (400, 1200)
