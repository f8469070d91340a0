"""Geometry unit tests for the Spiral Handrail Studio.

Tests the inside line calculations, the 3D rail path placement and the
build123d handrail builder across a range of parameter combinations.
"""
import sys
import os
import math
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from inside_line import (
    DEFAULT_INNER_RADIUS,
    calculate_inside_line_data,
    calculate_inside_line_rise_and_run,
    inner_radius_from_run_distance,
    inside_run_distance,
    resolve_inner_radius,
)
from handrail_generator import (
    BOTTOM_OVER_EASE,
    MAIN_SPIRAL,
    TOP_UP_EASE,
    build_handrail,
    get_inside_line_path,
    get_outer_rail_path,
    inner_radius,
    outer_radius,
    section_at,
    segment_position,
    smoothstep,
    up_ease_factor,
)
from spiral_handrail import build_spiral_handrail, total_rise, parse_override


# ===========================================================================
# INSIDE LINE
# ===========================================================================

class TestInsideLine:
    def test_default_inner_radius(self):
        assert resolve_inner_radius() == DEFAULT_INNER_RADIUS == 5.25

    def test_small_values_are_radii(self):
        assert resolve_inner_radius(2.0) == 2.0
        assert resolve_inner_radius(2.5) == 2.5

    def test_large_values_are_diameters(self):
        assert resolve_inner_radius(10.5) == 5.25

    def test_run_distance_round_trip(self):
        run = inside_run_distance(220)
        assert run == pytest.approx(5.25 * math.radians(220))
        assert inner_radius_from_run_distance(run, 220) == pytest.approx(5.25)

    def test_start_sits_below_outer_block(self):
        """Inside block is 80% of the outer block: 1.0" -> 0.8"."""
        p = calculate_inside_line_rise_and_run(0.0, 7.375, 10.5, 220, 1.0)
        assert p.angle == 0.0
        assert p.run == 0.0
        assert p.rise == pytest.approx(0.8)

    def test_end_of_inside_arc(self):
        p = calculate_inside_line_rise_and_run(10.5, 7.375, 10.5, 220, 1.0)
        assert p.angle == pytest.approx(220.0)
        assert p.rise == pytest.approx(8.375 - 0.2)
        assert p.run == pytest.approx(5.25 * math.radians(220))

    def test_inside_block_never_below_half_inch(self):
        """With a 0.5" outer block the inside block stays at 0.5" (no offset)."""
        p = calculate_inside_line_rise_and_run(0.0, 7.375, 10.5, 220, 0.5)
        assert p.rise == pytest.approx(0.5)

    def test_rise_and_run_clamped_at_zero(self):
        p = calculate_inside_line_rise_and_run(-2.0, 7.375, 10.5, 220, 0.0)
        assert p.rise >= 0.0
        assert p.run == 0.0

    def test_data_keys(self):
        """Half-inch samples to 10.5" plus whole inches to 11"."""
        data = calculate_inside_line_data(7.375, 10.5, 20.0, 220, 1.0)
        assert list(data)[0] == 0.0
        assert 10.5 in data
        assert 11.0 in data
        assert len(data) == 23

    def test_data_uses_radius_from_run_distance(self):
        data = calculate_inside_line_data(7.375, 10.5, 20.0, 220, 1.0)
        assert data[10.5].run == pytest.approx(20.0)


# ===========================================================================
# RAIL PATH
# ===========================================================================

class TestRailPath:
    def test_radii(self, default_config):
        assert outer_radius(default_config) == pytest.approx(6.125)
        assert inner_radius(default_config) == pytest.approx(2.75)

    def test_segment_position(self, default_config):
        assert segment_position(0.0, default_config) == 0.0
        assert segment_position(17.5, default_config) == pytest.approx(10.0)
        assert segment_position(8.75, default_config) == pytest.approx(5.0)

    def test_sections(self, default_config):
        assert section_at(0.0, default_config) == BOTTOM_OVER_EASE
        assert section_at(1.5, default_config) == BOTTOM_OVER_EASE
        assert section_at(5.0, default_config) == MAIN_SPIRAL
        assert section_at(8.0, default_config) == TOP_UP_EASE
        assert section_at(10.0, default_config) == TOP_UP_EASE

    def test_easing_endpoints(self):
        assert smoothstep(0.0) == 0.0
        assert smoothstep(1.0) == 1.0
        assert up_ease_factor(0.0) == pytest.approx(0.0)
        assert up_ease_factor(1.0) == pytest.approx(1.0)

    def test_point_count(self, default_config):
        assert len(get_outer_rail_path(default_config)) == 201
        assert len(get_outer_rail_path(default_config, steps=40)) == 41

    def test_all_points_on_outer_radius(self, default_config):
        for p in get_outer_rail_path(default_config):
            assert math.hypot(p.X, p.Y) == pytest.approx(6.125)

    def test_bottom_starts_below_pitch_block(self, default_config):
        """Over-ease start is dropped along the easement angle over 2"."""
        first = get_outer_rail_path(default_config)[0]
        expected = 1.0 - math.sin(math.radians(35.08)) * 2.0
        assert first.Z == pytest.approx(expected)
        assert first.Y == pytest.approx(0.0, abs=1e-9)

    def test_main_spiral_follows_rise_engine(self, default_config):
        """Midpoint of the path (8.75" arc, 110 degrees) uses the reference rise."""
        mid = get_outer_rail_path(default_config)[100]
        assert mid.Z == pytest.approx(4.375 + 0.75 * (4.626 - 4.375))
        assert math.degrees(math.atan2(mid.Y, mid.X)) == pytest.approx(110.0)

    def test_top_ends_at_total_rise(self, default_config):
        last = get_outer_rail_path(default_config)[-1]
        assert last.Z == pytest.approx(total_rise(default_config))
        assert math.degrees(math.atan2(last.Y, last.X)) % 360 == pytest.approx(220.0)

    def test_manual_override_moves_path(self, default_config):
        mid = get_outer_rail_path(default_config, manual_overrides={8.75: 6.0})[100]
        assert mid.Z == pytest.approx(6.0)

    def test_zero_easements(self, default_config):
        """No easements: the path is the plain spiral from pitch block to top."""
        config = dict(default_config, bottom_length=0.0, top_length=0.0)
        pts = get_outer_rail_path(config)
        assert pts[0].Z == pytest.approx(1.0)
        assert pts[-1].Z == pytest.approx(8.375)

    def test_inside_line_path(self, default_config):
        pts = get_inside_line_path(default_config)
        assert len(pts) == 201
        assert pts[0].Z == pytest.approx(0.8)
        assert pts[-1].Z == pytest.approx(8.175)
        for p in pts:
            assert math.hypot(p.X, p.Y) == pytest.approx(2.75)


# ===========================================================================
# HANDRAIL BUILDER
# ===========================================================================

class TestHandrailBuilder:
    def test_default_config_builds(self, default_config):
        """Default config produces a handrail part."""
        result = build_handrail(default_config)
        assert result is not None

    def test_scaled_config_builds(self, scaled_config):
        result = build_handrail(scaled_config, {5.0: 3.5})
        assert result is not None

    def test_build_returns_categories(self, default_config):
        elements = build_spiral_handrail(default_config)
        assert set(elements.keys()) == {"handrail", "inside_line"}
        assert len(elements["handrail"]) == 1

    def test_handrail_has_volume(self, default_config):
        """The swept rail is a solid with positive volume."""
        rail = build_handrail(default_config)
        if hasattr(rail, "volume") and rail.volume > 0:
            bb = rail.bounding_box()
            # Rail spans roughly the outer diameter and the full rise
            assert bb.size.Z > 7.0
            assert bb.size.X > 6.0
        else:
            import warnings
            warnings.warn("Handrail sweep fell back to a wire")

    def test_total_rise(self, default_config):
        assert total_rise(default_config) == pytest.approx(8.375)

    def test_parse_override(self):
        assert parse_override("5.5:3.25") == (5.5, 3.25)
