"""Handrail Generator for the Spiral Handrail Studio.
Places the 3D rail points around the spiral from the rise engine and sweeps
round profiles along them for export.
"""
from build123d import *
import math

from rise_profile import get_current_rise_at_distance
from inside_line import calculate_inside_line_rise_and_run

BOTTOM_OVER_EASE = "bottom_over_ease"
MAIN_SPIRAL = "main_spiral"
TOP_UP_EASE = "top_up_ease"

# Straight length the bottom over-ease runs out along its easement angle.
EASEMENT_LENGTH = 2.0


def outer_radius(config):
    return config["base_radius"] + config.get("bottom_offset", 0.0)


def inner_radius(config):
    return config["base_radius"] - config.get("top_offset", 0.0)


def segment_position(arc_distance, config):
    """Position along the rail measured in segments (0..total_segments)."""
    total_arc = config["total_arc_distance"]
    if total_arc == 0:
        return 0.0
    return arc_distance / total_arc * config["total_segments"]


def section_at(seg_position, config):
    if seg_position <= config["bottom_length"]:
        return BOTTOM_OVER_EASE
    if seg_position >= config["total_segments"] - config["top_length"]:
        return TOP_UP_EASE
    return MAIN_SPIRAL


def smoothstep(t):
    return t * t * (3 - 2 * t)


def up_ease_factor(t):
    """Smoothstep with three damped sine layers; 0 at t=0 and 1 at t=1."""
    return (smoothstep(t)
            + math.sin(t * math.pi) * 0.1
            + math.sin(t * math.pi * 2) * 0.05
            + math.sin(t * math.pi * 4) * 0.025)


def get_outer_rail_path(config, manual_overrides=None, steps=200):
    """
    Calculates the 3D centreline of the outer rail.
    Main spiral points sit on the outer radius at the resolved rise. The bottom
    over-ease starts below the pitch block (dropped along the easement angle) and
    blends into the spiral rise; the top up-ease eases from the spiral end up to
    pitch block + helical rise at the full angular span.
    """
    radius = outer_radius(config)
    total_arc = config["total_arc_distance"]
    total_deg = config["total_degrees"]
    segments = config["total_segments"]
    pitch_block = config["pitch_block"]
    helical_rise = config["total_helical_rise"]
    bottom_len = config["bottom_length"]
    top_len = config["top_length"]

    def rise_at(arc):
        return get_current_rise_at_distance(arc, manual_overrides, None, total_arc, helical_rise, pitch_block)

    # Where the up-ease takes over from the spiral
    top_start_pos = segments - top_len
    top_start_frac = top_start_pos / segments if segments else 1.0
    top_start_angle = top_start_frac * total_deg
    top_start_rise = rise_at(top_start_frac * total_arc)
    end_rise = pitch_block + helical_rise

    ease_drop = math.sin(math.radians(abs(config["easement_angle"]))) * EASEMENT_LENGTH
    bottom_start_rise = pitch_block - ease_drop

    pts = []
    for i in range(steps + 1):
        t = i / steps
        arc = t * total_arc
        angle_deg = t * total_deg
        seg_pos = segment_position(arc, config)
        section = section_at(seg_pos, config)

        if section == BOTTOM_OVER_EASE:
            ease_t = seg_pos / bottom_len if bottom_len > 0 else 1.0
            z = bottom_start_rise + (rise_at(arc) - bottom_start_rise) * smoothstep(ease_t)
        elif section == TOP_UP_EASE:
            ease_t = (seg_pos - top_start_pos) / top_len if top_len > 0 else 1.0
            f = up_ease_factor(ease_t)
            angle_deg = top_start_angle + (total_deg - top_start_angle) * f
            z = top_start_rise + (end_rise - top_start_rise) * f
        else:
            z = rise_at(arc)

        a = math.radians(angle_deg)
        pts.append(Vector(radius * math.cos(a), radius * math.sin(a), z))

    return pts


def get_inside_line_path(config, steps=200):
    """
    Calculates the inside reference line: the full angular span on the inner
    radius, rising over the (shorter) inside arc distance.
    """
    radius = inner_radius(config)
    inside_arc = config["inside_arc_distance"]

    pts = []
    for i in range(steps + 1):
        t = i / steps
        sample = calculate_inside_line_rise_and_run(
            t * inside_arc,
            config["total_helical_rise"],
            inside_arc,
            config["total_degrees"],
            config["pitch_block"],
        )
        a = math.radians(sample.angle)
        pts.append(Vector(radius * math.cos(a), radius * math.sin(a), sample.rise))

    return pts


def _sweep_round(pts, diameter):
    with BuildPart() as rail:
        with BuildLine() as p_line:
            Spline(pts)
        path_wire = p_line.wires()[0]

        with BuildSketch(Plane(pts[0], z_dir=path_wire.tangent_at(0))):
            Circle(diameter / 2)

        sweep(path=path_wire, transition=Transition.ROUND)

    return rail.part


def build_handrail(config, manual_overrides=None, steps=60):
    """
    Builds the outer rail solid by sweeping a round profile along a spline
    through the rail path. Falls back to the bare path wire if the sweep fails.
    """
    pts = get_outer_rail_path(config, manual_overrides, steps=steps)

    try:
        return _sweep_round(pts, config["rail_diameter"])
    except Exception as e:
        print(f"  [!] Handrail sweep fallback: {e}", flush=True)
        with BuildLine() as backup:
            Polyline(*pts)
        return backup.wires()[0]


def build_inside_line(config, steps=60):
    """
    Builds a thin tube along the inside reference line so it shows up in exports.
    Returns None if the sweep fails.
    """
    pts = get_inside_line_path(config, steps=steps)

    try:
        return _sweep_round(pts, config["rail_diameter"] / 2)
    except Exception as e:
        print(f"  [!] Inside line sweep fallback: {e}", flush=True)
        return None
