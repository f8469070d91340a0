"""Inside line calculations for the Spiral Handrail Studio.
The inside line follows the same rise profile as the outer rail, scaled to its
own (shorter) arc distance and run on the smaller inner radius.
"""
import math
from typing import NamedTuple, Optional

from rise_profile import calculate_rise_at_distance

# 10.5" diameter well
DEFAULT_INNER_RADIUS = 5.25
# Inputs at or below this are taken as a radius, above it as a diameter.
RADIUS_DIAMETER_CUTOFF = 2.5


class InsideLinePoint(NamedTuple):
    rise: float
    run: float
    angle: float


def resolve_inner_radius(custom_inner_radius: Optional[float] = None) -> float:
    """Inner radius from an optional custom value that may be a radius or a diameter."""
    if not custom_inner_radius:
        return DEFAULT_INNER_RADIUS
    if custom_inner_radius <= RADIUS_DIAMETER_CUTOFF:
        return custom_inner_radius
    return custom_inner_radius / 2


def inner_radius_from_run_distance(inside_run_distance: float, total_degrees: float) -> float:
    return inside_run_distance / math.radians(total_degrees)


def inside_run_distance(total_degrees: float, custom_inner_radius: Optional[float] = None) -> float:
    """Horizontal run of the inside line over the full angular span."""
    return resolve_inner_radius(custom_inner_radius) * math.radians(total_degrees)


def _inside_point(arc_distance, total_helical_rise, inside_arc_distance, total_degrees,
                  pitch_block, radius):
    angle = (arc_distance / inside_arc_distance) * total_degrees

    base_rise = calculate_rise_at_distance(arc_distance, total_helical_rise, inside_arc_distance, pitch_block)
    # The inside line sits on a lower block: 80% of the outer one, never under 0.5".
    inside_pitch_block = max(0.5, pitch_block * 0.8)
    rise = base_rise - (pitch_block - inside_pitch_block)

    run = radius * math.radians(angle)
    return InsideLinePoint(rise=max(0.0, rise), run=max(0.0, run), angle=angle)


def calculate_inside_line_rise_and_run(arc_distance, total_helical_rise, inside_arc_distance,
                                       total_degrees, pitch_block, custom_inner_radius=None):
    """Rise, run and angle of the inside line at arc_distance."""
    radius = resolve_inner_radius(custom_inner_radius)
    return _inside_point(arc_distance, total_helical_rise, inside_arc_distance,
                         total_degrees, pitch_block, radius)


def calculate_inside_line_data(total_helical_rise, inside_arc_distance, inside_run_distance,
                               total_degrees, pitch_block):
    """
    Inside line samples keyed by arc distance: every 0.5" up to the inside arc
    distance plus every whole inch up to its ceiling.
    The inner radius is recovered from the measured inside run distance and used as is.
    """
    radius = inner_radius_from_run_distance(inside_run_distance, total_degrees)

    arcs = set()
    if inside_arc_distance >= 0:
        arcs.update(i * 0.5 for i in range(int(math.floor(inside_arc_distance * 2)) + 1))
        arcs.update(float(inch) for inch in range(math.ceil(inside_arc_distance) + 1))

    return {
        arc: _inside_point(arc, total_helical_rise, inside_arc_distance, total_degrees, pitch_block, radius)
        for arc in sorted(arcs)
    }
