"""Rise Profile Engine for the Spiral Handrail Studio.
Maps an arc distance along the spiral to a vertical rise by scaling a measured
reference profile and merging in any manual rise overrides.

All functions here are pure: they hold no state between calls and never raise
for numeric input. Zero or negative totals are not rejected; the caller is
expected to keep parameters in a physically meaningful range.
"""
import math
from bisect import bisect_left
from functools import lru_cache
from typing import Mapping, NamedTuple, Optional, Sequence


class RisePoint(NamedTuple):
    """One sample of the rise-vs-arc curve (inches)."""
    arc: float
    rise: float


# Measured from one finished 220 degree rail: 17.5" of arc, 1" pitch block, 8 3/8" top.
REFERENCE_PROFILE = (
    RisePoint(0.0, 1.0), RisePoint(1.0, 1.5), RisePoint(2.0, 2.0), RisePoint(3.0, 2.5),
    RisePoint(4.0, 2.875), RisePoint(5.0, 3.3125), RisePoint(6.0, 3.625), RisePoint(7.0, 4.0),
    RisePoint(8.0, 4.375), RisePoint(9.0, 4.626), RisePoint(10.0, 4.9), RisePoint(11.0, 5.25),
    RisePoint(12.0, 5.5625), RisePoint(13.0, 5.875), RisePoint(14.0, 6.25), RisePoint(15.0, 6.625),
    RisePoint(16.0, 7.125), RisePoint(17.0, 7.5625), RisePoint(17.5, 8.375),
)

BASE_ARC_DISTANCE = 17.5
BASE_RISE = 7.375
BASE_PITCH_BLOCK = 1.0

# Overrides are keyed on thousandths of an inch so UI step increments
# (0.5", 0.125") always land on the same key.
ARC_KEY_SCALE = 1000


class ScaledProfile(NamedTuple):
    """The reference profile rescaled to one set of target dimensions."""
    arc_scale: float
    rise_scale: float
    pitch_block_diff: float
    points: tuple
    extrapolation_rate: float

    @property
    def end(self) -> RisePoint:
        return self.points[-1]

    def rise_beyond_end(self, arc: float) -> float:
        """Linear continuation past the last scaled point (next flight)."""
        return self.end.rise + self.extrapolation_rate * (arc - self.end.arc)


@lru_cache(maxsize=64)
def scale_profile(total_arc_distance: float, total_helical_rise: float,
                  pitch_block: float) -> ScaledProfile:
    """Rescale the reference profile to the target arc, rise and pitch block.

    The arc axis scales by total_arc_distance / 17.5 and the rise above the base
    pitch block scales by total_helical_rise / 7.375. The pitch block difference
    is then added as a constant, so a taller block shifts the whole curve up
    rather than stretching it.
    """
    arc_scale = total_arc_distance / BASE_ARC_DISTANCE
    rise_scale = total_helical_rise / BASE_RISE
    pitch_block_diff = pitch_block - BASE_PITCH_BLOCK

    points = tuple(
        RisePoint(
            p.arc * arc_scale,
            BASE_PITCH_BLOCK + (p.rise - BASE_PITCH_BLOCK) * rise_scale + pitch_block_diff,
        )
        for p in REFERENCE_PROFILE
    )

    base_rate = (REFERENCE_PROFILE[-1].rise - BASE_PITCH_BLOCK) / BASE_ARC_DISTANCE
    return ScaledProfile(arc_scale, rise_scale, pitch_block_diff, points, base_rate * rise_scale)


def interpolate(query_arc: float, points: Sequence[RisePoint]) -> float:
    """Linear interpolation over an ascending, duplicate-free point sequence.

    Below the first point the first rise is held flat. At or past the last
    point the slope of the final two points is continued. An empty sequence
    gives 0.
    """
    if not points:
        return 0.0
    if math.isnan(query_arc):
        return query_arc

    first = points[0]
    last = points[-1]
    if query_arc <= first.arc:
        return first.rise

    if query_arc >= last.arc:
        if len(points) < 2:
            return last.rise
        prev = points[-2]
        rate = (last.rise - prev.rise) / (last.arc - prev.arc)
        return last.rise + rate * (query_arc - last.arc)

    arcs = [p.arc for p in points]
    upper_idx = bisect_left(arcs, query_arc)
    if 0 < upper_idx < len(points):
        lower = points[upper_idx - 1]
        upper = points[upper_idx]
        if upper.arc == query_arc:
            return upper.rise
        factor = (query_arc - lower.arc) / (upper.arc - lower.arc)
        return lower.rise + factor * (upper.rise - lower.rise)

    # Only reachable for unsorted input.
    return last.rise


def calculate_rise_at_distance(query_arc: float, total_helical_rise: float,
                               total_arc_distance: float, pitch_block: float) -> float:
    """Rise at query_arc computed purely from the scaled reference profile."""
    profile = scale_profile(total_arc_distance, total_helical_rise, pitch_block)
    if query_arc > profile.end.arc:
        return profile.rise_beyond_end(query_arc)
    return interpolate(query_arc, profile.points)


def arc_key(arc: float) -> int:
    """Fixed-precision integer key for an arc distance."""
    return int(round(arc * ARC_KEY_SCALE))


def normalize_overrides(manual_overrides: Optional[Mapping[float, float]]) -> dict:
    """Re-key manual overrides by arc_key. Later colliding entries win.

    Entries whose arc is NaN or infinite have no key and are left out.
    """
    if not manual_overrides:
        return {}
    return {arc_key(float(arc)): float(rise)
            for arc, rise in manual_overrides.items() if math.isfinite(float(arc))}


def fill_positions(total_arc_distance: float, fill_step: float = 1.0) -> list:
    """Arc positions that receive a calculated point in the merged set."""
    if total_arc_distance < 0:
        return []
    count = math.ceil(total_arc_distance / fill_step)
    return [k * fill_step for k in range(count + 1)]


def merged_points(manual_overrides: Optional[Mapping[float, float]], total_arc_distance: float,
                  total_helical_rise: float = BASE_RISE, pitch_block: float = BASE_PITCH_BLOCK,
                  fill_step: Optional[float] = 1.0) -> list:
    """Manual overrides plus calculated fill points, sorted by arc.

    Overrides beyond total_arc_distance are dropped. A calculated point is
    added at every fill position without an override at that exact arc, even
    one that was dropped for lying past the end. fill_step=None (or any step
    that is not a positive finite number) leaves the overrides on their own.
    A NaN or infinite total arc distance gives an empty set.
    """
    if not math.isfinite(total_arc_distance):
        return []

    overrides = normalize_overrides(manual_overrides)
    limit = arc_key(total_arc_distance)

    by_key = {key: RisePoint(key / ARC_KEY_SCALE, rise)
              for key, rise in overrides.items() if key <= limit}

    if fill_step is not None and fill_step > 0 and math.isfinite(fill_step):
        for arc in fill_positions(total_arc_distance, fill_step):
            key = arc_key(arc)
            # An override past the arc end still claims its fill position
            if key not in overrides:
                by_key[key] = RisePoint(
                    arc, calculate_rise_at_distance(arc, total_helical_rise, total_arc_distance, pitch_block)
                )

    return [by_key[key] for key in sorted(by_key)]


def get_current_rise_at_distance(query_arc: float, manual_overrides: Optional[Mapping[float, float]],
                                 calculated_cache: Optional[Mapping[float, float]],
                                 total_arc_distance: float, total_helical_rise: float = BASE_RISE,
                                 pitch_block: float = BASE_PITCH_BLOCK,
                                 fill_step: Optional[float] = 1.0) -> float:
    """Rise at query_arc honouring any manual overrides.

    Args:
        query_arc: Arc distance to evaluate (inches).
        manual_overrides: arc -> rise entered by the user. Empty means direct calculation.
        calculated_cache: Caller's cached rise data. Accepted for symmetry with the
            table views; the value is always recomputed here.
        total_arc_distance: Scaled profile length.
        total_helical_rise: Rise above the pitch block over the full arc.
        pitch_block: Pitch block height.
        fill_step: Spacing of calculated points merged between overrides.
            None interpolates between the overrides alone.
    """
    if not manual_overrides:
        return calculate_rise_at_distance(query_arc, total_helical_rise, total_arc_distance, pitch_block)

    points = merged_points(manual_overrides, total_arc_distance, total_helical_rise,
                           pitch_block, fill_step)
    if not points:
        return calculate_rise_at_distance(query_arc, total_helical_rise, total_arc_distance, pitch_block)
    return interpolate(query_arc, points)
