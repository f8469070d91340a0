"""Rise tables for the Spiral Handrail Studio.
Builds the segment and reference tables shown alongside the model, the
calculated rise data the override inputs are seeded from, and the review of
manual overrides against the calculated values.
"""
import math
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from rise_profile import (
    ARC_KEY_SCALE,
    arc_key,
    calculate_rise_at_distance,
    get_current_rise_at_distance,
    normalize_overrides,
)
from handrail_generator import (
    BOTTOM_OVER_EASE,
    MAIN_SPIRAL,
    TOP_UP_EASE,
    section_at,
    segment_position,
)

SEGMENT_SECTIONS = {
    BOTTOM_OVER_EASE: "Bottom Over-Ease",
    MAIN_SPIRAL: "Main Spiral",
    TOP_UP_EASE: "Top Up-Ease",
}
REFERENCE_SECTIONS = {
    BOTTOM_OVER_EASE: "Over-Ease",
    MAIN_SPIRAL: "Main Spiral",
    TOP_UP_EASE: "Up-Ease",
}

SEGMENT_HEADERS = ["Segment", "Section", "Angle (°)", "Arc Distance (in)", "Rise (in)"]
REFERENCE_HEADERS = ["Arc Distance (in)", "Section", "Angle (°)", "Rise (in)"]

# Manual values further than this from the calculated rise get flagged.
LARGE_DIFFERENCE = 0.5
INPUT_STEP = 0.5


class SegmentRow(BaseModel):
    kind: Literal["segment"] = "segment"
    segment: int
    section: Literal["Bottom Over-Ease", "Main Spiral", "Top Up-Ease"]
    angle: float
    arc_distance: float
    rise: float


class ReferenceRow(BaseModel):
    kind: Literal["reference"] = "reference"
    arc_distance: float
    section: Literal["Over-Ease", "Main Spiral", "Up-Ease"]
    angle: float
    rise: float


TableRow = Annotated[Union[SegmentRow, ReferenceRow], Field(discriminator="kind")]


class OverrideInput(BaseModel):
    """One half-inch override input as the adjustment panel shows it."""
    arc_distance: float
    current: Optional[float]
    calculated: Optional[float]
    is_manual: bool
    difference: float
    warning: bool


class OverrideSummary(BaseModel):
    manual_count: int
    manual_avg: float
    manual_min: float
    manual_max: float
    calculated_count: int
    calculated_avg: float
    calculated_min: float
    calculated_max: float
    total_inputs: int
    manual_percent: float
    auto_percent: float
    large_differences: int


class OverrideReview(BaseModel):
    inputs: list[OverrideInput]
    summary: OverrideSummary


def _rise(config, manual_overrides, arc):
    return get_current_rise_at_distance(
        arc,
        manual_overrides,
        None,
        config["total_arc_distance"],
        config["total_helical_rise"],
        config["pitch_block"],
    )


def build_segment_table(config, manual_overrides=None):
    """One row per segment boundary, 0..total_segments."""
    segments = int(config["total_segments"])
    if segments <= 0:
        return []

    rows = []
    for i in range(segments + 1):
        frac = i / segments
        arc = frac * config["total_arc_distance"]
        rows.append(SegmentRow(
            segment=i,
            section=SEGMENT_SECTIONS[section_at(i, config)],
            angle=frac * config["total_degrees"],
            arc_distance=arc,
            rise=_rise(config, manual_overrides, arc),
        ))
    return rows


def build_reference_table(config, manual_overrides=None, step=INPUT_STEP):
    """One row every `step` inches of arc from 0 up to the total arc distance."""
    total_arc = config["total_arc_distance"]
    if total_arc < 0 or step <= 0:
        return []

    rows = []
    for k in range(int(math.floor(total_arc / step)) + 1):
        arc = k * step
        frac = arc / total_arc if total_arc else 0.0
        rows.append(ReferenceRow(
            arc_distance=arc,
            section=REFERENCE_SECTIONS[section_at(segment_position(arc, config), config)],
            angle=frac * config["total_degrees"],
            rise=_rise(config, manual_overrides, arc),
        ))
    return rows


def calculate_rise_data(config, step=INPUT_STEP):
    """
    Calculated rise data (no overrides) every `step` inches up to the total arc
    distance, plus every whole inch up to its ceiling.
    """
    total_arc = config["total_arc_distance"]
    if total_arc < 0:
        return {}

    arcs = {k * step for k in range(int(math.floor(total_arc / step)) + 1)}
    arcs.update(float(inch) for inch in range(math.ceil(total_arc) + 1))

    return {
        arc: calculate_rise_at_distance(arc, config["total_helical_rise"], total_arc, config["pitch_block"])
        for arc in sorted(arcs)
    }


def _stats(values):
    if not values:
        return 0.0, 0.0, 0.0
    return sum(values) / len(values), min(values), max(values)


def review_overrides(config, manual_overrides, calculated=None):
    """
    Compares manual overrides with the calculated rise at every half-inch input.

    Args:
        config: Handrail parameters.
        manual_overrides: arc -> rise entered by the user.
        calculated: Calculated rise data to compare against; recalculated when omitted.
    """
    total_arc = config["total_arc_distance"]
    if calculated is None:
        calculated = calculate_rise_data(config)

    overrides = normalize_overrides(manual_overrides)
    calc_by_key = {arc_key(arc): rise for arc, rise in calculated.items()}

    inputs = []
    total_inputs = max(0, math.ceil(total_arc * 2) + 1)
    for k in range(total_inputs):
        arc = k * INPUT_STEP
        if arc > total_arc:
            continue
        key = arc_key(arc)
        calc = calc_by_key.get(key)
        is_manual = key in overrides
        current = overrides[key] if is_manual else calc
        difference = abs(current - calc) if is_manual and calc is not None else 0.0
        inputs.append(OverrideInput(
            arc_distance=arc,
            current=current,
            calculated=calc,
            is_manual=is_manual,
            difference=difference,
            warning=difference > LARGE_DIFFERENCE,
        ))

    large = 0
    for key, rise in overrides.items():
        # Compare against the nearest half-inch calculated value
        nearest = arc_key(round(key / ARC_KEY_SCALE * 2) / 2)
        calc = calc_by_key.get(nearest)
        if calc is not None and abs(rise - calc) > LARGE_DIFFERENCE:
            large += 1

    manual_values = list(overrides.values())
    calc_values = list(calculated.values())
    m_avg, m_min, m_max = _stats(manual_values)
    c_avg, c_min, c_max = _stats(calc_values)
    manual_percent = len(manual_values) / total_inputs * 100 if total_inputs else 0.0

    summary = OverrideSummary(
        manual_count=len(manual_values),
        manual_avg=m_avg,
        manual_min=m_min,
        manual_max=m_max,
        calculated_count=len(calc_values),
        calculated_avg=c_avg,
        calculated_min=c_min,
        calculated_max=c_max,
        total_inputs=total_inputs,
        manual_percent=manual_percent,
        auto_percent=100.0 - manual_percent if total_inputs else 0.0,
        large_differences=large,
    )
    return OverrideReview(inputs=inputs, summary=summary)


def headers_for(row):
    kind = getattr(row, "kind", None)
    if kind == "segment":
        return SEGMENT_HEADERS
    if kind == "reference":
        return REFERENCE_HEADERS
    raise TypeError(f"Unknown table row kind: {kind!r}")


def format_row(row):
    """Display strings for one table row, in column order."""
    kind = getattr(row, "kind", None)
    if kind == "segment":
        return [
            str(row.segment),
            row.section,
            f"{row.angle:.1f}°",
            f'{row.arc_distance:.3f}"',
            f'{row.rise:.3f}"',
        ]
    if kind == "reference":
        return [
            f'{row.arc_distance:.3f}"',
            row.section,
            f"{row.angle:.1f}°",
            f'{row.rise:.3f}"',
        ]
    raise TypeError(f"Unknown table row kind: {kind!r}")


def format_table(rows):
    """Plain-text table for console output."""
    if not rows:
        return ""
    lines = [" | ".join(headers_for(rows[0]))]
    lines.extend(" | ".join(format_row(r)) for r in rows)
    return "\n".join(lines)
