"""Export helpers for the Spiral Handrail Studio.
CSV copies of the rise tables and a DXF stretch-out of the rise profile
(arc distance along X, rise along Y) for laying out the rail on the bench.
"""
import io
import csv
import math

import ezdxf

from rise_profile import get_current_rise_at_distance, normalize_overrides, ARC_KEY_SCALE
from rise_tables import format_row, headers_for

# Samples per inch of arc along the DXF profile polyline
DXF_SAMPLES_PER_INCH = 8


def generate_csv(rows):
    """
    Writes table rows (all segment rows or all reference rows) as CSV.

    Args:
        rows: list of SegmentRow or ReferenceRow.

    Returns:
        str: A formatted CSV string (header only when rows is empty).
    """
    output = io.StringIO()
    writer = csv.writer(output)
    if not rows:
        return output.getvalue()

    writer.writerow(headers_for(rows[0]))
    for row in rows:
        writer.writerow(format_row(row))

    return output.getvalue()


def generate_dxf(config, manual_overrides=None):
    """
    Draws the rise profile as a 1:1 stretch-out.
    Layers: RISE_PROFILE (the rail centreline), PITCH_BLOCK (block height line),
    LABELS (rise at each whole inch), OVERRIDES (circles on manual points).
    """
    total_arc = config["total_arc_distance"]
    helical_rise = config["total_helical_rise"]
    pitch_block = config["pitch_block"]

    doc = ezdxf.new()
    doc.layers.add("RISE_PROFILE", color=5)
    doc.layers.add("PITCH_BLOCK", color=1)
    doc.layers.add("LABELS", color=7)
    doc.layers.add("OVERRIDES", color=30)
    msp = doc.modelspace()

    def rise_at(arc):
        return get_current_rise_at_distance(arc, manual_overrides, None, total_arc, helical_rise, pitch_block)

    samples = max(2, int(math.ceil(max(total_arc, 0.0) * DXF_SAMPLES_PER_INCH)) + 1)
    profile = []
    for i in range(samples):
        arc = total_arc * i / (samples - 1)
        profile.append((arc, rise_at(arc)))
    msp.add_lwpolyline(profile, dxfattribs={"layer": "RISE_PROFILE"})

    msp.add_line((0, pitch_block), (total_arc, pitch_block), dxfattribs={"layer": "PITCH_BLOCK"})

    for inch in range(int(math.floor(max(total_arc, 0.0))) + 1):
        rise = rise_at(float(inch))
        msp.add_text(f'{rise:.3f}"', dxfattribs={
            "layer": "LABELS",
            "height": 0.125,
        }).set_placement((inch, rise + 0.25))

    for key, rise in normalize_overrides(manual_overrides).items():
        arc = key / ARC_KEY_SCALE
        if arc <= total_arc:
            msp.add_circle((arc, rise), radius=0.0625, dxfattribs={"layer": "OVERRIDES"})

    dxf_buffer = io.StringIO()
    doc.write(dxf_buffer)
    return dxf_buffer.getvalue()
