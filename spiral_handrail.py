"""Spiral Handrail Builder.
Generates a spiral handrail model from the measured rise profile for:
- Total angular span, helical rise and arc distance
- Pitch block height
- Bottom over-ease / top up-ease lengths and centre offsets
- Optional manual rise overrides

Usage:
    python spiral_handrail.py [--degrees 220] [--rise 7.375] [--arc 17.5] [--override 5:3.4]
"""
import argparse
from build123d import *

from handrail_generator import build_handrail, build_inside_line

# Default Configuration (inches / degrees), matching the measured 220 degree rail
DEFAULT_CONFIG = {
    "total_degrees": 220.0,
    "total_helical_rise": 7.375,
    "total_arc_distance": 17.5,
    "total_segments": 10,
    "pitch_block": 1.0,
    "bottom_length": 1.5,
    "top_length": 2.0,
    "bottom_offset": 1.5,
    "top_offset": 1.875,
    "base_radius": 4.625,
    "easement_angle": -35.08,
    "rail_diameter": 0.3,
    "inside_arc_distance": 10.5,
}

# Colours
C_HANDRAIL = (0.23, 0.51, 0.96)
C_INSIDE_LINE = (0.06, 0.73, 0.51)


def total_rise(config):
    """Helical rise plus the pitch block it sits on."""
    return config["total_helical_rise"] + config["pitch_block"]


def build_spiral_handrail(config, manual_overrides=None):
    """Build every handrail part from a config dict, grouped by category."""
    print(f"Building: {config['total_degrees']}deg, Rise={config['total_helical_rise']}, "
          f"Arc={config['total_arc_distance']}, PitchBlock={config['pitch_block']}, "
          f"Overrides={len(manual_overrides or {})}")

    handrail = build_handrail(config, manual_overrides)
    inside = build_inside_line(config)

    return {
        "handrail": [handrail] if handrail is not None else [],
        "inside_line": [inside] if inside is not None else [],
    }


def parse_override(text):
    """'ARC:RISE' -> (arc, rise)"""
    arc, rise = text.split(":", 1)
    return float(arc), float(rise)


if __name__ == "__main__":
    from rise_tables import build_segment_table, format_table

    parser = argparse.ArgumentParser(description="Spiral Handrail Builder")
    parser.add_argument("--degrees", type=float, default=DEFAULT_CONFIG["total_degrees"])
    parser.add_argument("--rise", type=float, default=DEFAULT_CONFIG["total_helical_rise"])
    parser.add_argument("--arc", type=float, default=DEFAULT_CONFIG["total_arc_distance"])
    parser.add_argument("--segments", type=int, default=DEFAULT_CONFIG["total_segments"])
    parser.add_argument("--pitch_block", type=float, default=DEFAULT_CONFIG["pitch_block"])
    parser.add_argument("--bottom_length", type=float, default=DEFAULT_CONFIG["bottom_length"])
    parser.add_argument("--top_length", type=float, default=DEFAULT_CONFIG["top_length"])
    parser.add_argument("--override", action="append", type=parse_override, default=[],
                        help="Manual rise override as ARC:RISE (repeatable)")
    parser.add_argument("--show", action="store_true", help="Send the model to the OCP viewer")
    args = parser.parse_args()

    config = DEFAULT_CONFIG.copy()
    config.update({
        "total_degrees": args.degrees,
        "total_helical_rise": args.rise,
        "total_arc_distance": args.arc,
        "total_segments": args.segments,
        "pitch_block": args.pitch_block,
        "bottom_length": args.bottom_length,
        "top_length": args.top_length,
    })
    overrides = dict(args.override)

    print(format_table(build_segment_table(config, overrides)))
    print(f"Total Rise (Helical + Pitch Block): {total_rise(config):.3f}\"")

    elements = build_spiral_handrail(config, overrides)
    rail = elements["handrail"][0]

    export_stl(rail, "spiral_handrail.stl")
    print("Exported: spiral_handrail.stl")

    if args.show:
        from ocp_vscode import show, set_port
        set_port(3939)
        parts = elements["handrail"] + elements["inside_line"]
        colours = [C_HANDRAIL] * len(elements["handrail"]) + [C_INSIDE_LINE] * len(elements["inside_line"])
        show(*parts, colors=colours)
