"""FastAPI backend for the Spiral Handrail Studio.
Serves rise calculations, tables and exports to the 3D visualizer, and runs
build123d server-side to hand back self-contained GLB files of the rail.
"""
import os
import json
import struct
import base64
import tempfile
from typing import Optional
from fastapi import FastAPI, HTTPException
from fastapi.responses import Response, JSONResponse
from pydantic import BaseModel, Field
from build123d import export_gltf, Compound

from rise_profile import (
    REFERENCE_PROFILE,
    BASE_ARC_DISTANCE,
    BASE_RISE,
    BASE_PITCH_BLOCK,
    get_current_rise_at_distance,
    scale_profile,
)
from inside_line import calculate_inside_line_data, inside_run_distance
from spiral_handrail import build_spiral_handrail, total_rise, DEFAULT_CONFIG, C_HANDRAIL, C_INSIDE_LINE
from rise_tables import build_segment_table, build_reference_table, review_overrides
from profile_export import generate_csv, generate_dxf
from validators.handrail_rules import HandrailValidator

app = FastAPI()

CATEGORY_ORDER = ["handrail", "inside_line"]
CATEGORY_STYLE = {
    "handrail":    {"color": list(C_HANDRAIL),    "opacity": 1.0},
    "inside_line": {"color": list(C_INSIDE_LINE), "opacity": 1.0},
}
CSV_TABLES = ("segments", "reference")
MIN_FILL_STEP = 0.01


class HandrailConfig(BaseModel):
    total_degrees: float = DEFAULT_CONFIG["total_degrees"]
    total_helical_rise: float = DEFAULT_CONFIG["total_helical_rise"]
    total_arc_distance: float = DEFAULT_CONFIG["total_arc_distance"]
    total_segments: int = DEFAULT_CONFIG["total_segments"]
    pitch_block: float = DEFAULT_CONFIG["pitch_block"]
    bottom_length: float = DEFAULT_CONFIG["bottom_length"]
    top_length: float = DEFAULT_CONFIG["top_length"]
    bottom_offset: float = DEFAULT_CONFIG["bottom_offset"]
    top_offset: float = DEFAULT_CONFIG["top_offset"]
    base_radius: float = DEFAULT_CONFIG["base_radius"]
    easement_angle: float = DEFAULT_CONFIG["easement_angle"]
    rail_diameter: float = DEFAULT_CONFIG["rail_diameter"]
    inside_arc_distance: float = DEFAULT_CONFIG["inside_arc_distance"]


class RiseOverride(BaseModel):
    arc: float
    rise: float


class HandrailRequest(BaseModel):
    config: HandrailConfig = Field(default_factory=HandrailConfig)
    manual_overrides: list[RiseOverride] = []

    def overrides(self):
        return {o.arc: o.rise for o in self.manual_overrides}


class RiseQuery(HandrailRequest):
    arcs: list[float]
    # null turns the calculated fill off; anything finer than 0.01" is rejected
    fill_step: Optional[float] = Field(default=1.0, ge=MIN_FILL_STEP, allow_inf_nan=False)


class InsideLineRequest(HandrailRequest):
    inside_run_distance: Optional[float] = None


def pack_glb(gltf_path):
    """Read .gltf + .bin → self-contained GLB bytes."""
    with open(gltf_path, "r") as f:
        gltf_json = json.load(f)

    bin_path = gltf_path.rsplit(".", 1)[0] + ".bin"
    bin_data = b""
    if os.path.exists(bin_path):
        with open(bin_path, "rb") as f:
            bin_data = f.read()
        for buf in gltf_json.get("buffers", []):
            buf.pop("uri", None)
            buf["byteLength"] = len(bin_data)

    json_bytes = json.dumps(gltf_json, separators=(",", ":")).encode("utf-8")
    json_bytes += b" " * ((4 - len(json_bytes) % 4) % 4)
    bin_data += b"\x00" * ((4 - len(bin_data) % 4) % 4)

    chunks = struct.pack("<II", len(json_bytes), 0x4E4F534A) + json_bytes
    if bin_data:
        chunks += struct.pack("<II", len(bin_data), 0x004E4942) + bin_data

    header = struct.pack("<III", 0x46546C67, 2, 12 + len(chunks))
    return header + chunks


@app.get("/defaults")
async def get_defaults():
    return {
        "config": DEFAULT_CONFIG,
        "reference_profile": [p._asdict() for p in REFERENCE_PROFILE],
        "base": {
            "arc_distance": BASE_ARC_DISTANCE,
            "rise": BASE_RISE,
            "pitch_block": BASE_PITCH_BLOCK,
        },
    }


@app.post("/rise")
async def get_rise(req: RiseQuery):
    """Rise at each requested arc distance, honouring manual overrides."""
    try:
        cfg = req.config
        overrides = req.overrides()
        rises = [
            {
                "arc": arc,
                "rise": get_current_rise_at_distance(
                    arc, overrides, None, cfg.total_arc_distance, cfg.total_helical_rise,
                    cfg.pitch_block, fill_step=req.fill_step,
                ),
            }
            for arc in req.arcs
        ]
        return {"rises": rises, "total_rise": total_rise(cfg.model_dump())}
    except Exception as e:
        print(f"[API] Rise Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/profile")
async def get_scaled_profile(req: HandrailRequest):
    """The reference profile scaled to the requested dimensions."""
    try:
        cfg = req.config
        profile = scale_profile(cfg.total_arc_distance, cfg.total_helical_rise, cfg.pitch_block)
        return {
            "arc_scale": profile.arc_scale,
            "rise_scale": profile.rise_scale,
            "pitch_block_diff": profile.pitch_block_diff,
            "extrapolation_rate": profile.extrapolation_rate,
            "points": [p._asdict() for p in profile.points],
        }
    except Exception as e:
        print(f"[API] Profile Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/tables")
async def get_tables(req: HandrailRequest):
    try:
        config_dict = req.config.model_dump()
        overrides = req.overrides()
        return {
            "segments": [r.model_dump() for r in build_segment_table(config_dict, overrides)],
            "reference": [r.model_dump() for r in build_reference_table(config_dict, overrides)],
        }
    except Exception as e:
        import traceback
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/overrides/review")
async def get_override_review(req: HandrailRequest):
    """Manual overrides compared against the calculated rise at every half-inch input."""
    try:
        review = review_overrides(req.config.model_dump(), req.overrides())
        return review.model_dump()
    except Exception as e:
        import traceback
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/validate")
async def validate_handrail(req: HandrailRequest):
    config_dict = req.config.model_dump()
    issues = HandrailValidator.check_parameters(config_dict)
    if config_dict["total_arc_distance"] > 0:
        issues += HandrailValidator.check_overrides(config_dict, req.overrides())
    return {"valid": not issues, "issues": issues}


@app.post("/inside-line")
async def get_inside_line(req: InsideLineRequest):
    try:
        cfg = req.config
        run = req.inside_run_distance
        if run is None:
            run = inside_run_distance(cfg.total_degrees)
        data = calculate_inside_line_data(
            cfg.total_helical_rise, cfg.inside_arc_distance, run, cfg.total_degrees, cfg.pitch_block
        )
        return {
            "inside_run_distance": run,
            "points": [{"arc": arc, **p._asdict()} for arc, p in data.items()],
        }
    except Exception as e:
        print(f"[API] Inside Line Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/generate")
async def generate_handrail(req: HandrailRequest):
    try:
        config_dict = req.config.model_dump()
        temp_dir = tempfile.gettempdir()
        gltf_path = os.path.join(temp_dir, "spiral_handrail_output.gltf")

        print(f"[API] Building spiral handrail...")
        elements = build_spiral_handrail(config_dict, req.overrides())

        all_parts = []
        manifest_categories = []
        for cat_name in CATEGORY_ORDER:
            parts = elements.get(cat_name, [])
            if not parts:
                continue
            manifest_categories.append({
                "name": cat_name,
                "color": CATEGORY_STYLE[cat_name]["color"],
                "opacity": CATEGORY_STYLE[cat_name]["opacity"],
                "parts": [{"name": f"{cat_name}_{i+1}", "mesh_index": len(all_parts) + i}
                          for i in range(len(parts))],
            })
            all_parts.extend(parts)

        if not all_parts:
            raise HTTPException(status_code=500, detail="No geometry produced")

        export_gltf(Compound(all_parts), gltf_path)
        glb_bytes = pack_glb(gltf_path)

        return JSONResponse({
            "glb": base64.b64encode(glb_bytes).decode("ascii"),
            "manifest": {"categories": manifest_categories},
            "styles": CATEGORY_STYLE,
        })

    except HTTPException:
        raise
    except Exception as e:
        import traceback
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/export/csv")
async def export_csv(req: HandrailRequest, table: str = "segments"):
    """CSV copy of the segment or reference table."""
    if table not in CSV_TABLES:
        raise HTTPException(status_code=400, detail=f"Unknown table '{table}', expected one of {CSV_TABLES}")
    try:
        config_dict = req.config.model_dump()
        if table == "segments":
            rows = build_segment_table(config_dict, req.overrides())
        else:
            rows = build_reference_table(config_dict, req.overrides())
        return Response(
            content=generate_csv(rows),
            media_type="text/csv",
            headers={"Content-Disposition": f"attachment; filename=spiral_handrail_{table}.csv"},
        )
    except Exception as e:
        print(f"[API] CSV Export Error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/export/dxf")
async def export_dxf_file(req: HandrailRequest):
    """Generates a DXF stretch-out of the rise profile with labels and override markers."""
    try:
        content = generate_dxf(req.config.model_dump(), req.overrides())
        return Response(
            content=content,
            media_type="application/dxf",
            headers={"Content-Disposition": "attachment; filename=spiral_handrail_profile.dxf"},
        )
    except Exception as e:
        import traceback
        traceback.print_exc()
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
