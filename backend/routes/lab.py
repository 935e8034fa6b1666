"""
Stateless layout analysis routes.

Every endpoint takes a layout in the request body and returns freshly
computed data; nothing here touches the editing session.
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, HTTPException

from config import EXPORT_DIR, GRID_SIZE, SNAP_THRESHOLD, ALIGNMENT_THRESHOLD
from schemas import (
    AlignmentRequest, AnalysisRequest, ArrangeRequest, BudgetRequest,
    DistributeRequest, IntakeRequest, Layout, SnapRequest,
)
from services.cad_export import generate_dxf
from services.layout_intake import LayoutIntakeError, parse_layout
from services.model3d import generate_3d_model
from services.spatial.alignment import find_nearest_snap_point, guides_for_zone, layout_snap_points, snap_to_alignment
from services.spatial.allen_curve import assess_layout
from services.spatial.arrangement import apply_placements, auto_arrange, distribute_evenly
from services.spatial.budget import budget_summary, format_currency
from services.spatial.errors import NotFoundError
from services.spatial.metrics import calculate_layout_metrics
from services.spatial.projection import camera_position, layout_to_3d
from services.spatial.validation import detect_zone_overlaps, validate_layout

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lab", tags=["lab"])


# ---------- Editing aids ----------

@router.post("/alignment")
async def alignment_guides(req: AlignmentRequest):
    """Guides for a zone dragged to (x, y), plus the snapped position."""
    threshold = req.threshold if req.threshold is not None else ALIGNMENT_THRESHOLD
    try:
        guides = guides_for_zone(req.layout, req.zone_id, req.x, req.y, threshold)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    zone = req.layout.get_zone(req.zone_id)
    snapped = snap_to_alignment(req.x, req.y, guides, threshold, zone.size.width, zone.size.height)
    return {
        "guides": [g.to_dict() for g in guides],
        "snapped": snapped.model_dump(),
    }


@router.post("/snap")
async def snap_point(req: SnapRequest):
    threshold = req.threshold if req.threshold is not None else SNAP_THRESHOLD
    candidates = layout_snap_points(req.layout, req.exclude_zone_id)
    nearest = find_nearest_snap_point(req.point, candidates, threshold)
    return {"snap_point": nearest.to_dict() if nearest else None}


@router.post("/distribute")
async def distribute(req: DistributeRequest):
    zones = req.layout.zones
    if req.zone_ids is not None:
        missing = [zid for zid in req.zone_ids if req.layout.get_zone(zid) is None]
        if missing:
            raise HTTPException(status_code=404, detail=f"Zone not found: {missing[0]}")
        zones = [z for z in zones if z.id in set(req.zone_ids)]

    placements = distribute_evenly(zones, req.axis, req.spacing)
    return {
        "placements": [p.to_dict() for p in placements],
        "layout": apply_placements(req.layout, placements).model_dump(),
    }


@router.post("/arrange")
async def arrange(req: ArrangeRequest):
    dims = req.layout.dimensions
    result = auto_arrange(req.layout.zones, dims.width, dims.height, req.padding)
    arranged = apply_placements(req.layout, result.placements)
    return {
        **result.to_dict(),
        "overlap_count": len(detect_zone_overlaps(arranged)),
        "layout": arranged.model_dump(),
    }


# ---------- Analysis ----------

@router.post("/allen-curve")
async def allen_curve(req: AnalysisRequest):
    """Collaboration-distance assessment of every zone pair."""
    grid_size = req.grid_size if req.grid_size is not None else GRID_SIZE
    overlaps = detect_zone_overlaps(req.layout)
    result = assess_layout(req.layout, req.links, overlaps=overlaps, grid_size=grid_size)
    return result.to_dict()


@router.post("/budget")
async def budget(req: BudgetRequest):
    summary = budget_summary(req.layout, req.currency)
    return {
        **summary.to_dict(),
        "formatted_total": format_currency(summary.total_cost, req.currency),
    }


@router.post("/validate")
async def validate(layout: Layout):
    return validate_layout(layout).to_dict()


@router.post("/metrics")
async def metrics(layout: Layout, grid_size: Optional[float] = None):
    return calculate_layout_metrics(layout, grid_size).model_dump()


@router.post("/preview-3d")
async def preview_3d(layout: Layout):
    return {
        "zones": [z.to_dict() for z in layout_to_3d(layout)],
        "camera": camera_position(layout).to_dict(),
    }


@router.post("/intake")
async def intake(req: IntakeRequest):
    """Validate a generator reply into a layout with its metrics."""
    try:
        layout = parse_layout(req.payload)
    except LayoutIntakeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {
        "layout": layout.model_dump(),
        "metrics": calculate_layout_metrics(layout).model_dump(),
        "validation": validate_layout(layout).to_dict(),
    }


# ---------- Export ----------

def _export_name(layout: Layout, ext: str) -> str:
    stem = "".join(ch if ch.isalnum() else "_" for ch in layout.name).strip("_") or "layout"
    return f"{stem}_{uuid.uuid4().hex[:8]}.{ext}"


@router.post("/export/dxf")
async def export_dxf(layout: Layout):
    filename = _export_name(layout, "dxf")
    try:
        generate_dxf(layout, str(EXPORT_DIR / filename))
    except Exception as e:
        logger.error(f"DXF export error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"DXF export failed: {e}")
    return {"dxf_url": f"/exports/{filename}"}


@router.post("/export/3d")
async def export_3d(layout: Layout, fmt: str = "glb"):
    if fmt not in ("glb", "obj"):
        raise HTTPException(status_code=400, detail="fmt must be 'glb' or 'obj'")
    filename = _export_name(layout, fmt)
    try:
        generate_3d_model(layout, str(EXPORT_DIR / filename))
    except Exception as e:
        logger.error(f"3D export error: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"3D export failed: {e}")
    return {"model_url": f"/exports/{filename}"}
