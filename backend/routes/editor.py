"""
Editor tool routes: layers, drag alignment and measurements of the
editing session.
"""

from fastapi import APIRouter, Depends, HTTPException

from schemas import (
    DragRequest, LayerCreateRequest, LayerMergeRequest, LayerReorderRequest,
    LayerUpdateRequest, MeasurementStartRequest, Point,
)
from services.lab_session import LabSession, get_lab_session

router = APIRouter(prefix="/api/editor", tags=["editor"])


def _layers(session: LabSession) -> dict:
    return {
        "layers": [layer.model_dump() for layer in session.layers.layers_for_rendering()],
        "stats": session.layers.stats(),
    }


def _measurements(session: LabSession) -> dict:
    tool = session.measurements
    return {
        "mode": tool.mode,
        "points": [p.model_dump() for p in tool.points],
        "help_text": tool.help_text,
        "history": [m.to_dict() for m in tool.history],
    }


# ---------- Layers ----------

@router.get("/layers")
async def list_layers(session: LabSession = Depends(get_lab_session)):
    return _layers(session)


@router.post("/layers")
async def create_layer(req: LayerCreateRequest, session: LabSession = Depends(get_lab_session)):
    layer = session.layers.create(req.name, req.type, opacity=req.opacity, color=req.color)
    return layer.model_dump()


@router.patch("/layers/{layer_id}")
async def update_layer(layer_id: str, req: LayerUpdateRequest,
                       session: LabSession = Depends(get_lab_session)):
    if session.layers.get(layer_id) is None:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    if req.name is not None:
        session.layers.rename(layer_id, req.name)
    if req.opacity is not None:
        session.layers.set_opacity(layer_id, req.opacity)
    return session.layers.get(layer_id).model_dump()


@router.post("/layers/{layer_id}/{action}")
async def layer_action(layer_id: str, action: str, session: LabSession = Depends(get_lab_session)):
    actions = {
        "toggle-visibility": session.layers.toggle_visibility,
        "toggle-lock": session.layers.toggle_lock,
        "duplicate": session.layers.duplicate,
    }
    if action not in actions:
        raise HTTPException(status_code=400, detail=f"Unknown layer action: {action}")
    layer = actions[action](layer_id)
    if layer is None:
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    return layer.model_dump()


@router.delete("/layers/{layer_id}")
async def delete_layer(layer_id: str, session: LabSession = Depends(get_lab_session)):
    if not session.layers.delete(layer_id):
        raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")
    return _layers(session)


@router.post("/layers-reorder")
async def reorder_layers(req: LayerReorderRequest, session: LabSession = Depends(get_lab_session)):
    count = len(session.layers.layers)
    if not (0 <= req.source_index < count and 0 <= req.dest_index < count):
        raise HTTPException(status_code=400, detail="Layer index out of range")
    session.layers.reorder(req.source_index, req.dest_index)
    return _layers(session)


@router.post("/layers-merge")
async def merge_layers(req: LayerMergeRequest, session: LabSession = Depends(get_lab_session)):
    """Merge two layers and move the active universe's zones along."""
    for layer_id in (req.source_id, req.target_id):
        if session.layers.get(layer_id) is None:
            raise HTTPException(status_code=404, detail=f"Layer not found: {layer_id}")

    active = session.multiverse.get_active_universe()
    zones = active.layout.zones if active else []
    merged = session.layers.merge(req.source_id, req.target_id, zones)
    if active is not None:
        layout = active.layout.model_copy(update={"zones": merged}, deep=True)
        session.edit_layout(active.id, layout)
    return _layers(session)


@router.get("/layers-validate")
async def validate_layers(session: LabSession = Depends(get_lab_session)):
    return session.layers.validate()


# ---------- Drag alignment ----------

@router.post("/drag")
async def drag_zone(req: DragRequest, session: LabSession = Depends(get_lab_session)):
    """Guides for a zone of the active universe dragged to (x, y)."""
    active = session.multiverse.get_active_universe()
    zone = active.layout.get_zone(req.zone_id) if active else None
    if zone is None:
        raise HTTPException(status_code=404, detail=f"Zone not found: {req.zone_id}")

    tool = session.alignment
    guides = tool.update(active.layout.zones, zone.id, req.x, req.y, zone.size.width, zone.size.height)
    snapped = tool.snap(req.x, req.y, zone.size.width, zone.size.height)
    return {
        "guides": [g.to_dict() for g in guides],
        "snapped": snapped.model_dump(),
        "has_active_guide": tool.has_active_guide,
    }


@router.post("/drag/end")
async def end_drag(session: LabSession = Depends(get_lab_session)):
    session.alignment.clear()
    return {"guides": [], "has_active_guide": session.alignment.has_active_guide}


# ---------- Measurements ----------

@router.get("/measure")
async def measurement_state(session: LabSession = Depends(get_lab_session)):
    return _measurements(session)


@router.post("/measure/start")
async def start_measurement(req: MeasurementStartRequest, session: LabSession = Depends(get_lab_session)):
    session.measurements.start(req.mode)
    return _measurements(session)


@router.post("/measure/point")
async def add_measurement_point(point: Point, session: LabSession = Depends(get_lab_session)):
    if not session.measurements.is_active:
        raise HTTPException(status_code=400, detail="No measurement mode active")
    completed = session.measurements.add_point(point)
    return {"completed": completed.to_dict() if completed else None, **_measurements(session)}


@router.post("/measure/cancel")
async def cancel_measurement(session: LabSession = Depends(get_lab_session)):
    session.measurements.cancel()
    return _measurements(session)


@router.delete("/measure/history")
async def clear_measurements(session: LabSession = Depends(get_lab_session)):
    session.measurements.clear_history()
    return _measurements(session)


@router.delete("/measure/history/{index}")
async def remove_measurement(index: int, session: LabSession = Depends(get_lab_session)):
    if not session.measurements.remove(index):
        raise HTTPException(status_code=404, detail=f"No measurement at index {index}")
    return _measurements(session)
