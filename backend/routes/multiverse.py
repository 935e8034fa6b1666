"""
Multiverse routes: create, branch, fuse and compare layout universes
held by the app's editing session.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from schemas import (
    BranchRequest, FuseRequest, Multiverse, UniverseCreateRequest, UpdateLayoutRequest,
)
from services.lab_session import LabSession, get_lab_session
from services.spatial.errors import InsufficientInputError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/multiverse", tags=["multiverse"])


def _state(session: LabSession) -> dict:
    store = session.multiverse
    return {
        "active_universe_id": store.active_universe_id,
        "comparison_ids": list(store.comparison_ids),
        "universes": [
            {"id": u.id, "name": u.name, "parent_id": u.parent_id, "metrics": u.metrics.model_dump()}
            for u in store.universes
        ],
    }


def _universe_or_404(session: LabSession, universe_id: str):
    try:
        return session.multiverse.require_universe(universe_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("")
async def get_multiverse(session: LabSession = Depends(get_lab_session)):
    return _state(session)


@router.post("/universes")
async def create_universe(req: UniverseCreateRequest, session: LabSession = Depends(get_lab_session)):
    universe_id = session.multiverse.create_universe(req.layout, req.name)
    return session.multiverse.get_universe(universe_id).model_dump()


@router.get("/universes/{universe_id}")
async def get_universe(universe_id: str, session: LabSession = Depends(get_lab_session)):
    return _universe_or_404(session, universe_id).model_dump()


@router.put("/universes/{universe_id}/layout")
async def update_layout(universe_id: str, req: UpdateLayoutRequest,
                        session: LabSession = Depends(get_lab_session)):
    _universe_or_404(session, universe_id)
    return session.edit_layout(universe_id, req.layout).model_dump()


@router.post("/universes/{universe_id}/undo")
async def undo(universe_id: str, session: LabSession = Depends(get_lab_session)):
    _universe_or_404(session, universe_id)
    universe = session.undo(universe_id)
    history = session.history_for(universe_id)
    return {"universe": universe.model_dump(), "can_undo": history.can_undo, "can_redo": history.can_redo}


@router.post("/universes/{universe_id}/redo")
async def redo(universe_id: str, session: LabSession = Depends(get_lab_session)):
    _universe_or_404(session, universe_id)
    universe = session.redo(universe_id)
    history = session.history_for(universe_id)
    return {"universe": universe.model_dump(), "can_undo": history.can_undo, "can_redo": history.can_redo}


@router.post("/universes/{universe_id}/branch")
async def branch_universe(universe_id: str, req: BranchRequest,
                          session: LabSession = Depends(get_lab_session)):
    try:
        new_id = session.multiverse.branch_universe(universe_id, req.name, req.branch_point)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.multiverse.get_universe(new_id).model_dump()


@router.delete("/universes/{universe_id}")
async def delete_universe(universe_id: str, detach_children: bool = False,
                          session: LabSession = Depends(get_lab_session)):
    if not session.delete_universe(universe_id, detach_children):
        raise HTTPException(status_code=404, detail=f"Universe not found: {universe_id}")
    return _state(session)


@router.get("/universes/{universe_id}/lineage")
async def lineage(universe_id: str, session: LabSession = Depends(get_lab_session)):
    try:
        chain = session.multiverse.lineage(universe_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return [{"id": u.id, "name": u.name, "branch_point": u.branch_point} for u in chain]


@router.post("/active/{universe_id}")
async def set_active(universe_id: str, session: LabSession = Depends(get_lab_session)):
    # unknown ids are ignored; the response shows the unchanged state
    applied = session.multiverse.set_active_universe(universe_id)
    return {"applied": applied, **_state(session)}


@router.post("/fuse")
async def fuse(req: FuseRequest, session: LabSession = Depends(get_lab_session)):
    try:
        fused_id = session.multiverse.fuse_universes(req.ids, req.name, req.strategy)
    except InsufficientInputError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session.multiverse.get_universe(fused_id).model_dump()


# ---------- Comparison ----------

@router.post("/comparison/{universe_id}")
async def add_to_comparison(universe_id: str, session: LabSession = Depends(get_lab_session)):
    added = session.multiverse.add_to_comparison(universe_id)
    return {"added": added, "comparison_ids": list(session.multiverse.comparison_ids)}


@router.delete("/comparison/{universe_id}")
async def remove_from_comparison(universe_id: str, session: LabSession = Depends(get_lab_session)):
    removed = session.multiverse.remove_from_comparison(universe_id)
    return {"removed": removed, "comparison_ids": list(session.multiverse.comparison_ids)}


@router.delete("/comparison")
async def clear_comparison(session: LabSession = Depends(get_lab_session)):
    session.multiverse.clear_comparison()
    return {"comparison_ids": []}


@router.get("/comparison")
async def compare(session: LabSession = Depends(get_lab_session)):
    return session.multiverse.compare()


# ---------- Persistence ----------

@router.get("/snapshot")
async def snapshot(session: LabSession = Depends(get_lab_session)):
    return session.multiverse.snapshot().model_dump()


@router.post("/restore")
async def restore(state: Multiverse, session: LabSession = Depends(get_lab_session)):
    session.restore(state)
    logger.info(f"Restored multiverse with {len(state.universes)} universes")
    return _state(session)
