"""
Interactive editing session.

Bundles the single-writer state of one editor: the multiverse store,
the layer registry, the measurement and alignment tools, and an undo
history per universe.  The app owns exactly one instance (see
``main.lifespan``); routes reach it through ``get_lab_session``.
"""

import logging
from typing import Dict

from fastapi import Request

from config import GRID_SIZE, MAX_HISTORY
from schemas import Layout, Multiverse, Universe
from services.spatial.alignment import AlignmentSession
from services.spatial.history import EditHistory
from services.spatial.layers import LayerRegistry
from services.spatial.measurement import MeasurementSession
from services.spatial.multiverse import MultiverseStore

logger = logging.getLogger(__name__)


class LabSession:
    def __init__(self, grid_size: float = GRID_SIZE, max_history: int = MAX_HISTORY):
        self.grid_size = grid_size
        self.max_history = max_history
        self.multiverse = MultiverseStore()
        self.layers = LayerRegistry()
        self.measurements = MeasurementSession(grid_size=grid_size)
        self.alignment = AlignmentSession()
        self._histories: Dict[str, EditHistory] = {}

    def history_for(self, universe_id: str) -> EditHistory:
        """Undo history of a universe, seeded with its current layout."""
        universe = self.multiverse.require_universe(universe_id)
        history = self._histories.get(universe_id)
        if history is None:
            history = EditHistory(universe.layout, self.max_history)
            self._histories[universe_id] = history
        return history

    def edit_layout(self, universe_id: str, layout: Layout) -> Universe:
        """Replace a universe's layout and record it for undo."""
        history = self.history_for(universe_id)
        universe = self.multiverse.update_universe_layout(universe_id, layout)
        history.push(universe.layout)
        logger.debug(f"Edited universe {universe_id}; {len(history)} states in history")
        return universe

    def undo(self, universe_id: str) -> Universe:
        layout = self.history_for(universe_id).undo()
        return self.multiverse.update_universe_layout(universe_id, layout)

    def redo(self, universe_id: str) -> Universe:
        layout = self.history_for(universe_id).redo()
        return self.multiverse.update_universe_layout(universe_id, layout)

    def restore(self, state: Multiverse):
        """Replace the store from a persisted snapshot; undo histories restart."""
        self.multiverse = MultiverseStore.restore(state)
        self._histories = {}

    def delete_universe(self, universe_id: str, detach_children: bool = False) -> bool:
        deleted = self.multiverse.delete_universe(universe_id, detach_children)
        if deleted:
            self._histories.pop(universe_id, None)
        return deleted


def get_lab_session(request: Request) -> LabSession:
    return request.app.state.lab_session
