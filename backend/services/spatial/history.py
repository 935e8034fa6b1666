"""Bounded undo/redo over layout snapshots."""

from typing import List

from config import MAX_HISTORY
from schemas import Layout


class EditHistory:
    """
    Linear history of deep-copied layouts with a cursor.

    Pushing after an undo discards the redo branch.  The oldest entry is
    dropped once *max_size* is exceeded.
    """

    def __init__(self, initial: Layout, max_size: int = MAX_HISTORY):
        self.max_size = max(1, max_size)
        self._states: List[Layout] = [initial.model_copy(deep=True)]
        self._index = 0

    @property
    def current(self) -> Layout:
        return self._states[self._index].model_copy(deep=True)

    @property
    def can_undo(self) -> bool:
        return self._index > 0

    @property
    def can_redo(self) -> bool:
        return self._index < len(self._states) - 1

    def __len__(self):
        return len(self._states)

    def push(self, layout: Layout):
        self._states = self._states[: self._index + 1]
        self._states.append(layout.model_copy(deep=True))
        if len(self._states) > self.max_size:
            self._states.pop(0)
        self._index = len(self._states) - 1

    def undo(self) -> Layout:
        if self.can_undo:
            self._index -= 1
        return self.current

    def redo(self) -> Layout:
        if self.can_redo:
            self._index += 1
        return self.current
