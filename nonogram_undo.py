import logging
from typing import List

from nonogram_model import Snapshot, UserGrid

LOGGER = logging.getLogger(__name__)

DEFAULT_MAX_UNDO = 200


class UndoStack:
    """History of shade snapshots for one puzzle session.

    Snapshots are plain tuples of CellShade, so they are immutable and cheap
    to keep. Once more than `max_size` are stored the oldest ones are
    dropped.
    """

    def __init__(self, rows: int, cols: int, max_size: int = DEFAULT_MAX_UNDO) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive.")
        self.rows = rows
        self.cols = cols
        self.max_size = max_size
        self._history: List[Snapshot] = []

    def __len__(self) -> int:
        return len(self._history)

    def push(self, grid: UserGrid) -> None:
        if (grid.rows, grid.cols) != (self.rows, self.cols):
            raise ValueError(
                f"Cannot push a {grid.rows}x{grid.cols} grid onto a {self.rows}x{self.cols} undo stack."
            )
        self._history.append(grid.snapshot())
        if len(self._history) > self.max_size:
            dropped = len(self._history) - self.max_size
            del self._history[:dropped]
            LOGGER.debug("Undo history full, dropped %s oldest snapshot(s)", dropped)

    def pop(self, grid: UserGrid) -> UserGrid:
        """Return a grid holding the latest snapshot, or `grid` itself when there is none."""
        if not self._history:
            return grid
        snap = self._history.pop()
        restored = UserGrid(self.rows, self.cols, grid.cell_length)
        restored.restore(snap)
        LOGGER.debug("Undo: %s snapshot(s) left", len(self._history))
        return restored

    def clear(self) -> None:
        self._history.clear()
