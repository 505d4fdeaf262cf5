"""
Drag-fill gesture handling for the nonogram grid.

A single press means one of three things depending on timing and movement:
- tap (released on the first cell before the long-press timeout): primary mark
- hold (timeout elapses on the first cell): secondary mark
- drag (pointer leaves the first cell): first cell gets the primary mark, and
  every cell the pointer enters copies the first cell's shade. In fat-finger
  mode the copy lands on the first cell's row (or column) so a shaky drag
  still fills a straight line.

Normally the primary mark is SHADED and the secondary CROSSED; cross mode
swaps them.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Mapping, Optional, Protocol

from nonogram_model import Cell, UserGrid
from nonogram_puzzle import PuzzleDefinition
from nonogram_undo import UndoStack

LOGGER = logging.getLogger(__name__)

DEFAULT_LONG_PRESS_TIMEOUT_MS = 400

Callback = Callable[[], None]


# ----------------------------
# Pointer events & config
# ----------------------------

class PointerAction(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PointerEvent:
    action: PointerAction
    x: float = 0.0
    y: float = 0.0


@dataclass
class GestureConfig:
    fat_finger: bool = True
    vibrate: bool = False
    long_press_timeout_ms: float = DEFAULT_LONG_PRESS_TIMEOUT_MS

    @classmethod
    def from_preferences(cls, prefs: Mapping[str, Any]) -> "GestureConfig":
        timeout = prefs.get("longPressTimeout", DEFAULT_LONG_PRESS_TIMEOUT_MS)
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            raise ValueError(f"longPressTimeout must be a positive number, got {timeout!r}.")
        fat_finger = prefs.get("fatFinger", True)
        vibrate = prefs.get("vibrate", False)
        for key, value in (("fatFinger", fat_finger), ("vibrate", vibrate)):
            if not isinstance(value, bool):
                raise ValueError(f"{key} must be true or false, got {value!r}.")
        return cls(fat_finger=fat_finger, vibrate=vibrate, long_press_timeout_ms=timeout)


# ----------------------------
# Timer
# ----------------------------

class CancellableTimer(Protocol):
    @property
    def armed(self) -> bool: ...

    def arm(self, delay_ms: float, callback: Callback) -> None: ...

    def cancel(self) -> None: ...


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class EventLoopTimer:
    """One-shot deferred callback for a single-threaded event loop.

    The owner calls poll() once per loop iteration; the callback runs from
    there, never from another thread. Arming again replaces the pending
    callback, and a cancelled callback never runs.
    """

    def __init__(self, clock: Callable[[], float] = monotonic_ms) -> None:
        self._clock = clock
        self._deadline = 0.0
        self._callback: Optional[Callback] = None

    @property
    def armed(self) -> bool:
        return self._callback is not None

    def arm(self, delay_ms: float, callback: Callback) -> None:
        self._deadline = self._clock() + delay_ms
        self._callback = callback

    def cancel(self) -> None:
        self._callback = None

    def poll(self) -> bool:
        """Run the callback if it is due. Returns True when it ran."""
        if self._callback is None or self._clock() < self._deadline:
            return False
        callback = self._callback
        self._callback = None
        callback()
        return True


# ----------------------------
# Gesture state machine
# ----------------------------

class GestureState(Enum):
    IDLE = 0
    FIRST_CELL = 1
    DRAGGING = 2


@dataclass(eq=False)
class GestureSession:
    first_cell: Cell
    active_cell: Cell
    first_cell_phase: bool = True
    long_press: bool = False
    # fill along the first cell's row; False fills along its column
    fill_horizontal: bool = True


def _noop() -> None:
    pass


class GestureController:
    def __init__(
        self,
        grid: UserGrid,
        puzzle: PuzzleDefinition,
        timer: CancellableTimer,
        config: Optional[GestureConfig] = None,
        undo_stack: Optional[UndoStack] = None,
        on_redraw: Optional[Callback] = None,
        on_haptic: Optional[Callback] = None,
        on_solved: Optional[Callback] = None,
    ) -> None:
        if (grid.rows, grid.cols) != (puzzle.rows, puzzle.cols):
            raise ValueError(
                f"Grid is {grid.rows}x{grid.cols} but the puzzle is {puzzle.rows}x{puzzle.cols}."
            )
        self.grid = grid
        self.puzzle = puzzle
        self.timer = timer
        self.config = config or GestureConfig()
        self.undo_stack = undo_stack if undo_stack is not None else UndoStack(puzzle.rows, puzzle.cols)
        self.cross_mode = False

        self._on_redraw = on_redraw or _noop
        self._on_haptic = on_haptic or _noop
        self._on_solved = on_solved or _noop

        self._session: Optional[GestureSession] = None
        self._solved = self.is_solved()

    @property
    def state(self) -> GestureState:
        if self._session is None:
            return GestureState.IDLE
        return GestureState.FIRST_CELL if self._session.first_cell_phase else GestureState.DRAGGING

    @property
    def session(self) -> Optional[GestureSession]:
        return self._session

    def toggle_cross_mode(self) -> bool:
        self.cross_mode = not self.cross_mode
        return self.cross_mode

    def is_solved(self) -> bool:
        return self.puzzle.is_solved_by(self.grid)

    def handle(self, event: PointerEvent) -> None:
        if event.action == PointerAction.DOWN:
            self.press(event.x, event.y)
        elif event.action == PointerAction.MOVE:
            self.move(event.x, event.y)
        elif event.action == PointerAction.UP:
            self.release()
        else:
            self.cancel()

    # ----------------------------
    # Transitions
    # ----------------------------

    def press(self, x: float, y: float) -> None:
        if self._session is not None:
            LOGGER.debug("Press while a gesture is running; dropping the previous gesture")
            self.cancel()

        cell = self.grid.cell_at(x, y)
        if cell is None:
            return

        session = GestureSession(first_cell=cell, active_cell=cell)
        self.timer.arm(self.config.long_press_timeout_ms, lambda: self._long_press(session))
        self.undo_stack.push(self.grid)
        self._session = session
        LOGGER.debug("Press on (%s,%s)", cell.row, cell.col)

    def _long_press(self, session: GestureSession) -> None:
        if session is not self._session or not session.first_cell_phase:
            return
        session.first_cell.click(not self.cross_mode)
        self._on_redraw()
        session.long_press = True
        LOGGER.debug("Long press on (%s,%s) -> %s",
                     session.first_cell.row, session.first_cell.col, session.first_cell.shade.name)
        if self.config.vibrate:
            self._on_haptic()

    def move(self, x: float, y: float) -> None:
        session = self._session
        if session is None:
            return
        cell = self.grid.cell_at(x, y)
        if cell is None or cell is session.active_cell:
            return

        first = session.first_cell
        if session.first_cell_phase:
            self.timer.cancel()
            if not session.long_press:
                first.click(self.cross_mode)
            self._on_redraw()
            session.fill_horizontal = cell.row == first.row
            session.first_cell_phase = False
            LOGGER.debug("Drag from (%s,%s), %s fill with %s", first.row, first.col,
                         "horizontal" if session.fill_horizontal else "vertical", first.shade.name)

        if not self.config.fat_finger:
            target = cell
        elif session.fill_horizontal:
            target = self.grid.get(first.row, cell.col)
        else:
            target = self.grid.get(cell.row, first.col)
        target.shade = first.shade
        self._on_redraw()
        session.active_cell = cell

    def release(self) -> None:
        session = self._session
        if session is None:
            return
        self.timer.cancel()
        self._session = None
        if session.first_cell_phase and not session.long_press:
            session.first_cell.click(self.cross_mode)
            self._on_redraw()
        self._check_solved()

    def cancel(self) -> None:
        self.timer.cancel()
        self._session = None

    def _check_solved(self) -> None:
        solved = self.is_solved()
        newly_solved = solved and not self._solved
        self._solved = solved
        if newly_solved:
            LOGGER.info("Puzzle %r solved", self.puzzle.name)
            self._on_solved()

    # ----------------------------
    # Commands
    # ----------------------------

    def undo(self) -> None:
        """Restore the grid from before the last gesture or clear.

        Undoing back into a solved grid from an unsolved one counts as a new
        completion: on_solved fires at the next release.
        """
        self.cancel()
        self.grid = self.undo_stack.pop(self.grid)
        self._solved = self._solved and self.is_solved()
        self._on_redraw()

    def clear(self) -> None:
        self.cancel()
        self.undo_stack.push(self.grid)
        self.grid.clear()
        self._solved = self._solved and self.is_solved()
        self._on_redraw()
