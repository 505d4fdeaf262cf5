import logging
import math
from dataclasses import dataclass
from enum import Enum, IntFlag
from typing import Iterable, List, Optional, Sequence, Tuple

LOGGER = logging.getLogger(__name__)

# ----------------------------
# Domain model
# ----------------------------


class CellShade(Enum):
    EMPTY = 0
    SHADED = 1
    CROSSED = 2


class BigPadding(IntFlag):
    """Sides of a cell that border a 5x5 block separator."""
    NONE = 0
    TOP = 1
    RIGHT = 2
    BOTTOM = 4
    LEFT = 8


BLOCK_SIZE = 5

Snapshot = Tuple[CellShade, ...]


def grid_padding(row: int, col: int, rows: int, cols: int) -> BigPadding:
    pad = BigPadding.NONE
    if row % BLOCK_SIZE == BLOCK_SIZE - 1 and row != rows - 1:
        pad |= BigPadding.BOTTOM
    elif row % BLOCK_SIZE == 0 and row != 0:
        pad |= BigPadding.TOP
    if col % BLOCK_SIZE == BLOCK_SIZE - 1 and col != cols - 1:
        pad |= BigPadding.RIGHT
    elif col % BLOCK_SIZE == 0 and col != 0:
        pad |= BigPadding.LEFT
    return pad


@dataclass(eq=False)
class Cell:
    row: int
    col: int
    length: float = 1.0
    padding: BigPadding = BigPadding.NONE
    shade: CellShade = CellShade.EMPTY

    @property
    def x(self) -> float:
        return self.col * self.length

    @property
    def y(self) -> float:
        return self.row * self.length

    def is_inside(self, x: float, y: float) -> bool:
        return self.x <= x < self.x + self.length and self.y <= y < self.y + self.length

    def click(self, cross: bool) -> None:
        """Toggle between EMPTY and a mark: CROSSED if `cross`, else SHADED."""
        mark = CellShade.CROSSED if cross else CellShade.SHADED
        self.shade = CellShade.EMPTY if self.shade == mark else mark


def compute_clues(shades: Iterable[CellShade]) -> List[int]:
    """Lengths of the maximal runs of SHADED cells, in order."""
    runs: List[int] = []
    count = 0
    for shade in shades:
        if shade == CellShade.SHADED:
            count += 1
        elif count:
            runs.append(count)
            count = 0
    if count:
        runs.append(count)
    return runs


class UserGrid:
    def __init__(self, rows: int, cols: int, cell_length: float = 1.0) -> None:
        if rows <= 0 or cols <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {rows}x{cols}.")
        if cell_length <= 0:
            raise ValueError(f"Cell length must be positive, got {cell_length}.")
        self.rows = rows
        self.cols = cols
        self.cell_length = cell_length
        self.cells: List[Cell] = [
            Cell(
                row=i // cols,
                col=i % cols,
                length=cell_length,
                padding=grid_padding(i // cols, i % cols, rows, cols),
            )
            for i in range(rows * cols)
        ]

    @property
    def width(self) -> float:
        return self.cols * self.cell_length

    @property
    def height(self) -> float:
        return self.rows * self.cell_length

    def in_bounds(self, r: int, c: int) -> bool:
        return 0 <= r < self.rows and 0 <= c < self.cols

    def get(self, r: int, c: int) -> Cell:
        if not self.in_bounds(r, c):
            raise IndexError(f"Cell ({r},{c}) outside {self.rows}x{self.cols} grid.")
        return self.cells[r * self.cols + c]

    def __getitem__(self, pos: Tuple[int, int]) -> Cell:
        r, c = pos
        return self.get(r, c)

    def __iter__(self):
        return iter(self.cells)

    def cell_at(self, x: float, y: float) -> Optional[Cell]:
        """Cell whose bounds contain the grid-local point (x, y), if any."""
        if not (math.isfinite(x) and math.isfinite(y)):
            return None
        c = math.floor(x / self.cell_length)
        r = math.floor(y / self.cell_length)
        # the division can round across a boundary, so the owner may be a neighbour
        for dr in (-1, 0, 1):
            for dc in (-1, 0, 1):
                if self.in_bounds(r + dr, c + dc):
                    cell = self.cells[(r + dr) * self.cols + c + dc]
                    if cell.is_inside(x, y):
                        return cell
        return None

    def clear(self) -> None:
        for cell in self.cells:
            cell.shade = CellShade.EMPTY

    # ----------------------------
    # Clues
    # ----------------------------

    def row_shades(self, r: int) -> List[CellShade]:
        return [cell.shade for cell in self.cells[r * self.cols:(r + 1) * self.cols]]

    def col_shades(self, c: int) -> List[CellShade]:
        return [self.cells[r * self.cols + c].shade for r in range(self.rows)]

    @property
    def row_clues(self) -> List[List[int]]:
        return [compute_clues(self.row_shades(r)) for r in range(self.rows)]

    @property
    def col_clues(self) -> List[List[int]]:
        return [compute_clues(self.col_shades(c)) for c in range(self.cols)]

    # ----------------------------
    # Snapshots
    # ----------------------------

    @property
    def shades(self) -> List[CellShade]:
        return [cell.shade for cell in self.cells]

    def snapshot(self) -> Snapshot:
        """Immutable row-major copy of every cell shade."""
        return tuple(cell.shade for cell in self.cells)

    def restore(self, shades: Sequence[CellShade]) -> None:
        """Restore a state previously produced by snapshot()."""
        if len(shades) != len(self.cells):
            raise ValueError(
                f"Invalid snapshot: {len(shades)} shades for a {self.rows}x{self.cols} grid."
            )
        for cell, shade in zip(self.cells, shades):
            cell.shade = CellShade(shade)
        LOGGER.debug("Restored %sx%s grid", self.rows, self.cols)
