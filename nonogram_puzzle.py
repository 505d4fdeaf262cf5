import json
import logging
import os
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from nonogram_model import CellShade, UserGrid, compute_clues

LOGGER = logging.getLogger(__name__)

SHADED_CHARS = "#X1"
EMPTY_CHARS = ".0-_"
PUZZLE_EXTENSIONS = (".txt", ".json")


class PuzzleFormatError(ValueError):
    """Raised when puzzle data cannot be turned into a valid puzzle."""


def _check_line(clues: Sequence[int], length: int, label: str) -> None:
    for v in clues:
        if not isinstance(v, int) or isinstance(v, bool) or v <= 0:
            raise PuzzleFormatError(f"{label}: clue values must be positive integers, got {v!r}.")
    # runs need at least one gap between them
    if clues and sum(clues) + len(clues) - 1 > length:
        raise PuzzleFormatError(f"{label}: clues {list(clues)} do not fit in {length} cells.")


@dataclass
class PuzzleDefinition:
    """Target clues of a puzzle. The solution grid itself is never kept."""
    row_clues: List[List[int]]
    col_clues: List[List[int]]
    name: str = ""

    def __post_init__(self) -> None:
        if not self.row_clues or not self.col_clues:
            raise PuzzleFormatError("Puzzle needs at least one row and one column.")
        self.row_clues = [list(line) for line in self.row_clues]
        self.col_clues = [list(line) for line in self.col_clues]
        for r, clues in enumerate(self.row_clues):
            _check_line(clues, self.cols, f"Row {r}")
        for c, clues in enumerate(self.col_clues):
            _check_line(clues, self.rows, f"Column {c}")
        if sum(map(sum, self.row_clues)) != sum(map(sum, self.col_clues)):
            raise PuzzleFormatError("Row and column clues shade a different number of cells.")

    @property
    def rows(self) -> int:
        return len(self.row_clues)

    @property
    def cols(self) -> int:
        return len(self.col_clues)

    @classmethod
    def from_solution(cls, solution: Sequence[Sequence[bool]], name: str = "") -> "PuzzleDefinition":
        if not solution or not solution[0]:
            raise PuzzleFormatError("Empty solution grid.")
        cols = len(solution[0])
        if any(len(row) != cols for row in solution):
            raise PuzzleFormatError("Ragged rows: all rows must have the same number of columns.")

        def shade(v: bool) -> CellShade:
            return CellShade.SHADED if v else CellShade.EMPTY

        row_clues = [compute_clues(shade(v) for v in row) for row in solution]
        col_clues = [compute_clues(shade(row[c]) for row in solution) for c in range(cols)]
        return cls(row_clues=row_clues, col_clues=col_clues, name=name)

    def new_grid(self, cell_length: float = 1.0) -> UserGrid:
        return UserGrid(self.rows, self.cols, cell_length)

    def is_solved_by(self, grid: UserGrid) -> bool:
        return grid.row_clues == self.row_clues and grid.col_clues == self.col_clues


# ----------------------------
# Parsing
# ----------------------------

def parse_puzzle_text(text: str, name: str = "") -> PuzzleDefinition:
    """Parse a solution picture: '#', 'X' or '1' shaded, '.', '0', '-' or '_' empty.

    Rows may also be written as space separated tokens. Blank lines and
    lines starting with ';' are ignored.
    """
    solution: List[List[bool]] = []
    for ln in text.splitlines():
        ln = ln.strip()
        if not ln or ln.startswith(";"):
            continue
        toks = ln.split() if " " in ln else list(ln)
        row: List[bool] = []
        for t in toks:
            if len(t) == 1 and t in SHADED_CHARS:
                row.append(True)
            elif len(t) == 1 and t in EMPTY_CHARS:
                row.append(False)
            else:
                raise PuzzleFormatError(f"Bad token: {t}")
        solution.append(row)
    if not solution:
        raise PuzzleFormatError("Empty input.")
    return PuzzleDefinition.from_solution(solution, name=name)


def _clue_lines(data: Any, key: str) -> List[List[int]]:
    lines = data.get(key)
    if not isinstance(lines, list) or not all(isinstance(line, list) for line in lines):
        raise PuzzleFormatError(f"'{key}' must be a list of lists of integers.")
    return lines


def parse_puzzle_json(text: str, name: str = "") -> PuzzleDefinition:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise PuzzleFormatError(f"Invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise PuzzleFormatError("Puzzle JSON must be an object.")

    puzzle = PuzzleDefinition(
        row_clues=_clue_lines(data, "row_clues"),
        col_clues=_clue_lines(data, "col_clues"),
        name=str(data.get("name", name)),
    )
    for key, actual in (("rows", puzzle.rows), ("cols", puzzle.cols)):
        declared = data.get(key)
        if declared is not None and declared != actual:
            raise PuzzleFormatError(f"'{key}' is {declared} but the clues describe {actual}.")
    return puzzle


def load_puzzle(path: str) -> PuzzleDefinition:
    name = os.path.basename(path)
    for ext in PUZZLE_EXTENSIONS:
        if name.endswith(ext):
            name = name[: -len(ext)]
            break
    try:
        with open(path, "r", encoding="utf-8") as f:
            txt = f.read()
    except OSError as e:
        raise PuzzleFormatError(f"Cannot read {path}: {e}") from e

    if path.endswith(".json"):
        puzzle = parse_puzzle_json(txt, name=name)
    else:
        puzzle = parse_puzzle_text(txt, name=name)
    LOGGER.info("Loaded puzzle %r (%sx%s) from %s", puzzle.name, puzzle.rows, puzzle.cols, path)
    return puzzle


def list_puzzle_files(directory: str) -> List[str]:
    if not os.path.isdir(directory):
        return []
    out = []
    for root, dirs, files in os.walk(directory):
        dirs[:] = sorted(d for d in dirs if not d.startswith("."))
        for f in sorted(files):
            if f.endswith(PUZZLE_EXTENSIONS):
                out.append(os.path.join(root, f))
    return out


def find_first_puzzle(directory: str) -> Optional[str]:
    files = list_puzzle_files(directory)
    return files[0] if files else None
