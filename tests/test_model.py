import pytest
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from nonogram_model import BigPadding, Cell, CellShade, UserGrid, compute_clues, grid_padding

E = CellShade.EMPTY
S = CellShade.SHADED
X = CellShade.CROSSED


@pytest.mark.parametrize("shades, expected", [
    ([], []),
    ([E, E], []),
    ([S, S, E, S], [2, 1]),
    ([S, S, S], [3]),
    ([E, S, E, E, S, S], [1, 2]),
    ([S, X, S], [1, 1]),
    ([X, X, X], []),
    ([E, S, S, X, E, S, S, S, E], [2, 3]),
])
def test_compute_clues(shades, expected):
    assert compute_clues(shades) == expected


def test_compute_clues_accounts_for_every_shaded_cell():
    shades = [S, E, S, S, X, S, E, E, S, S, S, S]
    runs = compute_clues(shades)
    assert sum(runs) == shades.count(S)
    assert all(r > 0 for r in runs)
    # every run but the last needs at least one non-shaded cell after it
    assert len(runs) - 1 <= len(shades) - shades.count(S)


def test_compute_clues_accepts_generators():
    assert compute_clues(s for s in [S, E, S]) == [1, 1]


def test_click_toggles_primary_mark():
    cell = Cell(0, 0)
    cell.click(False)
    assert cell.shade == S
    cell.click(False)
    assert cell.shade == E


def test_click_toggles_secondary_mark():
    cell = Cell(0, 0)
    cell.click(True)
    assert cell.shade == X
    cell.click(True)
    assert cell.shade == E


def test_click_switches_between_marks():
    cell = Cell(0, 0, shade=S)
    cell.click(True)
    assert cell.shade == X
    cell.click(False)
    assert cell.shade == S


def test_cell_geometry():
    cell = Cell(2, 3, length=10)
    assert (cell.x, cell.y) == (30, 20)
    assert cell.is_inside(30, 20)
    assert cell.is_inside(39.9, 29.9)
    assert not cell.is_inside(40, 25)
    assert not cell.is_inside(35, 30)


def test_grid_has_one_cell_per_position():
    grid = UserGrid(3, 4)
    assert len(grid.cells) == 12
    positions = [(cell.row, cell.col) for cell in grid]
    assert positions == [(r, c) for r in range(3) for c in range(4)]


@pytest.mark.parametrize("rows, cols", [(0, 3), (3, 0), (-1, 2)])
def test_grid_rejects_bad_dimensions(rows, cols):
    with pytest.raises(ValueError):
        UserGrid(rows, cols)


def test_get_and_indexing():
    grid = UserGrid(3, 4)
    cell = grid.get(2, 1)
    assert (cell.row, cell.col) == (2, 1)
    assert grid[2, 1] is cell


@pytest.mark.parametrize("r, c", [(3, 0), (0, 4), (-1, 0), (0, -1)])
def test_get_out_of_bounds_raises(r, c):
    grid = UserGrid(3, 4)
    with pytest.raises(IndexError):
        grid.get(r, c)


def test_cell_at_matches_linear_scan():
    grid = UserGrid(4, 6, cell_length=12)
    for x in [0, 5.5, 11.99, 12, 30, 71.5]:
        for y in [0, 6, 23.9, 24, 47.99]:
            expected = [cell for cell in grid if cell.is_inside(x, y)]
            assert len(expected) == 1
            assert grid.cell_at(x, y) is expected[0]


@pytest.mark.parametrize("length", [0.7, 1 / 3, 13.7])
def test_cell_at_fractional_length_near_boundaries(length):
    grid = UserGrid(30, 30, cell_length=length)
    y = length / 2
    for c in range(grid.cols):
        for x in [c * length, grid[0, c].x, grid[0, c].x + grid[0, c].length, c * length + length * 1e-9]:
            expected = [cell for cell in grid if cell.is_inside(x, y)]
            assert grid.cell_at(x, y) is (expected[0] if expected else None)
            transposed = [cell for cell in grid if cell.is_inside(y, x)]
            assert grid.cell_at(y, x) is (transposed[0] if transposed else None)


def test_cell_at_boundary_rounding_up():
    grid = UserGrid(30, 30, cell_length=0.7)
    cell = grid.cell_at(2.0999999999999996, 0.35)
    assert cell is not None
    assert (cell.row, cell.col) == (0, 3)


@pytest.mark.parametrize("x, y", [(-0.1, 5), (5, -0.1), (60, 5), (5, 40), (1000, 1000), (float("nan"), 3),
                                  (float("inf"), 3)])
def test_cell_at_outside_grid_is_none(x, y):
    grid = UserGrid(4, 6, cell_length=10)
    assert grid.cell_at(x, y) is None


def test_row_and_col_clues():
    grid = UserGrid(3, 3)
    for r, c in [(0, 0), (0, 1), (1, 1), (2, 0), (2, 2)]:
        grid[r, c].shade = S
    grid[1, 0].shade = X
    assert grid.row_clues == [[2], [1], [1, 1]]
    assert grid.col_clues == [[1, 1], [2], [1]]


def test_clear_empties_every_clue():
    grid = UserGrid(5, 7)
    for cell in grid:
        cell.shade = S if (cell.row + cell.col) % 3 else X
    grid.clear()
    assert all(cell.shade == E for cell in grid)
    assert grid.row_clues == [[] for _ in range(5)]
    assert grid.col_clues == [[] for _ in range(7)]
    assert (grid.rows, grid.cols) == (5, 7)


def test_snapshot_is_immutable_copy():
    grid = UserGrid(2, 2)
    grid[0, 1].shade = S
    snap = grid.snapshot()
    grid[0, 1].shade = E
    assert snap == (E, S, E, E)
    assert isinstance(snap, tuple)


def test_restore_roundtrip_and_shape_check():
    grid = UserGrid(2, 3)
    grid[1, 2].shade = X
    snap = grid.snapshot()
    other = UserGrid(2, 3)
    other.restore(snap)
    assert other.shades == grid.shades
    with pytest.raises(ValueError):
        other.restore(snap[:-1])


@pytest.mark.parametrize("pos, expected", [
    ((0, 0), BigPadding.NONE),
    ((4, 4), BigPadding.BOTTOM | BigPadding.RIGHT),
    ((5, 5), BigPadding.TOP | BigPadding.LEFT),
    ((4, 5), BigPadding.BOTTOM | BigPadding.LEFT),
    ((4, 9), BigPadding.BOTTOM),
    ((9, 9), BigPadding.NONE),
    ((2, 5), BigPadding.LEFT),
])
def test_grid_padding_marks_block_boundaries(pos, expected):
    assert grid_padding(pos[0], pos[1], 10, 10) == expected


def test_grid_assigns_padding_to_cells():
    grid = UserGrid(10, 10)
    assert grid[4, 4].padding == BigPadding.BOTTOM | BigPadding.RIGHT
    assert UserGrid(5, 5)[4, 4].padding == BigPadding.NONE
