import json
import pytest
import sys
import os

# Add project root to sys.path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from nonogram_model import CellShade, UserGrid
from nonogram_puzzle import (
    PuzzleDefinition,
    PuzzleFormatError,
    find_first_puzzle,
    list_puzzle_files,
    load_puzzle,
    parse_puzzle_json,
    parse_puzzle_text,
)

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def test_parse_text_computes_clues():
    puzzle = parse_puzzle_text("##...\n#.#..\n.....\n#####\n###..\n", name="demo")
    assert puzzle.name == "demo"
    assert (puzzle.rows, puzzle.cols) == (5, 5)
    assert puzzle.row_clues == [[2], [1, 1], [], [5], [3]]
    assert puzzle.col_clues == [[2, 2], [1, 2], [1, 2], [1], [1]]


def test_parse_text_accepts_tokens_and_comments():
    text = "; a comment\n\n1 0 1\n0 1 0\n"
    puzzle = parse_puzzle_text(text)
    assert puzzle.row_clues == [[1, 1], [1]]
    assert puzzle.col_clues == [[1], [1], [1]]


@pytest.mark.parametrize("text", ["", "; only a comment\n", "#.?\n...\n", "##\n#\n", "## #.\n"])
def test_parse_text_rejects_bad_input(text):
    with pytest.raises(PuzzleFormatError):
        parse_puzzle_text(text)


def test_parse_json():
    data = {"name": "arrow", "rows": 2, "cols": 3, "row_clues": [[3], [1]], "col_clues": [[2], [1], [1]]}
    puzzle = parse_puzzle_json(json.dumps(data))
    assert puzzle.name == "arrow"
    assert puzzle.row_clues == [[3], [1]]


@pytest.mark.parametrize("data", [
    "not json",
    "[1, 2]",
    json.dumps({"row_clues": [[1]]}),
    json.dumps({"row_clues": [[1]], "col_clues": [[1]], "rows": 2}),
    json.dumps({"row_clues": [[0]], "col_clues": [[1]]}),
    json.dumps({"row_clues": [[-1]], "col_clues": [[1]]}),
    json.dumps({"row_clues": [[2, 1]], "col_clues": [[1], [1], [1]]}),
    json.dumps({"row_clues": [[1], [1]], "col_clues": [[1]]}),
])
def test_parse_json_rejects_invalid_puzzles(data):
    with pytest.raises(PuzzleFormatError):
        parse_puzzle_json(data)


def test_puzzle_format_error_is_value_error():
    assert issubclass(PuzzleFormatError, ValueError)


def test_is_solved_by_needs_both_axes():
    puzzle = parse_puzzle_text("#..\n..#\n")
    grid = UserGrid(2, 3)
    grid[0, 0].shade = CellShade.SHADED
    grid[1, 0].shade = CellShade.SHADED
    assert grid.row_clues == puzzle.row_clues
    assert not puzzle.is_solved_by(grid)

    grid[1, 0].shade = CellShade.CROSSED
    grid[1, 2].shade = CellShade.SHADED
    assert puzzle.is_solved_by(grid)


def test_new_grid_matches_dimensions():
    puzzle = PuzzleDefinition.from_solution([[True, False, True]])
    grid = puzzle.new_grid(cell_length=8)
    assert (grid.rows, grid.cols, grid.cell_length) == (1, 3, 8)


def test_load_puzzle_from_files(tmp_path):
    txt = tmp_path / "tiny.txt"
    txt.write_text("#.\n.#\n", encoding="utf-8")
    js = tmp_path / "other.json"
    js.write_text(json.dumps({"row_clues": [[1]], "col_clues": [[1]]}), encoding="utf-8")

    puzzle = load_puzzle(str(txt))
    assert puzzle.name == "tiny"
    assert puzzle.row_clues == [[1], [1]]
    assert load_puzzle(str(js)).name == "other"

    assert list_puzzle_files(str(tmp_path)) == [str(js), str(txt)]
    assert find_first_puzzle(str(tmp_path)) == str(js)


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(PuzzleFormatError):
        load_puzzle(str(tmp_path / "nope.txt"))


def test_list_puzzle_files_missing_directory(tmp_path):
    assert list_puzzle_files(str(tmp_path / "missing")) == []
    assert find_first_puzzle(str(tmp_path / "missing")) is None


def test_bundled_puzzles_load():
    files = list_puzzle_files(os.path.join(PROJECT_ROOT, "puzzles"))
    assert files
    for path in files:
        puzzle = load_puzzle(path)
        assert puzzle.rows > 0 and puzzle.cols > 0
