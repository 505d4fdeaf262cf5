import math
import pygame
from dataclasses import dataclass
from typing import Tuple, Optional
from nonogram_model import BigPadding, Cell, CellShade, UserGrid
from nonogram_puzzle import PuzzleDefinition
import grid_style

@dataclass
class Camera:
    """Maps grid-local world coordinates to screen pixels."""
    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom: float = 1.0
    min_zoom: float = 0.2
    max_zoom: float = 6.0

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        return (sx - self.offset_x) / self.zoom, (sy - self.offset_y) / self.zoom

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        return wx * self.zoom + self.offset_x, wy * self.zoom + self.offset_y

    def _limit(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))

    def zoom_at(self, anchor: Tuple[float, float], factor: float) -> bool:
        """Scale by `factor` keeping the world point under `anchor` fixed. False when already at a limit."""
        ax, ay = anchor
        wx, wy = self.screen_to_world(ax, ay)
        zoom = self._limit(self.zoom * factor)
        if math.isclose(zoom, self.zoom):
            return False
        self.zoom = zoom
        self.offset_x = ax - wx * zoom
        self.offset_y = ay - wy * zoom
        return True

    def center_on(self, grid: UserGrid, screen_size: Tuple[int, int], clue_margin: Tuple[float, float] = (0.0, 0.0)) -> None:
        """Fit the grid plus its clue margin (left, top) on screen."""
        sw, sh = screen_size
        total_w = grid.width + clue_margin[0]
        total_h = grid.height + clue_margin[1]
        self.zoom = self._limit(min(1.0, 0.9 * sw / total_w, 0.9 * sh / total_h))
        self.offset_x = (sw - total_w * self.zoom) * 0.5 + clue_margin[0] * self.zoom
        self.offset_y = (sh - total_h * self.zoom) * 0.5 + clue_margin[1] * self.zoom

def visible_range(grid: UserGrid, camera: Camera, screen_size: Tuple[int, int]) -> Tuple[range, range]:
    """Row and column indices that can touch the screen, with one cell of slack on each side."""
    sw, sh = screen_size
    wl, wt = camera.screen_to_world(0, 0)
    wr, wb = camera.screen_to_world(sw, sh)

    def span(lo: float, hi: float, count: int) -> range:
        first = max(0, math.floor(lo / grid.cell_length) - 1)
        last = min(count - 1, math.ceil(hi / grid.cell_length) + 1)
        return range(first, last + 1)

    return span(wt, wb, grid.rows), span(wl, wr, grid.cols)

def clue_margin(puzzle: PuzzleDefinition, cell_length: float) -> Tuple[float, float]:
    """World-space room needed left of and above the grid for the clue numbers."""
    longest_row = max((len(c) for c in puzzle.row_clues), default=1) or 1
    longest_col = max((len(c) for c in puzzle.col_clues), default=1) or 1
    step = cell_length * grid_style.CLUE_SPACING
    return longest_row * step + cell_length * 0.5, longest_col * step + cell_length * 0.5

def cell_rect(cell: Cell, camera: Camera) -> pygame.Rect:
    pad = grid_style.BLOCK_PADDING
    left, top = cell.x, cell.y
    right, bottom = cell.x + cell.length, cell.y + cell.length
    if cell.padding & BigPadding.LEFT:
        left += pad
    if cell.padding & BigPadding.TOP:
        top += pad
    if cell.padding & BigPadding.RIGHT:
        right -= pad
    if cell.padding & BigPadding.BOTTOM:
        bottom -= pad
    sx0, sy0 = camera.world_to_screen(left, top)
    sx1, sy1 = camera.world_to_screen(right, bottom)
    return pygame.Rect(int(sx0), int(sy0), max(1, int(sx1) - int(sx0)), max(1, int(sy1) - int(sy0)))

def draw_cell(screen: pygame.Surface, cell: Cell, camera: Camera) -> pygame.Rect:
    rect = cell_rect(cell, camera)
    if cell.shade == CellShade.SHADED:
        pygame.draw.rect(screen, grid_style.COLOR_SHADED, rect)
    else:
        pygame.draw.rect(screen, grid_style.COLOR_EMPTY, rect)
        if cell.shade == CellShade.CROSSED:
            inset = int(rect.width * grid_style.CROSS_INSET)
            width = max(1, rect.width // 12)
            pygame.draw.line(screen, grid_style.COLOR_CROSS,
                             (rect.left + inset, rect.top + inset), (rect.right - inset, rect.bottom - inset), width)
            pygame.draw.line(screen, grid_style.COLOR_CROSS,
                             (rect.left + inset, rect.bottom - inset), (rect.right - inset, rect.top + inset), width)
    pygame.draw.rect(screen, grid_style.COLOR_GRID_LINES, rect, 1)
    return rect

def draw_clues(
    screen: pygame.Surface,
    grid: UserGrid,
    puzzle: PuzzleDefinition,
    camera: Camera,
    font: pygame.font.Font
) -> None:
    step = grid.cell_length * grid_style.CLUE_SPACING
    half = grid.cell_length * 0.5
    current_rows = grid.row_clues
    current_cols = grid.col_clues

    def blit_centered(txt: str, wx: float, wy: float, done: bool) -> None:
        color = grid_style.COLOR_TEXT_CLUE_DONE if done else grid_style.COLOR_TEXT_CLUE
        surf = font.render(txt, True, color)
        sx, sy = camera.world_to_screen(wx, wy)
        screen.blit(surf, (int(sx - surf.get_width() / 2), int(sy - surf.get_height() / 2)))

    for r, clues in enumerate(puzzle.row_clues):
        done = current_rows[r] == clues
        numbers = clues or [0]
        for i, n in enumerate(reversed(numbers)):
            blit_centered(str(n), -half * 0.6 - i * step, r * grid.cell_length + half, done)

    for c, clues in enumerate(puzzle.col_clues):
        done = current_cols[c] == clues
        numbers = clues or [0]
        for i, n in enumerate(reversed(numbers)):
            blit_centered(str(n), c * grid.cell_length + half, -half * 0.6 - i * step, done)

def draw_grid(
    screen: pygame.Surface,
    grid: UserGrid,
    puzzle: PuzzleDefinition,
    camera: Camera,
    font: pygame.font.Font,
    highlight: Optional[Cell] = None
) -> None:
    cell_size = grid.cell_length * camera.zoom
    if cell_size < 2:
        return

    rows, cols = visible_range(grid, camera, screen.get_size())

    # block separators show through the padding
    x0, y0 = camera.world_to_screen(0, 0)
    x1, y1 = camera.world_to_screen(grid.width, grid.height)
    pygame.draw.rect(screen, grid_style.COLOR_BLOCK_LINES, pygame.Rect(int(x0), int(y0), int(x1 - x0), int(y1 - y0)))

    for r in rows:
        for c in cols:
            draw_cell(screen, grid[r, c], camera)

    if highlight is not None:
        pygame.draw.rect(screen, grid_style.COLOR_ACTIVE_HIGHLIGHT, cell_rect(highlight, camera), 3)

    draw_clues(screen, grid, puzzle, camera, font)

