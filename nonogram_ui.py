"""
Nonogram (Pygame)

Features:
- Play a picross puzzle loaded from the puzzles/ directory (.txt solution
  pictures or .json clue lists).
- Drag to fill, hold to cross out, undo, clear, and a dialog when solved.

Controls:
- Left click: tap = fill, hold = cross, drag = copy the first cell's mark
  along its row or column (fat-finger mode) or onto every cell touched
- Middle drag: pan, mouse wheel: zoom
- Ctrl+Z: undo, X: swap fill/cross for taps
- Buttons: Undo, Clear, Mode, Puzzles
"""

import argparse
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import pygame
import pygame_gui

from nonogram_model import UserGrid
from nonogram_puzzle import PuzzleDefinition, PuzzleFormatError, find_first_puzzle, list_puzzle_files, load_puzzle
from nonogram_gesture import EventLoopTimer, GestureConfig, GestureController, GestureState
from nonogram_undo import UndoStack
from nonogram_drawing import Camera, clue_margin, draw_grid
import grid_style

LOGGER = logging.getLogger(__name__)

# ----------------------------
# UI Constants
# ----------------------------
BASE_CELL_SIZE = 40
MAX_LOG_LINES = 100
ZOOM_STEP = 1.1
ENGINE_LOGGERS = ("nonogram_model", "nonogram_puzzle", "nonogram_undo", "nonogram_gesture", "nonogram_ui")

# 5x5 heart, used when no puzzle file can be found
FALLBACK_PUZZLE = """
.#.#.
#####
#####
.###.
..#..
"""


# ----------------------------
# App state
# ----------------------------

@dataclass
class SessionState:
    puzzle: PuzzleDefinition
    controller: GestureController
    puzzle_path: Optional[str] = None

    @property
    def grid(self) -> UserGrid:
        return self.controller.grid


# ----------------------------
# Helpers
# ----------------------------

def configure_logging(verbose: bool = False) -> None:
    """Console logging. --verbose turns on gesture and undo traces for the engine modules only."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s", datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.INFO)
    for name in ENGINE_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.NOTSET)


def load_settings(path: Optional[str]) -> Dict[str, Any]:
    """Read the preference file (fatFinger, vibrate, longPressTimeout). Missing file means defaults."""
    if not path or not os.path.exists(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Settings file {path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a JSON object.")
    return data


def build_config(args: argparse.Namespace) -> GestureConfig:
    prefs = load_settings(args.settings)
    if args.no_fat_finger:
        prefs["fatFinger"] = False
    if args.vibrate:
        prefs["vibrate"] = True
    if args.long_press_ms is not None:
        prefs["longPressTimeout"] = args.long_press_ms
    return GestureConfig.from_preferences(prefs)


def html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
         .replace("<", "&lt;")
         .replace(">", "&gt;")
         .replace('"', "&quot;")
         .replace("'", "&#39;")
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Play a nonogram puzzle")
    parser.add_argument("puzzle", nargs="?", help="Puzzle file to open (.txt or .json)")
    parser.add_argument("--puzzles", default="puzzles", help="Directory listed in the puzzle browser")
    parser.add_argument("--settings", default=None, help="JSON preferences file")
    parser.add_argument("--no-fat-finger", action="store_true", help="Drag fills only the cells touched")
    parser.add_argument("--vibrate", action="store_true", help="Haptic feedback on long press and reset")
    parser.add_argument("--long-press-ms", type=float, default=None, help="Long press timeout in milliseconds")
    parser.add_argument("--cell-size", type=int, default=BASE_CELL_SIZE, help="Cell edge in pixels at zoom 1")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser


# ----------------------------
# Main
# ----------------------------

def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))
    base_cell_size = max(8, args.cell_size)

    pygame.init()
    pygame.display.set_caption("Nonogram")

    screen = pygame.display.set_mode((1200, 800), pygame.RESIZABLE)
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("arial", 18)

    ui_manager = pygame_gui.UIManager(screen.get_size())

    controls_win = pygame_gui.elements.UIWindow(
        pygame.Rect(20, 20, 220, 290),
        ui_manager,
        window_display_title="Controls",
        resizable=True
    )
    controls_win.close_window_button.hide()
    log_win = pygame_gui.elements.UIWindow(
        pygame.Rect(20, 520, 420, 260),
        ui_manager,
        window_display_title="Log",
        resizable=True
    )
    log_win.close_window_button.hide()
    browser_win = pygame_gui.elements.UIWindow(
        pygame.Rect(260, 20, 320, 420),
        ui_manager,
        window_display_title="Puzzles",
        visible=False,
        resizable=True
    )
    browser_win.close_window_button.hide()
    win_dialog = pygame_gui.elements.UIWindow(
        pygame.Rect(450, 300, 300, 160),
        ui_manager,
        window_display_title="Finished",
        visible=False
    )
    win_dialog.close_window_button.hide()

    btn_undo = pygame_gui.elements.UIButton(pygame.Rect(10, 10, 190, 36), "Undo", ui_manager, container=controls_win)
    btn_clear = pygame_gui.elements.UIButton(pygame.Rect(10, 56, 190, 36), "Clear", ui_manager, container=controls_win)
    btn_mode = pygame_gui.elements.UIButton(pygame.Rect(10, 102, 190, 36), "Tap: Fill", ui_manager, container=controls_win)
    btn_puzzles = pygame_gui.elements.UIButton(pygame.Rect(10, 148, 190, 36), "Puzzles", ui_manager, container=controls_win)

    pygame_gui.elements.UILabel(
        pygame.Rect(10, 194, 190, 50),
        "Fat finger: " + ("on" if config.fat_finger else "off"),
        ui_manager,
        container=controls_win
    )

    log_box = pygame_gui.elements.UITextBox(
        html_text="",
        relative_rect=pygame.Rect(10, 10, 400, 170),
        manager=ui_manager,
        container=log_win,
        anchors={"left": "left", "right": "right", "top": "top", "bottom": "bottom"}
    )

    files_list = pygame_gui.elements.UISelectionList(
        relative_rect=pygame.Rect(10, 10, 290, 290),
        item_list=[],
        manager=ui_manager,
        container=browser_win,
        anchors={"left": "left", "right": "right", "top": "top"}
    )
    btn_close_browser = pygame_gui.elements.UIButton(
        pygame.Rect(10, 310, 290, 32),
        "Close",
        ui_manager,
        container=browser_win,
        anchors={"left": "left", "right": "right", "top": "top"}
    )

    pygame_gui.elements.UILabel(pygame.Rect(10, 10, 270, 30), "Level complete!", ui_manager, container=win_dialog)
    btn_menu = pygame_gui.elements.UIButton(pygame.Rect(10, 60, 125, 36), "Menu", ui_manager, container=win_dialog)
    btn_reset = pygame_gui.elements.UIButton(pygame.Rect(145, 60, 125, 36), "Reset", ui_manager, container=win_dialog)

    log_lines: List[str] = []

    def log_append(msg: str) -> None:
        if not msg:
            return
        for line in msg.splitlines():
            line = line.strip()
            if line:
                log_lines.append(line)
        if len(log_lines) > MAX_LOG_LINES:
            del log_lines[0:len(log_lines) - MAX_LOG_LINES]
        log_box.set_text("<br>".join(html_escape(ln) for ln in log_lines))
        if log_box.scroll_bar is not None:
            log_box.scroll_bar.set_scroll_from_start_percentage(1.0)

    file_by_label: Dict[str, str] = {}

    def refresh_file_list() -> None:
        file_by_label.clear()
        for path in list_puzzle_files(args.puzzles):
            file_by_label[os.path.relpath(path, args.puzzles)] = path
        files_list.set_item_list(list(file_by_label))

    camera = Camera()
    timer = EventLoopTimer(clock=pygame.time.get_ticks)

    def haptic() -> None:
        LOGGER.info("Haptic pulse")
        log_append("*bzz*")

    def on_solved() -> None:
        log_append(f"Solved {state.puzzle.name or 'puzzle'}!")
        win_dialog.show()
        win_dialog.close_window_button.hide()

    def start_session(puzzle: PuzzleDefinition, path: Optional[str]) -> SessionState:
        timer.cancel()
        grid = puzzle.new_grid(cell_length=base_cell_size)
        controller = GestureController(
            grid,
            puzzle,
            timer,
            config=config,
            undo_stack=UndoStack(puzzle.rows, puzzle.cols),
            on_haptic=haptic,
            on_solved=on_solved,
        )
        camera.center_on(grid, screen.get_size(), clue_margin(puzzle, base_cell_size))
        win_dialog.hide()
        btn_mode.set_text("Tap: Fill")
        log_append(f"Loaded {puzzle.name or 'puzzle'} ({puzzle.rows}x{puzzle.cols}).")
        return SessionState(puzzle=puzzle, controller=controller, puzzle_path=path)

    def open_puzzle(path: str) -> Optional[SessionState]:
        try:
            return start_session(load_puzzle(path), path)
        except PuzzleFormatError as e:
            LOGGER.warning("Could not load %s: %s", path, e)
            log_append(f"Load failed: {e}")
            return None

    def is_over_ui(pos: Tuple[int, int]) -> bool:
        for w in (controls_win, log_win, browser_win, win_dialog):
            if w.visible and w.get_abs_rect().collidepoint(pos):
                return True
        return False

    refresh_file_list()
    first_puzzle = args.puzzle or find_first_puzzle(args.puzzles)
    opened = open_puzzle(first_puzzle) if first_puzzle else None
    state = opened or start_session(PuzzleDefinition.from_solution(
        [[ch == "#" for ch in ln] for ln in FALLBACK_PUZZLE.split()], name="heart"), None)
    log_append("Ready.")

    panning = False
    pan_last: Optional[Tuple[int, int]] = None
    lmb_on_grid = False

    running = True
    while running:
        time_delta = clock.tick(60) / 1000.0

        # long press fires from the same loop as pointer events
        timer.poll()

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
                break

            if event.type == pygame.VIDEORESIZE:
                screen = pygame.display.set_mode(event.size, pygame.RESIZABLE)
                ui_manager.set_window_resolution(event.size)

            if event.type in (pygame.WINDOWFOCUSLOST, pygame.WINDOWLEAVE):
                if lmb_on_grid:
                    state.controller.cancel()
                    lmb_on_grid = False

            ui_manager.process_events(event)

            if event.type == pygame_gui.UI_BUTTON_PRESSED:
                if event.ui_element == btn_undo:
                    state.controller.undo()
                    log_append(f"Undo ({len(state.controller.undo_stack)} left).")

                elif event.ui_element == btn_clear:
                    state.controller.clear()
                    log_append("Grid cleared.")

                elif event.ui_element == btn_mode:
                    cross = state.controller.toggle_cross_mode()
                    btn_mode.set_text("Tap: Cross" if cross else "Tap: Fill")

                elif event.ui_element == btn_puzzles:
                    refresh_file_list()
                    browser_win.show()
                    browser_win.close_window_button.hide()

                elif event.ui_element == btn_close_browser:
                    browser_win.hide()

                elif event.ui_element == btn_menu:
                    win_dialog.hide()
                    refresh_file_list()
                    browser_win.show()
                    browser_win.close_window_button.hide()

                elif event.ui_element == btn_reset:
                    win_dialog.hide()
                    if config.vibrate:
                        haptic()
                    state.controller.clear()
                    log_append("Puzzle reset.")

            if event.type == pygame_gui.UI_SELECTION_LIST_NEW_SELECTION and event.ui_element == files_list:
                path = file_by_label.get(event.text)
                if path is not None:
                    new_state = open_puzzle(path)
                    if new_state is not None:
                        state = new_state
                        browser_win.hide()

            if event.type == pygame.MOUSEWHEEL:
                if not is_over_ui(pygame.mouse.get_pos()):
                    if event.y > 0:
                        camera.zoom_at(pygame.mouse.get_pos(), ZOOM_STEP)
                    elif event.y < 0:
                        camera.zoom_at(pygame.mouse.get_pos(), 1.0 / ZOOM_STEP)

            if event.type == pygame.KEYDOWN:
                if event.key == pygame.K_z and event.mod & pygame.KMOD_CTRL:
                    state.controller.undo()
                elif event.key == pygame.K_x:
                    cross = state.controller.toggle_cross_mode()
                    btn_mode.set_text("Tap: Cross" if cross else "Tap: Fill")

            if event.type == pygame.MOUSEBUTTONDOWN:
                if event.button == 2 and not is_over_ui(event.pos):
                    panning = True
                    pan_last = event.pos

                if event.button == 1 and not is_over_ui(event.pos) and not win_dialog.visible:
                    lmb_on_grid = True
                    state.controller.press(*camera.screen_to_world(*event.pos))

            if event.type == pygame.MOUSEMOTION:
                if panning and pan_last is not None:
                    mx, my = event.pos
                    lx, ly = pan_last
                    camera.offset_x += mx - lx
                    camera.offset_y += my - ly
                    pan_last = event.pos

                if lmb_on_grid:
                    state.controller.move(*camera.screen_to_world(*event.pos))

            if event.type == pygame.MOUSEBUTTONUP:
                if event.button == 2:
                    panning = False
                    pan_last = None

                if event.button == 1 and lmb_on_grid:
                    lmb_on_grid = False
                    state.controller.release()

        ui_manager.update(time_delta)

        screen.fill(grid_style.COLOR_BG)

        highlight = None
        session = state.controller.session
        if session is not None and state.controller.state == GestureState.DRAGGING:
            highlight = session.active_cell
        draw_grid(screen, state.grid, state.puzzle, camera, font, highlight=highlight)

        ui_manager.draw_ui(screen)

        pygame.display.flip()

    pygame.quit()


if __name__ == "__main__":
    main()
