"""Terminal rendering and key translation.

Rendering is split in two: :func:`build_frame` turns a session snapshot into
positioned, styled text runs without touching the terminal, and :func:`draw`
paints such a frame with curses.
"""

from __future__ import annotations

import curses
from dataclasses import dataclass
from enum import Enum

from .models import EventKind, InputEvent, SessionSnapshot, SlotView

TEXT_MARGIN = 4
TEXT_TOP = 2
STATS_SEPARATOR = " | "
INSTRUCTIONS = "Start typing to begin the test."
CONTROLS = "-- press ESC to exit --"
RESULT_TITLE = "Test Complete!"
RESULT_HINT = "Press ESC to exit or R to restart."

BACKSPACE_KEYS = {curses.KEY_BACKSPACE, "\b", "\x7f", 127, 8}
QUIT_KEYS = {"\x1b", 27, "\x03"}
RESTART_KEYS = {"r", "R"}


class Style(Enum):
    """Visual role of a piece of text."""

    PLAIN = "plain"
    STATS_TIME = "stats_time"
    STATS_WPM = "stats_wpm"
    STATS_ACCURACY = "stats_accuracy"
    UNTYPED = "untyped"
    CURSOR = "cursor"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    INSTRUCTIONS = "instructions"
    CONTROLS = "controls"
    RESULT_TITLE = "result_title"
    RESULT_TEXT = "result_text"
    RESULT_HINT = "result_hint"


@dataclass(frozen=True)
class Cell:
    """A run of text at a screen position."""

    y: int
    x: int
    text: str
    style: Style


@dataclass(frozen=True)
class Frame:
    """Everything to paint for one tick, plus where the terminal cursor goes."""

    cells: tuple[Cell, ...]
    cursor: tuple[int, int] | None


def wrap_positions(count: int, width: int, margin: int = TEXT_MARGIN, top: int = TEXT_TOP) -> list[tuple[int, int]]:
    """Return the ``(y, x)`` cell for each of ``count`` characters, wrapping at ``width - margin``."""
    positions: list[tuple[int, int]] = []
    x, y = margin, top
    for _ in range(count):
        if x >= width - margin:
            x = margin
            y += 1
        positions.append((y, x))
        x += 1
    return positions


def slot_style(slot: SlotView) -> Style:
    """Style for one passage character."""
    if slot.is_cursor:
        return Style.CURSOR
    if slot.typed:
        return Style.CORRECT if slot.correct else Style.INCORRECT
    return Style.UNTYPED


def _centered(text: str, width: int) -> int:
    return (width - len(text)) // 2


def _stats_cells(snapshot: SessionSnapshot, width: int) -> list[Cell]:
    parts = [
        (f"{snapshot.elapsed_seconds:.1f}s", Style.STATS_TIME),
        (STATS_SEPARATOR, Style.PLAIN),
        (f"{snapshot.wpm:.0f} WPM", Style.STATS_WPM),
        (STATS_SEPARATOR, Style.PLAIN),
        (f"{snapshot.accuracy:.1f}% acc", Style.STATS_ACCURACY),
    ]
    x = _centered("".join(text for text, _ in parts), width)
    cells: list[Cell] = []
    for text, style in parts:
        cells.append(Cell(0, x, text, style))
        x += len(text)
    return cells


def build_frame(snapshot: SessionSnapshot, width: int, height: int) -> Frame:
    """Lay out stats, passage, hints and results for one snapshot."""
    cells = _stats_cells(snapshot, width)

    positions = wrap_positions(len(snapshot.slots), width)
    cursor: tuple[int, int] | None = None
    for slot, (y, x) in zip(snapshot.slots, positions):
        cells.append(Cell(y, x, slot.char, slot_style(slot)))
        if slot.is_cursor:
            cursor = (y, x)
    last_row = positions[-1][0] if positions else TEXT_TOP

    if not snapshot.started and not snapshot.terminal:
        cells.append(Cell(height // 2, _centered(INSTRUCTIONS, width), INSTRUCTIONS, Style.INSTRUCTIONS))

    controls_y = height - 2
    if controls_y <= last_row + 2:
        controls_y = last_row + 2
    cells.append(Cell(controls_y, _centered(CONTROLS, width), CONTROLS, Style.CONTROLS))

    if snapshot.terminal:
        result_y = (height - 4) // 2 + 2
        if result_y <= last_row:
            result_y = last_row + 2
        summary = f"Final WPM: {snapshot.wpm:.0f} | Final Accuracy: {snapshot.accuracy:.1f}%"
        cells.append(Cell(result_y, _centered(RESULT_TITLE, width), RESULT_TITLE, Style.RESULT_TITLE))
        cells.append(Cell(result_y + 1, _centered(summary, width), summary, Style.RESULT_TEXT))
        cells.append(Cell(result_y + 2, _centered(RESULT_HINT, width), RESULT_HINT, Style.RESULT_HINT))

    return Frame(cells=tuple(cells), cursor=cursor)


def translate_key(key: str | int, *, terminal: bool) -> InputEvent | None:
    """Map a ``get_wch()`` result to an input event, or None for keys with no meaning."""
    if key in QUIT_KEYS:
        return InputEvent(EventKind.QUIT)
    if key in BACKSPACE_KEYS:
        return InputEvent(EventKind.BACKSPACE)
    if not isinstance(key, str):
        return None
    if terminal and key in RESTART_KEYS:
        return InputEvent(EventKind.RESTART)
    if key == " ":
        return InputEvent(EventKind.SPACE, " ")
    return InputEvent(EventKind.CHAR, key)


def init_styles() -> dict[Style, int]:
    """Set up color pairs and return the curses attribute for each style."""
    curses.start_color()
    curses.use_default_colors()
    colors = {
        Style.STATS_TIME: (curses.COLOR_BLUE, -1, curses.A_BOLD),
        Style.STATS_WPM: (curses.COLOR_YELLOW, -1, curses.A_BOLD),
        Style.STATS_ACCURACY: (curses.COLOR_GREEN, -1, curses.A_BOLD),
        Style.UNTYPED: (curses.COLOR_WHITE, -1, curses.A_DIM),
        Style.CURSOR: (curses.COLOR_BLACK, curses.COLOR_WHITE, 0),
        Style.CORRECT: (curses.COLOR_GREEN, -1, 0),
        Style.INCORRECT: (curses.COLOR_RED, -1, 0),
        Style.INSTRUCTIONS: (curses.COLOR_YELLOW, -1, 0),
        Style.CONTROLS: (curses.COLOR_WHITE, -1, curses.A_DIM),
        Style.RESULT_TITLE: (curses.COLOR_CYAN, -1, curses.A_BOLD),
        Style.RESULT_TEXT: (curses.COLOR_CYAN, -1, 0),
        Style.RESULT_HINT: (curses.COLOR_WHITE, -1, curses.A_DIM),
    }
    attrs = {Style.PLAIN: curses.A_NORMAL}
    for pair_number, (style, (fg, bg, extra)) in enumerate(colors.items(), start=1):
        curses.init_pair(pair_number, fg, bg)
        attrs[style] = curses.color_pair(pair_number) | extra
    return attrs


def draw(stdscr: curses.window, frame: Frame, attrs: dict[Style, int]) -> None:
    """Paint a frame, clipping anything that falls outside the window."""
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    for cell in frame.cells:
        if not 0 <= cell.y < height:
            continue
        text, x = cell.text, cell.x
        if x < 0:
            text, x = text[-x:], 0
        # Leave the last column free so curses never writes past the end of the window.
        text = text[: max(0, width - 1 - x)]
        if text:
            stdscr.addstr(cell.y, x, text, attrs.get(cell.style, curses.A_NORMAL))
    if frame.cursor is not None:
        y, x = frame.cursor
        if 0 <= y < height and 0 <= x < width - 1:
            stdscr.move(y, x)
    stdscr.refresh()
