import curses

from termtype.models import EventKind, InputEvent, SessionSnapshot, SlotView
from termtype.screen import (
    CONTROLS,
    INSTRUCTIONS,
    RESULT_HINT,
    RESULT_TITLE,
    Cell,
    Frame,
    Style,
    build_frame,
    draw,
    translate_key,
    wrap_positions,
)


def _snapshot(text: str, cursor_pos: int = 0, *, started: bool = False, terminal: bool = False) -> SessionSnapshot:
    slots = tuple(
        SlotView(char=char, typed=index < cursor_pos, correct=char != "x", is_cursor=index == cursor_pos)
        for index, char in enumerate(text)
    )
    return SessionSnapshot(
        slots=slots,
        cursor_pos=cursor_pos,
        started=started,
        terminal=terminal,
        wpm=42.4,
        accuracy=87.56,
        elapsed_seconds=12.34,
        time_limit=60.0,
    )


def _texts(frame: Frame) -> list[str]:
    return [cell.text for cell in frame.cells]


def test_wrap_positions_wraps_inside_margins() -> None:
    positions = wrap_positions(7, width=12)
    assert positions == [(2, 4), (2, 5), (2, 6), (2, 7), (3, 4), (3, 5), (3, 6)]


def test_wrap_positions_empty() -> None:
    assert wrap_positions(0, width=80) == []


def test_stats_line_is_centered() -> None:
    frame = build_frame(_snapshot("abc"), width=80, height=24)
    stats = [cell for cell in frame.cells if cell.y == 0]
    line = "".join(cell.text for cell in stats)
    assert line == "12.3s | 42 WPM | 87.6% acc"
    assert stats[0].x == (80 - len(line)) // 2
    assert stats[0].style is Style.STATS_TIME


def test_passage_cells_styled_by_slot_state() -> None:
    frame = build_frame(_snapshot("axcd", cursor_pos=2, started=True), width=80, height=24)
    passage = {(cell.y, cell.x): cell for cell in frame.cells if cell.y == 2}
    assert passage[(2, 4)].style is Style.CORRECT
    assert passage[(2, 5)].style is Style.INCORRECT
    assert passage[(2, 6)].style is Style.CURSOR
    assert passage[(2, 7)].style is Style.UNTYPED
    assert frame.cursor == (2, 6)


def test_idle_frame_shows_instructions_and_controls() -> None:
    frame = build_frame(_snapshot("abc"), width=80, height=24)
    texts = _texts(frame)
    assert INSTRUCTIONS in texts
    assert CONTROLS in texts
    assert RESULT_TITLE not in texts
    controls = next(cell for cell in frame.cells if cell.text == CONTROLS)
    assert controls.y == 22


def test_running_frame_hides_instructions() -> None:
    frame = build_frame(_snapshot("abc", cursor_pos=1, started=True), width=80, height=24)
    assert INSTRUCTIONS not in _texts(frame)


def test_terminal_frame_shows_results() -> None:
    frame = build_frame(_snapshot("abc", cursor_pos=3, started=True, terminal=True), width=80, height=24)
    texts = _texts(frame)
    assert RESULT_TITLE in texts
    assert "Final WPM: 42 | Final Accuracy: 87.6%" in texts
    assert RESULT_HINT in texts
    assert frame.cursor is None


def test_controls_and_results_move_below_long_passage() -> None:
    frame = build_frame(_snapshot("a" * 200, started=True, terminal=True), width=24, height=10)
    last_row = max(cell.y for cell in frame.cells if cell.style in {Style.UNTYPED, Style.CURSOR})
    controls = next(cell for cell in frame.cells if cell.text == CONTROLS)
    title = next(cell for cell in frame.cells if cell.text == RESULT_TITLE)
    assert controls.y == last_row + 2
    assert title.y == last_row + 2


def test_translate_key() -> None:
    assert translate_key("\x1b", terminal=False) == InputEvent(EventKind.QUIT)
    assert translate_key(27, terminal=True) == InputEvent(EventKind.QUIT)
    assert translate_key(curses.KEY_BACKSPACE, terminal=False) == InputEvent(EventKind.BACKSPACE)
    assert translate_key("\x7f", terminal=False) == InputEvent(EventKind.BACKSPACE)
    assert translate_key(" ", terminal=False) == InputEvent(EventKind.SPACE, " ")
    assert translate_key("é", terminal=False) == InputEvent(EventKind.CHAR, "é")
    assert translate_key(curses.KEY_RESIZE, terminal=False) is None


def test_restart_key_only_when_terminal() -> None:
    assert translate_key("r", terminal=False) == InputEvent(EventKind.CHAR, "r")
    assert translate_key("R", terminal=True) == InputEvent(EventKind.RESTART)


class FakeWindow:
    def __init__(self, height: int, width: int) -> None:
        self.size = (height, width)
        self.writes: list[tuple[int, int, str, int]] = []
        self.moved: tuple[int, int] | None = None
        self.erased = False
        self.refreshed = False

    def erase(self) -> None:
        self.erased = True

    def getmaxyx(self) -> tuple[int, int]:
        return self.size

    def addstr(self, y: int, x: int, text: str, attr: int) -> None:
        self.writes.append((y, x, text, attr))

    def move(self, y: int, x: int) -> None:
        self.moved = (y, x)

    def refresh(self) -> None:
        self.refreshed = True


def test_draw_clips_to_window() -> None:
    window = FakeWindow(5, 10)
    frame = Frame(
        cells=(
            Cell(0, -2, "abcdef", Style.PLAIN),
            Cell(1, 7, "xyz", Style.CORRECT),
            Cell(9, 0, "offscreen", Style.PLAIN),
            Cell(2, 9, "z", Style.PLAIN),
        ),
        cursor=(1, 3),
    )
    draw(window, frame, {Style.PLAIN: 0, Style.CORRECT: 5})
    assert window.erased is True
    assert window.writes == [(0, 0, "cdef", 0), (1, 7, "xy", 5)]
    assert window.moved == (1, 3)
    assert window.refreshed is True
