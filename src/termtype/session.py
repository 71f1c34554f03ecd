"""Typing-test session state machine."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from . import metrics
from .models import CharacterSlot, RunResult, SessionPhase, SessionSnapshot, SlotView

DEFAULT_TIME_LIMIT = 60.0

logger = logging.getLogger(__name__)

Clock = Callable[[], float]
PassageChooser = Callable[[], str]


class TypingSession:
    """One typing run: passage, per-character slots, cursor, counters and timing.

    The session moves ``IDLE -> RUNNING -> TERMINAL``. It becomes terminal when
    the cursor passes the last character or when the time limit runs out; the
    latter is noticed lazily, whenever the session is next queried. Every
    operation is total: calls that make no sense in the current state are
    silently ignored. Only :meth:`restart` leaves the terminal state.
    """

    def __init__(
        self,
        choose_passage: PassageChooser,
        time_limit: float = DEFAULT_TIME_LIMIT,
        clock: Clock = time.monotonic,
    ) -> None:
        """Initialize and set up the first run."""
        if time_limit <= 0:
            raise ValueError("Time limit must be positive.")
        self._choose_passage = choose_passage
        self._time_limit = float(time_limit)
        self._clock = clock
        self._setup()

    def _setup(self) -> None:
        """Select a passage and reset every counter, flag and timestamp."""
        passage = self._choose_passage()
        self._passage = passage
        self._slots = [CharacterSlot(char=char) for char in passage]
        if self._slots:
            self._slots[0].is_cursor = True
        self._cursor_pos = 0
        self._typed_count = 0
        self._error_count = 0
        self._start_time: float | None = None
        self._finished_at: float | None = None
        self._started = False
        self._completed = False
        logger.debug("Session set up with a %d-character passage", len(passage))

    @property
    def passage(self) -> str:
        return self._passage

    @property
    def slots(self) -> list[CharacterSlot]:
        return self._slots

    @property
    def cursor_pos(self) -> int:
        return self._cursor_pos

    @property
    def typed_count(self) -> int:
        return self._typed_count

    @property
    def error_count(self) -> int:
        return self._error_count

    @property
    def start_time(self) -> float | None:
        return self._start_time

    @property
    def started(self) -> bool:
        return self._started

    @property
    def completed(self) -> bool:
        return self._completed

    @property
    def time_limit(self) -> float:
        return self._time_limit

    @property
    def phase(self) -> SessionPhase:
        """Current lifecycle state."""
        if self.is_terminal():
            return SessionPhase.TERMINAL
        if self._started:
            return SessionPhase.RUNNING
        return SessionPhase.IDLE

    def elapsed(self) -> float:
        """Seconds since the first accepted input, frozen once the passage is exhausted."""
        if self._start_time is None:
            return 0.0
        end = self._finished_at if self._finished_at is not None else self._clock()
        return max(0.0, end - self._start_time)

    def is_terminal(self) -> bool:
        """Return True once the passage is exhausted or the time limit is reached."""
        return self._cursor_pos >= len(self._passage) or self.elapsed() >= self._time_limit

    def submit_char(self, char: str) -> bool:
        """Type one character at the cursor. Returns whether the input was accepted."""
        if self.is_terminal():
            return False
        if len(char) != 1 or not char.isprintable():
            return False

        if not self._started:
            self._start_time = self._clock()
            self._started = True

        slot = self._slots[self._cursor_pos]
        slot.typed = True
        self._typed_count += 1
        slot.correct = char == slot.char
        if not slot.correct:
            self._error_count += 1

        slot.is_cursor = False
        self._cursor_pos += 1
        if self._cursor_pos < len(self._slots):
            self._slots[self._cursor_pos].is_cursor = True
        else:
            self._finished_at = self._clock()
        return True

    def backspace(self) -> bool:
        """Step the cursor back one slot and undo whatever was typed there."""
        if self.is_terminal() or self._cursor_pos == 0:
            return False

        self._slots[self._cursor_pos].is_cursor = False
        self._cursor_pos -= 1
        slot = self._slots[self._cursor_pos]
        slot.is_cursor = True

        if slot.typed:
            self._typed_count -= 1
            if not slot.correct:
                self._error_count -= 1
            slot.typed = False
            slot.correct = False
        return True

    def restart(self) -> None:
        """Discard the current run and set up a new one with a fresh passage."""
        self._setup()

    def metrics(self) -> metrics.Metrics:
        """Compute WPM and accuracy for the current state."""
        return metrics.compute(
            self._typed_count,
            self._error_count,
            self.elapsed(),
            self._time_limit,
            started=self._started,
        )

    def snapshot(self) -> SessionSnapshot:
        """Build a read-only view for rendering."""
        figures = self.metrics()
        return SessionSnapshot(
            slots=tuple(
                SlotView(char=slot.char, typed=slot.typed, correct=slot.correct, is_cursor=slot.is_cursor)
                for slot in self._slots
            ),
            cursor_pos=self._cursor_pos,
            started=self._started,
            terminal=self.is_terminal(),
            wpm=figures.wpm,
            accuracy=figures.accuracy,
            elapsed_seconds=figures.elapsed_seconds,
            time_limit=self._time_limit,
        )

    def mark_completed(self) -> RunResult | None:
        """Return the run result the first time the session is seen terminal, else None."""
        if self._completed or not self.is_terminal():
            return None
        self._completed = True
        figures = self.metrics()
        logger.info("Run complete: %.0f WPM, %.1f%% accuracy", figures.wpm, figures.accuracy)
        return RunResult(wpm=figures.wpm, accuracy=figures.accuracy)
