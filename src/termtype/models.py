"""Core value types for a typing-test run."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


@dataclass
class CharacterSlot:
    """Per-character state: the expected character and what happened to it."""

    char: str
    typed: bool = False
    correct: bool = False
    is_cursor: bool = False


class SessionPhase(Enum):
    """Lifecycle state of a session."""

    IDLE = "idle"
    RUNNING = "running"
    TERMINAL = "terminal"


@dataclass(frozen=True)
class SlotView:
    """Immutable copy of one slot handed to the renderer."""

    char: str
    typed: bool
    correct: bool
    is_cursor: bool


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session for one render tick."""

    slots: tuple[SlotView, ...]
    cursor_pos: int
    started: bool
    terminal: bool
    wpm: float
    accuracy: float
    elapsed_seconds: float
    time_limit: float


@dataclass(frozen=True)
class RunResult:
    """Outcome of one finished run."""

    wpm: float
    accuracy: float


@dataclass(frozen=True)
class PassageSet:
    """Named corpus of candidate passages."""

    id: str
    title: str
    passages: list[str]


class EventKind(Enum):
    """Kinds of input the driver reacts to."""

    CHAR = "char"
    SPACE = "space"
    BACKSPACE = "backspace"
    RESTART = "restart"
    QUIT = "quit"


@dataclass(frozen=True)
class InputEvent:
    """One discrete input event; ``char`` is set for CHAR and SPACE."""

    kind: EventKind
    char: str = ""
