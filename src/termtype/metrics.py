"""Words-per-minute and accuracy calculations.

Speed follows the usual convention of five characters per word, counting only
correctly typed characters. Once elapsed time passes the time limit the
divisor switches to the limit itself, so figures stop moving after expiry.
"""

from __future__ import annotations

from dataclasses import dataclass

CHARS_PER_WORD = 5.0


@dataclass(frozen=True)
class Metrics:
    """Derived figures for one moment of a session."""

    wpm: float
    accuracy: float
    elapsed_seconds: float
    time_limit: float


def correct_count(typed_count: int, error_count: int) -> int:
    """Characters typed correctly."""
    return max(0, typed_count - error_count)


def effective_elapsed(elapsed: float, time_limit: float) -> float:
    """Elapsed seconds clamped to the time limit."""
    return min(elapsed, time_limit)


def words_per_minute(
    typed_count: int, error_count: int, elapsed: float, time_limit: float, *, started: bool = True
) -> float:
    """Net words per minute from correct characters."""
    if not started or elapsed <= 0:
        return 0.0
    if elapsed > time_limit:
        minutes = effective_elapsed(elapsed, time_limit) / 60.0
    else:
        minutes = elapsed / 60.0
    return (correct_count(typed_count, error_count) / CHARS_PER_WORD) / minutes


def accuracy(typed_count: int, error_count: int) -> float:
    """Percentage of typed characters that were correct."""
    if typed_count == 0:
        return 0.0
    return 100.0 * correct_count(typed_count, error_count) / typed_count


def compute(typed_count: int, error_count: int, elapsed: float, time_limit: float, *, started: bool) -> Metrics:
    """Compute all figures at once."""
    return Metrics(
        wpm=words_per_minute(typed_count, error_count, elapsed, time_limit, started=started),
        accuracy=accuracy(typed_count, error_count),
        elapsed_seconds=effective_elapsed(elapsed, time_limit),
        time_limit=time_limit,
    )
