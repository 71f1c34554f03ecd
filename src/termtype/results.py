"""Append-only CSV log of finished runs."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass
from pathlib import Path

from .models import RunResult

HEADER = ("WPM", "Accuracy")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultSummary:
    """Aggregate figures over every logged run."""

    runs: int
    best_wpm: float
    average_wpm: float
    average_accuracy: float


class ResultStore:
    """CSV file holding one ``WPM,Accuracy`` row per finished run."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def append(self, result: RunResult) -> None:
        """Append one run, writing the header first if the file is new."""
        needs_header = not self.path.exists()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            if needs_header:
                writer.writerow(HEADER)
            writer.writerow([f"{result.wpm:.0f}", f"{result.accuracy:.1f}"])

    def read_all(self) -> list[RunResult]:
        """Return logged runs in file order, skipping rows that do not parse."""
        if not self.path.exists():
            return []
        results: list[RunResult] = []
        with self.path.open(newline="", encoding="utf-8") as handle:
            for line_number, row in enumerate(csv.reader(handle), start=1):
                if not row or tuple(cell.strip() for cell in row) == HEADER:
                    continue
                try:
                    results.append(RunResult(wpm=float(row[0]), accuracy=float(row[1])))
                except (IndexError, ValueError):
                    logger.warning("Skipping malformed row %d in %s: %r", line_number, self.path, row)
        return results


def summarize(results: list[RunResult]) -> ResultSummary | None:
    """Aggregate a list of runs."""
    if not results:
        return None
    return ResultSummary(
        runs=len(results),
        best_wpm=max(item.wpm for item in results),
        average_wpm=sum(item.wpm for item in results) / len(results),
        average_accuracy=sum(item.accuracy for item in results) / len(results),
    )
