"""CLI entrypoint for the terminal typing test."""

from __future__ import annotations

import argparse
import csv
import curses
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path

from . import __version__
from .content_loader import DEFAULT_PASSAGE_SET, PassageSelectionError, load_passage_sets, passage_chooser
from .models import EventKind, InputEvent, PassageSet, RunResult, SessionSnapshot
from .results import ResultStore, summarize
from .screen import build_frame, draw, init_styles, translate_key
from .session import DEFAULT_TIME_LIMIT, TypingSession

PrintFn = Callable[[str], None]
TICK_MS = 100
DEFAULT_RESULTS_PATH = "results.csv"
DEFAULT_LOG_NAME = "termtype.log"
PACKAGE_LOGGER = "termtype"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
HISTORY_RECENT_RUNS = 10
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

logger = logging.getLogger(__name__)


class TypingApp:
    """Event-loop driver: owns the session and hands finished runs to the result store."""

    def __init__(self, session: TypingSession, store: ResultStore) -> None:
        self.session = session
        self.store = store

    def handle(self, event: InputEvent | None) -> bool:
        """Apply one input event. Returns False when the app should quit."""
        if event is None:
            return True
        if event.kind is EventKind.QUIT:
            return False
        if event.kind is EventKind.RESTART:
            if self.session.is_terminal():
                self.session.restart()
        elif event.kind is EventKind.BACKSPACE:
            self.session.backspace()
        else:
            self.session.submit_char(event.char)
        self.observe()
        return True

    def observe(self) -> RunResult | None:
        """Persist the run the first time it is seen finished."""
        result = self.session.mark_completed()
        if result is not None:
            self._save(result)
        return result

    def tick(self) -> SessionSnapshot:
        """Check for completion (including time expiry) and return a render snapshot."""
        self.observe()
        return self.session.snapshot()

    def _save(self, result: RunResult) -> None:
        try:
            self.store.append(result)
        except (OSError, csv.Error) as exc:
            logger.error("Could not save result to %s: %s", self.store.path, exc)


def _positive_int(text: str) -> int:
    """argparse type for a strictly positive integer."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError("must be a positive number of seconds")
    return value


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser."""
    parser = argparse.ArgumentParser(prog="termtype", description="Terminal typing-speed test")
    parser.add_argument("command", nargs="?", default="play", choices=["play", "history", "passages"])
    parser.add_argument(
        "--time",
        type=_positive_int,
        default=int(DEFAULT_TIME_LIMIT),
        help="time limit for the test in seconds (default: %(default)s)",
    )
    parser.add_argument(
        "--passages",
        default=DEFAULT_PASSAGE_SET,
        help="passage set to draw from (default: %(default)s)",
    )
    parser.add_argument(
        "--py",
        dest="passages",
        action="store_const",
        const="python",
        help="test on Python code like text (same as --passages python)",
    )
    parser.add_argument("--results", default=DEFAULT_RESULTS_PATH, help="CSV file finished runs are appended to")
    parser.add_argument(
        "--log-file",
        default=None,
        help="log file (default: stderr, and termtype.log beside the results file while the test is on screen)",
    )
    parser.add_argument("--log-level", default="WARNING", choices=LOG_LEVELS)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _log_handler(log_file: Path | None) -> logging.Handler:
    if log_file is None:
        handler: logging.Handler = logging.StreamHandler()
    else:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_file, encoding="utf-8", delay=True)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def configure_logging(log_file: Path | None, level: str) -> logging.Handler:
    """Attach a file or stderr handler to the package logger and return it."""
    handler = _log_handler(log_file)
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(getattr(logging, level))
    package_logger.addHandler(handler)
    return handler


@contextmanager
def logs_away_from_terminal(log_file: Path) -> Iterator[None]:
    """Send package logs bound for stderr to ``log_file`` instead, for the duration."""
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    terminal_handlers = [
        handler for handler in package_logger.handlers if type(handler) is logging.StreamHandler
    ]
    if not terminal_handlers:
        yield
        return
    file_handler = _log_handler(log_file)
    for handler in terminal_handlers:
        package_logger.removeHandler(handler)
    package_logger.addHandler(file_handler)
    try:
        yield
    finally:
        package_logger.removeHandler(file_handler)
        file_handler.close()
        for handler in terminal_handlers:
            package_logger.addHandler(handler)


def run(argv: list[str] | None = None) -> int:
    """Run the CLI application."""
    parser = build_parser()
    args = parser.parse_args(argv)
    handler = configure_logging(Path(args.log_file) if args.log_file else None, args.log_level)
    try:
        return _dispatch(parser, args)
    finally:
        logging.getLogger(PACKAGE_LOGGER).removeHandler(handler)
        handler.close()


def _dispatch(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    store = ResultStore(args.results)
    if args.command == "history":
        return history(store)

    try:
        passage_sets = load_passage_sets()
    except ValueError as exc:
        logger.error("Could not load passages: %s", exc)
        return 1
    if args.command == "passages":
        return list_passage_sets(passage_sets)
    if args.passages not in passage_sets:
        parser.error(f"unknown passage set {args.passages!r} (choose from {', '.join(sorted(passage_sets))})")

    try:
        session = TypingSession(passage_chooser(passage_sets[args.passages]), time_limit=args.time)
    except PassageSelectionError as exc:
        logger.error("Could not start a typing test: %s", exc)
        return 1
    return play(TypingApp(session, store))


def play(app: TypingApp, log_file: Path | None = None) -> int:
    """Run the interactive test until the user quits.

    While curses owns the screen, anything the package would log to stderr is
    written to ``log_file`` (default: beside the results file) instead.
    """
    if log_file is None:
        log_file = app.store.path.with_name(DEFAULT_LOG_NAME)
    try:
        with logs_away_from_terminal(log_file):
            curses.wrapper(_curses_main, app)
    except KeyboardInterrupt:
        return 0
    except PassageSelectionError as exc:
        logger.error("Could not restart the typing test: %s", exc)
        return 1
    return 0


def _curses_main(stdscr: curses.window, app: TypingApp) -> None:
    """Draw, wait for one key (or a tick), apply it; repeat."""
    curses.curs_set(1)
    stdscr.keypad(True)
    stdscr.timeout(TICK_MS)
    attrs = init_styles()

    while True:
        snapshot = app.tick()
        height, width = stdscr.getmaxyx()
        draw(stdscr, build_frame(snapshot, width, height), attrs)

        try:
            key = stdscr.get_wch()
        except curses.error:
            # No key before the tick timeout.
            continue
        if not app.handle(translate_key(key, terminal=app.session.is_terminal())):
            return


def history(store: ResultStore, print_fn: PrintFn = print) -> int:
    """Print a summary of logged runs."""
    try:
        results = store.read_all()
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        logger.error("Could not read results from %s: %s", store.path, exc)
        return 1
    summary = summarize(results)
    if summary is None:
        print_fn(f"No results recorded in {store.path}.")
        return 0

    print_fn("=== Results ===")
    print_fn(f"Runs: {summary.runs}")
    print_fn(f"Best WPM: {summary.best_wpm:.0f}")
    print_fn(f"Average WPM: {summary.average_wpm:.1f}")
    print_fn(f"Average accuracy: {summary.average_accuracy:.1f}%")

    recent = results[-HISTORY_RECENT_RUNS:]
    first_number = summary.runs - len(recent) + 1
    number_width = max(len("#"), len(str(summary.runs)))
    wpm_width = max(len("WPM"), max(len(f"{item.wpm:.0f}") for item in recent))
    header = f"{'#':>{number_width}} {'WPM':>{wpm_width}} Accuracy"
    print_fn(f"\nLast {len(recent)} runs:")
    print_fn(header)
    print_fn("-" * len(header))
    for offset, item in enumerate(recent):
        print_fn(f"{first_number + offset:>{number_width}} {item.wpm:>{wpm_width}.0f} {item.accuracy:.1f}%")
    return 0


def list_passage_sets(passage_sets: dict[str, PassageSet], print_fn: PrintFn = print) -> int:
    """Print the available passage sets."""
    id_width = max(len("Set"), max((len(set_id) for set_id in passage_sets), default=0))
    header = f"{'Set':<{id_width}} {'Passages':>8} Title"
    print_fn(header)
    print_fn("-" * len(header))
    for set_id in sorted(passage_sets):
        passage_set = passage_sets[set_id]
        print_fn(f"{set_id:<{id_width}} {len(passage_set.passages):>8} {passage_set.title}")
    return 0


def main_entry() -> None:
    """Console script entrypoint."""
    raise SystemExit(run())


if __name__ == "__main__":  # pragma: no cover
    main_entry()
