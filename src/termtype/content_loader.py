"""Load passage sets from bundled JSON resources and pick passages from them."""

from __future__ import annotations

import json
import logging
import random
from collections.abc import Callable
from importlib import resources
from pathlib import Path
from typing import Any

from .models import PassageSet

CONTENT_PACKAGE = "termtype.content.passages"
DEFAULT_PASSAGE_SET = "prose"

logger = logging.getLogger(__name__)


class PassageSelectionError(RuntimeError):
    """No passage could be chosen for a run."""


def _normalize_passage(raw: object) -> str:
    """Collapse runs of whitespace so every passage is a single line."""
    return " ".join(str(raw).split())


def _passage_set_from_dict(raw: dict[str, Any]) -> PassageSet:
    """Build a passage set from raw JSON content."""
    if not isinstance(raw, dict) or not str(raw.get("id", "")).strip():
        raise ValueError("Passage set file must be a JSON object with an 'id'.")
    set_id = str(raw["id"]).strip()
    passages = [text for text in (_normalize_passage(item) for item in raw.get("passages", [])) if text]
    if not passages:
        raise ValueError(f"Passage set '{set_id}' has no passages.")
    return PassageSet(id=set_id, title=str(raw.get("title", set_id)), passages=passages)


def _add_passage_set(sets: dict[str, PassageSet], raw: dict[str, Any]) -> None:
    passage_set = _passage_set_from_dict(raw)
    if passage_set.id in sets:
        raise ValueError(f"Duplicate passage set id: {passage_set.id}")
    sets[passage_set.id] = passage_set


def load_passage_sets() -> dict[str, PassageSet]:
    """Load bundled passage sets."""
    sets: dict[str, PassageSet] = {}
    for entry in sorted(resources.files(CONTENT_PACKAGE).iterdir(), key=lambda item: item.name):
        if entry.name.endswith(".json"):
            _add_passage_set(sets, json.loads(entry.read_text(encoding="utf-8-sig")))
    logger.debug("Loaded %d bundled passage sets", len(sets))
    return sets


def load_passage_sets_from_dir(path: Path) -> dict[str, PassageSet]:
    """Load passage sets from a directory for tests/tools."""
    sets: dict[str, PassageSet] = {}
    for file_path in sorted(path.glob("*.json")):
        _add_passage_set(sets, json.loads(file_path.read_text(encoding="utf-8-sig")))
    return sets


def choose_passage(passages: list[str], rng: random.Random | None = None) -> str:
    """Pick one passage at random, using the OS entropy source by default."""
    if not passages:
        raise PassageSelectionError("No passages to choose from.")
    chooser = rng if rng is not None else random.SystemRandom()
    try:
        return chooser.choice(passages)
    except (NotImplementedError, OSError) as exc:
        raise PassageSelectionError(f"Error selecting a test passage: {exc}") from exc


def passage_chooser(passage_set: PassageSet, rng: random.Random | None = None) -> Callable[[], str]:
    """Return a zero-argument callable that picks a fresh passage from a set."""

    def choose() -> str:
        return choose_passage(passage_set.passages, rng)

    return choose
