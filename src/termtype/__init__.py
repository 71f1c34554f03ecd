"""Terminal typing-speed test."""

from __future__ import annotations

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

__all__ = ["__version__"]


def _checkout_version() -> str | None:
    """Read the version from the source checkout's pyproject.toml, if this is one."""
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    if not pyproject.is_file():
        return None
    with pyproject.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})
    if project.get("name") != "termtype" or "version" not in project:
        return None
    return str(project["version"])


_checkout = _checkout_version()
if _checkout is not None:
    __version__ = _checkout
else:
    try:
        __version__ = version("termtype")
    except PackageNotFoundError:
        __version__ = "0+unknown"
