"""Filesystem helpers for dmux-panel."""

from __future__ import annotations

from pathlib import Path

from dmux_panel import constants


def ensure_runtime_directories() -> dict[str, Path]:
    """Create the directory tree required for runtime state."""
    required = {
        "state": constants.STATE_DIR,
        "logs": constants.LOG_DIR,
    }

    for path in required.values():
        path.mkdir(parents=True, exist_ok=True)

    return required


def expand_home(raw: str) -> str:
    """Expand ``$HOME`` anywhere and a leading ``~`` into the home directory."""
    home = str(constants.HOME)
    expanded = raw.replace("$HOME", home)
    if expanded.startswith("~"):
        expanded = home + expanded[1:]
    return expanded


def collapse_home(path: str) -> str:
    """Store the home directory prefix as ``$HOME`` so the registry stays portable."""
    return path.replace(str(constants.HOME), "$HOME", 1)
