"""Thin wrapper around libtmux used to report running sessions."""

from __future__ import annotations

import logging
from typing import List

import libtmux

from dmux_panel import constants

LOG = logging.getLogger(__name__)


class TmuxError(RuntimeError):
    """Raised when tmux interactions fail."""


class TmuxClient:
    """Read-only view of the user's tmux server."""

    def __init__(self) -> None:
        try:
            self._server = libtmux.Server()
        except Exception as exc:  # pragma: no cover - libtmux specific
            raise TmuxError("Unable to connect to tmux server.") from exc

    def list_session_names(self) -> List[str]:
        """Return running session names; an absent server means no sessions."""
        try:
            return [session.session_name for session in self._server.sessions]
        except Exception as exc:  # pragma: no cover - libtmux specific
            LOG.warning("Unable to list tmux sessions: %s", exc)
            return []


def project_has_session(project_name: str, session_names: List[str]) -> bool:
    """True when a session is named ``dmux-<project>`` or mentions the project."""
    expected = f"{constants.DMUX_SESSION_PREFIX}{project_name}"
    return any(name == expected or project_name in name for name in session_names)
