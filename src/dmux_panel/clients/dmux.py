"""Subprocess wrapper around the dmux command-line tool."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import List, Optional, Sequence

from pydantic import BaseModel

from dmux_panel import constants

LOG = logging.getLogger(__name__)


class DmuxError(RuntimeError):
    """Raised when a dmux invocation fails or times out."""

    def __init__(self, message: str, *, stdout: str = "", stderr: str = "") -> None:
        super().__init__(message)
        self.stdout = stdout
        self.stderr = stderr


class DmuxResult(BaseModel):
    stdout: str
    stderr: str


def resolve_dmux_binary() -> str:
    """Locate dmux: env override, then the usual install paths, then ``PATH``."""
    override = os.getenv(constants.DMUX_BIN_ENV_VAR)
    if override:
        return override
    for candidate in constants.DMUX_CANDIDATES:
        if candidate.exists():
            return str(candidate)
    return shutil.which("dmux") or "dmux"


class DmuxClient:
    """Runs dmux subcommands with a per-call timeout."""

    def __init__(self, binary: Optional[str] = None, timeout: float = constants.DMUX_TIMEOUT_SECONDS) -> None:
        self.binary = binary or resolve_dmux_binary()
        self.timeout = timeout

    def run(self, args: Sequence[str]) -> DmuxResult:
        command: List[str] = [self.binary, *args]
        LOG.info("Running %s", " ".join(command))
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise DmuxError(
                f"dmux timed out after {self.timeout}s",
                stdout=_text(exc.stdout),
                stderr=_text(exc.stderr),
            ) from exc
        except OSError as exc:
            raise DmuxError(f"Unable to run {self.binary}: {exc}") from exc

        if completed.returncode != 0:
            LOG.warning("dmux exited with %s: %s", completed.returncode, completed.stderr.strip())
            raise DmuxError(
                f"dmux exited with status {completed.returncode}",
                stdout=completed.stdout,
                stderr=completed.stderr,
            )
        return DmuxResult(stdout=completed.stdout, stderr=completed.stderr)

    def launch(self, project_name: str, panes: int = 1, claude: int = 0) -> DmuxResult:
        return self.run(["-p", project_name, "-n", str(panes), "-c", str(claude)])

    def start_agents(self, project_name: str) -> DmuxResult:
        return self.run(["agents", "start", project_name, "-y"])

    def cleanup_agents(self, project_name: str) -> DmuxResult:
        return self.run(["agents", "cleanup", project_name])

    def agents_status(self, project_name: str) -> str:
        """Return status output; a failing call still reports what dmux printed."""
        try:
            return self.run(["agents", "status", project_name]).stdout
        except DmuxError as exc:
            return exc.stdout or exc.stderr or str(exc)


def _text(value: bytes | str | None) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return value
