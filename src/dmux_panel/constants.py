"""Shared constants for dmux-panel."""

import os
from pathlib import Path


HOME = Path.home()
CONFIG_DIR = (
    Path(os.environ["XDG_CONFIG_HOME"]) / "dmux"
    if os.environ.get("XDG_CONFIG_HOME")
    else HOME / ".config" / "dmux"
)
PROJECTS_FILE = CONFIG_DIR / "projects"
STATE_DIR = Path(os.environ.get("DMUX_PANEL_HOME", HOME / ".dmux-panel"))
LOG_DIR = STATE_DIR / "logs"
AGENTS_CONFIG_FILENAME = ".dmux-agents.yml"
DMUX_BIN_ENV_VAR = "DMUX_PANEL_DMUX_BIN"
DMUX_CANDIDATES = (HOME / ".local" / "bin" / "dmux", Path("/usr/local/bin/dmux"))
DMUX_TIMEOUT_SECONDS = 30
DMUX_SESSION_PREFIX = "dmux-"
DEFAULT_SESSION_NAME = "my-agents"
DEFAULT_WORKTREE_BASE = ".."
SERVER_HOST = "127.0.0.1"
SERVER_PORT = 3100
