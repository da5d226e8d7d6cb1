"""Per-project agents file storage."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dmux_panel import constants
from dmux_panel.models.agents_config import AgentSessionConfig
from dmux_panel.models.project import Project
from dmux_panel.services import config_transcoder
from dmux_panel.services.project_service import ProjectRegistry

LOG = logging.getLogger(__name__)


class AgentsConfigError(RuntimeError):
    """Raised when an agents file cannot be stored."""


def agents_config_path(project_path: str | Path) -> Path:
    return Path(project_path) / constants.AGENTS_CONFIG_FILENAME


class AgentsConfigStore:
    """Reads and writes ``.dmux-agents.yml`` verbatim for registered projects."""

    def __init__(self, registry: ProjectRegistry) -> None:
        self.registry = registry

    def has_config(self, project: Project) -> bool:
        return agents_config_path(project.path).is_file()

    def read_text(self, project_name: str) -> Optional[str]:
        """Return the raw file contents, or ``None`` when the project has no file."""
        project = self.registry.get_project(project_name)
        path = agents_config_path(project.path)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_text(self, project_name: str, content: str) -> Path:
        if not content:
            raise AgentsConfigError("Agents config content is required.")
        project = self.registry.get_project(project_name)
        path = agents_config_path(project.path)
        try:
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise AgentsConfigError(f"Unable to write {path}: {exc}") from exc
        LOG.info("Wrote agents config for %s (%d bytes)", project_name, len(content))
        return path

    def load(self, project_name: str) -> AgentSessionConfig:
        """Decode the stored file, or start a fresh config for the project."""
        text = self.read_text(project_name)
        if text is None:
            return AgentSessionConfig.for_project(project_name)
        return config_transcoder.decode(text)

    def save(self, project_name: str, config: AgentSessionConfig) -> Path:
        return self.write_text(project_name, config_transcoder.encode(config))
