"""Flat-file project registry shared with the dmux CLI."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from dmux_panel import constants
from dmux_panel.models.project import Project
from dmux_panel.utils.pathing import collapse_home, expand_home

LOG = logging.getLogger(__name__)


class ProjectRegistryError(RuntimeError):
    """Raised when the project registry cannot be read or updated."""


class ProjectNotFoundError(ProjectRegistryError):
    """Raised when a project name is not registered."""


class ProjectExistsError(ProjectRegistryError):
    """Raised when registering a name that is already taken."""


def _parse_line(line: str) -> Optional[Project]:
    trimmed = line.strip()
    if not trimmed or trimmed.startswith("#") or "=" not in trimmed:
        return None
    name, _, raw_path = trimmed.partition("=")
    return Project(name=name.strip(), path=expand_home(raw_path.strip()))


class ProjectRegistry:
    """Reads and edits the ``name=path`` registry file.

    Writes are whole-file and unlocked; concurrent writers are last-write-wins.
    """

    def __init__(self, registry_file: Optional[Path] = None) -> None:
        self._registry_file = registry_file

    @property
    def registry_file(self) -> Path:
        # Resolved lazily so tests can redirect constants.PROJECTS_FILE.
        return self._registry_file or constants.PROJECTS_FILE

    def _read_lines(self) -> List[str]:
        if not self.registry_file.exists():
            return []
        return self.registry_file.read_text(encoding="utf-8").splitlines()

    def list_projects(self) -> List[Project]:
        """Return registered projects in file order."""
        projects = []
        for line in self._read_lines():
            project = _parse_line(line)
            if project is not None:
                projects.append(project)
        return projects

    def get_project(self, name: str) -> Project:
        for project in self.list_projects():
            if project.name == name:
                return project
        raise ProjectNotFoundError(f"Project '{name}' not found.")

    def add_project(self, name: str, path: str) -> Project:
        name = name.strip()
        if not name or "=" in name or "\n" in name:
            raise ProjectRegistryError(f"Invalid project name '{name}'.")
        if not path.strip():
            raise ProjectRegistryError("Project path is required.")
        if any(project.name == name for project in self.list_projects()):
            raise ProjectExistsError(f"Project '{name}' is already registered.")

        lines = self._read_lines()
        lines.append(f"{name}={collapse_home(path.strip())}")
        self._write_lines(lines)
        LOG.info("Registered project %s at %s", name, path)
        return Project(name=name, path=expand_home(collapse_home(path.strip())))

    def remove_project(self, name: str) -> None:
        lines = self._read_lines()
        kept = []
        for line in lines:
            project = _parse_line(line)
            if project is None or project.name != name:
                kept.append(line)
        if len(kept) == len(lines):
            raise ProjectNotFoundError(f"Project '{name}' not found.")
        self._write_lines(kept)
        LOG.info("Removed project %s", name)

    def _write_lines(self, lines: List[str]) -> None:
        try:
            self.registry_file.parent.mkdir(parents=True, exist_ok=True)
            self.registry_file.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            raise ProjectRegistryError(
                f"Unable to write project registry {self.registry_file}: {exc}"
            ) from exc
