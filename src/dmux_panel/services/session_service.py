"""Project-level dmux operations."""

from __future__ import annotations

import logging
from typing import List

from dmux_panel.clients.dmux import DmuxClient
from dmux_panel.clients.tmux import TmuxClient, project_has_session
from dmux_panel.models.project import AgentsStatus, CommandResult, Project
from dmux_panel.services.agents_config_service import AgentsConfigStore
from dmux_panel.services.project_service import ProjectRegistry

LOG = logging.getLogger(__name__)

NOT_RUNNING_MARKER = "not running"


class SessionService:
    """Launches panes and drives ``dmux agents`` for registered projects."""

    def __init__(
        self,
        registry: ProjectRegistry,
        configs: AgentsConfigStore,
        dmux: DmuxClient,
        tmux: TmuxClient,
    ) -> None:
        self.registry = registry
        self.configs = configs
        self.dmux = dmux
        self.tmux = tmux

    def list_projects(self) -> List[Project]:
        """Return registered projects with agents-file and tmux session flags."""
        session_names = self.tmux.list_session_names()
        return [
            project.model_copy(
                update={
                    "has_agents_config": self.configs.has_config(project),
                    "has_session": project_has_session(project.name, session_names),
                }
            )
            for project in self.registry.list_projects()
        ]

    def launch(self, project_name: str, panes: int = 1, claude: int = 0) -> CommandResult:
        self.registry.get_project(project_name)
        result = self.dmux.launch(project_name, panes=panes, claude=claude)
        return CommandResult(ok=True, output=result.stdout)

    def start_agents(self, project_name: str) -> CommandResult:
        self.registry.get_project(project_name)
        result = self.dmux.start_agents(project_name)
        LOG.info("Started agents for %s", project_name)
        return CommandResult(ok=True, output=result.stdout)

    def cleanup_agents(self, project_name: str) -> CommandResult:
        self.registry.get_project(project_name)
        result = self.dmux.cleanup_agents(project_name)
        LOG.info("Cleaned up agents for %s", project_name)
        return CommandResult(ok=True, output=result.stdout)

    def agents_status(self, project_name: str) -> AgentsStatus:
        output = self.dmux.agents_status(project_name)
        return AgentsStatus(output=output, running=bool(output) and NOT_RUNNING_MARKER not in output)
