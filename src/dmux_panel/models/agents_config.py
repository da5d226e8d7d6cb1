"""Agent session configuration models.

The models are frozen: every edit goes through one of the ``update``/``*_agent``
helpers and yields a new value, so earlier snapshots stay inspectable (undo,
live preview). ``depends_on``, ``scope`` and ``context`` are kept as single
comma-separated strings, matching the one-line inputs of the editor; the YAML
form expands them into lists (see :func:`split_list_field`).
"""

from __future__ import annotations

from typing import Any, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, Field

from dmux_panel import constants
from dmux_panel.models.enums import AgentRole, CompletionAction

LIST_FIELDS = ("depends_on", "scope", "context")


def split_list_field(value: str) -> List[str]:
    """Return the trimmed, non-empty comma segments of ``value`` in order."""
    return [segment.strip() for segment in value.split(",") if segment.strip()]


def join_list_field(items: Iterable[str]) -> str:
    return ", ".join(items)


class CompletionActions(BaseModel):
    """Set of actions run once an agent (or every agent) finishes."""

    model_config = ConfigDict(frozen=True)

    test: bool = False
    push: bool = False
    pr: bool = False

    def members(self) -> List[CompletionAction]:
        """Enabled actions in their fixed emission order."""
        return [action for action in CompletionAction if getattr(self, action.value)]

    def with_action(self, action: CompletionAction | str, enabled: bool = True) -> "CompletionActions":
        return self.model_copy(update={CompletionAction(action).value: enabled})

    @classmethod
    def from_members(cls, members: Iterable[CompletionAction | str]) -> "CompletionActions":
        return cls(**{CompletionAction(member).value: True for member in members})


class AgentSpec(BaseModel):
    """One declared unit of work, run in its own worktree."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    role: AgentRole = AgentRole.BUILD
    branch: str = ""
    task: str = ""
    auto_accept: bool = False
    depends_on: str = ""
    scope: str = ""
    context: str = ""
    on_complete: CompletionActions = Field(default_factory=CompletionActions)

    def update(self, **changes: Any) -> "AgentSpec":
        return type(self).model_validate({**self.model_dump(), **changes})

    def set_on_complete(self, action: CompletionAction | str, enabled: bool) -> "AgentSpec":
        return self.update(on_complete=self.on_complete.with_action(action, enabled))

    def list_items(self, field: str) -> List[str]:
        if field not in LIST_FIELDS:
            raise ValueError(f"'{field}' is not a list field.")
        return split_list_field(getattr(self, field))

    def normalized(self) -> "AgentSpec":
        """Return the agent with list fields rewritten to their canonical form."""
        return self.update(
            **{field: join_list_field(self.list_items(field)) for field in LIST_FIELDS}
        )


class AgentSessionConfig(BaseModel):
    """Root configuration written to a project's agents file."""

    model_config = ConfigDict(frozen=True)

    session: str = ""
    worktree_base: str = constants.DEFAULT_WORKTREE_BASE
    main_pane: bool = True
    namespace_branches: bool = False
    on_complete: CompletionActions = Field(default_factory=CompletionActions)
    agents: Tuple[AgentSpec, ...] = ()

    @classmethod
    def for_project(cls, project_name: str) -> "AgentSessionConfig":
        """Fresh configuration used when a project has no agents file yet."""
        return cls(session=f"{project_name}-agents")

    def update(self, **changes: Any) -> "AgentSessionConfig":
        return type(self).model_validate({**self.model_dump(), **changes})

    def set_on_complete(self, action: CompletionAction | str, enabled: bool) -> "AgentSessionConfig":
        return self.update(on_complete=self.on_complete.with_action(action, enabled))

    def add_agent(self, agent: AgentSpec | None = None) -> "AgentSessionConfig":
        return self.update(agents=[*self.agents, agent or AgentSpec()])

    def update_agent(self, index: int, **changes: Any) -> "AgentSessionConfig":
        agents = list(self.agents)
        agents[index] = agents[index].update(**changes)
        return self.update(agents=agents)

    def remove_agent(self, index: int) -> "AgentSessionConfig":
        agents = list(self.agents)
        del agents[index]
        return self.update(agents=agents)

    def named_agents(self) -> List[AgentSpec]:
        """Agents that will be written out; unnamed drafts are skipped."""
        return [agent for agent in self.agents if agent.name]

    def normalized(self) -> "AgentSessionConfig":
        return self.update(agents=[agent.normalized() for agent in self.agents])
