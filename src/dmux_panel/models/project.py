"""Project registry and command models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class Project(BaseModel):
    """Registered project, enriched with on-disk and tmux state for listings."""

    name: str
    path: str
    has_agents_config: bool = False
    has_session: bool = False


class ProjectCreateRequest(BaseModel):
    name: str
    path: str


class LaunchRequest(BaseModel):
    panes: int = Field(default=1, ge=1)
    claude: int = Field(default=0, ge=0)


class CommandResult(BaseModel):
    """Outcome of a ``dmux`` invocation as returned over the API."""

    ok: bool
    output: str = ""
    error: Optional[str] = None


class AgentsStatus(BaseModel):
    ok: bool = True
    output: str
    running: bool
