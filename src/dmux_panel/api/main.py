from __future__ import annotations

import json
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse, PlainTextResponse

from dmux_panel.clients.dmux import DmuxClient, DmuxError
from dmux_panel.clients.tmux import TmuxClient
from dmux_panel.models.agents_config import AgentSessionConfig
from dmux_panel.models.project import (
    AgentsStatus,
    CommandResult,
    LaunchRequest,
    Project,
    ProjectCreateRequest,
)
from dmux_panel.services import config_transcoder
from dmux_panel.services.agents_config_service import AgentsConfigError, AgentsConfigStore
from dmux_panel.services.project_service import (
    ProjectExistsError,
    ProjectNotFoundError,
    ProjectRegistry,
    ProjectRegistryError,
)
from dmux_panel.services.session_service import SessionService
from dmux_panel.utils.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    registry = ProjectRegistry()
    config_store = AgentsConfigStore(registry)
    app.state.registry = registry
    app.state.config_store = config_store
    app.state.session_service = SessionService(registry, config_store, DmuxClient(), TmuxClient())
    yield


app = FastAPI(title="dmux panel API", version="0.1.0", lifespan=lifespan)


def _require_service(name: str):
    service = getattr(app.state, name, None)
    if service is None:
        raise RuntimeError(f"Service '{name}' not initialised.")
    return service


def get_registry() -> ProjectRegistry:
    return _require_service("registry")


def get_config_store() -> AgentsConfigStore:
    return _require_service("config_store")


def get_session_service() -> SessionService:
    return _require_service("session_service")


@app.exception_handler(ProjectNotFoundError)
async def _project_not_found(_request: Request, exc: ProjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(DmuxError)
async def _dmux_failed(_request: Request, exc: DmuxError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": exc.stderr or str(exc), "output": exc.stdout},
    )


@app.get("/health")
async def health() -> dict[str, str]:
    """Lightweight health probe."""
    return {"status": "ok"}


@app.get("/api/projects", response_model=List[Project])
def list_projects(
    sessions: SessionService = Depends(get_session_service),
) -> List[Project]:
    return sessions.list_projects()


@app.post("/api/projects")
def add_project(
    payload: ProjectCreateRequest,
    registry: ProjectRegistry = Depends(get_registry),
) -> dict[str, bool]:
    if not payload.name or not payload.path:
        raise HTTPException(status_code=400, detail="name and path are required")
    try:
        registry.add_project(payload.name, payload.path)
    except ProjectExistsError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except ProjectRegistryError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True}


@app.delete("/api/projects/{name}")
def remove_project(
    name: str,
    registry: ProjectRegistry = Depends(get_registry),
) -> dict[str, bool]:
    registry.remove_project(name)
    return {"ok": True}


@app.get("/api/projects/{name}/agents-config", response_class=PlainTextResponse)
def read_agents_config(
    name: str,
    configs: AgentsConfigStore = Depends(get_config_store),
) -> str:
    text = configs.read_text(name)
    if text is None:
        raise HTTPException(status_code=404, detail="No .dmux-agents.yml found")
    return text


@app.put("/api/projects/{name}/agents-config")
async def write_agents_config(
    name: str,
    request: Request,
    configs: AgentsConfigStore = Depends(get_config_store),
) -> dict[str, bool]:
    raw = (await request.body()).decode("utf-8")
    content = raw
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            content = json.loads(raw).get("content", "")
        except (ValueError, AttributeError) as exc:
            raise HTTPException(status_code=400, detail="content is required") from exc
        if not isinstance(content, str):
            raise HTTPException(status_code=400, detail="content is required")
    try:
        configs.write_text(name, content or "")
    except AgentsConfigError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"ok": True}


@app.get("/api/projects/{name}/agents-config/model", response_model=AgentSessionConfig)
def read_agents_model(
    name: str,
    configs: AgentsConfigStore = Depends(get_config_store),
) -> AgentSessionConfig:
    return configs.load(name)


@app.post("/api/projects/{name}/agents-config/preview", response_class=PlainTextResponse)
def preview_agents_config(
    name: str,
    payload: AgentSessionConfig,
    registry: ProjectRegistry = Depends(get_registry),
) -> str:
    registry.get_project(name)
    return config_transcoder.encode(payload)


@app.post("/api/projects/{name}/launch", response_model=CommandResult)
def launch_project(
    name: str,
    payload: Optional[LaunchRequest] = None,
    sessions: SessionService = Depends(get_session_service),
) -> CommandResult:
    options = payload or LaunchRequest()
    return sessions.launch(name, panes=options.panes, claude=options.claude)


@app.post("/api/projects/{name}/agents/start", response_model=CommandResult)
def start_agents(
    name: str,
    sessions: SessionService = Depends(get_session_service),
) -> CommandResult:
    return sessions.start_agents(name)


@app.get("/api/projects/{name}/agents/status", response_model=AgentsStatus)
def agents_status(
    name: str,
    sessions: SessionService = Depends(get_session_service),
) -> AgentsStatus:
    return sessions.agents_status(name)


@app.post("/api/projects/{name}/agents/cleanup", response_model=CommandResult)
def cleanup_agents(
    name: str,
    sessions: SessionService = Depends(get_session_service),
) -> CommandResult:
    return sessions.cleanup_agents(name)
