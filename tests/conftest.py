from contextlib import asynccontextmanager
from typing import List

import pytest

from fastapi.testclient import TestClient

from dmux_panel import constants
from dmux_panel.api import main as api_main
from dmux_panel.clients.dmux import DmuxError, DmuxResult
from dmux_panel.services.agents_config_service import AgentsConfigStore
from dmux_panel.services.project_service import ProjectRegistry
from dmux_panel.services.session_service import SessionService


class FakeDmuxClient:
    """Records dmux invocations instead of spawning processes."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.status_output = "No agents session is not running\n"
        self.fail_with: DmuxError | None = None

    def run(self, args) -> DmuxResult:
        self.calls.append(list(args))
        if self.fail_with is not None:
            raise self.fail_with
        return DmuxResult(stdout=f"ran {' '.join(args)}\n", stderr="")

    def launch(self, project_name: str, panes: int = 1, claude: int = 0) -> DmuxResult:
        return self.run(["-p", project_name, "-n", str(panes), "-c", str(claude)])

    def start_agents(self, project_name: str) -> DmuxResult:
        return self.run(["agents", "start", project_name, "-y"])

    def cleanup_agents(self, project_name: str) -> DmuxResult:
        return self.run(["agents", "cleanup", project_name])

    def agents_status(self, project_name: str) -> str:
        self.calls.append(["agents", "status", project_name])
        return self.status_output


class FakeTmuxClient:
    """Minimal tmux stand-in for tests."""

    def __init__(self) -> None:
        self.sessions: List[str] = []

    def list_session_names(self) -> List[str]:
        return list(self.sessions)


@pytest.fixture(autouse=True)
def temp_runtime_dirs(tmp_path, monkeypatch):
    """Redirect the home, registry and state directories into a temp location."""
    home = tmp_path / "home"
    home.mkdir()
    config_dir = home / ".config" / "dmux"
    state_dir = home / ".dmux-panel"
    mapping = {
        "HOME": home,
        "CONFIG_DIR": config_dir,
        "PROJECTS_FILE": config_dir / "projects",
        "STATE_DIR": state_dir,
        "LOG_DIR": state_dir / "logs",
    }

    for name, path in mapping.items():
        monkeypatch.setattr(constants, name, path)

    yield home


@pytest.fixture
def home(temp_runtime_dirs):
    return temp_runtime_dirs


@pytest.fixture
def registry() -> ProjectRegistry:
    return ProjectRegistry()


@pytest.fixture
def config_store(registry) -> AgentsConfigStore:
    return AgentsConfigStore(registry)


@pytest.fixture
def fake_dmux() -> FakeDmuxClient:
    return FakeDmuxClient()


@pytest.fixture
def fake_tmux() -> FakeTmuxClient:
    return FakeTmuxClient()


@pytest.fixture
def session_service(registry, config_store, fake_dmux, fake_tmux) -> SessionService:
    return SessionService(registry, config_store, fake_dmux, fake_tmux)


@pytest.fixture
def project_dir(home, registry):
    """A registered project named ``shop`` living under the temp home."""
    path = home / "code" / "shop"
    path.mkdir(parents=True)
    registry.add_project("shop", str(path))
    return path


@pytest.fixture
def api_client(registry, config_store, session_service):
    app = api_main.app

    overrides = {
        api_main.get_registry: lambda: registry,
        api_main.get_config_store: lambda: config_store,
        api_main.get_session_service: lambda: session_service,
    }

    original_overrides = app.dependency_overrides.copy()
    original_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def noop_lifespan(_app):
        yield

    app.router.lifespan_context = noop_lifespan
    app.dependency_overrides.update(overrides)

    with TestClient(app) as client:
        yield client

    app.dependency_overrides = original_overrides
    app.router.lifespan_context = original_lifespan
