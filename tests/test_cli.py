import json
from pathlib import Path

from click.testing import CliRunner

from dmux_panel.cli.main import cli

MESSY_CONFIG = """# hand edited
session: 'shop-agents'
on_complete:
  - pr
  - test
agents:
  - name: "auth"
    scope:
      - src/auth/
    unknown_key: ignored
  - name: rev
    role: review
    branch: never-written
"""


def test_projects_table(monkeypatch):
    calls = []

    def fake_request(method, path, payload=None, *, content=None):
        calls.append((method, path))
        return [
            {"name": "shop", "path": "/srv/shop", "has_agents_config": True, "has_session": False},
        ]

    monkeypatch.setattr("dmux_panel.cli.main._request", fake_request)

    result = CliRunner().invoke(cli, ["projects"])

    assert result.exit_code == 0, result.output
    assert calls == [("GET", "/api/projects")]
    header, row = result.output.splitlines()
    assert header.split() == ["NAME", "PATH", "AGENTS", "SESSION"]
    assert row.split() == ["shop", "/srv/shop", "yes", "-"]


def test_add_and_launch_send_payloads(monkeypatch, tmp_path):
    calls = []

    def fake_request(method, path, payload=None, *, content=None):
        calls.append((method, path, payload))
        return {"ok": True, "output": "launched\n"}

    monkeypatch.setattr("dmux_panel.cli.main._request", fake_request)
    runner = CliRunner()

    added = runner.invoke(cli, ["add", "shop", str(tmp_path)])
    launched = runner.invoke(cli, ["launch", "shop", "--panes", "3", "--claude", "1"])

    assert added.exit_code == 0, added.output
    assert launched.exit_code == 0, launched.output
    assert calls[0] == ("POST", "/api/projects", {"name": "shop", "path": str(tmp_path)})
    assert calls[1] == ("POST", "/api/projects/shop/launch", {"panes": 3, "claude": 1})
    assert "launched" in launched.output


def test_agents_status_prints_output(monkeypatch):
    monkeypatch.setattr(
        "dmux_panel.cli.main._request",
        lambda method, path, payload=None, *, content=None: {"ok": True, "output": "auth RUNNING\n", "running": True},
    )
    result = CliRunner().invoke(cli, ["agents", "status", "shop"])
    assert result.exit_code == 0, result.output
    assert result.output == "auth RUNNING\n"


def test_config_normalize_prints_canonical_yaml():
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("agents.yml").write_text(MESSY_CONFIG)
        result = runner.invoke(cli, ["config", "normalize", "agents.yml"])

    assert result.exit_code == 0, result.output
    assert result.output == (
        "session: shop-agents\n"
        "worktree_base: ..\n"
        "main_pane: true\n"
        "on_complete:\n"
        "  - test\n"
        "  - pr\n"
        "\n"
        "agents:\n"
        "  - name: auth\n"
        "    scope:\n"
        "      - src/auth/\n"
        "  - name: rev\n"
        "    role: review\n"
    )


def test_config_normalize_write_in_place():
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("agents.yml").write_text(MESSY_CONFIG)
        result = runner.invoke(cli, ["config", "normalize", "agents.yml", "--write"])
        rewritten = Path("agents.yml").read_text()

    assert result.exit_code == 0, result.output
    assert rewritten.startswith("session: shop-agents\n")
    assert "unknown_key" not in rewritten


def test_config_preview_prints_model_json():
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("agents.yml").write_text(MESSY_CONFIG)
        result = runner.invoke(cli, ["config", "preview", "agents.yml"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["on_complete"] == {"test": True, "push": False, "pr": True}
    assert [agent["name"] for agent in data["agents"]] == ["auth", "rev"]
    assert data["agents"][1]["branch"] == "never-written"


def test_config_push_normalizes_before_upload(monkeypatch):
    calls = []

    def fake_request(method, path, payload=None, *, content=None):
        calls.append((method, path, content))
        return {"ok": True}

    monkeypatch.setattr("dmux_panel.cli.main._request", fake_request)
    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("agents.yml").write_text(MESSY_CONFIG)
        result = runner.invoke(cli, ["config", "push", "shop", "agents.yml"])

    assert result.exit_code == 0, result.output
    method, path, content = calls[0]
    assert (method, path) == ("PUT", "/api/projects/shop/agents-config")
    assert content.startswith("session: shop-agents\n")
    assert "# hand edited" not in content


def test_config_normalize_write_failure_is_reported(monkeypatch):
    def failing_write(self, *args, **kwargs):
        raise PermissionError(13, "Permission denied")

    runner = CliRunner()
    with runner.isolated_filesystem():
        Path("agents.yml").write_text(MESSY_CONFIG)
        monkeypatch.setattr(Path, "write_text", failing_write)
        result = runner.invoke(cli, ["config", "normalize", "agents.yml", "--write"])

    assert result.exit_code == 1
    assert "Unable to write agents.yml" in result.output
    assert "Rewrote" not in result.output
