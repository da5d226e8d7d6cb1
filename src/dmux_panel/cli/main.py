from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import click
import httpx

from dmux_panel import constants
from dmux_panel.cli.formatters import projects_table
from dmux_panel.services import config_transcoder
from dmux_panel.utils.logging import setup_logging

API_BASE = f"http://{constants.SERVER_HOST}:{constants.SERVER_PORT}"


def _request(
    method: str,
    path: str,
    payload: Optional[Dict[str, Any]] = None,
    *,
    content: Optional[str] = None,
) -> Any:
    url = f"{API_BASE}{path}"
    headers = {"Content-Type": "text/plain"} if content is not None else None
    try:
        with httpx.Client(timeout=60) as client:
            response = client.request(method, url, json=payload, content=content, headers=headers)
    except httpx.HTTPError as exc:
        raise click.ClickException(f"Unable to reach dmux panel at {API_BASE}: {exc}") from exc
    if response.status_code >= 400:
        raise click.ClickException(f"API error {response.status_code}: {response.text}")
    if not response.content:
        return None
    if response.headers.get("content-type", "").startswith("application/json"):
        return response.json()
    return response.text


def _echo_command_result(result: Dict[str, Any]) -> None:
    output = (result or {}).get("output", "")
    click.echo(output.rstrip() if output else "Done.")


def _read_local(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise click.ClickException(f"Unable to read {path}: {exc}") from exc


@click.group(help="dmux panel command-line interface.")
@click.option("--verbose", is_flag=True, help="Log at DEBUG level.")
def cli(verbose: bool) -> None:
    """Root command for dmux panel."""
    setup_logging(logging.DEBUG if verbose else logging.WARNING)


@cli.command()
@click.option("--host", default=constants.SERVER_HOST, show_default=True)
@click.option("--port", default=constants.SERVER_PORT, show_default=True, type=int)
def serve(host: str, port: int) -> None:
    """Run the REST API."""
    import uvicorn

    setup_logging()
    uvicorn.run("dmux_panel.api.main:app", host=host, port=port, log_level="info")


@cli.command("projects")
@click.option("--json", "as_json", is_flag=True, help="Print raw JSON.")
def list_projects(as_json: bool) -> None:
    """List registered projects."""
    result = _request("GET", "/api/projects")
    if as_json:
        click.echo(json.dumps(result, indent=2))
    else:
        click.echo(projects_table(result))


@cli.command()
@click.argument("name")
@click.argument("path", type=click.Path(file_okay=False, resolve_path=True))
def add(name: str, path: str) -> None:
    """Register a project directory."""
    _request("POST", "/api/projects", {"name": name, "path": path})
    click.echo(f"Project '{name}' added.")


@cli.command()
@click.argument("name")
def remove(name: str) -> None:
    """Unregister a project."""
    _request("DELETE", f"/api/projects/{name}")
    click.echo(f"Project '{name}' removed.")


@cli.command()
@click.argument("name")
@click.option("--panes", default=1, show_default=True, type=click.IntRange(min=1))
@click.option("--claude", default=0, show_default=True, type=click.IntRange(min=0))
def launch(name: str, panes: int, claude: int) -> None:
    """Launch terminal panes for a project."""
    result = _request("POST", f"/api/projects/{name}/launch", {"panes": panes, "claude": claude})
    _echo_command_result(result)


@cli.group()
def agents() -> None:
    """Run the agents configured for a project."""


@agents.command("start")
@click.argument("name")
def start_agents(name: str) -> None:
    result = _request("POST", f"/api/projects/{name}/agents/start")
    _echo_command_result(result)


@agents.command("status")
@click.argument("name")
def agents_status(name: str) -> None:
    result = _request("GET", f"/api/projects/{name}/agents/status")
    click.echo(result["output"].rstrip())


@agents.command("cleanup")
@click.argument("name")
def cleanup_agents(name: str) -> None:
    result = _request("POST", f"/api/projects/{name}/agents/cleanup")
    _echo_command_result(result)


@cli.group()
def config() -> None:
    """Agents config commands."""


@config.command("show")
@click.argument("name")
def show_config(name: str) -> None:
    """Print a project's stored agents config."""
    click.echo(_request("GET", f"/api/projects/{name}/agents-config"), nl=False)


@config.command("push")
@click.argument("name")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--normalize/--raw", default=True, show_default=True, help="Re-encode before upload.")
def push_config(name: str, file: str, normalize: bool) -> None:
    """Upload a local agents file to a project."""
    text = _read_local(file)
    if normalize:
        text = config_transcoder.encode(config_transcoder.decode(text))
    _request("PUT", f"/api/projects/{name}/agents-config", content=text)
    click.echo("Config saved.")


@config.command("normalize")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--write", is_flag=True, help="Rewrite the file in place.")
def normalize_config(file: str, write: bool) -> None:
    """Decode then re-encode an agents file and print the result."""
    text = config_transcoder.encode(config_transcoder.decode(_read_local(file)))
    if write:
        try:
            Path(file).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise click.ClickException(f"Unable to write {file}: {exc}") from exc
        click.echo(f"Rewrote {file}.")
    else:
        click.echo(text, nl=False)


@config.command("preview")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
def preview_config(file: str) -> None:
    """Print the model decoded from an agents file as JSON."""
    model = config_transcoder.decode(_read_local(file))
    click.echo(model.model_dump_json(indent=2))


if __name__ == "__main__":
    cli()
