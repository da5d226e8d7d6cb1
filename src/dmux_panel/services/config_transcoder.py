"""Convert agent session configs to and from their YAML text.

``encode`` emits a fixed, sparse layout. ``decode`` is a line-oriented reader
for that layout and common hand edits of it (quoted or bare scalars, blank
lines, ``#`` comments). It is not a YAML parser: anything it does not
recognise is skipped, so loading a half-written file never fails.

Inside the quoted ``task`` scalar, backslashes and double quotes are escaped
as ``\\\\`` and ``\\"``; ``decode`` undoes exactly those two escapes.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from dmux_panel import constants
from dmux_panel.models.agents_config import (
    LIST_FIELDS,
    AgentSessionConfig,
    CompletionActions,
    split_list_field,
)
from dmux_panel.models.enums import AgentRole, CompletionAction

LOG = logging.getLogger(__name__)

_AGENT_START = re.compile(r"^-\s*name:\s*(.+)")
_LIST_ITEM = re.compile(r"^-\s+(.+)")
_KEY_VALUE = re.compile(r"^(\w+):\s*(.*)")
_ESCAPED = re.compile(r'\\(["\\])')

GLOBAL_ON_COMPLETE = "global_on_complete"
_ACTION_NAMES = {action.value for action in CompletionAction}
_ROLE_NAMES = {role.value for role in AgentRole}


def _bool(value: bool) -> str:
    return "true" if value else "false"


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _completion_lines(actions: CompletionActions, indent: str) -> List[str]:
    members = actions.members()
    if not members:
        return []
    return [f"{indent}on_complete:"] + [f"{indent}  - {m.value}" for m in members]


def encode(config: AgentSessionConfig) -> str:
    """Render ``config`` as the YAML text consumed by ``dmux agents``."""
    lines = [
        f"session: {config.session or constants.DEFAULT_SESSION_NAME}",
        f"worktree_base: {config.worktree_base or constants.DEFAULT_WORKTREE_BASE}",
        f"main_pane: {_bool(config.main_pane)}",
    ]
    if config.namespace_branches:
        lines.append("namespace_branches: true")
    lines.extend(_completion_lines(config.on_complete, ""))
    lines.extend(["", "agents:"])

    for agent in config.named_agents():
        lines.append(f"  - name: {agent.name}")
        if agent.role == AgentRole.REVIEW:
            lines.append("    role: review")
        elif agent.branch:
            lines.append(f"    branch: {agent.branch}")
        if agent.task:
            lines.append(f"    task: {_quote(agent.task)}")
        if agent.auto_accept:
            lines.append("    auto_accept: true")
        for field in LIST_FIELDS:
            raw = getattr(agent, field)
            if raw:
                lines.append(f"    {field}:")
                lines.extend(f"      - {item}" for item in split_list_field(raw))
        lines.extend(_completion_lines(agent.on_complete, "    "))

    return "\n".join(lines) + "\n"


def _strip_quotes(value: str) -> str:
    """Remove one matching pair of surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        inner = value[1:-1]
        if value[0] == '"':
            inner = _ESCAPED.sub(r"\1", inner)
        return inner
    return value


def _new_agent(name: str) -> Dict[str, Any]:
    return {
        "name": name,
        "role": AgentRole.BUILD.value,
        "branch": "",
        "task": "",
        "auto_accept": False,
        "depends_on": "",
        "scope": "",
        "context": "",
        "on_complete": {action: False for action in _ACTION_NAMES},
    }


def decode(text: str) -> AgentSessionConfig:
    """Build a config from ``text``; unrecognised lines are ignored."""
    config: Dict[str, Any] = {
        "session": "",
        "worktree_base": constants.DEFAULT_WORKTREE_BASE,
        "main_pane": True,
        "namespace_branches": False,
        "on_complete": {action: False for action in _ACTION_NAMES},
    }
    agents: List[Dict[str, Any]] = []
    current: Optional[Dict[str, Any]] = None
    in_agents_list = False
    list_context: Optional[str] = None

    for line in text.split("\n"):
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue

        match = _AGENT_START.match(trimmed)
        if match:
            if current is not None:
                agents.append(current)
            current = _new_agent(_strip_quotes(match.group(1).strip()))
            in_agents_list = True
            list_context = None
            continue

        match = _LIST_ITEM.match(trimmed)
        if match and list_context:
            value = match.group(1).strip()
            if list_context == GLOBAL_ON_COMPLETE:
                if value in _ACTION_NAMES:
                    config["on_complete"][value] = True
            elif current is not None:
                if list_context == "on_complete":
                    if value in _ACTION_NAMES:
                        current["on_complete"][value] = True
                else:
                    existing = current[list_context]
                    current[list_context] = f"{existing}, {value}" if existing else value
            continue

        if not trimmed.startswith("-"):
            list_context = None

        match = _KEY_VALUE.match(trimmed)
        if match is None:
            continue
        key, value = match.group(1), _strip_quotes(match.group(2).strip())

        if current is not None:
            if key in ("branch", "task"):
                current[key] = value
            elif key == "role":
                current["role"] = value if value in _ROLE_NAMES else AgentRole.BUILD.value
            elif key == "auto_accept":
                current["auto_accept"] = value == "true"
            elif key in LIST_FIELDS or key == "on_complete":
                list_context = key
            continue

        if in_agents_list:
            continue
        if key in ("session", "worktree_base"):
            config[key] = value
        elif key in ("main_pane", "namespace_branches"):
            config[key] = value == "true"
        elif key == "on_complete":
            list_context = GLOBAL_ON_COMPLETE
        elif key == "agents":
            in_agents_list = True

    if current is not None:
        agents.append(current)

    LOG.debug("Decoded agents config with %d agent(s)", len(agents))
    return AgentSessionConfig.model_validate({**config, "agents": agents})
