from __future__ import annotations

from typing import Any, Dict, List

PROJECT_COLUMNS = ("name", "path", "agents", "session")


def _flag(value: Any) -> str:
    return "yes" if value else "-"


def project_rows(projects: List[Dict[str, Any]]) -> List[List[str]]:
    return [
        [
            str(project.get("name", "")),
            str(project.get("path", "")),
            _flag(project.get("has_agents_config")),
            _flag(project.get("has_session")),
        ]
        for project in projects
    ]


def projects_table(projects: List[Dict[str, Any]], max_path_width: int = 60) -> str:
    """Render the project listing returned by ``GET /api/projects``."""
    if not projects:
        return "No projects registered."

    rows = project_rows(projects)
    widths = [
        max(len(header), *(len(row[i]) for row in rows))
        for i, header in enumerate(PROJECT_COLUMNS)
    ]
    widths[1] = min(widths[1], max_path_width)

    lines = ["  ".join(h.upper().ljust(widths[i]) for i, h in enumerate(PROJECT_COLUMNS))]
    for row in rows:
        lines.append("  ".join(cell[: widths[i]].ljust(widths[i]) for i, cell in enumerate(row)))
    return "\n".join(line.rstrip() for line in lines)
