"""
Project configuration: creation, edits and persistence of the project list.

The project list is the only durable state. Stores replace the whole
collection on save.
"""

from __future__ import annotations

import json
import logging
import random
import time
from dataclasses import replace
from pathlib import Path
from typing import Protocol

from .config import PROJECT_COLORS
from .loaders.sheets import extract_spreadsheet_id
from .models import Category, Project

logger = logging.getLogger(__name__)


_last_id = 0


class ProjectConfigError(ValueError):
    """A project is missing a required field or has an invalid value."""


def _require(value: str | None, field_name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ProjectConfigError(f"project {field_name} is required")
    return value


def _next_project_id() -> str:
    """Millisecond timestamp, bumped past the previous id when created in the same millisecond."""
    global _last_id
    _last_id = max(time.time_ns() // 1_000_000, _last_id + 1)
    return str(_last_id)


def new_project(
    name: str,
    spreadsheet: str,
    category: Category | str,
    custom_sheets: str = "",
) -> Project:
    """Create a project from user input.

    ``spreadsheet`` may be a bare spreadsheet id or a full document URL.
    """
    name = _require(name, "name")
    spreadsheet_id = extract_spreadsheet_id(_require(spreadsheet, "spreadsheet"))
    try:
        category = Category(category)
    except ValueError as e:
        raise ProjectConfigError(f"unknown project category: {category!r}") from e

    return Project(
        id=_next_project_id(),
        name=name,
        spreadsheet_id=spreadsheet_id,
        category=category,
        color=random.choice(PROJECT_COLORS),
        custom_sheets=(custom_sheets or "").strip(),
    )


def update_project(
    project: Project,
    name: str | None = None,
    spreadsheet: str | None = None,
    custom_sheets: str | None = None,
) -> Project:
    """Edit a project. The category cannot be changed."""
    changes = {}
    if name is not None:
        changes["name"] = _require(name, "name")
    if spreadsheet is not None:
        changes["spreadsheet_id"] = extract_spreadsheet_id(_require(spreadsheet, "spreadsheet"))
    if custom_sheets is not None:
        changes["custom_sheets"] = custom_sheets.strip()
    return replace(project, **changes)


def add_project(projects: list[Project], project: Project) -> list[Project]:
    return [*projects, project]


def replace_project(projects: list[Project], updated: Project) -> list[Project]:
    return [updated if p.id == updated.id else p for p in projects]


def delete_project(projects: list[Project], project_id: str) -> list[Project]:
    return [p for p in projects if p.id != project_id]


def prune_selection(selected_ids: list[str], project_id: str) -> list[str]:
    """Drop ``project_id`` and its ``project_id|sheet`` entries from a selection."""
    prefix = f"{project_id}|"
    return [s for s in selected_ids if s != project_id and not s.startswith(prefix)]


def remove_project(
    projects: list[Project],
    selections: dict[str, list[str]],
    project_id: str,
) -> tuple[list[Project], dict[str, list[str]]]:
    """Delete a project and drop it and its sheets from every selection list.

    Returns
    -------
    (remaining projects, {selection name: pruned ids})
    """
    pruned = {name: prune_selection(ids, project_id) for name, ids in selections.items()}
    logger.info("Removed project %s", project_id)
    return delete_project(projects, project_id), pruned


def projects_by_category(projects: list[Project], category: Category) -> list[Project]:
    return [p for p in projects if p.category == category]


class ProjectStore(Protocol):
    def load(self) -> list[Project]: ...

    def save(self, projects: list[Project]) -> bool: ...


class JsonProjectStore:
    """Project list kept as a JSON array on disk."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> list[Project]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
            projects = [Project.from_dict(item) for item in data]
        except (json.JSONDecodeError, KeyError, TypeError, ValueError):
            logger.exception("Could not read project list from %s", self.path)
            return []
        logger.info("Loaded %d projects from %s", len(projects), self.path)
        return projects

    def save(self, projects: list[Project]) -> bool:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [p.to_dict() for p in projects]
        self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        logger.info("Saved %d projects to %s", len(projects), self.path)
        return True


class MemoryProjectStore:
    """In-process store for tests and demo runs."""

    def __init__(self, projects: list[Project] | None = None) -> None:
        self._projects = list(projects or [])

    def load(self) -> list[Project]:
        return list(self._projects)

    def save(self, projects: list[Project]) -> bool:
        self._projects = list(projects)
        return True
