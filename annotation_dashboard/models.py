"""
Domain types shared across the pipeline.

Rows keep their cell values in an ordered column mapping and carry their
provenance alongside, so real sheet columns can never collide with
bookkeeping fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .config import HOURLY, PRODUCTION


class Category(str, Enum):
    """Project category, fixed when the project is created."""

    PRODUCTION = PRODUCTION
    HOURLY = HOURLY


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    spreadsheet_id: str
    category: Category
    color: str
    custom_sheets: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "spreadsheetId": self.spreadsheet_id,
            "category": self.category.value,
            "color": self.color,
            "customSheets": self.custom_sheets,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Project:
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            spreadsheet_id=str(data["spreadsheetId"]),
            category=Category(data["category"]),
            color=str(data.get("color") or ""),
            custom_sheets=str(data.get("customSheets") or ""),
        )


@dataclass(frozen=True)
class SheetRef:
    """One tab of one project's spreadsheet, addressed as ``project_id|sheet_name``."""

    project_id: str
    sheet_name: str

    @property
    def id(self) -> str:
        return f"{self.project_id}|{self.sheet_name}"

    @classmethod
    def parse(cls, ref_id: str) -> SheetRef:
        project_id, _, sheet_name = ref_id.partition("|")
        return cls(project_id=project_id, sheet_name=sheet_name)


@dataclass(frozen=True)
class Provenance:
    project_name: str
    category: Category
    sheet_name: str


@dataclass(frozen=True)
class SheetRow:
    """A single ingested row: column name -> cell text, in sheet column order."""

    values: dict[str, str]
    provenance: Provenance

    @property
    def headers(self) -> tuple[str, ...]:
        return tuple(self.values)

    @property
    def category(self) -> Category:
        return self.provenance.category

    @property
    def sheet_name(self) -> str:
        return self.provenance.sheet_name

    def get(self, column: str | None, default: str = "") -> str:
        if column is None:
            return default
        value = self.values.get(column)
        return default if value is None else value

    def at(self, position: int) -> str:
        """Cell value by column position; missing positions read as empty."""
        columns = list(self.values)
        if position >= len(columns):
            return ""
        return self.values[columns[position]]


@dataclass(frozen=True)
class UnifiedRowSet:
    """Rows published by one merge invocation."""

    rows: tuple[SheetRow, ...] = ()
    generation: int = 0
    sheet_ids: tuple[str, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.rows)

    def by_category(self, category: Category) -> list[SheetRow]:
        return [row for row in self.rows if row.category == category]
