# Shared pytest fixtures
from __future__ import annotations

import threading

import pytest

from annotation_dashboard.loaders.sheets import SheetFetchError
from annotation_dashboard.models import Category, Project, Provenance, SheetRow


class FakeSheetsClient:
    """Dict-backed sheets client.

    ``gates`` maps a sheet name to a threading.Event the fetch waits on,
    so tests can hold one sheet's download open while others finish.
    """

    def __init__(self, sheets=None, metadata=None, gates=None, broken=()):
        self.sheets = sheets or {}
        self.metadata = metadata or {}
        self.gates = gates or {}
        self.broken = set(broken)
        self.calls: list[tuple[str, str]] = []
        self._lock = threading.Lock()

    def fetch_document_metadata(self, spreadsheet_id):
        if spreadsheet_id in self.broken or spreadsheet_id not in self.metadata:
            raise SheetFetchError(f"{spreadsheet_id} inaccessible")
        return self.metadata[spreadsheet_id]

    def fetch_sheet_csv(self, spreadsheet_id, sheet_name):
        with self._lock:
            self.calls.append((spreadsheet_id, sheet_name))
        gate = self.gates.get(sheet_name)
        if gate is not None and not gate.wait(timeout=5):
            raise SheetFetchError(f"gate for {sheet_name} never opened")
        if spreadsheet_id in self.broken:
            raise SheetFetchError(f"{spreadsheet_id} inaccessible")
        try:
            return self.sheets[(spreadsheet_id, sheet_name)]
        except KeyError as e:
            raise SheetFetchError(f"no sheet {sheet_name}") from e


@pytest.fixture()
def fake_client_cls():
    return FakeSheetsClient


@pytest.fixture()
def production_project() -> Project:
    return Project(
        id="p1",
        name="Lane Marking",
        spreadsheet_id="prod-sheet",
        category=Category.PRODUCTION,
        color="#8B5CF6",
    )


@pytest.fixture()
def hourly_project() -> Project:
    return Project(
        id="h1",
        name="Team Logins",
        spreadsheet_id="hourly-sheet",
        category=Category.HOURLY,
        color="#06B6D4",
    )


@pytest.fixture()
def make_row():
    def _make(values: dict, category=Category.PRODUCTION, sheet="Production", project="Lane Marking"):
        return SheetRow(
            values=dict(values),
            provenance=Provenance(project_name=project, category=category, sheet_name=sheet),
        )
    return _make
