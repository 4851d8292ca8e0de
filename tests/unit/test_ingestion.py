from __future__ import annotations

import asyncio
import threading
from dataclasses import replace

from annotation_dashboard.ingestion import IngestionMerger, prepare_rows
from annotation_dashboard.models import Category, SheetRef

PROD_CSV = (
    "Date,Annotator Name,UserName,Frame ID,Number of Object Annotated\n"
    "2025-10-15,Alice,alice,F1,5\n"
    "NIL,Bob,bob@example.com,F2,3\n"
)


def test_prepare_rows_normalises_dates_and_stamps_provenance(production_project):
    records = [
        {"Task Date": "2025-10-15", "Frame ID": "F1"},
        {"Task Date": "-", "Frame ID": "F2"},
    ]
    rows = prepare_rows(records, production_project, "15th OCT Production")
    assert [r.values["Task Date"] for r in rows] == ["2025/10/15", ""]
    assert rows[0].values["Frame ID"] == "F1"
    assert rows[0].provenance.project_name == "Lane Marking"
    assert rows[0].category == Category.PRODUCTION
    assert rows[0].sheet_name == "15th OCT Production"


def test_prepare_rows_drops_reserved_columns(production_project, caplog):
    rows = prepare_rows([{"__projectName": "spoof", "Frame ID": "F1"}], production_project, "Production")
    assert rows[0].headers == ("Frame ID",)
    assert rows[0].provenance.project_name == "Lane Marking"
    assert "reserved column names" in caplog.text


def test_prepare_rows_empty(production_project):
    assert prepare_rows([], production_project, "Production") == []


def test_merge_publishes_rows_in_selection_order(fake_client_cls, production_project, hourly_project):
    client = fake_client_cls(sheets={
        ("prod-sheet", "15th OCT Production"): PROD_CSV,
        ("hourly-sheet", "15th OCT Login"): "S.No,Name\n1,Ramu\n",
    })
    merger = IngestionMerger(client, [production_project, hourly_project])
    selection = ["h1|15th OCT Login", SheetRef("p1", "15th OCT Production")]

    result = merger.merge_now(selection)

    assert result is merger.published
    assert len(result) == 3
    assert [r.sheet_name for r in result.rows] == [
        "15th OCT Login", "15th OCT Production", "15th OCT Production",
    ]
    assert result.sheet_ids == ("h1|15th OCT Login", "p1|15th OCT Production")
    assert result.generation == merger.generation == 1
    assert [r.values["Date"] for r in result.by_category(Category.PRODUCTION)] == ["2025/10/15", ""]


def test_failed_sheet_contributes_no_rows(fake_client_cls, production_project, hourly_project):
    client = fake_client_cls(
        sheets={("prod-sheet", "15th OCT Production"): PROD_CSV},
        broken={"hourly-sheet"},
    )
    merger = IngestionMerger(client, [production_project, hourly_project])
    result = merger.merge_now(["p1|15th OCT Production", "h1|15th OCT Login"])
    assert len(result) == 2
    assert {r.category for r in result.rows} == {Category.PRODUCTION}


def test_unknown_project_is_skipped(fake_client_cls, production_project, caplog):
    merger = IngestionMerger(fake_client_cls(), [production_project])
    result = merger.merge_now(["gone|Production"])
    assert len(result) == 0
    assert "unknown project" in caplog.text


def test_empty_selection_publishes_empty_set(fake_client_cls):
    merger = IngestionMerger(fake_client_cls())
    result = merger.merge_now([])
    assert result.rows == ()
    assert result.generation == 1


def test_superseded_merge_is_discarded(fake_client_cls, production_project):
    gate = threading.Event()
    client = fake_client_cls(
        sheets={
            ("prod-sheet", "Slow Production"): "Frame ID\nOLD-1\nOLD-2\n",
            ("prod-sheet", "Fast Production"): "Frame ID\nNEW-1\n",
        },
        gates={"Slow Production": gate},
    )
    merger = IngestionMerger(client, [production_project])

    async def scenario():
        slow = asyncio.create_task(merger.merge(["p1|Slow Production"]))
        await asyncio.sleep(0)
        fast = await merger.merge(["p1|Fast Production"])
        gate.set()
        return await slow, fast

    stale, fresh = asyncio.run(scenario())

    assert stale is None
    assert fresh is merger.published
    assert [r.values["Frame ID"] for r in merger.published.rows] == ["NEW-1"]
    assert merger.published.generation == 2


def test_update_projects_changes_lookup(fake_client_cls, production_project, hourly_project):
    client = fake_client_cls(sheets={("hourly-sheet", "Login"): "S.No,Name\n1,Ramu\n"})
    merger = IngestionMerger(client, [production_project])
    merger.update_projects([hourly_project])
    assert len(merger.merge_now(["h1|Login"])) == 1
    assert len(merger.merge_now(["p1|Production"])) == 0


def test_project_edit_clears_published_rows(fake_client_cls, production_project):
    client = fake_client_cls(sheets={
        ("prod-sheet", "Production"): "Frame ID\nOLD-1\n",
        ("moved-sheet", "Production"): "Frame ID\nNEW-1\nNEW-2\n",
    })
    merger = IngestionMerger(client, [production_project])
    assert len(merger.merge_now(["p1|Production"])) == 1

    merger.update_projects([replace(production_project, spreadsheet_id="moved-sheet")])

    assert merger.published.rows == ()
    assert merger.published.sheet_ids == ()
    result = merger.merge_now(["p1|Production"])
    assert [r.values["Frame ID"] for r in result.rows] == ["NEW-1", "NEW-2"]


def test_project_edit_supersedes_merge_in_flight(fake_client_cls, production_project):
    gate = threading.Event()
    client = fake_client_cls(
        sheets={("prod-sheet", "Slow Production"): "Frame ID\nOLD-1\n"},
        gates={"Slow Production": gate},
    )
    merger = IngestionMerger(client, [production_project])

    async def scenario():
        slow = asyncio.create_task(merger.merge(["p1|Slow Production"]))
        await asyncio.sleep(0)
        merger.update_projects([production_project])
        gate.set()
        return await slow

    assert asyncio.run(scenario()) is None
    assert merger.published.rows == ()
