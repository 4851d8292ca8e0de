"""Whole-pipeline runs: discovery, merge and every summary view."""
from __future__ import annotations

import asyncio

from annotation_dashboard.config import STATUS_ABSENT, STATUS_HALF_DAY, STATUS_PRESENT
from annotation_dashboard.dashboard import compute_table_totals, get_metric_cards, overall_attendance_total
from annotation_dashboard.ingestion import IngestionMerger
from annotation_dashboard.kpis import rank_quality_performers, summarise_metrics
from annotation_dashboard.loaders import discover_sheet_refs
from annotation_dashboard.models import Category
from annotation_dashboard.projects import MemoryProjectStore, new_project
from annotation_dashboard.simulator import (
    SPREADSHEET_HOURLY,
    SPREADSHEET_PRODUCTION,
    SimulatedSheetsClient,
)
from annotation_dashboard.transforms import build_summaries


async def _run(client, projects):
    refs = await discover_sheet_refs(client, projects)
    merger = IngestionMerger(client, projects)
    return refs, await merger.merge(refs)


def test_rework_rows_across_sheets(fake_client_cls, production_project):
    client = fake_client_cls(
        sheets={
            ("prod-sheet", "14th OCT Production"): (
                "Annotator Name,UserName,Frame ID,Number of Object Annotated,Internal QC Name,"
                "Internal Polygon Error Count\nAlice,alice,F1,5,Gayathri,1\n"
            ),
            ("prod-sheet", "15th OCT Production"): (
                "annotator_name,user name,frame id,objects,qc by,errors\nAlice,alice,F1,3,nil,2\n"
            ),
        },
        metadata={"prod-sheet": '{"name":"14th OCT Production"},{"name":"15th OCT Production"}'},
    )
    refs, row_set = asyncio.run(_run(client, [production_project]))

    assert [r.sheet_name for r in refs] == ["14th OCT Production", "15th OCT Production"]
    summaries = build_summaries(row_set.rows)
    assert summaries.annotators.to_dict("records") == [
        {"NAME": "Alice@rprocess.in", "FRAMECOUNT": 1, "OBJECTCOUNT": 8.0}
    ]
    assert summaries.qc_users.to_dict("records") == [
        {"NAME": "alice", "OBJECTCOUNT": 5.0, "ERRORCOUNT": 1.0}
    ]
    assert [c["value"] for c in get_metric_cards(row_set.rows)] == ["1", "8", "5", "1", "80.00%"]


def test_simulated_spreadsheets():
    store = MemoryProjectStore([
        new_project("Simulated Production", SPREADSHEET_PRODUCTION, Category.PRODUCTION),
        new_project(
            "Simulated Logins",
            f"https://docs.google.com/spreadsheets/d/{SPREADSHEET_HOURLY}/edit",
            Category.HOURLY,
        ),
        new_project("Unshared", "not-shared", Category.PRODUCTION, "Daily Production"),
    ])
    projects = store.load()
    refs, row_set = asyncio.run(_run(SimulatedSheetsClient(), projects))

    assert [r.sheet_name for r in refs] == [
        "14th OCT Production", "15th OCT Production", "16th OCT Production",
        "14th OCT Login", "15th OCT Login", "16th OCT Login",
        "Daily Production",
    ]
    assert len(row_set.by_category(Category.PRODUCTION)) == 3 * 40
    assert len(row_set.by_category(Category.HOURLY)) == 3 * 6

    summaries = build_summaries(row_set.rows)
    metrics = summarise_metrics(row_set.rows)
    assert summaries.annotators["OBJECTCOUNT"].sum() == metrics["total_objects"]
    assert summaries.qc_annotators["OBJECTCOUNT"].sum() == metrics["qc_objects"]
    assert metrics["qc_objects"] < metrics["total_objects"]
    assert len(rank_quality_performers(summaries.qc_annotators)) == 3

    attendance = summaries.attendance
    assert list(attendance.columns[3:]) == ["14th OCT Login", "15th OCT Login", "16th OCT Login"]
    assert len(attendance) == 6
    statuses = set(attendance.iloc[:, 3:].to_numpy().ravel())
    assert statuses <= {STATUS_PRESENT, STATUS_ABSENT, STATUS_HALF_DAY}

    totals = overall_attendance_total(compute_table_totals(attendance))
    assert sum(totals.values()) == 18
