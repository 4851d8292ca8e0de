"""
Annotation Performance Dashboard: End-to-end analytics pipeline.

Runs the full pipeline from the configured spreadsheets to dashboard-ready
outputs and prints smoke-test summaries.

Usage:
    python main.py                     # projects from projects.json
    python main.py --projects my.json
    python main.py --demo              # simulated spreadsheets, no network
"""

import argparse
import asyncio
import logging
from pathlib import Path

from annotation_dashboard.config import PROJECTS_FILE
from annotation_dashboard.dashboard import (
    compute_table_totals,
    get_metric_cards,
    overall_attendance_total,
)
from annotation_dashboard.ingestion import IngestionMerger
from annotation_dashboard.kpis import rank_quality_performers
from annotation_dashboard.loaders import SheetsClient, discover_sheet_refs
from annotation_dashboard.models import Category
from annotation_dashboard.projects import JsonProjectStore, MemoryProjectStore, new_project
from annotation_dashboard.simulator import (
    SPREADSHEET_HOURLY,
    SPREADSHEET_PRODUCTION,
    SimulatedSheetsClient,
)
from annotation_dashboard.transforms import build_summaries

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def _demo_setup():
    store = MemoryProjectStore([
        new_project("Simulated Production", SPREADSHEET_PRODUCTION, Category.PRODUCTION),
        new_project("Simulated Logins", f"https://docs.google.com/spreadsheets/d/{SPREADSHEET_HOURLY}/edit", Category.HOURLY),
    ])
    return store, SimulatedSheetsClient()


async def run_pipeline(store, client):
    projects = store.load()
    refs = await discover_sheet_refs(client, projects)
    merger = IngestionMerger(client, projects)
    row_set = await merger.merge(refs)
    return projects, refs, row_set


def main() -> None:
    """Run the full analytics pipeline and print smoke-test outputs."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--projects", type=Path, default=PROJECTS_FILE)
    parser.add_argument("--demo", action="store_true", help="use simulated spreadsheets")
    args = parser.parse_args()

    if args.demo:
        store, client = _demo_setup()
    else:
        store, client = JsonProjectStore(args.projects), SheetsClient()

    print("=" * 70)
    print("  ANNOTATION PERFORMANCE DASHBOARD")
    print("  Analytics Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Discover and load sheets
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    projects, refs, row_set = asyncio.run(run_pipeline(store, client))
    if not projects:
        logger.warning("No projects configured in %s", args.projects)
        return

    for project in projects:
        names = [r.sheet_name for r in refs if r.project_id == project.id]
        print(f"\n{project.name} ({project.category.value}): {len(names)} sheets")
        for name in names:
            print(f"    - {name}")

    rows = row_set.rows if row_set is not None else ()
    print(f"\nUnified rows: {len(rows)}")

    # ------------------------------------------------------------------
    # 2. Build summaries
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] BUILDING SUMMARY TABLES")
    print("-" * 40)

    summaries = build_summaries(rows)
    tables = [
        ("Annotator Summary", summaries.annotators),
        ("UserName Summary", summaries.users),
        ("QC (Annotator)", summaries.qc_annotators),
        ("QC (UserName)", summaries.qc_users),
        ("Attendance Summary", summaries.attendance),
    ]
    for title, df in tables:
        print(f"\n{title}: {len(df)} rows")
        if not df.empty:
            print(df.head(10).to_string(index=False))

    # ------------------------------------------------------------------
    # 3. Dashboard outputs
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] DASHBOARD OUTPUTS")
    print("-" * 40)

    print("\nMetric cards:")
    for card in get_metric_cards(rows):
        print(f"  {card['label']:18s} | {card['value']}")

    print("\nTop performers by volume:")
    if not summaries.combined_performance.empty:
        print(summaries.combined_performance.head(5).to_string(index=False))

    print("\nHigh performance quality check:")
    ranked = rank_quality_performers(summaries.qc_annotators)
    if not ranked.empty:
        print(ranked.to_string(index=False))

    attendance_total = overall_attendance_total(compute_table_totals(summaries.attendance))
    if attendance_total:
        print(
            f"\nAttendance totals: P {attendance_total['present']} | "
            f"HD {attendance_total['half']} | L {attendance_total['absent']}"
        )

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
