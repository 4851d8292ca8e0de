"""
Dashboard-ready output functions.

These are the entry points for the Streamlit front end. Each function
returns plain dicts, lists or DataFrames suitable for rendering cards,
charts, tables and CSV downloads.
"""

import csv
import logging
import re
from collections.abc import Iterable, Sequence
from datetime import date

import pandas as pd

from .config import BIRTHDAYS, COLORS, STATUS_CODES
from .keys import normalise_key, ordered_headers
from .kpis import format_quality_rate, summarise_metrics
from .models import Category, Project, SheetRef, SheetRow

logger = logging.getLogger(__name__)

# Normalised column names summed in table totals
_SUM_COLUMNS = {"framecount", "objectcount", "errorcount", "numberofobjectannotated"}
_ATTENDANCE_VALUES = {"PRESENT", "ABSENT", "NIL", "P(1/2)"}


def get_metric_cards(rows: Iterable[SheetRow]) -> list[dict]:
    """Five headline cards: frames, objects, QC objects, errors, quality rate."""
    m = summarise_metrics(rows)
    return [
        {"label": "Total Frames", "value": f"{m['total_frames']:,}", "color": COLORS["primary"]},
        {"label": "Total Objects", "value": f"{m['total_objects']:,.0f}", "color": COLORS["accent"]},
        {"label": "QC Total Objects", "value": f"{m['qc_objects']:,.0f}", "color": COLORS["secondary"]},
        {"label": "Total Errors", "value": f"{m['total_errors']:,.0f}", "color": COLORS["danger"]},
        {
            "label": "Quality Rate",
            "value": format_quality_rate(m["quality_rate_pct"], m["qc_objects"]),
            "color": COLORS["success"],
        },
    ]


def get_raw_table(
    rows: Iterable[SheetRow],
    category: Category = Category.PRODUCTION,
) -> pd.DataFrame:
    """Raw rows of one category with the union of their headers."""
    selected = [r for r in rows if r.category == category]
    headers = ordered_headers(selected)
    if not selected:
        return pd.DataFrame(columns=headers)
    return pd.DataFrame([r.values for r in selected], columns=headers).fillna("")


def get_sheet_groups(
    projects: Sequence[Project],
    selected_project_ids: Sequence[str],
    refs: Sequence[SheetRef],
) -> list[dict]:
    """Sheet options grouped under each selected project, for the sheet picker."""
    by_id = {p.id: p for p in projects}
    groups = []
    for pid in selected_project_ids:
        project = by_id.get(pid)
        options = [ref.id for ref in refs if ref.project_id == pid]
        if not options:
            continue
        groups.append({
            "project_id": pid,
            "title": project.name if project else "Unknown Project",
            "color": project.color if project else None,
            "options": options,
        })
    return groups


# ---------------------------------------------------------------------------
# Banner and table filtering
# ---------------------------------------------------------------------------

def todays_birthdays(today: date | None = None, birthdays: Sequence[dict] = BIRTHDAYS) -> list[dict]:
    """Birthday entries whose ``MM-DD`` date is today."""
    key = (today or date.today()).strftime("%m-%d")
    return [b for b in birthdays if b["date"] == key]


def birthday_message(birthdays: Sequence[dict]) -> str | None:
    if not birthdays:
        return None
    return f"Happy Birthday, {' & '.join(b['name'] for b in birthdays)}!"


def filter_options(df: pd.DataFrame, columns: Sequence[str] | None = None) -> dict[str, list[str]]:
    """Sorted distinct non-empty values per filter column.

    Defaults to the first three columns of the table.
    """
    columns = list(df.columns[:3]) if columns is None else list(columns)
    options = {}
    for column in columns:
        if column not in df.columns:
            continue
        values = {_cell_text(v) for v in df[column]}
        options[column] = sorted(v for v in values if v not in ("", "undefined", "null"))
    return options


def filter_table(
    df: pd.DataFrame,
    search: str = "",
    filters: dict[str, Sequence[str]] | None = None,
) -> pd.DataFrame:
    """Rows matching a free-text search and per-column value filters.

    Logic
    -----
    - search: case-insensitive substring of any cell in the row
    - filters: {column: accepted values}; an empty list accepts everything

    Totals and exports are computed on the returned frame.
    """
    mask = pd.Series(True, index=df.index)
    texts = df.map(_cell_text).astype(str) if len(df.columns) else df

    term = (search or "").strip().lower()
    if term:
        hits = pd.Series(False, index=df.index)
        for column in texts.columns:
            hits |= texts[column].str.lower().str.contains(term, regex=False)
        mask &= hits

    for column, accepted in (filters or {}).items():
        if accepted and column in texts.columns:
            mask &= texts[column].isin([str(v) for v in accepted])

    filtered = df[mask].reset_index(drop=True)
    logger.debug("Filtered table from %d to %d rows", len(df), len(filtered))
    return filtered


# ---------------------------------------------------------------------------
# Table totals and CSV export
# ---------------------------------------------------------------------------

def _cell_text(value) -> str:
    if value is None or (isinstance(value, float) and pd.isna(value)):
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def compute_table_totals(df: pd.DataFrame) -> dict[str, dict]:
    """Footer totals per column.

    Rules
    -----
    - "Video ID" columns get no total.
    - "Frame ID" columns count non-empty cells.
    - Attendance columns count Present / Absent / P(1/2) cells.
    - FRAMECOUNT / OBJECTCOUNT / ERRORCOUNT / object columns are summed.
    - Any other column whose first non-empty value is numeric is summed.

    Returns
    -------
    {column: {"type": "numeric" | "attendance", "label": ..., "value": ...}}
    """
    totals: dict[str, dict] = {}
    for column in df.columns:
        norm = normalise_key(column)
        if norm == "videoid":
            continue

        texts = df[column].map(_cell_text).astype(str)

        if norm == "frameid":
            count = int((texts.str.strip() != "").sum())
            totals[column] = {"type": "numeric", "label": "Count", "value": count}
            continue

        upper = texts.str.upper()
        if upper.isin(_ATTENDANCE_VALUES).any():
            present = int((upper == "PRESENT").sum())
            absent = int((upper == "ABSENT").sum())
            half = int((upper == "P(1/2)").sum())
            if present or absent or half:
                totals[column] = {
                    "type": "attendance",
                    "label": "Attendance",
                    "value": {"present": present, "absent": absent, "half": half},
                }
                continue

        numbers = pd.to_numeric(df[column], errors="coerce")
        if norm in _SUM_COLUMNS:
            totals[column] = {"type": "numeric", "label": "Sum", "value": numbers.fillna(0).sum()}
            continue

        non_empty = texts[texts != ""]
        if not non_empty.empty and pd.notna(pd.to_numeric(non_empty.iloc[0], errors="coerce")):
            totals[column] = {"type": "numeric", "label": "Sum", "value": numbers.fillna(0).sum()}

    return totals


def overall_attendance_total(totals: dict[str, dict]) -> dict | None:
    """Sum of per-sheet attendance totals, or None for non-attendance tables."""
    summary = {"present": 0, "half": 0, "absent": 0}
    found = False
    for total in totals.values():
        if total["type"] == "attendance":
            for status in summary:
                summary[status] += total["value"][status]
            found = True
    return summary if found else None


def _format_total(total: dict | None) -> str:
    if total is None:
        return ""
    if total["type"] == "attendance":
        v = total["value"]
        return f"P: {v['present']} | L: {v['absent']} | HD: {v['half']}"
    return _cell_text(total["value"])


def export_table_csv(
    df: pd.DataFrame,
    title: str,
    today: date | None = None,
) -> tuple[str, str]:
    """Render a summary table as a downloadable CSV.

    Attendance statuses are written as letter codes (P / L / HD); a blank
    row and a GRAND TOTALS row follow the data.

    Returns
    -------
    (filename, csv text)
    """
    today = today or date.today()
    stem = re.sub(r"\s+", "_", title.lower())
    filename = f"{stem}_{today.isoformat()}.csv"

    headers = [str(c) for c in df.columns]
    body = df.copy()
    body.columns = headers
    body = body.map(lambda v: STATUS_CODES.get(v, v) if isinstance(v, str) else _cell_text(v))

    totals = compute_table_totals(df)
    totals_row = {
        header: ("GRAND TOTALS" if i == 0 else _format_total(totals.get(column)))
        for i, (header, column) in enumerate(zip(headers, df.columns))
    }
    blank_row = {header: "" for header in headers}

    export = pd.concat(
        [body, pd.DataFrame([blank_row, totals_row], columns=headers)],
        ignore_index=True,
    )
    text = export.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
    logger.info("Exported %d rows of '%s' to %s", len(df), title, filename)
    return filename, text
