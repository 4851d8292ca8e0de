"""
Aggregation: fold the merged sheet rows into the dashboard summary tables.

Every builder is a pure function of the row set. Production rows feed the
annotator, username, QC and combined-performance tables; hourly rows feed
the attendance matrix.
"""

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass, field

import pandas as pd

from .config import (
    ATTENDANCE_EMP_CODE_POSITION,
    ATTENDANCE_HOURS_POSITION,
    ATTENDANCE_LOGIN_POSITION,
    ATTENDANCE_NAME_POSITION,
    ATTENDANCE_SNO_POSITION,
    HALF_DAY_HOURS,
    SHEET_REFERENCE_YEAR,
    STATUS_ABSENT,
    STATUS_HALF_DAY,
    STATUS_MISSING,
    STATUS_PRESENT,
)
from .keys import KeyMap
from .models import Category, SheetRow
from .normalise import (
    identity_local_part,
    is_qc_name,
    normalise_identity,
    parse_hours,
    to_number,
)

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = ["NAME", "FRAMECOUNT", "OBJECTCOUNT"]
QC_COLUMNS = ["NAME", "OBJECTCOUNT", "ERRORCOUNT"]
PERFORMANCE_COLUMNS = ["name", "value"]
ATTENDANCE_ID_COLUMNS = ["SNO", "NAME", "EMP CODE"]

_MONTHS = {
    "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
    "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12,
}
_SHEET_DATE = re.compile(r"(\d+)(?:ST|ND|RD|TH)?\s+([A-Z]{3})")
_EPOCH = pd.Timestamp("1970-01-01")


# ---------------------------------------------------------------------------
# Production rows
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ProductionRecord:
    """The semantic fields of one production row."""

    annotator: str
    username: str
    frame_id: str
    objects: float
    errors: float
    qc_eligible: bool


def read_production_row(row: SheetRow) -> ProductionRecord:
    keys = KeyMap.for_headers(row.headers)
    username = normalise_identity(row.get(keys.username))
    annotator = normalise_identity(row.get(keys.annotator)) or username
    return ProductionRecord(
        annotator=annotator,
        username=username,
        frame_id=row.get(keys.frame).strip(),
        objects=to_number(row.get(keys.objects)),
        errors=to_number(row.get(keys.errors)),
        qc_eligible=is_qc_name(row.get(keys.qc_name)),
    )


def production_records(rows: Iterable[SheetRow]) -> list[ProductionRecord]:
    return [read_production_row(r) for r in rows if r.category == Category.PRODUCTION]


@dataclass
class _Tally:
    frames: set = field(default_factory=set)
    objects: float = 0.0
    qc_objects: float = 0.0
    qc_errors: float = 0.0
    qc_rows: int = 0

    def add(self, record: ProductionRecord) -> None:
        if record.frame_id:
            self.frames.add(record.frame_id)
        self.objects += record.objects
        if record.qc_eligible:
            self.qc_objects += record.objects
            self.qc_errors += record.errors
            self.qc_rows += 1


def _tally_by(records: Iterable[ProductionRecord], attr: str) -> dict[str, _Tally]:
    tallies: dict[str, _Tally] = {}
    for record in records:
        name = getattr(record, attr)
        if not name:
            continue
        tallies.setdefault(name, _Tally()).add(record)
    return tallies


def _summary_frame(tallies: dict[str, _Tally], display=lambda n: n) -> pd.DataFrame:
    rows = [
        {"NAME": display(name), "FRAMECOUNT": len(t.frames), "OBJECTCOUNT": t.objects}
        for name, t in tallies.items()
    ]
    return pd.DataFrame(rows, columns=SUMMARY_COLUMNS)


def _qc_frame(tallies: dict[str, _Tally], display=lambda n: n) -> pd.DataFrame:
    rows = [
        {"NAME": display(name), "OBJECTCOUNT": t.qc_objects, "ERRORCOUNT": t.qc_errors}
        for name, t in tallies.items()
        if t.qc_rows
    ]
    return pd.DataFrame(rows, columns=QC_COLUMNS)


def build_annotator_summary(rows: Iterable[SheetRow]) -> pd.DataFrame:
    """Distinct frames and summed objects per annotator.

    Rows without an annotator name fall back to the row's username.
    """
    df = _summary_frame(_tally_by(production_records(rows), "annotator"))
    logger.info("Built annotator summary with %d rows", len(df))
    return df


def build_username_summary(rows: Iterable[SheetRow]) -> pd.DataFrame:
    """Distinct frames and summed objects per username (shown without domain)."""
    df = _summary_frame(
        _tally_by(production_records(rows), "username"), identity_local_part
    )
    logger.info("Built username summary with %d rows", len(df))
    return df


def build_qc_by_annotator(rows: Iterable[SheetRow]) -> pd.DataFrame:
    return _qc_frame(_tally_by(production_records(rows), "annotator"))


def build_qc_by_username(rows: Iterable[SheetRow]) -> pd.DataFrame:
    return _qc_frame(
        _tally_by(production_records(rows), "username"), identity_local_part
    )


def build_combined_performance(rows: Iterable[SheetRow]) -> pd.DataFrame:
    """Objects per contributor, annotator-or-username, highest first."""
    totals: dict[str, float] = {}
    for record in production_records(rows):
        primary = record.annotator or record.username
        if primary:
            totals[primary] = totals.get(primary, 0.0) + record.objects

    df = pd.DataFrame(
        [{"name": name, "value": value} for name, value in totals.items()],
        columns=PERFORMANCE_COLUMNS,
    )
    return df.sort_values("value", ascending=False, kind="stable").reset_index(drop=True)


# ---------------------------------------------------------------------------
# Hourly rows
# ---------------------------------------------------------------------------

def parse_sheet_date(sheet_name: str) -> pd.Timestamp:
    """Date embedded in a sheet name such as "15th OCT Login".

    Names without a "<day> <MON>" token sort first (epoch). Unknown month
    abbreviations count as January; days past month end roll over.
    """
    match = _SHEET_DATE.search(sheet_name.upper())
    if not match:
        return _EPOCH
    day = int(match.group(1))
    month = _MONTHS.get(match.group(2), 1)
    try:
        return pd.Timestamp(SHEET_REFERENCE_YEAR, month, 1) + pd.Timedelta(days=day - 1)
    except (OverflowError, ValueError):
        logger.warning("Day %d in sheet name '%s' is out of range", day, sheet_name)
        return pd.Timestamp.max


def sort_sheets_by_date(sheet_names: Iterable[str]) -> list[str]:
    return sorted(sheet_names, key=parse_sheet_date)


def attendance_status(login_time: str, working_hours: float) -> str:
    login = login_time.strip()
    if not login or login.lower() == "nil":
        return STATUS_ABSENT
    if working_hours < HALF_DAY_HOURS:
        return STATUS_HALF_DAY
    return STATUS_PRESENT


@dataclass(frozen=True)
class AttendanceRecord:
    sno: str
    name: str
    emp_code: str
    status: str
    sheet_name: str


def read_hourly_row(row: SheetRow) -> AttendanceRecord:
    """Attendance fields by column position; only the employee code is looked up by name."""
    keys = KeyMap.for_headers(row.headers)
    if keys.employee_code is not None:
        emp_code = row.get(keys.employee_code)
    else:
        emp_code = row.at(ATTENDANCE_EMP_CODE_POSITION)
    return AttendanceRecord(
        sno=row.at(ATTENDANCE_SNO_POSITION).strip(),
        name=row.at(ATTENDANCE_NAME_POSITION).strip(),
        emp_code=emp_code.strip(),
        status=attendance_status(
            row.at(ATTENDANCE_LOGIN_POSITION),
            parse_hours(row.at(ATTENDANCE_HOURS_POSITION)),
        ),
        sheet_name=row.sheet_name,
    )


def build_attendance(rows: Iterable[SheetRow]) -> tuple[pd.DataFrame, list[str]]:
    """Employee x sheet attendance matrix.

    Returns
    -------
    (attendance DataFrame, header list). Sheet columns are ordered by the
    date in their name; an employee absent from a sheet shows "NIL".
    """
    employees: dict[str, AttendanceRecord] = {}
    statuses: dict[str, dict[str, str]] = {}
    sheets: dict[str, None] = {}

    for row in rows:
        if row.category != Category.HOURLY:
            continue
        sheets.setdefault(row.sheet_name, None)
        record = read_hourly_row(row)
        if not record.name:
            continue
        employees.setdefault(record.name, record)
        statuses.setdefault(record.name, {})[record.sheet_name] = record.status

    ordered_sheets = sort_sheets_by_date(sheets)
    headers = ATTENDANCE_ID_COLUMNS + ordered_sheets

    table = []
    for name, first in employees.items():
        entry = {"SNO": first.sno, "NAME": first.name, "EMP CODE": first.emp_code}
        for sheet in ordered_sheets:
            entry[sheet] = statuses[name].get(sheet, STATUS_MISSING)
        table.append(entry)

    df = pd.DataFrame(table, columns=headers)
    logger.info(
        "Built attendance matrix with %d employees over %d sheets",
        len(df), len(ordered_sheets),
    )
    return df, headers


# ---------------------------------------------------------------------------
# All views
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Summaries:
    annotators: pd.DataFrame
    users: pd.DataFrame
    qc_annotators: pd.DataFrame
    qc_users: pd.DataFrame
    combined_performance: pd.DataFrame
    attendance: pd.DataFrame
    attendance_headers: list[str]


def build_summaries(rows: Iterable[SheetRow]) -> Summaries:
    """Recompute every summary table from scratch."""
    rows = list(rows)
    attendance, attendance_headers = build_attendance(rows)
    return Summaries(
        annotators=build_annotator_summary(rows),
        users=build_username_summary(rows),
        qc_annotators=build_qc_by_annotator(rows),
        qc_users=build_qc_by_username(rows),
        combined_performance=build_combined_performance(rows),
        attendance=attendance,
        attendance_headers=attendance_headers,
    )
