"""
Simulated spreadsheet source for the annotation dashboard.

Generates realistic production and login sheets for a small annotation
team. All values are synthetic; no real operational data is used.
SimulatedSheetsClient serves them through the same interface as
loaders.sheets.SheetsClient, so the whole pipeline can run offline.
"""

import json

import numpy as np
import pandas as pd

from .loaders.sheets import SheetFetchError

# Seed for reproducibility
_SEED = 42

# ---------------------------------------------------------------------------
# Typical team parameters (realistic ranges)
# ---------------------------------------------------------------------------
_ANNOTATORS = [
    ("Ramu M", "ramu.m", "DC101"),
    ("Santhiya P", "santhiya.p", "DC102"),
    ("Arun Kumar S", "arun.kumar", "DC103"),
    ("Ishwarya R", "ishwarya.r", "DC104"),
    ("Surandhar D", "surandhar.d", "DC105"),
    ("Eswari A", "eswari.a", "DC106"),
]

_QC_REVIEWERS = ["Gayathri S", "Pavithra R", "nil", "0", ""]

_OBJECTS_PER_FRAME = {"mean": 14, "std": 5}
_ERROR_RATE = 0.04
_ABSENCE_RATE = 0.1

SPREADSHEET_PRODUCTION = "sim-production-sheet"
SPREADSHEET_HOURLY = "sim-hourly-sheet"


def generate_production_sheet(
    sheet_day: str,
    n_frames: int = 40,
    rng: np.random.Generator | None = None,
) -> pd.DataFrame:
    """Generate one day's production sheet.

    Frame ids repeat across days on purpose: rework of a frame must not
    inflate distinct frame counts.
    """
    rng = rng or np.random.default_rng(_SEED)
    rows = []

    for _ in range(n_frames):
        name, username, _code = _ANNOTATORS[rng.integers(len(_ANNOTATORS))]
        objects = max(0, int(rng.normal(_OBJECTS_PER_FRAME["mean"], _OBJECTS_PER_FRAME["std"])))
        qc_name = _QC_REVIEWERS[rng.integers(len(_QC_REVIEWERS))]
        errors = int(rng.binomial(objects, _ERROR_RATE)) if objects else 0

        rows.append({
            "Date": sheet_day,
            "Annotator Name": name,
            "UserName": username,
            "Frame ID": f"FRM-{rng.integers(1, n_frames * 2):04d}",
            "Number of Object Annotated": objects,
            "Internal QC Name": qc_name,
            "Internal Polygon Error Count": errors,
        })

    return pd.DataFrame(rows)


def generate_login_sheet(
    sheet_day: str,
    rng: np.random.Generator | None = None,
) -> pd.DataFrame:
    """Generate one day's login sheet in the positional attendance layout.

    Columns: S.No, Name, Emp Code, Working Hours, Date, Login Time.
    """
    rng = rng or np.random.default_rng(_SEED)
    rows = []

    for i, (name, _, emp_code) in enumerate(_ANNOTATORS, start=1):
        absent = rng.random() < _ABSENCE_RATE
        hours = 0.0 if absent else round(float(rng.choice([3.5, 8.0, 8.5, 9.0])), 1)
        rows.append({
            "S.No": i,
            "Name": name,
            "Emp Code": emp_code,
            "Working Hours": hours,
            "Date": sheet_day,
            "Login Time": "NIL" if absent else f"09:{int(rng.integers(0, 30)):02d}",
        })

    return pd.DataFrame(rows)


def generate_workbooks(days: tuple[str, ...] = ("14th OCT", "15th OCT", "16th OCT")) -> dict:
    """Two simulated spreadsheets: production tabs and login tabs per day.

    Returns
    -------
    {spreadsheet_id: {tab_name: csv_text}}
    """
    rng = np.random.default_rng(_SEED)
    production = {}
    hourly = {}

    for day in days:
        production[f"{day} Production"] = generate_production_sheet(
            f"{day} 2025", rng=rng
        ).to_csv(index=False)
        hourly[f"{day} Login"] = generate_login_sheet(f"{day} 2025", rng=rng).to_csv(index=False)

    production["Team Notes"] = "Note\nNot part of any report\n"
    hourly["Holiday List"] = "Date,Holiday\n2025/10/20,Deepavali\n"

    return {SPREADSHEET_PRODUCTION: production, SPREADSHEET_HOURLY: hourly}


def render_metadata_html(tab_names) -> str:
    """Minimal edit-page markup embedding tabs in the current encoding."""
    entries = ",".join(json.dumps({"name": name}, separators=(",", ":")) for name in tab_names)
    return f"<html><script>var bootstrapData = {{\"sheets\":[{entries}]}};</script></html>"


class SimulatedSheetsClient:
    """In-memory stand-in for SheetsClient."""

    def __init__(self, workbooks: dict | None = None) -> None:
        self.workbooks = generate_workbooks() if workbooks is None else workbooks

    def fetch_document_metadata(self, spreadsheet_id: str) -> str:
        if spreadsheet_id not in self.workbooks:
            raise SheetFetchError(f"spreadsheet {spreadsheet_id} is not shared")
        return render_metadata_html(self.workbooks[spreadsheet_id])

    def fetch_sheet_csv(self, spreadsheet_id: str, sheet_name: str) -> str:
        try:
            return self.workbooks[spreadsheet_id][sheet_name]
        except KeyError as e:
            raise SheetFetchError(f"no sheet '{sheet_name}' in {spreadsheet_id}") from e
