"""Data ingestion loaders for publicly shared Google Spreadsheets."""

from .csv_text import parse_csv
from .discovery import discover_sheet_refs, discover_tab_names, sheet_names_for_project
from .sheets import SheetFetchError, SheetsClient, extract_spreadsheet_id, load_sheet_rows

__all__ = [
    "parse_csv",
    "discover_sheet_refs",
    "discover_tab_names",
    "sheet_names_for_project",
    "SheetFetchError",
    "SheetsClient",
    "extract_spreadsheet_id",
    "load_sheet_rows",
]
