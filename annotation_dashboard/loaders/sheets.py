"""
HTTP access to publicly shared Google Spreadsheets.

Two documents are read per spreadsheet:
    - the edit page HTML, which embeds the tab names (used for discovery);
    - each tab's CSV export from the gviz endpoint.

The spreadsheet must be shared as "Anyone with the link can view".
"""

import logging
import re
from urllib.parse import quote

import requests

from ..config import REQUEST_TIMEOUT, SHEET_CSV_URL, SPREADSHEET_EDIT_URL
from .csv_text import parse_csv

logger = logging.getLogger(__name__)

_ID_IN_URL = re.compile(r"/d/([a-zA-Z0-9\-_]+)")


class SheetFetchError(RuntimeError):
    """A spreadsheet document could not be retrieved."""


def extract_spreadsheet_id(text: str) -> str:
    """Return the ``<ID>`` of a ``.../d/<ID>/...`` URL, else the trimmed input."""
    match = _ID_IN_URL.search(text)
    if match:
        return match.group(1)
    return text.strip()


class SheetsClient:
    """Blocking spreadsheet reader; one requests.Session per client."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def _get_text(self, url: str) -> str:
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SheetFetchError(f"GET {url} failed: {e}") from e
        return response.text

    def fetch_document_metadata(self, spreadsheet_id: str) -> str:
        """Edit-page HTML of the spreadsheet."""
        url = SPREADSHEET_EDIT_URL.format(spreadsheet_id=spreadsheet_id)
        return self._get_text(url)

    def fetch_sheet_csv(self, spreadsheet_id: str, sheet_name: str) -> str:
        """CSV export of a single tab."""
        url = SHEET_CSV_URL.format(
            spreadsheet_id=spreadsheet_id,
            sheet_name=quote(sheet_name, safe=""),
        )
        return self._get_text(url)


def load_sheet_rows(client, spreadsheet_id: str, sheet_name: str) -> list[dict[str, str]]:
    """Fetch and parse one tab. Failures are logged and give no rows."""
    try:
        text = client.fetch_sheet_csv(spreadsheet_id, sheet_name)
    except Exception:
        logger.exception("Failed to fetch sheet '%s' of %s", sheet_name, spreadsheet_id)
        return []
    rows = parse_csv(text)
    logger.info("Loaded %d rows from sheet '%s'", len(rows), sheet_name)
    return rows
