from __future__ import annotations

import pytest
import requests

from annotation_dashboard.loaders.sheets import (
    SheetFetchError,
    SheetsClient,
    extract_spreadsheet_id,
    load_sheet_rows,
)


class _Response:
    def __init__(self, text="", status=200):
        self.text = text
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class _Session:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls: list[str] = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.mark.parametrize(
    "text, expected",
    [
        ("https://docs.google.com/spreadsheets/d/1AbC-d_9/edit#gid=0", "1AbC-d_9"),
        ("https://docs.google.com/spreadsheets/d/XYZ", "XYZ"),
        ("  1AbC-d_9  ", "1AbC-d_9"),
    ],
)
def test_extract_spreadsheet_id(text, expected):
    assert extract_spreadsheet_id(text) == expected


def test_sheet_name_is_url_quoted():
    session = _Session(_Response("a\n1\n"))
    client = SheetsClient(session=session)
    assert client.fetch_sheet_csv("abc", "15th OCT Login") == "a\n1\n"
    assert session.urls == [
        "https://docs.google.com/spreadsheets/d/abc/gviz/tq?tqx=out:csv&sheet=15th%20OCT%20Login"
    ]


def test_metadata_reads_edit_page():
    session = _Session(_Response("<html></html>"))
    SheetsClient(session=session).fetch_document_metadata("abc")
    assert session.urls == ["https://docs.google.com/spreadsheets/d/abc/edit"]


def test_http_error_becomes_fetch_error():
    client = SheetsClient(session=_Session(_Response(status=403)))
    with pytest.raises(SheetFetchError):
        client.fetch_sheet_csv("abc", "Production")


def test_connection_error_becomes_fetch_error():
    client = SheetsClient(session=_Session(error=requests.ConnectionError("down")))
    with pytest.raises(SheetFetchError):
        client.fetch_document_metadata("abc")


def test_load_sheet_rows_swallows_fetch_failures(caplog):
    client = SheetsClient(session=_Session(error=requests.Timeout("slow")))
    assert load_sheet_rows(client, "abc", "Production") == []
    assert "Failed to fetch sheet 'Production'" in caplog.text


def test_load_sheet_rows_parses_csv():
    client = SheetsClient(session=_Session(_Response('Frame ID,Objects\nF1,"1,200"\n')))
    assert load_sheet_rows(client, "abc", "Production") == [{"Frame ID": "F1", "Objects": "1,200"}]
