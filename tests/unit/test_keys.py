from __future__ import annotations

import pytest

from annotation_dashboard.keys import KeyMap, find_first_key, find_key, normalise_key, ordered_headers


@pytest.mark.parametrize("header", ["User Name", "user_name", "USERNAME", " user-name "])
def test_username_spellings_resolve(header):
    assert find_key([header], "UserName") == header


def test_normalise_key_strips_separators():
    assert normalise_key("Number of_Object - Annotated") == "numberofobjectannotated"
    assert normalise_key(None) == ""


def test_exact_match_wins_over_alias():
    headers = ["Name", "Annotator Name"]
    # "name" is an alias of annotatorname, but the exact match is preferred
    assert find_key(headers, "Annotator Name") == "Annotator Name"


def test_alias_match_uses_header_order():
    headers = ["Worker", "Annotator"]
    assert find_key(headers, "Annotator Name") == "Worker"
    assert find_key(list(reversed(headers)), "Annotator Name") == "Annotator"


def test_duplicate_exact_matches_take_first():
    headers = ["Frame ID", "frame_id"]
    assert find_key(headers, "Frame ID") == "Frame ID"


def test_alias_table_lookups():
    assert find_key(["QC By"], "Internal QC Name") == "QC By"
    assert find_key(["Errors"], "Internal Polygon Error Count") == "Errors"
    assert find_key(["Objects"], "Number of Object Annotated") == "Objects"
    assert find_key(["Clock In"], "Login Time") == "Clock In"
    assert find_key(["Emp ID"], "Employee Code") == "Emp ID"


def test_target_without_alias_matches_itself_only():
    assert find_key(["Video ID"], "video id") == "Video ID"
    assert find_key(["Frame"], "Video ID") is None


def test_no_headers():
    assert find_key([], "UserName") is None


def test_find_first_key():
    assert find_first_key(["Emp Code"], "Staff Number", "Emp Code") == "Emp Code"
    assert find_first_key(["x"], "y", "z") is None


def test_ordered_headers_first_seen(make_row):
    rows = [make_row({"a": "1", "b": "2"}), make_row({"c": "3", "a": "4"})]
    assert ordered_headers(rows) == ["a", "b", "c"]


def test_key_map_resolves_production_columns():
    keys = KeyMap.for_headers([
        "Date", "Annotator", "User ID", "Image ID", "Object Count", "QA Name", "Error Count",
    ])
    assert keys.annotator == "Annotator"
    assert keys.username == "User ID"
    assert keys.frame == "Image ID"
    assert keys.objects == "Object Count"
    assert keys.qc_name == "QA Name"
    assert keys.errors == "Error Count"
    assert keys.employee_code is None
