from __future__ import annotations

import pandas as pd
import pytest

from annotation_dashboard.kpis import (
    format_quality_rate,
    quality_rate,
    rank_quality_performers,
    summarise_metrics,
)
from annotation_dashboard.models import Category


def test_quality_rate_zero_when_nothing_checked():
    assert quality_rate(0, 0) == 0.0
    assert format_quality_rate(quality_rate(0, 0), 0) == "0%"


def test_quality_rate_value():
    assert quality_rate(200, 5) == pytest.approx(97.5)
    assert format_quality_rate(97.5, 200) == "97.50%"


def test_summarise_metrics(make_row):
    rows = [
        make_row({"Frame ID": "F1", "Objects": "10", "QC Name": "Gayathri", "Errors": "1", "User": "a"}),
        make_row({"Frame ID": "F1", "Objects": "6", "QC Name": "nil", "Errors": "4", "User": "a"}),
        make_row({"Frame ID": "F2", "Objects": "4", "QC Name": "Pavithra", "Errors": "0", "User": "b"}),
        make_row({"S.No": "1", "Name": "Ramu"}, category=Category.HOURLY, sheet="Login"),
    ]
    m = summarise_metrics(rows)
    assert m["total_frames"] == 2
    assert m["total_objects"] == 20
    assert m["qc_objects"] == 14
    assert m["total_errors"] == 1
    assert m["quality_rate_pct"] == pytest.approx(13 / 14 * 100)


def test_summarise_metrics_empty():
    m = summarise_metrics([])
    assert m == {
        "total_frames": 0,
        "total_objects": 0.0,
        "qc_objects": 0.0,
        "total_errors": 0.0,
        "quality_rate_pct": 0.0,
    }


def test_rank_prefers_volume_over_perfect_small_batches():
    qc = pd.DataFrame({
        "NAME": ["tiny", "bulk", "mid", "sloppy"],
        "OBJECTCOUNT": [5.0, 1000.0, 300.0, 400.0],
        "ERRORCOUNT": [0.0, 30.0, 3.0, 200.0],
    })
    ranked = rank_quality_performers(qc)
    assert ranked["name"].tolist() == ["bulk", "mid", "sloppy"]
    assert ranked.loc[0, "quality"] == pytest.approx(97.0)
    assert ranked.loc[0, "score"] == pytest.approx(970.0)


def test_rank_skips_zero_object_rows():
    qc = pd.DataFrame({"NAME": ["x", "y"], "OBJECTCOUNT": [0.0, 10.0], "ERRORCOUNT": [0.0, 1.0]})
    assert rank_quality_performers(qc, top_n=5)["name"].tolist() == ["y"]


def test_rank_empty_table():
    ranked = rank_quality_performers(pd.DataFrame(columns=["NAME", "OBJECTCOUNT", "ERRORCOUNT"]))
    assert ranked.empty
    assert list(ranked.columns) == ["name", "objects", "errors", "quality", "score"]
