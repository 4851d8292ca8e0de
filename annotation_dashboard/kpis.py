"""
KPI computation functions: pure, with no side effects.

Provides the headline production metrics, the quality rate and the
volume-weighted quality ranking shown on the overview page.
"""

import logging
from collections.abc import Iterable

import pandas as pd

from .models import SheetRow
from .transforms import QC_COLUMNS, production_records

logger = logging.getLogger(__name__)


def quality_rate(qc_objects: float, errors: float) -> float:
    """Return the percentage of QC-checked objects without errors.

    Defined as 0.0 when nothing was QC-checked.
    """
    if qc_objects == 0:
        return 0.0
    return (qc_objects - errors) / qc_objects * 100


def format_quality_rate(rate: float, qc_objects: float) -> str:
    if qc_objects <= 0:
        return "0%"
    return f"{rate:.2f}%"


def summarise_metrics(rows: Iterable[SheetRow]) -> dict:
    """Return a dict suitable for the top-level dashboard cards.

    Returns
    -------
    Dict with structure:
    {
        "total_frames": distinct frame ids across production rows,
        "total_objects": summed object counts,
        "qc_objects": summed object counts of QC-checked rows,
        "total_errors": summed error counts of QC-checked rows,
        "quality_rate_pct": (qc_objects - total_errors) / qc_objects * 100,
    }
    """
    frames: set[str] = set()
    total_objects = 0.0
    qc_objects = 0.0
    total_errors = 0.0

    for record in production_records(rows):
        if record.frame_id:
            frames.add(record.frame_id)
        total_objects += record.objects
        if record.qc_eligible:
            qc_objects += record.objects
            total_errors += record.errors

    return {
        "total_frames": len(frames),
        "total_objects": total_objects,
        "qc_objects": qc_objects,
        "total_errors": total_errors,
        "quality_rate_pct": quality_rate(qc_objects, total_errors),
    }


def rank_quality_performers(qc_summary: pd.DataFrame, top_n: int = 3) -> pd.DataFrame:
    """Top contributors by volume-weighted quality.

    Logic
    -----
    - quality = (objects - errors) / max(objects, 1) * 100, rounded to 2 dp
    - score   = objects * quality / 100

    Someone with a handful of perfect objects does not outrank a
    high-volume contributor with a slightly lower rate.

    Parameters
    ----------
    qc_summary : QC table from build_qc_by_annotator() / build_qc_by_username().

    Returns
    -------
    DataFrame with columns: name, objects, errors, quality, score
    """
    columns = ["name", "objects", "errors", "quality", "score"]
    if qc_summary.empty or not set(QC_COLUMNS).issubset(qc_summary.columns):
        return pd.DataFrame(columns=columns)

    df = qc_summary[qc_summary["OBJECTCOUNT"] > 0]
    if df.empty:
        return pd.DataFrame(columns=columns)

    objects = df["OBJECTCOUNT"].astype(float)
    errors = df["ERRORCOUNT"].astype(float)
    quality = ((objects - errors) / objects.clip(lower=1) * 100).round(2)

    ranked = pd.DataFrame({
        "name": df["NAME"],
        "objects": objects,
        "errors": errors,
        "quality": quality,
        "score": objects * quality / 100,
    })
    ranked = ranked.sort_values("score", ascending=False, kind="stable").head(top_n)
    logger.info("Ranked %d of %d QC contributors", len(ranked), len(df))
    return ranked.reset_index(drop=True)
