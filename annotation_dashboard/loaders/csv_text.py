"""
Parser for the CSV text served by the spreadsheet export endpoint.

The export is comma separated with double-quote enclosure and doubled quotes
as the escape. Quoted fields may contain commas and newlines. Every cell is
read as text; numbers are coerced later, at aggregation time.
"""

import io
import logging

import pandas as pd

logger = logging.getLogger(__name__)

# index_col=False keeps the first column as data and drops surplus trailing values
_READ_OPTIONS = dict(
    dtype=str,
    keep_default_na=False,
    skip_blank_lines=True,
    index_col=False,
    engine="python",
)


def parse_csv(text: str | None) -> list[dict[str, str]]:
    """Parse CSV text into row dicts keyed by the first record's headers.

    Headers and values are trimmed. Rows shorter than the header are padded
    with "", surplus values are dropped, blank records skipped. Empty or
    unreadable input gives an empty list.
    """
    if not text or not text.strip():
        return []

    try:
        df = pd.read_csv(io.StringIO(text), **_READ_OPTIONS)
    except pd.errors.EmptyDataError:
        return []
    except pd.errors.ParserError:
        logger.exception("Could not parse CSV export")
        return []

    df.columns = [str(c).strip() for c in df.columns]
    df = df.fillna("").map(lambda v: str(v).strip())

    logger.debug("Parsed %d rows with %d columns", len(df), len(df.columns))
    return df.to_dict("records")
