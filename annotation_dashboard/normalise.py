"""
Cell-level normalisation applied while rows are ingested: dates, identities,
numbers and working hours.

Nothing in here raises on bad input; unparseable values fall back to the
original text, zero or an empty string.
"""

import logging
import re
from typing import Any

import pandas as pd

from .config import DATE_SENTINELS, IDENTITY_SENTINELS, ORG_EMAIL_DOMAIN

logger = logging.getLogger(__name__)

_HOURS_CLOCK = re.compile(r"^(\d+):(\d{1,2})(?::(\d{1,2}))?$")
_LEADING_NUMBER = re.compile(r"\s*([-+]?(?:\d+\.?\d*|\.\d+))")
# Words the date parser would resolve against the current clock
_RELATIVE_DATE_WORDS = re.compile(r"\b(?:now|today|yesterday|tomorrow)\b", re.IGNORECASE)


def is_date_column(header: str) -> bool:
    return "date" in str(header).lower()


def normalise_date(val: Any) -> str:
    """Canonicalise a date-like cell to ``YYYY/MM/DD``.

    Sentinels (empty, NIL, "-", undefined) become "". Values that do not
    parse as a calendar date are returned unchanged, as are values without
    digits ("Oct") and relative words ("today"), so the result never depends
    on when it runs.
    """
    if val is None:
        return ""
    s = str(val).strip()
    if s.lower() in DATE_SENTINELS:
        return ""
    if not any(c.isdigit() for c in s) or _RELATIVE_DATE_WORDS.search(s):
        return s
    try:
        ts = pd.Timestamp(s)
    except (ValueError, TypeError, OverflowError):
        logger.debug("Could not parse date value: %s", s)
        return s
    if pd.isna(ts):
        return s
    return f"{ts.year:04d}/{ts.month:02d}/{ts.day:02d}"


def normalise_identity(val: Any, domain: str = ORG_EMAIL_DOMAIN) -> str:
    """Turn a bare username or full e-mail into a stable join key.

    >>> normalise_identity(" alice ")
    'alice@rprocess.in'
    >>> normalise_identity("bob@example.com")
    'bob@example.com'
    """
    if val is None:
        return ""
    s = str(val).strip()
    if s.lower() in IDENTITY_SENTINELS:
        return ""
    if "@" in s:
        return s
    return f"{s}@{domain}"


def identity_local_part(identity: str) -> str:
    return identity.split("@")[0]


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None:
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", "")
        if not val:
            return None
        # Handle percentage strings like "78%"
        if val.endswith("%"):
            val = val[:-1]
    try:
        result = float(val)
    except (ValueError, TypeError):
        return None
    if pd.isna(result):
        return None
    return result


def to_number(val: Any) -> float:
    """Numeric cell value; a leading number is read from text like "5 objs".

    Anything without a leading number counts as 0.
    """
    result = safe_float(val)
    if result is not None:
        return result
    match = _LEADING_NUMBER.match("" if val is None else str(val).replace(",", ""))
    return float(match.group(1)) if match else 0.0


def parse_hours(val: Any) -> float:
    """Working hours from "8", "7.5", "8 hrs" or clock-style "7:30" cells."""
    if val is None:
        return 0.0
    s = str(val).strip()
    match = _HOURS_CLOCK.match(s)
    if match:
        hours, minutes, seconds = match.groups()
        return int(hours) + int(minutes) / 60 + int(seconds or 0) / 3600
    return to_number(s)


def is_qc_name(val: Any) -> bool:
    """A QC reviewer is recorded: not blank, not "nil", not "0"."""
    s = "" if val is None else str(val).strip()
    return bool(s) and s.lower() != "nil" and s != "0"
