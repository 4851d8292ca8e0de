"""
Fuzzy column resolution.

Sheets from different projects spell the same column differently
("Annotator Name", "annotator_name", "Worker"). Every lookup of a semantic
column goes through find_key() against the headers actually present.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from functools import lru_cache

from .config import (
    ANNOTATOR_COLUMN,
    EMPLOYEE_CODE_COLUMN,
    ERRORS_COLUMN,
    FRAME_COLUMN,
    KEY_ALIASES,
    OBJECTS_COLUMN,
    QC_NAME_COLUMN,
    USERNAME_COLUMN,
)

_SEPARATORS = re.compile(r"[\s\-_]+")


def normalise_key(name) -> str:
    """Lower-case a header and drop whitespace, hyphen and underscore runs."""
    if name is None:
        return ""
    return _SEPARATORS.sub("", str(name).lower()).strip()


def find_key(
    headers: Sequence[str],
    target: str,
    aliases: dict[str, list[str]] | None = None,
) -> str | None:
    """Return the header to treat as ``target``, or None if nothing matches.

    An exact normalised match wins. Otherwise the first header (in header
    order) whose normalised form is listed as an alias of the target is
    returned. Targets without an alias entry only match themselves.
    """
    if not headers:
        return None
    alias_table = KEY_ALIASES if aliases is None else aliases
    normalised_target = normalise_key(target)

    for header in headers:
        if normalise_key(header) == normalised_target:
            return header

    candidates = alias_table.get(normalised_target, [normalised_target])
    for header in headers:
        if normalise_key(header) in candidates:
            return header
    return None


def find_first_key(headers: Sequence[str], *targets: str) -> str | None:
    """Try each target in turn; return the first one that resolves."""
    for target in targets:
        key = find_key(headers, target)
        if key is not None:
            return key
    return None


def ordered_headers(rows: Iterable) -> list[str]:
    """Union of row headers in first-seen order."""
    seen: dict[str, None] = {}
    for row in rows:
        values = getattr(row, "values", row)
        for header in values:
            seen.setdefault(header, None)
    return list(seen)


@dataclass(frozen=True)
class KeyMap:
    """Semantic production columns resolved against one header layout."""

    annotator: str | None
    username: str | None
    frame: str | None
    objects: str | None
    qc_name: str | None
    errors: str | None
    employee_code: str | None

    @classmethod
    def for_headers(cls, headers: Sequence[str]) -> "KeyMap":
        return _key_map(tuple(headers))


@lru_cache(maxsize=256)
def _key_map(headers: tuple[str, ...]) -> KeyMap:
    return KeyMap(
        annotator=find_key(headers, ANNOTATOR_COLUMN),
        username=find_key(headers, USERNAME_COLUMN),
        frame=find_key(headers, FRAME_COLUMN),
        objects=find_key(headers, OBJECTS_COLUMN),
        qc_name=find_key(headers, QC_NAME_COLUMN),
        errors=find_key(headers, ERRORS_COLUMN),
        employee_code=find_first_key(headers, EMPLOYEE_CODE_COLUMN, "Emp Code", "Emp ID"),
    )
