"""
Sheet discovery: which tabs of a project's spreadsheet to offer for loading.

The custom sheet list on the project is always honoured. Tab names are also
scraped from the spreadsheet's edit page and kept when they match the
project category's keywords.

Assumptions
-----------
- Current edit pages embed tabs as ``"name":"<tab>"``.
- Older page builds embed them as ``[<int>,<int>,"<tab>",<int>]``; this
  pattern is only tried when the first yields no matching tab.
"""

import asyncio
import logging
import re
from collections.abc import Iterable, Sequence

from ..config import CATEGORY_KEYWORDS, RESERVED_PREFIX
from ..models import Category, Project, SheetRef

logger = logging.getLogger(__name__)

_TAB_NAME_PATTERNS = (
    re.compile(r'"name":"([^"]+)"'),
    re.compile(r'\[\d+,\d+,"([^"]+)",\d+\]'),
)


def custom_sheet_names(project: Project) -> list[str]:
    if not project.custom_sheets:
        return []
    return [s.strip() for s in project.custom_sheets.split(",") if s.strip()]


def filter_by_category(names: Iterable[str], category: Category) -> list[str]:
    """Keep tab names containing one of the category's keywords."""
    keywords = CATEGORY_KEYWORDS.get(Category(category).value, ())
    kept = []
    for name in names:
        lower_name = name.lower()
        if any(keyword in lower_name for keyword in keywords):
            kept.append(name)
    return kept


def extract_tab_names(html: str, category: Category | None = None) -> list[str]:
    """Scrape tab names from edit-page HTML, de-duplicated in page order.

    With a category, the keyword filter is applied before deciding whether
    the fallback pattern is needed.
    """
    for pattern in _TAB_NAME_PATTERNS:
        names = list(dict.fromkeys(
            name for name in pattern.findall(html)
            if name and not name.startswith(RESERVED_PREFIX)
        ))
        if category is not None:
            names = filter_by_category(names, category)
        if names:
            return names
    return []


def discover_tab_names(client, spreadsheet_id: str, category: Category) -> list[str]:
    """Category-matching tab names, or [] if the document can't be read."""
    try:
        html = client.fetch_document_metadata(spreadsheet_id)
        names = extract_tab_names(html, category)
    except Exception:
        logger.exception(
            "Discovery failed for %s project %s", Category(category).value, spreadsheet_id
        )
        return []
    logger.info("Discovered %d %s sheets in %s", len(names), Category(category).value, spreadsheet_id)
    return names


def sheet_names_for_project(client, project: Project) -> list[str]:
    """Custom sheets first, then discovered ones not already listed."""
    names = dict.fromkeys(custom_sheet_names(project))
    names.update(dict.fromkeys(
        discover_tab_names(client, project.spreadsheet_id, project.category)
    ))
    return list(names)


async def discover_sheet_refs(client, projects: Sequence[Project]) -> list[SheetRef]:
    """Resolve the sheets of every project concurrently."""

    async def _one(project: Project) -> list[SheetRef]:
        names = await asyncio.to_thread(sheet_names_for_project, client, project)
        return [SheetRef(project.id, name) for name in names]

    results = await asyncio.gather(*(_one(p) for p in projects))
    refs = [ref for project_refs in results for ref in project_refs]
    logger.info("Resolved %d sheets across %d projects", len(refs), len(projects))
    return refs
