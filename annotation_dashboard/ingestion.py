"""
Ingestion: fetch every selected sheet, normalise cells, merge into one row set.

A merge fans out one fetch per selected sheet and only publishes once every
fetch has settled. Each call to merge() takes a new generation number; when
it finishes it publishes only if no newer merge has been started, so a slow
merge for an old selection can never replace a newer result.
"""

import asyncio
import logging
from collections.abc import Iterable, Sequence

from .config import RESERVED_PREFIX
from .loaders.sheets import load_sheet_rows
from .models import Project, Provenance, SheetRef, SheetRow, UnifiedRowSet
from .normalise import is_date_column, normalise_date

logger = logging.getLogger(__name__)


def prepare_rows(
    records: Sequence[dict[str, str]],
    project: Project,
    sheet_name: str,
) -> list[SheetRow]:
    """Normalise date columns and stamp provenance on parsed records."""
    if not records:
        return []

    headers = list(records[0])
    reserved = [h for h in headers if h.startswith(RESERVED_PREFIX)]
    if reserved:
        logger.warning(
            "Sheet '%s' of %s uses reserved column names %s; ignoring them",
            sheet_name, project.name, reserved,
        )
    headers = [h for h in headers if not h.startswith(RESERVED_PREFIX)]
    date_headers = {h for h in headers if is_date_column(h)}

    provenance = Provenance(
        project_name=project.name,
        category=project.category,
        sheet_name=sheet_name,
    )

    rows = []
    for record in records:
        values = {}
        for header in headers:
            value = record.get(header, "")
            if header in date_headers:
                value = normalise_date(value)
            values[header] = value
        rows.append(SheetRow(values=values, provenance=provenance))
    return rows


class IngestionMerger:
    """Owns the published row set for the current sheet selection."""

    def __init__(self, client, projects: Iterable[Project] = ()) -> None:
        self.client = client
        self._projects = {p.id: p for p in projects}
        self._generation = 0
        self._published = UnifiedRowSet()

    @property
    def published(self) -> UnifiedRowSet:
        return self._published

    @property
    def generation(self) -> int:
        return self._generation

    def update_projects(self, projects: Iterable[Project]) -> None:
        """Swap the project list and withdraw everything loaded under the old one.

        The published set is cleared and any merge still in flight is
        superseded, so edited spreadsheet ids are always re-fetched.
        """
        self._projects = {p.id: p for p in projects}
        self._generation += 1
        self._published = UnifiedRowSet(generation=self._generation)
        logger.info("Project list changed; cleared published rows")

    async def _load(self, ref: SheetRef) -> list[SheetRow]:
        project = self._projects.get(ref.project_id)
        if project is None:
            logger.warning("Selected sheet %s belongs to an unknown project", ref.id)
            return []
        try:
            records = await asyncio.to_thread(
                load_sheet_rows, self.client, project.spreadsheet_id, ref.sheet_name
            )
            return prepare_rows(records, project, ref.sheet_name)
        except Exception:
            logger.exception("Failed to ingest sheet %s", ref.id)
            return []

    async def merge(self, selection: Iterable[SheetRef | str]) -> UnifiedRowSet | None:
        """Load the selected sheets and publish the merged rows.

        Returns the published row set, or None when a newer merge was
        started while this one was in flight.
        """
        self._generation += 1
        generation = self._generation

        refs = [ref if isinstance(ref, SheetRef) else SheetRef.parse(ref) for ref in selection]
        results = await asyncio.gather(*(self._load(ref) for ref in refs))

        if generation != self._generation:
            logger.info(
                "Discarding merge %d of %d sheets; merge %d is newer",
                generation, len(refs), self._generation,
            )
            return None

        rows = tuple(row for sheet_rows in results for row in sheet_rows)
        self._published = UnifiedRowSet(
            rows=rows,
            generation=generation,
            sheet_ids=tuple(ref.id for ref in refs),
        )
        logger.info("Merged %d rows from %d sheets", len(rows), len(refs))
        return self._published

    def merge_now(self, selection: Iterable[SheetRef | str]) -> UnifiedRowSet | None:
        """Blocking wrapper around merge() for scripts and the Streamlit app."""
        return asyncio.run(self.merge(selection))
