"""Find folder message counts in a parsed Mork document.

Column ids are file-local, so columns are matched by their decoded
names, never by numeric id.
"""

from __future__ import annotations

from collections.abc import Iterable

import structlog

from .document import MorkDocument, Oid, Row
from .models import FolderSummary

logger = structlog.get_logger()

DEFAULT_TOTAL_COLUMNS: tuple[str, ...] = ("numMsgs", "totalMsgs")
DEFAULT_UNREAD_COLUMNS: tuple[str, ...] = ("numNewMsgs", "unreadMsgs")
SUMMARY_MARKER = "dbfolderinfo"


class SummaryExtractor:
    """Walk a document for the row holding total/unread counts."""

    def __init__(
        self,
        total_columns: Iterable[str] = DEFAULT_TOTAL_COLUMNS,
        unread_columns: Iterable[str] = DEFAULT_UNREAD_COLUMNS,
    ) -> None:
        self._total_names = frozenset(total_columns)
        self._unread_names = frozenset(unread_columns)

    def extract(self, doc: MorkDocument) -> FolderSummary:
        best: tuple[tuple[bool, bool], Row] | None = None
        marked = self._marked_rows(doc)

        for row in doc.rows.values():
            unread_col = self._find_column(doc, row, self._unread_names)
            if unread_col is None:
                continue
            has_total = self._find_column(doc, row, self._total_names) is not None
            rank = (row.oid in marked, has_total)
            # >= so the latest row wins among equals
            if best is None or rank >= best[0]:
                best = (rank, row)

        if best is None:
            logger.debug("summary_row_not_found", rows=len(doc.rows))
            return FolderSummary.unavailable()

        row = best[1]
        unread = self._read_count(doc, row, self._unread_names)
        total: int | None = 0
        if self._find_column(doc, row, self._total_names) is not None:
            total = self._read_count(doc, row, self._total_names)
        if unread is None or total is None:
            logger.debug("summary_value_invalid", row=row.oid.id)
            return FolderSummary.unavailable()

        return FolderSummary(total_messages=total, unread_messages=unread, available=True)

    # ------------------------------------------------------------------

    def _find_column(self, doc: MorkDocument, row: Row, names: frozenset[str]) -> str | None:
        for column in row.cells:
            if doc.column_name(column) in names:
                return column
        return None

    def _read_count(self, doc: MorkDocument, row: Row, names: frozenset[str]) -> int | None:
        column = self._find_column(doc, row, names)
        if column is None:
            return None
        text = doc.resolve(row.cells[column])
        return parse_count(text)

    def _marked_rows(self, doc: MorkDocument) -> set[Oid]:
        """Row oids living under a folder-info scope or table kind."""
        marked: set[Oid] = set()
        for oid in doc.rows:
            name = doc.scope_name(oid.scope)
            if name and SUMMARY_MARKER in name:
                marked.add(oid)
        for table in doc.tables.values():
            names = [doc.scope_name(table.oid.scope)]
            kind = table.meta.get("k")
            if kind is not None:
                names.append(doc.resolve(kind))
            if any(n and SUMMARY_MARKER in n for n in names):
                marked.update(table.row_ids)
        return marked


def parse_count(text: str | None) -> int | None:
    """Decode a stored count (hexadecimal text); ``None`` if not a count."""
    if text is None:
        return None
    text = text.strip()
    if not text or not all(c in "0123456789abcdefABCDEF" for c in text):
        return None
    return int(text, 16)
