"""Blackout calendar sources: Supabase first, falling back to CSV/Excel files."""

from __future__ import annotations

import csv
import logging
import math
from datetime import date
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from openpyxl import load_workbook

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import coerce_date

logger = logging.getLogger(__name__)

CALENDAR_COLUMN = "calendar"


class CalendarSchemaError(ValueError):
    """Raised when calendar rows do not carry the configured date column."""


class PagedResult(Protocol):
    page_count: int

    def fetch(self, index: int) -> list[Mapping[str, Any]]: ...


class CalendarSource(Protocol):
    def run_paged(self, calendar_id: str, page_size: int) -> Optional[PagedResult]:
        """Return a paged view of the calendar's rows, or None when it cannot be loaded."""
        ...


class ListPages:
    """Paged view over rows already held in memory."""

    def __init__(self, rows: Sequence[Mapping[str, Any]], page_size: int) -> None:
        self._rows = list(rows)
        self._page_size = page_size
        self.page_count = math.ceil(len(self._rows) / page_size)

    def fetch(self, index: int) -> list[Mapping[str, Any]]:
        if index < 0 or index >= self.page_count:
            raise IndexError(f"Page {index} out of range (0..{self.page_count - 1})")
        start = index * self._page_size
        return self._rows[start : start + self._page_size]


class _SupabasePages:
    def __init__(self, source: "SupabaseCalendarSource", client: Any, calendar_id: str, page_size: int) -> None:
        self._source = source
        self._client = client
        self._calendar_id = calendar_id
        self._page_size = page_size
        response = self._query(0, count=True)
        self._first_page = list(response.data or [])
        total = response.count if response.count is not None else len(self._first_page)
        self.page_count = math.ceil(total / page_size)

    def _query(self, index: int, count: bool = False) -> Any:
        start = index * self._page_size
        select = self._client.table(self._source.table).select(
            self._source.date_column, count="exact" if count else None
        )
        return (
            select.eq(CALENDAR_COLUMN, self._calendar_id)
            .order(self._source.date_column)
            .range(start, start + self._page_size - 1)
            .execute()
        )

    def fetch(self, index: int) -> list[Mapping[str, Any]]:
        if index == 0:
            return self._first_page
        return list(self._query(index).data or [])


class SupabaseCalendarSource:
    """Reads calendar rows from the ``blackout_dates`` table, one calendar per ``calendar`` value."""

    def __init__(self, client: Any = None, table: str | None = None, date_column: str | None = None) -> None:
        self._client = client
        self.table = table or settings.calendar_table
        self.date_column = date_column or settings.calendar_date_column

    def run_paged(self, calendar_id: str, page_size: int) -> Optional[PagedResult]:
        client = self._client or get_supabase_client()
        if not client:
            return None
        return _SupabasePages(self, client, calendar_id, page_size)


def _read_csv_rows(path: Path) -> list[dict[str, Any]]:
    with path.open(mode="r", encoding="utf-8-sig", newline="") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            raise CalendarSchemaError(f"Calendar file '{path}' is missing a header row.")
        return [dict(row) for row in reader]


def _read_workbook_rows(path: Path) -> list[dict[str, Any]]:
    wb = load_workbook(path, data_only=True, read_only=True)
    try:
        sheet = wb.active
        rows = sheet.iter_rows(min_row=1, values_only=True)
        header = next(rows, None)
        if header is None:
            raise CalendarSchemaError(f"Calendar workbook '{path}' is empty.")
        names = [str(name).strip() if name is not None else "" for name in header]
        return [dict(zip(names, row)) for row in rows if any(cell is not None for cell in row)]
    finally:
        wb.close()


class FileCalendarSource:
    """Reads ``<root>/<calendar_id>.csv`` or ``<root>/<calendar_id>.xlsx``."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.calendar_dir).resolve()

    def _locate(self, calendar_id: str) -> Optional[Path]:
        for suffix in (".csv", ".xlsx"):
            candidate = self.root / f"{calendar_id}{suffix}"
            if candidate.exists():
                return candidate
        return None

    def run_paged(self, calendar_id: str, page_size: int) -> Optional[PagedResult]:
        path = self._locate(calendar_id)
        if path is None:
            return None
        rows = _read_workbook_rows(path) if path.suffix == ".xlsx" else _read_csv_rows(path)
        return ListPages(rows, page_size)


def read_date_column(
    rows: Iterable[Mapping[str, Any]],
    column: str,
    formats: Sequence[str] | None = None,
    invalid: list[Any] | None = None,
) -> set[date]:
    """Collect the non-empty values of ``column`` as dates.

    When ``invalid`` is given, unparseable values are appended to it and
    skipped; otherwise they raise ``ValueError``.

    Raises:
        CalendarSchemaError: a row does not have the column at all.
    """
    formats = tuple(formats or settings.calendar_date_formats)
    dates: set[date] = set()
    for row in rows:
        if column not in row:
            found = ", ".join(sorted(str(key) for key in row)) or "none"
            raise CalendarSchemaError(f"Calendar row has no '{column}' column (columns: {found})")
        try:
            value = coerce_date(row[column], formats)
        except ValueError:
            if invalid is None:
                raise
            invalid.append(row[column])
            continue
        if value is not None:
            dates.add(value)
    return dates


def get_calendar_source() -> CalendarSource:
    """Use Supabase when configured, otherwise the file-based calendars."""
    if get_supabase_client():
        return SupabaseCalendarSource()
    logger.info(f"Supabase not configured - reading blackout calendars from {settings.calendar_dir}")
    return FileCalendarSource()
