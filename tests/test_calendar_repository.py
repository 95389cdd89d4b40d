from datetime import date, datetime
from pathlib import Path
from types import SimpleNamespace

import pytest
from openpyxl import Workbook

from src.shipguard.data.calendar_repository import (
    CalendarSchemaError,
    FileCalendarSource,
    ListPages,
    SupabaseCalendarSource,
    read_date_column,
)


def test_csv_calendar_is_read_with_paging(tmp_path: Path):
    (tmp_path / "standard.csv").write_text(
        "delivery_date,reason\n2026-12-24,Christmas Eve\n,blank\n12/31/2026,New Year's Eve\n",
        encoding="utf-8",
    )
    paged = FileCalendarSource(root=tmp_path).run_paged("standard", page_size=2)

    assert paged.page_count == 2
    rows = paged.fetch(0) + paged.fetch(1)
    assert read_date_column(rows, "delivery_date") == {date(2026, 12, 24), date(2026, 12, 31)}


def test_workbook_calendar_is_read(tmp_path: Path):
    wb = Workbook()
    ws = wb.active
    ws.append(["delivery_date", "reason"])
    ws.append([datetime(2026, 7, 3), "Holiday"])
    ws.append([None, None])
    ws.append(["2026-11-26", "Thanksgiving"])
    wb.save(tmp_path / "special_item.xlsx")

    paged = FileCalendarSource(root=tmp_path).run_paged("special_item", page_size=1000)

    assert paged.page_count == 1
    assert read_date_column(paged.fetch(0), "delivery_date") == {date(2026, 7, 3), date(2026, 11, 26)}


def test_missing_calendar_file_cannot_be_loaded(tmp_path: Path):
    assert FileCalendarSource(root=tmp_path).run_paged("standard", page_size=1000) is None


def test_missing_column_raises_schema_error():
    with pytest.raises(CalendarSchemaError, match="delivery_date"):
        read_date_column([{"date": "2026-01-01"}], "delivery_date")


def test_unparseable_date_raises():
    with pytest.raises(ValueError):
        read_date_column([{"delivery_date": "next tuesday"}], "delivery_date")


def test_list_pages_rejects_out_of_range_index():
    pages = ListPages([{"delivery_date": "2026-01-01"}], page_size=1000)
    assert pages.page_count == 1
    with pytest.raises(IndexError):
        pages.fetch(1)


class FakeQuery:
    def __init__(self, rows, calls):
        self._rows = rows
        self._calls = calls
        self._filters = {}
        self._count = None
        self._range = (0, len(rows) - 1)

    def select(self, column, count=None):
        self._calls.append(("select", column, count))
        self._count = count
        return self

    def eq(self, column, value):
        self._filters[column] = value
        return self

    def order(self, column):
        return self

    def range(self, start, end):
        self._calls.append(("range", start, end))
        self._range = (start, end)
        return self

    def execute(self):
        matching = [row for row in self._rows if all(row.get(k) == v for k, v in self._filters.items())]
        start, end = self._range
        return SimpleNamespace(
            data=matching[start : end + 1],
            count=len(matching) if self._count == "exact" else None,
        )


class FakeClient:
    def __init__(self, rows):
        self.rows = rows
        self.calls = []

    def table(self, name):
        self.calls.append(("table", name))
        return FakeQuery(self.rows, self.calls)


def test_supabase_source_pages_by_calendar():
    rows = [
        {"calendar": "standard", "delivery_date": "2026-12-24"},
        {"calendar": "standard", "delivery_date": "2026-12-25"},
        {"calendar": "standard", "delivery_date": "2026-12-31"},
        {"calendar": "special_item", "delivery_date": "2026-07-03"},
    ]
    client = FakeClient(rows)
    source = SupabaseCalendarSource(client=client, table="blackout_dates", date_column="delivery_date")

    paged = source.run_paged("standard", page_size=2)

    assert paged.page_count == 2
    collected = set()
    for index in range(paged.page_count):
        collected |= read_date_column(paged.fetch(index), "delivery_date")
    assert collected == {date(2026, 12, 24), date(2026, 12, 25), date(2026, 12, 31)}
    assert ("select", "delivery_date", "exact") in client.calls
    assert ("range", 2, 3) in client.calls


def test_unparseable_dates_can_be_collected():
    invalid = []
    rows = [{"delivery_date": "2026-12-24"}, {"delivery_date": "next tuesday"}]
    assert read_date_column(rows, "delivery_date", invalid=invalid) == {date(2026, 12, 24)}
    assert invalid == ["next tuesday"]
