"""Session-scoped memo of blackout calendars."""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ...config import settings
from ...data.calendar_repository import CalendarSchemaError, CalendarSource, read_date_column
from ...models.domain import BlackoutCalendar
from ..errors import FailureKind, FailureLog

logger = logging.getLogger(__name__)


class BlackoutCalendarCache:
    """Loads each calendar at most once for the life of an editing session.

    A calendar that could not be loaded is cached as empty: it means "no known
    blackout dates" for the rest of the session and is never retried.
    """

    def __init__(
        self,
        source: CalendarSource,
        failures: Optional[FailureLog] = None,
        page_size: int | None = None,
        date_column: str | None = None,
    ) -> None:
        self.source = source
        self.failures = failures if failures is not None else FailureLog()
        self.page_size = page_size or settings.calendar_page_size
        self.date_column = date_column or settings.calendar_date_column
        self._calendars: dict[str, BlackoutCalendar] = {}

    def __contains__(self, calendar_id: object) -> bool:
        return calendar_id in self._calendars

    def get_calendar(self, calendar_id: str) -> BlackoutCalendar:
        cached = self._calendars.get(calendar_id)
        if cached is not None:
            return cached
        calendar = BlackoutCalendar(calendar_id=calendar_id, dates=frozenset(self._load(calendar_id)))
        self._calendars[calendar_id] = calendar
        logger.debug(f"Blackout calendar '{calendar_id}' loaded with {len(calendar)} dates")
        return calendar

    def _load(self, calendar_id: str) -> set[date]:
        operation = f"load_calendar[{calendar_id}]"
        try:
            paged = self.source.run_paged(calendar_id, self.page_size)
            if paged is None:
                self.failures.report(
                    FailureKind.CONFIGURATION,
                    operation,
                    f"Blackout calendar source '{calendar_id}' could not be loaded",
                )
                return set()
            dates: set[date] = set()
            invalid: list = []
            for index in range(paged.page_count):
                dates |= read_date_column(paged.fetch(index), self.date_column, invalid=invalid)
            if invalid:
                sample = ", ".join(repr(value) for value in invalid[:5])
                self.failures.report(
                    FailureKind.DATA_QUALITY,
                    operation,
                    f"Skipped {len(invalid)} unparseable '{self.date_column}' values: {sample}",
                )
            return dates
        except CalendarSchemaError as exc:
            self.failures.report(FailureKind.CONFIGURATION, operation, str(exc), exc)
            return set()
        except Exception as exc:
            self.failures.report(FailureKind.EXTERNAL_SERVICE, operation, str(exc), exc)
            return set()
