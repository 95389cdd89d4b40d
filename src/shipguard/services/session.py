"""Editing sessions: one calendar cache and controller per open order form."""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from typing import Callable

from ..config import settings
from ..data.calendar_repository import CalendarSource, get_calendar_source
from ..data.config_repository import CredentialStore, ItemLookup
from ..models.domain import CallerContext
from .calendars.cache import BlackoutCalendarCache
from .distance.client import DistanceMatrixClient
from .distance.resolver import DistanceResolver
from .errors import FailureLog
from .orders.controller import OrderFormController
from .orders.notifier import CollectingNotifier
from .orders.payment_terms import FinancingMaterialsCheck
from .policy.engine import ShipDatePolicyEngine

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EditingSession:
    session_id: str
    caller: CallerContext
    controller: OrderFormController
    calendars: BlackoutCalendarCache
    notifier: CollectingNotifier
    failures: FailureLog = field(default_factory=FailureLog)


def open_session(
    caller: CallerContext,
    *,
    calendar_source: CalendarSource | None = None,
    credentials: CredentialStore | None = None,
    distance_client: DistanceMatrixClient | None = None,
    item_lookup: ItemLookup | None = None,
    today: Callable[[], date] = date.today,
) -> EditingSession:
    """Wire a fresh controller with its own calendar cache and failure log."""
    failures = FailureLog()
    notifier = CollectingNotifier()
    calendars = BlackoutCalendarCache(calendar_source or get_calendar_source(), failures)
    engine = ShipDatePolicyEngine(calendars, today=today)
    resolver = DistanceResolver(client=distance_client, credentials=credentials, failures=failures)
    controller = OrderFormController(
        caller=caller,
        engine=engine,
        resolver=resolver,
        notifier=notifier,
        failures=failures,
        materials_check=FinancingMaterialsCheck(items=item_lookup, failures=failures),
    )
    return EditingSession(
        session_id=uuid.uuid4().hex,
        caller=caller,
        controller=controller,
        calendars=calendars,
        notifier=notifier,
        failures=failures,
    )


class SessionRegistry:
    """Open editing sessions keyed by id.

    A session is dropped, with its calendar cache, when it is closed or when
    it has not been used for ``max_idle_seconds``.
    """

    def __init__(
        self,
        factory: Callable[[CallerContext], EditingSession] = open_session,
        max_idle_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.factory = factory
        self.max_idle_seconds = max_idle_seconds or settings.session_idle_seconds
        self.clock = clock
        self._sessions: dict[str, EditingSession] = {}
        self._last_used: dict[str, float] = {}

    def __len__(self) -> int:
        self._expire()
        return len(self._sessions)

    def _expire(self) -> None:
        cutoff = self.clock() - self.max_idle_seconds
        for session_id in [sid for sid, used in self._last_used.items() if used <= cutoff]:
            self._sessions.pop(session_id, None)
            self._last_used.pop(session_id, None)
            logger.info(f"Expired idle editing session {session_id}")

    def open(self, caller: CallerContext) -> EditingSession:
        self._expire()
        session = self.factory(caller)
        self._sessions[session.session_id] = session
        self._last_used[session.session_id] = self.clock()
        logger.info(f"Opened editing session {session.session_id} for role {caller.role}")
        return session

    def get(self, session_id: str) -> EditingSession:
        self._expire()
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise KeyError(f"Editing session '{session_id}' not found") from None
        self._last_used[session_id] = self.clock()
        return session

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        self._last_used.pop(session_id, None)
        if session is not None:
            logger.info(f"Closed editing session {session_id}")
        return session is not None


sessions = SessionRegistry()
