from datetime import date

import pytest

from src.shipguard.data.calendar_repository import ListPages
from src.shipguard.models.domain import CallerContext, OrderDraft
from src.shipguard.services.errors import FailureKind
from src.shipguard.services.session import SessionRegistry, open_session

TODAY = date(2026, 1, 2)


class MemorySource:
    def __init__(self):
        self.calls = []

    def run_paged(self, calendar_id, page_size):
        self.calls.append(calendar_id)
        return ListPages([], page_size)


class NoKey:
    def get_api_key(self):
        return None


def _open(caller, source=None):
    return open_session(
        caller,
        calendar_source=source or MemorySource(),
        credentials=NoKey(),
        item_lookup=None,
        today=lambda: TODAY,
    )


def test_session_components_share_one_failure_log():
    session = _open(CallerContext(role="3"))
    order = OrderDraft(ship_address="1 Main St Columbia MD")

    session.controller.on_address_changed(order)

    assert session.failures.kinds() == [FailureKind.CONFIGURATION]
    assert session.controller.failures is session.failures
    assert session.calendars.failures is session.failures


def test_sessions_do_not_share_calendar_caches():
    source = MemorySource()
    first = _open(CallerContext(role="1032"), source)
    second = _open(CallerContext(role="1032"), source)

    first.calendars.get_calendar("standard")
    first.calendars.get_calendar("standard")
    second.calendars.get_calendar("standard")

    assert source.calls == ["standard", "standard"]
    assert first.session_id != second.session_id


def test_registry_open_get_close():
    registry = SessionRegistry(factory=_open)
    session = registry.open(CallerContext(role="1032"))

    assert registry.get(session.session_id) is session
    assert len(registry) == 1
    assert registry.close(session.session_id) is True
    assert registry.close(session.session_id) is False
    with pytest.raises(KeyError):
        registry.get(session.session_id)


def test_idle_sessions_expire():
    now = [1000.0]
    registry = SessionRegistry(factory=_open, max_idle_seconds=60, clock=lambda: now[0])
    idle = registry.open(CallerContext(role="3"))
    active = registry.open(CallerContext(role="3"))

    now[0] += 45
    registry.get(active.session_id)
    now[0] += 30

    assert registry.get(active.session_id) is active
    with pytest.raises(KeyError):
        registry.get(idle.session_id)
    assert len(registry) == 1
