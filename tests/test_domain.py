from datetime import date, datetime

import pytest

from src.shipguard.config import Settings
from src.shipguard.models.domain import (
    CallerContext,
    HeaderField,
    LineField,
    OrderDraft,
    OrderLine,
    coerce_date,
    coerce_distance,
    normalize_identifier,
)


@pytest.mark.parametrize(
    "value,expected",
    [(1032, "1032"), (1032.0, "1032"), (" 1032 ", "1032"), ("", None), (None, None), (True, None), (1.5, "1.5")],
)
def test_normalize_identifier(value, expected):
    assert normalize_identifier(value) == expected


def test_coerce_date_accepts_common_forms():
    assert coerce_date("2026-12-24") == date(2026, 12, 24)
    assert coerce_date("12/24/2026") == date(2026, 12, 24)
    assert coerce_date(datetime(2026, 12, 24, 9, 30)) == date(2026, 12, 24)
    assert coerce_date("") is None
    with pytest.raises(ValueError):
        coerce_date("soon")


def test_coerce_distance_rejects_negative_values():
    assert coerce_distance("1,204.5") == 1204.5
    assert coerce_distance(0) == 0.0
    assert coerce_distance(None) is None
    with pytest.raises(ValueError):
        coerce_distance(-1)


def test_order_draft_field_access():
    order = OrderDraft(lines=[OrderLine(item_text="ITM-00401-X", item_id="5521", line_id="9")])
    order.set_value(HeaderField.SHIP_DATE, "2026-01-06")
    order.set_value("terms", 8)
    order.set_line_value(0, LineField.SHIP_DATE, "01/07/2026")

    assert order.get_value("shipdate") == date(2026, 1, 6)
    assert order.terms == "8"
    assert order.get_line_value(0, "line_ship_date") == date(2026, 1, 7)
    assert order.get_line_text(0, LineField.ITEM) == "ITM-00401-X"
    assert order.get_line_value(0, LineField.ITEM) == "5521"
    assert order.get_line_text(0, LineField.SHIP_DATE) == "2026-01-07"
    assert not order.lines[0].is_new


def test_unknown_field_is_rejected():
    with pytest.raises(ValueError):
        OrderDraft().get_value("custbody_unknown")


def test_caller_context_normalizes_identifiers():
    caller = CallerContext(role=1032.0, user_id=55)
    assert caller.role == "1032"
    assert caller.user_id == "55"
    assert caller.is_enforced([1032])
    assert not CallerContext(role=None).is_enforced(["1032"])


def test_enforced_roles_from_settings_are_normalized():
    settings = Settings(blackout_enforced_roles="1032, 1040")
    assert settings.blackout_enforced_roles == ("1032", "1040")


def test_enforced_roles_from_environment(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("SHIPGUARD_BLACKOUT_ENFORCED_ROLES", '["1032", 1040]')
    monkeypatch.setenv("SHIPGUARD_MONDAY_MAX_MILES", "40")
    settings = Settings()
    assert settings.blackout_enforced_roles == ("1032", "1040")
    assert settings.monday_max_miles == 40.0
