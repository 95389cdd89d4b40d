"""Ship date admission rules.

Two independent rule sets decide whether a requested ship date may stand:

* the blackout rule checks the date against the default blackout calendar
  and, for orders with an outstanding special item, the alternate calendar;
* the distance rule combines the shipping distance with the day of week.

Callers in an enforced role get the ship date cleared on a violation; every
other role only sees a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Optional

from ...config import settings
from ...models.domain import BlackoutCalendar, CallerContext, OrderRecord, normalize_identifier
from ..calendars.cache import BlackoutCalendarCache
from ..orders.inspector import OrderLineInspector
from . import messages
from .models import ClearScope, PolicyVerdict, RuleCode

logger = logging.getLogger(__name__)

MONDAY = 1


def day_of_week(candidate: date) -> int:
    """0=Sunday .. 6=Saturday."""
    return candidate.isoweekday() % 7


@dataclass(frozen=True, slots=True)
class DistanceThresholds:
    monday_max_miles: float = 35.0
    band_min_miles: float = 70.0
    band_max_miles: float = 85.0
    band_weekday: int = 4

    @classmethod
    def from_settings(cls) -> "DistanceThresholds":
        return cls(
            monday_max_miles=settings.monday_max_miles,
            band_min_miles=settings.extended_band_min_miles,
            band_max_miles=settings.extended_band_max_miles,
            band_weekday=settings.extended_band_weekday,
        )


class ShipDatePolicyEngine:
    def __init__(
        self,
        calendars: BlackoutCalendarCache,
        inspector: OrderLineInspector | None = None,
        enforced_roles: Iterable[str] | None = None,
        special_item_code: str | None = None,
        default_calendar_id: str | None = None,
        alternate_calendar_id: str | None = None,
        thresholds: DistanceThresholds | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.calendars = calendars
        self.inspector = inspector or OrderLineInspector()
        roles = settings.blackout_enforced_roles if enforced_roles is None else enforced_roles
        self.enforced_roles = frozenset(r for r in (normalize_identifier(role) for role in roles) if r)
        self.special_item_code = special_item_code or settings.special_item_code
        self.default_calendar_id = default_calendar_id or settings.default_calendar_id
        self.alternate_calendar_id = alternate_calendar_id or settings.alternate_calendar_id
        self.thresholds = thresholds or DistanceThresholds.from_settings()
        self.today = today

    def is_enforced(self, role: str | CallerContext | None) -> bool:
        if isinstance(role, CallerContext):
            role = role.role
        return normalize_identifier(role) in self.enforced_roles

    def is_future(self, candidate: Optional[date]) -> bool:
        return candidate is not None and candidate > self.today()

    # Distance / day-of-week rule

    def evaluate(
        self,
        candidate: date,
        distance_miles: Optional[float],
        role: str | CallerContext | None,
    ) -> PolicyVerdict:
        """Admission verdict for shipping ``distance_miles`` on ``candidate``.

        The Monday limit is checked first, then the extended band, then the
        out-of-range band; a Monday always gets the Monday message.
        """
        enforce = self.is_enforced(role)
        if distance_miles is None:
            logger.debug("Shipping distance unknown, distance rule not evaluated")
            return PolicyVerdict.allow(RuleCode.DISTANCE_UNKNOWN, enforce)

        limits = self.thresholds
        weekday = day_of_week(candidate)
        logger.debug(f"Evaluating {distance_miles} miles on {candidate} (day {weekday}), enforced={enforce}")

        if weekday == MONDAY and distance_miles > limits.monday_max_miles:
            base = messages.MONDAY_LIMIT.format(miles=limits.monday_max_miles)
            return self._reject(RuleCode.MONDAY_LIMIT, base, enforce)

        if limits.band_min_miles <= distance_miles <= limits.band_max_miles:
            if weekday == limits.band_weekday:
                return PolicyVerdict.allow(
                    RuleCode.EXTENDED_BAND_SURCHARGE,
                    enforce,
                    messages.EXTENDED_BAND_SURCHARGE.format(low=limits.band_min_miles, high=limits.band_max_miles),
                )
            base = messages.EXTENDED_BAND_WRONG_DAY.format(
                low=limits.band_min_miles,
                high=limits.band_max_miles,
                weekday=messages.WEEKDAY_NAMES[limits.band_weekday],
            )
            return self._reject(RuleCode.EXTENDED_BAND_WRONG_DAY, base, enforce)

        if distance_miles > limits.band_max_miles:
            base = messages.OUT_OF_RANGE.format(high=limits.band_max_miles)
            return self._reject(RuleCode.OUT_OF_RANGE, base, enforce, messages.OUT_OF_RANGE_CLEARED)

        return PolicyVerdict.allow(RuleCode.WITHIN_RANGE, enforce)

    @staticmethod
    def _reject(rule: RuleCode, base: str, enforce: bool, cleared_text: str = messages.CLEARED) -> PolicyVerdict:
        return PolicyVerdict(
            admissible=False,
            enforce=enforce,
            message=messages.with_outcome(base, cleared=enforce, cleared_text=cleared_text),
            rule=rule,
            scope=ClearScope.HEADER if enforce else ClearScope.NONE,
        )

    # Blackout-date rule

    def check_blackout(
        self,
        candidate: Optional[date],
        order: OrderRecord,
        role: str | CallerContext | None,
    ) -> PolicyVerdict:
        """Check ``candidate`` against the blackout calendars for an enforced role."""
        if candidate is None or not self.is_enforced(role):
            return PolicyVerdict.allow(RuleCode.NOT_APPLICABLE)

        if candidate in self.calendars.get_calendar(self.default_calendar_id):
            logger.debug(f"[{candidate}] is a blackout date")
            return PolicyVerdict(
                admissible=False,
                enforce=True,
                message=messages.BLACKOUT_DATE,
                rule=RuleCode.BLACKOUT_DEFAULT,
                scope=ClearScope.TRIGGERING_FIELD,
            )

        if self.inspector.has_outstanding_special_item(order, self.special_item_code):
            if candidate in self.calendars.get_calendar(self.alternate_calendar_id):
                logger.debug(f"[{candidate}] is a blackout date for {self.special_item_code} items")
                return PolicyVerdict(
                    admissible=False,
                    enforce=True,
                    message=messages.BLACKOUT_SPECIAL_ITEM.format(code=self.special_item_code),
                    rule=RuleCode.BLACKOUT_ALTERNATE,
                    scope=ClearScope.HEADER_AND_LINES,
                )

        return PolicyVerdict.allow(RuleCode.NOT_BLACKED_OUT, enforce=True)

    def check_new_special_line(self, candidate: Optional[date]) -> PolicyVerdict:
        """Alternate-calendar check for a newly committed special item line."""
        if candidate is None:
            return PolicyVerdict.allow(RuleCode.NOT_APPLICABLE)
        if candidate in self.calendars.get_calendar(self.alternate_calendar_id):
            return PolicyVerdict(
                admissible=False,
                enforce=True,
                message=messages.BLACKOUT_NEW_LINE.format(
                    code=self.special_item_code,
                    ship_date=candidate.isoformat(),
                ),
                rule=RuleCode.BLACKOUT_NEW_LINE,
                scope=ClearScope.HEADER_AND_LINES,
            )
        return PolicyVerdict.allow(RuleCode.NOT_BLACKED_OUT, enforce=True)

    def alternate_calendar(self) -> BlackoutCalendar:
        return self.calendars.get_calendar(self.alternate_calendar_id)
