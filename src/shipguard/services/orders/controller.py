"""Sales order form event handlers.

Each public ``on_*`` method corresponds to a lifecycle event of the order
entry form. Handlers only ever correct fields and raise alerts; they never
raise and never report the order as invalid.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ...models.domain import (
    ITEM_SUBLIST,
    CallerContext,
    HeaderField,
    LineField,
    OrderRecord,
)
from ..distance.models import DistanceResult
from ..distance.resolver import DistanceResolver
from ..errors import FailureLog, handler_boundary
from ..policy.engine import ShipDatePolicyEngine
from ..policy.models import ClearScope, PolicyVerdict
from .inspector import item_matches
from .notifier import CollectingNotifier, Notifier
from .payment_terms import FinancingMaterialsCheck

logger = logging.getLogger(__name__)


class OrderFormController:
    def __init__(
        self,
        caller: CallerContext,
        engine: ShipDatePolicyEngine,
        resolver: DistanceResolver,
        notifier: Notifier | None = None,
        failures: FailureLog | None = None,
        materials_check: FinancingMaterialsCheck | None = None,
    ) -> None:
        self.caller = caller
        self.engine = engine
        self.resolver = resolver
        self.notifier = notifier or CollectingNotifier()
        self.failures = failures if failures is not None else FailureLog()
        self.materials_check = materials_check

    def field_changed(self, order: OrderRecord, field_id: str, sublist_id: str | None = None) -> None:
        """Dispatch a raw field-change event to the matching handler."""
        if sublist_id is None:
            if field_id == HeaderField.ENTITY.value:
                self.on_entity_changed(order)
            elif field_id == HeaderField.SHIP_ADDRESS.value:
                self.on_address_changed(order)
            elif field_id == HeaderField.SHIP_DATE.value:
                self.on_ship_date_changed(order)
        elif sublist_id == ITEM_SUBLIST and field_id == LineField.SHIP_DATE.value:
            self.on_line_ship_date_changed(order)

    # Header events

    def on_entity_changed(self, order: OrderRecord) -> None:
        self._default_sales_rep(order)
        self._refresh_distance(order)

    def on_address_changed(self, order: OrderRecord) -> None:
        self._refresh_distance(order)

    def on_ship_date_changed(self, order: OrderRecord) -> None:
        self._distance_for_ship_date(order)
        self._blackout_for_ship_date(order)

    # Line events

    def on_line_ship_date_changed(self, order: OrderRecord, line: int | None = None) -> None:
        self._blackout_for_line(order, line)

    @handler_boundary("line_commit", default=True)
    def on_line_commit(self, order: OrderRecord, line: int | None = None) -> bool:
        """Check a newly added special item line against the alternate calendar."""
        line = order.current_line if line is None else line
        if line is None:
            return True
        if order.get_line_value(line, LineField.ID):
            return True
        item_text = order.get_line_text(line, LineField.ITEM)
        if not item_matches(item_text, self.engine.special_item_code):
            return True

        candidate = order.get_line_value(line, LineField.SHIP_DATE) or order.get_value(HeaderField.SHIP_DATE)
        logger.debug(f"New line item '{item_text}' checked against the alternate calendar for {candidate}")
        self._apply(order, self.engine.check_new_special_line(candidate), line, candidate)
        return True

    # Save

    @handler_boundary("save", default=True)
    def on_save(self, order: OrderRecord) -> bool:
        if self.materials_check is not None:
            self.materials_check.apply(order)
        return True

    # Internals

    @handler_boundary("sales_rep_default")
    def _default_sales_rep(self, order: OrderRecord) -> None:
        if self.caller.is_sales_rep and self.caller.user_id:
            order.set_value(HeaderField.SALES_REP, self.caller.user_id)

    @handler_boundary("distance_refresh")
    def _refresh_distance(self, order: OrderRecord) -> None:
        address = order.get_value(HeaderField.SHIP_ADDRESS)
        if not address:
            return
        result = self.resolver.resolve(address)
        self._store_distance(order, result)
        ship_date = order.get_value(HeaderField.SHIP_DATE)
        if self.engine.is_future(ship_date):
            self._apply(order, self.engine.evaluate(ship_date, result.miles, self.caller), None, ship_date)

    @staticmethod
    def _store_distance(order: OrderRecord, result: DistanceResult) -> None:
        order.set_value(HeaderField.SHIPPING_DISTANCE, result.miles)
        if result.note is not None:
            order.set_value(HeaderField.DISTANCE_NOTES, result.note)

    @handler_boundary("ship_date_distance")
    def _distance_for_ship_date(self, order: OrderRecord) -> None:
        distance = order.get_value(HeaderField.SHIPPING_DISTANCE)
        address = order.get_value(HeaderField.SHIP_ADDRESS)
        if distance is None and address:
            logger.debug("Shipping distance unset, resolving before checking the ship date")
            result = self.resolver.resolve(address)
            self._store_distance(order, result)
            distance = result.miles

        ship_date = order.get_value(HeaderField.SHIP_DATE)
        if not self.engine.is_future(ship_date):
            logger.debug("Ship date is empty or not in the future, skipping distance rule")
            return
        self._apply(order, self.engine.evaluate(ship_date, distance, self.caller), None, ship_date)

    @handler_boundary("ship_date_blackout")
    def _blackout_for_ship_date(self, order: OrderRecord) -> None:
        candidate = order.get_value(HeaderField.SHIP_DATE)
        self._apply(order, self.engine.check_blackout(candidate, order, self.caller), None, candidate)

    @handler_boundary("line_ship_date_blackout")
    def _blackout_for_line(self, order: OrderRecord, line: int | None) -> None:
        line = order.current_line if line is None else line
        if line is None:
            return
        candidate = order.get_line_value(line, LineField.SHIP_DATE)
        self._apply(order, self.engine.check_blackout(candidate, order, self.caller), line, candidate)

    def _apply(
        self,
        order: OrderRecord,
        verdict: PolicyVerdict,
        line: Optional[int],
        candidate: Optional[date],
    ) -> None:
        if verdict.clear:
            self._clear(order, verdict.scope, line, candidate)
        if verdict.message:
            self.notifier.alert(verdict.message)

    def _clear(self, order: OrderRecord, scope: ClearScope, line: Optional[int], candidate: Optional[date]) -> None:
        if scope is ClearScope.TRIGGERING_FIELD:
            if line is None:
                order.set_value(HeaderField.SHIP_DATE, None)
            else:
                order.set_line_value(line, LineField.SHIP_DATE, None)
        elif scope is ClearScope.HEADER:
            order.set_value(HeaderField.SHIP_DATE, None)
        elif scope is ClearScope.HEADER_AND_LINES:
            order.set_value(HeaderField.SHIP_DATE, None)
            alternate = self.engine.alternate_calendar()
            current = order.current_line if line is None else line
            for index in range(order.line_count()):
                line_date = order.get_line_value(index, LineField.SHIP_DATE)
                if line_date is None:
                    continue
                if index == current or line_date == candidate or line_date in alternate:
                    order.set_line_value(index, LineField.SHIP_DATE, None)
        logger.debug(f"Cleared ship date ({scope.value}) for {candidate}")
