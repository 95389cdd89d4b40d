"""Save-time flag for financed orders that include cabinet materials."""

from __future__ import annotations

import logging

from ...config import settings
from ...data.config_repository import ItemLookup, SupabaseItemLookup
from ...models.domain import HeaderField, LineField, OrderRecord, normalize_identifier
from ..errors import FailureLog, handler_boundary

logger = logging.getLogger(__name__)


class FinancingMaterialsCheck:
    """Marks a financed order as a materials order.

    Applies only when the payment terms are the financing terms and the flag is
    not already set. The first line fulfilled from the materials location whose
    item books to the cabinet inventory asset account sets the flag.
    """

    def __init__(
        self,
        items: ItemLookup | None = None,
        failures: FailureLog | None = None,
        terms_id: str | None = None,
        location_id: str | None = None,
        asset_account_id: str | None = None,
    ) -> None:
        self.items = items or SupabaseItemLookup()
        self.failures = failures if failures is not None else FailureLog()
        self.terms_id = normalize_identifier(terms_id or settings.financing_terms_id)
        self.location_id = normalize_identifier(location_id or settings.materials_location_id)
        self.asset_account_id = normalize_identifier(asset_account_id or settings.materials_asset_account_id)

    @handler_boundary("financing_materials_check", default=False)
    def apply(self, order: OrderRecord) -> bool:
        """Return True when this call set the materials flag."""
        terms = normalize_identifier(order.get_value(HeaderField.TERMS))
        if terms != self.terms_id:
            logger.debug(f"Terms {terms!r} are not financing terms, skipping materials check")
            return False
        if order.get_value(HeaderField.MATERIALS_ORDER) is True:
            return False

        for line in range(order.line_count()):
            if normalize_identifier(order.get_line_value(line, LineField.LOCATION)) != self.location_id:
                continue
            item_id = normalize_identifier(order.get_line_value(line, LineField.ITEM))
            if not item_id:
                continue
            account = normalize_identifier(self.items.asset_account(item_id))
            logger.debug(f"Line {line + 1}: item {item_id} books to asset account {account}")
            if account == self.asset_account_id:
                order.set_value(HeaderField.MATERIALS_ORDER, True)
                return True

        logger.debug("No qualifying materials lines found")
        return False
