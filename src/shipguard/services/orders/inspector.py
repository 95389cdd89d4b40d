"""Read-only scans over the item sublist."""

from __future__ import annotations

import logging

from ...models.domain import LineField, OrderRecord, coerce_quantity

logger = logging.getLogger(__name__)


def outstanding_quantity(order: OrderRecord, line: int) -> float:
    quantity = coerce_quantity(order.get_line_value(line, LineField.QUANTITY))
    billed = coerce_quantity(order.get_line_value(line, LineField.QUANTITY_BILLED))
    return quantity - billed


def item_matches(item_text: str | None, special_item_code: str) -> bool:
    return bool(item_text) and special_item_code in item_text


class OrderLineInspector:
    def has_outstanding_special_item(self, order: OrderRecord, special_item_code: str) -> bool:
        """True when any line carries ``special_item_code`` with quantity left to bill."""
        for line in range(order.line_count()):
            item_text = order.get_line_text(line, LineField.ITEM)
            if not item_matches(item_text, special_item_code):
                continue
            remaining = outstanding_quantity(order, line)
            if remaining > 0:
                logger.debug(f"Line {line + 1} item '{item_text}' has {remaining} left to bill")
                return True
            logger.debug(f"Line {line + 1} item '{item_text}' is fully billed")
        return False
