"""Domain models for sales order drafts, callers and blackout calendars."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable, Optional, Protocol, Sequence

ITEM_SUBLIST = "item"


class HeaderField(str, Enum):
    """Body fields of a sales order the rules read or write."""

    ENTITY = "entity"
    SHIP_DATE = "shipdate"
    SHIP_ADDRESS = "shipaddress"
    SHIPPING_DISTANCE = "shipping_distance"
    DISTANCE_NOTES = "ship_distance_notes"
    TERMS = "terms"
    MATERIALS_ORDER = "materials_order"
    SALES_REP = "salesrep"


class LineField(str, Enum):
    """Item sublist columns the rules read or write."""

    ID = "id"
    ITEM = "item"
    QUANTITY = "quantity"
    QUANTITY_BILLED = "quantitybilled"
    SHIP_DATE = "line_ship_date"
    LOCATION = "location"


def normalize_identifier(value: Any) -> Optional[str]:
    """Return the canonical string form of a role, location or record id.

    ``1032``, ``1032.0`` and ``" 1032 "`` all normalize to ``"1032"``.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return str(value)
        value = int(value)
    text = str(value).strip()
    return text or None


def coerce_date(value: Any, formats: Sequence[str] = ("%Y-%m-%d", "%m/%d/%Y")) -> Optional[date]:
    """Convert a date-like value to a date-only value."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    for fmt in formats:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return date.fromisoformat(text[:10])
    except ValueError as exc:
        raise ValueError(f"Unable to parse date from value '{value}'") from exc


def coerce_quantity(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "")
    return float(value)


def coerce_distance(value: Any) -> Optional[float]:
    """Distances are non-negative floats or absent; blanks never become zero."""
    if value is None or value == "":
        return None
    miles = float(str(value).replace(",", "")) if isinstance(value, str) else float(value)
    if miles < 0:
        raise ValueError(f"Distance cannot be negative: {value}")
    return miles


class OrderRecord(Protocol):
    """Record-access contract the controller and inspector work against."""

    @property
    def current_line(self) -> Optional[int]: ...

    def get_value(self, field_id: HeaderField) -> Any: ...

    def set_value(self, field_id: HeaderField, value: Any) -> None: ...

    def line_count(self) -> int: ...

    def get_line_value(self, line: int, field_id: LineField) -> Any: ...

    def get_line_text(self, line: int, field_id: LineField) -> str: ...

    def set_line_value(self, line: int, field_id: LineField, value: Any) -> None: ...


@dataclass(slots=True)
class OrderLine:
    """One row of the item sublist."""

    item_text: str
    quantity: float = 0.0
    quantity_billed: float = 0.0
    item_id: Optional[str] = None
    ship_date: Optional[date] = None
    line_id: Optional[str] = None
    location_id: Optional[str] = None

    @property
    def outstanding_quantity(self) -> float:
        return self.quantity - self.quantity_billed

    @property
    def is_new(self) -> bool:
        return self.line_id is None


_HEADER_ATTRIBUTES: dict[HeaderField, str] = {
    HeaderField.ENTITY: "entity",
    HeaderField.SHIP_DATE: "ship_date",
    HeaderField.SHIP_ADDRESS: "ship_address",
    HeaderField.SHIPPING_DISTANCE: "shipping_distance",
    HeaderField.DISTANCE_NOTES: "distance_notes",
    HeaderField.TERMS: "terms",
    HeaderField.MATERIALS_ORDER: "materials_order",
    HeaderField.SALES_REP: "sales_rep",
}

_LINE_ATTRIBUTES: dict[LineField, str] = {
    LineField.ID: "line_id",
    LineField.ITEM: "item_id",
    LineField.QUANTITY: "quantity",
    LineField.QUANTITY_BILLED: "quantity_billed",
    LineField.SHIP_DATE: "ship_date",
    LineField.LOCATION: "location_id",
}


def _coerce_header(field_id: HeaderField, value: Any) -> Any:
    if field_id is HeaderField.SHIP_DATE:
        return coerce_date(value)
    if field_id is HeaderField.SHIPPING_DISTANCE:
        return coerce_distance(value)
    if field_id is HeaderField.MATERIALS_ORDER:
        return bool(value)
    if field_id in (HeaderField.ENTITY, HeaderField.TERMS, HeaderField.SALES_REP):
        return normalize_identifier(value)
    return value or None


def _coerce_line(field_id: LineField, value: Any) -> Any:
    if field_id is LineField.SHIP_DATE:
        return coerce_date(value)
    if field_id in (LineField.QUANTITY, LineField.QUANTITY_BILLED):
        return coerce_quantity(value)
    return normalize_identifier(value)


@dataclass(slots=True)
class OrderDraft:
    """In-progress sales order owned by one editing session."""

    entity: Optional[str] = None
    ship_date: Optional[date] = None
    ship_address: Optional[str] = None
    shipping_distance: Optional[float] = None
    distance_notes: Optional[str] = None
    terms: Optional[str] = None
    materials_order: bool = False
    sales_rep: Optional[str] = None
    lines: list[OrderLine] = field(default_factory=list)
    current_line: Optional[int] = None

    def get_value(self, field_id: HeaderField) -> Any:
        return getattr(self, _HEADER_ATTRIBUTES[HeaderField(field_id)])

    def set_value(self, field_id: HeaderField, value: Any) -> None:
        field_id = HeaderField(field_id)
        setattr(self, _HEADER_ATTRIBUTES[field_id], _coerce_header(field_id, value))

    def line_count(self) -> int:
        return len(self.lines)

    def get_line_value(self, line: int, field_id: LineField) -> Any:
        return getattr(self.lines[line], _LINE_ATTRIBUTES[LineField(field_id)])

    def get_line_text(self, line: int, field_id: LineField) -> str:
        field_id = LineField(field_id)
        if field_id is LineField.ITEM:
            return self.lines[line].item_text
        value = self.get_line_value(line, field_id)
        if isinstance(value, date):
            return value.isoformat()
        return "" if value is None else str(value)

    def set_line_value(self, line: int, field_id: LineField, value: Any) -> None:
        field_id = LineField(field_id)
        setattr(self.lines[line], _LINE_ATTRIBUTES[field_id], _coerce_line(field_id, value))


@dataclass(slots=True)
class CallerContext:
    """The user editing the order."""

    role: Optional[str]
    user_id: Optional[str] = None
    is_sales_rep: bool = False

    def __post_init__(self) -> None:
        self.role = normalize_identifier(self.role)
        self.user_id = normalize_identifier(self.user_id)

    def is_enforced(self, enforced_roles: Iterable[str]) -> bool:
        if self.role is None:
            return False
        return self.role in {normalize_identifier(role) for role in enforced_roles}


@dataclass(frozen=True, slots=True)
class BlackoutCalendar:
    """Dates on which shipments are closed for one population of orders."""

    calendar_id: str
    dates: frozenset[date] = frozenset()

    def __contains__(self, candidate: object) -> bool:
        return candidate in self.dates

    def __len__(self) -> int:
        return len(self.dates)
