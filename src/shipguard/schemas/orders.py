"""Order event request/response schemas."""

from __future__ import annotations

from datetime import date
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator, model_validator

from ..models.domain import OrderDraft, OrderLine, normalize_identifier


class OrderLineModel(BaseModel):
    item_text: str = Field(..., description="Item display text, e.g. 'ITM-00401-X'.")
    item_id: Optional[Union[int, str]] = None
    quantity: float = 0.0
    quantity_billed: float = 0.0
    ship_date: Optional[date] = None
    line_id: Optional[Union[int, str]] = Field(default=None, description="Persisted line id; empty for new lines.")
    location_id: Optional[Union[int, str]] = None

    @field_validator("item_id", "line_id", "location_id", mode="before")
    @classmethod
    def _normalize_ids(cls, value):
        return normalize_identifier(value)


class OrderModel(BaseModel):
    entity: Optional[Union[int, str]] = None
    ship_date: Optional[date] = None
    ship_address: Optional[str] = None
    shipping_distance: Optional[float] = Field(default=None, ge=0)
    distance_notes: Optional[str] = None
    terms: Optional[Union[int, str]] = None
    materials_order: bool = False
    sales_rep: Optional[Union[int, str]] = None
    lines: List[OrderLineModel] = Field(default_factory=list)
    current_line: Optional[int] = Field(default=None, ge=0, description="Index of the line being edited.")

    @field_validator("entity", "terms", "sales_rep", mode="before")
    @classmethod
    def _normalize_ids(cls, value):
        return normalize_identifier(value)

    @model_validator(mode="after")
    def _current_line_in_range(self) -> "OrderModel":
        if self.current_line is not None and self.current_line >= len(self.lines):
            raise ValueError(f"current_line {self.current_line} is out of range for {len(self.lines)} lines")
        return self

    def to_draft(self) -> OrderDraft:
        return OrderDraft(
            entity=self.entity,
            ship_date=self.ship_date,
            ship_address=self.ship_address,
            shipping_distance=self.shipping_distance,
            distance_notes=self.distance_notes,
            terms=self.terms,
            materials_order=self.materials_order,
            sales_rep=self.sales_rep,
            lines=[OrderLine(**line.model_dump()) for line in self.lines],
            current_line=self.current_line,
        )

    @classmethod
    def from_draft(cls, draft: OrderDraft) -> "OrderModel":
        return cls(
            entity=draft.entity,
            ship_date=draft.ship_date,
            ship_address=draft.ship_address,
            shipping_distance=draft.shipping_distance,
            distance_notes=draft.distance_notes,
            terms=draft.terms,
            materials_order=draft.materials_order,
            sales_rep=draft.sales_rep,
            lines=[
                OrderLineModel(
                    item_text=line.item_text,
                    item_id=line.item_id,
                    quantity=line.quantity,
                    quantity_billed=line.quantity_billed,
                    ship_date=line.ship_date,
                    line_id=line.line_id,
                    location_id=line.location_id,
                )
                for line in draft.lines
            ],
            current_line=draft.current_line,
        )


class FailureModel(BaseModel):
    kind: str
    operation: str
    message: str


class SessionRequest(BaseModel):
    role: Optional[Union[int, str]] = Field(default=None, description="Role id of the user editing the order.")
    user_id: Optional[Union[int, str]] = None
    is_sales_rep: bool = False


class SessionResponse(BaseModel):
    session_id: str
    role: Optional[str]
    enforced: bool


class OrderEventRequest(BaseModel):
    event: Literal["field_changed", "line_commit", "save"]
    field_id: Optional[str] = Field(default=None, description="Changed field, required for field_changed.")
    sublist_id: Optional[str] = Field(default=None, description="'item' for line fields.")
    order: OrderModel

    @model_validator(mode="after")
    def _field_required(self) -> "OrderEventRequest":
        if self.event == "field_changed" and not self.field_id:
            raise ValueError("field_id is required for field_changed events")
        return self


class OrderEventResponse(BaseModel):
    order: OrderModel
    messages: List[str]
    failures: List[FailureModel]
    valid: bool = True
