"""Distance and verdict schemas."""

from __future__ import annotations

from datetime import date
from typing import Optional, Union

from pydantic import BaseModel, Field

from .orders import FailureModel


class DistanceRequest(BaseModel):
    address: str = Field(..., description="Ship-to address to measure from the warehouse.")


class DistanceResponse(BaseModel):
    miles: Optional[float]
    resolved_address: Optional[str] = None
    address_ok: bool = False
    note: Optional[str] = None
    failure: Optional[FailureModel] = None


class VerdictRequest(BaseModel):
    ship_date: date
    distance_miles: Optional[float] = Field(default=None, ge=0)
    role: Optional[Union[int, str]] = None


class VerdictResponse(BaseModel):
    admissible: bool
    enforce: bool
    clear: bool
    message: Optional[str]
    rule: str
