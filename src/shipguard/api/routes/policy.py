"""Stateless distance/day-of-week verdicts."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...data.calendar_repository import get_calendar_source
from ...schemas.policy import VerdictRequest, VerdictResponse
from ...services.calendars.cache import BlackoutCalendarCache
from ...services.policy import ShipDatePolicyEngine

router = APIRouter(prefix="/policy", tags=["policy"])


def get_engine() -> ShipDatePolicyEngine:
    # The distance rule never reads a calendar, so the cache stays unloaded.
    return ShipDatePolicyEngine(BlackoutCalendarCache(get_calendar_source()))


@router.post("/evaluate", response_model=VerdictResponse, status_code=status.HTTP_200_OK)
def evaluate(payload: VerdictRequest) -> VerdictResponse:
    verdict = get_engine().evaluate(payload.ship_date, payload.distance_miles, payload.role)
    return VerdictResponse(
        admissible=verdict.admissible,
        enforce=verdict.enforce,
        clear=verdict.clear,
        message=verdict.message,
        rule=verdict.rule.value,
    )
