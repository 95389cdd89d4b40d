"""Shipping distance endpoint."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...schemas.orders import FailureModel
from ...schemas.policy import DistanceRequest, DistanceResponse
from ...services.distance import DistanceResolver

router = APIRouter(prefix="/distance", tags=["distance"])


def get_resolver() -> DistanceResolver:
    return DistanceResolver()


@router.post("", response_model=DistanceResponse, status_code=status.HTTP_200_OK)
def resolve_distance(payload: DistanceRequest) -> DistanceResponse:
    if not payload.address.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Address must not be empty")
    try:
        result = get_resolver().resolve(payload.address)
    except Exception as exc:
        logging.exception("Distance resolution failed")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Distance resolution failed: {exc}",
        ) from exc
    return DistanceResponse(
        miles=result.miles,
        resolved_address=result.resolved_address,
        address_ok=result.address_ok,
        note=result.note,
        failure=FailureModel(**result.failure.as_dict()) if result.failure else None,
    )
