"""Order form editing session endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...models.domain import CallerContext
from ...schemas.orders import (
    FailureModel,
    OrderEventRequest,
    OrderEventResponse,
    OrderModel,
    SessionRequest,
    SessionResponse,
)
from ...services.session import EditingSession, sessions

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_session(session_id: str) -> EditingSession:
    try:
        return sessions.get(session_id)
    except KeyError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.args[0]) from exc


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def open_session(payload: SessionRequest) -> SessionResponse:
    caller = CallerContext(role=payload.role, user_id=payload.user_id, is_sales_rep=payload.is_sales_rep)
    try:
        session = sessions.open(caller)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception("Failed to open editing session")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to open editing session: {exc}",
        ) from exc
    return SessionResponse(
        session_id=session.session_id,
        role=caller.role,
        enforced=session.controller.engine.is_enforced(caller),
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_session(session_id: str) -> None:
    if not sessions.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Editing session '{session_id}' not found")


@router.post("/{session_id}/events", response_model=OrderEventResponse, status_code=status.HTTP_200_OK)
def post_event(session_id: str, payload: OrderEventRequest) -> OrderEventResponse:
    """Run one form event against the submitted order and return the corrected order."""
    session = _get_session(session_id)
    controller = session.controller
    try:
        order = payload.order.to_draft()
        valid = True
        if payload.event == "field_changed":
            controller.field_changed(order, payload.field_id, payload.sublist_id)
        elif payload.event == "line_commit":
            valid = controller.on_line_commit(order)
        else:
            valid = controller.on_save(order)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Order event '{payload.event}' failed for session {session_id}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Order event failed: {exc}",
        ) from exc

    return OrderEventResponse(
        order=OrderModel.from_draft(order),
        messages=session.notifier.drain(),
        failures=[FailureModel(**failure.as_dict()) for failure in session.failures.drain()],
        valid=valid,
    )
