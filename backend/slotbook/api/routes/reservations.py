"""
Reservations API: create, read, update, cancel and reject 15-minute call slots.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from slotbook.core.errors import ReservationError, reservation_error_to_http
from slotbook.deps import get_reservation_service
from slotbook.services.reservation_service import CreateReservationRequest, ReservationService
from slotbook.services.store.types import ReservationPatch

router = APIRouter()
logger = logging.getLogger(__name__)


class UpdateReservationBody(BaseModel):
    startTime: str | None = Field(None, description="New start time, HH:mm on a quarter hour")
    email: str | None = None
    phone: str | None = None
    pushNotificationKey: str | None = None
    receiveEmail: bool | None = None
    receiveSmsNotification: bool | None = None
    receivePushNotification: bool | None = None

    def to_patch(self) -> ReservationPatch:
        return ReservationPatch(
            start_time=self.startTime,
            email=self.email,
            phone=self.phone,
            push_notification_key=self.pushNotificationKey,
            receive_email=self.receiveEmail,
            receive_sms_notification=self.receiveSmsNotification,
            receive_push_notification=self.receivePushNotification,
        )


class CancelReservationBody(BaseModel):
    reason: str | None = None


class RejectReservationBody(BaseModel):
    reason: str = Field(..., min_length=1)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_reservation(
    body: CreateReservationRequest,
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Book today's slot at body.startTime. Always answers with a tagged result:
    {status: success, record} or {status: error, message} with the error's status code.
    """
    result = service.create(body)
    if not result.ok:
        return JSONResponse(status_code=result.status_code, content=result.to_response())
    return result.to_response()


@router.get("")
def list_reservations(service: ReservationService = Depends(get_reservation_service)) -> dict[str, Any]:
    """All reservations, newest first."""
    return {"records": [r.to_response() for r in service.list_all()]}


@router.get("/{reservation_id}")
def get_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, Any]:
    try:
        return service.get(reservation_id).to_response()
    except ReservationError as e:
        raise reservation_error_to_http(e) from e


@router.put("/{reservation_id}")
def update_reservation(
    reservation_id: str,
    body: UpdateReservationBody,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, Any]:
    try:
        return service.update(reservation_id, body.to_patch()).to_response()
    except ReservationError as e:
        raise reservation_error_to_http(e) from e


@router.post("/{reservation_id}/cancel")
def cancel_reservation(
    reservation_id: str,
    body: CancelReservationBody | None = None,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, Any]:
    try:
        return service.cancel(reservation_id, body.reason if body else None).to_response()
    except ReservationError as e:
        raise reservation_error_to_http(e) from e


@router.post("/{reservation_id}/reject")
def reject_reservation(
    reservation_id: str,
    body: RejectReservationBody,
    service: ReservationService = Depends(get_reservation_service),
) -> dict[str, Any]:
    """Admin action; reason is required."""
    try:
        return service.reject(reservation_id, body.reason).to_response()
    except ReservationError as e:
        raise reservation_error_to_http(e) from e
