"""
Centralized error handling for reservation operations.
Typed errors raised by the lifecycle, plus a helper so routes stay thin.
"""
from __future__ import annotations

from fastapi import HTTPException

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_INTERNAL_ERROR = 500

MSG_INVALID_FORMAT = "Start time must be in HH:mm format"
MSG_INVALID_MINUTES = "Minutes must be 00, 15, 30, or 45"
MSG_NOT_FOUND = "Reservation not found"
MSG_SLOT_TAKEN = "This time slot is already reserved"


class ReservationError(Exception):
    """Base for every error a reservation operation reports to its caller."""

    status_code = STATUS_INTERNAL_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidFormat(ReservationError):
    status_code = STATUS_BAD_REQUEST


class InvalidMinuteAlignment(InvalidFormat):
    """Start time parsed but minutes are not on a quarter hour."""


class NotFound(ReservationError):
    status_code = STATUS_NOT_FOUND

    def __init__(self, message: str = MSG_NOT_FOUND):
        super().__init__(message)


class InvalidState(ReservationError):
    status_code = STATUS_BAD_REQUEST


class SlotConflict(ReservationError):
    status_code = STATUS_CONFLICT

    def __init__(self, message: str = MSG_SLOT_TAKEN):
        super().__init__(message)


def reservation_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from a reservation operation into an HTTPException.
    Known errors keep their status code and message; anything else is a 500.
    """
    if isinstance(exc, ReservationError):
        return HTTPException(status_code=exc.status_code, detail=exc.message)
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
