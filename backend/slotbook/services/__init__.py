from slotbook.services.reminder_dispatcher import ReminderDispatcher, TickSummary
from slotbook.services.reservation_service import (
    CreateReservationRequest,
    CreateReservationResult,
    ReservationService,
)

__all__ = [
    "ReminderDispatcher",
    "TickSummary",
    "CreateReservationRequest",
    "CreateReservationResult",
    "ReservationService",
]
