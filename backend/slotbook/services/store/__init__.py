from slotbook.services.store.base import ReservationStore
from slotbook.services.store.sql_store import ReservationRepository, open_reservation_store
from slotbook.services.store.types import ReservationPatch, ReservationRecord

__all__ = [
    "ReservationStore",
    "ReservationRepository",
    "open_reservation_store",
    "ReservationPatch",
    "ReservationRecord",
]
