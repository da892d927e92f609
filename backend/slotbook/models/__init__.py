from slotbook.models.reservation import Reservation

__all__ = ["Reservation"]
