"""Protocol for the reservation store. Lifecycle and dispatcher only talk to this."""
from datetime import date, datetime
from typing import Any, Protocol

from slotbook.services.store.types import ReservationRecord


class ReservationStore(Protocol):
    """All mutation is by id; every method returns fresh values, never live rows."""

    def find_by_id(self, reservation_id: str) -> ReservationRecord | None:
        ...

    def find_all(self) -> list[ReservationRecord]:
        """All reservations, newest created first."""
        ...

    def find_active_by_slot(
        self,
        start_time: str,
        day: date,
        exclude_id: str | None = None,
    ) -> ReservationRecord | None:
        """Non-cancelled reservation at (start_time, day), ignoring exclude_id."""
        ...

    def find_upcoming(
        self,
        now: datetime,
        lookahead_minutes: int,
        lookback_minutes: int,
    ) -> list[ReservationRecord]:
        """Queued reservations whose slot instant is in [now - lookback, now + lookahead]."""
        ...

    def create(self, fields: dict[str, Any]) -> ReservationRecord:
        """Persist a new reservation. Raises SlotConflict on an active-slot collision."""
        ...

    def transition(
        self,
        reservation_id: str,
        from_status: str,
        fields: dict[str, Any],
    ) -> ReservationRecord | None:
        """
        Apply fields only if the row is still in from_status, atomically.
        None when no row matched (missing id or status already changed).
        Raises SlotConflict on an active-slot collision.
        """
        ...

    def mark_sent(self, reservation_id: str, channel: str) -> None:
        """Set the channel's sent flag. Never clears it."""
        ...
