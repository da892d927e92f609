"""Message text for confirmations, reminders and admin copies."""
from slotbook.core.constants import CHANNEL_EMAIL, CHANNEL_LEAD_MINUTES, CHANNEL_PUSH, CHANNEL_SMS
from slotbook.services.notifications.types import NotificationOptions
from slotbook.services.store.types import ReservationRecord

SIGNATURE = "Call Support Team"

# type -> (subject, sentence); reservation id is appended
_ADMIN_COPY = {
    "create": ("New Reservation Created", "A new reservation has been created."),
    "update": ("Reservation Updated", "A reservation has been updated."),
    "cancel": ("Reservation Cancelled", "A reservation has been cancelled."),
    "reject": ("Reservation Rejected", "A reservation has been rejected."),
}


def _metadata(r: ReservationRecord) -> dict:
    return {"reservation": r.to_response()}


def created_email(r: ReservationRecord) -> NotificationOptions:
    return NotificationOptions(
        type="create",
        to=r.email,
        subject="Reservation Created",
        text=f"Your reservation has been created for {r.start_time}. Reservation ID: {r.id}",
        metadata=_metadata(r),
    )


def updated_email(r: ReservationRecord) -> NotificationOptions:
    return NotificationOptions(
        type="update",
        to=r.email,
        subject="Reservation Updated",
        text=f"Your reservation has been updated. New start time: {r.start_time}",
        metadata=_metadata(r),
    )


def cancelled_email(r: ReservationRecord, reason: str) -> NotificationOptions:
    return NotificationOptions(
        type="cancel",
        to=r.email,
        subject="Reservation Cancelled",
        text=f"Your reservation has been cancelled. Reason: {reason}",
        metadata=_metadata(r),
    )


def rejected_email(r: ReservationRecord, reason: str) -> NotificationOptions:
    return NotificationOptions(
        type="reject",
        to=r.email,
        subject="Reservation Rejected",
        text=f"We're sorry, but your reservation for {r.start_time} has been rejected. Reason: {reason}",
        metadata=_metadata(r),
    )


def reminder(channel: str, r: ReservationRecord) -> NotificationOptions:
    """Reminder payload for one channel, addressed to that channel's contact."""
    lead = CHANNEL_LEAD_MINUTES[channel]
    if channel == CHANNEL_EMAIL:
        text = (
            "Dear Customer,\n\n"
            f"This is a reminder that you have a scheduled call in {lead} minutes.\n\n"
            "Reservation Details:\n"
            f"- Time: {r.start_time}\n"
            f"- Date: {r.reservation_date.isoformat()}\n\n"
            "Please be ready for the call.\n\n"
            f"Best regards,\n{SIGNATURE}"
        )
        return NotificationOptions(
            type="email",
            to=r.email,
            subject="Upcoming Call Reservation Reminder",
            text=text,
            metadata={"reservation_id": r.id},
        )
    if channel == CHANNEL_SMS:
        text = f"Reminder: Your call is scheduled in {lead} minutes at {r.start_time}. Be ready! - {SIGNATURE}"
    elif channel == CHANNEL_PUSH:
        text = f"Your call starts in {lead} minute{'s' if lead != 1 else ''} at {r.start_time}!"
    else:
        raise ValueError(f"Unknown channel {channel!r}")
    return NotificationOptions(
        type=channel,
        to=r.contact_for(channel),
        text=text,
        metadata={"reservation_id": r.id},
    )


def admin_copy(options: NotificationOptions) -> tuple[str, str]:
    """(subject, text) for the admin copy of a confirmation email."""
    known = _ADMIN_COPY.get(options.type)
    if not known:
        return options.subject, options.content
    reservation = options.metadata.get("reservation") or {}
    subject, sentence = known
    return subject, f"{sentence} Reservation ID: {reservation.get('id')}"
