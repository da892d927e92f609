"""One 15-minute call slot. Never deleted; cancel/reject/complete are status changes."""
from sqlalchemy import Boolean, Column, Date, DateTime, Index, String, text
from sqlalchemy.sql import func

from slotbook.db.base import Base

# status != 'cancelled' rows must be unique per (start_time, reservation_date)
_ACTIVE_SLOT = text("status != 'cancelled'")


class Reservation(Base):
    __tablename__ = "reservations"
    __table_args__ = (
        Index(
            "uq_reservations_active_slot",
            "start_time",
            "reservation_date",
            unique=True,
            postgresql_where=_ACTIVE_SLOT,
            sqlite_where=_ACTIVE_SLOT,
        ),
    )

    id = Column(String(36), primary_key=True)
    start_time = Column(String(5), nullable=False, index=True)  # HH:mm
    end_time = Column(String(5), nullable=False)
    reservation_date = Column(Date, nullable=False, index=True)
    email = Column(String(255), nullable=False, default="")
    phone = Column(String(32), nullable=False, default="")
    push_notification_key = Column(String(256), nullable=False, default="")
    status = Column(String(16), nullable=False, default="queued")  # queued | successful | cancelled | rejected

    receive_email = Column(Boolean, nullable=False, default=False)
    receive_sms_notification = Column(Boolean, nullable=False, default=False)
    receive_push_notification = Column(Boolean, nullable=False, default=False)

    email_sent = Column(Boolean, nullable=False, default=False)
    sms_sent = Column(Boolean, nullable=False, default=False)
    push_notification_sent = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
