"""Create reservations table with the active-slot partial unique index."""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_ACTIVE_SLOT = sa.text("status != 'cancelled'")


def upgrade() -> None:
    op.create_table(
        "reservations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("start_time", sa.String(5), nullable=False),
        sa.Column("end_time", sa.String(5), nullable=False),
        sa.Column("reservation_date", sa.Date(), nullable=False),
        sa.Column("email", sa.String(255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(32), nullable=False, server_default=""),
        sa.Column("push_notification_key", sa.String(256), nullable=False, server_default=""),
        sa.Column("status", sa.String(16), nullable=False, server_default="queued"),
        sa.Column("receive_email", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("receive_sms_notification", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("receive_push_notification", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("sms_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("push_notification_sent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_reservations_start_time", "reservations", ["start_time"])
    op.create_index("ix_reservations_reservation_date", "reservations", ["reservation_date"])
    # Cancelled rows free their slot; every other status holds it
    op.create_index(
        "uq_reservations_active_slot",
        "reservations",
        ["start_time", "reservation_date"],
        unique=True,
        postgresql_where=_ACTIVE_SLOT,
        sqlite_where=_ACTIVE_SLOT,
    )


def downgrade() -> None:
    op.drop_index("uq_reservations_active_slot", table_name="reservations")
    op.drop_index("ix_reservations_reservation_date", table_name="reservations")
    op.drop_index("ix_reservations_start_time", table_name="reservations")
    op.drop_table("reservations")
