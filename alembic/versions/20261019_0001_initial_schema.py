"""initial schema

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

booking_status = sa.Enum(
    "PENDING_PAYMENT",
    "PENDING_APPROVAL",
    "ACCEPTED",
    "SCHEDULED",
    "COMPLETED",
    "CANCELLED",
    name="booking_status",
    native_enum=False,
)
payment_status = sa.Enum(
    "UNPAID",
    "PENDING",
    "PAID",
    "REFUNDED",
    name="payment_status",
    native_enum=False,
)
notification_kind = sa.Enum(
    "SESSION_SCHEDULED",
    "SESSION_CANCELLED",
    "FEEDBACK_AVAILABLE",
    "REPORT_AVAILABLE",
    "ADMIN_REPLIED",
    name="notification_kind",
    native_enum=False,
)


def _created_at(name: str = "created_at") -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "bookings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.String(length=64), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("service_id", sa.String(length=64), nullable=False),
        sa.Column("service_name", sa.String(length=200), nullable=False),
        sa.Column("slot_date", sa.String(length=10), nullable=False),
        sa.Column("slot_time", sa.String(length=40), nullable=False),
        sa.Column("status", booking_status, nullable=False),
        sa.Column("payment_status", payment_status, nullable=False),
        sa.Column("transaction_id", sa.String(length=128), nullable=True),
        sa.Column("meeting_link", sa.String(length=500), nullable=True),
        sa.Column("report_url", sa.String(length=500), nullable=True),
        sa.Column("refund_requested", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("refund_reason", sa.Text(), nullable=True),
        sa.Column("user_feedback", sa.Text(), nullable=True),
        sa.Column("detailed_feedback", sa.JSON(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        _created_at(),
        _created_at("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_bookings_booking_id", "bookings", ["booking_id"], unique=True)
    op.create_index("ix_bookings_user_id", "bookings", ["user_id"], unique=False)
    op.create_index("ix_bookings_slot_date", "bookings", ["slot_date"], unique=False)
    op.create_index("ix_bookings_status", "bookings", ["status"], unique=False)
    op.create_index("ix_bookings_created_at", "bookings", ["created_at"], unique=False)

    op.create_table(
        "booking_slot_locks",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slot_date", sa.String(length=10), nullable=False),
        sa.Column("slot_time", sa.String(length=40), nullable=False),
        sa.Column("booking_id", sa.String(length=64), nullable=False),
        _created_at(),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.booking_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("booking_id"),
        sa.UniqueConstraint("slot_date", "slot_time", name="uq_booking_slot_locks_slot"),
    )

    op.create_table(
        "booking_status_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("booking_id", sa.String(length=64), nullable=False),
        sa.Column("from_status", booking_status, nullable=False),
        sa.Column("to_status", booking_status, nullable=False),
        sa.Column("changed_by", sa.String(length=128), nullable=True),
        _created_at("changed_at"),
        sa.ForeignKeyConstraint(["booking_id"], ["bookings.booking_id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_booking_status_history_booking_id",
        "booking_status_history",
        ["booking_id"],
        unique=False,
    )

    op.create_table(
        "availability_days",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("slot_date", sa.String(length=10), nullable=False),
        sa.Column("time_slots", sa.JSON(), nullable=False),
        _created_at("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_availability_days_slot_date", "availability_days", ["slot_date"], unique=True)

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=190), nullable=True),
        sa.Column("roles", sa.JSON(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_profiles_user_id", "user_profiles", ["user_id"], unique=True)

    op.create_table(
        "notifications",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("kind", notification_kind, nullable=False),
        sa.Column("message", sa.String(length=255), nullable=False),
        sa.Column("href", sa.String(length=255), nullable=False),
        sa.Column("seen", sa.Boolean(), nullable=False, server_default=sa.text("0")),
        sa.Column("source_event_id", sa.Integer(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("source_event_id", "kind", name="uq_notifications_source_event_kind"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"], unique=False)
    op.create_index("ix_notifications_created_at", "notifications", ["created_at"], unique=False)

    op.create_table(
        "booking_outbox_events",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("aggregate_id", sa.String(length=64), nullable=False),
        sa.Column("event_type", sa.String(length=80), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("last_error", sa.Text(), nullable=True),
        _created_at(),
        sa.Column("processed_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_booking_outbox_events_aggregate_id",
        "booking_outbox_events",
        ["aggregate_id"],
        unique=False,
    )
    op.create_index("ix_booking_outbox_events_status", "booking_outbox_events", ["status"], unique=False)
    op.create_index(
        "ix_booking_outbox_events_created_at",
        "booking_outbox_events",
        ["created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_booking_outbox_events_created_at", table_name="booking_outbox_events")
    op.drop_index("ix_booking_outbox_events_status", table_name="booking_outbox_events")
    op.drop_index("ix_booking_outbox_events_aggregate_id", table_name="booking_outbox_events")
    op.drop_table("booking_outbox_events")

    op.drop_index("ix_notifications_created_at", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")

    op.drop_index("ix_user_profiles_user_id", table_name="user_profiles")
    op.drop_table("user_profiles")

    op.drop_index("ix_availability_days_slot_date", table_name="availability_days")
    op.drop_table("availability_days")

    op.drop_index("ix_booking_status_history_booking_id", table_name="booking_status_history")
    op.drop_table("booking_status_history")

    op.drop_table("booking_slot_locks")

    op.drop_index("ix_bookings_created_at", table_name="bookings")
    op.drop_index("ix_bookings_status", table_name="bookings")
    op.drop_index("ix_bookings_slot_date", table_name="bookings")
    op.drop_index("ix_bookings_user_id", table_name="bookings")
    op.drop_index("ix_bookings_booking_id", table_name="bookings")
    op.drop_table("bookings")
