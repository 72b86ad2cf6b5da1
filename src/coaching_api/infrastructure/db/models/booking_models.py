from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy import Enum as SAEnum
from sqlmodel import Column, Field, SQLModel

from coaching_api.domain.enums import BookingStatus, NotificationKind, PaymentStatus


def _timestamp_column(*, index: bool = False) -> Column:
    return Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        index=index,
    )


class BookingModel(SQLModel, table=True):
    __tablename__ = "bookings"

    id: int | None = Field(default=None, primary_key=True)
    booking_id: str = Field(sa_column=Column(String(64), nullable=False, unique=True, index=True))
    user_id: str = Field(sa_column=Column(String(128), nullable=False, index=True))
    service_id: str = Field(sa_column=Column(String(64), nullable=False))
    service_name: str = Field(sa_column=Column(String(200), nullable=False))
    slot_date: str = Field(sa_column=Column(String(10), nullable=False, index=True))
    slot_time: str = Field(sa_column=Column(String(40), nullable=False))
    status: BookingStatus = Field(
        sa_column=Column(
            SAEnum(BookingStatus, name="booking_status", native_enum=False),
            nullable=False,
            index=True,
        )
    )
    payment_status: PaymentStatus = Field(
        sa_column=Column(
            SAEnum(PaymentStatus, name="payment_status", native_enum=False),
            nullable=False,
        )
    )
    transaction_id: str | None = Field(default=None, sa_column=Column(String(128), nullable=True))
    meeting_link: str | None = Field(default=None, sa_column=Column(String(500), nullable=True))
    report_url: str | None = Field(default=None, sa_column=Column(String(500), nullable=True))
    refund_requested: bool = Field(default=False)
    refund_reason: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    user_feedback: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    detailed_feedback: list[dict[str, Any]] | None = Field(default=None, sa_column=Column(JSON))
    version: int = Field(default=0, nullable=False)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(index=True),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(),
    )


class BookingSlotLockModel(SQLModel, table=True):
    """One row per occupied (date, time); its unique key serializes reservations."""

    __tablename__ = "booking_slot_locks"
    __table_args__ = (UniqueConstraint("slot_date", "slot_time", name="uq_booking_slot_locks_slot"),)

    id: int | None = Field(default=None, primary_key=True)
    slot_date: str = Field(sa_column=Column(String(10), nullable=False))
    slot_time: str = Field(sa_column=Column(String(40), nullable=False))
    booking_id: str = Field(
        sa_column=Column(
            String(64),
            ForeignKey("bookings.booking_id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(),
    )


class BookingStatusHistoryModel(SQLModel, table=True):
    __tablename__ = "booking_status_history"

    id: int | None = Field(default=None, primary_key=True)
    booking_id: str = Field(
        sa_column=Column(
            String(64),
            ForeignKey("bookings.booking_id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
    )
    from_status: BookingStatus = Field(
        sa_column=Column(
            SAEnum(BookingStatus, name="booking_status", native_enum=False),
            nullable=False,
        )
    )
    to_status: BookingStatus = Field(
        sa_column=Column(
            SAEnum(BookingStatus, name="booking_status", native_enum=False),
            nullable=False,
        )
    )
    changed_by: str | None = Field(default=None, sa_column=Column(String(128), nullable=True))
    changed_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(),
    )


class AvailabilityDayModel(SQLModel, table=True):
    __tablename__ = "availability_days"

    id: int | None = Field(default=None, primary_key=True)
    slot_date: str = Field(sa_column=Column(String(10), nullable=False, unique=True, index=True))
    time_slots: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(),
    )


class UserProfileModel(SQLModel, table=True):
    __tablename__ = "user_profiles"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(sa_column=Column(String(128), nullable=False, unique=True, index=True))
    name: str = Field(sa_column=Column(String(120), nullable=False))
    email: str | None = Field(default=None, sa_column=Column(String(190), nullable=True))
    roles: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(),
    )


class NotificationModel(SQLModel, table=True):
    __tablename__ = "notifications"
    __table_args__ = (
        UniqueConstraint("source_event_id", "kind", name="uq_notifications_source_event_kind"),
    )

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(sa_column=Column(String(128), nullable=False, index=True))
    kind: NotificationKind = Field(
        sa_column=Column(
            SAEnum(NotificationKind, name="notification_kind", native_enum=False),
            nullable=False,
        )
    )
    message: str = Field(sa_column=Column(String(255), nullable=False))
    href: str = Field(sa_column=Column(String(255), nullable=False))
    seen: bool = Field(default=False)
    source_event_id: int | None = Field(default=None, nullable=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(index=True),
    )


class BookingOutboxEventModel(SQLModel, table=True):
    __tablename__ = "booking_outbox_events"

    id: int | None = Field(default=None, primary_key=True)
    aggregate_id: str = Field(sa_column=Column(String(64), nullable=False, index=True))
    event_type: str = Field(sa_column=Column(String(80), nullable=False))
    payload: dict[str, Any] | None = Field(default=None, sa_column=Column(JSON))
    status: str = Field(default="PENDING", sa_column=Column(String(20), nullable=False, index=True))
    attempts: int = Field(default=0, nullable=False)
    last_error: str | None = Field(default=None, sa_column=Column(Text, nullable=True))
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC),
        sa_column=_timestamp_column(index=True),
    )
    processed_at: datetime | None = Field(default=None, sa_column=Column(DateTime(timezone=True)))
