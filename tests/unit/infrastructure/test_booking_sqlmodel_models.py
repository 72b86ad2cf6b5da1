from sqlalchemy import UniqueConstraint

from coaching_api.infrastructure.db import build_database_url
from coaching_api.infrastructure.db.models import (
    BookingModel,
    BookingOutboxEventModel,
    BookingSlotLockModel,
    NotificationModel,
)
from coaching_api.shared.config.settings import Settings


def _unique_columns(table) -> set[tuple[str, ...]]:
    return {
        tuple(column.name for column in constraint.columns)
        for constraint in table.constraints
        if isinstance(constraint, UniqueConstraint)
    }


def test_slot_lock_table_is_unique_per_date_and_time() -> None:
    table = BookingSlotLockModel.__table__

    assert ("slot_date", "slot_time") in _unique_columns(table)
    assert table.c.booking_id.unique is True


def test_notifications_are_unique_per_source_event_and_kind() -> None:
    assert ("source_event_id", "kind") in _unique_columns(NotificationModel.__table__)


def test_booking_table_columns() -> None:
    columns = BookingModel.__table__.c

    assert columns.booking_id.unique is True
    assert columns.version.nullable is False
    assert columns.status.type.enums == [
        "PENDING_PAYMENT",
        "PENDING_APPROVAL",
        "ACCEPTED",
        "SCHEDULED",
        "COMPLETED",
        "CANCELLED",
    ]


def test_outbox_event_defaults_to_pending() -> None:
    event = BookingOutboxEventModel(aggregate_id="b-1", event_type="BOOKING_UPDATED", payload={})

    assert event.status == "PENDING"
    assert event.attempts == 0


def test_database_url_built_from_mysql_settings() -> None:
    app_settings = Settings(
        DATABASE_URL="",
        MYSQL_USER="coach",
        MYSQL_PASSWORD="p@ss word",
        MYSQL_HOST="db",
        MYSQL_PORT=3307,
        MYSQL_DATABASE="coaching",
    )

    assert build_database_url(app_settings) == "mysql+aiomysql://coach:p%40ss+word@db:3307/coaching"
