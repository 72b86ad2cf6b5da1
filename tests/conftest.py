import os
import re
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from decimal import Decimal

import pytest
import pytest_asyncio
from dotenv import load_dotenv
from sqlalchemy import text
from sqlalchemy.engine import URL, make_url
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.application import BookingLifecycle, SlotResolver
from coaching_api.domain.entities import AvailabilityDay, Booking, Notification
from coaching_api.domain.enums import BookingStatus, PaymentStatus
from coaching_api.domain.exceptions import (
    ConcurrentModificationError,
    NotFoundError,
    SlotConflictError,
)
from coaching_api.domain.ports import DomainEvent, PaymentOrder, RefundReceipt
from coaching_api.domain.value_objects import USER_ROLE

# Ensure model metadata is registered before creating/dropping tables.
from coaching_api.infrastructure.db.models import (  # noqa: F401
    AvailabilityDayModel,
    BookingModel,
    BookingOutboxEventModel,
    BookingSlotLockModel,
    BookingStatusHistoryModel,
    NotificationModel,
    UserProfileModel,
)

load_dotenv()

LIFECYCLE_NOW = datetime(2025, 3, 1, 9, 0, tzinfo=UTC)

TABLES_TRUNCATE_ORDER = [
    "notifications",
    "booking_outbox_events",
    "booking_status_history",
    "booking_slot_locks",
    "bookings",
    "availability_days",
    "user_profiles",
]


class InMemoryBookingRepository:
    """Dict-backed booking store with the same slot-lock and version rules as MySQL."""

    def __init__(self) -> None:
        self.bookings: dict[str, Booking] = {}
        self.slot_locks: dict[tuple[str, str], str] = {}
        self.events: list[DomainEvent] = []
        self.writes = 0

    def add(self, booking: Booking) -> Booking:
        self.bookings[booking.booking_id] = booking.copy()
        if booking.is_active:
            self.slot_locks[(booking.date, booking.time)] = booking.booking_id
        return booking

    async def get(self, booking_id: str) -> Booking | None:
        booking = self.bookings.get(booking_id)
        return booking.copy() if booking is not None else None

    async def list_active_for_date(self, date: str) -> list[Booking]:
        return [
            booking.copy()
            for booking in self.bookings.values()
            if booking.date == date and booking.is_active
        ]

    async def list_for_user(self, user_id: str) -> list[Booking]:
        return [booking.copy() for booking in self.bookings.values() if booking.user_id == user_id]

    async def list_all(self) -> list[Booking]:
        return [booking.copy() for booking in self.bookings.values()]

    async def create_with_slot_lock(
        self,
        booking: Booking,
        events: Iterable[DomainEvent] = (),
    ) -> Booking:
        key = (booking.date, booking.time)
        if key in self.slot_locks:
            raise SlotConflictError(f"Slot {booking.date} {booking.time} is no longer available")
        self.slot_locks[key] = booking.booking_id
        self.bookings[booking.booking_id] = booking.copy()
        self.events.extend(events)
        self.writes += 1
        return booking.copy()

    async def save_transition(
        self,
        before: Booking,
        after: Booking,
        events: Iterable[DomainEvent] = (),
    ) -> Booking:
        stored = self.bookings.get(before.booking_id)
        if stored is None:
            raise NotFoundError(f"Booking with ID {before.booking_id} not found.")
        if stored.version != before.version:
            raise ConcurrentModificationError("modified concurrently")
        saved = after.copy()
        saved.version = before.version + 1
        if before.is_active and not after.is_active:
            self.slot_locks.pop((after.date, after.time), None)
        self.bookings[saved.booking_id] = saved
        self.events.extend(events)
        self.writes += 1
        return saved.copy()


class InMemoryAvailabilityRepository:
    def __init__(self, days: dict[str, list[str]] | None = None) -> None:
        self.days: dict[str, AvailabilityDay] = {
            date: AvailabilityDay(date=date, time_slots=tuple(slots))
            for date, slots in (days or {}).items()
        }

    async def get_day(self, date: str) -> AvailabilityDay | None:
        return self.days.get(date)

    async def get_range(self, start_date: str, end_date: str) -> list[AvailabilityDay]:
        return [self.days[date] for date in sorted(self.days) if start_date <= date <= end_date]

    async def get_all(self) -> list[AvailabilityDay]:
        return [self.days[date] for date in sorted(self.days)]

    async def save_days(self, days: Iterable[AvailabilityDay]) -> None:
        for day in days:
            self.days[day.date] = day


class InMemoryNotificationRepository:
    def __init__(self, notifications: list[Notification] | None = None) -> None:
        self.notifications = list(notifications or [])

    async def list_for_user(self, user_id: str) -> list[Notification]:
        return [item for item in self.notifications if item.user_id == user_id]

    async def mark_seen(self, user_id: str, notification_id: int) -> bool:
        for item in self.notifications:
            if item.id == notification_id and item.user_id == user_id:
                item.seen = True
                return True
        return False


class InMemoryUserProfileRepository:
    def __init__(self, roles: dict[str, frozenset[str]] | None = None) -> None:
        self.roles = dict(roles or {})
        self.profiles: dict[str, tuple[str, str | None]] = {}

    async def get_roles(self, user_id: str) -> frozenset[str] | None:
        return self.roles.get(user_id)

    async def create_if_missing(self, user_id: str, name: str, email: str | None) -> bool:
        if user_id in self.roles:
            return False
        self.roles[user_id] = frozenset({USER_ROLE})
        self.profiles[user_id] = (name, email)
        return True


class FakePaymentGateway:
    public_key = "rzp_test_public"

    def __init__(self, refund_error: Exception | None = None, already_refunded: bool = False) -> None:
        self.refund_error = refund_error
        self.already_refunded = already_refunded
        self.orders: list[tuple[Decimal, str, str]] = []
        self.refunded_payments: list[str] = []

    async def create_order(self, amount: Decimal, booking_id: str, user_id: str) -> PaymentOrder:
        self.orders.append((amount, booking_id, user_id))
        return PaymentOrder(
            order_id=f"order_{len(self.orders)}",
            amount=amount,
            currency="INR",
            notes={"bookingId": booking_id, "userId": user_id},
        )

    async def refund(self, payment_id: str) -> RefundReceipt:
        self.refunded_payments.append(payment_id)
        if self.refund_error is not None:
            raise self.refund_error
        if self.already_refunded:
            return RefundReceipt(payment_id=payment_id, refund_id=None, already_refunded=True)
        return RefundReceipt(payment_id=payment_id, refund_id=f"rfnd_{payment_id}")


class SpyAuditLogger:
    def __init__(self) -> None:
        self.entries: list[tuple[str, str, str, dict]] = []

    def log_booking_created(self, *, booking_id, actor, context=None) -> None:
        self.entries.append(("BOOKING_CREATED", booking_id, actor, dict(context or {})))

    def log_booking_modified(self, *, booking_id, actor, context=None) -> None:
        self.entries.append(("BOOKING_MODIFIED", booking_id, actor, dict(context or {})))

    def log_payment_tampering(self, *, booking_id, actor, context=None) -> None:
        self.entries.append(("PAYMENT_TAMPERING", booking_id, actor, dict(context or {})))


def build_booking(
    booking_id: str = "b-1",
    *,
    user_id: str = "user-1",
    date: str = "2025-03-10",
    time: str = "10:00",
    status: BookingStatus = BookingStatus.PENDING_PAYMENT,
    payment_status: PaymentStatus = PaymentStatus.PENDING,
    **fields,
) -> Booking:
    return Booking(
        booking_id=booking_id,
        user_id=user_id,
        service_id="career-coaching",
        service_name="Career Coaching",
        date=date,
        time=time,
        status=status,
        payment_status=payment_status,
        created_at=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
        updated_at=datetime(2025, 3, 1, 9, 0, tzinfo=UTC),
        **fields,
    )


@pytest.fixture
def make_booking():
    return build_booking


@pytest.fixture
def booking_repository() -> InMemoryBookingRepository:
    return InMemoryBookingRepository()


@pytest.fixture
def availability_repository() -> InMemoryAvailabilityRepository:
    return InMemoryAvailabilityRepository({"2025-03-10": ["10:00", "11:00"]})


@pytest.fixture
def notification_repository() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def user_profile_repository() -> InMemoryUserProfileRepository:
    return InMemoryUserProfileRepository({"admin-1": frozenset({"admin", "user"})})


@pytest.fixture
def payment_gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def audit_logger() -> SpyAuditLogger:
    return SpyAuditLogger()


@pytest.fixture
def slot_resolver(availability_repository, booking_repository) -> SlotResolver:
    return SlotResolver(availability_repository, booking_repository)


@pytest.fixture
def lifecycle(booking_repository, slot_resolver, audit_logger) -> BookingLifecycle:
    counter = iter(range(1, 10_000))
    return BookingLifecycle(
        booking_repository,
        slot_resolver,
        audit_logger=audit_logger,
        id_factory=lambda: f"booking-{next(counter)}",
        clock=lambda: LIFECYCLE_NOW,
    )


def _load_mysql_test_urls() -> tuple[str, str]:
    raw_test_url = os.getenv("MYSQL_TEST_DATABASE_URL")
    raw_default_url = os.getenv("DATABASE_URL")
    raw_url = raw_test_url or raw_default_url
    if not raw_url:
        pytest.skip("MYSQL_TEST_DATABASE_URL (or DATABASE_URL) is not configured.")

    url = make_url(raw_url)
    if url.get_backend_name() != "mysql":
        pytest.fail("Test database must use MySQL.")

    if raw_test_url:
        if not (url.database and url.database.endswith("_test")):
            pytest.fail("MYSQL_TEST_DATABASE_URL database name must end with '_test'.")
        test_url = url
    else:
        if not url.database:
            pytest.fail("DATABASE_URL must include a database name.")
        database = url.database if url.database.endswith("_test") else f"{url.database}_test"
        test_url = url.set(database=database)

    async_url = test_url.render_as_string(hide_password=False)
    sync_drivername = (
        "mysql+pymysql"
        if test_url.drivername == "mysql"
        else test_url.drivername.replace("aiomysql", "pymysql")
    )
    sync_url = test_url.set(drivername=sync_drivername).render_as_string(hide_password=False)
    return async_url, sync_url


def _server_url(sync_url: str) -> str:
    parsed_url = make_url(sync_url)
    return URL.create(
        drivername=parsed_url.drivername,
        username=parsed_url.username,
        password=parsed_url.password,
        host=parsed_url.host,
        port=parsed_url.port,
        database=None,
        query=parsed_url.query,
    ).render_as_string(hide_password=False)


def _checked_database_name(sync_url: str) -> str:
    database = make_url(sync_url).database
    if not database or not re.fullmatch(r"[A-Za-z0-9_]+", database):
        pytest.fail("Test database name is missing or contains unsupported characters.")
    return database


def _ensure_test_database_exists(sync_url: str) -> None:
    database = _checked_database_name(sync_url)
    engine = create_engine(_server_url(sync_url), pool_pre_ping=True)
    try:
        with engine.begin() as connection:
            connection.execute(
                text(
                    f"CREATE DATABASE IF NOT EXISTS `{database}` "
                    "CHARACTER SET utf8mb4 COLLATE utf8mb4_0900_ai_ci"
                )
            )
    finally:
        engine.dispose()


def _drop_database(sync_url: str) -> None:
    database = _checked_database_name(sync_url)
    engine = create_engine(_server_url(sync_url), pool_pre_ping=True)
    try:
        with engine.begin() as conn:
            conn.execute(text(f"DROP DATABASE IF EXISTS `{database}`"))
    finally:
        engine.dispose()


@pytest.fixture(scope="session")
def mysql_test_urls() -> tuple[str, str]:
    base_async_url, base_sync_url = _load_mysql_test_urls()
    base_async = make_url(base_async_url)
    base_sync = make_url(base_sync_url)

    suffix = uuid.uuid4().hex[:8]
    isolated_db = f"{base_sync.database}_{suffix}"[:64]

    async_url = base_async.set(database=isolated_db).render_as_string(hide_password=False)
    sync_url = base_sync.set(database=isolated_db).render_as_string(hide_password=False)

    _ensure_test_database_exists(sync_url)
    bootstrap_engine = create_engine(sync_url, pool_pre_ping=True)
    try:
        SQLModel.metadata.create_all(bootstrap_engine, checkfirst=False)
    finally:
        bootstrap_engine.dispose()

    try:
        yield async_url, sync_url
    finally:
        _drop_database(sync_url)


@pytest_asyncio.fixture(scope="function")
async def mysql_async_session_factory(
    mysql_test_urls: tuple[str, str],
) -> async_sessionmaker[AsyncSession]:
    async_url, _ = mysql_test_urls
    engine = create_async_engine(async_url, poolclass=NullPool, pool_pre_ping=False)
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SET FOREIGN_KEY_CHECKS = 0"))
            for table in TABLES_TRUNCATE_ORDER:
                await conn.execute(text(f"TRUNCATE TABLE `{table}`"))
            await conn.execute(text("SET FOREIGN_KEY_CHECKS = 1"))
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()
