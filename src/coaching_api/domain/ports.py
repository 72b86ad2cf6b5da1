from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from coaching_api.domain.entities import AvailabilityDay, Booking, Notification


@dataclass(slots=True, frozen=True)
class PaymentOrder:
    order_id: str
    amount: Decimal
    currency: str
    notes: dict[str, str]


@dataclass(slots=True, frozen=True)
class RefundReceipt:
    payment_id: str
    refund_id: str | None
    already_refunded: bool = False
    payload: dict[str, Any] | None = None


@dataclass(slots=True, frozen=True)
class DomainEvent:
    event_type: str
    aggregate_id: str
    payload: dict[str, Any] | None = None


class BookingRepository(Protocol):
    async def get(self, booking_id: str) -> Booking | None: ...

    async def list_active_for_date(self, date: str) -> list[Booking]: ...

    async def list_for_user(self, user_id: str) -> list[Booking]: ...

    async def list_all(self) -> list[Booking]: ...

    async def create_with_slot_lock(
        self,
        booking: Booking,
        events: Iterable[DomainEvent] = (),
    ) -> Booking: ...

    async def save_transition(
        self,
        before: Booking,
        after: Booking,
        events: Iterable[DomainEvent] = (),
    ) -> Booking: ...


class AvailabilityRepository(Protocol):
    async def get_day(self, date: str) -> AvailabilityDay | None: ...

    async def get_range(self, start_date: str, end_date: str) -> list[AvailabilityDay]: ...

    async def get_all(self) -> list[AvailabilityDay]: ...

    async def save_days(self, days: Iterable[AvailabilityDay]) -> None: ...


class NotificationRepository(Protocol):
    async def list_for_user(self, user_id: str) -> list[Notification]: ...

    async def mark_seen(self, user_id: str, notification_id: int) -> bool: ...


class UserProfileRepository(Protocol):
    async def get_roles(self, user_id: str) -> frozenset[str] | None: ...

    async def create_if_missing(self, user_id: str, name: str, email: str | None) -> bool: ...


class PaymentGateway(Protocol):
    public_key: str

    async def create_order(self, amount: Decimal, booking_id: str, user_id: str) -> PaymentOrder: ...

    async def refund(self, payment_id: str) -> RefundReceipt: ...


class EventPublisher(Protocol):
    async def publish(self, event: DomainEvent) -> None: ...


class AuditTrail(Protocol):
    def log_booking_created(
        self,
        *,
        booking_id: str,
        actor: str,
        context: Mapping[str, Any] | None = None,
    ) -> None: ...

    def log_booking_modified(
        self,
        *,
        booking_id: str,
        actor: str,
        context: Mapping[str, Any] | None = None,
    ) -> None: ...

    def log_payment_tampering(
        self,
        *,
        booking_id: str,
        actor: str,
        context: Mapping[str, Any] | None = None,
    ) -> None: ...
