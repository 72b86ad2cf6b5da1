import copy
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta, tzinfo
from typing import Any

from coaching_api.domain.enums import BookingStatus, PaymentStatus
from coaching_api.domain.exceptions import (
    FailedPreconditionError,
    InvalidTransitionError,
    NotRefundableError,
)
from coaching_api.domain.value_objects import BookingSlot

REFUND_REQUEST_CUTOFF = timedelta(hours=2)

# Every (status, payment status) pair a booking may be persisted in.
ALLOWED_STATE_COMBINATIONS: frozenset[tuple[BookingStatus, PaymentStatus]] = frozenset(
    {
        (BookingStatus.PENDING_PAYMENT, PaymentStatus.PENDING),
        (BookingStatus.PENDING_APPROVAL, PaymentStatus.UNPAID),
        (BookingStatus.ACCEPTED, PaymentStatus.PAID),
        (BookingStatus.ACCEPTED, PaymentStatus.UNPAID),
        (BookingStatus.SCHEDULED, PaymentStatus.PAID),
        (BookingStatus.SCHEDULED, PaymentStatus.UNPAID),
        (BookingStatus.COMPLETED, PaymentStatus.PAID),
        (BookingStatus.COMPLETED, PaymentStatus.UNPAID),
        (BookingStatus.CANCELLED, PaymentStatus.PENDING),
        (BookingStatus.CANCELLED, PaymentStatus.UNPAID),
        (BookingStatus.CANCELLED, PaymentStatus.PAID),
        (BookingStatus.CANCELLED, PaymentStatus.REFUNDED),
    }
)


@dataclass(slots=True, frozen=True)
class SkillFeedback:
    """One rated skill inside a coach's detailed session feedback."""

    skill: str
    rating: str
    comments: str | None = None


@dataclass(slots=True, frozen=True)
class BookingStatusChange:
    """Represents one booking status transition with timestamp."""

    from_status: BookingStatus
    to_status: BookingStatus
    changed_at: datetime


@dataclass(slots=True)
class Booking:
    """Booking aggregate root.

    Transition methods mutate the aggregate in place and raise a
    `FailedPreconditionError` subclass when the current state forbids the
    change. Methods return `False` when the call is a no-op.

    Example:
        ```python
        booking = Booking.reserve(...)
        booking.confirm_payment("pay_1")
        booking.schedule("https://meet.example.com/abc")
        ```
    """

    booking_id: str
    user_id: str
    service_id: str
    service_name: str
    date: str
    time: str
    status: BookingStatus
    payment_status: PaymentStatus
    transaction_id: str | None = None
    meeting_link: str | None = None
    report_url: str | None = None
    refund_requested: bool = False
    refund_reason: str | None = None
    user_feedback: str | None = None
    detailed_feedback: list[SkillFeedback] = field(default_factory=list)
    version: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    status_history: list[BookingStatusChange] = field(default_factory=list)

    def __post_init__(self) -> None:
        BookingSlot(date=self.date, time=self.time)
        if not self.booking_id.strip():
            raise ValueError("booking_id must not be empty")
        if not self.user_id.strip():
            raise ValueError("user_id must not be empty")
        if (self.status, self.payment_status) not in ALLOWED_STATE_COMBINATIONS:
            raise ValueError(
                f"Unsupported state combination status={self.status} payment_status={self.payment_status}"
            )

    @classmethod
    def reserve(
        cls,
        *,
        booking_id: str,
        user_id: str,
        service_id: str,
        service_name: str,
        slot: BookingSlot,
        pay_later: bool,
    ) -> "Booking":
        """Create a booking awaiting online payment or administrator approval."""
        if pay_later:
            status, payment_status = BookingStatus.PENDING_APPROVAL, PaymentStatus.UNPAID
        else:
            status, payment_status = BookingStatus.PENDING_PAYMENT, PaymentStatus.PENDING
        return cls(
            booking_id=booking_id,
            user_id=user_id,
            service_id=service_id,
            service_name=service_name,
            date=slot.date,
            time=slot.time,
            status=status,
            payment_status=payment_status,
        )

    @property
    def slot(self) -> BookingSlot:
        return BookingSlot(date=self.date, time=self.time)

    @property
    def is_active(self) -> bool:
        """Return whether the booking still occupies its slot."""
        return self.status != BookingStatus.CANCELLED

    def copy(self) -> "Booking":
        return copy.deepcopy(self)

    def confirm_payment(self, payment_id: str) -> bool:
        """Record a verified payment; re-applying an applied confirmation is a no-op."""
        if self.payment_status == PaymentStatus.PAID:
            return False
        if self.status.is_terminal or self.payment_status == PaymentStatus.REFUNDED:
            raise InvalidTransitionError(
                f"Cannot confirm payment for booking in status {self.status}"
            )
        if not payment_id.strip():
            raise ValueError("payment_id must not be empty")
        self.payment_status = PaymentStatus.PAID
        self.transaction_id = payment_id
        if self.status in (BookingStatus.PENDING_PAYMENT, BookingStatus.PENDING_APPROVAL):
            self._set_status(BookingStatus.ACCEPTED)
        else:
            self._touch()
        return True

    def accept(self) -> bool:
        """Approve a pay-later booking."""
        if self.status == BookingStatus.ACCEPTED:
            return False
        self._transition(allowed_from=(BookingStatus.PENDING_APPROVAL,), target=BookingStatus.ACCEPTED)
        return True

    def schedule(self, meeting_link: str) -> bool:
        """Attach a meeting link and move to `scheduled`."""
        if not meeting_link.strip():
            raise ValueError("meeting_link must not be empty")
        if self.status.is_terminal:
            raise InvalidTransitionError(f"Cannot schedule booking in status {self.status}")
        if self.status == BookingStatus.PENDING_PAYMENT:
            raise InvalidTransitionError("Cannot schedule booking before payment is confirmed")
        if self.status == BookingStatus.SCHEDULED and self.meeting_link == meeting_link:
            return False
        self.meeting_link = meeting_link
        if self.status != BookingStatus.SCHEDULED:
            self._set_status(BookingStatus.SCHEDULED)
        else:
            self._touch()
        return True

    def complete(
        self,
        report_url: str | None = None,
        detailed_feedback: list[SkillFeedback] | None = None,
    ) -> bool:
        """Mark the session as held, optionally attaching the feedback report."""
        self._transition(
            allowed_from=(BookingStatus.SCHEDULED, BookingStatus.ACCEPTED),
            target=BookingStatus.COMPLETED,
        )
        if report_url:
            self.report_url = report_url
        if detailed_feedback:
            self.detailed_feedback = list(detailed_feedback)
        return True

    def attach_report(self, report_url: str) -> bool:
        """Attach or replace the feedback report of a completed session."""
        if not report_url.strip():
            raise ValueError("report_url must not be empty")
        if self.status != BookingStatus.COMPLETED:
            raise InvalidTransitionError("Reports can only be attached to completed bookings")
        if self.report_url == report_url:
            return False
        self.report_url = report_url
        self._touch()
        return True

    def cancel(self) -> bool:
        """Cancel from any non-terminal state, releasing the slot."""
        if self.status == BookingStatus.CANCELLED:
            return False
        if self.status.is_terminal:
            raise InvalidTransitionError(f"Cannot cancel booking in status {self.status}")
        self._set_status(BookingStatus.CANCELLED)
        return True

    def request_refund(
        self,
        reason: str,
        *,
        now: datetime,
        session_timezone: tzinfo = UTC,
    ) -> bool:
        """Flag a paid, upcoming booking for administrator refund review.

        Requests close `REFUND_REQUEST_CUTOFF` before the session starts. A
        slot label that is not a clock time has no known start, so it cannot
        be refunded by request either.
        """
        if not reason.strip():
            raise ValueError("refund reason must not be empty")
        if self.payment_status != PaymentStatus.PAID:
            raise NotRefundableError("Only paid bookings can request a refund")
        if self.status.is_terminal:
            raise InvalidTransitionError(f"Cannot request refund for booking in status {self.status}")
        if self.refund_requested:
            return False
        try:
            starts_at = self.slot.starts_at(session_timezone)
        except ValueError as exc:
            raise NotRefundableError(
                f"Session start for slot '{self.time}' is unknown; refund requests are closed"
            ) from exc
        if starts_at - now <= REFUND_REQUEST_CUTOFF:
            raise NotRefundableError("Refund requests close 2 hours before the session starts")
        self.refund_requested = True
        self.refund_reason = reason
        self._touch()
        return True

    def ensure_refundable(self) -> str:
        """Return the transaction id to refund, or raise `NotRefundableError`."""
        if self.payment_status != PaymentStatus.PAID or not self.transaction_id:
            raise NotRefundableError(
                "Booking is not in a refundable state (not paid or no transaction ID)."
            )
        return self.transaction_id

    def apply_refund(self) -> bool:
        """Record a provider-confirmed refund: cancelled, refunded, request cleared."""
        if self.payment_status == PaymentStatus.REFUNDED:
            return False
        self.ensure_refundable()
        self.payment_status = PaymentStatus.REFUNDED
        self.refund_requested = False
        if self.status != BookingStatus.CANCELLED:
            self._set_status(BookingStatus.CANCELLED)
        else:
            self._touch()
        return True

    def submit_feedback(self, feedback: str) -> bool:
        """Store the client's own feedback on a completed session."""
        if not feedback.strip():
            raise ValueError("feedback must not be empty")
        if self.status != BookingStatus.COMPLETED:
            raise FailedPreconditionError("Feedback can only be submitted for completed sessions")
        if self.user_feedback == feedback:
            return False
        self.user_feedback = feedback
        self._touch()
        return True

    def to_snapshot(self) -> dict[str, Any]:
        """Serialize the persisted fields into a JSON-compatible mapping."""
        return {
            "booking_id": self.booking_id,
            "user_id": self.user_id,
            "service_id": self.service_id,
            "service_name": self.service_name,
            "date": self.date,
            "time": self.time,
            "status": self.status.value,
            "payment_status": self.payment_status.value,
            "transaction_id": self.transaction_id,
            "meeting_link": self.meeting_link,
            "report_url": self.report_url,
            "refund_requested": self.refund_requested,
            "refund_reason": self.refund_reason,
            "user_feedback": self.user_feedback,
            "detailed_feedback": [
                {"skill": item.skill, "rating": item.rating, "comments": item.comments}
                for item in self.detailed_feedback
            ],
            "version": self.version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict[str, Any]) -> "Booking":
        return cls(
            booking_id=snapshot["booking_id"],
            user_id=snapshot["user_id"],
            service_id=snapshot["service_id"],
            service_name=snapshot["service_name"],
            date=snapshot["date"],
            time=snapshot["time"],
            status=BookingStatus(snapshot["status"]),
            payment_status=PaymentStatus(snapshot["payment_status"]),
            transaction_id=snapshot.get("transaction_id"),
            meeting_link=snapshot.get("meeting_link"),
            report_url=snapshot.get("report_url"),
            refund_requested=bool(snapshot.get("refund_requested", False)),
            refund_reason=snapshot.get("refund_reason"),
            user_feedback=snapshot.get("user_feedback"),
            detailed_feedback=[
                SkillFeedback(
                    skill=item["skill"],
                    rating=item["rating"],
                    comments=item.get("comments"),
                )
                for item in snapshot.get("detailed_feedback") or []
            ],
            version=int(snapshot.get("version", 0)),
            created_at=_parse_timestamp(snapshot.get("created_at")),
            updated_at=_parse_timestamp(snapshot.get("updated_at")),
        )

    def _transition(
        self,
        *,
        allowed_from: tuple[BookingStatus, ...],
        target: BookingStatus,
    ) -> None:
        if self.status not in allowed_from:
            raise InvalidTransitionError(f"Invalid transition from {self.status} to {target}")
        self._set_status(target)

    def _set_status(self, target: BookingStatus) -> None:
        previous_status = self.status
        changed_at = datetime.now(UTC)
        self.status = target
        self.updated_at = changed_at
        self.status_history.append(
            BookingStatusChange(
                from_status=previous_status,
                to_status=target,
                changed_at=changed_at,
            )
        )

    def _touch(self) -> None:
        self.updated_at = datetime.now(UTC)


def _parse_timestamp(raw_value: object) -> datetime:
    if isinstance(raw_value, datetime):
        value = raw_value
    elif isinstance(raw_value, str):
        value = datetime.fromisoformat(raw_value)
    else:
        return datetime.now(UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
