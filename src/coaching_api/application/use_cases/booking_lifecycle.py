import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, tzinfo
from typing import Any

from coaching_api.application.use_cases.slot_resolver import SlotResolver
from coaching_api.domain.entities import Booking, SkillFeedback
from coaching_api.domain.exceptions import (
    CoachingError,
    ConcurrentModificationError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    SlotConflictError,
)
from coaching_api.domain.ports import AuditTrail, BookingRepository, DomainEvent
from coaching_api.domain.value_objects import BookingSlot, Caller
from coaching_api.shared.security import (
    sanitize_and_validate_payload,
    sanitize_and_validate_text,
    validate_link,
)

logger = logging.getLogger(__name__)

BOOKING_CREATED = "BOOKING_CREATED"
BOOKING_UPDATED = "BOOKING_UPDATED"
SYSTEM_ACTOR = "system"


@dataclass(slots=True, frozen=True)
class ReserveSlotRequest:
    """Application input model to reserve a slot."""

    service_id: str
    service_name: str
    date: str
    time: str
    pay_later: bool = False

    def __post_init__(self) -> None:
        if not self.service_id.strip():
            raise InvalidArgumentError("service_id must not be empty")
        if not self.service_name.strip():
            raise InvalidArgumentError("service_name must not be empty")
        try:
            BookingSlot(date=self.date, time=self.time)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc


def build_booking_event(event_type: str, before: Booking | None, after: Booking, actor: str) -> DomainEvent:
    return DomainEvent(
        event_type=event_type,
        aggregate_id=after.booking_id,
        payload={
            "actor": actor,
            "before": before.to_snapshot() if before is not None else None,
            "after": after.to_snapshot(),
        },
    )


class BookingLifecycle:
    """Apply validated lifecycle transitions to bookings.

    Each transition loads the booking, mutates a copy, and persists the
    before/after pair in one atomic write together with a `BOOKING_UPDATED`
    outbox event. Transitions that change nothing are not written. When a
    concurrent write wins the version check, the booking is reloaded and the
    transition re-evaluated, so a duplicate confirmation becomes a no-op.

    Example:
        ```python
        lifecycle = BookingLifecycle(booking_repository, slot_resolver)
        booking = await lifecycle.reserve(caller, ReserveSlotRequest(...))
        await lifecycle.confirm_payment(booking.booking_id, "pay_1")
        ```
    """

    def __init__(
        self,
        booking_repository: BookingRepository,
        slot_resolver: SlotResolver,
        audit_logger: AuditTrail | None = None,
        id_factory: Callable[[], str] | None = None,
        max_transition_attempts: int = 3,
        clock: Callable[[], datetime] | None = None,
        session_timezone: tzinfo = UTC,
    ) -> None:
        if max_transition_attempts <= 0:
            raise ValueError("max_transition_attempts must be greater than zero")
        self._booking_repository = booking_repository
        self._max_transition_attempts = max_transition_attempts
        self._slot_resolver = slot_resolver
        self._audit_logger = audit_logger
        self._id_factory = id_factory or (lambda: uuid.uuid4().hex)
        self._clock = clock or (lambda: datetime.now(UTC))
        self._session_timezone = session_timezone

    async def reserve(self, caller: Caller, request: ReserveSlotRequest) -> Booking:
        """Create a pending booking if the slot is currently offered and free."""
        if not await self._slot_resolver.is_available(request.date, request.time):
            raise SlotConflictError(
                f"Slot {request.date} {request.time} is no longer available"
            )
        booking = Booking.reserve(
            booking_id=self._id_factory(),
            user_id=caller.user_id,
            service_id=request.service_id.strip(),
            service_name=self._clean_text(request.service_name, "service_name"),
            slot=BookingSlot(date=request.date, time=request.time),
            pay_later=request.pay_later,
        )
        saved = await self._booking_repository.create_with_slot_lock(
            booking,
            events=[build_booking_event(BOOKING_CREATED, None, booking, caller.user_id)],
        )
        logger.info(
            "booking_reserved booking_id=%s date=%s time=%s status=%s",
            saved.booking_id,
            saved.date,
            saved.time,
            saved.status,
        )
        if self._audit_logger is not None:
            self._audit_logger.log_booking_created(
                booking_id=saved.booking_id,
                actor=caller.user_id,
                context={
                    "service_id": saved.service_id,
                    "date": saved.date,
                    "time": saved.time,
                    "status": saved.status.value,
                    "payment_status": saved.payment_status.value,
                },
            )
        return saved

    async def confirm_payment(self, booking_id: str, payment_id: str, actor: str = SYSTEM_ACTOR) -> Booking:
        """Mark a booking paid; only call after `PaymentVerifier` accepted the signature."""
        return await self._apply(
            booking_id,
            actor=actor,
            action="confirm_payment",
            mutate=lambda booking: booking.confirm_payment(payment_id),
        )

    async def accept(self, booking_id: str, actor: str) -> Booking:
        return await self._apply(booking_id, actor=actor, action="accept", mutate=lambda b: b.accept())

    async def schedule(self, booking_id: str, meeting_link: str, actor: str) -> Booking:
        link = self._clean_link(meeting_link, "meeting_link")
        return await self._apply(
            booking_id,
            actor=actor,
            action="schedule",
            mutate=lambda booking: booking.schedule(link),
        )

    async def complete(
        self,
        booking_id: str,
        actor: str,
        report_url: str | None = None,
        detailed_feedback: list[dict[str, Any]] | None = None,
    ) -> Booking:
        link = self._clean_link(report_url, "report_url") if report_url else None
        feedback = self._build_skill_feedback(detailed_feedback or [])
        return await self._apply(
            booking_id,
            actor=actor,
            action="complete",
            mutate=lambda booking: booking.complete(report_url=link, detailed_feedback=feedback),
        )

    async def attach_report(self, booking_id: str, report_url: str, actor: str) -> Booking:
        link = self._clean_link(report_url, "report_url")
        return await self._apply(
            booking_id,
            actor=actor,
            action="attach_report",
            mutate=lambda booking: booking.attach_report(link),
        )

    async def cancel(self, booking_id: str, actor: str) -> Booking:
        return await self._apply(booking_id, actor=actor, action="cancel", mutate=lambda b: b.cancel())

    async def request_refund(self, booking_id: str, caller: Caller, reason: str) -> Booking:
        cleaned = self._clean_text(reason, "reason")
        return await self._apply(
            booking_id,
            actor=caller.user_id,
            action="request_refund",
            mutate=lambda booking: booking.request_refund(
                cleaned,
                now=self._clock(),
                session_timezone=self._session_timezone,
            ),
            owner=caller,
        )

    async def submit_feedback(self, booking_id: str, caller: Caller, feedback: str) -> Booking:
        cleaned = self._clean_text(feedback, "feedback")
        return await self._apply(
            booking_id,
            actor=caller.user_id,
            action="submit_feedback",
            mutate=lambda booking: booking.submit_feedback(cleaned),
            owner=caller,
        )

    async def apply_refund(self, booking_id: str, actor: str) -> Booking:
        """Record a refund the provider already confirmed."""
        return await self._apply(
            booking_id,
            actor=actor,
            action="apply_refund",
            mutate=lambda booking: booking.apply_refund(),
        )

    async def _apply(
        self,
        booking_id: str,
        *,
        actor: str,
        action: str,
        mutate: Callable[[Booking], bool],
        owner: Caller | None = None,
    ) -> Booking:
        if not booking_id or not booking_id.strip():
            raise InvalidArgumentError("booking_id must not be empty")

        for attempt in range(1, self._max_transition_attempts + 1):
            before = await self._booking_repository.get(booking_id)
            if before is None:
                raise NotFoundError(f"Booking with ID {booking_id} not found.")
            if owner is not None and not owner.is_admin and before.user_id != owner.user_id:
                raise PermissionDeniedError("Booking belongs to another user.")

            after = before.copy()
            try:
                changed = mutate(after)
            except CoachingError:
                raise
            except ValueError as exc:
                raise InvalidArgumentError(str(exc)) from exc

            if not changed:
                logger.info("booking_transition_noop booking_id=%s action=%s", booking_id, action)
                return before

            try:
                saved = await self._booking_repository.save_transition(
                    before,
                    after,
                    events=[build_booking_event(BOOKING_UPDATED, before, after, actor)],
                )
                break
            except ConcurrentModificationError:
                if attempt == self._max_transition_attempts:
                    raise
                logger.info(
                    "booking_transition_retry booking_id=%s action=%s attempt=%s",
                    booking_id,
                    action,
                    attempt,
                )

        logger.info(
            "booking_transition_applied booking_id=%s action=%s from_status=%s to_status=%s",
            booking_id,
            action,
            before.status,
            saved.status,
        )
        if self._audit_logger is not None:
            self._audit_logger.log_booking_modified(
                booking_id=booking_id,
                actor=actor,
                context={
                    "action": action,
                    "from_status": before.status.value,
                    "to_status": saved.status.value,
                    "from_payment_status": before.payment_status.value,
                    "to_payment_status": saved.payment_status.value,
                },
            )
        return saved

    @staticmethod
    def _clean_text(value: str, field_name: str) -> str:
        try:
            return sanitize_and_validate_text(value, field_name=field_name)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc

    @staticmethod
    def _clean_link(value: str, field_name: str) -> str:
        try:
            return validate_link(value, field_name=field_name)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc

    @staticmethod
    def _build_skill_feedback(items: list[dict[str, Any]]) -> list[SkillFeedback]:
        feedback: list[SkillFeedback] = []
        for item in sanitize_and_validate_payload(items):
            skill = str(item.get("skill") or "").strip()
            rating = str(item.get("rating") or "").strip()
            if not skill or not rating:
                raise InvalidArgumentError("detailed feedback items need a skill and a rating")
            comments = item.get("comments")
            feedback.append(
                SkillFeedback(skill=skill, rating=rating, comments=str(comments) if comments else None)
            )
        return feedback
