import pytest

from coaching_api.application.use_cases import BOOKING_CREATED, BOOKING_UPDATED, ReserveSlotRequest
from coaching_api.domain.enums import BookingStatus, PaymentStatus
from coaching_api.domain.exceptions import (
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
    NotRefundableError,
    PermissionDeniedError,
    SlotConflictError,
)
from coaching_api.domain.value_objects import Caller

CLIENT = Caller(user_id="user-1")
OTHER_CLIENT = Caller(user_id="user-2")


def _request(time: str = "10:00", pay_later: bool = False) -> ReserveSlotRequest:
    return ReserveSlotRequest(
        service_id="career-coaching",
        service_name="Career Coaching",
        date="2025-03-10",
        time=time,
        pay_later=pay_later,
    )


@pytest.mark.asyncio
async def test_reserve_creates_pending_booking_with_created_event(lifecycle, booking_repository, audit_logger) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())

    assert booking.booking_id == "booking-1"
    assert booking.status == BookingStatus.PENDING_PAYMENT
    assert booking.payment_status == PaymentStatus.PENDING
    assert [event.event_type for event in booking_repository.events] == [BOOKING_CREATED]
    assert booking_repository.events[0].payload["before"] is None
    assert booking_repository.events[0].payload["actor"] == "user-1"
    assert audit_logger.entries[0][0] == "BOOKING_CREATED"


@pytest.mark.asyncio
async def test_reserve_pay_later_starts_pending_approval(lifecycle) -> None:
    booking = await lifecycle.reserve(CLIENT, _request(pay_later=True))

    assert booking.status == BookingStatus.PENDING_APPROVAL
    assert booking.payment_status == PaymentStatus.UNPAID


@pytest.mark.asyncio
async def test_reserve_taken_slot_raises_slot_conflict(lifecycle, booking_repository) -> None:
    await lifecycle.reserve(CLIENT, _request())

    with pytest.raises(SlotConflictError, match="no longer available"):
        await lifecycle.reserve(OTHER_CLIENT, _request())

    assert len(booking_repository.bookings) == 1


@pytest.mark.asyncio
async def test_reserve_time_not_offered_raises_slot_conflict(lifecycle) -> None:
    with pytest.raises(SlotConflictError):
        await lifecycle.reserve(CLIENT, _request(time="15:00"))


@pytest.mark.asyncio
async def test_slot_lock_rejects_reservation_that_passed_the_check(lifecycle, booking_repository) -> None:
    # Another writer committed between the availability read and the insert.
    booking_repository.slot_locks[("2025-03-10", "10:00")] = "booking-raced"

    with pytest.raises(SlotConflictError):
        await lifecycle.reserve(CLIENT, _request())


def test_reserve_request_validates_fields() -> None:
    with pytest.raises(InvalidArgumentError):
        ReserveSlotRequest(service_id=" ", service_name="Career Coaching", date="2025-03-10", time="10:00")
    with pytest.raises(InvalidArgumentError):
        ReserveSlotRequest(service_id="svc", service_name="Career Coaching", date="2025/03/10", time="10:00")


@pytest.mark.asyncio
async def test_cancel_frees_slot_for_next_reservation(lifecycle, slot_resolver) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())

    await lifecycle.cancel(booking.booking_id, actor="admin-1")

    assert await slot_resolver.resolve("2025-03-10") == ["10:00", "11:00"]
    rebooked = await lifecycle.reserve(OTHER_CLIENT, _request())
    assert rebooked.user_id == "user-2"


@pytest.mark.asyncio
async def test_confirm_payment_is_idempotent(lifecycle, booking_repository) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())

    first = await lifecycle.confirm_payment(booking.booking_id, "pay_1")
    writes_after_first = booking_repository.writes
    second = await lifecycle.confirm_payment(booking.booking_id, "pay_1")

    assert first.status == BookingStatus.ACCEPTED
    assert first.payment_status == PaymentStatus.PAID
    assert second.to_snapshot() == first.to_snapshot()
    assert booking_repository.writes == writes_after_first


@pytest.mark.asyncio
async def test_transition_writes_updated_event_with_before_and_after(lifecycle, booking_repository) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())
    await lifecycle.confirm_payment(booking.booking_id, "pay_1")

    event = booking_repository.events[-1]

    assert event.event_type == BOOKING_UPDATED
    assert event.aggregate_id == booking.booking_id
    assert event.payload["before"]["status"] == "pending_payment"
    assert event.payload["after"]["status"] == "accepted"
    assert event.payload["actor"] == "system"


@pytest.mark.asyncio
async def test_schedule_rejects_non_http_link(lifecycle) -> None:
    booking = await lifecycle.reserve(CLIENT, _request(pay_later=True))
    await lifecycle.accept(booking.booking_id, actor="admin-1")

    with pytest.raises(InvalidArgumentError, match="http"):
        await lifecycle.schedule(booking.booking_id, "javascript:alert(1)", actor="admin-1")


@pytest.mark.asyncio
async def test_complete_with_report_and_skill_feedback(lifecycle) -> None:
    booking = await lifecycle.reserve(CLIENT, _request(pay_later=True))
    await lifecycle.accept(booking.booking_id, actor="admin-1")
    await lifecycle.schedule(booking.booking_id, "https://meet.example.com/abc", actor="admin-1")

    completed = await lifecycle.complete(
        booking.booking_id,
        actor="admin-1",
        report_url="https://files.example.com/report.pdf",
        detailed_feedback=[{"skill": "Communication", "rating": "Strong", "comments": "<b>Clear</b>"}],
    )

    assert completed.status == BookingStatus.COMPLETED
    assert completed.report_url == "https://files.example.com/report.pdf"
    assert completed.detailed_feedback[0].comments == "bClear/b"


@pytest.mark.asyncio
async def test_invalid_transition_leaves_booking_unwritten(lifecycle, booking_repository) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())
    writes = booking_repository.writes

    with pytest.raises(InvalidTransitionError):
        await lifecycle.complete(booking.booking_id, actor="admin-1")

    assert booking_repository.writes == writes


@pytest.mark.asyncio
async def test_unknown_booking_raises_not_found(lifecycle) -> None:
    with pytest.raises(NotFoundError, match="Booking with ID missing not found."):
        await lifecycle.cancel("missing", actor="admin-1")


@pytest.mark.asyncio
async def test_refund_request_is_owner_only(lifecycle) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())
    await lifecycle.confirm_payment(booking.booking_id, "pay_1")

    with pytest.raises(PermissionDeniedError):
        await lifecycle.request_refund(booking.booking_id, OTHER_CLIENT, "Travel conflict")

    flagged = await lifecycle.request_refund(booking.booking_id, CLIENT, "Travel conflict")
    assert flagged.refund_requested is True


@pytest.mark.asyncio
async def test_refund_request_inside_cutoff_window_is_rejected_without_write(
    lifecycle,
    booking_repository,
    make_booking,
) -> None:
    # The lifecycle clock reads 2025-03-01 09:00 UTC.
    booking_repository.add(
        make_booking(
            date="2025-03-01",
            time="10:30",
            status=BookingStatus.ACCEPTED,
            payment_status=PaymentStatus.PAID,
            transaction_id="pay_1",
        )
    )

    with pytest.raises(NotRefundableError, match="2 hours before"):
        await lifecycle.request_refund("b-1", CLIENT, "Travel conflict")

    assert booking_repository.writes == 0
    assert (await booking_repository.get("b-1")).refund_requested is False


@pytest.mark.asyncio
async def test_refund_request_reads_afternoon_label_against_clock(lifecycle, booking_repository, make_booking) -> None:
    booking_repository.add(
        make_booking(
            date="2025-03-01",
            time="11:30 AM",
            status=BookingStatus.ACCEPTED,
            payment_status=PaymentStatus.PAID,
            transaction_id="pay_1",
        )
    )

    flagged = await lifecycle.request_refund("b-1", CLIENT, "Travel conflict")

    assert flagged.refund_requested is True
    assert booking_repository.writes == 1


@pytest.mark.asyncio
async def test_feedback_after_completion(lifecycle) -> None:
    booking = await lifecycle.reserve(CLIENT, _request())
    await lifecycle.confirm_payment(booking.booking_id, "pay_1")
    await lifecycle.complete(booking.booking_id, actor="admin-1")

    updated = await lifecycle.submit_feedback(booking.booking_id, CLIENT, "Very helpful")

    assert updated.user_feedback == "Very helpful"


@pytest.mark.asyncio
async def test_audit_entry_records_transition(lifecycle, audit_logger) -> None:
    booking = await lifecycle.reserve(CLIENT, _request(pay_later=True))

    await lifecycle.accept(booking.booking_id, actor="admin-1")

    action, booking_id, actor, context = audit_logger.entries[-1]
    assert (action, booking_id, actor) == ("BOOKING_MODIFIED", booking.booking_id, "admin-1")
    assert context["from_status"] == "pending_approval"
    assert context["to_status"] == "accepted"
