from hypothesis import given, settings
from hypothesis import strategies as st

from coaching_api.domain.entities import ALLOWED_STATE_COMBINATIONS, Booking
from coaching_api.domain.services import remaining_slots

_TIMES = [f"{hour:02d}:{minute:02d}" for hour in range(8, 20) for minute in (0, 30)]
_STATES = sorted(ALLOWED_STATE_COMBINATIONS)


def _booking(index: int, time: str, state) -> Booking:
    status, payment_status = state
    return Booking(
        booking_id=f"b-{index}",
        user_id=f"user-{index}",
        service_id="career-coaching",
        service_name="Career Coaching",
        date="2025-03-10",
        time=time,
        status=status,
        payment_status=payment_status,
    )


@settings(max_examples=100, deadline=None)
@given(
    offered=st.lists(st.sampled_from(_TIMES), unique=True, max_size=12),
    booked=st.lists(st.tuples(st.sampled_from(_TIMES), st.sampled_from(_STATES)), max_size=12),
)
def test_property_no_double_offer(offered: list[str], booked: list[tuple]) -> None:
    bookings = [_booking(index, time, state) for index, (time, state) in enumerate(booked)]
    active_times = {booking.time for booking in bookings if booking.is_active}

    free = remaining_slots(offered, bookings)

    assert not set(free) & active_times
    assert free == [time for time in offered if time not in active_times]
