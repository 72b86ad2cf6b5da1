from collections.abc import Iterable, Sequence

from coaching_api.domain.entities import Booking


def remaining_slots(offered: Sequence[str], bookings: Iterable[Booking]) -> list[str]:
    """Return offered time labels not taken by an active booking, in offered order."""
    taken = {booking.time for booking in bookings if booking.is_active}
    return [label for label in offered if label not in taken]
