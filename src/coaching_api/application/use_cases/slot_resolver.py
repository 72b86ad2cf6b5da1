from coaching_api.domain.exceptions import InvalidArgumentError
from coaching_api.domain.ports import AvailabilityRepository, BookingRepository
from coaching_api.domain.services import remaining_slots
from coaching_api.domain.value_objects import parse_slot_date


class SlotResolver:
    """Compute which administrator-offered times are still free on a day.

    Store failures surface as `StoreUnavailableError` from the repositories
    and are never reported as an empty day.

    Example:
        ```python
        resolver = SlotResolver(availability_repository, booking_repository)
        await resolver.resolve("2025-03-10")  # ["11:00"]
        ```
    """

    def __init__(
        self,
        availability_repository: AvailabilityRepository,
        booking_repository: BookingRepository,
    ) -> None:
        self._availability_repository = availability_repository
        self._booking_repository = booking_repository

    async def resolve(self, date: str) -> list[str]:
        try:
            slot_date = parse_slot_date(date)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc

        day = await self._availability_repository.get_day(slot_date)
        if day is None or not day.is_available:
            return []
        bookings = await self._booking_repository.list_active_for_date(slot_date)
        return remaining_slots(day.time_slots, bookings)

    async def is_available(self, date: str, time: str) -> bool:
        return time in await self.resolve(date)
