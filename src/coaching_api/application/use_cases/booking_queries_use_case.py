from coaching_api.domain.entities import Booking
from coaching_api.domain.exceptions import InvalidArgumentError, NotFoundError, PermissionDeniedError
from coaching_api.domain.ports import BookingRepository
from coaching_api.domain.value_objects import Caller


class BookingQueriesUseCase:
    """Read-side access to bookings with ownership checks."""

    def __init__(self, booking_repository: BookingRepository) -> None:
        self._booking_repository = booking_repository

    async def get(self, caller: Caller, booking_id: str) -> Booking:
        if not booking_id or not booking_id.strip():
            raise InvalidArgumentError("booking_id must not be empty")
        booking = await self._booking_repository.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with ID {booking_id} not found.")
        if not caller.is_admin and booking.user_id != caller.user_id:
            raise PermissionDeniedError("Booking belongs to another user.")
        return booking

    async def list_mine(self, caller: Caller) -> list[Booking]:
        return await self._booking_repository.list_for_user(caller.user_id)

    async def list_all(self) -> list[Booking]:
        return await self._booking_repository.list_all()
