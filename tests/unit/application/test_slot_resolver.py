import pytest

from coaching_api.application import SlotResolver
from coaching_api.domain.enums import BookingStatus, PaymentStatus
from coaching_api.domain.exceptions import InvalidArgumentError, StoreUnavailableError


@pytest.mark.asyncio
async def test_resolve_removes_times_held_by_active_bookings(slot_resolver, booking_repository, make_booking) -> None:
    booking_repository.add(make_booking(time="10:00"))

    assert await slot_resolver.resolve("2025-03-10") == ["11:00"]


@pytest.mark.asyncio
async def test_cancelled_booking_frees_its_time(slot_resolver, booking_repository, make_booking) -> None:
    booking_repository.add(
        make_booking(time="10:00", status=BookingStatus.CANCELLED, payment_status=PaymentStatus.PENDING)
    )

    assert await slot_resolver.resolve("2025-03-10") == ["10:00", "11:00"]


@pytest.mark.asyncio
async def test_resolve_returns_empty_list_for_day_without_offer(slot_resolver) -> None:
    assert await slot_resolver.resolve("2025-03-11") == []


@pytest.mark.asyncio
async def test_resolve_rejects_malformed_date(slot_resolver) -> None:
    with pytest.raises(InvalidArgumentError, match="YYYY-MM-DD"):
        await slot_resolver.resolve("10-03-2025")


@pytest.mark.asyncio
async def test_store_failure_is_not_reported_as_empty_day(booking_repository) -> None:
    class UnavailableAvailabilityRepository:
        async def get_day(self, date: str):
            raise StoreUnavailableError("Availability store is unavailable")

    resolver = SlotResolver(UnavailableAvailabilityRepository(), booking_repository)

    with pytest.raises(StoreUnavailableError):
        await resolver.resolve("2025-03-10")


@pytest.mark.asyncio
async def test_is_available_checks_membership(slot_resolver, booking_repository, make_booking) -> None:
    booking_repository.add(make_booking(time="10:00"))

    assert await slot_resolver.is_available("2025-03-10", "11:00") is True
    assert await slot_resolver.is_available("2025-03-10", "10:00") is False
    assert await slot_resolver.is_available("2025-03-10", "12:00") is False
