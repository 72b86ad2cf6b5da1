import logging
from collections.abc import Mapping, Sequence

from coaching_api.domain.entities import AvailabilityDay
from coaching_api.domain.exceptions import InvalidArgumentError
from coaching_api.domain.ports import AvailabilityRepository
from coaching_api.domain.value_objects import parse_slot_date

logger = logging.getLogger(__name__)


class ManageAvailabilityUseCase:
    """Read and overwrite the administrator's per-day slot offer."""

    def __init__(self, availability_repository: AvailabilityRepository) -> None:
        self._availability_repository = availability_repository

    async def get_all(self) -> dict[str, list[str]]:
        days = await self._availability_repository.get_all()
        return {day.date: list(day.time_slots) for day in days}

    async def get_range(self, start_date: str, end_date: str) -> dict[str, list[str]]:
        try:
            start = parse_slot_date(start_date)
            end = parse_slot_date(end_date)
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
        if end < start:
            raise InvalidArgumentError("end_date must not be before start_date")
        days = await self._availability_repository.get_range(start, end)
        return {day.date: list(day.time_slots) for day in days}

    async def save(self, updates: Mapping[str, Sequence[str]]) -> dict[str, list[str]]:
        """Overwrite each listed day wholesale; an empty list marks it unavailable."""
        if not updates:
            raise InvalidArgumentError("updates must contain at least one date")
        days: list[AvailabilityDay] = []
        for raw_date, raw_slots in updates.items():
            if isinstance(raw_slots, str):
                raise InvalidArgumentError(f"time slots for {raw_date} must be a list")
            try:
                days.append(
                    AvailabilityDay(
                        date=raw_date,
                        time_slots=tuple(label.strip() for label in raw_slots),
                    )
                )
            except (AttributeError, ValueError) as exc:
                raise InvalidArgumentError(str(exc)) from exc

        await self._availability_repository.save_days(days)
        logger.info("availability_saved dates=%s", ",".join(day.date for day in days))
        return {day.date: list(day.time_slots) for day in days}
