from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.entities import AvailabilityDay
from coaching_api.domain.exceptions import StoreUnavailableError
from coaching_api.infrastructure.db.models import AvailabilityDayModel


class MySQLAvailabilityRepository:
    """Reads and overwrites per-day slot offers in `availability_days`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_day(self, date: str) -> AvailabilityDay | None:
        days = await self._fetch(
            select(AvailabilityDayModel).where(AvailabilityDayModel.slot_date == date)
        )
        return days[0] if days else None

    async def get_range(self, start_date: str, end_date: str) -> list[AvailabilityDay]:
        return await self._fetch(
            select(AvailabilityDayModel)
            .where(AvailabilityDayModel.slot_date >= start_date)
            .where(AvailabilityDayModel.slot_date <= end_date)
            .order_by(AvailabilityDayModel.slot_date)
        )

    async def get_all(self) -> list[AvailabilityDay]:
        return await self._fetch(select(AvailabilityDayModel).order_by(AvailabilityDayModel.slot_date))

    async def save_days(self, days: Iterable[AvailabilityDay]) -> None:
        """Upsert each day; the stored slot list is replaced, never merged."""
        days_by_date = {day.date: day for day in days}
        if not days_by_date:
            return
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.exec(
                        select(AvailabilityDayModel)
                        .where(AvailabilityDayModel.slot_date.in_(list(days_by_date)))
                        .with_for_update()
                    )
                    existing = {model.slot_date: model for model in result.all()}
                    now = datetime.now(UTC)
                    for slot_date, day in days_by_date.items():
                        model = existing.get(slot_date)
                        if model is None:
                            session.add(
                                AvailabilityDayModel(
                                    slot_date=slot_date,
                                    time_slots=list(day.time_slots),
                                    updated_at=now,
                                )
                            )
                        else:
                            model.time_slots = list(day.time_slots)
                            model.updated_at = now
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Availability store is unavailable") from exc

    async def _fetch(self, query) -> list[AvailabilityDay]:
        try:
            async with self._session_factory() as session:
                result = await session.exec(query)
                return [
                    AvailabilityDay(date=model.slot_date, time_slots=tuple(model.time_slots or ()))
                    for model in result.all()
                ]
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Availability store is unavailable") from exc
