from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.entities import BookingStatusChange
from coaching_api.infrastructure.db.models import BookingStatusHistoryModel


class HistoryTracker:
    """Persist and read booking status change history."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def track_status_changes(
        self,
        *,
        session: AsyncSession,
        booking_id: str,
        changes: list[BookingStatusChange],
        changed_by: str | None = None,
    ) -> None:
        """Store status transitions in the current transaction."""
        for change in changes:
            session.add(
                BookingStatusHistoryModel(
                    booking_id=booking_id,
                    from_status=change.from_status,
                    to_status=change.to_status,
                    changed_by=changed_by,
                    changed_at=change.changed_at,
                )
            )

    async def get_history(self, booking_id: str) -> list[BookingStatusChange]:
        """Return ordered status history for a booking."""
        async with self._session_factory() as session:
            result = await session.exec(
                select(BookingStatusHistoryModel)
                .where(BookingStatusHistoryModel.booking_id == booking_id)
                .order_by(BookingStatusHistoryModel.id)
            )
            return [
                BookingStatusChange(
                    from_status=row.from_status,
                    to_status=row.to_status,
                    changed_at=row.changed_at,
                )
                for row in result.all()
            ]
