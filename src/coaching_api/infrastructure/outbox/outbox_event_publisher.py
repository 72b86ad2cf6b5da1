from collections.abc import Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.exceptions import StoreUnavailableError
from coaching_api.domain.ports import DomainEvent
from coaching_api.infrastructure.db.models import BookingOutboxEventModel

PENDING = "PENDING"
PROCESSED = "PROCESSED"
FAILED = "FAILED"


class OutboxEventPublisher:
    """Append domain events to the outbox table.

    Booking writes add their events through `add_to_session` so they commit
    atomically with the booking row. `publish` is used by producers that
    have no transaction of their own, such as the messaging subsystem.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def publish(self, event: DomainEvent) -> None:
        await self.publish_many([event])

    async def publish_many(self, events: Iterable[DomainEvent]) -> None:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    self.add_to_session(session, events)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Outbox store is unavailable") from exc

    @classmethod
    def add_to_session(cls, session: AsyncSession, events: Iterable[DomainEvent]) -> None:
        for event in events:
            session.add(cls._to_model(event))

    @staticmethod
    def _to_model(event: DomainEvent) -> BookingOutboxEventModel:
        return BookingOutboxEventModel(
            aggregate_id=event.aggregate_id,
            event_type=event.event_type,
            payload=dict(event.payload or {}),
            status=PENDING,
        )
