import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.entities import Booking, SkillFeedback
from coaching_api.domain.enums import BookingStatus
from coaching_api.domain.exceptions import (
    ConcurrentModificationError,
    NotFoundError,
    SlotConflictError,
    StoreUnavailableError,
)
from coaching_api.domain.ports import DomainEvent
from coaching_api.infrastructure.db.models import BookingModel, BookingSlotLockModel
from coaching_api.infrastructure.history import HistoryTracker
from coaching_api.infrastructure.outbox.outbox_event_publisher import OutboxEventPublisher

logger = logging.getLogger(__name__)


class MySQLBookingRepository:
    """Booking persistence with slot locks and compare-and-set updates.

    A row in `booking_slot_locks` exists for every booking that still
    occupies its slot. The unique key on (slot_date, slot_time) makes two
    concurrent reservations for the same slot fail at commit instead of
    both succeeding.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._history_tracker = HistoryTracker(session_factory)

    async def get(self, booking_id: str) -> Booking | None:
        try:
            async with self._session_factory() as session:
                result = await session.exec(
                    select(BookingModel).where(BookingModel.booking_id == booking_id)
                )
                model = result.one_or_none()
                return self._to_domain(model) if model is not None else None
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Booking store is unavailable") from exc

    async def list_active_for_date(self, date: str) -> list[Booking]:
        return await self._list(
            select(BookingModel)
            .where(BookingModel.slot_date == date)
            .where(BookingModel.status != BookingStatus.CANCELLED)
            .order_by(BookingModel.slot_time)
        )

    async def list_for_user(self, user_id: str) -> list[Booking]:
        return await self._list(
            select(BookingModel)
            .where(BookingModel.user_id == user_id)
            .order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
        )

    async def list_all(self) -> list[Booking]:
        return await self._list(
            select(BookingModel).order_by(BookingModel.created_at.desc(), BookingModel.id.desc())
        )

    async def create_with_slot_lock(
        self,
        booking: Booking,
        events: Iterable[DomainEvent] = (),
    ) -> Booking:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    model = self._to_model(booking)
                    session.add(model)
                    await session.flush()
                    session.add(
                        BookingSlotLockModel(
                            slot_date=booking.date,
                            slot_time=booking.time,
                            booking_id=booking.booking_id,
                        )
                    )
                    await session.flush()
                    OutboxEventPublisher.add_to_session(session, events)
                    saved = self._to_domain(model)
        except IntegrityError as exc:
            logger.info(
                "slot_lock_conflict date=%s time=%s booking_id=%s",
                booking.date,
                booking.time,
                booking.booking_id,
            )
            raise SlotConflictError(
                f"Slot {booking.date} {booking.time} is no longer available"
            ) from exc
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Booking store is unavailable") from exc
        return saved

    async def save_transition(
        self,
        before: Booking,
        after: Booking,
        events: Iterable[DomainEvent] = (),
    ) -> Booking:
        """Write `after` only if the stored row still has `before.version`."""
        events = list(events)
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.exec(
                        select(BookingModel)
                        .where(BookingModel.booking_id == before.booking_id)
                        .with_for_update()
                    )
                    model = result.one_or_none()
                    if model is None:
                        raise NotFoundError(f"Booking with ID {before.booking_id} not found.")
                    if model.version != before.version:
                        raise ConcurrentModificationError(
                            f"Booking {before.booking_id} was modified concurrently; retry the operation."
                        )

                    self._update_model(model, after)
                    model.version = before.version + 1

                    if before.is_active and not after.is_active:
                        await self._release_slot_lock(session, after.booking_id)

                    await self._history_tracker.track_status_changes(
                        session=session,
                        booking_id=after.booking_id,
                        changes=after.status_history[len(before.status_history):],
                        changed_by=self._actor_of(events),
                    )
                    OutboxEventPublisher.add_to_session(session, events)
                    await session.flush()
                    saved = self._to_domain(model)
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Booking store is unavailable") from exc
        saved.status_history = list(after.status_history)
        return saved

    async def _list(self, query) -> list[Booking]:
        try:
            async with self._session_factory() as session:
                result = await session.exec(query)
                return [self._to_domain(model) for model in result.all()]
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Booking store is unavailable") from exc

    @staticmethod
    async def _release_slot_lock(session: AsyncSession, booking_id: str) -> None:
        result = await session.exec(
            select(BookingSlotLockModel).where(BookingSlotLockModel.booking_id == booking_id)
        )
        lock = result.one_or_none()
        if lock is not None:
            await session.delete(lock)

    @staticmethod
    def _actor_of(events: Iterable[DomainEvent]) -> str | None:
        for event in events:
            actor = (event.payload or {}).get("actor")
            if actor:
                return str(actor)
        return None

    @staticmethod
    def _to_model(booking: Booking) -> BookingModel:
        model = BookingModel(
            booking_id=booking.booking_id,
            user_id=booking.user_id,
            service_id=booking.service_id,
            service_name=booking.service_name,
            slot_date=booking.date,
            slot_time=booking.time,
            status=booking.status,
            payment_status=booking.payment_status,
            version=booking.version,
            created_at=booking.created_at,
        )
        MySQLBookingRepository._update_model(model, booking)
        return model

    @staticmethod
    def _update_model(model: BookingModel, booking: Booking) -> None:
        model.status = booking.status
        model.payment_status = booking.payment_status
        model.transaction_id = booking.transaction_id
        model.meeting_link = booking.meeting_link
        model.report_url = booking.report_url
        model.refund_requested = booking.refund_requested
        model.refund_reason = booking.refund_reason
        model.user_feedback = booking.user_feedback
        model.detailed_feedback = [
            {"skill": item.skill, "rating": item.rating, "comments": item.comments}
            for item in booking.detailed_feedback
        ]
        model.updated_at = booking.updated_at

    @staticmethod
    def _to_domain(model: BookingModel) -> Booking:
        return Booking(
            booking_id=model.booking_id,
            user_id=model.user_id,
            service_id=model.service_id,
            service_name=model.service_name,
            date=model.slot_date,
            time=model.slot_time,
            status=model.status,
            payment_status=model.payment_status,
            transaction_id=model.transaction_id,
            meeting_link=model.meeting_link,
            report_url=model.report_url,
            refund_requested=bool(model.refund_requested),
            refund_reason=model.refund_reason,
            user_feedback=model.user_feedback,
            detailed_feedback=[
                SkillFeedback(
                    skill=item["skill"],
                    rating=item["rating"],
                    comments=item.get("comments"),
                )
                for item in model.detailed_feedback or []
            ],
            version=model.version,
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
        )


def _as_utc(value: datetime | None) -> datetime:
    if value is None:
        return datetime.now(UTC)
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value
