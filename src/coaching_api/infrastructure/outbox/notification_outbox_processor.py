import asyncio
import logging
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.entities import Booking, Notification
from coaching_api.domain.services import NotificationDispatcher
from coaching_api.infrastructure.db.models import BookingOutboxEventModel
from coaching_api.infrastructure.outbox.outbox_event_publisher import FAILED, PENDING, PROCESSED
from coaching_api.infrastructure.repositories.mysql_notification_repository import (
    MySQLNotificationRepository,
)

logger = logging.getLogger(__name__)

BOOKING_CREATED = "BOOKING_CREATED"
BOOKING_UPDATED = "BOOKING_UPDATED"
MESSAGE_CREATED = "MESSAGE_CREATED"


class NotificationOutboxProcessor:
    """Turn committed outbox events into user notifications.

    Each event is handled in its own transaction. Notifications are staged
    in a savepoint so a failing event only records `FAILED` and its error;
    the booking write that produced it is already committed and untouched.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        dispatcher: NotificationDispatcher,
        poll_interval_seconds: float = 2.0,
        batch_size: int = 50,
    ) -> None:
        if poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be greater than zero")
        if batch_size <= 0:
            raise ValueError("batch_size must be greater than zero")

        self._session_factory = session_factory
        self._dispatcher = dispatcher
        self._poll_interval_seconds = poll_interval_seconds
        self._batch_size = batch_size
        self._stop_event = asyncio.Event()

    async def run_forever(self) -> None:
        while not self._stop_event.is_set():
            await self.process_pending_once(self._batch_size)
            try:
                await asyncio.wait_for(
                    self._stop_event.wait(),
                    timeout=self._poll_interval_seconds,
                )
            except TimeoutError:
                continue

    def stop(self) -> None:
        self._stop_event.set()

    async def process_pending_once(self, limit: int | None = None) -> int:
        target_limit = limit if limit is not None else self._batch_size
        async with self._session_factory() as session:
            query = (
                select(BookingOutboxEventModel.id)
                .where(BookingOutboxEventModel.status.in_([PENDING, FAILED]))
                .order_by(BookingOutboxEventModel.id)
                .limit(target_limit)
            )
            result = await session.exec(query)
            event_ids = list(result.all())

        processed = 0
        for event_id in event_ids:
            if await self._process_event_by_id(event_id):
                processed += 1
        return processed

    def notifications_for(self, event_type: str, payload: dict) -> list[Notification]:
        """Map one outbox event to the notifications it should produce."""
        if event_type in (BOOKING_CREATED, BOOKING_UPDATED):
            raw_before = payload.get("before")
            before = Booking.from_snapshot(raw_before) if raw_before else None
            after = Booking.from_snapshot(payload["after"])
            return self._dispatcher.for_booking_change(before, after)
        if event_type == MESSAGE_CREATED:
            return self._dispatcher.for_message_created(payload.get("message") or payload)
        raise ValueError(f"Unsupported outbox event type: {event_type}")

    async def _process_event_by_id(self, event_id: int) -> bool:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.exec(
                    select(BookingOutboxEventModel)
                    .where(BookingOutboxEventModel.id == event_id)
                    .with_for_update(skip_locked=True)
                )
                event = result.one_or_none()
                if event is None or event.status == PROCESSED:
                    return False
                event.attempts = (event.attempts or 0) + 1
                try:
                    async with session.begin_nested():
                        notifications = self.notifications_for(event.event_type, dict(event.payload or {}))
                        for notification in notifications:
                            notification.source_event_id = event.id
                        MySQLNotificationRepository.add_to_session(session, notifications)
                        await session.flush()
                except Exception as exc:
                    logger.exception(
                        "notification_dispatch_failed event_id=%s event_type=%s aggregate_id=%s",
                        event.id,
                        event.event_type,
                        event.aggregate_id,
                    )
                    event.status = FAILED
                    event.last_error = str(exc)[:2000]
                    return False

                event.status = PROCESSED
                event.last_error = None
                event.processed_at = datetime.now(UTC)
                logger.info(
                    "outbox_event_processed event_id=%s event_type=%s notifications=%s",
                    event.id,
                    event.event_type,
                    len(notifications),
                )
                return True
