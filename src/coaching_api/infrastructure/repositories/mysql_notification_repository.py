from collections.abc import Iterable
from datetime import UTC, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.entities import Notification
from coaching_api.domain.exceptions import StoreUnavailableError
from coaching_api.infrastructure.db.models import NotificationModel


class MySQLNotificationRepository:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def list_for_user(self, user_id: str) -> list[Notification]:
        try:
            async with self._session_factory() as session:
                result = await session.exec(
                    select(NotificationModel)
                    .where(NotificationModel.user_id == user_id)
                    .order_by(NotificationModel.created_at.desc(), NotificationModel.id.desc())
                )
                return [self._to_domain(model) for model in result.all()]
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Notification store is unavailable") from exc

    async def mark_seen(self, user_id: str, notification_id: int) -> bool:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.exec(
                        select(NotificationModel).where(
                            NotificationModel.id == notification_id,
                            NotificationModel.user_id == user_id,
                        )
                    )
                    model = result.one_or_none()
                    if model is None:
                        return False
                    model.seen = True
                    return True
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Notification store is unavailable") from exc

    @staticmethod
    def add_to_session(session: AsyncSession, notifications: Iterable[Notification]) -> None:
        """Stage notifications inside a caller-owned transaction."""
        for notification in notifications:
            session.add(
                NotificationModel(
                    user_id=notification.user_id,
                    kind=notification.kind,
                    message=notification.message,
                    href=notification.href,
                    seen=notification.seen,
                    source_event_id=notification.source_event_id,
                    created_at=notification.created_at,
                )
            )

    @staticmethod
    def _to_domain(model: NotificationModel) -> Notification:
        created_at = model.created_at or datetime.now(UTC)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=UTC)
        return Notification(
            id=model.id,
            user_id=model.user_id,
            kind=model.kind,
            message=model.message,
            href=model.href,
            seen=bool(model.seen),
            created_at=created_at,
            source_event_id=model.source_event_id,
        )
