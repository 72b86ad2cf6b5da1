from coaching_api.domain.entities import Notification
from coaching_api.domain.exceptions import NotFoundError
from coaching_api.domain.ports import NotificationRepository
from coaching_api.domain.value_objects import Caller


class NotificationInboxUseCase:
    """List and acknowledge the caller's notifications."""

    def __init__(self, notification_repository: NotificationRepository) -> None:
        self._notification_repository = notification_repository

    async def list(self, caller: Caller) -> list[Notification]:
        return await self._notification_repository.list_for_user(caller.user_id)

    async def mark_seen(self, caller: Caller, notification_id: int) -> None:
        updated = await self._notification_repository.mark_seen(caller.user_id, notification_id)
        if not updated:
            raise NotFoundError(f"Notification with ID {notification_id} not found.")
