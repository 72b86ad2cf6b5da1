from datetime import datetime

from coaching_api.api.schemas.base import CamelModel
from coaching_api.domain.entities import Notification
from coaching_api.domain.enums import NotificationKind


class NotificationResponseDTO(CamelModel):
    id: int | None
    kind: NotificationKind
    message: str
    href: str
    seen: bool
    created_at: datetime

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationResponseDTO":
        return cls(
            id=notification.id,
            kind=notification.kind,
            message=notification.message,
            href=notification.href,
            seen=notification.seen,
            created_at=notification.created_at,
        )
