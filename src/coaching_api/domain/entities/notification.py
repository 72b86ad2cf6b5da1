from dataclasses import dataclass, field
from datetime import UTC, datetime

from coaching_api.domain.enums import NotificationKind


@dataclass(slots=True)
class Notification:
    """In-app message shown to a user, e.g. when a session gets scheduled."""

    user_id: str
    kind: NotificationKind
    message: str
    href: str
    seen: bool = False
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    source_event_id: int | None = None
    id: int | None = None
