from coaching_api.infrastructure.outbox.notification_outbox_processor import (
    NotificationOutboxProcessor,
)
from coaching_api.infrastructure.outbox.outbox_event_publisher import OutboxEventPublisher

__all__ = ["NotificationOutboxProcessor", "OutboxEventPublisher"]
