from coaching_api.infrastructure.db.models import (
    AvailabilityDayModel,
    BookingModel,
    BookingOutboxEventModel,
    BookingSlotLockModel,
    BookingStatusHistoryModel,
    NotificationModel,
    UserProfileModel,
)
from coaching_api.infrastructure.db.session import build_database_url, create_session_factory

__all__ = [
    "AvailabilityDayModel",
    "BookingModel",
    "BookingOutboxEventModel",
    "BookingSlotLockModel",
    "BookingStatusHistoryModel",
    "NotificationModel",
    "UserProfileModel",
    "build_database_url",
    "create_session_factory",
]
