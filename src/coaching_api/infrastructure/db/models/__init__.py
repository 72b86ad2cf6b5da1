from coaching_api.infrastructure.db.models.booking_models import (
    AvailabilityDayModel,
    BookingModel,
    BookingOutboxEventModel,
    BookingSlotLockModel,
    BookingStatusHistoryModel,
    NotificationModel,
    UserProfileModel,
)

__all__ = [
    "AvailabilityDayModel",
    "BookingModel",
    "BookingOutboxEventModel",
    "BookingSlotLockModel",
    "BookingStatusHistoryModel",
    "NotificationModel",
    "UserProfileModel",
]
