from coaching_api.domain.entities.availability import AvailabilityDay
from coaching_api.domain.entities.booking import (
    ALLOWED_STATE_COMBINATIONS,
    REFUND_REQUEST_CUTOFF,
    Booking,
    BookingStatusChange,
    SkillFeedback,
)
from coaching_api.domain.entities.notification import Notification

__all__ = [
    "ALLOWED_STATE_COMBINATIONS",
    "REFUND_REQUEST_CUTOFF",
    "AvailabilityDay",
    "Booking",
    "BookingStatusChange",
    "Notification",
    "SkillFeedback",
]
