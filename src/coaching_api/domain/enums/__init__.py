from coaching_api.domain.enums.booking_status import BookingStatus, PaymentStatus
from coaching_api.domain.enums.notification_kind import NotificationKind

__all__ = ["BookingStatus", "NotificationKind", "PaymentStatus"]
