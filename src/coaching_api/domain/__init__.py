from coaching_api.domain.entities import AvailabilityDay, Booking, Notification, SkillFeedback
from coaching_api.domain.enums import BookingStatus, NotificationKind, PaymentStatus
from coaching_api.domain.ports import (
    AvailabilityRepository,
    BookingRepository,
    DomainEvent,
    EventPublisher,
    NotificationRepository,
    PaymentGateway,
    PaymentOrder,
    RefundReceipt,
    UserProfileRepository,
)
from coaching_api.domain.value_objects import BookingSlot, Caller

__all__ = [
    "AvailabilityDay",
    "AvailabilityRepository",
    "Booking",
    "BookingRepository",
    "BookingSlot",
    "BookingStatus",
    "Caller",
    "DomainEvent",
    "EventPublisher",
    "Notification",
    "NotificationKind",
    "NotificationRepository",
    "PaymentGateway",
    "PaymentOrder",
    "PaymentStatus",
    "RefundReceipt",
    "SkillFeedback",
    "UserProfileRepository",
]
