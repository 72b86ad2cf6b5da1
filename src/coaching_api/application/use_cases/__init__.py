from coaching_api.application.use_cases.booking_lifecycle import (
    BOOKING_CREATED,
    BOOKING_UPDATED,
    BookingLifecycle,
    ReserveSlotRequest,
    build_booking_event,
)
from coaching_api.application.use_cases.booking_queries_use_case import BookingQueriesUseCase
from coaching_api.application.use_cases.create_payment_order_use_case import (
    CreatePaymentOrderRequest,
    CreatePaymentOrderUseCase,
    PaymentOrderResult,
)
from coaching_api.application.use_cases.manage_availability_use_case import (
    ManageAvailabilityUseCase,
)
from coaching_api.application.use_cases.notification_inbox_use_case import NotificationInboxUseCase
from coaching_api.application.use_cases.process_refund_use_case import (
    REFUND_SUCCESS_MESSAGE,
    RefundProcessor,
    RefundResult,
)
from coaching_api.application.use_cases.register_user_profile_use_case import (
    RegisterUserProfileUseCase,
)
from coaching_api.application.use_cases.slot_resolver import SlotResolver
from coaching_api.application.use_cases.verify_payment_use_case import (
    VerifyPaymentRequest,
    VerifyPaymentUseCase,
)

__all__ = [
    "BOOKING_CREATED",
    "BOOKING_UPDATED",
    "BookingLifecycle",
    "BookingQueriesUseCase",
    "CreatePaymentOrderRequest",
    "CreatePaymentOrderUseCase",
    "ManageAvailabilityUseCase",
    "NotificationInboxUseCase",
    "PaymentOrderResult",
    "REFUND_SUCCESS_MESSAGE",
    "RefundProcessor",
    "RefundResult",
    "RegisterUserProfileUseCase",
    "ReserveSlotRequest",
    "SlotResolver",
    "VerifyPaymentRequest",
    "VerifyPaymentUseCase",
    "build_booking_event",
]
