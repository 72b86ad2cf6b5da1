from coaching_api.application.use_cases import (
    BookingLifecycle,
    BookingQueriesUseCase,
    CreatePaymentOrderRequest,
    CreatePaymentOrderUseCase,
    ManageAvailabilityUseCase,
    NotificationInboxUseCase,
    RefundProcessor,
    RegisterUserProfileUseCase,
    ReserveSlotRequest,
    SlotResolver,
    VerifyPaymentRequest,
    VerifyPaymentUseCase,
)

__all__ = [
    "BookingLifecycle",
    "BookingQueriesUseCase",
    "CreatePaymentOrderRequest",
    "CreatePaymentOrderUseCase",
    "ManageAvailabilityUseCase",
    "NotificationInboxUseCase",
    "RefundProcessor",
    "RegisterUserProfileUseCase",
    "ReserveSlotRequest",
    "SlotResolver",
    "VerifyPaymentRequest",
    "VerifyPaymentUseCase",
]
