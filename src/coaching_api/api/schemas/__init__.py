from coaching_api.api.schemas.availability_dto import (
    AvailabilityResponseDTO,
    AvailableSlotsResponseDTO,
    SaveAvailabilityRequestDTO,
)
from coaching_api.api.schemas.base import CamelModel, ErrorResponseDTO
from coaching_api.api.schemas.booking_dto import (
    AttachReportRequestDTO,
    BookingResponseDTO,
    CompleteBookingRequestDTO,
    FeedbackRequestDTO,
    RefundRequestDTO,
    RefundResponseDTO,
    ReserveSlotRequestDTO,
    ScheduleBookingRequestDTO,
    SkillFeedbackDTO,
)
from coaching_api.api.schemas.notification_dto import NotificationResponseDTO
from coaching_api.api.schemas.payment_dto import (
    CreatePaymentOrderRequestDTO,
    PaymentOrderResponseDTO,
    VerifyPaymentRequestDTO,
    VerifyPaymentResponseDTO,
)
from coaching_api.api.schemas.profile_dto import ProfileResponseDTO, RegisterProfileRequestDTO

__all__ = [
    "AttachReportRequestDTO",
    "AvailabilityResponseDTO",
    "AvailableSlotsResponseDTO",
    "BookingResponseDTO",
    "CamelModel",
    "CompleteBookingRequestDTO",
    "CreatePaymentOrderRequestDTO",
    "ErrorResponseDTO",
    "FeedbackRequestDTO",
    "NotificationResponseDTO",
    "PaymentOrderResponseDTO",
    "ProfileResponseDTO",
    "RefundRequestDTO",
    "RefundResponseDTO",
    "RegisterProfileRequestDTO",
    "ReserveSlotRequestDTO",
    "SaveAvailabilityRequestDTO",
    "ScheduleBookingRequestDTO",
    "SkillFeedbackDTO",
    "VerifyPaymentRequestDTO",
    "VerifyPaymentResponseDTO",
]
