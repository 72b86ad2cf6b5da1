from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from coaching_api.api.schemas.base import CamelModel
from coaching_api.domain.entities import Booking
from coaching_api.domain.enums import BookingStatus, PaymentStatus


class ReserveSlotRequestDTO(CamelModel):
    """Request body for `POST /api/v1/bookings`."""

    service_id: str = Field(min_length=1, max_length=64, examples=["career-coaching"])
    service_name: str = Field(min_length=1, max_length=200, examples=["Career Coaching"])
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$", examples=["2025-03-10"])
    time: str = Field(min_length=1, max_length=40, examples=["11:00"])
    pay_later: bool = False


class ScheduleBookingRequestDTO(CamelModel):
    meeting_link: str = Field(min_length=1, max_length=500, examples=["https://meet.example.com/abc"])


class SkillFeedbackDTO(CamelModel):
    skill: str = Field(min_length=1, max_length=120, examples=["Communication"])
    rating: str = Field(min_length=1, max_length=40, examples=["Strong"])
    comments: str | None = Field(default=None, max_length=2000)


class CompleteBookingRequestDTO(CamelModel):
    report_url: str | None = Field(default=None, max_length=500)
    detailed_feedback: list[SkillFeedbackDTO] = Field(default_factory=list)


class AttachReportRequestDTO(CamelModel):
    report_url: str = Field(min_length=1, max_length=500)


class RefundRequestDTO(CamelModel):
    reason: str = Field(min_length=1, max_length=2000)


class FeedbackRequestDTO(CamelModel):
    feedback: str = Field(min_length=1, max_length=2000)


class BookingResponseDTO(CamelModel):
    """Booking as returned to clients and administrators."""

    booking_id: str
    user_id: str
    service_id: str
    service_name: str
    date: str
    time: str
    status: BookingStatus
    payment_status: PaymentStatus
    transaction_id: str | None = None
    meeting_link: str | None = None
    report_url: str | None = None
    refund_requested: bool = False
    refund_reason: str | None = None
    user_feedback: str | None = None
    detailed_feedback: list[SkillFeedbackDTO] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_domain(cls, booking: Booking) -> BookingResponseDTO:
        return cls(
            booking_id=booking.booking_id,
            user_id=booking.user_id,
            service_id=booking.service_id,
            service_name=booking.service_name,
            date=booking.date,
            time=booking.time,
            status=booking.status,
            payment_status=booking.payment_status,
            transaction_id=booking.transaction_id,
            meeting_link=booking.meeting_link,
            report_url=booking.report_url,
            refund_requested=booking.refund_requested,
            refund_reason=booking.refund_reason,
            user_feedback=booking.user_feedback,
            detailed_feedback=[
                SkillFeedbackDTO(skill=item.skill, rating=item.rating, comments=item.comments)
                for item in booking.detailed_feedback
            ],
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class RefundResponseDTO(CamelModel):
    success: bool
    message: str
