from dataclasses import dataclass

from coaching_api.application.use_cases.booking_lifecycle import BookingLifecycle
from coaching_api.domain.entities import Booking
from coaching_api.domain.exceptions import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    SignatureMismatchError,
)
from coaching_api.domain.ports import AuditTrail, BookingRepository
from coaching_api.domain.services import PaymentVerifier
from coaching_api.domain.value_objects import Caller


@dataclass(slots=True, frozen=True)
class VerifyPaymentRequest:
    order_id: str
    payment_id: str
    signature: str
    booking_id: str

    def __post_init__(self) -> None:
        for field_name in ("order_id", "payment_id", "signature", "booking_id"):
            value = getattr(self, field_name)
            if not value or not value.strip():
                raise InvalidArgumentError(f"{field_name} must not be empty")


class VerifyPaymentUseCase:
    """Check the provider signature, then confirm payment on the booking.

    Nothing is read from or written to the booking store until the
    signature has been accepted.
    """

    def __init__(
        self,
        verifier: PaymentVerifier,
        lifecycle: BookingLifecycle,
        booking_repository: BookingRepository,
        audit_logger: AuditTrail | None = None,
    ) -> None:
        self._verifier = verifier
        self._lifecycle = lifecycle
        self._booking_repository = booking_repository
        self._audit_logger = audit_logger

    async def execute(self, caller: Caller, request: VerifyPaymentRequest) -> Booking:
        try:
            self._verifier.verify(
                request.order_id,
                request.payment_id,
                request.signature,
                booking_id=request.booking_id,
            )
        except SignatureMismatchError:
            if self._audit_logger is not None:
                self._audit_logger.log_payment_tampering(
                    booking_id=request.booking_id,
                    actor=caller.user_id,
                    context={"order_id": request.order_id, "payment_id": request.payment_id},
                )
            raise

        booking = await self._booking_repository.get(request.booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with ID {request.booking_id} not found.")
        if booking.user_id != caller.user_id and not caller.is_admin:
            raise PermissionDeniedError("Booking belongs to another user.")
        return await self._lifecycle.confirm_payment(
            request.booking_id,
            request.payment_id,
            actor=caller.user_id,
        )
