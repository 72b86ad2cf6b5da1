import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from coaching_api.domain.enums import PaymentStatus
from coaching_api.domain.exceptions import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
)
from coaching_api.domain.ports import BookingRepository, PaymentGateway
from coaching_api.domain.value_objects import Caller

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CreatePaymentOrderRequest:
    amount: Decimal
    booking_id: str

    def __post_init__(self) -> None:
        try:
            amount = Decimal(self.amount)
        except (InvalidOperation, TypeError, ValueError) as exc:
            raise InvalidArgumentError("amount must be a number") from exc
        if not amount.is_finite() or amount <= 0:
            raise InvalidArgumentError("amount must be greater than zero")
        if not self.booking_id or not self.booking_id.strip():
            raise InvalidArgumentError("booking_id must not be empty")
        object.__setattr__(self, "amount", amount)


@dataclass(slots=True, frozen=True)
class PaymentOrderResult:
    order_id: str
    public_key: str
    amount: Decimal
    currency: str


class CreatePaymentOrderUseCase:
    """Open a provider order the client checkout will pay against."""

    def __init__(self, booking_repository: BookingRepository, payment_gateway: PaymentGateway) -> None:
        self._booking_repository = booking_repository
        self._payment_gateway = payment_gateway

    async def execute(self, caller: Caller, request: CreatePaymentOrderRequest) -> PaymentOrderResult:
        booking = await self._booking_repository.get(request.booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with ID {request.booking_id} not found.")
        if booking.user_id != caller.user_id:
            raise PermissionDeniedError("Booking belongs to another user.")
        if booking.payment_status in (PaymentStatus.PAID, PaymentStatus.REFUNDED):
            raise FailedPreconditionError("Booking has already been paid.")
        if booking.status.is_terminal:
            raise FailedPreconditionError(f"Cannot pay for booking in status {booking.status}")

        order = await self._payment_gateway.create_order(
            request.amount,
            booking_id=booking.booking_id,
            user_id=caller.user_id,
        )
        logger.info(
            "payment_order_created booking_id=%s order_id=%s amount=%s currency=%s",
            booking.booking_id,
            order.order_id,
            order.amount,
            order.currency,
        )
        return PaymentOrderResult(
            order_id=order.order_id,
            public_key=self._payment_gateway.public_key,
            amount=order.amount,
            currency=order.currency,
        )
