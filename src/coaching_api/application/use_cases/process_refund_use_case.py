import logging
from dataclasses import dataclass

from coaching_api.application.use_cases.booking_lifecycle import BookingLifecycle
from coaching_api.domain.exceptions import InvalidArgumentError, NotFoundError, ProviderError
from coaching_api.domain.ports import BookingRepository, PaymentGateway

logger = logging.getLogger(__name__)

REFUND_SUCCESS_MESSAGE = "Refund processed and booking cancelled."


@dataclass(slots=True, frozen=True)
class RefundResult:
    success: bool
    message: str
    refund_id: str | None = None


class RefundProcessor:
    """Refund a paid booking at the provider, then cancel it locally.

    The provider call happens first. When it fails the booking is not
    written at all. When the local write is lost after a provider success,
    calling `refund` again is safe because the gateway reports an already
    refunded payment as success.
    """

    def __init__(
        self,
        booking_repository: BookingRepository,
        payment_gateway: PaymentGateway,
        lifecycle: BookingLifecycle,
    ) -> None:
        self._booking_repository = booking_repository
        self._payment_gateway = payment_gateway
        self._lifecycle = lifecycle

    async def refund(self, booking_id: str, actor: str) -> RefundResult:
        if not booking_id or not booking_id.strip():
            raise InvalidArgumentError("booking_id must not be empty")
        booking = await self._booking_repository.get(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with ID {booking_id} not found.")
        transaction_id = booking.ensure_refundable()

        try:
            receipt = await self._payment_gateway.refund(transaction_id)
        except ProviderError:
            logger.exception(
                "refund_provider_failed booking_id=%s transaction_id=%s",
                booking_id,
                transaction_id,
            )
            raise

        await self._lifecycle.apply_refund(booking_id, actor=actor)
        logger.info(
            "refund_processed booking_id=%s transaction_id=%s refund_id=%s already_refunded=%s",
            booking_id,
            transaction_id,
            receipt.refund_id,
            receipt.already_refunded,
        )
        return RefundResult(success=True, message=REFUND_SUCCESS_MESSAGE, refund_id=receipt.refund_id)
