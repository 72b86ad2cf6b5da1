from decimal import Decimal

from pydantic import AliasChoices, Field

from coaching_api.api.schemas.base import CamelModel


class CreatePaymentOrderRequestDTO(CamelModel):
    """Request body for `POST /api/v1/payments/orders`."""

    amount: Decimal = Field(gt=Decimal("0"), decimal_places=2, examples=["1499.00"])
    booking_id: str = Field(min_length=1, max_length=64)


class PaymentOrderResponseDTO(CamelModel):
    order_id: str
    public_key: str
    amount: Decimal
    currency: str


class VerifyPaymentRequestDTO(CamelModel):
    """Checkout callback fields; the provider's own field names are accepted too."""

    order_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("orderId", "order_id", "razorpay_order_id"),
    )
    payment_id: str = Field(
        min_length=1,
        validation_alias=AliasChoices("paymentId", "payment_id", "razorpay_payment_id"),
    )
    signature: str = Field(
        min_length=1,
        validation_alias=AliasChoices("signature", "razorpay_signature"),
    )
    booking_id: str = Field(min_length=1, validation_alias=AliasChoices("bookingId", "booking_id"))


class VerifyPaymentResponseDTO(CamelModel):
    success: bool
    message: str
