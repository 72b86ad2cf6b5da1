from typing import Annotated

from fastapi import APIRouter, Depends

from coaching_api.api.dependencies import (
    CallerDep,
    get_create_payment_order_use_case,
    get_verify_payment_use_case,
)
from coaching_api.api.schemas import (
    CreatePaymentOrderRequestDTO,
    ErrorResponseDTO,
    PaymentOrderResponseDTO,
    VerifyPaymentRequestDTO,
    VerifyPaymentResponseDTO,
)
from coaching_api.application import (
    CreatePaymentOrderRequest,
    CreatePaymentOrderUseCase,
    VerifyPaymentRequest,
    VerifyPaymentUseCase,
)

router = APIRouter(prefix="/payments", tags=["payments"])

_ERRORS = {
    400: {"model": ErrorResponseDTO, "description": "Invalid argument"},
    401: {"model": ErrorResponseDTO, "description": "Missing caller identity"},
    403: {"model": ErrorResponseDTO, "description": "Signature mismatch or foreign booking"},
    404: {"model": ErrorResponseDTO, "description": "Booking not found"},
    409: {"model": ErrorResponseDTO, "description": "Booking cannot be paid in its current state"},
    422: {"model": ErrorResponseDTO, "description": "Validation error"},
    429: {"model": ErrorResponseDTO, "description": "Rate limit exceeded"},
    502: {"model": ErrorResponseDTO, "description": "Payment provider error"},
}


@router.post(
    "/orders",
    response_model=PaymentOrderResponseDTO,
    summary="Create a payment order",
    description="Open a provider order for the booking and return the public checkout key.",
    responses=_ERRORS,
)
async def create_payment_order(
    payload: CreatePaymentOrderRequestDTO,
    caller: CallerDep,
    use_case: Annotated[CreatePaymentOrderUseCase, Depends(get_create_payment_order_use_case)],
) -> PaymentOrderResponseDTO:
    result = await use_case.execute(
        caller,
        CreatePaymentOrderRequest(amount=payload.amount, booking_id=payload.booking_id),
    )
    return PaymentOrderResponseDTO(
        order_id=result.order_id,
        public_key=result.public_key,
        amount=result.amount,
        currency=result.currency,
    )


@router.post(
    "/verify",
    response_model=VerifyPaymentResponseDTO,
    summary="Confirm a checkout payment",
    description="Check the provider signature, then mark the booking paid and accepted.",
    responses=_ERRORS,
)
async def verify_payment(
    payload: VerifyPaymentRequestDTO,
    caller: CallerDep,
    use_case: Annotated[VerifyPaymentUseCase, Depends(get_verify_payment_use_case)],
) -> VerifyPaymentResponseDTO:
    await use_case.execute(
        caller,
        VerifyPaymentRequest(
            order_id=payload.order_id,
            payment_id=payload.payment_id,
            signature=payload.signature,
            booking_id=payload.booking_id,
        ),
    )
    return VerifyPaymentResponseDTO(success=True, message="Booking confirmed successfully")
