from typing import Annotated

from fastapi import APIRouter, Depends, status

from coaching_api.api.dependencies import (
    AdminDep,
    CallerDep,
    get_booking_lifecycle,
    get_booking_queries_use_case,
    get_refund_processor,
)
from coaching_api.api.schemas import (
    AttachReportRequestDTO,
    BookingResponseDTO,
    CompleteBookingRequestDTO,
    ErrorResponseDTO,
    FeedbackRequestDTO,
    RefundRequestDTO,
    RefundResponseDTO,
    ReserveSlotRequestDTO,
    ScheduleBookingRequestDTO,
)
from coaching_api.application import (
    BookingLifecycle,
    BookingQueriesUseCase,
    RefundProcessor,
    ReserveSlotRequest,
)

router = APIRouter(prefix="/bookings", tags=["bookings"])

LifecycleDep = Annotated[BookingLifecycle, Depends(get_booking_lifecycle)]
QueriesDep = Annotated[BookingQueriesUseCase, Depends(get_booking_queries_use_case)]

_ERRORS = {
    400: {"model": ErrorResponseDTO, "description": "Invalid argument"},
    401: {"model": ErrorResponseDTO, "description": "Missing caller identity"},
    403: {"model": ErrorResponseDTO, "description": "Not allowed for this caller"},
    404: {"model": ErrorResponseDTO, "description": "Booking not found"},
    409: {"model": ErrorResponseDTO, "description": "Transition not allowed in current state"},
    422: {"model": ErrorResponseDTO, "description": "Validation error"},
    429: {"model": ErrorResponseDTO, "description": "Rate limit exceeded"},
    503: {"model": ErrorResponseDTO, "description": "Store unavailable"},
}


@router.post(
    "",
    response_model=BookingResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Reserve a slot",
    description=(
        "Create a booking for a currently free slot. Online payment starts in "
        "`pending_payment`; pay later starts in `pending_approval`."
    ),
    responses=_ERRORS,
)
async def reserve_slot(
    payload: ReserveSlotRequestDTO,
    caller: CallerDep,
    lifecycle: LifecycleDep,
) -> BookingResponseDTO:
    booking = await lifecycle.reserve(
        caller,
        ReserveSlotRequest(
            service_id=payload.service_id,
            service_name=payload.service_name,
            date=payload.date,
            time=payload.time,
            pay_later=payload.pay_later,
        ),
    )
    return BookingResponseDTO.from_domain(booking)


@router.get("/me", response_model=list[BookingResponseDTO], summary="Caller's bookings", responses=_ERRORS)
async def list_my_bookings(caller: CallerDep, queries: QueriesDep) -> list[BookingResponseDTO]:
    return [BookingResponseDTO.from_domain(booking) for booking in await queries.list_mine(caller)]


@router.get("", response_model=list[BookingResponseDTO], summary="All bookings", responses=_ERRORS)
async def list_bookings(_admin: AdminDep, queries: QueriesDep) -> list[BookingResponseDTO]:
    return [BookingResponseDTO.from_domain(booking) for booking in await queries.list_all()]


@router.get("/{booking_id}", response_model=BookingResponseDTO, summary="Get booking", responses=_ERRORS)
async def get_booking(booking_id: str, caller: CallerDep, queries: QueriesDep) -> BookingResponseDTO:
    return BookingResponseDTO.from_domain(await queries.get(caller, booking_id))


@router.post(
    "/{booking_id}/accept",
    response_model=BookingResponseDTO,
    summary="Approve a pay-later booking",
    responses=_ERRORS,
)
async def accept_booking(booking_id: str, admin: AdminDep, lifecycle: LifecycleDep) -> BookingResponseDTO:
    return BookingResponseDTO.from_domain(await lifecycle.accept(booking_id, actor=admin.user_id))


@router.post(
    "/{booking_id}/schedule",
    response_model=BookingResponseDTO,
    summary="Set the meeting link",
    responses=_ERRORS,
)
async def schedule_booking(
    booking_id: str,
    payload: ScheduleBookingRequestDTO,
    admin: AdminDep,
    lifecycle: LifecycleDep,
) -> BookingResponseDTO:
    booking = await lifecycle.schedule(booking_id, payload.meeting_link, actor=admin.user_id)
    return BookingResponseDTO.from_domain(booking)


@router.post(
    "/{booking_id}/complete",
    response_model=BookingResponseDTO,
    summary="Mark the session as held",
    responses=_ERRORS,
)
async def complete_booking(
    booking_id: str,
    payload: CompleteBookingRequestDTO,
    admin: AdminDep,
    lifecycle: LifecycleDep,
) -> BookingResponseDTO:
    booking = await lifecycle.complete(
        booking_id,
        actor=admin.user_id,
        report_url=payload.report_url,
        detailed_feedback=[item.model_dump() for item in payload.detailed_feedback],
    )
    return BookingResponseDTO.from_domain(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponseDTO,
    summary="Cancel a booking",
    description="Cancelling frees the slot immediately.",
    responses=_ERRORS,
)
async def cancel_booking(booking_id: str, admin: AdminDep, lifecycle: LifecycleDep) -> BookingResponseDTO:
    return BookingResponseDTO.from_domain(await lifecycle.cancel(booking_id, actor=admin.user_id))


@router.post(
    "/{booking_id}/report",
    response_model=BookingResponseDTO,
    summary="Attach the feedback report",
    responses=_ERRORS,
)
async def attach_report(
    booking_id: str,
    payload: AttachReportRequestDTO,
    admin: AdminDep,
    lifecycle: LifecycleDep,
) -> BookingResponseDTO:
    booking = await lifecycle.attach_report(booking_id, payload.report_url, actor=admin.user_id)
    return BookingResponseDTO.from_domain(booking)


@router.post(
    "/{booking_id}/refund-request",
    response_model=BookingResponseDTO,
    summary="Ask for a refund",
    responses=_ERRORS,
)
async def request_refund(
    booking_id: str,
    payload: RefundRequestDTO,
    caller: CallerDep,
    lifecycle: LifecycleDep,
) -> BookingResponseDTO:
    return BookingResponseDTO.from_domain(await lifecycle.request_refund(booking_id, caller, payload.reason))


@router.post(
    "/{booking_id}/feedback",
    response_model=BookingResponseDTO,
    summary="Leave feedback on a completed session",
    responses=_ERRORS,
)
async def submit_feedback(
    booking_id: str,
    payload: FeedbackRequestDTO,
    caller: CallerDep,
    lifecycle: LifecycleDep,
) -> BookingResponseDTO:
    booking = await lifecycle.submit_feedback(booking_id, caller, payload.feedback)
    return BookingResponseDTO.from_domain(booking)


@router.post(
    "/{booking_id}/refund",
    response_model=RefundResponseDTO,
    summary="Refund and cancel a paid booking",
    responses={**_ERRORS, 502: {"model": ErrorResponseDTO, "description": "Payment provider error"}},
)
async def process_refund(
    booking_id: str,
    admin: AdminDep,
    processor: Annotated[RefundProcessor, Depends(get_refund_processor)],
) -> RefundResponseDTO:
    result = await processor.refund(booking_id, actor=admin.user_id)
    return RefundResponseDTO(success=result.success, message=result.message)
