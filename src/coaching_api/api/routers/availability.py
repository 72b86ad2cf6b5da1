from typing import Annotated

from fastapi import APIRouter, Depends, Query

from coaching_api.api.dependencies import (
    AdminDep,
    CallerDep,
    get_manage_availability_use_case,
    get_slot_resolver,
)
from coaching_api.api.schemas import (
    AvailabilityResponseDTO,
    AvailableSlotsResponseDTO,
    ErrorResponseDTO,
    SaveAvailabilityRequestDTO,
)
from coaching_api.application import ManageAvailabilityUseCase, SlotResolver

router = APIRouter(prefix="/availability", tags=["availability"])

_AUTH_ERRORS = {
    400: {"model": ErrorResponseDTO, "description": "Invalid argument"},
    401: {"model": ErrorResponseDTO, "description": "Missing caller identity"},
    503: {"model": ErrorResponseDTO, "description": "Store unavailable"},
}


@router.get(
    "/slots",
    response_model=AvailableSlotsResponseDTO,
    summary="Free slots for a day",
    description="Administrator-offered times for the date minus those held by active bookings.",
    responses=_AUTH_ERRORS,
)
async def get_available_slots(
    _caller: CallerDep,
    resolver: Annotated[SlotResolver, Depends(get_slot_resolver)],
    date: Annotated[str, Query(examples=["2025-03-10"])],
) -> AvailableSlotsResponseDTO:
    return AvailableSlotsResponseDTO(available_slots=await resolver.resolve(date))


@router.get(
    "/range",
    response_model=AvailabilityResponseDTO,
    summary="Offered slots for a date range",
    responses=_AUTH_ERRORS,
)
async def get_availability_range(
    _caller: CallerDep,
    use_case: Annotated[ManageAvailabilityUseCase, Depends(get_manage_availability_use_case)],
    start: Annotated[str, Query(examples=["2025-03-01"])],
    end: Annotated[str, Query(examples=["2025-03-31"])],
) -> AvailabilityResponseDTO:
    return AvailabilityResponseDTO(availability=await use_case.get_range(start, end))


@router.get(
    "",
    response_model=AvailabilityResponseDTO,
    summary="All offered slots",
    responses={**_AUTH_ERRORS, 403: {"model": ErrorResponseDTO, "description": "Admin only"}},
)
async def get_availability(
    _admin: AdminDep,
    use_case: Annotated[ManageAvailabilityUseCase, Depends(get_manage_availability_use_case)],
) -> AvailabilityResponseDTO:
    return AvailabilityResponseDTO(availability=await use_case.get_all())


@router.put(
    "",
    response_model=AvailabilityResponseDTO,
    summary="Overwrite offered slots",
    description="Each listed day is replaced wholesale. An empty list marks the day unavailable.",
    responses={**_AUTH_ERRORS, 403: {"model": ErrorResponseDTO, "description": "Admin only"}},
)
async def save_availability(
    payload: SaveAvailabilityRequestDTO,
    _admin: AdminDep,
    use_case: Annotated[ManageAvailabilityUseCase, Depends(get_manage_availability_use_case)],
) -> AvailabilityResponseDTO:
    return AvailabilityResponseDTO(availability=await use_case.save(payload.updates))
