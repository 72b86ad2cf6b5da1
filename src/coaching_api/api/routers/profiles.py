from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from coaching_api.api.dependencies import CallerDep, get_register_user_profile_use_case
from coaching_api.api.schemas import ProfileResponseDTO, RegisterProfileRequestDTO
from coaching_api.application import RegisterUserProfileUseCase

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileResponseDTO, summary="Caller identity and roles")
async def get_my_profile(caller: CallerDep) -> ProfileResponseDTO:
    return ProfileResponseDTO(
        user_id=caller.user_id,
        roles=sorted(caller.roles),
        is_admin=caller.is_admin,
    )


@router.post(
    "/me",
    response_model=ProfileResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="Register the caller's profile",
    description="Idempotent; answers 200 when the profile already exists.",
)
async def register_my_profile(
    payload: RegisterProfileRequestDTO,
    caller: CallerDep,
    response: Response,
    use_case: Annotated[RegisterUserProfileUseCase, Depends(get_register_user_profile_use_case)],
) -> ProfileResponseDTO:
    created = await use_case.execute(caller, payload.name, payload.email)
    if not created:
        response.status_code = status.HTTP_200_OK
    return ProfileResponseDTO(
        user_id=caller.user_id,
        roles=sorted(caller.roles),
        is_admin=caller.is_admin,
        created=created,
    )
