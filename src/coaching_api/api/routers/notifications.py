from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from coaching_api.api.dependencies import CallerDep, get_notification_inbox_use_case
from coaching_api.api.schemas import ErrorResponseDTO, NotificationResponseDTO
from coaching_api.application import NotificationInboxUseCase

router = APIRouter(prefix="/notifications", tags=["notifications"])

InboxDep = Annotated[NotificationInboxUseCase, Depends(get_notification_inbox_use_case)]


@router.get("", response_model=list[NotificationResponseDTO], summary="Caller's notifications")
async def list_notifications(caller: CallerDep, inbox: InboxDep) -> list[NotificationResponseDTO]:
    return [NotificationResponseDTO.from_domain(item) for item in await inbox.list(caller)]


@router.post(
    "/{notification_id}/seen",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Mark a notification as seen",
    responses={404: {"model": ErrorResponseDTO, "description": "Notification not found"}},
)
async def mark_notification_seen(notification_id: int, caller: CallerDep, inbox: InboxDep) -> Response:
    await inbox.mark_seen(caller, notification_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
