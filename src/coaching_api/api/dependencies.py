"""FastAPI dependencies resolving the caller identity and use cases.

Use cases are built per request from the `ApplicationContainer` stored on
`app.state`. Tests replace these callables through
`app.dependency_overrides`.
"""

import logging
from typing import Annotated

from fastapi import Depends, Request

from coaching_api.application import (
    BookingLifecycle,
    BookingQueriesUseCase,
    CreatePaymentOrderUseCase,
    ManageAvailabilityUseCase,
    NotificationInboxUseCase,
    RefundProcessor,
    RegisterUserProfileUseCase,
    SlotResolver,
    VerifyPaymentUseCase,
)
from coaching_api.domain.exceptions import PermissionDeniedError, UnauthenticatedError
from coaching_api.domain.ports import UserProfileRepository
from coaching_api.domain.value_objects import USER_ROLE, Caller
from coaching_api.shared.config.container import ApplicationContainer
from coaching_api.shared.config.settings import settings

logger = logging.getLogger(__name__)


def get_container(request: Request) -> ApplicationContainer:
    return request.app.state.container


ContainerDep = Annotated[ApplicationContainer, Depends(get_container)]


def get_user_profile_repository(container: ContainerDep) -> UserProfileRepository:
    return container.create_user_profile_repository()


async def get_caller(
    request: Request,
    profiles: Annotated[UserProfileRepository, Depends(get_user_profile_repository)],
) -> Caller:
    """Resolve the caller from the identity header set by the upstream auth proxy."""
    user_id = (request.headers.get(settings.caller_id_header) or "").strip()
    if not user_id:
        raise UnauthenticatedError("The function must be called while authenticated.")
    roles = await profiles.get_roles(user_id)
    return Caller(user_id=user_id, roles=roles if roles else frozenset({USER_ROLE}))


CallerDep = Annotated[Caller, Depends(get_caller)]


async def require_admin(caller: CallerDep) -> Caller:
    if not caller.is_admin:
        logger.warning("admin_access_denied user_id=%s", caller.user_id)
        raise PermissionDeniedError("Administrator role required.")
    return caller


AdminDep = Annotated[Caller, Depends(require_admin)]


def get_slot_resolver(container: ContainerDep) -> SlotResolver:
    return container.create_slot_resolver()


def get_manage_availability_use_case(container: ContainerDep) -> ManageAvailabilityUseCase:
    return container.create_manage_availability_use_case()


def get_booking_lifecycle(container: ContainerDep) -> BookingLifecycle:
    return container.create_booking_lifecycle()


def get_booking_queries_use_case(container: ContainerDep) -> BookingQueriesUseCase:
    return container.create_booking_queries_use_case()


def get_create_payment_order_use_case(container: ContainerDep) -> CreatePaymentOrderUseCase:
    return container.create_create_payment_order_use_case()


def get_verify_payment_use_case(container: ContainerDep) -> VerifyPaymentUseCase:
    return container.create_verify_payment_use_case()


def get_refund_processor(container: ContainerDep) -> RefundProcessor:
    return container.create_refund_processor()


def get_notification_inbox_use_case(container: ContainerDep) -> NotificationInboxUseCase:
    return container.create_notification_inbox_use_case()


def get_register_user_profile_use_case(container: ContainerDep) -> RegisterUserProfileUseCase:
    return container.create_register_user_profile_use_case()
