import logging

from coaching_api.domain.exceptions import InvalidArgumentError
from coaching_api.domain.ports import UserProfileRepository
from coaching_api.domain.value_objects import Caller
from coaching_api.shared.security import sanitize_and_validate_text

logger = logging.getLogger(__name__)


class RegisterUserProfileUseCase:
    """Create the caller's profile with the default `user` role on first sign-up."""

    def __init__(self, user_profile_repository: UserProfileRepository) -> None:
        self._user_profile_repository = user_profile_repository

    async def execute(self, caller: Caller, name: str, email: str | None = None) -> bool:
        try:
            clean_name = sanitize_and_validate_text(name, field_name="name")
        except ValueError as exc:
            raise InvalidArgumentError(str(exc)) from exc
        clean_email = email.strip() if email else None
        if clean_email is not None and "@" not in clean_email:
            raise InvalidArgumentError("email must be a valid address")

        created = await self._user_profile_repository.create_if_missing(
            caller.user_id,
            clean_name,
            clean_email,
        )
        if created:
            logger.info("user_profile_created user_id=%s", caller.user_id)
        return created
