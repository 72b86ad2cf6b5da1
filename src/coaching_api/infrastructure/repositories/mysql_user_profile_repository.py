from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.domain.exceptions import StoreUnavailableError
from coaching_api.domain.value_objects import USER_ROLE
from coaching_api.infrastructure.db.models import UserProfileModel


class MySQLUserProfileRepository:
    """Role lookup and first-sign-up profile creation on `user_profiles`."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_roles(self, user_id: str) -> frozenset[str] | None:
        try:
            async with self._session_factory() as session:
                result = await session.exec(
                    select(UserProfileModel).where(UserProfileModel.user_id == user_id)
                )
                model = result.one_or_none()
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Profile store is unavailable") from exc
        if model is None:
            return None
        return frozenset(str(role) for role in model.roles or ())

    async def create_if_missing(self, user_id: str, name: str, email: str | None) -> bool:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    result = await session.exec(
                        select(UserProfileModel).where(UserProfileModel.user_id == user_id)
                    )
                    if result.one_or_none() is not None:
                        return False
                    session.add(
                        UserProfileModel(
                            user_id=user_id,
                            name=name,
                            email=email,
                            roles=[USER_ROLE],
                        )
                    )
        except IntegrityError:
            # Lost a race against a concurrent sign-up for the same user.
            return False
        except SQLAlchemyError as exc:
            raise StoreUnavailableError("Profile store is unavailable") from exc
        return True
