from pydantic import Field

from coaching_api.api.schemas.base import CamelModel


class RegisterProfileRequestDTO(CamelModel):
    name: str = Field(min_length=1, max_length=120, examples=["Asha Rao"])
    email: str | None = Field(default=None, max_length=190, examples=["asha@example.com"])


class ProfileResponseDTO(CamelModel):
    user_id: str
    roles: list[str]
    is_admin: bool
    created: bool = False
