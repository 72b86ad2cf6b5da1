from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base DTO exposing camelCase JSON while accepting snake_case input too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponseDTO(BaseModel):
    """Error payload used for business, validation and server failures."""

    error: str
    message: str
    request_id: str | None = None
    code: str | None = None
