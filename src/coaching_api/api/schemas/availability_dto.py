from pydantic import Field

from coaching_api.api.schemas.base import CamelModel


class AvailableSlotsResponseDTO(CamelModel):
    available_slots: list[str] = Field(default_factory=list, examples=[["11:00"]])


class AvailabilityResponseDTO(CamelModel):
    availability: dict[str, list[str]] = Field(
        default_factory=dict,
        examples=[{"2025-03-10": ["10:00", "11:00"]}],
    )


class SaveAvailabilityRequestDTO(CamelModel):
    """Days to overwrite; an empty list marks the day unavailable."""

    updates: dict[str, list[str]] = Field(min_length=1)
