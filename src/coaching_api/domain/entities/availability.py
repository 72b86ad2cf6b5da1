from dataclasses import dataclass, field

from coaching_api.domain.value_objects import parse_slot_date


@dataclass(slots=True, frozen=True)
class AvailabilityDay:
    """Administrator-authored time labels offered on one calendar day.

    An empty `time_slots` tuple means the day is unavailable.
    """

    date: str
    time_slots: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        parse_slot_date(self.date)
        seen: set[str] = set()
        for label in self.time_slots:
            if not isinstance(label, str) or not label.strip():
                raise ValueError("time slot labels must be non-empty strings")
            if label in seen:
                raise ValueError(f"duplicate time slot '{label}' for {self.date}")
            seen.add(label)

    @property
    def is_available(self) -> bool:
        return bool(self.time_slots)
