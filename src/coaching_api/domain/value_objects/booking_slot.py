import re
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, tzinfo

_SLOT_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_SLOT_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?:\s*([AaPp][Mm]))?$")


def parse_slot_date(value: str) -> str:
    """Validate a canonical `YYYY-MM-DD` calendar date and return it unchanged."""
    if not isinstance(value, str) or not _SLOT_DATE_PATTERN.fullmatch(value):
        raise ValueError("date must use the YYYY-MM-DD format")
    try:
        date.fromisoformat(value)
    except ValueError as exc:
        raise ValueError(f"date is not a valid calendar day: {value}") from exc
    return value


def parse_slot_time(label: str) -> time:
    """Read a `HH:MM` or `H:MM AM/PM` slot label as a wall-clock time."""
    match = _SLOT_TIME_PATTERN.fullmatch(label.strip()) if isinstance(label, str) else None
    if match is None:
        raise ValueError(f"time slot '{label}' is not HH:MM or H:MM AM/PM")
    hours, minutes, meridiem = int(match.group(1)), int(match.group(2)), match.group(3)
    if meridiem is not None:
        if not 1 <= hours <= 12:
            raise ValueError(f"time slot '{label}' has an invalid 12-hour value")
        hours = hours % 12 + (12 if meridiem.upper() == "PM" else 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"time slot '{label}' is out of range")
    return time(hours, minutes)


@dataclass(frozen=True, slots=True)
class BookingSlot:
    """A (date, time label) pair that a single active booking may occupy.

    Labels are free text chosen by the administrator; only `starts_at`
    requires them to be a parseable clock time.
    """

    date: str
    time: str

    def __post_init__(self) -> None:
        parse_slot_date(self.date)
        if not isinstance(self.time, str) or not self.time.strip():
            raise ValueError("time must not be empty")

    def starts_at(self, session_timezone: tzinfo = UTC) -> datetime:
        return datetime.combine(
            date.fromisoformat(self.date),
            parse_slot_time(self.time),
            tzinfo=session_timezone,
        )
