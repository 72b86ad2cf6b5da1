from coaching_api.domain.value_objects.booking_slot import BookingSlot, parse_slot_date, parse_slot_time
from coaching_api.domain.value_objects.caller import ADMIN_ROLE, USER_ROLE, Caller

__all__ = ["ADMIN_ROLE", "USER_ROLE", "BookingSlot", "Caller", "parse_slot_date", "parse_slot_time"]
