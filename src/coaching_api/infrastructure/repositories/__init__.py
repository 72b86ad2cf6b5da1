from coaching_api.infrastructure.repositories.mysql_availability_repository import (
    MySQLAvailabilityRepository,
)
from coaching_api.infrastructure.repositories.mysql_booking_repository import (
    MySQLBookingRepository,
)
from coaching_api.infrastructure.repositories.mysql_notification_repository import (
    MySQLNotificationRepository,
)
from coaching_api.infrastructure.repositories.mysql_user_profile_repository import (
    MySQLUserProfileRepository,
)

__all__ = [
    "MySQLAvailabilityRepository",
    "MySQLBookingRepository",
    "MySQLNotificationRepository",
    "MySQLUserProfileRepository",
]
