from collections.abc import Mapping
from typing import Any

from coaching_api.domain.entities import Booking, Notification
from coaching_api.domain.enums import BookingStatus, NotificationKind

BOOKINGS_HREF = "/dashboard/bookings"
CONTACT_HREF = "/dashboard/contact"


def _short_service_name(name: str) -> str:
    return f"{name[:17]}..." if len(name) > 20 else name


class NotificationDispatcher:
    """Derive user notifications from a booking's before/after snapshots.

    Each rule is evaluated independently, so one write can yield several
    notifications. The dispatcher has no side effects; callers persist the
    returned notifications.
    """

    def __init__(
        self,
        bookings_href: str = BOOKINGS_HREF,
        contact_href: str = CONTACT_HREF,
    ) -> None:
        self._bookings_href = bookings_href
        self._contact_href = contact_href

    def for_booking_change(self, before: Booking | None, after: Booking) -> list[Notification]:
        if before is None:
            return []
        name = _short_service_name(after.service_name)
        notifications: list[Notification] = []

        if (
            before.status != BookingStatus.SCHEDULED
            and after.status == BookingStatus.SCHEDULED
            and after.meeting_link
            and not before.meeting_link
        ):
            notifications.append(
                self._booking_notification(
                    after,
                    NotificationKind.SESSION_SCHEDULED,
                    f"Session for '{name}' is scheduled.",
                )
            )
        if before.status != BookingStatus.CANCELLED and after.status == BookingStatus.CANCELLED:
            notifications.append(
                self._booking_notification(
                    after,
                    NotificationKind.SESSION_CANCELLED,
                    f"Session for '{name}' was cancelled.",
                )
            )
        if before.status != BookingStatus.COMPLETED and after.status == BookingStatus.COMPLETED:
            notifications.append(
                self._booking_notification(
                    after,
                    NotificationKind.FEEDBACK_AVAILABLE,
                    f"Session for '{name}' is completed. Feedback is now available.",
                )
            )
        if not before.report_url and after.report_url:
            notifications.append(
                self._booking_notification(
                    after,
                    NotificationKind.REPORT_AVAILABLE,
                    f"Feedback report for '{name}' is now available.",
                )
            )
        return notifications

    def for_message_created(self, message: Mapping[str, Any]) -> list[Notification]:
        """Notify the conversation owner when an administrator replies."""
        if message.get("sender_type") != "admin":
            return []
        user_id = str(message.get("user_id") or "")
        if not user_id:
            return []
        snippet = str(message.get("subject") or "").replace("Re: ", "")[:25]
        ellipsis = "..." if len(snippet) == 25 else ""
        return [
            Notification(
                user_id=user_id,
                kind=NotificationKind.ADMIN_REPLIED,
                message=f'Admin replied in: "{snippet}{ellipsis}"',
                href=self._contact_href,
            )
        ]

    def _booking_notification(
        self,
        booking: Booking,
        kind: NotificationKind,
        message: str,
    ) -> Notification:
        return Notification(
            user_id=booking.user_id,
            kind=kind,
            message=message,
            href=self._bookings_href,
        )
