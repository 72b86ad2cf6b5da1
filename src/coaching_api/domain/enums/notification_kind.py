from enum import StrEnum


class NotificationKind(StrEnum):
    SESSION_SCHEDULED = "session_scheduled"
    SESSION_CANCELLED = "session_cancelled"
    FEEDBACK_AVAILABLE = "feedback_available"
    REPORT_AVAILABLE = "report_available"
    ADMIN_REPLIED = "admin_replied"
