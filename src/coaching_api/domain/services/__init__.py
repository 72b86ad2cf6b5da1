from coaching_api.domain.services.notification_dispatcher import NotificationDispatcher
from coaching_api.domain.services.payment_verifier import PaymentVerifier
from coaching_api.domain.services.slot_resolution import remaining_slots

__all__ = ["NotificationDispatcher", "PaymentVerifier", "remaining_slots"]
