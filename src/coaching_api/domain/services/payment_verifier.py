import hashlib
import hmac
import logging

from coaching_api.domain.exceptions import SignatureMismatchError

logger = logging.getLogger(__name__)


class PaymentVerifier:
    """Check a provider payment confirmation before any booking is touched.

    The signature is `hex(HMAC-SHA256(secret, order_id + "|" + payment_id))`
    and is compared case-sensitively.

    Example:
        ```python
        verifier = PaymentVerifier(secret="s3cret")
        verifier.verify("order_1", "pay_1", signature, booking_id="b1")
        ```
    """

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("payment verification secret must not be empty")
        self._secret = secret.encode("utf-8")

    def expected_signature(self, order_id: str, payment_id: str) -> str:
        message = f"{order_id}|{payment_id}".encode("utf-8")
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()

    def is_valid(self, order_id: str, payment_id: str, supplied_signature: str) -> bool:
        expected = self.expected_signature(order_id, payment_id).encode("utf-8")
        return hmac.compare_digest(expected, supplied_signature.encode("utf-8"))

    def verify(
        self,
        order_id: str,
        payment_id: str,
        supplied_signature: str,
        *,
        booking_id: str | None = None,
    ) -> None:
        """Raise `SignatureMismatchError` unless the signature matches."""
        if self.is_valid(order_id, payment_id, supplied_signature):
            return
        logger.warning(
            "payment_tampering_detected booking_id=%s order_id=%s payment_id=%s",
            booking_id,
            order_id,
            payment_id,
        )
        raise SignatureMismatchError("Payment verification failed.")
