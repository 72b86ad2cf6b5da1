import logging
from decimal import ROUND_HALF_UP, Decimal

import httpx

from coaching_api.domain.exceptions import ProviderError
from coaching_api.domain.ports import PaymentOrder, RefundReceipt
from coaching_api.infrastructure.resilience import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    RetryPolicy,
)

logger = logging.getLogger(__name__)

_ALREADY_REFUNDED_MARKER = "fully refunded"


def is_transient_provider_failure(exc: Exception) -> bool:
    """Retry transport failures and provider 5xx answers, never 4xx rejections."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, ProviderError):
        return (exc.status_code or 0) >= 500
    return False


class RazorpayPaymentGateway:
    """Razorpay REST client for order creation and refunds.

    The `client` must carry the provider base URL and basic auth
    (key id, key secret). Order creation is retried; refunds are not, since
    a refund is only safe to repeat because the provider reports an already
    refunded payment, which this gateway maps to success.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        circuit_breaker: CircuitBreaker,
        retry_policy: RetryPolicy,
        key_id: str,
        currency: str = "INR",
        timeout_seconds: float = 10.0,
    ) -> None:
        self._client = client
        self._circuit_breaker = circuit_breaker
        self._retry_policy = retry_policy
        self._key_id = key_id
        self._currency = currency
        self._timeout_seconds = timeout_seconds

    @property
    def public_key(self) -> str:
        return self._key_id

    async def create_order(self, amount: Decimal, booking_id: str, user_id: str) -> PaymentOrder:
        payload = {
            "amount": self.to_minor_units(amount),
            "currency": self._currency,
            "receipt": f"receipt_booking_{booking_id}",
            "notes": {"bookingId": booking_id, "userId": user_id},
        }

        async def _request() -> PaymentOrder:
            response = await self._client.post("/orders", json=payload, timeout=self._timeout_seconds)
            if response.is_error:
                raise self._provider_error(response, "Could not create payment order.")
            body = response.json()
            return PaymentOrder(
                order_id=str(body["id"]),
                amount=Decimal(amount),
                currency=str(body.get("currency") or self._currency),
                notes=dict(body.get("notes") or payload["notes"]),
            )

        async def _request_with_circuit_breaker() -> PaymentOrder:
            return await self._circuit_breaker.call(_request)

        try:
            order = await self._retry_policy.execute(_request_with_circuit_breaker)
        except ProviderError:
            logger.exception("payment_order_failed booking_id=%s", booking_id)
            raise
        except (CircuitBreakerOpenError, httpx.HTTPError) as exc:
            logger.exception("payment_order_failed booking_id=%s", booking_id)
            raise ProviderError("Could not create payment order.") from exc
        logger.info("payment_order_opened booking_id=%s order_id=%s", booking_id, order.order_id)
        return order

    async def refund(self, payment_id: str) -> RefundReceipt:
        async def _request() -> RefundReceipt:
            response = await self._client.post(
                f"/payments/{payment_id}/refund",
                json={},
                timeout=self._timeout_seconds,
            )
            if response.is_error:
                error = self._provider_error(response, "Refund was rejected by the payment provider.")
                if error.detail and _ALREADY_REFUNDED_MARKER in error.detail.lower():
                    logger.info("refund_already_applied payment_id=%s", payment_id)
                    return RefundReceipt(payment_id=payment_id, refund_id=None, already_refunded=True)
                raise error
            body = response.json()
            return RefundReceipt(payment_id=payment_id, refund_id=body.get("id"), payload=body)

        try:
            return await self._circuit_breaker.call(_request)
        except ProviderError:
            raise
        except CircuitBreakerOpenError as exc:
            raise ProviderError("Payment provider is temporarily unavailable.") from exc
        except httpx.TimeoutException as exc:
            raise ProviderError("Payment provider timed out.") from exc
        except httpx.HTTPError as exc:
            raise ProviderError("An internal error occurred with the payment provider.") from exc

    @staticmethod
    def to_minor_units(amount: Decimal) -> int:
        return int((Decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @staticmethod
    def _provider_error(response: httpx.Response, message: str) -> ProviderError:
        detail: str | None = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("description"):
                detail = str(error["description"])
        return ProviderError(message, detail=detail, status_code=response.status_code)
