from coaching_api.infrastructure.gateways.razorpay_payment_gateway import (
    RazorpayPaymentGateway,
    is_transient_provider_failure,
)

__all__ = ["RazorpayPaymentGateway", "is_transient_provider_failure"]
