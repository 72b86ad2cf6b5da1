from coaching_api.api.middleware.error_handler import (
    ErrorHandlerMiddleware,
    build_error_response,
    validation_exception_handler,
)
from coaching_api.api.middleware.rate_limiter import RateLimiterMiddleware

__all__ = [
    "ErrorHandlerMiddleware",
    "RateLimiterMiddleware",
    "build_error_response",
    "validation_exception_handler",
]
