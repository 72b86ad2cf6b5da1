from coaching_api.infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerOpenError,
    CircuitState,
)
from coaching_api.infrastructure.resilience.retry_policy import RetryPolicy

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "RetryPolicy",
]
