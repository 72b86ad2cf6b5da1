class CoachingError(Exception):
    """Base class for errors reported to callers with a stable error code."""

    code = "INTERNAL"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnauthenticatedError(CoachingError):
    """Raised when the caller identity is missing."""

    code = "UNAUTHENTICATED"


class PermissionDeniedError(CoachingError):
    """Raised when the caller lacks the role or ownership an operation needs."""

    code = "PERMISSION_DENIED"


class SignatureMismatchError(PermissionDeniedError):
    """Raised when a payment confirmation signature does not match."""

    code = "SIGNATURE_MISMATCH"


class InvalidArgumentError(CoachingError, ValueError):
    """Raised for missing or malformed request fields."""

    code = "INVALID_ARGUMENT"


class NotFoundError(CoachingError):
    """Raised when a referenced booking or record does not exist."""

    code = "NOT_FOUND"


class FailedPreconditionError(CoachingError):
    """Raised when the current record state does not allow the operation."""

    code = "FAILED_PRECONDITION"


class SlotConflictError(FailedPreconditionError):
    """Raised when the requested slot is not offered or already taken."""

    code = "SLOT_CONFLICT"


class NotRefundableError(FailedPreconditionError):
    """Raised when a booking is not paid or has no transaction id."""

    code = "NOT_REFUNDABLE"


class InvalidTransitionError(FailedPreconditionError):
    """Raised when a lifecycle transition is not legal from the current status."""

    code = "INVALID_TRANSITION"


class ConcurrentModificationError(FailedPreconditionError):
    """Raised when a booking changed between read and write."""

    code = "CONCURRENT_MODIFICATION"


class ProviderError(CoachingError):
    """Raised when the payment provider rejects or fails a call.

    `detail` carries the provider's own description when it sent one, and is
    the only provider text ever surfaced to callers.
    """

    code = "PROVIDER_ERROR"

    def __init__(self, message: str, *, detail: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message)
        self.detail = detail
        self.status_code = status_code


class InternalError(CoachingError):
    """Raised for unexpected failures."""

    code = "INTERNAL"
    retryable = False


class StoreUnavailableError(InternalError):
    """Raised when the booking/availability store cannot be reached."""

    code = "STORE_UNAVAILABLE"
    retryable = True
