import logging
import re
import uuid
from collections.abc import Awaitable, Callable

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from coaching_api.api.schemas import ErrorResponseDTO
from coaching_api.domain.exceptions import (
    CoachingError,
    FailedPreconditionError,
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    ProviderError,
    StoreUnavailableError,
    UnauthenticatedError,
)

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
GENERIC_SERVER_MESSAGE = "Unable to process request. Please try again later."
GENERIC_PROVIDER_MESSAGE = "An internal error occurred with the payment provider."

# Most specific classes first; lookup walks this list in order.
_ERROR_STATUS: tuple[tuple[type[CoachingError], int, str], ...] = (
    (UnauthenticatedError, 401, "Unauthenticated"),
    (PermissionDeniedError, 403, "Permission denied"),
    (InvalidArgumentError, 400, "Invalid argument"),
    (NotFoundError, 404, "Not found"),
    (FailedPreconditionError, 409, "Failed precondition"),
    (ProviderError, 502, "Payment provider error"),
    (StoreUnavailableError, 503, "Service unavailable"),
    (InternalError, 500, "Internal server error"),
)


def _mask_sensitive(text: str) -> str:
    masked = re.sub(r"([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})", r"\1***@\2", text)
    masked = re.sub(r"(?i)(signature|password|token|secret)\s*[:=]\s*[^,\s]+", r"\1=***", masked)
    return masked


def get_request_id(request: Request) -> str:
    request_id = getattr(request.state, "request_id", None)
    if request_id is None:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
    return request_id


def build_error_response(request: Request, exc: CoachingError) -> JSONResponse:
    """Map a domain error onto its HTTP status and sanitized payload."""
    status_code, error = 500, "Internal server error"
    for error_type, mapped_status, mapped_error in _ERROR_STATUS:
        if isinstance(exc, error_type):
            status_code, error = mapped_status, mapped_error
            break

    if isinstance(exc, ProviderError):
        message = exc.detail or GENERIC_PROVIDER_MESSAGE
    elif status_code >= 500:
        message = GENERIC_SERVER_MESSAGE
    else:
        message = exc.message
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponseDTO(
            error=error,
            message=_mask_sensitive(message),
            code=exc.code,
            request_id=get_request_id(request),
        ).model_dump(),
    )


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = get_request_id(request)
        try:
            response = await call_next(request)
        except RequestValidationError as exc:
            self._log_exception("validation_error", request, exc)
            response = JSONResponse(
                status_code=422,
                content=build_validation_error_response(request_id).model_dump(),
            )
        except CoachingError as exc:
            if isinstance(exc, (ProviderError, InternalError)):
                self._log_exception("server_error", request, exc)
            else:
                self._log_rejection(request, exc)
            response = build_error_response(request, exc)
        except SQLAlchemyError as exc:
            self._log_exception("database_error", request, exc)
            response = JSONResponse(
                status_code=503,
                content=ErrorResponseDTO(
                    error="Service unavailable",
                    message=GENERIC_SERVER_MESSAGE,
                    code="DATABASE_ERROR",
                    request_id=request_id,
                ).model_dump(),
            )
        except Exception as exc:
            self._log_exception("unexpected_error", request, exc)
            response = JSONResponse(
                status_code=500,
                content=ErrorResponseDTO(
                    error="Internal server error",
                    message=GENERIC_SERVER_MESSAGE,
                    code="INTERNAL_ERROR",
                    request_id=request_id,
                ).model_dump(),
            )
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    @staticmethod
    def _log_rejection(request: Request, exc: CoachingError) -> None:
        logger.info(
            "api_request_rejected code=%s method=%s path=%s detail=%s",
            exc.code,
            request.method,
            request.url.path,
            _mask_sensitive(exc.message),
        )

    @staticmethod
    def _log_exception(error_type: str, request: Request, exc: Exception) -> None:
        logger.exception(
            "api_error type=%s method=%s path=%s detail=%s",
            error_type,
            request.method,
            request.url.path,
            _mask_sensitive(str(exc)),
        )


def build_validation_error_response(request_id: str | None = None) -> ErrorResponseDTO:
    return ErrorResponseDTO(
        error="Validation error",
        message="Request validation failed",
        code="VALIDATION_ERROR",
        request_id=request_id,
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    ErrorHandlerMiddleware._log_exception("validation_error", request, exc)
    return JSONResponse(
        status_code=422,
        content=build_validation_error_response(get_request_id(request)).model_dump(),
    )
