import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from coaching_api.api.middleware import (
    ErrorHandlerMiddleware,
    RateLimiterMiddleware,
    validation_exception_handler,
)
from coaching_api.api.routers.availability import router as availability_router
from coaching_api.api.routers.bookings import router as bookings_router
from coaching_api.api.routers.health import router as health_router
from coaching_api.api.routers.notifications import router as notifications_router
from coaching_api.api.routers.payments import router as payments_router
from coaching_api.api.routers.profiles import router as profiles_router
from coaching_api.shared.config.container import ApplicationContainer
from coaching_api.shared.config.settings import Settings, settings


def create_app(
    app_settings: Settings = settings,
    container: ApplicationContainer | None = None,
) -> FastAPI:
    """Build and configure the FastAPI application instance."""
    logging.basicConfig(level=app_settings.log_level.upper())
    app_container = container or ApplicationContainer(app_settings)

    @asynccontextmanager
    async def app_lifespan(app: FastAPI):
        """Initialize and release shared app resources."""
        await app_container.startup()
        try:
            yield
        finally:
            await app_container.shutdown()

    app = FastAPI(
        title=app_settings.app_name,
        debug=app_settings.app_debug,
        version=app_settings.app_version,
        lifespan=app_lifespan,
    )
    app.state.container = app_container
    if app_settings.cors_allowed_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=app_settings.cors_allowed_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(
        RateLimiterMiddleware,
        default_limit_per_minute=app_settings.rate_limit_requests_per_minute,
        writes_limit_per_minute=app_settings.rate_limit_writes_per_minute,
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(availability_router, prefix="/api/v1")
    app.include_router(bookings_router, prefix="/api/v1")
    app.include_router(payments_router, prefix="/api/v1")
    app.include_router(notifications_router, prefix="/api/v1")
    app.include_router(profiles_router, prefix="/api/v1")
    return app
