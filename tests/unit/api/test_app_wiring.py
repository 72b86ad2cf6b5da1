from fastapi.middleware.cors import CORSMiddleware

from coaching_api.api import app as app_module
from coaching_api.api.middleware import ErrorHandlerMiddleware, RateLimiterMiddleware


def test_create_app_registers_booking_lifecycle_routes() -> None:
    application = app_module.create_app()
    route_paths = set(application.openapi()["paths"])

    assert {
        "/api/v1/health",
        "/api/v1/availability/slots",
        "/api/v1/availability",
        "/api/v1/bookings",
        "/api/v1/bookings/{booking_id}/schedule",
        "/api/v1/bookings/{booking_id}/refund",
        "/api/v1/payments/orders",
        "/api/v1/payments/verify",
        "/api/v1/notifications",
        "/api/v1/profiles/me",
    } <= route_paths


def test_create_app_enables_cors_middleware_when_origins_are_configured(monkeypatch) -> None:
    monkeypatch.setattr(
        app_module.settings,
        "cors_allowed_origins",
        "http://localhost:3000,http://localhost:5173",
    )

    application = app_module.create_app()
    middleware_types = {middleware.cls for middleware in application.user_middleware}

    assert CORSMiddleware in middleware_types
    assert {ErrorHandlerMiddleware, RateLimiterMiddleware} <= middleware_types


def test_create_app_stores_container_on_state() -> None:
    application = app_module.create_app()

    assert application.state.container.settings is app_module.settings
