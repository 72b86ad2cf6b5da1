from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient

from coaching_api.api import dependencies
from coaching_api.api.app import create_app
from coaching_api.application import (
    BookingQueriesUseCase,
    CreatePaymentOrderUseCase,
    ManageAvailabilityUseCase,
    NotificationInboxUseCase,
    RefundProcessor,
    RegisterUserProfileUseCase,
    VerifyPaymentUseCase,
)
from coaching_api.domain.entities import Notification
from coaching_api.domain.enums import BookingStatus, NotificationKind, PaymentStatus
from coaching_api.domain.exceptions import ProviderError
from coaching_api.domain.services import PaymentVerifier
from coaching_api.shared.config.settings import settings

CLIENT_HEADERS = {"X-Caller-Id": "user-1"}
ADMIN_HEADERS = {"X-Caller-Id": "admin-1"}


@dataclass
class Api:
    client: TestClient
    booking_repository: object
    availability_repository: object
    notification_repository: object
    payment_gateway: object


@pytest.fixture
def api(
    booking_repository,
    availability_repository,
    notification_repository,
    user_profile_repository,
    payment_gateway,
    slot_resolver,
    lifecycle,
):
    app = create_app()
    verifier = PaymentVerifier(secret="s3cret")
    app.dependency_overrides.update(
        {
            dependencies.get_user_profile_repository: lambda: user_profile_repository,
            dependencies.get_slot_resolver: lambda: slot_resolver,
            dependencies.get_booking_lifecycle: lambda: lifecycle,
            dependencies.get_booking_queries_use_case: lambda: BookingQueriesUseCase(booking_repository),
            dependencies.get_manage_availability_use_case: lambda: ManageAvailabilityUseCase(
                availability_repository
            ),
            dependencies.get_create_payment_order_use_case: lambda: CreatePaymentOrderUseCase(
                booking_repository, payment_gateway
            ),
            dependencies.get_verify_payment_use_case: lambda: VerifyPaymentUseCase(
                verifier, lifecycle, booking_repository
            ),
            dependencies.get_refund_processor: lambda: RefundProcessor(
                booking_repository, payment_gateway, lifecycle
            ),
            dependencies.get_notification_inbox_use_case: lambda: NotificationInboxUseCase(
                notification_repository
            ),
            dependencies.get_register_user_profile_use_case: lambda: RegisterUserProfileUseCase(
                user_profile_repository
            ),
        }
    )
    try:
        yield Api(
            client=TestClient(app),
            booking_repository=booking_repository,
            availability_repository=availability_repository,
            notification_repository=notification_repository,
            payment_gateway=payment_gateway,
        )
    finally:
        app.dependency_overrides.clear()


def _reserve(client: TestClient, time: str = "10:00", pay_later: bool = False):
    return client.post(
        "/api/v1/bookings",
        json={
            "serviceId": "career-coaching",
            "serviceName": "Career Coaching",
            "date": "2025-03-10",
            "time": time,
            "payLater": pay_later,
        },
        headers=CLIENT_HEADERS,
    )


def test_health_endpoint_needs_no_identity(api) -> None:
    response = api.client.get("/api/v1/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert body["service"] == settings.app_name


def test_missing_identity_is_unauthenticated(api) -> None:
    response = api.client.get("/api/v1/availability/slots", params={"date": "2025-03-10"})

    assert response.status_code == 401
    body = response.json()
    assert body["code"] == "UNAUTHENTICATED"
    assert body["request_id"] == response.headers["X-Request-ID"]


def test_available_slots_and_reservation_flow(api) -> None:
    reserve = _reserve(api.client)
    slots = api.client.get("/api/v1/availability/slots", params={"date": "2025-03-10"}, headers=CLIENT_HEADERS)

    assert reserve.status_code == 201
    assert reserve.json()["bookingId"] == "booking-1"
    assert reserve.json()["status"] == "pending_payment"
    assert reserve.json()["paymentStatus"] == "pending"
    assert slots.json() == {"availableSlots": ["11:00"]}


def test_reserving_taken_slot_is_a_conflict(api) -> None:
    _reserve(api.client)

    response = _reserve(api.client)

    assert response.status_code == 409
    assert response.json()["code"] == "SLOT_CONFLICT"


def test_malformed_date_is_invalid_argument(api) -> None:
    response = api.client.get("/api/v1/availability/slots", params={"date": "10-03-2025"}, headers=CLIENT_HEADERS)

    assert response.status_code == 400
    assert response.json()["code"] == "INVALID_ARGUMENT"


def test_request_validation_failure_returns_422(api) -> None:
    response = api.client.post("/api/v1/bookings", json={"serviceId": "x"}, headers=CLIENT_HEADERS)

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_availability_writes_require_admin(api) -> None:
    updates = {"updates": {"2025-03-11": ["09:00"]}}

    denied = api.client.put("/api/v1/availability", json=updates, headers=CLIENT_HEADERS)
    saved = api.client.put("/api/v1/availability", json=updates, headers=ADMIN_HEADERS)

    assert denied.status_code == 403
    assert denied.json()["code"] == "PERMISSION_DENIED"
    assert saved.status_code == 200
    assert saved.json() == {"availability": {"2025-03-11": ["09:00"]}}
    assert "2025-03-11" in api.availability_repository.days


def test_admin_lifecycle_endpoints(api) -> None:
    booking_id = _reserve(api.client, pay_later=True).json()["bookingId"]

    accepted = api.client.post(f"/api/v1/bookings/{booking_id}/accept", headers=ADMIN_HEADERS)
    scheduled = api.client.post(
        f"/api/v1/bookings/{booking_id}/schedule",
        json={"meetingLink": "https://meet.example.com/abc"},
        headers=ADMIN_HEADERS,
    )
    completed = api.client.post(
        f"/api/v1/bookings/{booking_id}/complete",
        json={"reportUrl": "https://files.example.com/report.pdf"},
        headers=ADMIN_HEADERS,
    )

    assert accepted.json()["status"] == "accepted"
    assert scheduled.json()["meetingLink"] == "https://meet.example.com/abc"
    assert completed.json()["status"] == "completed"
    assert completed.json()["reportUrl"] == "https://files.example.com/report.pdf"


def test_invalid_transition_is_failed_precondition(api) -> None:
    booking_id = _reserve(api.client).json()["bookingId"]

    response = api.client.post(f"/api/v1/bookings/{booking_id}/complete", json={}, headers=ADMIN_HEADERS)

    assert response.status_code == 409
    assert response.json()["code"] == "INVALID_TRANSITION"


def test_other_user_cannot_read_booking(api) -> None:
    booking_id = _reserve(api.client).json()["bookingId"]

    response = api.client.get(f"/api/v1/bookings/{booking_id}", headers={"X-Caller-Id": "user-2"})

    assert response.status_code == 403


def test_verify_payment_accepts_provider_field_names(api) -> None:
    booking_id = _reserve(api.client).json()["bookingId"]
    signature = PaymentVerifier(secret="s3cret").expected_signature("order_1", "pay_1")

    response = api.client.post(
        "/api/v1/payments/verify",
        json={
            "razorpay_order_id": "order_1",
            "razorpay_payment_id": "pay_1",
            "razorpay_signature": signature,
            "bookingId": booking_id,
        },
        headers=CLIENT_HEADERS,
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Booking confirmed successfully"}
    stored = api.booking_repository.bookings[booking_id]
    assert (stored.status, stored.payment_status) == (BookingStatus.ACCEPTED, PaymentStatus.PAID)


def test_tampered_signature_is_rejected_without_mutation(api) -> None:
    booking_id = _reserve(api.client).json()["bookingId"]

    response = api.client.post(
        "/api/v1/payments/verify",
        json={"orderId": "order_1", "paymentId": "pay_1", "signature": "forged", "bookingId": booking_id},
        headers=CLIENT_HEADERS,
    )

    assert response.status_code == 403
    assert response.json()["code"] == "SIGNATURE_MISMATCH"
    assert api.booking_repository.bookings[booking_id].status == BookingStatus.PENDING_PAYMENT


def test_create_payment_order_returns_public_key(api) -> None:
    booking_id = _reserve(api.client).json()["bookingId"]

    response = api.client.post(
        "/api/v1/payments/orders",
        json={"amount": "1499.00", "bookingId": booking_id},
        headers=CLIENT_HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["orderId"] == "order_1"
    assert response.json()["publicKey"] == "rzp_test_public"


def test_refund_of_unpaid_booking_reports_precondition(api) -> None:
    booking_id = _reserve(api.client).json()["bookingId"]

    response = api.client.post(f"/api/v1/bookings/{booking_id}/refund", headers=ADMIN_HEADERS)

    assert response.status_code == 409
    assert response.json()["message"] == "Booking is not in a refundable state (not paid or no transaction ID)."


def test_refund_provider_failure_surfaces_detail(api, make_booking) -> None:
    api.booking_repository.add(
        make_booking("b-9", status=BookingStatus.ACCEPTED, payment_status=PaymentStatus.PAID, transaction_id="txn_9")
    )
    api.payment_gateway.refund_error = ProviderError("rejected", detail="Payment not captured")

    response = api.client.post("/api/v1/bookings/b-9/refund", headers=ADMIN_HEADERS)

    assert response.status_code == 502
    assert response.json()["message"] == "Payment not captured"
    assert api.booking_repository.bookings["b-9"].payment_status == PaymentStatus.PAID


def test_refund_success(api, make_booking) -> None:
    api.booking_repository.add(
        make_booking("b-9", status=BookingStatus.ACCEPTED, payment_status=PaymentStatus.PAID, transaction_id="txn_9")
    )

    response = api.client.post("/api/v1/bookings/b-9/refund", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Refund processed and booking cancelled."}


def test_refund_request_inside_cutoff_window_is_a_conflict(api, make_booking) -> None:
    api.booking_repository.add(
        make_booking(
            "b-9",
            date="2025-03-01",
            time="10:00",
            status=BookingStatus.SCHEDULED,
            payment_status=PaymentStatus.PAID,
            transaction_id="txn_9",
            meeting_link="https://meet.example.com/abc",
        )
    )

    response = api.client.post(
        "/api/v1/bookings/b-9/refund-request",
        json={"reason": "Travel conflict"},
        headers=CLIENT_HEADERS,
    )

    assert response.status_code == 409
    assert response.json()["code"] == "NOT_REFUNDABLE"
    assert response.json()["message"] == "Refund requests close 2 hours before the session starts"
    assert api.booking_repository.bookings["b-9"].refund_requested is False


def test_notifications_list_and_mark_seen(api) -> None:
    api.notification_repository.notifications = [
        Notification(
            id=7,
            user_id="user-1",
            kind=NotificationKind.SESSION_CANCELLED,
            message="Session for 'Career Coaching' was cancelled.",
            href="/dashboard/bookings",
        )
    ]

    listed = api.client.get("/api/v1/notifications", headers=CLIENT_HEADERS)
    seen = api.client.post("/api/v1/notifications/7/seen", headers=CLIENT_HEADERS)
    missing = api.client.post("/api/v1/notifications/8/seen", headers=CLIENT_HEADERS)

    assert listed.json()[0]["kind"] == "session_cancelled"
    assert "createdAt" in listed.json()[0]
    assert seen.status_code == 204
    assert missing.status_code == 404


def test_profile_registration_is_idempotent(api) -> None:
    first = api.client.post("/api/v1/profiles/me", json={"name": "Ana"}, headers={"X-Caller-Id": "user-5"})
    second = api.client.post("/api/v1/profiles/me", json={"name": "Ana"}, headers={"X-Caller-Id": "user-5"})
    admin = api.client.get("/api/v1/profiles/me", headers=ADMIN_HEADERS)

    assert first.status_code == 201
    assert first.json()["created"] is True
    assert second.status_code == 200
    assert admin.json()["isAdmin"] is True
