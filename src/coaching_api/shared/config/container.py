import httpx
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from coaching_api.application import (
    BookingLifecycle,
    BookingQueriesUseCase,
    CreatePaymentOrderUseCase,
    ManageAvailabilityUseCase,
    NotificationInboxUseCase,
    RefundProcessor,
    RegisterUserProfileUseCase,
    SlotResolver,
    VerifyPaymentUseCase,
)
from coaching_api.domain.services import NotificationDispatcher, PaymentVerifier
from coaching_api.infrastructure.db.session import create_session_factory
from coaching_api.infrastructure.gateways import (
    RazorpayPaymentGateway,
    is_transient_provider_failure,
)
from coaching_api.infrastructure.repositories import (
    MySQLAvailabilityRepository,
    MySQLBookingRepository,
    MySQLNotificationRepository,
    MySQLUserProfileRepository,
)
from coaching_api.infrastructure.resilience import CircuitBreaker, RetryPolicy
from coaching_api.shared.config.settings import Settings, settings
from coaching_api.shared.logging import AuditLogger


class ApplicationContainer:
    """Dependency container for repositories, gateways and use cases."""

    def __init__(
        self,
        app_settings: Settings = settings,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
    ) -> None:
        self.settings = app_settings
        self.session_factory = session_factory or create_session_factory(app_settings)
        self._audit_logger = AuditLogger()
        self._payment_client: httpx.AsyncClient | None = None
        # One breaker per process so failures are counted across requests.
        self._payment_circuit_breaker = CircuitBreaker(
            failure_threshold=app_settings.circuit_breaker_failure_threshold,
            recovery_timeout_seconds=app_settings.circuit_breaker_recovery_seconds,
            name="razorpay",
        )

    async def startup(self) -> None:
        """Initialize long-lived external HTTP clients."""
        if self._payment_client is None:
            self._payment_client = httpx.AsyncClient(
                base_url=self.settings.razorpay_api_base_url.rstrip("/"),
                auth=(self.settings.razorpay_key_id, self.settings.razorpay_key_secret),
                limits=httpx.Limits(max_connections=self.settings.http_max_connections),
                timeout=self.settings.external_api_timeout_seconds,
            )

    async def shutdown(self) -> None:
        """Close long-lived external HTTP clients and the database engine."""
        if self._payment_client is not None:
            await self._payment_client.aclose()
            self._payment_client = None
        engine = self.session_factory.kw.get("bind")
        if engine is not None:
            await engine.dispose()

    def create_booking_repository(self) -> MySQLBookingRepository:
        return MySQLBookingRepository(self.session_factory)

    def create_availability_repository(self) -> MySQLAvailabilityRepository:
        return MySQLAvailabilityRepository(self.session_factory)

    def create_notification_repository(self) -> MySQLNotificationRepository:
        return MySQLNotificationRepository(self.session_factory)

    def create_user_profile_repository(self) -> MySQLUserProfileRepository:
        return MySQLUserProfileRepository(self.session_factory)

    def create_slot_resolver(self) -> SlotResolver:
        return SlotResolver(
            availability_repository=self.create_availability_repository(),
            booking_repository=self.create_booking_repository(),
        )

    def create_booking_lifecycle(self) -> BookingLifecycle:
        booking_repository = self.create_booking_repository()
        return BookingLifecycle(
            booking_repository=booking_repository,
            slot_resolver=SlotResolver(
                availability_repository=self.create_availability_repository(),
                booking_repository=booking_repository,
            ),
            audit_logger=self._audit_logger,
            session_timezone=self.settings.session_tzinfo,
        )

    def create_booking_queries_use_case(self) -> BookingQueriesUseCase:
        return BookingQueriesUseCase(self.create_booking_repository())

    def create_manage_availability_use_case(self) -> ManageAvailabilityUseCase:
        return ManageAvailabilityUseCase(self.create_availability_repository())

    def create_notification_inbox_use_case(self) -> NotificationInboxUseCase:
        return NotificationInboxUseCase(self.create_notification_repository())

    def create_register_user_profile_use_case(self) -> RegisterUserProfileUseCase:
        return RegisterUserProfileUseCase(self.create_user_profile_repository())

    def create_payment_verifier(self) -> PaymentVerifier:
        """Create the signature verifier with the configured provider secret."""
        return PaymentVerifier(secret=self.settings.razorpay_key_secret)

    def create_retry_policy(self) -> RetryPolicy:
        """Create retry policy that only retries transient provider failures."""
        return RetryPolicy(
            max_retries=self.settings.retry_max_attempts,
            retry_on=is_transient_provider_failure,
        )

    def create_payment_gateway(self) -> RazorpayPaymentGateway:
        """Create Razorpay gateway adapter."""
        if self._payment_client is None:
            raise RuntimeError("Container not started. Call startup() before requesting gateways.")
        return RazorpayPaymentGateway(
            client=self._payment_client,
            circuit_breaker=self._payment_circuit_breaker,
            retry_policy=self.create_retry_policy(),
            key_id=self.settings.razorpay_key_id,
            currency=self.settings.payment_currency,
            timeout_seconds=self.settings.external_api_timeout_seconds,
        )

    def create_create_payment_order_use_case(self) -> CreatePaymentOrderUseCase:
        return CreatePaymentOrderUseCase(
            booking_repository=self.create_booking_repository(),
            payment_gateway=self.create_payment_gateway(),
        )

    def create_verify_payment_use_case(self) -> VerifyPaymentUseCase:
        return VerifyPaymentUseCase(
            verifier=self.create_payment_verifier(),
            lifecycle=self.create_booking_lifecycle(),
            booking_repository=self.create_booking_repository(),
            audit_logger=self._audit_logger,
        )

    def create_refund_processor(self) -> RefundProcessor:
        return RefundProcessor(
            booking_repository=self.create_booking_repository(),
            payment_gateway=self.create_payment_gateway(),
            lifecycle=self.create_booking_lifecycle(),
        )

    def create_notification_dispatcher(self) -> NotificationDispatcher:
        return NotificationDispatcher(
            bookings_href=self.settings.bookings_notification_href,
            contact_href=self.settings.contact_notification_href,
        )
