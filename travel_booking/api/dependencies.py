"""Composition root: builds services for the in-memory or SQL configuration."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from travel_booking.api.deps import get_sessionmaker
from travel_booking.application.interfaces.booking_repo import BookingRepo
from travel_booking.application.interfaces.clock import Clock, SystemClock
from travel_booking.application.interfaces.listing_repo import ListingRepo
from travel_booking.application.interfaces.notification_repo import NotificationRepo
from travel_booking.application.interfaces.notification_sender import NotificationSender
from travel_booking.application.interfaces.payment_gateway import PaymentGateway
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.services.availability_service import AvailabilityService
from travel_booking.application.services.booking_service import BookingService
from travel_booking.application.services.notification_service import NotificationService
from travel_booking.application.services.payment_service import PaymentService
from travel_booking.application.use_cases.create_booking import CreateBookingUseCase
from travel_booking.application.use_cases.handle_stripe_webhook import HandleStripeWebhookUseCase
from travel_booking.config import Settings, get_settings
from travel_booking.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from travel_booking.infrastructure.db.repositories.listing_repo_sql import ListingRepoSQL
from travel_booking.infrastructure.db.repositories.notification_repo_sql import NotificationRepoSQL
from travel_booking.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from travel_booking.infrastructure.gateways.push_sender import (
    HttpPushNotificationSender,
    LoggingNotificationSender,
)
from travel_booking.infrastructure.gateways.stripe_gateway import StripePaymentGateway
from travel_booking.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from travel_booking.infrastructure.in_memory.listing_repo import InMemoryListingRepo
from travel_booking.infrastructure.in_memory.notification_repo import InMemoryNotificationRepo
from travel_booking.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from travel_booking.infrastructure.in_memory.transaction_manager import (
    InMemoryTransactionManager,
)
from travel_booking.infrastructure.scheduling.booking_scheduler import (
    BookingScheduler,
    SchedulerServices,
)


@dataclass
class AppServices:
    availability: AvailabilityService
    bookings: BookingService
    payments: PaymentService
    notifications: NotificationService
    create_booking: CreateBookingUseCase
    handle_webhook: HandleStripeWebhookUseCase
    transaction_manager: TransactionManager


@dataclass
class InMemoryBundle:
    listing_repo: InMemoryListingRepo
    booking_repo: InMemoryBookingRepo
    notification_repo: InMemoryNotificationRepo
    payment_gateway: PaymentGateway
    transaction_manager: InMemoryTransactionManager
    sender: NotificationSender
    clock: Clock


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return SystemClock()


@lru_cache(maxsize=1)
def get_payment_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.stripe_api_key:
        return StripePaymentGateway(
            api_key=settings.stripe_api_key,
            timeout_seconds=settings.stripe_timeout_seconds,
            max_network_retries=settings.stripe_max_network_retries,
            tolerance_seconds=settings.webhook_tolerance_seconds,
        )
    return StubPaymentGateway(tolerance_seconds=settings.webhook_tolerance_seconds)


@lru_cache(maxsize=1)
def get_notification_sender() -> NotificationSender:
    settings = get_settings()
    if settings.push_relay_url:
        return HttpPushNotificationSender(
            relay_url=settings.push_relay_url,
            timeout_seconds=settings.push_timeout_seconds,
        )
    return LoggingNotificationSender()


@lru_cache(maxsize=1)
def get_in_memory_bundle() -> InMemoryBundle:
    listing_repo = InMemoryListingRepo()
    return InMemoryBundle(
        listing_repo=listing_repo,
        booking_repo=InMemoryBookingRepo(trip_date_lookup=listing_repo.trip_dates.get),
        notification_repo=InMemoryNotificationRepo(),
        payment_gateway=get_payment_gateway(),
        transaction_manager=InMemoryTransactionManager(),
        sender=get_notification_sender(),
        clock=get_clock(),
    )


def build_services(
    settings: Settings,
    listing_repo: ListingRepo,
    booking_repo: BookingRepo,
    notification_repo: NotificationRepo,
    payment_gateway: PaymentGateway,
    transaction_manager: TransactionManager,
    sender: NotificationSender,
    clock: Clock,
) -> AppServices:
    notifications = NotificationService(
        notification_repo,
        sender=sender,
        clock=clock,
        transaction_manager=transaction_manager,
    )
    availability = AvailabilityService(
        listing_repo,
        booking_repo,
        tax_rate=settings.tax_rate,
        service_fee_rate=settings.service_fee_rate,
    )
    bookings = BookingService(
        booking_repo=booking_repo,
        listing_repo=listing_repo,
        notifications=notifications,
        transaction_manager=transaction_manager,
        clock=clock,
    )
    payments = PaymentService(bookings=bookings, gateway=payment_gateway)
    return AppServices(
        availability=availability,
        bookings=bookings,
        payments=payments,
        notifications=notifications,
        create_booking=CreateBookingUseCase(
            listing_repo=listing_repo,
            availability=availability,
            bookings=bookings,
            transaction_manager=transaction_manager,
        ),
        handle_webhook=HandleStripeWebhookUseCase(
            bookings=bookings,
            payments=payments,
            notifications=notifications,
            payment_gateway=payment_gateway,
            transaction_manager=transaction_manager,
            stripe_webhook_secret=settings.stripe_webhook_secret,
        ),
        transaction_manager=transaction_manager,
    )


def build_in_memory_services(settings: Settings) -> AppServices:
    bundle = get_in_memory_bundle()
    return build_services(
        settings,
        listing_repo=bundle.listing_repo,
        booking_repo=bundle.booking_repo,
        notification_repo=bundle.notification_repo,
        payment_gateway=bundle.payment_gateway,
        transaction_manager=bundle.transaction_manager,
        sender=bundle.sender,
        clock=bundle.clock,
    )


def build_sql_services(settings: Settings, session: AsyncSession) -> AppServices:
    return build_services(
        settings,
        listing_repo=ListingRepoSQL(session),
        booking_repo=BookingRepoSQL(session),
        notification_repo=NotificationRepoSQL(session),
        payment_gateway=get_payment_gateway(),
        transaction_manager=SQLAlchemyTransactionManager(session),
        sender=get_notification_sender(),
        clock=get_clock(),
    )


async def get_session(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[AsyncSession | None]:
    if settings.use_in_memory:
        yield None
        return
    async with get_sessionmaker()() as session:
        yield session


def get_services(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
) -> AppServices:
    if settings.use_in_memory:
        return build_in_memory_services(settings)
    if session is None:
        raise RuntimeError("DB session not available")
    return build_sql_services(settings, session)


def build_scheduler(settings: Settings) -> BookingScheduler:
    @asynccontextmanager
    async def provide() -> AsyncIterator[SchedulerServices]:
        if settings.use_in_memory:
            services = build_in_memory_services(settings)
            yield SchedulerServices(
                bookings=services.bookings,
                notifications=services.notifications,
                transaction_manager=services.transaction_manager,
            )
            return
        async with get_sessionmaker()() as session:
            services = build_sql_services(settings, session)
            yield SchedulerServices(
                bookings=services.bookings,
                notifications=services.notifications,
                transaction_manager=services.transaction_manager,
            )

    return BookingScheduler(
        services=provide,
        clock=get_clock(),
        interval_seconds=settings.scheduler_interval_seconds,
        reminder_window_hours=settings.reminder_window_hours,
    )
