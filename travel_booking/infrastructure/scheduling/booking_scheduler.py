"""Periodic booking maintenance: auto-completion and trip reminders."""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass
from datetime import timedelta
from functools import partial
from typing import Callable

from travel_booking.application.interfaces.clock import Clock
from travel_booking.application.interfaces.transaction_manager import TransactionManager
from travel_booking.application.services.booking_service import BookingService
from travel_booking.application.services.notification_service import NotificationService
from travel_booking.domain.entities.booking import BookingStatus
from travel_booking.infrastructure.db.retry import retry_on_deadlock

logger = logging.getLogger(__name__)


@dataclass
class SchedulerServices:
    bookings: BookingService
    notifications: NotificationService
    transaction_manager: TransactionManager


ServicesProvider = Callable[[], AbstractAsyncContextManager[SchedulerServices]]


@dataclass
class SweepReport:
    completed: int = 0
    reminded: int = 0
    errors: int = 0


class BookingScheduler:
    """
    Background loop running one tick per interval.

    A tick is the auto-complete sweep followed by the reminder sweep. Each
    sweep and each booking inside it fails independently: errors are logged
    and counted, never raised out of the loop.

    Assumes a single running instance per deployment; replicas should run
    with the scheduler disabled.
    """

    def __init__(
        self,
        services: ServicesProvider,
        clock: Clock,
        interval_seconds: float = 3600.0,
        reminder_window_hours: int = 24,
    ) -> None:
        self._services = services
        self._clock = clock
        self._interval = interval_seconds
        self._reminder_window = timedelta(hours=reminder_window_hours)
        self._task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.is_running:
            return
        self._task = asyncio.create_task(self._run_loop(), name="booking-scheduler")
        logger.info("BookingScheduler started", extra={"interval_seconds": self._interval})

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("BookingScheduler stopped")

    async def run_once(self) -> SweepReport:
        report = SweepReport()
        async with self._services() as services:
            try:
                await self._auto_complete(services, report)
            except Exception:
                report.errors += 1
                logger.exception("Auto-complete sweep failed")
            try:
                await self._send_reminders(services, report)
            except Exception:
                report.errors += 1
                logger.exception("Trip reminder sweep failed")

        if report.completed or report.reminded or report.errors:
            logger.info(
                "Scheduler tick finished",
                extra={
                    "completed": report.completed,
                    "reminded": report.reminded,
                    "errors": report.errors,
                },
            )
        return report

    async def _run_loop(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception:
                logger.exception("Scheduler tick failed")
            await asyncio.sleep(self._interval)

    async def _auto_complete(self, services: SchedulerServices, report: SweepReport) -> None:
        now = self._clock.now()
        due = await services.bookings.find_due_for_completion(now)
        for booking in due:
            try:
                updated = await retry_on_deadlock(
                    partial(services.bookings.complete_booking, booking.id)
                )
            except Exception:
                report.errors += 1
                logger.exception(
                    "Auto-complete failed for booking", extra={"booking_id": str(booking.id)}
                )
                continue
            if updated is not None and updated.status == BookingStatus.COMPLETED:
                report.completed += 1
                logger.info("Booking auto-completed", extra={"booking_id": str(booking.id)})

    async def _send_reminders(self, services: SchedulerServices, report: SweepReport) -> None:
        now = self._clock.now()
        upcoming = await services.bookings.find_trips_starting_within(now, self._reminder_window)
        for booking in upcoming:
            try:
                async with services.transaction_manager.start():
                    sent = await services.notifications.send_trip_reminder(booking)
            except Exception:
                report.errors += 1
                logger.exception(
                    "Trip reminder failed for booking", extra={"booking_id": str(booking.id)}
                )
                continue
            if sent is not None:
                report.reminded += 1
                logger.info("Trip reminder sent", extra={"booking_id": str(booking.id)})
