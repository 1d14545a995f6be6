# ============================================================================
# app/services/booking/booking_service.py
# Booking creation and lifecycle - no FastAPI dependencies
# ============================================================================
"""Service for creating, cancelling and completing bookings"""
import logging
from datetime import date, datetime, time, timezone
from typing import Callable, Optional, Union
from uuid import UUID

import pydantic
from sqlalchemy.orm import Session

from app.config.settings import Settings, get_settings
from app.core.exceptions import (
    NotFoundError,
    PastTimeError,
    PlanLimitError,
    ValidationError,
)
from app.models.booking import Booking, BookingStatus
from app.models.business import Business, PlanType
from app.models.service import Service
from app.schemas.booking import ClientInfo
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_repository import BookingRepository, month_bounds
from app.services.notification.notification_service import dispatch_booking_notification
from app.utils.timezones import business_now

logger = logging.getLogger(__name__)


class BookingService:
    """Handles booking writes; every write re-validates availability"""

    def __init__(
            self,
            db: Session,
            settings: Optional[Settings] = None,
            availability: Optional[AvailabilityService] = None,
            repository: Optional[BookingRepository] = None,
            notifier: Optional[Callable[[Business, Booking], bool]] = None
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.repository = repository or BookingRepository(db)
        self.availability = availability or AvailabilityService(db, settings=self.settings, repository=self.repository)
        self.notifier = notifier or dispatch_booking_notification

    def create_booking(
            self,
            business: Business,
            staff_id: Optional[UUID],
            service: Service,
            target_date: date,
            start_time: time,
            client_info: Union[ClientInfo, dict],
            now: Optional[datetime] = None
    ) -> Booking:
        """
        Create a confirmed booking.

        Raises:
            ValidationError: malformed input, checked before any storage access
            PastTimeError: the requested start is now or earlier
            PlanLimitError: free plan monthly limit reached
            ConflictError: slot taken, either by the re-check or by the storage layer
        """
        client = self._validate_client(client_info)

        if not service.duration_minutes or service.duration_minutes <= 0:
            raise ValidationError(
                "Service duration must be positive",
                details={"duration_minutes": service.duration_minutes}
            )

        if start_time.second or start_time.microsecond:
            raise ValidationError(
                "Start time must be a whole minute",
                details={"start_time": start_time.isoformat()}
            )

        start = datetime.combine(target_date, start_time)
        local_now = business_now(business, now)
        if start <= local_now:
            raise PastTimeError(
                "Requested time has already passed",
                details={"start": start.isoformat(), "now": local_now.isoformat()}
            )

        monthly_limit = self._monthly_limit(business)
        self._check_plan_limit(business, monthly_limit)

        # Never trust the slot the client picked: re-run the pipeline for it
        slot = self.availability.check_slot(business, staff_id, service, start, now=local_now)

        booking = Booking(
            business_id=business.id,
            staff_id=staff_id,
            service_id=service.id,
            client_name=client.name,
            client_phone=client.phone,
            client_email=client.email,
            notes=client.notes,
            scheduled_at=slot.start,
            duration_minutes=service.duration_minutes,
            ends_at=slot.end,
            status=BookingStatus.CONFIRMED.value,
            created_at=datetime.now(timezone.utc),
        )

        booking = self.repository.insert_confirmed(
            booking,
            any_staff=self.availability.blocks_across_staff,
            monthly_limit=monthly_limit
        )

        logger.info(
            f"Booking {booking.id} confirmed for business {business.id} "
            f"at {booking.scheduled_at.isoformat()} (staff={staff_id})"
        )

        self._notify(business, booking)
        return booking

    def cancel_booking(self, business: Business, booking_id: UUID, reason: Optional[str] = None) -> Booking:
        """Confirmed -> cancelled. Cancelling twice is a no-op."""
        booking = self._get_booking(business, booking_id)

        if booking.status == BookingStatus.CANCELLED.value:
            return booking
        if booking.status == BookingStatus.COMPLETED.value:
            raise ValidationError(
                "Completed bookings cannot be cancelled",
                details={"booking_id": str(booking_id)}
            )

        booking = self.repository.update_status(booking, BookingStatus.CANCELLED, reason=reason)
        logger.info(f"Booking {booking.id} cancelled")
        return booking

    def complete_booking(self, business: Business, booking_id: UUID) -> Booking:
        """Confirmed -> completed"""
        booking = self._get_booking(business, booking_id)

        if booking.status == BookingStatus.COMPLETED.value:
            return booking
        if booking.status != BookingStatus.CONFIRMED.value:
            raise ValidationError(
                "Only confirmed bookings can be completed",
                details={"booking_id": str(booking_id), "status": booking.status}
            )

        booking = self.repository.update_status(booking, BookingStatus.COMPLETED)
        logger.info(f"Booking {booking.id} completed")
        return booking

    def complete_elapsed_bookings(self, business: Business, now: Optional[datetime] = None) -> int:
        """Mark confirmed bookings that already ended as completed"""
        cutoff = business_now(business, now)
        elapsed = self.repository.confirmed_ended_before(business.id, cutoff)

        for booking in elapsed:
            self.repository.update_status(booking, BookingStatus.COMPLETED)

        if elapsed:
            logger.info(f"Completed {len(elapsed)} elapsed bookings for business {business.id}")
        return len(elapsed)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_client(client_info: Union[ClientInfo, dict, None]) -> ClientInfo:
        if isinstance(client_info, ClientInfo):
            return client_info
        if not client_info:
            raise ValidationError("Client name, phone and email are required")

        try:
            return ClientInfo(**client_info)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Invalid client information",
                details={
                    "fields": {
                        ".".join(str(part) for part in error["loc"]): error["msg"]
                        for error in exc.errors()
                    }
                }
            ) from exc

    def _monthly_limit(self, business: Business) -> Optional[int]:
        """Monthly cap for free plans, None when the plan is uncapped"""
        if business.plan_type != PlanType.FREE.value:
            return None
        if business.monthly_limit is not None:
            return business.monthly_limit
        return self.settings.FREE_PLAN_MONTHLY_LIMIT

    def _check_plan_limit(self, business: Business, limit: Optional[int]) -> None:
        # Early rejection; the insert repeats the count under the business lock
        if limit is None:
            return

        start, end = month_bounds(datetime.now(timezone.utc))
        used = self.repository.count_created_between(business.id, start, end)

        if used >= limit:
            raise PlanLimitError(
                "This business has reached the monthly booking limit of its plan",
                details={"monthly_limit": limit, "used": used}
            )

    def _get_booking(self, business: Business, booking_id: UUID) -> Booking:
        booking = self.repository.get_for_business(business.id, booking_id)
        if not booking:
            raise NotFoundError("Booking not found", details={"booking_id": str(booking_id)})
        return booking

    def _notify(self, business: Business, booking: Booking) -> None:
        # Best effort: a failed notification never fails the booking
        try:
            self.notifier(business, booking)
        except Exception as exc:
            logger.error(f"Notification dispatch failed for booking {booking.id}: {exc}")
