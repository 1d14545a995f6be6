from typing import List, Optional
from datetime import date, datetime
from uuid import UUID
import logging

from sqlalchemy.orm import Session

from app.config.settings import Settings, get_settings
from app.core.exceptions import ConfigurationMissing, ConflictError, PastTimeError, ValidationError
from app.models.business import Business
from app.models.service import Service
from app.models.staff import StaffMember
from app.services.booking.booking_repository import BookingRepository
from app.services.business.business_service import BusinessService
from app.services.scheduling.conflict_checker import ConflictChecker, SCOPE_BUSINESS
from app.services.scheduling.intervals import Slot
from app.services.scheduling.slot_generator import SlotGenerator
from app.services.scheduling.working_hours import WorkingHoursCalendar
from app.utils.timezones import business_now

logger = logging.getLogger(__name__)


class AvailabilityService:
    """
    Computes bookable start times for (business, staff, service, date).

    Stateless per call and never cached: every query recomputes from the
    current booking state. Each wizard step (services, staff, slots) is a
    separate query so a multi-step UI can sit directly on top.
    """

    def __init__(
            self,
            db: Session,
            settings: Optional[Settings] = None,
            calendar: Optional[WorkingHoursCalendar] = None,
            generator: Optional[SlotGenerator] = None,
            checker: Optional[ConflictChecker] = None,
            repository: Optional[BookingRepository] = None
    ):
        self.db = db
        self.settings = settings or get_settings()
        self.calendar = calendar or WorkingHoursCalendar.from_settings(self.settings)
        self.generator = generator or SlotGenerator(step_minutes=self.settings.SLOT_STEP_MINUTES)
        self.checker = checker or ConflictChecker(self.settings.UNASSIGNED_STAFF_CONFLICT_SCOPE)
        self.repository = repository or BookingRepository(db)

    @property
    def blocks_across_staff(self) -> bool:
        """Whether a request without staff is checked against every staff member's bookings"""
        return self.checker.unassigned_scope == SCOPE_BUSINESS

    # ------------------------------------------------------------------
    # Wizard steps
    # ------------------------------------------------------------------

    def list_services(self, business: Business) -> List[Service]:
        return BusinessService.list_active_services(self.db, business)

    def list_eligible_staff(self, business: Business, service: Service) -> List[StaffMember]:
        self._validate_service(business, service)
        return BusinessService.eligible_staff(self.db, business, service)

    def available_slots(
            self,
            business: Business,
            staff_id: Optional[UUID],
            service: Service,
            target_date: date,
            now: Optional[datetime] = None
    ) -> List[datetime]:
        """
        Ordered start times that can be booked.

        Steps:
            1. Resolve working hours for the date (closed -> empty list)
            2. Generate candidates on the step grid
            3. Fetch confirmed bookings for the staff scope and date
            4. Drop candidates that conflict
        """
        return [slot.start for slot in self.available_slot_objects(business, staff_id, service, target_date, now=now)]

    def available_slot_objects(
            self,
            business: Business,
            staff_id: Optional[UUID],
            service: Service,
            target_date: date,
            now: Optional[datetime] = None
    ) -> List[Slot]:
        self._validate_request(business, staff_id, service)

        try:
            interval = self.calendar.require(business, target_date)
        except ConfigurationMissing as exc:
            logger.debug(f"Business {business.id} closed on {target_date}: {exc.message}")
            return []

        local_now = business_now(business, now)
        candidates = self.generator.generate(
            interval.primary,
            interval.excluded,
            service.duration_minutes,
            now=local_now
        )

        bookings = self.repository.confirmed_bookings_for_day(
            business.id,
            target_date,
            staff_id=staff_id,
            any_staff=self.blocks_across_staff
        )

        slots = [
            slot for slot in candidates.slots()
            if not self.checker.has_conflict(slot, bookings, staff_id=staff_id)
        ]

        logger.debug(
            f"Business {business.id} service {service.id} staff {staff_id} on {target_date}: "
            f"{len(slots)} open slots, {len(bookings)} blocking bookings"
        )
        return slots

    # ------------------------------------------------------------------
    # Single-slot re-check used at write time
    # ------------------------------------------------------------------

    def check_slot(
            self,
            business: Business,
            staff_id: Optional[UUID],
            service: Service,
            start: datetime,
            now: Optional[datetime] = None
    ) -> Slot:
        """
        Re-run the availability pipeline for exactly one requested slot.

        Returns the Slot when it is bookable. Raises ValidationError when the
        time is outside the business's hours, off the slot grid or in the
        lunch break, PastTimeError when it already started, and
        ConflictError when the slot is taken.
        """
        self._validate_request(business, staff_id, service)

        try:
            interval = self.calendar.require(business, start.date())
        except ConfigurationMissing as exc:
            raise ValidationError("The business is closed on the requested date", details=exc.details) from exc

        slot = Slot.starting_at(start, service.duration_minutes)

        if not interval.primary.contains(slot) or not self.generator.is_on_grid(interval.primary, start):
            raise ValidationError(
                "Requested time is not a valid slot for this business",
                details={"start": start.isoformat()}
            )

        if interval.excluded is not None and slot.overlaps(interval.excluded):
            raise ValidationError(
                "Requested time overlaps the lunch break",
                details={"start": start.isoformat(), "lunch_break_start": interval.excluded.start.isoformat()}
            )

        if start <= business_now(business, now):
            raise PastTimeError("Requested time has already passed", details={"start": start.isoformat()})

        bookings = self.repository.confirmed_bookings_for_day(
            business.id,
            start.date(),
            staff_id=staff_id,
            any_staff=self.blocks_across_staff
        )
        conflicts = self.checker.conflicting_bookings(slot, bookings, staff_id=staff_id)
        if conflicts:
            raise ConflictError(
                "This time slot is no longer available",
                details={
                    "start": start.isoformat(),
                    "conflicting_booking_ids": [str(b.id) for b in conflicts],
                }
            )

        return slot

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _validate_service(self, business: Business, service: Service) -> None:
        if str(service.business_id) != str(business.id):
            raise ValidationError("Service does not belong to this business", details={"service_id": str(service.id)})
        if not service.is_active:
            raise ValidationError("Service is not available for booking", details={"service_id": str(service.id)})
        if not service.duration_minutes or service.duration_minutes <= 0:
            raise ValidationError(
                "Service duration must be positive",
                details={"duration_minutes": service.duration_minutes}
            )

    def _validate_request(self, business: Business, staff_id: Optional[UUID], service: Service) -> None:
        self._validate_service(business, service)

        if staff_id is not None and not BusinessService.is_staff_eligible(self.db, business, service, staff_id):
            raise ValidationError(
                "Staff member cannot perform this service",
                details={"staff_id": str(staff_id), "service_id": str(service.id)}
            )
