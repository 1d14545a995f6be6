# ============================================================================
# app/services/booking/booking_repository.py
# Storage collaborator for bookings - the only place that writes them
# ============================================================================
import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, PlanLimitError
from app.models.booking import Booking, BookingStatus
from app.models.business import Business
from app.models.staff import StaffMember

logger = logging.getLogger(__name__)


def day_bounds(target_date: date):
    """[midnight, next midnight) of a date"""
    start = datetime.combine(target_date, time.min)
    return start, start + timedelta(days=1)


def month_bounds(reference: datetime):
    """[first instant of the month, first instant of next month) in UTC"""
    start = reference.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


class BookingRepository:
    """Queries and conflict-detecting writes on the bookings table"""

    def __init__(self, db: Session):
        self.db = db

    def overlapping_confirmed(
            self,
            business_id: UUID,
            start: datetime,
            end: datetime,
            staff_id: Optional[UUID] = None,
            any_staff: bool = False,
            exclude_booking_id: Optional[UUID] = None
    ) -> List[Booking]:
        """
        Confirmed bookings whose [scheduled_at, ends_at) overlaps [start, end).

        staff_id set: only that staff member's bookings.
        staff_id None and any_staff: every booking of the business.
        staff_id None and not any_staff: only bookings without staff.
        """
        query = self.db.query(Booking).filter(
            Booking.business_id == business_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.scheduled_at < end,
            Booking.ends_at > start,
        )

        if staff_id is not None:
            query = query.filter(Booking.staff_id == staff_id)
        elif not any_staff:
            query = query.filter(Booking.staff_id.is_(None))

        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)

        return query.order_by(Booking.scheduled_at.asc()).all()

    def confirmed_bookings_for_day(
            self,
            business_id: UUID,
            target_date: date,
            staff_id: Optional[UUID] = None,
            any_staff: bool = False
    ) -> List[Booking]:
        """Confirmed bookings touching target_date for the given staff scope"""
        start, end = day_bounds(target_date)
        return self.overlapping_confirmed(
            business_id, start, end, staff_id=staff_id, any_staff=any_staff
        )

    def insert_confirmed(
            self,
            booking: Booking,
            any_staff: bool = False,
            monthly_limit: Optional[int] = None
    ) -> Booking:
        """
        Insert a confirmed booking unless an overlapping one already exists.

        Check and insert happen in one transaction while holding row locks
        on the business and the staff member, so concurrent writers
        serialize. On PostgreSQL the
        exclusion constraint rejects whatever slips through, and that
        rejection is reported as ConflictError as well.

        With monthly_limit set, the bookings created this month are counted
        under the same lock and PlanLimitError is raised once it is reached.
        """
        try:
            self._lock_for_write(booking)

            if monthly_limit is not None:
                self._check_monthly_limit(booking, monthly_limit)

            overlapping = self.overlapping_confirmed(
                booking.business_id,
                booking.scheduled_at,
                booking.ends_at,
                staff_id=booking.staff_id,
                any_staff=any_staff,
            )
            if overlapping:
                raise ConflictError(
                    "This time slot is no longer available",
                    details={
                        "scheduled_at": booking.scheduled_at.isoformat(),
                        "conflicting_booking_ids": [str(b.id) for b in overlapping],
                    }
                )

            self.db.add(booking)
            self.db.flush()
            self.db.commit()

        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(f"Insert rejected by storage constraint for {booking.scheduled_at}: {exc.orig}")
            raise ConflictError(
                "This time slot is no longer available",
                details={"scheduled_at": booking.scheduled_at.isoformat()}
            ) from exc

        except (ConflictError, PlanLimitError):
            self.db.rollback()
            raise

        self.db.refresh(booking)
        return booking

    def _check_monthly_limit(self, booking: Booking, limit: int) -> None:
        start, end = month_bounds(booking.created_at or datetime.now(timezone.utc))
        used = self.count_created_between(booking.business_id, start, end)

        if used >= limit:
            raise PlanLimitError(
                "This business has reached the monthly booking limit of its plan",
                details={"monthly_limit": limit, "used": used}
            )

    def _lock_for_write(self, booking: Booking) -> None:
        # Writers of one business serialize on its row, so staff and unassigned
        # bookings see each other. FOR UPDATE is a no-op on SQLite, which
        # serializes writers anyway.
        self.db.query(Business.id).filter(
            Business.id == booking.business_id
        ).with_for_update().first()

        if booking.staff_id is not None:
            self.db.query(StaffMember.id).filter(
                StaffMember.id == booking.staff_id
            ).with_for_update().first()

    def get_for_business(self, business_id: UUID, booking_id: UUID) -> Optional[Booking]:
        return self.db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.business_id == business_id
        ).first()

    def list_for_business(
            self,
            business_id: UUID,
            target_date: Optional[date] = None,
            status: Optional[str] = None,
            staff_id: Optional[UUID] = None
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.business_id == business_id)

        if target_date:
            start, end = day_bounds(target_date)
            query = query.filter(and_(Booking.scheduled_at >= start, Booking.scheduled_at < end))
        if status:
            query = query.filter(Booking.status == status)
        if staff_id:
            query = query.filter(Booking.staff_id == staff_id)

        return query.order_by(Booking.scheduled_at.asc()).all()

    def count_created_between(self, business_id: UUID, start: datetime, end: datetime) -> int:
        """Bookings created in [start, end), any status"""
        return self.db.query(Booking).filter(
            Booking.business_id == business_id,
            Booking.created_at >= start,
            Booking.created_at < end
        ).count()

    def update_status(self, booking: Booking, status: BookingStatus, reason: Optional[str] = None) -> Booking:
        """Single status transition; slots are derived so nothing else changes"""
        now = datetime.now(timezone.utc)
        booking.status = status.value

        if status == BookingStatus.CANCELLED:
            booking.cancelled_at = now
            booking.cancellation_reason = reason
        elif status == BookingStatus.COMPLETED:
            booking.completed_at = now

        self.db.commit()
        self.db.refresh(booking)
        return booking

    def confirmed_ended_before(self, business_id: UUID, cutoff: datetime, limit: int = 500) -> List[Booking]:
        """Confirmed bookings whose end is at or before cutoff (business-local time)"""
        return self.db.query(Booking).filter(
            Booking.business_id == business_id,
            Booking.status == BookingStatus.CONFIRMED.value,
            Booking.ends_at <= cutoff
        ).order_by(Booking.ends_at.asc()).limit(limit).all()
