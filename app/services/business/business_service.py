# app/services/business/business_service.py
"""Service for business configuration: schedule, services and staff eligibility"""
from typing import Iterable, List, Optional
from uuid import UUID
import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models.business import Business
from app.models.schedule import WeeklyScheduleEntry, Weekday
from app.models.service import Service
from app.models.staff import StaffMember
from app.services.scheduling.working_hours import DailyHours

logger = logging.getLogger(__name__)


class BusinessService:
    """Handles business-related operations"""

    @staticmethod
    def get_business(db: Session, business_id: UUID) -> Business:
        business = db.query(Business).filter(Business.id == business_id).first()
        if not business:
            raise NotFoundError("Business not found", details={"business_id": str(business_id)})
        return business

    @staticmethod
    def get_business_by_slug(db: Session, slug: str) -> Business:
        """Active business behind a public booking link"""
        business = db.query(Business).filter(
            func.lower(Business.custom_url) == slug.strip().lower(),
            Business.is_active == True
        ).first()
        if not business:
            raise NotFoundError("Business not found", details={"custom_url": slug})
        return business

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    @staticmethod
    def list_active_services(db: Session, business: Business) -> List[Service]:
        return db.query(Service).filter(
            Service.business_id == business.id,
            Service.is_active == True
        ).order_by(Service.name.asc()).all()

    @staticmethod
    def get_service(db: Session, business: Business, service_id: UUID) -> Service:
        service = db.query(Service).filter(
            Service.id == service_id,
            Service.business_id == business.id
        ).first()
        if not service:
            raise NotFoundError("Service not found", details={"service_id": str(service_id)})
        return service

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    @staticmethod
    def eligible_staff(db: Session, business: Business, service: Service) -> List[StaffMember]:
        """
        Active staff who can perform the service.

        Staff explicitly assigned to the service if any assignment exists,
        otherwise every active staff member of the business.
        """
        assigned = [s for s in service.staff_members if s.business_id == business.id]
        if assigned:
            eligible = [s for s in assigned if s.is_active]
            return sorted(eligible, key=lambda s: s.name)

        return db.query(StaffMember).filter(
            StaffMember.business_id == business.id,
            StaffMember.is_active == True
        ).order_by(StaffMember.name.asc()).all()

    @staticmethod
    def is_staff_eligible(db: Session, business: Business, service: Service, staff_id: UUID) -> bool:
        return any(
            str(s.id) == str(staff_id)
            for s in BusinessService.eligible_staff(db, business, service)
        )

    @staticmethod
    def assign_staff_services(
            db: Session,
            business: Business,
            staff_id: UUID,
            service_ids: Iterable[UUID]
    ) -> StaffMember:
        """Replace the set of services a staff member is assigned to"""
        staff = db.query(StaffMember).filter(
            StaffMember.id == staff_id,
            StaffMember.business_id == business.id
        ).first()
        if not staff:
            raise NotFoundError("Staff member not found", details={"staff_id": str(staff_id)})

        wanted = {str(sid) for sid in service_ids}
        services = []
        if wanted:
            services = db.query(Service).filter(
                Service.business_id == business.id,
                Service.id.in_([UUID(sid) for sid in wanted])
            ).all()

        missing = wanted - {str(s.id) for s in services}
        if missing:
            raise ValidationError(
                "Unknown services for this business",
                details={"service_ids": sorted(missing)}
            )

        staff.services = services
        db.commit()
        db.refresh(staff)

        logger.info(f"Staff {staff.id} assigned to {len(services)} services")
        return staff

    # ------------------------------------------------------------------
    # Weekly schedule
    # ------------------------------------------------------------------

    @staticmethod
    def get_weekly_schedule(db: Session, business: Business) -> List[WeeklyScheduleEntry]:
        entries = db.query(WeeklyScheduleEntry).filter(
            WeeklyScheduleEntry.business_id == business.id
        ).all()
        return sorted(entries, key=lambda e: Weekday(e.weekday).index)

    @staticmethod
    def save_weekly_schedule(
            db: Session,
            business: Business,
            entries: Iterable,
            use_default_hours: Optional[bool] = None
    ) -> List[WeeklyScheduleEntry]:
        """
        Replace the business's weekly schedule.

        Every entry is validated before anything is written; the old
        entries are deleted and the new ones inserted in one transaction.
        """
        entries = list(entries)
        validated = []
        seen = set()

        for entry in entries:
            weekday = Weekday(entry.weekday)
            if weekday in seen:
                raise ValidationError(
                    "Only one schedule entry per weekday is allowed",
                    details={"weekday": weekday.value}
                )
            seen.add(weekday)

            try:
                hours = DailyHours.from_entry(entry)
            except ValidationError as exc:
                exc.details.setdefault("weekday", weekday.value)
                raise
            validated.append((weekday, hours))

        try:
            db.query(WeeklyScheduleEntry).filter(
                WeeklyScheduleEntry.business_id == business.id
            ).delete(synchronize_session=False)

            new_entries = [
                WeeklyScheduleEntry(
                    business_id=business.id,
                    weekday=weekday.value,
                    start_time=hours.start_time,
                    end_time=hours.end_time,
                    lunch_break_start=hours.lunch_break_start,
                    lunch_break_end=hours.lunch_break_end,
                )
                for weekday, hours in validated
            ]
            db.add_all(new_entries)

            if use_default_hours is not None:
                business.use_default_hours = use_default_hours

            db.commit()
        except Exception:
            db.rollback()
            raise

        db.expire(business, ["schedule_entries"])
        logger.info(f"Saved {len(new_entries)} schedule entries for business {business.id}")
        return BusinessService.get_weekly_schedule(db, business)
