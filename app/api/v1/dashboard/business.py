"""
Business Configuration Dashboard Routes
Weekly schedule and staff-to-service assignment
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from app.api.dependencies import get_dashboard_business
from app.config.database import get_db
from app.models.business import Business
from app.schemas.booking import StaffServicesPayload, WeeklySchedulePayload
from app.services.business.business_service import BusinessService

router = APIRouter(prefix="/businesses/{business_id}", tags=["dashboard-business"])


def _schedule_response(business: Business, entries) -> dict:
    return {
        "business_id": str(business.id),
        "use_default_hours": business.use_default_hours,
        "entries": [entry.to_dict() for entry in entries],
    }


# ============================================================================
# Weekly schedule
# ============================================================================

@router.get("/schedule")
async def get_schedule(
        business: Business = Depends(get_dashboard_business),
        db: Session = Depends(get_db)
):
    """Stored weekly schedule. Weekdays without an entry are closed, or use default hours if none is stored."""
    return _schedule_response(business, BusinessService.get_weekly_schedule(db, business))


@router.put("/schedule")
async def save_schedule(
        payload: WeeklySchedulePayload,
        business: Business = Depends(get_dashboard_business),
        db: Session = Depends(get_db)
):
    """
    Replace the whole weekly schedule.

    - Every entry is validated before anything is written
    - Existing entries are deleted and the new ones inserted together
    """
    entries = BusinessService.save_weekly_schedule(
        db,
        business,
        payload.entries,
        use_default_hours=payload.use_default_hours
    )
    return {"success": True, **_schedule_response(business, entries)}


# ============================================================================
# Staff services
# ============================================================================

@router.put("/staff/{staff_id}/services")
async def assign_staff_services(
        payload: StaffServicesPayload,
        staff_id: UUID = Path(..., description="The staff member ID"),
        business: Business = Depends(get_dashboard_business),
        db: Session = Depends(get_db)
):
    """Replace the services a staff member performs"""
    staff = BusinessService.assign_staff_services(db, business, staff_id, payload.service_ids)
    return {
        "success": True,
        "staff": staff.to_dict(),
        "service_ids": sorted(str(service.id) for service in staff.services),
    }
