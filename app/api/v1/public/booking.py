# ============================================================================
# FILE: app/api/v1/public/booking.py
# Public booking wizard - no authentication, business addressed by its slug
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Path, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_public_business, get_availability_service, get_booking_service
from app.config.database import get_db
from app.models.business import Business
from app.schemas.booking import AvailabilityResponse, BookingCreateRequest
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService
from app.services.business.business_service import BusinessService

router = APIRouter(prefix="/public/{slug}", tags=["public-booking"])


@router.get("")
async def get_business_summary(business: Business = Depends(get_public_business)):
    """Step 0: business shown at the top of the wizard"""
    return business.to_dict()


@router.get("/services")
async def list_services(
        business: Business = Depends(get_public_business),
        availability: AvailabilityService = Depends(get_availability_service)
):
    """Step 1: services the client can pick"""
    return [service.to_dict() for service in availability.list_services(business)]


@router.get("/services/{service_id}/staff")
async def list_service_staff(
        service_id: UUID = Path(..., description="The service ID"),
        business: Business = Depends(get_public_business),
        availability: AvailabilityService = Depends(get_availability_service),
        db: Session = Depends(get_db)
):
    """Step 2: staff who can perform the chosen service"""
    service = BusinessService.get_service(db, business, service_id)
    return [staff.to_dict() for staff in availability.list_eligible_staff(business, service)]


@router.get("/availability", response_model=AvailabilityResponse)
async def get_availability(
        service_id: UUID = Query(..., description="The service ID"),
        date: date = Query(..., description="Day to list slots for (YYYY-MM-DD)"),
        staff_id: Optional[UUID] = Query(None, description="Staff member, omit for any staff"),
        business: Business = Depends(get_public_business),
        availability: AvailabilityService = Depends(get_availability_service),
        db: Session = Depends(get_db)
):
    """
    Step 3: open start times for the day.
    Recomputed on every call from the current bookings.
    """
    service = BusinessService.get_service(db, business, service_id)
    starts = availability.available_slots(business, staff_id, service, date)

    return AvailabilityResponse(
        business=business.name,
        service_id=service.id,
        staff_id=staff_id,
        date=date,
        duration_minutes=service.duration_minutes,
        slots=[start.strftime("%H:%M") for start in starts],
        starts=starts,
    )


@router.post("/bookings", status_code=status.HTTP_201_CREATED)
async def create_booking(
        request: BookingCreateRequest,
        business: Business = Depends(get_public_business),
        bookings: BookingService = Depends(get_booking_service),
        db: Session = Depends(get_db)
):
    """
    Step 4: book the chosen slot.
    The slot is re-checked at write time; a taken slot returns 409.
    """
    service = BusinessService.get_service(db, business, request.service_id)

    booking = bookings.create_booking(
        business=business,
        staff_id=request.staff_id,
        service=service,
        target_date=request.date,
        start_time=request.start_time,
        client_info=request.client,
    )

    return {
        "success": True,
        "booking": booking.to_dict(),
        "service": service.name,
    }
