# ============================================================================
# FILE: app/api/v1/dashboard/bookings.py
# Booking list and lifecycle - thin HTTP layer
# ============================================================================
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query, Path
from sqlalchemy.orm import Session

from app.api.dependencies import get_dashboard_business, get_booking_service
from app.config.database import get_db
from app.models.booking import BookingStatus
from app.models.business import Business
from app.schemas.booking import CancelBookingRequest
from app.services.booking.booking_repository import BookingRepository
from app.services.booking.booking_service import BookingService

router = APIRouter(prefix="/businesses/{business_id}/bookings", tags=["dashboard-bookings"])


@router.get("")
async def list_bookings(
        date: Optional[date] = Query(None, description="Only bookings on this day"),
        status: Optional[BookingStatus] = Query(None, description="Filter by status (confirmed, cancelled, completed)"),
        staff_id: Optional[UUID] = Query(None, description="Filter by staff member"),
        business: Business = Depends(get_dashboard_business),
        db: Session = Depends(get_db)
):
    """Bookings of the business ordered by start time"""
    bookings = BookingRepository(db).list_for_business(
        business.id,
        target_date=date,
        status=status.value if status else None,
        staff_id=staff_id
    )
    return {
        "total": len(bookings),
        "bookings": [booking.to_dict() for booking in bookings],
    }


@router.post("/{booking_id}/cancel")
async def cancel_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        payload: Optional[CancelBookingRequest] = Body(None),
        business: Business = Depends(get_dashboard_business),
        bookings: BookingService = Depends(get_booking_service)
):
    """Cancel a booking; its slot becomes available again"""
    booking = bookings.cancel_booking(business, booking_id, reason=payload.reason if payload else None)
    return {"success": True, "booking": booking.to_dict()}


@router.post("/{booking_id}/complete")
async def complete_booking(
        booking_id: UUID = Path(..., description="The booking ID"),
        business: Business = Depends(get_dashboard_business),
        bookings: BookingService = Depends(get_booking_service)
):
    booking = bookings.complete_booking(business, booking_id)
    return {"success": True, "booking": booking.to_dict()}
