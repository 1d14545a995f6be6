# ============================================================================
# FILE: app/api/dependencies.py
# Request-scoped dependencies: business lookup and service factories
# ============================================================================
from uuid import UUID

from fastapi import Depends, Path
from sqlalchemy.orm import Session

from app.config.database import get_db
from app.config.settings import Settings, get_settings
from app.models.business import Business
from app.services.availability.availability_service import AvailabilityService
from app.services.booking.booking_service import BookingService
from app.services.business.business_service import BusinessService


# ============================================================================
# Business lookup
# ============================================================================

def get_public_business(
        slug: str = Path(..., description="Public booking link of the business"),
        db: Session = Depends(get_db)
) -> Business:
    """Active business behind /public/{slug}; 404 otherwise"""
    return BusinessService.get_business_by_slug(db, slug)


def get_dashboard_business(
        business_id: UUID = Path(..., description="The business ID"),
        db: Session = Depends(get_db)
) -> Business:
    return BusinessService.get_business(db, business_id)


# ============================================================================
# Service factories
# ============================================================================

def get_availability_service(
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings)
) -> AvailabilityService:
    return AvailabilityService(db, settings=settings)


def get_booking_service(
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings)
) -> BookingService:
    return BookingService(db, settings=settings)
