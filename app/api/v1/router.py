"""
API v1 router setup
Organized into: public booking wizard and business dashboard routes
"""
from fastapi import APIRouter

from app.api.v1.public import booking
from app.api.v1.dashboard import business, bookings

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(
    booking.router,
    tags=["Public"]
)

# ============================================================================
# DASHBOARD ROUTES
# ============================================================================
api_v1_router.include_router(
    business.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)

api_v1_router.include_router(
    bookings.router,
    prefix="/dashboard",
    tags=["Dashboard"]
)


@api_v1_router.get("/", tags=["Info"])
async def api_info():
    """API information and available route groups"""
    return {
        "version": "1.0",
        "routes": {
            "public": "/api/v1/public/{slug}",
            "dashboard": "/api/v1/dashboard/businesses/{business_id}",
        }
    }
