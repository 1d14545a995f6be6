# app/models/__init__.py
from .base import Base
from .business import Business, PlanType
from .schedule import WeeklyScheduleEntry, Weekday
from .staff import StaffMember, staff_services
from .service import Service
from .booking import Booking, BookingStatus

__all__ = [
    "Base",
    "Business",
    "PlanType",
    "WeeklyScheduleEntry",
    "Weekday",
    "StaffMember",
    "staff_services",
    "Service",
    "Booking",
    "BookingStatus",
]
