# app/schemas/__init__.py
from .booking import (
    ClientInfo,
    BookingCreateRequest,
    ScheduleEntryPayload,
    WeeklySchedulePayload,
    StaffServicesPayload,
    CancelBookingRequest,
    AvailabilityResponse
)
