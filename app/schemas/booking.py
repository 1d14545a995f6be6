"""
Pydantic schemas for the booking wizard and dashboard configuration
"""
import re
from datetime import date, datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models.schedule import Weekday


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class ClientInfo(BaseModel):
    """Contact details of the client making a booking"""
    name: str = Field(..., min_length=1, max_length=200)
    phone: str = Field(..., description="Phone number, digits with optional leading +")
    email: EmailStr
    notes: Optional[str] = Field(None, max_length=2000)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        cleaned = re.sub(r"[\s\-().]", "", v)
        digits = cleaned[1:] if cleaned.startswith("+") else cleaned
        if not digits.isdigit():
            raise ValueError("Phone number must contain only digits after an optional +")
        if len(digits) < 8 or len(digits) > 15:
            raise ValueError("Phone number must have between 8 and 15 digits")
        return cleaned


class BookingCreateRequest(BaseModel):
    """Public booking request (last step of the wizard)"""
    service_id: UUID
    staff_id: Optional[UUID] = None
    date: date
    start_time: time = Field(..., description="Slot start time (HH:MM)")
    client: ClientInfo


class ScheduleEntryPayload(BaseModel):
    """One weekday of the weekly schedule"""
    weekday: Weekday
    start_time: time
    end_time: time
    has_lunch_break: Optional[bool] = None
    lunch_break_start: Optional[time] = None
    lunch_break_end: Optional[time] = None

    @model_validator(mode="after")
    def drop_disabled_lunch(self):
        if self.has_lunch_break is False:
            self.lunch_break_start = None
            self.lunch_break_end = None
        return self


class WeeklySchedulePayload(BaseModel):
    """Full weekly schedule; replaces every stored entry"""
    entries: List[ScheduleEntryPayload] = Field(default_factory=list)
    use_default_hours: Optional[bool] = None


class StaffServicesPayload(BaseModel):
    service_ids: List[UUID] = Field(default_factory=list)


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)


# ============================================================================
# Response Schemas
# ============================================================================

class AvailabilityResponse(BaseModel):
    business: str
    service_id: UUID
    staff_id: Optional[UUID] = None
    date: date
    duration_minutes: int
    slots: List[str] = Field(default_factory=list, description="Start times as HH:MM")
    starts: List[datetime] = Field(default_factory=list)
