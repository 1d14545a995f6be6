# app/models/booking.py
from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey, DDL, event
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum
import uuid

from app.models.base import Base


class BookingStatus(str, Enum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    business_id = Column(UUID(as_uuid=True), ForeignKey("businesses.id"), nullable=False, index=True)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("staff_members.id"), nullable=True, index=True)
    service_id = Column(UUID(as_uuid=True), ForeignKey("services.id"), nullable=False)

    # Client info
    client_name = Column(String(200), nullable=False)
    client_phone = Column(String(20), nullable=False)
    client_email = Column(String(254), nullable=False)
    notes = Column(Text, nullable=True)

    # Local wall-clock time in the business timezone
    scheduled_at = Column(DateTime(timezone=False), nullable=False, index=True)
    duration_minutes = Column(Integer, nullable=False)
    ends_at = Column(DateTime(timezone=False), nullable=False)

    status = Column(String(20), default=BookingStatus.CONFIRMED.value, nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    service = relationship("Service")
    staff = relationship("StaffMember")

    def __repr__(self):
        return f"<Booking(id={self.id}, scheduled_at={self.scheduled_at}, status={self.status})>"

    @property
    def is_confirmed(self) -> bool:
        return self.status == BookingStatus.CONFIRMED.value

    def to_dict(self):
        return {
            "id": str(self.id),
            "business_id": str(self.business_id),
            "staff_id": str(self.staff_id) if self.staff_id else None,
            "service_id": str(self.service_id),
            "client_name": self.client_name,
            "client_phone": self.client_phone,
            "client_email": self.client_email,
            "notes": self.notes,
            "scheduled_at": self.scheduled_at.isoformat(),
            "ends_at": self.ends_at.isoformat(),
            "duration_minutes": self.duration_minutes,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancellation_reason": self.cancellation_reason,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }


# Authoritative double-booking guard. Only PostgreSQL can enforce it; other
# backends rely on the locked check-and-insert in BookingRepository.
event.listen(
    Booking.__table__,
    "before_create",
    DDL("CREATE EXTENSION IF NOT EXISTS btree_gist").execute_if(dialect="postgresql"),
)
event.listen(
    Booking.__table__,
    "after_create",
    DDL(
        "ALTER TABLE bookings ADD CONSTRAINT excl_bookings_staff_overlap "
        "EXCLUDE USING gist (staff_id WITH =, tsrange(scheduled_at, ends_at) WITH &&) "
        "WHERE (status = 'confirmed')"
    ).execute_if(dialect="postgresql"),
)
