# app/models/business.py
"""
Business Model
A business owns its services, staff, weekly schedule and bookings.
Public clients reach it through its custom_url slug.
"""
from sqlalchemy import Column, String, Boolean, DateTime, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from enum import Enum
import uuid

from app.models.base import Base


class PlanType(str, Enum):
    FREE = "free"
    PRO = "pro"


class Business(Base):
    __tablename__ = "businesses"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    custom_url = Column(String(100), nullable=True, unique=True, index=True)

    # System configuration
    timezone = Column(String(50), default="UTC", nullable=False)
    use_default_hours = Column(Boolean, default=True, nullable=False)

    # Plan
    plan_type = Column(String(20), default=PlanType.FREE.value, nullable=False)
    monthly_limit = Column(Integer, default=60, nullable=False)
    webhook_url = Column(String(500), nullable=True)

    # Relationships
    schedule_entries = relationship(
        "WeeklyScheduleEntry",
        back_populates="business",
        cascade="all, delete-orphan",
    )
    services = relationship("Service", back_populates="business")
    staff_members = relationship("StaffMember", back_populates="business")

    # Technical fields
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
    is_active = Column(Boolean, default=True, nullable=False)

    def __repr__(self):
        return f"<Business(id={self.id}, name={self.name})>"

    @property
    def is_pro(self) -> bool:
        return self.plan_type == PlanType.PRO.value

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "name": self.name,
            "custom_url": self.custom_url,
            "timezone": self.timezone,
            "plan_type": self.plan_type,
            "use_default_hours": self.use_default_hours,
            "is_active": self.is_active,
        }
