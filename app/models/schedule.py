# app/models/schedule.py
"""
Weekly schedule entries: one row per weekday per business.
The whole set is replaced when the owner saves the schedule.
"""
from sqlalchemy import Column, String, Time, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from enum import Enum
import uuid

from app.models.base import Base


class Weekday(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"

    @classmethod
    def from_date(cls, value) -> "Weekday":
        """Weekday of a date (Monday is 0 in date.weekday())"""
        return list(cls)[value.weekday()]

    @property
    def index(self) -> int:
        return list(Weekday).index(self)


class WeeklyScheduleEntry(Base):
    __tablename__ = "weekly_schedule_entries"
    __table_args__ = (
        UniqueConstraint("business_id", "weekday", name="uq_schedule_business_weekday"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    business_id = Column(
        UUID(as_uuid=True),
        ForeignKey("businesses.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    weekday = Column(String(10), nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    lunch_break_start = Column(Time, nullable=True)
    lunch_break_end = Column(Time, nullable=True)

    business = relationship("Business", back_populates="schedule_entries")

    def __repr__(self):
        return f"<WeeklyScheduleEntry(business_id={self.business_id}, weekday={self.weekday})>"

    @property
    def has_lunch_break(self) -> bool:
        return self.lunch_break_start is not None and self.lunch_break_end is not None

    def to_dict(self):
        return {
            "weekday": self.weekday,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "lunch_break_start": self.lunch_break_start.strftime("%H:%M") if self.lunch_break_start else None,
            "lunch_break_end": self.lunch_break_end.strftime("%H:%M") if self.lunch_break_end else None,
            "has_lunch_break": self.has_lunch_break,
        }
