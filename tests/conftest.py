"""Shared test fixtures."""
from datetime import date, datetime, time
from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.config.settings import Settings
from app.models import Base, Business, PlanType, Service, StaffMember, WeeklyScheduleEntry

# 2030-01-07 is a Monday; far enough ahead that the real clock never reaches it
MONDAY = date(2030, 1, 7)
SATURDAY = date(2030, 1, 12)
DAY_BEFORE = datetime(2030, 1, 6, 12, 0)

CLIENT = {
    "name": "Maria Silva",
    "phone": "+55 11 91234-5678",
    "email": "maria@example.com",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def settings():
    return Settings()


@pytest.fixture
def business(db):
    """Business without a saved schedule: default hours Mon-Fri 09-18, lunch 12-13"""
    business = Business(
        name="Studio Demo",
        custom_url="studio",
        timezone="UTC",
        plan_type=PlanType.PRO.value,
    )
    db.add(business)
    db.commit()
    return business


@pytest.fixture
def make_service(db, business):
    def _create(name="Haircut", duration_minutes=30, price=Decimal("25.00"), is_active=True, owner=None):
        service = Service(
            business_id=(owner or business).id,
            name=name,
            duration_minutes=duration_minutes,
            price=price,
            is_active=is_active,
        )
        db.add(service)
        db.commit()
        return service
    return _create


@pytest.fixture
def make_staff(db, business):
    def _create(name, is_active=True):
        staff = StaffMember(business_id=business.id, name=name, position="Stylist", is_active=is_active)
        db.add(staff)
        db.commit()
        return staff
    return _create


@pytest.fixture
def make_schedule(db, business):
    """Store schedule entries directly: make_schedule(("MONDAY", "09:00", "12:00", None, None), ...)"""
    def _create(*rows):
        for weekday, start, end, lunch_start, lunch_end in rows:
            db.add(WeeklyScheduleEntry(
                business_id=business.id,
                weekday=weekday,
                start_time=time.fromisoformat(start),
                end_time=time.fromisoformat(end),
                lunch_break_start=time.fromisoformat(lunch_start) if lunch_start else None,
                lunch_break_end=time.fromisoformat(lunch_end) if lunch_end else None,
            ))
        db.commit()
        db.expire(business, ["schedule_entries"])
    return _create


@pytest.fixture
def notifier():
    return Mock(return_value=True)
