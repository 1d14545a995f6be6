#!/usr/bin/env python3
"""
Script to create a demo business with a weekly schedule, services and staff
Usage: python -m app.scripts.create_business [custom_url]
"""
import sys
import traceback
from datetime import time
from decimal import Decimal
from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.models.business import Business, PlanType
from app.models.service import Service
from app.models.staff import StaffMember
from app.schemas.booking import ScheduleEntryPayload
from app.services.business.business_service import BusinessService


def create_demo_business(custom_url: str = "studio-demo"):
    """Create a demo business ready to take bookings"""
    db: Session = SessionLocal()

    try:
        business = Business(
            name="Studio Demo",
            custom_url=custom_url,
            timezone="America/New_York",
            plan_type=PlanType.FREE.value,
            use_default_hours=True,
        )
        db.add(business)
        db.flush()  # Get the ID without committing

        print(f"\n✅ Created business: {business.name}")
        print(f"   Business ID: {business.id}")
        print(f"   Public link: /api/v1/public/{business.custom_url}")

        services = [
            Service(business_id=business.id, name="Haircut", price=Decimal("25.00"), duration_minutes=30),
            Service(business_id=business.id, name="Coloring", price=Decimal("80.00"), duration_minutes=90),
            Service(business_id=business.id, name="Consultation", price=None, duration_minutes=45),
        ]
        staff = [
            StaffMember(business_id=business.id, name="Ana", position="Stylist"),
            StaffMember(business_id=business.id, name="Bruno", position="Colorist"),
        ]
        db.add_all(services + staff)
        db.commit()

        # Weekdays with a lunch break, short Saturday, Sunday closed
        entries = [
            ScheduleEntryPayload(
                weekday=day,
                start_time=time(9, 0),
                end_time=time(18, 0),
                lunch_break_start=time(12, 0),
                lunch_break_end=time(13, 0),
            )
            for day in ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY")
        ]
        entries.append(ScheduleEntryPayload(weekday="SATURDAY", start_time=time(10, 0), end_time=time(14, 0)))
        schedule = BusinessService.save_weekly_schedule(db, business, entries)

        # Only Bruno does coloring; the other services fall back to all staff
        BusinessService.assign_staff_services(db, business, staff[1].id, [services[1].id])

        print(f"\n✅ Created {len(services)} services and {len(staff)} staff members")
        print("\n" + "=" * 60)
        print("BUSINESS CREATED SUCCESSFULLY!")
        print("=" * 60)
        print(f"\nServices:")
        for service in services:
            print(f"  - {service.name} ({service.formatted_duration})")
        print(f"\nWeekly schedule:")
        for entry in schedule:
            lunch = f", lunch {entry.lunch_break_start:%H:%M}-{entry.lunch_break_end:%H:%M}" if entry.has_lunch_break else ""
            print(f"  {entry.weekday}: {entry.start_time:%H:%M} - {entry.end_time:%H:%M}{lunch}")
        print()

        return str(business.id)

    except Exception as e:
        db.rollback()
        print(f"\n❌ Error creating business: {e}")
        traceback.print_exc()
        sys.exit(1)
    finally:
        db.close()


if __name__ == "__main__":
    create_demo_business(*sys.argv[1:2])
