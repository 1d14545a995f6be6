"""Tests for business configuration: schedule, slug lookup and staff eligibility."""
from datetime import time
from uuid import uuid4

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.models.business import Business
from app.models.schedule import WeeklyScheduleEntry
from app.schemas.booking import ScheduleEntryPayload
from app.services.business.business_service import BusinessService


def weekday_entry(weekday, start="09:00", end="18:00", lunch_start=None, lunch_end=None):
    return ScheduleEntryPayload(
        weekday=weekday,
        start_time=start,
        end_time=end,
        lunch_break_start=lunch_start,
        lunch_break_end=lunch_end,
    )


class TestWeeklySchedule:

    def test_save_replaces_every_entry(self, db, business):
        BusinessService.save_weekly_schedule(db, business, [weekday_entry("MONDAY"), weekday_entry("TUESDAY")])

        saved = BusinessService.save_weekly_schedule(
            db, business, [weekday_entry("FRIDAY", "10:00", "16:00", "12:00", "12:30")]
        )

        assert [e.weekday for e in saved] == ["FRIDAY"]
        assert saved[0].lunch_break_end == time(12, 30)
        assert db.query(WeeklyScheduleEntry).count() == 1

    def test_entries_come_back_monday_first(self, db, business):
        BusinessService.save_weekly_schedule(
            db, business, [weekday_entry("SUNDAY"), weekday_entry("MONDAY"), weekday_entry("WEDNESDAY")]
        )

        weekdays = [e.weekday for e in BusinessService.get_weekly_schedule(db, business)]

        assert weekdays == ["MONDAY", "WEDNESDAY", "SUNDAY"]

    def test_invalid_entry_leaves_schedule_untouched(self, db, business):
        BusinessService.save_weekly_schedule(db, business, [weekday_entry("MONDAY")])

        with pytest.raises(ValidationError) as exc_info:
            BusinessService.save_weekly_schedule(
                db, business, [weekday_entry("TUESDAY"), weekday_entry("WEDNESDAY", "09:00", "18:00", "13:00", "12:00")]
            )

        assert exc_info.value.details["weekday"] == "WEDNESDAY"
        assert [e.weekday for e in BusinessService.get_weekly_schedule(db, business)] == ["MONDAY"]

    def test_duplicate_weekday_is_rejected(self, db, business):
        with pytest.raises(ValidationError):
            BusinessService.save_weekly_schedule(db, business, [weekday_entry("MONDAY"), weekday_entry("MONDAY")])

    def test_end_before_start_is_rejected(self, db, business):
        with pytest.raises(ValidationError):
            BusinessService.save_weekly_schedule(db, business, [weekday_entry("MONDAY", "18:00", "09:00")])

    def test_disabled_lunch_is_dropped(self):
        payload = ScheduleEntryPayload(
            weekday="MONDAY",
            start_time="09:00",
            end_time="18:00",
            has_lunch_break=False,
            lunch_break_start="12:00",
            lunch_break_end="13:00",
        )

        assert payload.lunch_break_start is None
        assert payload.lunch_break_end is None

    def test_use_default_hours_flag_is_saved(self, db, business):
        BusinessService.save_weekly_schedule(db, business, [], use_default_hours=False)

        db.refresh(business)
        assert business.use_default_hours is False


class TestBusinessLookup:

    def test_slug_lookup_ignores_case(self, db, business):
        assert BusinessService.get_business_by_slug(db, "Studio").id == business.id

    def test_mixed_case_stored_slug_is_found(self, db, business):
        business.custom_url = "Studio-Centro"
        db.commit()

        assert BusinessService.get_business_by_slug(db, "studio-centro").id == business.id
        assert BusinessService.get_business_by_slug(db, " STUDIO-CENTRO ").id == business.id

    def test_inactive_business_is_not_public(self, db, business):
        business.is_active = False
        db.commit()

        with pytest.raises(NotFoundError):
            BusinessService.get_business_by_slug(db, "studio")

    def test_unknown_business_id(self, db):
        with pytest.raises(NotFoundError):
            BusinessService.get_business(db, uuid4())

    def test_service_of_another_business_is_not_found(self, db, business, make_service):
        other = Business(name="Other", custom_url="other")
        db.add(other)
        db.commit()
        foreign = make_service(owner=other)

        with pytest.raises(NotFoundError):
            BusinessService.get_service(db, business, foreign.id)


class TestStaffEligibility:

    def test_assignment_restricts_eligible_staff(self, db, business, make_service, make_staff):
        coloring = make_service(name="Coloring", duration_minutes=90)
        haircut = make_service(name="Haircut")
        ana = make_staff("Ana")
        bruno = make_staff("Bruno")

        BusinessService.assign_staff_services(db, business, bruno.id, [coloring.id])

        assert [s.name for s in BusinessService.eligible_staff(db, business, coloring)] == ["Bruno"]
        assert [s.name for s in BusinessService.eligible_staff(db, business, haircut)] == ["Ana", "Bruno"]
        assert not BusinessService.is_staff_eligible(db, business, coloring, ana.id)

    def test_inactive_assigned_staff_is_not_eligible(self, db, business, make_service, make_staff):
        coloring = make_service(name="Coloring")
        bruno = make_staff("Bruno")
        BusinessService.assign_staff_services(db, business, bruno.id, [coloring.id])
        bruno.is_active = False
        db.commit()

        assert BusinessService.eligible_staff(db, business, coloring) == []

    def test_assignment_can_be_cleared(self, db, business, make_service, make_staff):
        coloring = make_service(name="Coloring")
        bruno = make_staff("Bruno")
        BusinessService.assign_staff_services(db, business, bruno.id, [coloring.id])

        staff = BusinessService.assign_staff_services(db, business, bruno.id, [])

        assert staff.services == []

    def test_unknown_service_is_rejected(self, db, business, make_staff):
        bruno = make_staff("Bruno")

        with pytest.raises(ValidationError):
            BusinessService.assign_staff_services(db, business, bruno.id, [uuid4()])

    def test_unknown_staff_is_not_found(self, db, business):
        with pytest.raises(NotFoundError):
            BusinessService.assign_staff_services(db, business, uuid4(), [])
