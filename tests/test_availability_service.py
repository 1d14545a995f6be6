"""Tests for the availability engine against a real session."""
from datetime import datetime, time, timedelta

import pytest

from app.config.settings import Settings
from app.core.exceptions import ConflictError, PastTimeError, ValidationError
from app.models.booking import Booking, BookingStatus
from app.services.availability.availability_service import AvailabilityService
from app.services.business.business_service import BusinessService
from tests.conftest import DAY_BEFORE, MONDAY, SATURDAY


def add_booking(db, business, service, start, staff=None, status=BookingStatus.CONFIRMED):
    booking = Booking(
        business_id=business.id,
        staff_id=staff.id if staff else None,
        service_id=service.id,
        client_name="Existing Client",
        client_phone="+5511900000000",
        client_email="existing@example.com",
        scheduled_at=start,
        duration_minutes=service.duration_minutes,
        ends_at=start + timedelta(minutes=service.duration_minutes),
        status=status.value,
    )
    db.add(booking)
    db.commit()
    return booking


def times(starts):
    return [start.time() for start in starts]


class TestAvailableSlots:

    def test_default_hours_scenario(self, db, business, make_service, make_staff):
        service = make_service(duration_minutes=60)
        staff = make_staff("Ana")

        slots = times(AvailabilityService(db).available_slots(business, staff.id, service, MONDAY, now=DAY_BEFORE))

        assert time(11, 0) in slots
        assert time(11, 30) not in slots
        assert time(13, 0) in slots
        assert slots[-1] == time(17, 0)

    def test_staff_booking_blocks_only_that_staff(self, db, business, make_service, make_staff):
        long_service = make_service(name="Coloring", duration_minutes=45)
        short_service = make_service(name="Haircut", duration_minutes=30)
        ana = make_staff("Ana")
        bruno = make_staff("Bruno")
        add_booking(db, business, long_service, datetime(2030, 1, 7, 10, 0), staff=ana)

        service = AvailabilityService(db)
        for_ana = times(service.available_slots(business, ana.id, short_service, MONDAY, now=DAY_BEFORE))
        for_bruno = times(service.available_slots(business, bruno.id, short_service, MONDAY, now=DAY_BEFORE))

        assert time(10, 0) not in for_ana
        assert time(10, 30) not in for_ana
        assert time(11, 0) in for_ana
        assert time(10, 30) in for_bruno

    def test_cancelled_booking_frees_the_slot(self, db, business, make_service, make_staff):
        service = make_service()
        ana = make_staff("Ana")
        add_booking(db, business, service, datetime(2030, 1, 7, 10, 0), staff=ana, status=BookingStatus.CANCELLED)

        slots = times(AvailabilityService(db).available_slots(business, ana.id, service, MONDAY, now=DAY_BEFORE))

        assert time(10, 0) in slots

    def test_request_without_staff_sees_every_booking_by_default(self, db, business, make_service, make_staff):
        service = make_service()
        ana = make_staff("Ana")
        add_booking(db, business, service, datetime(2030, 1, 7, 10, 0), staff=ana)

        conservative = AvailabilityService(db)
        unassigned_only = AvailabilityService(db, settings=Settings(UNASSIGNED_STAFF_CONFLICT_SCOPE="unassigned"))

        assert time(10, 0) not in times(conservative.available_slots(business, None, service, MONDAY, now=DAY_BEFORE))
        assert time(10, 0) in times(unassigned_only.available_slots(business, None, service, MONDAY, now=DAY_BEFORE))

    def test_is_idempotent(self, db, business, make_service, make_staff):
        service = make_service(duration_minutes=45)
        ana = make_staff("Ana")
        add_booking(db, business, service, datetime(2030, 1, 7, 14, 0), staff=ana)
        engine = AvailabilityService(db)

        first = engine.available_slots(business, ana.id, service, MONDAY, now=DAY_BEFORE)
        second = engine.available_slots(business, ana.id, service, MONDAY, now=DAY_BEFORE)

        assert first == second

    def test_closed_days_have_no_slots(self, db, business, make_service, make_schedule):
        service = make_service()

        assert AvailabilityService(db).available_slots(business, None, service, SATURDAY, now=DAY_BEFORE) == []

        make_schedule(("TUESDAY", "09:00", "18:00", None, None))
        assert AvailabilityService(db).available_slots(business, None, service, MONDAY, now=DAY_BEFORE) == []

    def test_saved_schedule_is_used(self, db, business, make_service, make_schedule):
        service = make_service(duration_minutes=60)
        make_schedule(("SATURDAY", "10:00", "13:00", None, None))

        slots = times(AvailabilityService(db).available_slots(business, None, service, SATURDAY, now=DAY_BEFORE))

        assert slots == [time(10, 0), time(10, 30), time(11, 0), time(11, 30), time(12, 0)]

    def test_today_drops_elapsed_slots(self, db, business, make_service):
        service = make_service()

        slots = times(AvailabilityService(db).available_slots(
            business, None, service, MONDAY, now=datetime(2030, 1, 7, 15, 10)
        ))

        assert slots[0] == time(15, 30)

    def test_past_date_has_no_slots(self, db, business, make_service):
        service = make_service()
        availability = AvailabilityService(db)
        now = datetime(2030, 1, 8, 8, 0)

        assert availability.available_slots(business, None, service, MONDAY, now=now) == []
        with pytest.raises(PastTimeError):
            availability.check_slot(business, None, service, datetime(2030, 1, 7, 9, 0), now=now)

    def test_ineligible_staff_is_rejected(self, db, business, make_service, make_staff):
        coloring = make_service(name="Coloring", duration_minutes=90)
        ana = make_staff("Ana")
        bruno = make_staff("Bruno")
        BusinessService.assign_staff_services(db, business, bruno.id, [coloring.id])

        with pytest.raises(ValidationError):
            AvailabilityService(db).available_slots(business, ana.id, coloring, MONDAY, now=DAY_BEFORE)

    def test_inactive_service_is_rejected(self, db, business, make_service):
        service = make_service(is_active=False)

        with pytest.raises(ValidationError):
            AvailabilityService(db).available_slots(business, None, service, MONDAY, now=DAY_BEFORE)


class TestWizardSteps:

    def test_list_services_returns_active_only(self, db, business, make_service):
        make_service(name="Haircut")
        make_service(name="Beard", is_active=False)

        names = [s.name for s in AvailabilityService(db).list_services(business)]

        assert names == ["Haircut"]

    def test_list_eligible_staff_falls_back_to_all_active(self, db, business, make_service, make_staff):
        service = make_service()
        make_staff("Bruno")
        make_staff("Ana")
        make_staff("Carla", is_active=False)

        names = [s.name for s in AvailabilityService(db).list_eligible_staff(business, service)]

        assert names == ["Ana", "Bruno"]


class TestCheckSlot:

    def test_free_slot_is_returned(self, db, business, make_service, make_staff):
        service = make_service(duration_minutes=45)
        ana = make_staff("Ana")

        slot = AvailabilityService(db).check_slot(business, ana.id, service, datetime(2030, 1, 7, 9, 30), now=DAY_BEFORE)

        assert slot.end == datetime(2030, 1, 7, 10, 15)

    def test_taken_slot_raises_conflict(self, db, business, make_service, make_staff):
        service = make_service(duration_minutes=45)
        ana = make_staff("Ana")
        existing = add_booking(db, business, service, datetime(2030, 1, 7, 10, 0), staff=ana)

        with pytest.raises(ConflictError) as exc_info:
            AvailabilityService(db).check_slot(business, ana.id, service, datetime(2030, 1, 7, 10, 30), now=DAY_BEFORE)

        assert exc_info.value.details["conflicting_booking_ids"] == [str(existing.id)]

    @pytest.mark.parametrize("start", [
        datetime(2030, 1, 7, 11, 30),  # runs into lunch
        datetime(2030, 1, 7, 10, 15),  # off the 30 minute grid
        datetime(2030, 1, 7, 17, 30),  # ends after closing
        datetime(2030, 1, 7, 8, 0),    # before opening
        datetime(2030, 1, 12, 10, 0),  # Saturday, closed
    ])
    def test_non_slots_raise_validation_error(self, db, business, make_service, start):
        service = make_service(duration_minutes=60)

        with pytest.raises(ValidationError):
            AvailabilityService(db).check_slot(business, None, service, start, now=DAY_BEFORE)

    def test_elapsed_slot_raises_past_time(self, db, business, make_service):
        service = make_service()

        with pytest.raises(PastTimeError):
            AvailabilityService(db).check_slot(
                business, None, service, datetime(2030, 1, 7, 10, 0), now=datetime(2030, 1, 7, 10, 0)
            )
