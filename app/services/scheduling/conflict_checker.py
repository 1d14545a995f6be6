"""
Conflict Detection

Tests a candidate slot against existing bookings using the half-open
overlap predicate. Only confirmed bookings block; cancelled and completed
bookings never do.
"""
from datetime import datetime, timedelta
from typing import Iterable, List, Optional, Tuple
from uuid import UUID

from app.models.booking import BookingStatus
from app.services.scheduling.intervals import Slot, intervals_overlap

SCOPE_BUSINESS = "business"
SCOPE_UNASSIGNED = "unassigned"


def booking_interval(booking) -> Tuple[datetime, datetime]:
    """[scheduled_at, scheduled_at + duration) of a booking"""
    start = booking.scheduled_at
    return start, start + timedelta(minutes=booking.duration_minutes)


def _same_id(a, b) -> bool:
    if a is None or b is None:
        return a is None and b is None
    return str(a) == str(b)


class ConflictChecker:
    """
    Decides whether a candidate slot collides with existing bookings.

    With a staff member on the candidate, only that member's bookings
    participate. Without one, unassigned_scope decides:
      - "business": every confirmed booking of the business blocks
      - "unassigned": only other bookings without staff block
    """

    def __init__(self, unassigned_scope: str = SCOPE_BUSINESS):
        if unassigned_scope not in (SCOPE_BUSINESS, SCOPE_UNASSIGNED):
            raise ValueError(f"Unknown unassigned staff scope: {unassigned_scope}")
        self.unassigned_scope = unassigned_scope

    def participates(self, booking, staff_id: Optional[UUID]) -> bool:
        if booking.status != BookingStatus.CONFIRMED.value:
            return False
        if staff_id is not None:
            return _same_id(booking.staff_id, staff_id)
        if self.unassigned_scope == SCOPE_UNASSIGNED:
            return booking.staff_id is None
        return True

    def conflicting_bookings(
            self,
            slot: Slot,
            bookings: Iterable,
            staff_id: Optional[UUID] = None
    ) -> List:
        """Bookings that block the slot"""
        conflicts = []
        for booking in bookings:
            if not self.participates(booking, staff_id):
                continue
            start, end = booking_interval(booking)
            if intervals_overlap(slot.start, slot.end, start, end):
                conflicts.append(booking)
        return conflicts

    def has_conflict(
            self,
            slot: Slot,
            bookings: Iterable,
            staff_id: Optional[UUID] = None
    ) -> bool:
        return any(
            self.participates(booking, staff_id)
            and intervals_overlap(slot.start, slot.end, *booking_interval(booking))
            for booking in bookings
        )
