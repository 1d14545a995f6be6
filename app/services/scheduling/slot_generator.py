"""
Slot Generation

Produces candidate start times inside an open interval, considering:
- Service duration (a slot must end by the interval end)
- Lunch exclusion (any overlap disqualifies the slot)
- Current time (slots at or before now are dropped, so past dates yield none)
"""
from datetime import datetime, timedelta
from typing import Iterator, Optional

from app.core.exceptions import ValidationError
from app.services.scheduling.intervals import Slot, TimeInterval

DEFAULT_STEP_MINUTES = 30


class SlotSequence:
    """
    Lazy, finite and restartable sequence of slot start times.

    Every call to iter() walks the interval again from the beginning, so
    the same SlotSequence can be consumed several times.
    """

    def __init__(
            self,
            interval: TimeInterval,
            excluded: Optional[TimeInterval],
            duration_minutes: int,
            step_minutes: int,
            now: Optional[datetime] = None
    ):
        self.interval = interval
        self.excluded = excluded
        self.duration = timedelta(minutes=duration_minutes)
        self.step = timedelta(minutes=step_minutes)
        self.now = now

    def __iter__(self) -> Iterator[datetime]:
        for slot in self.slots():
            yield slot.start

    def slots(self) -> Iterator[Slot]:
        last_start = self.interval.end - self.duration
        filter_past = self.now is not None and self.interval.date <= self.now.date()

        current = self.interval.start
        while current <= last_start:
            slot = Slot(current, current + self.duration)

            if filter_past and slot.start <= self.now:
                current += self.step
                continue

            if self.excluded is not None and slot.overlaps(self.excluded):
                current += self.step
                continue

            yield slot
            current += self.step

    def __repr__(self):
        return (
            f"<SlotSequence({self.interval.start:%Y-%m-%d %H:%M}-{self.interval.end:%H:%M}, "
            f"duration={self.duration}, step={self.step})>"
        )


class SlotGenerator:
    """Generates candidate slots on a fixed step grid, independent of service duration"""

    def __init__(self, step_minutes: int = DEFAULT_STEP_MINUTES):
        if step_minutes <= 0:
            raise ValidationError("Slot step must be positive", details={"step_minutes": step_minutes})
        self.step_minutes = step_minutes

    def generate(
            self,
            interval: TimeInterval,
            excluded: Optional[TimeInterval],
            duration_minutes: int,
            now: Optional[datetime] = None,
            step_minutes: Optional[int] = None
    ) -> SlotSequence:
        """
        Candidate start times for one open interval.

        Args:
            interval: primary working interval
            excluded: lunch break inside the interval, if any
            duration_minutes: service duration
            now: evaluation time; starts at or before it are dropped
            step_minutes: overrides the generator's step for this call

        Returns:
            SlotSequence yielding ascending start datetimes
        """
        if duration_minutes is None or duration_minutes <= 0:
            raise ValidationError(
                "Service duration must be positive",
                details={"duration_minutes": duration_minutes}
            )

        step = self.step_minutes if step_minutes is None else step_minutes
        if step <= 0:
            raise ValidationError("Slot step must be positive", details={"step_minutes": step})

        return SlotSequence(interval, excluded, duration_minutes, step, now=now)

    def is_on_grid(self, interval: TimeInterval, start: datetime) -> bool:
        """True if start is reachable from the interval start in whole steps"""
        offset = start - interval.start
        return offset >= timedelta(0) and offset % timedelta(minutes=self.step_minutes) == timedelta(0)
