"""
Half-open time intervals and the overlap predicate shared by slot
generation and conflict detection.
"""
from dataclasses import dataclass
from datetime import date, datetime, timedelta


def intervals_overlap(
        a_start: datetime,
        a_end: datetime,
        b_start: datetime,
        b_end: datetime
) -> bool:
    """
    [a_start, a_end) and [b_start, b_end) share at least one instant.

    Covers every case at once: a starts inside b, a ends inside b,
    a contains b and b contains a. Touching intervals do not overlap.
    """
    return a_start < b_end and b_start < a_end


@dataclass(frozen=True)
class TimeInterval:
    """Half-open interval [start, end)"""
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"Interval end {self.end} must be after start {self.start}")

    @property
    def date(self) -> date:
        return self.start.date()

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return intervals_overlap(self.start, self.end, other.start, other.end)

    def contains(self, other: "TimeInterval") -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class Slot(TimeInterval):
    """A bookable candidate interval. Derived on demand, never stored."""

    @classmethod
    def starting_at(cls, start: datetime, duration_minutes: int) -> "Slot":
        return cls(start=start, end=start + timedelta(minutes=duration_minutes))

    def to_dict(self):
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "time": self.start.strftime("%H:%M"),
        }
