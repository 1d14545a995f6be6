"""
Working Hours Calendar

Resolves a business's weekly schedule to the concrete open interval for a
single date. The lunch break is returned as a separate excluded interval,
never merged into the primary one, so slot generation can skip it
explicitly.

Default hours apply only to businesses that have not saved any schedule.
Once a schedule exists, a weekday without an entry is a closed day.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union

from app.core.exceptions import ConfigurationMissing, ValidationError
from app.models.schedule import Weekday
from app.services.scheduling.intervals import TimeInterval


def parse_time(value: Union[time, timedelta, str]) -> time:
    """
    Convert the different time representations we receive to datetime.time.

    Accepts time objects, timedelta since midnight (some drivers return
    TIME columns that way) and "HH:MM" / "HH:MM:SS" strings.
    """
    if isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return (datetime.min + value).time()
    if isinstance(value, str):
        for fmt in ("%H:%M", "%H:%M:%S"):
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
        raise ValidationError(f"Time must be in HH:MM format, got '{value}'")
    raise ValidationError(f"Cannot convert {type(value).__name__} to time")


@dataclass(frozen=True)
class OpenInterval:
    """Working interval of one date plus the optional lunch exclusion"""
    primary: TimeInterval
    excluded: Optional[TimeInterval] = None

    @property
    def date(self) -> date:
        return self.primary.date


@dataclass(frozen=True)
class DailyHours:
    """Opening hours of a single weekday"""
    start_time: time
    end_time: time
    lunch_break_start: Optional[time] = None
    lunch_break_end: Optional[time] = None

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValidationError(
                "Start time must be before end time",
                details={"start_time": self.start_time.isoformat(), "end_time": self.end_time.isoformat()}
            )

        if (self.lunch_break_start is None) != (self.lunch_break_end is None):
            raise ValidationError("Lunch break needs both a start and an end time")

        if self.has_lunch_break:
            if not (self.start_time <= self.lunch_break_start < self.lunch_break_end <= self.end_time):
                raise ValidationError(
                    "Lunch break must lie within working hours and end after it starts",
                    details={
                        "lunch_break_start": self.lunch_break_start.isoformat(),
                        "lunch_break_end": self.lunch_break_end.isoformat(),
                    }
                )

    @property
    def has_lunch_break(self) -> bool:
        return self.lunch_break_start is not None and self.lunch_break_end is not None

    @classmethod
    def from_entry(cls, entry) -> "DailyHours":
        """Build from a WeeklyScheduleEntry (or anything exposing the same fields)"""
        lunch_start = getattr(entry, "lunch_break_start", None)
        lunch_end = getattr(entry, "lunch_break_end", None)
        return cls(
            start_time=parse_time(entry.start_time),
            end_time=parse_time(entry.end_time),
            lunch_break_start=parse_time(lunch_start) if lunch_start is not None else None,
            lunch_break_end=parse_time(lunch_end) if lunch_end is not None else None,
        )

    def on(self, target_date: date) -> OpenInterval:
        """Anchor these hours to a concrete date"""
        primary = TimeInterval(
            datetime.combine(target_date, self.start_time),
            datetime.combine(target_date, self.end_time),
        )
        excluded = None
        if self.has_lunch_break:
            excluded = TimeInterval(
                datetime.combine(target_date, self.lunch_break_start),
                datetime.combine(target_date, self.lunch_break_end),
            )
        return OpenInterval(primary=primary, excluded=excluded)


class WorkingHoursCalendar:
    """Maps (business, date) to the open interval for that date"""

    def __init__(
            self,
            default_hours: Optional[DailyHours] = None,
            default_weekdays: Optional[Iterable[Union[Weekday, str]]] = None,
            defaults_enabled: bool = True
    ):
        self.default_hours = default_hours or DailyHours(
            start_time=time(9, 0),
            end_time=time(18, 0),
            lunch_break_start=time(12, 0),
            lunch_break_end=time(13, 0),
        )
        if default_weekdays is None:
            default_weekdays = list(Weekday)[:5]
        self.default_weekdays = {Weekday(day) for day in default_weekdays}
        self.defaults_enabled = defaults_enabled

    @classmethod
    def from_settings(cls, settings) -> "WorkingHoursCalendar":
        return cls(
            default_hours=DailyHours(
                start_time=parse_time(settings.DEFAULT_OPEN_TIME),
                end_time=parse_time(settings.DEFAULT_CLOSE_TIME),
                lunch_break_start=parse_time(settings.DEFAULT_LUNCH_START) if settings.DEFAULT_LUNCH_START else None,
                lunch_break_end=parse_time(settings.DEFAULT_LUNCH_END) if settings.DEFAULT_LUNCH_END else None,
            ),
            default_weekdays=settings.DEFAULT_WORKING_DAYS,
            defaults_enabled=settings.DEFAULT_HOURS_ENABLED,
        )

    def hours_for(
            self,
            entries: List,
            target_date: date,
            use_defaults: bool = True
    ) -> Optional[DailyHours]:
        """Pick the DailyHours that apply to target_date, or None if closed"""
        weekday = Weekday.from_date(target_date)

        if entries:
            entry = next((e for e in entries if Weekday(e.weekday) == weekday), None)
            return DailyHours.from_entry(entry) if entry else None

        if self.defaults_enabled and use_defaults and weekday in self.default_weekdays:
            return self.default_hours

        return None

    def resolve_entries(
            self,
            entries: List,
            target_date: date,
            use_defaults: bool = True
    ) -> Optional[OpenInterval]:
        hours = self.hours_for(entries, target_date, use_defaults=use_defaults)
        return hours.on(target_date) if hours else None

    def resolve(self, business, target_date: date) -> Optional[OpenInterval]:
        """Open interval of the business on target_date, or None when closed"""
        use_defaults = getattr(business, "use_default_hours", True)
        if use_defaults is None:
            use_defaults = True
        return self.resolve_entries(list(business.schedule_entries), target_date, use_defaults=use_defaults)

    def require(self, business, target_date: date) -> OpenInterval:
        """Like resolve(), but raises ConfigurationMissing instead of returning None"""
        interval = self.resolve(business, target_date)
        if interval is None:
            raise ConfigurationMissing(
                "No working hours configured for this date",
                details={
                    "date": target_date.isoformat(),
                    "weekday": Weekday.from_date(target_date).value,
                }
            )
        return interval
