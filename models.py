"""Data model for one week of employee shifts, plus the error types."""
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple, Union

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


# ---------- ERRORS ----------

class ScheduleError(ValueError):
    """Fatal problem with the input table; the run produces no output."""


class HeaderShapeError(ScheduleError):
    """The header does not define exactly seven distinct day columns."""


class MissingTableError(ScheduleError):
    """No table was supplied, or it has no columns at all."""


class CellParseError(ValueError):
    """A day cell is neither OFF nor a HH:MM-HH:MM span."""

    def __init__(self, employee_name: str, employee_id: str, day: date, raw_text: str):
        self.employee_name = employee_name
        self.employee_id = employee_id
        self.day = day
        self.raw_text = raw_text
        super().__init__(
            f"{employee_name} ({employee_id}): unreadable entry {raw_text!r} "
            f"for {day.strftime('%A %m/%d/%y')}"
        )


class MissingEmailError(LookupError):
    def __init__(self, employee_name: str, employee_id: str):
        self.employee_name = employee_name
        self.employee_id = employee_id
        super().__init__(f"No email address on file for {employee_name} ({employee_id})")


class DeliveryError(RuntimeError):
    def __init__(self, employee_name: str, address: str, reason: str):
        self.employee_name = employee_name
        self.address = address
        super().__init__(f"Could not deliver schedule to {employee_name} <{address}>: {reason}")


# ---------- WEEK ----------

@dataclass(frozen=True)
class WeekdayRef:
    """One day column of the week: canonical weekday name and its date."""
    name: str
    date: date

    @property
    def label(self) -> str:
        return f"{self.name} {self.date.strftime('%m/%d/%y')}"


@dataclass(frozen=True)
class NormalizedRow:
    """An employee row keyed by plain weekday name instead of "Monday (05/16/22)"."""
    name: str
    employee_id: str
    monday: str = ""
    tuesday: str = ""
    wednesday: str = ""
    thursday: str = ""
    friday: str = ""
    saturday: str = ""
    sunday: str = ""

    def cell(self, weekday: WeekdayRef) -> str:
        return getattr(self, weekday.name.lower())


# ---------- SHIFTS ----------

@dataclass(frozen=True)
class DayOff:
    pass


@dataclass(frozen=True)
class Worked:
    start: datetime
    end: datetime
    raw_span: str

    @property
    def hours(self) -> float:
        """Shift length in hours, rounded for display."""
        elapsed = self.end.astimezone(timezone.utc) - self.start.astimezone(timezone.utc)
        return round(elapsed.total_seconds() / 3600, 2)


@dataclass(frozen=True)
class Invalid:
    raw_text: str


ShiftSpan = Union[DayOff, Worked, Invalid]


@dataclass(frozen=True)
class DaySchedule:
    weekday: WeekdayRef
    shift: ShiftSpan

    @property
    def worked(self) -> bool:
        return isinstance(self.shift, Worked)

    @property
    def span_text(self) -> str:
        if isinstance(self.shift, Worked):
            return self.shift.raw_span
        if isinstance(self.shift, Invalid):
            return self.shift.raw_text
        return "OFF"


# ---------- OUTPUT ----------

@dataclass(frozen=True)
class CalendarDocument:
    """A rendered VCALENDAR for one employee."""
    text: str
    event_uids: Tuple[str, ...] = ()

    @property
    def event_count(self) -> int:
        return len(self.event_uids)

    def serialize(self) -> str:
        return self.text

    def __str__(self) -> str:
        return self.text


@dataclass
class EmployeeSchedule:
    name: str
    employee_id: str
    days: List[DaySchedule]
    calendar: CalendarDocument
    email_address: Optional[str] = None

    @property
    def worked_days(self) -> List[DaySchedule]:
        return [day for day in self.days if day.worked]

    @property
    def total_hours(self) -> float:
        return round(sum(day.shift.hours for day in self.worked_days), 2)

    def summary_rows(self) -> List[Tuple[str, date, bool, str]]:
        """(weekday, date, worked?, span text) per day, for human-readable summaries."""
        return [(d.weekday.name, d.weekday.date, d.worked, d.span_text) for d in self.days]


@dataclass
class AdminReport:
    """Append-only list of data-quality and delivery problems for one run."""
    entries: List[str] = field(default_factory=list)

    def record(self, error: Union[Exception, str]) -> None:
        message = str(error)
        logger.warning(message)
        self.entries.append(message)

    def extend(self, other: "AdminReport") -> None:
        self.entries.extend(other.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)
