"""
Render one employee's worked shifts as an iCalendar document.

Lines are emitted through the ics content-line primitives rather than
ics.Event so that property order inside each VEVENT stays fixed:
UID, CREATED, DTSTAMP, LAST-MODIFIED, CLASS, SEQUENCE, DTSTART, DTEND,
SUMMARY, DESCRIPTION, STATUS, TRANSP, then the VALARM. Some calendar
readers are picky about that order.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from ics.grammar.parse import Container, ContentLine

from models import CalendarDocument, DaySchedule, Worked

logger = logging.getLogger(__name__)

PRODID = "-//Shift Calendar//Weekly Work Schedule//EN"
ICAL_VERSION = "2.0"
EVENT_TITLE = "Work Shift"
EVENT_DESCRIPTION = "Work Shift"
REMINDER_DESCRIPTION = "Work Shift Reminder"
REMINDER_TRIGGER = "-P1D"
UTC_FORMAT = "%Y%m%dT%H%M%SZ"


def format_utc(moment: datetime) -> str:
    """Aware datetime -> basic-format UTC timestamp, e.g. 20220516T140000Z."""
    if moment.tzinfo is None:
        raise ValueError(f"Cannot convert naive datetime {moment} to UTC")
    return moment.astimezone(timezone.utc).strftime(UTC_FORMAT)


def default_uid() -> str:
    return f"{uuid.uuid4()}@shift-calendar"


class CalendarBuilder:
    """Accumulates VEVENTs for one employee, then freezes them into a CalendarDocument."""

    def __init__(self, now: Optional[datetime] = None, uid_factory: Callable[[], str] = default_uid):
        self.stamp = format_utc(now or datetime.now(timezone.utc))
        self.uid_factory = uid_factory
        self.events: List[Container] = []
        self.uids: List[str] = []

    def add_shift(self, shift: Worked) -> str:
        uid = self.uid_factory()
        alarm = Container(
            "VALARM",
            ContentLine("ACTION", value="DISPLAY"),
            ContentLine("DESCRIPTION", value=REMINDER_DESCRIPTION),
            ContentLine("TRIGGER", value=REMINDER_TRIGGER),
        )
        event = Container(
            "VEVENT",
            ContentLine("UID", value=uid),
            ContentLine("CREATED", value=self.stamp),
            ContentLine("DTSTAMP", value=self.stamp),
            ContentLine("LAST-MODIFIED", value=self.stamp),
            ContentLine("CLASS", value="PRIVATE"),
            ContentLine("SEQUENCE", value="0"),
            ContentLine("DTSTART", value=format_utc(shift.start)),
            ContentLine("DTEND", value=format_utc(shift.end)),
            ContentLine("SUMMARY", value=EVENT_TITLE),
            ContentLine("DESCRIPTION", value=EVENT_DESCRIPTION),
            ContentLine("STATUS", value="CONFIRMED"),
            ContentLine("TRANSP", value="OPAQUE"),
            alarm,
        )
        self.events.append(event)
        self.uids.append(uid)
        return uid

    def add_day(self, day: DaySchedule) -> Optional[str]:
        """Add an event if the day was worked; days off and unreadable days are skipped."""
        if isinstance(day.shift, Worked):
            return self.add_shift(day.shift)
        return None

    def build(self) -> CalendarDocument:
        calendar = Container(
            "VCALENDAR",
            ContentLine("VERSION", value=ICAL_VERSION),
            ContentLine("PRODID", value=PRODID),
            *self.events,
        )
        return CalendarDocument(text=str(calendar) + "\r\n", event_uids=tuple(self.uids))


def build_calendar(days: Iterable[DaySchedule], now: Optional[datetime] = None,
                   uid_factory: Callable[[], str] = default_uid) -> CalendarDocument:
    """One document per employee, one event per worked day, in day order."""
    builder = CalendarBuilder(now=now, uid_factory=uid_factory)
    for day in days:
        builder.add_day(day)
    document = builder.build()
    logger.debug(f"Built calendar with {document.event_count} events")
    return document
