import logging
import math
import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, List, Mapping, Optional, Sequence, Tuple

from models import (
    WEEKDAY_NAMES,
    DayOff,
    HeaderShapeError,
    Invalid,
    NormalizedRow,
    ShiftSpan,
    WeekdayRef,
    Worked,
)

logger = logging.getLogger(__name__)

DAY_COLUMN_RE = re.compile(r'^([A-Za-z]{3,6}day)\s*\(?(\d{2}/\d{2}/\d{2})\)?$', re.IGNORECASE)
SHIFT_RE = re.compile(r'^(\d{2}):(\d{2})\s*-\s*(\d{2}):(\d{2})$')
HEADER_DATE_FORMAT = "%m/%d/%y"
OFF_TOKEN = "OFF"
NAME_COLUMN = "Name"
ID_COLUMN = "EmployeeID"


def find_day_columns(columns: Sequence[Any]) -> List[Tuple[str, str, str]]:
    """Return (column, weekday token, date text) for every day-shaped column, in column order."""
    matches = []
    for column in columns:
        match = DAY_COLUMN_RE.match(str(column).strip())
        if match:
            matches.append((str(column), match.group(1), match.group(2)))
    return matches


def resolve_weekdays(columns: Sequence[Any]) -> List[Tuple[str, WeekdayRef]]:
    """
    Resolve the table header into the seven days of the week.

    Returns (original column name, WeekdayRef) pairs in column order, so the
    week starts on whatever day comes first in the table.
    """
    matches = find_day_columns(columns)
    if len(matches) != 7:
        raise HeaderShapeError(
            f"Expected 7 day columns like 'Monday (05/16/22)', found {len(matches)}: "
            f"{[column for column, _, _ in matches]}"
        )

    resolved = []
    for column, token, date_text in matches:
        name = token.capitalize()
        if name not in WEEKDAY_NAMES:
            raise HeaderShapeError(f"Column {column!r} does not name a weekday")
        try:
            day = datetime.strptime(date_text, HEADER_DATE_FORMAT).date()
        except ValueError as e:
            raise HeaderShapeError(f"Column {column!r} has an invalid date: {e}") from e
        resolved.append((column, WeekdayRef(name=name, date=day)))

    names = [ref.name for _, ref in resolved]
    if len(set(names)) != 7:
        raise HeaderShapeError(f"Day columns repeat a weekday: {names}")

    logger.info(f"Week resolved: {resolved[0][1].label} to {resolved[-1][1].label}")
    return resolved


def cell_text(value: Any) -> str:
    """Raw table value to stripped text; missing values become empty strings."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return str(value).strip()


def normalize_row(raw: Mapping[str, Any], day_columns: Sequence[Tuple[str, WeekdayRef]]) -> NormalizedRow:
    """Re-key a raw row from 'Weekday (date)' columns to plain weekday fields.

    Column i of the header feeds weekday i; names are never re-derived from the header text.
    """
    cells = {
        weekday.name.lower(): cell_text(raw.get(column))
        for column, weekday in day_columns
    }
    return NormalizedRow(
        name=cell_text(raw.get(NAME_COLUMN)),
        employee_id=cell_text(raw.get(ID_COLUMN)),
        **cells,
    )


def parse_datetime(weekday: WeekdayRef, hour: int, minute: int, tz: tzinfo) -> datetime:
    """Combine a weekday's date with a wall-clock time in the schedule's time zone."""
    return datetime(weekday.date.year, weekday.date.month, weekday.date.day, hour, minute, tzinfo=tz)


def parse_shift(text: str, weekday: WeekdayRef, tz: tzinfo) -> ShiftSpan:
    """
    Classify one schedule cell.

    "OFF" is a day off; "HH:MM-HH:MM" (spaces allowed around the hyphen) is a
    worked shift; anything else is Invalid. Never raises for bad cell text.

    When the end hour is smaller than the start hour the shift is taken to end
    the next day. This also rolls over entries like "09:00-08:30", which are
    more likely typos than overnight shifts.
    """
    text = cell_text(text)
    if text == OFF_TOKEN:
        return DayOff()

    match = SHIFT_RE.match(text)
    if not match:
        return Invalid(raw_text=text)

    start_hour, start_minute, end_hour, end_minute = (int(part) for part in match.groups())
    if start_hour > 23 or end_hour > 23 or start_minute > 59 or end_minute > 59:
        return Invalid(raw_text=text)

    start = parse_datetime(weekday, start_hour, start_minute, tz)
    end = parse_datetime(weekday, end_hour, end_minute, tz)
    if end_hour < start_hour:
        end += timedelta(days=1)

    if end.astimezone(timezone.utc) <= start.astimezone(timezone.utc):
        # same-hour spans such as "09:30-09:10" cannot be rolled over by hour
        return Invalid(raw_text=text)

    return Worked(start=start, end=end, raw_span=text)


def week_label(weekdays: Sequence[WeekdayRef]) -> Optional[str]:
    """'05/16/22 - 05/22/22' for a resolved week, None for an empty one."""
    if not weekdays:
        return None
    return f"{weekdays[0].date.strftime('%m/%d/%y')} - {weekdays[-1].date.strftime('%m/%d/%y')}"
