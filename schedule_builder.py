"""Turn a weekly schedule table into per-employee schedules and calendars."""
import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Callable, List, Optional, Union
from zoneinfo import ZoneInfo

import pandas as pd

from calendar_builder import build_calendar, default_uid
from config import SCHEDULE_TIMEZONE
from helpers import normalize_row, parse_shift, resolve_weekdays, week_label
from models import (
    AdminReport,
    CellParseError,
    DaySchedule,
    EmployeeSchedule,
    Invalid,
    MissingTableError,
    WeekdayRef,
)

logger = logging.getLogger(__name__)


@dataclass
class ScheduleRun:
    """Everything one run produces: the week, each employee's schedule, and the admin report."""
    weekdays: List[WeekdayRef]
    schedules: List[EmployeeSchedule]
    report: AdminReport = field(default_factory=AdminReport)

    @property
    def week_label(self) -> Optional[str]:
        return week_label(self.weekdays)

    def find(self, employee_id: str) -> Optional[EmployeeSchedule]:
        for schedule in self.schedules:
            if schedule.employee_id == employee_id:
                return schedule
        return None


def load_schedule_table(path: Union[str, Path]) -> pd.DataFrame:
    """Read a schedule CSV, keeping every cell as text."""
    return pd.read_csv(path, dtype=str, keep_default_na=False)


def resolve_timezone(tz: Union[str, tzinfo, None] = None) -> tzinfo:
    if tz is None:
        return ZoneInfo(SCHEDULE_TIMEZONE)
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def build_schedules(
    table: Optional[pd.DataFrame],
    tz: Union[str, tzinfo, None] = None,
    now: Optional[datetime] = None,
    uid_factory: Callable[[], str] = default_uid,
    report: Optional[AdminReport] = None,
) -> ScheduleRun:
    """
    Parse every employee row of the table.

    The header is resolved once; a bad header raises HeaderShapeError before
    any schedule is built. Bad cells never stop the run: they are marked
    Invalid, left out of the calendar, and recorded in the admin report.

    Args:
        table: DataFrame with Name, EmployeeID and seven "Weekday (MM/DD/YY)" columns
        tz: Time zone the cell times are written in (defaults to SCHEDULE_TIMEZONE)
        now: Creation timestamp for calendar events (defaults to the current time)
        uid_factory: Generates event UIDs
        report: Existing admin report to append to

    Returns:
        ScheduleRun with one EmployeeSchedule per row, in row order
    """
    if table is None or len(table.columns) == 0:
        raise MissingTableError("No schedule table was provided")

    zone = resolve_timezone(tz)
    if report is None:
        report = AdminReport()

    day_columns = resolve_weekdays(list(table.columns))
    weekdays = [weekday for _, weekday in day_columns]

    schedules = []
    for row_number, raw in enumerate(table.to_dict(orient="records"), start=2):
        row = normalize_row(raw, day_columns)
        if not row.name or not row.employee_id:
            report.record(
                f"Row {row_number}: missing employee name or ID "
                f"(name={row.name!r}, id={row.employee_id!r})"
            )

        days = []
        for weekday in weekdays:
            shift = parse_shift(row.cell(weekday), weekday, zone)
            if isinstance(shift, Invalid):
                report.record(CellParseError(row.name, row.employee_id, weekday.date, shift.raw_text))
            days.append(DaySchedule(weekday=weekday, shift=shift))

        schedules.append(EmployeeSchedule(
            name=row.name,
            employee_id=row.employee_id,
            days=days,
            calendar=build_calendar(days, now=now, uid_factory=uid_factory),
        ))

    logger.info(
        f"Built {len(schedules)} schedules for week {week_label(weekdays)} "
        f"with {len(report)} problems"
    )
    return ScheduleRun(weekdays=weekdays, schedules=schedules, report=report)
