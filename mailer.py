"""
Email delivery of weekly schedules and the admin report.
"""
import logging
import smtplib
from email.message import EmailMessage
from pathlib import Path
from typing import Dict, Iterable, Optional, Union

import pandas as pd

from models import (
    AdminReport,
    DeliveryError,
    EmployeeSchedule,
    Invalid,
    MissingEmailError,
    Worked,
)

logger = logging.getLogger(__name__)

SCHEDULE_SUBJECT = "Your work schedule for the week of {week}"
ADMIN_SUBJECT = "Schedule run report - week of {week}"


def load_email_directory(path: Union[str, Path]) -> Dict[str, str]:
    """Read an EmployeeID,Email CSV into {employee_id: address}."""
    table = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = {"EmployeeID", "Email"} - set(table.columns)
    if missing:
        raise ValueError(f"Email directory {path} is missing columns: {sorted(missing)}")

    directory = {}
    for row in table.to_dict(orient="records"):
        employee_id = row["EmployeeID"].strip()
        address = row["Email"].strip()
        if employee_id and address:
            directory[employee_id] = address
    return directory


def resolve_email(schedule: EmployeeSchedule, directory: Dict[str, str]) -> str:
    address = directory.get(schedule.employee_id)
    if not address:
        raise MissingEmailError(schedule.name, schedule.employee_id)
    return address


def first_date_label(schedule: EmployeeSchedule) -> str:
    if not schedule.days:
        return ""
    return schedule.days[0].weekday.date.strftime("%m/%d/%y")


def format_schedule_summary(schedule: EmployeeSchedule) -> str:
    """Plain-text week summary for the employee's email body."""
    lines = [f"Hi {schedule.name},", "", f"Here is your schedule for the week of {first_date_label(schedule)}:", ""]

    for day in schedule.days:
        label = day.weekday.label
        if isinstance(day.shift, Worked):
            lines.append(f"  {label}: {day.shift.raw_span} ({day.shift.hours:g} hrs)")
        elif isinstance(day.shift, Invalid):
            lines.append(f"  {label}: not scheduled (unreadable entry {day.shift.raw_text!r})")
        else:
            lines.append(f"  {label}: OFF")

    lines.append("")
    lines.append(f"Total: {schedule.total_hours:g} hrs over {len(schedule.worked_days)} shifts")
    if schedule.worked_days:
        lines.append("")
        lines.append("Your shifts are attached as a calendar file.")
    return "\n".join(lines)


def build_schedule_message(schedule: EmployeeSchedule, sender: str) -> EmailMessage:
    week = first_date_label(schedule)
    message = EmailMessage()
    message["Subject"] = SCHEDULE_SUBJECT.format(week=week)
    message["From"] = sender
    message["To"] = schedule.email_address
    message.set_content(format_schedule_summary(schedule))
    message.add_attachment(
        schedule.calendar.serialize().encode("utf-8"),
        maintype="text",
        subtype="calendar",
        filename=f"work_schedule_{week.replace('/', '-')}.ics",
    )
    return message


def format_admin_report(report: AdminReport, week: Optional[str]) -> str:
    lines = [f"Schedule run report - week of {week or 'unknown'}", ""]
    if report:
        lines.append(f"{len(report)} problems found:")
        lines.append("")
        lines.extend(f"  - {entry}" for entry in report)
    else:
        lines.append("No problems found.")
    return "\n".join(lines)


def build_admin_message(report: AdminReport, week: Optional[str], sender: str, recipient: str) -> EmailMessage:
    message = EmailMessage()
    message["Subject"] = ADMIN_SUBJECT.format(week=week or "unknown")
    message["From"] = sender
    message["To"] = recipient
    message.set_content(format_admin_report(report, week))
    return message


class SmtpMailer:
    """Sends messages over one SMTP connection per batch."""

    def __init__(self, host: str, port: int = 587, username: str = "", password: str = "",
                 use_tls: bool = True, timeout: float = 30):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout
        self._connection: Optional[smtplib.SMTP] = None

    def __enter__(self) -> "SmtpMailer":
        connection = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.use_tls:
                connection.starttls()
            if self.username:
                connection.login(self.username, self.password)
        except (smtplib.SMTPException, OSError):
            connection.close()
            raise
        self._connection = connection
        return self

    def __exit__(self, *exc_info) -> None:
        if self._connection is not None:
            try:
                self._connection.quit()
            except (smtplib.SMTPException, OSError) as e:
                logger.warning(f"Error closing SMTP connection: {e}")
            self._connection = None

    def send(self, message: EmailMessage) -> None:
        if self._connection is None:
            with self:
                self.send(message)
            return
        self._connection.send_message(message)


def deliver_schedules(
    schedules: Iterable[EmployeeSchedule],
    directory: Dict[str, str],
    mailer: SmtpMailer,
    sender: str,
    report: AdminReport,
) -> int:
    """
    Email each employee their schedule.

    Missing addresses and transport failures are recorded in the report and
    never stop the remaining employees.

    Returns:
        Number of messages sent
    """
    sent = 0
    for schedule in schedules:
        try:
            schedule.email_address = resolve_email(schedule, directory)
        except MissingEmailError as e:
            report.record(e)
            continue

        try:
            mailer.send(build_schedule_message(schedule, sender))
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Delivery to {schedule.email_address} failed: {e}")
            report.record(DeliveryError(schedule.name, schedule.email_address, str(e)))
            continue

        logger.info(f"Sent schedule to {schedule.name} <{schedule.email_address}>")
        sent += 1
    return sent


def send_admin_report(report: AdminReport, week: Optional[str], mailer: SmtpMailer,
                      sender: str, recipient: str) -> None:
    mailer.send(build_admin_message(report, week, sender, recipient))
    logger.info(f"Sent admin report with {len(report)} entries to {recipient}")
