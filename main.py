#!/usr/bin/env python3
"""
Weekly Schedule to Calendar
---------------------------
Reads a weekly schedule table (one row per employee, one column per weekday,
e.g. `Monday (05/16/22)`), turns every worked shift into a calendar event, and
writes one `.ics` file per employee. With `--send`, each employee is emailed
their week plus the calendar file, and the admin gets one report listing every
unreadable cell, missing address and failed delivery.

Cells:
- `OFF` for a day off
- `HH:MM-HH:MM` for a shift (an end hour before the start hour means the
  shift ends the next day)

Usage:
    python main.py schedule.csv --emails emails.csv --out-dir output --send
"""
import argparse
import logging
import re
import smtplib
import sys
from pathlib import Path
from typing import List, Optional

import config
from mailer import SmtpMailer, deliver_schedules, format_admin_report, load_email_directory, send_admin_report
from models import EmployeeSchedule, ScheduleError
from schedule_builder import build_schedules, load_schedule_table


def calendar_filename(schedule: EmployeeSchedule) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", schedule.name).strip("_").lower() or "employee"
    return f"{schedule.employee_id or 'unknown'}_{slug}.ics"


def write_calendars(schedules: List[EmployeeSchedule], out_dir: Path) -> List[Path]:
    out_dir.mkdir(parents=True, exist_ok=True)
    paths = []
    for schedule in schedules:
        path = out_dir / calendar_filename(schedule)
        # newline="" keeps the CRLF line endings iCalendar requires
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(schedule.calendar.serialize())
        paths.append(path)
    return paths


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert a weekly schedule table into per-employee calendar files and emails.",
    )
    parser.add_argument("schedule", type=Path, help="Schedule CSV (Name, EmployeeID, 7 day columns)")
    parser.add_argument(
        "--emails",
        type=Path,
        default=Path(config.EMAIL_DIRECTORY) if config.EMAIL_DIRECTORY else None,
        help="EmployeeID,Email CSV used when sending",
    )
    parser.add_argument("--out-dir", type=Path, default=config.OUTPUT_DIR, help="Where .ics files are written")
    parser.add_argument("--tz", default=config.SCHEDULE_TIMEZONE, help="Time zone the schedule times are in")
    parser.add_argument("--send", action="store_true", help="Email schedules and the admin report")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.send and not (config.SMTP_HOST and config.FROM_EMAIL):
        print("❌ --send needs SMTP_HOST and FROM_EMAIL to be configured", file=sys.stderr)
        return 1
    if args.send and not args.emails:
        print("❌ --send needs an email directory (--emails or EMAIL_DIRECTORY)", file=sys.stderr)
        return 1

    try:
        table = load_schedule_table(args.schedule)
        run = build_schedules(table, tz=args.tz)
    except FileNotFoundError:
        print(f"❌ {args.schedule} not found.", file=sys.stderr)
        return 1
    except ScheduleError as e:
        print(f"❌ Schedule rejected: {e}", file=sys.stderr)
        return 1
    except (ValueError, KeyError) as e:
        # unreadable CSV or unknown time zone
        print(f"❌ Could not read schedule: {e}", file=sys.stderr)
        return 1

    paths = write_calendars(run.schedules, args.out_dir)
    print(f"✅ Week of {run.week_label}: wrote {len(paths)} calendar files to {args.out_dir}")

    if not args.send:
        print(format_admin_report(run.report, run.week_label))
        return 0

    try:
        directory = load_email_directory(args.emails)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Could not read email directory: {e}", file=sys.stderr)
        return 1

    mailer = SmtpMailer(
        config.SMTP_HOST,
        config.SMTP_PORT,
        config.SMTP_USERNAME,
        config.SMTP_PASSWORD,
        use_tls=config.SMTP_USE_TLS,
    )
    try:
        with mailer:
            sent = deliver_schedules(run.schedules, directory, mailer, config.FROM_EMAIL, run.report)
            print(f"📧 Sent {sent} of {len(run.schedules)} schedules")
            if config.ADMIN_EMAIL:
                send_admin_report(run.report, run.week_label, mailer, config.FROM_EMAIL, config.ADMIN_EMAIL)
            else:
                print(format_admin_report(run.report, run.week_label))
    except (smtplib.SMTPException, OSError) as e:
        print(f"❌ Mail server error: {e}", file=sys.stderr)
        print(format_admin_report(run.report, run.week_label))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
