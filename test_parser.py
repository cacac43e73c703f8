import pytest
from datetime import date, datetime
from zoneinfo import ZoneInfo
from helpers import normalize_row, parse_shift, resolve_weekdays, week_label
from models import DayOff, HeaderShapeError, Invalid, WeekdayRef, Worked

CHICAGO = ZoneInfo("America/Chicago")

WEEK_COLUMNS = [
    "Monday (05/16/22)",
    "Tuesday (05/17/22)",
    "Wednesday (05/18/22)",
    "Thursday (05/19/22)",
    "Friday (05/20/22)",
    "Saturday (05/21/22)",
    "Sunday (05/22/22)",
]

MONDAY = WeekdayRef("Monday", date(2022, 5, 16))


# ---------- HEADER ----------

def test_resolve_weekdays_in_column_order():
    resolved = resolve_weekdays(["Name", "EmployeeID"] + WEEK_COLUMNS)

    assert len(resolved) == 7
    assert [column for column, _ in resolved] == WEEK_COLUMNS
    assert resolved[0][1] == MONDAY
    assert resolved[6][1] == WeekdayRef("Sunday", date(2022, 5, 22))


def test_resolve_weekdays_keeps_table_start_day():
    rotated = WEEK_COLUMNS[3:] + WEEK_COLUMNS[:3]
    resolved = resolve_weekdays(["Name", "EmployeeID"] + rotated)

    assert [ref.name for _, ref in resolved] == [
        "Thursday", "Friday", "Saturday", "Sunday", "Monday", "Tuesday", "Wednesday"
    ]


def test_resolve_weekdays_accepts_unbracketed_and_uppercase():
    columns = ["MONDAY 05/16/22"] + WEEK_COLUMNS[1:]
    resolved = resolve_weekdays(columns)

    assert resolved[0] == ("MONDAY 05/16/22", MONDAY)


def test_resolve_weekdays_six_columns():
    with pytest.raises(HeaderShapeError):
        resolve_weekdays(["Name", "EmployeeID"] + WEEK_COLUMNS[:6])


def test_resolve_weekdays_eight_columns():
    with pytest.raises(HeaderShapeError):
        resolve_weekdays(WEEK_COLUMNS + ["Monday (05/23/22)"])


def test_resolve_weekdays_repeated_weekday():
    columns = WEEK_COLUMNS[:6] + ["Monday (05/23/22)"]
    with pytest.raises(HeaderShapeError):
        resolve_weekdays(columns)


def test_resolve_weekdays_bad_date():
    columns = ["Monday (13/45/22)"] + WEEK_COLUMNS[1:]
    with pytest.raises(HeaderShapeError):
        resolve_weekdays(columns)


def test_week_label():
    weekdays = [ref for _, ref in resolve_weekdays(WEEK_COLUMNS)]
    assert week_label(weekdays) == "05/16/22 - 05/22/22"
    assert week_label([]) is None


# ---------- ROWS ----------

def test_normalize_row_maps_columns_by_position():
    day_columns = resolve_weekdays(WEEK_COLUMNS)
    raw = {"Name": " Ana Diaz ", "EmployeeID": "E100"}
    raw.update({column: f"cell {i}" for i, column in enumerate(WEEK_COLUMNS)})

    row = normalize_row(raw, day_columns)

    assert row.name == "Ana Diaz"
    assert row.employee_id == "E100"
    assert row.monday == "cell 0"
    assert row.wednesday == "cell 2"
    assert row.sunday == "cell 6"
    assert row.cell(MONDAY) == "cell 0"


def test_normalize_row_missing_cells_are_empty():
    day_columns = resolve_weekdays(WEEK_COLUMNS)
    row = normalize_row({"Name": "Ana", "EmployeeID": "E1", WEEK_COLUMNS[0]: float("nan")}, day_columns)

    assert row.monday == ""
    assert row.friday == ""


# ---------- SHIFTS ----------

def test_parse_shift_off():
    assert parse_shift("OFF", MONDAY, CHICAGO) == DayOff()


def test_parse_shift_off_is_case_sensitive():
    assert parse_shift("off", MONDAY, CHICAGO) == Invalid("off")


def test_parse_shift_same_day():
    shift = parse_shift("09:00-17:00", MONDAY, CHICAGO)

    assert isinstance(shift, Worked)
    assert shift.start == datetime(2022, 5, 16, 9, 0, tzinfo=CHICAGO)
    assert shift.end == datetime(2022, 5, 16, 17, 0, tzinfo=CHICAGO)
    assert shift.end.date() == MONDAY.date
    assert shift.raw_span == "09:00-17:00"
    assert shift.hours == 8.0


def test_parse_shift_spaces_around_hyphen():
    spaced = parse_shift("10:30 - 16:00", MONDAY, CHICAGO)
    tight = parse_shift("10:30-16:00", MONDAY, CHICAGO)

    assert (spaced.start, spaced.end) == (tight.start, tight.end)
    assert spaced.hours == 5.5


def test_parse_shift_overnight_rolls_over():
    shift = parse_shift("22:00-06:00", MONDAY, CHICAGO)

    assert shift.start == datetime(2022, 5, 16, 22, 0, tzinfo=CHICAGO)
    assert shift.end == datetime(2022, 5, 17, 6, 0, tzinfo=CHICAGO)
    assert shift.end > shift.start
    assert shift.hours == 8.0


def test_parse_shift_end_hour_before_start_hour_always_rolls_over():
    # likely a typo, but the hour rule treats it as overnight
    shift = parse_shift("09:00-08:30", MONDAY, CHICAGO)

    assert shift.end.date() == date(2022, 5, 17)
    assert shift.hours == 23.5


def test_parse_shift_minutes_only_rollover():
    shift = parse_shift("23:30-00:15", MONDAY, CHICAGO)

    assert shift.end == datetime(2022, 5, 17, 0, 15, tzinfo=CHICAGO)
    assert shift.hours == 0.75


def test_parse_shift_hours_across_dst_fall_back():
    # clocks go back at 02:00 on 11/06/22, so the night is an hour longer
    saturday = WeekdayRef("Saturday", date(2022, 11, 5))
    shift = parse_shift("22:00-06:00", saturday, CHICAGO)

    assert shift.end == datetime(2022, 11, 6, 6, 0, tzinfo=CHICAGO)
    assert shift.hours == 9.0


def test_parse_shift_hours_across_dst_spring_forward():
    saturday = WeekdayRef("Saturday", date(2022, 3, 12))
    shift = parse_shift("22:00-06:00", saturday, CHICAGO)

    assert shift.hours == 7.0


@pytest.mark.parametrize("text", ["N/A", "", "9:00-17:00", "09:00", "25:00-26:00", "09:75-10:00", "09:30-09:10"])
def test_parse_shift_invalid(text):
    assert parse_shift(text, MONDAY, CHICAGO) == Invalid(text)
