import streamlit as st
import pandas as pd
from main import calendar_filename
from models import ScheduleError
from schedule_builder import build_schedules, load_schedule_table
import config

# ---------- PAGE CONFIG ----------
st.set_page_config(page_title="Weekly Schedule to Calendar", layout="wide")

# ---------- TITLE ----------
st.markdown("<h1 style='text-align: center;'>📅 Weekly Schedule → iCalendar (.ics)</h1>", unsafe_allow_html=True)

# ---------- INSTRUCTIONS ----------
st.markdown("""
### 🗓️ How to Use
1️⃣ Export the weekly schedule as CSV: `Name`, `EmployeeID`, then one column per day like `Monday (05/16/22)`.
2️⃣ Each day cell is `OFF` or a shift like `09:00-17:00` (overnight shifts such as `22:00-06:00` are fine).
3️⃣ Upload the file below.
4️⃣ Review the week and download each employee's `.ics` calendar file.
""")

st.divider()

# ---------- USER SETTINGS ----------
timezone = st.sidebar.text_input("Time zone of the schedule:", value=config.SCHEDULE_TIMEZONE).strip()

# ---------- STREAMLIT APP ----------
uploaded_file = st.file_uploader("📂 Upload a schedule (.csv)", type=["csv"])

if uploaded_file:
    try:
        run = build_schedules(load_schedule_table(uploaded_file), tz=timezone or None)
    except ScheduleError as e:
        st.error(f"❌ Schedule rejected: {str(e)}")
        run = None
    except (ValueError, KeyError) as e:
        st.error(f"❌ Could not read schedule: {str(e)}")
        run = None

    if run:
        st.success(f"✅ Week of {run.week_label}: {len(run.schedules)} employees")

        rows = []
        for schedule in run.schedules:
            row = {"Name": schedule.name, "EmployeeID": schedule.employee_id}
            for weekday, _, _, span in schedule.summary_rows():
                row[weekday] = span
            row["Hours"] = schedule.total_hours
            rows.append(row)
        st.dataframe(pd.DataFrame(rows))

        if run.report:
            st.warning(f"⚠️ {len(run.report)} problems found")
            for entry in run.report:
                st.markdown(f"- {entry}")

        st.markdown("### 📥 Calendar Files")
        for index, schedule in enumerate(run.schedules):
            st.download_button(
                label=f"{schedule.name} ({len(schedule.worked_days)} shifts)",
                data=schedule.calendar.serialize().encode("utf-8"),
                file_name=calendar_filename(schedule),
                mime="text/calendar",
                key=f"download-{index}",
            )
else:
    st.info("⬆️ Upload a schedule `.csv` file to continue.")
