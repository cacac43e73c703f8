from flask import Flask, render_template, request, send_file, jsonify
import io
import zipfile
from helpers import week_label
from main import calendar_filename
from models import ScheduleError
from schedule_builder import build_schedules, load_schedule_table
import config

app = Flask(__name__)


def _run_from_upload():
    """Parse the uploaded schedule CSV. Returns (run, None) or (None, error response)."""
    upload = request.files.get('schedule_file')
    if upload is None or not upload.filename:
        return None, (jsonify({'error': 'Please upload a schedule CSV'}), 400)

    tz = request.form.get('timezone', '').strip() or config.SCHEDULE_TIMEZONE
    try:
        table = load_schedule_table(io.BytesIO(upload.read()))
        return build_schedules(table, tz=tz), None
    except ScheduleError as e:
        return None, (jsonify({'error': f'Schedule rejected: {str(e)}'}), 400)
    except (ValueError, KeyError) as e:
        # unreadable CSV or unknown time zone
        return None, (jsonify({'error': f'Could not read schedule: {str(e)}'}), 400)


@app.route('/')
def index():
    return render_template('index.html', timezone=config.SCHEDULE_TIMEZONE)


@app.route('/preview', methods=['POST'])
def preview_schedule():
    run, error = _run_from_upload()
    if error:
        return error

    employees = []
    for schedule in run.schedules:
        employees.append({
            'name': schedule.name,
            'employee_id': schedule.employee_id,
            'total_hours': schedule.total_hours,
            'days': [
                {
                    'weekday': weekday,
                    'date': day.isoformat(),
                    'worked': worked,
                    'span': span,
                }
                for weekday, day, worked, span in schedule.summary_rows()
            ],
        })

    return jsonify({
        'success': True,
        'week': week_label(run.weekdays),
        'employee_count': len(employees),
        'employees': employees,
        'errors': list(run.report),
    })


@app.route('/convert', methods=['POST'])
def convert_schedule():
    run, error = _run_from_upload()
    if error:
        return error

    employee_id = request.form.get('employee_id', '').strip()
    if employee_id:
        schedule = run.find(employee_id)
        if schedule is None:
            return jsonify({'error': f'No employee with ID {employee_id}'}), 404
        ics_file = io.BytesIO(schedule.calendar.serialize().encode('utf-8'))
        return send_file(
            ics_file,
            as_attachment=True,
            download_name=calendar_filename(schedule),
            mimetype='text/calendar'
        )

    bundle = io.BytesIO()
    with zipfile.ZipFile(bundle, 'w', zipfile.ZIP_DEFLATED) as archive:
        for schedule in run.schedules:
            archive.writestr(calendar_filename(schedule), schedule.calendar.serialize())
    bundle.seek(0)

    return send_file(
        bundle,
        as_attachment=True,
        download_name=f"schedules_{run.weekdays[0].date.strftime('%Y-%m-%d')}.zip",
        mimetype='application/zip'
    )


if __name__ == '__main__':
    app.run(debug=False, host='0.0.0.0', port=config.PORT)
