import io
import zipfile
import pytest
from flask_app import app

HEADER = (
    "Name,EmployeeID,Monday (05/16/22),Tuesday (05/17/22),Wednesday (05/18/22),"
    "Thursday (05/19/22),Friday (05/20/22),Saturday (05/21/22),Sunday (05/22/22)\n"
)
SCHEDULE_CSV = HEADER + (
    "Ana Diaz,E100,09:00-17:00,OFF,22:00-06:00,OFF,OFF,OFF,OFF\n"
    "Ben Ode,E200,OFF,N/A,OFF,OFF,OFF,10:00 - 14:30,OFF\n"
)


@pytest.fixture
def client():
    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


def upload(csv_text, **fields):
    data = {"schedule_file": (io.BytesIO(csv_text.encode("utf-8")), "schedule.csv")}
    data.update(fields)
    return data


def test_index(client):
    response = client.get("/")
    assert response.status_code == 200
    assert b"schedule_file" in response.data


def test_preview(client):
    response = client.post("/preview", data=upload(SCHEDULE_CSV), content_type="multipart/form-data")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["success"] is True
    assert payload["week"] == "05/16/22 - 05/22/22"
    assert payload["employee_count"] == 2

    ana = payload["employees"][0]
    assert ana["total_hours"] == 16.0
    assert ana["days"][0] == {"weekday": "Monday", "date": "2022-05-16", "worked": True, "span": "09:00-17:00"}
    assert len(payload["errors"]) == 1
    assert "Ben Ode (E200)" in payload["errors"][0]


def test_preview_requires_file(client):
    response = client.post("/preview", data={}, content_type="multipart/form-data")
    assert response.status_code == 400


def test_preview_rejects_short_week(client):
    bad_csv = "Name,EmployeeID,Monday (05/16/22),Tuesday (05/17/22)\nAna,E1,OFF,OFF\n"
    response = client.post("/preview", data=upload(bad_csv), content_type="multipart/form-data")

    assert response.status_code == 400
    assert "Schedule rejected" in response.get_json()["error"]


def test_convert_single_employee(client):
    response = client.post(
        "/convert", data=upload(SCHEDULE_CSV, employee_id="E100"), content_type="multipart/form-data"
    )

    assert response.status_code == 200
    assert response.mimetype == "text/calendar"
    body = response.data.decode("utf-8")
    assert body.count("BEGIN:VEVENT") == 2
    assert "E100_ana_diaz.ics" in response.headers["Content-Disposition"]


def test_convert_unknown_employee(client):
    response = client.post(
        "/convert", data=upload(SCHEDULE_CSV, employee_id="E999"), content_type="multipart/form-data"
    )
    assert response.status_code == 404


def test_convert_everyone_as_zip(client):
    response = client.post("/convert", data=upload(SCHEDULE_CSV), content_type="multipart/form-data")

    assert response.status_code == 200
    assert response.mimetype == "application/zip"
    with zipfile.ZipFile(io.BytesIO(response.data)) as archive:
        assert sorted(archive.namelist()) == ["E100_ana_diaz.ics", "E200_ben_ode.ics"]
        assert archive.read("E200_ben_ode.ics").decode("utf-8").count("BEGIN:VEVENT") == 1


def test_bad_timezone(client):
    response = client.post(
        "/preview", data=upload(SCHEDULE_CSV, timezone="Not/AZone"), content_type="multipart/form-data"
    )
    assert response.status_code == 400
