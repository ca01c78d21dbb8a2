from datetime import datetime

from booking_api.models import Reminder, ReminderStatus
from booking_api.repositories.reminders import ReminderRepository
from booking_api.services.booking import BookingService

BOOKING = {"name": "A", "phone": "555", "service": "cut", "time": "14:00", "date": "2024-01-10"}


def _reminder(session_factory, phone):
    with session_factory() as s:
        return BookingService(s).reminder_for(phone)


def test_root_is_plain_text(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.text == "API is working!"
    assert r.headers["content-type"].startswith("text/plain")


def test_booking_lifecycle_end_to_end(client, session_factory):
    r = client.post("/submit-booking", json=BOOKING)
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Appointment saved successfully!"
    assert {k: body["appointment"][k] for k in BOOKING} == BOOKING
    assert body["appointment"]["notes"] is None

    r = client.get("/appointment/555")
    assert r.status_code == 200
    assert {k: r.json()[k] for k in BOOKING} == BOOKING

    reminder = _reminder(session_factory, "555")
    assert reminder.alert_time == datetime(2024, 1, 10, 13, 0)

    r = client.post("/modify-appointment", json={**BOOKING, "time": "15:00"})
    assert r.status_code == 200
    assert r.json()["message"] == "Appointment updated successfully!"
    assert r.json()["appointment"]["time"] == "15:00"

    reminder = _reminder(session_factory, "555")
    assert reminder.alert_time == datetime(2024, 1, 10, 14, 0)
    assert reminder.status == ReminderStatus.pending

    r = client.post("/cancel-appointment", json={"phone": "555"})
    assert r.status_code == 200
    assert r.json() == {"message": "Appointment canceled successfully!"}

    assert client.get("/check-phone/555").json() == {"exists": False}
    with session_factory() as s:
        assert s.query(Reminder).count() == 0


def test_check_phone_when_booked(client):
    client.post("/submit-booking", json={**BOOKING, "notes": "window seat"})
    body = client.get("/check-phone/555").json()
    assert body["exists"] is True
    assert body["appointment"]["notes"] == "window seat"


def test_submit_missing_field_is_400(client):
    payload = dict(BOOKING)
    del payload["service"]
    r = client.post("/submit-booking", json=payload)
    assert r.status_code == 400
    assert r.json() == {"error": "All fields are required!"}


def test_submit_malformed_date_is_400(client):
    r = client.post("/submit-booking", json={**BOOKING, "date": "next monday"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid date or time format"}
    assert client.get("/check-phone/555").json() == {"exists": False}


def test_unparseable_body_is_400(client):
    r = client.post("/submit-booking", content="not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert "error" in r.json()


def test_modify_unknown_is_404(client):
    r = client.post("/modify-appointment", json={**BOOKING, "phone": "999"})
    assert r.status_code == 404
    assert r.json() == {"error": "Appointment not found!"}
    assert client.get("/check-phone/999").json() == {"exists": False}


def test_cancel_unknown_is_404(client):
    r = client.post("/cancel-appointment", json={"phone": "999"})
    assert r.status_code == 404
    assert r.json() == {"error": "Appointment not found!"}


def test_appointment_lookup_404(client):
    r = client.get("/appointment/404404")
    assert r.status_code == 404
    assert r.json() == {"error": "Appointment not found!"}


def test_confirmation(client):
    assert client.get("/confirmation").json() == {"error": "Phone number is required!"}
    assert client.get("/confirmation").status_code == 400
    assert client.get("/confirmation", params={"phone": "555"}).status_code == 404

    client.post("/submit-booking", json=BOOKING)
    r = client.get("/confirmation", params={"phone": "555"})
    assert r.status_code == 200
    assert r.json()["name"] == "A"


def test_generate_and_validate_token(client):
    r = client.get("/generate-token", params={"phone": "555", "name": "Ana"})
    assert r.status_code == 200
    token = r.json()["token"]

    r = client.get("/validate-token", params={"token": token})
    assert r.status_code == 200
    assert r.json() == {"phone": "555", "name": "Ana"}


def test_generate_token_requires_phone_and_name(client):
    r = client.get("/generate-token", params={"phone": "555"})
    assert r.status_code == 400
    assert r.json() == {"error": "Phone and Name are required"}


def test_validate_token_errors(client, clock):
    assert client.get("/validate-token").status_code == 400

    r = client.get("/validate-token", params={"token": "unknown1"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid or expired token"}

    token = client.get("/generate-token", params={"phone": "555", "name": "Ana"}).json()["token"]
    clock.advance(16 * 60)
    assert client.get("/validate-token", params={"token": token}).status_code == 401


def test_internal_errors_are_generic_500(client, monkeypatch):
    def boom(self, appointment_id, alert_time):
        raise RuntimeError("connection reset by peer")

    monkeypatch.setattr(ReminderRepository, "create", boom)
    r = client.post("/submit-booking", json=BOOKING)

    assert r.status_code == 500
    assert r.json() == {"error": "Internal Server Error"}
    # Nada quedó a medias
    assert client.get("/check-phone/555").json() == {"exists": False}


def test_unknown_route_uses_error_shape(client):
    r = client.get("/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"error": "Not Found"}


def test_form_encoded_booking_flow(client):
    r = client.post("/submit-booking", data=BOOKING)
    assert r.status_code == 200
    assert r.json()["appointment"]["phone"] == "555"

    r = client.post("/modify-appointment", data={"phone": "555", "time": "16:00"})
    assert r.status_code == 200
    assert r.json()["appointment"]["time"] == "16:00"
    assert r.json()["appointment"]["name"] == "A"

    r = client.post("/cancel-appointment", data={"phone": "555"})
    assert r.status_code == 200
    assert client.get("/check-phone/555").json() == {"exists": False}


def test_form_missing_field_keeps_required_message(client):
    r = client.post("/submit-booking", data={"name": "A", "phone": "555"})
    assert r.status_code == 400
    assert r.json() == {"error": "All fields are required!"}


def test_numeric_phone_is_accepted(client):
    r = client.post("/submit-booking", json={**BOOKING, "phone": 5551234})
    assert r.status_code == 200
    assert r.json()["appointment"]["phone"] == "5551234"

    r = client.post("/cancel-appointment", json={"phone": 5551234})
    assert r.status_code == 200


def test_empty_body_reports_missing_fields(client):
    r = client.post("/submit-booking")
    assert r.status_code == 400
    assert r.json() == {"error": "All fields are required!"}


def test_json_array_body_is_400(client):
    r = client.post("/submit-booking", json=[BOOKING])
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid request body"}


def test_modify_null_notes_clears_them(client):
    client.post("/submit-booking", json={**BOOKING, "notes": "x"})

    r = client.post("/modify-appointment", json={"phone": "555", "notes": None})
    assert r.status_code == 200
    assert r.json()["appointment"]["notes"] is None
    assert r.json()["appointment"]["time"] == "14:00"


def test_modify_without_notes_keeps_them(client):
    client.post("/submit-booking", json={**BOOKING, "notes": "x"})

    r = client.post("/modify-appointment", json={"phone": "555", "time": "15:00"})
    assert r.json()["appointment"]["notes"] == "x"


def test_modify_null_required_field_is_400(client):
    client.post("/submit-booking", json=BOOKING)
    r = client.post("/modify-appointment", json={"phone": "555", "name": None})
    assert r.status_code == 400
    assert client.get("/appointment/555").json()["name"] == "A"


def test_iso_week_date_is_rejected(client):
    r = client.post("/submit-booking", json={**BOOKING, "date": "2024-W02-3"})
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid date or time format"}
    assert client.get("/check-phone/555").json() == {"exists": False}


def test_cancel_without_phone_is_400(client):
    r = client.post("/cancel-appointment", json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Phone number is required!"}


def test_cors_headers(client):
    r = client.get("/check-phone/555", headers={"Origin": "http://example.com"})
    assert r.headers["access-control-allow-origin"] == "*"

    r = client.options(
        "/submit-booking",
        headers={"Origin": "http://example.com", "Access-Control-Request-Method": "POST"},
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "*"
    assert "POST" in r.headers["access-control-allow-methods"]
