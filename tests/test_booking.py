from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from app.main import app
from app.api.deps import get_booking_service
from app.core.config import settings
from app.models.appointment import Appointment
from app.models.consultation import Consultation
from app.services.booking_service import BookingService

appointment_data = {
    "name": "Jane",
    "email": "jane@x.com",
    "phone": "+15551234567",
    "date": "2025-01-10",
    "timeSlot": "10:00",
    "doctor": "Dr. Sharma"
}

consultation_data = {
    "patientName": "Ravi Patel",
    "patientEmail": "Ravi@Example.com",
    "patientPhone": "+91 98765-43210",
    "consultationType": "instant",
    "healthConcern": "Persistent headache for three days",
}


class TestBookAppointment:

    def test_book_appointment(self, client, email_sender, sms_sender):
        response = client.post("/api/book-appointment", json=appointment_data)
        assert response.status_code == 201

        data = response.json()
        assert data["success"] is True
        assert data["appointment"]["name"] == "Jane"
        assert data["appointment"]["timeSlot"] == "10:00"
        assert data["appointment"]["id"] is not None
        assert data["notifications"] == {"emailSent": True, "smsSent": True}
        assert "email and phone" in data["message"]

        assert email_sender.sent[0]["to"] == "jane@x.com"
        assert "Dr. Sharma" in email_sender.sent[0]["subject"]
        assert sms_sender.sent[0]["to"] == "+15551234567"

    def test_fields_are_normalized(self, client, db_session):
        payload = dict(appointment_data, name="  Jane  ", email=" JANE@X.COM ", phone="+1 (555) 123-4567")
        response = client.post("/api/book-appointment", json=payload)
        assert response.status_code == 201

        stored = db_session.query(Appointment).one()
        assert stored.name == "Jane"
        assert stored.email == "jane@x.com"
        assert stored.phone == "+15551234567"

    @pytest.mark.parametrize("missing", sorted(appointment_data))
    def test_missing_field_rejected(self, client, db_session, email_sender, missing):
        payload = dict(appointment_data)
        del payload[missing]

        response = client.post("/api/book-appointment", json=payload)
        assert response.status_code == 400

        data = response.json()
        assert data["success"] is False
        assert set(data["errors"]) == {missing}
        assert db_session.query(Appointment).count() == 0
        assert email_sender.sent == []

    def test_blank_fields_count_as_missing(self, client):
        payload = dict(appointment_data, name="   ", doctor="")
        response = client.post("/api/book-appointment", json=payload)

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"name", "doctor"}

    def test_all_errors_reported_together(self, client):
        response = client.post("/api/book-appointment", json={})
        assert response.status_code == 400
        assert set(response.json()["errors"]) == set(appointment_data)

    def test_invalid_contact_details(self, client, db_session):
        payload = dict(appointment_data, email="jane-at-x", phone="call me")
        response = client.post("/api/book-appointment", json=payload)

        assert response.status_code == 400
        errors = response.json()["errors"]
        assert errors["email"] == "Invalid email format"
        assert errors["phone"] == "Invalid phone number format"
        assert db_session.query(Appointment).count() == 0

    def test_request_without_body(self, client, db_session):
        response = client.post("/api/book-appointment")

        assert response.status_code == 400
        data = response.json()
        assert data["success"] is False
        assert set(data["errors"]) == set(appointment_data)
        assert db_session.query(Appointment).count() == 0

    def test_numeric_phone_accepted(self, client, db_session):
        payload = dict(appointment_data, phone=15551234567)
        response = client.post("/api/book-appointment", json=payload)

        assert response.status_code == 201
        assert db_session.query(Appointment).one().phone == "15551234567"

    def test_wrongly_typed_field(self, client, db_session):
        payload = dict(appointment_data, name={"first": "Jane"})
        response = client.post("/api/book-appointment", json=payload)

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"name"}
        assert db_session.query(Appointment).count() == 0

    def test_body_must_be_an_object(self, client):
        response = client.post("/api/book-appointment", json=[appointment_data])

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"body"}

    def test_timestamp_date_stored_as_day(self, client, db_session):
        payload = dict(appointment_data, date="2025-01-10T09:30:00.000Z")
        response = client.post("/api/book-appointment", json=payload)

        assert response.status_code == 201
        assert db_session.query(Appointment).one().date == "2025-01-10"

    def test_unparseable_date_rejected(self, client, db_session):
        payload = dict(appointment_data, date="next tuesday")
        response = client.post("/api/book-appointment", json=payload)

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"date"}
        assert db_session.query(Appointment).count() == 0

    @pytest.mark.parametrize("email_ok,sms_ok,fragment", [
        (True, False, "Confirmation sent to your email."),
        (False, True, "Confirmation sent to your phone."),
        (False, False, "Your booking is confirmed."),
    ])
    def test_message_reflects_delivered_channels(
        self, client, email_sender, sms_sender, email_ok, sms_ok, fragment
    ):
        email_sender.succeed = email_ok
        sms_sender.succeed = sms_ok

        response = client.post("/api/book-appointment", json=appointment_data)
        assert response.status_code == 201

        data = response.json()
        assert data["notifications"] == {"emailSent": email_ok, "smsSent": sms_ok}
        assert data["message"].endswith(fragment)

    def test_transport_crash_does_not_block_booking(self, client, db_session, email_sender, sms_sender):
        email_sender.error = ConnectionError("smtp down")
        sms_sender.error = RuntimeError("sms provider exploded")

        response = client.post("/api/book-appointment", json=appointment_data)
        assert response.status_code == 201
        assert response.json()["notifications"] == {"emailSent": False, "smsSent": False}
        assert db_session.query(Appointment).count() == 1

    def test_persistence_failure(self, client, notifier, email_sender, sms_sender):
        broken_db = MagicMock()
        broken_db.commit.side_effect = OperationalError("INSERT", {}, Exception("disk I/O error"))
        app.dependency_overrides[get_booking_service] = lambda: BookingService(broken_db, notifier, settings)
        try:
            response = client.post("/api/book-appointment", json=appointment_data)
        finally:
            app.dependency_overrides.pop(get_booking_service, None)

        assert response.status_code == 500
        assert response.json()["success"] is False
        broken_db.rollback.assert_called_once()
        assert email_sender.sent == []
        assert sms_sender.sent == []

    def test_list_my_appointments(self, client):
        client.post("/register", json={
            "username": "jane",
            "email": "jane@x.com",
            "password": "TestPassword123",
            "confirmPassword": "TestPassword123",
        })
        client.post("/login", json={"username": "jane", "password": "TestPassword123"})
        client.post("/api/book-appointment", json=appointment_data)
        client.post("/api/book-appointment", json=dict(appointment_data, email="someone@else.com"))

        response = client.get("/api/appointments")
        assert response.status_code == 200
        appointments = response.json()["appointments"]
        assert len(appointments) == 1
        assert appointments[0]["email"] == "jane@x.com"

    def test_list_appointments_requires_login(self, client):
        assert client.get("/api/appointments").status_code == 401


class TestBookConsultation:

    @pytest.mark.parametrize("consultation_type", ["instant", "scheduled", "emergency"])
    def test_amount_is_configured_price(self, client, db_session, consultation_type):
        payload = dict(consultation_data, consultationType=consultation_type, preferredDate="2025-02-01")
        response = client.post("/api/book-consultation", json=payload)
        assert response.status_code == 201

        data = response.json()
        expected = settings.CONSULTATION_PRICES[consultation_type]
        assert data["type"] == consultation_type
        assert data["amount"] == expected
        assert data["status"] == "pending"
        assert data["consultationId"].startswith("CONS-")

        stored = db_session.query(Consultation).filter(
            Consultation.consultation_id == data["consultationId"]
        ).one()
        assert stored.amount == expected
        assert stored.amount <= settings.MAX_CONSULTATION_AMOUNT
        assert stored.patient_email == "ravi@example.com"
        assert stored.patient_phone == "+919876543210"

    def test_consultation_ids_are_unique(self, client):
        first = client.post("/api/book-consultation", json=consultation_data).json()
        second = client.post("/api/book-consultation", json=consultation_data).json()
        assert first["consultationId"] != second["consultationId"]

    @pytest.mark.parametrize("consultation_type", ["premium", "INSTANT ", "free", "follow-up"])
    def test_unknown_type_rejected_before_persistence(self, client, db_session, email_sender, consultation_type):
        payload = dict(consultation_data, consultationType=consultation_type)
        response = client.post("/api/book-consultation", json=payload)

        assert response.status_code == 400
        assert "consultationType" in response.json()["errors"]
        assert db_session.query(Consultation).count() == 0
        assert email_sender.sent == []

    def test_submitted_amount_must_match_price(self, client, db_session):
        payload = dict(consultation_data, amount=1)
        response = client.post("/api/book-consultation", json=payload)

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"amount"}
        assert db_session.query(Consultation).count() == 0

    def test_matching_amount_accepted(self, client):
        payload = dict(consultation_data, amount=settings.CONSULTATION_PRICES["instant"])
        assert client.post("/api/book-consultation", json=payload).status_code == 201

    def test_price_above_ceiling_rejected(self, client, db_session, monkeypatch):
        monkeypatch.setitem(settings.CONSULTATION_PRICES, "emergency", 1500)
        payload = dict(consultation_data, consultationType="emergency")

        response = client.post("/api/book-consultation", json=payload)
        assert response.status_code == 400
        assert "exceeds" in response.json()["errors"]["amount"]
        assert db_session.query(Consultation).count() == 0

    def test_missing_fields(self, client):
        response = client.post("/api/book-consultation", json={"consultationType": "instant"})
        assert response.status_code == 400
        assert set(response.json()["errors"]) == {
            "patientName", "patientEmail", "patientPhone", "healthConcern"
        }

    def test_request_without_body(self, client, db_session):
        response = client.post("/api/book-consultation")

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {
            "patientName", "patientEmail", "patientPhone", "consultationType", "healthConcern"
        }
        assert db_session.query(Consultation).count() == 0

    def test_numeric_phone_accepted(self, client):
        payload = dict(consultation_data, patientPhone=919876543210)
        response = client.post("/api/book-consultation", json=payload)
        assert response.status_code == 201

    def test_iso_timestamp_preferred_date(self, client, db_session):
        payload = dict(consultation_data, preferredDate="2025-02-01T10:00:00.000Z")
        response = client.post("/api/book-consultation", json=payload)

        assert response.status_code == 201
        assert response.json()["preferredDate"] == "2025-02-01"
        assert db_session.query(Consultation).one().preferred_date == "2025-02-01"

    def test_invalid_preferred_date(self, client, db_session):
        payload = dict(consultation_data, preferredDate="x" * 40)
        response = client.post("/api/book-consultation", json=payload)

        assert response.status_code == 400
        assert set(response.json()["errors"]) == {"preferredDate"}
        assert db_session.query(Consultation).count() == 0

    def test_notification_failure_keeps_consultation(self, client, db_session, email_sender, sms_sender):
        email_sender.succeed = False
        sms_sender.error = TimeoutError("sms timeout")

        response = client.post("/api/book-consultation", json=consultation_data)
        assert response.status_code == 201
        assert response.json()["notifications"] == {"emailSent": False, "smsSent": False}
        assert db_session.query(Consultation).count() == 1

    def test_consultation_config(self, client):
        response = client.get("/api/consultation-config")
        assert response.status_code == 200

        data = response.json()
        assert data["maxAmount"] == 1000
        assert set(data["prices"]) == {"instant", "scheduled", "emergency"}
        assert all(price <= data["maxAmount"] for price in data["prices"].values())
