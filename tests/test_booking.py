from datetime import date, datetime, timedelta

from sqlalchemy.exc import OperationalError

from theralink.domain.booking.availability import DEFAULT_SLOTS
from theralink.domain.booking.repository import BookingRepository
from theralink.models import Appointment, BookingRequest

AVAILABILITY = [
    {"date": "2025-06-02", "slots": ["10:00", "14:00"]},
    {"date": "2025-06-03", "slots": ["09:00"]},
]


def _appointment_count(db):
    db.expire_all()
    return db.query(Appointment).count()


class TestBookingView:
    def test_structured_availability(self, client, make_therapist):
        therapist = make_therapist(availability=AVAILABILITY, hourly_rate=100, specialization="Anxiety")

        response = client.get(f"/booking/therapists/{therapist.id}")

        assert response.status_code == 200
        body = response.json()
        assert body["full_name"] == "Dr. Amani Otieno"
        assert body["available_dates"] == ["2025-06-02", "2025-06-03"]
        assert body["selected_date"] == "2025-06-02"
        assert body["slots"] == ["10:00", "14:00"]
        assert body["specialization"] == "Anxiety"
        assert body["prices"] == {"video": 100, "chat": 70}

    def test_json_string_availability(self, client, make_therapist):
        therapist = make_therapist(availability='[{"date": "2025-06-05", "slots": ["16:00"]}]')

        body = client.get(f"/booking/therapists/{therapist.id}").json()

        assert body["available_dates"] == ["2025-06-05"]
        assert body["slots"] == ["16:00"]

    def test_malformed_availability_falls_back_to_defaults(self, client, make_therapist):
        therapist = make_therapist(availability="every weekday morning")

        body = client.get(f"/booking/therapists/{therapist.id}").json()

        today = date.today()
        expected = [(today + timedelta(days=i)).isoformat() for i in range(1, 8)]
        assert body["available_dates"] == expected
        assert body["selected_date"] == expected[0]
        assert body["slots"] == DEFAULT_SLOTS

    def test_defaults_for_empty_profile_fields(self, client, make_therapist):
        therapist = make_therapist()

        body = client.get(f"/booking/therapists/{therapist.id}").json()

        assert body["hourly_rate"] == 80
        assert body["specialization"] == "General Therapy"
        assert body["bio"] == "Professional therapist."
        assert body["prices"] == {"video": 80, "chat": 56}

    def test_community_therapist_sessions_are_free(self, client, make_therapist):
        therapist = make_therapist(hourly_rate=120, is_community_therapist=True)

        body = client.get(f"/booking/therapists/{therapist.id}").json()

        assert body["is_community_therapist"] is True
        assert body["prices"] == {"video": 0, "chat": 0}

    def test_unknown_therapist(self, client):
        response = client.get("/booking/therapists/does-not-exist")
        assert response.status_code == 404
        assert response.json()["detail"] == "The therapist profile could not be found"

    def test_slots_for_selected_date(self, client, make_therapist):
        therapist = make_therapist(availability=AVAILABILITY)

        response = client.get(f"/booking/therapists/{therapist.id}/slots", params={"date": "2025-06-03"})

        assert response.json() == {"date": "2025-06-03", "slots": ["09:00"]}

    def test_slots_for_unlisted_date_are_empty(self, client, make_therapist):
        therapist = make_therapist(availability=AVAILABILITY)

        response = client.get(f"/booking/therapists/{therapist.id}/slots", params={"date": "2025-6-3"})

        assert response.status_code == 200
        assert response.json()["slots"] == []


class TestBookSession:
    def _payload(self, therapist, **overrides):
        payload = {"therapist_id": therapist.id, "date": "2025-06-02", "time": "14:00"}
        payload.update(overrides)
        return payload

    def test_books_fifty_minute_session(self, client, db, make_profile, make_therapist, login):
        therapist = make_therapist(availability=AVAILABILITY)
        patient = make_profile("client")
        login(patient)

        response = client.post("/booking/appointments", json=self._payload(therapist))

        assert response.status_code == 201
        body = response.json()
        appointment = body["appointment"]
        start = datetime.fromisoformat(appointment["start_time"])
        end = datetime.fromisoformat(appointment["end_time"])
        assert start == datetime(2025, 6, 2, 14, 0)
        assert end - start == timedelta(minutes=50)
        assert appointment["client_id"] == patient.id
        assert appointment["therapist_id"] == therapist.id
        assert appointment["session_type"] == "video"
        assert appointment["status"] == "scheduled"
        assert body["message"] == "Your session has been scheduled."
        assert body["redirect_to"] == "/client/appointments"

    def test_community_therapist_session_is_confirmed(self, client, make_profile, make_therapist, login):
        therapist = make_therapist(is_community_therapist=True)
        login(make_profile("client"))

        body = client.post(
            "/booking/appointments", json=self._payload(therapist, session_type="chat")
        ).json()

        assert body["appointment"]["status"] == "confirmed"
        assert body["appointment"]["session_type"] == "chat"
        assert body["message"] == "Your session has been confirmed."

    def test_identical_submissions_create_separate_rows(self, client, db, make_profile, make_therapist, login):
        therapist = make_therapist()
        login(make_profile("client"))

        first = client.post("/booking/appointments", json=self._payload(therapist))
        second = client.post("/booking/appointments", json=self._payload(therapist))

        assert first.status_code == second.status_code == 201
        assert first.json()["appointment"]["id"] != second.json()["appointment"]["id"]
        assert _appointment_count(db) == 2

    def test_requires_login(self, client, db, make_therapist):
        therapist = make_therapist()

        response = client.post("/booking/appointments", json=self._payload(therapist))

        assert response.status_code == 401
        assert response.json()["detail"] == "Please login to book a session"
        assert _appointment_count(db) == 0

    def test_requires_date_and_time(self, client, db, make_profile, make_therapist, login):
        therapist = make_therapist()
        login(make_profile("client"))

        response = client.post("/booking/appointments", json=self._payload(therapist, time=None))

        assert response.status_code == 400
        assert response.json()["detail"] == "Please select a date and time"
        assert _appointment_count(db) == 0

    def test_requires_therapist(self, client, db, make_profile, login):
        login(make_profile("client"))

        response = client.post("/booking/appointments", json={"date": "2025-06-02", "time": "14:00"})

        assert response.status_code == 400
        assert _appointment_count(db) == 0

    def test_unparsable_time(self, client, db, make_profile, make_therapist, login):
        therapist = make_therapist()
        login(make_profile("client"))

        response = client.post("/booking/appointments", json=self._payload(therapist, time="2pm"))

        assert response.status_code == 400
        assert _appointment_count(db) == 0

    def test_unknown_session_type_rejected(self, client, make_profile, make_therapist, login):
        therapist = make_therapist()
        login(make_profile("client"))

        response = client.post("/booking/appointments", json=self._payload(therapist, session_type="phone"))

        assert response.status_code == 422

    def test_database_failure_reports_booking_error(self, client, db, make_profile, make_therapist, login, monkeypatch):
        therapist = make_therapist()
        login(make_profile("client"))

        def _fail(db, **appointment_data):
            raise OperationalError("INSERT INTO appointments", {}, Exception("db down"))

        monkeypatch.setattr(BookingRepository, "create_appointment", staticmethod(_fail))

        response = client.post("/booking/appointments", json=self._payload(therapist))

        assert response.status_code == 500
        assert response.json()["detail"] == "Could not complete your booking"
        assert _appointment_count(db) == 0


def test_my_appointments_ordered_by_start(client, db, make_profile, make_therapist, login):
    therapist = make_therapist()
    patient = make_profile("client")
    other = make_profile("client")
    for owner, day in ((patient, 5), (patient, 3), (other, 4)):
        start = datetime(2025, 6, day, 10, 0)
        db.add(
            Appointment(
                client_id=owner.id,
                therapist_id=therapist.id,
                start_time=start,
                end_time=start + timedelta(minutes=50),
            )
        )
    db.commit()
    login(patient)

    body = client.get("/appointments").json()

    assert [a["start_time"][:10] for a in body] == ["2025-06-03", "2025-06-05"]


class TestBookingRequests:
    def test_merges_client_profiles(self, client, db, make_profile, login):
        friend = make_profile("friend")
        ada = make_profile("client", full_name="Ada")
        ben = make_profile("client", full_name="Ben")
        db.add_all(
            [
                BookingRequest(
                    client_id=ada.id,
                    therapist_id=friend.id,
                    requested_time=datetime(2025, 6, 1, 9, 0),
                ),
                BookingRequest(
                    client_id=ben.id,
                    therapist_id=friend.id,
                    requested_time=datetime(2025, 6, 2, 9, 0),
                    status="confirmed",
                ),
                BookingRequest(client_id=ben.id, therapist_id=make_profile("friend").id),
            ]
        )
        db.commit()
        login(friend)

        body = client.get("/booking-requests").json()

        assert [r["client"]["full_name"] for r in body] == ["Ben", "Ada"]
        assert body[0]["status"] == "confirmed"

    def test_clients_are_forbidden(self, client, make_profile, login):
        login(make_profile("client"))
        assert client.get("/booking-requests").status_code == 403
