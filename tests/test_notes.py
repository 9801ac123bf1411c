from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from theralink.domain.notes.repository import NoteRepository
from theralink.models import BookingNote, BookingRequest


@pytest.fixture
def booking(db, make_profile):
    friend = make_profile("friend")
    patient = make_profile("client")
    request = BookingRequest(
        client_id=patient.id,
        therapist_id=friend.id,
        requested_date=datetime(2025, 6, 4),
        status="confirmed",
    )
    db.add(request)
    db.commit()
    db.refresh(request)
    return friend, patient, request


def test_create_note_takes_client_from_booking(client, booking, login):
    friend, patient, request = booking
    login(friend)

    response = client.post(
        "/notes",
        json={"booking_request_id": request.id, "title": " Intake ", "content": " Discussed sleep. "},
    )

    assert response.status_code == 201
    note = response.json()
    assert note["client_id"] == patient.id
    assert note["therapist_id"] == friend.id
    assert note["title"] == "Intake"
    assert note["content"] == "Discussed sleep."


def test_note_requires_content_and_booking(client, db, booking, login):
    friend, _, request = booking
    login(friend)

    no_content = client.post("/notes", json={"booking_request_id": request.id, "title": "x", "content": " "})
    no_booking = client.post("/notes", json={"title": "x", "content": "text"})

    assert no_content.status_code == 400
    assert no_booking.status_code == 400
    assert db.query(BookingNote).count() == 0


def test_note_for_unknown_booking(client, booking, login):
    login(booking[0])

    response = client.post("/notes", json={"booking_request_id": "missing", "content": "text"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Booking request not found"


def test_cannot_note_another_providers_booking(client, db, booking, make_profile, login):
    _, _, request = booking
    login(make_profile("friend"))

    response = client.post("/notes", json={"booking_request_id": request.id, "content": "text"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Booking request not found"
    db.expire_all()
    assert db.query(BookingNote).count() == 0


def test_save_failure_writes_nothing(client, db, booking, login, monkeypatch):
    friend, _, request = booking
    login(friend)

    def _fail(db, **note_data):
        raise OperationalError("INSERT INTO booking_notes", {}, Exception("db down"))

    monkeypatch.setattr(NoteRepository, "create_note", staticmethod(_fail))

    response = client.post("/notes", json={"booking_request_id": request.id, "content": "text"})

    assert response.status_code == 500
    assert response.json()["detail"] == "Error saving note"
    db.expire_all()
    assert db.query(BookingNote).count() == 0


def test_search_matches_title_or_content(client, db, booking, login):
    friend, patient, request = booking
    for i, (title, content) in enumerate(
        [("Intake", "Talked about WORK stress"), ("Follow-up", "Sleep improving"), ("Workbook", "Homework")]
    ):
        db.add(
            BookingNote(
                therapist_id=friend.id,
                client_id=patient.id,
                booking_request_id=request.id,
                title=title,
                content=content,
                created_at=datetime(2025, 6, 5, 9, i),
            )
        )
    db.commit()
    login(friend)

    everything = client.get("/notes").json()
    matches = client.get("/notes", params={"search": "work"}).json()

    assert [n["title"] for n in everything] == ["Workbook", "Follow-up", "Intake"]
    assert [n["title"] for n in matches] == ["Workbook", "Intake"]


def test_selectable_booking_requests(client, db, booking, login):
    friend, patient, request = booking
    older = BookingRequest(client_id=patient.id, therapist_id=friend.id, requested_date=datetime(2025, 5, 1))
    db.add(older)
    db.commit()
    login(friend)

    body = client.get("/notes/booking-requests").json()

    assert [r["id"] for r in body] == [request.id, older.id]
    assert body[0]["client_id"] == patient.id


def test_notes_require_provider_role(client, make_profile, login):
    login(make_profile("client"))
    assert client.get("/notes").status_code == 403
