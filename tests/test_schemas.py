"""Response shapes built from ORM rows."""

from __future__ import annotations

from datetime import timedelta

from fastapi.routing import APIRoute

from main import app
from schemas import JoinRequestWithTrip, MessageRead, TripDetail, TripRead, UserRead
from services import join_requests as request_service
from services import messages as message_service
from services import trips as trip_service
from utils.dates import utc_now


def test_trip_is_written_in_camel_case_with_derived_status(db, organizer):
    start = utc_now() - timedelta(days=1)
    trip = trip_service.create_trip(
        db,
        organizer,
        {
            "title": "Kedarkantha trek",
            "description": "Winter trek with a summit push on day three.",
            "destination": "Sankri",
            "start_date": start,
            "end_date": start + timedelta(days=4),
            "max_participants": 3,
            "trip_type": "Adventure",
        },
        now=start - timedelta(days=1),
    )

    data = TripRead.model_validate(trip).model_dump(mode="json", by_alias=True)

    assert data["status"] == "ongoing"
    assert data["type"] == "Adventure"
    assert data["maxParticipants"] == 3
    assert data["availableSeats"] == 2
    assert data["isFull"] is False
    assert data["startDate"].endswith("Z")
    assert data["organizer"]["branch"] == "Computer Science"
    assert data["participants"] == [
        {"id": organizer.id, "name": organizer.name, "email": organizer.email, "avatar": "RS"},
    ]
    assert "trip_type" not in data


def test_user_never_exposes_password_hash(db, organizer):
    data = UserRead.model_validate(organizer).model_dump(by_alias=True)

    assert set(data) == {"id", "name", "email", "avatar", "branch", "year", "bio", "createdAt"}


def test_trip_detail_lists_requests_newest_first(db, trip, traveler, other_traveler):
    first = request_service.submit_request(db, trip.id, traveler, "first")
    second = request_service.submit_request(db, trip.id, other_traveler, "second")

    detail = TripDetail.model_validate(trip_service.get_trip(db, trip.id, with_requests=True))

    assert [r.id for r in detail.join_requests] == [second.id, first.id]


def test_join_request_embeds_trip_summary(db, trip, traveler):
    request = request_service.submit_request(db, trip.id, traveler, "room for one?")

    data = JoinRequestWithTrip.model_validate(request).model_dump(mode="json", by_alias=True)

    assert data["tripId"] == trip.id
    assert data["userId"] == traveler.id
    assert data["status"] == "pending"
    assert data["respondedAt"] is None
    assert data["trip"]["status"] == "upcoming"
    assert data["trip"]["organizer"]["id"] == trip.organizer_id


def test_message_names_its_trip(db, trip, organizer):
    message = message_service.send_message(db, trip.id, organizer, "hello")

    data = MessageRead.model_validate(message).model_dump(mode="json", by_alias=True)

    assert data["trip"] == trip.id
    assert data["sender"]["id"] == organizer.id
    assert data["createdAt"].endswith("Z")


def test_every_api_route_declares_a_response_model():
    untyped = [
        route.path for route in app.routes
        if isinstance(route, APIRoute) and route.path.startswith("/api/") and route.path != "/api/health"
        and route.response_model is None
    ]
    assert untyped == []
