# tests/api/v1/test_venues.py

from datetime import datetime, timedelta

from cems.constants.status import EventStatus, UserRole
from cems.crud import crud_venue
from tests.utils.event import create_random_event
from tests.utils.user import create_random_user
from tests.utils.venue import create_random_venue

VENUE_PAYLOAD = {
    "name": "Innovation Lab",
    "location": "Engineering Block, Level 2",
    "capacity": 60,
    "facilities": "Projector, whiteboards",
}


def test_admin_creates_venue(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.post("/api/v1/venues", json=VENUE_PAYLOAD)

    assert response.status_code == 201
    venue = response.json()["venue"]
    assert venue["name"] == "Innovation Lab"
    assert venue["is_active"] is True


def test_duplicate_venue_name_is_rejected(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    login_as(admin.id, UserRole.admin)
    test_client_e2e.post("/api/v1/venues", json=VENUE_PAYLOAD)

    response = test_client_e2e.post(
        "/api/v1/venues", json={**VENUE_PAYLOAD, "name": "innovation lab"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "conflict"


def test_organizer_cannot_create_venue(test_client_e2e, db_session_e2e, login_as):
    organizer = create_random_user(db_session_e2e, role=UserRole.organizer)
    login_as(organizer.id, UserRole.organizer)

    response = test_client_e2e.post("/api/v1/venues", json=VENUE_PAYLOAD)

    assert response.status_code == 403


def test_venue_validation(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.post("/api/v1/venues", json={**VENUE_PAYLOAD, "capacity": 0})

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "capacity"


def test_list_and_get_venue_are_public(anonymous_client, monkeypatch):
    venue = {
        "id": "ven_1",
        "name": "Main Hall",
        "location": "Building A",
        "capacity": 300,
        "facilities": None,
        "is_active": True,
    }
    monkeypatch.setattr(
        "cems.api.v1.endpoints.venues.crud_venue.venue.get_multi_active", lambda db: [venue]
    )
    monkeypatch.setattr(
        "cems.api.v1.endpoints.venues.crud_venue.venue.get_active", lambda db, id: venue
    )

    listing = anonymous_client.get("/api/v1/venues")
    detail = anonymous_client.get("/api/v1/venues/ven_1")

    assert listing.status_code == 200
    assert listing.json()["venues"][0]["name"] == "Main Hall"
    assert detail.json()["venue"]["id"] == "ven_1"


def test_availability_lists_bookings(test_client_e2e, db_session_e2e, login_as):
    organizer = create_random_user(db_session_e2e, role=UserRole.organizer)
    venue = create_random_venue(db_session_e2e)
    day = datetime.now().date() + timedelta(days=10)
    booked = create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, event_date=day
    )
    login_as(organizer.id, UserRole.organizer)

    response = test_client_e2e.get(
        f"/api/v1/venues/{venue.id}/availability?date={day.isoformat()}"
    )

    assert response.status_code == 200
    events = response.json()["events"]
    assert [e["title"] for e in events] == [booked.title]
    assert events[0]["start_time"] == "10:00:00"


def test_delete_venue_in_use_is_blocked(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    organizer = create_random_user(db_session_e2e, role=UserRole.organizer)
    venue = create_random_venue(db_session_e2e)
    create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, status=EventStatus.pending
    )
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.delete(f"/api/v1/venues/{venue.id}")

    assert response.status_code == 400
    assert crud_venue.venue.get_active(db_session_e2e, id=venue.id) is not None


def test_delete_venue_deactivates_it(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    venue = create_random_venue(db_session_e2e)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.delete(f"/api/v1/venues/{venue.id}")

    assert response.status_code == 200
    assert crud_venue.venue.get_active(db_session_e2e, id=venue.id) is None
    assert crud_venue.venue.get(db_session_e2e, id=venue.id) is not None
    assert test_client_e2e.get(f"/api/v1/venues/{venue.id}").status_code == 404


def test_update_venue(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    venue = create_random_venue(db_session_e2e)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.put(f"/api/v1/venues/{venue.id}", json={"capacity": 250})

    assert response.status_code == 200
    assert response.json()["venue"]["capacity"] == 250


def test_update_venue_capacity_below_booked_event_is_rejected(
    test_client_e2e, db_session_e2e, login_as
):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    organizer = create_random_user(db_session_e2e, role=UserRole.organizer)
    venue = create_random_venue(db_session_e2e, capacity=100)
    create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, capacity=80
    )
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.put(f"/api/v1/venues/{venue.id}", json={"capacity": 10})

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "validation_failed"
    assert body["errors"][0]["field"] == "capacity"
    db_session_e2e.refresh(venue)
    assert venue.capacity == 100

    response = test_client_e2e.put(f"/api/v1/venues/{venue.id}", json={"capacity": 80})

    assert response.status_code == 200
    assert response.json()["venue"]["capacity"] == 80


def test_update_venue_capacity_ignores_rejected_events(
    test_client_e2e, db_session_e2e, login_as
):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    organizer = create_random_user(db_session_e2e, role=UserRole.organizer)
    venue = create_random_venue(db_session_e2e, capacity=100)
    create_random_event(
        db_session_e2e,
        organizer_id=organizer.id,
        venue_id=venue.id,
        capacity=90,
        status=EventStatus.rejected,
    )
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.put(f"/api/v1/venues/{venue.id}", json={"capacity": 20})

    assert response.status_code == 200
    assert crud_venue.venue.max_event_capacity(db_session_e2e, venue_id=venue.id) == 0


def test_deactivate_venue_in_use_is_blocked(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    organizer = create_random_user(db_session_e2e, role=UserRole.organizer)
    venue = create_random_venue(db_session_e2e)
    create_random_event(db_session_e2e, organizer_id=organizer.id, venue_id=venue.id)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.put(f"/api/v1/venues/{venue.id}", json={"isActive": False})

    assert response.status_code == 400
    assert response.json()["code"] == "conflict"
    assert crud_venue.venue.get_active(db_session_e2e, id=venue.id) is not None


def test_deactivate_unused_venue(test_client_e2e, db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    venue = create_random_venue(db_session_e2e)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.put(f"/api/v1/venues/{venue.id}", json={"isActive": False})

    assert response.status_code == 200
    assert crud_venue.venue.get_active(db_session_e2e, id=venue.id) is None
