# tests/crud/test_event_crud.py

from datetime import date, time
from unittest.mock import MagicMock

from cems.crud.crud_event import CRUDEvent, to_dict
from cems.models.event import Event
from cems.models.user import User
from cems.models.venue import Venue
from cems.schemas.event import EventCreate

event_crud = CRUDEvent(Event)


def _event_in(**overrides) -> EventCreate:
    data = {
        "title": "Robotics Workshop",
        "description": "Hands-on robotics workshop for beginners.",
        "eventDate": "2030-05-01",
        "startTime": "10:00",
        "endTime": "12:00",
        "venueId": "ven_1",
        "capacity": 40,
    }
    data.update(overrides)
    return EventCreate(**data)


def test_create_with_organizer():
    db_session = MagicMock()

    event_crud.create_with_organizer(
        db_session, obj_in=_event_in(), organizer_id="usr_org", status="pending"
    )

    created_obj = db_session.add.call_args[0][0]
    assert created_obj.organizer_id == "usr_org"
    assert created_obj.status == "pending"
    assert created_obj.event_date == date(2030, 5, 1)
    assert created_obj.start_time == time(10, 0)
    db_session.commit.assert_called_once()
    db_session.refresh.assert_called_once_with(created_obj)


def test_event_create_accepts_day_month_year_dates():
    event_in = _event_in(eventDate="01-05-2030", registrationDeadline="30-04-2030T18:00")
    assert event_in.event_date == date(2030, 5, 1)
    assert event_in.registration_deadline.day == 30
    assert event_in.registration_deadline.hour == 18


def test_to_dict_flattens_venue_and_organizer():
    event = Event(
        id="evt_1",
        title="Robotics Workshop",
        description="Hands-on robotics workshop for beginners.",
        event_date=date(2030, 5, 1),
        start_time=time(10, 0),
        end_time=time(12, 0),
        capacity=40,
        organizer_id="usr_org",
        venue_id="ven_1",
        status="approved",
    )
    event.venue = Venue(id="ven_1", name="Main Hall", location="Block A", capacity=200)
    event.organizer = User(
        id="usr_org", email="org@campus.edu", first_name="Olu", last_name="Ade", role="organizer"
    )

    result = to_dict(event, registered_count=12)

    assert result["id"] == "evt_1"
    assert result["venue_name"] == "Main Hall"
    assert result["venue_capacity"] == 200
    assert result["organizer_first_name"] == "Olu"
    assert result["registered_count"] == 12


def test_registration_counts_empty_input_skips_query():
    db_session = MagicMock()
    assert event_crud.registration_counts(db_session, event_ids=[]) == {}
    db_session.query.assert_not_called()
