# tests/api/v1/test_admin.py

import csv
import io

import pytest

from cems.constants.settings_keys import MAX_REGISTRATION_PER_STUDENT
from cems.constants.status import EventStatus, UserRole
from cems.crud import crud_event, crud_notification, crud_system_setting
from tests.utils.event import create_random_event
from tests.utils.user import create_random_user
from tests.utils.venue import create_random_venue


@pytest.fixture
def admin(db_session_e2e, login_as):
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    login_as(admin.id, UserRole.admin)
    return admin


@pytest.fixture
def organizer(db_session_e2e):
    return create_random_user(db_session_e2e, role=UserRole.organizer)


@pytest.fixture
def venue(db_session_e2e):
    return create_random_venue(db_session_e2e)


def test_admin_routes_reject_organizers(test_client, login_as):
    login_as("usr_org1", UserRole.organizer)
    assert test_client.get("/api/v1/admin/dashboard-stats").status_code == 403
    assert test_client.get("/api/v1/admin/settings").status_code == 403


def test_approve_pending_event_notifies_organizer(
    test_client_e2e, db_session_e2e, admin, organizer, venue
):
    event = create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, status=EventStatus.pending
    )

    response = test_client_e2e.put(
        f"/api/v1/admin/events/{event.id}/status", json={"status": "approved"}
    )

    assert response.status_code == 200
    db_session_e2e.refresh(event)
    assert event.status == "approved"
    items, _ = crud_notification.notification.get_multi_by_user(
        db_session_e2e, user_id=organizer.id
    )
    assert items[0].type == "success"


def test_reject_records_admin_notes(test_client_e2e, db_session_e2e, admin, organizer, venue):
    event = create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, status=EventStatus.pending
    )

    response = test_client_e2e.put(
        f"/api/v1/admin/events/{event.id}/status",
        json={"status": "rejected", "adminNotes": "Venue is under renovation"},
    )

    assert response.status_code == 200
    db_session_e2e.refresh(event)
    assert event.status == "rejected"
    assert event.admin_notes == "Venue is under renovation"


def test_invalid_status_transition(test_client_e2e, db_session_e2e, admin, organizer, venue):
    event = create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, status=EventStatus.completed
    )

    response = test_client_e2e.put(
        f"/api/v1/admin/events/{event.id}/status", json={"status": "approved"}
    )

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_state"


def test_cancel_event_warns_registrants(
    test_client_e2e, db_session_e2e, login_as, organizer, venue
):
    event = create_random_event(db_session_e2e, organizer_id=organizer.id, venue_id=venue.id)
    student = create_random_user(db_session_e2e)
    login_as(student.id)
    test_client_e2e.post(f"/api/v1/registrations/{event.id}")
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.put(
        f"/api/v1/admin/events/{event.id}/cancel", json={"reason": "Speaker is unavailable"}
    )

    assert response.status_code == 200
    db_session_e2e.refresh(event)
    assert event.status == "cancelled"
    items, _ = crud_notification.notification.get_multi_by_user(
        db_session_e2e, user_id=student.id, unread_only=True
    )
    assert any(n.title == "Event Cancelled" and n.type == "warning" for n in items)


def test_cancel_requires_a_reason(test_client_e2e, db_session_e2e, admin, organizer, venue):
    event = create_random_event(db_session_e2e, organizer_id=organizer.id, venue_id=venue.id)

    response = test_client_e2e.put(
        f"/api/v1/admin/events/{event.id}/cancel", json={"reason": "short"}
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "reason"


def test_complete_event(test_client_e2e, db_session_e2e, admin, organizer, venue):
    event = create_random_event(db_session_e2e, organizer_id=organizer.id, venue_id=venue.id)

    response = test_client_e2e.put(f"/api/v1/admin/events/{event.id}/complete")

    assert response.status_code == 200
    assert crud_event.event.get(db_session_e2e, id=event.id).status == "completed"


def test_attendance_report_csv(test_client_e2e, db_session_e2e, login_as, organizer, venue):
    event = create_random_event(db_session_e2e, organizer_id=organizer.id, venue_id=venue.id)
    student = create_random_user(db_session_e2e)
    login_as(student.id)
    test_client_e2e.post(f"/api/v1/registrations/{event.id}")
    admin = create_random_user(db_session_e2e, role=UserRole.admin)
    login_as(admin.id, UserRole.admin)

    response = test_client_e2e.get(f"/api/v1/admin/events/{event.id}/attendance-report")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    rows = list(csv.DictReader(io.StringIO(response.text)))
    assert len(rows) == 1
    assert rows[0]["Email"] == student.email
    assert rows[0]["Status"] == "registered"


def test_dashboard_stats(test_client_e2e, db_session_e2e, admin, organizer, venue):
    create_random_event(
        db_session_e2e, organizer_id=organizer.id, venue_id=venue.id, status=EventStatus.pending
    )

    response = test_client_e2e.get("/api/v1/admin/dashboard-stats")

    assert response.status_code == 200
    stats = response.json()["stats"]
    assert stats["totalEvents"] == 1
    assert stats["totalVenues"] == 1
    assert len(stats["pendingEvents"]) == 1


def test_analytics(test_client_e2e, db_session_e2e, admin):
    response = test_client_e2e.get("/api/v1/admin/analytics?period=7")

    assert response.status_code == 200
    analytics = response.json()["analytics"]
    assert set(analytics) == {
        "participationTrends",
        "departmentStats",
        "feedbackStats",
        "venueStats",
    }


def test_settings_round_trip(test_client_e2e, db_session_e2e, admin):
    response = test_client_e2e.put(
        "/api/v1/admin/settings",
        json={"settings": {MAX_REGISTRATION_PER_STUDENT: 3, "allow_event_self_registration": False}},
    )
    assert response.status_code == 200

    settings = test_client_e2e.get("/api/v1/admin/settings").json()["settings"]
    assert settings[MAX_REGISTRATION_PER_STUDENT]["value"] == "3"
    assert settings["allow_event_self_registration"]["value"] == "false"
    assert (
        crud_system_setting.system_setting.get_value(db_session_e2e, key=MAX_REGISTRATION_PER_STUDENT)
        == "3"
    )


def test_unknown_setting_is_rejected(test_client_e2e, db_session_e2e, admin):
    response = test_client_e2e.put(
        "/api/v1/admin/settings", json={"settings": {"dark_mode": True}}
    )

    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "settings.dark_mode"


def test_announcement_reaches_target_role(test_client_e2e, db_session_e2e, admin):
    students = [create_random_user(db_session_e2e) for _ in range(2)]
    create_random_user(db_session_e2e, role=UserRole.organizer)

    response = test_client_e2e.post(
        "/api/v1/admin/announcements",
        json={
            "title": "Library hours",
            "message": "The library is open until midnight this week.",
            "targetRole": "student",
        },
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Announcement sent to 2 users"
    for student in students:
        assert crud_notification.notification.count_unread(db_session_e2e, user_id=student.id) == 1
