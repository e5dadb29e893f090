# cems/api/v1/endpoints/admin.py
"""
Admin-only moderation and reporting endpoints.
"""
import logging
from datetime import datetime
from io import BytesIO
from typing import Optional

import pandas as pd
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from cems.api import deps
from cems.constants.settings_keys import DEFAULT_SETTINGS
from cems.constants.status import (
    EventStatus,
    NotificationType,
    UserRole,
    can_transition,
)
from cems.core.exceptions import InvalidStateError, NotFoundError, ValidationFailedError
from cems.crud import crud_event, crud_registration, crud_system_setting
from cems.crud.crud_dashboard import dashboard
from cems.db.session import get_db
from cems.schemas.common import MessageResponse, build_pagination, page_offset
from cems.schemas.event import (
    EventCancel,
    EventDetailResponse,
    EventListResponse,
    EventStatusUpdate,
)
from cems.schemas.notification import AnnouncementCreate
from cems.schemas.setting import SettingsResponse, SettingsUpdate
from cems.schemas.token import TokenPayload
from cems.services.notifier import notifier
from cems.services.settings_provider import normalize_setting_value

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(deps.require_roles(UserRole.admin))],
)

REPORT_COLUMNS = [
    "first_name",
    "last_name",
    "email",
    "student_number",
    "department",
    "status",
    "registration_date",
    "attendance_marked_at",
    "feedback_rating",
    "feedback_text",
]


def _get_event_or_404(db: Session, event_id: str):
    event = crud_event.event.get(db, id=event_id)
    if not event:
        raise NotFoundError("Event not found")
    return event


def _transition(db: Session, event, target: EventStatus, admin_notes: Optional[str]):
    if not can_transition(event.status, target.value):
        raise InvalidStateError(
            f"Cannot change event status from {event.status} to {target.value}"
        )
    return crud_event.event.update(
        db, db_obj=event, obj_in={"status": target.value, "admin_notes": admin_notes}
    )


@router.get("/dashboard-stats")
def get_dashboard_stats(db: Session = Depends(get_db)):
    recent, _ = crud_event.event.get_multi_admin(db, skip=0, limit=10)
    pending, _ = crud_event.event.get_multi_admin(
        db, skip=0, limit=100, status=EventStatus.pending.value
    )
    stats = dashboard.get_totals(db)
    stats.update(
        eventsByStatus=dashboard.get_events_by_status(db),
        usersByRole=dashboard.get_users_by_role(db),
        recentEvents=recent,
        pendingEvents=pending,
    )
    return {"success": True, "stats": stats}


@router.get("/events", response_model=EventListResponse)
def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    events, total = crud_event.event.get_multi_admin(
        db,
        skip=page_offset(page, limit),
        limit=limit,
        status=status_filter.value if status_filter else None,
        search=search,
    )
    return {"events": events, "pagination": build_pagination(page, limit, total)}


@router.get("/events/{eventId}", response_model=EventDetailResponse)
def get_event(eventId: str, db: Session = Depends(get_db)):
    event = _get_event_or_404(db, eventId)
    count = crud_registration.registration.count_by_event(db, event_id=eventId)
    return {"event": crud_event.to_dict(event, count)}


@router.put("/events/{eventId}/status", response_model=MessageResponse)
def update_event_status(
    eventId: str,
    body: EventStatusUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Approve or reject a pending event and tell its organizer."""
    event = _get_event_or_404(db, eventId)
    target = EventStatus(body.status)
    event = _transition(db, event, target, body.admin_notes)

    if target == EventStatus.approved:
        message, kind = f'Your event "{event.title}" has been approved!', NotificationType.success
    else:
        reason = f" Reason: {body.admin_notes}" if body.admin_notes else ""
        message = f'Your event "{event.title}" has been rejected.{reason}'
        kind = NotificationType.error
    notifier.notify(db, [event.organizer_id], "Event Status Update", message, kind)
    db.commit()

    logger.info(f"Event {eventId} {target.value} by {current_user.sub}")
    return {"message": f"Event {target.value} successfully"}


@router.put("/events/{eventId}/cancel", response_model=MessageResponse)
def cancel_event(
    eventId: str,
    body: EventCancel,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Cancel an approved event. Registrants and the organizer are warned."""
    event = _get_event_or_404(db, eventId)
    event = _transition(db, event, EventStatus.cancelled, body.reason)

    student_ids = crud_registration.registration.get_student_ids_by_event(db, event_id=eventId)
    notifier.notify(
        db,
        student_ids,
        "Event Cancelled",
        f'Event "{event.title}" has been cancelled. Reason: {body.reason}',
        NotificationType.warning,
    )
    notifier.notify(
        db,
        [event.organizer_id],
        "Event Cancelled",
        f'Your event "{event.title}" has been cancelled. Reason: {body.reason}',
        NotificationType.warning,
    )
    db.commit()

    logger.info(
        f"Event {eventId} cancelled by {current_user.sub}; {len(student_ids)} registrants notified"
    )
    return {"message": "Event cancelled successfully"}


@router.put("/events/{eventId}/complete", response_model=MessageResponse)
def complete_event(
    eventId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    event = _get_event_or_404(db, eventId)
    _transition(db, event, EventStatus.completed, event.admin_notes)
    logger.info(f"Event {eventId} marked completed by {current_user.sub}")
    return {"message": "Event marked as completed"}


@router.get("/events/{eventId}/attendance-report")
def export_attendance_report(eventId: str, db: Session = Depends(get_db)):
    """CSV attendance sheet: one row per registrant."""
    event = _get_event_or_404(db, eventId)
    rows = crud_registration.registration.get_all_by_event(db, event_id=eventId)

    df = pd.DataFrame(rows, columns=REPORT_COLUMNS)
    df = df.rename(
        columns={
            "first_name": "First Name",
            "last_name": "Last Name",
            "email": "Email",
            "student_number": "Student ID",
            "department": "Department",
            "status": "Status",
            "registration_date": "Registered At",
            "attendance_marked_at": "Attendance Marked At",
            "feedback_rating": "Rating",
            "feedback_text": "Feedback",
        }
    )

    output = BytesIO()
    df.to_csv(output, index=False)
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="text/csv",
        headers={
            "Content-Disposition": f"attachment; filename=attendance_{event.id}.csv"
        },
    )


@router.get("/analytics")
def get_analytics(
    period: int = Query(30, ge=1, le=3650),
    db: Session = Depends(get_db),
):
    today = datetime.now().date()
    return {
        "success": True,
        "analytics": {
            "participationTrends": dashboard.get_participation_trends(
                db, today=today, period_days=period
            ),
            "departmentStats": dashboard.get_department_stats(db),
            "feedbackStats": dashboard.get_feedback_stats(db),
            "venueStats": dashboard.get_venue_stats(db),
        },
    }


@router.get("/settings", response_model=SettingsResponse)
def get_settings(db: Session = Depends(get_db)):
    rows = crud_system_setting.system_setting.get_all(db)
    return {
        "settings": {
            row.setting_key: {"value": row.setting_value, "description": row.description}
            for row in rows
        }
    }


@router.put("/settings", response_model=MessageResponse)
def update_settings(
    body: SettingsUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    """Update existing settings. Unknown keys are rejected."""
    known = {row.setting_key for row in crud_system_setting.system_setting.get_all(db)}
    known.update(DEFAULT_SETTINGS)
    unknown = [key for key in body.settings if key not in known]
    if unknown:
        raise ValidationFailedError(
            errors=[{"field": f"settings.{key}", "message": "Unknown setting"} for key in unknown]
        )

    crud_system_setting.system_setting.seed_defaults(db, defaults=DEFAULT_SETTINGS)
    values = {key: normalize_setting_value(value) for key, value in body.settings.items()}
    crud_system_setting.system_setting.set_values(db, values=values)

    logger.info(f"System settings {sorted(values)} updated by {current_user.sub}")
    return {"message": "Settings updated successfully"}


@router.post("/announcements", response_model=MessageResponse)
def send_announcement(
    body: AnnouncementCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    sent = notifier.notify_role(
        db, body.target_role, body.title, body.message, NotificationType.info
    )
    db.commit()
    logger.info(f"Announcement sent to {sent} users ({body.target_role}) by {current_user.sub}")
    return {"message": f"Announcement sent to {sent} users"}
