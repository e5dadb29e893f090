#cems/api/v1/endpoints/registrations.py
from typing import Literal

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from cems.api import deps
from cems.constants.status import UserRole
from cems.core.config import settings
from cems.core.limiter import limiter
from cems.db.session import get_db
from cems.schemas.common import MessageResponse, build_pagination
from cems.schemas.registration import (
    AttendanceResponse,
    AttendanceUpdate,
    CheckInRequest,
    EventRegistrantListResponse,
    FeedbackCreate,
    MyRegistrationListResponse,
    RegistrationPassResponse,
)
from cems.schemas.token import TokenPayload
from cems.services.registration_service import registration_service

router = APIRouter(prefix="/registrations", tags=["Registrations"])

student_only = deps.require_roles(UserRole.student)
staff_only = deps.require_roles(UserRole.organizer, UserRole.admin)


@router.get("/my-registrations", response_model=MyRegistrationListResponse)
def list_my_registrations(
    status_filter: Literal["all", "upcoming", "past"] = Query("all", alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(student_only),
):
    """
    The caller's registrations with event, venue and organizer details.
    `upcoming` and `past` compare the event date with today.
    """
    rows, total = registration_service.list_my_registrations(
        db, current_user.sub, status_filter=status_filter, page=page, limit=limit
    )
    return {"registrations": rows, "pagination": build_pagination(page, limit, total)}


@router.get("/event/{eventId}", response_model=EventRegistrantListResponse)
def list_event_registrations(
    eventId: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    """Registrants of an event. Organizers only see their own events."""
    rows, total = registration_service.list_event_registrations(
        db, eventId, current_user, page=page, limit=limit
    )
    return {"registrations": rows, "pagination": build_pagination(page, limit, total)}


@router.post("/check-in", response_model=AttendanceResponse)
def check_in(
    body: CheckInRequest,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    """Mark the holder of a scanned pass as attended."""
    registration = registration_service.check_in(db, body.token, current_user)
    return {"message": "Check-in successful", "registration": registration}


@router.post(
    "/{eventId}",
    response_model=RegistrationPassResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.REGISTRATION_RATE_LIMIT)
def register_for_event(
    eventId: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(student_only),
):
    """
    Register the caller for an event and return the registration pass.

    Fails with 404 when the event is missing or not open, and with 400 when
    the deadline passed, the event is full, the caller is already registered
    or over the per-student limit.
    """
    data = registration_service.register(db, eventId, current_user.sub)
    return {"message": "Successfully registered for event", "registrationPass": data}


@router.delete("/{eventId}", response_model=MessageResponse)
def unregister_from_event(
    eventId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(student_only),
):
    registration_service.unregister(db, eventId, current_user.sub)
    return {"message": "Successfully unregistered from event"}


@router.get("/{eventId}/pass", response_model=RegistrationPassResponse)
def get_registration_pass(
    eventId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(student_only),
):
    """Re-render the pass from the token stored at registration."""
    data = registration_service.get_or_issue_pass(db, eventId, current_user.sub)
    return {"registrationPass": data}


@router.put("/{registrationId}/attendance", response_model=AttendanceResponse)
def mark_attendance(
    registrationId: str,
    body: AttendanceUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    registration = registration_service.mark_attendance(
        db, registrationId, body.status, current_user
    )
    return {"message": "Attendance updated successfully", "registration": registration}


@router.post("/{eventId}/feedback", response_model=MessageResponse)
def submit_feedback(
    eventId: str,
    body: FeedbackCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(student_only),
):
    registration_service.submit_feedback(
        db, eventId, current_user.sub, body.rating, body.feedback
    )
    return {"message": "Feedback submitted successfully"}
