# cems/api/v1/endpoints/events.py
import logging
from datetime import datetime, timedelta
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cems.api import deps
from cems.constants.settings_keys import REGISTRATION_DEADLINE_HOURS
from cems.constants.status import EventStatus, NotificationType, UserRole
from cems.core.exceptions import (
    ConflictError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    TimeConflictError,
    ValidationFailedError,
)
from cems.core.permissions import can_manage_event, can_view_event, is_admin
from cems.crud import crud_event, crud_registration, crud_venue
from cems.db.session import get_db
from cems.schemas.common import MessageResponse, build_pagination, page_offset
from cems.schemas.event import (
    EventCreate,
    EventCreatedResponse,
    EventDetailResponse,
    EventListResponse,
    EventUpdate,
    EventUpdatedResponse,
)
from cems.schemas.token import TokenPayload
from cems.services.notifier import notifier
from cems.services.settings_provider import settings_provider

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["Events"])

staff_only = deps.require_roles(UserRole.organizer, UserRole.admin)


def validate_schedule(
    db: Session,
    *,
    venue_id: str,
    event_date,
    start_time,
    end_time,
    capacity: int,
    exclude_id: Optional[str] = None,
):
    """
    Shared checks for creating and editing an event: the time window is
    ordered, the venue is active and large enough, and the slot is free.
    """
    if end_time <= start_time:
        raise ValidationFailedError(
            errors=[{"field": "endTime", "message": "End time must be after start time"}]
        )

    venue = crud_venue.venue.get_active(db, id=venue_id)
    if not venue:
        raise NotFoundError("Venue not found or inactive")
    if capacity > venue.capacity:
        raise ValidationFailedError(
            "Event capacity cannot exceed venue capacity",
            errors=[
                {
                    "field": "capacity",
                    "message": f"Maximum for this venue is {venue.capacity}",
                }
            ],
        )

    conflict = crud_event.event.find_conflict(
        db,
        venue_id=venue_id,
        event_date=event_date,
        start_time=start_time,
        end_time=end_time,
        exclude_id=exclude_id,
    )
    if conflict:
        raise TimeConflictError(
            f'Venue is already booked for this time slot by "{conflict.title}"'
        )
    return venue


@router.get("", response_model=EventListResponse)
def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: Literal["approved", "completed"] = Query("approved", alias="status"),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
):
    """Upcoming events, soonest first, with their registration counts."""
    events, total = crud_event.event.get_multi_public(
        db,
        today=datetime.now().date(),
        skip=page_offset(page, limit),
        limit=limit,
        status=status_filter,
        search=search,
    )
    return {"events": events, "pagination": build_pagination(page, limit, total)}


@router.get("/organizer/my-events", response_model=EventListResponse)
def list_my_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    events, total = crud_event.event.get_multi_by_organizer(
        db,
        organizer_id=current_user.sub,
        skip=page_offset(page, limit),
        limit=limit,
        status=status_filter.value if status_filter else None,
    )
    return {"events": events, "pagination": build_pagination(page, limit, total)}


@router.get("/{eventId}", response_model=EventDetailResponse)
def get_event(
    eventId: str,
    db: Session = Depends(get_db),
    current_user: Optional[TokenPayload] = Depends(deps.get_current_user_optional),
):
    event = crud_event.event.get(db, id=eventId)
    # Hidden events look the same as missing ones
    if not event or not can_view_event(current_user, event):
        raise NotFoundError("Event not found")

    count = crud_registration.registration.count_by_event(db, event_id=eventId)
    event_dict = crud_event.to_dict(event, count)
    event_dict["isRegistered"] = bool(
        current_user
        and current_user.role == UserRole.student
        and crud_registration.registration.get_by_event_and_student(
            db, event_id=eventId, student_id=current_user.sub
        )
    )
    return {"event": event_dict}


@router.post("", response_model=EventCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_event(
    event_in: EventCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    """
    Create an event. Admin-created events are approved immediately;
    organizer-created events wait for approval and admins are notified.
    """
    validate_schedule(
        db,
        venue_id=event_in.venue_id,
        event_date=event_in.event_date,
        start_time=event_in.start_time,
        end_time=event_in.end_time,
        capacity=event_in.capacity,
    )

    if event_in.registration_deadline is None:
        hours = settings_provider.get_int(db, REGISTRATION_DEADLINE_HOURS, default=0)
        if hours > 0:
            starts_at = datetime.combine(event_in.event_date, event_in.start_time)
            event_in.registration_deadline = starts_at - timedelta(hours=hours)

    new_status = EventStatus.approved if is_admin(current_user) else EventStatus.pending
    event = crud_event.event.create_with_organizer(
        db, obj_in=event_in, organizer_id=current_user.sub, status=new_status.value
    )
    logger.info(f"Event {event.id} created by {current_user.sub} with status {event.status}")

    if new_status == EventStatus.pending:
        notifier.notify_role(
            db,
            UserRole.admin.value,
            "New Event Pending Approval",
            f'"{event.title}" was submitted and is awaiting approval',
            NotificationType.info,
        )
        db.commit()
        message = "Event created successfully and is pending approval"
    else:
        message = "Event created and approved"

    return {"message": message, "eventId": event.id, "status": event.status}


@router.put("/{eventId}", response_model=EventUpdatedResponse)
def update_event(
    eventId: str,
    event_in: EventUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    """
    Edit an event. Schedule checks run on the merged result. An organizer's
    edit sends the event back for approval.
    """
    event = crud_event.event.get(db, id=eventId)
    if not event:
        raise NotFoundError("Event not found")
    if not can_manage_event(current_user, event):
        raise ForbiddenError("You can only edit your own events")
    if event.status in (EventStatus.completed.value, EventStatus.cancelled.value):
        raise InvalidStateError(f"Cannot edit a {event.status} event")

    update_data = event_in.model_dump(exclude_unset=True)
    # Only the deadline and banner may be cleared with null
    update_data = {
        k: v
        for k, v in update_data.items()
        if v is not None or k in ("registration_deadline", "banner_image")
    }
    merged = {
        field: update_data.get(field, getattr(event, field))
        for field in ("venue_id", "event_date", "start_time", "end_time", "capacity")
    }
    validate_schedule(db, exclude_id=event.id, **merged)

    registered = crud_registration.registration.count_by_event(db, event_id=eventId)
    if merged["capacity"] < registered:
        raise ValidationFailedError(
            errors=[
                {
                    "field": "capacity",
                    "message": f"{registered} students are already registered",
                }
            ]
        )

    if not is_admin(current_user):
        update_data["status"] = EventStatus.pending.value

    event = crud_event.event.update(db, db_obj=event, obj_in=update_data)
    logger.info(f"Event {event.id} updated by {current_user.sub}")
    return {
        "message": "Event updated successfully",
        "event": crud_event.to_dict(event, registered),
    }


@router.delete("/{eventId}", response_model=MessageResponse)
def delete_event(
    eventId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(staff_only),
):
    event = crud_event.event.get(db, id=eventId)
    if not event:
        raise NotFoundError("Event not found")
    if not can_manage_event(current_user, event):
        raise ForbiddenError("You can only delete your own events")
    if crud_event.event.has_registrations(db, event_id=eventId):
        raise ConflictError("Cannot delete an event with registrations. Cancel the event instead")

    crud_event.event.remove(db, id=eventId)
    logger.info(f"Event {eventId} deleted by {current_user.sub}")
    return {"message": "Event deleted successfully"}
