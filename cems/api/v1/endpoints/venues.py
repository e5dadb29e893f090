#cems/api/v1/endpoints/venues.py
import logging
from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cems.api import deps
from cems.constants.status import UserRole
from cems.core.exceptions import ConflictError, NotFoundError, ValidationFailedError
from cems.crud import crud_venue
from cems.db.session import get_db
from cems.schemas.common import MessageResponse
from cems.schemas.token import TokenPayload
from cems.schemas.venue import (
    VenueAvailabilityResponse,
    VenueCreate,
    VenueListResponse,
    VenueResponse,
    VenueUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/venues", tags=["Venues"])

admin_only = deps.require_roles(UserRole.admin)


def _get_active_or_404(db: Session, venue_id: str):
    venue = crud_venue.venue.get_active(db, id=venue_id)
    if not venue:
        raise NotFoundError("Venue not found")
    return venue


@router.get("", response_model=VenueListResponse)
def list_venues(db: Session = Depends(get_db)):
    return {"venues": crud_venue.venue.get_multi_active(db)}


@router.get("/{venueId}", response_model=VenueResponse)
def get_venue(venueId: str, db: Session = Depends(get_db)):
    return {"venue": _get_active_or_404(db, venueId)}


@router.get("/{venueId}/availability", response_model=VenueAvailabilityResponse)
def get_venue_availability(
    venueId: str,
    on: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Approved and pending events booked at the venue on the given date."""
    venue = _get_active_or_404(db, venueId)
    bookings = crud_venue.venue.get_bookings(db, venue_id=venueId, on=on)
    return {"venue": venue, "date": on, "events": bookings}


@router.post("", response_model=VenueResponse, status_code=status.HTTP_201_CREATED)
def create_venue(
    venue_in: VenueCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    if crud_venue.venue.get_active_by_name(db, name=venue_in.name):
        raise ConflictError("A venue with this name already exists")

    venue = crud_venue.venue.create(db, obj_in=venue_in)
    logger.info(f"Venue {venue.id} created by {current_user.sub}")
    return {"message": "Venue created successfully", "venue": venue}


@router.put("/{venueId}", response_model=VenueResponse)
def update_venue(
    venueId: str,
    venue_in: VenueUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    venue = crud_venue.venue.get(db, id=venueId)
    if not venue:
        raise NotFoundError("Venue not found")

    if venue_in.name and crud_venue.venue.get_active_by_name(
        db, name=venue_in.name, exclude_id=venueId
    ):
        raise ConflictError("A venue with this name already exists")

    if venue_in.capacity is not None:
        booked = crud_venue.venue.max_event_capacity(db, venue_id=venueId)
        if booked > venue_in.capacity:
            raise ValidationFailedError(
                "Venue capacity is below an upcoming event's capacity",
                errors=[
                    {
                        "field": "capacity",
                        "message": f"Must be at least {booked} to fit approved or pending events",
                    }
                ],
            )

    if venue_in.is_active is False and crud_venue.venue.is_in_use(db, venue_id=venueId):
        raise ConflictError("Cannot delete a venue with approved or pending events")

    venue = crud_venue.venue.update(
        db, db_obj=venue, obj_in=venue_in.model_dump(exclude_unset=True, exclude_none=True)
    )
    logger.info(f"Venue {venue.id} updated by {current_user.sub}")
    return {"message": "Venue updated successfully", "venue": venue}


@router.delete("/{venueId}", response_model=MessageResponse)
def delete_venue(
    venueId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    """Soft-delete: the venue is deactivated so past events keep their reference."""
    venue = crud_venue.venue.get(db, id=venueId)
    if not venue:
        raise NotFoundError("Venue not found")
    if crud_venue.venue.is_in_use(db, venue_id=venueId):
        raise ConflictError("Cannot delete a venue with approved or pending events")

    crud_venue.venue.update(db, db_obj=venue, obj_in={"is_active": False})
    logger.info(f"Venue {venueId} deactivated by {current_user.sub}")
    return {"message": "Venue deleted successfully"}
