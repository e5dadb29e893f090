#cems/crud/crud_venue.py
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from .base import CRUDBase
from cems.constants.status import EventStatus
from cems.models.event import Event
from cems.models.venue import Venue
from cems.schemas.venue import VenueCreate, VenueUpdate


class CRUDVenue(CRUDBase[Venue, VenueCreate, VenueUpdate]):
    def get_active(self, db: Session, *, id: str) -> Optional[Venue]:
        return (
            db.query(self.model)
            .filter(self.model.id == id, self.model.is_active == True)  # noqa: E712
            .first()
        )

    def get_multi_active(self, db: Session) -> List[Venue]:
        return (
            db.query(self.model)
            .filter(self.model.is_active == True)  # noqa: E712
            .order_by(self.model.name.asc())
            .all()
        )

    def get_active_by_name(
        self, db: Session, *, name: str, exclude_id: Optional[str] = None
    ) -> Optional[Venue]:
        query = db.query(self.model).filter(
            func.lower(self.model.name) == name.lower(),
            self.model.is_active == True,  # noqa: E712
        )
        if exclude_id:
            query = query.filter(self.model.id != exclude_id)
        return query.first()

    def is_in_use(self, db: Session, *, venue_id: str) -> bool:
        """A venue is in use while any approved or pending event references it."""
        return (
            db.query(Event.id)
            .filter(
                Event.venue_id == venue_id,
                Event.status.in_(EventStatus.open_for_registration()),
            )
            .first()
            is not None
        )

    def max_event_capacity(self, db: Session, *, venue_id: str) -> int:
        """Largest capacity among approved or pending events at the venue, 0 if none."""
        return (
            db.query(func.max(Event.capacity))
            .filter(
                Event.venue_id == venue_id,
                Event.status.in_(EventStatus.open_for_registration()),
            )
            .scalar()
            or 0
        )

    def get_bookings(self, db: Session, *, venue_id: str, on: date) -> List[Event]:
        return (
            db.query(Event)
            .filter(
                Event.venue_id == venue_id,
                Event.event_date == on,
                Event.status.in_(EventStatus.open_for_registration()),
            )
            .order_by(Event.start_time.asc())
            .all()
        )


venue = CRUDVenue(Venue)
