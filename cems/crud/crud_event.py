# cems/crud/crud_event.py
from datetime import date, time
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, lazyload

from .base import CRUDBase
from cems.constants.status import EventStatus
from cems.models.event import Event
from cems.models.registration import EventRegistration
from cems.schemas.event import EventCreate, EventUpdate


class CRUDEvent(CRUDBase[Event, EventCreate, EventUpdate]):
    def get_for_update(self, db: Session, *, id: str) -> Optional[Event]:
        """
        Loads the event with a row lock held until the transaction ends.
        Joined relationships are skipped so the lock covers the event row only.
        """
        return (
            db.query(self.model)
            .options(lazyload("*"))
            .filter(self.model.id == id)
            .with_for_update()
            .first()
        )

    def create_with_organizer(
        self, db: Session, *, obj_in: EventCreate, organizer_id: str, status: str
    ) -> Event:
        db_obj = self.model(
            **obj_in.model_dump(), organizer_id=organizer_id, status=status
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def find_conflict(
        self,
        db: Session,
        *,
        venue_id: str,
        event_date: date,
        start_time: time,
        end_time: time,
        exclude_id: Optional[str] = None,
    ) -> Optional[Event]:
        """
        Returns an approved or pending event at the venue whose
        [start_time, end_time) overlaps the given window on that date.
        """
        query = db.query(self.model).filter(
            self.model.venue_id == venue_id,
            self.model.event_date == event_date,
            self.model.status.in_(EventStatus.open_for_registration()),
            self.model.start_time < end_time,
            self.model.end_time > start_time,
        )
        if exclude_id:
            query = query.filter(self.model.id != exclude_id)
        return query.first()

    def registration_counts(self, db: Session, *, event_ids: List[str]) -> Dict[str, int]:
        if not event_ids:
            return {}
        rows = (
            db.query(EventRegistration.event_id, func.count(EventRegistration.id))
            .filter(EventRegistration.event_id.in_(event_ids))
            .group_by(EventRegistration.event_id)
            .all()
        )
        return {event_id: count for event_id, count in rows}

    def _paginate(
        self, db: Session, query, *, skip: int, limit: int, order_by
    ) -> Tuple[List[dict], int]:
        total = query.count()
        events = query.order_by(*order_by).offset(skip).limit(limit).all()
        counts = self.registration_counts(db, event_ids=[e.id for e in events])
        return [to_dict(e, counts.get(e.id, 0)) for e in events], total

    def get_multi_public(
        self,
        db: Session,
        *,
        today: date,
        skip: int = 0,
        limit: int = 10,
        status: str = EventStatus.approved.value,
        search: Optional[str] = None,
    ) -> Tuple[List[dict], int]:
        """Browse listing: upcoming events only, soonest first."""
        query = db.query(self.model).filter(
            self.model.status == status, self.model.event_date >= today
        )
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(self.model.title.ilike(pattern), self.model.description.ilike(pattern))
            )
        return self._paginate(
            db, query, skip=skip, limit=limit,
            order_by=(self.model.event_date.asc(), self.model.start_time.asc()),
        )

    def get_multi_by_organizer(
        self,
        db: Session,
        *,
        organizer_id: str,
        skip: int = 0,
        limit: int = 10,
        status: Optional[str] = None,
    ) -> Tuple[List[dict], int]:
        query = db.query(self.model).filter(self.model.organizer_id == organizer_id)
        if status:
            query = query.filter(self.model.status == status)
        return self._paginate(
            db, query, skip=skip, limit=limit,
            order_by=(self.model.event_date.desc(), self.model.start_time.desc()),
        )

    def get_multi_admin(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 10,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[dict], int]:
        query = db.query(self.model)
        if status:
            query = query.filter(self.model.status == status)
        if search:
            query = query.filter(self.model.title.ilike(f"%{search}%"))
        return self._paginate(
            db, query, skip=skip, limit=limit, order_by=(self.model.created_at.desc(),)
        )

    def has_registrations(self, db: Session, *, event_id: str) -> bool:
        return (
            db.query(EventRegistration.id)
            .filter(EventRegistration.event_id == event_id)
            .first()
            is not None
        )

    def count_by_status(self, db: Session) -> Dict[str, int]:
        rows = (
            db.query(self.model.status, func.count(self.model.id))
            .group_by(self.model.status)
            .all()
        )
        return {status: count for status, count in rows}


def to_dict(event: Event, registered_count: int = 0) -> dict:
    """Flattens an event with its venue and organizer summary for responses."""
    event_dict = {c.name: getattr(event, c.name) for c in event.__table__.columns}
    venue = event.venue
    organizer = event.organizer
    event_dict.update(
        venue_name=venue.name if venue else None,
        venue_location=venue.location if venue else None,
        venue_capacity=venue.capacity if venue else None,
        facilities=venue.facilities if venue else None,
        organizer_first_name=organizer.first_name if organizer else None,
        organizer_last_name=organizer.last_name if organizer else None,
        organizer_email=organizer.email if organizer else None,
        registered_count=registered_count,
    )
    return event_dict


event = CRUDEvent(Event)
