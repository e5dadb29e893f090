# cems/crud/crud_registration.py
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import update
from sqlalchemy.orm import Session, aliased

from .base import CRUDBase
from cems.models.event import Event
from cems.models.registration import EventRegistration
from cems.models.user import User
from cems.models.venue import Venue
from cems.schemas.registration import AttendanceUpdate, FeedbackCreate


class CRUDRegistration(CRUDBase[EventRegistration, FeedbackCreate, AttendanceUpdate]):
    def get_by_event_and_student(
        self, db: Session, *, event_id: str, student_id: str
    ) -> Optional[EventRegistration]:
        return (
            db.query(self.model)
            .filter(
                self.model.event_id == event_id, self.model.student_id == student_id
            )
            .first()
        )

    def count_by_event(self, db: Session, *, event_id: str) -> int:
        return db.query(self.model).filter(self.model.event_id == event_id).count()

    def count_by_student(self, db: Session, *, student_id: str) -> int:
        return db.query(self.model).filter(self.model.student_id == student_id).count()

    def add_pending(
        self,
        db: Session,
        *,
        event_id: str,
        student_id: str,
        qr_code: str,
        registration_date: datetime,
    ) -> EventRegistration:
        """
        Stages a new registration and flushes it so the unique constraint is
        checked now. The caller owns the commit.
        """
        db_obj = self.model(
            event_id=event_id,
            student_id=student_id,
            qr_code=qr_code,
            status="registered",
            registration_date=registration_date,
        )
        db.add(db_obj)
        db.flush()
        return db_obj

    def get_multi_by_student(
        self,
        db: Session,
        *,
        student_id: str,
        today: date,
        status_filter: str = "all",
        skip: int = 0,
        limit: int = 10,
    ) -> Tuple[List[dict], int]:
        """
        A student's registrations joined with event, venue and organizer.
        'upcoming' and 'past' compare the event date with today.
        """
        organizer = aliased(User)
        query = (
            db.query(
                self.model,
                Event,
                Venue.name.label("venue_name"),
                Venue.location.label("venue_location"),
                organizer.first_name.label("organizer_first_name"),
                organizer.last_name.label("organizer_last_name"),
            )
            .join(Event, Event.id == self.model.event_id)
            .join(Venue, Venue.id == Event.venue_id)
            .join(organizer, organizer.id == Event.organizer_id)
            .filter(self.model.student_id == student_id)
        )
        if status_filter == "upcoming":
            query = query.filter(Event.event_date >= today)
        elif status_filter == "past":
            query = query.filter(Event.event_date < today)

        total = query.count()
        rows = (
            query.order_by(Event.event_date.desc(), Event.start_time.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

        results = []
        for reg, evt, venue_name, venue_location, org_first, org_last in rows:
            results.append(
                {
                    "id": reg.id,
                    "status": reg.status,
                    "registration_date": reg.registration_date,
                    "feedback_rating": reg.feedback_rating,
                    "feedback_text": reg.feedback_text,
                    "event_id": evt.id,
                    "title": evt.title,
                    "description": evt.description,
                    "event_date": evt.event_date,
                    "start_time": evt.start_time,
                    "end_time": evt.end_time,
                    "event_status": evt.status,
                    "banner_image": evt.banner_image,
                    "venue_name": venue_name,
                    "venue_location": venue_location,
                    "organizer_first_name": org_first,
                    "organizer_last_name": org_last,
                }
            )
        return results, total

    def get_multi_by_event(
        self, db: Session, *, event_id: str, skip: int = 0, limit: int = 10
    ) -> Tuple[List[dict], int]:
        """Registrants of an event with their profile fields, newest first."""
        query = (
            db.query(self.model, User)
            .join(User, User.id == self.model.student_id)
            .filter(self.model.event_id == event_id)
        )
        total = query.count()
        rows = (
            query.order_by(self.model.registration_date.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        return [_registrant_dict(reg, student) for reg, student in rows], total

    def get_all_by_event(self, db: Session, *, event_id: str) -> List[dict]:
        rows = (
            db.query(self.model, User)
            .join(User, User.id == self.model.student_id)
            .filter(self.model.event_id == event_id)
            .order_by(User.last_name.asc(), User.first_name.asc())
            .all()
        )
        return [_registrant_dict(reg, student) for reg, student in rows]

    def get_student_ids_by_event(self, db: Session, *, event_id: str) -> List[str]:
        rows = db.query(self.model.student_id).filter(self.model.event_id == event_id).all()
        return [row[0] for row in rows]

    def set_feedback_once(
        self,
        db: Session,
        *,
        registration_id: str,
        rating: int,
        text: Optional[str],
        submitted_at: datetime,
    ) -> bool:
        """
        Records feedback only if none exists yet. Returns False when another
        submission got there first.
        """
        result = db.execute(
            update(self.model)
            .where(
                self.model.id == registration_id,
                self.model.feedback_rating.is_(None),
            )
            .values(
                feedback_rating=rating,
                feedback_text=text,
                feedback_date=submitted_at,
            )
        )
        return result.rowcount == 1


def _registrant_dict(reg: EventRegistration, student: User) -> dict:
    return {
        "id": reg.id,
        "status": reg.status,
        "registration_date": reg.registration_date,
        "attendance_marked_at": reg.attendance_marked_at,
        "feedback_rating": reg.feedback_rating,
        "feedback_text": reg.feedback_text,
        "student_id": student.id,
        "first_name": student.first_name,
        "last_name": student.last_name,
        "email": student.email,
        "student_number": student.student_id,
        "department": student.department,
        "phone": student.phone,
    }


registration = CRUDRegistration(EventRegistration)
