# cems/crud/crud_user.py
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from .base import CRUDBase
from cems.constants.status import EventStatus, RegistrationStatus, UserRole
from cems.models.event import Event
from cems.models.registration import EventRegistration
from cems.models.user import User
from cems.schemas.user import UserCreate, UserUpdate

# Columns a caller may sort the user list by
SORTABLE_FIELDS = {
    "created_at",
    "first_name",
    "last_name",
    "email",
    "role",
    "department",
}


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    def get_by_email(self, db: Session, *, email: str) -> Optional[User]:
        return db.query(self.model).filter(func.lower(self.model.email) == email.lower()).first()

    def create(self, db: Session, *, obj_in: UserCreate) -> User:
        db_obj = self.model(
            email=obj_in.email.lower(),
            first_name=obj_in.first_name,
            last_name=obj_in.last_name,
            role=obj_in.role.value,
            student_id=obj_in.student_id,
            department=obj_in.department,
            phone=obj_in.phone,
            is_active=True,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_multi_filtered(
        self,
        db: Session,
        *,
        skip: int = 0,
        limit: int = 10,
        role: Optional[str] = None,
        email: Optional[str] = None,
        department: Optional[str] = None,
        student_id: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[User], int]:
        """
        Admin user listing. Admin accounts are never included.
        Unknown sort fields fall back to created_at.
        """
        query = db.query(self.model).filter(self.model.role != UserRole.admin.value)

        if role:
            query = query.filter(self.model.role == role)
        if email:
            query = query.filter(self.model.email.ilike(f"%{email}%"))
        if department:
            query = query.filter(self.model.department.ilike(f"%{department}%"))
        if student_id:
            query = query.filter(self.model.student_id.ilike(f"%{student_id}%"))
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    self.model.first_name.ilike(pattern),
                    self.model.last_name.ilike(pattern),
                    self.model.email.ilike(pattern),
                    self.model.student_id.ilike(pattern),
                )
            )

        total = query.count()

        if sort_by not in SORTABLE_FIELDS:
            sort_by = "created_at"
        sort_attr = getattr(self.model, sort_by)
        if sort_order.lower() == "asc":
            query = query.order_by(sort_attr.asc())
        else:
            query = query.order_by(sort_attr.desc())

        return query.offset(skip).limit(limit).all(), total

    def get_active_ids(self, db: Session, *, role: Optional[str] = None) -> List[str]:
        query = db.query(self.model.id).filter(self.model.is_active == True)  # noqa: E712
        if role:
            query = query.filter(self.model.role == role)
        return [row[0] for row in query.all()]

    def has_dependents(self, db: Session, *, user_id: str) -> bool:
        """True when the user organizes events or holds registrations."""
        owns_events = (
            db.query(Event.id).filter(Event.organizer_id == user_id).first() is not None
        )
        if owns_events:
            return True
        return (
            db.query(EventRegistration.id)
            .filter(EventRegistration.student_id == user_id)
            .first()
            is not None
        )

    def get_student_stats(self, db: Session, *, user_id: str, today) -> dict:
        base = (
            db.query(EventRegistration)
            .join(Event, Event.id == EventRegistration.event_id)
            .filter(EventRegistration.student_id == user_id)
        )
        avg_rating = (
            db.query(func.avg(EventRegistration.feedback_rating))
            .filter(
                EventRegistration.student_id == user_id,
                EventRegistration.feedback_rating.isnot(None),
            )
            .scalar()
        )
        return {
            "total_registrations": base.count(),
            "attended_events": base.filter(
                EventRegistration.status == RegistrationStatus.attended.value
            ).count(),
            "past_events": base.filter(Event.event_date < today).count(),
            "upcoming_events": base.filter(Event.event_date >= today).count(),
            "average_rating": round(float(avg_rating or 0), 2),
        }

    def get_organizer_stats(self, db: Session, *, user_id: str) -> dict:
        events = db.query(Event).filter(Event.organizer_id == user_id)

        def _count_status(status: EventStatus) -> int:
            return events.filter(Event.status == status.value).count()

        participants = (
            db.query(func.count(EventRegistration.id))
            .join(Event, Event.id == EventRegistration.event_id)
            .filter(Event.organizer_id == user_id)
            .scalar()
        )
        avg_rating = (
            db.query(func.avg(EventRegistration.feedback_rating))
            .join(Event, Event.id == EventRegistration.event_id)
            .filter(
                Event.organizer_id == user_id,
                EventRegistration.feedback_rating.isnot(None),
            )
            .scalar()
        )
        return {
            "total_events": events.count(),
            "approved_events": _count_status(EventStatus.approved),
            "pending_events": _count_status(EventStatus.pending),
            "completed_events": _count_status(EventStatus.completed),
            "total_participants": participants or 0,
            "average_rating": round(float(avg_rating or 0), 2),
        }


user = CRUDUser(User)
