# cems/crud/crud_dashboard.py
"""
Aggregate queries for the admin dashboard and analytics screens.
"""
from datetime import date, timedelta
from typing import Any, Dict, List

from sqlalchemy import case, func
from sqlalchemy.orm import Session

from cems.models.event import Event
from cems.models.registration import EventRegistration
from cems.models.user import User
from cems.models.venue import Venue


class CRUDDashboard:
    def get_totals(self, db: Session) -> Dict[str, int]:
        return {
            "totalUsers": db.query(func.count(User.id))
            .filter(User.is_active == True)  # noqa: E712
            .scalar() or 0,
            "totalEvents": db.query(func.count(Event.id)).scalar() or 0,
            "totalVenues": db.query(func.count(Venue.id))
            .filter(Venue.is_active == True)  # noqa: E712
            .scalar() or 0,
            "totalRegistrations": db.query(func.count(EventRegistration.id)).scalar() or 0,
        }

    def get_events_by_status(self, db: Session) -> List[Dict[str, Any]]:
        rows = db.query(Event.status, func.count(Event.id)).group_by(Event.status).all()
        return [{"status": status, "count": count} for status, count in rows]

    def get_users_by_role(self, db: Session) -> List[Dict[str, Any]]:
        rows = (
            db.query(User.role, func.count(User.id))
            .filter(User.is_active == True)  # noqa: E712
            .group_by(User.role)
            .all()
        )
        return [{"role": role, "count": count} for role, count in rows]

    def get_participation_trends(
        self, db: Session, *, today: date, period_days: int
    ) -> List[Dict[str, Any]]:
        """Registrations per event date over the last `period_days` days."""
        since = today - timedelta(days=period_days)
        rows = (
            db.query(Event.event_date, func.count(EventRegistration.id))
            .outerjoin(EventRegistration, EventRegistration.event_id == Event.id)
            .filter(Event.event_date >= since)
            .group_by(Event.event_date)
            .order_by(Event.event_date.asc())
            .all()
        )
        return [{"date": d.isoformat(), "registrations": count} for d, count in rows]

    def get_department_stats(self, db: Session) -> List[Dict[str, Any]]:
        registrations = func.count(EventRegistration.id).label("registrations")
        rows = (
            db.query(User.department, registrations)
            .select_from(EventRegistration)
            .join(User, User.id == EventRegistration.student_id)
            .filter(User.department.isnot(None))
            .group_by(User.department)
            .order_by(registrations.desc())
            .all()
        )
        return [{"department": dep, "registrations": count} for dep, count in rows]

    def get_feedback_stats(self, db: Session) -> Dict[str, Any]:
        avg_rating, total, positive = (
            db.query(
                func.avg(EventRegistration.feedback_rating),
                func.count(EventRegistration.feedback_rating),
                func.sum(case((EventRegistration.feedback_rating >= 4, 1), else_=0)),
            )
            .filter(EventRegistration.feedback_rating.isnot(None))
            .one()
        )
        return {
            "avg_rating": round(float(avg_rating), 2) if avg_rating is not None else None,
            "total_feedback": total or 0,
            "positive_feedback": int(positive or 0),
        }

    def get_venue_stats(self, db: Session) -> List[Dict[str, Any]]:
        event_count = func.count(Event.id).label("event_count")
        rows = (
            db.query(Venue.name, event_count, func.sum(Event.capacity))
            .outerjoin(Event, Event.venue_id == Venue.id)
            .filter(Venue.is_active == True)  # noqa: E712
            .group_by(Venue.id, Venue.name)
            .order_by(event_count.desc())
            .all()
        )
        return [
            {"name": name, "event_count": count, "total_capacity": int(capacity or 0)}
            for name, count, capacity in rows
        ]


dashboard = CRUDDashboard()
