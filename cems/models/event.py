# cems/models/event.py
import uuid
from datetime import datetime
from sqlalchemy import (
    Column,
    String,
    Integer,
    Text,
    Date,
    Time,
    DateTime,
    ForeignKey,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cems.db.base_class import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(
        String, primary_key=True, default=lambda: f"evt_{uuid.uuid4().hex[:12]}"
    )
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    event_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    capacity = Column(Integer, nullable=False)
    organizer_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    venue_id = Column(String, ForeignKey("venues.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="pending", index=True)
    banner_image = Column(String(255), nullable=True)
    registration_deadline = Column(DateTime, nullable=True)
    admin_notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    venue = relationship("Venue", lazy="joined", innerjoin=True)
    organizer = relationship("User", lazy="joined", innerjoin=True)
    registrations = relationship("EventRegistration", back_populates="event")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_event_capacity_positive"),
    )

    @property
    def starts_at(self) -> datetime:
        """The event's start instant: event_date combined with start_time."""
        return datetime.combine(self.event_date, self.start_time)
