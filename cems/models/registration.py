# cems/models/registration.py
import uuid
from sqlalchemy import (
    Column,
    String,
    Integer,
    Text,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from cems.db.base_class import Base


class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id = Column(
        String, primary_key=True, default=lambda: f"reg_{uuid.uuid4().hex[:12]}"
    )
    event_id = Column(String, ForeignKey("events.id"), nullable=False, index=True)
    student_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="registered")
    registration_date = Column(DateTime, nullable=False, server_default=func.now())

    # Signed ticket payload. This is the durable value a scanned pass is checked against.
    qr_code = Column(Text, nullable=False)

    attendance_marked_at = Column(DateTime, nullable=True)
    attendance_marked_by = Column(String, ForeignKey("users.id"), nullable=True)

    feedback_rating = Column(Integer, nullable=True)
    feedback_text = Column(Text, nullable=True)
    feedback_date = Column(DateTime, nullable=True)

    event = relationship("Event", back_populates="registrations")
    student = relationship("User", foreign_keys=[student_id])

    __table_args__ = (
        UniqueConstraint("event_id", "student_id", name="uq_registration_event_student"),
        CheckConstraint(
            "feedback_rating IS NULL OR (feedback_rating >= 1 AND feedback_rating <= 5)",
            name="ck_registration_feedback_rating",
        ),
    )
