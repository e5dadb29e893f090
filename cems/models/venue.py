# cems/models/venue.py
import uuid
from sqlalchemy import Column, String, Integer, Text, Boolean, DateTime, CheckConstraint, text
from sqlalchemy.sql import func
from cems.db.base_class import Base


class Venue(Base):
    __tablename__ = "venues"

    id = Column(
        String, primary_key=True, default=lambda: f"ven_{uuid.uuid4().hex[:12]}"
    )
    name = Column(String(255), nullable=False, index=True)
    location = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=False)
    facilities = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("capacity > 0", name="ck_venue_capacity_positive"),
    )
