# cems/models/notification.py
import uuid
from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, text
from sqlalchemy.sql import func
from cems.db.base_class import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(
        String, primary_key=True, default=lambda: f"ntf_{uuid.uuid4().hex[:12]}"
    )
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, default="info")  # info, success, warning, error
    is_read = Column(Boolean, nullable=False, default=False, server_default=text("false"))
    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)
