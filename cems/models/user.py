# cems/models/user.py
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, text
from sqlalchemy.sql import func
from cems.db.base_class import Base


class User(Base):
    __tablename__ = "users"

    id = Column(
        String, primary_key=True, default=lambda: f"usr_{uuid.uuid4().hex[:12]}"
    )
    email = Column(String(255), nullable=False, unique=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default="student", index=True)
    student_id = Column(String(50), nullable=True, index=True)
    department = Column(String(100), nullable=True)
    phone = Column(String(30), nullable=True)
    # Users are deactivated, never hard-deleted while they own events or registrations.
    is_active = Column(Boolean, nullable=False, default=True, server_default=text("true"))
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
