import uuid

from sqlalchemy.orm import Session

from cems.constants.status import UserRole
from cems.crud import crud_user
from cems.models.user import User
from cems.schemas.user import UserCreate


def create_random_user(
    db: Session,
    role: UserRole = UserRole.student,
    department: str | None = "Computer Science",
) -> User:
    """
    Creates a dummy user for testing purposes.
    """
    suffix = uuid.uuid4().hex[:8]
    user_in = UserCreate(
        email=f"{role.value}.{suffix}@campus.edu",
        firstName="Test",
        lastName=f"User{suffix}",
        studentId=f"S{suffix}" if role == UserRole.student else None,
        department=department,
        role=role,
    )
    return crud_user.user.create(db, obj_in=user_in)
