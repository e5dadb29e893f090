#cems/api/v1/endpoints/users.py
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from cems.api import deps
from cems.constants.status import UserRole
from cems.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from cems.core.permissions import can_access_user, is_admin
from cems.crud import crud_user
from cems.db.session import get_db
from cems.schemas.common import MessageResponse, build_pagination, page_offset
from cems.schemas.token import TokenPayload
from cems.schemas.user import (
    UserCreate,
    UserListResponse,
    UserResponse,
    UserRoleUpdate,
    UserStatsResponse,
    UserUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])

admin_only = deps.require_roles(UserRole.admin)


def _get_accessible_user(db: Session, user_id: str, current_user: TokenPayload):
    if not can_access_user(current_user, user_id):
        raise ForbiddenError("Access denied")
    user = crud_user.user.get(db, id=user_id)
    if not user:
        raise NotFoundError("User not found")
    return user


@router.get("", response_model=UserListResponse)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    role: Optional[UserRole] = None,
    email: Optional[str] = None,
    department: Optional[str] = None,
    student_id: Optional[str] = None,
    search: Optional[str] = None,
    sort_by: str = "created_at",
    sort_dir: str = "desc",
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    users, total = crud_user.user.get_multi_filtered(
        db,
        skip=page_offset(page, limit),
        limit=limit,
        role=role.value if role else None,
        email=email,
        department=department,
        student_id=student_id,
        search=search,
        sort_by=sort_by,
        sort_order=sort_dir,
    )
    return {"users": users, "pagination": build_pagination(page, limit, total)}


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    """
    Create the account record for a user. Credentials are managed by the
    identity provider that issues tokens.
    """
    if crud_user.user.get_by_email(db, email=user_in.email):
        raise ConflictError("A user with this email already exists")
    user = crud_user.user.create(db, obj_in=user_in)
    logger.info(f"User {user.id} ({user.role}) created by {current_user.sub}")
    return {"message": "User created successfully", "user": user}


@router.get("/{userId}", response_model=UserResponse)
def get_user(
    userId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    return {"user": _get_accessible_user(db, userId, current_user)}


@router.put("/{userId}", response_model=UserResponse)
def update_user(
    userId: str,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    user = _get_accessible_user(db, userId, current_user)

    update_data = user_in.model_dump(exclude_unset=True)
    if "is_active" in update_data and not is_admin(current_user):
        raise ForbiddenError("Only admins can change account status")
    if update_data.get("is_active") is None:
        update_data.pop("is_active", None)

    user = crud_user.user.update(db, db_obj=user, obj_in=update_data)
    return {"message": "User updated successfully", "user": user}


@router.delete("/{userId}", response_model=MessageResponse)
def delete_user(
    userId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    if userId == current_user.sub:
        raise ConflictError("You cannot delete your own account")
    user = crud_user.user.get(db, id=userId)
    if not user:
        raise NotFoundError("User not found")
    if crud_user.user.has_dependents(db, user_id=userId):
        raise ConflictError(
            "User has events or registrations. Deactivate the account instead"
        )

    crud_user.user.remove(db, id=userId)
    logger.info(f"User {userId} deleted by {current_user.sub}")
    return {"message": "User deleted successfully"}


@router.get("/{userId}/stats", response_model=UserStatsResponse)
def get_user_stats(
    userId: str,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(deps.get_current_user),
):
    user = _get_accessible_user(db, userId, current_user)
    if user.role == UserRole.student.value:
        stats = crud_user.user.get_student_stats(
            db, user_id=userId, today=datetime.now().date()
        )
    else:
        stats = crud_user.user.get_organizer_stats(db, user_id=userId)
    return {"stats": stats}


@router.put("/{userId}/role", response_model=UserResponse)
def update_user_role(
    userId: str,
    body: UserRoleUpdate,
    db: Session = Depends(get_db),
    current_user: TokenPayload = Depends(admin_only),
):
    if userId == current_user.sub:
        raise ConflictError("You cannot change your own role")
    user = crud_user.user.get(db, id=userId)
    if not user:
        raise NotFoundError("User not found")

    user = crud_user.user.update(db, db_obj=user, obj_in={"role": body.role.value})
    logger.info(f"User {userId} role changed to {body.role.value} by {current_user.sub}")
    return {"message": "User role updated successfully", "user": user}
