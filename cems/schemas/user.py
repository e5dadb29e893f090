# cems/schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from cems.constants.status import UserRole
from cems.schemas.common import Pagination


class UserBase(BaseModel):
    email: EmailStr = Field(..., json_schema_extra={"example": "jane.doe@campus.edu"})
    first_name: str = Field(
        ..., min_length=2, max_length=100, alias="firstName",
        json_schema_extra={"example": "Jane"},
    )
    last_name: str = Field(
        ..., min_length=2, max_length=100, alias="lastName",
        json_schema_extra={"example": "Doe"},
    )
    student_id: Optional[str] = Field(None, max_length=50, alias="studentId")
    department: Optional[str] = Field(None, max_length=100)
    phone: Optional[str] = Field(None, max_length=30, pattern=r"^\+?[0-9 ()\-]{7,20}$")

    model_config = {"populate_by_name": True}


class UserCreate(UserBase):
    role: UserRole = UserRole.student


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=2, max_length=100, alias="firstName")
    last_name: Optional[str] = Field(None, min_length=2, max_length=100, alias="lastName")
    phone: Optional[str] = Field(None, max_length=30, pattern=r"^\+?[0-9 ()\-]{7,20}$")
    department: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = Field(None, alias="isActive")

    model_config = {"populate_by_name": True}


class UserRoleUpdate(BaseModel):
    role: UserRole


class User(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    student_id: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    user: User


class UserListResponse(BaseModel):
    success: bool = True
    users: List[User]
    pagination: Pagination


class StudentStats(BaseModel):
    total_registrations: int = 0
    attended_events: int = 0
    past_events: int = 0
    upcoming_events: int = 0
    average_rating: float = 0


class OrganizerStats(BaseModel):
    total_events: int = 0
    approved_events: int = 0
    pending_events: int = 0
    completed_events: int = 0
    total_participants: int = 0
    average_rating: float = 0


class UserStatsResponse(BaseModel):
    success: bool = True
    stats: dict
