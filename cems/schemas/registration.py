# cems/schemas/registration.py
from datetime import date, datetime, time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from cems.constants.status import RegistrationStatus
from cems.schemas.common import Pagination


class AttendanceUpdate(BaseModel):
    status: Literal["attended", "absent"]


class FeedbackCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5, json_schema_extra={"example": 5})
    feedback: Optional[str] = Field(None, max_length=2000)

    model_config = {"str_strip_whitespace": True}


class CheckInRequest(BaseModel):
    token: str = Field(..., min_length=10)


class Registration(BaseModel):
    id: str
    event_id: str
    student_id: str
    status: RegistrationStatus
    registration_date: Optional[datetime] = None
    attendance_marked_at: Optional[datetime] = None
    feedback_rating: Optional[int] = None
    feedback_text: Optional[str] = None
    feedback_date: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PassEvent(BaseModel):
    id: str
    title: str
    date: date
    startTime: time
    endTime: time
    venue: Optional[str] = None
    location: Optional[str] = None


class PassUser(BaseModel):
    id: str
    firstName: str
    lastName: str
    email: str
    studentId: Optional[str] = None


class RegistrationPass(BaseModel):
    """What a student gets back after registering or re-fetching the pass."""

    registrationId: str
    event: PassEvent
    user: PassUser
    qrImage: Optional[str] = None
    qrFileUrl: Optional[str] = None
    pdfFileUrl: Optional[str] = None


class RegistrationPassResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    registrationPass: RegistrationPass


class MyRegistration(BaseModel):
    id: str
    status: RegistrationStatus
    registration_date: Optional[datetime] = None
    feedback_rating: Optional[int] = None
    feedback_text: Optional[str] = None
    event_id: str
    title: str
    description: Optional[str] = None
    event_date: date
    start_time: time
    end_time: time
    event_status: str
    banner_image: Optional[str] = None
    venue_name: Optional[str] = None
    venue_location: Optional[str] = None
    organizer_first_name: Optional[str] = None
    organizer_last_name: Optional[str] = None


class MyRegistrationListResponse(BaseModel):
    success: bool = True
    registrations: List[MyRegistration]
    pagination: Pagination


class EventRegistrant(BaseModel):
    id: str
    status: RegistrationStatus
    registration_date: Optional[datetime] = None
    attendance_marked_at: Optional[datetime] = None
    feedback_rating: Optional[int] = None
    feedback_text: Optional[str] = None
    student_id: str
    first_name: str
    last_name: str
    email: str
    student_number: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None


class EventRegistrantListResponse(BaseModel):
    success: bool = True
    registrations: List[EventRegistrant]
    pagination: Pagination


class AttendanceResponse(BaseModel):
    success: bool = True
    message: str
    registration: Registration
