# cems/schemas/event.py
import re
from datetime import date, datetime, time
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from cems.schemas.common import Pagination

_DMY_DATE = re.compile(r"^(\d{2})-(\d{2})-(\d{4})(T.*)?$")


def _normalize_dmy(value):
    """Accept DD-MM-YYYY (optionally with a THH:MM suffix) besides ISO dates."""
    if isinstance(value, str):
        match = _DMY_DATE.match(value.strip())
        if match:
            d, m, y, rest = match.groups()
            return f"{y}-{m}-{d}{rest or ''}"
    return value


class EventBase(BaseModel):
    title: str = Field(
        ..., min_length=5, max_length=255,
        json_schema_extra={"example": "Annual Tech Symposium"},
    )
    description: str = Field(
        ..., min_length=20,
        json_schema_extra={"example": "A full day of talks and workshops on campus."},
    )
    event_date: date = Field(..., alias="eventDate")
    start_time: time = Field(..., alias="startTime", json_schema_extra={"example": "09:00"})
    end_time: time = Field(..., alias="endTime", json_schema_extra={"example": "17:00"})
    venue_id: str = Field(..., alias="venueId")
    capacity: int = Field(..., ge=1)
    registration_deadline: Optional[datetime] = Field(None, alias="registrationDeadline")
    banner_image: Optional[str] = Field(None, alias="bannerImage", max_length=255)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @field_validator("event_date", "registration_deadline", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _normalize_dmy(v)


class EventCreate(EventBase):
    @model_validator(mode="after")
    def check_time_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=5, max_length=255)
    description: Optional[str] = Field(None, min_length=20)
    event_date: Optional[date] = Field(None, alias="eventDate")
    start_time: Optional[time] = Field(None, alias="startTime")
    end_time: Optional[time] = Field(None, alias="endTime")
    venue_id: Optional[str] = Field(None, alias="venueId")
    capacity: Optional[int] = Field(None, ge=1)
    registration_deadline: Optional[datetime] = Field(None, alias="registrationDeadline")
    banner_image: Optional[str] = Field(None, alias="bannerImage", max_length=255)

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}

    @field_validator("event_date", "registration_deadline", mode="before")
    @classmethod
    def normalize_dates(cls, v):
        return _normalize_dmy(v)


class EventStatusUpdate(BaseModel):
    status: Literal["approved", "rejected"]
    admin_notes: Optional[str] = Field(None, alias="adminNotes")

    model_config = {"populate_by_name": True, "str_strip_whitespace": True}


class EventCancel(BaseModel):
    reason: str = Field(..., min_length=10)

    model_config = {"str_strip_whitespace": True}


class Event(BaseModel):
    id: str
    title: str
    description: str
    event_date: date
    start_time: time
    end_time: time
    capacity: int
    status: str
    venue_id: str
    venue_name: Optional[str] = None
    venue_location: Optional[str] = None
    venue_capacity: Optional[int] = None
    organizer_id: str
    organizer_first_name: Optional[str] = None
    organizer_last_name: Optional[str] = None
    registered_count: int = 0
    banner_image: Optional[str] = None
    registration_deadline: Optional[datetime] = None
    admin_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class EventDetail(Event):
    facilities: Optional[str] = None
    organizer_email: Optional[str] = None
    isRegistered: bool = False


class EventListResponse(BaseModel):
    success: bool = True
    events: List[Event]
    pagination: Optional[Pagination] = None


class EventDetailResponse(BaseModel):
    success: bool = True
    event: EventDetail


class EventCreatedResponse(BaseModel):
    success: bool = True
    message: str
    eventId: str
    status: str


class EventUpdatedResponse(BaseModel):
    success: bool = True
    message: str
    event: Event
