from pydantic import BaseModel, Field
from typing import List, Optional
import datetime as dt


class VenueBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=255, json_schema_extra={"example": "Main Auditorium"})
    location: str = Field(..., min_length=5, max_length=255, json_schema_extra={"example": "Block A, Ground Floor"})
    capacity: int = Field(..., ge=1, json_schema_extra={"example": 300})
    facilities: Optional[str] = Field(None, json_schema_extra={"example": "Projector, PA system"})


class VenueCreate(VenueBase):
    pass


class VenueUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    location: Optional[str] = Field(None, min_length=5, max_length=255)
    capacity: Optional[int] = Field(None, ge=1)
    facilities: Optional[str] = None
    is_active: Optional[bool] = Field(None, alias="isActive")

    model_config = {"populate_by_name": True}


class Venue(VenueBase):
    id: str
    is_active: bool

    model_config = {"from_attributes": True}


class VenueResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    venue: Venue


class VenueListResponse(BaseModel):
    success: bool = True
    venues: List[Venue]


class BookedSlot(BaseModel):
    title: str
    start_time: dt.time
    end_time: dt.time
    status: str

    model_config = {"from_attributes": True}


class VenueAvailabilityResponse(BaseModel):
    success: bool = True
    venue: Venue
    date: dt.date
    events: List[BookedSlot]
