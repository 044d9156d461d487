# schemas.py (Pydantic v2) - request bodies and the response shapes routes declare as response_model
from datetime import datetime
from typing import Annotated, Any, Dict, Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from models.JoinRequest import RequestStatus
from models.Trip import TripStatus
from utils.dates import iso

TravelMode = Literal["Bus", "Train", "Flight", "Car", "Bike", "Other"]
TripType = Literal["Adventure", "Leisure", "Cultural", "Business", "Educational", "Other"]
TripStatusValue = Literal["upcoming", "ongoing", "completed", "cancelled"]
StudyYear = Literal["", "1st Year", "2nd Year", "3rd Year", "4th Year", "5th Year", "Alumni"]

# SQLite hands back naive datetimes; always emit UTC with a trailing Z
UtcDatetime = Annotated[datetime, PlainSerializer(iso, return_type=str)]

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Accepts both the camelCase keys the web client sends and snake_case."""
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)


class ReadModel(BaseModel):
    """Built from ORM rows, written out in camelCase."""
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


# ---------- Envelopes ----------
class Envelope(BaseModel, Generic[DataT]):
    success: bool = True
    data: DataT


class ListEnvelope(BaseModel, Generic[DataT]):
    success: bool = True
    count: int
    data: List[DataT]


EmptyEnvelope = Envelope[Dict[str, Any]]


# ---------- Auth ----------
class RegisterWrite(CamelModel):
    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6)
    branch: str = Field(default="", max_length=100)
    year: StudyYear = ""

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower().strip()


class LoginWrite(CamelModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower().strip()


class PasswordUpdate(CamelModel):
    current_password: str = Field(alias="currentPassword", min_length=1)
    new_password: str = Field(alias="newPassword", min_length=6)


# ---------- Users ----------
class UserUpdate(CamelModel):
    """Partial update for users"""
    name: Optional[str] = Field(default=None, min_length=2, max_length=50)
    branch: Optional[str] = Field(default=None, max_length=100)
    year: Optional[StudyYear] = None
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = Field(default=None, max_length=500)


class UserSummary(ReadModel):
    id: int
    name: str
    email: str
    avatar: Optional[str] = None


class UserRead(UserSummary):
    branch: str = ""
    year: str = ""
    bio: str = ""
    created_at: Optional[UtcDatetime] = None


class UserStats(ReadModel):
    trips_created: int
    trips_joined: int
    trips_completed: int
    total_trips: int


class TokenEnvelope(Envelope[UserRead]):
    token: str


# ---------- Trips ----------
class TripWrite(CamelModel):
    title: str = Field(min_length=3, max_length=100)
    description: str = Field(min_length=10, max_length=1000)
    destination: str = Field(min_length=2, max_length=100)
    start_date: datetime = Field(alias="startDate")
    end_date: datetime = Field(alias="endDate")
    max_participants: int = Field(alias="maxParticipants", ge=2, le=50)
    estimated_cost: float = Field(default=0, alias="estimatedCost", ge=0)
    mode: TravelMode = "Bus"
    trip_type: TripType = Field(default="Leisure", alias="type")

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class TripUpdate(CamelModel):
    """Partial update; organizer, participants and the seat counter are not editable here"""
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, min_length=10, max_length=1000)
    destination: Optional[str] = Field(default=None, min_length=2, max_length=100)
    start_date: Optional[datetime] = Field(default=None, alias="startDate")
    end_date: Optional[datetime] = Field(default=None, alias="endDate")
    max_participants: Optional[int] = Field(default=None, alias="maxParticipants", ge=2, le=50)
    estimated_cost: Optional[float] = Field(default=None, alias="estimatedCost", ge=0)
    mode: Optional[TravelMode] = None
    trip_type: Optional[TripType] = Field(default=None, alias="type")
    status: Optional[TripStatusValue] = None


class TripSummary(ReadModel):
    id: int
    title: str
    destination: str
    start_date: UtcDatetime
    end_date: UtcDatetime
    # derived from the dates, not the stored column
    status: TripStatus = Field(validation_alias="current_status")
    organizer: Optional[UserSummary] = None


class TripRead(ReadModel):
    id: int
    title: str
    description: str
    destination: str
    start_date: UtcDatetime
    end_date: UtcDatetime
    max_participants: int
    current_participants: int
    estimated_cost: float
    mode: str
    trip_type: str = Field(validation_alias="trip_type", serialization_alias="type")
    status: TripStatus = Field(validation_alias="current_status")
    is_full: bool
    available_seats: int
    organizer: Optional[UserRead] = None
    participants: List[UserSummary] = []
    created_at: Optional[UtcDatetime] = None
    updated_at: Optional[UtcDatetime] = None


class TripStats(ReadModel):
    total_trips: int
    total_participants: int
    average_cost_per_person: int


class TripPage(ListEnvelope[TripRead]):
    total: int
    page: int
    pages: int


class UserProfileRead(UserRead):
    trips_created: List[TripSummary] = []
    trips_joined: List[TripSummary] = []


# ---------- Join Requests ----------
class JoinRequestWrite(CamelModel):
    trip_id: int = Field(alias="tripId")
    message: str = Field(min_length=1, max_length=500)


class JoinRequestRead(ReadModel):
    id: int
    trip_id: int
    user_id: int
    message: str
    status: RequestStatus
    created_at: Optional[UtcDatetime] = None
    responded_at: Optional[UtcDatetime] = None
    user: Optional[UserRead] = None


class JoinRequestWithTrip(JoinRequestRead):
    trip: Optional[TripSummary] = None


class TripDetail(TripRead):
    join_requests: List[JoinRequestRead] = []


# ---------- Messages ----------
class MessageWrite(CamelModel):
    trip: int
    content: str = Field(min_length=1, max_length=1000)


class MessageRead(ReadModel):
    id: int
    trip: int = Field(validation_alias="trip_id", serialization_alias="trip")
    sender: Optional[UserSummary] = None
    content: str
    created_at: Optional[UtcDatetime] = None
