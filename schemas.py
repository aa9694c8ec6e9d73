from datetime import date, datetime, time, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_serializer
from pydantic.alias_generators import to_camel

from models import BookingStatus


class ApiModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RegisterRequest(ApiModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(ApiModel):
    email: Optional[str] = None
    password: Optional[str] = None


class UserOut(ApiModel):
    id: int
    name: str
    email: str


class CurrentUser(ApiModel):
    """Identity carried inside a bearer token."""

    id: int
    email: str
    name: str


class AuthResponse(ApiModel):
    message: str
    token: str
    user: UserOut


class FlightOut(ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    flight_number: str
    origin: str
    destination: str
    departure_date: date
    departure_time: time
    arrival_time: time
    price: float
    available_seats: int
    airline: str

    @field_serializer("departure_time", "arrival_time")
    def serialize_time(self, value: time) -> str:
        return value.strftime("%H:%M")


class BookingCreate(ApiModel):
    # Presence and range are checked by the ledger so the messages stay uniform.
    # Strict so that JSON booleans are not read as 0 or 1.
    flight_id: Optional[StrictInt] = None
    passengers: Optional[StrictInt] = None


class BookingUpdate(ApiModel):
    passengers: Optional[StrictInt] = None


class BookingOut(ApiModel):
    model_config = ConfigDict(frozen=True)

    id: int
    user_id: int
    flight_id: int
    passengers: int
    total_price: float
    status: BookingStatus
    created_at: datetime

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        # SQLite drops the offset; stored values are UTC.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        stamp = value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
        return stamp.replace("+00:00", "Z")


class BookingDetail(BookingOut):
    """A booking joined with a snapshot of its flight."""

    flight: FlightOut


class BookingResponse(ApiModel):
    message: str
    booking: BookingDetail


class CancellationResponse(ApiModel):
    message: str
    booking: BookingOut


class ErrorResponse(ApiModel):
    error: str
    available_seats: Optional[int] = None


class RootResponse(ApiModel):
    message: str
    documentation: str
    endpoints: dict = Field(default_factory=dict)
