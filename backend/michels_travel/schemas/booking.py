from datetime import date
from typing import Literal

from pydantic import BaseModel, EmailStr, Field

from michels_travel.schemas.flight import TravelClass


class PassengerInput(BaseModel):
    passenger_type: Literal["adult", "child", "infant"] = "adult"
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    date_of_birth: date | None = None
    passport_number: str | None = Field(default=None, max_length=50)
    nationality: str | None = Field(default=None, min_length=2, max_length=2)


class BookingCreateRequest(BaseModel):
    flight_offer: dict
    origin: str = Field(min_length=3, max_length=3)
    origin_name: str | None = None
    destination: str = Field(min_length=3, max_length=3)
    destination_name: str | None = None
    departure_date: date
    return_date: date | None = None
    adults: int = Field(default=1, ge=1, le=9)
    children: int = Field(default=0, ge=0, le=9)
    infants: int = Field(default=0, ge=0, le=9)
    travel_class: TravelClass = "ECONOMY"
    total_amount: int  # cents, before the booking fee
    currency: str = Field(default="USD", min_length=3, max_length=3)
    contact_email: EmailStr
    contact_phone: str | None = Field(default=None, max_length=32)
    special_requests: str | None = Field(default=None, max_length=2000)
    passengers: list[PassengerInput] = Field(min_length=1, max_length=18)


class BookingStatusUpdate(BaseModel):
    status: Literal["paid", "confirmed", "completed", "cancelled"]


class RefundRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=192)
