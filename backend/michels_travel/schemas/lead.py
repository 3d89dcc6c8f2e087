from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator


class LeadCreate(BaseModel):
    type: Literal["booking", "quote", "contact"]
    name: str = Field(min_length=2, max_length=255)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    origin: str | None = Field(default=None, max_length=10)
    origin_name: str | None = None
    destination: str | None = Field(default=None, max_length=10)
    destination_name: str | None = None
    departure_date: str | None = Field(default=None, max_length=20)
    return_date: str | None = Field(default=None, max_length=20)
    adults: int | None = Field(default=None, ge=1, le=9)
    children: int | None = Field(default=None, ge=0, le=9)
    infants: int | None = Field(default=None, ge=0, le=9)
    travel_class: str | None = Field(default=None, max_length=20)
    flight_details: dict | None = None
    estimated_price: str | None = Field(default=None, max_length=50)
    message: str | None = Field(default=None, max_length=5000)
    preferred_language: Literal["en", "pt", "es"] = "en"

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class LeadStatusUpdate(BaseModel):
    status: Literal["new", "contacted", "converted", "closed"]
