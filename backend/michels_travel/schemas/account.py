import uuid
from datetime import date
from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator

Language = Literal["en", "pt", "es"]
CabinClass = Literal["ECONOMY", "PREMIUM_ECONOMY", "BUSINESS", "FIRST"]


def reject_null(value):
    """Partial updates may omit a required column but not blank it out."""
    if value is None:
        raise ValueError("may not be null")
    return value


class ProfileUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=2, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    preferred_language: Language | None = None
    preferred_currency: str | None = Field(default=None, min_length=3, max_length=3)
    email_notifications: bool | None = None
    price_alert_notifications: bool | None = None
    marketing_emails: bool | None = None

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class TravelerBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    date_of_birth: date | None = None
    gender: Literal["male", "female", "other"] | None = None
    nationality: str | None = Field(default=None, min_length=2, max_length=2)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=32)
    document_type: Literal["passport", "national_id", "drivers_license"] | None = None
    document_number: str | None = Field(default=None, max_length=50)
    document_country: str | None = Field(default=None, min_length=2, max_length=2)
    document_expiry: date | None = None
    seat_preference: Literal["window", "aisle", "middle", "no_preference"] = "no_preference"
    meal_preference: Literal[
        "regular", "vegetarian", "vegan", "halal", "kosher", "gluten_free", "diabetic", "no_preference"
    ] = "regular"
    special_assistance: str | None = Field(default=None, max_length=2000)
    relationship: Literal["self", "spouse", "child", "parent", "sibling", "friend", "colleague", "other"] = "self"
    is_primary: bool = False


class TravelerCreate(TravelerBase):
    pass


class TravelerUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    middle_name: str | None = None
    date_of_birth: date | None = None
    gender: Literal["male", "female", "other"] | None = None
    nationality: str | None = Field(default=None, min_length=2, max_length=2)
    email: EmailStr | None = None
    phone: str | None = None
    document_type: Literal["passport", "national_id", "drivers_license"] | None = None
    document_number: str | None = None
    document_country: str | None = Field(default=None, min_length=2, max_length=2)
    document_expiry: date | None = None
    seat_preference: Literal["window", "aisle", "middle", "no_preference"] | None = None
    meal_preference: Literal[
        "regular", "vegetarian", "vegan", "halal", "kosher", "gluten_free", "diabetic", "no_preference"
    ] | None = None
    special_assistance: str | None = None
    relationship: Literal["self", "spouse", "child", "parent", "sibling", "friend", "colleague", "other"] | None = None
    is_primary: bool | None = None

    @field_validator("first_name", "last_name", "seat_preference", "meal_preference", "relationship", "is_primary")
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)


class TravelerResponse(TravelerBase):
    id: uuid.UUID

    model_config = {"from_attributes": True}


class FrequentFlyerCreate(BaseModel):
    airline_code: str = Field(min_length=2, max_length=3)
    airline_name: str = Field(min_length=1, max_length=100)
    member_number: str = Field(min_length=1, max_length=50)
    tier_status: str | None = Field(default=None, max_length=50)
    traveler_profile_id: uuid.UUID | None = None


class FrequentFlyerUpdate(BaseModel):
    airline_name: str | None = Field(default=None, min_length=1, max_length=100)
    member_number: str | None = Field(default=None, min_length=1, max_length=50)
    tier_status: str | None = Field(default=None, max_length=50)

    @field_validator("airline_name", "member_number")
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)


class FrequentFlyerResponse(BaseModel):
    id: uuid.UUID
    airline_code: str
    airline_name: str
    member_number: str
    tier_status: str | None = None
    traveler_profile_id: uuid.UUID | None = None

    model_config = {"from_attributes": True}


class PreferencesUpdate(BaseModel):
    preferred_airlines: list[str] | None = None
    avoided_airlines: list[str] | None = None
    preferred_cabin_class: CabinClass | None = None
    max_stops: int | None = Field(default=None, ge=0, le=3)
    preferred_departure_time: Literal["early_morning", "morning", "afternoon", "evening", "any"] | None = None
    home_airports: list[str] | None = None
    preferred_alliances: list[str] | None = None
    budget_range: Literal["budget", "moderate", "premium", "luxury"] | None = None
    price_drop_threshold: int | None = Field(default=None, ge=1, le=50)


class PreferencesResponse(BaseModel):
    preferred_airlines: list[str] = []
    avoided_airlines: list[str] = []
    preferred_cabin_class: str = "ECONOMY"
    max_stops: int = 2
    preferred_departure_time: str = "any"
    home_airports: list[str] = []
    preferred_alliances: list[str] = []
    budget_range: str = "moderate"
    price_drop_threshold: int = 10

    model_config = {"from_attributes": True}
