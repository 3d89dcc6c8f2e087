from datetime import date

from pydantic import BaseModel, Field, field_validator, model_validator

from michels_travel.schemas.account import CabinClass, reject_null

IATA_PATTERN = r"^[A-Za-z]{3}$"


class PriceAlertCreate(BaseModel):
    origin: str = Field(pattern=IATA_PATTERN)
    origin_name: str | None = None
    destination: str = Field(pattern=IATA_PATTERN)
    destination_name: str | None = None
    departure_date_start: date | None = None
    departure_date_end: date | None = None
    return_date_start: date | None = None
    return_date_end: date | None = None
    is_flexible_dates: bool = False
    adults: int = Field(default=1, ge=1, le=9)
    children: int = Field(default=0, ge=0, le=9)
    infants: int = Field(default=0, ge=0, le=9)
    cabin_class: CabinClass = "ECONOMY"
    target_price: int = Field(gt=0)  # cents
    current_price: int | None = Field(default=None, gt=0)  # cents
    currency: str = Field(default="USD", min_length=3, max_length=3)

    @model_validator(mode="after")
    def check_dates(self):
        if self.departure_date_start and self.departure_date_end and self.departure_date_end < self.departure_date_start:
            raise ValueError("departure_date_end must be on or after departure_date_start")
        return self


class PriceAlertUpdate(BaseModel):
    target_price: int | None = Field(default=None, gt=0)
    departure_date_start: date | None = None
    departure_date_end: date | None = None
    return_date_start: date | None = None
    return_date_end: date | None = None
    is_flexible_dates: bool | None = None
    cabin_class: CabinClass | None = None
    is_active: bool | None = None

    @field_validator("target_price", "is_flexible_dates", "cabin_class", "is_active")
    @classmethod
    def required_columns(cls, v):
        return reject_null(v)


class SavedRouteCreate(BaseModel):
    origin: str = Field(pattern=IATA_PATTERN)
    origin_name: str | None = None
    destination: str = Field(pattern=IATA_PATTERN)
    destination_name: str | None = None
    preferred_cabin_class: CabinClass | None = None
    typical_travelers: dict | None = None
    nickname: str | None = Field(default=None, max_length=100)


class SearchHistoryCreate(BaseModel):
    origin: str = Field(pattern=IATA_PATTERN)
    origin_name: str | None = None
    destination: str = Field(pattern=IATA_PATTERN)
    destination_name: str | None = None
    departure_date: date
    return_date: date | None = None
    adults: int = Field(default=1, ge=1, le=9)
    children: int = Field(default=0, ge=0, le=9)
    infants: int = Field(default=0, ge=0, le=9)
    cabin_class: CabinClass | None = None
    results_count: int | None = Field(default=None, ge=0)
    lowest_price_found: int | None = Field(default=None, ge=0)
