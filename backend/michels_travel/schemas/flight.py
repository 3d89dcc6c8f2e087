from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, model_validator

TravelClass = Literal["ECONOMY", "PREMIUM_ECONOMY", "BUSINESS", "FIRST"]
DepartureWindow = Literal["early_morning", "morning", "afternoon", "evening"]


class FlightSearchRequest(BaseModel):
    origin: str = Field(min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$")
    destination: str = Field(min_length=3, max_length=3, pattern=r"^[A-Za-z]{3}$")
    departure_date: date
    return_date: date | None = None
    adults: int = Field(default=1, ge=1, le=9)
    children: int = Field(default=0, ge=0, le=9)
    infants: int = Field(default=0, ge=0, le=9)
    travel_class: TravelClass | None = None
    non_stop: bool = False
    max_price: int | None = Field(default=None, gt=0)

    # Result filters
    max_stops: int | None = Field(default=None, ge=0, le=3)
    airlines: list[str] | None = None
    min_price: float | None = Field(default=None, ge=0)
    departure_windows: list[DepartureWindow] | None = None
    max_duration_minutes: int | None = Field(default=None, gt=0)
    sort_by: Literal["price", "duration", "departure", "arrival", "stops"] = "price"
    sort_order: Literal["asc", "desc"] = "asc"

    @model_validator(mode="after")
    def check_itinerary(self):
        if self.origin.upper() == self.destination.upper():
            raise ValueError("Origin and destination must differ")
        if self.return_date and self.return_date < self.departure_date:
            raise ValueError("Return date cannot be before departure date")
        if self.infants > self.adults:
            raise ValueError("Each infant must travel with an adult")
        return self
