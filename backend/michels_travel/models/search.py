"""Search models: provider search log, per-user history, saved routes, popular destinations."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from michels_travel.database import Base, JSONType, utcnow


class FlightSearch(Base):
    __tablename__ = "flight_searches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="SET NULL")
    )
    origin: Mapped[str] = mapped_column(String(10), nullable=False)
    destination: Mapped[str] = mapped_column(String(10), nullable=False)
    departure_date: Mapped[str] = mapped_column(String(20), nullable=False)
    return_date: Mapped[str | None] = mapped_column(String(20))
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    infants: Mapped[int] = mapped_column(Integer, default=0)
    travel_class: Mapped[str | None] = mapped_column(String(20))
    results_count: Mapped[int] = mapped_column(Integer, default=0)
    cheapest_price: Mapped[str | None] = mapped_column(String(20))
    from_cache: Mapped[bool] = mapped_column(Boolean, default=False)
    searched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class UserSearchHistory(Base):
    __tablename__ = "user_search_history"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    origin: Mapped[str] = mapped_column(String(3), nullable=False)
    origin_name: Mapped[str | None] = mapped_column(String(255))
    destination: Mapped[str] = mapped_column(String(3), nullable=False)
    destination_name: Mapped[str | None] = mapped_column(String(255))
    departure_date: Mapped[str] = mapped_column(String(10), nullable=False)
    return_date: Mapped[str | None] = mapped_column(String(10))
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    infants: Mapped[int] = mapped_column(Integer, default=0)
    cabin_class: Mapped[str | None] = mapped_column(String(20))
    results_count: Mapped[int | None] = mapped_column(Integer)
    lowest_price_found: Mapped[int | None] = mapped_column(Integer)  # cents
    searched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class SavedRoute(Base):
    __tablename__ = "saved_routes"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    origin: Mapped[str] = mapped_column(String(3), nullable=False)
    origin_name: Mapped[str | None] = mapped_column(String(255))
    destination: Mapped[str] = mapped_column(String(3), nullable=False)
    destination_name: Mapped[str | None] = mapped_column(String(255))
    preferred_cabin_class: Mapped[str | None] = mapped_column(String(20))
    typical_travelers: Mapped[dict | None] = mapped_column(JSONType)
    search_count: Mapped[int] = mapped_column(Integer, default=1)
    last_searched: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    nickname: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class PopularDestination(Base):
    __tablename__ = "popular_destinations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    iata_code: Mapped[str] = mapped_column(String(3), nullable=False, unique=True)
    city_name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_name: Mapped[str] = mapped_column(String(255), nullable=False)
    country_code: Mapped[str] = mapped_column(String(2), nullable=False)
    image_url: Mapped[str | None] = mapped_column(String(500))
    description: Mapped[str | None] = mapped_column(String(500))
    search_count: Mapped[int] = mapped_column(Integer, default=0)
    booking_count: Mapped[int] = mapped_column(Integer, default=0)
    average_price: Mapped[int | None] = mapped_column(Integer)  # cents
    is_featured: Mapped[bool] = mapped_column(Boolean, default=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0)
