"""Account models: traveler profiles, frequent flyer programs and travel preferences."""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from michels_travel.database import Base, JSONType, utcnow


class TravelerProfile(Base):
    __tablename__ = "traveler_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    middle_name: Mapped[str | None] = mapped_column(String(100))
    date_of_birth: Mapped[date | None] = mapped_column(Date)
    gender: Mapped[str | None] = mapped_column(String(10))
    nationality: Mapped[str | None] = mapped_column(String(2))
    email: Mapped[str | None] = mapped_column(String(320))
    phone: Mapped[str | None] = mapped_column(String(32))
    document_type: Mapped[str | None] = mapped_column(String(20))
    document_number: Mapped[str | None] = mapped_column(String(50))
    document_country: Mapped[str | None] = mapped_column(String(2))
    document_expiry: Mapped[date | None] = mapped_column(Date)
    seat_preference: Mapped[str] = mapped_column(String(20), default="no_preference")
    meal_preference: Mapped[str] = mapped_column(String(20), default="regular")
    special_assistance: Mapped[str | None] = mapped_column(Text)
    relationship: Mapped[str] = mapped_column(String(20), default="self")
    is_primary: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )


class FrequentFlyerProgram(Base):
    __tablename__ = "frequent_flyer_programs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    traveler_profile_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid, ForeignKey("traveler_profiles.id", ondelete="SET NULL")
    )
    airline_code: Mapped[str] = mapped_column(String(3), nullable=False)
    airline_name: Mapped[str] = mapped_column(String(100), nullable=False)
    member_number: Mapped[str] = mapped_column(String(50), nullable=False)
    tier_status: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )


class UserPreference(Base):
    __tablename__ = "user_preferences"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    preferred_airlines: Mapped[list] = mapped_column(JSONType, default=list)
    avoided_airlines: Mapped[list] = mapped_column(JSONType, default=list)
    preferred_cabin_class: Mapped[str] = mapped_column(String(20), default="ECONOMY")
    max_stops: Mapped[int] = mapped_column(Integer, default=2)
    preferred_departure_time: Mapped[str] = mapped_column(String(20), default="any")
    home_airports: Mapped[list] = mapped_column(JSONType, default=list)
    preferred_alliances: Mapped[list] = mapped_column(JSONType, default=list)
    budget_range: Mapped[str] = mapped_column(String(20), default="moderate")
    price_drop_threshold: Mapped[int] = mapped_column(Integer, default=10)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now()
    )
