import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from michels_travel.database import Base, utcnow


class PriceAlert(Base):
    __tablename__ = "price_alerts"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    origin: Mapped[str] = mapped_column(String(3), nullable=False)
    origin_name: Mapped[str | None] = mapped_column(String(255))
    destination: Mapped[str] = mapped_column(String(3), nullable=False)
    destination_name: Mapped[str | None] = mapped_column(String(255))
    departure_date_start: Mapped[str | None] = mapped_column(String(10))
    departure_date_end: Mapped[str | None] = mapped_column(String(10))
    return_date_start: Mapped[str | None] = mapped_column(String(10))
    return_date_end: Mapped[str | None] = mapped_column(String(10))
    is_flexible_dates: Mapped[bool] = mapped_column(Boolean, default=False)
    adults: Mapped[int] = mapped_column(Integer, default=1)
    children: Mapped[int] = mapped_column(Integer, default=0)
    infants: Mapped[int] = mapped_column(Integer, default=0)
    cabin_class: Mapped[str] = mapped_column(String(20), default="ECONOMY")
    target_price: Mapped[int] = mapped_column(Integer, nullable=False)  # cents
    current_lowest_price: Mapped[int | None] = mapped_column(Integer)  # cents
    currency: Mapped[str] = mapped_column(String(3), default="USD")
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    last_checked: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    last_notified: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    notification_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))


class Notification(Base):
    __tablename__ = "notifications"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    related_alert_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    related_booking_id: Mapped[uuid.UUID | None] = mapped_column(Uuid)
    previous_price: Mapped[int | None] = mapped_column(Integer)  # cents
    new_price: Mapped[int | None] = mapped_column(Integer)  # cents
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    action_url: Mapped[str | None] = mapped_column(String(500))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, server_default=func.now()
    )
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
