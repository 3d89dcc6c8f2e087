"""Notification service — creates in-app notifications for bookings and price alerts."""

import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.data.currency import format_price
from michels_travel.models.alerts import Notification

logger = logging.getLogger(__name__)


class NotificationService:
    """Creates in-app notifications. Callers own the commit."""

    async def send_booking_confirmation(
        self, db: AsyncSession, user_id: uuid.UUID, booking_id: uuid.UUID,
        reference: str, route: str, total_amount: int, currency: str,
    ) -> Notification:
        return await self._create(
            db,
            user_id=user_id,
            type="booking_confirmation",
            title="Payment received",
            message=f"Your booking {reference} for {route} is paid ({format_price(total_amount, currency)}).",
            related_booking_id=booking_id,
            action_url=f"/bookings/{booking_id}",
        )

    async def send_booking_cancelled(
        self, db: AsyncSession, user_id: uuid.UUID, booking_id: uuid.UUID, reference: str,
    ) -> Notification:
        return await self._create(
            db,
            user_id=user_id,
            type="system",
            title="Booking cancelled",
            message=f"Your booking {reference} has been cancelled.",
            related_booking_id=booking_id,
            action_url=f"/bookings/{booking_id}",
        )

    async def send_booking_refunded(
        self, db: AsyncSession, user_id: uuid.UUID, booking_id: uuid.UUID,
        reference: str, total_amount: int, currency: str,
    ) -> Notification:
        return await self._create(
            db,
            user_id=user_id,
            type="system",
            title="Refund issued",
            message=f"A refund of {format_price(total_amount, currency)} was issued for booking {reference}.",
            related_booking_id=booking_id,
            action_url=f"/bookings/{booking_id}",
        )

    async def send_price_drop(
        self, db: AsyncSession, user_id: uuid.UUID, alert_id: uuid.UUID,
        route: str, previous_price: int | None, new_price: int, target_price: int, currency: str,
    ) -> Notification:
        return await self._create(
            db,
            user_id=user_id,
            type="price_drop",
            title="Price Drop Alert",
            message=(
                f"Fares for {route} dropped to {format_price(new_price, currency)} "
                f"(your target: {format_price(target_price, currency)})."
            ),
            related_alert_id=alert_id,
            previous_price=previous_price,
            new_price=new_price,
            action_url=f"/price-alerts/{alert_id}",
        )

    async def _create(
        self, db: AsyncSession, user_id: uuid.UUID, type: str,
        title: str, message: str, related_alert_id: uuid.UUID | None = None,
        related_booking_id: uuid.UUID | None = None, previous_price: int | None = None,
        new_price: int | None = None, action_url: str | None = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_alert_id=related_alert_id,
            related_booking_id=related_booking_id,
            previous_price=previous_price,
            new_price=new_price,
            action_url=action_url,
        )
        db.add(notification)
        return notification


notification_service = NotificationService()
