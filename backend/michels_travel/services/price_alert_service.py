"""Price alert service — manages fare alerts and notifies users when a route drops below target."""

import logging
import uuid
from datetime import date, timedelta

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.config import settings
from michels_travel.data.currency import format_price, to_cents
from michels_travel.database import utcnow
from michels_travel.errors import AppError, NotFoundError
from michels_travel.models.alerts import PriceAlert
from michels_travel.models.user import User
from michels_travel.services.amadeus_client import amadeus_client
from michels_travel.services.notification_service import notification_service

logger = logging.getLogger(__name__)

DATE_FIELDS = ("departure_date_start", "departure_date_end", "return_date_start", "return_date_end")


def _serialize_dates(data: dict) -> dict:
    """Dates are stored as ISO strings on the alert."""
    out = dict(data)
    for field in DATE_FIELDS:
        if isinstance(out.get(field), date):
            out[field] = out[field].isoformat()
    return out


class PriceAlertService:
    """CRUD for price alerts plus the periodic fare check."""

    async def list_alerts(self, db: AsyncSession, user_id: uuid.UUID) -> list[PriceAlert]:
        result = await db.execute(
            select(PriceAlert)
            .where(PriceAlert.user_id == user_id)
            .order_by(PriceAlert.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_alert(self, db: AsyncSession, alert_id: uuid.UUID, user_id: uuid.UUID) -> PriceAlert:
        result = await db.execute(
            select(PriceAlert).where(PriceAlert.id == alert_id, PriceAlert.user_id == user_id)
        )
        alert = result.scalar_one_or_none()
        if alert is None:
            raise NotFoundError("Price alert")
        return alert

    async def create_alert(self, db: AsyncSession, user_id: uuid.UUID, data: dict) -> PriceAlert:
        data = _serialize_dates(data)
        current_price = data.pop("current_price", None)
        alert = PriceAlert(
            user_id=user_id,
            origin=data.pop("origin").upper(),
            destination=data.pop("destination").upper(),
            currency=data.pop("currency", "USD").upper(),
            current_lowest_price=current_price,
            expires_at=utcnow() + timedelta(days=settings.price_alert_expiry_days),
            **data,
        )
        db.add(alert)
        await db.commit()
        logger.info(f"Price alert {alert.id} created for {alert.origin}->{alert.destination}")
        return alert

    async def update_alert(
        self, db: AsyncSession, alert_id: uuid.UUID, user_id: uuid.UUID, changes: dict
    ) -> PriceAlert:
        alert = await self.get_alert(db, alert_id, user_id)
        for field, value in _serialize_dates(changes).items():
            setattr(alert, field, value)
        await db.commit()
        return alert

    async def toggle_alert(self, db: AsyncSession, alert_id: uuid.UUID, user_id: uuid.UUID) -> PriceAlert:
        alert = await self.get_alert(db, alert_id, user_id)
        alert.is_active = not alert.is_active
        await db.commit()
        return alert

    async def delete_alert(self, db: AsyncSession, alert_id: uuid.UUID, user_id: uuid.UUID) -> None:
        alert = await self.get_alert(db, alert_id, user_id)
        await db.delete(alert)
        await db.commit()

    async def check_alert(self, db: AsyncSession, alert: PriceAlert) -> dict | None:
        """Search the route once and notify when the cheapest fare meets the target."""
        if not alert.departure_date_start:
            return None
        departure = date.fromisoformat(alert.departure_date_start)
        if departure < date.today():
            return None
        return_date = date.fromisoformat(alert.return_date_start) if alert.return_date_start else None

        offers = await amadeus_client.search_flight_offers(
            origin=alert.origin,
            destination=alert.destination,
            departure_date=departure,
            return_date=return_date,
            adults=alert.adults,
            children=alert.children,
            infants=alert.infants,
            travel_class=alert.cabin_class,
            max_results=5,
        )
        alert.last_checked = utcnow()
        if not offers:
            await db.commit()
            return None

        previous = alert.current_lowest_price
        cheapest = min(to_cents(o["price"]["total"]) for o in offers)
        alert.current_lowest_price = cheapest

        result = None
        if cheapest <= alert.target_price:
            alert.notification_count += 1
            alert.last_notified = utcnow()
            route = f"{alert.origin} -> {alert.destination}"
            result = {
                "alert_id": str(alert.id),
                "route": route,
                "previous_price": previous,
                "new_price": cheapest,
                "target_price": alert.target_price,
            }
            user = await db.get(User, alert.user_id)
            if user and user.price_alert_notifications:
                await notification_service.send_price_drop(
                    db, alert.user_id, alert.id, route, previous, cheapest, alert.target_price, alert.currency,
                )
            logger.info(f"Price alert {alert.id} hit: {route} at {format_price(cheapest, alert.currency)}")

        await db.commit()
        return result

    async def check_all_alerts(self, db: AsyncSession) -> list[dict]:
        """Check every active, unexpired alert. Called by the scheduler."""
        now = utcnow()
        result = await db.execute(
            select(PriceAlert).where(
                PriceAlert.is_active == True,
                or_(PriceAlert.expires_at.is_(None), PriceAlert.expires_at > now),
            )
        )
        alert_ids = [alert.id for alert in result.scalars().all()]
        hits = []
        for alert_id in alert_ids:
            alert = await db.get(PriceAlert, alert_id)
            if alert is None:
                continue
            try:
                hit = await self.check_alert(db, alert)
            except AppError as e:
                logger.warning(f"Price alert check failed for {alert_id}: {e.message}")
                await db.rollback()
                continue
            if hit:
                hits.append(hit)
        logger.info(f"Price alert check complete: {len(hits)} alert(s) triggered")
        return hits

    async def deactivate_expired(self, db: AsyncSession) -> int:
        result = await db.execute(
            update(PriceAlert)
            .where(PriceAlert.is_active == True, PriceAlert.expires_at <= utcnow())
            .values(is_active=False)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        if result.rowcount:
            logger.info(f"Deactivated {result.rowcount} expired price alert(s)")
        return result.rowcount

    @staticmethod
    def alert_to_dict(alert: PriceAlert) -> dict:
        return {
            "id": str(alert.id),
            "origin": alert.origin,
            "origin_name": alert.origin_name,
            "destination": alert.destination,
            "destination_name": alert.destination_name,
            "departure_date_start": alert.departure_date_start,
            "departure_date_end": alert.departure_date_end,
            "return_date_start": alert.return_date_start,
            "return_date_end": alert.return_date_end,
            "is_flexible_dates": alert.is_flexible_dates,
            "adults": alert.adults,
            "children": alert.children,
            "infants": alert.infants,
            "cabin_class": alert.cabin_class,
            "target_price": alert.target_price,
            "target_price_formatted": format_price(alert.target_price, alert.currency),
            "current_lowest_price": alert.current_lowest_price,
            "currency": alert.currency,
            "is_active": alert.is_active,
            "notification_count": alert.notification_count,
            "last_checked": alert.last_checked.isoformat() if alert.last_checked else None,
            "last_notified": alert.last_notified.isoformat() if alert.last_notified else None,
            "created_at": alert.created_at.isoformat() if alert.created_at else None,
            "expires_at": alert.expires_at.isoformat() if alert.expires_at else None,
        }


price_alert_service = PriceAlertService()
