"""Booking service — checkout, payment verification, status transitions and refunds."""

import logging
import secrets
import string
import uuid
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.config import settings
from michels_travel.data.currency import calculate_total_price, format_price, loyalty_points_for, loyalty_tier_for
from michels_travel.errors import (
    AuthorizationError,
    ConflictError,
    ErrorCode,
    ExternalAPIError,
    NotFoundError,
    ValidationError,
)
from michels_travel.models.booking import Booking, Passenger
from michels_travel.models.user import User
from michels_travel.services.notification_service import notification_service
from michels_travel.services.owner_notifier import notify_owner
from michels_travel.services.square_client import square_client

logger = logging.getLogger(__name__)

REFERENCE_PREFIX = "MT"
REFERENCE_ALPHABET = string.ascii_uppercase + string.digits

# Allowed status transitions; anything not listed is terminal
BOOKING_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"paid", "cancelled"},
    "paid": {"confirmed", "refunded", "cancelled"},
    "confirmed": {"completed", "refunded", "cancelled"},
    "cancelled": set(),
    "refunded": set(),
    "completed": set(),
}


def can_transition(current: str, new: str) -> bool:
    return new in BOOKING_TRANSITIONS.get(current, set())


def generate_booking_reference() -> str:
    return REFERENCE_PREFIX + "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(6))


def validate_passengers(passengers: list[dict], adults: int, children: int, infants: int) -> None:
    """Passenger list must match the declared counts and include an adult."""
    counts = {"adult": 0, "child": 0, "infant": 0}
    for p in passengers:
        counts[p["passenger_type"]] = counts.get(p["passenger_type"], 0) + 1

    if counts["adult"] < 1:
        raise ValidationError("At least one adult passenger is required")
    if counts != {"adult": adults, "child": children, "infant": infants}:
        raise ValidationError(
            "Passenger details do not match the number of travelers",
            details={"expected": {"adult": adults, "child": children, "infant": infants}, "received": counts},
        )
    if infants > adults:
        raise ValidationError("Each infant must travel with an adult")


class BookingService:
    """Creates bookings through Square checkout and drives their lifecycle."""

    async def create_checkout(
        self,
        db: AsyncSession,
        user: User,
        flight_offer: dict,
        origin: str,
        destination: str,
        departure_date: date,
        total_amount: int,
        contact_email: str,
        passengers: list[dict],
        return_date: date | None = None,
        origin_name: str | None = None,
        destination_name: str | None = None,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
        travel_class: str = "ECONOMY",
        currency: str = "USD",
        contact_phone: str | None = None,
        special_requests: str | None = None,
        redirect_base_url: str | None = None,
    ) -> dict:
        """Create a pending booking and a Square payment link for it."""
        if not flight_offer:
            raise ValidationError("Flight offer is required", code=ErrorCode.INVALID_INPUT)
        if total_amount <= 0:
            raise ValidationError("Total amount must be greater than zero", code=ErrorCode.INVALID_INPUT)
        validate_passengers(passengers, adults, children, infants)

        reference = await self._unique_reference(db)
        total_with_fee = calculate_total_price(total_amount, 1, settings.booking_fee_cents)

        booking = Booking(
            booking_reference=reference,
            user_id=user.id,
            status="pending",
            origin=origin.upper(),
            origin_name=origin_name,
            destination=destination.upper(),
            destination_name=destination_name,
            departure_date=departure_date,
            return_date=return_date,
            adults=adults,
            children=children,
            infants=infants,
            travel_class=travel_class,
            flight_offer=flight_offer,
            total_amount=total_with_fee,
            currency=currency.upper(),
            contact_email=contact_email,
            contact_phone=contact_phone,
            special_requests=special_requests,
            passengers=[
                Passenger(
                    position=idx,
                    passenger_type=p["passenger_type"],
                    first_name=p["first_name"],
                    last_name=p["last_name"],
                    date_of_birth=p.get("date_of_birth"),
                    passport_number=p.get("passport_number"),
                    nationality=p.get("nationality"),
                )
                for idx, p in enumerate(passengers)
            ],
        )
        db.add(booking)
        await db.flush()

        base_url = (redirect_base_url or settings.public_base_url).rstrip("/")
        description = (
            f"{origin_name or booking.origin} → {destination_name or booking.destination}, "
            f"{departure_date.isoformat()}"
            + (f" / {return_date.isoformat()}" if return_date else "")
            + f", {adults + children + infants} traveler(s), {travel_class}"
        )
        try:
            link = await square_client.create_payment_link(
                booking_id=booking.id,
                reference=reference,
                origin=booking.origin,
                destination=booking.destination,
                description=description,
                total_amount=total_with_fee,
                currency=booking.currency,
                customer_email=contact_email,
                redirect_url=f"{base_url}/booking/success?booking_id={booking.id}",
                metadata={
                    "booking_reference": reference,
                    "departure_date": departure_date.isoformat(),
                    "return_date": return_date.isoformat() if return_date else "",
                    "passengers": adults + children + infants,
                    "travel_class": travel_class,
                },
            )
        except ExternalAPIError:
            await db.rollback()
            raise

        booking.square_order_id = link["order_id"]
        await db.commit()

        logger.info(f"Booking {reference} created for user {user.id}, order {link['order_id']}")
        return {
            "booking_id": str(booking.id),
            "booking_reference": reference,
            "checkout_url": link["url"],
            "order_id": link["order_id"],
            "locked_price": total_with_fee,
            "currency": booking.currency,
            "expires_at": (
                datetime.now(timezone.utc) + timedelta(minutes=settings.checkout_expiry_minutes)
            ).isoformat(),
        }

    async def _unique_reference(self, db: AsyncSession) -> str:
        for _ in range(5):
            reference = generate_booking_reference()
            result = await db.execute(select(Booking.id).where(Booking.booking_reference == reference))
            if result.scalar_one_or_none() is None:
                return reference
        raise ConflictError("Could not allocate a booking reference, please retry")

    async def get_for_user(self, db: AsyncSession, booking_id: uuid.UUID, user: User) -> Booking:
        """Load a booking the user owns (admins see all)."""
        booking = await db.get(Booking, booking_id)
        return self._check_access(booking, user)

    async def get_by_reference(self, db: AsyncSession, reference: str, user: User) -> Booking:
        result = await db.execute(select(Booking).where(Booking.booking_reference == reference.upper()))
        return self._check_access(result.scalar_one_or_none(), user)

    @staticmethod
    def _check_access(booking: Booking | None, user: User) -> Booking:
        if not booking:
            raise NotFoundError("Booking")
        if booking.user_id != user.id and not user.is_admin:
            raise AuthorizationError("You do not have access to this booking")
        return booking

    async def list_for_user(self, db: AsyncSession, user_id: uuid.UUID, limit: int = 50) -> list[Booking]:
        result = await db.execute(
            select(Booking)
            .where(Booking.user_id == user_id)
            .order_by(Booking.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_all(self, db: AsyncSession, status: str | None = None, limit: int = 100) -> list[Booking]:
        query = select(Booking).order_by(Booking.created_at.desc()).limit(limit)
        if status:
            query = query.where(Booking.status == status)
        result = await db.execute(query)
        return list(result.scalars().all())

    def _transition(self, booking: Booking, new_status: str) -> None:
        if not can_transition(booking.status, new_status):
            raise ConflictError(f"Cannot change booking from {booking.status} to {new_status}")
        booking.status = new_status
        now = datetime.now(timezone.utc)
        if new_status == "paid":
            booking.paid_at = now
        elif new_status == "completed":
            booking.completed_at = now
        elif new_status == "cancelled":
            booking.cancelled_at = now

    async def mark_paid(self, db: AsyncSession, booking: Booking, payment_id: str | None = None) -> Booking:
        """Move a pending booking to paid, award loyalty points and notify everyone."""
        self._transition(booking, "paid")
        if payment_id:
            booking.square_payment_id = payment_id

        points = loyalty_points_for(booking.total_amount)
        booking.points_earned = points
        user = await db.get(User, booking.user_id)
        if user:
            user.loyalty_points = (user.loyalty_points or 0) + points
            user.loyalty_tier = loyalty_tier_for(user.loyalty_points)

        await notification_service.send_booking_confirmation(
            db,
            user_id=booking.user_id,
            booking_id=booking.id,
            reference=booking.booking_reference,
            route=f"{booking.origin} → {booking.destination}",
            total_amount=booking.total_amount,
            currency=booking.currency,
        )
        await db.commit()
        logger.info(f"Booking {booking.booking_reference} marked as paid")

        await notify_owner(
            title=f"New flight booking paid: {booking.booking_reference}",
            content=self._owner_summary(booking),
        )
        return booking

    async def verify_payment(self, db: AsyncSession, booking: Booking) -> dict:
        """Poll Square for the order state; a COMPLETED order pays a pending booking."""
        order_state = None
        if booking.status == "pending" and booking.square_order_id:
            try:
                order = await square_client.get_order(booking.square_order_id)
            except ExternalAPIError as e:
                logger.warning(f"Payment check for {booking.booking_reference} failed: {e.message}")
                order = None
            if order:
                order_state = order["state"]
                if order_state == "COMPLETED":
                    await self.mark_paid(db, booking, order.get("payment_id"))

        return {
            "booking_id": str(booking.id),
            "booking_reference": booking.booking_reference,
            "status": booking.status,
            "order_state": order_state,
            "paid": booking.status in ("paid", "confirmed", "completed"),
        }

    async def cancel(self, db: AsyncSession, booking: Booking) -> Booking:
        """Customer cancellation: only unpaid bookings."""
        if booking.status != "pending":
            raise ConflictError("Only pending bookings can be cancelled; contact support for paid bookings")
        self._transition(booking, "cancelled")
        await notification_service.send_booking_cancelled(
            db, booking.user_id, booking.id, booking.booking_reference
        )
        await db.commit()
        return booking

    async def update_status(self, db: AsyncSession, booking: Booking, new_status: str) -> Booking:
        """Admin status change along the allowed transitions (refunds go through refund())."""
        if new_status == "refunded":
            raise ValidationError("Use the refund endpoint to refund a booking")
        if new_status == "paid":
            return await self.mark_paid(db, booking)
        self._transition(booking, new_status)
        if new_status == "cancelled":
            await notification_service.send_booking_cancelled(
                db, booking.user_id, booking.id, booking.booking_reference
            )
        await db.commit()
        return booking

    async def refund(self, db: AsyncSession, booking: Booking, reason: str | None = None) -> Booking:
        if not can_transition(booking.status, "refunded"):
            raise ConflictError(f"Cannot refund a {booking.status} booking")
        if not booking.square_payment_id:
            raise ValidationError("Booking has no recorded payment to refund")

        refund = await square_client.create_refund(
            payment_id=booking.square_payment_id,
            amount=booking.total_amount,
            currency=booking.currency,
            reason=reason,
        )
        booking.square_refund_id = refund["refund_id"]
        self._transition(booking, "refunded")
        await notification_service.send_booking_refunded(
            db, booking.user_id, booking.id, booking.booking_reference,
            booking.total_amount, booking.currency,
        )
        await db.commit()
        logger.info(f"Booking {booking.booking_reference} refunded ({refund['refund_id']})")
        return booking

    async def handle_square_event(self, db: AsyncSession, event: dict) -> bool:
        """Apply a Square webhook event. Returns True when a booking changed."""
        event_type = event.get("type", "")
        obj = (event.get("data") or {}).get("object") or {}

        if event_type in ("payment.created", "payment.updated"):
            payment = obj.get("payment") or {}
            if payment.get("status") != "COMPLETED" or not payment.get("order_id"):
                return False
            booking = await self._find_by_order(db, payment["order_id"])
            if booking and booking.status == "pending":
                await self.mark_paid(db, booking, payment.get("id"))
                return True
            if booking and not booking.square_payment_id and payment.get("id"):
                booking.square_payment_id = payment["id"]
                await db.commit()
                return True
            return False

        if event_type == "order.updated":
            order = obj.get("order_updated") or {}
            if order.get("state") != "COMPLETED" or not order.get("order_id"):
                return False
            booking = await self._find_by_order(db, order["order_id"])
            if booking and booking.status == "pending":
                await self.mark_paid(db, booking)
                return True
            return False

        if event_type in ("refund.created", "refund.updated"):
            refund = obj.get("refund") or {}
            if refund.get("status") != "COMPLETED" or not refund.get("payment_id"):
                return False
            result = await db.execute(
                select(Booking).where(Booking.square_payment_id == refund["payment_id"])
            )
            booking = result.scalar_one_or_none()
            if booking and can_transition(booking.status, "refunded"):
                booking.square_refund_id = refund.get("id")
                self._transition(booking, "refunded")
                await db.commit()
                return True
            return False

        logger.info(f"Unhandled Square event type: {event_type}")
        return False

    async def _find_by_order(self, db: AsyncSession, order_id: str) -> Booking | None:
        result = await db.execute(select(Booking).where(Booking.square_order_id == order_id))
        booking = result.scalar_one_or_none()
        if not booking:
            logger.warning(f"Square event for unknown order {order_id}")
        return booking

    @staticmethod
    def _owner_summary(booking: Booking) -> str:
        travelers = f"{booking.adults} adult(s)"
        if booking.children:
            travelers += f", {booking.children} child(ren)"
        if booking.infants:
            travelers += f", {booking.infants} infant(s)"
        departure = booking.departure_date.isoformat()
        if booking.return_date:
            departure += f" | Return: {booking.return_date.isoformat()}"
        contact = booking.contact_email
        if booking.contact_phone:
            contact += f" | {booking.contact_phone}"
        return (
            f"Booking: {booking.booking_reference}\n"
            f"Route: {booking.origin_name or booking.origin} → {booking.destination_name or booking.destination}\n"
            f"Departure: {departure}\n"
            f"Passengers: {travelers}\n"
            f"Class: {booking.travel_class}\n"
            f"Total Paid: {format_price(booking.total_amount, booking.currency)}\n"
            f"Contact: {contact}"
        )

    @staticmethod
    def booking_to_dict(booking: Booking) -> dict:
        return {
            "id": str(booking.id),
            "booking_reference": booking.booking_reference,
            "status": booking.status,
            "origin": booking.origin,
            "origin_name": booking.origin_name,
            "destination": booking.destination,
            "destination_name": booking.destination_name,
            "departure_date": booking.departure_date.isoformat(),
            "return_date": booking.return_date.isoformat() if booking.return_date else None,
            "adults": booking.adults,
            "children": booking.children,
            "infants": booking.infants,
            "travel_class": booking.travel_class,
            "flight_offer": booking.flight_offer,
            "total_amount": booking.total_amount,
            "total_formatted": format_price(booking.total_amount, booking.currency),
            "currency": booking.currency,
            "points_earned": booking.points_earned,
            "contact_email": booking.contact_email,
            "contact_phone": booking.contact_phone,
            "special_requests": booking.special_requests,
            "square_order_id": booking.square_order_id,
            "passengers": [
                {
                    "passenger_type": p.passenger_type,
                    "first_name": p.first_name,
                    "last_name": p.last_name,
                    "date_of_birth": p.date_of_birth.isoformat() if p.date_of_birth else None,
                    "nationality": p.nationality,
                }
                for p in booking.passengers
            ],
            "created_at": booking.created_at.isoformat() if booking.created_at else None,
            "paid_at": booking.paid_at.isoformat() if booking.paid_at else None,
            "completed_at": booking.completed_at.isoformat() if booking.completed_at else None,
            "cancelled_at": booking.cancelled_at.isoformat() if booking.cancelled_at else None,
        }


booking_service = BookingService()
