"""Bookings router — checkout, payment polling, cancellation, admin status changes and refunds."""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import get_current_user, require_admin
from michels_travel.models.user import User
from michels_travel.schemas.booking import BookingCreateRequest, BookingStatusUpdate, RefundRequest
from michels_travel.services.booking_service import booking_service

router = APIRouter()


@router.post("", status_code=201)
async def create_booking(
    req: BookingCreateRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Create a pending booking and return the Square checkout link."""
    return await booking_service.create_checkout(
        db,
        user=user,
        flight_offer=req.flight_offer,
        origin=req.origin,
        destination=req.destination,
        departure_date=req.departure_date,
        total_amount=req.total_amount,
        contact_email=req.contact_email,
        passengers=[p.model_dump() for p in req.passengers],
        return_date=req.return_date,
        origin_name=req.origin_name,
        destination_name=req.destination_name,
        adults=req.adults,
        children=req.children,
        infants=req.infants,
        travel_class=req.travel_class,
        currency=req.currency,
        contact_phone=req.contact_phone,
        special_requests=req.special_requests,
    )


@router.get("")
async def list_my_bookings(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    bookings = await booking_service.list_for_user(db, user.id)
    return [booking_service.booking_to_dict(b) for b in bookings]


@router.get("/admin/all")
async def list_all_bookings(
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    bookings = await booking_service.list_all(db, status=status)
    return [booking_service.booking_to_dict(b) for b in bookings]


@router.get("/reference/{reference}")
async def get_booking_by_reference(
    reference: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    booking = await booking_service.get_by_reference(db, reference, user)
    return booking_service.booking_to_dict(booking)


@router.get("/{booking_id}")
async def get_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    booking = await booking_service.get_for_user(db, booking_id, user)
    return booking_service.booking_to_dict(booking)


@router.get("/{booking_id}/verify-payment")
async def verify_payment(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Polled by the checkout success page until the payment lands."""
    booking = await booking_service.get_for_user(db, booking_id, user)
    return await booking_service.verify_payment(db, booking)


@router.post("/{booking_id}/cancel")
async def cancel_booking(
    booking_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    booking = await booking_service.get_for_user(db, booking_id, user)
    booking = await booking_service.cancel(db, booking)
    return booking_service.booking_to_dict(booking)


@router.patch("/{booking_id}/status")
async def update_booking_status(
    booking_id: uuid.UUID,
    req: BookingStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    booking = await booking_service.get_for_user(db, booking_id, admin)
    booking = await booking_service.update_status(db, booking, req.status)
    return booking_service.booking_to_dict(booking)


@router.post("/{booking_id}/refund")
async def refund_booking(
    booking_id: uuid.UUID,
    req: RefundRequest | None = None,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    booking = await booking_service.get_for_user(db, booking_id, admin)
    booking = await booking_service.refund(db, booking, reason=req.reason if req else None)
    return booking_service.booking_to_dict(booking)
