"""Leads router — public booking/quote/contact requests, reviewed by admins."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import require_admin
from michels_travel.models.booking import Lead
from michels_travel.models.user import User
from michels_travel.schemas.lead import LeadCreate, LeadStatusUpdate
from michels_travel.services.owner_notifier import notify_owner

router = APIRouter()

LEAD_TITLES = {
    "booking": "New Booking Request",
    "quote": "New Quote Request",
    "contact": "New Contact Message",
}


def lead_summary(lead: Lead) -> str:
    """Plain-text body for the owner notification."""
    lines = [f"Name: {lead.name}", f"Email: {lead.email}"]
    if lead.phone:
        lines.append(f"Phone: {lead.phone}")
    if lead.origin and lead.destination:
        dates = lead.departure_date or "-"
        if lead.return_date:
            dates += f" - {lead.return_date}"
        pax = f"{lead.adults} adult(s)"
        if lead.children:
            pax += f", {lead.children} child(ren)"
        if lead.infants:
            pax += f", {lead.infants} infant(s)"
        lines += [
            "",
            f"Flight: {lead.origin_name or lead.origin} -> {lead.destination_name or lead.destination}",
            f"Date: {dates}",
            f"Passengers: {pax}",
            f"Class: {lead.travel_class or 'Economy'}",
        ]
        if lead.estimated_price:
            lines.append(f"Estimated Price: ${lead.estimated_price}")
    if lead.message:
        lines += ["", f"Message: {lead.message}"]
    return "\n".join(lines)


def _lead_to_dict(lead: Lead) -> dict:
    return {
        "id": str(lead.id),
        "type": lead.type,
        "status": lead.status,
        "name": lead.name,
        "email": lead.email,
        "phone": lead.phone,
        "origin": lead.origin,
        "origin_name": lead.origin_name,
        "destination": lead.destination,
        "destination_name": lead.destination_name,
        "departure_date": lead.departure_date,
        "return_date": lead.return_date,
        "adults": lead.adults,
        "children": lead.children,
        "infants": lead.infants,
        "travel_class": lead.travel_class,
        "flight_details": lead.flight_details,
        "estimated_price": lead.estimated_price,
        "message": lead.message,
        "preferred_language": lead.preferred_language,
        "created_at": lead.created_at.isoformat() if lead.created_at else None,
    }


@router.post("", status_code=201)
async def create_lead(req: LeadCreate, db: AsyncSession = Depends(get_db)):
    data = req.model_dump()
    data["adults"] = data["adults"] or 1
    data["children"] = data["children"] or 0
    data["infants"] = data["infants"] or 0
    lead = Lead(**data)
    db.add(lead)
    await db.commit()

    await notify_owner(f"{LEAD_TITLES[lead.type]} - Michel's Travel", lead_summary(lead))
    return {"success": True, "id": str(lead.id)}


@router.get("")
async def list_leads(
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    query = select(Lead).order_by(Lead.created_at.desc()).limit(100)
    if status:
        query = query.where(Lead.status == status)
    result = await db.execute(query)
    return [_lead_to_dict(lead) for lead in result.scalars().all()]


@router.patch("/{lead_id}/status")
async def update_lead_status(
    lead_id: uuid.UUID,
    req: LeadStatusUpdate,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    lead = await db.get(Lead, lead_id)
    if not lead:
        raise HTTPException(status_code=404, detail="Lead not found")
    lead.status = req.status
    await db.commit()
    return {"success": True}
