"""Price alerts router — fare drop alerts per route."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import get_current_user, require_admin
from michels_travel.models.user import User
from michels_travel.schemas.alerts import PriceAlertCreate, PriceAlertUpdate
from michels_travel.services.price_alert_service import price_alert_service

router = APIRouter()


@router.get("")
async def list_alerts(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    alerts = await price_alert_service.list_alerts(db, user.id)
    return [price_alert_service.alert_to_dict(a) for a in alerts]


@router.post("", status_code=201)
async def create_alert(
    req: PriceAlertCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    alert = await price_alert_service.create_alert(db, user.id, req.model_dump())
    return price_alert_service.alert_to_dict(alert)


@router.post("/check")
async def run_alert_check(
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin),
):
    """Trigger the scheduled alert check immediately."""
    hits = await price_alert_service.check_all_alerts(db)
    return {"triggered": len(hits), "alerts": hits}


@router.patch("/{alert_id}")
async def update_alert(
    alert_id: uuid.UUID,
    req: PriceAlertUpdate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    alert = await price_alert_service.update_alert(db, alert_id, user.id, req.model_dump(exclude_unset=True))
    return price_alert_service.alert_to_dict(alert)


@router.post("/{alert_id}/toggle")
async def toggle_alert(
    alert_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    alert = await price_alert_service.toggle_alert(db, alert_id, user.id)
    return price_alert_service.alert_to_dict(alert)


@router.delete("/{alert_id}")
async def delete_alert(
    alert_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await price_alert_service.delete_alert(db, alert_id, user.id)
    return {"success": True}
