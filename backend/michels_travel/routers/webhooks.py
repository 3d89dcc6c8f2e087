"""Square webhook receiver."""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.services.booking_service import booking_service
from michels_travel.services.square_client import verify_webhook_signature

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/square")
async def square_webhook(request: Request, db: AsyncSession = Depends(get_db)):
    body = await request.body()
    if not verify_webhook_signature(body, request.headers.get("x-square-hmacsha256-signature")):
        logger.warning("Square webhook rejected: invalid signature")
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    try:
        event = json.loads(body)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(event, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    logger.info(f"Square webhook {event.get('type')} ({event.get('event_id')})")
    handled = await booking_service.handle_square_event(db, event)
    return {"received": True, "handled": handled}
