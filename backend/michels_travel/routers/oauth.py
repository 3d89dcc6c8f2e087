"""OAuth callback — completes the authorization-code flow and opens a session."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db, utcnow
from michels_travel.models.user import User
from michels_travel.routers.auth import create_access_token, set_session_cookie
from michels_travel.services.oauth_client import oauth_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/callback")
async def oauth_callback(
    code: str | None = None,
    state: str | None = None,
    db: AsyncSession = Depends(get_db),
):
    if not code or not state:
        raise HTTPException(status_code=400, detail="code and state are required")

    access_token = await oauth_client.exchange_code(code, state)
    info = await oauth_client.get_user_info(access_token)

    result = await db.execute(select(User).where(User.open_id == info["open_id"]))
    user = result.scalar_one_or_none()
    if user is None:
        user = User(open_id=info["open_id"])
        db.add(user)
        logger.info(f"New OAuth user {info['open_id']}")
    if info["name"]:
        user.name = info["name"]
    if info["email"] and not user.email:
        taken = await db.execute(select(User.id).where(User.email == info["email"].lower()))
        if taken.scalar_one_or_none() is None:
            user.email = info["email"].lower()
    if info["login_method"]:
        user.login_method = info["login_method"]
    user.last_signed_in = utcnow()
    await db.commit()

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    response = RedirectResponse(url="/", status_code=302)
    set_session_cookie(response, create_access_token(str(user.id)))
    return response
