"""HTTP middleware: request ids and per-request navigation tracking."""

import logging
import uuid

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.base import BaseHTTPMiddleware

from michels_travel.config import settings
from michels_travel.database import async_session_factory
from michels_travel.dependencies import decode_user_id
from michels_travel.models.activity import NavigationHistory

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
GUEST_COOKIE_NAME = "guest_id"
GUEST_COOKIE_MAX_AGE = 60 * 60 * 24 * 365

# Paths not worth recording
UNTRACKED_PATHS = {"/api/health", "/api/webhooks/square"}


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Attach a request id to request.state and echo it in the response headers."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _client_ip(request: Request) -> str | None:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _request_user_id(request: Request) -> uuid.UUID | None:
    auth = request.headers.get("authorization", "")
    token = auth[7:] if auth.lower().startswith("bearer ") else request.cookies.get(settings.session_cookie_name)
    return decode_user_id(token) if token else None


class NavigationTrackingMiddleware(BaseHTTPMiddleware):
    """Insert one navigation_history row per /api request.

    Anonymous visitors get a long-lived `guest_id` cookie so their trail can be
    followed across requests. Tracking failures are logged and never fail the request.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not settings.navigation_tracking_enabled or not path.startswith("/api") or path in UNTRACKED_PATHS:
            return await call_next(request)

        user_id = _request_user_id(request)
        guest_id = request.cookies.get(GUEST_COOKIE_NAME)
        new_guest_id = None
        if user_id is None and not guest_id:
            new_guest_id = guest_id = uuid.uuid4().hex

        await self._record(request, user_id, guest_id)

        response = await call_next(request)
        if new_guest_id:
            response.set_cookie(
                GUEST_COOKIE_NAME,
                new_guest_id,
                max_age=GUEST_COOKIE_MAX_AGE,
                httponly=True,
                samesite="lax",
                secure=settings.cookie_secure,
            )
        return response

    @staticmethod
    async def _record(request: Request, user_id: uuid.UUID | None, guest_id: str | None):
        try:
            async with async_session_factory() as db:
                db.add(NavigationHistory(
                    user_id=user_id,
                    guest_id=guest_id,
                    method=request.method,
                    path=request.url.path[:500],
                    query=dict(request.query_params),
                    user_agent=(request.headers.get("user-agent") or "")[:500] or None,
                    ip=_client_ip(request),
                ))
                await db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to record navigation for {request.url.path}: {e}")
