import logging
import os
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from michels_travel.config import settings

# ─── Logging setup (file + console) ───
_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_LOG_DIR.mkdir(exist_ok=True)

_log_level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)

logging.basicConfig(
    level=_log_level,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    handlers=[
        logging.StreamHandler(),
        RotatingFileHandler(
            _LOG_DIR / "michels_travel.log",
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        ),
    ],
)

# Quiet noisy libraries
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from michels_travel.database import async_session_factory
from michels_travel.errors import register_exception_handlers
from michels_travel.middleware import NavigationTrackingMiddleware, RequestIdMiddleware
from michels_travel.routers import (
    account, auth, bookings, chat, dashboard, flights, leads, notifications,
    oauth, price_alerts, saved_routes, search_history, webhooks,
)
from michels_travel.services.amadeus_client import amadeus_client
from michels_travel.services.cache_service import cache_service
from michels_travel.services.price_alert_service import price_alert_service
from michels_travel.services.square_client import square_client

logger = logging.getLogger(__name__)


async def _run_price_alert_checks():
    async with async_session_factory() as db:
        hits = await price_alert_service.check_all_alerts(db)
        if hits:
            logger.info(f"Price alerts: {len(hits)} triggered")


async def _deactivate_expired_alerts():
    async with async_session_factory() as db:
        await price_alert_service.deactivate_expired(db)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: launch the background scheduler
    scheduler = None
    if settings.scheduler_enabled:
        scheduler = AsyncIOScheduler()
        scheduler.add_job(
            _run_price_alert_checks,
            IntervalTrigger(hours=settings.price_alert_check_interval_hours),
            id="price_alert_checks",
        )
        scheduler.add_job(_deactivate_expired_alerts, CronTrigger(hour=3, minute=0), id="expire_price_alerts")
        scheduler.start()
        logger.info("Background scheduler started")

    if settings.seed_on_startup:
        from michels_travel.seed import seed
        try:
            await seed()
        except Exception as e:
            logger.warning(f"Auto-seed skipped: {e}")

    yield

    # Shutdown
    if scheduler:
        scheduler.shutdown(wait=False)
        logger.info("Background scheduler stopped")
    await amadeus_client.close()
    await square_client.close()
    await cache_service.close()


app = FastAPI(
    title="Michel's Travel",
    description="Flight search, booking and account API",
    version="0.1.0",
    lifespan=lifespan,
)

register_exception_handlers(app)

app.add_middleware(NavigationTrackingMiddleware)
app.add_middleware(RequestIdMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(oauth.router, prefix="/api/oauth", tags=["auth"])
app.include_router(flights.router, prefix="/api/flights", tags=["flights"])
app.include_router(leads.router, prefix="/api/leads", tags=["leads"])
app.include_router(bookings.router, prefix="/api/bookings", tags=["bookings"])
app.include_router(webhooks.router, prefix="/api/webhooks", tags=["webhooks"])
app.include_router(account.router, prefix="/api/account", tags=["account"])
app.include_router(saved_routes.router, prefix="/api/saved-routes", tags=["saved-routes"])
app.include_router(price_alerts.router, prefix="/api/price-alerts", tags=["price-alerts"])
app.include_router(search_history.router, prefix="/api/search-history", tags=["search-history"])
app.include_router(notifications.router, prefix="/api/notifications", tags=["notifications"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(chat.router, prefix="/api/chat", tags=["chat"])


@app.get("/api/health")
async def health_check():
    return {"status": "ok", "service": "michels-travel"}
