"""
Seed data: popular destinations and the optional admin account.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from michels_travel import seed as seed_module
from michels_travel.config import settings
from michels_travel.database import async_session_factory
from michels_travel.main import app
from michels_travel.models.search import PopularDestination
from michels_travel.models.user import User
from michels_travel.seed import DESTINATIONS, seed


class TestSeed:
    async def test_destinations_served_featured_first(self, client):
        await seed()

        resp = await client.get("/api/flights/destinations")
        destinations = resp.json()
        assert len(destinations) == len(DESTINATIONS)
        assert destinations[0]["code"] == "MIA"
        featured = [d["is_featured"] for d in destinations]
        assert featured == sorted(featured, reverse=True)

    async def test_seed_is_idempotent(self):
        await seed()
        await seed()

        async with async_session_factory() as db:
            count = (await db.execute(select(func.count(PopularDestination.id)))).scalar_one()
        assert count == len(DESTINATIONS)

    async def test_no_admin_without_password(self):
        await seed()

        async with async_session_factory() as db:
            admins = (await db.execute(select(User).where(User.role == "admin"))).scalars().all()
        assert admins == []

    async def test_admin_can_log_in(self, client, monkeypatch):
        monkeypatch.setattr(settings, "seed_admin_password", "Michel@Admin1")
        await seed()

        resp = await client.post("/api/auth/login", json={
            "email": settings.seed_admin_email, "password": "Michel@Admin1",
        })
        assert resp.status_code == 200
        assert resp.json()["user"]["role"] == "admin"


class TestSeedOnStartup:
    """Seeding from the app lifespan"""

    async def test_startup_seeds_destinations(self, monkeypatch):
        monkeypatch.setattr(settings, "seed_on_startup", True)

        async with app.router.lifespan_context(app):
            async with async_session_factory() as db:
                count = (await db.execute(select(func.count(PopularDestination.id)))).scalar_one()
        assert count == len(DESTINATIONS)

    async def test_seed_failure_does_not_block_startup(self, client, monkeypatch, caplog):
        async def broken_seed():
            raise OperationalError("SELECT popular_destinations", {}, Exception("no such table"))

        monkeypatch.setattr(settings, "seed_on_startup", True)
        monkeypatch.setattr(seed_module, "seed", broken_seed)

        with caplog.at_level(logging.WARNING, logger="michels_travel.main"):
            async with app.router.lifespan_context(app):
                resp = await client.get("/api/health")

        assert resp.status_code == 200
        assert "Auto-seed skipped" in caplog.text
