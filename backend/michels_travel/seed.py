"""Seed script for the Michel's Travel database."""

import asyncio
import logging

from sqlalchemy import select

from michels_travel.config import settings
from michels_travel.database import async_session_factory
from michels_travel.models.search import PopularDestination
from michels_travel.models.user import User
from michels_travel.routers.auth import pwd_context

logger = logging.getLogger(__name__)

# ── Popular destinations ───────────────────────────────────────────────────────

DESTINATIONS = [
    # (iata, city, country, country_code, description, featured)
    ("MIA", "Miami", "United States", "US", "Beaches, Art Deco and Latin nightlife", True),
    ("MCO", "Orlando", "United States", "US", "Theme parks for the whole family", True),
    ("JFK", "New York", "United States", "US", "The city that never sleeps", True),
    ("LIS", "Lisbon", "Portugal", "PT", "Hills, trams and pastéis de nata", True),
    ("GRU", "São Paulo", "Brazil", "BR", "South America's largest city", True),
    ("GIG", "Rio de Janeiro", "Brazil", "BR", "Sugarloaf, Copacabana and Carnival", True),
    ("CDG", "Paris", "France", "FR", "Museums, cafés and the Eiffel Tower", False),
    ("LHR", "London", "United Kingdom", "GB", "Royal history and West End shows", False),
    ("MAD", "Madrid", "Spain", "ES", "Tapas, plazas and the Prado", False),
    ("FCO", "Rome", "Italy", "IT", "Two thousand years of history", False),
    ("CUN", "Cancún", "Mexico", "MX", "Caribbean beaches and Mayan ruins", False),
    ("EZE", "Buenos Aires", "Argentina", "AR", "Tango, steak and grand avenues", False),
]


async def seed():
    async with async_session_factory() as db:
        # ── Destinations ──
        result = await db.execute(select(PopularDestination.id).limit(1))
        if result.scalar_one_or_none() is None:
            for order, (iata, city, country, code, description, featured) in enumerate(DESTINATIONS):
                db.add(PopularDestination(
                    iata_code=iata,
                    city_name=city,
                    country_name=country,
                    country_code=code,
                    description=description,
                    is_featured=featured,
                    display_order=order,
                ))
            logger.info(f"Seeded {len(DESTINATIONS)} popular destinations")

        # ── Admin ──
        if settings.seed_admin_password:
            email = settings.seed_admin_email.lower()
            result = await db.execute(select(User).where(User.email == email))
            if result.scalar_one_or_none() is None:
                db.add(User(
                    open_id=f"email:{email}",
                    name="Administrator",
                    email=email,
                    password_hash=pwd_context.hash(settings.seed_admin_password),
                    login_method="email",
                    role="admin",
                ))
                logger.info(f"Seeded admin user {email}")

        await db.commit()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed())
