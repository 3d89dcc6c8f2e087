"""
Shared fixtures for the Michel's Travel API tests.

The app runs against an in-memory SQLite database with every external
provider (Amadeus, Square, Redis, LLMs, owner inbox) left unconfigured, so
each client falls back to its mock or no-op mode. The environment must be
set before anything under ``michels_travel`` is imported.
"""

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CACHE_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["SEED_ON_STARTUP"] = "false"
os.environ["NAVIGATION_TRACKING_ENABLED"] = "false"
os.environ["AMADEUS_CLIENT_ID"] = ""
os.environ["AMADEUS_CLIENT_SECRET"] = ""
os.environ["SQUARE_ACCESS_TOKEN"] = ""
os.environ["SQUARE_WEBHOOK_SIGNATURE_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["ANTHROPIC_API_KEY"] = ""
os.environ["OWNER_NOTIFICATION_URL"] = ""
os.environ["OAUTH_SERVER_URL"] = ""

import httpx
import pytest
from sqlalchemy import update

from michels_travel.database import Base, async_session_factory, engine
from michels_travel.main import app
from michels_travel.models.user import User

TEST_PASSWORD = "Viagem@2026"


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema for every test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session():
    """A session on the app's engine for arranging and inspecting rows."""
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def client():
    """HTTP client talking to the ASGI app in-process."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register_user(client):
    """Register an account and return its bearer headers and user payload.

    The session cookie set by registration is dropped so each test decides
    explicitly how it authenticates.
    """

    async def _register(email: str = "ana.souza@gmail.com", name: str = "Ana Souza", password: str = TEST_PASSWORD):
        resp = await client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert resp.status_code == 201, resp.text
        client.cookies.clear()
        data = resp.json()
        return {"Authorization": f"Bearer {data['token']}"}, data["user"]

    return _register


@pytest.fixture
async def auth_headers(register_user):
    headers, _ = await register_user()
    return headers


@pytest.fixture
async def other_headers(register_user):
    headers, _ = await register_user(email="carlos.lima@gmail.com", name="Carlos Lima")
    return headers


@pytest.fixture
async def admin_headers(register_user, db_session):
    headers, user = await register_user(email="michel@michelstravel.com", name="Michel")
    await db_session.execute(update(User).where(User.email == user["email"]).values(role="admin"))
    await db_session.commit()
    return headers


@pytest.fixture
def flight_offer():
    """A normalised offer as returned by the search endpoint."""
    return {
        "id": "mock-1",
        "price": {"total": "450.00", "base": "369.00", "currency": "USD"},
        "outbound": {
            "departure": {"airport": "MIA", "time": "2026-12-10T09:15:00"},
            "arrival": {"airport": "GRU", "time": "2026-12-10T19:45:00"},
            "duration": "8h 30m",
            "duration_minutes": 510,
            "stops": 0,
            "segments": [{"carrier_code": "LA", "flight_number": "LA8191"}],
        },
        "inbound": None,
        "cabin_class": "ECONOMY",
        "validating_airline_code": "LA",
        "validating_airline": "LATAM Airlines",
    }


@pytest.fixture
def booking_payload(flight_offer):
    return {
        "flight_offer": flight_offer,
        "origin": "MIA",
        "origin_name": "Miami",
        "destination": "GRU",
        "destination_name": "São Paulo",
        "departure_date": "2026-12-10",
        "adults": 1,
        "children": 1,
        "infants": 0,
        "travel_class": "ECONOMY",
        "total_amount": 90000,
        "currency": "USD",
        "contact_email": "ana.souza@gmail.com",
        "passengers": [
            {"passenger_type": "adult", "first_name": "Ana", "last_name": "Souza"},
            {"passenger_type": "child", "first_name": "Bia", "last_name": "Souza", "date_of_birth": "2018-05-02"},
        ],
    }
