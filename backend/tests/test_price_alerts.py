"""
Price alert tests: CRUD over the API, the periodic fare check against the
mock provider and expiry handling.
"""

import uuid
from datetime import date, timedelta

from sqlalchemy import select

from michels_travel.database import async_session_factory, utcnow
from michels_travel.models.alerts import Notification, PriceAlert
from michels_travel.models.user import User
from michels_travel.services.price_alert_service import price_alert_service


def future_date(days: int = 60) -> str:
    return (date.today() + timedelta(days=days)).isoformat()


def alert_payload(**overrides) -> dict:
    payload = {
        "origin": "gru",
        "origin_name": "São Paulo",
        "destination": "lis",
        "destination_name": "Lisbon",
        "departure_date_start": future_date(),
        "target_price": 60000,
        "current_price": 72000,
    }
    payload.update(overrides)
    return payload


async def create_alert(client, headers, **overrides) -> dict:
    resp = await client.post("/api/price-alerts", json=alert_payload(**overrides), headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


class TestPriceAlertCrud:
    """/api/price-alerts"""

    async def test_create(self, client, auth_headers):
        alert = await create_alert(client, auth_headers)

        assert alert["origin"] == "GRU"
        assert alert["destination"] == "LIS"
        assert alert["target_price"] == 60000
        assert alert["target_price_formatted"] == "$600.00"
        assert alert["current_lowest_price"] == 72000
        assert alert["is_active"] is True
        assert alert["notification_count"] == 0
        assert alert["expires_at"]

    async def test_expiry_window(self, client, auth_headers):
        alert = await create_alert(client, auth_headers)
        async with async_session_factory() as db:
            stored = await db.get(PriceAlert, uuid.UUID(alert["id"]))
        days = (stored.expires_at.replace(tzinfo=None) - stored.created_at.replace(tzinfo=None)).days
        assert days in (89, 90)

    async def test_validation(self, client, auth_headers):
        for overrides in (
            {"target_price": 0},
            {"origin": "GRUX"},
            {"departure_date_start": "2026-12-10", "departure_date_end": "2026-12-01"},
            {"cabin_class": "COACH"},
        ):
            resp = await client.post("/api/price-alerts", json=alert_payload(**overrides), headers=auth_headers)
            assert resp.status_code == 422, overrides

    async def test_list_update_toggle_delete(self, client, auth_headers):
        alert = await create_alert(client, auth_headers)
        url = f"/api/price-alerts/{alert['id']}"

        listed = (await client.get("/api/price-alerts", headers=auth_headers)).json()
        assert [a["id"] for a in listed] == [alert["id"]]

        resp = await client.patch(url, json={"target_price": 55000, "cabin_class": "PREMIUM_ECONOMY"}, headers=auth_headers)
        assert resp.json()["target_price"] == 55000
        assert resp.json()["cabin_class"] == "PREMIUM_ECONOMY"

        resp = await client.post(f"{url}/toggle", headers=auth_headers)
        assert resp.json()["is_active"] is False
        resp = await client.post(f"{url}/toggle", headers=auth_headers)
        assert resp.json()["is_active"] is True

        assert (await client.delete(url, headers=auth_headers)).json() == {"success": True}
        assert (await client.get("/api/price-alerts", headers=auth_headers)).json() == []

    async def test_required_fields_cannot_be_cleared(self, client, auth_headers):
        alert = await create_alert(client, auth_headers)
        url = f"/api/price-alerts/{alert['id']}"

        for field in ("target_price", "cabin_class", "is_active"):
            resp = await client.patch(url, json={field: None}, headers=auth_headers)
            assert resp.status_code == 422, field

        resp = await client.patch(url, json={"departure_date_end": None}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["target_price"] == 60000

    async def test_other_users_alert(self, client, auth_headers, other_headers):
        alert = await create_alert(client, auth_headers)

        resp = await client.post(f"/api/price-alerts/{alert['id']}/toggle", headers=other_headers)
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"
        assert resp.json()["message"] == "Price alert not found"


class TestPriceAlertCheck:
    """The scheduled fare check"""

    async def test_check_requires_admin(self, client, auth_headers):
        resp = await client.post("/api/price-alerts/check", headers=auth_headers)
        assert resp.status_code == 403

    async def test_target_met_notifies(self, client, auth_headers, admin_headers):
        """A generous target is always met by the mock fares"""
        alert = await create_alert(client, auth_headers, target_price=10_000_000)

        resp = await client.post("/api/price-alerts/check", headers=admin_headers)
        body = resp.json()
        assert body["triggered"] == 1
        hit = body["alerts"][0]
        assert hit["alert_id"] == alert["id"]
        assert hit["previous_price"] == 72000
        assert 0 < hit["new_price"] <= 10_000_000

        stored = (await client.get("/api/price-alerts", headers=auth_headers)).json()[0]
        assert stored["notification_count"] == 1
        assert stored["current_lowest_price"] == hit["new_price"]
        assert stored["last_checked"] and stored["last_notified"]

        notifications = (await client.get("/api/notifications", headers=auth_headers)).json()
        assert [n["type"] for n in notifications] == ["price_drop"]
        assert notifications[0]["related_alert_id"] == alert["id"]
        assert notifications[0]["new_price"] == hit["new_price"]

    async def test_target_not_met(self, client, auth_headers, admin_headers):
        await create_alert(client, auth_headers, target_price=1)

        body = (await client.post("/api/price-alerts/check", headers=admin_headers)).json()
        assert body["triggered"] == 0

        stored = (await client.get("/api/price-alerts", headers=auth_headers)).json()[0]
        assert stored["current_lowest_price"] > 1
        assert stored["last_checked"] is not None
        assert stored["notification_count"] == 0

    async def test_user_opted_out_of_notifications(self, client, auth_headers, admin_headers):
        await client.patch("/api/account/profile", json={"price_alert_notifications": False}, headers=auth_headers)
        await create_alert(client, auth_headers, target_price=10_000_000)

        body = (await client.post("/api/price-alerts/check", headers=admin_headers)).json()
        assert body["triggered"] == 1
        assert (await client.get("/api/notifications", headers=auth_headers)).json() == []

    async def test_inactive_and_dateless_alerts_skipped(self, client, auth_headers, admin_headers):
        alert = await create_alert(client, auth_headers, target_price=10_000_000)
        await client.post(f"/api/price-alerts/{alert['id']}/toggle", headers=auth_headers)
        await create_alert(client, auth_headers, target_price=10_000_000, departure_date_start=None)

        body = (await client.post("/api/price-alerts/check", headers=admin_headers)).json()
        assert body["triggered"] == 0

    async def test_past_departure_skipped(self, register_user):
        _, user = await register_user()
        async with async_session_factory() as db:
            alert = PriceAlert(
                user_id=uuid.UUID(user["id"]),
                origin="GRU",
                destination="LIS",
                departure_date_start=(date.today() - timedelta(days=1)).isoformat(),
                target_price=10_000_000,
            )
            db.add(alert)
            await db.commit()

            assert await price_alert_service.check_alert(db, alert) is None
            assert alert.last_checked is None


class TestPriceAlertExpiry:
    """Nightly deactivation of expired alerts"""

    async def test_deactivate_expired(self, client, auth_headers):
        expired = await create_alert(client, auth_headers)
        fresh = await create_alert(client, auth_headers, destination="mad")

        async with async_session_factory() as db:
            alert = await db.get(PriceAlert, uuid.UUID(expired["id"]))
            alert.expires_at = utcnow() - timedelta(days=1)
            await db.commit()

        async with async_session_factory() as db:
            assert await price_alert_service.deactivate_expired(db) == 1

        async with async_session_factory() as db:
            rows = (await db.execute(select(PriceAlert.id, PriceAlert.is_active))).all()
        assert {str(r.id): r.is_active for r in rows} == {expired["id"]: False, fresh["id"]: True}

    async def test_expired_alerts_not_checked(self, client, auth_headers, admin_headers):
        alert = await create_alert(client, auth_headers, target_price=10_000_000)
        async with async_session_factory() as db:
            stored = await db.get(PriceAlert, uuid.UUID(alert["id"]))
            stored.expires_at = utcnow() - timedelta(hours=1)
            await db.commit()

        body = (await client.post("/api/price-alerts/check", headers=admin_headers)).json()
        assert body["triggered"] == 0

        async with async_session_factory() as db:
            user = (await db.execute(select(User).where(User.email == "ana.souza@gmail.com"))).scalar_one()
            count = len((await db.execute(select(Notification).where(Notification.user_id == user.id))).all())
        assert count == 0
