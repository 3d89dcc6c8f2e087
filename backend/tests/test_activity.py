"""
Tests for the signed-in user's activity: saved routes, search history,
in-app notifications and the dashboard overview.
"""

import uuid

from michels_travel.database import async_session_factory
from michels_travel.models.alerts import Notification


async def add_notification(user_id: str, title: str = "Price Drop Alert", type: str = "price_drop"):
    async with async_session_factory() as db:
        notification = Notification(user_id=uuid.UUID(user_id), type=type, title=title, message=f"{title} body")
        db.add(notification)
        await db.commit()
        return str(notification.id)


class TestSavedRoutes:
    """/api/saved-routes"""

    async def test_save_merges_existing_pair(self, client, auth_headers):
        """Saving the same origin/destination again bumps the count instead of duplicating"""
        payload = {"origin": "mia", "destination": "gru", "origin_name": "Miami", "destination_name": "São Paulo"}
        first = (await client.post("/api/saved-routes", json=payload, headers=auth_headers)).json()
        assert first["existed"] is False
        assert first["route"]["origin"] == "MIA"
        assert first["route"]["search_count"] == 1

        second = (await client.post(
            "/api/saved-routes", json={**payload, "nickname": "Visit family"}, headers=auth_headers
        )).json()
        assert second["existed"] is True
        assert second["route"]["id"] == first["route"]["id"]
        assert second["route"]["search_count"] == 2
        assert second["route"]["nickname"] == "Visit family"

    async def test_list_by_search_count(self, client, auth_headers):
        lis = (await client.post(
            "/api/saved-routes", json={"origin": "GRU", "destination": "LIS"}, headers=auth_headers
        )).json()["route"]
        await client.post("/api/saved-routes", json={"origin": "MIA", "destination": "JFK"}, headers=auth_headers)
        await client.post(f"/api/saved-routes/{lis['id']}/search", headers=auth_headers)
        resp = await client.post(f"/api/saved-routes/{lis['id']}/search", headers=auth_headers)
        assert resp.json()["search_count"] == 3

        listed = (await client.get("/api/saved-routes", headers=auth_headers)).json()
        assert [r["destination"] for r in listed] == ["LIS", "JFK"]

    async def test_delete_and_ownership(self, client, auth_headers, other_headers):
        route = (await client.post(
            "/api/saved-routes", json={"origin": "GRU", "destination": "LIS"}, headers=auth_headers
        )).json()["route"]

        resp = await client.delete(f"/api/saved-routes/{route['id']}", headers=other_headers)
        assert resp.status_code == 404

        resp = await client.delete(f"/api/saved-routes/{route['id']}", headers=auth_headers)
        assert resp.json() == {"success": True}
        assert (await client.get("/api/saved-routes", headers=auth_headers)).json() == []

    async def test_invalid_iata(self, client, auth_headers):
        resp = await client.post("/api/saved-routes", json={"origin": "GR1", "destination": "LIS"}, headers=auth_headers)
        assert resp.status_code == 422


class TestSearchHistory:
    """/api/search-history"""

    async def test_record_list_and_clear(self, client, auth_headers):
        for destination in ("LIS", "MAD", "CDG"):
            resp = await client.post("/api/search-history", headers=auth_headers, json={
                "origin": "gru", "destination": destination, "departure_date": "2026-12-10",
                "results_count": 12, "lowest_price_found": 64900,
            })
            assert resp.status_code == 201

        entries = (await client.get("/api/search-history", headers=auth_headers)).json()
        assert len(entries) == 3
        assert entries[0]["origin"] == "GRU"
        assert entries[0]["departure_date"] == "2026-12-10"

        limited = (await client.get("/api/search-history", params={"limit": 2}, headers=auth_headers)).json()
        assert len(limited) == 2

        assert (await client.delete("/api/search-history", headers=auth_headers)).json() == {"success": True}
        assert (await client.get("/api/search-history", headers=auth_headers)).json() == []

    async def test_history_is_per_user(self, client, auth_headers, other_headers):
        await client.post("/api/search-history", headers=auth_headers, json={
            "origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10",
        })
        assert (await client.get("/api/search-history", headers=other_headers)).json() == []


class TestNotifications:
    """/api/notifications"""

    async def test_read_flow(self, client, register_user):
        headers, user = await register_user()
        first = await add_notification(user["id"], "Price Drop Alert")
        await add_notification(user["id"], "Payment received", type="booking_confirmation")

        listed = (await client.get("/api/notifications", headers=headers)).json()
        assert len(listed) == 2
        assert (await client.get("/api/notifications/unread-count", headers=headers)).json() == {"count": 2}

        resp = await client.put(f"/api/notifications/{first}/read", headers=headers)
        assert resp.json() == {"success": True}
        unread = (await client.get("/api/notifications", params={"unread_only": True}, headers=headers)).json()
        assert [n["title"] for n in unread] == ["Payment received"]

        await client.put("/api/notifications/read-all", headers=headers)
        assert (await client.get("/api/notifications/unread-count", headers=headers)).json() == {"count": 0}
        listed = (await client.get("/api/notifications", headers=headers)).json()
        assert all(n["is_read"] and n["read_at"] for n in listed)

    async def test_delete_and_ownership(self, client, register_user, other_headers):
        headers, user = await register_user()
        notification_id = await add_notification(user["id"])

        resp = await client.put(f"/api/notifications/{notification_id}/read", headers=other_headers)
        assert resp.status_code == 404

        resp = await client.delete(f"/api/notifications/{notification_id}", headers=headers)
        assert resp.json() == {"success": True}
        assert (await client.get("/api/notifications", headers=headers)).json() == []

    async def test_cancellation_notifies_user(self, client, auth_headers, booking_payload):
        created = (await client.post("/api/bookings", json=booking_payload, headers=auth_headers)).json()
        await client.post(f"/api/bookings/{created['booking_id']}/cancel", headers=auth_headers)

        listed = (await client.get("/api/notifications", headers=auth_headers)).json()
        assert [n["title"] for n in listed] == ["Booking cancelled"]
        assert listed[0]["related_booking_id"] == created["booking_id"]


class TestDashboard:
    """GET /api/dashboard"""

    async def test_empty_dashboard(self, client, auth_headers):
        data = (await client.get("/api/dashboard", headers=auth_headers)).json()

        assert data["user"]["email"] == "ana.souza@gmail.com"
        assert data["stats"] == {
            "total_searches": 0,
            "saved_routes": 0,
            "active_alerts": 0,
            "total_bookings": 0,
            "loyalty_points": 0,
            "loyalty_tier": "bronze",
        }
        assert data["recent_searches"] == []
        assert data["top_routes"] == []

    async def test_dashboard_counts(self, client, auth_headers, booking_payload):
        for destination in ("LIS", "MAD", "CDG", "FCO", "LHR", "AMS"):
            await client.post("/api/search-history", headers=auth_headers, json={
                "origin": "GRU", "destination": destination, "departure_date": "2026-12-10",
            })
        await client.post("/api/saved-routes", json={"origin": "GRU", "destination": "LIS"}, headers=auth_headers)
        await client.post("/api/price-alerts", headers=auth_headers, json={
            "origin": "GRU", "destination": "LIS", "departure_date_start": "2026-12-10", "target_price": 60000,
        })
        await client.post("/api/bookings", json=booking_payload, headers=auth_headers)

        data = (await client.get("/api/dashboard", headers=auth_headers)).json()
        assert data["stats"]["total_searches"] == 6
        assert data["stats"]["saved_routes"] == 1
        assert data["stats"]["active_alerts"] == 1
        assert data["stats"]["total_bookings"] == 1
        assert len(data["recent_searches"]) == 5
        assert data["top_routes"][0]["destination"] == "LIS"

    async def test_requires_login(self, client):
        assert (await client.get("/api/dashboard")).status_code == 401
