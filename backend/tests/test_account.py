"""
Account tests: profile, traveler profiles, frequent flyer programs and
search preferences. Everything is scoped to the signed-in user.
"""

import uuid


TRAVELER = {
    "first_name": "Ana",
    "last_name": "Souza",
    "date_of_birth": "1988-03-14",
    "gender": "female",
    "nationality": "BR",
    "document_type": "passport",
    "document_number": "FX123456",
    "document_country": "BR",
    "document_expiry": "2031-01-01",
    "seat_preference": "window",
    "relationship": "self",
}


class TestProfile:
    """GET/PATCH /api/account/profile"""

    async def test_profile_defaults(self, client, auth_headers):
        resp = await client.get("/api/account/profile", headers=auth_headers)

        assert resp.status_code == 200
        data = resp.json()
        assert data["user"]["email"] == "ana.souza@gmail.com"
        assert data["notifications"] == {
            "email_notifications": True,
            "price_alert_notifications": True,
            "marketing_emails": False,
        }
        assert data["travelers"] == []
        assert data["frequent_flyer_programs"] == []
        assert data["preferences"]["max_stops"] == 2
        assert data["preferences"]["preferred_cabin_class"] == "ECONOMY"

    async def test_update_profile(self, client, auth_headers):
        resp = await client.patch("/api/account/profile", headers=auth_headers, json={
            "name": "Ana Paula Souza",
            "preferred_language": "pt",
            "preferred_currency": "brl",
            "price_alert_notifications": False,
        })

        assert resp.status_code == 200
        assert resp.json()["name"] == "Ana Paula Souza"
        assert resp.json()["preferred_language"] == "pt"
        assert resp.json()["preferred_currency"] == "BRL"

        profile = (await client.get("/api/account/profile", headers=auth_headers)).json()
        assert profile["notifications"]["price_alert_notifications"] is False

    async def test_blank_name_rejected(self, client, auth_headers):
        resp = await client.patch("/api/account/profile", headers=auth_headers, json={"name": "  "})
        assert resp.status_code == 422
        profile = (await client.get("/api/account/profile", headers=auth_headers)).json()
        assert profile["user"]["name"] == "Ana Souza"

    async def test_unsupported_language(self, client, auth_headers):
        resp = await client.patch("/api/account/profile", headers=auth_headers, json={"preferred_language": "fr"})
        assert resp.status_code == 422

    async def test_profile_requires_login(self, client):
        resp = await client.get("/api/account/profile")
        assert resp.status_code == 401


class TestTravelers:
    """Saved traveler profiles"""

    async def test_create_and_list(self, client, auth_headers):
        resp = await client.post("/api/account/travelers", headers=auth_headers, json=TRAVELER)

        assert resp.status_code == 201
        traveler = resp.json()
        assert traveler["document_number"] == "FX123456"
        assert traveler["meal_preference"] == "regular"

        listed = (await client.get("/api/account/travelers", headers=auth_headers)).json()
        assert [t["id"] for t in listed] == [traveler["id"]]

    async def test_single_primary_traveler(self, client, auth_headers):
        """Marking a profile primary clears the flag on the others"""
        first = (await client.post(
            "/api/account/travelers", headers=auth_headers, json={**TRAVELER, "is_primary": True}
        )).json()
        second = (await client.post("/api/account/travelers", headers=auth_headers, json={
            "first_name": "Bia", "last_name": "Souza", "relationship": "child", "is_primary": True,
        })).json()

        listed = (await client.get("/api/account/travelers", headers=auth_headers)).json()
        primary = {t["id"]: t["is_primary"] for t in listed}
        assert primary == {first["id"]: False, second["id"]: True}
        assert listed[0]["id"] == second["id"]

        await client.patch(f"/api/account/travelers/{first['id']}", headers=auth_headers, json={"is_primary": True})
        listed = (await client.get("/api/account/travelers", headers=auth_headers)).json()
        assert {t["id"]: t["is_primary"] for t in listed} == {first["id"]: True, second["id"]: False}

    async def test_update_and_delete(self, client, auth_headers):
        traveler = (await client.post("/api/account/travelers", headers=auth_headers, json=TRAVELER)).json()

        resp = await client.patch(
            f"/api/account/travelers/{traveler['id']}", headers=auth_headers, json={"meal_preference": "vegetarian"}
        )
        assert resp.json()["meal_preference"] == "vegetarian"
        assert resp.json()["first_name"] == "Ana"

        resp = await client.delete(f"/api/account/travelers/{traveler['id']}", headers=auth_headers)
        assert resp.json() == {"success": True}
        assert (await client.get("/api/account/travelers", headers=auth_headers)).json() == []

    async def test_required_fields_cannot_be_cleared(self, client, auth_headers):
        traveler = (await client.post("/api/account/travelers", headers=auth_headers, json=TRAVELER)).json()
        url = f"/api/account/travelers/{traveler['id']}"

        for field in ("first_name", "seat_preference", "is_primary"):
            resp = await client.patch(url, headers=auth_headers, json={field: None})
            assert resp.status_code == 422, field
            assert resp.json()["code"] == "VALIDATION_ERROR"

        # Optional columns can still be cleared
        resp = await client.patch(url, headers=auth_headers, json={"special_assistance": None})
        assert resp.status_code == 200
        assert resp.json()["first_name"] == "Ana"

    async def test_other_users_traveler_not_found(self, client, auth_headers, other_headers):
        traveler = (await client.post("/api/account/travelers", headers=auth_headers, json=TRAVELER)).json()

        resp = await client.patch(
            f"/api/account/travelers/{traveler['id']}", headers=other_headers, json={"first_name": "Carlos"}
        )
        assert resp.status_code == 404
        resp = await client.delete(f"/api/account/travelers/{traveler['id']}", headers=other_headers)
        assert resp.status_code == 404

    async def test_invalid_seat_preference(self, client, auth_headers):
        resp = await client.post(
            "/api/account/travelers", headers=auth_headers, json={**TRAVELER, "seat_preference": "cockpit"}
        )
        assert resp.status_code == 422


class TestFrequentFlyer:
    """Frequent flyer programs"""

    async def test_crud(self, client, auth_headers):
        resp = await client.post("/api/account/frequent-flyer", headers=auth_headers, json={
            "airline_code": "tp", "airline_name": "TAP Air Portugal", "member_number": "TP998877",
        })
        assert resp.status_code == 201
        program = resp.json()
        assert program["airline_code"] == "TP"

        resp = await client.patch(
            f"/api/account/frequent-flyer/{program['id']}", headers=auth_headers, json={"tier_status": "Gold"}
        )
        assert resp.json()["tier_status"] == "Gold"

        listed = (await client.get("/api/account/frequent-flyer", headers=auth_headers)).json()
        assert len(listed) == 1

        resp = await client.delete(f"/api/account/frequent-flyer/{program['id']}", headers=auth_headers)
        assert resp.json() == {"success": True}

    async def test_member_number_cannot_be_cleared(self, client, auth_headers):
        program = (await client.post("/api/account/frequent-flyer", headers=auth_headers, json={
            "airline_code": "LA", "airline_name": "LATAM Airlines", "member_number": "LA445566",
        })).json()
        url = f"/api/account/frequent-flyer/{program['id']}"

        assert (await client.patch(url, headers=auth_headers, json={"member_number": None})).status_code == 422
        assert (await client.patch(url, headers=auth_headers, json={"airline_name": None})).status_code == 422
        listed = (await client.get("/api/account/frequent-flyer", headers=auth_headers)).json()
        assert listed[0]["member_number"] == "LA445566"

    async def test_linked_traveler_must_belong_to_user(self, client, auth_headers, other_headers):
        traveler = (await client.post("/api/account/travelers", headers=auth_headers, json=TRAVELER)).json()

        resp = await client.post("/api/account/frequent-flyer", headers=other_headers, json={
            "airline_code": "LA", "airline_name": "LATAM Airlines", "member_number": "123",
            "traveler_profile_id": traveler["id"],
        })
        assert resp.status_code == 404

    async def test_airline_code_length(self, client, auth_headers):
        resp = await client.post("/api/account/frequent-flyer", headers=auth_headers, json={
            "airline_code": "T", "airline_name": "TAP", "member_number": "1",
        })
        assert resp.status_code == 422

    async def test_unknown_program(self, client, auth_headers):
        resp = await client.delete(f"/api/account/frequent-flyer/{uuid.uuid4()}", headers=auth_headers)
        assert resp.status_code == 404


class TestPreferences:
    """GET/PUT /api/account/preferences"""

    async def test_defaults_before_save(self, client, auth_headers):
        resp = await client.get("/api/account/preferences", headers=auth_headers)
        assert resp.json()["budget_range"] == "moderate"
        assert resp.json()["home_airports"] == []

    async def test_upsert(self, client, auth_headers):
        resp = await client.put("/api/account/preferences", headers=auth_headers, json={
            "preferred_airlines": ["tp", "la"],
            "home_airports": ["mia"],
            "preferred_cabin_class": "BUSINESS",
            "max_stops": 1,
        })
        assert resp.status_code == 200
        assert resp.json()["preferred_airlines"] == ["TP", "LA"]
        assert resp.json()["home_airports"] == ["MIA"]

        resp = await client.put("/api/account/preferences", headers=auth_headers, json={"price_drop_threshold": 20})
        data = resp.json()
        assert data["price_drop_threshold"] == 20
        assert data["preferred_cabin_class"] == "BUSINESS"
        assert data["max_stops"] == 1

    async def test_preferences_validation(self, client, auth_headers):
        for payload in ({"max_stops": 5}, {"price_drop_threshold": 0}, {"preferred_cabin_class": "COACH"}):
            resp = await client.put("/api/account/preferences", headers=auth_headers, json=payload)
            assert resp.status_code == 422
