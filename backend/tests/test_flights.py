"""
Flight search tests: duration helpers, result filtering and sorting,
airport lookup and the search endpoint in mock provider mode.
"""

import pytest
from sqlalchemy import select

from michels_travel.data.airports import get_airport_by_code, search_local_airports
from michels_travel.database import async_session_factory, engine
from michels_travel.errors import ExternalAPIError
from michels_travel.models.search import FlightSearch
from michels_travel.services.amadeus_client import airline_name, amadeus_client, format_duration, parse_iso_duration
from michels_travel.services.cache_service import CacheService, cache_service
from michels_travel.services.flight_service import filter_flights, sort_flights, summarize_carriers


def make_offer(offer_id, price, departure="2026-12-10T08:00:00", arrival="2026-12-10T12:00:00",
               minutes=240, stops=0, airline="AA"):
    return {
        "id": offer_id,
        "price": {"total": f"{price:.2f}", "currency": "USD"},
        "outbound": {
            "departure": {"time": departure},
            "arrival": {"time": arrival},
            "duration_minutes": minutes,
            "stops": stops,
            "segments": [{"carrier_code": airline}],
        },
        "inbound": None,
        "validating_airline_code": airline,
        "validating_airline": airline_name(airline),
    }


@pytest.fixture
def offers():
    return [
        make_offer("a", 520.0, departure="2026-12-10T06:30:00", arrival="2026-12-10T10:00:00", minutes=210, airline="AA"),
        make_offer("b", 380.0, departure="2026-12-10T13:15:00", arrival="2026-12-10T20:45:00", minutes=450, stops=1, airline="LA"),
        make_offer("c", 410.0, departure="2026-12-10T19:00:00", arrival="2026-12-11T07:00:00", minutes=720, stops=2, airline="G3"),
        make_offer("d", 380.0, departure="2026-12-10T04:45:00", arrival="2026-12-10T09:00:00", minutes=255, airline="AA"),
    ]


class TestDurations:
    """ISO 8601 parsing and display formatting"""

    @pytest.mark.parametrize("raw, minutes", [
        ("PT2H30M", 150),
        ("PT45M", 45),
        ("PT11H", 660),
        ("P1DT3H", 1620),
        ("", 0),
        (None, 0),
        ("2 hours", 0),
    ])
    def test_parse_iso_duration(self, raw, minutes):
        assert parse_iso_duration(raw) == minutes

    @pytest.mark.parametrize("minutes, text", [(150, "2h 30m"), (45, "45m"), (180, "3h"), (0, "0m")])
    def test_format_duration(self, minutes, text):
        assert format_duration(minutes) == text

    def test_airline_name_falls_back_to_code(self):
        assert airline_name("TP") == "TAP Air Portugal"
        assert airline_name("ZZ") == "ZZ"


class TestFilterFlights:
    """filter_flights skips every filter left unset"""

    def test_no_filters_keeps_everything(self, offers):
        assert filter_flights(offers) == offers

    def test_max_stops(self, offers):
        assert [o["id"] for o in filter_flights(offers, max_stops=0)] == ["a", "d"]

    def test_airlines_case_insensitive(self, offers):
        assert [o["id"] for o in filter_flights(offers, airlines=["la", "g3"])] == ["b", "c"]

    def test_price_range(self, offers):
        assert [o["id"] for o in filter_flights(offers, min_price=400, max_price=500)] == ["c"]

    def test_departure_windows(self, offers):
        kept = filter_flights(offers, departure_windows=["early_morning", "evening"])
        assert [o["id"] for o in kept] == ["c", "d"]

    def test_max_duration(self, offers):
        assert [o["id"] for o in filter_flights(offers, max_duration_minutes=300)] == ["a", "d"]


class TestSortFlights:
    """sort_flights is stable and breaks ties on price"""

    def test_price_ascending_keeps_tie_order(self, offers):
        assert [o["id"] for o in sort_flights(offers)] == ["b", "d", "c", "a"]

    def test_price_descending(self, offers):
        assert [o["id"] for o in sort_flights(offers, "price", "desc")][0] == "a"

    def test_duration(self, offers):
        assert [o["id"] for o in sort_flights(offers, "duration")] == ["a", "d", "b", "c"]

    def test_departure(self, offers):
        assert [o["id"] for o in sort_flights(offers, "departure")] == ["d", "a", "b", "c"]

    def test_carrier_summary(self, offers):
        summary = summarize_carriers(offers)
        assert summary[0] == {"code": "AA", "name": "American Airlines", "min_price": 380.0}
        assert {c["code"]: c["min_price"] for c in summary} == {"AA": 380.0, "LA": 380.0, "G3": 410.0}


class TestSearchKey:
    """Cache keys are normalised"""

    def test_same_search_same_key(self):
        a = CacheService.flight_search_key("gru", "lis", "2026-12-10", None, 2, 0, 0, None, False)
        b = CacheService.flight_search_key("GRU", "LIS", "2026-12-10", None, 2, 0, 0, "economy", False)
        assert a == b == "flights:GRU:LIS:2026-12-10:oneway:2:0:0:ECONOMY:any"

    def test_non_stop_changes_key(self):
        a = CacheService.flight_search_key("GRU", "LIS", "2026-12-10")
        b = CacheService.flight_search_key("GRU", "LIS", "2026-12-10", non_stop=True)
        assert a != b


class TestLocalAirports:
    """Bundled airport search"""

    def test_exact_code_short_circuits(self):
        results = search_local_airports("mia")
        assert [r["code"] for r in results] == ["MIA"]
        assert results[0]["source"] == "local"

    def test_exact_city_ranks_first(self):
        results = search_local_airports("London")
        assert {r["code"] for r in results[:2]} == {"LHR", "LGW"}

    def test_short_keyword_returns_nothing(self):
        assert search_local_airports("m") == []

    def test_limit(self):
        assert len(search_local_airports("an", limit=5)) <= 5

    def test_get_airport_by_code(self):
        assert get_airport_by_code(" jfk ")["city"] == "New York"
        assert get_airport_by_code("XXX") is None


class TestFlightEndpoints:
    """/api/flights"""

    async def test_airport_lookup(self, client):
        resp = await client.get("/api/flights/airports/LIS")
        assert resp.status_code == 200
        assert resp.json()["country_code"] == "PT"

    async def test_airport_not_found(self, client):
        resp = await client.get("/api/flights/airports/XXX")
        assert resp.status_code == 404
        assert resp.json()["code"] == "NOT_FOUND"

    async def test_locations(self, client):
        resp = await client.get("/api/flights/locations", params={"keyword": "paris"})
        assert resp.status_code == 200
        assert {"CDG", "ORY"} <= {loc["code"] for loc in resp.json()}

    async def test_locations_keyword_too_short(self, client):
        resp = await client.get("/api/flights/locations", params={"keyword": "p"})
        assert resp.status_code == 422

    async def test_popular_routes_without_cache(self, client):
        resp = await client.get("/api/flights/popular-routes")
        assert resp.json() == []

    async def test_search_returns_normalised_offers(self, client):
        """Mock mode returns offers cheapest first with the response meta"""
        resp = await client.post("/api/flights/search", json={
            "origin": "gru", "destination": "lis", "departure_date": "2026-12-10", "adults": 2,
        })

        assert resp.status_code == 200
        body = resp.json()
        offers = body["data"]
        assert offers
        assert body["meta"]["count"] == len(offers)
        assert body["meta"]["total_results"] == len(offers)
        assert body["meta"]["from_cache"] is False
        assert body["meta"]["currency"] == "USD"

        prices = [float(o["price"]["total"]) for o in offers]
        assert prices == sorted(prices)
        first = offers[0]
        assert first["outbound"]["departure"]["airport"] == "GRU"
        assert first["outbound"]["arrival"]["airport"] == "LIS"
        assert first["inbound"] is None
        assert first["validating_airline_code"] in ("TP", "LA", "AD")

    async def test_search_is_deterministic(self, client):
        payload = {"origin": "MIA", "destination": "JFK", "departure_date": "2026-12-10"}
        first = (await client.post("/api/flights/search", json=payload)).json()["data"]
        second = (await client.post("/api/flights/search", json=payload)).json()["data"]
        assert [o["id"] for o in first] == [o["id"] for o in second]

    async def test_search_round_trip_and_non_stop(self, client):
        resp = await client.post("/api/flights/search", json={
            "origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10",
            "return_date": "2026-12-20", "non_stop": True,
        })
        offers = resp.json()["data"]
        assert offers
        assert all(o["outbound"]["stops"] == 0 and o["inbound"]["stops"] == 0 for o in offers)

    async def test_search_sort_and_filter(self, client):
        resp = await client.post("/api/flights/search", json={
            "origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10",
            "sort_by": "duration", "max_stops": 1,
        })
        offers = resp.json()["data"]
        durations = [o["outbound"]["duration_minutes"] for o in offers]
        assert durations == sorted(durations)
        assert all(o["outbound"]["stops"] <= 1 for o in offers)

    async def test_search_is_logged(self, client):
        await client.post("/api/flights/search", json={
            "origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10",
        })
        async with async_session_factory() as db:
            logged = (await db.execute(select(FlightSearch))).scalar_one()
        assert (logged.origin, logged.destination) == ("MIA", "GRU")
        assert logged.results_count > 0
        assert logged.from_cache is False

    @pytest.mark.parametrize("payload", [
        {"origin": "MIA", "destination": "MIA", "departure_date": "2026-12-10"},
        {"origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10", "return_date": "2026-12-01"},
        {"origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10", "adults": 1, "infants": 2},
        {"origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10", "adults": 10},
        {"origin": "MIAMI", "destination": "GRU", "departure_date": "2026-12-10"},
    ])
    async def test_search_validation(self, client, payload):
        resp = await client.post("/api/flights/search", json=payload)
        assert resp.status_code == 422
        assert resp.json()["code"] == "VALIDATION_ERROR"


@pytest.fixture
def memory_cache(monkeypatch):
    """Back the cache service with a plain dict for the duration of a test."""
    store = {}

    async def get(key):
        return store.get(key)

    async def set(key, value, ttl=0):
        store[key] = value
        return True

    monkeypatch.setattr(cache_service, "get", get)
    monkeypatch.setattr(cache_service, "set", set)
    return store


class TestSearchCache:
    """Repeated searches are served from the cache"""

    SEARCH = {"origin": "MIA", "destination": "GRU", "departure_date": "2026-12-10"}

    async def test_second_search_hits_cache(self, client, memory_cache):
        first = (await client.post("/api/flights/search", json=self.SEARCH)).json()
        second = (await client.post("/api/flights/search", json=self.SEARCH)).json()

        assert first["meta"]["from_cache"] is False
        assert second["meta"]["from_cache"] is True
        assert [o["id"] for o in second["data"]] == [o["id"] for o in first["data"]]
        assert len(memory_cache) == 1

        async with async_session_factory() as db:
            logged = (await db.execute(select(FlightSearch.from_cache))).scalars().all()
        assert sorted(logged) == [False, True]

    async def test_price_cap_does_not_shrink_cached_results(self, client, memory_cache):
        full = (await client.post("/api/flights/search", json=self.SEARCH)).json()
        cheapest = min(float(o["price"]["total"]) for o in full["data"])
        cap = int(cheapest) + 1

        capped = (await client.post("/api/flights/search", json={**self.SEARCH, "max_price": cap})).json()
        assert capped["meta"]["from_cache"] is True
        assert 0 < capped["meta"]["total_results"] < full["meta"]["total_results"]
        assert all(float(o["price"]["total"]) <= cap for o in capped["data"])

        again = (await client.post("/api/flights/search", json=self.SEARCH)).json()
        assert again["meta"]["from_cache"] is True
        assert again["meta"]["total_results"] == full["meta"]["total_results"]
        assert [o["id"] for o in again["data"]] == [o["id"] for o in full["data"]]

    async def test_capped_first_search_caches_full_results(self, client, memory_cache):
        capped = (await client.post("/api/flights/search", json={**self.SEARCH, "max_price": 1})).json()
        assert capped["data"] == []

        full = (await client.post("/api/flights/search", json=self.SEARCH)).json()
        assert full["meta"]["from_cache"] is True
        assert full["data"]

    async def test_search_log_failure_still_returns_offers(self, client):
        async with engine.begin() as conn:
            await conn.run_sync(FlightSearch.__table__.drop)

        resp = await client.post("/api/flights/search", json=self.SEARCH)

        assert resp.status_code == 200
        assert resp.json()["data"]


class TestLocationLookup:
    """Local airports topped up from the provider when there are few matches"""

    REMOTE = [
        {"code": "LIS", "name": "Humberto Delgado", "city": "Lisbon", "country": "Portugal",
         "country_code": "PT", "type": "AIRPORT", "source": "amadeus"},
        {"code": "XLS", "name": "Saint Louis", "city": "Saint Louis", "country": "Senegal",
         "country_code": "SN", "type": "AIRPORT", "source": "amadeus"},
    ]

    async def test_enough_local_matches_skip_provider(self, client, monkeypatch):
        async def fail(keyword, limit=10):
            raise AssertionError("provider should not be called")

        monkeypatch.setattr(amadeus_client, "search_locations", fail)
        resp = await client.get("/api/flights/locations", params={"keyword": "london"})
        assert resp.status_code == 200
        assert {"LHR", "LGW", "STN"} <= {loc["code"] for loc in resp.json()}

    async def test_merges_provider_results_without_duplicates(self, client, monkeypatch):
        async def remote(keyword, limit=10):
            return self.REMOTE

        monkeypatch.setattr(amadeus_client, "search_locations", remote)
        resp = await client.get("/api/flights/locations", params={"keyword": "lis"})

        codes = [loc["code"] for loc in resp.json()]
        assert codes == ["LIS", "XLS"]
        assert resp.json()[0]["source"] == "local"

    async def test_provider_results_are_cached(self, client, monkeypatch, memory_cache):
        calls = []

        async def remote(keyword, limit=10):
            calls.append(keyword)
            return self.REMOTE

        monkeypatch.setattr(amadeus_client, "search_locations", remote)
        await client.get("/api/flights/locations", params={"keyword": "lis"})
        resp = await client.get("/api/flights/locations", params={"keyword": "lis"})

        assert calls == ["lis"]
        assert [loc["code"] for loc in resp.json()] == ["LIS", "XLS"]

    async def test_provider_failure_falls_back_to_local(self, client, monkeypatch):
        async def down(keyword, limit=10):
            raise ExternalAPIError("Amadeus", "location lookup failed")

        monkeypatch.setattr(amadeus_client, "search_locations", down)
        resp = await client.get("/api/flights/locations", params={"keyword": "lis"})

        assert resp.status_code == 200
        assert [loc["code"] for loc in resp.json()] == ["LIS"]
