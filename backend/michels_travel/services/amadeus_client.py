"""Amadeus API client — adapter for flight offers and locations with OAuth2 and rate limiting."""

import asyncio
import hashlib
import logging
import random
import re
from datetime import date, datetime, timedelta, timezone

import httpx

from michels_travel.config import settings
from michels_travel.data.airports import AIRPORTS
from michels_travel.errors import ExternalAPIError

logger = logging.getLogger(__name__)

# Airline name lookup (common ones)
AIRLINE_NAMES = {
    "AA": "American Airlines", "DL": "Delta Air Lines", "UA": "United Airlines",
    "B6": "JetBlue Airways", "AS": "Alaska Airlines", "WN": "Southwest Airlines",
    "AC": "Air Canada", "WS": "WestJet", "LA": "LATAM Airlines",
    "G3": "GOL Linhas Aéreas", "AD": "Azul Brazilian Airlines", "AV": "Avianca",
    "CM": "Copa Airlines", "AM": "Aeroméxico", "AR": "Aerolíneas Argentinas",
    "TP": "TAP Air Portugal", "IB": "Iberia", "UX": "Air Europa",
    "BA": "British Airways", "LH": "Lufthansa", "AF": "Air France",
    "KL": "KLM", "LX": "Swiss", "AZ": "ITA Airways",
    "EK": "Emirates", "QR": "Qatar Airways", "TK": "Turkish Airlines",
    "SQ": "Singapore Airlines", "CX": "Cathay Pacific", "NH": "ANA",
    "JL": "Japan Airlines", "VS": "Virgin Atlantic", "FI": "Icelandair",
}

_DURATION_RE = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?)?$")


def airline_name(code: str) -> str:
    return AIRLINE_NAMES.get(code, code)


def parse_iso_duration(duration: str | None) -> int:
    """Parse ISO 8601 duration (PT2H30M, P1DT3H) to minutes. Unparseable input is 0."""
    if not duration:
        return 0
    match = _DURATION_RE.match(duration)
    if not match:
        return 0
    days, hours, minutes = (int(part) if part else 0 for part in match.groups())
    return days * 24 * 60 + hours * 60 + minutes


def format_duration(minutes: int) -> str:
    """Render minutes as "2h 30m", "45m" or "3h"."""
    hours, mins = divmod(max(minutes, 0), 60)
    if hours and mins:
        return f"{hours}h {mins}m"
    if hours:
        return f"{hours}h"
    return f"{mins}m"


class AmadeusClient:
    """Adapter for Amadeus Self-Service API."""

    def __init__(self):
        self._token: str | None = None
        self._token_expires: datetime | None = None
        self._semaphore = asyncio.Semaphore(10)  # 10 req/s rate limit
        self._client: httpx.AsyncClient | None = None
        self._use_mock = not settings.amadeus_client_id

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=settings.amadeus_base_url,
                timeout=30.0,
            )
        return self._client

    async def _ensure_token(self):
        """Get or refresh OAuth2 token."""
        if self._use_mock:
            return

        if self._token and self._token_expires and datetime.now(timezone.utc) < self._token_expires:
            return

        client = await self._get_client()
        for attempt in range(3):
            try:
                resp = await client.post(
                    "/v1/security/oauth2/token",
                    data={
                        "grant_type": "client_credentials",
                        "client_id": settings.amadeus_client_id,
                        "client_secret": settings.amadeus_client_secret,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                resp.raise_for_status()
                data = resp.json()
                self._token = data["access_token"]
                self._token_expires = datetime.now(timezone.utc) + timedelta(
                    seconds=data.get("expires_in", 1799) - 60
                )
                logger.info("Amadeus token refreshed")
                return
            except httpx.HTTPStatusError as e:
                if e.response.status_code == 429 and attempt < 2:
                    await asyncio.sleep(2 ** attempt)
                    continue
                raise ExternalAPIError("Amadeus", f"Authentication failed ({e.response.status_code})")
            except httpx.RequestError as e:
                if attempt < 2:
                    await asyncio.sleep(2 ** attempt)
                    continue
                raise ExternalAPIError("Amadeus", f"Authentication request failed: {e}")

    async def _get(self, path: str, params: dict) -> dict:
        """Authenticated GET with 429 backoff. Raises ExternalAPIError on failure."""
        async with self._semaphore:
            await self._ensure_token()
            client = await self._get_client()

            for attempt in range(3):
                try:
                    resp = await client.get(
                        path,
                        params=params,
                        headers={"Authorization": f"Bearer {self._token}"},
                    )
                    if resp.status_code == 429 and attempt < 2:
                        await asyncio.sleep(2 ** attempt)
                        continue
                    if resp.status_code == 401 and attempt < 2:
                        self._token = None
                        await self._ensure_token()
                        continue
                    resp.raise_for_status()
                    return resp.json()
                except httpx.HTTPStatusError as e:
                    logger.error(f"Amadeus {path} error: {e.response.status_code}")
                    detail = None
                    try:
                        detail = e.response.json().get("errors")
                    except ValueError:
                        pass
                    raise ExternalAPIError("Amadeus", f"Request failed ({e.response.status_code})", detail)
                except httpx.RequestError as e:
                    logger.error(f"Amadeus request error: {e}")
                    if attempt == 2:
                        raise ExternalAPIError("Amadeus", "Flight provider unreachable")
                    await asyncio.sleep(2 ** attempt)

        raise ExternalAPIError("Amadeus", "Rate limit retries exhausted")

    async def search_flight_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None = None,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
        travel_class: str | None = None,
        non_stop: bool = False,
        max_results: int = 50,
    ) -> list[dict]:
        """Search flight offers and return them normalised, cheapest first."""
        if self._use_mock:
            offers = self._generate_mock_offers(
                origin, destination, departure_date, return_date,
                adults + children, travel_class or "ECONOMY", non_stop,
            )
            return offers[:max_results]

        params: dict = {
            "originLocationCode": origin,
            "destinationLocationCode": destination,
            "departureDate": departure_date.isoformat(),
            "adults": adults,
            "max": max_results,
            "currencyCode": settings.default_currency,
        }
        if return_date:
            params["returnDate"] = return_date.isoformat()
        if children:
            params["children"] = children
        if infants:
            params["infants"] = infants
        if travel_class:
            params["travelClass"] = travel_class
        if non_stop:
            params["nonStop"] = "true"

        data = await self._get("/v2/shopping/flight-offers", params)
        carriers = data.get("dictionaries", {}).get("carriers", {})
        offers = [self._parse_offer(offer, carriers) for offer in data.get("data", [])]
        offers = [o for o in offers if o]
        return sorted(offers, key=lambda o: float(o["price"]["total"]))

    async def search_locations(self, keyword: str, limit: int = 10) -> list[dict]:
        """Airport and city lookup for autocomplete."""
        if self._use_mock:
            return []

        data = await self._get(
            "/v1/reference-data/locations",
            {"subType": "AIRPORT,CITY", "keyword": keyword, "page[limit]": limit, "view": "LIGHT"},
        )
        results = []
        for loc in data.get("data", []):
            address = loc.get("address", {})
            code = loc.get("iataCode")
            if not code:
                continue
            results.append({
                "code": code,
                "name": (loc.get("name") or "").title(),
                "city": (address.get("cityName") or "").title(),
                "country": (address.get("countryName") or "").title(),
                "country_code": address.get("countryCode"),
                "type": loc.get("subType", "AIRPORT"),
                "source": "amadeus",
            })
        return results

    def _parse_offer(self, offer: dict, carriers: dict | None = None) -> dict:
        """Parse Amadeus offer JSON into our normalised offer format."""
        carriers = carriers or {}
        itineraries = offer.get("itineraries", [])
        if not itineraries or not itineraries[0].get("segments"):
            return {}

        price = offer.get("price", {})
        total = price.get("grandTotal") or price.get("total") or "0"

        cabin = "ECONOMY"
        checked_bags = None
        traveler_pricings = offer.get("travelerPricings", [])
        if traveler_pricings:
            fare_details = traveler_pricings[0].get("fareDetailsBySegment", [])
            if fare_details:
                cabin = fare_details[0].get("cabin", "ECONOMY")
                bags = fare_details[0].get("includedCheckedBags") or {}
                checked_bags = bags.get("quantity")

        validating = (offer.get("validatingAirlineCodes") or [""])[0]
        if not validating:
            validating = itineraries[0]["segments"][0].get("carrierCode", "")

        return {
            "id": str(offer.get("id", "")),
            "price": {
                "total": str(total),
                "base": str(price.get("base", total)),
                "currency": price.get("currency", settings.default_currency),
            },
            "outbound": self._parse_itinerary(itineraries[0], carriers),
            "inbound": self._parse_itinerary(itineraries[1], carriers) if len(itineraries) > 1 else None,
            "cabin_class": cabin,
            "baggage": {"checked_bags": checked_bags} if checked_bags is not None else None,
            "validating_airline_code": validating,
            "validating_airline": carriers.get(validating, "").title() or airline_name(validating),
            "seats_available": offer.get("numberOfBookableSeats"),
            "last_ticketing_date": offer.get("lastTicketingDate"),
        }

    @staticmethod
    def _parse_itinerary(itinerary: dict, carriers: dict) -> dict:
        segments = itinerary.get("segments", [])
        first_seg = segments[0]
        last_seg = segments[-1]
        duration_minutes = parse_iso_duration(itinerary.get("duration"))

        parsed_segments = []
        for seg in segments:
            code = seg.get("carrierCode", "")
            seg_minutes = parse_iso_duration(seg.get("duration"))
            parsed_segments.append({
                "carrier_code": code,
                "carrier_name": carriers.get(code, "").title() or airline_name(code),
                "flight_number": f"{code}{seg.get('number', '')}",
                "aircraft": seg.get("aircraft", {}).get("code"),
                "departure": {
                    "airport": seg["departure"]["iataCode"],
                    "terminal": seg["departure"].get("terminal"),
                    "time": seg["departure"]["at"],
                },
                "arrival": {
                    "airport": seg["arrival"]["iataCode"],
                    "terminal": seg["arrival"].get("terminal"),
                    "time": seg["arrival"]["at"],
                },
                "duration": format_duration(seg_minutes),
                "duration_minutes": seg_minutes,
            })

        return {
            "departure": {
                "airport": first_seg["departure"]["iataCode"],
                "terminal": first_seg["departure"].get("terminal"),
                "time": first_seg["departure"]["at"],
            },
            "arrival": {
                "airport": last_seg["arrival"]["iataCode"],
                "terminal": last_seg["arrival"].get("terminal"),
                "time": last_seg["arrival"]["at"],
            },
            "duration": format_duration(duration_minutes),
            "duration_minutes": duration_minutes,
            "stops": len(segments) - 1,
            "segments": parsed_segments,
        }

    # --- Mock data generation for demo mode ---

    def _generate_mock_offers(
        self,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None,
        seats: int,
        travel_class: str,
        non_stop: bool,
    ) -> list[dict]:
        """Generate realistic mock offers for demo/development."""
        # Deterministic seed based on the search for consistency
        seed_str = f"{origin}{destination}{departure_date.isoformat()}{return_date}{travel_class}"
        seed = int(hashlib.md5(seed_str.encode()).hexdigest()[:8], 16)
        rng = random.Random(seed)

        base_price = self._estimate_base_price(origin, destination, travel_class)
        airlines = self._get_route_airlines(origin, destination)
        offers = []

        for i in range(rng.randint(6, 12)):
            airline = rng.choice(airlines)
            fare = base_price * rng.uniform(0.8, 1.8) * (1.8 if return_date else 1.0)
            per_seat = round(fare, 2)
            total = round(per_seat * max(seats, 1), 2)

            outbound = self._mock_itinerary(rng, airline, origin, destination, departure_date, non_stop)
            inbound = None
            if return_date:
                inbound = self._mock_itinerary(rng, airline, destination, origin, return_date, non_stop)

            offers.append({
                "id": f"mock-{seed:x}-{i + 1}",
                "price": {
                    "total": f"{total:.2f}",
                    "base": f"{total * 0.82:.2f}",
                    "currency": settings.default_currency,
                },
                "outbound": outbound,
                "inbound": inbound,
                "cabin_class": travel_class,
                "baggage": {"checked_bags": 0 if travel_class == "ECONOMY" and rng.random() < 0.5 else 1},
                "validating_airline_code": airline,
                "validating_airline": airline_name(airline),
                "seats_available": rng.randint(1, 9),
                "last_ticketing_date": (departure_date - timedelta(days=1)).isoformat(),
            })

        return sorted(offers, key=lambda o: float(o["price"]["total"]))

    def _mock_itinerary(
        self,
        rng: random.Random,
        airline: str,
        origin: str,
        destination: str,
        day: date,
        non_stop: bool,
    ) -> dict:
        dep_time = datetime(day.year, day.month, day.day, rng.randint(6, 21), rng.choice([0, 15, 30, 45]))
        stops = 0 if non_stop else rng.choices([0, 1, 2], weights=[55, 35, 10])[0]
        base_duration = self._estimate_duration(origin, destination)

        hubs = [h for h in ("MIA", "GRU", "LIS", "MAD", "PTY", "BOG", "ATL", "JFK") if h not in (origin, destination)]
        stop_airports = rng.sample(hubs, stops)
        points = [origin, *stop_airports, destination]

        segments = []
        current = dep_time
        leg_minutes = max(base_duration // (stops + 1), 45)
        for idx in range(len(points) - 1):
            seg_minutes = leg_minutes + rng.randint(-15, 30)
            arrival = current + timedelta(minutes=seg_minutes)
            segments.append({
                "carrier_code": airline,
                "carrier_name": airline_name(airline),
                "flight_number": f"{airline}{rng.randint(100, 9999)}",
                "aircraft": rng.choice(["320", "321", "738", "789", "77W", "E95"]),
                "departure": {"airport": points[idx], "terminal": None, "time": current.isoformat()},
                "arrival": {"airport": points[idx + 1], "terminal": None, "time": arrival.isoformat()},
                "duration": format_duration(seg_minutes),
                "duration_minutes": seg_minutes,
            })
            # Layover before the next segment
            current = arrival + timedelta(minutes=rng.randint(50, 120))

        total_minutes = int(
            (datetime.fromisoformat(segments[-1]["arrival"]["time"]) - dep_time).total_seconds() // 60
        )
        return {
            "departure": dict(segments[0]["departure"]),
            "arrival": dict(segments[-1]["arrival"]),
            "duration": format_duration(total_minutes),
            "duration_minutes": total_minutes,
            "stops": stops,
            "segments": segments,
        }

    @staticmethod
    def _country_of(code: str) -> str | None:
        for airport in AIRPORTS:
            if airport[0] == code:
                return airport[4]
        return None

    def _estimate_base_price(self, origin: str, destination: str, travel_class: str) -> float:
        """Rough per-seat base price by whether the route is domestic, regional or long-haul."""
        o_country = self._country_of(origin)
        d_country = self._country_of(destination)
        americas = {"US", "CA", "MX", "BR", "AR", "CL", "CO", "PE", "PA", "CU", "DO", "PR", "JM", "BS"}

        if o_country and o_country == d_country:
            base = 160
        elif o_country in americas and d_country in americas:
            base = 480
        else:
            base = 820  # Intercontinental

        multiplier = {
            "ECONOMY": 1.0, "PREMIUM_ECONOMY": 1.3,
            "BUSINESS": 2.5, "FIRST": 4.0,
        }.get(travel_class, 1.0)
        return base * multiplier

    def _estimate_duration(self, origin: str, destination: str) -> int:
        """Rough flight duration in minutes."""
        o_country = self._country_of(origin)
        d_country = self._country_of(destination)
        if o_country and o_country == d_country:
            return 110
        if o_country and d_country and {o_country, d_country} <= {"US", "CA", "MX"}:
            return 240
        return 600

    def _get_route_airlines(self, origin: str, destination: str) -> list[str]:
        """Return plausible airlines for a route."""
        countries = {self._country_of(origin), self._country_of(destination)}
        if "BR" in countries and "PT" in countries:
            return ["TP", "LA", "AD"]
        if countries == {"BR"}:
            return ["LA", "G3", "AD"]
        if "BR" in countries:
            return ["LA", "G3", "AA", "DL", "UA", "CM", "AV"]
        if countries & {"PT", "ES", "FR", "GB", "DE", "IT", "NL"}:
            return ["TP", "IB", "BA", "AF", "LH", "KL", "AA", "DL", "UA"]
        return ["AA", "DL", "UA", "B6", "AS", "WN"]

    async def close(self):
        if self._client:
            await self._client.aclose()
            self._client = None


amadeus_client = AmadeusClient()
