"""Flight service — search orchestration, result filtering/sorting and location autocomplete."""

import logging
import uuid
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.data.airports import search_local_airports
from michels_travel.errors import AppError
from michels_travel.models.search import FlightSearch
from michels_travel.services.amadeus_client import amadeus_client
from michels_travel.services.cache_service import cache_service

logger = logging.getLogger(__name__)

MIN_LOCAL_RESULTS = 3
MAX_LOCATION_RESULTS = 15

# Departure windows by hour, inclusive start / exclusive end
TIME_WINDOWS = {
    "early_morning": (0, 6),
    "morning": (6, 12),
    "afternoon": (12, 18),
    "evening": (18, 24),
}


def _departure_hour(offer: dict) -> int:
    return int(offer["outbound"]["departure"]["time"][11:13])


def _total_price(offer: dict) -> float:
    return float(offer["price"]["total"])


def _offer_airlines(offer: dict) -> set[str]:
    codes = {offer.get("validating_airline_code")}
    for itinerary in (offer.get("outbound"), offer.get("inbound")):
        if itinerary:
            codes.update(seg["carrier_code"] for seg in itinerary["segments"])
    codes.discard(None)
    return codes


def _max_stops(offer: dict) -> int:
    stops = offer["outbound"]["stops"]
    if offer.get("inbound"):
        stops = max(stops, offer["inbound"]["stops"])
    return stops


def filter_flights(
    offers: list[dict],
    max_stops: int | None = None,
    airlines: list[str] | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    departure_windows: list[str] | None = None,
    max_duration_minutes: int | None = None,
) -> list[dict]:
    """Apply the result filters. Every filter left as None is skipped."""
    wanted_airlines = {a.upper() for a in airlines} if airlines else None
    windows = [TIME_WINDOWS[w] for w in departure_windows or [] if w in TIME_WINDOWS]

    result = []
    for offer in offers:
        price = _total_price(offer)
        if max_stops is not None and _max_stops(offer) > max_stops:
            continue
        if wanted_airlines and not (_offer_airlines(offer) & wanted_airlines):
            continue
        if min_price is not None and price < min_price:
            continue
        if max_price is not None and price > max_price:
            continue
        if windows:
            hour = _departure_hour(offer)
            if not any(start <= hour < end for start, end in windows):
                continue
        if max_duration_minutes is not None and offer["outbound"]["duration_minutes"] > max_duration_minutes:
            continue
        result.append(offer)
    return result


SORT_KEYS = {
    "price": _total_price,
    "duration": lambda o: o["outbound"]["duration_minutes"],
    "departure": lambda o: o["outbound"]["departure"]["time"],
    "arrival": lambda o: o["outbound"]["arrival"]["time"],
    "stops": _max_stops,
}


def sort_flights(offers: list[dict], sort_by: str = "price", sort_order: str = "asc") -> list[dict]:
    """Stable sort by one of price, duration, departure, arrival or stops. Price breaks ties."""
    key = SORT_KEYS.get(sort_by, _total_price)
    ordered = sorted(offers, key=_total_price)
    return sorted(ordered, key=key, reverse=(sort_order == "desc"))


def summarize_carriers(offers: list[dict]) -> list[dict]:
    """Cheapest price per validating airline, for the filter sidebar."""
    best: dict[str, dict] = {}
    for offer in offers:
        code = offer.get("validating_airline_code") or ""
        price = _total_price(offer)
        if code not in best or price < best[code]["min_price"]:
            best[code] = {"code": code, "name": offer.get("validating_airline") or code, "min_price": price}
    return sorted(best.values(), key=lambda c: c["min_price"])


class FlightService:
    """Flight search with caching, popularity tracking and search logging."""

    async def search(
        self,
        db: AsyncSession,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None = None,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
        travel_class: str | None = None,
        non_stop: bool = False,
        max_price: int | None = None,
        user_id: uuid.UUID | None = None,
    ) -> dict:
        """Fetch (or reuse cached) offers for a search and log it. Returns offers plus meta."""
        origin = origin.upper()
        destination = destination.upper()

        key = cache_service.flight_search_key(
            origin, destination, departure_date.isoformat(),
            return_date.isoformat() if return_date else None,
            adults, children, infants, travel_class, non_stop,
        )
        offers = await cache_service.get_flight_search(key)
        from_cache = offers is not None

        if offers is None:
            offers = await amadeus_client.search_flight_offers(
                origin=origin,
                destination=destination,
                departure_date=departure_date,
                return_date=return_date,
                adults=adults,
                children=children,
                infants=infants,
                travel_class=travel_class,
                non_stop=non_stop,
            )
            popular = await cache_service.is_popular_route(origin, destination)
            await cache_service.set_flight_search(key, offers, popular=popular)

        # The cache holds the uncapped result set, so the cap is applied per request
        if max_price is not None:
            offers = [o for o in offers if _total_price(o) <= max_price]

        await cache_service.record_route_search(origin, destination)

        await self._log_search(
            db, user_id, origin, destination, departure_date, return_date,
            adults, children, infants, travel_class, offers, from_cache,
        )

        return {"offers": offers, "from_cache": from_cache}

    async def _log_search(
        self,
        db: AsyncSession,
        user_id: uuid.UUID | None,
        origin: str,
        destination: str,
        departure_date: date,
        return_date: date | None,
        adults: int,
        children: int,
        infants: int,
        travel_class: str | None,
        offers: list[dict],
        from_cache: bool,
    ):
        try:
            db.add(FlightSearch(
                user_id=user_id,
                origin=origin,
                destination=destination,
                departure_date=departure_date.isoformat(),
                return_date=return_date.isoformat() if return_date else None,
                adults=adults,
                children=children,
                infants=infants,
                travel_class=travel_class,
                results_count=len(offers),
                cheapest_price=offers[0]["price"]["total"] if offers else None,
                from_cache=from_cache,
            ))
            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.warning(f"Failed to log flight search {origin}->{destination}: {e}")

    async def search_locations(self, keyword: str) -> list[dict]:
        """Local airport list first; top up from the provider when it finds fewer than three."""
        local = search_local_airports(keyword, limit=MAX_LOCATION_RESULTS)
        if len(local) >= MIN_LOCAL_RESULTS:
            return local

        cached = await cache_service.get_locations(keyword)
        if cached is not None:
            remote = cached
        else:
            try:
                remote = await amadeus_client.search_locations(keyword)
                await cache_service.set_locations(keyword, remote)
            except AppError as e:
                logger.warning(f"Location lookup for '{keyword}' fell back to local results: {e.message}")
                return local

        seen = {loc["code"] for loc in local}
        merged = list(local)
        for loc in remote:
            if loc["code"] not in seen:
                seen.add(loc["code"])
                merged.append(loc)
        return merged[:MAX_LOCATION_RESULTS]


flight_service = FlightService()
