"""Redis cache service for flight searches, location lookups and route popularity."""

import json
import logging
from typing import Any

import redis.asyncio as redis

from michels_travel.config import settings

logger = logging.getLogger(__name__)

# TTLs in seconds
TTL_FLIGHT_SEARCH = 15 * 60          # 15 minutes
TTL_POPULAR_FLIGHT_SEARCH = 10 * 60  # 10 minutes, popular routes refresh faster
TTL_LOCATIONS = 24 * 60 * 60         # 24 hours
TTL_ROUTE_COUNTER = 7 * 24 * 60 * 60  # 7 days

POPULAR_ROUTE_THRESHOLD = 5
ROUTE_RANKING_KEY = "routes:ranking"


class CacheService:
    """Redis-backed cache with typed TTLs. Every call degrades to a miss when Redis is down."""

    def __init__(self):
        self._redis: redis.Redis | None = None
        self._enabled = settings.cache_enabled

    async def _get_redis(self) -> redis.Redis | None:
        if not self._enabled:
            return None
        if self._redis is None:
            try:
                self._redis = redis.from_url(
                    settings.redis_url,
                    encoding="utf-8",
                    decode_responses=True,
                )
                await self._redis.ping()
            except Exception as e:
                logger.warning(f"Redis unavailable, cache disabled: {e}")
                self._redis = None
                return None
        return self._redis

    async def get(self, key: str) -> Any | None:
        """Get a value from cache. Returns None on miss or error."""
        try:
            r = await self._get_redis()
            if r is None:
                return None
            raw = await r.get(key)
            if raw is None:
                return None
            return json.loads(raw)
        except Exception:
            return None

    async def set(self, key: str, value: Any, ttl: int = TTL_FLIGHT_SEARCH) -> bool:
        """Set a value in cache with TTL. Returns False on error."""
        try:
            r = await self._get_redis()
            if r is None:
                return False
            await r.set(key, json.dumps(value, default=str), ex=ttl)
            return True
        except Exception:
            return False

    # Typed helpers

    @staticmethod
    def flight_search_key(
        origin: str,
        destination: str,
        departure_date: str,
        return_date: str | None = None,
        adults: int = 1,
        children: int = 0,
        infants: int = 0,
        travel_class: str | None = None,
        non_stop: bool = False,
    ) -> str:
        """Normalised key: same search, same key regardless of case or omitted defaults."""
        return ":".join([
            "flights",
            origin.upper(),
            destination.upper(),
            departure_date,
            return_date or "oneway",
            str(adults),
            str(children or 0),
            str(infants or 0),
            (travel_class or "ECONOMY").upper(),
            "nonstop" if non_stop else "any",
        ])

    @staticmethod
    def route_key(origin: str, destination: str) -> str:
        return f"{origin.upper()}-{destination.upper()}"

    @staticmethod
    def locations_key(keyword: str) -> str:
        return f"locations:{keyword.strip().lower()}"

    async def get_flight_search(self, key: str) -> list[dict] | None:
        return await self.get(key)

    async def set_flight_search(self, key: str, data: list[dict], popular: bool = False):
        ttl = TTL_POPULAR_FLIGHT_SEARCH if popular else TTL_FLIGHT_SEARCH
        await self.set(key, data, ttl)

    async def get_locations(self, keyword: str) -> list[dict] | None:
        return await self.get(self.locations_key(keyword))

    async def set_locations(self, keyword: str, data: list[dict]):
        await self.set(self.locations_key(keyword), data, TTL_LOCATIONS)

    # Route popularity

    async def record_route_search(self, origin: str, destination: str) -> int:
        """Increment the search counter for a route. Returns the new count (0 if no cache)."""
        try:
            r = await self._get_redis()
            if r is None:
                return 0
            route = self.route_key(origin, destination)
            count = await r.incr(f"routes:count:{route}")
            await r.expire(f"routes:count:{route}", TTL_ROUTE_COUNTER)
            await r.zincrby(ROUTE_RANKING_KEY, 1, route)
            return int(count)
        except Exception:
            return 0

    async def is_popular_route(self, origin: str, destination: str) -> bool:
        try:
            r = await self._get_redis()
            if r is None:
                return False
            raw = await r.get(f"routes:count:{self.route_key(origin, destination)}")
            return int(raw or 0) >= POPULAR_ROUTE_THRESHOLD
        except Exception:
            return False

    async def top_routes(self, limit: int = 10) -> list[dict]:
        try:
            r = await self._get_redis()
            if r is None:
                return []
            ranked = await r.zrevrange(ROUTE_RANKING_KEY, 0, limit - 1, withscores=True)
            return [{"route": route, "searches": int(score)} for route, score in ranked]
        except Exception:
            return []

    async def close(self):
        if self._redis:
            await self._redis.aclose()
            self._redis = None


cache_service = CacheService()
