"""Flights router — airport lookup and flight search with filtering and sorting."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.config import settings
from michels_travel.data.airports import get_airport_by_code
from michels_travel.database import get_db
from michels_travel.dependencies import get_optional_user
from michels_travel.models.search import PopularDestination
from michels_travel.models.user import User
from michels_travel.schemas.flight import FlightSearchRequest
from michels_travel.services.cache_service import cache_service
from michels_travel.services.flight_service import filter_flights, flight_service, sort_flights, summarize_carriers

router = APIRouter()


@router.get("/locations")
async def search_locations(keyword: str = Query(..., min_length=2, max_length=100)):
    """Airport autocomplete by code, city, name or country."""
    return await flight_service.search_locations(keyword.strip())


@router.get("/airports/{code}")
async def get_airport(code: str):
    airport = get_airport_by_code(code)
    if not airport:
        raise HTTPException(status_code=404, detail="Airport not found")
    return airport


@router.get("/popular-routes")
async def popular_routes(limit: int = Query(10, ge=1, le=50)):
    return await cache_service.top_routes(limit)


@router.get("/destinations")
async def popular_destinations(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(PopularDestination).order_by(PopularDestination.is_featured.desc(), PopularDestination.display_order)
    )
    return [
        {
            "code": d.iata_code,
            "city": d.city_name,
            "country": d.country_name,
            "country_code": d.country_code,
            "description": d.description,
            "image_url": d.image_url,
            "is_featured": d.is_featured,
        }
        for d in result.scalars().all()
    ]


@router.post("/search")
async def search_flights(
    req: FlightSearchRequest,
    db: AsyncSession = Depends(get_db),
    user: User | None = Depends(get_optional_user),
):
    result = await flight_service.search(
        db,
        origin=req.origin,
        destination=req.destination,
        departure_date=req.departure_date,
        return_date=req.return_date,
        adults=req.adults,
        children=req.children,
        infants=req.infants,
        travel_class=req.travel_class,
        non_stop=req.non_stop,
        max_price=req.max_price,
        user_id=user.id if user else None,
    )
    offers = result["offers"]

    filtered = filter_flights(
        offers,
        max_stops=0 if req.non_stop else req.max_stops,
        airlines=req.airlines,
        min_price=req.min_price,
        max_price=req.max_price,
        departure_windows=req.departure_windows,
        max_duration_minutes=req.max_duration_minutes,
    )
    filtered = sort_flights(filtered, req.sort_by, req.sort_order)

    return {
        "data": filtered,
        "meta": {
            "count": len(filtered),
            "total_results": len(offers),
            "carriers": summarize_carriers(offers),
            "currency": offers[0]["price"]["currency"] if offers else settings.default_currency,
            "from_cache": result["from_cache"],
        },
    }
