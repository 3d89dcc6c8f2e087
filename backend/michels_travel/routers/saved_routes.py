"""Saved routes router — a user's favourite origin/destination pairs."""

import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db, utcnow
from michels_travel.dependencies import get_current_user
from michels_travel.models.search import SavedRoute
from michels_travel.models.user import User
from michels_travel.schemas.alerts import SavedRouteCreate

router = APIRouter()


def _route_to_dict(route: SavedRoute) -> dict:
    return {
        "id": str(route.id),
        "origin": route.origin,
        "origin_name": route.origin_name,
        "destination": route.destination,
        "destination_name": route.destination_name,
        "preferred_cabin_class": route.preferred_cabin_class,
        "typical_travelers": route.typical_travelers,
        "search_count": route.search_count,
        "nickname": route.nickname,
        "last_searched": route.last_searched.isoformat() if route.last_searched else None,
        "created_at": route.created_at.isoformat() if route.created_at else None,
    }


async def _get_route(db: AsyncSession, route_id: uuid.UUID, user_id: uuid.UUID) -> SavedRoute:
    result = await db.execute(select(SavedRoute).where(SavedRoute.id == route_id, SavedRoute.user_id == user_id))
    route = result.scalar_one_or_none()
    if not route:
        raise HTTPException(status_code=404, detail="Saved route not found")
    return route


@router.get("")
async def list_saved_routes(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(SavedRoute)
        .where(SavedRoute.user_id == user.id)
        .order_by(SavedRoute.search_count.desc(), SavedRoute.last_searched.desc())
    )
    return [_route_to_dict(r) for r in result.scalars().all()]


@router.post("")
async def save_route(
    req: SavedRouteCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    """Save a route; saving an existing pair bumps its search count instead."""
    origin, destination = req.origin.upper(), req.destination.upper()
    result = await db.execute(
        select(SavedRoute).where(
            SavedRoute.user_id == user.id,
            SavedRoute.origin == origin,
            SavedRoute.destination == destination,
        )
    )
    route = result.scalar_one_or_none()
    if route:
        route.search_count += 1
        route.last_searched = utcnow()
        if req.nickname:
            route.nickname = req.nickname
        await db.commit()
        return {"route": _route_to_dict(route), "existed": True}

    route = SavedRoute(
        user_id=user.id,
        origin=origin,
        origin_name=req.origin_name,
        destination=destination,
        destination_name=req.destination_name,
        preferred_cabin_class=req.preferred_cabin_class,
        typical_travelers=req.typical_travelers,
        nickname=req.nickname,
    )
    db.add(route)
    await db.commit()
    return {"route": _route_to_dict(route), "existed": False}


@router.post("/{route_id}/search")
async def increment_route_search(
    route_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    route = await _get_route(db, route_id, user.id)
    route.search_count += 1
    route.last_searched = utcnow()
    await db.commit()
    return _route_to_dict(route)


@router.delete("/{route_id}")
async def delete_saved_route(
    route_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    route = await _get_route(db, route_id, user.id)
    await db.delete(route)
    await db.commit()
    return {"success": True}
