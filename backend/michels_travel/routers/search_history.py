from fastapi import APIRouter, Depends, Query
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from michels_travel.database import get_db
from michels_travel.dependencies import get_current_user
from michels_travel.models.search import UserSearchHistory
from michels_travel.models.user import User
from michels_travel.schemas.alerts import SearchHistoryCreate

router = APIRouter()


def _history_to_dict(h: UserSearchHistory) -> dict:
    return {
        "id": str(h.id),
        "origin": h.origin,
        "origin_name": h.origin_name,
        "destination": h.destination,
        "destination_name": h.destination_name,
        "departure_date": h.departure_date,
        "return_date": h.return_date,
        "adults": h.adults,
        "children": h.children,
        "infants": h.infants,
        "cabin_class": h.cabin_class,
        "results_count": h.results_count,
        "lowest_price_found": h.lowest_price_found,
        "searched_at": h.searched_at.isoformat() if h.searched_at else None,
    }


@router.get("")
async def list_search_history(
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    result = await db.execute(
        select(UserSearchHistory)
        .where(UserSearchHistory.user_id == user.id)
        .order_by(UserSearchHistory.searched_at.desc())
        .limit(limit)
    )
    return [_history_to_dict(h) for h in result.scalars().all()]


@router.post("", status_code=201)
async def record_search(
    req: SearchHistoryCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    data = req.model_dump()
    data["origin"] = data["origin"].upper()
    data["destination"] = data["destination"].upper()
    data["departure_date"] = req.departure_date.isoformat()
    data["return_date"] = req.return_date.isoformat() if req.return_date else None
    entry = UserSearchHistory(user_id=user.id, **data)
    db.add(entry)
    await db.commit()
    return _history_to_dict(entry)


@router.delete("")
async def clear_search_history(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    await db.execute(delete(UserSearchHistory).where(UserSearchHistory.user_id == user.id))
    await db.commit()
    return {"success": True}
